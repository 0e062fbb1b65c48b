"""Shared pytest fixtures for bot tests."""

import io
from typing import Dict, List, Optional, Tuple

import pytest
from PIL import Image

from models.session_models import StoredImage
from services.session_store import SessionStore
from utils.errors import TelegramError


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher:
    """In-memory stand-in for the Telegram file download."""

    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self.files = dict(files or {})
        self.calls: List[str] = []

    async def download_file(self, file_id: str) -> bytes:
        self.calls.append(file_id)
        if file_id not in self.files:
            raise TelegramError("getFile", "Bad Request: invalid file_id")
        return self.files[file_id]


class FakeSender:
    """Records outbound replies instead of calling Telegram."""

    def __init__(self):
        self.messages: List[Tuple[int, str, Optional[str]]] = []
        self.documents: List[Tuple[int, str, bytes, Optional[str]]] = []

    async def send_message(self, chat_id: int, text: str, parse_mode: Optional[str] = None) -> None:
        self.messages.append((chat_id, text, parse_mode))

    async def send_document(self, chat_id: int, filename: str, content: bytes, caption: Optional[str] = None) -> None:
        self.documents.append((chat_id, filename, content, caption))

    @property
    def texts(self) -> List[str]:
        return [text for _, text, _ in self.messages]


def encode_image(width: int, height: int, color=(200, 30, 30), fmt: str = "JPEG", mode: str = "RGB") -> bytes:
    """Return encoded bytes of a solid-color image."""
    if mode == "RGBA" and len(color) == 3:
        color = (*color, 128)
    img = Image.new(mode, (width, height), color)
    out = io.BytesIO()
    img.save(out, format=fmt)
    return out.getvalue()


def noisy_image(width: int, height: int) -> StoredImage:
    """Return a stored JPEG that compresses poorly."""
    img = Image.effect_noise((width, height), 120).convert("RGB")
    out = io.BytesIO()
    img.save(out, format="JPEG", quality=90)
    return StoredImage(content=out.getvalue(), width=width, height=height)


def stored_image(width: int = 120, height: int = 80, color=(10, 120, 200)) -> StoredImage:
    return StoredImage(content=encode_image(width, height, color), width=width, height=height)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    """Fresh store with the default capacity and a one-minute TTL."""
    return SessionStore(max_images=50, ttl_seconds=60, clock=clock)


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def sender():
    return FakeSender()
