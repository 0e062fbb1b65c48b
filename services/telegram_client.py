"""Async client for the Telegram Bot API methods the bot relies on."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from utils.errors import TelegramError

LOGGER = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.telegram.org"


class TelegramClient:
    """Thin wrapper over `httpx.AsyncClient` for Bot API calls and file downloads.

    Args:
        token: Bot token issued by BotFather.
        api_url: Base URL of the Bot API server.
        max_download_bytes: Largest file `download_file` will accept.
        timeout: Default request timeout in seconds.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        max_download_bytes: int = 20 * 1024 * 1024,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not token:
            raise ValueError("A bot token is required")
        base = api_url.rstrip("/")
        self._method_url = f"{base}/bot{token}"
        self._file_url = f"{base}/file/bot{token}"
        self.max_download_bytes = max_download_bytes
        self._client = httpx.AsyncClient(
            headers={"User-Agent": "image-pdf-bot/0.1.0"},
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(
        self,
        method: str,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        kwargs: Dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            if files:
                resp = await self._client.post(f"{self._method_url}/{method}", data=data, files=files, **kwargs)
            else:
                resp = await self._client.post(f"{self._method_url}/{method}", json=data or {}, **kwargs)
        except httpx.HTTPError as exc:
            raise TelegramError(method, f"request failed: {exc}") from exc

        try:
            payload = resp.json()
        except ValueError as exc:
            raise TelegramError(method, f"HTTP {resp.status_code}: {resp.text[:200]}") from exc
        if resp.status_code >= 400 or not payload.get("ok"):
            raise TelegramError(method, payload.get("description") or f"HTTP {resp.status_code}")
        return payload.get("result")

    async def get_file_path(self, file_id: str) -> str:
        """Resolve a file id to its download path on the Bot API server."""
        result = await self._call("getFile", {"file_id": file_id})
        file_path = (result or {}).get("file_path")
        if not file_path:
            raise TelegramError("getFile", "response has no file_path")
        size = result.get("file_size")
        if size is not None and size > self.max_download_bytes:
            raise TelegramError("getFile", f"file is {size} bytes, limit is {self.max_download_bytes}")
        return file_path

    async def download_file(self, file_id: str) -> bytes:
        """Download the raw bytes of an uploaded file.

        Raises:
            TelegramError: On network errors, non-2xx responses, or oversized files.
        """
        file_path = await self.get_file_path(file_id)
        chunks: List[bytes] = []
        received = 0
        try:
            async with self._client.stream("GET", f"{self._file_url}/{file_path}") as resp:
                if resp.status_code >= 400:
                    raise TelegramError("download", f"HTTP {resp.status_code}")
                async for chunk in resp.aiter_bytes():
                    received += len(chunk)
                    if received > self.max_download_bytes:
                        raise TelegramError("download", f"file exceeds {self.max_download_bytes} bytes")
                    chunks.append(chunk)
        except httpx.HTTPError as exc:
            raise TelegramError("download", f"request failed: {exc}") from exc
        return b"".join(chunks)

    async def send_message(self, chat_id: int, text: str, parse_mode: Optional[str] = None) -> None:
        data: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            data["parse_mode"] = parse_mode
        await self._call("sendMessage", data)

    async def send_document(
        self, chat_id: int, filename: str, content: bytes, caption: Optional[str] = None
    ) -> None:
        data: Dict[str, Any] = {"chat_id": str(chat_id)}
        if caption:
            data["caption"] = caption
        files = {"document": (filename, content, "application/pdf")}
        await self._call("sendDocument", data, files=files, timeout=120.0)

    async def get_updates(self, offset: Optional[int] = None, poll_timeout: int = 30) -> List[Dict[str, Any]]:
        """Long-poll for updates; used only when the bot runs without a webhook."""
        data: Dict[str, Any] = {"timeout": poll_timeout, "allowed_updates": ["message"]}
        if offset is not None:
            data["offset"] = offset
        return await self._call("getUpdates", data, timeout=poll_timeout + 10) or []

    async def delete_webhook(self) -> None:
        await self._call("deleteWebhook", {"drop_pending_updates": False})
