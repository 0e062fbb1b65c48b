"""Tests for TelegramClient against a mocked Bot API."""

import json

import httpx
import pytest

from services.telegram_client import TelegramClient
from utils.errors import TelegramError

TOKEN = "123:abc"


def _client(handler, **kwargs) -> TelegramClient:
    return TelegramClient(TOKEN, transport=httpx.MockTransport(handler), **kwargs)


class TestDownloads:
    @pytest.mark.asyncio
    async def test_download_resolves_path_then_fetches(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            if request.url.path.endswith("/getFile"):
                assert json.loads(request.content) == {"file_id": "F1"}
                return httpx.Response(200, json={"ok": True, "result": {"file_path": "photos/a.jpg", "file_size": 4}})
            return httpx.Response(200, content=b"JPEG")

        client = _client(handler)
        assert await client.download_file("F1") == b"JPEG"
        assert seen == [f"/bot{TOKEN}/getFile", f"/file/bot{TOKEN}/photos/a.jpg"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_api_error_raises(self):
        def handler(request):
            return httpx.Response(400, json={"ok": False, "description": "Bad Request: invalid file_id"})

        client = _client(handler)
        with pytest.raises(TelegramError, match="invalid file_id"):
            await client.download_file("nope")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_declared_oversized_file_refused(self):
        def handler(request):
            return httpx.Response(200, json={"ok": True, "result": {"file_path": "x", "file_size": 999}})

        client = _client(handler, max_download_bytes=100)
        with pytest.raises(TelegramError):
            await client.download_file("big")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_streamed_oversized_file_refused(self):
        def handler(request):
            if request.url.path.endswith("/getFile"):
                return httpx.Response(200, json={"ok": True, "result": {"file_path": "x"}})
            return httpx.Response(200, content=b"0" * 500)

        client = _client(handler, max_download_bytes=100)
        with pytest.raises(TelegramError, match="exceeds"):
            await client.download_file("big")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_network_error_wrapped(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        client = _client(handler)
        with pytest.raises(TelegramError, match="request failed"):
            await client.download_file("F1")
        await client.aclose()


class TestReplies:
    @pytest.mark.asyncio
    async def test_send_message_payload(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True, "result": {}})

        client = _client(handler)
        await client.send_message(5, "hello", parse_mode="Markdown")
        assert bodies == [{"chat_id": 5, "text": "hello", "parse_mode": "Markdown"}]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_send_document_is_multipart(self):
        captured = {}

        def handler(request):
            captured["path"] = request.url.path
            captured["type"] = request.headers["content-type"]
            captured["body"] = request.content
            return httpx.Response(200, json={"ok": True, "result": {}})

        client = _client(handler)
        await client.send_document(5, "images.pdf", b"%PDF-1.4", caption="Your PDF")
        assert captured["path"].endswith("/sendDocument")
        assert captured["type"].startswith("multipart/form-data")
        assert b'filename="images.pdf"' in captured["body"]
        assert b"%PDF-1.4" in captured["body"]
        await client.aclose()

    def test_token_required(self):
        with pytest.raises(ValueError):
            TelegramClient("")
