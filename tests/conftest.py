"""Shared test fixtures for media-relay-bot."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from media_relay.audit.logger import AuditLogger
from media_relay.config import Settings
from media_relay.models import DownloadResult, MediaKind
from media_relay.webhook.telegram import TelegramClient

BOT_TOKEN = "123:ABC"
SECRET_PATH = "/hook-secret"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(download_dir=tmp_path / "downloads")


@pytest.fixture
def mock_client() -> AsyncMock:
    """TelegramClient double whose calls all succeed."""
    client = AsyncMock(spec=TelegramClient)
    client.send_message.return_value = True
    client.answer_callback_query.return_value = True
    client.send_chat_action.return_value = True
    client.send_media.return_value = True
    return client


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


@pytest.fixture
def media_file(tmp_path: Path):
    """Create a downloaded file and return its DownloadResult."""

    def _create(kind: MediaKind = MediaKind.VIDEO, content: bytes = b"media-bytes") -> DownloadResult:
        ext = ".mp3" if kind is MediaKind.AUDIO else ".mp4"
        path = tmp_path / f"download{ext}"
        path.write_bytes(content)
        return DownloadResult(path=path, kind=kind)

    return _create


# --- Factory functions for test data ---


def make_settings(**kwargs: Any) -> Settings:
    defaults: dict[str, Any] = {
        "bot_token": BOT_TOKEN,
        "secret_path": SECRET_PATH,
    }
    defaults.update(kwargs)
    return Settings(**defaults)


def make_text_update(
    text: str = "hello",
    chat_id: int = 12345,
    update_id: int = 1,
) -> dict[str, Any]:
    return {
        "update_id": update_id,
        "message": {
            "message_id": 1,
            "chat": {"id": chat_id, "type": "private"},
            "text": text,
        },
    }


def make_callback_update(
    data: str = "720p|https://youtu.be/x",
    chat_id: int = 12345,
    callback_id: str = "cb-1",
    update_id: int = 2,
) -> dict[str, Any]:
    return {
        "update_id": update_id,
        "callback_query": {
            "id": callback_id,
            "from": {"id": 1, "is_bot": False, "first_name": "Test"},
            "data": data,
            "message": {"message_id": 10, "chat": {"id": chat_id}},
        },
    }


def make_http_response(status_code: int = 200, body: Any = None) -> MagicMock:
    """Fake httpx.Response with a JSON body."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = {"ok": True, "result": True} if body is None else body
    return resp


def make_async_client(mock_client_cls: MagicMock, **post_kwargs: Any) -> AsyncMock:
    """Wire a patched httpx.AsyncClient class to return an async-context client."""
    client = AsyncMock()
    for key, value in post_kwargs.items():
        setattr(client.post, key, value)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = client
    return client
