"""Telegram Bot API client.

Outbound calls used by the relay: text replies with inline keyboards,
callback acknowledgements, chat actions, multipart media uploads and
webhook registration. No call is retried.
"""

from __future__ import annotations

import hmac
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from media_relay.config import DEFAULT_API_BASE
from media_relay.models import MediaKind

logger = logging.getLogger(__name__)

SECRET_TOKEN_HEADER = "x-telegram-bot-api-secret-token"

_MESSAGE_TIMEOUT_SECONDS = 30.0
_UPLOAD_TIMEOUT_SECONDS = 300.0

_MEDIA_METHODS: dict[MediaKind, tuple[str, str, str]] = {
    MediaKind.VIDEO: ("sendVideo", "video", "video/mp4"),
    MediaKind.AUDIO: ("sendAudio", "audio", "audio/mpeg"),
}


def verify_secret_token(headers: Mapping[str, str], expected: str) -> bool:
    """Check the webhook secret header using constant-time comparison."""
    provided = headers.get(SECRET_TOKEN_HEADER, "")
    if not provided:
        return False
    return hmac.compare_digest(provided, expected)


class TelegramClient:
    """Thin async wrapper over the Telegram Bot API."""

    def __init__(self, bot_token: str, api_base: str = DEFAULT_API_BASE) -> None:
        self._api_url = f"{api_base.rstrip('/')}/bot{bot_token}"

    def method_url(self, method: str) -> str:
        return f"{self._api_url}/{method}"

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: dict[str, Any] | None = None,
    ) -> bool:
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        return await self._post_json("sendMessage", payload)

    async def answer_callback_query(self, callback_id: str, text: str | None = None) -> bool:
        payload: dict[str, Any] = {"callback_query_id": callback_id}
        if text:
            payload["text"] = text
        return await self._post_json("answerCallbackQuery", payload)

    async def send_chat_action(self, chat_id: int, action: str) -> bool:
        return await self._post_json("sendChatAction", {"chat_id": chat_id, "action": action})

    async def send_media(
        self,
        chat_id: int,
        kind: MediaKind,
        filename: str,
        content: bytes,
        caption: str = "",
    ) -> bool:
        """Upload a file as a video or audio attachment.

        Returns True only when Telegram confirms the upload (2xx and ``ok``).
        Transport errors propagate as httpx.HTTPError.
        """
        method, field, mime = _MEDIA_METHODS[kind]
        data = {"chat_id": str(chat_id), "caption": caption}
        files = {field: (filename, content, mime)}

        async with httpx.AsyncClient(verify=True) as client:
            resp = await client.post(
                self.method_url(method),
                data=data,
                files=files,
                timeout=_UPLOAD_TIMEOUT_SECONDS,
            )
        return self._confirmed(method, resp)

    async def set_webhook(self, url: str, secret_token: str | None = None) -> bool:
        payload: dict[str, Any] = {
            "url": url,
            "allowed_updates": ["message", "edited_message", "callback_query"],
        }
        if secret_token:
            payload["secret_token"] = secret_token
        return await self._post_json("setWebhook", payload)

    async def delete_webhook(self) -> bool:
        return await self._post_json("deleteWebhook", {})

    async def _post_json(self, method: str, payload: dict[str, Any]) -> bool:
        async with httpx.AsyncClient(verify=True) as client:
            resp = await client.post(
                self.method_url(method), json=payload, timeout=_MESSAGE_TIMEOUT_SECONDS,
            )
        return self._confirmed(method, resp)

    @staticmethod
    def _confirmed(method: str, resp: httpx.Response) -> bool:
        if resp.status_code >= 400:
            logger.warning("Telegram %s failed with HTTP %s", method, resp.status_code)
            return False
        try:
            body = resp.json()
        except ValueError:
            logger.warning("Telegram %s returned a non-JSON body", method)
            return False
        if not isinstance(body, dict) or body.get("ok") is not True:
            logger.warning("Telegram %s was not acknowledged: %s", method, body)
            return False
        return True
