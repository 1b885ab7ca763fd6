"""Request pipeline — turns inbound events into replies, downloads and uploads.

Text message:  classify -> format prompt | instruction reply
Callback:      acknowledge -> decode payload -> download -> deliver
               download failure -> FAILURE_TEXT reply, no delivery
               delivery error -> FAILURE_TEXT reply
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import httpx

from media_relay.classifier import (
    CHOOSE_FORMAT_TEXT,
    INSTRUCTION_TEXT,
    build_format_keyboard,
    contains_supported_link,
)
from media_relay.delivery import deliver
from media_relay.downloader import media_kind
from media_relay.models import AuditEvent, AuditEventType, DownloadResult, MediaKind
from media_relay.payload import decode_callback_data
from media_relay.webhook.models import CallbackEvent, InboundEvent, TextMessageEvent

if TYPE_CHECKING:
    from media_relay.audit.logger import AuditLogger
    from media_relay.webhook.telegram import TelegramClient

logger = logging.getLogger(__name__)

FAILURE_TEXT = "Sorry, I could not download this media. Please try again later."
DOWNLOADING_TEXT = "Downloading…"

_CHAT_ACTIONS = {MediaKind.VIDEO: "upload_video", MediaKind.AUDIO: "upload_audio"}


class Downloader(Protocol):
    async def download(self, url: str, fmt: str) -> DownloadResult: ...


def build_caption(fmt: str, kind: MediaKind) -> str:
    if kind is MediaKind.AUDIO:
        return "Here is your audio"
    return f"Here is your {fmt} video"


class MediaRelayBot:
    """Handles one inbound event at a time; holds no per-chat state."""

    def __init__(
        self,
        client: TelegramClient,
        downloader: Downloader,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._client = client
        self._downloader = downloader
        self._audit = audit_logger

    async def handle(self, event: InboundEvent) -> None:
        if isinstance(event, TextMessageEvent):
            await self.handle_text(event)
        elif isinstance(event, CallbackEvent):
            await self.handle_callback(event)

    async def handle_text(self, event: TextMessageEvent) -> None:
        if not contains_supported_link(event.text):
            await self._client.send_message(event.chat_id, INSTRUCTION_TEXT)
            return

        logger.info("Supported link in chat %s, offering formats", event.chat_id)
        self._log(AuditEventType.LINK_DETECTED, event.chat_id, "classify", "success")
        await self._client.send_message(
            event.chat_id, CHOOSE_FORMAT_TEXT, reply_markup=build_format_keyboard(event.text),
        )

    async def handle_callback(self, event: CallbackEvent) -> None:
        if event.callback_id:
            try:
                await self._client.answer_callback_query(event.callback_id, DOWNLOADING_TEXT)
            except httpx.HTTPError as exc:
                logger.warning("Could not acknowledge callback %s: %s", event.callback_id, exc)

        try:
            payload = decode_callback_data(event.data)
            self._log(
                AuditEventType.DOWNLOAD_STARTED, event.chat_id, "download", "success",
                {"format": payload.format, "url": payload.url},
            )
            await self._client.send_chat_action(
                event.chat_id, _CHAT_ACTIONS[media_kind(payload.format)],
            )
            result = await self._downloader.download(payload.url, payload.format)
        except Exception as exc:
            logger.exception("Download failed for chat %s", event.chat_id)
            self._log(
                AuditEventType.DOWNLOAD_FAILED, event.chat_id, "download", "failure",
                {"error": str(exc)},
            )
            await self._client.send_message(event.chat_id, FAILURE_TEXT)
            return

        try:
            await deliver(
                self._client,
                event.chat_id,
                result,
                caption=build_caption(payload.format, result.kind),
                audit_logger=self._audit,
            )
        except Exception:
            logger.exception("Delivery of %s failed for chat %s", result.path, event.chat_id)
            await self._client.send_message(event.chat_id, FAILURE_TEXT)

    def _log(
        self,
        event_type: AuditEventType,
        chat_id: int,
        action: str,
        result: str,
        details: dict[str, object] | None = None,
    ) -> None:
        if self._audit:
            self._audit.log(AuditEvent(
                event_type=event_type,
                chat_id=chat_id,
                action=action,
                result=result,
                details=details,
            ))
