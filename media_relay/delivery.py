"""Delivery — upload a downloaded file to the chat, then clean it up.

The local file is only deleted once Telegram confirms the upload. An
unconfirmed upload leaves the file in place so it is never lost silently.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import httpx

from media_relay.models import AuditEvent, AuditEventType, DownloadResult

if TYPE_CHECKING:
    from media_relay.audit.logger import AuditLogger
    from media_relay.webhook.telegram import TelegramClient

logger = logging.getLogger(__name__)


async def deliver(
    client: TelegramClient,
    chat_id: int,
    result: DownloadResult,
    caption: str = "",
    audit_logger: AuditLogger | None = None,
) -> bool:
    """Send ``result`` to ``chat_id``. Returns True when delivery was confirmed."""
    content = await asyncio.to_thread(result.path.read_bytes)

    try:
        confirmed = await client.send_media(
            chat_id, result.kind, result.filename, content, caption=caption,
        )
    except httpx.HTTPError as exc:
        logger.warning("Upload of %s to chat %s failed: %s", result.path, chat_id, exc)
        confirmed = False

    if confirmed:
        result.path.unlink(missing_ok=True)
        logger.info("Delivered %s %s to chat %s", result.kind.value, result.filename, chat_id)
    else:
        logger.warning("Delivery unconfirmed, keeping %s", result.path)

    if audit_logger:
        audit_logger.log(AuditEvent(
            event_type=(
                AuditEventType.DELIVERY_SUCCEEDED if confirmed
                else AuditEventType.DELIVERY_FAILED
            ),
            chat_id=chat_id,
            action=f"send_{result.kind.value}",
            result="success" if confirmed else "failure",
            details=None if confirmed else {"retained_path": str(result.path)},
        ))

    return confirmed
