"""Shared Pydantic data models for media-relay-bot."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class MediaFormat(str, Enum):
    """Choices offered on the inline keyboard."""

    P720 = "720p"
    P1080 = "1080p"
    AUDIO = "audio"


class MediaKind(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"


class AuditEventType(str, Enum):
    LINK_DETECTED = "link_detected"
    DOWNLOAD_STARTED = "download_started"
    DOWNLOAD_FAILED = "download_failed"
    DELIVERY_SUCCEEDED = "delivery_succeeded"
    DELIVERY_FAILED = "delivery_failed"
    WEBHOOK_REJECTED = "webhook_rejected"


# --- Pipeline Models ---


class CallbackPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    format: str
    url: str


class DownloadResult(BaseModel):
    """A file produced by the downloader, consumed by the delivery step."""

    model_config = ConfigDict(frozen=True)

    path: Path
    kind: MediaKind

    @property
    def filename(self) -> str:
        return self.path.name


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    chat_id: int | None = None
    action: str
    result: str  # "success" | "failure" | "rejected"
    details: dict[str, object] | None = None
