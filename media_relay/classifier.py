"""Link classifier — decides whether a chat message carries a supported link."""

from __future__ import annotations

from typing import Any

from media_relay.models import MediaFormat
from media_relay.payload import encode_callback_data

SUPPORTED_DOMAINS = ("tiktok.com", "instagram.com", "youtube.com", "youtu.be")

INSTRUCTION_TEXT = (
    "Send me a link from TikTok, Instagram or YouTube and I will fetch the media for you."
)
CHOOSE_FORMAT_TEXT = "Choose a format:"

_BUTTON_LABELS = {
    MediaFormat.P720: "🎬 Video 720p",
    MediaFormat.P1080: "🎬 Video 1080p",
    MediaFormat.AUDIO: "🎵 Audio only",
}


def contains_supported_link(text: str) -> bool:
    """Plain substring test against the known domains. No URL parsing."""
    return any(domain in text for domain in SUPPORTED_DOMAINS)


def build_format_keyboard(text: str) -> dict[str, Any]:
    """Inline keyboard: two video qualities on one row, audio on the next."""
    def button(fmt: MediaFormat) -> dict[str, str]:
        return {"text": _BUTTON_LABELS[fmt], "callback_data": encode_callback_data(fmt.value, text)}

    return {
        "inline_keyboard": [
            [button(MediaFormat.P720), button(MediaFormat.P1080)],
            [button(MediaFormat.AUDIO)],
        ],
    }
