"""Callback data codec: ``{format}|{url}`` round-tripped through an inline button."""

from __future__ import annotations

from media_relay.models import CallbackPayload

SEPARATOR = "|"


class InvalidCallbackData(ValueError):
    """Raised when callback data does not contain a format and a URL."""

    def __init__(self, data: str) -> None:
        self.data = data
        super().__init__(f"Malformed callback data: {data!r}")


def encode_callback_data(fmt: str, url: str) -> str:
    return f"{fmt}{SEPARATOR}{url}"


def decode_callback_data(data: str) -> CallbackPayload:
    # Only the first separator delimits the format; the URL may contain more.
    fmt, sep, url = data.partition(SEPARATOR)
    if not sep or not fmt or not url:
        raise InvalidCallbackData(data)
    return CallbackPayload(format=fmt, url=url)
