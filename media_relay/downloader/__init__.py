"""External downloader invocation."""

from media_relay.downloader.ytdlp import (
    DownloadError,
    YtDlpDownloader,
    format_selector,
    media_kind,
)

__all__ = [
    "DownloadError",
    "YtDlpDownloader",
    "format_selector",
    "media_kind",
]
