"""Telegram webhook relay that fetches media from video links with yt-dlp."""

__version__ = "0.1.0"
