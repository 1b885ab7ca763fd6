"""yt-dlp subprocess invocation.

Maps a requested format to a yt-dlp selector, runs the tool with a unique
per-request output path and reports the produced file.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path

from media_relay.models import DownloadResult, MediaFormat, MediaKind

logger = logging.getLogger(__name__)

FORMAT_SELECTORS: dict[str, str] = {
    MediaFormat.P720.value: "best[height<=720]",
    MediaFormat.P1080.value: "best[height<=1080]",
    MediaFormat.AUDIO.value: "bestaudio",
}

_EXTENSIONS = {MediaKind.VIDEO: ".mp4", MediaKind.AUDIO: ".mp3"}
_STDERR_TAIL_CHARS = 2000
_PARTIAL_SUFFIXES = (".part", ".ytdl")


class DownloadError(Exception):
    """Raised when the downloader fails or produces no output file."""

    def __init__(self, url: str, returncode: int | None, stderr: str = "") -> None:
        self.url = url
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Download failed for {url} (exit code {returncode})")


def _remove_outputs(output: Path) -> None:
    """Delete the output file and yt-dlp's in-progress siblings (.part, .ytdl)."""
    output.unlink(missing_ok=True)
    for suffix in _PARTIAL_SUFFIXES:
        output.with_name(output.name + suffix).unlink(missing_ok=True)


def format_selector(fmt: str) -> str:
    """Return the yt-dlp ``-f`` value; unknown formats get "" (tool default)."""
    return FORMAT_SELECTORS.get(fmt, "")


def media_kind(fmt: str) -> MediaKind:
    return MediaKind.AUDIO if fmt == MediaFormat.AUDIO.value else MediaKind.VIDEO


class YtDlpDownloader:
    """Runs the external downloader binary as an asyncio subprocess."""

    def __init__(self, binary: str = "yt-dlp", download_dir: Path | str = ".") -> None:
        self.binary = binary
        self.download_dir = Path(download_dir)

    def output_path(self, kind: MediaKind) -> Path:
        return self.download_dir / f"{uuid.uuid4().hex}{_EXTENSIONS[kind]}"

    def build_command(self, url: str, fmt: str, output: Path) -> list[str]:
        cmd = [self.binary]
        selector = format_selector(fmt)
        if selector:
            cmd += ["-f", selector]
        cmd += ["-o", str(output), url]
        return cmd

    async def download(self, url: str, fmt: str) -> DownloadResult:
        kind = media_kind(fmt)
        self.download_dir.mkdir(parents=True, exist_ok=True)
        output = self.output_path(kind)
        cmd = self.build_command(url, fmt, output)
        logger.info("Starting download: format=%s url=%s output=%s", fmt, url, output)

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise DownloadError(url, None, str(exc)) from exc

        _, stderr_bytes = await proc.communicate()
        stderr = stderr_bytes.decode(errors="replace")[-_STDERR_TAIL_CHARS:] if stderr_bytes else ""

        if proc.returncode != 0:
            _remove_outputs(output)
            raise DownloadError(url, proc.returncode, stderr)
        if not output.is_file():
            _remove_outputs(output)
            raise DownloadError(url, proc.returncode, "downloader produced no output file")

        logger.info("Download finished: %s (%d bytes)", output, output.stat().st_size)
        return DownloadResult(path=output, kind=kind)
