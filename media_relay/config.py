"""Runtime configuration loaded from environment variables."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_SECRET_PATH = "/media-relay-webhook"
DEFAULT_API_BASE = "https://api.telegram.org"
DEFAULT_DOWNLOADER = "yt-dlp"

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""


def _default_download_dir() -> Path:
    return Path(tempfile.gettempdir()) / "media-relay"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    bot_token: str = Field(min_length=1)
    secret_path: str = DEFAULT_SECRET_PATH
    webhook_secret_token: str | None = None
    downloader_bin: str = DEFAULT_DOWNLOADER
    download_dir: Path = Field(default_factory=_default_download_dir)
    api_base: str = DEFAULT_API_BASE
    audit_log_path: str | None = None
    log_level: str = "INFO"

    @field_validator("secret_path")
    @classmethod
    def _secret_path_is_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("secret path must start with '/'")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from the process environment.

        Raises ConfigError when BOT_TOKEN is absent so the process aborts at startup.
        """
        token = os.environ.get("BOT_TOKEN", "").strip()
        if not token:
            raise ConfigError("BOT_TOKEN env var is required")

        values: dict[str, object] = {"bot_token": token}
        optional = {
            "secret_path": "SECRET_PATH",
            "webhook_secret_token": "WEBHOOK_SECRET_TOKEN",
            "downloader_bin": "DOWNLOADER_BIN",
            "download_dir": "DOWNLOAD_DIR",
            "api_base": "TELEGRAM_API_BASE",
            "audit_log_path": "AUDIT_LOG_PATH",
            "log_level": "LOG_LEVEL",
        }
        for field_name, env_var in optional.items():
            raw = os.environ.get(env_var)
            if raw:
                values[field_name] = raw

        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
