"""FastAPI webhook application."""

from __future__ import annotations

import json
import logging

from fastapi import BackgroundTasks, FastAPI, Request, Response
from fastapi.responses import PlainTextResponse

from media_relay.audit.logger import AuditLogger
from media_relay.bot import Downloader, MediaRelayBot
from media_relay.config import Settings, configure_logging
from media_relay.downloader import YtDlpDownloader
from media_relay.models import AuditEvent, AuditEventType
from media_relay.webhook.models import InboundEvent, parse_update
from media_relay.webhook.telegram import TelegramClient, verify_secret_token

logger = logging.getLogger(__name__)

_ALL_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    audit_logger = (
        AuditLogger.from_env(settings.audit_log_path) if settings.audit_log_path else None
    )
    return create_app(settings, audit_logger=audit_logger)


def create_app(
    settings: Settings,
    client: TelegramClient | None = None,
    downloader: Downloader | None = None,
    audit_logger: AuditLogger | None = None,
) -> FastAPI:
    """Create the webhook app. Only ``POST settings.secret_path`` is served."""
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)

    client = client or TelegramClient(settings.bot_token, settings.api_base)
    downloader = downloader or YtDlpDownloader(settings.downloader_bin, settings.download_dir)
    bot = MediaRelayBot(client, downloader, audit_logger)
    app.state.bot = bot

    @app.post(settings.secret_path)
    async def webhook(request: Request, background_tasks: BackgroundTasks) -> Response:
        if settings.webhook_secret_token and not verify_secret_token(
            request.headers, settings.webhook_secret_token,
        ):
            _log_rejection(request, audit_logger)
            return _not_found()

        body = await request.body()
        try:
            update = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Ignoring webhook body that is not valid JSON")
            return PlainTextResponse("ok")

        event = parse_update(update)
        if event is None:
            logger.debug("Ignoring update without a usable message or callback")
            return PlainTextResponse("ok")

        background_tasks.add_task(_process, bot, event)
        return PlainTextResponse("ok")

    @app.api_route("/{path:path}", methods=_ALL_METHODS, include_in_schema=False)
    async def not_found(path: str) -> Response:
        return _not_found()

    return app


async def _process(bot: MediaRelayBot, event: InboundEvent) -> None:
    try:
        await bot.handle(event)
    except Exception:
        logger.exception("Unhandled error while processing %s", type(event).__name__)


def _not_found() -> Response:
    return PlainTextResponse("Not found", status_code=404)


def _log_rejection(request: Request, audit_logger: AuditLogger | None) -> None:
    logger.warning("Rejected webhook call with a missing or invalid secret token")
    if audit_logger:
        audit_logger.log(AuditEvent(
            event_type=AuditEventType.WEBHOOK_REJECTED,
            action=f"{request.method} {request.url.path}",
            result="rejected",
            details={"source_ip": request.client.host if request.client else None},
        ))
