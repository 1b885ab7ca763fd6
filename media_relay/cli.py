"""Click CLI: run the webhook server and manage the Telegram webhook registration."""

from __future__ import annotations

import asyncio

import click
import uvicorn

from media_relay.config import ConfigError, Settings, configure_logging
from media_relay.webhook.telegram import TelegramClient


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
def cli() -> None:
    """Telegram media relay bot."""


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Bind address.")
@click.option("--port", default=8000, show_default=True, type=int, help="Bind port.")
@click.option("--log-level", default=None, help="Overrides LOG_LEVEL.")
def serve(host: str, port: int, log_level: str | None) -> None:
    """Run the webhook server."""
    settings = _load_settings()
    level = (log_level or settings.log_level).upper()
    configure_logging(level)
    click.echo(f"Serving webhook on {host}:{port}{settings.secret_path}", err=True)
    uvicorn.run(
        "media_relay.server.app:create_app_from_env",
        factory=True,
        host=host,
        port=port,
        log_level=level.lower(),
    )


@cli.command("set-webhook")
@click.argument("base_url")
def set_webhook(base_url: str) -> None:
    """Register BASE_URL + SECRET_PATH as the bot's webhook."""
    settings = _load_settings()
    client = TelegramClient(settings.bot_token, settings.api_base)
    url = f"{base_url.rstrip('/')}{settings.secret_path}"
    if not asyncio.run(client.set_webhook(url, settings.webhook_secret_token)):
        raise click.ClickException(f"Telegram rejected webhook URL: {url}")
    click.echo(f"Webhook set: {url}")


@cli.command("delete-webhook")
def delete_webhook() -> None:
    """Remove the bot's webhook registration."""
    settings = _load_settings()
    client = TelegramClient(settings.bot_token, settings.api_base)
    if not asyncio.run(client.delete_webhook()):
        raise click.ClickException("Telegram rejected deleteWebhook")
    click.echo("Webhook deleted")
