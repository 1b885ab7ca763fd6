"""Telegram update models and the normalized inbound events built from them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError


class TelegramChat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int | None = None


class TelegramMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message_id: int | None = None
    chat: TelegramChat | None = None
    text: str | None = None
    caption: str | None = None


class TelegramCallbackQuery(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    data: str | None = None
    message: TelegramMessage | None = None


class TelegramUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    update_id: int | None = None
    message: TelegramMessage | None = None
    edited_message: TelegramMessage | None = None
    callback_query: TelegramCallbackQuery | None = None


@dataclass(frozen=True)
class TextMessageEvent:
    """A plain chat message carrying free-form text."""

    chat_id: int
    text: str


@dataclass(frozen=True)
class CallbackEvent:
    """An inline button press carrying opaque callback data."""

    callback_id: str
    chat_id: int
    data: str


InboundEvent = TextMessageEvent | CallbackEvent


def parse_update(body: Any) -> InboundEvent | None:
    """Classify a decoded webhook body.

    Returns None for anything that is not a usable text message or callback:
    unknown update types, missing chat id, missing text or callback data.
    """
    if not isinstance(body, dict):
        return None
    try:
        update = TelegramUpdate.model_validate(body)
    except ValidationError:
        return None

    message = update.message or update.edited_message
    if message is not None:
        text = message.text or message.caption
        chat_id = message.chat.id if message.chat else None
        if chat_id is None or not text:
            return None
        return TextMessageEvent(chat_id=chat_id, text=text)

    query = update.callback_query
    if query is not None:
        chat = query.message.chat if query.message else None
        if chat is None or chat.id is None or not query.data:
            return None
        return CallbackEvent(callback_id=query.id or "", chat_id=chat.id, data=query.data)

    return None
