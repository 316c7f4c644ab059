"""Telegram search handlers."""

from __future__ import annotations

import structlog
from aiogram import F, Router
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import Message

from tweetsearch.bot.sessions import SearchSessionRegistry
from tweetsearch.logging import logger

router = Router()

USAGE_TEXT = (
    "Send me some words and I will search Twitter for them.\n"
    "You can also use /search <terms>."
)


@router.message(CommandStart())
async def handle_start(message: Message) -> None:
    await message.answer(USAGE_TEXT, parse_mode=None)


@router.message(Command("help"))
async def handle_help(message: Message) -> None:
    await message.answer(USAGE_TEXT, parse_mode=None)


@router.message(Command("search"))
async def handle_search_command(
    message: Message,
    command: CommandObject,
    search_sessions: SearchSessionRegistry,
) -> None:
    if not await _submit(message, command.args, search_sessions):
        await message.answer(USAGE_TEXT, parse_mode=None)


@router.message(F.text & ~F.text.startswith("/"))
async def handle_text(message: Message, search_sessions: SearchSessionRegistry) -> None:
    await _submit(message, message.text, search_sessions)


async def _submit(
    message: Message,
    raw_input: str | None,
    search_sessions: SearchSessionRegistry,
) -> bool:
    controller = search_sessions.get(message.bot, message.chat.id)
    with structlog.contextvars.bound_contextvars(chat_id=message.chat.id):
        query = controller.submit(raw_input)
    if query is None:
        return False
    logger.info(
        "search_submitted",
        chat_id=message.chat.id,
        user_id=getattr(message.from_user, "id", None),
        terms=len(query.terms),
    )
    return True


__all__ = ["handle_help", "handle_search_command", "handle_start", "handle_text", "router"]
