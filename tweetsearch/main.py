"""Application entrypoint."""

from __future__ import annotations

import asyncio

import httpx
from aiogram import Bot, Dispatcher
from aiogram.client.session.aiohttp import AiohttpSession

from tweetsearch.bot.routers import setup_routers
from tweetsearch.bot.sessions import SearchSessionRegistry
from tweetsearch.config import get_settings
from tweetsearch.logging import configure_logging, level_from_name, logger
from tweetsearch.services.search import TweetSearchService


async def main() -> None:
    settings = get_settings()
    configure_logging(level_from_name(settings.log_level))

    session = (
        AiohttpSession(proxy=settings.telegram_proxy) if settings.telegram_proxy else None
    )
    bot = Bot(token=settings.telegram_token.get_secret_value(), session=session)
    dp = Dispatcher()
    dp.include_router(setup_routers())

    # Shared by all fetch worker threads.
    http_client = httpx.Client(headers={"User-Agent": settings.search.user_agent})
    search_service = TweetSearchService(http_client, settings=settings.search)
    search_sessions = SearchSessionRegistry(
        search_service,
        discard_stale_results=settings.controller.discard_stale_results,
    )

    logger.info(
        "bot_starting",
        environment=settings.environment,
        search_url=search_service.base_url,
    )
    try:
        await dp.start_polling(bot, search_sessions=search_sessions)
    finally:
        http_client.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
