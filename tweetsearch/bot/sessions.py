"""One search controller per Telegram chat, confined to the event loop."""

from __future__ import annotations

import asyncio

from aiogram import Bot

from tweetsearch.bot.presenter import TelegramPresenter
from tweetsearch.logging import logger
from tweetsearch.services.controller import SearchController, SearchFetcher


class SearchSessionRegistry:
    """One controller per chat with a search in flight.

    A controller is evicted once its last completion has been delivered.
    """

    def __init__(self, fetcher: SearchFetcher, *, discard_stale_results: bool = True) -> None:
        self._fetcher = fetcher
        self._discard_stale_results = discard_stale_results
        self._controllers: dict[int, SearchController] = {}

    def __len__(self) -> int:
        return len(self._controllers)

    def get(self, bot: Bot, chat_id: int) -> SearchController:
        """Return the chat's controller, creating it on first use.

        Must be called from a coroutine: the running loop becomes the
        controller's foreground context.
        """

        controller = self._controllers.get(chat_id)
        if controller is None:
            loop = asyncio.get_running_loop()
            presenter = TelegramPresenter(bot, chat_id, loop=loop)
            controller = SearchController(
                self._fetcher,
                presenter,
                discard_stale_results=self._discard_stale_results,
                wakeup=lambda: self._schedule_drain(loop, chat_id),
                name=f"chat-{chat_id}",
            )
            self._controllers[chat_id] = controller
            logger.debug("search_session_created", chat_id=chat_id)
        return controller

    def _schedule_drain(self, loop: asyncio.AbstractEventLoop, chat_id: int) -> None:
        # Runs on a fetch worker thread.
        try:
            loop.call_soon_threadsafe(self._drain, chat_id)
        except RuntimeError:
            logger.warning("search_result_dropped", chat_id=chat_id, reason="event loop closed")

    def _drain(self, chat_id: int) -> None:
        controller = self._controllers.get(chat_id)
        if controller is None:
            return
        controller.drain()
        if controller.pending == 0 and not controller.busy:
            del self._controllers[chat_id]
            logger.debug("search_session_evicted", chat_id=chat_id)


__all__ = ["SearchSessionRegistry"]
