"""Telegram side of the presentation boundary for one chat."""

from __future__ import annotations

import asyncio
from typing import Coroutine, Sequence

from aiogram import Bot
from aiogram.enums import ChatAction

from tweetsearch.bot.utils.messages import format_results
from tweetsearch.logging import logger

TYPING_INTERVAL_SECONDS = 4


class TelegramPresenter:
    """Shows busy as a repeating "typing" action and results as a message.

    Both methods are called on the event loop thread and only schedule work;
    result messages are sent one at a time in call order.
    """

    def __init__(
        self,
        bot: Bot,
        chat_id: int,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._bot = bot
        self._chat_id = chat_id
        self._loop = loop or asyncio.get_running_loop()
        self._send_lock = asyncio.Lock()
        self._typing_task: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def busy(self) -> bool:
        return self._typing_task is not None

    def set_busy(self, busy: bool) -> None:
        if busy:
            if self._typing_task is None:
                self._typing_task = self._loop.create_task(self._send_typing_action())
            return
        if self._typing_task is not None:
            self._typing_task.cancel()
            self._typing_task = None

    def show_results(self, lines: Sequence[str]) -> None:
        self._schedule(self._send_results(format_results(lines)))

    async def wait_idle(self) -> None:
        """Wait until every scheduled result message has been handled."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _schedule(self, coro: Coroutine) -> None:
        task = self._loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _send_results(self, text: str) -> None:
        async with self._send_lock:
            try:
                await self._bot.send_message(chat_id=self._chat_id, text=text, parse_mode=None)
            except Exception:
                logger.warning("results_send_failed", chat_id=self._chat_id, exc_info=True)

    async def _send_typing_action(self) -> None:
        try:
            while True:
                await self._bot.send_chat_action(self._chat_id, ChatAction.TYPING)
                await asyncio.sleep(TYPING_INTERVAL_SECONDS)
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.warning("typing_action_failed", chat_id=self._chat_id, exc_info=True)


__all__ = ["TYPING_INTERVAL_SECONDS", "TelegramPresenter"]
