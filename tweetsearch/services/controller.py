"""Search controller: owns the displayed result list and the busy flag.

Fetches run on one worker thread each. Workers only post completions to the
controller's mailbox; the thread that created the controller (the foreground
context) is the only one allowed to drain it and mutate UI state.
"""

from __future__ import annotations

import contextvars
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from tweetsearch.domain.models import SearchFailure, SearchQuery, SearchResponse
from tweetsearch.logging import logger


class SearchFetcher(Protocol):
    def fetch(self, terms: Sequence[str]) -> SearchResponse: ...


class SearchPresenter(Protocol):
    def set_busy(self, busy: bool) -> None: ...

    def show_results(self, lines: Sequence[str]) -> None: ...


@dataclass(frozen=True, slots=True)
class FetchCompletion:
    generation: int
    response: SearchResponse


class SearchController:
    def __init__(
        self,
        fetcher: SearchFetcher,
        presenter: SearchPresenter,
        *,
        discard_stale_results: bool = True,
        wakeup: Callable[[], None] | None = None,
        name: str = "search",
    ) -> None:
        self._fetcher = fetcher
        self._presenter = presenter
        self._discard_stale = discard_stale_results
        self._wakeup = wakeup
        self._name = name
        self._owner = threading.get_ident()
        self._mailbox: queue.SimpleQueue[FetchCompletion] = queue.SimpleQueue()
        self._generation = 0
        self._pending = 0
        self._results: list[str] = []
        self._busy = False

    @property
    def results(self) -> list[str]:
        return list(self._results)

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def pending(self) -> int:
        """Fetches started whose completion has not been drained yet."""

        return self._pending

    def submit(self, raw_input: str | None) -> SearchQuery | None:
        self._ensure_foreground("submit")
        query = SearchQuery.from_raw(raw_input)
        if query is None:
            logger.debug("search_input_empty", controller=self._name)
            return None

        self._generation += 1
        self._pending += 1
        generation = self._generation
        self._busy = True
        self._presenter.set_busy(True)

        # Carry bound log context (chat id) into the worker.
        context = contextvars.copy_context()
        worker = threading.Thread(
            target=context.run,
            args=(self._run_fetch, generation, query.terms),
            name=f"{self._name}-fetch-{generation}",
            daemon=True,
        )
        worker.start()
        logger.info(
            "fetch_started",
            controller=self._name,
            generation=generation,
            query=query.text,
        )
        return query

    def on_fetch_complete(self, lines: Sequence[str]) -> None:
        self._ensure_foreground("on_fetch_complete")
        self._results = list(lines)
        self._presenter.show_results(self.results)
        self._busy = False
        self._presenter.set_busy(False)

    def drain(self, *, block: bool = False, timeout: float | None = None) -> int:
        """Deliver queued completions; with ``block`` wait for the first one."""

        self._ensure_foreground("drain")
        processed = 0
        wait = block
        while True:
            try:
                completion = self._mailbox.get(block=wait, timeout=timeout if wait else None)
            except queue.Empty:
                return processed
            wait = False
            processed += 1
            self._pending -= 1
            self._deliver(completion)

    def _deliver(self, completion: FetchCompletion) -> None:
        if self._discard_stale and completion.generation != self._generation:
            logger.info(
                "stale_result_discarded",
                controller=self._name,
                generation=completion.generation,
                latest_generation=self._generation,
            )
            return
        self.on_fetch_complete(completion.response.display_lines())

    def _run_fetch(self, generation: int, terms: tuple[str, ...]) -> None:
        try:
            response = self._fetcher.fetch(terms)
        except Exception as exc:
            logger.error("fetch_crashed", controller=self._name, generation=generation, exc_info=True)
            response = SearchFailure(message=f"Search failed: {exc.__class__.__name__}: {exc}")
        self._mailbox.put(FetchCompletion(generation=generation, response=response))
        if self._wakeup is not None:
            self._wakeup()

    def _ensure_foreground(self, operation: str) -> None:
        if threading.get_ident() != self._owner:
            raise RuntimeError(
                f"SearchController.{operation} must run on the thread that created the controller"
            )


__all__ = ["FetchCompletion", "SearchController", "SearchFetcher", "SearchPresenter"]
