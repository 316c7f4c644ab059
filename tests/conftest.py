"""Shared pytest fixtures for fetcher and controller tests."""

from __future__ import annotations

import threading
from typing import Callable, Sequence

import httpx
import pytest

from tweetsearch.config import SearchApiSettings
from tweetsearch.domain.models import SearchResponse, SearchResults
from tweetsearch.services.search import TweetSearchService


class RecordingPresenter:
    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def set_busy(self, busy: bool) -> None:
        self.events.append(("busy", busy))

    def show_results(self, lines: Sequence[str]) -> None:
        self.events.append(("results", list(lines)))


class StubFetcher:
    """Returns canned responses keyed by the joined query text."""

    def __init__(self, responses: dict[str, SearchResponse] | None = None) -> None:
        self.responses = responses or {}
        self.gates: dict[str, threading.Event] = {}
        self.calls: list[tuple[str, ...]] = []
        self.threads: list[int] = []

    def fetch(self, terms: Sequence[str]) -> SearchResponse:
        text = " ".join(terms)
        self.calls.append(tuple(terms))
        self.threads.append(threading.get_ident())
        gate = self.gates.get(text)
        if gate is not None:
            gate.wait(timeout=5)
        return self.responses.get(text, SearchResults(lines=[f"tweet about {text}"]))


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def fetcher() -> StubFetcher:
    return StubFetcher()


@pytest.fixture
def make_service():
    clients: list[httpx.Client] = []

    def factory(
        handler: Callable[[httpx.Request], httpx.Response],
        settings: SearchApiSettings | None = None,
    ) -> TweetSearchService:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return TweetSearchService(client, settings=settings)

    yield factory
    for client in clients:
        client.close()
