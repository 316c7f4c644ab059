"""Tests for the search controller and its foreground mailbox."""

from __future__ import annotations

import threading

import pytest
import structlog

from tweetsearch.domain.models import SearchFailure, SearchResults
from tweetsearch.services.controller import SearchController

DRAIN_TIMEOUT = 5


def test_submit_splits_terms_and_fetches(fetcher, presenter):
    controller = SearchController(fetcher, presenter)

    query = controller.submit("  hello   world ")
    assert controller.drain(block=True, timeout=DRAIN_TIMEOUT) == 1

    assert query.terms == ("hello", "world")
    assert fetcher.calls == [("hello", "world")]
    assert controller.results == ["tweet about hello world"]


def test_busy_is_signalled_before_submit_returns(fetcher, presenter):
    gate = threading.Event()
    fetcher.gates["slow"] = gate
    controller = SearchController(fetcher, presenter)

    controller.submit("slow")

    assert controller.busy is True
    assert controller.pending == 1
    assert presenter.events == [("busy", True)]

    gate.set()
    controller.drain(block=True, timeout=DRAIN_TIMEOUT)

    assert controller.busy is False
    assert controller.pending == 0
    assert presenter.events == [
        ("busy", True),
        ("results", ["tweet about slow"]),
        ("busy", False),
    ]


@pytest.mark.parametrize("raw", ["", "   ", "\n\t", None])
def test_blank_input_starts_nothing(fetcher, presenter, raw):
    controller = SearchController(fetcher, presenter)
    controller.on_fetch_complete(["kept"])
    presenter.events.clear()

    assert controller.submit(raw) is None

    assert controller.drain() == 0
    assert fetcher.calls == []
    assert presenter.events == []
    assert controller.results == ["kept"]
    assert controller.busy is False


def test_fetch_runs_off_the_foreground_thread(fetcher, presenter):
    controller = SearchController(fetcher, presenter)

    controller.submit("python")
    controller.drain(block=True, timeout=DRAIN_TIMEOUT)

    assert fetcher.threads[0] != threading.get_ident()


def test_results_are_replaced_wholesale(fetcher, presenter):
    fetcher.responses = {
        "first": SearchResults(lines=["a", "b", "c"]),
        "second": SearchResults(lines=["d"]),
    }
    controller = SearchController(fetcher, presenter)

    controller.submit("first")
    controller.drain(block=True, timeout=DRAIN_TIMEOUT)
    assert controller.results == ["a", "b", "c"]

    controller.submit("second")
    controller.drain(block=True, timeout=DRAIN_TIMEOUT)
    assert controller.results == ["d"]
    assert presenter.events[-2:] == [("results", ["d"]), ("busy", False)]


def test_failure_is_displayed_as_single_line(fetcher, presenter):
    fetcher.responses = {"python": SearchFailure(message="rate limited", error_kind="api")}
    controller = SearchController(fetcher, presenter)

    controller.submit("python")
    controller.drain(block=True, timeout=DRAIN_TIMEOUT)

    assert controller.results == ["rate limited"]
    assert controller.busy is False


def test_empty_results_clear_the_list(fetcher, presenter):
    fetcher.responses = {"nothing": SearchResults(lines=[])}
    controller = SearchController(fetcher, presenter)
    controller.on_fetch_complete(["old"])

    controller.submit("nothing")
    controller.drain(block=True, timeout=DRAIN_TIMEOUT)

    assert controller.results == []
    assert ("results", []) in presenter.events


def test_stale_completion_is_discarded(fetcher, presenter):
    gate = threading.Event()
    fetcher.gates["old"] = gate
    fetcher.responses = {
        "old": SearchResults(lines=["stale"]),
        "new": SearchResults(lines=["fresh"]),
    }
    controller = SearchController(fetcher, presenter)

    controller.submit("old")
    controller.submit("new")
    controller.drain(block=True, timeout=DRAIN_TIMEOUT)

    assert controller.results == ["fresh"]
    assert controller.busy is False
    assert controller.pending == 1

    gate.set()
    assert controller.drain(block=True, timeout=DRAIN_TIMEOUT) == 1

    assert controller.results == ["fresh"]
    assert controller.pending == 0
    assert [event for event in presenter.events if event[0] == "results"] == [("results", ["fresh"])]


def test_stale_completion_keeps_busy_until_latest_lands(fetcher, presenter):
    gate = threading.Event()
    fetcher.gates["new"] = gate
    controller = SearchController(fetcher, presenter)

    controller.submit("old")
    controller.submit("new")
    controller.drain(block=True, timeout=DRAIN_TIMEOUT)

    assert controller.busy is True
    assert controller.results == []

    gate.set()
    controller.drain(block=True, timeout=DRAIN_TIMEOUT)
    assert controller.results == ["tweet about new"]
    assert controller.busy is False


def test_overlapping_completions_race_when_not_discarding(fetcher, presenter):
    gate = threading.Event()
    fetcher.gates["old"] = gate
    controller = SearchController(fetcher, presenter, discard_stale_results=False)

    controller.submit("old")
    controller.submit("new")
    controller.drain(block=True, timeout=DRAIN_TIMEOUT)
    assert controller.results == ["tweet about new"]
    assert controller.busy is False

    gate.set()
    controller.drain(block=True, timeout=DRAIN_TIMEOUT)
    assert controller.results == ["tweet about old"]


def test_wakeup_is_called_after_completion_is_queued(fetcher, presenter):
    woken = threading.Event()
    controller = SearchController(fetcher, presenter, wakeup=woken.set)

    controller.submit("python")

    assert woken.wait(timeout=DRAIN_TIMEOUT)
    assert controller.drain() == 1
    assert controller.results == ["tweet about python"]


def test_drain_refuses_other_threads(fetcher, presenter):
    controller = SearchController(fetcher, presenter)
    errors: list[BaseException] = []

    def worker() -> None:
        try:
            controller.drain()
        except RuntimeError as exc:
            errors.append(exc)

    thread = threading.Thread(target=worker)
    thread.start()
    thread.join(timeout=DRAIN_TIMEOUT)

    assert len(errors) == 1
    assert "drain" in str(errors[0])


def test_crashing_fetcher_is_reported_as_data(presenter):
    class BrokenFetcher:
        def fetch(self, terms):
            raise ValueError("nope")

    controller = SearchController(BrokenFetcher(), presenter)

    controller.submit("python")
    controller.drain(block=True, timeout=DRAIN_TIMEOUT)

    assert controller.results == ["Search failed: ValueError: nope"]
    assert controller.busy is False


def test_drain_without_completions_returns_zero(fetcher, presenter):
    controller = SearchController(fetcher, presenter)
    assert controller.drain() == 0
    assert controller.drain(block=True, timeout=0.01) == 0


def test_worker_inherits_bound_log_context(presenter):
    seen: list[dict] = []

    class ContextFetcher:
        def fetch(self, terms):
            seen.append(structlog.contextvars.get_contextvars())
            return SearchResults(lines=[])

    controller = SearchController(ContextFetcher(), presenter)

    with structlog.contextvars.bound_contextvars(chat_id=99):
        controller.submit("python")
    controller.drain(block=True, timeout=DRAIN_TIMEOUT)

    assert seen == [{"chat_id": 99}]
