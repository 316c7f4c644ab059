"""Blocking search against the Twitter-style ``search.json`` endpoint."""

from __future__ import annotations

from typing import Sequence

import httpx
from pydantic import ValidationError

from tweetsearch.config import SearchApiSettings
from tweetsearch.domain.models import SearchFailure, SearchPayload, SearchResponse, SearchResults
from tweetsearch.logging import logger
from tweetsearch.services.exceptions import (
    ApiError,
    ParseError,
    RequestConstructionError,
    SearchError,
    TransportError,
)

QUERY_PARAM = "q"
API_ERROR_FALLBACK = "The search service reported an error."


class TweetSearchService:
    """One-shot fetcher: terms in, display lines out.

    ``fetch`` blocks on the network and must run off the foreground thread. It
    never raises; every failure comes back as a ``SearchFailure``.
    """

    def __init__(
        self,
        http_client: httpx.Client,
        settings: SearchApiSettings | None = None,
    ) -> None:
        self._client = http_client
        self._settings = settings or SearchApiSettings()

    @property
    def base_url(self) -> str:
        return str(self._settings.base_url)

    def build_url(self, terms: Sequence[str]) -> httpx.URL:
        try:
            url = httpx.URL(self.base_url)
        except httpx.InvalidURL as exc:
            raise RequestConstructionError(f"Invalid search endpoint {self.base_url!r}: {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise RequestConstructionError(f"Invalid search endpoint {self.base_url!r}")
        if terms:
            url = url.copy_merge_params({QUERY_PARAM: " ".join(terms)})
        return url

    def search(self, terms: Sequence[str]) -> list[str]:
        return self.fetch(terms).display_lines()

    def fetch(self, terms: Sequence[str]) -> SearchResponse:
        try:
            url = self.build_url(terms)
            logger.info("search_request", url=str(url))
            lines = self._extract_lines(*self._download(url))
        except ApiError as exc:
            logger.info("search_api_error", error=str(exc))
            return SearchFailure(message=str(exc), error_kind=exc.kind)
        except SearchError as exc:
            logger.warning("search_failed", error_kind=exc.kind, error=str(exc), exc_info=True)
            return SearchFailure(message=str(exc), error_kind=exc.kind)
        except Exception as exc:
            logger.error("search_failed_unexpectedly", error=str(exc), exc_info=True)
            return SearchFailure(message=f"Search failed: {exc.__class__.__name__}: {exc}")

        logger.info("search_completed", result_count=len(lines))
        return SearchResults(lines=lines)

    def _download(self, url: httpx.URL) -> tuple[int, str]:
        timeout = self._settings.request_timeout_seconds
        try:
            with self._client.stream(
                "GET",
                url,
                timeout=httpx.USE_CLIENT_DEFAULT if timeout is None else timeout,
            ) as response:
                body = response.read()
                status_code = response.status_code
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {url} failed: {exc.__class__.__name__}: {exc}") from exc
        return status_code, body.decode("utf-8", errors="replace")

    def _extract_lines(self, status_code: int, body: str) -> list[str]:
        try:
            payload = SearchPayload.model_validate_json(body)
        except ValidationError as exc:
            if not 200 <= status_code < 300:
                raise TransportError(f"Search request failed with HTTP {status_code}") from exc
            raise ParseError(_describe_validation_error(exc)) from exc

        if payload.has_error:
            raise ApiError(payload.error or API_ERROR_FALLBACK)
        if not 200 <= status_code < 300:
            raise TransportError(f"Search request failed with HTTP {status_code}")
        if payload.results is None:
            raise ParseError("Search response has no 'results' field")
        return [tweet.text for tweet in payload.results]


def _describe_validation_error(exc: ValidationError) -> str:
    errors = exc.errors(include_url=False)
    if any(error["type"] == "json_invalid" for error in errors):
        return "Search response is not valid JSON"
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ())) or "body"
    return f"Unexpected search response at {location}: {first.get('msg', 'invalid value')}"


__all__ = ["QUERY_PARAM", "TweetSearchService"]
