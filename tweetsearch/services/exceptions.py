"""Failures raised inside the search fetcher.

None of these cross the fetcher boundary: ``TweetSearchService.fetch`` folds
them into a ``SearchFailure``.
"""


class SearchError(Exception):
    kind = "search"


class RequestConstructionError(SearchError):
    kind = "request"


class TransportError(SearchError):
    kind = "transport"


class ParseError(SearchError):
    kind = "parse"


class ApiError(SearchError):
    """The search service answered with an ``error`` field."""

    kind = "api"
