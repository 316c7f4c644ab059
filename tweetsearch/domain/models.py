"""Pydantic models shared by the fetcher, the controller and the bot shell."""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchQuery(BaseModel):
    """Terms of one user search, in input order."""

    model_config = ConfigDict(frozen=True)

    terms: tuple[str, ...] = Field(min_length=1)

    @field_validator("terms")
    @classmethod
    def _reject_blank_terms(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for term in value:
            if not term or term != term.strip() or len(term.split()) != 1:
                raise ValueError(f"invalid search term: {term!r}")
        return value

    @classmethod
    def from_raw(cls, raw_input: str | None) -> SearchQuery | None:
        """Split free text on whitespace; ``None`` when nothing is left."""

        terms = tuple((raw_input or "").split())
        if not terms:
            return None
        return cls(terms=terms)

    @property
    def text(self) -> str:
        return " ".join(self.terms)


class SearchResults(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["results"] = "results"
    lines: tuple[str, ...] = ()

    def display_lines(self) -> list[str]:
        return list(self.lines)


class SearchFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["error"] = "error"
    message: str = Field(min_length=1)
    error_kind: str = "unexpected"

    def display_lines(self) -> list[str]:
        return [self.message]


SearchResponse = Annotated[Union[SearchResults, SearchFailure], Field(discriminator="kind")]


class TweetModel(BaseModel):
    text: str


class SearchPayload(BaseModel):
    """Body of a search API response; unknown fields are ignored.

    A present ``error`` key wins whatever its value: non-string values are
    kept as their JSON text (``404``, ``null``).
    """

    error: str | None = None
    results: list[TweetModel] | None = None

    @field_validator("error", mode="before")
    @classmethod
    def _error_as_text(cls, value: Any) -> str:
        if isinstance(value, str):
            return value
        return json.dumps(value)

    @property
    def has_error(self) -> bool:
        return "error" in self.model_fields_set


__all__ = [
    "SearchFailure",
    "SearchPayload",
    "SearchQuery",
    "SearchResponse",
    "SearchResults",
    "TweetModel",
]
