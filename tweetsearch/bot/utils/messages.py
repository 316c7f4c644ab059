"""Plain-text rendering of result lists for Telegram."""

from __future__ import annotations

from typing import Sequence

# Telegram messages are limited to 4096 characters.
TELEGRAM_MESSAGE_LIMIT = 4000
TRUNCATION_MARKER = "\n...[truncated]"
EMPTY_RESULTS_TEXT = "No results."
BLANK_LINE_TEXT = "(empty)"


def format_results(lines: Sequence[str]) -> str:
    """Render the result list as one numbered message."""

    if not lines:
        return EMPTY_RESULTS_TEXT
    if len(lines) == 1:
        text = lines[0].strip() or BLANK_LINE_TEXT
    else:
        text = "\n\n".join(f"{idx}. {line.strip()}" for idx, line in enumerate(lines, start=1))
    if len(text) > TELEGRAM_MESSAGE_LIMIT:
        text = f"{text[: TELEGRAM_MESSAGE_LIMIT - len(TRUNCATION_MARKER)].rstrip()}{TRUNCATION_MARKER}"
    return text


__all__ = ["BLANK_LINE_TEXT", "EMPTY_RESULTS_TEXT", "TELEGRAM_MESSAGE_LIMIT", "format_results"]
