"""Error types raised by the ingestion pipeline and the article store."""

from __future__ import annotations

from typing import Iterable


class StockShortsError(Exception):
    """Base class for all errors raised by this package."""


class SourceUnavailable(StockShortsError):
    """The external content source could not be read."""


class MalformedRow(StockShortsError):
    """A raw row cannot be turned into an article."""

    def __init__(self, position: int, reason: str) -> None:
        super().__init__(f"Row {position}: {reason}")
        self.position = position
        self.reason = reason


class NotFound(StockShortsError):
    """A looked-up article or user/article pairing does not exist."""


class InvalidInput(StockShortsError):
    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        self.fields = list(fields)
        if self.fields:
            message = f"{message}: {', '.join(self.fields)}"
        super().__init__(message)


__all__ = ["StockShortsError", "SourceUnavailable", "MalformedRow", "NotFound", "InvalidInput"]
