"""Exception definitions.

Every failure that crosses a component boundary is one of:

  - InvalidArgument:   bad caller input (HTTP 400)
  - ExtractionFailed:  markup could not be parsed (HTTP 500)
  - TransportFailure:  network or engine-side fault (HTTP 500)
  - PersistenceFailed: storage fault (HTTP 500)
"""

from __future__ import annotations


class SerpRankError(Exception):
    """Base class for all rank checker errors."""


class InvalidArgument(SerpRankError, ValueError):
    """Caller supplied a missing, blank or malformed value."""


class ExtractionFailed(SerpRankError):
    """Search result markup could not be processed."""

    def __init__(self, target_url: str, cause: BaseException | None = None) -> None:
        super().__init__(f"Failed to process HTML content for target URL: {target_url}")
        self.target_url = target_url
        self.cause = cause


class TransportFailure(SerpRankError):
    """Search engine request failed after retries."""

    def __init__(self, engine: str, query: str, cause: BaseException | None = None) -> None:
        super().__init__(f"Failed to fetch {engine} results for query: {query}")
        self.engine = engine
        self.query = query
        self.cause = cause


class PersistenceFailed(SerpRankError):
    """Search history could not be read or written."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
