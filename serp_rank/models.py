"""Data model definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

# Single-element ranking that means "target not in the results"
NOT_FOUND = 0


@dataclass(frozen=True)
class ResultEntry:
    """One organic result row on a search results page."""

    position: int  # rank within the page (1-based)
    url: str | None  # outbound link, None when the row has no link


@dataclass(frozen=True)
class SearchRecord:
    """A stored search outcome. Never modified after creation."""

    query: str
    target_url: str
    search_engine: str  # engine name exactly as the caller supplied it
    rankings: list[int]  # [0] = not found
    search_date: datetime | None = None  # UTC, set before save
    id: int | None = None  # assigned by the store


@dataclass(frozen=True)
class SearchResponse:
    """Result of a single rank check."""

    query: str
    target_url: str
    search_engine: str
    rankings: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "rankings": list(self.rankings),
            "query": self.query,
            "targetUrl": self.target_url,
            "searchEngine": self.search_engine,
        }


# --- Extraction outcome ---


@dataclass(frozen=True)
class Found:
    """The target appeared at one or more positions."""

    ranks: list[int]


@dataclass(frozen=True)
class NotFound:
    """The page parsed cleanly but the target was not among the results."""

    reason: str = ""


@dataclass(frozen=True)
class Failed:
    """The markup could not be processed."""

    cause: BaseException


RankOutcome = Found | NotFound | Failed


# --- Rankings storage format ---


def format_rankings(rankings: list[int]) -> str:
    """Serialize rankings for storage, e.g. [1, 5] -> "1, 5"."""
    return ", ".join(str(r) for r in rankings)


def parse_rankings(text: str | None) -> list[int]:
    """Parse a stored rankings string back into a list.

    Empty or whitespace segments are dropped, as are negative values.
    A segment that is not an integer is read as 0.
    """
    if not text or not text.strip():
        return []

    rankings: list[int] = []
    for segment in text.split(","):
        segment = segment.strip()
        if not segment:
            continue
        try:
            value = int(segment)
        except ValueError:
            value = NOT_FOUND
        if value >= 0:
            rankings.append(value)
    return rankings
