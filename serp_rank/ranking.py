"""Rank extraction from search engine result pages.

Matching policy:
  - Result rows are the nodes matching the engine's result selector
    (Bing: li.b_algo), numbered 1.. in document order.
  - A row matches when its first link's href contains the target URL as a
    plain, case-sensitive substring. Scheme, host and trailing slashes are
    not normalized.
  - No matching row yields the sentinel [0].
"""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup

from serp_rank.config import BING_RESULT_SELECTOR
from serp_rank.errors import ExtractionFailed, InvalidArgument
from serp_rank.models import (
    NOT_FOUND,
    Failed,
    Found,
    NotFound,
    RankOutcome,
    ResultEntry,
)

logger = logging.getLogger(__name__)


def parse_result_entries(html: str, selector: str = BING_RESULT_SELECTOR) -> list[ResultEntry]:
    """Extract the ordered list of result rows from HTML.

    Args:
        html: search results page markup
        selector: CSS selector for one organic result

    Returns:
        ResultEntry list in page order. Empty if no result rows exist.
    """
    soup = BeautifulSoup(html, "html.parser")
    entries: list[ResultEntry] = []

    for position, node in enumerate(soup.select(selector), start=1):
        link = node.find("a", href=True)
        url = link["href"] if link is not None else None
        entries.append(ResultEntry(position=position, url=url))

    return entries


def find_target_ranks(entries: list[ResultEntry], target_url: str) -> list[int]:
    """Return every position whose link contains target_url."""
    return [e.position for e in entries if e.url is not None and target_url in e.url]


def evaluate(html: str, target_url: str, selector: str = BING_RESULT_SELECTOR) -> RankOutcome:
    """Classify a results page as Found, NotFound or Failed for target_url.

    Raises:
        InvalidArgument: html or target_url is blank.
    """
    if not html or not html.strip():
        raise InvalidArgument("HTML content cannot be empty")
    if not target_url or not target_url.strip():
        raise InvalidArgument("Target URL cannot be empty")

    try:
        entries = parse_result_entries(html, selector)
    except Exception as e:
        return Failed(cause=e)

    if not entries:
        return NotFound(reason="no search results found")

    ranks = find_target_ranks(entries, target_url)
    if not ranks:
        return NotFound(reason=f"target not in {len(entries)} results")
    return Found(ranks=ranks)


def extract(html: str, target_url: str, selector: str = BING_RESULT_SELECTOR) -> list[int]:
    """Compute the 1-based positions where target_url appears.

    Returns:
        Ascending rank list, or [0] when the target is not found.

    Raises:
        InvalidArgument: html or target_url is blank.
        ExtractionFailed: the markup could not be parsed.
    """
    outcome = evaluate(html, target_url, selector)

    if isinstance(outcome, Found):
        return outcome.ranks
    if isinstance(outcome, NotFound):
        logger.warning("Target not found: target_url=%s (%s)", target_url, outcome.reason)
        return [NOT_FOUND]

    logger.error(
        "Error processing HTML content: target_url=%s, error=%s",
        target_url, outcome.cause,
    )
    raise ExtractionFailed(target_url, outcome.cause) from outcome.cause
