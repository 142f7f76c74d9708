"""Rank check orchestration.

Flow for one request:
  1. Validate query / target URL / engine name
  2. Select the engine client (unknown names -> bing)
  3. Fetch the results page
  4. Extract the target's ranks
  5. Save a SearchRecord stamped with the current UTC time
  6. Return the ranks with the original inputs
"""

from __future__ import annotations

import ipaddress
import logging
import re
from datetime import datetime, timezone
from urllib.parse import urlparse

from serp_rank.db import HistoryStore
from serp_rank.engines import EngineSelector
from serp_rank.errors import InvalidArgument
from serp_rank.models import SearchRecord, SearchResponse
from serp_rank.ranking import extract

logger = logging.getLogger(__name__)

_HOST_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


def is_valid_url(url: str) -> bool:
    """Check that url parses with a host, assuming https:// when no scheme is given."""
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    try:
        parsed = urlparse(url)
        host = parsed.hostname
        parsed.port  # raises ValueError on a malformed port
    except ValueError:
        return False
    if not host:
        return False
    return _is_valid_host(host)


def _is_valid_host(host: str) -> bool:
    """Accept IP literals and DNS names, including internationalised ones."""
    if ":" in host:
        # bracketed IPv6; urlparse strips the brackets
        try:
            ipaddress.IPv6Address(host)
        except ValueError:
            return False
        return True

    try:
        ascii_host = host.encode("idna").decode("ascii")
    except UnicodeError:
        return False
    return bool(_HOST_PATTERN.match(ascii_host))


def validate_request(query: str, target_url: str, engine_name: str) -> None:
    """Reject blank inputs or a malformed target URL.

    Raises:
        InvalidArgument
    """
    if not all(v and v.strip() for v in (query, target_url, engine_name)):
        raise InvalidArgument("Query, target URL, and search engine are required.")
    if not is_valid_url(target_url):
        raise InvalidArgument("Invalid target URL format.")


class SearchService:
    """Runs rank checks and exposes search history."""

    def __init__(self, selector: EngineSelector, store: HistoryStore):
        self._selector = selector
        self._store = store

    def run(self, query: str, target_url: str, engine_name: str) -> SearchResponse:
        """Check where target_url ranks for query on engine_name.

        Raises:
            InvalidArgument: bad input, raised before any network or storage call.
            TransportFailure: the results page could not be fetched.
            ExtractionFailed: the results page could not be parsed.
            PersistenceFailed: the outcome could not be saved.
        """
        validate_request(query, target_url, engine_name)

        client = self._selector.select(engine_name)
        logger.info("Searching: query=%s, target_url=%s, engine=%s", query, target_url, client.name)

        html = client.fetch(query)
        rankings = extract(html, target_url, client.result_selector)

        status = ", ".join(str(r) for r in rankings) if rankings != [0] else "not found"
        logger.info("  %s on %s -> %s", target_url, client.name, status)

        self._store.save(SearchRecord(
            query=query,
            target_url=target_url,
            search_engine=engine_name,
            rankings=list(rankings),
            search_date=datetime.now(timezone.utc),
        ))

        return SearchResponse(
            query=query,
            target_url=target_url,
            search_engine=engine_name,
            rankings=rankings,
        )

    def history(self) -> list[SearchRecord]:
        """All past searches, most recent first."""
        return self._store.list_all()
