"""Search engine result page fetching.

Each engine client builds its own results URL (about 100 results per page)
and issues a single GET. Retries are handled by the shared session:
  - up to MAX_RETRIES with exponential backoff
  - on 429 and 5xx only, other 4xx fail immediately
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from serp_rank.config import (
    BING_RESULT_SELECTOR,
    BING_SEARCH_URL_TEMPLATE,
    DEFAULT_HEADERS,
    GOOGLE_RESULT_SELECTOR,
    GOOGLE_SEARCH_URL_TEMPLATE,
    MAX_RETRIES,
    REQUEST_TIMEOUT,
    RESULTS_PER_PAGE,
    RETRY_BACKOFF_FACTOR,
    RETRY_BACKOFF_MAX,
    RETRY_STATUS_CODES,
)
from serp_rank.errors import TransportFailure

logger = logging.getLogger(__name__)


def create_http_session(
    max_retries: int = MAX_RETRIES,
    backoff_factor: float = RETRY_BACKOFF_FACTOR,
    backoff_max: float = RETRY_BACKOFF_MAX,
) -> requests.Session:
    """Create a requests Session with the retry adapter mounted.

    Retry-After headers are ignored so that a 429 never waits longer than
    the capped exponential backoff.
    """
    session = requests.Session()
    session.headers.update(DEFAULT_HEADERS)

    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        backoff_max=backoff_max,
        status_forcelist=RETRY_STATUS_CODES,
        allowed_methods=["GET"],
        respect_retry_after_header=False,
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    return session


class EngineClient:
    """Fetches one results page from a search engine."""

    name = ""
    url_template = ""
    result_selector = BING_RESULT_SELECTOR

    def __init__(self, session: requests.Session | None = None, timeout: float = REQUEST_TIMEOUT):
        self._session = session or create_http_session()
        self._timeout = timeout

    def build_url(self, query: str) -> str:
        return self.url_template.format(query=quote(query, safe=""), count=RESULTS_PER_PAGE)

    def fetch(self, query: str) -> str:
        """Fetch the results page HTML for query.

        Raises:
            TransportFailure: network error or non-2xx response.
        """
        url = self.build_url(query)
        try:
            resp = self._session.get(url, timeout=self._timeout)
            resp.raise_for_status()
            return resp.text
        except requests.RequestException as e:
            logger.error("Results page fetch failed: engine=%s, query=%s, error=%s", self.name, query, e)
            raise TransportFailure(self.name, query, e) from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class BingClient(EngineClient):
    name = "bing"
    url_template = BING_SEARCH_URL_TEMPLATE
    result_selector = BING_RESULT_SELECTOR


class GoogleClient(EngineClient):
    name = "google"
    url_template = GOOGLE_SEARCH_URL_TEMPLATE
    result_selector = GOOGLE_RESULT_SELECTOR
