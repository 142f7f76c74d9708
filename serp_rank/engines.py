"""Search engine selection.

Engine names are matched case-insensitively. Unknown names fall back to
the default engine (bing) rather than failing.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

import requests

from serp_rank.config import DEFAULT_ENGINE
from serp_rank.errors import InvalidArgument
from serp_rank.scraper import BingClient, EngineClient, GoogleClient, create_http_session

logger = logging.getLogger(__name__)


class EngineSelector:
    """Maps a user supplied engine name to its client."""

    def __init__(self, clients: Mapping[str, EngineClient], default: str = DEFAULT_ENGINE):
        self._clients = {name.lower(): client for name, client in clients.items()}
        self._default = default.lower()
        if self._default not in self._clients:
            raise ValueError(f"Default engine is not registered: {default}")

    @property
    def engine_names(self) -> list[str]:
        return sorted(self._clients)

    def resolve_engine_or_default(self, engine_name: str) -> str:
        """Return the registered engine key for engine_name, or the default."""
        if not engine_name or not engine_name.strip():
            raise InvalidArgument("Engine name cannot be empty")

        key = engine_name.strip().lower()
        if key in self._clients:
            return key

        logger.info("Unknown engine %r, using %s", engine_name, self._default)
        return self._default

    def select(self, engine_name: str) -> EngineClient:
        return self._clients[self.resolve_engine_or_default(engine_name)]


def build_default_selector(session: requests.Session | None = None) -> EngineSelector:
    """Build the google/bing selector, sharing one HTTP session."""
    session = session or create_http_session()
    return EngineSelector({
        "google": GoogleClient(session),
        "bing": BingClient(session),
    })
