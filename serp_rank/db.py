"""Supabase persistence for search history.

Records are append-only: the store inserts and lists, it never updates or
deletes. The table lives in SUPABASE_SCHEMA (default public):

  search_results(id bigint identity, query text, target_url text,
                 search_engine text, rankings text, search_date timestamptz)
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone

from supabase import Client, create_client

from serp_rank.config import HISTORY_TABLE, SUPABASE_SCHEMA, SUPABASE_SECRET_KEY, SUPABASE_URL
from serp_rank.errors import InvalidArgument, PersistenceFailed
from serp_rank.models import SearchRecord, format_rankings, parse_rankings

logger = logging.getLogger(__name__)

_COLUMNS = "id, query, target_url, search_engine, rankings, search_date"


class HistoryStore:
    """Stores and lists SearchRecords."""

    def __init__(
        self,
        client: Client | None = None,
        table: str = HISTORY_TABLE,
        schema: str = SUPABASE_SCHEMA,
    ):
        self._client = client
        self._table_name = table
        self._schema = schema
        self._lock = threading.Lock()

    def _get_client(self) -> Client:
        with self._lock:
            if self._client is None:
                if not SUPABASE_URL or not SUPABASE_SECRET_KEY:
                    raise PersistenceFailed("SUPABASE_URL and SUPABASE_SECRET_KEY must be set")
                self._client = create_client(SUPABASE_URL, SUPABASE_SECRET_KEY)
            return self._client

    def _table(self):
        """Reference the history table in the configured schema."""
        return self._get_client().schema(self._schema).table(self._table_name)

    def save(self, record: SearchRecord | None) -> SearchRecord:
        """Insert a record.

        Returns:
            The stored record with its assigned id.

        Raises:
            InvalidArgument: record is None.
            PersistenceFailed: the insert failed.
        """
        if record is None:
            raise InvalidArgument("Search result cannot be None")

        search_date = record.search_date or datetime.now(timezone.utc)
        row = {
            "query": record.query,
            "target_url": record.target_url,
            "search_engine": record.search_engine,
            "rankings": format_rankings(record.rankings),
            "search_date": search_date.isoformat(),
        }

        try:
            resp = self._table().insert(row).execute()
        except PersistenceFailed:
            raise
        except Exception as e:
            logger.error(
                "Failed to save search result: query=%s, target_url=%s, error=%s",
                record.query, record.target_url, e,
            )
            raise PersistenceFailed("Failed to save search result to the database", e) from e

        stored_id = resp.data[0].get("id") if resp.data else None
        logger.info("Saved search result: id=%s, query=%s", stored_id, record.query)
        return SearchRecord(
            query=record.query,
            target_url=record.target_url,
            search_engine=record.search_engine,
            rankings=list(record.rankings),
            search_date=search_date,
            id=stored_id,
        )

    def list_all(self) -> list[SearchRecord]:
        """Return every record, most recent first.

        Raises:
            PersistenceFailed: the query failed.
        """
        try:
            resp = self._table().select(_COLUMNS).order("search_date", desc=True).execute()
            return [_row_to_record(row) for row in resp.data or []]
        except PersistenceFailed:
            raise
        except Exception as e:
            logger.error("Failed to retrieve search results: error=%s", e)
            raise PersistenceFailed("An error occurred while retrieving data from the database", e) from e


def _row_to_record(row: dict) -> SearchRecord:
    return SearchRecord(
        id=row.get("id"),
        query=row.get("query") or "",
        target_url=row.get("target_url") or "",
        search_engine=row.get("search_engine") or "",
        rankings=parse_rankings(row.get("rankings")),
        search_date=_parse_timestamp(row.get("search_date")),
    )


def _parse_timestamp(value) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
