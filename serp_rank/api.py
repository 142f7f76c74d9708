"""HTTP API for the rank checker.

Endpoints:
  GET /api/search?query=&targetUrl=&engine=  -> run a rank check
  GET /api/search/history                    -> past searches, newest first
  GET /health

Errors are returned as {"error": "..."}. Bad input maps to 400; every other
failure maps to 500 with a fixed message so internal details never leak.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from serp_rank.db import HistoryStore
from serp_rank.engines import build_default_selector
from serp_rank.errors import InvalidArgument, SerpRankError
from serp_rank.models import SearchRecord
from serp_rank.service import SearchService

logger = logging.getLogger(__name__)

SEARCH_ERROR_MESSAGE = "An unexpected error occurred while processing your request."
HISTORY_ERROR_MESSAGE = "An unexpected error occurred while retrieving search history."


class SearchResponseModel(BaseModel):
    """Rank check result."""

    model_config = ConfigDict(populate_by_name=True)

    rankings: list[int] = Field(description="1-based positions, [0] when not found")
    query: str
    target_url: str = Field(alias="targetUrl")
    search_engine: str = Field(alias="searchEngine")


class HistoryItemModel(SearchResponseModel):
    """One stored search."""

    search_date: str | None = Field(alias="searchDate", description="UTC timestamp (ISO 8601)")

    @classmethod
    def from_record(cls, record: SearchRecord) -> "HistoryItemModel":
        return cls(
            rankings=record.rankings,
            query=record.query,
            target_url=record.target_url,
            search_engine=record.search_engine,
            search_date=record.search_date.isoformat() if record.search_date else None,
        )


class _EndpointFailure(Exception):
    """Wraps an unexpected failure with the message to show the caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def get_service(request: Request) -> SearchService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        service = SearchService(build_default_selector(), HistoryStore())
        request.app.state.service = service
    return service


def create_app(service: SearchService | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        service: pre-built SearchService. Built from configuration on first
            request when omitted.
    """
    app = FastAPI(title="SERP Rank Checker")
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InvalidArgument)
    async def invalid_argument_handler(request: Request, exc: InvalidArgument) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})

    @app.exception_handler(_EndpointFailure)
    async def endpoint_failure_handler(request: Request, exc: _EndpointFailure) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": exc.message},
        )

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/api/search", response_model=SearchResponseModel, response_model_by_alias=True)
    def search(
        service: Annotated[SearchService, Depends(get_service)],
        query: Annotated[str | None, Query()] = None,
        target_url: Annotated[str | None, Query(alias="targetUrl")] = None,
        engine: Annotated[str | None, Query()] = None,
    ):
        try:
            result = service.run(query or "", target_url or "", engine or "")
        except InvalidArgument:
            raise
        except Exception as e:
            if isinstance(e, SerpRankError):
                logger.error("Error processing search request for %s: %s", engine, e)
            else:
                logger.exception("Unexpected error processing search request for %s", engine)
            raise _EndpointFailure(SEARCH_ERROR_MESSAGE) from e
        return result.to_dict()

    @app.get(
        "/api/search/history",
        response_model=list[HistoryItemModel],
        response_model_by_alias=True,
    )
    def search_history(service: Annotated[SearchService, Depends(get_service)]):
        try:
            records = service.history()
        except Exception as e:
            logger.error("Error fetching search history: %s", e)
            raise _EndpointFailure(HISTORY_ERROR_MESSAGE) from e
        return [HistoryItemModel.from_record(r) for r in records]

    return app


app = create_app()
