"""SERP rank checker — main entry point.

Usage:
  python -m serp_rank.main search "conveyancing search" infotrack.co.uk --engine google
  python -m serp_rank.main history
  python -m serp_rank.main serve --port 8000
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime

from serp_rank.config import API_HOST, API_PORT, DEFAULT_ENGINE, LOG_DIR, LOG_LEVEL
from serp_rank.db import HistoryStore
from serp_rank.engines import build_default_selector
from serp_rank.errors import InvalidArgument, SerpRankError
from serp_rank.service import SearchService


def setup_logging() -> None:
    """Initial logging configuration."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = LOG_DIR / f"serp_rank_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def build_service() -> SearchService:
    return SearchService(build_default_selector(), HistoryStore())


def _cmd_search(args: argparse.Namespace) -> int:
    result = build_service().run(args.query, args.target_url, args.engine)
    if result.rankings == [0]:
        print(f"{result.target_url}: not found in {result.search_engine} results")
    else:
        ranks = ", ".join(str(r) for r in result.rankings)
        print(f"{result.target_url}: {ranks}")
    return 0


def _cmd_history(args: argparse.Namespace) -> int:
    for record in build_service().history():
        ranks = ", ".join(str(r) for r in record.rankings)
        date = record.search_date.strftime("%Y-%m-%d %H:%M:%S") if record.search_date else "-"
        print(f"{date}  {record.search_engine:<8} {record.query!r} {record.target_url} -> {ranks}")
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("serp_rank.api:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="serp-rank", description="Search engine rank checker")
    sub = parser.add_subparsers(dest="command", required=True)

    p_search = sub.add_parser("search", help="check where a URL ranks for a query")
    p_search.add_argument("query")
    p_search.add_argument("target_url")
    p_search.add_argument("--engine", default=DEFAULT_ENGINE)
    p_search.set_defaults(func=_cmd_search)

    p_history = sub.add_parser("history", help="list past searches")
    p_history.set_defaults(func=_cmd_history)

    p_serve = sub.add_parser("serve", help="run the HTTP API")
    p_serve.add_argument("--host", default=API_HOST)
    p_serve.add_argument("--port", type=int, default=API_PORT)
    p_serve.set_defaults(func=_cmd_serve)

    return parser


def run(argv: list[str] | None = None) -> int:
    """Main entry."""
    args = build_parser().parse_args(argv)
    setup_logging()
    logger = logging.getLogger(__name__)

    try:
        return args.func(args)
    except InvalidArgument as e:
        logger.error("Invalid input: %s", e)
        return 2
    except SerpRankError as e:
        logger.error("Search failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(run())
