"""Configuration module — environment variables and constants."""

import os
from pathlib import Path

from dotenv import load_dotenv

# .env lives at the project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# --- Supabase ---
# Read lazily by db.HistoryStore so that imports work without credentials
SUPABASE_URL: str = os.environ.get("SUPABASE_URL", "")
SUPABASE_SECRET_KEY: str = os.environ.get("SUPABASE_SECRET_KEY", "")
SUPABASE_SCHEMA: str = os.environ.get("SUPABASE_SCHEMA", "public")
HISTORY_TABLE: str = os.environ.get("HISTORY_TABLE", "search_results")

# --- Search engines ---
RESULTS_PER_PAGE = 100
BING_SEARCH_URL_TEMPLATE = "https://www.bing.com/search?q={query}&count={count}"
GOOGLE_SEARCH_URL_TEMPLATE = "https://www.google.co.uk/search?num={count}&q={query}"

# CSS selectors for a single organic result on each engine
BING_RESULT_SELECTOR = "li.b_algo"
GOOGLE_RESULT_SELECTOR = "div.g"

DEFAULT_ENGINE = "bing"

# --- User-Agent ---
USER_AGENT = os.environ.get(
    "SERP_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36",
)

DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept-Language": "en-GB,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

# --- Request settings ---
REQUEST_TIMEOUT = int(os.environ.get("REQUEST_TIMEOUT", "30"))  # seconds
MAX_RETRIES = int(os.environ.get("MAX_RETRIES", "3"))
RETRY_BACKOFF_FACTOR = float(os.environ.get("RETRY_BACKOFF_FACTOR", "2"))
RETRY_BACKOFF_MAX = float(os.environ.get("RETRY_BACKOFF_MAX", "10"))  # seconds, per wait
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)

# --- API ---
API_HOST: str = os.environ.get("API_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("API_PORT", "8000"))

# --- Logging ---
LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")
LOG_DIR = Path(os.environ.get("LOG_DIR", _PROJECT_ROOT / "logs"))
