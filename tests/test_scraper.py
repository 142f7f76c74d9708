"""Unit tests for the scraper module."""

import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import MagicMock

import pytest
import requests

from serp_rank.config import DEFAULT_HEADERS
from serp_rank.errors import TransportFailure
from serp_rank.scraper import BingClient, EngineClient, GoogleClient, create_http_session


def _mock_session(text="<html></html>", status_code=200, exc=None):
    session = MagicMock()
    if exc is not None:
        session.get.side_effect = exc
        return session
    resp = MagicMock(text=text, status_code=status_code)
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Client Error")
    session.get.return_value = resp
    return session


class _SerpHandler(BaseHTTPRequestHandler):
    """Answers every GET with the status and headers configured on the server."""

    def do_GET(self):
        server = self.server
        with server.lock:
            server.hits += 1
            server.user_agents.append(self.headers.get("User-Agent"))

        body = b"<html><body>results</body></html>"
        self.send_response(server.status)
        for key, value in server.extra_headers.items():
            self.send_header(key, value)
        self.send_header("Content-Type", "text/html")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def serp_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _SerpHandler)
    server.lock = threading.Lock()
    server.hits = 0
    server.user_agents = []
    server.status = 200
    server.extra_headers = {}

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


def _local_client(server, session, timeout=2):
    class LocalClient(EngineClient):
        name = "local"
        url_template = f"http://127.0.0.1:{server.server_port}/search?q={{query}}&count={{count}}"

    session.trust_env = False  # ignore proxy settings from the environment
    return LocalClient(session, timeout=timeout)


class TestBuildUrl:
    """URL building for each engine."""

    def test_bing_url(self):
        client = BingClient(_mock_session())
        assert client.build_url("conveyancing searches") == (
            "https://www.bing.com/search?q=conveyancing%20searches&count=100"
        )

    def test_google_url(self):
        client = GoogleClient(_mock_session())
        assert client.build_url("conveyancing searches") == (
            "https://www.google.co.uk/search?num=100&q=conveyancing%20searches"
        )

    def test_query_is_fully_encoded(self):
        client = BingClient(_mock_session())
        assert client.build_url("a&b/c?") == "https://www.bing.com/search?q=a%26b%2Fc%3F&count=100"


class TestFetch:
    """Tests for EngineClient.fetch."""

    def test_returns_html(self):
        session = _mock_session(text="<html>results</html>")
        client = BingClient(session, timeout=5)

        assert client.fetch("infotrack") == "<html>results</html>"
        session.get.assert_called_once_with(
            "https://www.bing.com/search?q=infotrack&count=100",
            timeout=5,
        )

    def test_http_error_raises_transport_failure(self):
        client = BingClient(_mock_session(status_code=403))

        with pytest.raises(TransportFailure) as exc_info:
            client.fetch("infotrack")

        assert exc_info.value.engine == "bing"
        assert exc_info.value.query == "infotrack"
        assert isinstance(exc_info.value.cause, requests.HTTPError)

    def test_network_error_raises_transport_failure(self):
        client = GoogleClient(_mock_session(exc=requests.ConnectionError("refused")))

        with pytest.raises(TransportFailure) as exc_info:
            client.fetch("infotrack")

        assert exc_info.value.engine == "google"


class TestCreateHttpSession:
    """Behaviour of the shared retrying session against a local server."""

    def test_sends_browser_headers(self, serp_server):
        client = _local_client(serp_server, create_http_session())

        assert client.fetch("infotrack") == "<html><body>results</body></html>"
        assert serp_server.hits == 1
        assert serp_server.user_agents == [DEFAULT_HEADERS["User-Agent"]]

    def test_rate_limit_is_retried_then_fails(self, serp_server):
        """429 is retried three times and Retry-After does not extend the wait."""
        serp_server.status = 429
        serp_server.extra_headers = {"Retry-After": "3600"}
        session = create_http_session(backoff_factor=0.05, backoff_max=0.2)
        client = _local_client(serp_server, session, timeout=1)

        start = time.monotonic()
        with pytest.raises(TransportFailure) as exc_info:
            client.fetch("infotrack")
        elapsed = time.monotonic() - start

        assert serp_server.hits == 4
        assert elapsed < 5
        assert isinstance(exc_info.value.cause, requests.exceptions.RetryError)

    def test_default_policy_ignores_retry_after(self, serp_server):
        serp_server.status = 429
        serp_server.extra_headers = {"Retry-After": "3600"}
        client = _local_client(serp_server, create_http_session(max_retries=1), timeout=1)

        start = time.monotonic()
        with pytest.raises(TransportFailure):
            client.fetch("infotrack")

        assert serp_server.hits == 2
        assert time.monotonic() - start < 5

    def test_server_error_is_retried(self, serp_server):
        serp_server.status = 503
        session = create_http_session(backoff_factor=0.01)
        client = _local_client(serp_server, session)

        with pytest.raises(TransportFailure):
            client.fetch("infotrack")

        assert serp_server.hits == 4

    @pytest.mark.parametrize("status", [403, 404])
    def test_client_error_is_not_retried(self, serp_server, status):
        serp_server.status = status
        client = _local_client(serp_server, create_http_session(backoff_factor=0.01))

        with pytest.raises(TransportFailure) as exc_info:
            client.fetch("infotrack")

        assert serp_server.hits == 1
        assert isinstance(exc_info.value.cause, requests.HTTPError)

    def test_default_headers(self):
        session = create_http_session()
        assert session.headers["User-Agent"] == DEFAULT_HEADERS["User-Agent"]
