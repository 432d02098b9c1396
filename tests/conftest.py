"""
pytest configuration and fixtures.
"""

import http.client
import socket
import threading
from typing import Generator, Optional

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from restkv import HTTPServer, ServerConfig, KeyValueStore, create_app


@pytest.fixture
def sample_put_request() -> bytes:
    """PUT as curl sends it."""
    return (
        b"PUT /entry/color/blue HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: curl/8.5.0\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_get_request() -> bytes:
    """GET with a query string (ignored) and keep-alive."""
    return (
        b"GET /entry/color?verbose=1&verbose=2 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def config() -> ServerConfig:
    """Loopback config on an OS-assigned port."""
    return ServerConfig(
        addr="127.0.0.1:0",
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def store() -> KeyValueStore:
    return KeyValueStore()


@pytest.fixture
def free_port() -> int:
    """A port nothing is listening on (at the time of the call)."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class RunningServer:
    """Runs an HTTPServer in a background thread for the duration of a test."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None
        self.error: Optional[BaseException] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def _run(self):
        try:
            self.server.run()
        except BaseException as e:
            self.error = e

    def start(self) -> "RunningServer":
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError(f"Server failed to start: {self.error!r}")
        return self

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def request(self, method: str, path: str, headers: Optional[dict] = None):
        """
        One request on a fresh connection.

        Returns:
            (status, body text, headers dict)
        """
        conn = http.client.HTTPConnection("127.0.0.1", self.port, timeout=5.0)
        try:
            conn.request(method, path, headers={"Connection": "close", **(headers or {})})
            response = conn.getresponse()
            body = response.read().decode("utf-8")
            return response.status, body, dict(response.getheaders())
        finally:
            conn.close()


@pytest.fixture
def running_app(config: ServerConfig, store: KeyValueStore) -> Generator[RunningServer, None, None]:
    """The key-value service, listening on 127.0.0.1 with a fresh store."""
    running = RunningServer(create_app(config, store=store)).start()
    yield running
    running.stop()


@pytest.fixture
def run_server() -> Generator:
    """Factory: start any HTTPServer in the background, stopped at teardown."""
    started = []

    def start(server: HTTPServer) -> RunningServer:
        running = RunningServer(server).start()
        started.append(running)
        return running

    yield start

    for running in started:
        running.stop()
