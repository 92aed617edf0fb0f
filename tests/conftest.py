"""
pytest configuration and fixtures.
"""

import json
import socket
import threading
from pathlib import Path
from types import SimpleNamespace
from typing import Generator

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import HTTPServer, ServerConfig


NOT_FOUND_BODY = "<html><body>404 page</body></html>"
INDEX_BODY = "<html><body>home page</body></html>"
HEALTH_BODY = "<html><body>health page</body></html>"
UNSUPPORTED_BODY = "<html><body>unsupported page</body></html>"
STYLE_BODY = "body { color: #333; }"
PNG_BODY = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"

CHARACTERS = [
    {
        "name": "Ayla",
        "level": 12,
        "health": 87.5,
        "element": "Fire",
        "skills": ["Flame Lash", "Ember"],
    },
    {
        "name": "Borin",
        "level": 9,
        "health": 120,
        "element": "Earth",
        "skills": [],
    },
]


@pytest.fixture
def site() -> SimpleNamespace:
    """The content written to the temporary asset and data roots."""
    return SimpleNamespace(
        not_found=NOT_FOUND_BODY,
        index=INDEX_BODY,
        health=HEALTH_BODY,
        unsupported=UNSUPPORTED_BODY,
        style=STYLE_BODY,
        png=PNG_BODY,
        characters=CHARACTERS,
    )


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /greeting?lang=en HTTP/1.1\r\n"
        b"Host: localhost:3000\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a form body."""
    body = b"name=ayla&level=12"
    head = (
        b"POST /api/shipping/orders HTTP/1.1\r\n"
        b"Host: localhost:3000\r\n"
        b"Content-Type: application/x-www-form-urlencoded\r\n"
    )
    return head + f"Content-Length: {len(body)}\r\n\r\n".encode() + body


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    """Asset root with every page the server needs."""
    root = tmp_path / "public"
    root.mkdir()
    (root / "404.html").write_text(NOT_FOUND_BODY, encoding="utf-8")
    (root / "index.html").write_text(INDEX_BODY, encoding="utf-8")
    (root / "health.html").write_text(HEALTH_BODY, encoding="utf-8")
    (root / "unsupported.html").write_text(UNSUPPORTED_BODY, encoding="utf-8")
    (root / "style.css").write_text(STYLE_BODY, encoding="utf-8")
    (root / "logo.png").write_bytes(PNG_BODY)
    return root


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Dataset root with a valid characters.json."""
    root = tmp_path / "data"
    root.mkdir()
    (root / "characters.json").write_text(json.dumps(CHARACTERS), encoding="utf-8")
    return root


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def config(public_dir: Path, data_dir: Path, free_port: int) -> ServerConfig:
    """Test server configuration pointing at the temporary roots."""
    return ServerConfig(
        host="127.0.0.1",
        port=free_port,
        workers=2,
        queue_size=10,
        timeout=5.0,
        public_dir=str(public_dir),
        data_dir=str(data_dir),
        log_level="WARNING",
    )


@pytest.fixture
def server(config: ServerConfig) -> HTTPServer:
    """A configured server that is not listening."""
    return HTTPServer(config)


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class despite the name

    def __init__(self, server: HTTPServer):
        self.server = server
        self.port = server.config.port
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes and read the whole response."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as sock:
            sock.sendall(raw)
            chunks = []
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def get(self, path: str) -> bytes:
        """Send a GET request for path."""
        return self.request(f"GET {path} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode())


@pytest.fixture
def test_server(server: HTTPServer) -> Generator[TestServer, None, None]:
    """A server listening on a free port in a background thread."""
    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()
