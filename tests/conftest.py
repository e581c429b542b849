"""
Pytest configuration and fixtures for staticserver tests.
"""

import os
import socket
import threading
from pathlib import Path
from typing import Generator, Optional

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from staticserver import HTTPServer, ServerConfig
from staticserver.files import FileResponder, IndexResponder, RequestDispatcher
from staticserver.http import HTTPRequest


INDEX_HTML = b"<!doctype html><title>index</title><h1>home</h1>\n"
DATA_BIN = bytes(range(100))


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request with a Range header."""
    return (
        b"GET /media/intro%20clip.mp4?v=2&t=10 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Range: bytes=0-1023\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b"name=John"
    return (
        b"POST /upload HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/x-www-form-urlencoded\r\n"
        b"Content-Length: %d\r\n" % len(body) +
        b"Connection: close\r\n"
        b"\r\n"
    ) + body


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """
    A document root:

        index.html
        data.bin            100 bytes, 0x00..0x63
        empty.txt           0 bytes
        notes.unknownext
        docs/guide.txt
        My Files/a b.txt
    """
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "data.bin").write_bytes(DATA_BIN)
    (root / "empty.txt").write_bytes(b"")
    (root / "notes.unknownext").write_bytes(b"plain notes")
    (root / "docs").mkdir()
    (root / "docs" / "guide.txt").write_text("guide\n")
    (root / "My Files").mkdir()
    (root / "My Files" / "a b.txt").write_text("spaced\n")
    return root


@pytest.fixture
def config(doc_root: Path) -> ServerConfig:
    """Test configuration serving doc_root."""
    return ServerConfig(
        host="127.0.0.1",
        port=8080,
        root_dir=str(doc_root),
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        chunk_size=16,
        log_level="WARNING",
    )


@pytest.fixture
def index_responder(config: ServerConfig) -> IndexResponder:
    return IndexResponder(config.index_path, config.chunk_size)


@pytest.fixture
def file_responder(config: ServerConfig, index_responder: IndexResponder) -> FileResponder:
    return FileResponder(index_responder, server_name=config.server_name, chunk_size=config.chunk_size)


@pytest.fixture
def dispatcher(config: ServerConfig) -> RequestDispatcher:
    return RequestDispatcher.from_config(config)


@pytest.fixture
def make_request():
    """Factory for HTTPRequest objects shaped like parser output (lowercase headers)."""
    def _make(
        path: str = "/",
        method: str = "GET",
        headers: Optional[dict] = None,
        query_string: str = "",
    ) -> HTTPRequest:
        return HTTPRequest(
            method=method,
            path=path,
            headers={k.lower(): v for k, v in (headers or {}).items()},
            query_string=query_string,
            client_address=("127.0.0.1", 50000),
        )
    return _make


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestServer:
    """Runs an HTTPServer in a background thread."""

    __test__ = False  # not a test class

    def __init__(self, server: HTTPServer, port: int):
        self.server = server
        self.port = port
        self._thread: Optional[threading.Thread] = None

    def start(self):
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"port": self.port},
            daemon=True
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.stop()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)


@pytest.fixture
def test_server(config: ServerConfig, free_port: int) -> Generator[TestServer, None, None]:
    """A running server on a free port, serving doc_root."""
    config.port = free_port
    server = HTTPServer(config)

    test_srv = TestServer(server, free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def set_mtime():
    """Set a file's access and modification times (epoch seconds)."""
    def _set(path: Path, mtime: float, atime: Optional[float] = None):
        os.utime(path, (mtime if atime is None else atime, mtime))
    return _set
