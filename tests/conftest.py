"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, Optional

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rangeserver import FileServer, ServerConfig


VIDEO_BYTES = bytes(i % 251 for i in range(1000))
INDEX_BYTES = b"".join(b"%03d|" % i for i in range(50))  # 200 bytes


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample GET request without a Range header."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_range_request() -> bytes:
    """Sample GET request for a bounded byte range."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Range: bytes=50-149\r\n"
        b"\r\n"
    )


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """
    Content root with a few known files:

        video.mp4     1000 bytes
        index.html     200 bytes
        empty.txt        0 bytes
        empty.mp4        0 bytes
        docs/            directory
        docs/readme.txt
    """
    root = tmp_path / "content"
    root.mkdir()
    (root / "video.mp4").write_bytes(VIDEO_BYTES)
    (root / "index.html").write_bytes(INDEX_BYTES)
    (root / "empty.txt").write_bytes(b"")
    (root / "empty.mp4").write_bytes(b"")
    (root / "docs").mkdir()
    (root / "docs" / "readme.txt").write_bytes(b"hello from docs\n")

    # Sits next to the root, must never be reachable from it
    (tmp_path / "secret.txt").write_bytes(b"top secret")
    return root


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class FakeConnection:
    """In-memory stand-in for Connection: records everything written."""

    def __init__(self, fail_after: Optional[int] = None):
        self.chunks: list[bytes] = []
        self.fail_after = fail_after

    @property
    def data(self) -> bytes:
        return b"".join(self.chunks)

    @property
    def bytes_sent(self) -> int:
        return len(self.data)

    def write(self, data: bytes) -> int:
        if self.fail_after is not None and len(self.chunks) >= self.fail_after:
            raise BrokenPipeError("peer went away")
        self.chunks.append(bytes(data))
        return len(data)


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()


def split_response(raw: bytes) -> tuple[str, dict, bytes]:
    """Split raw response bytes into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    return lines[0], headers, body


def http_exchange(port: int, raw_request: bytes, timeout: float = 5.0) -> bytes:
    """Send raw request bytes and read until the server closes."""
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as s:
        s.sendall(raw_request)
        chunks = []
        while True:
            chunk = s.recv(65536)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False

    def __init__(self, server: FileServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.stop()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def get(self, path: str, headers: Optional[dict] = None) -> tuple[str, dict, bytes]:
        lines = [f"GET {path} HTTP/1.1", "Host: localhost"]
        lines.extend(f"{name}: {value}" for name, value in (headers or {}).items())
        raw = ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")
        return split_response(http_exchange(self.port, raw))


def make_config(content_dir: Path, **overrides) -> ServerConfig:
    options = dict(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        content_root=str(content_dir),
        log_level="WARNING",
    )
    options.update(overrides)
    return ServerConfig(**options)


@pytest.fixture
def test_server(content_dir: Path) -> Generator[TestServer, None, None]:
    """Running server over content_dir on an ephemeral port."""
    test_srv = TestServer(FileServer(make_config(content_dir)))
    test_srv.start()

    yield test_srv

    test_srv.stop()
