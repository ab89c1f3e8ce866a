"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fileserver import FileServer, ServerConfig


PNG_SIGNATURE = b"\x89PNG"


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample GET request for the server root."""
    return (
        b"GET / HTTP/1.1\r\n"
        b"Host: x\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample POST request with a small body."""
    return (
        b"POST /upload HTTP/1.1\r\n"
        b"Content-Length: 5\r\n"
        b"\r\n"
        b"hello"
    )


@pytest.fixture
def server_root(tmp_path: Path) -> Path:
    """
    A server root containing:

        wwwroot/
            a.txt          "hello world"
            sub/
                image.png  PNG signature
            empty/
    """
    root = tmp_path / "wwwroot"
    root.mkdir()
    (root / "a.txt").write_bytes(b"hello world")
    (root / "sub").mkdir()
    (root / "sub" / "image.png").write_bytes(PNG_SIGNATURE)
    (root / "empty").mkdir()
    return root


@pytest.fixture
def config(server_root: Path) -> ServerConfig:
    """Test configuration serving `server_root`."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        root_dir=str(server_root),
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class LiveServer:
    """Runs a FileServer in a background thread."""

    def __init__(self, server: FileServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes and read until the server closes the connection."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(raw)
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def live_server(config: ServerConfig) -> Generator[LiveServer, None, None]:
    """A running server on a free port."""
    live = LiveServer(FileServer(config))
    live.start()

    yield live

    live.stop()
