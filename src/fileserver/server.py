"""
=============================================================================
FILE SERVER
=============================================================================

Glues the networking core to the request pipeline.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer.accept()                                              │
    │         │                                                            │
    │         ▼                                                            │
    │   one thread per connection                                          │
    │         │                                                            │
    │         ├──► conn.read_request()       one recv(buffer_size)        │
    │         ├──► handle_raw(data)                                        │
    │         │       ├── RequestParser.parse()                            │
    │         │       ├── StaticFileHandler.handle()                       │
    │         │       └── HTTPResponse.to_bytes()                          │
    │         ├──► conn.send_response()      one sendall()                │
    │         └──► conn.close()                                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The pipeline is synchronous and blocks only on filesystem reads. Requests
share nothing except the read-only server root, so no locking is needed.
There are no timeouts, no connection limits and no backpressure.

=============================================================================
ERROR HANDLING
=============================================================================

    ParsingError      malformed request      → warning, close, no response
    OSError           filesystem/socket fault → error, close, no response
    missing resource                          → normal 404 response

There is no 500 page: a silently closed connection is the failure mode.

=============================================================================
"""

import logging
import threading
import time
from typing import Optional

from .config import ServerConfig
from .core import SocketServer, Connection
from .http import (
    RequestParser,
    ParsingError,
    HTTPRequest,
    HTTPResponse,
    LEGACY_LINE_ENDING,
    STANDARD_LINE_ENDING,
)
from .handlers import StaticFileHandler
from .access_log import AccessLogger


logger = logging.getLogger(__name__)


class FileServer:
    """
    Static file and directory listing server.

    Usage:
        server = FileServer(ServerConfig(root_dir="./public", port=3000))
        server.run()  # Blocks until Ctrl+C

    Or, without any sockets:
        response_bytes = FileServer(config).handle_raw(b"GET / HTTP/1.1\\r\\n\\r\\n")
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()
        self._handler = StaticFileHandler(self.config.server_root)
        self._access_log = AccessLogger(log_format=self.config.log_format)
        self._line_ending = STANDARD_LINE_ENDING if self.config.crlf_headers else LEGACY_LINE_ENDING

    @property
    def address(self):
        return self._socket_server.address

    def respond(self, request: HTTPRequest) -> HTTPResponse:
        """Generate the response for an already parsed request."""
        return self._handler.handle(request)

    def handle_raw(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0),
    ) -> bytes:
        """
        Run the full pipeline on one request buffer.

        Raises:
            ParsingError: Malformed request.
            OSError: Filesystem failure while resolving or reading.
        """
        started = time.perf_counter()
        request = self._parser.parse(data)
        response = self.respond(request)
        self._access_log.log(request, response, client_address, started)
        return response.to_bytes(self._line_ending)

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start serving (blocking).

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()

        logger.info(f"Serving {self.config.server_root} on {self.config.host}:{self.config.port}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = self.config.log_level_number
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("fileserver").setLevel(level)

    def _handle_connection(self, conn: Connection):
        """Start a worker thread for the connection (called by SocketServer)."""
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        worker.start()

    def _process_connection(self, conn: Connection):
        """Read once, respond once, close (runs in the worker thread)."""
        with conn:
            try:
                data = conn.read_request()
                if not data:
                    logger.debug(f"[{conn.id}] Client closed without sending")
                    return

                response_bytes = self.handle_raw(data, conn.address)
                conn.send_response(response_bytes)

            except ParsingError as e:
                logger.warning(f"[{conn.id}] Dropping malformed request from {conn.client_ip}: {e}")
            except OSError as e:
                logger.error(f"[{conn.id}] Dropping connection from {conn.client_ip}: {e}")


def create_server(config: Optional[ServerConfig] = None) -> FileServer:
    """
    Factory for FileServer instances.

    Example:
        server = create_server(ServerConfig.from_env())
        server.run()
    """
    return FileServer(config)
