"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

Owns the listening socket and the accept loop. Every accepted client is
wrapped in a Connection and handed to a callback; the FileServer starts
one thread per connection from there.

    bind() → listen() → ready ──► accept() ──► callback(conn)
                                     ▲               │
                                     └───────────────┘

=============================================================================
STOPPING
=============================================================================

shutdown() clears the running flag. accept() times out once a second so
the loop sees the flag without another client having to connect.

SIGINT and SIGTERM call shutdown() when the server runs in the main
thread. Started from any other thread (the live-server tests do this),
no handlers are installed and shutdown() has to be called directly.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

ACCEPT_POLL_SECONDS = 1.0

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SocketServer:
    """
    Listening socket plus accept loop.

    Usage:
        server = SocketServer(config)
        server.start(on_connection)  # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._ready = threading.Event()
        self._previous_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port). Reflects the real port when configured with 0."""
        if self._socket is None:
            return (self.config.host, self.config.port)
        return self._socket.getsockname()[:2]

    def _listen(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.settimeout(ACCEPT_POLL_SECONDS)

        try:
            sock.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            sock.close()
            raise

        sock.listen(self.config.backlog)
        return sock

    def _install_signal_handlers(self):
        if threading.current_thread() is not threading.main_thread():
            return

        def on_signal(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, shutting down")
            self.shutdown()

        for sig in STOP_SIGNALS:
            self._previous_handlers[sig] = signal.signal(sig, on_signal)

    def start(self, on_connection: Callable[[Connection], None]):
        """
        Bind, listen and accept until shutdown() is called.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._listen()
        self._running = True
        self._install_signal_handlers()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready.set()

        try:
            while self._running:
                conn = self._accept()
                if conn is not None:
                    on_connection(conn)
        finally:
            self._close()

    def _accept(self) -> Optional[Connection]:
        try:
            client, address = self._socket.accept()
        except socket.timeout:
            return None
        except OSError as e:
            if self._running:
                logger.error(f"Accept error: {e}")
            self._running = False
            return None

        return Connection(socket=client, address=address, buffer_size=self.config.buffer_size)

    def shutdown(self):
        """Stop the accept loop. Safe to call more than once."""
        self._running = False

    def _close(self):
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler)
        self._previous_handlers.clear()

        self._socket.close()
        self._socket = None
        self._running = False
        self._ready.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. Returns False on timeout."""
        return self._ready.wait(timeout)
