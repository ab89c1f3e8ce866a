"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for a single exchange:

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSED
              │             │
              └─────────────┴──► CLOSED (dropped, nothing written)

The request is read with exactly one recv() of buffer_size bytes. A
larger request is truncated; there is no reassembly and no keep-alive.

=============================================================================
"""

import socket
import time
import uuid
import logging
from enum import Enum
from dataclasses import dataclass, field


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used in debug logs."""

    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used to correlate log lines.
        state: Current lifecycle state.
        buffer_size: Bytes read by the one recv() call.
    """

    socket: socket.socket
    address: tuple[str, int]
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    buffer_size: int = 1024

    def __post_init__(self):
        # The listening socket polls with a timeout; clients block
        self.socket.setblocking(True)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        return time.time() - self.created_at

    def read_request(self) -> bytes:
        """
        Read the request with a single recv().

        Returns:
            The received bytes, empty if the client closed without sending.

        Raises:
            OSError: On socket errors.
        """
        self.state = ConnectionState.READING
        data = self.socket.recv(self.buffer_size)
        logger.debug(f"[{self.id}] Read {len(data)} bytes")
        self.state = ConnectionState.PROCESSING
        return data

    def send_response(self, data: bytes) -> None:
        """
        Write the whole response.

        Raises:
            OSError: On socket errors.
        """
        self.state = ConnectionState.WRITING
        self.socket.sendall(data)
        logger.debug(f"[{self.id}] Sent {len(data)} bytes")

    def close(self) -> None:
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # Client may already be gone

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Closed after {self.age:.3f}s")

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
