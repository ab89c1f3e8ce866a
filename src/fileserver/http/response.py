"""
=============================================================================
HTTP RESPONSE + SERIALIZER
=============================================================================

Holds a generated response and turns it into the bytes written back to
the client.

=============================================================================
WIRE FORMAT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     SERIALIZED RESPONSE                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTP/1.1 200 OK\n                    ← status line                │
    │   accept-ranges: bytes\n               ← accept-ranges line         │
    │   content-type: text/plain\n                                         │
    │   content-length: 11\r\n                                             │
    │   \r\n                                 ← end of header block        │
    │   hello world                          ← body bytes                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The first three lines end with a bare "\n" while the header block closes
with "\r\n\r\n". Existing clients of this server were written against that
exact layout, so it is the default (LEGACY_LINE_ENDING). Pass
line_ending="\r\n" to emit the standard all-CRLF form instead:

    HTTP/1.1 200 OK\r\n
    accept-ranges: bytes\r\n
    content-type: text/plain\r\n
    content-length: 11\r\n
    \r\n
    hello world

=============================================================================
"""

from dataclasses import dataclass

from .request import Version
from .status_codes import ResponseStatus, AcceptRanges


# Line ending of the status/accept-ranges/content-type lines on the wire
LEGACY_LINE_ENDING = "\n"
STANDARD_LINE_ENDING = "\r\n"


@dataclass
class HTTPResponse:
    """
    A fully generated response.

    Built once per request by one of the generators in
    handlers.static, serialized with to_bytes(), then discarded.

    content_length is derived from the body, so it can never disagree
    with it.
    """

    status: ResponseStatus
    content_type: str
    accept_ranges: AcceptRanges
    body: bytes = b""
    resolved_path: str = ""
    version: Version = Version.V1_1

    @property
    def content_length(self) -> int:
        return len(self.body)

    @property
    def status_line(self) -> str:
        """
        Example: "HTTP/1.1 404 NOT FOUND"
        """
        return f"{self.version} {self.status}"

    def header_block(self, line_ending: str = LEGACY_LINE_ENDING) -> str:
        """Everything before the body, including the closing blank line."""
        return (
            f"{self.status_line}{line_ending}"
            f"{self.accept_ranges}{line_ending}"
            f"content-type: {self.content_type}{line_ending}"
            f"content-length: {self.content_length}\r\n\r\n"
        )

    def to_bytes(self, line_ending: str = LEGACY_LINE_ENDING) -> bytes:
        """
        Serialize for socket.sendall().

        Args:
            line_ending: Terminator of the status, accept-ranges and
                         content-type lines. LEGACY_LINE_ENDING by default.

        Returns:
            Header block followed by the raw body bytes.
        """
        if line_ending not in (LEGACY_LINE_ENDING, STANDARD_LINE_ENDING):
            raise ValueError(f"Unsupported line ending: {line_ending!r}")
        return self.header_block(line_ending).encode("utf-8") + self.body
