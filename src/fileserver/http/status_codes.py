"""
=============================================================================
RESPONSE STATUS AND ACCEPT-RANGES VARIANTS
=============================================================================

The file server only ever answers with two status codes and two
Accept-Ranges values. Each variant knows its exact wire text, so the
serializer never has to format them itself.

    ┌──────────────────────┬───────────────────────────────────────────┐
    │  Variant             │  Wire text                                │
    ├──────────────────────┼───────────────────────────────────────────┤
    │  ResponseStatus.OK   │  200 OK                                   │
    │  ResponseStatus.     │  404 NOT FOUND                            │
    │    NOT_FOUND         │                                           │
    │  AcceptRanges.BYTES  │  accept-ranges: bytes                     │
    │  AcceptRanges.NONE   │  accept-ranges: none                      │
    └──────────────────────┴───────────────────────────────────────────┘

Note the reason phrase for 404 is upper case. Existing clients of this
server match on it, so it is not the RFC phrase "Not Found".

=============================================================================
"""

from enum import Enum, IntEnum


class ResponseStatus(IntEnum):
    """
    Status codes produced by the response generators.

    IntEnum, so the value compares equal to the plain integer:

        >>> ResponseStatus.NOT_FOUND == 404
        True
        >>> str(ResponseStatus.NOT_FOUND)
        '404 NOT FOUND'
    """

    OK = 200
    NOT_FOUND = 404

    @property
    def phrase(self) -> str:
        """Reason phrase as written on the status line."""
        return _PHRASES[self]

    def __str__(self) -> str:
        return f"{self.value} {self.phrase}"

    # IntEnum formats as a bare int inside f-strings otherwise
    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)


_PHRASES = {
    ResponseStatus.OK: "OK",
    ResponseStatus.NOT_FOUND: "NOT FOUND",
}


class AcceptRanges(Enum):
    """Value of the accept-ranges line. Rendering includes the header name."""

    BYTES = "bytes"
    NONE = "none"

    def __str__(self) -> str:
        return f"accept-ranges: {self.value}"
