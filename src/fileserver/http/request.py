"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses a raw request buffer into a structured HTTPRequest.

Only a small subset of HTTP/1.1 is understood: the request line, header
lines and, for POST, a body. HTTP/2 is recognised by its version token on
the request line only (no framing).

=============================================================================
REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     WHAT THE PARSER LOOKS AT                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   POST /upload/notes.txt HTTP/1.1\r\n      ← first line             │
    │   ─┬── ─────────┬─────── ───┬────                                   │
    │    │            │           │                                        │
    │  Method     Resource     Version                                     │
    │                                                                      │
    │   Host: localhost:8080\r\n                 ← header lines           │
    │   Content-Length: 5\r\n                                              │
    │   \r\n                                     ← first blank line       │
    │   hello                                    ← body (POST only)       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING RULES
=============================================================================

Each component is parsed on its own and re-scans the first line. This
keeps the rules independent of each other:

    METHOD     First token. GET and POST are recognised, anything else
               becomes Method.UNINITIALIZED. Never an error.

    RESOURCE   Text between the first "/" and the next whitespace, with the
               "/" put back in front. No trailing whitespace (or no "/" at
               all) means the root "/".

    VERSION    First whitespace token equal to HTTP/1.1, HTTP/2 or
               HTTP/2.0. If none matches, the error names the offending
               token.

    HEADERS    "Name: Value" lines after the first line, up to the first
               blank line. Split on the first colon, both sides trimmed.
               A repeated name overwrites the earlier value.

    BODY       POST only: everything after the first "\r\n\r\n".

The only structural failure is a buffer without any "\r\n" at all.

=============================================================================
"""

import re
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Union


logger = logging.getLogger(__name__)


CRLF = "\r\n"
HEADER_TERMINATOR = "\r\n\r\n"


class ParsingError(Exception):
    """
    Raised when a request buffer is structurally malformed.

    Two situations trigger it: the buffer has no line terminator at all,
    or the request line carries no recognisable HTTP version. The
    connection handler logs it and drops the connection without a response.
    """


class Method(Enum):
    """Request methods the server distinguishes."""

    GET = "GET"
    POST = "POST"
    UNINITIALIZED = "UNINITIALIZED"


class Version(Enum):
    """
    Protocol versions recognised on the request line.

    str() gives the wire text used on the response status line:

        >>> str(Version.V2_0)
        'HTTP/2'
    """

    V1_1 = "HTTP/1.1"
    V2_0 = "HTTP/2"

    def __str__(self) -> str:
        return self.value


# Version tokens accepted on the request line
VERSION_TOKENS = {
    "HTTP/1.1": Version.V1_1,
    "HTTP/2": Version.V2_0,
    "HTTP/2.0": Version.V2_0,
}


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request.

    Built once per inbound buffer and never modified afterwards.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:         Method.GET, Method.POST or Method.UNINITIALIZED

        resource_path:  Requested path, always starting with "/".
                        Still percent-encoded: "/my%20file.txt"

        version:        Version.V1_1 or Version.V2_0

        headers:        Trimmed name → trimmed value, names as sent.
                        Use get_header() for case-insensitive lookup.

        body:           POST body as text (lossy for non UTF-8 input).
                        Empty for every other method.

        raw_body:       POST body as the exact bytes received.

    =========================================================================
    """

    method: Method
    resource_path: str = "/"
    version: Version = Version.V1_1
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    raw_body: bytes = field(default=b"", repr=False)

    @property
    def resource(self) -> str:
        """Resource path without its leading slash, as handed to the resolver."""
        return self.resource_path[1:]

    @property
    def content_length(self) -> int:
        """Content-Length header as an int, 0 if missing or invalid."""
        try:
            return int(self.get_header("content-length", "0"))
        except ValueError:
            return 0

    def get_header(self, name: str, default: str = "") -> str:
        """
        Look up a header ignoring case.

        Headers are stored with the name exactly as the client sent it, so
        "Host" and "host" are different keys in `headers`. This helper
        matches either.
        """
        if name in self.headers:
            return self.headers[name]

        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default


def _first_line(text: str, what: str) -> str:
    """Return the text before the first CRLF, or fail naming the component."""
    line, sep, _ = text.partition(CRLF)
    if not sep:
        raise ParsingError(f"parsing {what}: Invalid http header")
    return line


def parse_method(text: str) -> Method:
    """
    Parse the method token of the first line.

    Unknown tokens, and a first line without any space, give
    Method.UNINITIALIZED rather than an error.
    """
    line = _first_line(text, "method")

    token, sep, _ = line.partition(" ")
    if not sep:
        return Method.UNINITIALIZED

    if token == "GET":
        return Method.GET
    if token == "POST":
        return Method.POST
    return Method.UNINITIALIZED


_WHITESPACE = re.compile(r"\s")


def parse_resource(text: str) -> str:
    """
    Parse the resource path of the first line.

    Examples:
        "GET /docs/a.txt HTTP/1.1\\r\\n"  → "/docs/a.txt"
        "GET / HTTP/1.1\\r\\n"            → "/"
        "GET /docs\\r\\n"                 → "/"   (no trailing whitespace)
    """
    line = _first_line(text, "route")

    _, slash, rest = line.partition("/")
    if not slash:
        return "/"

    parts = _WHITESPACE.split(rest, maxsplit=1)
    if len(parts) < 2:
        return "/"
    return "/" + parts[0]


def parse_version(text: str) -> Version:
    """
    Parse the protocol version of the first line.

    Tokens are scanned left to right and the first recognised version wins,
    so the method and path tokens in front of it are simply skipped. When
    nothing matches, the error names the last token that was tried.

    Raises:
        ParsingError: No CRLF, empty first line, or no version token.
    """
    line = _first_line(text, "version")

    offending = ""
    for token in line.split():
        version = VERSION_TOKENS.get(token)
        if version is not None:
            return version
        offending = token

    if offending:
        raise ParsingError(f"Unknown HTTP version: {offending} in {line}")
    raise ParsingError("parsing version: Invalid http header")


def parse_headers(text: str) -> Dict[str, str]:
    """
    Parse header lines into a dict.

    Parsing stops at the first empty line. Lines without a colon are
    skipped. Later duplicates overwrite earlier ones:

        "A: 1\\r\\nA: 2\\r\\n\\r\\n"  → {"A": "2"}
    """
    _, sep, rest = text.partition(CRLF)
    if not sep:
        raise ParsingError("parsing headers: Invalid http header")

    headers: Dict[str, str] = {}
    for line in rest.split(CRLF):
        if not line:
            break

        name, colon, value = line.partition(":")
        if not colon:
            continue
        headers[name.strip()] = value.strip()

    return headers


def parse_body(text: str, method: Method) -> str:
    """Return the POST body, or an empty string for any other method."""
    if method is not Method.POST:
        return ""
    _, sep, body = text.partition(HEADER_TERMINATOR)
    return body if sep else ""


class RequestParser:
    """
    Parses raw request buffers into HTTPRequest objects.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        raw bytes
            │
            ▼
        decode as UTF-8 (invalid sequences replaced)
            │
            ├──► parse_method()    ─┐
            ├──► parse_resource()   │  each one re-reads the first line
            ├──► parse_version()    │
            ├──► parse_headers()   ─┘
            └──► parse_body()      only for POST
            │
            ▼
        HTTPRequest

    The text body is lossy for non UTF-8 payloads, so the POST body is also
    cut from the received bytes and kept in `raw_body`.

    ==========================================================================
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def parse(self, data: Union[bytes, str]) -> HTTPRequest:
        """
        Parse a request buffer.

        Args:
            data: The bytes read from the socket (or already decoded text).

        Returns:
            The parsed HTTPRequest.

        Raises:
            ParsingError: If the buffer is structurally malformed.
        """
        if isinstance(data, str):
            text = data
        else:
            text = data.decode(self.encoding, errors="replace")

        method = parse_method(text)
        resource_path = parse_resource(text)
        version = parse_version(text)
        headers = parse_headers(text)
        body = parse_body(text, method)

        if method is Method.POST and isinstance(data, (bytes, bytearray)):
            _, sep, raw_body = bytes(data).partition(HEADER_TERMINATOR.encode("ascii"))
            raw_body = raw_body if sep else b""
        else:
            raw_body = body.encode(self.encoding, errors="replace")

        logger.debug(f"Parsed {method.value} {resource_path} {version}")

        return HTTPRequest(
            method=method,
            resource_path=resource_path,
            version=version,
            headers=headers,
            body=body,
            raw_body=raw_body,
        )


def parse_request(data: Union[bytes, str]) -> HTTPRequest:
    """
    Convenience function to parse a request in one call.

    Example:
        request = parse_request(b"GET / HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n")
        request.resource_path  # "/"
    """
    return RequestParser().parse(data)
