"""
HTTP protocol layer: request parsing, content sniffing, response
variants and serialization.
"""

from .request import (
    HTTPRequest,
    RequestParser,
    ParsingError,
    Method,
    Version,
    parse_request,
)
from .response import HTTPResponse, LEGACY_LINE_ENDING, STANDARD_LINE_ENDING
from .status_codes import ResponseStatus, AcceptRanges
from .content_types import sniff_content_type, DEFAULT_CONTENT_TYPE, HTML_CONTENT_TYPE

__all__ = [
    "HTTPRequest",
    "RequestParser",
    "ParsingError",
    "Method",
    "Version",
    "parse_request",
    "HTTPResponse",
    "LEGACY_LINE_ENDING",
    "STANDARD_LINE_ENDING",
    "ResponseStatus",
    "AcceptRanges",
    "sniff_content_type",
    "DEFAULT_CONTENT_TYPE",
    "HTML_CONTENT_TYPE",
]
