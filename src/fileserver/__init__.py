"""
=============================================================================
FILESERVER - Minimal Static File Server
=============================================================================

Serves the files and directory listings under one root directory over
plain TCP sockets.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         COMPONENTS                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   http.request        raw bytes → HTTPRequest                       │
    │   handlers.static     PathResolver (traversal guard) and the        │
    │                       file / directory / 404 generators             │
    │   http.content_types  magic-number content sniffing                 │
    │   http.response       HTTPResponse → wire bytes                     │
    │   core                listening socket, per-client connection       │
    │   server              thread per connection, error handling         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

QUICK START

    python -m fileserver --root ./wwwroot --port 8080

    from fileserver import FileServer, ServerConfig
    FileServer(ServerConfig(root_dir="./wwwroot")).run()

=============================================================================
"""

from .config import ServerConfig
from .server import FileServer, create_server
from .handlers import StaticFileHandler, PathResolver
from .http import (
    HTTPRequest,
    HTTPResponse,
    RequestParser,
    ParsingError,
    Method,
    Version,
    ResponseStatus,
    AcceptRanges,
    parse_request,
    sniff_content_type,
)

__version__ = "1.0.0"

__all__ = [
    "ServerConfig",
    "FileServer",
    "create_server",
    "StaticFileHandler",
    "PathResolver",
    "HTTPRequest",
    "HTTPResponse",
    "RequestParser",
    "ParsingError",
    "Method",
    "Version",
    "ResponseStatus",
    "AcceptRanges",
    "parse_request",
    "sniff_content_type",
]
