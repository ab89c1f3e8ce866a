"""
Request handlers.

    StaticFileHandler   Resolves a request under the server root and
                        returns a file, directory listing or 404 response.
"""

from .static import (
    StaticFileHandler,
    PathResolver,
    file_response,
    directory_response,
    not_found_response,
)

__all__ = [
    "StaticFileHandler",
    "PathResolver",
    "file_response",
    "directory_response",
    "not_found_response",
]
