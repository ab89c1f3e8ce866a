"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Maps a parsed request onto the server root and produces the response:
file bytes, a generated directory listing, or a 404 page.

=============================================================================
RESPONSE STATE MACHINE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    WHAT KIND OF PATH IS IT?                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   request.resource                                                   │
    │         │                                                            │
    │         ▼                                                            │
    │   PathResolver.resolve()   percent-decode, join, contain            │
    │         │                                                            │
    │         ├── regular file ──────► file_response()       200 bytes    │
    │         ├── directory ─────────► directory_response()  200 bytes    │
    │         └── anything else ─────► not_found_response()  404 none     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The three generators share nothing. Filesystem errors (permission
denied, unreadable directory) are NOT turned into error pages: they
propagate to the connection handler, which drops the connection.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    ATTACK ATTEMPT:
    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET /../../etc/passwd HTTP/1.1                                     │
    │  GET /%2e%2e/%2e%2e/etc/passwd HTTP/1.1                             │
    │                                                                      │
    │  Joined naively:  /srv/wwwroot/../../etc/passwd → /etc/passwd       │
    │                                                                      │
    │  Our protection:                                                    │
    │  1. Percent-decode, then join onto the root                         │
    │  2. If it exists, resolve it (follow .. and symlinks)               │
    │  3. The resolved path must be the root or one of its descendants    │
    │  4. If not, serve the root itself instead                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Escapes are clamped to the root rather than answered with 403: the client
simply sees the root listing. Paths that do not exist are never resolved
and fall through to the 404 page.

=============================================================================
"""

import html
import logging
from pathlib import Path
from typing import Union
from urllib.parse import quote, unquote

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from ..http.status_codes import ResponseStatus, AcceptRanges
from ..http.content_types import sniff_content_type, HTML_CONTENT_TYPE


logger = logging.getLogger(__name__)


DIR_BEGIN_HTML = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
</head>
<body>
"""

DIR_END_HTML = """</body>
</html>
"""

NOT_FOUND_HTML = """<html>
<body>
<h1>404 NOT FOUND</h1>
</body>
</html>"""

GO_UP_LINK = '<a href="../">Go back up a directory</a><hr/>'


class PathResolver:
    """
    Confines resource paths to the server root.

    =========================================================================
    CONTAINMENT CHECK
    =========================================================================

    A candidate is accepted only if its canonical form IS the canonical
    root or has it among its parents:

        root       /srv/wwwroot
        sub/a.txt  /srv/wwwroot/sub/a.txt    inside  → served
        ..         /srv                      outside → root served
        link       /srv/wwwroot/link → /etc  outside → root served

    =========================================================================
    """

    def __init__(self, root: Union[str, Path]):
        """
        Args:
            root: Server root directory. Resolved once here; every later
                  comparison uses this canonical form.
        """
        self.root = Path(root).resolve()

    def resolve(self, resource: str) -> Path:
        """
        Map a resource (path without the leading slash) to a filesystem path.

        Returns:
            A path inside the root, the root itself for escape attempts,
            or the unresolved candidate when nothing exists there.

        Raises:
            OSError: If canonicalizing an existing path fails.
        """
        decoded = unquote(resource).lstrip("/")
        candidate = self.root / decoded

        if not self.exists(candidate):
            return candidate

        canonical = candidate.resolve(strict=True)
        if not self.contains(canonical):
            logger.warning(f"Path traversal attempt: {resource!r} resolved outside root")
            return self.root
        return canonical

    @staticmethod
    def exists(path: Path) -> bool:
        """False when the path is missing or cannot be stat'ed, e.g. a name that is too long."""
        try:
            return path.exists()
        except OSError:
            return False

    def contains(self, path: Path) -> bool:
        """True if the canonical `path` is the root or lies beneath it."""
        return path == self.root or self.root in path.parents

    def url_path(self, path: Path) -> str:
        """URL path ("/sub/dir") of a resolved path inside the root."""
        relative = path.relative_to(self.root).as_posix()
        return "/" if relative == "." else "/" + relative


def file_response(path: Path) -> HTTPResponse:
    """Serve a regular file. Read errors propagate."""
    content = path.read_bytes()
    return HTTPResponse(
        status=ResponseStatus.OK,
        content_type=sniff_content_type(content),
        accept_ranges=AcceptRanges.BYTES,
        body=content,
        resolved_path=str(path),
    )


def _is_text(name: str) -> bool:
    # Undecodable bytes come back from the OS as lone surrogates
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def directory_response(path: Path, url_path: str = "/") -> HTTPResponse:
    """
    Generate a directory listing page.

    =====================================================================
    PAGE LAYOUT
    =====================================================================

        <h1>Currently in /srv/wwwroot/sub</h1>
        <a href="../">Go back up a directory</a><hr/>
        <a href="/sub/a.txt">a.txt</a><br/>
        <a href="/sub/my%20notes">my notes</a><br/>

    Links are absolute URL paths built from `url_path`, percent-encoded
    so spaces, "?", "#" and "%" in names survive the round trip. Entries
    whose name is not valid text are skipped.

    =====================================================================

    Args:
        path: Resolved directory path.
        url_path: URL path the directory is served under.

    Raises:
        OSError: If the directory cannot be read.
    """
    base = url_path.rstrip("/")
    links = []

    for entry in sorted(path.iterdir()):
        name = entry.name
        if not _is_text(name):
            logger.debug(f"Skipping undecodable entry in {path}")
            continue
        href = quote(f"{base}/{name}")
        links.append(f'<a href="{href}">{html.escape(name)}</a><br/>\n')

    content = (
        DIR_BEGIN_HTML
        + f"<h1>Currently in {html.escape(str(path))}</h1>\n"
        + GO_UP_LINK + "\n"
        + "".join(links)
        + DIR_END_HTML
    )

    return HTTPResponse(
        status=ResponseStatus.OK,
        content_type=HTML_CONTENT_TYPE,
        accept_ranges=AcceptRanges.BYTES,
        body=content.encode("utf-8"),
        resolved_path=str(path),
    )


def not_found_response(path: Union[str, Path]) -> HTTPResponse:
    """Fixed 404 page."""
    return HTTPResponse(
        status=ResponseStatus.NOT_FOUND,
        content_type=HTML_CONTENT_TYPE,
        accept_ranges=AcceptRanges.NONE,
        body=NOT_FOUND_HTML.encode("utf-8"),
        resolved_path=str(path),
    )


class StaticFileHandler:
    """
    Handler serving everything under one root directory.

    Usage:
        handler = StaticFileHandler("/srv/wwwroot")
        response = handler.handle(parse_request(raw))
        sock.sendall(response.to_bytes())

    The response does not depend on the request method: a POST to a file
    returns the file, just like GET.
    """

    def __init__(self, root_dir: Union[str, Path]):
        self.resolver = PathResolver(root_dir)

        if not self.resolver.root.is_dir():
            raise ValueError(f"Server root directory does not exist: {root_dir}")

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Resolve the request's resource and generate the response.

        Raises:
            OSError: Filesystem failures while resolving or reading.
        """
        path = self.resolver.resolve(request.resource)

        if not self.resolver.exists(path):
            return not_found_response(path)

        if path.is_file():
            return file_response(path)

        if path.is_dir():
            return directory_response(path, self.resolver.url_path(path))

        return not_found_response(path)

