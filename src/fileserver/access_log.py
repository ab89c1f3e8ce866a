"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log record per answered request, on the "fileserver.access" logger.

    TEXT (combined log style, default):
        127.0.0.1 - - [19/Oct/2026:10:00:00 +0000] "GET /a.txt HTTP/1.1" 200 11 0.42ms

    JSON (for log aggregators):
        {"client_ip": "127.0.0.1", "method": "GET", "path": "/a.txt", ...}

Dropped connections (parse errors, filesystem faults) are not access
logged; the server logs those as warnings/errors instead.

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Optional

from .http.request import HTTPRequest
from .http.response import HTTPResponse


logger = logging.getLogger("fileserver.access")


@dataclass
class AccessLogEntry:
    """Structured log entry for one request/response exchange."""

    client_ip: str
    method: str
    path: str
    version: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path} {self.version}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


class AccessLogger:
    """
    Formats and emits access log entries.

    Usage:
        access = AccessLogger(log_format="json")
        started = time.perf_counter()
        ...
        access.log(request, response, ("127.0.0.1", 50412), started)
    """

    def __init__(self, log_format: str = "text", level: int = logging.INFO):
        self.log_format = log_format
        self.level = level

    def entry(
        self,
        request: HTTPRequest,
        response: HTTPResponse,
        client_address: tuple[str, int] = ("", 0),
        started: Optional[float] = None,
    ) -> AccessLogEntry:
        duration = (time.perf_counter() - started) * 1000 if started is not None else 0.0
        return AccessLogEntry(
            client_ip=client_address[0] or "-",
            method=request.method.value,
            path=request.resource_path,
            version=str(request.version),
            status_code=int(response.status),
            content_length=response.content_length,
            duration_ms=duration,
            timestamp=datetime.now(timezone.utc).strftime("%d/%b/%Y:%H:%M:%S +0000"),
        )

    def format(self, entry: AccessLogEntry) -> str:
        if self.log_format == "json":
            return entry.to_json()
        return entry.to_text()

    def log(
        self,
        request: HTTPRequest,
        response: HTTPResponse,
        client_address: tuple[str, int] = ("", 0),
        started: Optional[float] = None,
    ) -> AccessLogEntry:
        entry = self.entry(request, response, client_address, started)
        logger.log(self.level, self.format(entry))
        return entry
