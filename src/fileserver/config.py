"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the file server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m fileserver --root ./public                      │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── FILESERVER_ROOT=./public python -m fileserver             │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THE SERVER ROOT
=============================================================================

root_dir is relative to the working directory the process was started
in. It is resolved to an absolute path the first time `server_root` is
read and that value is reused for the life of the config object. Worker
threads only ever read it.

=============================================================================
"""

import os
import logging
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path


VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_LOG_FORMATS = ("text", "json")

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size

    CONTENT
    - root_dir, crlf_headers

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Loopback by default; the server is meant for local use."""

    port: int = 8080

    backlog: int = 128
    """Maximum number of queued connections."""

    buffer_size: int = 1024
    """
    Size of the single recv() per connection in bytes.
    Requests larger than this are truncated, not read in full.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "wwwroot"
    """Directory served to clients, relative to the working directory."""

    crlf_headers: bool = False
    """
    Terminate the status, accept-ranges and content-type lines with CRLF.
    False keeps the bare LF layout existing clients expect.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"

    log_format: str = "text"
    """Access log format: 'text' (combined log style) or 'json'."""

    @cached_property
    def server_root(self) -> Path:
        """Absolute server root. Computed on first access, then fixed."""
        return (Path.cwd() / self.root_dir).resolve()

    @property
    def log_level_number(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.INFO)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        FILESERVER_HOST          Server host (default: 127.0.0.1)
        FILESERVER_PORT          Server port (default: 8080)
        FILESERVER_ROOT          Served directory (default: wwwroot)
        FILESERVER_BUFFER_SIZE   Read buffer in bytes (default: 1024)
        FILESERVER_CRLF_HEADERS  "1"/"true" for all-CRLF responses
        FILESERVER_LOG_LEVEL     Logging level (default: INFO)
        FILESERVER_LOG_FORMAT    text or json (default: text)

        =====================================================================
        """
        return cls(
            host=os.getenv("FILESERVER_HOST", "127.0.0.1"),
            port=int(os.getenv("FILESERVER_PORT", "8080")),
            root_dir=os.getenv("FILESERVER_ROOT", "wwwroot"),
            buffer_size=int(os.getenv("FILESERVER_BUFFER_SIZE", "1024")),
            crlf_headers=os.getenv("FILESERVER_CRLF_HEADERS", "").lower() in _TRUE_VALUES,
            log_level=os.getenv("FILESERVER_LOG_LEVEL", "INFO"),
            log_format=os.getenv("FILESERVER_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values at startup.

        Raises:
            ValueError: On the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 64:
            raise ValueError("buffer_size must be >= 64")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

        if self.log_format not in VALID_LOG_FORMATS:
            raise ValueError(f"Invalid log format: {self.log_format}. Use 'text' or 'json'.")

        if not self.server_root.is_dir():
            raise ValueError(f"Server root directory does not exist: {self.server_root}")
