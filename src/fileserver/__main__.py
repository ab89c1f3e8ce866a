"""
=============================================================================
COMMAND LINE INTERFACE
=============================================================================

    python -m fileserver [OPTIONS]

Defaults come from the FILESERVER_* environment variables (see config.py),
and command-line flags override them.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig, VALID_LOG_LEVELS, VALID_LOG_FORMATS
from .server import create_server


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fileserver",
        description="Serve files and directory listings from a root directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m fileserver                      # Serve ./wwwroot on 127.0.0.1:8080
  python -m fileserver --root ./public      # Serve another directory
  python -m fileserver --port 3000          # Custom port
  python -m fileserver --crlf               # Standard CRLF response headers
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})",
    )
    parser.add_argument(
        "--buffer-size",
        type=int,
        default=defaults.buffer_size,
        help=f"Bytes read per request; larger requests are truncated (default: {defaults.buffer_size})",
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.root_dir,
        help=f"Directory to serve, relative to the working directory (default: {defaults.root_dir})",
    )
    parser.add_argument(
        "--crlf",
        action="store_true",
        default=defaults.crlf_headers,
        help="End every response header line with CRLF",
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=VALID_LOG_LEVELS,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})",
    )
    parser.add_argument(
        "--log-format",
        choices=VALID_LOG_FORMATS,
        default=defaults.log_format,
        help=f"Access log format (default: {defaults.log_format})",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"fileserver {__version__}",
    )
    return parser


def config_from_args(argv=None) -> ServerConfig:
    """Build a ServerConfig from the environment, then the command line."""
    defaults = ServerConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    return ServerConfig(
        host=args.host,
        port=args.port,
        buffer_size=args.buffer_size,
        root_dir=args.root,
        crlf_headers=args.crlf,
        log_level=args.log_level,
        log_format=args.log_format,
    )


def main(argv=None):
    config = config_from_args(argv)

    try:
        server = create_server(config)
        print(f"Server is running: http://{config.host}:{config.port}")
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
