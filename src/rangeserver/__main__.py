"""
=============================================================================
RANGESERVER CLI ENTRY POINT
=============================================================================

    # Run with defaults (0.0.0.0:8080, ./content)
    python -m rangeserver

    # Custom port (positional, like the classic `server 8080`)
    python -m rangeserver 3000

    # Serve another directory, refuse out-of-file ranges
    python -m rangeserver --root /srv/videos --strict-ranges

    # Cap concurrent connections, JSON access log
    python -m rangeserver --max-connections 200 --log-format json

Settings come from, highest priority first: these arguments, RANGE_*
environment variables (see ServerConfig.from_env), then defaults.

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import ServerConfig
from .server import FileServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rangeserver",
        description="Static file server with HTTP byte-range support",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m rangeserver                        # Run with defaults
  python -m rangeserver 3000                   # Custom port
  python -m rangeserver --root ./videos        # Serve another directory
  python -m rangeserver --max-connections 200  # Admission limit
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "port",
        nargs="?",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 0.0.0.0)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Per-request read/write deadline in seconds (default: 30)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Directory to serve files from (default: ./content)"
    )

    parser.add_argument(
        "--no-confine",
        action="store_true",
        help="Join request paths verbatim, allowing '..' to leave the root"
    )

    parser.add_argument(
        "--strict-ranges",
        action="store_true",
        help="Answer 416 for ranges past end of file instead of a short body"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY / LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--max-connections", "-m",
        type=int,
        default=None,
        help="Answer 503 above this many concurrent connections (default: unbounded)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"rangeserver {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment-based config with every given CLI argument applied on top."""
    config = ServerConfig.from_env()

    if args.port is not None:
        config.port = args.port
    if args.host is not None:
        config.host = args.host
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.root is not None:
        config.content_root = args.root
    if args.no_confine:
        config.confine_to_root = False
    if args.strict_ranges:
        config.strict_ranges = True
    if args.max_connections is not None:
        config.max_connections = args.max_connections
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format

    return config


def main(argv: Optional[Sequence[str]] = None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = FileServer(config)
        server.run()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
