"""
=============================================================================
MINIHTTP CLI ENTRY POINT
=============================================================================

Command-line interface for running the server.

=============================================================================
USAGE
=============================================================================

    # Serve the bundled site on localhost:3000
    python -m minihttp

    # Custom port, all interfaces
    python -m minihttp --host 0.0.0.0 --port 8000

    # Your own pages and dataset
    python -m minihttp --public ./public --data ./data

    # JSON access log
    python -m minihttp --log-format json

=============================================================================
CONFIGURATION PRECEDENCE
=============================================================================

    defaults  <  environment (HTTP_*, PUBLIC_PATH, DATA_PATH)  <  CLI flags

Flags that are not given leave the environment value in place.

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import LOG_FORMATS, LOG_LEVELS, ConfigurationError, ServerConfig
from .middleware import LoggingMiddleware
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser. Every option defaults to None (not given)."""
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal HTTP/1.1 server for static pages and a JSON dataset",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m minihttp                          # Run with defaults
  python -m minihttp --port 8000              # Custom port
  python -m minihttp --host 0.0.0.0           # Listen on all interfaces
  python -m minihttp --public ./public        # Serve your own pages
  python -m minihttp --log-format json        # Structured access log
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for containers)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        help="Port to listen on (default: 3000)"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        help="Number of worker threads (default: 4)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--public",
        help="Static asset root (default: PUBLIC_PATH or the bundled pages)"
    )

    parser.add_argument(
        "--data",
        help="Dataset root holding characters.json (default: DATA_PATH or bundled)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}"
    )

    return parser


def build_config(args: argparse.Namespace) -> ServerConfig:
    """
    Start from the environment and apply the flags that were given.

    Raises:
        ConfigurationError: If an environment variable is malformed.
    """
    config = ServerConfig.from_env()

    overrides = {
        "host": args.host,
        "port": args.port,
        "workers": args.workers,
        "public_dir": args.public,
        "data_dir": args.data,
        "log_level": args.log_level,
        "log_format": args.log_format,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status: 0 after a clean shutdown, 1 on startup errors.
    """
    args = build_parser().parse_args(argv)

    try:
        config = build_config(args)
        server = HTTPServer(config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    # Access logging is always on
    server.use(LoggingMiddleware(log_format=config.log_format))

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
