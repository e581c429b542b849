"""
=============================================================================
STATIC SERVER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:8080
    staticserver

    # Serve ./dist on all interfaces, port 3000
    staticserver ./dist --host 0.0.0.0 --port 3000

    # Same thing as a module
    python -m staticserver ./dist --port 3000

    # Different index page, JSON access log
    staticserver ./site --index app.html --log-format json

Environment variables (STATIC_PORT, STATIC_ROOT, ...; see
ServerConfig.from_env) supply the defaults; command-line options win.

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .server import HTTPServer
from .config import ServerConfig, LOG_FORMATS
from .middleware import LoggingMiddleware


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Create the argument parser, with defaults taken from `defaults`."""
    parser = argparse.ArgumentParser(
        prog="staticserver",
        description="Serve a directory over HTTP/1.1 with range and conditional requests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  staticserver                           # Serve . on 127.0.0.1:8080
  staticserver ./public --port 3000      # Custom root and port
  staticserver ./dist --host 0.0.0.0     # Listen on all interfaces
  staticserver ./app --index shell.html  # Custom fallback page
        """
    )

    parser.add_argument(
        "root",
        nargs="?",
        default=defaults.root_dir,
        help=f"Directory to serve (default: {defaults.root_dir})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host}, use 0.0.0.0 for containers)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # SERVING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--index", "-i",
        default=defaults.index_file,
        help=f"Page served for directories and unknown paths (default: {defaults.index_file})"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=defaults.max_workers,
        help=f"Maximum worker threads (default: {defaults.max_workers})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level.upper()})"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=defaults.log_format,
        help=f"Access log format (default: {defaults.log_format})"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"staticserver {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace, defaults: ServerConfig) -> ServerConfig:
    """Overlay parsed arguments on the environment-derived defaults."""
    return ServerConfig(
        host=args.host,
        port=args.port,
        root_dir=args.root,
        index_file=args.index,
        chunk_size=defaults.chunk_size,
        timeout=defaults.timeout,
        min_workers=min(defaults.min_workers, args.workers),
        max_workers=args.workers,
        log_level=args.log_level,
        log_format=args.log_format,
    )


def main(argv: Optional[Sequence[str]] = None):
    """
    Parse arguments, build the server and run it until stopped.

    Exits with status 1 on invalid configuration or a startup failure
    (e.g. the port is taken).
    """
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid environment configuration: {e}", file=sys.stderr)
        sys.exit(1)

    args = build_parser(defaults).parse_args(argv)
    config = config_from_args(args, defaults)

    try:
        server = HTTPServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    server.use(LoggingMiddleware(log_format=config.log_format))

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
