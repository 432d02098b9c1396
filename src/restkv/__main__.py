"""
=============================================================================
RESTKV CLI ENTRY POINT
=============================================================================

    # Listen on :8080 (all interfaces)
    python -m restkv

    # Loopback only, custom port
    python -m restkv --addr 127.0.0.1:9000

    # JSON access log, debug output
    python -m restkv --log-format json --log-level DEBUG

Settings come from, highest priority first: command-line flags, RESTKV_*
environment variables, ServerConfig defaults.

If the address cannot be bound the process logs the reason and exits
with status 1. There is no retry. An invalid setting, from a flag or from
the environment, exits with status 2.

=============================================================================
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import Optional, Sequence

from . import __version__
from .config import ServerConfig
from .server import create_app

logger = logging.getLogger("restkv")


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="restkv",
        description="In-memory key-value store over HTTP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Endpoints:
  GET  /list               every entry
  GET  /entry/<key>        one entry
  PUT  /entry/<key>/<val>  create or overwrite an entry
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--addr", "-a",
        default=defaults.addr,
        help=f"Listen address host:port (default: {defaults.addr})"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=defaults.max_workers,
        help=f"Maximum worker threads (default: {defaults.max_workers})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help="Logging level (default: %(default)s)"
    )

    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=defaults.log_format,
        help="Access log format (default: %(default)s)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"restkv {__version__}"
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Parse arguments, build the service and serve until interrupted."""
    try:
        defaults = ServerConfig.from_env()
        args = build_parser(defaults).parse_args(argv)

        config = replace(
            defaults,
            addr=args.addr,
            min_workers=min(defaults.min_workers, args.workers),
            max_workers=args.workers,
            log_level=args.log_level,
            log_format=args.log_format,
        )
        server = create_app(config)
    except ValueError as e:
        logger.critical(f"Invalid configuration: {e}")
        sys.exit(2)

    try:
        server.run()
    except OSError as e:
        logger.critical(f"Cannot listen on {config.addr}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
