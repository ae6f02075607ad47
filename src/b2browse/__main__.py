"""b2browse entry point."""

import argparse
import logging

from b2browse import __version__
from b2browse.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Serve directory listings for a Backblaze B2 bucket",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  b2browse                           Listen on 127.0.0.1:8080
  b2browse --host 0.0.0.0 --port 80  Listen on all interfaces
  b2browse --dev                     Auto-reload with debug logging
""",
    )
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind")
    parser.add_argument("--port", "-p", type=int, default=8080, help="Port to bind")
    parser.add_argument("--dev", action="store_true", help="Auto-reload on code changes")
    parser.add_argument("--log-level", default="INFO", help="Root log level")
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args()

    setup_logging(level="DEBUG" if args.dev else args.log_level)

    from b2browse.app import run_server

    logger.info("Starting b2browse on %s:%d", args.host, args.port)
    run_server(host=args.host, port=args.port, dev=args.dev)


if __name__ == "__main__":
    main()
