"""
Command line entry point.

    python -m pharmapulse [--host HOST] [--port PORT] [--log-level LEVEL]
"""

import argparse
import logging

from .config import Settings


def main(argv=None):
    """Run the PharmaPulse HTTP API server."""
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="PharmaPulse HTTP API Server")
    parser.add_argument("--host", default=settings.host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to bind to")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Logging level",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    from .api.server import run_api_server

    run_api_server(host=args.host, port=args.port, log_level=args.log_level, settings=settings)


if __name__ == "__main__":
    main()
