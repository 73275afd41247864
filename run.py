"""
Run script for starting the Live Bridge server.

This script configures and starts the FastAPI server with WebSocket settings
suited to streaming audio between browser clients and the upstream Live API.

Usage:
    python run.py [--port PORT] [--host HOST] [--log-level LEVEL]
"""

import argparse
import os

import uvicorn

from live_bridge.config.logging_config import configure_logging
from live_bridge.config.settings import Settings, load_env_file

load_env_file()


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Start the Live Bridge server"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "8000")),
        help="Port to run the server on (default: 8000 or PORT env var)",
    )
    parser.add_argument(
        "--host",
        default=os.getenv("HOST", "0.0.0.0"),
        help="Host to bind the server to (default: 0.0.0.0 or HOST env var)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO").upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO or LOG_LEVEL env var)",
    )
    return parser.parse_args()


def main():
    """Main entry point for starting the server."""
    args = parse_args()

    # live_bridge.main reads LOG_LEVEL when uvicorn imports it
    os.environ["LOG_LEVEL"] = args.log_level
    logger = configure_logging(args.log_level)
    settings = Settings.from_env()

    # Sessions report the missing credential to each client; warn once here too
    if not settings.has_credential:
        logger.warning(
            "No upstream credential configured: set GEMINI_API_KEY or GEMINI_ACCESS_TOKEN"
        )

    logger.info(f"Starting server on http://{args.host}:{args.port}")
    logger.info(f"Log level: {args.log_level}")
    logger.info(f"Upstream model: {settings.model or 'discovered at connect time'}")

    uvicorn.run(
        "live_bridge.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        http="h11",
        # Disable access logs, we have our own logging
        access_log=False,
        reload=os.getenv("ENV", "production").lower() == "development",
    )


if __name__ == "__main__":
    main()
