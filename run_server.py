#!/usr/bin/env python3
"""
Startup script for the Signal Relay server
"""

from argparse import ArgumentParser

import uvicorn
import logging
from app.core.settings import get_settings


def parse_args(settings):
    parser = ArgumentParser(description="Two-party WebSocket signaling relay")
    parser.add_argument(
        "--host", type=str, default=settings.host, help="The host address to bind the server to."
    )
    parser.add_argument(
        "--port", type=int, default=settings.port, help="The port number to bind the server to."
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        default=settings.reload,
        help="Reload the server when source files change (development only).",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=settings.log_level.upper(),
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level for the relay and uvicorn.",
    )
    return parser.parse_args()


if __name__ == "__main__":
    # Get settings
    settings = get_settings()
    args = parse_args(settings)

    # Configure logging
    logging.basicConfig(level=getattr(logging, args.log_level))
    logger = logging.getLogger(__name__)

    logger.info(f"Starting {settings.app_name} server...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Host: {args.host}:{args.port}")

    # Run the server
    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
        access_log=True
    )
