#!/usr/bin/env python3
"""Dev entrypoint for running the API server.

Usage:
    # Serve on the default host/port
    python scripts/serve.py

    # Create tables first (local SQLite / scratch databases)
    python scripts/serve.py --create-tables

    # Auto-reload on code changes
    python scripts/serve.py --reload --port 8080

Environment variables:
    DATABASE_URL: Database URL (required)
    JWT_SECRET: Token signing secret (required)
    JWT_EXPIRATION_HOURS: Token lifetime in hours (default: 8)
    BCRYPT_ROUNDS: bcrypt cost factor (default: 12)
    LOG_LEVEL: Logging level (default: INFO)
"""

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlmodel import SQLModel

from taskforge.config import get_settings
from taskforge.db.session import get_engine
from taskforge.logging_config import configure_logging


def main() -> int:
    """Main entrypoint for the API server."""
    parser = argparse.ArgumentParser(
        description="Run the TaskForge API server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Interface to bind (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port to bind (default: 8080)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before serving",
    )

    # Logging
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    args = parser.parse_args()

    configure_logging(logging.DEBUG if args.verbose else get_settings().LOG_LEVEL)
    logger = logging.getLogger(__name__)

    try:
        get_settings().validate()

        if args.create_tables:
            from taskforge.models import Task, User  # noqa: F401
            SQLModel.metadata.create_all(get_engine())
            logger.info("Database tables ensured")

        uvicorn.run(
            "taskforge.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level="debug" if args.verbose else "info",
        )
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
