"""
Command line entry point.

Usage:
    feed-sheet-sync config/feed.json [--log-level INFO] [--log-to-file] [--dry-run]
"""

import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from .core.config_loader import load_config
from .core.sync import FeedSheetSync
from .exceptions import RemoteOperationError
from .utils.logging_utils import setup_logging

USAGE = "Pass config path: feed-sheet-sync config/feed.json"


def load_environment():
    """Load environment variables based on the current environment."""
    env = os.environ.get("ENVIRONMENT", "development").lower()

    env_file = Path(f"config/.env.{env}")
    if env_file.exists():
        logging.info(f"📄 Loading environment from {env_file}")
        load_dotenv(env_file)
        return

    for env_path in [Path("config/.env"), Path(".env")]:
        if env_path.exists():
            logging.info(f"📄 Loading environment from {env_path}")
            load_dotenv(env_path)
            return

    logging.debug("No .env file found. Using environment variables.")


def build_parser():
    parser = argparse.ArgumentParser(description="Sync a YML product feed into Google Sheets")
    parser.add_argument("config", nargs="?", help="Path to the feed configuration (JSON or YAML)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Set the logging level"
    )
    parser.add_argument(
        "--log-to-file",
        action="store_true",
        help="Log to file in addition to console"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and transform the feed without touching Google Sheets"
    )
    return parser


def report_failure(error: Exception):
    logging.error(f"Update failed: {error}")
    if isinstance(error, RemoteOperationError):
        if error.status_code is not None:
            logging.error(f"Response status: {error.status_code}")
        if error.body:
            logging.error(f"Response data: {error.body}")
    logging.debug("Exception details:", exc_info=True)


def main(argv=None):
    """Run one synchronization and return the process exit code."""
    args = build_parser().parse_args(argv)
    setup_logging(log_level=getattr(logging, args.log_level), log_to_file=args.log_to_file)

    if not args.config:
        logging.error(USAGE)
        return 1

    load_environment()
    start_time = datetime.now()

    try:
        config = load_config(args.config)
        result = FeedSheetSync(config).run(dry_run=args.dry_run)
    except KeyboardInterrupt:
        logging.warning("Sync interrupted by user")
        return 130
    except Exception as e:
        report_failure(e)
        return 1

    elapsed_seconds = (datetime.now() - start_time).total_seconds()
    logging.info(f"Total runtime: {elapsed_seconds:.2f} seconds")

    if result["dry_run"]:
        logging.info("DRY RUN COMPLETED: No changes were made to Google Sheets")
    else:
        logging.info(
            f"Service {config.name or args.config}: updated sheet \"{config.sheet_name}\" "
            f"with {result['count']} offers, {result['columns']} columns."
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
