# main.py

"""Entry point for the gold_watch service (scheduler or one-off CLI)."""

import argparse
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("gold_watch.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    hours = ", ".join(f"{h:02d}:00" for h in Settings.SCHEDULE_HOURS)

    parser = argparse.ArgumentParser(
        prog="gold_watch",
        description="Vietnamese gold price tracker with chat notifications.",
        epilog=f"Scheduled runs: {hours} (local time)",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help=f"Path to config.json (default: {Settings.CONFIG_PATH}).",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        default=False,
        help="Run a single cycle now and exit.",
    )
    parser.add_argument(
        "--history",
        action="store_true",
        default=False,
        help="Print stored price history and exit.",
    )
    parser.add_argument(
        "-i",
        "--instrument",
        default=None,
        help="Limit --history to one gold type.",
    )
    parser.add_argument(
        "-n",
        "--limit",
        type=int,
        default=20,
        help="Rows to show with --history (default: 20).",
    )
    return parser


def main() -> None:
    """Route to the scheduler loop, a single cycle, or history output."""
    log_file = setup_logging()
    logger.info("gold_watch starting — log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    from src.cli.runner import (
        run_history,
        run_scheduler,
        run_single_cycle,
    )

    if args.history:
        exit_code = run_history(args.instrument, args.limit)
    elif args.once:
        exit_code = run_single_cycle(args.config)
    else:
        exit_code = run_scheduler(args.config)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
