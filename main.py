# main.py

"""Entry point for the scheduled spot price tracker."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from src.config.logging_config import setup_logging
from src.config.settings import TrackerConfig

logger = logging.getLogger("spot_tracker.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the scheduled task."""
    parser = argparse.ArgumentParser(
        prog="spot_tracker",
        description="Azure spot price sampler and history keeper.",
    )
    parser.add_argument(
        "--aggregate",
        action="store_true",
        default=False,
        help="Rebuild the per-region summary instead of collecting.",
    )
    parser.add_argument(
        "-i",
        "--input",
        default=None,
        dest="input_path",
        help="Raw dataset file for --aggregate (default: data/price-logs.json).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        dest="output_path",
        help="Summary file for --aggregate (default: docs/price-data.json).",
    )
    return parser


def _run_collection() -> int:
    """Collect one run record and persist it."""
    from src.cli.runner import run_collection

    return asyncio.run(run_collection(TrackerConfig.from_env()))


def _run_aggregate(args: argparse.Namespace) -> int:
    """Rebuild the dashboard summary."""
    from src.cli.runner import run_aggregate

    return run_aggregate(
        Path(args.input_path) if args.input_path else None,
        Path(args.output_path) if args.output_path else None,
    )


def main(argv: list[str] | None = None) -> None:
    """Dispatch one scheduled invocation and exit with its status."""
    log_file = setup_logging()
    logger.info("spot_tracker starting, log file: %s", log_file)

    args = _build_parser().parse_args(argv)

    try:
        if args.aggregate:
            exit_code = _run_aggregate(args)
        else:
            exit_code = _run_collection()
    except Exception:
        logger.critical("Unhandled error, aborting run", exc_info=True)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
