"""
Run the browser suite with one of the configured profiles.

Usage::

    python run_e2e.py                      # serial profile
    python run_e2e.py --profile parallel   # two workers
    VIDEO=1 python run_e2e.py -- -k edit_match

Anything after ``--`` is passed to pytest unchanged.  The exit code is
pytest's own, so CI can tell failed tests (1) from usage errors (4).
"""

from __future__ import annotations

import argparse
import logging
import sys

import pytest

from config import config, get_config, pytest_args

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the E2E runner."""
    parser = argparse.ArgumentParser(description="Run the pelada E2E browser suite.")
    parser.add_argument(
        "--profile",
        choices=sorted(name for name in config if name != "default"),
        default=None,
        help="Run profile (defaults to $E2E_PROFILE or 'serial')",
    )
    parser.add_argument(
        "--test-dir",
        default=None,
        help="Directory or file to collect instead of the profile's TEST_DIR",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the pytest command line and exit",
    )
    parser.add_argument("pytest_args", nargs=argparse.REMAINDER, help="Extra pytest arguments")
    return parser.parse_args(argv)


def build_command(args: argparse.Namespace) -> list[str]:
    """Combine the profile's arguments with the user's passthrough arguments."""
    config_class = get_config(args.profile)
    extra = [arg for arg in args.pytest_args if arg != "--"]
    return pytest_args(config_class, test_dir=args.test_dir) + extra


def main(argv: list[str] | None = None) -> int:
    """Entry point: build the pytest command line and run it."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = parse_args(argv)
    command = build_command(args)

    if args.dry_run:
        print("pytest " + " ".join(command))
        return 0

    logger.info("Running pytest %s", " ".join(command))
    return int(pytest.main(command))


if __name__ == "__main__":
    sys.exit(main())
