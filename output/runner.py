"""
output/runner.py
Command-line entry point for ScoreLens.

Usage:
    python -m output.runner                                   # First league with fixtures
    python -m output.runner --league E0                       # All upcoming E0 fixtures
    python -m output.runner --league E0 --window 120          # Longer lookback window
    python -m output.runner --league E0 --fixture <id>        # A single fixture
"""

import argparse
import logging
import sys

from config.settings import settings
from data.league_store import LeagueMatchStore
from engine.match_filter import WINDOW_PRESETS
from output.dispatcher import run_pipeline

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="ScoreLens fixture breakdowns")
    parser.add_argument(
        "--league",
        default=None,
        help="League code, alias or name (default: first league with fixtures).",
    )
    parser.add_argument(
        "--fixture",
        default=None,
        help="Fixture id to analyse; omit to analyse every upcoming fixture.",
    )
    parser.add_argument(
        "--window",
        type=int,
        choices=WINDOW_PRESETS,
        default=settings.DEFAULT_WINDOW_DAYS,
        help="Lookback window in days (default: %(default)s).",
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        help="Directory holding league_matches/ and fixtures_index.json.",
    )
    args = parser.parse_args(argv)

    _configure_logging()

    try:
        message = run_pipeline(
            args.league,
            fixture_id=args.fixture,
            window_days=args.window,
            store=LeagueMatchStore(args.data_dir),
        )
    except (ValueError, FileNotFoundError) as exc:
        logger.error("Breakdown failed: %s", exc)
        sys.exit(1)
    print(message)


if __name__ == "__main__":
    main()
