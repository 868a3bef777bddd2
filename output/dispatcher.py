"""
output/dispatcher.py
Main output dispatcher for ScoreLens.

Orchestrates a breakdown run:
  1. Resolve the league and lookback window
  2. Load the league's match snapshot and fixtures
  3. Pick the fixture(s): one by id, or the next upcoming ones
  4. Generate predictions
  5. Polish them into a text report
"""

import logging
from datetime import date, datetime
from typing import List, Optional

import pytz

from config.settings import settings
from data.league_store import LeagueMatchStore
from engine.match_filter import validate_window
from engine.polisher import polish_all
from engine.predictor import predict_all
from engine.records import FixtureDescriptor
from leagues.english import resolve_league

logger = logging.getLogger(__name__)

NO_FIXTURES_AVAILABLE = "No fixtures available for any league."


def local_today(timezone: Optional[str] = None) -> date:
    """Today's date in *timezone* (defaults to settings.TIMEZONE)."""
    tz = pytz.timezone(timezone or settings.TIMEZONE)
    return datetime.now(tz).date()


def upcoming_fixtures(
    fixtures: List[FixtureDescriptor],
    today: date,
    limit: Optional[int] = None,
) -> List[FixtureDescriptor]:
    """Dated fixtures on or after *today*, earliest first, capped at *limit*."""
    upcoming = sorted(
        (f for f in fixtures if f.fixture_date is not None and f.fixture_date >= today),
        key=lambda f: f.fixture_date,
    )
    if limit is not None:
        upcoming = upcoming[:limit]
    return upcoming


def default_league(store: LeagueMatchStore) -> Optional[str]:
    """First configured league whose fixture list is not empty."""
    for code in settings.LEAGUE_CODES:
        if store.get_fixtures(code):
            return code
    return None


def run_pipeline(
    league: Optional[str] = None,
    fixture_id: Optional[str] = None,
    window_days: Optional[int] = None,
    store: Optional[LeagueMatchStore] = None,
    today: Optional[date] = None,
) -> str:
    """
    Execute the breakdown pipeline and return the polished report.

    Args:
        league: League code, alias or name. Defaults to the first league
            with fixtures.
        fixture_id: Predict only this fixture; otherwise every upcoming one.
        window_days: Lookback window preset. Defaults to settings.DEFAULT_WINDOW_DAYS.
        store: League data store (a new one over settings.LEAGUE_DATA_DIR if omitted).
        today: Reference date for "upcoming"; defaults to today in settings.TIMEZONE.

    Returns:
        The report text.

    Raises:
        ValueError: for an unknown league, fixture id or window.
    """
    window = validate_window(window_days or settings.DEFAULT_WINDOW_DAYS)
    store = store or LeagueMatchStore()

    if league is None:
        league = default_league(store)
        if league is None:
            logger.warning("No league has fixtures.")
            return NO_FIXTURES_AVAILABLE
    league_info = resolve_league(league)
    code = league_info["code"]

    logger.info("=== ScoreLens run starting (%s, %d days) ===", league_info["name"], window)

    if fixture_id:
        fixtures = [store.find_fixture(code, fixture_id)]
    else:
        fixtures = upcoming_fixtures(
            list(store.get_fixtures(code)),
            today or local_today(),
            limit=settings.UPCOMING_LIMIT,
        )
    logger.info("Found %d fixtures", len(fixtures))

    if not fixtures:
        logger.warning("No upcoming fixtures for %s.", code)
        return polish_all([])

    breakdowns = predict_all(
        {code: store.get_matches(code)},
        fixtures,
        window,
        top_n=settings.TOP_SCORES,
        window_for=store.get_window,
    )

    logger.info("Generated %d breakdowns", len(breakdowns))
    message = polish_all(breakdowns)
    logger.info("=== ScoreLens run complete ===")
    return message
