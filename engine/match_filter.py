"""
engine/match_filter.py
Selects the historical matches that fall inside a fixture's lookback window.
"""

import logging
from datetime import date, timedelta
from typing import Any, Iterable, Tuple

from engine.records import MatchRecord, parse_date

logger = logging.getLogger(__name__)

# Lookback windows (days) offered to callers
WINDOW_PRESETS: Tuple[int, ...] = (60, 90, 120, 150)


def validate_window(window_days: Any) -> int:
    """Return *window_days* as an int, raising ValueError if it is not a preset."""
    try:
        days = int(window_days)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid lookback window: {window_days!r}")
    if days not in WINDOW_PRESETS:
        presets = ", ".join(str(p) for p in WINDOW_PRESETS)
        raise ValueError(f"Unsupported lookback window {days}. Choose one of: {presets}")
    return days


def filter_matches(
    matches: Iterable[MatchRecord],
    fixture_date: Any,
    window_days: int,
) -> Tuple[MatchRecord, ...]:
    """
    Return the matches dated in ``[fixture_date - window_days, fixture_date)``.

    The fixture date itself is excluded so a fixture that has already been
    played never feeds its own prediction. An absent or unparseable fixture
    date yields an empty tuple rather than an error.

    Args:
        matches: League match records (any order).
        fixture_date: ``date`` or date string of the fixture.
        window_days: Length of the lookback window in days.

    Returns:
        Tuple of matching records, in input order.
    """
    end = parse_date(fixture_date)
    if end is None:
        logger.debug("No usable fixture date (%r); window is empty.", fixture_date)
        return ()

    start: date = end - timedelta(days=window_days)
    selected = tuple(
        m for m in matches
        if m.match_date is not None and start <= m.match_date < end
    )
    logger.debug(
        "Window %s..%s (%d days): %d matches",
        start.isoformat(),
        end.isoformat(),
        window_days,
        len(selected),
    )
    return selected
