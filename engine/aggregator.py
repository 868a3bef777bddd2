"""
engine/aggregator.py
Reduces a set of match records into per-metric averages and result totals.

The same code path serves team form (filtered to a home or away role) and the
league baseline (no filter), so the figures are directly comparable.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from engine.records import RESULT_AWAY, RESULT_DRAW, RESULT_HOME, MatchRecord

logger = logging.getLogger(__name__)

# Metric name -> MatchRecord attribute; order is the display order
METRICS: Tuple[str, ...] = (
    "home_goals",
    "home_shots",
    "home_sot",
    "away_goals",
    "away_shots",
    "away_sot",
    "odds_home",
    "odds_draw",
    "odds_away",
    "odds_over25",
    "odds_under25",
)

GOALS_LINE = 2.5


@dataclass(frozen=True)
class AggregateTotals:
    games_played: int = 0
    home_wins: int = 0
    draws: int = 0
    away_wins: int = 0
    over_2_5: int = 0
    under_2_5: int = 0


@dataclass(frozen=True)
class AggregateResult:
    """Averages (None when no match supplied the value) plus result totals."""

    averages: Dict[str, Optional[float]] = field(default_factory=dict)
    totals: AggregateTotals = field(default_factory=AggregateTotals)

    def get(self, metric: str) -> Optional[float]:
        return self.averages.get(metric)


@dataclass(frozen=True)
class LeagueCombined:
    """League averages per team, flattening home and away values together."""

    goals: Optional[float] = None
    shots: Optional[float] = None
    sot: Optional[float] = None


def _mean(values: List[float]) -> Optional[float]:
    """Arithmetic mean of the present values, None for an empty list."""
    if not values:
        return None
    return sum(values) / len(values)


def _role_filter(
    matches: Iterable[MatchRecord],
    home_team: Optional[str],
    away_team: Optional[str],
) -> List[MatchRecord]:
    selected = []
    for match in matches:
        if home_team and match.home_team != home_team:
            continue
        if away_team and match.away_team != away_team:
            continue
        selected.append(match)
    return selected


def compute_aggregates(
    matches: Iterable[MatchRecord],
    home_team: Optional[str] = None,
    away_team: Optional[str] = None,
) -> AggregateResult:
    """
    Aggregate match records into averages and totals.

    Args:
        matches: Records already restricted to the lookback window.
        home_team: Only count matches this team played at home.
        away_team: Only count matches this team played away.

    Returns:
        AggregateResult. Each average uses only the matches where that field
        is present; totals count every match passing the role filter. Over/
        under 2.5 needs both goal counts, otherwise the match counts for
        neither.
    """
    selected = _role_filter(matches, home_team, away_team)

    values: Dict[str, List[float]] = {metric: [] for metric in METRICS}
    home_wins = draws = away_wins = over = under = 0

    for match in selected:
        if match.result == RESULT_HOME:
            home_wins += 1
        elif match.result == RESULT_DRAW:
            draws += 1
        elif match.result == RESULT_AWAY:
            away_wins += 1

        if match.home_goals is not None and match.away_goals is not None:
            total_goals = match.home_goals + match.away_goals
            if total_goals > GOALS_LINE:
                over += 1
            else:
                under += 1

        for metric in METRICS:
            value = getattr(match, metric)
            if value is not None:
                values[metric].append(value)

    averages = {metric: _mean(values[metric]) for metric in METRICS}
    totals = AggregateTotals(
        games_played=len(selected),
        home_wins=home_wins,
        draws=draws,
        away_wins=away_wins,
        over_2_5=over,
        under_2_5=under,
    )
    logger.debug(
        "Aggregated %d matches (home_team=%s, away_team=%s)",
        totals.games_played,
        home_team,
        away_team,
    )
    return AggregateResult(averages=averages, totals=totals)


def compute_league_combined(matches: Iterable[MatchRecord]) -> LeagueCombined:
    """Per-team league averages: each match adds its home and its away value."""
    goals: List[float] = []
    shots: List[float] = []
    sot: List[float] = []

    for match in matches:
        for bucket, pair in (
            (goals, (match.home_goals, match.away_goals)),
            (shots, (match.home_shots, match.away_shots)),
            (sot, (match.home_sot, match.away_sot)),
        ):
            bucket.extend(v for v in pair if v is not None)

    return LeagueCombined(goals=_mean(goals), shots=_mean(shots), sot=_mean(sot))
