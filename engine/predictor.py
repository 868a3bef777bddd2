"""
engine/predictor.py
Core prediction pipeline for ScoreLens.

For one fixture:
  1. Filter the league's matches to the lookback window
  2. Aggregate home-team form (at home), away-team form (away) and the league baseline
  3. Rate attack/defence and blend expected goals
  4. Adjust each side's figure by its deviation from the league baseline
  5. Build the Poisson goal distributions
  6. Build the correct-score grid and market summaries
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from engine.aggregator import (
    AggregateResult,
    LeagueCombined,
    compute_aggregates,
    compute_league_combined,
)
from engine.deviation import adjust_lambda
from engine.distribution import ScoringDistribution, scoring_distribution
from engine.grid import MarketSummary, ScoreGrid, build_score_grid, summarize_markets
from engine.match_filter import filter_matches
from engine.rating import compute_ratings
from engine.records import FixtureDescriptor, MatchRecord

logger = logging.getLogger(__name__)

DEFAULT_TOP_SCORES = 3

EMPTY_WINDOW_STATUS = "No matches found in this lookback window. Showing empty tables."


@dataclass(frozen=True)
class PredictionResult:
    """Rating fields, scoring rates, distributions, grid and markets for one fixture."""

    ratings: Mapping[str, float]
    home_delta: float
    away_delta: float
    home_multiplier: float
    away_multiplier: float
    home_lambda: float
    away_lambda: float
    home_distribution: ScoringDistribution
    away_distribution: ScoringDistribution
    grid: ScoreGrid
    markets: MarketSummary

    def to_dict(self) -> Dict:
        """Flat field mapping, distributions and grid included as plain lists."""
        return {
            **self.ratings,
            "home_delta": self.home_delta,
            "away_delta": self.away_delta,
            "home_multiplier": self.home_multiplier,
            "away_multiplier": self.away_multiplier,
            "home_lambda": self.home_lambda,
            "away_lambda": self.away_lambda,
            "home_win": self.markets.home_win,
            "draw": self.markets.draw,
            "away_win": self.markets.away_win,
            "over": dict(self.markets.over),
            "under": dict(self.markets.under),
            "btts_yes": self.markets.btts_yes,
            "btts_no": self.markets.btts_no,
            "top_scores": list(self.markets.top_scores),
            "home_distribution": list(self.home_distribution.probabilities),
            "away_distribution": list(self.away_distribution.probabilities),
            "grid": self.grid.to_rows(),
        }


@dataclass(frozen=True)
class FixtureBreakdown:
    """Everything the rendering layer needs for one fixture."""

    fixture: FixtureDescriptor
    window_days: int
    match_count: int
    home_form: AggregateResult
    away_form: AggregateResult
    league_baseline: AggregateResult
    league_combined: LeagueCombined
    prediction: PredictionResult
    status: str = field(default="")


def window_status(match_count: int) -> str:
    """Advisory message describing how many matches fed the breakdown."""
    if match_count == 0:
        return EMPTY_WINDOW_STATUS
    return f"Using {match_count} matches from the historical pool."


def predict_from_aggregates(
    home_form: AggregateResult,
    away_form: AggregateResult,
    league_baseline: AggregateResult,
    top_n: int = DEFAULT_TOP_SCORES,
) -> PredictionResult:
    """
    Run the rating model through to the market summary.

    Args:
        home_form: Home team's home matches in the window.
        away_form: Away team's away matches in the window.
        league_baseline: All matches in the window.
        top_n: Number of correct scores to rank.
    """
    ratings = compute_ratings(home_form, away_form, league_baseline)

    home_lambda, home_delta, home_multiplier = adjust_lambda(
        ratings["form_home_goals"], league_baseline.get("home_goals")
    )
    away_lambda, away_delta, away_multiplier = adjust_lambda(
        ratings["form_away_goals"], league_baseline.get("away_goals")
    )

    home_distribution = scoring_distribution(home_lambda)
    away_distribution = scoring_distribution(away_lambda)
    grid = build_score_grid(home_distribution, away_distribution)
    markets = summarize_markets(grid, top_n=top_n)

    return PredictionResult(
        ratings=MappingProxyType(ratings),
        home_delta=home_delta,
        away_delta=away_delta,
        home_multiplier=home_multiplier,
        away_multiplier=away_multiplier,
        home_lambda=home_lambda,
        away_lambda=away_lambda,
        home_distribution=home_distribution,
        away_distribution=away_distribution,
        grid=grid,
        markets=markets,
    )


def predict_fixture(
    matches: Iterable[MatchRecord],
    fixture: FixtureDescriptor,
    window_days: int,
    top_n: int = DEFAULT_TOP_SCORES,
    window: Optional[Sequence[MatchRecord]] = None,
) -> FixtureBreakdown:
    """
    Generate the full breakdown for a single fixture.

    Args:
        matches: Snapshot of the league's historical matches.
        fixture: The fixture to predict.
        window_days: Lookback window length in days.
        top_n: Number of correct scores to rank.
        window: Pre-filtered window (e.g. from a cache); skips filtering.

    Returns:
        FixtureBreakdown. Never raises on missing data: an empty window
        yields all-absent aggregates and a distribution with all mass at 0.
    """
    if window is None:
        window = filter_matches(matches, fixture.fixture_date, window_days)

    home_form = compute_aggregates(window, home_team=fixture.home_team)
    away_form = compute_aggregates(window, away_team=fixture.away_team)
    league_baseline = compute_aggregates(window)
    league_combined = compute_league_combined(window)

    prediction = predict_from_aggregates(home_form, away_form, league_baseline, top_n=top_n)

    logger.debug(
        "%s v %s (%s): lambda %.3f / %.3f from %d matches",
        fixture.home_team,
        fixture.away_team,
        fixture.league,
        prediction.home_lambda,
        prediction.away_lambda,
        len(window),
    )
    return FixtureBreakdown(
        fixture=fixture,
        window_days=window_days,
        match_count=len(window),
        home_form=home_form,
        away_form=away_form,
        league_baseline=league_baseline,
        league_combined=league_combined,
        prediction=prediction,
        status=window_status(len(window)),
    )


WindowLookup = Callable[[FixtureDescriptor, int], Tuple[MatchRecord, ...]]


def predict_all(
    league_matches: Mapping[str, Sequence[MatchRecord]],
    fixtures: Iterable[FixtureDescriptor],
    window_days: int,
    top_n: int = DEFAULT_TOP_SCORES,
    window_for: Optional[WindowLookup] = None,
) -> List[FixtureBreakdown]:
    """
    Run predictions for a list of fixtures.

    Args:
        league_matches: League code -> match snapshot.
        fixtures: Fixtures to predict; each uses its own league's matches.
        window_days: Lookback window length in days.
        top_n: Number of correct scores to rank.
        window_for: Optional (fixture, window_days) -> pre-filtered window,
            e.g. a store's cached ``get_window``.

    Returns:
        List of breakdowns; fixtures that fail are logged and skipped.
    """
    breakdowns = []
    for fixture in fixtures:
        try:
            matches = league_matches.get(fixture.league, ())
            window = window_for(fixture, window_days) if window_for else None
            breakdowns.append(
                predict_fixture(matches, fixture, window_days, top_n=top_n, window=window)
            )
        except Exception as exc:
            logger.error("Failed to predict fixture %s: %s", fixture.fixture_id, exc)
    return breakdowns
