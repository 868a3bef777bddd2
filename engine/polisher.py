"""
engine/polisher.py
Formats ScoreLens breakdowns into plain-text reports.

Absent averages are shown as "N/A", never as zero.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from engine.aggregator import AggregateResult, LeagueCombined
from engine.distribution import GOAL_LABELS
from engine.grid import fair_odds
from engine.predictor import FixtureBreakdown
from leagues.english import LEAGUE_BY_CODE

logger = logging.getLogger(__name__)

# (metric, column label) for the form tables
AVERAGE_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("home_goals", "Avg FTHG"),
    ("home_shots", "Avg HS"),
    ("home_sot", "Avg HST"),
    ("away_goals", "Avg FTAG"),
    ("away_shots", "Avg AS"),
    ("away_sot", "Avg AST"),
    ("odds_home", "AvgH"),
    ("odds_draw", "AvgD"),
    ("odds_away", "AvgA"),
    ("odds_over25", "Avg >2.5"),
    ("odds_under25", "Avg <2.5"),
)


def format_number(value: Optional[float]) -> str:
    """Two decimals, or 'N/A' for an absent value."""
    if value is None or value != value:
        return "N/A"
    return f"{value:,.2f}"


def format_integer(value: Optional[float]) -> str:
    if value is None or value != value:
        return "0"
    return str(int(round(value)))


def format_percent(probability: Optional[float]) -> str:
    if probability is None:
        return "N/A"
    return f"{probability * 100:.1f}%"


def format_odds(probability: float) -> str:
    return format_number(fair_odds(probability))


def polish_aggregate(title: str, aggregate: AggregateResult) -> str:
    """One form table: averages then result totals."""
    totals = aggregate.totals
    lines = [f"== {title} =="]
    lines.extend(
        f"  {label:<10} {format_number(aggregate.get(metric))}"
        for metric, label in AVERAGE_COLUMNS
    )
    lines.append(
        f"  Games {format_integer(totals.games_played)} | "
        f"Home Win {format_integer(totals.home_wins)} | "
        f"Draw {format_integer(totals.draws)} | "
        f"Away Win {format_integer(totals.away_wins)} | "
        f"Over 2.5 {format_integer(totals.over_2_5)} | "
        f"Under 2.5 {format_integer(totals.under_2_5)}"
    )
    return "\n".join(lines)


def polish_combined(combined: LeagueCombined) -> str:
    return (
        "== League Combined Average ==\n"
        f"  Goals/Team {format_number(combined.goals)} | "
        f"Shots/Team {format_number(combined.shots)} | "
        f"SOT/Team {format_number(combined.sot)}\n"
        "  Combined metrics flatten home/away values per team."
    )


def _distribution_line(label: str, probabilities: Sequence[float]) -> str:
    cells = " ".join(
        f"{goals}:{p * 100:.1f}" for goals, p in zip(GOAL_LABELS, probabilities)
    )
    return f"  {label:<5} {cells}"


def polish_prediction(breakdown: FixtureBreakdown) -> str:
    """Model section: ratings, scoring rates, distributions and markets."""
    pred = breakdown.prediction
    ratings = pred.ratings
    markets = pred.markets
    fixture = breakdown.fixture

    lines = [
        "== Model ==",
        f"  Attack   {fixture.home_team}: {format_number(ratings['home_attack_goals'])} | "
        f"{fixture.away_team}: {format_number(ratings['away_attack_goals'])}",
        f"  Defence  {fixture.home_team}: {format_number(ratings['home_defence_goals'])} | "
        f"{fixture.away_team}: {format_number(ratings['away_defence_goals'])}",
        f"  xG (goals model) {format_number(ratings['expected_home_goals'])} - "
        f"{format_number(ratings['expected_away_goals'])}",
        f"  xG (form blend)  {format_number(ratings['form_home_goals'])} - "
        f"{format_number(ratings['form_away_goals'])}",
        f"  Lambda           {format_number(pred.home_lambda)} (x{pred.home_multiplier:.2f}) - "
        f"{format_number(pred.away_lambda)} (x{pred.away_multiplier:.2f})",
        _distribution_line("Home", pred.home_distribution.probabilities),
        _distribution_line("Away", pred.away_distribution.probabilities),
        f"  1X2  {format_percent(markets.home_win)} ({format_odds(markets.home_win)}) / "
        f"{format_percent(markets.draw)} ({format_odds(markets.draw)}) / "
        f"{format_percent(markets.away_win)} ({format_odds(markets.away_win)})",
    ]
    for line in sorted(markets.over):
        lines.append(
            f"  O/U {line}  Over {format_percent(markets.over[line])} | "
            f"Under {format_percent(markets.under[line])}"
        )
    lines.append(
        f"  BTTS  Yes {format_percent(markets.btts_yes)} ({format_odds(markets.btts_yes)}) | "
        f"No {format_percent(markets.btts_no)} ({format_odds(markets.btts_no)})"
    )
    for entry in markets.top_scores:
        lines.append(
            f"  {entry['rank']}. {entry['score']}  {format_percent(entry['probability'])}"
        )
    return "\n".join(lines)


def polish_breakdown(breakdown: FixtureBreakdown) -> str:
    """Full text report for one fixture."""
    fixture = breakdown.fixture
    league = LEAGUE_BY_CODE.get(fixture.league, {}).get("name", fixture.league)
    date_str = fixture.fixture_date.strftime("%A, %d %B %Y") if fixture.fixture_date else "TBD"

    header = (
        f"{fixture.home_team} v {fixture.away_team}\n"
        f"{league} | {date_str} | last {breakdown.window_days} days\n"
        f"{breakdown.status}"
    )
    sections = [
        header,
        polish_aggregate("Home Team Form", breakdown.home_form),
        polish_aggregate("Away Team Form", breakdown.away_form),
        polish_aggregate("League Average", breakdown.league_baseline),
        polish_combined(breakdown.league_combined),
        polish_prediction(breakdown),
    ]
    return "\n\n".join(sections)


def polish_all(breakdowns: List[FixtureBreakdown]) -> str:
    """Join several fixture reports, or explain that there is nothing to show."""
    if not breakdowns:
        return "No upcoming fixtures to analyse."
    return ("\n\n" + "-" * 60 + "\n\n").join(
        polish_breakdown(b) for b in breakdowns
    )
