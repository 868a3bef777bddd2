"""
engine/rating.py
Attack/defence rating model for ScoreLens.

Converts home-team form, away-team form and the league baseline into
normalized attack/defence scores and expected goals, shots and shots on
target for both sides, then blends three estimates of expected goals:

  - the goals model (attack x opposing defence x league average)
  - goals implied by expected shots and the opponent's goals per shot allowed
  - goals implied by expected shots on target, likewise

Every division is guarded so the model returns finite numbers even when the
window holds no matches at all.
"""

import logging
from typing import Dict, Optional

from engine.aggregator import AggregateResult

logger = logging.getLogger(__name__)

# Substitute denominator for absent or zero values
EPSILON = 1e-6

# Blend weights for the form figure (must sum to 1.0)
WEIGHT_GOALS = 0.5
WEIGHT_SHOTS = 0.25
WEIGHT_SOT = 0.25

# Metric families: family -> (home-side metric, away-side metric)
FAMILIES = {
    "goals": ("home_goals", "away_goals"),
    "shots": ("home_shots", "away_shots"),
    "sot": ("home_sot", "away_sot"),
}


def safe_div(numerator: Optional[float], denominator: Optional[float]) -> float:
    """Divide, treating an absent numerator as 0 and an absent/zero denominator as EPSILON."""
    num = numerator if numerator is not None else 0.0
    den = denominator if denominator else EPSILON
    return num / den


def _value(value: Optional[float]) -> float:
    return value if value is not None else 0.0


def _family_ratings(
    family: str,
    home_agg: AggregateResult,
    away_agg: AggregateResult,
    league_agg: AggregateResult,
) -> Dict[str, float]:
    """Attack, defence and expected value for one metric family, both sides."""
    home_metric, away_metric = FAMILIES[family]
    league_home = league_agg.get(home_metric)
    league_away = league_agg.get(away_metric)

    home_attack = safe_div(home_agg.get(home_metric), league_home)
    home_defence = safe_div(home_agg.get(away_metric), league_away)
    away_attack = safe_div(away_agg.get(away_metric), league_away)
    away_defence = safe_div(away_agg.get(home_metric), league_home)

    return {
        f"home_attack_{family}": home_attack,
        f"home_defence_{family}": home_defence,
        f"away_attack_{family}": away_attack,
        f"away_defence_{family}": away_defence,
        f"expected_home_{family}": home_attack * away_defence * _value(league_home),
        f"expected_away_{family}": away_attack * home_defence * _value(league_away),
    }


def conversion_ratios(home_agg: AggregateResult, away_agg: AggregateResult) -> Dict[str, float]:
    """
    Goals per shot (and per shot on target) taken and allowed, from each
    team's own raw averages.
    """
    return {
        "home_goals_per_shot": safe_div(home_agg.get("home_goals"), home_agg.get("home_shots")),
        "home_goals_per_shot_allowed": safe_div(home_agg.get("away_goals"), home_agg.get("away_shots")),
        "home_goals_per_sot": safe_div(home_agg.get("home_goals"), home_agg.get("home_sot")),
        "home_goals_per_sot_allowed": safe_div(home_agg.get("away_goals"), home_agg.get("away_sot")),
        "away_goals_per_shot": safe_div(away_agg.get("away_goals"), away_agg.get("away_shots")),
        "away_goals_per_shot_allowed": safe_div(away_agg.get("home_goals"), away_agg.get("home_shots")),
        "away_goals_per_sot": safe_div(away_agg.get("away_goals"), away_agg.get("away_sot")),
        "away_goals_per_sot_allowed": safe_div(away_agg.get("home_goals"), away_agg.get("home_sot")),
    }


def blend_expected_goals(goals_model: float, from_shots: float, from_sot: float) -> float:
    """Weighted form figure: half goals model, a quarter each from shots and SOT."""
    return WEIGHT_GOALS * goals_model + WEIGHT_SHOTS * from_shots + WEIGHT_SOT * from_sot


def compute_ratings(
    home_agg: AggregateResult,
    away_agg: AggregateResult,
    league_agg: AggregateResult,
) -> Dict[str, float]:
    """
    Build the flat rating bundle for a fixture.

    Args:
        home_agg: Home team's matches at home in the window.
        away_agg: Away team's matches away in the window.
        league_agg: Every match in the window.

    Returns:
        Dict of rating fields; every value is a finite float.
    """
    ratings: Dict[str, float] = {}
    for family in FAMILIES:
        ratings.update(_family_ratings(family, home_agg, away_agg, league_agg))
    ratings.update(conversion_ratios(home_agg, away_agg))

    ratings["home_goals_from_shots"] = (
        ratings["expected_home_shots"] * ratings["away_goals_per_shot_allowed"]
    )
    ratings["home_goals_from_sot"] = (
        ratings["expected_home_sot"] * ratings["away_goals_per_sot_allowed"]
    )
    ratings["away_goals_from_shots"] = (
        ratings["expected_away_shots"] * ratings["home_goals_per_shot_allowed"]
    )
    ratings["away_goals_from_sot"] = (
        ratings["expected_away_sot"] * ratings["home_goals_per_sot_allowed"]
    )

    ratings["form_home_goals"] = blend_expected_goals(
        ratings["expected_home_goals"],
        ratings["home_goals_from_shots"],
        ratings["home_goals_from_sot"],
    )
    ratings["form_away_goals"] = blend_expected_goals(
        ratings["expected_away_goals"],
        ratings["away_goals_from_shots"],
        ratings["away_goals_from_sot"],
    )

    logger.debug(
        "Form expected goals: home=%.3f away=%.3f",
        ratings["form_home_goals"],
        ratings["form_away_goals"],
    )
    return ratings
