"""
engine/grid.py
Correct-score grid and the market summaries derived from it:
1X2, over/under 1.5 / 2.5 / 3.5, both teams to score and the most likely
correct scores.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np

from engine.distribution import GOAL_LABELS, TAIL_INDEX, ScoringDistribution

logger = logging.getLogger(__name__)

# Over/under lines reported for total goals
TOTALS_LINES = (1.5, 2.5, 3.5)

# Goal count assumed for the tail bucket when summing totals
TAIL_GOALS = 10


@dataclass(frozen=True, eq=False)
class ScoreGrid:
    """Joint probabilities, rows = home goals, columns = away goals."""

    cells: np.ndarray

    @property
    def size(self) -> int:
        return self.cells.shape[0]

    def cell(self, home_goals: int, away_goals: int) -> float:
        return float(self.cells[home_goals, away_goals])

    def total(self) -> float:
        return float(self.cells.sum())

    def to_rows(self) -> List[List[float]]:
        return self.cells.tolist()


@dataclass(frozen=True)
class MarketSummary:
    home_win: float
    draw: float
    away_win: float
    over: Mapping[float, float] = field(default_factory=lambda: MappingProxyType({}))
    under: Mapping[float, float] = field(default_factory=lambda: MappingProxyType({}))
    btts_yes: float = 0.0
    btts_no: float = 1.0
    top_scores: Tuple[Dict, ...] = ()


def build_score_grid(home: ScoringDistribution, away: ScoringDistribution) -> ScoreGrid:
    """Outer product of the two distributions (scoring assumed independent)."""
    cells = np.outer(np.asarray(home.probabilities), np.asarray(away.probabilities))
    cells.setflags(write=False)
    return ScoreGrid(cells=cells)


def score_label(home_goals: int, away_goals: int) -> str:
    """'2-1' style label; the tail bucket is shown as '9+'."""
    return f"{GOAL_LABELS[home_goals]}-{GOAL_LABELS[away_goals]}"


def _goals_for_index(index: int) -> int:
    return TAIL_GOALS if index == TAIL_INDEX else index


def outcome_probabilities(grid: ScoreGrid) -> Dict[str, float]:
    """Home win / draw / away win by comparing row and column indices."""
    cells = grid.cells
    return {
        "home_win": float(np.tril(cells, k=-1).sum()),
        "draw": float(np.trace(cells)),
        "away_win": float(np.triu(cells, k=1).sum()),
    }


def totals_probabilities(grid: ScoreGrid, lines=TOTALS_LINES) -> Dict[str, Dict[float, float]]:
    """P(total goals > line) and P(total goals < line), tail counted as 10 goals."""
    goals = np.array([_goals_for_index(i) for i in range(grid.size)])
    combined = goals[:, None] + goals[None, :]
    over = {}
    under = {}
    for line in lines:
        over[line] = float(grid.cells[combined > line].sum())
        under[line] = float(grid.cells[combined < line].sum())
    return {"over": over, "under": under}


def btts_probabilities(grid: ScoreGrid) -> Dict[str, float]:
    """Both teams to score, via inclusion-exclusion on row 0 and column 0."""
    cells = grid.cells
    no = float(cells[0, :].sum() + cells[:, 0].sum() - cells[0, 0])
    return {"btts_yes": 1.0 - no, "btts_no": no}


def top_scores(grid: ScoreGrid, top_n: int = 3) -> List[Dict]:
    """
    Most probable correct scores.

    Ranked by probability descending; ties go to the lower combined index,
    then the lower home index.
    """
    ranked = sorted(
        (
            (grid.cell(i, j), i, j)
            for i in range(grid.size)
            for j in range(grid.size)
        ),
        key=lambda entry: (-entry[0], entry[1] + entry[2], entry[1]),
    )
    return [
        {
            "rank": rank,
            "home": i,
            "away": j,
            "score": score_label(i, j),
            "probability": prob,
        }
        for rank, (prob, i, j) in enumerate(ranked[:top_n], start=1)
    ]


def fair_odds(probability: float) -> Optional[float]:
    """Decimal odds that exactly price *probability*; None when it is 0."""
    if probability <= 0:
        return None
    return 1.0 / probability


def summarize_markets(grid: ScoreGrid, top_n: int = 3) -> MarketSummary:
    """Collect every market figure derived from the grid."""
    outcomes = outcome_probabilities(grid)
    totals = totals_probabilities(grid)
    btts = btts_probabilities(grid)
    summary = MarketSummary(
        home_win=outcomes["home_win"],
        draw=outcomes["draw"],
        away_win=outcomes["away_win"],
        over=MappingProxyType(totals["over"]),
        under=MappingProxyType(totals["under"]),
        btts_yes=btts["btts_yes"],
        btts_no=btts["btts_no"],
        top_scores=tuple(top_scores(grid, top_n)),
    )
    logger.debug(
        "1X2 %.3f / %.3f / %.3f, BTTS yes %.3f",
        summary.home_win,
        summary.draw,
        summary.away_win,
        summary.btts_yes,
    )
    return summary
