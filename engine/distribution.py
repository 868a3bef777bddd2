"""
engine/distribution.py
Poisson goal-count distribution with a closed tail bucket.
"""

import math
from dataclasses import dataclass
from typing import Tuple

# Goal counts modelled individually: 0..MAX_GOALS
MAX_GOALS = 9

# Display labels; the final bucket holds everything beyond MAX_GOALS
GOAL_LABELS: Tuple[str, ...] = tuple(str(k) for k in range(MAX_GOALS + 1)) + ("9+",)

TAIL_INDEX = MAX_GOALS + 1


@dataclass(frozen=True)
class ScoringDistribution:
    """Probabilities for 0..9 goals followed by the tail bucket."""

    lam: float
    probabilities: Tuple[float, ...]

    def __len__(self) -> int:
        return len(self.probabilities)

    def __getitem__(self, index: int) -> float:
        return self.probabilities[index]

    @property
    def tail(self) -> float:
        return self.probabilities[TAIL_INDEX]

    def as_dict(self) -> dict:
        return dict(zip(GOAL_LABELS, self.probabilities))


def scoring_distribution(lam: float) -> ScoringDistribution:
    """
    Build the goal distribution for scoring rate *lam*.

    P(0) = e^-lam and P(k) = P(k-1) * lam / k for k = 1..9. The tail bucket
    takes whatever mass is left, floored at 0. Negative or non-finite rates
    are treated as 0.
    """
    if lam is None or not math.isfinite(lam) or lam < 0:
        lam = 0.0

    probs = [math.exp(-lam)]
    for k in range(1, MAX_GOALS + 1):
        probs.append(probs[-1] * lam / k)
    probs.append(max(0.0, 1.0 - sum(probs)))

    return ScoringDistribution(lam=lam, probabilities=tuple(probs))
