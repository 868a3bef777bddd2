"""
engine/deviation.py
Pulls a side's blended expected goals back toward the league baseline.

The band table is a fixed design constant: deviations above the baseline are
dampened (down to x0.75 at +2.0 or more), deviations below it are boosted
(up to x1.25 at -2.0 or less). Bands saturate at the extremes.
"""

import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# (lower edge, multiplier), checked from the most extreme band inward
OVERSHOOT_BANDS: Tuple[Tuple[float, float], ...] = (
    (2.00, 0.75),
    (1.75, 0.79),
    (1.50, 0.82),
    (1.25, 0.85),
    (1.00, 0.88),
    (0.75, 0.91),
    (0.50, 0.94),
    (0.25, 0.97),
)

# (upper edge, multiplier), checked from the most extreme band inward
UNDERSHOOT_BANDS: Tuple[Tuple[float, float], ...] = (
    (-2.00, 1.25),
    (-1.75, 1.21),
    (-1.50, 1.18),
    (-1.25, 1.15),
    (-1.00, 1.12),
    (-0.75, 1.09),
    (-0.50, 1.06),
    (-0.25, 1.03),
)


def deviation_multiplier(delta: float) -> float:
    """Multiplier for a deviation of *delta* goals from the league baseline."""
    if delta >= 0:
        for edge, multiplier in OVERSHOOT_BANDS:
            if delta >= edge:
                return multiplier
    else:
        for edge, multiplier in UNDERSHOOT_BANDS:
            if delta <= edge:
                return multiplier
    return 1.0


def adjust_lambda(blended: float, baseline: Optional[float]) -> Tuple[float, float, float]:
    """
    Apply the deviation band to a blended expected-goals figure.

    Args:
        blended: Side's form expected goals.
        baseline: League average goals for the same side (None counts as 0).

    Returns:
        (lam, delta, multiplier) where lam is never negative.
    """
    delta = blended - (baseline if baseline is not None else 0.0)
    multiplier = deviation_multiplier(delta)
    lam = max(0.0, blended * multiplier)
    logger.debug("delta=%.3f multiplier=%.2f lambda=%.3f", delta, multiplier, lam)
    return lam, delta, multiplier
