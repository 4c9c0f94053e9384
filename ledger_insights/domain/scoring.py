"""Scoring curves - piecewise-linear ramps and the composite health score formula"""

from dataclasses import dataclass
from typing import Sequence, Tuple


@dataclass(frozen=True)
class Segment:
    """Linear piece mapping [lower, upper] onto [score_at_lower, score_at_upper]"""

    lower: float
    upper: float
    score_at_lower: float
    score_at_upper: float

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper

    def interpolate(self, value: float) -> float:
        fraction = (value - self.lower) / (self.upper - self.lower)
        return self.score_at_lower + fraction * (self.score_at_upper - self.score_at_lower)


class PiecewiseRamp:
    """
    Ordered, contiguous segments evaluated by linear interpolation.

    Values below the first segment take its lower score, values above the last
    segment take its upper score. Adjacent segments share endpoint scores, so a
    value sitting exactly on a boundary scores the same from either side.
    """

    def __init__(self, segments: Sequence[Tuple[float, float, float, float]]):
        self.segments = tuple(Segment(*s) for s in segments)
        for left, right in zip(self.segments, self.segments[1:]):
            if left.upper != right.lower:
                raise ValueError(f"Ramp segments must be contiguous: {left} then {right}")

    def score(self, value: float) -> float:
        first, last = self.segments[0], self.segments[-1]
        if value <= first.lower:
            return first.score_at_lower
        if value >= last.upper:
            return last.score_at_upper
        for segment in self.segments:
            if segment.contains(value):
                return segment.interpolate(value)
        return last.score_at_upper


# Savings rate (fraction of net income kept)
# >= 30% -> 100, 20-30% -> 80-100, 10-20% -> 60-80, 0-10% -> 40-60,
# negative -> 40 down to 0 at -100%
SAVINGS_RAMP = PiecewiseRamp(
    [
        (-1.0, 0.0, 0.0, 40.0),
        (0.0, 0.10, 40.0, 60.0),
        (0.10, 0.20, 60.0, 80.0),
        (0.20, 0.30, 80.0, 100.0),
    ]
)

# Obligation ratio (fixed expenses + bills over net income), lower is better
DEBT_RAMP = PiecewiseRamp(
    [
        (0.0, 0.30, 100.0, 100.0),
        (0.30, 0.50, 100.0, 80.0),
        (0.50, 0.70, 80.0, 60.0),
        (0.70, 0.90, 60.0, 40.0),
        (0.90, 1.90, 40.0, 0.0),
    ]
)

# Average goal progress in percent
GOAL_RAMP = PiecewiseRamp(
    [
        (0.0, 20.0, 20.0, 40.0),
        (20.0, 40.0, 40.0, 60.0),
        (40.0, 60.0, 60.0, 80.0),
        (60.0, 80.0, 80.0, 100.0),
    ]
)

# Coefficient of variation of monthly expenses, lower is better
BUDGET_RAMP = PiecewiseRamp(
    [
        (0.0, 0.10, 100.0, 100.0),
        (0.10, 0.20, 100.0, 80.0),
        (0.20, 0.30, 80.0, 60.0),
        (0.30, 0.50, 60.0, 40.0),
        (0.50, 1.50, 40.0, 0.0),
    ]
)

SAVINGS_WEIGHT = 0.30
DEBT_WEIGHT = 0.25
GOAL_WEIGHT = 0.25
BUDGET_WEIGHT = 0.20

NEWTON_ITERATIONS = 10


def composite_score(savings: float, debt: float, goal: float, budget: float) -> float:
    """Weighted health score: 30% savings, 25% debt, 25% goals, 20% budget"""
    return (
        savings * SAVINGS_WEIGHT
        + debt * DEBT_WEIGHT
        + goal * GOAL_WEIGHT
        + budget * BUDGET_WEIGHT
    )


def newton_sqrt(value: float, iterations: int = NEWTON_ITERATIONS) -> float:
    """
    Square root by a fixed number of Newton steps seeded at value / 2.

    Large inputs are under-converged after 10 steps.
    """
    if value <= 0:
        return 0.0
    root = value / 2
    for _ in range(iterations):
        root = (root + value / root) / 2
    return root


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population standard deviation over mean (0 for a zero mean)"""
    mean = sum(values) / len(values)
    if mean == 0:
        return 0.0
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return newton_sqrt(variance) / mean
