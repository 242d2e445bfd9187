"""
Statistics - Small numeric helpers used by scoring and recommendation.

All functions are pure. Degenerate inputs (empty series, zero variance)
return 0 instead of dividing by zero.
"""

import math
from typing import Sequence, Tuple

from .errors import InvalidArgument


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def accuracy(correct: int, total: int) -> float:
    """Correct / total, 0 when nothing was attempted."""
    if total <= 0:
        return 0.0
    return correct / total


def std_dev(values: Sequence[float]) -> float:
    """Population standard deviation; 0 for fewer than two values."""
    n = len(values)
    if n < 2:
        return 0.0
    mu = mean(values)
    variance = sum((v - mu) ** 2 for v in values) / n
    return math.sqrt(variance)


def _check_paired(x: Sequence[float], y: Sequence[float]):
    if len(x) != len(y):
        raise InvalidArgument(f"series lengths differ ({len(x)} vs {len(y)})")


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson correlation coefficient in [-1, 1].

    Returns 0 when either series has zero variance or fewer than two points.
    """
    _check_paired(x, y)
    n = len(x)
    if n < 2:
        return 0.0

    mx, my = mean(x), mean(y)
    sxy = sum((a - mx) * (b - my) for a, b in zip(x, y))
    sxx = sum((a - mx) ** 2 for a in x)
    syy = sum((b - my) ** 2 for b in y)

    if sxx == 0 or syy == 0:
        return 0.0

    r = sxy / math.sqrt(sxx * syy)
    # Rounding can push |r| a hair past 1
    return max(-1.0, min(1.0, r))


def linear_regression(x: Sequence[float], y: Sequence[float]) -> Tuple[float, float]:
    """
    Ordinary least squares fit y = slope * x + intercept.

    With fewer than two points, or no spread in x, the slope is 0 and the
    intercept is the mean of y.
    """
    _check_paired(x, y)
    n = len(x)
    if n < 2:
        return 0.0, mean(y)

    mx, my = mean(x), mean(y)
    sxx = sum((a - mx) ** 2 for a in x)
    if sxx == 0:
        return 0.0, my

    slope = sum((a - mx) * (b - my) for a, b in zip(x, y)) / sxx
    intercept = my - slope * mx
    return slope, intercept
