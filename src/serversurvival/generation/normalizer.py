"""Numeric repair helpers for generated configurations.

Pure functions, no logging. The validator decides when to apply them.
"""

import math
from collections.abc import Mapping
from typing import Any

from serversurvival.parameters import DISTRIBUTION_EPSILON


def clamp(value: float, min_value: float, max_value: float) -> float:
    """Clamp a value to the specified range."""
    return max(min_value, min(max_value, value))


def is_number(value: Any, finite: bool = True) -> bool:
    """Return True for ints and floats, finite ones only by default.

    bool is rejected even though it subclasses int: JSON true/false is not a
    number. NaN is always rejected because json.loads accepts it. With
    finite=False, infinities and ints too large for a float still count,
    for fields that get clamped into a range anyway.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if not finite:
        return not (isinstance(value, float) and math.isnan(value))
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large to convert to float
        return False


def sums_to_one(mapping: Mapping[Any, float], epsilon: float = DISTRIBUTION_EPSILON) -> bool:
    """Check whether the values of a mapping add up to 1 within epsilon."""
    return abs(sum(mapping.values()) - 1) < epsilon


def rescale_to_sum_one(mapping: Mapping[Any, float]) -> dict[Any, float]:
    """Divide every value by the total so the result sums to 1.

    Raises:
        ValueError: If the values sum to zero.
    """
    total = sum(mapping.values())
    if total == 0:
        raise ValueError("Cannot rescale a distribution that sums to zero")
    return {key: value / total for key, value in mapping.items()}
