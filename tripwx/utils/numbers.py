"""Numeric helpers."""

import math


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves rounding up.

    Unlike the built-in round, 2.5 rounds to 3 and -2.5 to -2.
    """
    return int(math.floor(value + 0.5))
