"""Numeric helpers shared by the outcome models and the result assembler."""

import math


def sigmoid(x: float) -> float:
    """Logistic link: maps an additive score onto (0, 1)."""
    return 1.0 / (1.0 + math.exp(-x))


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Display rounding with halves rounded upward.
    
    Python's round() uses banker's rounding and would turn 0.25 into 0.2;
    calibrated outputs are published with halves rounded up (0.195 -> 0.2).
    """
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor
