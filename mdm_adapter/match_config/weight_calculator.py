# -*- coding: utf-8 -*-
"""
Fellegi-Sunter Weight Calculator

Converts m/u agreement probabilities into log2 likelihood-ratio weights:

    matchWeight    = log2(m / u)
    nonMatchWeight = log2((1 - m) / (1 - u))

Both probabilities must lie strictly inside (0, 1) so that neither ratio
divides by zero nor takes the log of zero.
"""

from __future__ import annotations

import math
from typing import Any, Tuple

from mdm_adapter.exceptions import ErrorKind, WeightDomainError


def _check_probability(name: str, value: Any) -> float:
    if value is None or isinstance(value, bool):
        raise WeightDomainError(
            message=f"{name} must be a number strictly between 0 and 1, got {value!r}",
            context={name: value},
        )
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise WeightDomainError(
            message=f"{name} must be a number strictly between 0 and 1, got {value!r}",
            context={name: value},
        )
    if not math.isfinite(number) or not 0.0 < number < 1.0:
        raise WeightDomainError(
            ErrorKind.WEIGHT_DOMAIN,
            message=f"{name} must be strictly between 0 and 1, got {number!r}",
            context={name: number},
        )
    return number


def match_weight(m: float, u: float) -> float:
    """Return ``log2(m / u)``.

    Raises:
        WeightDomainError: If m or u is missing or outside (0, 1).
    """
    m = _check_probability("m", m)
    u = _check_probability("u", u)
    return math.log2(m / u)


def non_match_weight(m: float, u: float) -> float:
    """Return ``log2((1 - m) / (1 - u))``.

    Raises:
        WeightDomainError: If m or u is missing or outside (0, 1).
    """
    m = _check_probability("m", m)
    u = _check_probability("u", u)
    return math.log2((1.0 - m) / (1.0 - u))


def compute_weights(m: float, u: float) -> Tuple[float, float]:
    """Return ``(match_weight, non_match_weight)`` for one attribute."""
    return match_weight(m, u), non_match_weight(m, u)


__all__ = ["match_weight", "non_match_weight", "compute_weights"]
