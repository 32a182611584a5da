from __future__ import annotations
from dataclasses import dataclass
from numbers import Real
from typing import Union

import numpy as np

from .errors import InvalidInputError, OutOfRangeError

AUTO_PERCENTILE = 0.95


@dataclass(frozen=True)
class Fixed:
    value: float


@dataclass(frozen=True)
class Percentile:
    q: float

    def __post_init__(self):
        if not (0.0 < self.q < 1.0):
            raise OutOfRangeError(f"percentile must be strictly between 0 and 1, got {self.q}")


@dataclass(frozen=True)
class Auto:
    """The 95th percentile of the training scores."""


Threshold = Union[Fixed, Percentile, Auto]


def quantile(scores, q: float) -> float:
    """Linear interpolation between order statistics (R/Hyndman-Fan type 7)."""
    return float(np.quantile(np.asarray(scores, dtype=float), q, method="linear"))


def parse_threshold(value) -> Threshold:
    """Map the user-facing threshold forms onto the Threshold variant.

    number -> Fixed, "auto" -> Auto, "0.99" -> Percentile(0.99).
    """
    if isinstance(value, (Fixed, Percentile, Auto)):
        return value
    if isinstance(value, str):
        if value == "auto":
            return Auto()
        try:
            q = float(value.strip())
        except ValueError:
            raise OutOfRangeError(
                f"threshold string must be 'auto' or a percentile in (0, 1), got {value!r}"
            ) from None
        return Percentile(q)
    if isinstance(value, Real) and not isinstance(value, bool):
        return Fixed(float(value))
    raise InvalidInputError(f"threshold must be numeric or a string, got {type(value).__name__}")


def resolve_threshold(threshold, scores) -> float:
    t = parse_threshold(threshold)
    if isinstance(t, Fixed):
        return t.value
    if isinstance(t, Auto):
        return quantile(scores, AUTO_PERCENTILE)
    return quantile(scores, t.q)
