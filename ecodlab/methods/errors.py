from __future__ import annotations


class ECODError(ValueError):
    """Base class for every fatal error raised by ecodlab."""


class InvalidInputError(ECODError):
    """Input is not a rectangular, finite, numeric matrix or table."""


class NoNumericFeaturesError(InvalidInputError):
    """Dropping non-numeric columns left nothing to score."""


class DimensionMismatchError(ECODError):
    """New data or reference data disagree with the model's feature count."""


class MissingReferenceError(ECODError):
    """predict() was called without the reference (training) data."""


class OutOfRangeError(ECODError):
    """Sample index out of range, or a threshold that cannot be resolved."""
