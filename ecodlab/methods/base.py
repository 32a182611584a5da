from __future__ import annotations
import numpy as np

from .errors import InvalidInputError

NUMERIC_KINDS = set("biuf")  # bool, int, unsigned, float


def ensure_2d(X):
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    return X


def as_float_matrix(data, name: str = "data") -> np.ndarray:
    """Coerce a matrix-like input into a finite 2-D float64 array.

    1-D inputs are read as a single feature column. Strings, mappings,
    scalars, ragged sequences, non-numeric dtypes and NaN/inf all raise
    InvalidInputError.
    """
    if data is None or isinstance(data, (str, bytes, dict)) or np.isscalar(data):
        raise InvalidInputError(f"'{name}' must be a matrix or data frame")
    try:
        arr = np.asarray(data)
    except ValueError as exc:
        raise InvalidInputError(f"'{name}' must be rectangular: {exc}") from exc

    if arr.dtype.kind == "O":
        try:
            arr = arr.astype(np.float64)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"'{name}' must contain only numeric values") from exc
    elif arr.dtype.kind not in NUMERIC_KINDS:
        raise InvalidInputError(f"'{name}' must contain only numeric values")

    if arr.ndim == 0 or arr.ndim > 2:
        raise InvalidInputError(f"'{name}' must be 1-D or 2-D, got {arr.ndim} dimensions")
    arr = ensure_2d(arr.astype(np.float64, copy=False))

    if not np.all(np.isfinite(arr)):
        raise InvalidInputError(f"'{name}' contains NaN or infinite values")
    return arr
