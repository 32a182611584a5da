"""ECOD: Empirical Cumulative Distribution-based Outlier Detection.

Each feature is turned into a two-sided tail probability, min(F(x), 1 - F(x)),
and a sample's anomaly score is the sum over features of -log(tail). The sum
treats features as independent, so for strongly correlated features the score
is an approximation rather than a joint log-likelihood.

Two entry points:

* :func:`fit` ranks the training matrix (average rank for ties) and returns an
  immutable :class:`ECODModel`.
* :func:`predict` scores new rows against ECDFs rebuilt from a caller-supplied
  reference matrix. The ECDF counts reference values ``<= x``, which treats
  ties differently from the fit-time average ranks.
"""
from __future__ import annotations
import logging
import warnings
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from pyod.models.base import BaseDetector
from scipy.stats import rankdata

from ..datasets.io import select_numeric, unique_names
from .base import as_float_matrix
from .errors import (
    DimensionMismatchError,
    InvalidInputError,
    MissingReferenceError,
    NoNumericFeaturesError,
)
from .model import ECODModel
from .tails import aggregate_scores, two_sided_tail

logger = logging.getLogger(__name__)

# Inputs with more rows than this are not copied into ECODModel.retained_data
RETAIN_THRESHOLD = 10_000


def coerce_input(data, name: str = "data", warn: bool = True):
    """Turn a DataFrame / array-like into a float matrix.

    Returns ``(X, column_names, dropped_columns, numeric_frame)``; the last
    item is None unless ``data`` was a pandas object.
    """
    if isinstance(data, pd.Series):
        data = data.to_frame()
    if not isinstance(data, pd.DataFrame):
        return as_float_matrix(data, name), None, [], None

    numeric, dropped = select_numeric(data)
    if dropped:
        if warn:
            warnings.warn(
                f"Non-numeric features removed from '{name}': {', '.join(dropped)}. "
                "ECOD only works with numeric features; encode categorical "
                "columns (one-hot, frequency encoding) before fitting.",
                UserWarning,
                stacklevel=3,
            )
        if numeric.shape[1] == 0:
            raise NoNumericFeaturesError(
                f"No numeric features found in '{name}' after filtering. Cannot proceed with ECOD."
            )
        logger.info("Proceeding with %d numeric feature(s): %s",
                    numeric.shape[1], ", ".join(map(str, numeric.columns)))
    X = as_float_matrix(numeric.to_numpy(dtype=np.float64, na_value=np.nan), name)
    return X, list(numeric.columns), dropped, numeric


def _constant_columns(X: np.ndarray) -> np.ndarray:
    # max == min is the exact test; a float std can come out as 1e-17 for constants
    return X.max(axis=0) == X.min(axis=0)


def _standardize(X: np.ndarray, constant: np.ndarray) -> np.ndarray:
    mean = X.mean(axis=0)
    std = X.std(axis=0, ddof=1)
    std = np.where(constant, 1.0, std)
    Z = (X - mean) / std
    Z[:, constant] = 0.0
    return Z


def _rank_tails(X: np.ndarray, constant: np.ndarray) -> np.ndarray:
    n, d = X.shape
    tails = np.full((n, d), 0.5)
    varying = ~constant
    if varying.any():
        ranks = rankdata(X[:, varying], method="average", axis=0)
        tails[:, varying] = two_sided_tail(ranks / n)
    return tails


def fit(data,
        normalize: bool = False,
        feature_names: Optional[Sequence[str]] = None,
        retain_threshold: int = RETAIN_THRESHOLD) -> ECODModel:
    """Fit ECOD on ``data`` (n samples x d features).

    Non-numeric DataFrame columns are dropped with a ``UserWarning``. Constant
    features get tail probability 0.5 on every row. ``normalize`` standardizes
    each column first; ranks do not change, only the space ``tail_probs``
    is read in.
    """
    X, columns, dropped, frame = coerce_input(data, "data")
    n, d = X.shape
    if n < 2:
        raise InvalidInputError("'data' must have at least 2 samples")
    if d < 1:
        raise InvalidInputError("'data' must have at least 1 feature")

    if feature_names is not None:
        names: List[str] = list(feature_names)
        if len(names) != d:
            raise InvalidInputError(f"'feature_names' has {len(names)} entries for {d} features")
    elif columns is not None:
        names = columns
    else:
        names = [f"V{j + 1}" for j in range(d)]
    names = unique_names(names)

    if n <= retain_threshold:
        retained = frame.copy() if frame is not None else X.copy()
    else:
        retained = None

    constant = _constant_columns(X)
    if constant.any():
        logger.debug("constant features scored at 0.5: %s",
                     [names[j] for j in np.flatnonzero(constant)])
    Xs = _standardize(X, constant) if normalize else X

    tail_probs = _rank_tails(Xs, constant)
    scores = aggregate_scores(tail_probs)
    logger.debug("fit ECOD on %d samples x %d features (max score %.4f)", n, d, scores.max())

    return ECODModel(
        scores=scores,
        tail_probs=tail_probs,
        n_samples=n,
        n_features=d,
        feature_names=tuple(names),
        normalized=bool(normalize),
        retained_data=retained,
        dropped_features=tuple(dropped),
    )


def _check_columns(X: np.ndarray, name: str, expected: int):
    if X.shape[1] != expected:
        raise DimensionMismatchError(f"'{name}' must have {expected} features, got {X.shape[1]}")


def predict(model: ECODModel, new_samples, reference_data=None) -> np.ndarray:
    """Score ``new_samples`` against ECDFs built from ``reference_data``.

    ``reference_data`` is normally the training matrix. It is required: the
    model's own tail probabilities are never used as a stand-in.
    """
    if reference_data is None:
        raise MissingReferenceError("'reference_data' is required for computing ECDFs")

    X_new = coerce_input(new_samples, "new_samples")[0]
    X_ref = coerce_input(reference_data, "reference_data")[0]
    _check_columns(X_new, "new_samples", model.n_features)
    _check_columns(X_ref, "reference_data", model.n_features)
    if X_ref.shape[0] < 1:
        raise InvalidInputError("'reference_data' must have at least 1 sample")

    n_ref = X_ref.shape[0]
    sorted_ref = np.sort(X_ref, axis=0)
    left = np.empty_like(X_new)
    for j in range(model.n_features):
        # F_j(x) = #(reference <= x) / n_ref
        left[:, j] = np.searchsorted(sorted_ref[:, j], X_new[:, j], side="right") / n_ref

    scores = aggregate_scores(two_sided_tail(left))
    logger.debug("predicted %d samples against %d reference rows", X_new.shape[0], n_ref)
    return scores


class ECOD(BaseDetector):
    """pyod-compatible detector around :func:`fit` / :func:`predict`.

    The training matrix is kept as the ECDF reference for ``decision_function``.
    """

    def __init__(self, contamination=0.1, normalize=False):
        super().__init__(contamination=contamination)
        self.normalize = normalize
        self.model_: Optional[ECODModel] = None
        self.reference_: Optional[np.ndarray] = None

    def fit(self, X, y=None):
        self._set_n_classes(y)
        self.model_ = fit(X, normalize=self.normalize)
        self.reference_ = coerce_input(X, "data", warn=False)[0]
        self.decision_scores_ = np.array(self.model_.scores)
        self._process_decision_scores()
        return self

    def decision_function(self, X):
        if self.model_ is None:
            raise RuntimeError("ECOD not fitted")
        return predict(self.model_, X, self.reference_)

    def score(self, X, y=None):
        return self.decision_function(X)
