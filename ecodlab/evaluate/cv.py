from __future__ import annotations
import logging
import warnings
from typing import Callable, List, Optional, Tuple

import numpy as np
from sklearn.model_selection import KFold, StratifiedKFold

from ..methods.ecod import coerce_input, fit, predict
from ..methods.errors import ECODError, InvalidInputError
from .metrics import average_precision

logger = logging.getLogger(__name__)

ProgressCB = Callable[[int], None]


def kfold_indices(n: int, y=None, n_splits: int = 5, random_state: int = 42):
    if y is not None:
        y_arr = np.asarray(y)
        classes, counts = np.unique(y_arr, return_counts=True)
        # StratifiedKFold needs at least one class with n_splits members
        if len(classes) == 2 and counts.max() >= n_splits:
            skf = StratifiedKFold(n_splits=n_splits, shuffle=True, random_state=random_state)
            return list(skf.split(np.arange(n), y_arr))
    kf = KFold(n_splits=n_splits, shuffle=True, random_state=random_state)
    return list(kf.split(np.arange(n)))


def cv_transductive_scores(X,
                           y=None,
                           n_splits: int = 5,
                           random_state: int = 42,
                           normalize: bool = False,
                           progress_cb: Optional[ProgressCB] = None) -> Tuple[np.ndarray, List[float]]:
    """Out-of-fold ECOD scores.

    Each test fold is scored with :func:`predict` against the training fold as
    reference, so no row ever contributes to its own ECDF. Returns the scores
    aligned with the rows of ``X`` and, when ``y`` is given, the per-fold
    average precision (empty list otherwise).
    """
    X_arr = coerce_input(X, "X")[0]
    if not 2 <= n_splits <= len(X_arr):
        raise InvalidInputError(f"n_splits must be between 2 and the number of rows ({len(X_arr)}), "
                                f"got {n_splits}")
    y_arr = None if y is None else np.asarray(y).ravel()
    splits = kfold_indices(len(X_arr), y_arr, n_splits=n_splits, random_state=random_state)

    oof = np.full(len(X_arr), np.nan)
    aps: List[float] = []
    for fold, (tr_idx, te_idx) in enumerate(splits, start=1):
        Xtr, Xte = X_arr[tr_idx], X_arr[te_idx]
        try:
            model = fit(Xtr, normalize=normalize, retain_threshold=0)
            oof[te_idx] = predict(model, Xte, Xtr)
        except ECODError as e:
            warnings.warn(f"cv fold {fold} failed: {e}")
        if y_arr is not None:
            aps.append(average_precision(y_arr[te_idx], oof[te_idx])
                       if not np.isnan(oof[te_idx]).any() else float("nan"))
        logger.debug("cv fold %d: %d train / %d test rows", fold, len(tr_idx), len(te_idx))
        if progress_cb is not None:
            progress_cb(1)
    return oof, aps
