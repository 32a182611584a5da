from __future__ import annotations
import numpy as np
import pandas as pd

from ..methods.errors import OutOfRangeError
from ..methods.model import ECODModel
from ..methods.threshold import resolve_threshold


def get_outliers(model: ECODModel, threshold="auto", return_indices: bool = False) -> np.ndarray:
    """Flag samples whose score is strictly above the resolved threshold.

    ``threshold`` may be a number, ``"auto"`` (95th percentile), a percentile
    string such as ``"0.99"``, or a Threshold variant. Returns a boolean mask
    aligned with ``model.scores``, or the ascending 0-based positions of the
    flagged samples when ``return_indices`` is set.
    """
    cutoff = resolve_threshold(threshold, model.scores)
    mask = np.asarray(model.scores) > cutoff
    if return_indices:
        return np.flatnonzero(mask)
    return mask


def _check_sample_id(model: ECODModel, sample_id) -> int:
    if isinstance(sample_id, bool) or not isinstance(sample_id, (int, np.integer)):
        raise OutOfRangeError(f"'sample_id' must be an integer, got {sample_id!r}")
    if sample_id < 1 or sample_id > model.n_samples:
        raise OutOfRangeError(f"'sample_id' must be between 1 and {model.n_samples}")
    return int(sample_id)


def feature_contributions(model: ECODModel, sample_id: int, as_frame: bool = True):
    """Per-feature breakdown of one sample's score, largest contribution first.

    ``sample_id`` is 1-based, matching the "Sample k" labels used in reports.
    """
    row = _check_sample_id(model, sample_id) - 1
    tails = np.asarray(model.tail_probs[row], dtype=float)
    contrib = -np.log(tails)

    if not as_frame:
        s = pd.Series(contrib, index=list(model.feature_names), name="contribution")
        return s.sort_values(ascending=False, kind="stable")

    df = pd.DataFrame({
        "feature": list(model.feature_names),
        "tail_probability": tails,
        "contribution": contrib,
    })
    df = df.sort_values("contribution", ascending=False, kind="stable")
    return df.reset_index(drop=True)


def top_anomalies(model: ECODModel, n: int = 5) -> pd.DataFrame:
    """The ``n`` highest-scoring samples (1-based sample ids)."""
    n = max(0, min(int(n), model.n_samples))
    order = np.argsort(-np.asarray(model.scores), kind="stable")[:n]
    return pd.DataFrame({"sample": order + 1, "score": np.asarray(model.scores)[order]})
