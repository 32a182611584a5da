from __future__ import annotations
import numpy as np

# Same floor the reference R implementation used (.Machine$double.eps)
EPSILON = float(np.finfo(np.float64).eps)


def two_sided_tail(left: np.ndarray) -> np.ndarray:
    """min(F, 1 - F), floored at EPSILON so that log() stays finite."""
    left = np.asarray(left, dtype=np.float64)
    return np.maximum(np.minimum(left, 1.0 - left), EPSILON)


def aggregate_scores(tail_probs: np.ndarray) -> np.ndarray:
    """Per-row anomaly score: -sum(log(tail_probs))."""
    return -np.log(tail_probs).sum(axis=1)
