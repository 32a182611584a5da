from __future__ import annotations
from typing import Dict

import numpy as np

from ..methods.model import ECODModel
from ..methods.threshold import AUTO_PERCENTILE, quantile
from .outliers import top_anomalies


def score_summary(model: ECODModel) -> Dict[str, float]:
    """Five-number summary plus mean and the automatic outlier cutoff."""
    s = np.asarray(model.scores, dtype=float)
    thr = quantile(s, AUTO_PERCENTILE)
    return {
        "min": float(s.min()),
        "q1": quantile(s, 0.25),
        "median": quantile(s, 0.5),
        "mean": float(s.mean()),
        "q3": quantile(s, 0.75),
        "max": float(s.max()),
        "threshold_95": thr,
        "n_outliers_95": int(np.sum(s > thr)),
    }


def format_summary(model: ECODModel) -> str:
    st = score_summary(model)
    lines = [
        "ECOD Model Summary",
        "==================",
        "",
        "Data Dimensions:",
        f"  Samples: {model.n_samples}",
        f"  Features: {model.n_features}",
        "",
        "Anomaly Scores:",
        f"  Min: {st['min']:.3f}",
        f"  Q1: {st['q1']:.3f}",
        f"  Median: {st['median']:.3f}",
        f"  Mean: {st['mean']:.3f}",
        f"  Q3: {st['q3']:.3f}",
        f"  Max: {st['max']:.3f}",
        "",
        f"Potential Outliers (top 5%): {st['n_outliers_95']}",
        f"Threshold (95th percentile): {st['threshold_95']:.3f}",
    ]
    return "\n".join(lines)


def format_model(model: ECODModel, top_n: int = 5) -> str:
    st = score_summary(model)
    top = top_anomalies(model, top_n)
    lines = [
        "ECOD Anomaly Detection Model",
        "==============================",
        "",
        f"Number of samples: {model.n_samples}",
        f"Number of features: {model.n_features}",
        f"Data normalized: {model.normalized}",
    ]
    if model.dropped_features:
        lines.append(f"Dropped non-numeric features: {', '.join(model.dropped_features)}")
    lines += [
        "",
        "Anomaly Score Summary:",
        "  ".join(f"{k}={st[k]:.3f}" for k in ("min", "q1", "median", "mean", "q3", "max")),
        "",
        f"Top {len(top)} Most Anomalous Samples:",
        top.round({"score": 3}).to_string(index=False),
    ]
    return "\n".join(lines)
