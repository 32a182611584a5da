from __future__ import annotations
from typing import Dict

import numpy as np
import pandas as pd
from sklearn.metrics import (
    average_precision_score,
    confusion_matrix,
    f1_score,
    precision_score,
    recall_score,
    roc_auc_score,
)

from ..methods.errors import InvalidInputError
from ..methods.threshold import resolve_threshold


def _labels_and_scores(y_true, scores):
    y = np.asarray(y_true).ravel().astype(int)
    s = np.asarray(scores, dtype=float).ravel()
    if len(y) != len(s):
        raise InvalidInputError(f"got {len(y)} labels for {len(s)} scores")
    return y, s


def average_precision(y_true, scores) -> float:
    y, s = _labels_and_scores(y_true, scores)
    if len(np.unique(y)) < 2:
        return float("nan")
    return float(average_precision_score(y, s))


def confusion_table(y_true, scores, threshold="auto") -> pd.DataFrame:
    """2x2 confusion counts; rows = actual, columns = predicted."""
    y, s = _labels_and_scores(y_true, scores)
    y_pred = (s > resolve_threshold(threshold, s)).astype(int)
    cm = confusion_matrix(y, y_pred, labels=[0, 1])
    return pd.DataFrame(cm, index=["Act Normal", "Act Anomaly"], columns=["Pred Normal", "Pred Anomaly"])


def evaluate_scores(y_true, scores, threshold="auto") -> Dict[str, float]:
    """Threshold-based and ranking metrics for labelled anomaly scores (1 = anomaly)."""
    y, s = _labels_and_scores(y_true, scores)
    thr = resolve_threshold(threshold, s)
    y_pred = (s > thr).astype(int)
    (tn, fp), (fn, tp) = confusion_matrix(y, y_pred, labels=[0, 1])

    metrics = {
        "threshold": thr,
        "TP": int(tp), "FP": int(fp), "TN": int(tn), "FN": int(fn),
        "accuracy": float((tp + tn) / len(y)),
        "precision": float(precision_score(y, y_pred, zero_division=0)),
        "recall": float(recall_score(y, y_pred, zero_division=0)),
        "F1": float(f1_score(y, y_pred, zero_division=0)),
    }
    try:
        metrics["AUC_ROC"] = float(roc_auc_score(y, s))
    except ValueError:
        metrics["AUC_ROC"] = float("nan")
    metrics["AUC_PR"] = average_precision(y, s)
    return metrics
