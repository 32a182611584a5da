from __future__ import annotations
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np

from ..methods.errors import InvalidInputError
from ..methods.model import ECODModel
from ..methods.threshold import AUTO_PERCENTILE, quantile, resolve_threshold
from .outliers import feature_contributions

PLOT_KINDS = ("scores", "ranked", "features")


def _axes(ax):
    if ax is None:
        _, ax = plt.subplots()
    return ax


def plot_scores(model: ECODModel, kind: str = "scores", threshold=None, top_n: int = 10, ax=None):
    """Histogram ("scores"), ranked stem plot ("ranked") or contribution
    heatmap of the top-n samples ("features"). Returns the matplotlib Axes."""
    if kind not in PLOT_KINDS:
        raise InvalidInputError(f"kind must be one of {PLOT_KINDS}, got {kind!r}")
    scores = np.asarray(model.scores, dtype=float)
    thr = quantile(scores, AUTO_PERCENTILE) if threshold is None else resolve_threshold(threshold, scores)
    ax = _axes(ax)

    if kind == "scores":
        ax.hist(scores, bins=30, color="lightblue", edgecolor="white")
        ax.axvline(thr, color="red", lw=2, ls="--", label=f"Threshold ({thr:.2f})")
        ax.set(title="Distribution of Anomaly Scores", xlabel="Anomaly Score", ylabel="Frequency")
        ax.legend(loc="upper right")
    elif kind == "ranked":
        sorted_scores = np.sort(scores)
        is_outlier = sorted_scores > thr
        rank = np.arange(1, len(sorted_scores) + 1)
        for mask, color, label in ((~is_outlier, "blue", "Normal"), (is_outlier, "red", "Outlier")):
            if mask.any():
                ax.vlines(rank[mask], np.zeros(mask.sum()), sorted_scores[mask], colors=color, lw=2, label=label)
        ax.axhline(thr, color="red", lw=2, ls="--", label=f"Threshold (n={int(is_outlier.sum())})")
        ax.set(title="Ranked Anomaly Scores", xlabel="Rank", ylabel="Anomaly Score")
        ax.legend(loc="upper left")
    else:
        top_idx = np.argsort(-scores, kind="stable")[:min(top_n, model.n_samples)]
        contributions = model.contributions()[top_idx]
        im = ax.imshow(contributions, aspect="auto", cmap="YlOrRd")
        ax.set_xticks(range(model.n_features))
        ax.set_xticklabels(model.feature_names, rotation=90)
        ax.set_yticks(range(len(top_idx)))
        ax.set_yticklabels([f"Sample {i + 1}" for i in top_idx])
        ax.set(title=f"Feature Contributions (Top {len(top_idx)} Outliers)", xlabel="Feature")
        ax.figure.colorbar(im, ax=ax, label="-log(tail probability)")
    return ax


def plot_contributions(model: ECODModel, sample_id: int, ax: Optional[plt.Axes] = None):
    contrib = feature_contributions(model, sample_id)
    ax = _axes(ax)
    ax.bar(contrib["feature"], contrib["contribution"], color="steelblue")
    ax.set(title=f"Feature Contributions of Sample {sample_id}", ylabel="Contribution")
    ax.tick_params(axis="x", labelrotation=90)
    return ax
