"""Walkthrough: iris outliers, simulated data with labels, train/test scoring."""
import logging
import os
import sys

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from sklearn.datasets import load_iris

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path: sys.path.insert(0, ROOT)

from ecodlab.methods.ecod import fit, predict
from ecodlab.reporting.outliers import get_outliers, feature_contributions
from ecodlab.reporting.summary import format_model, format_summary
from ecodlab.reporting.plots import plot_scores, plot_contributions
from ecodlab.evaluate.metrics import evaluate_scores, confusion_table


def main(show: bool = True):
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    iris = load_iris(as_frame=True).data

    print("Example 1: iris")
    print("---------------")
    model = fit(iris)
    print(format_model(model))
    outliers = get_outliers(model, threshold="0.95", return_indices=True)
    print("\nOutlying rows (0-based):", outliers.tolist())
    print(iris.iloc[outliers])

    fig, axes = plt.subplots(1, 3, figsize=(16, 4))
    plot_scores(model, "scores", ax=axes[0])
    plot_scores(model, "ranked", ax=axes[1])
    most_anomalous = int(np.argmax(model.scores)) + 1
    plot_contributions(model, most_anomalous, ax=axes[2])
    fig.tight_layout()

    print("\nExample 2: feature contributions")
    print("--------------------------------")
    print(f"Most anomalous sample: {most_anomalous} (score {model.scores[most_anomalous - 1]:.3f})")
    print(feature_contributions(model, most_anomalous).round(3).to_string(index=False))

    print("\nExample 3: simulated data")
    print("-------------------------")
    rng = np.random.default_rng(42)
    X_normal = pd.DataFrame(rng.normal(0, 1, size=(500, 3)), columns=["x1", "x2", "x3"])
    X_anomaly = pd.DataFrame({
        "x1": rng.normal(3, 0.5, 50),
        "x2": rng.normal(-3, 0.5, 50),
        "x3": rng.normal(0, 3, 50),
    })
    X_all = pd.concat([X_normal, X_anomaly], ignore_index=True)
    y_true = np.r_[np.zeros(500, dtype=int), np.ones(50, dtype=int)]
    model_sim = fit(X_all)
    print(confusion_table(y_true, model_sim.scores, "auto"))
    m = evaluate_scores(y_true, model_sim.scores, "auto")
    print(f"accuracy={m['accuracy']:.3f} precision={m['precision']:.3f} "
          f"recall={m['recall']:.3f} F1={m['F1']:.3f} AUC_ROC={m['AUC_ROC']:.3f}")

    print("\nExample 4: train / test split")
    print("-----------------------------")
    X_train, X_test = iris.iloc[:100], iris.iloc[100:]
    model_train = fit(X_train)
    scores_test = predict(model_train, X_test, X_train)
    print(format_summary(model_train))
    print("\nTest scores:")
    print(pd.Series(scores_test).describe().round(3))

    print("\nExample 5: thresholds")
    print("---------------------")
    for thresh in ("0.90", "0.95", "0.99"):
        print(f"threshold {thresh}: {len(get_outliers(model, thresh, return_indices=True))} outliers")

    if show:
        plt.show()


if __name__ == "__main__":
    main()
