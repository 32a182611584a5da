from __future__ import annotations
import logging
import os
from dataclasses import dataclass

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# (mean range, sd range) per scale group; features are dealt into 4 groups
SCALE_GROUPS = (
    ((2, 8), (0.5, 1.5)),          # small (0-10)
    ((30, 70), (5, 15)),           # medium (0-100)
    ((300, 700), (50, 150)),       # large (0-1000)
    ((3000, 7000), (500, 1500)),   # xlarge (0-10000)
)


@dataclass
class SyntheticData:
    data: pd.DataFrame
    labels: np.ndarray
    outlier_rows: np.ndarray

    def with_labels(self) -> pd.DataFrame:
        df = self.data.copy()
        df["is_outlier"] = self.labels
        return df


def _feature_groups(n_features: int):
    """Split feature positions into 4 contiguous, nearly equal groups."""
    return np.array_split(np.arange(n_features), len(SCALE_GROUPS))


def generate_anomaly_data(n_samples: int = 500,
                          n_features: int = 15,
                          outlier_fraction: float = 0.05,
                          seed: int = 123) -> SyntheticData:
    """Multi-scale Gaussian data with injected outliers.

    Normal rows follow N(mean_j, sd_j) with means/spreads drawn per scale
    group; outliers sit at mean_j +/- U(3, 6) * sd_j on every feature.
    Rows are shuffled; ``outlier_rows`` holds sorted 0-based positions.
    """
    if not 0.0 <= outlier_fraction < 1.0:
        raise ValueError("outlier_fraction must be in [0, 1)")
    rng = np.random.default_rng(seed)
    n_outliers = int(np.floor(n_samples * outlier_fraction))
    n_normal = n_samples - n_outliers

    means = np.empty(n_features)
    sds = np.empty(n_features)
    for cols, ((m_lo, m_hi), (s_lo, s_hi)) in zip(_feature_groups(n_features), SCALE_GROUPS):
        means[cols] = rng.uniform(m_lo, m_hi, size=len(cols))
        sds[cols] = rng.uniform(s_lo, s_hi, size=len(cols))

    normal = rng.normal(means, sds, size=(n_normal, n_features))
    direction = rng.choice([-1.0, 1.0], size=(n_outliers, n_features))
    deviation = rng.uniform(3, 6, size=(n_outliers, n_features))
    outliers = means + direction * deviation * sds

    X = np.vstack([normal, outliers])
    labels = np.r_[np.zeros(n_normal, dtype=int), np.ones(n_outliers, dtype=int)]
    perm = rng.permutation(n_samples)
    X, labels = X[perm], labels[perm]

    df = pd.DataFrame(X, columns=[f"Feature_{j + 1}" for j in range(n_features)])
    logger.info("generated %d samples (%d outliers) x %d features", n_samples, n_outliers, n_features)
    return SyntheticData(data=df, labels=labels, outlier_rows=np.flatnonzero(labels == 1))


def write_anomaly_data(result: SyntheticData, output_dir: str = "data"):
    """Write anomaly_test_data.csv and outlier_rows.csv; returns both paths."""
    os.makedirs(output_dir, exist_ok=True)
    data_file = os.path.join(output_dir, "anomaly_test_data.csv")
    outlier_file = os.path.join(output_dir, "outlier_rows.csv")
    result.with_labels().to_csv(data_file, index=False)
    pd.DataFrame({"row_number": result.outlier_rows}).to_csv(outlier_file, index=False)
    return data_file, outlier_file
