from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

import numpy as np
import pandas as pd


@dataclass(frozen=True, eq=False)
class ECODModel:
    """Result of fitting ECOD on a training matrix.

    ``scores[i]`` always equals ``-sum(log(tail_probs[i, :]))``. The score
    arrays, and ``retained_data`` when it is an array, are flagged read-only;
    the model is never updated after ``fit``. Models compare by identity.
    """

    scores: np.ndarray
    tail_probs: np.ndarray
    n_samples: int
    n_features: int
    feature_names: Tuple[str, ...]
    normalized: bool = False
    retained_data: Optional[Union[pd.DataFrame, np.ndarray]] = field(default=None, repr=False)
    dropped_features: Tuple[str, ...] = ()

    def __post_init__(self):
        for arr in (self.scores, self.tail_probs):
            arr.setflags(write=False)
        if isinstance(self.retained_data, np.ndarray):
            self.retained_data.setflags(write=False)

    def __repr__(self):
        return (f"ECODModel(n_samples={self.n_samples}, n_features={self.n_features}, "
                f"normalized={self.normalized}, retained={self.retained_data is not None})")

    def contributions(self) -> np.ndarray:
        """Per-feature score terms, -log(tail_probs)."""
        return -np.log(self.tail_probs)

    def tail_frame(self) -> pd.DataFrame:
        index = pd.RangeIndex(1, self.n_samples + 1, name="sample")
        return pd.DataFrame(self.tail_probs, columns=list(self.feature_names), index=index)
