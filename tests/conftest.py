import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
from sklearn.datasets import load_iris


@pytest.fixture
def iris():
    return load_iris(as_frame=True).data


@pytest.fixture
def normal_matrix():
    rng = np.random.RandomState(42)
    return rng.normal(size=(100, 5))


@pytest.fixture
def shifted_matrix():
    """90 standard-normal rows followed by 10 rows centred at 5."""
    rng = np.random.RandomState(123)
    X_normal = rng.normal(size=(90, 3))
    X_outlier = rng.normal(5, 0.5, size=(10, 3))
    return np.vstack([X_normal, X_outlier])


@pytest.fixture
def mixed_frame():
    rng = np.random.RandomState(0)
    return pd.DataFrame({
        "a": rng.normal(size=30),
        "colour": rng.choice(["red", "green"], size=30),
        "b": rng.normal(size=30),
        "flag": pd.Categorical(rng.choice(["x", "y"], size=30)),
    })
