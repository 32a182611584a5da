"""Tests for table loading, numeric filtering and the synthetic generator."""

import io
import logging

import numpy as np
import pandas as pd
import pytest
import scipy.io

from ecodlab.datasets.io import load_table, select_numeric, unique_names
from ecodlab.datasets.synthetic import generate_anomaly_data, write_anomaly_data
from ecodlab.evaluate.metrics import evaluate_scores
from ecodlab.methods.base import as_float_matrix, ensure_2d
from ecodlab.methods.ecod import fit
from ecodlab.methods.errors import InvalidInputError


class TestNumericSelection:
    def test_select_numeric(self, mixed_frame):
        numeric, dropped = select_numeric(mixed_frame)
        assert list(numeric.columns) == ["a", "b"]
        assert dropped == ["colour", "flag"]

    def test_bool_and_int_kept(self):
        df = pd.DataFrame({"i": [1, 2, 3], "b": [True, False, True], "s": ["x", "y", "z"]})
        numeric, dropped = select_numeric(df)
        assert list(numeric.columns) == ["i", "b"]
        assert dropped == ["s"]

    def test_unique_names(self):
        assert unique_names(["x", "x", "y", "x"]) == ["x", "x.1", "y", "x.2"]
        assert unique_names(["x", "x.1", "x"]) == ["x", "x.1", "x.2"]
        assert unique_names([0, 1]) == ["0", "1"]


class TestArrayCoercion:
    def test_ensure_2d(self):
        assert ensure_2d(np.arange(4)).shape == (4, 1)
        assert ensure_2d(np.zeros((2, 3))).shape == (2, 3)

    def test_object_numbers(self):
        arr = as_float_matrix(np.array([[1, 2.5], [3, 4]], dtype=object))
        assert arr.dtype == np.float64

    @pytest.mark.parametrize("bad", [None, 3.0, {"a": [1, 2]}, b"raw"])
    def test_not_a_matrix(self, bad):
        with pytest.raises(InvalidInputError):
            as_float_matrix(bad)

    def test_infinite(self):
        with pytest.raises(InvalidInputError):
            as_float_matrix([[1.0, np.inf], [0.0, 1.0]])


class TestLoadTable:
    def test_csv(self):
        payload = b"a,b,label\n1,2,0\n3,4,1\n"
        df = load_table(payload, "data.csv")
        assert list(df.columns) == ["a", "b", "label"]
        assert len(df) == 2

    def test_mat(self):
        buf = io.BytesIO()
        X = np.arange(12.0).reshape(6, 2)
        scipy.io.savemat(buf, {"X": X, "y": np.array([0, 0, 0, 0, 1, 1])})
        df = load_table(buf.getvalue(), "data.MAT")
        assert list(df.columns) == ["V1", "V2", "label"]
        np.testing.assert_array_equal(df[["V1", "V2"]].to_numpy(), X)
        assert df["label"].sum() == 2

    def test_mat_largest_matrix_used(self, caplog):
        buf = io.BytesIO()
        scipy.io.savemat(buf, {"small": np.ones((3, 2)), "big": np.zeros((10, 3))})
        with caplog.at_level(logging.INFO, logger="ecodlab.datasets.io"):
            df = load_table(buf.getvalue(), "data.mat")
        assert df.shape == (10, 3)
        assert "'big'" in caplog.text

    def test_unreadable_mat(self):
        with pytest.raises(InvalidInputError):
            load_table(b"not a mat file " * 20, "broken.mat")


class TestSynthetic:
    def test_shape_and_labels(self):
        res = generate_anomaly_data(n_samples=500, n_features=15, outlier_fraction=0.05, seed=123)
        assert res.data.shape == (500, 15)
        assert list(res.data.columns)[:2] == ["Feature_1", "Feature_2"]
        assert res.labels.sum() == 25
        np.testing.assert_array_equal(res.outlier_rows, np.flatnonzero(res.labels))

    def test_reproducible(self):
        a = generate_anomaly_data(seed=7)
        b = generate_anomaly_data(seed=7)
        pd.testing.assert_frame_equal(a.data, b.data)

    def test_scales_differ(self):
        res = generate_anomaly_data(n_samples=200, outlier_fraction=0.0, seed=1)
        means = res.data.mean()
        assert means["Feature_1"] < 10
        assert means["Feature_15"] > 1000

    def test_ecod_recovers_outliers(self):
        res = generate_anomaly_data(seed=123)
        m = evaluate_scores(res.labels, fit(res.data).scores, "auto")
        assert m["AUC_ROC"] > 0.95

    def test_write(self, tmp_path):
        res = generate_anomaly_data(n_samples=100, n_features=4, seed=2)
        data_file, outlier_file = write_anomaly_data(res, str(tmp_path / "out"))
        df = pd.read_csv(data_file)
        assert "is_outlier" in df.columns
        assert df["is_outlier"].sum() == 5
        rows = pd.read_csv(outlier_file)
        assert rows["row_number"].tolist() == res.outlier_rows.tolist()

    def test_bad_fraction(self):
        with pytest.raises(ValueError):
            generate_anomaly_data(outlier_fraction=1.0)
