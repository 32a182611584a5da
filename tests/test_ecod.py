"""Tests for the ECOD fit / predict engines and the pyod detector."""

import dataclasses

import numpy as np
import pandas as pd
import pytest

from ecodlab.methods.ecod import ECOD, RETAIN_THRESHOLD, fit, predict
from ecodlab.methods.errors import (
    DimensionMismatchError,
    InvalidInputError,
    MissingReferenceError,
    NoNumericFeaturesError,
)
from ecodlab.methods.tails import EPSILON


# ── Fit: basic contract ───────────────────────────────────────────

class TestFitBasics:
    def test_shapes_and_metadata(self, normal_matrix):
        model = fit(normal_matrix)
        assert model.n_samples == 100
        assert model.n_features == 5
        assert model.scores.shape == (100,)
        assert model.tail_probs.shape == (100, 5)
        assert model.feature_names == ("V1", "V2", "V3", "V4", "V5")
        assert model.normalized is False
        assert model.dropped_features == ()

    def test_scores_non_negative(self, normal_matrix):
        model = fit(normal_matrix)
        assert np.all(model.scores >= 0)

    def test_scores_reproduced_from_tail_probs(self, iris):
        model = fit(iris)
        recomputed = -np.log(model.tail_probs).sum(axis=1)
        np.testing.assert_allclose(recomputed, model.scores)

    def test_tail_probs_bounds(self, iris):
        model = fit(iris)
        assert model.tail_probs.min() >= EPSILON
        assert model.tail_probs.max() <= 0.5

    def test_iris_dataframe(self, iris):
        model = fit(iris)
        assert model.n_samples == 150
        assert model.n_features == 4
        assert model.feature_names == tuple(iris.columns)
        assert model.scores.min() > 2.0

    def test_single_feature_and_1d_input(self):
        rng = np.random.RandomState(1)
        model = fit(rng.normal(size=100))
        assert model.n_features == 1
        assert model.n_samples == 100

    def test_small_sample(self):
        rng = np.random.RandomState(2)
        model = fit(rng.normal(size=(5, 2)))
        assert model.n_samples == 5

    def test_nested_lists_accepted(self):
        model = fit([[1.0, 2.0], [2.0, 1.0], [3.0, 5.0]])
        assert model.n_features == 2


# ── Fit: numeric semantics ────────────────────────────────────────

class TestFitSemantics:
    def test_average_rank_for_ties(self):
        model = fit([[1], [1], [2], [3]])
        # ranks 1.5, 1.5, 3, 4 over n = 4
        expected = [0.375, 0.375, 0.25, EPSILON]
        np.testing.assert_allclose(model.tail_probs[:, 0], expected)

    def test_maximum_clamped_to_epsilon(self):
        model = fit(np.arange(10.0))
        assert model.tail_probs[-1, 0] == EPSILON
        assert np.isfinite(model.scores).all()

    def test_constant_feature(self):
        rng = np.random.RandomState(3)
        X = np.column_stack([rng.normal(size=50), np.full(50, 0.1)])
        model = fit(X)
        np.testing.assert_array_equal(model.tail_probs[:, 1], 0.5)
        np.testing.assert_allclose(model.contributions()[:, 1], np.log(2))

    def test_all_constant_scores_are_ln2_times_d(self):
        model = fit(np.ones((10, 3)))
        np.testing.assert_allclose(model.scores, 3 * np.log(2))

    def test_scale_invariance(self):
        rng = np.random.RandomState(4)
        x = rng.normal(size=(60, 2))
        a = fit(x)
        b = fit(1000 * x)
        np.testing.assert_array_equal(a.tail_probs, b.tail_probs)
        np.testing.assert_array_equal(a.scores, b.scores)

    def test_shifted_samples_score_higher(self, shifted_matrix):
        model = fit(shifted_matrix)
        assert model.scores[90:].mean() > model.scores[:90].mean()

    def test_normalize_keeps_scores(self, normal_matrix):
        raw = fit(normal_matrix)
        norm = fit(normal_matrix, normalize=True)
        assert norm.normalized is True
        np.testing.assert_allclose(raw.scores, norm.scores)

    def test_normalize_with_constant_column(self):
        X = np.column_stack([np.arange(20.0), np.full(20, 7.0)])
        model = fit(X, normalize=True)
        assert np.isfinite(model.scores).all()
        np.testing.assert_array_equal(model.tail_probs[:, 1], 0.5)


# ── Fit: metadata and model value ─────────────────────────────────

class TestModelValue:
    def test_retained_below_threshold(self, normal_matrix):
        model = fit(normal_matrix)
        np.testing.assert_array_equal(model.retained_data, normal_matrix)
        assert model.retained_data is not normal_matrix

    def test_not_retained_above_threshold(self, normal_matrix):
        model = fit(normal_matrix, retain_threshold=50)
        assert model.retained_data is None

    def test_default_retain_threshold(self):
        assert RETAIN_THRESHOLD == 10_000

    def test_retained_frame_for_dataframe(self, iris):
        model = fit(iris)
        assert isinstance(model.retained_data, pd.DataFrame)
        pd.testing.assert_frame_equal(model.retained_data, iris)

    def test_custom_feature_names(self, normal_matrix):
        names = ["a", "b", "c", "d", "e"]
        model = fit(normal_matrix, feature_names=names)
        assert model.feature_names == tuple(names)

    def test_feature_names_length_checked(self, normal_matrix):
        with pytest.raises(InvalidInputError):
            fit(normal_matrix, feature_names=["a", "b"])

    def test_duplicate_column_names_made_unique(self):
        df = pd.DataFrame(np.random.RandomState(5).normal(size=(10, 2)), columns=["x", "x"])
        model = fit(df)
        assert model.feature_names == ("x", "x.1")

    def test_arrays_read_only(self, normal_matrix):
        model = fit(normal_matrix)
        with pytest.raises(ValueError):
            model.scores[0] = 0.0
        with pytest.raises(ValueError):
            model.tail_probs[0, 0] = 0.0

    def test_retained_array_read_only(self, normal_matrix):
        model = fit(normal_matrix)
        with pytest.raises(ValueError):
            model.retained_data[0, 0] = 99.0
        assert normal_matrix.flags.writeable

    def test_identity_equality_and_hash(self, normal_matrix):
        a = fit(normal_matrix)
        b = fit(normal_matrix)
        assert a == a
        assert a != b
        assert len({a, b}) == 2

    def test_frozen(self, normal_matrix):
        model = fit(normal_matrix)
        with pytest.raises(dataclasses.FrozenInstanceError):
            model.n_samples = 3

    def test_tail_frame(self, iris):
        model = fit(iris)
        frame = model.tail_frame()
        assert list(frame.columns) == list(iris.columns)
        assert frame.index[0] == 1
        assert frame.shape == (150, 4)


# ── Fit: input validation ─────────────────────────────────────────

class TestFitValidation:
    def test_string_rejected(self):
        with pytest.raises(InvalidInputError, match="must be a matrix or data frame"):
            fit("not a matrix")

    def test_character_matrix_rejected(self):
        letters = np.array(list("abcdefghijklmnopqrst")).reshape(10, 2)
        with pytest.raises(InvalidInputError, match="must contain only numeric values"):
            fit(letters)

    def test_single_row_rejected(self):
        with pytest.raises(InvalidInputError, match="at least 2 samples"):
            fit(np.arange(5.0).reshape(1, 5))

    def test_zero_columns_rejected(self):
        with pytest.raises(InvalidInputError, match="at least 1 feature"):
            fit(np.empty((10, 0)))

    def test_nan_rejected(self):
        X = np.ones((5, 2))
        X[2, 1] = np.nan
        with pytest.raises(InvalidInputError):
            fit(X)

    def test_ragged_rejected(self):
        with pytest.raises(InvalidInputError):
            fit([[1.0, 2.0], [3.0]])

    def test_three_dimensional_rejected(self):
        with pytest.raises(InvalidInputError):
            fit(np.zeros((3, 3, 3)))

    def test_non_numeric_columns_dropped_with_warning(self, mixed_frame):
        with pytest.warns(UserWarning, match="colour, flag"):
            model = fit(mixed_frame)
        assert model.feature_names == ("a", "b")
        assert model.dropped_features == ("colour", "flag")
        assert model.n_features == 2

    def test_no_numeric_features(self):
        df = pd.DataFrame({"c": list("abcde"), "d": list("vwxyz")})
        with pytest.warns(UserWarning):
            with pytest.raises(NoNumericFeaturesError):
                fit(df)

    def test_no_numeric_features_is_invalid_input(self):
        assert issubclass(NoNumericFeaturesError, InvalidInputError)


# ── Predict ───────────────────────────────────────────────────────

class TestPredict:
    def test_length_and_sign(self):
        rng = np.random.RandomState(456)
        X_train = rng.normal(size=(100, 3))
        X_test = rng.normal(size=(20, 3))
        model = fit(X_train)
        scores = predict(model, X_test, X_train)
        assert scores.shape == (20,)
        assert np.all(scores >= 0)

    def test_matches_fit_without_ties(self, normal_matrix):
        model = fit(normal_matrix)
        np.testing.assert_allclose(predict(model, normal_matrix, normal_matrix), model.scores)

    def test_tracks_fit_with_ties(self):
        rng = np.random.RandomState(7)
        X = rng.normal(size=(200, 3))
        # ties only in the bulk; the extremes stay unique
        interior = np.abs(X) < 1
        X[interior] = np.round(X[interior], 1)
        model = fit(X)
        self_scores = predict(model, X, X)
        assert not np.allclose(self_scores, model.scores)
        assert np.abs(self_scores - model.scores).max() < 0.5
        assert np.corrcoef(self_scores, model.scores)[0, 1] > 0.99

    def test_ecdf_tie_policy_differs_from_ranks(self):
        X = np.array([[1.0], [1.0], [2.0], [3.0]])
        model = fit(X)
        scores = predict(model, X, X)
        # ECDF counts values <= x: F(1) = 2/4, so the tied rows sit at 0.5
        np.testing.assert_allclose(scores[:2], np.log(2))
        np.testing.assert_allclose(model.scores[:2], -np.log(0.375))

    def test_values_outside_reference(self):
        X = np.arange(10.0).reshape(-1, 1)
        model = fit(X)
        scores = predict(model, [[-100.0], [100.0], [4.5]], X)
        # F(-100) = 0 and F(100) = 1 both clamp to epsilon
        np.testing.assert_allclose(scores[:2], -np.log(EPSILON))
        np.testing.assert_allclose(scores[2], -np.log(0.5))

    def test_does_not_mutate_model(self, normal_matrix):
        model = fit(normal_matrix)
        before = model.scores.copy()
        predict(model, normal_matrix[:10] * 3, normal_matrix)
        np.testing.assert_array_equal(model.scores, before)

    def test_dataframe_inputs(self, iris):
        model = fit(iris.iloc[:100])
        scores = predict(model, iris.iloc[100:], iris.iloc[:100])
        assert len(scores) == 50

    def test_missing_reference(self, normal_matrix):
        model = fit(normal_matrix)
        with pytest.raises(MissingReferenceError):
            predict(model, normal_matrix)

    def test_new_data_dimension_mismatch(self, normal_matrix):
        model = fit(normal_matrix)
        with pytest.raises(DimensionMismatchError):
            predict(model, normal_matrix[:, :4], normal_matrix)
        with pytest.raises(DimensionMismatchError):
            predict(model, np.hstack([normal_matrix, normal_matrix[:, :1]]), normal_matrix)

    def test_reference_dimension_mismatch(self, normal_matrix):
        model = fit(normal_matrix)
        with pytest.raises(DimensionMismatchError):
            predict(model, normal_matrix, normal_matrix[:, :3])

    def test_retained_data_not_substituted(self, normal_matrix):
        model = fit(normal_matrix)
        assert model.retained_data is not None
        with pytest.raises(MissingReferenceError):
            predict(model, normal_matrix, None)


# ── pyod detector adapter ─────────────────────────────────────────

class TestDetector:
    def test_fit_sets_pyod_attributes(self, shifted_matrix):
        det = ECOD(contamination=0.1).fit(shifted_matrix)
        assert det.decision_scores_.shape == (100,)
        assert det.labels_.shape == (100,)
        assert set(np.unique(det.labels_)) <= {0, 1}
        assert det.labels_[90:].sum() >= 5

    def test_decision_function_uses_training_reference(self, normal_matrix):
        det = ECOD().fit(normal_matrix)
        np.testing.assert_allclose(det.decision_function(normal_matrix), det.decision_scores_)
        np.testing.assert_allclose(det.score(normal_matrix), det.decision_scores_)

    def test_model_exposed(self, normal_matrix):
        det = ECOD(normalize=True).fit(normal_matrix)
        assert det.model_.normalized is True

    def test_unfitted(self, normal_matrix):
        with pytest.raises(RuntimeError):
            ECOD().decision_function(normal_matrix)
