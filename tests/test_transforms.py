"""Tests for the family validity transforms."""

import numpy as np
import pytest

from distselect.transforms import (
    UNIT_EPSILON,
    Support,
    is_degenerate,
    transform_values,
    valid_mask,
)


class TestPositiveSupport:
    def test_non_positive_values_marked_invalid(self):
        out = transform_values(np.array([0.0, 1.5, -2.0, 3.0]), Support.POSITIVE)
        assert np.isnan(out[0]) and np.isnan(out[2])
        np.testing.assert_array_equal(out[[1, 3]], [1.5, 3.0])

    def test_non_finite_marked_invalid(self):
        out = transform_values(np.array([np.inf, np.nan, 2.0]), "positive")
        assert valid_mask(out).tolist() == [False, False, True]

    def test_input_not_mutated(self):
        y = np.array([0.0, 1.0, 2.0])
        transform_values(y, Support.POSITIVE)
        np.testing.assert_array_equal(y, [0.0, 1.0, 2.0])


class TestCountSupport:
    def test_rounds_and_drops_negatives(self):
        out = transform_values(np.array([1.4, 2.6, -1.0, 0.0]), Support.COUNT)
        np.testing.assert_array_equal(out[[0, 1, 3]], [1.0, 3.0, 0.0])
        assert np.isnan(out[2])


class TestUnitSupport:
    def test_extremes_marked_invalid(self):
        out = transform_values(np.array([0.0, 5.0, 10.0]), Support.UNIT)
        # The minimum maps to exactly 0; the maximum stays just below 1.
        assert np.isnan(out[0])
        assert out[1] == pytest.approx(5.0 / (10.0 + UNIT_EPSILON))
        assert 0 < out[2] < 1

    def test_constant_feature_all_invalid(self):
        out = transform_values(np.array([3.0, 3.0, 3.0]), Support.UNIT)
        assert not valid_mask(out).any()

    def test_all_non_finite(self):
        out = transform_values(np.array([np.nan, np.inf]), Support.UNIT)
        assert not valid_mask(out).any()


class TestRealSupport:
    def test_standardises_with_sample_sd(self):
        y = np.array([1.0, 2.0, 3.0, 4.0])
        out = transform_values(y, Support.REAL)
        expected = (y - y.mean()) / y.std(ddof=1)
        np.testing.assert_allclose(out, expected)

    def test_zero_variance_invalidates_everything(self):
        out = transform_values(np.array([2.0, 2.0, 2.0]), Support.REAL)
        assert np.isnan(out).all()

    def test_non_finite_excluded_from_statistics(self):
        out = transform_values(np.array([1.0, np.nan, 3.0]), Support.REAL)
        assert np.isnan(out[1])
        np.testing.assert_allclose(out[[0, 2]], [-1 / np.sqrt(2), 1 / np.sqrt(2)])

    def test_single_finite_value(self):
        out = transform_values(np.array([1.0, np.nan]), Support.REAL)
        assert np.isnan(out).all()


class TestUnspecifiedSupport:
    def test_pass_through(self):
        y = np.array([-1.0, 0.0, 2.5])
        np.testing.assert_array_equal(transform_values(y, Support.UNSPECIFIED), y)

    def test_unknown_support_rejected(self):
        with pytest.raises(ValueError):
            transform_values(np.array([1.0]), "imaginary")


class TestIsDegenerate:
    @pytest.mark.parametrize(
        "values, expected",
        [
            ([0, 0, 0, 0, 0], True),
            ([np.nan, np.inf, -np.inf], True),
            ([0, np.nan, 0], True),
            ([0, 0, 1], False),
            ([np.nan, 2.0], False),
        ],
    )
    def test_cases(self, values, expected):
        assert is_degenerate(np.array(values, dtype=float)) is expected
