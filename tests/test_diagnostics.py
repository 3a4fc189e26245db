"""Tests for residual diagnostics."""

import numpy as np
import pytest
from scipy import stats

from distselect.diagnostics import residual_diagnostics


class TestResidualDiagnostics:
    def test_normal_residuals(self):
        r = np.random.default_rng(0).standard_normal(500)
        diag = residual_diagnostics(r)
        assert diag.n_residuals == 500
        assert diag.goodness_of_fit_p > 0.01
        assert diag.skewness == pytest.approx(stats.skew(r))
        assert diag.kurtosis == pytest.approx(stats.kurtosis(r, fisher=True))
        assert abs(diag.kurtosis) < 1.0

    def test_shifted_residuals_rejected(self):
        r = np.random.default_rng(1).standard_normal(500) + 3.0
        assert residual_diagnostics(r).goodness_of_fit_p < 1e-6

    def test_non_finite_dropped(self):
        r = np.array([np.inf, -0.5, 0.1, np.nan, 0.7, -np.inf])
        diag = residual_diagnostics(r)
        assert diag.n_residuals == 3
        assert np.isfinite(diag.skewness)

    def test_constant_residuals_leave_moments_missing(self):
        diag = residual_diagnostics(np.array([0.3, 0.3, 0.3]))
        assert np.isnan(diag.skewness)
        assert np.isnan(diag.kurtosis)
        assert np.isfinite(diag.goodness_of_fit_p)

    def test_empty_residuals(self):
        diag = residual_diagnostics(np.array([np.nan, np.inf]))
        assert diag.n_residuals == 0
        assert np.isnan(diag.goodness_of_fit_p)
        assert np.isnan(diag.skewness)

    def test_to_dict_serialisable(self):
        d = residual_diagnostics(np.array([-1.0, 0.0, 1.0])).to_dict()
        assert set(d) == {"goodness_of_fit_p", "skewness", "kurtosis", "n_residuals"}
        assert isinstance(d["n_residuals"], int)
