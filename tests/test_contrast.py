"""Tests for the Wald contrast and QR-based inversion."""

import math
from dataclasses import replace

import numpy as np
import pytest
from scipy import stats

from distselect._results import FitRecord
from distselect.contrast import (
    SingularInformationError,
    contrast_test,
    qr_inverse,
    standard_errors,
    wald_p_value,
)


def _record(estimate=0.8, information=None, names=("Intercept", "group")):
    info = np.array([[40.0, 10.0], [10.0, 10.0]]) if information is None else information
    return FitRecord(
        family="poisson",
        log_likelihood=-20.0,
        aic=44.0,
        bic=45.0,
        gaic=46.0,
        gaic_penalty=3.0,
        n_params=2,
        df_residual=4,
        nobs=6,
        coefficients={"Intercept": 2.0, "group": estimate},
        information=info,
        parameter_names=names,
    )


class TestQrInverse:
    def test_matches_inverse(self):
        rng = np.random.default_rng(0)
        a = rng.standard_normal((4, 4))
        a = a @ a.T + 4 * np.eye(4)
        np.testing.assert_allclose(qr_inverse(a), np.linalg.inv(a), rtol=1e-10)

    def test_singular(self):
        with pytest.raises(SingularInformationError):
            qr_inverse(np.array([[1.0, 2.0], [2.0, 4.0]]))

    def test_zero_matrix(self):
        with pytest.raises(SingularInformationError):
            qr_inverse(np.zeros((2, 2)))

    @pytest.mark.parametrize("bad", [np.empty((0, 0)), np.ones((2, 3)), np.array([[np.nan]])])
    def test_rejects_bad_shapes_and_values(self, bad):
        with pytest.raises(SingularInformationError):
            qr_inverse(bad)

    def test_is_a_linalg_error(self):
        assert issubclass(SingularInformationError, np.linalg.LinAlgError)


class TestContrastTest:
    def test_wald_statistics(self):
        rec = _record()
        res = contrast_test(rec, "group")
        cov = np.linalg.inv(rec.information)
        se = math.sqrt(cov[1, 1])
        assert res.coefficient == "group"
        assert res.estimate == 0.8
        assert res.std_error == pytest.approx(se)
        assert res.z_value == pytest.approx(0.8 / se)
        assert res.p_value == pytest.approx(2 * stats.norm.cdf(-abs(0.8 / se)))

    def test_p_value_symmetric_in_sign(self):
        pos = contrast_test(_record(estimate=0.8), "group")
        neg = contrast_test(_record(estimate=-0.8), "group")
        assert pos.p_value == pytest.approx(neg.p_value)
        assert pos.z_value == pytest.approx(-neg.z_value)

    @pytest.mark.parametrize("estimate", [0.0, 1e-6, 0.3, 5.0, -40.0])
    def test_p_value_in_unit_interval(self, estimate):
        p = contrast_test(_record(estimate=estimate), "group").p_value
        assert 0.0 <= p <= 1.0

    def test_zero_estimate_gives_p_one(self):
        assert contrast_test(_record(estimate=0.0), "group").p_value == pytest.approx(1.0)

    def test_missing_coefficient(self):
        assert contrast_test(_record(), "treatment") is None

    def test_coefficient_absent_from_information(self):
        rec = _record(information=np.array([[4.0]]), names=("Intercept",))
        assert contrast_test(rec, "group") is None

    def test_singular_information(self):
        rec = _record(information=np.array([[1.0, 1.0], [1.0, 1.0]]))
        assert contrast_test(rec, "group") is None

    def test_empty_information(self):
        rec = _record(information=np.empty((0, 0)), names=())
        assert contrast_test(rec, "group") is None

    def test_negative_variance(self):
        # Indefinite matrix: invertible, but the group variance is negative.
        rec = _record(information=np.array([[1.0, 2.0], [2.0, 1.0]]))
        assert contrast_test(rec, "group") is None

    def test_non_finite_estimate(self):
        rec = replace(_record(), coefficients={"Intercept": 2.0, "group": math.inf})
        assert contrast_test(rec, "group") is None


class TestHelpers:
    def test_standard_errors(self):
        se = standard_errors(_record(information=np.diag([4.0, 25.0])))
        assert se == pytest.approx({"Intercept": 0.5, "group": 0.2})

    def test_wald_p_value(self):
        assert wald_p_value(1.959963984540054) == pytest.approx(0.05)
        assert wald_p_value(-1.959963984540054) == pytest.approx(0.05)
