"""Wald contrast for one coefficient of the mean linear predictor.

For the selected fit of a feature, the contrast on coefficient ``c``
is::

    SE(β̂_c) = √[ (I⁻¹)_cc ]
    z        = β̂_c / SE(β̂_c)
    p        = 2 · Φ(−|z|)

where ``I`` is the observed information matrix stored on the
:class:`~._results.FitRecord`.  The inverse is obtained through a QR
decomposition ``I = QR`` and a triangular solve ``I⁻¹ = R⁻¹Qᵀ`` rather
than a naive matrix inverse, and the decomposition is declared
singular when any ``|Rᵢᵢ|`` is negligible relative to the largest.

The test relies on the asymptotic normality of the maximum-likelihood
estimate; that property belongs to the fitting primitive and is not
re-derived here.  Every failure (unknown coefficient, singular
information, coefficient missing from the information matrix, or a
non-positive variance) returns ``None`` rather than raising.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from scipy import linalg
from scipy import stats

from ._results import ContrastResult, FitRecord

logger = logging.getLogger(__name__)


class SingularInformationError(np.linalg.LinAlgError):
    """Raised by :func:`qr_inverse` for a numerically singular matrix."""


def qr_inverse(matrix: np.ndarray) -> np.ndarray:
    """Invert a square matrix through its QR decomposition.

    Raises:
        SingularInformationError: If the matrix is empty, non-finite,
            or numerically singular.
    """
    a = np.asarray(matrix, dtype=float)
    if a.ndim != 2 or a.shape[0] != a.shape[1] or a.shape[0] == 0:
        raise SingularInformationError(f"Expected a non-empty square matrix, got {a.shape}.")
    if not np.all(np.isfinite(a)):
        raise SingularInformationError("Information matrix has non-finite entries.")
    q, r = linalg.qr(a)
    diag = np.abs(np.diag(r))
    tol = diag.max() * a.shape[0] * np.finfo(float).eps
    if diag.max() == 0 or np.any(diag <= tol):
        raise SingularInformationError("Information matrix is numerically singular.")
    return np.asarray(linalg.solve_triangular(r, q.T), dtype=float)


def standard_errors(record: FitRecord) -> dict[str, float]:
    """Standard errors of every estimated parameter of *record*.

    Derived on demand from the stored information matrix; the model
    object is not needed.

    Raises:
        SingularInformationError: If the information matrix is singular.
    """
    cov = qr_inverse(record.information)
    with np.errstate(invalid="ignore"):
        se = np.sqrt(np.diag(cov))
    return dict(zip(record.parameter_names, se.tolist(), strict=True))


def wald_p_value(z: float) -> float:
    """Two-sided normal p-value ``2 · Φ(−|z|)``."""
    return float(2.0 * stats.norm.cdf(-abs(z)))


def contrast_test(record: FitRecord, coefficient: str) -> ContrastResult | None:
    """Wald test of *coefficient* in the selected fit.

    Args:
        record: The selected fit for one feature.
        coefficient: Name of a design-matrix column.

    Returns:
        A :class:`ContrastResult`, or ``None`` when the coefficient is
        not estimable.
    """
    if coefficient not in record.coefficients:
        logger.debug("Coefficient %r not in %s fit.", coefficient, record.family)
        return None
    estimate = float(record.coefficients[coefficient])

    try:
        idx = record.parameter_names.index(coefficient)
    except ValueError:
        logger.debug(
            "Coefficient %r not in the %s information matrix.",
            coefficient,
            record.family,
        )
        return None

    try:
        cov = qr_inverse(record.information)
    except np.linalg.LinAlgError as exc:
        logger.debug("Covariance derivation failed for %s: %s", record.family, exc)
        return None

    variance = float(cov[idx, idx])
    if not math.isfinite(variance) or variance <= 0 or not math.isfinite(estimate):
        logger.debug("Non-positive variance for %r in %s fit.", coefficient, record.family)
        return None

    std_error = math.sqrt(variance)
    z = estimate / std_error
    return ContrastResult(
        coefficient=coefficient,
        estimate=estimate,
        std_error=std_error,
        z_value=z,
        p_value=wald_p_value(z),
    )
