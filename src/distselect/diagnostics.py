"""Residual-based goodness-of-fit diagnostics.

Every successful fit is summarised by three statistics of its
normalised quantile residuals ``rᵢ = Φ⁻¹(F(yᵢ; θ̂ᵢ))``.  Under a
correctly specified family the residuals are approximately i.i.d.
standard normal, so:

* **Kolmogorov–Smirnov p-value** — one-sample test of the residuals
  against N(0, 1).  Small values flag a family whose shape does not
  match the data even though it won the information-criterion
  comparison.

* **Skewness** — asymmetry of the residuals; ≈ 0 under the model.

* **Kurtosis** — excess (Fisher) kurtosis; ≈ 0 under the model.
  Large positive values indicate heavier tails than the family
  accommodates.

Degradation policy
~~~~~~~~~~~~~~~~~~
Non-finite residuals (e.g. ``±inf`` from a CDF value of exactly 0 or
1) are dropped first.  Fewer than two distinct finite residuals leaves
skewness and kurtosis undefined, and a numerical failure in the KS
test leaves its p-value undefined.  Undefined statistics are reported
as NaN; a diagnostics failure never invalidates the fit itself.
"""

from __future__ import annotations

import logging
import warnings

import numpy as np
from scipy import stats

from ._results import NA, ResidualDiagnostics

logger = logging.getLogger(__name__)


def residual_diagnostics(residuals: np.ndarray) -> ResidualDiagnostics:
    """Compute goodness-of-fit statistics for normalised residuals.

    Args:
        residuals: Normalised quantile residuals of one fitted model.

    Returns:
        A :class:`ResidualDiagnostics` whose undefined fields are NaN.
    """
    r = np.asarray(residuals, dtype=float).ravel()
    r = r[np.isfinite(r)]

    gof_p = NA
    if r.size > 0:
        try:
            with warnings.catch_warnings():
                warnings.filterwarnings("ignore", category=RuntimeWarning)
                gof_p = float(stats.kstest(r, "norm").pvalue)
        except (ValueError, FloatingPointError) as exc:
            logger.debug("KS goodness-of-fit test failed: %s", exc)
            gof_p = NA
        if not np.isfinite(gof_p):
            gof_p = NA

    skewness = kurtosis = NA
    if np.unique(r).size >= 2:
        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", category=RuntimeWarning)
            skewness = float(stats.skew(r))
            kurtosis = float(stats.kurtosis(r, fisher=True))

    return ResidualDiagnostics(
        goodness_of_fit_p=gof_p,
        skewness=skewness,
        kurtosis=kurtosis,
        n_residuals=int(r.size),
    )
