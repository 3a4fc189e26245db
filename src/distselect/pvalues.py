"""Multiple-testing correction across features.

Adjusted p-values are computed once, after every feature has been
processed, from the unadjusted p-values of the ``tested`` rows only.
Rows without a p-value keep a missing adjusted value and do not count
towards the number of comparisons.

Correction methods are delegated to
:func:`statsmodels.stats.multitest.multipletests`.  Both the
statsmodels names and the names used by R's ``p.adjust`` are accepted:

===================  =========================
Accepted name        statsmodels method
===================  =========================
``BH``, ``fdr``      ``fdr_bh``
``BY``               ``fdr_by``
``bonferroni``       ``bonferroni``
``holm``             ``holm``
``hochberg``         ``simes-hochberg``
``hommel``           ``hommel``
``sidak``            ``sidak``
``none``             (no adjustment)
===================  =========================

References:
    * Benjamini, Y. & Hochberg, Y. (1995). Controlling the false
      discovery rate. *J. R. Stat. Soc. B*, 57(1), 289–300.
    * Holm, S. (1979). A simple sequentially rejective multiple test
      procedure. *Scand. J. Statist.*, 6(2), 65–70.
"""

from __future__ import annotations

import numpy as np
import statsmodels.stats.multitest as smm

_METHODS: dict[str, str | None] = {
    "bh": "fdr_bh",
    "fdr": "fdr_bh",
    "fdr_bh": "fdr_bh",
    "by": "fdr_by",
    "fdr_by": "fdr_by",
    "bonferroni": "bonferroni",
    "holm": "holm",
    "hochberg": "simes-hochberg",
    "simes-hochberg": "simes-hochberg",
    "hommel": "hommel",
    "sidak": "sidak",
    "holm-sidak": "holm-sidak",
    "fdr_tsbh": "fdr_tsbh",
    "none": None,
}


def resolve_correction(method: str) -> str | None:
    """Map a correction name to its statsmodels method (``None`` = no-op).

    Raises:
        ValueError: If *method* is not recognised.
    """
    key = str(method).strip().lower()
    if key not in _METHODS:
        raise ValueError(
            f"Unknown correction method {method!r}.  "
            f"Choose from: {sorted(_METHODS)}."
        )
    return _METHODS[key]


def adjust_p_values(p_values: np.ndarray, method: str = "BH") -> np.ndarray:
    """Adjust *p_values* for multiple testing, ignoring missing entries.

    Args:
        p_values: Unadjusted p-values; NaN marks rows without a test.
        method: Correction name (see module docstring).

    Returns:
        Array of the same shape with adjusted values at the finite
        positions and NaN elsewhere.
    """
    sm_method = resolve_correction(method)
    p = np.asarray(p_values, dtype=float)
    adjusted = np.full_like(p, np.nan)
    tested = np.isfinite(p)
    if not tested.any():
        return adjusted
    if sm_method is None:
        adjusted[tested] = p[tested]
        return adjusted
    adjusted[tested] = smm.multipletests(p[tested], method=sm_method)[1]
    return adjusted
