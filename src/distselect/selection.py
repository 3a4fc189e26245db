"""Criterion-based model selection.

Given the successful fits of one feature, pick the single best family.

================  =======================  ==========
Criterion         Score                    Direction
================  =======================  ==========
``AIC``           ``-2ℓ + 2k``             minimise
``BIC``           ``-2ℓ + k·ln(n)``        minimise
``GAIC(p)``       ``-2ℓ + p·k``            minimise
``loglik``        ``ℓ``                    maximise
================  =======================  ==========

Ties (exact floating-point equality) resolve to the fit that comes
first in the candidate sequence, which the candidate fitter keeps in
the caller's family order.  The family list therefore doubles as a
priority list.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from ._results import FitRecord, SelectionResult

DEFAULT_GAIC_PENALTY = 3.0

_GAIC_RE = re.compile(r"^GAIC\s*(?:\(\s*(?P<k>[^)]+?)\s*\))?$", re.IGNORECASE)


@dataclass(frozen=True)
class Criterion:
    """A parsed selection criterion.

    Attributes:
        kind: One of ``"aic"``, ``"bic"``, ``"gaic"``, ``"loglik"``.
        penalty: Per-parameter penalty; only meaningful for ``"gaic"``.
    """

    kind: str
    penalty: float = DEFAULT_GAIC_PENALTY

    @property
    def label(self) -> str:
        if self.kind == "gaic":
            return f"GAIC({self.penalty:g})"
        return {"aic": "AIC", "bic": "BIC", "loglik": "loglik"}[self.kind]

    @property
    def maximize(self) -> bool:
        return self.kind == "loglik"

    def score(self, record: FitRecord) -> float:
        """Criterion value of *record*."""
        if self.kind == "aic":
            return record.aic
        if self.kind == "bic":
            return record.bic
        if self.kind == "loglik":
            return record.log_likelihood
        return -2.0 * record.log_likelihood + self.penalty * record.n_params


def parse_criterion(
    criterion: str | Criterion,
    gaic_penalty: float = DEFAULT_GAIC_PENALTY,
) -> Criterion:
    """Parse ``"AIC"``, ``"BIC"``, ``"GAIC"``, ``"GAIC(2.5)"`` or ``"loglik"``.

    Args:
        criterion: Criterion string (case-insensitive) or an already
            parsed :class:`Criterion`, returned unchanged.
        gaic_penalty: Penalty used by a bare ``"GAIC"``.

    Raises:
        ValueError: If the string is not a recognised criterion or the
            GAIC penalty is not a non-negative number.
    """
    if isinstance(criterion, Criterion):
        return criterion
    text = str(criterion).strip()
    lowered = text.lower()
    if lowered in ("aic", "bic"):
        return Criterion(lowered)
    if lowered in ("loglik", "loglikelihood", "log-likelihood", "log_likelihood"):
        return Criterion("loglik")
    match = _GAIC_RE.match(text)
    if match:
        raw = match.group("k")
        try:
            penalty = float(raw) if raw is not None else float(gaic_penalty)
        except ValueError:
            raise ValueError(f"Invalid GAIC penalty in {criterion!r}.") from None
        if penalty < 0:
            raise ValueError(f"GAIC penalty must be non-negative, got {penalty}.")
        return Criterion("gaic", penalty)
    raise ValueError(
        f"Unknown selection criterion {criterion!r}.  "
        "Choose from: 'AIC', 'BIC', 'GAIC', 'GAIC(k)', 'loglik'."
    )


def select_best_model(
    fits: Sequence[FitRecord],
    criterion: str | Criterion = "AIC",
) -> SelectionResult:
    """Pick the best fit under *criterion*.

    Args:
        fits: Non-empty sequence of successful fits, in priority order.
        criterion: Criterion string or :class:`Criterion`.

    Returns:
        The winning fit with the criterion label and value.

    Raises:
        ValueError: If *fits* is empty.
    """
    if not fits:
        raise ValueError("select_best_model() requires at least one fitted model.")
    crit = parse_criterion(criterion)
    best = fits[0]
    best_value = crit.score(best)
    for fit in fits[1:]:
        value = crit.score(fit)
        # Strict comparison keeps the earlier family on ties.
        better = value > best_value if crit.maximize else value < best_value
        if better:
            best, best_value = fit, value
    return SelectionResult(record=best, criterion=crit.label, value=float(best_value))
