"""Run configuration for the per-feature selection pipeline.

:class:`AnalysisConfig` is the single configuration surface: family
list, selection criterion, per-fit time budget, multiple-testing
correction, worker pool size and backend, and progress verbosity.  It
is frozen and validated on construction so that configuration errors
surface before any per-feature work begins.

The worker count is resolved in this order (first match wins):
    1. An explicit ``n_jobs`` value.
    2. The ``DISTSELECT_N_JOBS`` environment variable.
    3. ``os.cpu_count()``.

Examples:
    Limit every run in a shell session to four workers::

        export DISTSELECT_N_JOBS=4

    Configure a run explicitly::

        config = AnalysisConfig(families=("poisson", "gaussian"),
                                criterion="BIC", n_jobs=2)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .families import DistributionFamily, resolve_family
from .fitting import ISOLATION_MODES
from .pvalues import resolve_correction
from .selection import DEFAULT_GAIC_PENALTY, Criterion, parse_criterion

_VALID_BACKENDS = {"loky", "threading", "multiprocessing", "sequential"}

DEFAULT_FAMILIES: tuple[str, ...] = ("negative_binomial", "gamma", "gaussian", "poisson")
"""Candidate families used when none are given."""


def resolve_n_jobs(n_jobs: int | None = None) -> int:
    """Resolve the worker count.

    Resolution order:
        1. *n_jobs* when given (``-1`` means all CPUs, as in joblib).
        2. ``DISTSELECT_N_JOBS`` environment variable.
        3. ``os.cpu_count()``.

    Raises:
        ValueError: If the value is zero or not an integer.
    """
    if n_jobs is None:
        env = os.environ.get("DISTSELECT_N_JOBS", "").strip()
        if env:
            try:
                n_jobs = int(env)
            except ValueError:
                raise ValueError(
                    f"DISTSELECT_N_JOBS must be an integer, got {env!r}."
                ) from None
        else:
            return os.cpu_count() or 1
    if n_jobs == 0:
        raise ValueError("n_jobs must be non-zero.")
    if n_jobs < 0:
        return max(1, (os.cpu_count() or 1) + 1 + n_jobs)
    return n_jobs


@dataclass(frozen=True)
class AnalysisConfig:
    """Options for a selection-and-testing run.

    Attributes:
        families: Ordered candidate family names; the order breaks
            selection ties.
        criterion: ``"AIC"``, ``"BIC"``, ``"GAIC"``, ``"GAIC(k)"`` or
            ``"loglik"``.
        gaic_penalty: Penalty for a bare ``"GAIC"``, and for the
            ``generalized_AIC`` column unless the criterion is
            ``"GAIC(k)"`` (then the column uses ``k``).
        time_budget: Seconds allowed per fit attempt; ``<= 0`` makes
            every attempt time out, ``None`` disables the limit.
        fit_isolation: ``"thread"`` abandons an expired fit on a
            daemon thread; ``"process"`` runs each fit in a child
            process and kills it on expiry.
        correction: Multiple-testing correction name.
        n_jobs: Worker count (see :func:`resolve_n_jobs`).
        backend: joblib backend for the worker pool.
        verbose: Progress only: 0 none, 1 periodic, 2 every feature.
            The end-of-run summary is always sent to the reporter.
        progress_every: Progress interval when ``verbose == 1``.
        retain_models: Keep statsmodels results on fit records.
        maxiter: Iteration cap for every statsmodels fit.
        strict_coefficient: Reject a contrast coefficient that is not
            a design column before fitting anything.  When ``False``
            the run proceeds and such features end up ``untestable``.
        drop_skipped: Leave skipped features out of the table rows
            (they are still counted in the summary).
    """

    families: tuple[str, ...] = DEFAULT_FAMILIES
    criterion: str = "AIC"
    gaic_penalty: float = DEFAULT_GAIC_PENALTY
    time_budget: float | None = 10.0
    fit_isolation: str = "thread"
    correction: str = "BH"
    n_jobs: int | None = None
    backend: str = "loky"
    verbose: int = 1
    progress_every: int = 50
    retain_models: bool = False
    maxiter: int = 100
    strict_coefficient: bool = True
    drop_skipped: bool = False
    _criterion: Criterion = field(init=False, repr=False, compare=False)
    _resolved: tuple[DistributionFamily, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        families = tuple(self.families)
        if not families:
            raise ValueError("At least one candidate family is required.")
        # Fail fast on unknown names; keep the canonical spelling.  The
        # resolved instances travel to worker processes with the config,
        # so families registered at runtime need not exist there.
        resolved = tuple(resolve_family(f) for f in families)
        object.__setattr__(self, "families", tuple(f.name for f in resolved))
        object.__setattr__(self, "_resolved", resolved)
        object.__setattr__(
            self, "_criterion", parse_criterion(self.criterion, self.gaic_penalty)
        )
        resolve_correction(self.correction)
        if self.backend not in _VALID_BACKENDS:
            raise ValueError(
                f"Unknown backend {self.backend!r}. Choose from: {sorted(_VALID_BACKENDS)}"
            )
        if self.fit_isolation not in ISOLATION_MODES:
            raise ValueError(
                f"Unknown fit_isolation {self.fit_isolation!r}. "
                f"Choose from: {list(ISOLATION_MODES)}"
            )
        if self.progress_every < 1:
            raise ValueError("progress_every must be at least 1.")
        if self.maxiter < 1:
            raise ValueError("maxiter must be at least 1.")

    @property
    def family_objects(self) -> tuple[DistributionFamily, ...]:
        return self._resolved

    @property
    def parsed_criterion(self) -> Criterion:
        return self._criterion

    @property
    def record_gaic_penalty(self) -> float:
        """Penalty behind every fit record's generalised AIC."""
        if self._criterion.kind == "gaic":
            return self._criterion.penalty
        return self.gaic_penalty

    @property
    def resolved_n_jobs(self) -> int:
        return resolve_n_jobs(self.n_jobs)
