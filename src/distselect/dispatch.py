"""Parallel fan-out of the per-feature pipeline.

Features are independent units of work.  :func:`dispatch_features`
sends one task per feature to a :class:`WorkerPool` and collects the
records in whatever order the workers finish, then restores input
order.  Each task runs :func:`~.engine.analyze_feature` to completion
inside its own ``try`` block, so a fault in one feature becomes an
``error`` record for that feature and never reaches the others.

Worker pool
~~~~~~~~~~~
:class:`WorkerPool` is an explicit handle around a
``joblib.Parallel`` instance.  It is created before dispatch and shut
down after the last record has been collected; nothing about it is
stored in module or process state.  The backend decides the kind of
worker:

* ``"loky"`` (default) — separate processes.  statsmodels fits hold
  the GIL for much of their work, so processes give real speed-up on
  large matrices.
* ``"threading"`` — threads in the calling process; cheap to start,
  useful for small runs and for families registered at runtime that
  cannot be pickled.
* ``"sequential"`` — no workers at all, which is handy for debugging.

A pool may be reused for several dispatches by entering it once::

    with WorkerPool(n_jobs=4) as pool:
        first = dispatch_features(matrix_a, design, "group", pool=pool)
        second = dispatch_features(matrix_b, design, "group", pool=pool)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Any

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from ._config import AnalysisConfig, resolve_n_jobs
from ._results import FeatureRecord, FeatureStatus
from .engine import analyze_feature
from .reporting import LoggingReporter, ProgressReporter

logger = logging.getLogger(__name__)


class WorkerPool:
    """Context-managed joblib worker pool.

    Args:
        n_jobs: Number of workers; ``None`` resolves through
            :func:`~._config.resolve_n_jobs`.
        backend: joblib backend name.
    """

    def __init__(self, n_jobs: int | None = None, backend: str = "loky") -> None:
        self.n_jobs = resolve_n_jobs(n_jobs)
        self.backend = backend
        self._parallel: Parallel | None = None

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> WorkerPool:
        return cls(n_jobs=config.n_jobs, backend=config.backend)

    @property
    def active(self) -> bool:
        return self._parallel is not None

    def __enter__(self) -> WorkerPool:
        if self._parallel is not None:
            raise RuntimeError("WorkerPool is already open.")
        parallel = Parallel(
            n_jobs=self.n_jobs,
            backend=self.backend,
            return_as="generator_unordered",
        )
        parallel.__enter__()
        self._parallel = parallel
        logger.debug("Opened %s pool with %d workers.", self.backend, self.n_jobs)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        parallel, self._parallel = self._parallel, None
        if parallel is not None:
            parallel.__exit__(*exc_info)
            logger.debug("Closed %s pool.", self.backend)

    def imap_unordered(
        self, func: Callable[..., Any], tasks: Iterable[tuple[Any, ...]]
    ) -> Iterator[Any]:
        """Yield ``func(*task)`` for every task, in completion order.

        The returned iterator must be exhausted before the pool is
        used again.
        """
        if self._parallel is None:
            raise RuntimeError("WorkerPool must be entered before use.")
        return iter(self._parallel(delayed(func)(*task) for task in tasks))


def _run_feature(
    index: int,
    feature: str,
    values: np.ndarray,
    design: pd.DataFrame,
    coefficient: str,
    config: AnalysisConfig,
) -> tuple[int, FeatureRecord]:
    """Worker-side task: one feature, faults turned into a record."""
    try:
        record = analyze_feature(feature, values, design, coefficient, config)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Feature %s failed: %s", feature, exc, exc_info=True)
        record = FeatureRecord(
            feature=feature,
            status=FeatureStatus.ERROR,
            message=f"{type(exc).__name__}: {exc}",
        )
    return index, record


def _should_report(done: int, total: int, config: AnalysisConfig) -> bool:
    if config.verbose <= 0:
        return False
    if config.verbose >= 2 or done == total:
        return True
    return done % config.progress_every == 0


def dispatch_features(
    matrix: pd.DataFrame,
    design: pd.DataFrame,
    coefficient: str,
    config: AnalysisConfig | None = None,
    *,
    reporter: ProgressReporter | None = None,
    pool: WorkerPool | None = None,
) -> list[FeatureRecord]:
    """Analyse every row of *matrix* on a worker pool.

    Args:
        matrix: Features × samples.  Row labels become feature names.
        design: Samples × covariates; shared read-only by every task.
        coefficient: Design column to test.
        config: Run configuration.
        reporter: Progress sink; defaults to :class:`LoggingReporter`.
        pool: An already entered :class:`WorkerPool`.  When omitted a
            pool is created from *config* and closed on return.

    Returns:
        One record per row of *matrix*, in row order.
    """
    config = config if config is not None else AnalysisConfig()
    reporter = reporter if reporter is not None else LoggingReporter()
    total = matrix.shape[0]
    if total == 0:
        return []

    values = matrix.to_numpy(dtype=float)
    names = [str(label) for label in matrix.index]
    tasks = (
        (i, names[i], values[i], design, coefficient, config) for i in range(total)
    )

    if pool is None:
        with WorkerPool.from_config(config) as owned:
            return _collect(owned, tasks, total, config, reporter)
    return _collect(pool, tasks, total, config, reporter)


def _collect(
    pool: WorkerPool,
    tasks: Iterable[tuple[Any, ...]],
    total: int,
    config: AnalysisConfig,
    reporter: ProgressReporter,
) -> list[FeatureRecord]:
    records: list[FeatureRecord | None] = [None] * total
    done = 0
    for index, record in pool.imap_unordered(_run_feature, tasks):
        if records[index] is not None:
            raise RuntimeError(f"Feature {record.feature} was returned twice.")
        records[index] = record
        done += 1
        if _should_report(done, total, config):
            reporter.progress(done, total, f"{record.feature} ({record.status.value})")

    missing = [i for i, r in enumerate(records) if r is None]
    if missing:
        raise RuntimeError(f"{len(missing)} features produced no record.")
    return records  # type: ignore[return-value]
