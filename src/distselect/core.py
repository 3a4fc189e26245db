"""Top-level entry points.

:func:`differential_expression` runs the complete pipeline over a
feature matrix: structural checks, parallel per-feature selection and
testing, then aggregation with multiple-testing correction.  Everything
it needs from the caller is a numeric matrix, a design matrix with
named columns and the name of the coefficient to test:

    >>> table = differential_expression(counts, design, "group",
    ...                                 families=("poisson", "gaussian"))
    >>> table.to_frame().sort_values("p_value_adjusted").head()

Two helpers cover the exploratory side of the workflow:

* :func:`screen_families` fits an intercept-only model for a random
  sample of features and reports which families win most often; the
  result is a sensible ``families`` list for the full run.
* :func:`fit_feature_models` fits every configured family to a single
  feature and keeps the full statsmodels results for inspection.

Structural problems (a design matrix whose rows do not match the
samples, non-finite design entries, or an unknown coefficient when
``strict_coefficient`` is set) raise ``ValueError`` before any fitting
starts.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import replace
from typing import Any

import numpy as np
import pandas as pd

from ._compat import DataFrameLike, _ensure_pandas_df
from ._config import AnalysisConfig
from ._results import (
    CandidateFits,
    FeatureRecord,
    FeatureStatus,
    ResultsTable,
    ScreeningResult,
)
from .dispatch import WorkerPool, dispatch_features
from .families import DistributionFamily, available_families
from .fitting import fit_candidates
from .pvalues import adjust_p_values
from .reporting import LoggingReporter, ProgressReporter
from .selection import parse_criterion, select_best_model

logger = logging.getLogger(__name__)


def _make_config(config: AnalysisConfig | None, overrides: dict[str, Any]) -> AnalysisConfig:
    if config is None:
        return AnalysisConfig(**overrides)
    if overrides:
        return replace(config, **overrides)
    return config


def _check_structure(
    matrix: pd.DataFrame, design: pd.DataFrame, coefficient: str, strict: bool
) -> None:
    if design.shape[0] != matrix.shape[1]:
        raise ValueError(
            f"Design matrix has {design.shape[0]} rows but the feature matrix "
            f"has {matrix.shape[1]} samples."
        )
    if design.shape[1] == 0:
        raise ValueError("Design matrix has no columns.")
    if not np.isfinite(design.to_numpy(dtype=float)).all():
        raise ValueError("Design matrix contains non-finite entries.")
    if strict and coefficient not in design.columns:
        raise ValueError(
            f"Coefficient {coefficient!r} is not a design column. "
            f"Available: {list(map(str, design.columns))}"
        )


def aggregate_records(
    records: Sequence[FeatureRecord],
    *,
    coefficient: str,
    config: AnalysisConfig | None = None,
) -> ResultsTable:
    """Merge per-feature records into a :class:`ResultsTable`.

    Adjusted p-values are computed from the ``tested`` rows only; every
    other row keeps a missing adjusted value and does not count as a
    comparison.

    Args:
        records: One record per feature, in any order.
        coefficient: Tested coefficient, recorded on the table.
        config: Supplies the correction method and ``drop_skipped``.
    """
    config = config if config is not None else AnalysisConfig()
    raw = np.array(
        [r.p_value if r.status is FeatureStatus.TESTED else np.nan for r in records],
        dtype=float,
    )
    adjusted = adjust_p_values(raw, config.correction)
    merged = [
        replace(r, p_value_adjusted=float(a)) if np.isfinite(a) else r
        for r, a in zip(records, adjusted)
    ]

    omitted: tuple[FeatureRecord, ...] = ()
    if config.drop_skipped:
        omitted = tuple(r for r in merged if r.status is FeatureStatus.SKIPPED)
        merged = [r for r in merged if r.status is not FeatureStatus.SKIPPED]

    return ResultsTable(
        records=tuple(merged),
        coefficient=coefficient,
        criterion=config.parsed_criterion.label,
        correction=config.correction,
        omitted=omitted,
    )


def differential_expression(
    counts: DataFrameLike,
    design: DataFrameLike,
    coefficient: str,
    *,
    config: AnalysisConfig | None = None,
    reporter: ProgressReporter | None = None,
    pool: WorkerPool | None = None,
    **overrides: Any,
) -> ResultsTable:
    """Select a family and test *coefficient* for every feature.

    Args:
        counts: Features × samples numeric matrix.  Row labels name the
            features; a NumPy array gets ``0..n-1``.
        design: Samples × covariates design matrix with named columns.
            Include an intercept column if one is wanted.
        coefficient: Design column whose coefficient is tested.
        config: Run configuration.
        reporter: Progress and summary sink (default: logging).  The
            summary is always delivered; ``verbose`` only governs
            progress.  Pass :class:`NullReporter` to silence both.
        pool: An entered :class:`WorkerPool` to reuse; otherwise one
            is created for this call.
        **overrides: :class:`AnalysisConfig` fields, applied on top of
            *config*.

    Returns:
        A :class:`ResultsTable` with one record per feature (skipped
        features are left out when ``drop_skipped`` is set).

    Raises:
        ValueError: On a structural problem or invalid configuration.
        TypeError: If an input container is not supported.
    """
    config = _make_config(config, overrides)
    reporter = reporter if reporter is not None else LoggingReporter()
    matrix = _ensure_pandas_df(counts, name="counts", prefix="sample_")
    X = _ensure_pandas_df(design, name="design", prefix="x").astype(float)
    _check_structure(matrix, X, coefficient, config.strict_coefficient)

    if config.verbose > 0:
        logger.info(
            "Fitting %d features with %d candidate families (%s).",
            matrix.shape[0],
            len(config.families),
            config.parsed_criterion.label,
        )
    records = dispatch_features(
        matrix, X, coefficient, config, reporter=reporter, pool=pool
    )
    table = aggregate_records(records, coefficient=coefficient, config=config)
    reporter.summary(table.summary)
    return table


def fit_feature_models(
    values: Sequence[float] | np.ndarray | pd.Series,
    design: DataFrameLike,
    *,
    config: AnalysisConfig | None = None,
    **overrides: Any,
) -> CandidateFits:
    """Fit every configured family to one feature, keeping the models.

    Each successful :class:`~._results.FitRecord` carries the full
    statsmodels result on ``model`` and its ``fit_time``.
    """
    config = _make_config(config, overrides)
    feature = str(values.name) if isinstance(values, pd.Series) else None
    y = np.asarray(values, dtype=float)
    if y.ndim != 1:
        raise ValueError(f"Expected a 1-D feature, got shape {y.shape}.")
    X = _ensure_pandas_df(design, name="design", prefix="x")
    return fit_candidates(
        y,
        X,
        config.family_objects,
        time_budget=config.time_budget,
        gaic_penalty=config.record_gaic_penalty,
        maxiter=config.maxiter,
        retain_models=True,
        isolation=config.fit_isolation,
        feature=feature,
    )


# ------------------------------------------------------------------ #
# Family screening
# ------------------------------------------------------------------ #


def _screen_feature(
    feature: str,
    values: np.ndarray,
    families: tuple[DistributionFamily, ...],
    time_budget: float | None,
    maxiter: int,
    isolation: str,
) -> tuple[str, str | None, bool]:
    """Worker-side task: ``(feature, winning family, skipped)``."""
    design = pd.DataFrame({"Intercept": np.ones(len(values))})
    try:
        candidates = fit_candidates(
            values, design, families, time_budget=time_budget, maxiter=maxiter,
            isolation=isolation, feature=feature,
        )
    except Exception as exc:  # noqa: BLE001
        logger.warning("Screening failed for %s: %s", feature, exc)
        return feature, None, False
    if candidates.skipped:
        return feature, None, True
    if not candidates.converged:
        return feature, None, False
    best = select_best_model(candidates.fits, parse_criterion("AIC"))
    return feature, best.family, False


def screen_families(
    counts: DataFrameLike,
    n_features: int = 200,
    top_n: int = 4,
    families: Sequence[str | DistributionFamily] | None = None,
    *,
    random_state: int | None = None,
    config: AnalysisConfig | None = None,
    pool: WorkerPool | None = None,
    **overrides: Any,
) -> ScreeningResult:
    """Find the families that fit a random sample of features best.

    Every sampled feature is fitted with an intercept-only design; the
    family with the lowest AIC wins that feature.  Families are ranked
    by how many features they win.

    Args:
        counts: Features × samples numeric matrix.
        n_features: Number of features to sample without replacement.
        top_n: Number of families to return.
        families: Candidates; defaults to every registered family.
        random_state: Seed for the feature sample.
        config: Supplies time budget, iteration cap and worker pool.
        pool: An entered :class:`WorkerPool` to reuse.
        **overrides: :class:`AnalysisConfig` fields.

    Raises:
        ValueError: If *n_features* exceeds the number of features or
            *top_n* is not positive.
    """
    if families is None:
        families = tuple(available_families())
    config = _make_config(config, {**overrides, "families": tuple(families)})
    matrix = _ensure_pandas_df(counts, name="counts", prefix="sample_")
    if n_features > matrix.shape[0]:
        raise ValueError(
            f"n_features ({n_features}) exceeds the number of features "
            f"({matrix.shape[0]})."
        )
    if top_n < 1:
        raise ValueError("top_n must be at least 1.")

    rng = np.random.default_rng(random_state)
    rows = np.sort(rng.choice(matrix.shape[0], size=n_features, replace=False))
    sample = matrix.iloc[rows]
    names = [str(label) for label in sample.index]
    values = sample.to_numpy(dtype=float)
    if config.verbose > 0:
        logger.info("Screening %d families on %d features.", len(config.families), n_features)

    tasks = (
        (
            names[i],
            values[i],
            config.family_objects,
            config.time_budget,
            config.maxiter,
            config.fit_isolation,
        )
        for i in range(n_features)
    )
    if pool is None:
        with WorkerPool.from_config(config) as owned:
            outcomes = list(owned.imap_unordered(_screen_feature, tasks))
    else:
        outcomes = list(pool.imap_unordered(_screen_feature, tasks))

    winners = [family for _, family, _ in outcomes if family is not None]
    # Equal counts rank in candidate order.
    order = {name: i for i, name in enumerate(config.families)}
    ranked = dict(
        sorted(Counter(winners).items(), key=lambda kv: (-kv[1], order.get(kv[0], 0)))
    )
    result = ScreeningResult(
        top_families=list(ranked)[:top_n],
        family_counts=ranked,
        n_analyzed=n_features,
        n_skipped=sum(1 for _, _, skipped in outcomes if skipped),
        n_fitted=len(winners),
        features=names,
    )
    if config.verbose > 0:
        _log_screening(result)
    return result


def _log_screening(result: ScreeningResult) -> None:
    logger.info("===== Screening Summary =====")
    logger.info("Features analyzed: %d", result.n_analyzed)
    logger.info("Features skipped (all zero or non-finite): %d", result.n_skipped)
    logger.info("Features successfully fitted: %d", result.n_fitted)
    if result.family_counts:
        top = next(iter(result.family_counts.items()))
        logger.info("Most frequent family: %s (%d features)", *top)
    else:
        logger.info("No successful fits.")
    logger.info("Top families: %s", ", ".join(result.top_families))
