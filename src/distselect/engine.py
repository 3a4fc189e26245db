"""Per-feature orchestration.

:func:`analyze_feature` drives one feature through the full pipeline
and normalises every outcome into a single :class:`~._results.FeatureRecord`
shape::

    pending ──► skipped                     (degenerate feature)
       │
       └──► fitting ──► no-fit              (no family converged)
                  │
                  └──► fitted ──► untestable (coefficient not estimable)
                            │
                            └──► tested

Fields that do not apply to a terminal state are filled with the
missing markers (NaN for numbers, ``None`` for text), so every record
has the same structure.  The function is pure with respect to its
inputs: the design matrix and configuration are only read.
"""

from __future__ import annotations

from dataclasses import replace

import numpy as np

from ._compat import DataFrameLike
from ._config import AnalysisConfig
from ._results import (
    CandidateFits,
    ContrastResult,
    FeatureRecord,
    FeatureStatus,
    SelectionResult,
)
from .contrast import contrast_test
from .fitting import as_design, fit_candidates
from .selection import select_best_model


def _failures(candidates: CandidateFits) -> dict[str, str]:
    return {f.family: f.reason.value for f in candidates.failures}


def _fitted_record(
    feature: str,
    status: FeatureStatus,
    candidates: CandidateFits,
    selection: SelectionResult,
    contrast: ContrastResult | None,
) -> FeatureRecord:
    fit = selection.record
    kwargs = {}
    if contrast is not None:
        kwargs = {
            "contrast_estimate": contrast.estimate,
            "contrast_std_error": contrast.std_error,
            "contrast_z": contrast.z_value,
            "p_value": contrast.p_value,
        }
    return FeatureRecord(
        feature=feature,
        status=status,
        selected_family=fit.family,
        aic=fit.aic,
        bic=fit.bic,
        generalized_aic=fit.gaic,
        log_likelihood=fit.log_likelihood,
        degrees_of_freedom=float(fit.df_residual),
        goodness_of_fit_p=fit.diagnostics.goodness_of_fit_p,
        skewness=fit.diagnostics.skewness,
        kurtosis=fit.diagnostics.kurtosis,
        criterion=selection.criterion,
        criterion_value=selection.value,
        n_families_fitted=len(candidates.fits),
        failures=_failures(candidates),
        **kwargs,
    )


def analyze_feature(
    feature: str,
    values: np.ndarray,
    design: DataFrameLike,
    coefficient: str,
    config: AnalysisConfig | None = None,
) -> FeatureRecord:
    """Fit, select, and test one feature.

    Args:
        feature: Feature name carried into the record.
        values: Raw observations, one per sample.
        design: Shared design matrix (samples × covariates).
        coefficient: Design column whose coefficient is tested.
        config: Run configuration; defaults to :class:`AnalysisConfig`.

    Returns:
        Exactly one :class:`FeatureRecord`.  The adjusted p-value is
        left missing; it is filled in by the aggregator.
    """
    config = config if config is not None else AnalysisConfig()
    y = np.asarray(values, dtype=float)
    X = as_design(design, len(y))

    candidates = fit_candidates(
        y,
        X,
        config.family_objects,
        time_budget=config.time_budget,
        gaic_penalty=config.record_gaic_penalty,
        maxiter=config.maxiter,
        retain_models=config.retain_models,
        isolation=config.fit_isolation,
        feature=feature,
    )
    if candidates.skipped:
        return FeatureRecord(
            feature=feature,
            status=FeatureStatus.SKIPPED,
            message="all observations zero or non-finite",
        )
    if not candidates.converged:
        return FeatureRecord(
            feature=feature,
            status=FeatureStatus.NO_FIT,
            failures=_failures(candidates),
            message="no family converged",
        )

    selection = select_best_model(candidates.fits, config.parsed_criterion)
    contrast = contrast_test(selection.record, coefficient)
    if contrast is None:
        record = _fitted_record(
            feature, FeatureStatus.UNTESTABLE, candidates, selection, None
        )
        return replace(record, message=f"coefficient {coefficient!r} not estimable")
    return _fitted_record(feature, FeatureStatus.TESTED, candidates, selection, contrast)
