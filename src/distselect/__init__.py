"""distselect — Per-feature distribution selection and contrast testing.

For every row of a numeric matrix (for example genes × samples), fits a
set of candidate distribution families under a shared design matrix,
selects the best family by an information criterion, checks the fit
with quantile-residual diagnostics, and tests one coefficient with a
Wald test.  Results from all features are gathered into one table with
multiple-testing correction.  Features are processed in parallel on a
joblib worker pool and each fit runs under a wall-clock budget.

Public API:
    .. autosummary::
        differential_expression
        screen_families
        fit_feature_models
        aggregate_records
        analyze_feature
        dispatch_features
        fit_family
        fit_candidates
        residual_diagnostics
        select_best_model
        parse_criterion
        contrast_test
        qr_inverse
        adjust_p_values
        transform_values
        print_summary_table
        print_results_table
        available_families
        register_family
        resolve_family
        AnalysisConfig
        WorkerPool
        ProgressReporter
        LoggingReporter
        NullReporter
"""

from ._config import DEFAULT_FAMILIES, AnalysisConfig
from ._results import (
    AnalysisSummary,
    CandidateFits,
    ContrastResult,
    FailureReason,
    FeatureRecord,
    FeatureStatus,
    FitFailure,
    FitRecord,
    ResidualDiagnostics,
    ResultsTable,
    ScreeningResult,
    SelectionResult,
)
from .contrast import SingularInformationError, contrast_test, qr_inverse
from .core import (
    aggregate_records,
    differential_expression,
    fit_feature_models,
    screen_families,
)
from .diagnostics import residual_diagnostics
from .dispatch import WorkerPool, dispatch_features
from .display import print_results_table, print_summary_table
from .engine import analyze_feature
from .families import (
    DistributionFamily,
    available_families,
    register_family,
    resolve_family,
)
from .fitting import fit_candidates, fit_family
from .pvalues import adjust_p_values
from .reporting import LoggingReporter, NullReporter, ProgressReporter
from .selection import Criterion, parse_criterion, select_best_model
from .transforms import Support, transform_values

__all__ = [
    "AnalysisConfig",
    "DEFAULT_FAMILIES",
    "AnalysisSummary",
    "CandidateFits",
    "ContrastResult",
    "FailureReason",
    "FeatureRecord",
    "FeatureStatus",
    "FitFailure",
    "FitRecord",
    "ResidualDiagnostics",
    "ResultsTable",
    "ScreeningResult",
    "SelectionResult",
    "SingularInformationError",
    "contrast_test",
    "qr_inverse",
    "aggregate_records",
    "differential_expression",
    "fit_feature_models",
    "screen_families",
    "residual_diagnostics",
    "WorkerPool",
    "dispatch_features",
    "print_results_table",
    "print_summary_table",
    "analyze_feature",
    "DistributionFamily",
    "available_families",
    "register_family",
    "resolve_family",
    "fit_candidates",
    "fit_family",
    "adjust_p_values",
    "LoggingReporter",
    "NullReporter",
    "ProgressReporter",
    "Criterion",
    "parse_criterion",
    "select_best_model",
    "Support",
    "transform_values",
]

__version__ = "0.1.0"
