"""Typed result objects for per-feature model selection.

Frozen dataclasses that provide:

* **Attribute access** — ``record.selected_family``, ``fit.aic``, etc.
* **Dict-like access** — ``record["p_value"]``, ``record.get("key")``,
  ``"key" in record`` for consumers that prefer bracket syntax.
* **Serialisation** — ``.to_dict()`` returns a plain ``dict[str, Any]``
  with all NumPy types and enums converted to native Python.

Lifecycle mirrors the pipeline: :class:`FitRecord` / :class:`FitFailure`,
:class:`SelectionResult` and :class:`ContrastResult` live only while
one feature is processed; the distilled :class:`FeatureRecord` is the
only object that escapes into the :class:`ResultsTable`.

All types are frozen (immutable after construction) to communicate
that results are a snapshot of a completed computation.
"""

from __future__ import annotations

import enum
import math
from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

import numpy as np
import pandas as pd

NA = float("nan")
"""Missing marker for numeric fields that do not apply."""

# ------------------------------------------------------------------ #
# Enumerations
# ------------------------------------------------------------------ #


class FailureReason(str, enum.Enum):
    """Why one (feature, family) fit produced no record."""

    INVALID_DATA = "invalid-data"
    NON_CONVERGENCE = "non-convergence"
    TIMEOUT = "timeout"
    NUMERICAL_SINGULARITY = "numerical-singularity"


class FeatureStatus(str, enum.Enum):
    """Terminal state of one feature's pipeline run.

    ``pending → skipped | fitting``; ``fitting → no-fit | fitted``;
    ``fitted → tested | untestable``.  ``error`` marks an unexpected
    fault caught at the dispatcher boundary.
    """

    SKIPPED = "skipped"
    NO_FIT = "no-fit"
    UNTESTABLE = "untestable"
    TESTED = "tested"
    ERROR = "error"


# ------------------------------------------------------------------ #
# Serialisation helper
# ------------------------------------------------------------------ #


def _numpy_to_python(obj: Any) -> Any:
    """Recursively convert NumPy scalars/arrays and enums to Python types."""
    if isinstance(obj, enum.Enum):
        return obj.value
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (np.integer, np.bool_)):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, dict):
        return {k: _numpy_to_python(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        converted = [_numpy_to_python(item) for item in obj]
        return type(obj)(converted)
    if isinstance(obj, _DictAccessMixin):
        return obj.to_dict()
    return obj


# ------------------------------------------------------------------ #
# Dict-compatibility mixin
# ------------------------------------------------------------------ #


class _DictAccessMixin:
    """Dict-like access convenience for result dataclasses.

    Supports three access patterns:

    1. ``result["key"]``     — raises ``KeyError`` on miss
    2. ``result.get(key, d)`` — returns *d* on miss (default ``None``)
    3. ``"key" in result``   — membership test

    Fields listed in ``_EXCLUDE_FROM_DICT`` (opaque model objects) are
    skipped by :meth:`to_dict`.
    """

    _EXCLUDE_FROM_DICT: ClassVar[frozenset[str]] = frozenset({"model"})

    def __getitem__(self, key: str) -> Any:
        """Attribute lookup via bracket syntax."""
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key) from None

    def get(self, key: str, default: Any = None) -> Any:
        """Attribute lookup with a fallback default."""
        return getattr(self, key, default)

    def __contains__(self, key: object) -> bool:
        """Membership test: ``"key" in result``."""
        if not isinstance(key, str):
            return False
        return hasattr(self, key)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain, JSON-serialisable dictionary."""
        result: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            if f.name in self._EXCLUDE_FROM_DICT:
                continue
            result[f.name] = _numpy_to_python(getattr(self, f.name))
        return result


# ------------------------------------------------------------------ #
# Per-family fit outcomes
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class ResidualDiagnostics(_DictAccessMixin):
    """Fit-quality statistics of a model's normalised quantile residuals."""

    goodness_of_fit_p: float = NA
    """Kolmogorov–Smirnov p-value against N(0, 1); NaN if unavailable."""

    skewness: float = NA
    """Sample skewness; NaN for fewer than two distinct residuals."""

    kurtosis: float = NA
    """Excess (Fisher) kurtosis; NaN for fewer than two distinct residuals."""

    n_residuals: int = 0
    """Number of finite residuals the statistics were computed from."""


@dataclass(frozen=True)
class FitFailure(_DictAccessMixin):
    """Absence value for a (feature, family) attempt, tagged with a reason."""

    family: str
    reason: FailureReason
    message: str = ""


@dataclass(frozen=True)
class FitRecord(_DictAccessMixin):
    """Distilled summary of one successful family fit.

    The record keeps the observed information matrix (a small
    ``(k, k)`` array) and its parameter names so that standard errors
    can be derived on demand without the statsmodels result.  The full
    result is only kept in :attr:`model` when the caller opts in.
    """

    family: str
    """Canonical family name."""

    log_likelihood: float
    aic: float
    bic: float
    gaic: float
    """Generalised AIC ``-2ℓ + penalty·k``."""

    gaic_penalty: float
    n_params: int
    """Total estimated parameters ``k`` (nuisance parameters included)."""

    df_residual: int
    """Residual degrees of freedom ``n - k``."""

    nobs: int
    """Observations the family was fitted on (after invalid rows were dropped)."""

    coefficients: dict[str, float]
    """Mean linear-predictor coefficients keyed by design column."""

    information: np.ndarray = field(repr=False, compare=False)
    """Observed information matrix over all estimated parameters."""

    parameter_names: tuple[str, ...] = field(repr=False)
    """Row/column labels of :attr:`information`."""

    diagnostics: ResidualDiagnostics = field(default_factory=ResidualDiagnostics)
    residuals: np.ndarray = field(
        default_factory=lambda: np.empty(0), repr=False, compare=False
    )
    """Normalised quantile residuals, one per fitted observation."""

    fit_time: float = 0.0
    """Wall-clock seconds spent in the fitting primitive."""

    model: Any = field(default=None, repr=False, compare=False)
    """The statsmodels result, present only when models are retained."""


@dataclass(frozen=True)
class CandidateFits(_DictAccessMixin):
    """Everything the candidate fitter produced for one feature."""

    fits: tuple[FitRecord, ...] = ()
    """Successful fits in the caller's family order."""

    failures: tuple[FitFailure, ...] = ()
    skipped: bool = False
    """``True`` when the feature was degenerate and nothing was attempted."""

    @property
    def converged(self) -> bool:
        return bool(self.fits)

    def by_family(self) -> dict[str, FitRecord]:
        return {fit.family: fit for fit in self.fits}


@dataclass(frozen=True)
class SelectionResult(_DictAccessMixin):
    """The winning fit for one feature under a criterion."""

    record: FitRecord
    criterion: str
    """Criterion label, e.g. ``"AIC"`` or ``"GAIC(3)"``."""

    value: float

    @property
    def family(self) -> str:
        return self.record.family


@dataclass(frozen=True)
class ContrastResult(_DictAccessMixin):
    """Wald test of one mean coefficient."""

    coefficient: str
    estimate: float
    std_error: float
    z_value: float
    p_value: float


# ------------------------------------------------------------------ #
# Per-feature record and results table
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class FeatureRecord(_DictAccessMixin):
    """One output row; every input feature yields exactly one."""

    feature: str
    status: FeatureStatus
    selected_family: str | None = None
    aic: float = NA
    bic: float = NA
    generalized_aic: float = NA
    log_likelihood: float = NA
    degrees_of_freedom: float = NA
    goodness_of_fit_p: float = NA
    skewness: float = NA
    kurtosis: float = NA
    contrast_estimate: float = NA
    contrast_std_error: float = NA
    contrast_z: float = NA
    p_value: float = NA
    p_value_adjusted: float = NA
    criterion: str | None = None
    criterion_value: float = NA
    n_families_fitted: int = 0
    failures: dict[str, str] = field(default_factory=dict)
    """Family name → failure reason for every family that produced no fit."""

    message: str | None = None

    @property
    def has_p_value(self) -> bool:
        return not math.isnan(self.p_value)


COLUMNS: tuple[str, ...] = (
    "feature",
    "status",
    "selected_family",
    "AIC",
    "BIC",
    "generalized_AIC",
    "log_likelihood",
    "degrees_of_freedom",
    "goodness_of_fit_p",
    "skewness",
    "kurtosis",
    "contrast_estimate",
    "contrast_std_error",
    "contrast_z",
    "p_value",
    "p_value_adjusted",
    "criterion",
    "criterion_value",
    "n_families_fitted",
    "failures",
    "message",
)
"""Column order of :meth:`ResultsTable.to_frame`."""

_RENAMED = {"aic": "AIC", "bic": "BIC", "generalized_aic": "generalized_AIC"}


@dataclass(frozen=True)
class AnalysisSummary(_DictAccessMixin):
    """Counts that make silent attrition visible."""

    n_features: int
    n_tested: int
    n_untestable: int
    n_no_fit: int
    n_skipped: int
    n_error: int
    family_counts: dict[str, int]
    """Selected family → number of features, most frequent first."""

    top_family: str | None
    top_family_count: int

    @property
    def n_analyzed(self) -> int:
        return self.n_features - self.n_skipped

    @classmethod
    def from_records(cls, records: list[FeatureRecord]) -> AnalysisSummary:
        status = Counter(r.status for r in records)
        families = Counter(
            r.selected_family for r in records if r.selected_family is not None
        )
        ranked = dict(families.most_common())
        top = next(iter(ranked.items()), (None, 0))
        return cls(
            n_features=len(records),
            n_tested=status[FeatureStatus.TESTED],
            n_untestable=status[FeatureStatus.UNTESTABLE],
            n_no_fit=status[FeatureStatus.NO_FIT],
            n_skipped=status[FeatureStatus.SKIPPED],
            n_error=status[FeatureStatus.ERROR],
            family_counts=ranked,
            top_family=top[0],
            top_family_count=top[1],
        )


@dataclass(frozen=True)
class ResultsTable(_DictAccessMixin):
    """All per-feature records plus the adjusted p-value column.

    ``omitted`` holds the skipped records that were left out of
    :attr:`records` when ``drop_skipped`` was requested; they still
    count towards :attr:`summary`.
    """

    records: tuple[FeatureRecord, ...]
    coefficient: str
    criterion: str
    correction: str
    omitted: tuple[FeatureRecord, ...] = ()

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[FeatureRecord]:
        return iter(self.records)

    @property
    def summary(self) -> AnalysisSummary:
        return AnalysisSummary.from_records([*self.records, *self.omitted])

    def to_frame(self) -> pd.DataFrame:
        """Return the table as a ``pandas.DataFrame`` (one row per record)."""
        rows = []
        for record in self.records:
            row = {_RENAMED.get(k, k): v for k, v in record.to_dict().items()}
            rows.append(row)
        return pd.DataFrame(rows, columns=list(COLUMNS))


@dataclass(frozen=True)
class ScreeningResult(_DictAccessMixin):
    """Outcome of screening candidate families on a sample of features."""

    top_families: list[str]
    family_counts: dict[str, int]
    n_analyzed: int
    n_skipped: int
    n_fitted: int
    features: list[str]
    """Names of the sampled features."""
