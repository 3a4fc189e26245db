"""Distribution family protocol and resolution logic.

The ``DistributionFamily`` protocol defines the interface that every
candidate family must implement.  It decouples family-specific
behaviour (support, maximum-likelihood fitting, parameter counting,
information matrix, quantile residuals) from the orchestration code in
``fitting.py`` and ``engine.py``, which dispatches to each family via
generic method calls instead of branching on family names.

Each concrete family is a frozen ``@dataclass`` that carries no mutable
state and communicates exclusively through the protocol methods.  The
``resolve_family`` helper maps a user-facing string (``"poisson"``,
``"gaussian"``, or a short alias such as ``"NBI"``) to the appropriate
family instance.

Fitting primitive
~~~~~~~~~~~~~~~~~
All families delegate the actual maximum-likelihood optimisation to
statsmodels.  The mean (location) linear predictor is always the
caller's design matrix used as-is: no intercept column is added, so a
design built with an explicit intercept column behaves like the
``y ~ X - 1`` formula.  The returned statsmodels result object is
opaque to the caller; it only flows back into the other protocol
methods.

Parameter counting
~~~~~~~~~~~~~~~~~~
Information criteria are computed by the caller from the
log-likelihood and ``n_params``.  Dispersion, shape, precision and
degrees-of-freedom parameters count as estimated parameters, so a
Gaussian fit on ``p`` design columns has ``p + 1`` parameters while a
Poisson fit has ``p``.

Extensibility
~~~~~~~~~~~~~
New families are added by implementing the protocol and registering
them with :func:`register_family`.  A family whose ``support`` is
``Support.UNSPECIFIED`` receives the feature's values untransformed.
"""

from __future__ import annotations

import contextlib
import math
import warnings
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import numpy as np
import pandas as pd
import statsmodels.api as sm
from scipy import special
from scipy import stats
from statsmodels.base.model import GenericLikelihoodModel
from statsmodels.discrete.count_model import (
    ZeroInflatedNegativeBinomialP,
    ZeroInflatedPoisson,
)
from statsmodels.discrete.discrete_model import NegativeBinomial
from statsmodels.miscmodels.tmodel import TLinearModel
from statsmodels.othermod.betareg import BetaModel
from statsmodels.tools.sm_exceptions import (
    ConvergenceWarning as SmConvergenceWarning,
)
from statsmodels.tools.sm_exceptions import (
    HessianInversionWarning,
    PerfectSeparationWarning,
)

from .transforms import Support


class ConvergenceError(RuntimeError):
    """Raised when statsmodels reports that a fit did not converge."""


# ------------------------------------------------------------------ #
# DistributionFamily protocol
# ------------------------------------------------------------------ #


@runtime_checkable
class DistributionFamily(Protocol):
    """Interface that every candidate distribution family must implement.

    Attributes:
        name: Canonical identifier used in records and tables
            (e.g. ``"poisson"``, ``"gamma"``).
        support: Support class that selects the validity transform
            applied to a feature before fitting.
    """

    @property
    def name(self) -> str: ...

    @property
    def support(self) -> Support: ...

    def fit(self, y: np.ndarray, X: pd.DataFrame, maxiter: int = 100) -> Any:
        """Fit the family by maximum likelihood and return the result.

        Implementations raise on failure (including statsmodels
        reporting non-convergence); the fit adapter converts every
        exception into a typed failure record.

        Args:
            y: Transformed response with invalid rows already removed,
                shape ``(n,)``.
            X: Design matrix rows matching *y*, shape ``(n, p)``.
            maxiter: Iteration cap handed to the optimiser.
        """
        ...

    def log_likelihood(self, result: Any) -> float:
        """Log-likelihood of the fitted model on the fitted response."""
        ...

    def n_params(self, result: Any) -> int:
        """Total number of estimated parameters, nuisance ones included."""
        ...

    def mean_coefficients(self, result: Any) -> pd.Series:
        """Coefficients of the mean linear predictor, keyed by design column."""
        ...

    def information(self, result: Any) -> tuple[np.ndarray, list[str]]:
        """Observed information matrix at the MLE and its parameter names.

        The matrix is the negative Hessian of the log-likelihood with
        respect to every estimated parameter (for GLM families, the
        mean coefficients at the fitted dispersion).  Its inverse is
        the asymptotic covariance used by the Wald contrast.
        """
        ...

    def quantile_residuals(
        self,
        result: Any,
        y: np.ndarray,
    ) -> np.ndarray:
        """Normalised quantile residuals ``Φ⁻¹(F(yᵢ; θ̂ᵢ))``.

        Discrete families use the mid-quantile
        ``(F(yᵢ − 1) + F(yᵢ)) / 2`` so the residuals are
        deterministic.  Under a correctly specified model they are
        approximately standard normal.
        """
        ...


# ------------------------------------------------------------------ #
# Shared helpers
# ------------------------------------------------------------------ #


@contextlib.contextmanager
def _quiet_fit() -> Iterator[None]:
    """Silence the warnings statsmodels emits on awkward per-feature data."""
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", category=SmConvergenceWarning)
        warnings.filterwarnings("ignore", category=HessianInversionWarning)
        warnings.filterwarnings("ignore", category=PerfectSeparationWarning)
        warnings.filterwarnings("ignore", category=RuntimeWarning)
        yield


def _check_converged(result: Any, name: str) -> Any:
    """Raise :class:`ConvergenceError` if statsmodels flags non-convergence."""
    retvals = getattr(result, "mle_retvals", None)
    if isinstance(retvals, dict) and "converged" in retvals:
        converged = bool(retvals["converged"])
    else:
        converged = bool(getattr(result, "converged", True))
    if not converged:
        raise ConvergenceError(f"{name} fit did not converge.")
    return result


def _param_names(result: Any) -> list[str]:
    params = result.params
    if isinstance(params, pd.Series):
        return [str(i) for i in params.index]
    return [str(n) for n in result.model.exog_names]


def _k_exog(result: Any) -> int:
    return int(result.model.exog.shape[1])


def _mean_slice(result: Any, start: int = 0) -> pd.Series:
    """Mean coefficients occupying ``params[start : start + k_exog]``."""
    k = _k_exog(result)
    names = _param_names(result)[start : start + k]
    values = np.asarray(result.params, dtype=float)[start : start + k]
    return pd.Series(values, index=names, dtype=float)


def _neg_hessian(result: Any, **kwargs: Any) -> tuple[np.ndarray, list[str]]:
    params = np.asarray(result.params, dtype=float)
    with _quiet_fit():
        hess = np.asarray(result.model.hessian(params, **kwargs), dtype=float)
    return -hess, _param_names(result)


def _normal_scores(u: np.ndarray) -> np.ndarray:
    """Map probabilities to standard-normal quantiles (``±inf`` at 0 and 1)."""
    return np.asarray(stats.norm.ppf(u), dtype=float)


def _mid_quantile(cdf_prev: np.ndarray, cdf_here: np.ndarray) -> np.ndarray:
    return _normal_scores(0.5 * (cdf_prev + cdf_here))


def _ols_start(y: np.ndarray, X: np.ndarray) -> tuple[np.ndarray, float]:
    """Least-squares coefficients and residual SD, used as start values."""
    beta, *_ = np.linalg.lstsq(X, y, rcond=None)
    resid = y - X @ beta
    sd = float(np.std(resid))
    return beta, sd if sd > 0 else 1.0


# ------------------------------------------------------------------ #
# Count families
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class PoissonFamily:
    """Poisson log-link GLM for non-negative integer counts."""

    @property
    def name(self) -> str:
        return "poisson"

    @property
    def support(self) -> Support:
        return Support.COUNT

    def fit(self, y: np.ndarray, X: pd.DataFrame, maxiter: int = 100) -> Any:
        with _quiet_fit():
            result = sm.GLM(y, X, family=sm.families.Poisson()).fit(maxiter=maxiter)
        return _check_converged(result, self.name)

    def log_likelihood(self, result: Any) -> float:
        return float(result.llf)

    def n_params(self, result: Any) -> int:
        return _k_exog(result)

    def mean_coefficients(self, result: Any) -> pd.Series:
        return _mean_slice(result)

    def information(self, result: Any) -> tuple[np.ndarray, list[str]]:
        return _neg_hessian(result, scale=1.0)

    def quantile_residuals(self, result: Any, y: np.ndarray) -> np.ndarray:
        mu = np.asarray(result.fittedvalues, dtype=float)
        return _mid_quantile(stats.poisson.cdf(y - 1, mu), stats.poisson.cdf(y, mu))


@dataclass(frozen=True)
class NegativeBinomialFamily:
    """NB2 negative binomial regression with the dispersion α estimated.

    Unlike the GLM negative binomial, which holds α fixed, the
    discrete-model implementation estimates α jointly with the mean
    coefficients, so ``α`` appears in the parameter vector and in the
    information matrix.
    """

    @property
    def name(self) -> str:
        return "negative_binomial"

    @property
    def support(self) -> Support:
        return Support.COUNT

    def fit(self, y: np.ndarray, X: pd.DataFrame, maxiter: int = 100) -> Any:
        with _quiet_fit():
            result = NegativeBinomial(y, X, loglike_method="nb2").fit(
                disp=0, maxiter=maxiter
            )
        return _check_converged(result, self.name)

    def log_likelihood(self, result: Any) -> float:
        return float(result.llf)

    def n_params(self, result: Any) -> int:
        return len(np.asarray(result.params))

    def mean_coefficients(self, result: Any) -> pd.Series:
        return _mean_slice(result)

    def information(self, result: Any) -> tuple[np.ndarray, list[str]]:
        return _neg_hessian(result)

    def quantile_residuals(self, result: Any, y: np.ndarray) -> np.ndarray:
        params = np.asarray(result.params, dtype=float)
        beta, alpha = params[:-1], params[-1]
        mu = np.exp(result.model.exog @ beta)
        size = 1.0 / alpha
        prob = size / (size + mu)
        return _mid_quantile(
            stats.nbinom.cdf(y - 1, size, prob), stats.nbinom.cdf(y, size, prob)
        )


@dataclass(frozen=True)
class ZeroInflatedPoissonFamily:
    """Zero-inflated Poisson with a constant (intercept-only) inflation model.

    The parameter vector is laid out as ``[inflation, mean...]``.
    """

    @property
    def name(self) -> str:
        return "zero_inflated_poisson"

    @property
    def support(self) -> Support:
        return Support.COUNT

    def fit(self, y: np.ndarray, X: pd.DataFrame, maxiter: int = 100) -> Any:
        with _quiet_fit():
            result = ZeroInflatedPoisson(y, X, inflation="logit").fit(
                disp=0, maxiter=maxiter
            )
        return _check_converged(result, self.name)

    def log_likelihood(self, result: Any) -> float:
        return float(result.llf)

    def n_params(self, result: Any) -> int:
        return len(np.asarray(result.params))

    def mean_coefficients(self, result: Any) -> pd.Series:
        return _mean_slice(result, start=int(result.model.k_inflate))

    def information(self, result: Any) -> tuple[np.ndarray, list[str]]:
        return _neg_hessian(result)

    def _main_and_zero(self, result: Any) -> tuple[np.ndarray, np.ndarray]:
        params = np.asarray(result.params, dtype=float)
        k_infl = int(result.model.k_inflate)
        k = _k_exog(result)
        w = special.expit(result.model.exog_infl @ params[:k_infl])
        mu = np.exp(result.model.exog @ params[k_infl : k_infl + k])
        return mu, w

    def quantile_residuals(self, result: Any, y: np.ndarray) -> np.ndarray:
        mu, w = self._main_and_zero(result)
        here = w + (1 - w) * stats.poisson.cdf(y, mu)
        prev = np.where(y > 0, w + (1 - w) * stats.poisson.cdf(y - 1, mu), 0.0)
        return _mid_quantile(prev, here)


@dataclass(frozen=True)
class ZeroInflatedNegativeBinomialFamily(ZeroInflatedPoissonFamily):
    """Zero-inflated NB2 (``p = 2``) with a constant inflation model."""

    @property
    def name(self) -> str:
        return "zero_inflated_negative_binomial"

    def fit(self, y: np.ndarray, X: pd.DataFrame, maxiter: int = 100) -> Any:
        with _quiet_fit():
            result = ZeroInflatedNegativeBinomialP(
                y, X, inflation="logit", p=2
            ).fit(disp=0, maxiter=maxiter)
        return _check_converged(result, self.name)

    def quantile_residuals(self, result: Any, y: np.ndarray) -> np.ndarray:
        mu, w = self._main_and_zero(result)
        alpha = float(np.asarray(result.params, dtype=float)[-1])
        size = 1.0 / alpha
        prob = size / (size + mu)
        here = w + (1 - w) * stats.nbinom.cdf(y, size, prob)
        prev = np.where(
            y > 0, w + (1 - w) * stats.nbinom.cdf(y - 1, size, prob), 0.0
        )
        return _mid_quantile(prev, here)


# ------------------------------------------------------------------ #
# Real-line families
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class GaussianFamily:
    """Normal linear model (identity-link Gaussian GLM).

    The error variance counts as one estimated parameter.  Residuals
    are scaled by the ML standard deviation, consistent with the
    log-likelihood statsmodels reports for this family.
    """

    @property
    def name(self) -> str:
        return "gaussian"

    @property
    def support(self) -> Support:
        return Support.REAL

    def fit(self, y: np.ndarray, X: pd.DataFrame, maxiter: int = 100) -> Any:
        with _quiet_fit():
            result = sm.GLM(y, X, family=sm.families.Gaussian()).fit(maxiter=maxiter)
        return _check_converged(result, self.name)

    def log_likelihood(self, result: Any) -> float:
        return float(result.llf)

    def n_params(self, result: Any) -> int:
        return _k_exog(result) + 1

    def mean_coefficients(self, result: Any) -> pd.Series:
        return _mean_slice(result)

    def information(self, result: Any) -> tuple[np.ndarray, list[str]]:
        return _neg_hessian(result, scale=float(result.scale))

    def quantile_residuals(self, result: Any, y: np.ndarray) -> np.ndarray:
        resid = y - np.asarray(result.fittedvalues, dtype=float)
        sigma = math.sqrt(float(np.mean(resid**2)))
        with np.errstate(divide="ignore", invalid="ignore"):
            return resid / sigma


@dataclass(frozen=True)
class StudentTFamily:
    """Linear model with Student-t errors (location, scale and df estimated)."""

    @property
    def name(self) -> str:
        return "student_t"

    @property
    def support(self) -> Support:
        return Support.REAL

    def fit(self, y: np.ndarray, X: pd.DataFrame, maxiter: int = 100) -> Any:
        beta, sd = _ols_start(y, np.asarray(X, dtype=float))
        start = np.r_[beta, 5.0, sd]
        with _quiet_fit():
            result = TLinearModel(y, X).fit(
                start_params=start, method="bfgs", maxiter=maxiter, disp=0
            )
        return _check_converged(result, self.name)

    def log_likelihood(self, result: Any) -> float:
        return float(result.llf)

    def n_params(self, result: Any) -> int:
        return len(np.asarray(result.params))

    def mean_coefficients(self, result: Any) -> pd.Series:
        return _mean_slice(result)

    def information(self, result: Any) -> tuple[np.ndarray, list[str]]:
        return _neg_hessian(result)

    def quantile_residuals(self, result: Any, y: np.ndarray) -> np.ndarray:
        params = np.asarray(result.params, dtype=float)
        k = _k_exog(result)
        df, scale = params[k], params[k + 1]
        z = (y - result.model.exog @ params[:k]) / scale
        return _normal_scores(stats.t.cdf(z, df))


class _GumbelRegression(GenericLikelihoodModel):
    """Minimum-Gumbel location regression with a log-scale parameter."""

    def __init__(self, endog: Any, exog: Any, **kwds: Any) -> None:
        super().__init__(endog, exog, extra_params_names=["log_sigma"], **kwds)

    def loglikeobs(self, params: np.ndarray) -> np.ndarray:
        beta, log_sigma = params[:-1], params[-1]
        return stats.gumbel_l.logpdf(
            self.endog, loc=self.exog @ beta, scale=np.exp(log_sigma)
        )


@dataclass(frozen=True)
class GumbelFamily:
    """Gumbel (minimum) location model for left-skewed real data."""

    @property
    def name(self) -> str:
        return "gumbel"

    @property
    def support(self) -> Support:
        return Support.REAL

    def fit(self, y: np.ndarray, X: pd.DataFrame, maxiter: int = 100) -> Any:
        beta, sd = _ols_start(y, np.asarray(X, dtype=float))
        start = np.r_[beta, math.log(sd * math.sqrt(6.0) / math.pi)]
        with _quiet_fit():
            result = _GumbelRegression(y, X).fit(
                start_params=start, method="bfgs", maxiter=maxiter, disp=0
            )
        return _check_converged(result, self.name)

    def log_likelihood(self, result: Any) -> float:
        return float(result.llf)

    def n_params(self, result: Any) -> int:
        return len(np.asarray(result.params))

    def mean_coefficients(self, result: Any) -> pd.Series:
        return _mean_slice(result)

    def information(self, result: Any) -> tuple[np.ndarray, list[str]]:
        return _neg_hessian(result)

    def quantile_residuals(self, result: Any, y: np.ndarray) -> np.ndarray:
        params = np.asarray(result.params, dtype=float)
        loc = result.model.exog @ params[:-1]
        return _normal_scores(
            stats.gumbel_l.cdf(y, loc=loc, scale=math.exp(params[-1]))
        )


# ------------------------------------------------------------------ #
# Positive-real families
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class GammaFamily:
    """Gamma GLM with log link; the shape ``1 / scale`` is estimated."""

    @property
    def name(self) -> str:
        return "gamma"

    @property
    def support(self) -> Support:
        return Support.POSITIVE

    def _sm_family(self) -> Any:
        return sm.families.Gamma(link=sm.families.links.Log())

    def fit(self, y: np.ndarray, X: pd.DataFrame, maxiter: int = 100) -> Any:
        with _quiet_fit():
            result = sm.GLM(y, X, family=self._sm_family()).fit(maxiter=maxiter)
        return _check_converged(result, self.name)

    def log_likelihood(self, result: Any) -> float:
        return float(result.llf)

    def n_params(self, result: Any) -> int:
        return _k_exog(result) + 1

    def mean_coefficients(self, result: Any) -> pd.Series:
        return _mean_slice(result)

    def information(self, result: Any) -> tuple[np.ndarray, list[str]]:
        return _neg_hessian(result, scale=float(result.scale))

    def quantile_residuals(self, result: Any, y: np.ndarray) -> np.ndarray:
        mu = np.asarray(result.fittedvalues, dtype=float)
        shape = 1.0 / float(result.scale)
        return _normal_scores(stats.gamma.cdf(y, shape, scale=mu / shape))


@dataclass(frozen=True)
class InverseGaussianFamily(GammaFamily):
    """Inverse Gaussian GLM with log link; the shape ``λ = 1 / scale``."""

    @property
    def name(self) -> str:
        return "inverse_gaussian"

    def _sm_family(self) -> Any:
        return sm.families.InverseGaussian(link=sm.families.links.Log())

    def quantile_residuals(self, result: Any, y: np.ndarray) -> np.ndarray:
        mu = np.asarray(result.fittedvalues, dtype=float)
        lam = 1.0 / float(result.scale)
        # scipy's invgauss(mu=m/λ, scale=λ) has mean m and shape λ.
        return _normal_scores(stats.invgauss.cdf(y, mu / lam, scale=lam))


@dataclass(frozen=True)
class LogNormalFamily:
    """Log-normal model fitted as a Gaussian GLM on ``log(y)``.

    The log-likelihood is reported on the original scale, i.e. the
    Gaussian log-likelihood of ``log(y)`` minus the Jacobian term
    ``Σ log(yᵢ)``, so its information criteria are comparable with
    the other positive-support families.
    """

    @property
    def name(self) -> str:
        return "lognormal"

    @property
    def support(self) -> Support:
        return Support.POSITIVE

    def fit(self, y: np.ndarray, X: pd.DataFrame, maxiter: int = 100) -> Any:
        with _quiet_fit():
            result = sm.GLM(np.log(y), X, family=sm.families.Gaussian()).fit(
                maxiter=maxiter
            )
        return _check_converged(result, self.name)

    def log_likelihood(self, result: Any) -> float:
        # endog is log(y), so the Jacobian term is its sum.
        return float(result.llf) - float(np.sum(result.model.endog))

    def n_params(self, result: Any) -> int:
        return _k_exog(result) + 1

    def mean_coefficients(self, result: Any) -> pd.Series:
        return _mean_slice(result)

    def information(self, result: Any) -> tuple[np.ndarray, list[str]]:
        return _neg_hessian(result, scale=float(result.scale))

    def quantile_residuals(self, result: Any, y: np.ndarray) -> np.ndarray:
        resid = np.log(y) - np.asarray(result.fittedvalues, dtype=float)
        sigma = math.sqrt(float(np.mean(resid**2)))
        with np.errstate(divide="ignore", invalid="ignore"):
            return resid / sigma


# ------------------------------------------------------------------ #
# Unit-interval families
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class BetaFamily:
    """Beta regression (logit mean link, constant log precision)."""

    @property
    def name(self) -> str:
        return "beta"

    @property
    def support(self) -> Support:
        return Support.UNIT

    def fit(self, y: np.ndarray, X: pd.DataFrame, maxiter: int = 100) -> Any:
        with _quiet_fit():
            result = BetaModel(y, X).fit(disp=0, maxiter=maxiter)
        return _check_converged(result, self.name)

    def log_likelihood(self, result: Any) -> float:
        return float(result.llf)

    def n_params(self, result: Any) -> int:
        return len(np.asarray(result.params))

    def mean_coefficients(self, result: Any) -> pd.Series:
        return _mean_slice(result)

    def information(self, result: Any) -> tuple[np.ndarray, list[str]]:
        return _neg_hessian(result)

    def quantile_residuals(self, result: Any, y: np.ndarray) -> np.ndarray:
        params = np.asarray(result.params, dtype=float)
        k = _k_exog(result)
        mu = special.expit(result.model.exog @ params[:k])
        phi = math.exp(params[k])
        return _normal_scores(stats.beta.cdf(y, mu * phi, (1 - mu) * phi))


# ------------------------------------------------------------------ #
# Family registry
# ------------------------------------------------------------------ #

_FAMILIES: dict[str, type] = {}
"""Registry mapping canonical family names to concrete classes."""

_ALIASES: dict[str, str] = {}
"""Alternative spellings (including GAMLSS-style codes) to canonical names."""


def register_family(name: str, cls: type, aliases: Sequence[str] = ()) -> None:
    """Register a concrete ``DistributionFamily`` class under *name*.

    Args:
        name: Canonical lookup key (e.g. ``"poisson"``).
        cls: A class implementing the ``DistributionFamily`` protocol.
        aliases: Additional names that resolve to *name*.

    Raises:
        TypeError: If *cls* does not satisfy the protocol.
    """
    # runtime_checkable protocols with non-method members do not
    # support issubclass(); use isinstance() on a sentinel instance.
    try:
        instance = cls()
    except Exception:  # noqa: BLE001
        msg = f"{cls!r} could not be instantiated for protocol check."
        raise TypeError(msg) from None
    if not isinstance(instance, DistributionFamily):
        msg = f"{cls!r} does not implement the DistributionFamily protocol."
        raise TypeError(msg)
    _FAMILIES[name] = cls
    for alias in aliases:
        _ALIASES[alias] = name


def available_families() -> list[str]:
    """Canonical names of every registered family, in registration order."""
    return list(_FAMILIES)


def resolve_family(family: str | DistributionFamily) -> DistributionFamily:
    """Resolve a family string or instance to a ``DistributionFamily``.

    Instances are returned as-is.  Strings are looked up first as
    canonical names, then as aliases (``"count"``, ``"NBI"``, ...).

    Raises:
        ValueError: If *family* is a string that is not registered.
    """
    if isinstance(family, DistributionFamily):
        return family
    key = _ALIASES.get(family, family)
    if key not in _FAMILIES:
        available = ", ".join(sorted(_FAMILIES)) or "(none registered)"
        msg = f"Unknown family {family!r}.  Available families: {available}."
        raise ValueError(msg)
    instance: DistributionFamily = _FAMILIES[key]()
    return instance


# ------------------------------------------------------------------ #
# Register built-in families
# ------------------------------------------------------------------ #

register_family("poisson", PoissonFamily, aliases=("count", "PO"))
register_family("negative_binomial", NegativeBinomialFamily, aliases=("NBI",))
register_family("zero_inflated_poisson", ZeroInflatedPoissonFamily, aliases=("ZIP",))
register_family(
    "zero_inflated_negative_binomial",
    ZeroInflatedNegativeBinomialFamily,
    aliases=("ZINBI",),
)
register_family("gaussian", GaussianFamily, aliases=("normal", "NO"))
register_family("student_t", StudentTFamily, aliases=("TF",))
register_family("gumbel", GumbelFamily, aliases=("GU",))
register_family("gamma", GammaFamily, aliases=("GA",))
register_family("inverse_gaussian", InverseGaussianFamily, aliases=("IG",))
register_family("lognormal", LogNormalFamily, aliases=("LOGNO",))
register_family("beta", BetaFamily, aliases=("BE",))
