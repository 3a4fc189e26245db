"""Time-boxed family fitting and per-feature candidate fitting.

Two layers live here:

1. :func:`fit_family` — the **fit adapter**.  It applies the family's
   validity transform, drops invalid observations together with the
   matching design rows, and runs the statsmodels fit under a
   wall-clock budget.  Whatever happens inside the fit (an exception,
   a non-converged optimiser, a non-finite log-likelihood, or an
   expired budget) comes back as a typed :class:`~._results.FitFailure`
   instead of propagating.  A successful fit is distilled into a
   :class:`~._results.FitRecord` holding only summary numbers, the
   small information matrix and the residual diagnostics.  The
   statsmodels result object is kept only when ``retain_model=True``.

2. :func:`fit_candidates` — the **candidate fitter**.  It short-circuits
   degenerate features (no finite value, or all zeros) and otherwise
   tries every family in the caller's order, collecting successes and
   failures separately.

Time budget
~~~~~~~~~~~
Two isolation modes bound a fit to ``time_budget`` seconds:

* ``"thread"`` (default) runs the fit on a daemon thread.  On expiry
  the attempt is abandoned.  Its result is never read, and the thread
  does not hold up interpreter exit, but it keeps running until the
  statsmodels call returns.
* ``"process"`` runs the fit in a forked child process and terminates
  it on expiry, so an attempt that never returns costs nothing after
  its budget.  Each fit pays the cost of a fork, and the record (and
  any retained model) is pickled back to the caller.

A budget of ``0`` (or less) times out without starting the fit.
``None`` disables the budget and fits in the calling thread.
"""

from __future__ import annotations

import logging
import math
import multiprocessing as mp
import threading
import time
from collections.abc import Sequence
from typing import Any

import numpy as np
import pandas as pd

from ._compat import DataFrameLike, _ensure_pandas_df
from ._results import (
    CandidateFits,
    FailureReason,
    FitFailure,
    FitRecord,
    ResidualDiagnostics,
)
from .diagnostics import residual_diagnostics
from .families import DistributionFamily, resolve_family
from .selection import DEFAULT_GAIC_PENALTY
from .transforms import is_degenerate, transform_values, valid_mask

logger = logging.getLogger(__name__)

_MP_CONTEXT = mp.get_context("fork") if "fork" in mp.get_all_start_methods() else mp.get_context()

ISOLATION_MODES = ("thread", "process")


class FitTimeoutError(TimeoutError):
    """A fit did not finish within its time budget."""


class NumericalSingularityError(ArithmeticError):
    """A fit finished but produced a non-finite log-likelihood."""


def as_design(design: DataFrameLike, n_samples: int | None = None) -> pd.DataFrame:
    """Coerce *design* to a float DataFrame and check its row count.

    Raises:
        ValueError: If the row count differs from *n_samples*.
    """
    X = _ensure_pandas_df(design, name="design", prefix="x")
    if n_samples is not None and X.shape[0] != n_samples:
        raise ValueError(
            f"Design matrix has {X.shape[0]} rows but the feature has "
            f"{n_samples} samples."
        )
    return X.astype(float)


# ------------------------------------------------------------------ #
# Fit adapter
# ------------------------------------------------------------------ #


def _distill(
    family: DistributionFamily,
    y: np.ndarray,
    X: pd.DataFrame,
    gaic_penalty: float,
    maxiter: int,
    retain_model: bool,
) -> FitRecord:
    """Fit *family* and reduce the result to a :class:`FitRecord`.

    Runs entirely inside the time-boxed call so that an abandoned
    attempt leaves nothing behind.
    """
    start = time.perf_counter()
    result = family.fit(y, X, maxiter=maxiter)
    llf = family.log_likelihood(result)
    if not math.isfinite(llf):
        raise NumericalSingularityError(f"{family.name} log-likelihood is {llf}.")

    n = len(y)
    k = family.n_params(result)
    coefs = family.mean_coefficients(result)

    try:
        information, names = family.information(result)
    except Exception as exc:  # noqa: BLE001
        logger.debug("Information matrix unavailable for %s: %s", family.name, exc)
        information, names = np.empty((0, 0)), []

    try:
        residuals = np.asarray(family.quantile_residuals(result, y), dtype=float)
        diagnostics = residual_diagnostics(residuals)
    except Exception as exc:  # noqa: BLE001
        logger.debug("Residual diagnostics failed for %s: %s", family.name, exc)
        residuals, diagnostics = np.empty(0), ResidualDiagnostics()

    return FitRecord(
        family=family.name,
        log_likelihood=llf,
        aic=-2.0 * llf + 2.0 * k,
        bic=-2.0 * llf + k * math.log(n),
        gaic=-2.0 * llf + gaic_penalty * k,
        gaic_penalty=gaic_penalty,
        n_params=k,
        df_residual=n - k,
        nobs=n,
        coefficients={str(name): float(v) for name, v in coefs.items()},
        information=np.asarray(information, dtype=float),
        parameter_names=tuple(str(name) for name in names),
        diagnostics=diagnostics,
        residuals=residuals,
        fit_time=time.perf_counter() - start,
        model=result if retain_model else None,
    )


def _thread_call(func: Any, time_budget: float, args: tuple) -> Any:
    outcome: dict[str, Any] = {}

    def _target() -> None:
        try:
            outcome["value"] = func(*args)
        except Exception as exc:  # noqa: BLE001
            outcome["error"] = exc

    # Never joined at exit; an expired fit is abandoned where it runs.
    worker = threading.Thread(target=_target, name="distselect-fit", daemon=True)
    worker.start()
    worker.join(time_budget)
    if worker.is_alive():
        raise FitTimeoutError(f"fit still running after {time_budget:g}s")
    if "error" in outcome:
        raise outcome["error"]
    if "value" not in outcome:
        raise RuntimeError("fit thread exited without a result")
    return outcome["value"]


def _child_entry(conn: Any, func: Any, args: tuple) -> None:
    try:
        payload = ("ok", func(*args))
    except Exception as exc:  # noqa: BLE001
        payload = ("error", exc)
    try:
        conn.send(payload)
    except Exception as exc:  # noqa: BLE001
        conn.send(("error", RuntimeError(f"{type(exc).__name__}: {exc}")))
    finally:
        conn.close()


def _process_call(func: Any, time_budget: float, args: tuple) -> Any:
    if mp.current_process().daemon:
        # Daemonic processes may not have children.
        logger.debug("Daemonic worker; running the fit on a thread instead.")
        return _thread_call(func, time_budget, args)
    recv_conn, send_conn = _MP_CONTEXT.Pipe(duplex=False)
    proc = _MP_CONTEXT.Process(
        target=_child_entry,
        args=(send_conn, func, args),
        name="distselect-fit",
        daemon=True,
    )
    proc.start()
    send_conn.close()
    try:
        if not recv_conn.poll(time_budget):
            raise FitTimeoutError(f"fit process killed after {time_budget:g}s")
        try:
            status, payload = recv_conn.recv()
        except EOFError:
            proc.join()
            raise RuntimeError(
                f"fit process exited with code {proc.exitcode}"
            ) from None
    finally:
        recv_conn.close()
        if proc.is_alive():
            proc.terminate()
        proc.join()
    if status == "error":
        raise payload
    return payload


def _run_with_budget(
    func: Any,
    time_budget: float | None,
    *args: Any,
    isolation: str = "thread",
) -> Any:
    """Call ``func(*args)`` and wait at most *time_budget* seconds.

    ``isolation="thread"`` abandons an expired attempt on a daemon
    thread; ``"process"`` runs the attempt in a child process and
    terminates it on expiry.

    Raises:
        FitTimeoutError: When the budget expires.
    """
    if time_budget is None:
        return func(*args)
    if isolation == "process":
        return _process_call(func, time_budget, args)
    return _thread_call(func, time_budget, args)


def fit_family(
    values: np.ndarray,
    design: DataFrameLike,
    family: str | DistributionFamily,
    *,
    time_budget: float | None = 10.0,
    gaic_penalty: float = DEFAULT_GAIC_PENALTY,
    maxiter: int = 100,
    retain_model: bool = False,
    isolation: str = "thread",
) -> FitRecord | FitFailure:
    """Fit one family to one feature within a wall-clock budget.

    Args:
        values: Raw observations for the feature, shape ``(n,)``.
        design: Design matrix with ``n`` rows and named columns.
        family: Family name, alias, or instance.
        time_budget: Seconds allowed for the fit; ``<= 0`` times out
            immediately and ``None`` disables the limit.
        gaic_penalty: Per-parameter penalty of the generalised AIC.
        maxiter: Iteration cap handed to statsmodels.
        retain_model: Keep the statsmodels result on the record.
        isolation: ``"thread"`` or ``"process"``; see the module
            docstring.

    Returns:
        A :class:`FitRecord` on success, otherwise a
        :class:`FitFailure` tagged ``invalid-data``,
        ``non-convergence``, ``timeout`` or ``numerical-singularity``.
    """
    if isolation not in ISOLATION_MODES:
        raise ValueError(
            f"Unknown isolation {isolation!r}. Choose from: {list(ISOLATION_MODES)}"
        )
    fam = resolve_family(family)
    y_all = np.asarray(values, dtype=float)
    X = as_design(design, len(y_all))
    if time_budget is not None and time_budget <= 0:
        return FitFailure(fam.name, FailureReason.TIMEOUT, "time budget is zero")

    transformed = transform_values(y_all, fam.support)
    mask = valid_mask(transformed)
    n_valid = int(mask.sum())
    if n_valid < X.shape[1] + 1:
        return FitFailure(
            fam.name,
            FailureReason.INVALID_DATA,
            f"{n_valid} valid observations for {X.shape[1]} design columns",
        )

    y = transformed[mask]
    X_valid = X.iloc[np.flatnonzero(mask)]
    try:
        return _run_with_budget(
            _distill,
            time_budget,
            fam,
            y,
            X_valid,
            gaic_penalty,
            maxiter,
            retain_model,
            isolation=isolation,
        )
    except FitTimeoutError:
        logger.debug("%s fit exceeded its %.3gs budget.", fam.name, time_budget)
        return FitFailure(
            fam.name, FailureReason.TIMEOUT, f"exceeded {time_budget:g}s budget"
        )
    except NumericalSingularityError as exc:
        logger.debug("%s fit is numerically singular: %s", fam.name, exc)
        return FitFailure(fam.name, FailureReason.NUMERICAL_SINGULARITY, str(exc))
    except Exception as exc:  # noqa: BLE001
        logger.debug("%s fit failed: %s", fam.name, exc)
        return FitFailure(fam.name, FailureReason.NON_CONVERGENCE, str(exc))


# ------------------------------------------------------------------ #
# Candidate fitter
# ------------------------------------------------------------------ #


def fit_candidates(
    values: np.ndarray,
    design: DataFrameLike,
    families: Sequence[str | DistributionFamily],
    *,
    time_budget: float | None = 10.0,
    gaic_penalty: float = DEFAULT_GAIC_PENALTY,
    maxiter: int = 100,
    retain_models: bool = False,
    isolation: str = "thread",
    feature: str | None = None,
) -> CandidateFits:
    """Try every family for one feature, in order.

    Degenerate features (no finite value, or every finite value zero)
    are skipped without attempting any family.

    Args:
        values: Raw observations for the feature.
        design: Shared design matrix.
        families: Ordered candidate families; the order is kept in
            :attr:`CandidateFits.fits` and breaks selection ties.
        time_budget: Per-fit budget in seconds.
        gaic_penalty: Per-parameter penalty of the generalised AIC.
        maxiter: Iteration cap handed to statsmodels.
        retain_models: Keep the statsmodels results on the records.
        isolation: How each fit is time-boxed (``"thread"`` or
            ``"process"``).
        feature: Feature name, used in log messages only.

    Returns:
        A :class:`CandidateFits` with successes and failures.
    """
    if is_degenerate(values):
        return CandidateFits(skipped=True)

    X = as_design(design, len(values))
    fits: list[FitRecord] = []
    failures: list[FitFailure] = []
    for family in families:
        outcome = fit_family(
            values,
            X,
            family,
            time_budget=time_budget,
            gaic_penalty=gaic_penalty,
            maxiter=maxiter,
            retain_model=retain_models,
            isolation=isolation,
        )
        if isinstance(outcome, FitRecord):
            fits.append(outcome)
        else:
            failures.append(outcome)

    if not fits:
        logger.debug("No family converged for feature %s.", feature)
    return CandidateFits(fits=tuple(fits), failures=tuple(failures))
