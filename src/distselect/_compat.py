"""Input compatibility layer for the expression matrix and design.

All public API functions accept pandas DataFrames.  This module adds
transparent support for Polars DataFrames and plain 2-D NumPy arrays:
they are converted to ``pandas.DataFrame`` at the boundary so that
internal code, which operates on NumPy arrays extracted from pandas,
remains unchanged.

Polars is **not** a required dependency.  If it is not installed, the
converter simply passes pandas objects through untouched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    import polars as pl

    DataFrameLike: TypeAlias = pd.DataFrame | pl.DataFrame | pl.LazyFrame | np.ndarray
else:
    DataFrameLike: TypeAlias = pd.DataFrame

# Runtime detection, so Polars stays optional.
try:
    import polars as pl

    _HAS_POLARS = True
except ImportError:
    _HAS_POLARS = False


def _ensure_pandas_df(
    obj: DataFrameLike,
    *,
    name: str = "input",
    prefix: str = "col",
) -> pd.DataFrame:
    """Convert *obj* to a :class:`pandas.DataFrame` if necessary.

    Accepted types:
        * ``pandas.DataFrame`` — returned as-is.
        * ``numpy.ndarray`` (2-D) — wrapped, with columns named
          ``"{prefix}0"``, ``"{prefix}1"``, ...
        * ``polars.DataFrame`` — converted via ``.to_pandas()``.
        * ``polars.LazyFrame`` — collected then converted.

    Args:
        obj: A pandas or Polars DataFrame (or LazyFrame), or a 2-D
            NumPy array.
        name: Label used in error messages (e.g. ``"counts"``).
        prefix: Column-name prefix for NumPy input.

    Returns:
        A pandas ``DataFrame``.

    Raises:
        TypeError: If *obj* is not a recognised container.
        ValueError: If *obj* is an array that is not 2-D.
    """
    if isinstance(obj, pd.DataFrame):
        return obj

    if isinstance(obj, np.ndarray):
        if obj.ndim != 2:
            raise ValueError(f"'{name}' must be 2-D, got an array with ndim={obj.ndim}.")
        return pd.DataFrame(obj, columns=[f"{prefix}{j}" for j in range(obj.shape[1])])

    if _HAS_POLARS:
        if isinstance(obj, pl.LazyFrame):
            return obj.collect().to_pandas()
        if isinstance(obj, pl.DataFrame):
            return obj.to_pandas()

    raise TypeError(
        f"'{name}' must be a pandas DataFrame or 2-D NumPy array"
        + (" or Polars DataFrame/LazyFrame" if _HAS_POLARS else "")
        + f", got {type(obj).__name__}."
    )
