"""Family-specific validity transforms.

Each distribution family has a support (the set of values its density
is defined on).  Before a feature is fitted against a family, its raw
values are mapped onto that support and every value the family cannot
model is marked invalid.  Invalid entries are carried as ``NaN`` so the
caller can drop them together with the matching design rows.

=====================  ==================================================
Support                Transform
=====================  ==================================================
``POSITIVE``           values ``<= 0`` become invalid
``COUNT``              negatives become invalid, the rest are rounded
``UNIT``               ``(x - min) / (max - min + eps)``, results at or
                       beyond 0 or 1 become invalid
``REAL``               standardised with the feature's own mean and SD
``UNSPECIFIED``        passed through unchanged
=====================  ==================================================

Non-finite input values are invalid for every support.
"""

from __future__ import annotations

import enum

import numpy as np

UNIT_EPSILON = 1e-8
"""Margin added to the range when rescaling onto the unit interval."""


class Support(str, enum.Enum):
    """Support class of a distribution family."""

    POSITIVE = "positive"
    COUNT = "count"
    UNIT = "unit"
    REAL = "real"
    UNSPECIFIED = "unspecified"


def transform_values(values: np.ndarray, support: Support | str) -> np.ndarray:
    """Map *values* onto *support*, marking invalid entries with ``NaN``.

    Args:
        values: Raw observations for one feature, shape ``(n,)``.
        support: Support class of the target family.

    Returns:
        A new float array of shape ``(n,)``.  Entries the family
        cannot model are ``NaN``.
    """
    support = Support(support)
    y = np.asarray(values, dtype=float).copy()
    finite = np.isfinite(y)
    y[~finite] = np.nan

    if support is Support.POSITIVE:
        y[finite & (y <= 0)] = np.nan
        return y

    if support is Support.COUNT:
        y[finite & (y < 0)] = np.nan
        return np.round(y)

    if support is Support.UNIT:
        if not finite.any():
            return y
        lo = np.min(y[finite])
        hi = np.max(y[finite])
        y = (y - lo) / (hi - lo + UNIT_EPSILON)
        y[(y <= 0) | (y >= 1)] = np.nan
        return y

    if support is Support.REAL:
        if finite.sum() < 2:
            return np.full_like(y, np.nan)
        mean = np.mean(y[finite])
        sd = np.std(y[finite], ddof=1)
        if not np.isfinite(sd) or sd == 0:
            return np.full_like(y, np.nan)
        return (y - mean) / sd

    return y


def valid_mask(transformed: np.ndarray) -> np.ndarray:
    """Boolean mask of the entries left valid by :func:`transform_values`."""
    return np.isfinite(transformed)


def is_degenerate(values: np.ndarray) -> bool:
    """Return ``True`` when a feature should be skipped outright.

    A feature is degenerate when it has no finite observation, or
    when every finite observation is zero.
    """
    y = np.asarray(values, dtype=float)
    finite = y[np.isfinite(y)]
    return finite.size == 0 or bool(np.all(finite == 0))
