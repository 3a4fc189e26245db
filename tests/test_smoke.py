"""End-to-end smoke tests on a process pool.

These tests run the full pipeline on a simulated matrix with the
default ``loky`` backend and every default family.  They catch
pickling problems between the parent and worker processes and
regressions in fault isolation at realistic sizes.

All tests are marked ``@pytest.mark.slow``.  Run them explicitly::

    pytest -m slow
"""

from __future__ import annotations

import math
import time

import numpy as np
import pandas as pd
import pytest

from distselect import FeatureStatus, NullReporter, differential_expression

# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #

N_FEATURES = 60
N_PER_GROUP = 6
SEED = 42


def _simulate(seed: int = SEED) -> tuple[pd.DataFrame, pd.DataFrame]:
    rng = np.random.default_rng(seed)
    group = np.r_[np.zeros(N_PER_GROUP), np.ones(N_PER_GROUP)]
    base = rng.uniform(5, 200, size=N_FEATURES)
    effect = np.where(np.arange(N_FEATURES) < N_FEATURES // 4, 1.5, 0.0)
    mu = base[:, None] * np.exp(effect[:, None] * group[None, :])
    size = 5.0
    counts = rng.negative_binomial(size, size / (size + mu)).astype(float)
    counts[-3:] = 0.0
    matrix = pd.DataFrame(
        counts,
        index=[f"gene{i:03d}" for i in range(N_FEATURES)],
        columns=[f"s{j}" for j in range(2 * N_PER_GROUP)],
    )
    design = pd.DataFrame({"Intercept": np.ones(2 * N_PER_GROUP), "group": group})
    return matrix, design


@pytest.mark.slow
class TestProcessPool:
    def test_full_run_completes(self):
        matrix, design = _simulate()
        start = time.perf_counter()
        table = differential_expression(
            matrix, design, "group", n_jobs=2, verbose=0, reporter=NullReporter()
        )
        elapsed = time.perf_counter() - start

        assert len(table) == N_FEATURES
        summary = table.summary
        assert summary.n_skipped == 3
        assert summary.n_error == 0
        assert summary.n_tested > N_FEATURES // 2
        assert elapsed < 300

    def test_true_effects_detected(self):
        matrix, design = _simulate()
        table = differential_expression(
            matrix, design, "group", n_jobs=2, verbose=0, reporter=NullReporter()
        )
        df = table.to_frame().set_index("feature")
        true_hits = df.iloc[: N_FEATURES // 4]
        tested = true_hits[true_hits["status"] == FeatureStatus.TESTED.value]
        assert (tested["p_value_adjusted"] < 0.05).mean() > 0.8

    def test_adjusted_count_matches_tested(self):
        matrix, design = _simulate(seed=7)
        table = differential_expression(
            matrix, design, "group", n_jobs=2, verbose=0, reporter=NullReporter()
        )
        n_adjusted = sum(not math.isnan(r.p_value_adjusted) for r in table)
        assert n_adjusted == table.summary.n_tested
