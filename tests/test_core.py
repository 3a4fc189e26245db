"""Tests for the top-level entry points and the results aggregator."""

import math

import numpy as np
import pandas as pd
import pytest

from distselect import (
    AnalysisConfig,
    FeatureRecord,
    FeatureStatus,
    NullReporter,
    aggregate_records,
    differential_expression,
    fit_feature_models,
    screen_families,
)

# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture
def design():
    return pd.DataFrame(
        {"Intercept": np.ones(6), "group": [0.0, 0.0, 0.0, 1.0, 1.0, 1.0]}
    )


@pytest.fixture
def counts():
    return pd.DataFrame(
        [
            [10, 12, 9, 55, 60, 58],
            [0, 0, 0, 0, 0, 0],
            [30, 28, 35, 5, 4, 6],
            [7, 9, 8, 8, 7, 9],
            [1, 0, 2, 40, 38, 45],
            [20, 22, 19, 21, 25, 18],
        ],
        index=["up", "zero", "down", "flat", "sparse", "noise"],
        columns=[f"s{i}" for i in range(6)],
        dtype=float,
    )


@pytest.fixture
def fast():
    return {
        "families": ("count", "gaussian"),
        "backend": "threading",
        "n_jobs": 2,
        "verbose": 0,
    }


class RecordingReporter(NullReporter):
    def __init__(self):
        self.summaries = []

    def summary(self, summary):
        self.summaries.append(summary)


# ------------------------------------------------------------------ #
# differential_expression
# ------------------------------------------------------------------ #


class TestDifferentialExpression:
    def test_one_row_per_feature(self, counts, design, fast):
        table = differential_expression(counts, design, "group", **fast)
        assert len(table) == counts.shape[0]
        assert [r.feature for r in table] == list(counts.index)

    def test_adjusted_p_values(self, counts, design, fast):
        table = differential_expression(counts, design, "group", **fast)
        tested = [r for r in table if r.status is FeatureStatus.TESTED]
        adjusted = [r for r in table if not math.isnan(r.p_value_adjusted)]
        assert len(adjusted) == len(tested) == table.summary.n_tested
        for r in tested:
            assert r.p_value_adjusted >= r.p_value - 1e-12

    def test_skipped_row_has_missing_markers(self, counts, design, fast):
        table = differential_expression(counts, design, "group", **fast)
        zero = next(r for r in table if r.feature == "zero")
        assert zero.status is FeatureStatus.SKIPPED
        assert zero.selected_family is None
        assert math.isnan(zero.p_value)
        assert math.isnan(zero.p_value_adjusted)

    def test_separated_feature_significant(self, counts, design, fast):
        table = differential_expression(counts, design, "group", **fast)
        up = next(r for r in table if r.feature == "up")
        assert up.p_value < 0.05
        assert abs(up.contrast_z) > 5

    def test_summary(self, counts, design, fast):
        summary = differential_expression(counts, design, "group", **fast).summary
        assert summary.n_features == 6
        assert summary.n_skipped == 1
        assert summary.n_analyzed == 5
        assert (
            summary.n_tested + summary.n_untestable + summary.n_no_fit
            + summary.n_skipped + summary.n_error
        ) == 6
        assert sum(summary.family_counts.values()) == summary.n_tested + summary.n_untestable
        assert summary.top_family in ("poisson", "gaussian")

    def test_strict_unknown_coefficient_fails_fast(self, counts, design, fast):
        with pytest.raises(ValueError, match="not a design column"):
            differential_expression(counts, design, "treatment", **fast)

    def test_lenient_unknown_coefficient_untestable(self, counts, design, fast):
        table = differential_expression(
            counts, design, "treatment", strict_coefficient=False, **fast
        )
        assert len(table) == 6
        assert table.summary.n_tested == 0
        statuses = {r.status for r in table if r.feature != "zero"}
        assert statuses == {FeatureStatus.UNTESTABLE}
        assert all(math.isnan(r.p_value_adjusted) for r in table)

    def test_zero_budget_every_feature_no_fit(self, counts, design, fast):
        table = differential_expression(counts, design, "group", time_budget=0, **fast)
        for r in table:
            if r.feature == "zero":
                continue
            assert r.status is FeatureStatus.NO_FIT
            assert set(r.failures.values()) == {"timeout"}
        assert table.summary.n_no_fit == 5

    def test_design_row_mismatch(self, counts, fast):
        X = pd.DataFrame({"Intercept": np.ones(5), "group": [0, 0, 1, 1, 1]})
        with pytest.raises(ValueError, match="samples"):
            differential_expression(counts, X, "group", **fast)

    def test_non_finite_design(self, counts, design, fast):
        bad = design.copy()
        bad.loc[0, "group"] = np.nan
        with pytest.raises(ValueError, match="non-finite"):
            differential_expression(counts, bad, "group", **fast)

    def test_unsupported_container(self, design, fast):
        with pytest.raises(TypeError):
            differential_expression([[1, 2, 3]], design, "group", **fast)

    def test_numpy_input(self, counts, design, fast):
        table = differential_expression(counts.to_numpy(), design, "group", **fast)
        assert [r.feature for r in table] == ["0", "1", "2", "3", "4", "5"]

    def test_drop_skipped(self, counts, design, fast):
        table = differential_expression(counts, design, "group", drop_skipped=True, **fast)
        assert len(table) == 5
        assert [r.feature for r in table.omitted] == ["zero"]
        assert table.summary.n_skipped == 1
        assert table.summary.n_features == 6

    def test_config_with_overrides(self, counts, design, fast):
        config = AnalysisConfig(**fast)
        table = differential_expression(
            counts, design, "group", config=config, criterion="BIC"
        )
        assert table.criterion == "BIC"
        assert {r.criterion for r in table if r.selected_family} == {"BIC"}

    def test_summary_reported(self, counts, design, fast):
        reporter = RecordingReporter()
        fast["verbose"] = 1
        differential_expression(counts, design, "group", reporter=reporter, **fast)
        assert len(reporter.summaries) == 1
        assert reporter.summaries[0].n_features == 6

    def test_summary_reported_without_progress(self, counts, design, fast):
        reporter = RecordingReporter()
        table = differential_expression(counts, design, "group", reporter=reporter, **fast)
        assert fast["verbose"] == 0
        assert len(reporter.summaries) == 1
        assert reporter.summaries[0].n_skipped == table.summary.n_skipped == 1

    def test_invalid_override(self, counts, design, fast):
        with pytest.raises(ValueError, match="correction"):
            differential_expression(counts, design, "group", correction="qvalue", **fast)


# ------------------------------------------------------------------ #
# aggregate_records
# ------------------------------------------------------------------ #


class TestAggregateRecords:
    def _records(self):
        return [
            FeatureRecord("a", FeatureStatus.TESTED, "poisson", p_value=0.01),
            FeatureRecord("b", FeatureStatus.SKIPPED),
            FeatureRecord("c", FeatureStatus.TESTED, "gaussian", p_value=0.04),
            FeatureRecord("d", FeatureStatus.UNTESTABLE, "gaussian"),
        ]

    def test_bonferroni_over_tested_only(self):
        config = AnalysisConfig(correction="bonferroni")
        table = aggregate_records(self._records(), coefficient="group", config=config)
        adj = [r.p_value_adjusted for r in table]
        assert adj[0] == pytest.approx(0.02)
        assert adj[2] == pytest.approx(0.08)
        assert math.isnan(adj[1]) and math.isnan(adj[3])

    def test_metadata(self):
        table = aggregate_records(self._records(), coefficient="group")
        assert table.coefficient == "group"
        assert table.criterion == "AIC"
        assert table.correction == "BH"

    def test_empty(self):
        table = aggregate_records([], coefficient="group")
        assert len(table) == 0
        assert table.summary.top_family is None


# ------------------------------------------------------------------ #
# fit_feature_models
# ------------------------------------------------------------------ #


class TestFitFeatureModels:
    def test_models_retained(self, counts, design):
        fits = fit_feature_models(
            counts.loc["up"], design, families=("count", "gaussian", "gamma")
        )
        assert [f.family for f in fits.fits] == ["poisson", "gaussian", "gamma"]
        for f in fits.fits:
            assert f.model is not None
            assert f.fit_time >= 0

    def test_rejects_2d(self, counts, design):
        with pytest.raises(ValueError, match="1-D"):
            fit_feature_models(counts.to_numpy(), design)


# ------------------------------------------------------------------ #
# screen_families
# ------------------------------------------------------------------ #


class TestScreenFamilies:
    def test_top_families(self, counts, fast):
        result = screen_families(counts, n_features=6, top_n=1, random_state=0, **fast)
        assert result.n_analyzed == 6
        assert result.n_skipped == 1
        assert result.n_fitted == sum(result.family_counts.values())
        assert len(result.top_families) == 1
        assert result.top_families[0] == next(iter(result.family_counts))

    def test_sample_reproducible(self, counts, fast):
        a = screen_families(counts, n_features=3, random_state=7, **fast)
        b = screen_families(counts, n_features=3, random_state=7, **fast)
        assert a.features == b.features
        assert a.family_counts == b.family_counts

    def test_too_many_features(self, counts, fast):
        with pytest.raises(ValueError, match="exceeds"):
            screen_families(counts, n_features=7, **fast)

    def test_top_n_positive(self, counts, fast):
        with pytest.raises(ValueError, match="top_n"):
            screen_families(counts, n_features=2, top_n=0, **fast)

    def test_default_candidates_are_all_registered(self, counts):
        result = screen_families(
            counts, n_features=2, random_state=1, backend="sequential",
            n_jobs=1, verbose=0, time_budget=5.0,
        )
        assert result.n_analyzed == 2
