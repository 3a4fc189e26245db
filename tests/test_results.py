"""Tests for the typed result objects."""

import json
import math

import numpy as np
import pytest

from distselect._results import (
    COLUMNS,
    AnalysisSummary,
    FailureReason,
    FeatureRecord,
    FeatureStatus,
    FitFailure,
    FitRecord,
    ResultsTable,
)


def _table():
    records = (
        FeatureRecord("a", FeatureStatus.TESTED, "poisson", aic=10.0, p_value=0.01,
                      p_value_adjusted=0.02, failures={"gamma": "invalid-data"}),
        FeatureRecord("b", FeatureStatus.TESTED, "poisson", aic=12.0, p_value=0.2,
                      p_value_adjusted=0.2),
        FeatureRecord("c", FeatureStatus.UNTESTABLE, "gaussian", aic=8.0),
        FeatureRecord("d", FeatureStatus.NO_FIT),
        FeatureRecord("e", FeatureStatus.SKIPPED),
    )
    return ResultsTable(records=records, coefficient="group", criterion="AIC",
                        correction="BH")


class TestDictAccess:
    def test_bracket_get_and_contains(self):
        rec = FeatureRecord("a", FeatureStatus.TESTED, p_value=0.5)
        assert rec["p_value"] == 0.5
        assert rec.get("missing", 1) == 1
        assert "feature" in rec
        assert "missing" not in rec
        with pytest.raises(KeyError):
            rec["missing"]

    def test_to_dict_json_serialisable(self):
        rec = FeatureRecord("a", FeatureStatus.TESTED, p_value=np.float64(0.5))
        d = rec.to_dict()
        assert d["status"] == "tested"
        assert isinstance(d["p_value"], float)
        json.dumps(d, allow_nan=True)

    def test_fit_record_to_dict_excludes_model(self):
        rec = FitRecord(
            family="poisson", log_likelihood=-1.0, aic=4.0, bic=4.0, gaic=5.0,
            gaic_penalty=3.0, n_params=1, df_residual=2, nobs=3,
            coefficients={"Intercept": 0.1}, information=np.eye(1),
            parameter_names=("Intercept",), model=object(),
        )
        d = rec.to_dict()
        assert "model" not in d
        assert d["information"] == [[1.0]]
        assert d["diagnostics"]["n_residuals"] == 0

    def test_failure_reason_values(self):
        f = FitFailure("gamma", FailureReason.INVALID_DATA)
        assert f.to_dict() == {"family": "gamma", "reason": "invalid-data", "message": ""}


class TestFeatureRecord:
    def test_defaults_are_missing_markers(self):
        rec = FeatureRecord("a", FeatureStatus.SKIPPED)
        assert rec.selected_family is None
        assert all(math.isnan(rec[k]) for k in ("aic", "p_value", "contrast_z"))
        assert not rec.has_p_value

    def test_frozen(self):
        rec = FeatureRecord("a", FeatureStatus.SKIPPED)
        with pytest.raises(AttributeError):
            rec.p_value = 0.1


class TestAnalysisSummary:
    def test_counts(self):
        s = _table().summary
        assert s.n_features == 5
        assert (s.n_tested, s.n_untestable, s.n_no_fit, s.n_skipped) == (2, 1, 1, 1)
        assert s.n_analyzed == 4
        assert s.family_counts == {"poisson": 2, "gaussian": 1}
        assert (s.top_family, s.top_family_count) == ("poisson", 2)

    def test_empty(self):
        s = AnalysisSummary.from_records([])
        assert s.top_family is None
        assert s.top_family_count == 0


class TestResultsTable:
    def test_to_frame_columns(self):
        df = _table().to_frame()
        assert list(df.columns) == list(COLUMNS)
        assert len(df) == 5
        assert df.loc[0, "AIC"] == 10.0
        assert df.loc[0, "failures"] == {"gamma": "invalid-data"}
        assert df.loc[3, "status"] == "no-fit"

    def test_output_schema_present(self):
        required = {
            "feature", "selected_family", "AIC", "BIC", "generalized_AIC",
            "log_likelihood", "degrees_of_freedom", "goodness_of_fit_p",
            "skewness", "kurtosis", "contrast_estimate", "contrast_std_error",
            "contrast_z", "p_value", "p_value_adjusted",
        }
        assert required <= set(COLUMNS)

    def test_iteration_and_len(self):
        table = _table()
        assert len(table) == 5
        assert [r.feature for r in table] == ["a", "b", "c", "d", "e"]
