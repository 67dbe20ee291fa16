"""Unit tests for per-cluster GDP regressions."""

import numpy as np
import pandas as pd
import pytest
from statsmodels.regression.linear_model import RegressionResultsWrapper

from wdi_clusters.exceptions import MissingColumnsError
from wdi_clusters.regression import (
    GDP_PREDICTORS,
    breusch_pagan_pvalue,
    build_formula,
    coefficient_table,
    fit_cluster_regressions,
    partition_by_cluster,
    summarize_regressions,
)


def _cluster_frame(rng, label, n, slopes, intercept, noise=0.1):
    data = {p: rng.normal(0.0, 1.0, n) for p in GDP_PREDICTORS}
    gdp = intercept + sum(slopes[p] * data[p] for p in GDP_PREDICTORS)
    data["gdp"] = gdp + rng.normal(0.0, noise, n)
    data["cluster"] = label
    return pd.DataFrame(data)


@pytest.fixture(scope="module")
def clustered():
    """Two clusters with different true coefficients and a tiny third one."""
    rng = np.random.default_rng(3)
    slopes_1 = {p: float(i + 1) for i, p in enumerate(GDP_PREDICTORS)}
    slopes_2 = {p: -2.0 for p in GDP_PREDICTORS}
    frames = [
        _cluster_frame(rng, 1, 60, slopes_1, intercept=5.0),
        _cluster_frame(rng, 2, 50, slopes_2, intercept=-1.0),
        _cluster_frame(rng, 3, 5, slopes_2, intercept=0.0),
    ]
    return pd.concat(frames, ignore_index=True), slopes_1, slopes_2


@pytest.mark.unit
class TestFormula:
    def test_default_formula(self):
        formula = build_formula()
        assert formula.startswith("gdp ~ population + life_expectancy")
        assert formula.count("+") == len(GDP_PREDICTORS) - 1

    def test_custom_formula(self):
        assert build_formula("y", ["a", "b"]) == "y ~ a + b"


@pytest.mark.unit
class TestPartition:
    def test_partition_by_cluster(self, clustered):
        df, _, _ = clustered
        parts = partition_by_cluster(df)
        assert sorted(parts) == [1, 2, 3]
        assert [len(parts[k]) for k in (1, 2, 3)] == [60, 50, 5]
        assert (parts[2]["cluster"] == 2).all()


@pytest.mark.unit
class TestFitClusterRegressions:
    """Test one OLS per cluster."""

    def test_recovers_coefficients(self, clustered):
        df, slopes_1, slopes_2 = clustered
        results = fit_cluster_regressions(df)
        for p in GDP_PREDICTORS:
            assert results[1].params[p] == pytest.approx(slopes_1[p], abs=0.1)
            assert results[2].params[p] == pytest.approx(slopes_2[p], abs=0.1)
        assert results[1].params["Intercept"] == pytest.approx(5.0, abs=0.1)

    def test_clusters_fitted_independently(self, clustered):
        df, _, _ = clustered
        results = fit_cluster_regressions(df)
        assert int(results[1].nobs) == 60
        assert int(results[2].nobs) == 50

    def test_results_are_statsmodels_wrappers(self, clustered):
        df, _, _ = clustered
        results = fit_cluster_regressions(df)
        assert all(isinstance(r, RegressionResultsWrapper) for r in results.values())
        assert 0.0 <= breusch_pagan_pvalue(results[1]) <= 1.0

    def test_small_cluster_skipped(self, clustered):
        df, _, _ = clustered
        results = fit_cluster_regressions(df)
        assert 3 not in results

    def test_missing_columns(self, clustered):
        df, _, _ = clustered
        with pytest.raises(MissingColumnsError) as excinfo:
            fit_cluster_regressions(df.drop(columns=["inflation", "exports"]))
        assert excinfo.value.missing == ["exports", "inflation"]
        assert isinstance(excinfo.value, KeyError)
        assert "inflation" in str(excinfo.value)

    def test_custom_predictors(self, clustered):
        df, _, _ = clustered
        results = fit_cluster_regressions(df, predictors=["population"])
        assert sorted(results) == [1, 2, 3]
        assert list(results[3].params.index) == ["Intercept", "population"]


@pytest.mark.unit
class TestSummaries:
    def test_summary_table(self, clustered):
        df, _, _ = clustered
        summary = summarize_regressions(fit_cluster_regressions(df))
        assert list(summary["cluster"]) == [1, 2]
        assert (summary["r_squared"] > 0.99).all()
        assert (summary["adj_r_squared"] <= summary["r_squared"]).all()
        assert summary["bp_pvalue"].between(0, 1).all()

    def test_empty_summary(self):
        summary = summarize_regressions({})
        assert summary.empty
        assert "bp_pvalue" in summary.columns

    def test_coefficient_table(self, clustered):
        df, _, _ = clustered
        table = coefficient_table(fit_cluster_regressions(df))
        assert len(table) == 2 * (len(GDP_PREDICTORS) + 1)
        assert list(table.columns) == [
            "cluster", "term", "coef", "std_err", "t_value", "p_value"
        ]
        assert set(table["term"]) == {"Intercept", *GDP_PREDICTORS}

    def test_breusch_pagan_detects_heteroskedasticity(self):
        rng = np.random.default_rng(4)
        n = 400
        x = rng.uniform(1.0, 10.0, n)
        df = pd.DataFrame({p: rng.normal(0, 1, n) for p in GDP_PREDICTORS})
        df["population"] = x
        df["gdp"] = 2.0 * x + rng.normal(0.0, 1.0, n) * x
        df["cluster"] = 1
        result = fit_cluster_regressions(df)[1]
        assert breusch_pagan_pvalue(result) < 0.01
