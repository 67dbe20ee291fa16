"""
Per-cluster linear regressions explaining GDP.

Rows are partitioned by their cluster label and an ordinary least squares
model with the same formula is fitted to each partition independently.
"""

from __future__ import annotations

from typing import Dict, Sequence

import pandas as pd
import statsmodels.formula.api as smf
from statsmodels.regression.linear_model import RegressionResultsWrapper
from statsmodels.stats.diagnostic import het_breuschpagan

from wdi_clusters.exceptions import MissingColumnsError
from wdi_clusters.utils import create_logger

logger = create_logger(__name__)


GDP_TARGET = "gdp"
GDP_PREDICTORS = (
    "population",
    "life_expectancy",
    "exports",
    "imports",
    "fdi_inflows",
    "unemployment",
    "inflation",
    "internet_users",
)


def build_formula(
    target: str = GDP_TARGET, predictors: Sequence[str] = GDP_PREDICTORS
) -> str:
    """Patsy formula ``target ~ p1 + p2 + ...``."""
    return f"{target} ~ " + " + ".join(predictors)


def partition_by_cluster(
    df: pd.DataFrame, column: str = "cluster"
) -> Dict[int, pd.DataFrame]:
    """Split `df` into one frame per cluster label."""
    return {
        int(label): group.copy()
        for label, group in df.groupby(column, sort=True)
    }


def fit_cluster_regressions(
    df: pd.DataFrame,
    target: str = GDP_TARGET,
    predictors: Sequence[str] = GDP_PREDICTORS,
    column: str = "cluster",
) -> Dict[int, RegressionResultsWrapper]:
    """
    Fit one OLS model per cluster.

    Partitions with no more rows than model parameters cannot be estimated
    and are skipped.

    Returns
    -------
    dict
        Mapping `cluster label -> statsmodels RegressionResults`.
    """
    required = [target, *predictors, column]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise MissingColumnsError(missing)

    formula = build_formula(target, predictors)
    n_params = len(predictors) + 1

    results = {}
    for label, part in partition_by_cluster(df, column).items():
        if len(part) <= n_params:
            logger.warning(
                f"Cluster {label}: {len(part)} rows for {n_params} parameters, "
                "regression skipped"
            )
            continue
        results[label] = smf.ols(formula, data=part).fit()
        logger.info(
            f"Cluster {label}: n={len(part)}, R²={results[label].rsquared:.3f}"
        )
    return results


def breusch_pagan_pvalue(result: RegressionResultsWrapper) -> float:
    """Breusch-Pagan LM test p-value; small values indicate heteroskedasticity."""
    _, lm_pvalue, _, _ = het_breuschpagan(result.resid, result.model.exog)
    return float(lm_pvalue)


def summarize_regressions(
    results: Dict[int, RegressionResultsWrapper],
) -> pd.DataFrame:
    """Goodness-of-fit and heteroskedasticity summary per cluster."""
    rows = [
        {
            "cluster": label,
            "nobs": int(result.nobs),
            "r_squared": float(result.rsquared),
            "adj_r_squared": float(result.rsquared_adj),
            "f_pvalue": float(result.f_pvalue),
            "bp_pvalue": breusch_pagan_pvalue(result),
        }
        for label, result in sorted(results.items())
    ]
    return pd.DataFrame(
        rows,
        columns=[
            "cluster",
            "nobs",
            "r_squared",
            "adj_r_squared",
            "f_pvalue",
            "bp_pvalue",
        ],
    )


def coefficient_table(
    results: Dict[int, RegressionResultsWrapper],
) -> pd.DataFrame:
    """Long table of estimated coefficients, one row per (cluster, term)."""
    frames = []
    for label, result in sorted(results.items()):
        frames.append(
            pd.DataFrame(
                {
                    "cluster": label,
                    "term": result.params.index,
                    "coef": result.params.values,
                    "std_err": result.bse.values,
                    "t_value": result.tvalues.values,
                    "p_value": result.pvalues.values,
                }
            )
        )
    if not frames:
        return pd.DataFrame(
            columns=["cluster", "term", "coef", "std_err", "t_value", "p_value"]
        )
    return pd.concat(frames, ignore_index=True)
