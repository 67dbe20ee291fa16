"""
Batch script for the World Bank country clustering analysis.

This script:
- Loads and preprocesses the indicator spreadsheet (zero imputation, scaling)
- Computes elbow / silhouette diagnostics for k-means
- Runs k-means and hierarchical clustering (complete, single, average,
  centroid linkage) for k = 3, 4, 5 and compares them
- Maps the selected clustering (k-means, k = 4 by default) per year
- Fits one OLS regression of GDP per cluster and saves its diagnostics

Everything is written under the reports directory so that the Streamlit
report (`app.py`) can display it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import geopandas as gpd
import pandas as pd

from wdi_clusters import config
from wdi_clusters.data import feature_matrix, indicator_columns, load_and_prepare_dataset
from wdi_clusters.maps import (
    load_world_geometries,
    render_cluster_maps,
    unmatched_countries,
)
from wdi_clusters.models import (
    build_pca,
    cluster_diagnostics,
    cluster_profiles,
    compare_to_selected,
    run_clustering_grid,
    select_clustering,
    summarize_clustering_grid,
)
from wdi_clusters.plots import (
    plot_cluster_profiles,
    plot_clusters_pca,
    plot_dendrogram,
    plot_diagnostics,
    plot_regression_diagnostics,
    save_figure,
)
from wdi_clusters.regression import (
    GDP_PREDICTORS,
    GDP_TARGET,
    build_formula,
    coefficient_table,
    fit_cluster_regressions,
    summarize_regressions,
)
from wdi_clusters.utils import create_logger, save_csv, save_joblib, save_json

logger = create_logger("run_analysis")


def cluster_countries(
    scaled: pd.DataFrame, figures_dir: Path
) -> Dict[str, Any]:
    """Diagnostics, the full clustering grid and its figures."""
    X = feature_matrix(scaled)

    diagnostics = cluster_diagnostics(X, config.DIAGNOSTIC_K_RANGE)
    save_figure(plot_diagnostics(diagnostics), figures_dir / "diagnostics.png")

    runs = run_clustering_grid(X, config.K_VALUES, config.LINKAGE_METHODS)

    leaf_labels = (scaled["country"].astype(str) + " " + scaled["year"].astype(str)).tolist()
    for method in config.LINKAGE_METHODS:
        Z = runs[f"{method}_k{config.K_VALUES[0]}"]["linkage"]
        save_figure(
            plot_dendrogram(Z, method, labels=leaf_labels),
            figures_dir / f"dendrogram_{method}.png",
        )

    return {
        "X": X,
        "diagnostics": diagnostics,
        "runs": runs,
        "summary": summarize_clustering_grid(X, runs),
    }


def run_pipeline(
    data_path: Path | str,
    reports_dir: Path | str,
    world: Optional[gpd.GeoDataFrame] = None,
    sheet_name=None,
    strategy: Optional[str] = None,
    selected_method: str = config.SELECTED_METHOD,
    selected_k: int = config.SELECTED_K,
) -> Dict[str, Any]:
    """Run the whole analysis and write its artifacts under `reports_dir`."""
    reports_dir = Path(reports_dir)
    figures_dir = reports_dir / "figures"
    reports_dir.mkdir(parents=True, exist_ok=True)

    # 1-4. Load, clean, impute, standardize
    logger.info(f"Loading indicators from {data_path}")
    imputed, scaled = load_and_prepare_dataset(
        data_path, sheet_name=sheet_name, strategy=strategy
    )

    # 5-6. Diagnostics and clustering grid
    logger.info("Clustering countries...")
    clustering = cluster_countries(scaled, figures_dir)
    runs = clustering["runs"]
    save_csv(clustering["diagnostics"], reports_dir / "diagnostics.csv")
    save_csv(clustering["summary"], reports_dir / "clustering_summary.csv")

    # 7. Selected clustering
    selected_key = f"{selected_method}_k{selected_k}"
    labels = select_clustering(runs, selected_method, selected_k)
    agreement = compare_to_selected(runs, selected_key)
    save_csv(agreement, reports_dir / "clustering_agreement.csv")
    if selected_method == "kmeans":
        save_joblib(runs[selected_key]["model"], reports_dir / "kmeans_model.pkl")

    id_cols = [c for c in ("country", "country_code", "year") if c in imputed.columns]
    assignments = imputed[id_cols].assign(cluster=labels)
    save_csv(assignments, reports_dir / "cluster_assignments.csv")

    profiles = cluster_profiles(scaled, labels)
    save_csv(profiles, reports_dir / "cluster_profiles.csv", index=True)
    save_figure(plot_cluster_profiles(profiles), figures_dir / "cluster_profiles.png")

    _, coords = build_pca(clustering["X"])
    save_figure(
        plot_clusters_pca(coords, labels, f"Selected clustering: {selected_key} (PCA)"),
        figures_dir / "pca_clusters.png",
    )

    # 8. Maps
    map_paths = []
    missing_countries = []
    if world is not None:
        logger.info("Rendering cluster maps...")
        missing_countries = unmatched_countries(world, assignments)
        map_paths = render_cluster_maps(world, assignments, reports_dir / "maps")
    else:
        logger.info("No country boundaries configured, maps skipped")

    # 9-10. Per-cluster regressions
    logger.info("Fitting per-cluster regressions...")
    regressions = fit_cluster_regressions(imputed.assign(cluster=labels))
    regression_summary = summarize_regressions(regressions)
    coefficients = coefficient_table(regressions)
    save_csv(regression_summary, reports_dir / "regression_summary.csv")
    save_csv(coefficients, reports_dir / "regression_coefficients.csv")
    for label, result in regressions.items():
        summary_path = reports_dir / "regression" / f"cluster_{label}.txt"
        summary_path.parent.mkdir(parents=True, exist_ok=True)
        summary_path.write_text(result.summary().as_text(), encoding="utf-8")
        save_figure(
            plot_regression_diagnostics(result, label),
            figures_dir / f"regression_cluster_{label}.png",
        )

    metadata = {
        "data_path": str(data_path),
        "n_observations": int(len(imputed)),
        "indicators": indicator_columns(imputed),
        "years": sorted(int(y) for y in imputed["year"].unique()),
        "k_values": list(config.K_VALUES),
        "linkage_methods": list(config.LINKAGE_METHODS),
        "kmeans": {
            "n_init": config.KMEANS_N_INIT,
            "max_iter": config.KMEANS_MAX_ITER,
            "algorithm": "lloyd",
        },
        "selected_clustering": selected_key,
        "cluster_sizes": {
            str(k): int(v) for k, v in pd.Series(labels).value_counts().sort_index().items()
        },
        "regression_formula": build_formula(GDP_TARGET, GDP_PREDICTORS),
        "regression_clusters": sorted(int(k) for k in regressions),
        "unmatched_countries": missing_countries,
    }
    save_json(metadata, reports_dir / "analysis_metadata.json")

    return {
        "imputed": imputed,
        "scaled": scaled,
        "diagnostics": clustering["diagnostics"],
        "runs": runs,
        "clustering_summary": clustering["summary"],
        "agreement": agreement,
        "labels": labels,
        "assignments": assignments,
        "profiles": profiles,
        "regressions": regressions,
        "regression_summary": regression_summary,
        "coefficients": coefficients,
        "map_paths": map_paths,
        "metadata": metadata,
    }


def main() -> None:
    """Run the analysis with the configured paths and selection."""
    config.validate_config()

    world = None
    if config.WORLD_GEOMETRY_SOURCE:
        logger.info(f"Loading country boundaries from {config.WORLD_GEOMETRY_SOURCE}")
        world = load_world_geometries(
            config.WORLD_GEOMETRY_SOURCE, config.WORLD_NAME_COLUMN
        )
    else:
        logger.info("WDI_WORLD_GEOMETRY is empty, maps disabled")

    result = run_pipeline(
        config.DATA_PATH,
        config.REPORTS_DIR,
        world=world,
        sheet_name=config.SHEET_NAME,
        strategy=config.IMPUTE_STRATEGY,
        selected_method=config.SELECTED_METHOD,
        selected_k=config.SELECTED_K,
    )

    logger.info("=== Analysis complete ===")
    logger.info("Regression summary:\n" + result["regression_summary"].to_string(index=False))
    logger.info(f"Report artifacts saved under: {config.REPORTS_DIR.resolve()}")


if __name__ == "__main__":
    main()
