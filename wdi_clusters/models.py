"""
Clustering utilities for the World Bank clustering analysis.

K-means runs use fixed hyperparameters (25 restarts, 50 iterations, Lloyd's
algorithm); hierarchical runs are agglomerative with Euclidean distance.
All labels are 1-based so that they read as "cluster 1 .. k" in reports.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Tuple

import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import fcluster, linkage
from sklearn.cluster import KMeans
from sklearn.decomposition import PCA
from sklearn.metrics import adjusted_rand_score, silhouette_score

from wdi_clusters.config import (
    DIAGNOSTIC_K_RANGE,
    K_VALUES,
    KMEANS_MAX_ITER,
    KMEANS_N_INIT,
    LINKAGE_METHODS,
    RANDOM_STATE,
)
from wdi_clusters.data import indicator_columns
from wdi_clusters.utils import create_logger

logger = create_logger(__name__)


def build_kmeans(n_clusters: int, random_state: int = RANDOM_STATE) -> KMeans:
    """K-means estimator with the analysis' fixed hyperparameters."""
    return KMeans(
        n_clusters=n_clusters,
        n_init=KMEANS_N_INIT,
        max_iter=KMEANS_MAX_ITER,
        algorithm="lloyd",
        random_state=random_state,
    )


def run_kmeans(X: np.ndarray, n_clusters: int) -> Tuple[KMeans, np.ndarray]:
    """Fit k-means on `X` and return the model with 1-based labels."""
    kmeans = build_kmeans(n_clusters)
    labels = kmeans.fit_predict(X) + 1
    return kmeans, labels


def hierarchical_linkage(X: np.ndarray, method: str) -> np.ndarray:
    """Agglomerative linkage matrix of `X` (Euclidean distance)."""
    if method not in LINKAGE_METHODS:
        raise ValueError(
            f"Unknown linkage method '{method}', expected one of {LINKAGE_METHODS}"
        )
    return linkage(X, method=method, metric="euclidean")


def cut_linkage(Z: np.ndarray, n_clusters: int) -> np.ndarray:
    """Cut a linkage matrix into at most `n_clusters` flat clusters."""
    return fcluster(Z, t=n_clusters, criterion="maxclust")


def run_hierarchical(
    X: np.ndarray, method: str, n_clusters: int
) -> Tuple[np.ndarray, np.ndarray]:
    """Cluster `X` hierarchically; returns the linkage matrix and labels."""
    Z = hierarchical_linkage(X, method)
    return Z, cut_linkage(Z, n_clusters)


def _silhouette(X: np.ndarray, labels: np.ndarray) -> float:
    # silhouette is only defined for 2 <= n_labels <= n_samples - 1
    n_labels = len(np.unique(labels))
    if n_labels < 2 or n_labels >= len(labels):
        return float("nan")
    return float(silhouette_score(X, labels, metric="euclidean"))


def cluster_diagnostics(
    X: np.ndarray, k_range: Iterable[int] = DIAGNOSTIC_K_RANGE
) -> pd.DataFrame:
    """
    Elbow and silhouette diagnostics for k-means over `k_range`.

    Returns
    -------
    pd.DataFrame
        Columns `k`, `inertia` (within-cluster sum of squares) and
        `silhouette` (NaN for k = 1).
    """
    n_samples = X.shape[0]
    rows = []
    for k in k_range:
        if k >= n_samples:
            logger.warning(f"Skipping k={k}: only {n_samples} observations")
            continue
        kmeans, labels = run_kmeans(X, k)
        rows.append(
            {
                "k": k,
                "inertia": float(kmeans.inertia_),
                "silhouette": _silhouette(X, labels),
            }
        )
    return pd.DataFrame(rows, columns=["k", "inertia", "silhouette"])


def run_clustering_grid(
    X: np.ndarray,
    k_values: Iterable[int] = K_VALUES,
    linkage_methods: Iterable[str] = LINKAGE_METHODS,
) -> Dict[str, Dict[str, Any]]:
    """
    Run k-means and every hierarchical linkage for each k.

    Entries are keyed ``"<method>_k<k>"`` and hold `method`, `k`, `labels`
    and either the fitted `model` (k-means) or the `linkage` matrix.
    """
    k_values = list(k_values)
    runs: Dict[str, Dict[str, Any]] = {}

    for k in k_values:
        model, labels = run_kmeans(X, k)
        runs[f"kmeans_k{k}"] = {
            "method": "kmeans",
            "k": k,
            "labels": labels,
            "model": model,
        }

    for method in linkage_methods:
        Z = hierarchical_linkage(X, method)
        for k in k_values:
            runs[f"{method}_k{k}"] = {
                "method": method,
                "k": k,
                "labels": cut_linkage(Z, k),
                "linkage": Z,
            }

    logger.info(f"Fitted {len(runs)} clusterings")
    return runs


def summarize_clustering_grid(
    X: np.ndarray, runs: Dict[str, Dict[str, Any]]
) -> pd.DataFrame:
    """One row per clustering: silhouette and cluster size spread."""
    rows = []
    for key, run in runs.items():
        sizes = pd.Series(run["labels"]).value_counts()
        rows.append(
            {
                "key": key,
                "method": run["method"],
                "k": run["k"],
                "n_clusters": int(sizes.size),
                "silhouette": _silhouette(X, run["labels"]),
                "smallest_cluster": int(sizes.min()),
                "largest_cluster": int(sizes.max()),
            }
        )
    return pd.DataFrame(rows)


def select_clustering(
    runs: Dict[str, Dict[str, Any]], method: str, k: int
) -> np.ndarray:
    """Labels of the clustering chosen for the rest of the analysis."""
    key = f"{method}_k{k}"
    if key not in runs:
        raise KeyError(f"No clustering '{key}' in the grid")
    return runs[key]["labels"]


def compare_to_selected(
    runs: Dict[str, Dict[str, Any]], selected_key: str
) -> pd.DataFrame:
    """Adjusted Rand index between every clustering and the selected one."""
    if selected_key not in runs:
        raise KeyError(f"No clustering '{selected_key}' in the grid")
    reference = runs[selected_key]["labels"]
    rows = [
        {
            "key": key,
            "adjusted_rand": float(adjusted_rand_score(reference, run["labels"])),
        }
        for key, run in runs.items()
    ]
    return pd.DataFrame(rows).sort_values("adjusted_rand", ascending=False)


def cluster_profiles(df: pd.DataFrame, labels: np.ndarray) -> pd.DataFrame:
    """Mean of every indicator per cluster (index: cluster label)."""
    cols = indicator_columns(df)
    grouped = df[cols].groupby(pd.Series(np.asarray(labels), index=df.index, name="cluster"))
    return grouped.mean()


def build_pca(X: np.ndarray) -> Tuple[PCA, np.ndarray]:
    """2D PCA projection of `X` for cluster scatter plots."""
    pca = PCA(n_components=min(2, X.shape[1]), random_state=RANDOM_STATE)
    coords = pca.fit_transform(X)
    return pca, coords
