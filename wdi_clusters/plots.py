"""
Figures for the clustering and regression report.

Every function returns a matplotlib Figure; `save_figure` writes and closes it.
"""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
import statsmodels.api as sm
from scipy.cluster.hierarchy import dendrogram
from statsmodels.regression.linear_model import RegressionResultsWrapper

sns.set(style="whitegrid")


def save_figure(fig: plt.Figure, path: Path | str, dpi: int = 150) -> Path:
    """Write `fig` to `path` and release it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return path


def plot_diagnostics(diagnostics: pd.DataFrame) -> plt.Figure:
    """Elbow (inertia) and silhouette curves side by side."""
    fig, (ax_elbow, ax_sil) = plt.subplots(1, 2, figsize=(12, 4.5))

    ax_elbow.plot(diagnostics["k"], diagnostics["inertia"], marker="o")
    ax_elbow.set_xlabel("Number of clusters k")
    ax_elbow.set_ylabel("Within-cluster sum of squares")
    ax_elbow.set_title("Elbow method")

    sil = diagnostics.dropna(subset=["silhouette"])
    ax_sil.plot(sil["k"], sil["silhouette"], marker="o", color="tab:orange")
    ax_sil.set_xlabel("Number of clusters k")
    ax_sil.set_ylabel("Average silhouette width")
    ax_sil.set_title("Silhouette method")

    fig.tight_layout()
    return fig


def plot_dendrogram(
    Z: np.ndarray, method: str, labels=None, max_leaves: int = 40
) -> plt.Figure:
    """Dendrogram of a linkage matrix, truncated when it has many leaves."""
    fig, ax = plt.subplots(figsize=(12, 5))
    n_leaves = Z.shape[0] + 1
    if n_leaves > max_leaves:
        dendrogram(
            Z,
            ax=ax,
            truncate_mode="lastp",
            p=max_leaves,
            show_contracted=True,
            leaf_rotation=90.0,
        )
    else:
        dendrogram(Z, ax=ax, labels=labels, leaf_rotation=90.0, leaf_font_size=8)
    ax.set_title(f"Hierarchical clustering ({method} linkage)")
    ax.set_ylabel("Euclidean distance")
    return fig


def plot_clusters_pca(
    coords: np.ndarray, labels: np.ndarray, title: str
) -> plt.Figure:
    """Scatter of observations in 2D PCA space coloured by cluster."""
    fig, ax = plt.subplots(figsize=(8, 6))
    y = coords[:, 1] if coords.shape[1] > 1 else np.zeros(len(coords))
    scatter = ax.scatter(
        coords[:, 0], y, c=labels, cmap="viridis", s=40, edgecolor="k"
    )
    ax.set_xlabel("PC1")
    ax.set_ylabel("PC2")
    ax.set_title(title)
    ax.legend(*scatter.legend_elements(), title="Cluster", loc="best")
    return fig


def plot_cluster_profiles(profiles: pd.DataFrame) -> plt.Figure:
    """Heatmap of standardized indicator means per cluster."""
    fig, ax = plt.subplots(figsize=(8, max(4, 0.45 * profiles.shape[1])))
    sns.heatmap(
        profiles.T,
        ax=ax,
        cmap="vlag",
        center=0,
        annot=True,
        fmt=".2f",
        linewidths=0.5,
    )
    ax.set_xlabel("Cluster")
    ax.set_ylabel("Indicator")
    ax.set_title("Cluster profiles (standardized means)")
    return fig


def plot_regression_diagnostics(
    result: RegressionResultsWrapper, cluster: int
) -> plt.Figure:
    """Residuals vs fitted values and a normal Q-Q plot for one cluster."""
    fig, (ax_resid, ax_qq) = plt.subplots(1, 2, figsize=(12, 4.5))

    ax_resid.scatter(result.fittedvalues, result.resid, s=20, alpha=0.7)
    ax_resid.axhline(0.0, color="red", linestyle="--", linewidth=1)
    ax_resid.set_xlabel("Fitted GDP")
    ax_resid.set_ylabel("Residual")
    ax_resid.set_title(f"Cluster {cluster}: residuals vs fitted")

    sm.qqplot(np.asarray(result.resid), line="s", ax=ax_qq)
    ax_qq.set_title(f"Cluster {cluster}: normal Q-Q")

    fig.tight_layout()
    return fig
