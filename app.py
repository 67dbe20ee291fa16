"""
Streamlit report for the World Bank country clustering analysis.

Features:
- Load the artifacts written by `run_analysis.py`
- Show:
  * Elbow / silhouette diagnostics and the clustering comparison table
  * The world map of the selected clustering for a chosen year
  * Cluster profiles and members
  * Per-cluster GDP regression summaries and residual diagnostics

Run locally with:
    python run_analysis.py
    streamlit run app.py
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pandas as pd
import streamlit as st

from wdi_clusters.utils import get_reports_dir, load_json


REQUIRED_ARTIFACTS = (
    "analysis_metadata.json",
    "diagnostics.csv",
    "clustering_summary.csv",
    "cluster_assignments.csv",
    "cluster_profiles.csv",
    "regression_summary.csv",
    "regression_coefficients.csv",
)


@st.cache_data
def load_report(reports_dir: str) -> Dict[str, Any]:
    """Load tables and metadata written by the analysis (cached)."""
    reports_dir = Path(reports_dir)
    return {
        "metadata": load_json(reports_dir / "analysis_metadata.json"),
        "diagnostics": pd.read_csv(reports_dir / "diagnostics.csv"),
        "clustering_summary": pd.read_csv(reports_dir / "clustering_summary.csv"),
        "assignments": pd.read_csv(reports_dir / "cluster_assignments.csv"),
        "profiles": pd.read_csv(reports_dir / "cluster_profiles.csv", index_col=0),
        "regression_summary": pd.read_csv(reports_dir / "regression_summary.csv"),
        "coefficients": pd.read_csv(reports_dir / "regression_coefficients.csv"),
    }


def show_image(path: Path, caption: str | None = None) -> None:
    """Display a saved figure, or a note when it was not produced."""
    if path.exists():
        st.image(str(path), caption=caption, width="stretch")
    else:
        st.info(f"Figure not available: {path.name}")


def main() -> None:
    st.set_page_config(page_title="World Bank Country Clusters", layout="wide")

    st.title("World Bank Country Clusters")
    st.markdown(
        """
Countries are grouped by their standardized World Bank indicators with k-means
and hierarchical clustering; GDP is then explained by a separate linear
regression within each cluster.
"""
    )

    reports_dir = get_reports_dir()
    missing = [name for name in REQUIRED_ARTIFACTS if not (reports_dir / name).exists()]
    if missing:
        st.error(
            "Report artifacts are missing. Please run `python run_analysis.py` "
            "once before launching the app."
        )
        st.stop()

    report = load_report(str(reports_dir))
    metadata = report["metadata"]
    figures_dir = reports_dir / "figures"

    st.sidebar.header("Report")
    st.sidebar.write(f"**Observations:** {metadata['n_observations']}")
    st.sidebar.write(f"**Indicators:** {len(metadata['indicators'])}")
    st.sidebar.write(f"**Selected clustering:** `{metadata['selected_clustering']}`")
    year = st.sidebar.selectbox("Map year", options=metadata["years"])

    # Choosing k
    st.subheader("Choosing the number of clusters")
    col_diag, col_table = st.columns([3, 2])
    with col_diag:
        show_image(figures_dir / "diagnostics.png")
    with col_table:
        st.dataframe(report["clustering_summary"], width="stretch")

    with st.expander("Dendrograms"):
        for method in metadata["linkage_methods"]:
            show_image(figures_dir / f"dendrogram_{method}.png", caption=method)

    # Maps
    st.markdown("---")
    st.subheader(f"Cluster map, {year}")
    show_image(reports_dir / "maps" / f"clusters_{year}.png")
    if metadata["unmatched_countries"]:
        st.caption(
            "Not shown (no matching boundary): "
            + ", ".join(metadata["unmatched_countries"])
        )

    # Profiles
    st.markdown("---")
    col_prof, col_members = st.columns(2)
    with col_prof:
        st.subheader("Cluster profiles")
        show_image(figures_dir / "cluster_profiles.png")
    with col_members:
        st.subheader(f"Members, {year}")
        assignments = report["assignments"]
        members = assignments[assignments["year"] == year]
        st.dataframe(
            members.sort_values(["cluster", "country"]), width="stretch"
        )

    # Regressions
    st.markdown("---")
    st.subheader("GDP regressions per cluster")
    st.code(metadata["regression_formula"])
    st.dataframe(report["regression_summary"], width="stretch")

    for label in metadata["regression_clusters"]:
        with st.expander(f"Cluster {label}"):
            coefs = report["coefficients"]
            st.dataframe(coefs[coefs["cluster"] == label], width="stretch")
            show_image(figures_dir / f"regression_cluster_{label}.png")

    st.markdown("---")
    st.markdown(
        f"Reports directory: `{reports_dir}` – "
        "contains the tables and figures shown in this report."
    )


if __name__ == "__main__":
    main()
