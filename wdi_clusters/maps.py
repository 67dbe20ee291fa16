"""
World maps of the selected clustering, one per year.

Country names in World Bank exports do not always match the names in the
Natural Earth boundaries, so a fixed substitution list is applied before the
join. Countries still unmatched are left off the map.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

import geopandas as gpd
import matplotlib.patches as mpatches
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from wdi_clusters.config import WORLD_GEOMETRY_SOURCE, WORLD_NAME_COLUMN
from wdi_clusters.exceptions import DataLoadError
from wdi_clusters.plots import save_figure
from wdi_clusters.utils import create_logger

logger = create_logger(__name__)


# World Bank name -> Natural Earth ADMIN name
COUNTRY_NAME_FIXES = {
    "United States": "United States of America",
    "Russian Federation": "Russia",
    "Egypt, Arab Rep.": "Egypt",
    "Iran, Islamic Rep.": "Iran",
    "Korea, Rep.": "South Korea",
    "Korea, Dem. People's Rep.": "North Korea",
    "Venezuela, RB": "Venezuela",
    "Yemen, Rep.": "Yemen",
    "Syrian Arab Republic": "Syria",
    "Lao PDR": "Laos",
    "Viet Nam": "Vietnam",
    "Congo, Dem. Rep.": "Democratic Republic of the Congo",
    "Congo, Rep.": "Republic of the Congo",
    "Gambia, The": "Gambia",
    "Bahamas, The": "The Bahamas",
    "Kyrgyz Republic": "Kyrgyzstan",
    "Slovak Republic": "Slovakia",
    "Turkiye": "Turkey",
    "Tanzania": "United Republic of Tanzania",
    "Cote d'Ivoire": "Ivory Coast",
    "Brunei Darussalam": "Brunei",
    "Serbia": "Republic of Serbia",
    "Eswatini": "eSwatini",
    "Timor-Leste": "East Timor",
    "West Bank and Gaza": "Palestine",
}


def normalize_country_names(names: pd.Series) -> pd.Series:
    """Apply the World Bank -> Natural Earth name substitutions."""
    return names.replace(COUNTRY_NAME_FIXES)


def load_world_geometries(
    source: str | Path = WORLD_GEOMETRY_SOURCE,
    name_column: str = WORLD_NAME_COLUMN,
) -> gpd.GeoDataFrame:
    """
    Read country boundaries from a file path or URL.

    Returns a GeoDataFrame with columns `country` and `geometry`.
    """
    world = gpd.read_file(source)
    if name_column not in world.columns:
        raise DataLoadError(
            f"Country boundaries have no '{name_column}' column: {source}"
        )
    return world[[name_column, "geometry"]].rename(columns={name_column: "country"})


def unmatched_countries(
    world: gpd.GeoDataFrame, assignments: pd.DataFrame
) -> List[str]:
    """Countries in `assignments` without a geometry after name fixes."""
    names = set(normalize_country_names(assignments["country"]))
    return sorted(names - set(world["country"]))


def join_clusters_to_geometries(
    world: gpd.GeoDataFrame, assignments: pd.DataFrame, year: int
) -> gpd.GeoDataFrame:
    """Geometries with the cluster label of each matched country for `year`."""
    rows = assignments.loc[assignments["year"] == year, ["country", "cluster"]].copy()
    rows["country"] = normalize_country_names(rows["country"])
    return world.merge(rows, on="country", how="inner")


def plot_cluster_map(
    world: gpd.GeoDataFrame,
    joined: gpd.GeoDataFrame,
    year: int,
    n_clusters: int,
) -> plt.Figure:
    """Choropleth of cluster labels over a grey base map."""
    fig, ax = plt.subplots(figsize=(14, 7))
    world.plot(ax=ax, color="lightgrey", edgecolor="white", linewidth=0.5)

    palette = sns.color_palette("Set2", n_clusters).as_hex()
    handles = []
    for label in range(1, n_clusters + 1):
        color = palette[label - 1]
        part = joined[joined["cluster"] == label]
        if not part.empty:
            part.plot(ax=ax, color=color, edgecolor="white", linewidth=0.5)
        handles.append(mpatches.Patch(color=color, label=f"Cluster {label}"))
    handles.append(mpatches.Patch(color="lightgrey", label="No data"))

    ax.legend(handles=handles, title="Cluster", loc="lower left")
    ax.set_title(f"Country clusters, {year}")
    ax.set_axis_off()
    return fig


def render_cluster_maps(
    world: gpd.GeoDataFrame, assignments: pd.DataFrame, out_dir: Path | str
) -> List[Path]:
    """Write one cluster map per year in `assignments`; returns the file paths."""
    out_dir = Path(out_dir)
    missing = unmatched_countries(world, assignments)
    if missing:
        logger.info(f"{len(missing)} countries have no geometry and are not mapped")
        logger.debug("Unmatched: " + ", ".join(missing))

    n_clusters = int(assignments["cluster"].max())
    paths = []
    for year in sorted(assignments["year"].unique()):
        joined = join_clusters_to_geometries(world, assignments, year)
        fig = plot_cluster_map(world, joined, year, n_clusters)
        paths.append(save_figure(fig, out_dir / f"clusters_{year}.png"))
    return paths
