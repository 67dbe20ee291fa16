"""Unit tests for joining clusters to country geometries and rendering maps."""

import geopandas as gpd
import pandas as pd
import pytest

from wdi_clusters.exceptions import DataLoadError
from wdi_clusters.maps import (
    join_clusters_to_geometries,
    load_world_geometries,
    normalize_country_names,
    plot_cluster_map,
    render_cluster_maps,
    unmatched_countries,
)


@pytest.fixture
def assignments(indicator_table):
    labels = (indicator_table.index % 3) + 1
    return indicator_table[["country", "country_code", "year"]].assign(cluster=labels)


@pytest.mark.unit
class TestNames:
    def test_known_substitutions(self):
        names = pd.Series(["Russian Federation", "Viet Nam", "Korea, Rep.", "Germany"])
        assert normalize_country_names(names).tolist() == [
            "Russia",
            "Vietnam",
            "South Korea",
            "Germany",
        ]

    def test_unmatched_countries(self, world, assignments):
        assert unmatched_countries(world, assignments) == ["Tuvalu"]


@pytest.mark.unit
class TestJoin:
    def test_join_one_year(self, world, assignments):
        joined = join_clusters_to_geometries(world, assignments, 2016)
        assert isinstance(joined, gpd.GeoDataFrame)
        assert len(joined) == 9
        assert "Tuvalu" not in set(joined["country"])
        assert {"United States of America", "Russia"} <= set(joined["country"])

    def test_countries_without_data_not_joined(self, world, assignments):
        joined = join_clusters_to_geometries(world, assignments, 2016)
        assert "Antarctica" not in set(joined["country"])

    def test_cluster_labels_carried(self, world, assignments):
        joined = join_clusters_to_geometries(world, assignments, 2015)
        expected = assignments[
            (assignments["year"] == 2015) & (assignments["country"] == "Germany")
        ]["cluster"].iloc[0]
        assert joined.set_index("country").loc["Germany", "cluster"] == expected

    def test_year_without_rows(self, world, assignments):
        assert join_clusters_to_geometries(world, assignments, 1990).empty


@pytest.mark.unit
class TestRendering:
    def test_plot_cluster_map(self, world, assignments):
        joined = join_clusters_to_geometries(world, assignments, 2015)
        fig = plot_cluster_map(world, joined, 2015, n_clusters=3)
        ax = fig.axes[0]
        assert ax.get_title() == "Country clusters, 2015"
        labels = [t.get_text() for t in ax.get_legend().get_texts()]
        assert labels == ["Cluster 1", "Cluster 2", "Cluster 3", "No data"]

    def test_one_map_per_year(self, world, assignments, tmp_path):
        paths = render_cluster_maps(world, assignments, tmp_path / "maps")
        assert [p.name for p in paths] == [
            "clusters_2015.png",
            "clusters_2016.png",
            "clusters_2017.png",
            "clusters_2018.png",
        ]
        assert all(p.exists() and p.stat().st_size > 0 for p in paths)


@pytest.mark.unit
class TestLoadGeometries:
    def test_reads_and_renames(self, world, tmp_path):
        path = tmp_path / "world.geojson"
        world.rename(columns={"country": "ADMIN"}).assign(POP_EST=1).to_file(
            path, driver="GeoJSON"
        )
        loaded = load_world_geometries(path, name_column="ADMIN")
        assert list(loaded.columns) == ["country", "geometry"]
        assert len(loaded) == len(world)

    def test_missing_name_column(self, world, tmp_path):
        path = tmp_path / "world.geojson"
        world.to_file(path, driver="GeoJSON")
        with pytest.raises(DataLoadError, match="ADMIN"):
            load_world_geometries(path, name_column="ADMIN")
