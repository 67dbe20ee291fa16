"""Pytest configuration and shared fixtures for the clustering analysis tests.

This module provides fixtures for:
- Synthetic DataBank-style indicator exports (DataFrame and .xlsx file)
- Preprocessed indicator tables
- A tiny set of country geometries
"""

import os

os.environ.setdefault("MPLBACKEND", "Agg")

from pathlib import Path  # noqa: E402

import geopandas as gpd  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402
from shapely.geometry import box  # noqa: E402

from wdi_clusters.data import INDICATOR_CODES, impute_missing, prepare_indicator_table  # noqa: E402


COUNTRIES = [
    ("United States", "USA"),
    ("Russian Federation", "RUS"),
    ("Germany", "DEU"),
    ("Brazil", "BRA"),
    ("Kenya", "KEN"),
    ("Viet Nam", "VNM"),
    ("India", "IND"),
    ("Chile", "CHL"),
    ("Tuvalu", "TUV"),
    ("Nigeria", "NGA"),
]
YEARS = [2015, 2016, 2017, 2018]


def _header(code: str) -> str:
    return f"{INDICATOR_CODES[code]} series [{code}]"


@pytest.fixture(scope="session")
def raw_export() -> pd.DataFrame:
    """A DataBank-style export: 10 countries x 4 years, 17 indicators.

    A few values use the ``..`` placeholder and two footer rows are appended,
    as in real DataBank downloads.
    """
    rng = np.random.default_rng(0)
    rows = []
    for i, (name, code) in enumerate(COUNTRIES):
        # three groups of countries with distinct indicator levels
        level = float(i % 3)
        for year in YEARS:
            row = {
                "Country Name": name,
                "Country Code": code,
                "Time": year,
                "Time Code": f"YR{year}",
            }
            for series in INDICATOR_CODES:
                row[_header(series)] = level * 10.0 + rng.normal(0.0, 1.0)
            rows.append(row)

    df = pd.DataFrame(rows)
    df = df.astype({c: object for c in df.columns if "[" in c})
    df.loc[0, _header("SL.UEM.TOTL.ZS")] = ".."
    df.loc[5, _header("IT.NET.USER.ZS")] = ".."

    footer = pd.DataFrame(
        [
            {"Country Name": np.nan},
            {"Country Name": "Data from database: World Development Indicators"},
        ]
    )
    return pd.concat([df, footer], ignore_index=True)


@pytest.fixture
def export_xlsx(raw_export: pd.DataFrame, tmp_path: Path) -> Path:
    """The synthetic export written as an Excel workbook."""
    path = tmp_path / "indicators.xlsx"
    raw_export.to_excel(path, sheet_name="Data", index=False)
    return path


@pytest.fixture
def indicator_table(raw_export: pd.DataFrame) -> pd.DataFrame:
    """Cleaned and zero-imputed indicator table."""
    return impute_missing(prepare_indicator_table(raw_export))


@pytest.fixture
def world() -> gpd.GeoDataFrame:
    """Country boxes named as in Natural Earth; Tuvalu is deliberately absent."""
    names = [
        "United States of America",
        "Russia",
        "Germany",
        "Brazil",
        "Kenya",
        "Vietnam",
        "India",
        "Chile",
        "Nigeria",
        "Antarctica",
    ]
    geometries = [box(i * 10, 0, i * 10 + 8, 8) for i in range(len(names))]
    return gpd.GeoDataFrame({"country": names}, geometry=geometries, crs="EPSG:4326")
