"""
Configuration for the World Bank clustering analysis.

Paths and the selected clustering can be overridden through environment
variables; the clustering hyperparameters are fixed.
"""

from __future__ import annotations

import os
from pathlib import Path

from wdi_clusters.exceptions import ConfigurationError


# Project root is the parent of this `wdi_clusters` package directory
ROOT_DIR = Path(__file__).resolve().parent.parent

DATA_PATH = Path(
    os.getenv("WDI_DATA_PATH", ROOT_DIR / "data" / "world_bank_indicators.xlsx")
)
# DataBank exports put the observations on the first sheet
SHEET_NAME = os.getenv("WDI_SHEET_NAME") or 0
REPORTS_DIR = Path(os.getenv("WDI_REPORTS_DIR", ROOT_DIR / "reports"))

NATURAL_EARTH_URL = (
    "https://naciscdn.org/naturalearth/110m/cultural/ne_110m_admin_0_countries.zip"
)
# An empty value disables map rendering
WORLD_GEOMETRY_SOURCE = os.getenv("WDI_WORLD_GEOMETRY", NATURAL_EARTH_URL)
WORLD_NAME_COLUMN = os.getenv("WDI_WORLD_NAME_COLUMN", "ADMIN")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Preprocessing
IMPUTE_STRATEGIES = ("zero", "median")
IMPUTE_STRATEGY = os.getenv("WDI_IMPUTE_STRATEGY", "zero").lower()

# Clustering
RANDOM_STATE = 42
KMEANS_N_INIT = 25
KMEANS_MAX_ITER = 50
K_VALUES = (3, 4, 5)
LINKAGE_METHODS = ("complete", "single", "average", "centroid")
DIAGNOSTIC_K_RANGE = range(1, 11)

# k-means with four clusters gave the most readable maps
SELECTED_METHOD = os.getenv("WDI_SELECTED_METHOD", "kmeans").lower()
SELECTED_K_RAW = os.getenv("WDI_SELECTED_K", "4").strip()


def _parse_int(raw: str) -> int | None:
    """Integer value of `raw`, or None when it is not one."""
    try:
        return int(raw)
    except ValueError:
        return None


# None when the override is not an integer; rejected by validate_config
SELECTED_K = _parse_int(SELECTED_K_RAW)


def selected_key() -> str:
    """Return the clustering grid key of the selected clustering."""
    return f"{SELECTED_METHOD}_k{SELECTED_K}"


def validate_config() -> None:
    """
    Validate the configurable parameters.

    Raises
    ------
    ConfigurationError
        If the selected k is not an integer, the selected clustering is not
        produced by the grid, or the imputation strategy is unknown.
    """
    methods = ("kmeans",) + LINKAGE_METHODS
    if SELECTED_METHOD not in methods:
        raise ConfigurationError(
            f"Selected method '{SELECTED_METHOD}' must be one of: {', '.join(methods)}"
        )
    if SELECTED_K is None:
        raise ConfigurationError(
            f"WDI_SELECTED_K must be an integer, got '{SELECTED_K_RAW}'"
        )
    if SELECTED_K not in K_VALUES:
        raise ConfigurationError(
            f"Selected k={SELECTED_K} is not one of the clustered values {K_VALUES}"
        )
    if IMPUTE_STRATEGY not in IMPUTE_STRATEGIES:
        raise ConfigurationError(
            f"Unknown imputation strategy '{IMPUTE_STRATEGY}'"
        )
