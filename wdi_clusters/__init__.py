"""
World Bank country clustering analysis.

This package exposes reusable components for:
- Spreadsheet loading and preprocessing (`wdi_clusters.data`)
- K-means and hierarchical clustering (`wdi_clusters.models`)
- Per-cluster GDP regressions (`wdi_clusters.regression`)
- Report figures and world maps (`wdi_clusters.plots`, `wdi_clusters.maps`)
- Configuration, logging and persistence helpers (`wdi_clusters.config`,
  `wdi_clusters.utils`)
"""

from . import config, data, exceptions, maps, models, plots, regression, utils  # noqa: F401
