"""
Custom exceptions for the World Bank clustering analysis.
"""


class AnalysisError(Exception):
    """Base exception for all analysis errors."""

    pass


class ConfigurationError(AnalysisError):
    """
    Raised when configuration values are invalid.

    For example, a selected clustering that is not part of the grid or an
    unknown imputation strategy.
    """

    pass


class DataLoadError(AnalysisError):
    """Raised when the indicator spreadsheet cannot be located or read."""

    pass


class MissingColumnsError(AnalysisError, KeyError):
    """Raised when columns required by a regression formula are absent."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__("Missing required columns: " + ", ".join(self.missing))

    def __str__(self) -> str:
        return self.args[0]
