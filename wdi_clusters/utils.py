"""
Utility functions for logging, report locations and artifact persistence.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Union

import colorlog
import joblib

from wdi_clusters.config import LOG_LEVEL, REPORTS_DIR


def create_logger(
    name: Optional[str] = None, log_level: Union[int, str] = LOG_LEVEL
) -> logging.Logger:
    """
    Create a color-coded console logger.

    Parameters
    ----------
    name : str, optional
        Name of the logger, typically ``__name__``.
    log_level : int or str
        Logging level; defaults to the LOG_LEVEL setting.

    Returns
    -------
    logging.Logger
        Logger writing ``[LEVEL] [name] message`` lines to stdout.
    """
    logger = colorlog.getLogger(name or "wdi_clusters")
    logger.setLevel(log_level)
    logger.propagate = False

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = colorlog.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    formatter = colorlog.ColoredFormatter(
        "%(log_color)s[%(levelname)s]%(reset)s "
        "%(blue)s[%(name)s]%(reset)s "
        "%(message)s",
        log_colors={
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "red,bg_white",
        },
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def get_reports_dir() -> Path:
    """Return the default directory the analysis writes its report into."""
    return REPORTS_DIR


def save_joblib(obj: Any, path: Path | str) -> None:
    """Persist an object to disk using joblib."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(obj, path)


def load_joblib(path: Path | str) -> Any:
    """Load a joblib-persisted object."""
    return joblib.load(Path(path))


def save_json(data: Any, path: Path | str) -> None:
    """Save a Python object as JSON (UTF-8, pretty-printed)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def load_json(path: Path | str) -> Any:
    """Load JSON data into a Python object."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def save_csv(df, path: Path | str, index: bool = False) -> None:
    """Write a DataFrame to CSV, creating the parent directory."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=index)
