"""
Data loading and preprocessing for the World Bank clustering analysis.

The input is a World Bank DataBank export with one row per (country, year)
and one column per indicator series, e.g. ``GDP (current US$) [NY.GDP.MKTP.CD]``.
This module turns it into:
- an indicator table with short snake_case column names and missing values
  imputed, used for regression and cluster profiles
- a scaled copy of that table, used for clustering
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd
from sklearn.impute import SimpleImputer

from wdi_clusters.config import DATA_PATH, IMPUTE_STRATEGY, SHEET_NAME
from wdi_clusters.exceptions import DataLoadError
from wdi_clusters.utils import create_logger

logger = create_logger(__name__)


# DataBank series code -> short column name
INDICATOR_CODES: Dict[str, str] = {
    "NY.GDP.MKTP.CD": "gdp",
    "NY.GDP.MKTP.KD.ZG": "gdp_growth",
    "NY.GDP.PCAP.CD": "gdp_per_capita",
    "SP.POP.TOTL": "population",
    "SP.URB.TOTL.IN.ZS": "urban_population",
    "SP.DYN.LE00.IN": "life_expectancy",
    "SP.DYN.TFRT.IN": "fertility_rate",
    "SL.UEM.TOTL.ZS": "unemployment",
    "FP.CPI.TOTL.ZG": "inflation",
    "NE.EXP.GNFS.ZS": "exports",
    "NE.IMP.GNFS.ZS": "imports",
    "BX.KLT.DINV.WD.GD.ZS": "fdi_inflows",
    "EG.ELC.ACCS.ZS": "electricity_access",
    "EN.ATM.CO2E.PC": "co2_per_capita",
    "IT.NET.USER.ZS": "internet_users",
    "SE.PRM.ENRR": "school_enrollment",
    "MS.MIL.XPND.GD.ZS": "military_expenditure",
}

ID_COLUMNS: Dict[str, str] = {
    "Country Name": "country",
    "Country Code": "country_code",
    "Time": "year",
    "Time Code": "time_code",
}
KEY_COLUMNS = tuple(ID_COLUMNS.values())

EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xls")

_SERIES_CODE = re.compile(r"\s*\[([^\]]+)\]\s*$")
_NON_ALNUM = re.compile(r"[^0-9a-z]+")


def clean_column_name(name) -> str:
    """
    Map a DataBank header to a short column name.

    Known series codes map through `INDICATOR_CODES`, identifier headers
    through `ID_COLUMNS`; anything else becomes a lower-case slug of the
    descriptive part of the header.
    """
    name = str(name).strip()
    match = _SERIES_CODE.search(name)
    if match:
        code = match.group(1).strip()
        if code in INDICATOR_CODES:
            return INDICATOR_CODES[code]
        name = name[: match.start()]
    if name in ID_COLUMNS:
        return ID_COLUMNS[name]
    return _NON_ALNUM.sub("_", name.lower()).strip("_")


def clean_column_names(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of `df` with every column renamed by `clean_column_name`."""
    return df.rename(columns={c: clean_column_name(c) for c in df.columns})


def load_raw_indicators(path: Path | str, sheet_name=0) -> pd.DataFrame:
    """
    Load the raw indicator spreadsheet.

    Excel workbooks are read with openpyxl; CSV exports are accepted too.
    """
    path = Path(path)
    if not path.exists():
        raise DataLoadError(f"Indicator file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        engine = "openpyxl" if suffix != ".xls" else None
        return pd.read_excel(path, sheet_name=sheet_name, engine=engine)
    if suffix == ".csv":
        return pd.read_csv(path)
    raise DataLoadError(f"Unsupported indicator file format: {path.suffix}")


def indicator_columns(df: pd.DataFrame) -> List[str]:
    """Numeric columns of `df` that are not identifiers."""
    return [
        c
        for c in df.columns
        if c not in KEY_COLUMNS and pd.api.types.is_numeric_dtype(df[c])
    ]


def prepare_indicator_table(df_raw: pd.DataFrame) -> pd.DataFrame:
    """
    Clean a raw DataBank export into the indicator table.

    Steps:
    1. Rename columns to short names
    2. Drop footer rows (DataBank appends source notes without a country code)
    3. Coerce `year` to int and indicator values to floats; the ``..``
       placeholder DataBank uses for missing observations becomes NaN
    """
    df = clean_column_names(df_raw)
    for required in ("country", "year"):
        if required not in df.columns:
            raise DataLoadError(f"Indicator table has no '{required}' column")

    key = "country_code" if "country_code" in df.columns else "country"
    df = df.dropna(subset=[key]).copy()

    df["year"] = pd.to_numeric(df["year"], errors="coerce")
    df = df.dropna(subset=["year"]).copy()
    df["year"] = df["year"].astype(int)

    for col in df.columns:
        if col in KEY_COLUMNS:
            continue
        df[col] = pd.to_numeric(df[col].replace("..", np.nan), errors="coerce")

    return df.reset_index(drop=True)


def impute_missing(df: pd.DataFrame, strategy: str = "zero") -> pd.DataFrame:
    """
    Fill missing indicator values.

    `strategy` is ``"zero"`` (replace NA with 0) or ``"median"`` (column
    median). Columns without any observed value are kept and filled with 0.
    """
    if strategy == "zero":
        imputer = SimpleImputer(
            strategy="constant", fill_value=0.0, keep_empty_features=True
        )
    elif strategy == "median":
        imputer = SimpleImputer(strategy="median", keep_empty_features=True)
    else:
        raise ValueError(f"Unknown imputation strategy: {strategy}")

    out = df.copy()
    cols = indicator_columns(out)
    if cols:
        out[cols] = imputer.fit_transform(out[cols].astype(float))
    return out


def standardize(df: pd.DataFrame) -> pd.DataFrame:
    """
    Scale every indicator column to zero mean and unit sample standard
    deviation (``ddof=1``). Constant columns become all zeros.
    """
    out = df.copy()
    cols = indicator_columns(out)
    values = out[cols].astype(float)
    std = values.std(ddof=1).replace(0.0, np.nan)
    out[cols] = ((values - values.mean()) / std).fillna(0.0)
    return out


def feature_matrix(df: pd.DataFrame) -> np.ndarray:
    """Indicator values of `df` as a float matrix (rows x indicators)."""
    return df[indicator_columns(df)].to_numpy(dtype=float)


def load_and_prepare_dataset(
    path: Path | str | None = None,
    sheet_name=None,
    strategy: str | None = None,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    End-to-end data loading and preprocessing:

    1. Load the raw spreadsheet
    2. Clean column names and values
    3. Impute missing values
    4. Standardize indicator columns

    Returns the imputed indicator table and its scaled copy.
    """
    path = DATA_PATH if path is None else path
    sheet_name = SHEET_NAME if sheet_name is None else sheet_name
    strategy = IMPUTE_STRATEGY if strategy is None else strategy

    df_raw = load_raw_indicators(path, sheet_name=sheet_name)
    indicators = prepare_indicator_table(df_raw)
    n_missing = int(indicators[indicator_columns(indicators)].isna().sum().sum())
    logger.info(
        f"Loaded {len(indicators)} observations, "
        f"{len(indicator_columns(indicators))} indicators, {n_missing} missing values"
    )

    imputed = impute_missing(indicators, strategy=strategy)
    scaled = standardize(imputed)
    return imputed, scaled
