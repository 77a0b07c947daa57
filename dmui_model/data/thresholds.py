"""
Sufficiency threshold preparation.

A sufficiency threshold is usually published for a single base year (e.g. a
living-wage or poverty-line figure). This module scales it to every year
with a price index such as CPI-U, producing the Year, Threshold table that
the DMUI pipeline consumes.
"""

import logging
from pathlib import Path
from typing import Mapping, Union

import numpy as np
import pandas as pd

from ..brackets import YEAR
from ..errors import DataFormatError

logger = logging.getLogger(__name__)

PRICE_INDEX = "PriceIndex"
THRESHOLD = "Threshold"


def load_price_index(path: Union[str, Path], value_column: str = None) -> pd.DataFrame:
    """
    Load an annual price index from CSV.

    Args:
        path: CSV with a Year column and one index column
        value_column: Name of the index column; defaults to the first
                      non-Year column

    Returns:
        DataFrame with columns Year, PriceIndex

    Raises:
        FileNotFoundError: If the file is not found
        DataFormatError: If the file lacks a Year or index column
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Price index not found at {path}")

    logger.info(f"Loading price index from {path}")
    df = pd.read_csv(path)

    if YEAR not in df.columns:
        raise DataFormatError(f"Price index file {path} has no {YEAR} column")
    if value_column is None:
        others = [c for c in df.columns if c != YEAR]
        if not others:
            raise DataFormatError(f"Price index file {path} has no index column")
        value_column = others[0]

    out = pd.DataFrame({
        YEAR: pd.to_numeric(df[YEAR], errors="coerce"),
        PRICE_INDEX: pd.to_numeric(df[value_column], errors="coerce"),
    }).dropna()
    out[YEAR] = out[YEAR].astype(int)
    return out.reset_index(drop=True)


def inflate_threshold(base_value: float, base_year: int,
                      price_index: Union[pd.DataFrame, Mapping[int, float]]) -> pd.DataFrame:
    """
    Scale a base-year threshold to every year of a price index.

        Threshold[y] = base_value * index[y] / index[base_year]

    Args:
        base_value: Threshold in base-year dollars
        base_year: Year in which base_value is expressed
        price_index: Year, PriceIndex table or a {year: index} mapping

    Returns:
        DataFrame with columns Year, Threshold sorted by Year

    Raises:
        ValueError: If base_value is not positive or the index has no
                    positive value for base_year
    """
    if not base_value > 0:
        raise ValueError(f"Base threshold must be positive, got {base_value}")

    if isinstance(price_index, pd.DataFrame):
        index = dict(zip(price_index[YEAR].astype(int), price_index[PRICE_INDEX].astype(float)))
    else:
        index = {int(y): float(v) for y, v in price_index.items()}

    base_index = index.get(int(base_year), np.nan)
    if not base_index > 0:
        raise ValueError(f"Price index has no positive value for base year {base_year}")

    years = sorted(index)
    table = pd.DataFrame({
        YEAR: years,
        THRESHOLD: [base_value * index[y] / base_index for y in years],
    })
    logger.info(
        f"Inflated ${base_value:,.0f} ({base_year} dollars) to {len(years)} years "
        f"({years[0]}-{years[-1]})"
    )
    return table
