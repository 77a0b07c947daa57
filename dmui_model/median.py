"""
Return-weighted median of bracket mean incomes, per year.
"""

import logging
import warnings
from typing import List

import numpy as np
import pandas as pd

from .brackets import AGI_BIN_MEAN, NUM_RETURNS, YEAR
from .errors import MissingYearDataWarning

logger = logging.getLogger(__name__)

MEDIAN = "Median"


def weighted_median(values, weights) -> float:
    """
    Weighted median of `values`.

    Values are sorted and their weights accumulated; the median is the first
    value whose cumulative weight reaches half the total weight. When the
    cumulative weight lands exactly on the half, the median is the average of
    that value and the next one.

    Entries with a non-finite value or weight, or a non-positive weight, are
    ignored. Returns NaN if nothing is left.

    Example:
        >>> weighted_median([5000, 15000], [100, 50])
        5000.0
    """
    values = np.asarray(values, dtype=float)
    weights = np.asarray(weights, dtype=float)
    if values.shape != weights.shape:
        raise ValueError("values and weights must have the same length")

    keep = np.isfinite(values) & np.isfinite(weights) & (weights > 0)
    values = values[keep]
    weights = weights[keep]
    if values.size == 0:
        return float("nan")

    order = np.argsort(values, kind="mergesort")
    values = values[order]
    cumulative = np.cumsum(weights[order])
    half = cumulative[-1] / 2

    idx = int(np.searchsorted(cumulative, half, side="left"))

    # Rounding in the cumulative sum can leave an exact split just below half
    if idx > 0 and np.isclose(cumulative[idx - 1], half, rtol=1e-12, atol=0.0):
        return float((values[idx - 1] + values[idx]) / 2)
    if np.isclose(cumulative[idx], half, rtol=1e-12, atol=0.0) and idx + 1 < values.size:
        return float((values[idx] + values[idx + 1]) / 2)
    return float(values[idx])


def yearly_weighted_median(brackets: pd.DataFrame, years: List[int]) -> pd.DataFrame:
    """
    Weighted median of AGIBinMean (weights NumReturns) for each usable year.

    Args:
        brackets: Normalized bracket table
        years: Usable years (see brackets.usable_years)

    Returns:
        DataFrame with columns Year, Median; years without a computable
        median are omitted with a MissingYearDataWarning
    """
    rows = []
    for year in years:
        year_rows = brackets.loc[brackets[YEAR] == year]
        median = weighted_median(year_rows[AGI_BIN_MEAN], year_rows[NUM_RETURNS])
        if np.isnan(median):
            warnings.warn(
                f"No weighted median for {year}: no bracket has both returns and a mean AGI",
                MissingYearDataWarning,
                stacklevel=2,
            )
            continue
        logger.debug(f"Weighted median AGI for {year}: ${median:,.0f}")
        rows.append({YEAR: int(year), MEDIAN: median})

    return pd.DataFrame(rows, columns=[YEAR, MEDIAN]).astype({YEAR: int, MEDIAN: float})


def median_map(medians: pd.DataFrame) -> dict:
    """Year -> median mapping for use as a per-year threshold."""
    return {int(y): float(m) for y, m in zip(medians[YEAR], medians[MEDIAN])}
