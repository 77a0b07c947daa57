"""
Reference Gini coefficients from bracketed data.

The Gini coefficient of a weighted discrete distribution is

    G = sum_i sum_j w_i w_j |x_i - x_j| / (2 * sum(w) * sum(w * x))

computed per year with NumReturns as weights, once on the bracket midpoint
and once on the bracket mean AGI.
"""

import logging
from typing import List

import numpy as np
import pandas as pd

from .brackets import AGI_BIN_MEAN, BRACKET_MID, NUM_RETURNS, YEAR

logger = logging.getLogger(__name__)

GINI = "G"


def weighted_gini(values, weights) -> float:
    """
    Gini coefficient of `values` weighted by `weights`.

    Non-finite values or weights are excluded. Returns NaN if nothing
    remains or the weighted total is zero.
    """
    x = np.asarray(values, dtype=float)
    w = np.asarray(weights, dtype=float)
    if x.shape != w.shape:
        raise ValueError("values and weights must have the same length")

    keep = np.isfinite(x) & np.isfinite(w)
    x = x[keep]
    w = w[keep]

    total_weight = w.sum()
    weighted_total = (w * x).sum()
    if x.size == 0 or total_weight == 0 or weighted_total == 0:
        return float("nan")

    abs_diff = np.abs(x[:, None] - x[None, :])
    numerator = (w[:, None] * w[None, :] * abs_diff).sum()
    return float(numerator / (2 * total_weight * weighted_total))


def yearly_gini(brackets: pd.DataFrame, years: List[int], value_column: str = BRACKET_MID) -> pd.DataFrame:
    """
    Per-year Gini coefficient on `value_column` (BracketMid or AGIBinMean).

    Returns:
        DataFrame with columns Year, G; one row per usable year, G is NaN when
        the year has no usable values
    """
    if value_column not in (BRACKET_MID, AGI_BIN_MEAN):
        raise ValueError(f"Gini value column must be {BRACKET_MID} or {AGI_BIN_MEAN}, got {value_column}")

    rows = []
    for year in years:
        year_rows = brackets.loc[brackets[YEAR] == year]
        g = weighted_gini(year_rows[value_column], year_rows[NUM_RETURNS])
        if np.isnan(g):
            logger.warning(f"No {value_column} Gini for {year}")
        rows.append({YEAR: int(year), GINI: g})

    return pd.DataFrame(rows, columns=[YEAR, GINI]).astype({YEAR: int, GINI: float})
