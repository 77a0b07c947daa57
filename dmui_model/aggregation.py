"""
Annual aggregation of reported, modeled and DMUI-adjusted AGI.

For each usable year:

    TotalAGIReported      = sum(AGIUSDAll)
    TotalAGIFromBinMeans  = sum(AGIBinMean * NumReturns)
    TotalAGIAdjusted      = sum(u(AGIBinMean, m_year) * NumReturns)
    Ratio                 = TotalAGIAdjusted / TotalAGIReported

The threshold m_year comes from a Year -> threshold mapping (the weighted
median for the median method, the sufficiency threshold for the sufficiency
method). Both methods divide by the same reported total.
"""

import logging
import warnings
from typing import List, Mapping

import numpy as np
import pandas as pd

from .brackets import AGI_BIN_MEAN, AGI_USD_ALL, NUM_RETURNS, YEAR, restrict_to_years
from .errors import MissingYearDataWarning
from .utility import adjust_incomes, resolve_thresholds

logger = logging.getLogger(__name__)

THRESHOLD = "Threshold"
ADJUSTED_INCOME = "AdjustedIncome"
TOTAL_AGI_REPORTED = "TotalAGIReported"
TOTAL_AGI_FROM_BIN_MEANS = "TotalAGIFromBinMeans"
TOTAL_AGI_ADJUSTED = "TotalAGIAdjusted"
RATIO = "Ratio"

DMUI_RATIO = "DMUI_Ratio"
DMUI_RATIO_ST = "DMUI_Ratio_ST"

AGGREGATE_COLUMNS = [YEAR, THRESHOLD, TOTAL_AGI_REPORTED, TOTAL_AGI_FROM_BIN_MEANS,
                     TOTAL_AGI_ADJUSTED, RATIO]


def adjusted_brackets(brackets: pd.DataFrame, threshold_by_year: Mapping[int, float]) -> pd.DataFrame:
    """
    Copy of `brackets` with Threshold and AdjustedIncome columns added.

    AdjustedIncome is NaN for rows whose year has no valid threshold.
    """
    df = brackets.copy()
    df[THRESHOLD] = resolve_thresholds(df[YEAR], threshold_by_year)
    df[ADJUSTED_INCOME] = adjust_incomes(df[AGI_BIN_MEAN], df[THRESHOLD])
    return df


def _sum_or_nan(values: pd.Series) -> float:
    """Sum that is NaN if any term is missing."""
    if values.isna().any():
        return np.nan
    return float(values.sum())


def annual_aggregates(brackets: pd.DataFrame, years: List[int],
                      threshold_by_year: Mapping[int, float]) -> pd.DataFrame:
    """
    Annual AGI totals and DMUI ratio for one threshold method.

    Args:
        brackets: Normalized bracket table
        years: Usable years
        threshold_by_year: Year -> threshold for this method

    Returns:
        DataFrame with AGGREGATE_COLUMNS, one row per usable year. Threshold,
        TotalAGIAdjusted and Ratio are NaN where the year has no valid
        threshold or a contributing bracket lacks a mean AGI.
    """
    df = adjusted_brackets(restrict_to_years(brackets, years), threshold_by_year)

    rows = []
    for year in years:
        year_rows = df.loc[df[YEAR] == year]
        # Zero-return brackets contribute nothing, even without a mean AGI
        filed = year_rows.loc[year_rows[NUM_RETURNS] > 0]

        # Empty brackets may leave AGIUSDAll blank; any other gap blanks the year
        reported = _sum_or_nan(
            year_rows.loc[(year_rows[NUM_RETURNS] > 0) | year_rows[AGI_USD_ALL].notna(), AGI_USD_ALL]
        )
        from_means = _sum_or_nan(filed[AGI_BIN_MEAN] * filed[NUM_RETURNS])
        adjusted = _sum_or_nan(filed[ADJUSTED_INCOME] * filed[NUM_RETURNS])
        threshold = year_rows[THRESHOLD].iloc[0] if len(year_rows) else np.nan

        if np.isnan(adjusted) or np.isnan(reported) or reported == 0:
            ratio = np.nan
        else:
            ratio = adjusted / reported

        rows.append({
            YEAR: int(year),
            THRESHOLD: threshold,
            TOTAL_AGI_REPORTED: reported,
            TOTAL_AGI_FROM_BIN_MEANS: from_means,
            TOTAL_AGI_ADJUSTED: adjusted,
            RATIO: ratio,
        })

    frame = pd.DataFrame(rows, columns=AGGREGATE_COLUMNS)
    return frame.astype({c: (int if c == YEAR else float) for c in AGGREGATE_COLUMNS})


def ratio_table(aggregates: pd.DataFrame, column: str = DMUI_RATIO, label: str = "median") -> pd.DataFrame:
    """
    Year/ratio table for one method, dropping years without a ratio.

    Args:
        aggregates: Output of annual_aggregates
        column: Name for the ratio column (DMUI_Ratio or DMUI_Ratio_ST)
        label: Method name used in warnings

    Returns:
        DataFrame with columns Year and `column`
    """
    missing = aggregates.loc[aggregates[RATIO].isna(), YEAR].tolist()
    if missing:
        warnings.warn(
            f"No {label} DMUI ratio for years {missing}; dropped from the {column} series",
            MissingYearDataWarning,
            stacklevel=2,
        )

    table = aggregates.loc[aggregates[RATIO].notna(), [YEAR, RATIO]]
    table = table.rename(columns={RATIO: column}).reset_index(drop=True)
    logger.info(f"{label.capitalize()} method: DMUI ratio for {len(table)} years")
    return table
