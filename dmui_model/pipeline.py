"""
End-to-end DMUI calculation.

Chains the pipeline stages as pure transformations over DataFrames:

    raw brackets -> normalize -> usable years -> weighted medians
                 -> DMUI adjustment -> annual aggregates -> ratio tables
                 -> combined table

with reference Gini coefficients computed from the normalized brackets.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from .aggregation import (
    DMUI_RATIO,
    DMUI_RATIO_ST,
    THRESHOLD,
    annual_aggregates,
    ratio_table,
)
from .brackets import AGI_BIN_MEAN, BRACKET_MID, YEAR, normalize_brackets, usable_years
from .config import DMUIConfig
from .errors import DataFormatError
from .gini import GINI, yearly_gini
from .median import median_map, yearly_weighted_median
from .results import combine_ratio_tables

logger = logging.getLogger(__name__)


def sufficiency_threshold_map(thresholds: Optional[pd.DataFrame]) -> Dict[int, float]:
    """
    Validate a sufficiency threshold table and turn it into Year -> Threshold.

    Rows with an empty Threshold are left out of the mapping, so those years
    cannot be processed by the sufficiency method.

    Raises:
        DataFormatError: If columns are missing, values are non-numeric, or a
            year appears more than once
    """
    if thresholds is None:
        return {}

    missing = [c for c in (YEAR, THRESHOLD) if c not in thresholds.columns]
    if missing:
        raise DataFormatError(f"Sufficiency threshold table is missing required columns: {missing}")

    years = pd.to_numeric(thresholds[YEAR], errors="coerce")
    if years.isna().any():
        raise DataFormatError("Sufficiency threshold table has missing or non-numeric years")
    if years.duplicated().any():
        dupes = sorted(int(y) for y in years[years.duplicated()].unique())
        raise DataFormatError(f"Sufficiency threshold table has duplicate years: {dupes}")

    values = pd.to_numeric(thresholds[THRESHOLD], errors="coerce")
    non_numeric = values.isna() & thresholds[THRESHOLD].notna()
    if non_numeric.any():
        raise DataFormatError(
            f"Sufficiency threshold table has non-numeric thresholds: "
            f"{thresholds.loc[non_numeric, THRESHOLD].head(3).tolist()}"
        )

    return {int(y): float(m) for y, m in zip(years, values) if not np.isnan(m)}


def _empty_ratio_table(column: str) -> pd.DataFrame:
    return pd.DataFrame({YEAR: pd.Series(dtype=int), column: pd.Series(dtype=float)})


@dataclass(frozen=True)
class DMUIResult:
    """
    All tables produced by one DMUI run.

    Attributes:
        brackets: Normalized bracket table
        years: Usable years (at least one return filed)
        medians: Year, Median
        median_aggregates: Annual totals for the median-threshold method
        sufficiency_aggregates: Annual totals for the sufficiency-threshold method
        median_ratios: Year, DMUI_Ratio
        sufficiency_ratios: Year, DMUI_Ratio_ST
        combined: Year, DMUI_Ratio, DMUI_Ratio_ST (NaN where absent)
        gini_midpoint: Year, G on bracket midpoints
        gini_bin_mean: Year, G on bracket mean AGI
    """
    brackets: pd.DataFrame
    years: List[int]
    medians: pd.DataFrame
    median_aggregates: pd.DataFrame
    sufficiency_aggregates: pd.DataFrame
    median_ratios: pd.DataFrame
    sufficiency_ratios: pd.DataFrame
    combined: pd.DataFrame
    gini_midpoint: pd.DataFrame
    gini_bin_mean: pd.DataFrame
    config: DMUIConfig = field(default_factory=DMUIConfig)

    def summary(self) -> pd.DataFrame:
        """One row per usable year with medians, ratios and Gini estimates."""
        out = pd.DataFrame({YEAR: pd.Series(self.years, dtype=int)})
        out = out.merge(self.medians, on=YEAR, how="left")
        out = out.merge(self.median_ratios, on=YEAR, how="left")
        out = out.merge(self.sufficiency_ratios, on=YEAR, how="left")
        out = out.merge(self.gini_midpoint.rename(columns={GINI: "GiniMidpoint"}), on=YEAR, how="left")
        out = out.merge(self.gini_bin_mean.rename(columns={GINI: "GiniBinMean"}), on=YEAR, how="left")
        return out


class DMUICalculator:
    """
    Runs the DMUI pipeline over a bracket table.

    Example:
        >>> calc = DMUICalculator()
        >>> result = calc.run(brackets, sufficiency_thresholds=thresholds)
        >>> result.combined.head()
    """

    def __init__(self, config: Optional[DMUIConfig] = None):
        self.config = config or DMUIConfig()

    def run(self, brackets: pd.DataFrame,
            sufficiency_thresholds: Optional[pd.DataFrame] = None) -> DMUIResult:
        """
        Compute DMUI ratios and reference Gini coefficients.

        Args:
            brackets: Raw bracket table (Year, BracketMin, BracketMax,
                NumReturns, AGIBinMean, AGIUSDAll, passthrough columns)
            sufficiency_thresholds: Optional Year, Threshold table. Without it
                the sufficiency series is empty.

        Returns:
            DMUIResult with every output table

        Raises:
            DataFormatError: If either input table is malformed
        """
        normalized = normalize_brackets(brackets, self.config)
        threshold_by_year = sufficiency_threshold_map(sufficiency_thresholds)
        years = usable_years(normalized)
        logger.info(f"Computing DMUI for {len(years)} years")

        medians = yearly_weighted_median(normalized, years)

        median_aggregates = annual_aggregates(normalized, years, median_map(medians))
        median_ratios = ratio_table(median_aggregates, DMUI_RATIO, label="median")

        if sufficiency_thresholds is None:
            sufficiency_aggregates = annual_aggregates(normalized, [], {})
            sufficiency_ratios = _empty_ratio_table(DMUI_RATIO_ST)
        else:
            sufficiency_aggregates = annual_aggregates(normalized, years, threshold_by_year)
            sufficiency_ratios = ratio_table(sufficiency_aggregates, DMUI_RATIO_ST, label="sufficiency")

        combined = combine_ratio_tables(median_ratios, sufficiency_ratios)

        gini_midpoint = yearly_gini(normalized, years, BRACKET_MID)
        gini_bin_mean = yearly_gini(normalized, years, AGI_BIN_MEAN)

        if len(median_ratios):
            logger.info(
                f"Median-method DMUI ratio ranges {median_ratios[DMUI_RATIO].min():.4f}"
                f"-{median_ratios[DMUI_RATIO].max():.4f}"
            )

        return DMUIResult(
            brackets=normalized,
            years=years,
            medians=medians,
            median_aggregates=median_aggregates,
            sufficiency_aggregates=sufficiency_aggregates,
            median_ratios=median_ratios,
            sufficiency_ratios=sufficiency_ratios,
            combined=combined,
            gini_midpoint=gini_midpoint,
            gini_bin_mean=gini_bin_mean,
            config=self.config,
        )
