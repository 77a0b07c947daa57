"""
Assembly of the per-method DMUI ratio series into one table.
"""

import pandas as pd

from .aggregation import DMUI_RATIO, DMUI_RATIO_ST
from .brackets import YEAR


def combine_ratio_tables(median_ratios: pd.DataFrame, sufficiency_ratios: pd.DataFrame) -> pd.DataFrame:
    """
    Left-join the sufficiency ratios onto the median ratios by Year.

    Every year in `median_ratios` is kept. Years without a sufficiency ratio
    get NaN in DMUI_Ratio_ST, never zero.

    Returns:
        DataFrame with columns Year, DMUI_Ratio, DMUI_Ratio_ST
    """
    sufficiency = sufficiency_ratios[[YEAR, DMUI_RATIO_ST]]
    if sufficiency[YEAR].duplicated().any():
        raise ValueError("Sufficiency ratio table has duplicate years")

    combined = median_ratios[[YEAR, DMUI_RATIO]].merge(sufficiency, on=YEAR, how="left")
    combined[DMUI_RATIO_ST] = combined[DMUI_RATIO_ST].astype(float)
    return combined.sort_values(YEAR).reset_index(drop=True)
