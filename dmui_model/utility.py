"""
Diminishing Marginal Utility of Income (DMUI) transform.

Incomes at or below a threshold m are left alone; incomes above it are
compressed logarithmically toward m:

    u(x, m) = x                   if x <= m
    u(x, m) = m * ln(x / m) + m   otherwise

Both branches equal m at x = m, so the transform is continuous, monotone
non-decreasing in x, and strictly below x for every x > m.
"""

import logging
import math
from typing import Mapping, Optional

import numpy as np
import pandas as pd

from .errors import InvalidThresholdError

logger = logging.getLogger(__name__)


def _check_threshold(threshold: Optional[float]) -> float:
    if threshold is None:
        raise InvalidThresholdError("Threshold is missing")
    try:
        m = float(threshold)
    except (TypeError, ValueError):
        raise InvalidThresholdError(f"Threshold {threshold!r} is not a number") from None
    if not math.isfinite(m) or m <= 0:
        raise InvalidThresholdError(f"Threshold must be positive and finite, got {threshold!r}")
    return m


def dmui_adjust(income: float, threshold: float) -> float:
    """
    Apply the DMUI transform to one income.

    Args:
        income: Income value x (dollars)
        threshold: Threshold m (dollars), must be > 0

    Returns:
        x if x <= m, else m * ln(x / m) + m

    Raises:
        InvalidThresholdError: If the threshold is missing, non-finite or <= 0
    """
    m = _check_threshold(threshold)
    x = float(income)
    if x <= m:
        return x
    return m * math.log(x / m) + m


def resolve_thresholds(years: pd.Series, threshold_by_year: Mapping[int, float]) -> pd.Series:
    """
    Look up each row's threshold by its Year.

    Years with no entry in `threshold_by_year` get NaN.
    """
    lookup = {int(y): float(m) for y, m in threshold_by_year.items() if m is not None}
    return pd.Series(
        [lookup.get(int(y), np.nan) for y in years],
        index=years.index,
        dtype=float,
    )


def adjust_incomes(incomes: pd.Series, thresholds: pd.Series) -> pd.Series:
    """
    Element-wise DMUI transform of incomes against per-row thresholds.

    Rows with a missing income, or a threshold that fails validation, come
    back as NaN; the rest of the series is still computed.
    """
    if len(incomes) != len(thresholds):
        raise ValueError("incomes and thresholds must have the same length")

    adjusted = []
    invalid = 0
    for x, m in zip(incomes, thresholds):
        if pd.isna(x):
            adjusted.append(np.nan)
            continue
        try:
            adjusted.append(dmui_adjust(x, None if pd.isna(m) else m))
        except InvalidThresholdError:
            invalid += 1
            adjusted.append(np.nan)

    if invalid:
        logger.debug(f"{invalid} rows have no valid threshold")
    return pd.Series(adjusted, index=incomes.index, dtype=float)
