"""
Bracket table normalization and year filtering.

Takes the raw bracket table (one row per Year and AGI bracket) and produces a
clean, fully numeric copy with the open-ended top bracket capped and the
derived BracketWidth/BracketMid columns added. Also identifies the usable
years, i.e. those with at least one tax return on file.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import pandas as pd

from .config import DMUIConfig
from .errors import DataFormatError

logger = logging.getLogger(__name__)

YEAR = "Year"
BRACKET_MIN = "BracketMin"
BRACKET_MAX = "BracketMax"
NUM_RETURNS = "NumReturns"
AGI_BIN_MEAN = "AGIBinMean"
AGI_USD_ALL = "AGIUSDAll"
BRACKET_WIDTH = "BracketWidth"
BRACKET_MID = "BracketMid"

REQUIRED_COLUMNS = [YEAR, BRACKET_MIN, BRACKET_MAX, NUM_RETURNS, AGI_BIN_MEAN, AGI_USD_ALL]


@dataclass(frozen=True)
class BracketRecord:
    """
    One (Year, bracket) observation from a normalized bracket table.

    Dollar amounts are in nominal dollars for the reporting year.
    """
    year: int
    bracket_min: float
    bracket_max: float  # Top bracket already capped
    num_returns: float
    agi_bin_mean: float  # Mean AGI within the bracket
    agi_usd_all: float  # Total reported AGI for the bracket

    @property
    def bracket_width(self) -> float:
        return self.bracket_max - self.bracket_min

    @property
    def bracket_mid(self) -> float:
        return (self.bracket_max + self.bracket_min) / 2

    def __str__(self) -> str:
        return (f"{self.year} bracket ${self.bracket_min:,.0f}-${self.bracket_max:,.0f}: "
                f"{self.num_returns:,.0f} returns, mean AGI ${self.agi_bin_mean:,.0f}")


def _require_columns(df: pd.DataFrame, columns: List[str], table: str):
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise DataFormatError(f"{table} table is missing required columns: {missing}")


def _coerce_required(series: pd.Series, name: str) -> pd.Series:
    """Coerce a column to numeric, failing on anything that is not a number."""
    values = pd.to_numeric(series, errors="coerce")
    bad = values.isna()
    if bad.any():
        examples = series[bad].head(3).tolist()
        raise DataFormatError(
            f"Column {name} has {int(bad.sum())} missing or non-numeric values "
            f"(e.g. {examples})"
        )
    return values.astype(float)


def normalize_brackets(raw: pd.DataFrame, config: Optional[DMUIConfig] = None) -> pd.DataFrame:
    """
    Clean a raw bracket table.

    The unbounded top bracket (BracketMax given as an unbounded marker such as
    "Inf") is capped at config.top_bracket_cap, then BracketWidth and
    BracketMid are derived for every row. Passthrough columns are kept and no
    rows are dropped.

    Args:
        raw: Bracket table with at least the columns in REQUIRED_COLUMNS
        config: Modeling parameters; defaults to DMUIConfig()

    Returns:
        New DataFrame; `raw` is left untouched

    Raises:
        DataFormatError: If required columns are missing, bounds, years or
            return counts are non-numeric, or a bracket violates
            BracketMax >= BracketMin >= 0
    """
    config = config or DMUIConfig()
    _require_columns(raw, REQUIRED_COLUMNS, "Bracket")

    df = raw.copy()

    unbounded = raw[BRACKET_MAX].map(config.is_unbounded_marker).astype(bool)
    capped_max = pd.Series(
        [config.top_bracket_cap if is_open else value
         for is_open, value in zip(unbounded, raw[BRACKET_MAX])],
        index=raw.index,
        dtype=object,
    )

    years = _coerce_required(raw[YEAR], YEAR)
    fractional = years % 1 != 0
    if fractional.any():
        raise DataFormatError(
            f"Column Year has non-integral values (e.g. {years[fractional].head(3).tolist()})"
        )
    df[YEAR] = years.astype(int)
    df[BRACKET_MIN] = _coerce_required(raw[BRACKET_MIN], BRACKET_MIN)
    df[BRACKET_MAX] = _coerce_required(capped_max, BRACKET_MAX)
    df[NUM_RETURNS] = _coerce_required(raw[NUM_RETURNS], NUM_RETURNS)
    df[AGI_BIN_MEAN] = pd.to_numeric(raw[AGI_BIN_MEAN], errors="coerce").astype(float)
    df[AGI_USD_ALL] = pd.to_numeric(raw[AGI_USD_ALL], errors="coerce").astype(float)

    # Reported AGI is the ratio denominator wherever returns were filed
    filed = df[NUM_RETURNS] > 0
    _coerce_required(raw.loc[filed, AGI_USD_ALL], AGI_USD_ALL)

    if (df[NUM_RETURNS] < 0).any():
        raise DataFormatError("NumReturns must be non-negative")
    if (df[BRACKET_MIN] < 0).any():
        raise DataFormatError("BracketMin must be non-negative")

    inverted = df[BRACKET_MAX] < df[BRACKET_MIN]
    if inverted.any():
        first = df.loc[inverted].iloc[0]
        raise DataFormatError(
            f"{int(inverted.sum())} brackets have BracketMax < BracketMin "
            f"(e.g. year {first[YEAR]}, min ${first[BRACKET_MIN]:,.0f}); "
            f"top bracket cap is ${config.top_bracket_cap:,.0f}"
        )

    missing_means = int(df[AGI_BIN_MEAN].isna().sum())
    if missing_means:
        logger.warning(f"{missing_means} brackets have no AGIBinMean")

    df[BRACKET_WIDTH] = df[BRACKET_MAX] - df[BRACKET_MIN]
    df[BRACKET_MID] = (df[BRACKET_MAX] + df[BRACKET_MIN]) / 2

    logger.info(
        f"Normalized {len(df)} brackets across {df[YEAR].nunique()} years "
        f"({int(unbounded.sum())} capped at ${config.top_bracket_cap:,.0f})"
    )
    return df


def usable_years(brackets: pd.DataFrame) -> List[int]:
    """
    Years with a positive total return count, in ascending order.

    Years absent from the table or whose brackets all have zero returns are
    left out; downstream series never report them.
    """
    totals = brackets.groupby(YEAR)[NUM_RETURNS].sum()
    years = sorted(int(y) for y in totals.index[totals > 0])

    dropped = sorted(int(y) for y in totals.index[~(totals > 0)])
    if dropped:
        logger.info(f"Excluding years with no returns: {dropped}")
    return years


def restrict_to_years(brackets: pd.DataFrame, years: List[int]) -> pd.DataFrame:
    """Rows of `brackets` whose Year is in `years`."""
    return brackets.loc[brackets[YEAR].isin(years)].copy()


def records_from_frame(brackets: pd.DataFrame) -> List[BracketRecord]:
    """Convert a normalized bracket table to BracketRecord objects."""
    return [
        BracketRecord(
            year=int(row[YEAR]),
            bracket_min=float(row[BRACKET_MIN]),
            bracket_max=float(row[BRACKET_MAX]),
            num_returns=float(row[NUM_RETURNS]),
            agi_bin_mean=float(row[AGI_BIN_MEAN]),
            agi_usd_all=float(row[AGI_USD_ALL]),
        )
        for _, row in brackets.iterrows()
    ]
