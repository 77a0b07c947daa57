"""
Data quality checks for AGI bracket tables.

Unlike normalization, these checks never raise: they report problems as
ValidationResult objects so a run can be inspected before it is trusted.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd

from ..brackets import (
    AGI_BIN_MEAN,
    AGI_USD_ALL,
    BRACKET_MAX,
    BRACKET_MIN,
    NUM_RETURNS,
    REQUIRED_COLUMNS,
    YEAR,
)
from ..config import DMUIConfig

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check."""
    passed: bool
    message: str
    details: Optional[dict] = None

    def __str__(self) -> str:
        status = "✓ PASS" if self.passed else "✗ FAIL"
        return f"{status}: {self.message}"


class BracketTableValidator:
    """
    Validation checks for a raw AGI bracket table.

    Checks:
    - Required columns present
    - No negative return counts
    - AGIUSDAll consistent with NumReturns * AGIBinMean
    - Every year has an open-ended (or capped) top bracket
    """

    # Relative gap between AGIUSDAll and NumReturns * AGIBinMean tolerated per bracket
    AGI_CONSISTENCY_TOLERANCE = 0.05

    def __init__(self, config: Optional[DMUIConfig] = None):
        self.config = config or DMUIConfig()

    def validate_columns(self, df: pd.DataFrame) -> ValidationResult:
        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            return ValidationResult(
                passed=False,
                message="Bracket table is missing required columns",
                details={'missing': missing}
            )
        return ValidationResult(passed=True, message="All required columns present")

    def validate_counts(self, df: pd.DataFrame) -> ValidationResult:
        counts = pd.to_numeric(df[NUM_RETURNS], errors="coerce")
        negative = int((counts < 0).sum())
        non_numeric = int(counts.isna().sum())
        if negative or non_numeric:
            return ValidationResult(
                passed=False,
                message="NumReturns has negative or non-numeric values",
                details={'negative': negative, 'non_numeric': non_numeric}
            )
        return ValidationResult(passed=True, message="Return counts are valid")

    def validate_agi_consistency(self, df: pd.DataFrame) -> ValidationResult:
        """
        Compare reported bracket AGI with the count times the bracket mean.

        A gap is expected when the bracket mean is modeled rather than
        observed, so this is a diagnostic, not a hard rule.
        """
        counts = pd.to_numeric(df[NUM_RETURNS], errors="coerce")
        means = pd.to_numeric(df[AGI_BIN_MEAN], errors="coerce")
        reported = pd.to_numeric(df[AGI_USD_ALL], errors="coerce")

        modeled = counts * means
        comparable = (reported > 0) & np.isfinite(modeled)
        gap = ((modeled[comparable] - reported[comparable]).abs() / reported[comparable])
        off = df.loc[gap[gap > self.AGI_CONSISTENCY_TOLERANCE].index]

        if len(off):
            return ValidationResult(
                passed=False,
                message=f"{len(off)} brackets differ from NumReturns * AGIBinMean by more "
                        f"than {self.AGI_CONSISTENCY_TOLERANCE:.0%}",
                details={'years': sorted(int(y) for y in off[YEAR].unique()),
                         'max_gap': float(gap.max())}
            )
        return ValidationResult(passed=True, message="Bracket AGI totals consistent with bin means")

    def validate_top_brackets(self, df: pd.DataFrame) -> ValidationResult:
        """Each year should carry one unbounded (or capped) top bracket."""
        is_top = df[BRACKET_MAX].map(self.config.is_unbounded_marker).astype(bool)
        numeric_max = pd.to_numeric(df[BRACKET_MAX], errors="coerce")
        is_top = is_top | (numeric_max >= self.config.top_bracket_cap)

        years = set(pd.to_numeric(df[YEAR], errors="coerce").dropna().astype(int))
        with_top = set(pd.to_numeric(df.loc[is_top, YEAR], errors="coerce").dropna().astype(int))
        missing = sorted(years - with_top)

        if missing:
            return ValidationResult(
                passed=False,
                message="Some years have no top bracket",
                details={'years': missing}
            )
        return ValidationResult(passed=True, message="Every year has a top bracket")

    def validate_bounds(self, df: pd.DataFrame) -> ValidationResult:
        lows = pd.to_numeric(df[BRACKET_MIN], errors="coerce")
        bad = int(lows.isna().sum() + (lows < 0).sum())
        if bad:
            return ValidationResult(
                passed=False,
                message="BracketMin has missing or negative values",
                details={'rows': bad}
            )
        return ValidationResult(passed=True, message="Bracket lower bounds are valid")

    def validate_all(self, df: pd.DataFrame) -> List[ValidationResult]:
        """Run every check; later checks are skipped if columns are missing."""
        columns = self.validate_columns(df)
        if not columns.passed:
            return [columns]

        results = [
            columns,
            self.validate_counts(df),
            self.validate_bounds(df),
            self.validate_agi_consistency(df),
            self.validate_top_brackets(df),
        ]

        failed = sum(1 for r in results if not r.passed)
        if failed:
            logger.warning(f"{failed} bracket validation check(s) failed")
        else:
            logger.info("All bracket validation checks passed")
        return results
