"""
DMUI Inequality Model

Computes the Diminishing Marginal Utility of Income (DMUI) ratio from
historical IRS AGI-bracket data: incomes above a per-year threshold (the
return-weighted median, or an external sufficiency threshold) are compressed
logarithmically, and adjusted aggregate AGI is compared with reported AGI.
Reference Gini coefficients are computed alongside.
"""

from .config import DMUIConfig
from .errors import (
    DMUIError,
    DataFormatError,
    InvalidThresholdError,
    MissingYearDataWarning,
)
from .brackets import BracketRecord, normalize_brackets, usable_years
from .median import weighted_median, yearly_weighted_median
from .utility import dmui_adjust, adjust_incomes, resolve_thresholds
from .aggregation import annual_aggregates, ratio_table
from .gini import weighted_gini, yearly_gini
from .results import combine_ratio_tables
from .pipeline import DMUICalculator, DMUIResult, sufficiency_threshold_map

__version__ = "1.0.0"
__all__ = [
    "DMUIConfig",
    "DMUIError",
    "DataFormatError",
    "InvalidThresholdError",
    "MissingYearDataWarning",
    "BracketRecord",
    "normalize_brackets",
    "usable_years",
    "weighted_median",
    "yearly_weighted_median",
    "dmui_adjust",
    "adjust_incomes",
    "resolve_thresholds",
    "annual_aggregates",
    "ratio_table",
    "weighted_gini",
    "yearly_gini",
    "combine_ratio_tables",
    "DMUICalculator",
    "DMUIResult",
    "sufficiency_threshold_map",
]
