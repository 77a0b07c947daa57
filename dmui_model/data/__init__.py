"""
Data integration layer for dmui_model.

This package provides loaders and validators for:
- IRS Statistics of Income (SOI) AGI bracket tables
- Sufficiency thresholds inflated from a base-year value

Example usage:
    >>> from dmui_model.data import IRSBracketData, inflate_threshold
    >>> irs = IRSBracketData("data_files")
    >>> brackets = irs.load_brackets()
    >>> thresholds = inflate_threshold(30_000, 2020, {2019: 255.7, 2020: 258.8})
"""

from dmui_model.data.irs_soi import IRSBracketData, parse_bracket_label
from dmui_model.data.thresholds import inflate_threshold, load_price_index
from dmui_model.data.validation import BracketTableValidator, ValidationResult

__all__ = [
    'IRSBracketData',
    'parse_bracket_label',
    'inflate_threshold',
    'load_price_index',
    'BracketTableValidator',
    'ValidationResult',
]
