"""
Exception and warning types raised by the DMUI pipeline.

Structural problems in the input tables are fatal (DataFormatError).
Per-year numerical gaps degrade to missing values in the affected series
(InvalidThresholdError is caught row by row, MissingYearDataWarning is
emitted when a year drops out of a series).
"""


class DMUIError(Exception):
    """Base class for DMUI pipeline errors."""


class DataFormatError(DMUIError, ValueError):
    """Required columns or numeric fields are missing or malformed."""


class InvalidThresholdError(DMUIError, ValueError):
    """Threshold used in the utility transform is missing or non-positive."""


class MissingYearDataWarning(UserWarning):
    """A year has no usable median, threshold or ratio for one series."""
