"""
Tests for the return-weighted median.
"""


import numpy as np
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dmui_model.brackets import normalize_brackets, usable_years
from dmui_model.errors import MissingYearDataWarning
from dmui_model.median import median_map, weighted_median, yearly_weighted_median


class TestWeightedMedian:
    """Test the weighted median definition."""

    def test_worked_example(self):
        """Test that 100/150 of the weight at 5000 puts the median there."""
        assert weighted_median([5_000, 15_000], [100, 50]) == 5_000

    def test_single_value(self):
        """Test that a single observation is its own median."""
        assert weighted_median([42_000], [7]) == 42_000

    def test_unsorted_input(self):
        """Test that values need not be pre-sorted."""
        assert weighted_median([3, 1, 2], [1, 1, 1]) == 2

    def test_exact_half_split_averages(self):
        """Test that an exact half-weight split averages the boundary values."""
        assert weighted_median([1, 2], [1, 1]) == 1.5
        assert weighted_median([10, 20, 30, 40], [1, 1, 1, 1]) == 25

    def test_exact_split_with_fractional_weights(self):
        """Test that a split landing on half through float rounding still averages."""
        assert weighted_median([1, 2, 3], [0.3, 0.1, 0.2]) == pytest.approx(1.5)
        assert weighted_median([1, 2, 3], [0.1, 0.2, 0.3]) == pytest.approx(2.5)

    def test_heavy_weight_dominates(self):
        """Test that one heavy bracket carries the median."""
        assert weighted_median([1, 2, 3], [1, 10, 1]) == 2
        assert weighted_median([1, 2, 3], [10, 1, 1]) == 1

    def test_zero_weight_ignored(self):
        """Test that zero-weight observations do not move the median."""
        assert weighted_median([1, 2, 100], [1, 1, 0]) == 1.5

    def test_non_finite_ignored(self):
        """Test that NaN values are skipped."""
        assert weighted_median([np.nan, 5, 7], [100, 2, 1]) == 5

    def test_empty_is_nan(self):
        """Test that nothing usable gives NaN."""
        assert np.isnan(weighted_median([1, 2], [0, 0]))
        assert np.isnan(weighted_median([], []))

    def test_length_mismatch(self):
        """Test that misaligned inputs are rejected."""
        with pytest.raises(ValueError):
            weighted_median([1, 2], [1])


class TestYearlyWeightedMedian:
    """Test per-year medians."""

    def test_one_row_per_usable_year(self, multi_year_brackets):
        """Test medians for usable years only."""
        df = normalize_brackets(multi_year_brackets)
        medians = yearly_weighted_median(df, usable_years(df))
        assert list(medians["Year"]) == [2000, 2002]
        assert list(medians["Median"]) == [5_000, 6_000]

    def test_year_without_means_dropped(self, example_brackets):
        """Test that a year with no usable mean warns and is omitted."""
        raw = example_brackets.astype({"AGIBinMean": float})
        raw["AGIBinMean"] = np.nan
        df = normalize_brackets(raw)
        with pytest.warns(MissingYearDataWarning, match="2000"):
            medians = yearly_weighted_median(df, [2000])
        assert medians.empty
        assert list(medians.columns) == ["Year", "Median"]

    def test_median_map(self, example_brackets):
        """Test conversion to a Year -> median mapping."""
        df = normalize_brackets(example_brackets)
        assert median_map(yearly_weighted_median(df, [2000])) == {2000: 5_000.0}
