"""
Tests for the data layer: CSV loading, threshold inflation and validation.
"""

import numpy as np
import pandas as pd
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dmui_model.data import (
    BracketTableValidator,
    IRSBracketData,
    ValidationResult,
    inflate_threshold,
    load_price_index,
    parse_bracket_label,
)
from dmui_model.errors import DataFormatError


@pytest.fixture
def data_dir(tmp_path, multi_year_brackets, sufficiency_thresholds):
    multi_year_brackets.to_csv(tmp_path / "agi_brackets.csv", index=False)
    sufficiency_thresholds.to_csv(tmp_path / "sufficiency_thresholds.csv", index=False)
    return tmp_path


class TestParseBracketLabel:
    """Test IRS bracket text parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("$500,000 under $1,000,000", (500_000, 1_000_000)),
        ("$1 under $5,000", (1, 5_000)),
        ("Under $5,000", (0, 5_000)),
        ("$10,000,000 or more", (10_000_000, None)),
    ])
    def test_labels(self, text, expected):
        assert parse_bracket_label(text) == expected

    def test_unparseable(self):
        with pytest.raises(ValueError):
            parse_bracket_label("No adjusted gross income")


class TestIRSBracketData:
    """Test CSV loading."""

    def test_load_brackets(self, data_dir, multi_year_brackets):
        """Test that the bracket CSV round-trips its rows and columns."""
        df = IRSBracketData(data_dir).load_brackets()
        assert len(df) == len(multi_year_brackets)
        assert set(multi_year_brackets.columns) <= set(df.columns)

    def test_load_thresholds(self, data_dir):
        df = IRSBracketData(data_dir).load_sufficiency_thresholds()
        assert list(df["Year"]) == [2000]
        assert df["Threshold"].iloc[0] == 8_000

    def test_missing_file(self, tmp_path):
        """Test a helpful error for a missing file."""
        with pytest.raises(FileNotFoundError, match="agi_brackets.csv"):
            IRSBracketData(tmp_path).load_brackets()

    def test_data_dir_required(self):
        """Test that the loader has no implicit data directory."""
        with pytest.raises(TypeError):
            IRSBracketData()

    def test_missing_data_dir(self, tmp_path):
        """Test that a nonexistent directory fails on load, naming the path."""
        with pytest.raises(FileNotFoundError, match="nowhere"):
            IRSBracketData(tmp_path / "nowhere").load_brackets()

    def test_cache_returns_copies(self, data_dir):
        """Test that callers cannot corrupt the cache."""
        irs = IRSBracketData(data_dir)
        first = irs.load_brackets()
        first["NumReturns"] = -1
        assert (irs.load_brackets()["NumReturns"] >= 0).all()

    def test_bracket_labels_parsed(self, tmp_path):
        """Test that an AGIBracket text column is turned into bounds."""
        pd.DataFrame({
            "Year": [2010, 2010],
            "AGIBracket": ["Under $50,000", "$50,000 or more"],
            "NumReturns": [90, 10],
            "AGIBinMean": [20_000, 200_000],
            "AGIUSDAll": [1_800_000, 2_000_000],
        }).to_csv(tmp_path / "labels.csv", index=False)

        df = IRSBracketData(tmp_path).load_brackets("labels.csv")
        assert list(df["BracketMin"]) == [0, 50_000]
        assert list(df["BracketMax"]) == [50_000, "Inf"]

    def test_years_available(self, data_dir):
        assert IRSBracketData(data_dir).get_data_years_available() == [2000, 2001, 2002]

    def test_bracket_distribution(self, data_dir):
        """Test normalized records for one year, top bracket capped."""
        records = IRSBracketData(data_dir).get_bracket_distribution(2002)
        assert [r.bracket_min for r in records] == [0, 10_000, 50_000]
        assert records[-1].bracket_max == 1_000_000


class TestInflateThreshold:
    """Test base-year threshold inflation."""

    def test_scaling(self, price_index):
        """Test Threshold[y] = base * index[y] / index[base]."""
        table = inflate_threshold(10_000, 2000, price_index)
        assert list(table.columns) == ["Year", "Threshold"]
        assert list(table["Year"]) == [2000, 2001, 2002]
        assert table["Threshold"].iloc[0] == pytest.approx(10_000)
        assert table["Threshold"].iloc[2] == pytest.approx(10_000 * 179.9 / 172.2)

    def test_mapping_input(self):
        table = inflate_threshold(30_000, 2020, {2021: 110.0, 2020: 100.0})
        assert list(table["Threshold"]) == pytest.approx([30_000, 33_000])

    def test_missing_base_year(self, price_index):
        with pytest.raises(ValueError, match="1990"):
            inflate_threshold(10_000, 1990, price_index)

    def test_non_positive_base(self, price_index):
        with pytest.raises(ValueError):
            inflate_threshold(0, 2000, price_index)

    def test_load_price_index(self, tmp_path):
        """Test that the first non-Year column is used as the index."""
        pd.DataFrame({"Year": [2000, 2001], "CPIAUCSL": [172.2, "n/a"]}).to_csv(
            tmp_path / "cpi.csv", index=False)
        df = load_price_index(tmp_path / "cpi.csv")
        assert list(df.columns) == ["Year", "PriceIndex"]
        assert list(df["Year"]) == [2000]

    def test_load_price_index_without_year(self, tmp_path):
        pd.DataFrame({"Date": [2000], "CPI": [172.2]}).to_csv(tmp_path / "cpi.csv", index=False)
        with pytest.raises(DataFormatError):
            load_price_index(tmp_path / "cpi.csv")


class TestBracketTableValidator:
    """Test non-fatal data quality checks."""

    def test_clean_table_passes(self, multi_year_brackets):
        """Test a table where every year has an open-ended top bracket."""
        clean = multi_year_brackets[multi_year_brackets["Year"] != 2000]
        results = BracketTableValidator().validate_all(clean)
        assert all(isinstance(r, ValidationResult) for r in results)
        assert all(r.passed for r in results), [str(r) for r in results if not r.passed]

    def test_missing_columns_short_circuits(self, example_brackets):
        results = BracketTableValidator().validate_all(example_brackets.drop(columns=["AGIUSDAll"]))
        assert len(results) == 1
        assert not results[0].passed
        assert results[0].details == {'missing': ['AGIUSDAll']}

    def test_missing_top_bracket(self, example_brackets):
        """Test that a year with no unbounded bracket is flagged."""
        result = BracketTableValidator().validate_top_brackets(example_brackets)
        assert not result.passed
        assert result.details == {'years': [2000]}

    def test_agi_inconsistency(self, example_brackets):
        raw = example_brackets.copy()
        raw["AGIUSDAll"] = [500_000, 1_500_000]
        result = BracketTableValidator().validate_agi_consistency(raw)
        assert not result.passed
        assert result.details['years'] == [2000]

    def test_negative_counts(self, example_brackets):
        raw = example_brackets.copy()
        raw.loc[0, "NumReturns"] = -5
        assert not BracketTableValidator().validate_counts(raw).passed

    def test_str(self):
        assert str(ValidationResult(passed=True, message="ok")) == "✓ PASS: ok"
