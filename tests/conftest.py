"""
Pytest fixtures for DMUI model tests.
"""

import pytest
import numpy as np
import pandas as pd
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dmui_model.config import DMUIConfig


# =============================================================================
# BRACKET FIXTURES
# =============================================================================

@pytest.fixture
def example_brackets():
    """Two-bracket year 2000 worked example (median 5000, ratio ~0.8197)."""
    return pd.DataFrame({
        "Year": [2000, 2000],
        "BracketMin": [0, 10_000],
        "BracketMax": [10_000, 20_000],
        "NumReturns": [100, 50],
        "AGIBinMean": [5_000, 15_000],
        "AGIUSDAll": [500_000, 750_000],
    })


@pytest.fixture
def multi_year_brackets():
    """
    Three reporting years.

    - 2000: the worked example
    - 2001: brackets on file but no returns (must be excluded everywhere)
    - 2002: three brackets with an unbounded "Inf" top bracket
    """
    return pd.DataFrame({
        "Year": [2000, 2000, 2001, 2001, 2002, 2002, 2002],
        "BracketMin": [0, 10_000, 0, 10_000, 0, 10_000, 50_000],
        "BracketMax": [10_000, 20_000, 10_000, "Inf", 10_000, 50_000, "Inf"],
        "NumReturns": [100, 50, 0, 0, 200, 100, 10],
        "AGIBinMean": [5_000, 15_000, 5_000, 40_000, 6_000, 25_000, 300_000],
        "AGIUSDAll": [500_000, 750_000, 0, 0, 1_200_000, 2_500_000, 3_000_000],
        "Source": ["soi"] * 7,
    })


# =============================================================================
# THRESHOLD FIXTURES
# =============================================================================

@pytest.fixture
def sufficiency_thresholds():
    """Sufficiency thresholds covering 2000 only."""
    return pd.DataFrame({"Year": [2000], "Threshold": [8_000.0]})


@pytest.fixture
def full_sufficiency_thresholds():
    """Sufficiency thresholds for every fixture year."""
    return pd.DataFrame({
        "Year": [2000, 2001, 2002],
        "Threshold": [8_000.0, 8_200.0, 8_400.0],
    })


@pytest.fixture
def price_index():
    """CPI-style annual price index."""
    return pd.DataFrame({
        "Year": [2000, 2001, 2002],
        "PriceIndex": [172.2, 177.1, 179.9],
    })


# =============================================================================
# CONFIG FIXTURES
# =============================================================================

@pytest.fixture
def default_config():
    """Default modeling parameters (top bracket capped at $1M)."""
    return DMUIConfig()


@pytest.fixture
def example_expected_ratio():
    """DMUI ratio of the worked example, from the closed form."""
    adjusted = 5_000 * 100 + (5_000 * np.log(15_000 / 5_000) + 5_000) * 50
    return adjusted / 1_250_000
