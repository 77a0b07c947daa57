"""
IRS Statistics of Income (SOI) bracket data loader.

Loads the historical AGI-bracket table (one row per Year and bracket with
return counts, bracket mean AGI and total AGI) and the sufficiency threshold
table used by the DMUI pipeline.

Data Source: https://www.irs.gov/statistics/soi-tax-stats-individual-income-tax-statistics
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple, Union

import pandas as pd

from ..brackets import YEAR, BracketRecord, normalize_brackets, records_from_frame
from ..config import DMUIConfig

logger = logging.getLogger(__name__)

DEFAULT_BRACKETS_FILE = "agi_brackets.csv"
DEFAULT_THRESHOLDS_FILE = "sufficiency_thresholds.csv"


def parse_bracket_label(bracket_text: str) -> Tuple[float, Optional[float]]:
    """
    Parse IRS AGI bracket text into (floor, ceiling) in dollars.

    Ceiling is None for the open-ended top bracket.

    Examples:
        "$500,000 under $1,000,000" -> (500000, 1000000)
        "$10,000,000 or more" -> (10000000, None)
        "Under $5,000" -> (0, 5000)
    """
    text = str(bracket_text).strip()
    lower = text.lower()

    amounts = [float(a.replace(",", "")) for a in re.findall(r"\$?(\d[\d,]*)", text)]
    if not amounts:
        raise ValueError(f"Could not parse bracket: {text!r}")

    if "or more" in lower:
        return (amounts[0], None)
    if lower.startswith("under") or lower.startswith("less than"):
        return (0.0, amounts[0])
    if "under" in lower and len(amounts) >= 2:
        return (amounts[0], amounts[1])

    raise ValueError(f"Could not parse bracket: {text!r}")


class IRSBracketData:
    """
    Loader for AGI-bracket tables stored as CSV files.

    Example:
        >>> irs = IRSBracketData("data_files")
        >>> brackets = irs.load_brackets()
        >>> thresholds = irs.load_sufficiency_thresholds()
    """

    def __init__(self, data_dir: Union[str, Path], config: Optional[DMUIConfig] = None):
        """
        Initialize the loader.

        Args:
            data_dir: Directory containing the CSV files
            config: Modeling parameters used when normalizing records
        """
        self.data_dir = Path(data_dir)
        self.config = config or DMUIConfig()
        self._cache = {}

        if not self.data_dir.exists():
            logger.warning(f"Bracket data directory not found: {self.data_dir}")

    def _read_csv(self, filename: str, description: str) -> pd.DataFrame:
        if filename in self._cache:
            return self._cache[filename].copy()

        file_path = Path(filename)
        if not file_path.is_absolute():
            file_path = self.data_dir / file_path

        if not file_path.exists():
            raise FileNotFoundError(f"{description} not found at {file_path}")

        logger.info(f"Loading {description} from {file_path}")
        df = pd.read_csv(file_path)

        self._cache[filename] = df
        return df.copy()

    def load_brackets(self, filename: str = DEFAULT_BRACKETS_FILE) -> pd.DataFrame:
        """
        Load the raw bracket table.

        An "AGIBracket" text column, if present and BracketMin/BracketMax are
        absent, is parsed into bounds; the top bracket gets "Inf".

        Raises:
            FileNotFoundError: If the file is not found
        """
        df = self._read_csv(filename, "AGI bracket table")

        if "AGIBracket" in df.columns and "BracketMin" not in df.columns:
            bounds = df["AGIBracket"].map(parse_bracket_label)
            df["BracketMin"] = [lo for lo, _ in bounds]
            df["BracketMax"] = ["Inf" if hi is None else hi for _, hi in bounds]

        return df

    def load_sufficiency_thresholds(self, filename: str = DEFAULT_THRESHOLDS_FILE) -> pd.DataFrame:
        """
        Load the Year, Threshold table.

        Raises:
            FileNotFoundError: If the file is not found
        """
        return self._read_csv(filename, "Sufficiency threshold table")

    def get_data_years_available(self, filename: str = DEFAULT_BRACKETS_FILE) -> List[int]:
        """Sorted list of years present in the bracket table."""
        df = self.load_brackets(filename)
        return sorted(int(y) for y in pd.to_numeric(df[YEAR], errors="coerce").dropna().unique())

    def get_bracket_distribution(self, year: int, filename: str = DEFAULT_BRACKETS_FILE) -> List[BracketRecord]:
        """
        Normalized brackets for one year.

        Returns:
            List of BracketRecord objects, ordered by BracketMin
        """
        brackets = normalize_brackets(self.load_brackets(filename), self.config)
        year_rows = brackets.loc[brackets[YEAR] == year].sort_values("BracketMin")
        records = records_from_frame(year_rows)
        logger.info(f"Loaded {len(records)} brackets for year {year}")
        return records
