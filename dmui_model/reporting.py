"""
Reporting and Visualization Module

Text reports, CSV exports and charts for DMUI results.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker

from .aggregation import DMUI_RATIO, DMUI_RATIO_ST
from .brackets import YEAR
from .gini import GINI
from .pipeline import DMUIResult

logger = logging.getLogger(__name__)

OUTPUT_FILES = {
    "median_ratios": "dmui_ratio_median.csv",
    "sufficiency_ratios": "dmui_ratio_sufficiency.csv",
    "combined": "dmui_ratio_combined.csv",
    "gini_midpoint": "gini_bracket_midpoint.csv",
    "gini_bin_mean": "gini_bin_mean.csv",
}


def _fmt(value: float, spec: str) -> str:
    if value is None or np.isnan(value):
        return "n/a"
    return format(value, spec)


class DMUIReport:
    """
    Generate reports for a DMUI run.
    """

    def __init__(self, result: DMUIResult):
        self.result = result

    def generate_text_report(self) -> str:
        """Generate a year-by-year text report."""
        lines = []

        lines.append("=" * 70)
        lines.append("DMUI INEQUALITY REPORT")
        lines.append("=" * 70)
        lines.append("")

        years = self.result.years
        lines.append("SUMMARY")
        lines.append("-" * 40)
        if years:
            lines.append(f"Years covered:              {years[0]}-{years[-1]} ({len(years)} years)")
        else:
            lines.append("Years covered:              none")
        lines.append(f"Top bracket cap:            ${self.result.config.top_bracket_cap:,.0f}")
        lines.append(f"Sufficiency-method years:   {len(self.result.sufficiency_ratios)}")
        lines.append("")

        lines.append("YEAR-BY-YEAR RESULTS")
        lines.append("-" * 70)
        header = (f"{'Year':>6} {'Median':>12} {'DMUI':>8} {'DMUI ST':>8} "
                  f"{'Gini Mid':>9} {'Gini Mean':>10}")
        lines.append(header)
        lines.append("-" * 70)

        for _, row in self.result.summary().iterrows():
            line = f"{int(row[YEAR]):>6} "
            line += f"{_fmt(row['Median'], ',.0f'):>12} "
            line += f"{_fmt(row[DMUI_RATIO], '.4f'):>8} "
            line += f"{_fmt(row[DMUI_RATIO_ST], '.4f'):>8} "
            line += f"{_fmt(row['GiniMidpoint'], '.4f'):>9} "
            line += f"{_fmt(row['GiniBinMean'], '.4f'):>10}"
            lines.append(line)

        lines.append("-" * 70)
        lines.append("")

        lines.append("NOTES")
        lines.append("-" * 40)
        lines.append("- DMUI = adjusted modeled AGI / reported AGI")
        lines.append("- DMUI ST uses the sufficiency threshold instead of the weighted median")
        lines.append("- n/a marks years without a value for that series")
        lines.append("")

        return "\n".join(lines)

    def write_tables(self, output_dir: str) -> Dict[str, Path]:
        """
        Write every output table as CSV.

        Returns:
            Mapping of table name to written path
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        written = {}
        for name, filename in OUTPUT_FILES.items():
            path = output_dir / filename
            getattr(self.result, name).to_csv(path, index=False)
            written[name] = path

        logger.info(f"Wrote {len(written)} tables to {output_dir}")
        return written

    def plot_ratios(self, save_path: Optional[str] = None, show: bool = False) -> plt.Figure:
        """Plot both DMUI ratio series over time."""
        fig, ax = plt.subplots(figsize=(10, 6))
        combined = self.result.combined

        ax.plot(combined[YEAR], combined[DMUI_RATIO], 'b-', linewidth=2,
                label='Median threshold')
        if combined[DMUI_RATIO_ST].notna().any():
            ax.plot(combined[YEAR], combined[DMUI_RATIO_ST], 'g--', linewidth=2,
                    label='Sufficiency threshold')

        ax.set_xlabel('Year')
        ax.set_ylabel('Adjusted AGI / Reported AGI')
        ax.set_title('DMUI Ratio')
        ax.yaxis.set_major_formatter(mticker.StrMethodFormatter('{x:.2f}'))
        ax.legend(loc='best')
        ax.grid(True, alpha=0.3)

        plt.tight_layout()
        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
        if show:
            plt.show()
        return fig

    def plot_gini(self, save_path: Optional[str] = None, show: bool = False) -> plt.Figure:
        """Plot the midpoint and bin-mean Gini estimates over time."""
        fig, ax = plt.subplots(figsize=(10, 6))

        midpoint = self.result.gini_midpoint
        bin_mean = self.result.gini_bin_mean
        ax.plot(midpoint[YEAR], midpoint[GINI], 'o-', color='purple', label='Bracket midpoints')
        ax.plot(bin_mean[YEAR], bin_mean[GINI], 's--', color='orange', label='Bin means')

        ax.set_xlabel('Year')
        ax.set_ylabel('Gini coefficient')
        ax.set_title('Reference Gini Coefficient')
        ax.legend(loc='best')
        ax.grid(True, alpha=0.3)

        plt.tight_layout()
        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
        if show:
            plt.show()
        return fig
