#!/usr/bin/env python3
"""
Compute DMUI ratios from an AGI bracket CSV.

Usage:
    python scripts/run_dmui.py data/agi_brackets.csv --thresholds data/sufficiency.csv
    python scripts/run_dmui.py data/agi_brackets.csv \\
        --base-threshold 30000 --base-year 2020 --price-index data/cpi.csv

Output:
    output/ - CSV tables and PNG charts
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dmui_model import DMUICalculator, DMUIConfig
from dmui_model.data import BracketTableValidator, IRSBracketData, inflate_threshold, load_price_index
from dmui_model.reporting import DMUIReport

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description="Compute DMUI inequality ratios from AGI bracket data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("brackets", type=Path, help="Bracket table CSV")
    parser.add_argument("--thresholds", type=Path, help="Year,Threshold CSV for the sufficiency method")
    parser.add_argument("--base-threshold", type=float, help="Sufficiency threshold in base-year dollars")
    parser.add_argument("--base-year", type=int, help="Year the base threshold is expressed in")
    parser.add_argument("--price-index", type=Path, help="Year,index CSV used to inflate the base threshold")
    parser.add_argument("--top-bracket-cap", type=float, help="Cap for the open-ended top bracket (default 1,000,000)")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path(__file__).parent.parent / "output",
        help="Directory for tables and charts",
    )
    parser.add_argument("--no-plots", action="store_true", help="Skip writing charts")
    args = parser.parse_args()

    config = DMUIConfig.from_env(top_bracket_cap=args.top_bracket_cap)
    irs = IRSBracketData(args.brackets.parent, config=config)
    brackets = irs.load_brackets(args.brackets.name)

    for check in BracketTableValidator(config).validate_all(brackets):
        logger.info(str(check))

    thresholds = None
    if args.thresholds:
        thresholds = irs.load_sufficiency_thresholds(str(args.thresholds.resolve()))
    elif args.base_threshold is not None:
        if args.base_year is None or args.price_index is None:
            parser.error("--base-threshold needs --base-year and --price-index")
        thresholds = inflate_threshold(args.base_threshold, args.base_year,
                                       load_price_index(args.price_index))

    result = DMUICalculator(config).run(brackets, sufficiency_thresholds=thresholds)

    report = DMUIReport(result)
    print(report.generate_text_report())
    report.write_tables(args.output_dir)

    if not args.no_plots:
        report.plot_ratios(save_path=str(args.output_dir / "dmui_ratio.png"))
        report.plot_gini(save_path=str(args.output_dir / "gini.png"))

    print(f"\nTables written to {args.output_dir}")


if __name__ == "__main__":
    main()
