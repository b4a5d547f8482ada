"""
Merge two CSV/Excel files from the command line.
Column mappings come from the LLM unless --no-ai is given.

Usage:
    python scripts/merge_files.py customers.csv leads.xlsx -o merged.csv
"""

import argparse
import logging
import os
import sys

from dotenv import load_dotenv
from openai import OpenAI

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from backend.analyzer import DEFAULT_MODEL, MIN_CONFIDENCE, OpenAIMappingOracle
from backend.errors import InputValidationError, UpstreamError
from backend.exporter import build_download_filename, export_to_csv
from backend.loader import load_tabular_file
from backend.merger import add_identical_column_mappings, merge_datasets, validate_correspondences

logger = logging.getLogger("merge_files")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Merge two tabular files with LLM column mapping.")
    parser.add_argument("file1")
    parser.add_argument("file2")
    parser.add_argument("-o", "--output", help="Output CSV (default: merged_<timestamp>.csv)")
    parser.add_argument("--model", default=DEFAULT_MODEL)
    parser.add_argument("--min-confidence", type=float, default=MIN_CONFIDENCE,
                        help="Ignore proposed mappings below this confidence")
    parser.add_argument("--no-ai", action="store_true", help="Append the files without column mapping")
    parser.add_argument("--sep", default=",", help="CSV separator of the output file")
    return parser.parse_args(argv)


def print_mappings(correspondences):
    print("\nColumn mappings:")
    if not correspondences:
        print("  (none)")
    for c in correspondences:
        print(f"  {c.column_a} + {c.column_b} -> {c.merged_name} ({c.confidence:.2f}) {c.rationale}")


def main(argv=None):
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    args = parse_args(argv)

    try:
        dataset_a = load_tabular_file(args.file1)
        dataset_b = load_tabular_file(args.file2)
    except UpstreamError as e:
        print(f"Error: {e}")
        return 1

    correspondences = []
    if not args.no_ai:
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            print("Error: OPENAI_API_KEY not set (use --no-ai to merge without mappings)")
            return 1

        oracle = OpenAIMappingOracle(OpenAI(api_key=api_key), model_name=args.model)
        try:
            proposal = oracle.propose_mappings(
                dataset_a.columns, dataset_b.columns,
                dataset_a.rows, dataset_b.rows,
                name_a=dataset_a.name, name_b=dataset_b.name,
            )
        except UpstreamError as e:
            logger.error("Column analysis failed: %s", e)
            return 1
        correspondences = [c for c in proposal.correspondences if c.confidence >= args.min_confidence]

    # Gleich benannte Spalten immer zusammenführen, sonst überschreibt Datei 2 die Werte aus Datei 1
    correspondences = add_identical_column_mappings(dataset_a, dataset_b, correspondences)
    print_mappings(correspondences)

    try:
        validate_correspondences(dataset_a, dataset_b, correspondences)
    except InputValidationError as e:
        print(f"Error: {e}")
        return 1

    merged = merge_datasets(dataset_a, dataset_b, correspondences)
    output_file = args.output or build_download_filename()
    with open(output_file, "w", encoding="utf-8", newline="") as f:
        f.write(export_to_csv(merged, sep=args.sep))

    print(f"\n{dataset_a.name}: {dataset_a.row_count} rows, {dataset_b.name}: {dataset_b.row_count} rows")
    print(f"Merged: {merged.row_count} rows, {len(merged.columns)} columns")
    print(f"Results saved to: {output_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
