#!/usr/bin/env python3
"""
CLI script for inter-rater reliability evaluation.

Usage:
    python scripts/evaluate_reliability.py data/evaluations.json
    python scripts/evaluate_reliability.py data/evaluations.csv --output reports/
    python scripts/evaluate_reliability.py data/evaluations.json --assessment a-123
    python scripts/evaluate_reliability.py data/evaluations.json --format json
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reliability import (
    assessment_to_dict,
    evaluate_assessment,
    generate_report,
    generate_summary_report,
    group_rows_by_assessment,
    load_evaluation_rows,
    normalize_records,
)
from reliability.config import CALIBRATION_THRESHOLD, MIN_EVALUATIONS


def evaluate_single_assessment(
    assessment_id: str,
    rows: list,
    args: argparse.Namespace
):
    """Evaluate one assessment and write or print its report."""
    print(f"Evaluating assessment {assessment_id}...", file=sys.stderr)
    records = normalize_records(rows)
    assessment = evaluate_assessment(
        records,
        assessment_id=assessment_id,
        min_evaluations=args.min_evaluations,
        calibration_threshold=args.calibration_threshold,
    )

    if args.format == "markdown":
        if args.output:
            output_path = Path(args.output)
            output_path.mkdir(parents=True, exist_ok=True)
            output_file = output_path / f"reliability_{assessment_id}.md"
            generate_report(assessment, str(output_file))
            print(f"  Report saved to: {output_file}", file=sys.stderr)
        else:
            print(generate_report(assessment))

    elif args.format == "json":
        output = assessment_to_dict(assessment)
        if args.output:
            output_path = Path(args.output)
            output_path.mkdir(parents=True, exist_ok=True)
            output_file = output_path / f"reliability_{assessment_id}.json"
            with open(output_file, "w") as f:
                json.dump(output, f, indent=2, default=str)
            print(f"  Report saved to: {output_file}", file=sys.stderr)
        else:
            print(json.dumps(output, indent=2, default=str))

    return assessment


def main():
    parser = argparse.ArgumentParser(
        description="Evaluate inter-rater reliability of interview evaluations"
    )
    parser.add_argument(
        "path",
        help="Evaluation export (JSON or CSV)"
    )
    parser.add_argument(
        "--assessment",
        default=None,
        help="Only evaluate this assessment id"
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output directory for reports (default: prints to stdout)"
    )
    parser.add_argument(
        "--format",
        choices=["markdown", "json"],
        default="markdown",
        help="Output format (default: markdown)"
    )
    parser.add_argument(
        "--min-evaluations",
        type=int,
        default=MIN_EVALUATIONS,
        help=f"Minimum evaluations before an ICC is attempted (default: {MIN_EVALUATIONS})"
    )
    parser.add_argument(
        "--calibration-threshold",
        type=float,
        default=CALIBRATION_THRESHOLD,
        help=f"Evaluator ICC below which calibration is flagged (default: {CALIBRATION_THRESHOLD})"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(levelname)s %(message)s",
    )

    try:
        rows = load_evaluation_rows(args.path)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    groups = group_rows_by_assessment(rows)
    if args.assessment:
        if args.assessment not in groups:
            print(f"Error: Assessment not found: {args.assessment}", file=sys.stderr)
            sys.exit(1)
        groups = {args.assessment: groups[args.assessment]}

    assessments = [
        evaluate_single_assessment(assessment_id, group_rows, args)
        for assessment_id, group_rows in groups.items()
    ]

    # Print summary table
    print(f"\n{'='*80}", file=sys.stderr)
    print("SUMMARY", file=sys.stderr)
    print(f"{'='*80}\n", file=sys.stderr)
    print(f"{'Assessment':<20} {'Evals':<8} {'ICC':<8} {'Band':<12} {'Calibrate':<10}", file=sys.stderr)
    print("-" * 62, file=sys.stderr)

    for a in assessments:
        flagged = sum(1 for e in a.evaluators.values() if e.needs_calibration)
        icc_text = f"{a.result.icc:.3f}" if a.result else "-"
        band = a.result.interpretation if a.result else a.status
        print(
            f"{a.assessment_id[:18]:<20} {a.sample_size:<8} {icc_text:<8} {band:<12} {flagged:<10}",
            file=sys.stderr
        )

    if args.output and args.format == "markdown" and len(assessments) > 1:
        summary_file = Path(args.output) / "SUMMARY_ALL_ASSESSMENTS.md"
        summary_file.write_text(generate_summary_report(assessments), encoding="utf-8")
        print(f"\nSummary saved to: {summary_file}", file=sys.stderr)


if __name__ == "__main__":
    main()
