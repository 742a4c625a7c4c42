"""
Inter-Rater Reliability Module for structured interviews.

This module builds (interview x evaluator) rating matrices from evaluation
records, computes the ICC(2,1) reliability coefficient, and flags evaluators
whose scoring diverges from the panel.

Usage:
    from reliability import build_rating_matrix, calculate_icc

    matrix = build_rating_matrix(records)
    result = calculate_icc(matrix)  # None when data is insufficient

    # Whole assessment, with per-evaluator calibration
    assessment = evaluate_assessment(records, assessment_id="a-123")
    report = generate_report(assessment, output_path="report.md")
"""

from .evaluator import calculate_evaluator_reliability, evaluate_assessment
from .icc import calculate_icc, interpret_icc
from .loader import group_rows_by_assessment, load_evaluation_rows
from .matrix import build_rating_matrix
from .models import (
    AssessmentReliability,
    EvaluationRecord,
    EvaluatorReliability,
    IccResult,
    RatingMatrix,
)
from .normalizers import normalize_records
from .report import assessment_to_dict, generate_report, generate_summary_report

__all__ = [
    # Engine
    "build_rating_matrix",
    "calculate_icc",
    "interpret_icc",
    # Assessment analytics
    "evaluate_assessment",
    "calculate_evaluator_reliability",
    # Loading
    "load_evaluation_rows",
    "group_rows_by_assessment",
    "normalize_records",
    # Reports
    "generate_report",
    "generate_summary_report",
    "assessment_to_dict",
    # Models
    "EvaluationRecord",
    "RatingMatrix",
    "IccResult",
    "EvaluatorReliability",
    "AssessmentReliability",
]
