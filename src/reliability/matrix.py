"""
Rating matrix construction from flat evaluation records.
"""

import math
from typing import Iterable, List, Tuple

import numpy as np

from .models import EvaluationRecord, RatingMatrix


def build_rating_matrix(records: Iterable[EvaluationRecord]) -> RatingMatrix:
    """
    Build a sparse subject x rater matrix from evaluation records.

    Later records overwrite earlier ones for the same (subject, rater) pair.

    Args:
        records: Evaluation records in any order

    Returns:
        Dict mapping subject_id -> rater_id -> score
    """
    matrix: RatingMatrix = {}
    for record in records:
        if record.subject_id not in matrix:
            matrix[record.subject_id] = {}
        matrix[record.subject_id][record.rater_id] = record.score
    return matrix


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def matrix_subjects(matrix: RatingMatrix) -> List[str]:
    """Subjects with at least one valid score, in matrix order."""
    return [
        subject for subject, scores in matrix.items()
        if any(not _is_missing(v) for v in scores.values())
    ]


def matrix_raters(matrix: RatingMatrix) -> List[str]:
    """Union of rater ids across all subjects, in first-seen order."""
    raters: List[str] = []
    seen = set()
    for scores in matrix.values():
        for rater, value in scores.items():
            if rater not in seen and not _is_missing(value):
                seen.add(rater)
                raters.append(rater)
    return raters


def to_dense_grid(matrix: RatingMatrix) -> Tuple[List[str], List[str], np.ndarray]:
    """
    Expand a sparse matrix into a dense n x k grid.

    Missing cells are NaN, never zero.

    Returns:
        Tuple of (subjects, raters, grid)
    """
    subjects = matrix_subjects(matrix)
    raters = matrix_raters(matrix)

    grid = np.full((len(subjects), len(raters)), np.nan, dtype=float)
    for i, subject in enumerate(subjects):
        scores = matrix[subject]
        for j, rater in enumerate(raters):
            value = scores.get(rater)
            if not _is_missing(value):
                grid[i, j] = float(value)

    return subjects, raters, grid
