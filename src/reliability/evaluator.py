"""
Assessment-level reliability evaluation.

Consumes the ICC engine: summarises an assessment's scores and measures how
closely each evaluator tracks the rest of the panel.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import CALIBRATION_THRESHOLD, DEFAULT_ASSESSMENT, MIN_EVALUATIONS
from .icc import calculate_icc, round_half_up
from .matrix import build_rating_matrix
from .models import (
    STATUS_INSUFFICIENT_EVALUATIONS,
    STATUS_INSUFFICIENT_STRUCTURE,
    STATUS_OK,
    AssessmentReliability,
    EvaluationRecord,
    EvaluatorReliability,
    RatingMatrix,
)

logger = logging.getLogger()

# Prefix of the panel consensus column in evaluator-vs-panel matrices
PANEL_ID = "__panel__"


def summarize_scores(scores: Sequence[float]) -> Tuple[Optional[float], Optional[float]]:
    """
    Mean and population standard deviation, rounded half up to 2 decimals.

    Returns (None, None) for an empty sequence.
    """
    if not scores:
        return None, None
    arr = np.array(scores, dtype=float)
    return round_half_up(float(np.mean(arr)), 2), round_half_up(float(np.std(arr)), 2)


def calculate_evaluator_reliability(
    matrix: RatingMatrix,
    calibration_threshold: float = CALIBRATION_THRESHOLD
) -> Dict[str, EvaluatorReliability]:
    """
    Score every evaluator against the consensus of the other evaluators.

    For each evaluator, the subjects they scored that at least one other
    evaluator also scored form a two-column matrix (evaluator, panel mean),
    which is run through the ICC calculator.

    Args:
        matrix: Dict mapping subject_id -> rater_id -> score
        calibration_threshold: ICC below which an evaluator needs calibration

    Returns:
        Dict mapping evaluator_id -> EvaluatorReliability
    """
    raters: List[str] = []
    for scores in matrix.values():
        for rater in scores:
            if rater not in raters:
                raters.append(rater)

    results = {}
    for rater in raters:
        own_scores = [scores[rater] for scores in matrix.values() if rater in scores]

        # Strictly longer than the rater id, so it never overwrites the rater column
        panel_key = f"{PANEL_ID}{rater}"
        paired: RatingMatrix = {}
        deviations = []
        for subject, scores in matrix.items():
            if rater not in scores:
                continue
            others = [v for r, v in scores.items() if r != rater]
            if not others:
                continue
            panel_mean = sum(others) / len(others)
            paired[subject] = {rater: scores[rater], panel_key: panel_mean}
            deviations.append(scores[rater] - panel_mean)

        icc = calculate_icc(paired)
        needs_calibration = icc is not None and icc.icc < calibration_threshold

        if needs_calibration:
            logger.info(
                f"Evaluator {rater} below calibration threshold "
                f"(icc={icc.icc}, threshold={calibration_threshold})"
            )

        results[rater] = EvaluatorReliability(
            evaluator_id=rater,
            evaluations=len(own_scores),
            mean_score=round_half_up(sum(own_scores) / len(own_scores), 2) if own_scores else None,
            mean_deviation=round_half_up(sum(deviations) / len(deviations), 2) if deviations else None,
            icc=icc,
            needs_calibration=needs_calibration,
        )

    return results


def evaluate_assessment(
    records: Sequence[EvaluationRecord],
    assessment_id: str = DEFAULT_ASSESSMENT,
    min_evaluations: int = MIN_EVALUATIONS,
    calibration_threshold: float = CALIBRATION_THRESHOLD
) -> AssessmentReliability:
    """
    Generate the reliability evaluation for one assessment.

    Args:
        records: Evaluation records already scoped to the assessment
        assessment_id: Identifier used in reports
        min_evaluations: Minimum number of records before an ICC is attempted
        calibration_threshold: ICC below which an evaluator needs calibration

    Returns:
        AssessmentReliability; insufficient data is reported through `status`
    """
    calculated_at = datetime.now(timezone.utc).isoformat()
    mean_score, std_dev = summarize_scores([r.score for r in records])

    if len(records) < min_evaluations:
        logger.info(
            f"Assessment {assessment_id}: {len(records)} evaluations, "
            f"need at least {min_evaluations}"
        )
        return AssessmentReliability(
            assessment_id=assessment_id,
            status=STATUS_INSUFFICIENT_EVALUATIONS,
            message="Need at least 2 evaluators x 2 interviews to calculate ICC",
            result=None,
            mean_score=mean_score,
            std_dev=std_dev,
            sample_size=len(records),
            calculated_at=calculated_at,
        )

    matrix = build_rating_matrix(records)
    result = calculate_icc(matrix)
    evaluators = calculate_evaluator_reliability(matrix, calibration_threshold)

    if result is None:
        logger.info(f"Assessment {assessment_id}: insufficient data structure for ICC")
        status = STATUS_INSUFFICIENT_STRUCTURE
        message = "Insufficient data structure for ICC calculation"
    else:
        logger.info(
            f"Assessment {assessment_id}: icc={result.icc} ({result.interpretation}), "
            f"n={result.n}, k={result.k}"
        )
        status = STATUS_OK
        message = ""

    return AssessmentReliability(
        assessment_id=assessment_id,
        status=status,
        message=message,
        result=result,
        mean_score=mean_score,
        std_dev=std_dev,
        sample_size=len(records),
        calculated_at=calculated_at,
        evaluators=evaluators,
    )
