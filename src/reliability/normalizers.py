"""
Normalization and edge case handling for exported evaluation rows.
"""

import logging
import math
import numbers
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .models import EvaluationRecord

logger = logging.getLogger()


# Accepted column names, in lookup order
SUBJECT_KEYS = ("subject_id", "subjectId", "interview_id", "interviewId")
RATER_KEYS = ("rater_id", "raterId", "evaluator_id", "evaluatorId")
SCORE_KEYS = ("score",)
ASSESSMENT_KEYS = ("assessment_id", "assessmentId")


def _first_present(row: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def coerce_identifier(value: Any) -> Optional[str]:
    """Coerce an id column to a non-empty string."""
    if value is None:
        return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        # CSV readers turn integer ids into floats
        if value == int(value):
            return str(int(value))
    text = str(value).strip()
    return text or None


def coerce_score(value: Any) -> Optional[float]:
    """Attempt to coerce a score to float.

    Handles inference-style objects where a plain number is expected:
    e.g., {"value": 4, "confidence": 0.8} -> 4.0
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        score = float(value)
        return score if math.isfinite(score) else None
    if isinstance(value, str):
        try:
            score = float(value.replace(",", ".").strip())
        except ValueError:
            return None
        return score if math.isfinite(score) else None
    if isinstance(value, dict) and "value" in value:
        return coerce_score(value["value"])
    return None


def get_assessment_id(row: Dict[str, Any]) -> Optional[str]:
    """Assessment id of a row, if it carries one."""
    return coerce_identifier(_first_present(row, ASSESSMENT_KEYS))


def validate_row(row: Any) -> Tuple[bool, List[str]]:
    """
    Validate an exported evaluation row.

    Returns:
        Tuple of (is_valid, list of errors)
    """
    if not isinstance(row, dict):
        return False, ["Row is not an object"]

    errors = []
    if coerce_identifier(_first_present(row, SUBJECT_KEYS)) is None:
        errors.append("Missing subject id")
    if coerce_identifier(_first_present(row, RATER_KEYS)) is None:
        errors.append("Missing rater id")

    raw_score = _first_present(row, SCORE_KEYS)
    if raw_score is None:
        errors.append("Missing score")
    elif coerce_score(raw_score) is None:
        errors.append(f"Invalid score: {raw_score!r}")

    return len(errors) == 0, errors


def normalize_record(row: Any) -> Optional[EvaluationRecord]:
    """Convert an exported row to an EvaluationRecord, or None if invalid."""
    is_valid, _ = validate_row(row)
    if not is_valid:
        return None
    return EvaluationRecord(
        subject_id=coerce_identifier(_first_present(row, SUBJECT_KEYS)),
        rater_id=coerce_identifier(_first_present(row, RATER_KEYS)),
        score=coerce_score(_first_present(row, SCORE_KEYS)),
    )


def normalize_records(rows: Iterable[Any]) -> List[EvaluationRecord]:
    """
    Normalize rows in order, dropping the ones that cannot be used.
    """
    records = []
    for index, row in enumerate(rows):
        is_valid, errors = validate_row(row)
        if not is_valid:
            logger.warning(f"Skipping evaluation row {index}: {'; '.join(errors)}")
            continue
        records.append(normalize_record(row))
    return records
