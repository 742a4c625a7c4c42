"""
Data loading utilities for evaluation exports.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from .config import DEFAULT_ASSESSMENT
from .normalizers import get_assessment_id

logger = logging.getLogger()

SUPPORTED_EXTENSIONS = (".json", ".csv")


def _load_json_rows(filepath: Path) -> List[Dict[str, Any]]:
    with open(filepath, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("evaluations", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of evaluations in {filepath}")
    return data


def _load_csv_rows(filepath: Path) -> List[Dict[str, Any]]:
    df = pd.read_csv(filepath)
    # Empty cells come back as NaN; hand them on as None
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")


def load_evaluation_rows(path: str) -> List[Dict[str, Any]]:
    """
    Load exported evaluation rows from a JSON or CSV file.

    JSON files hold either a list of evaluation objects or an object with an
    "evaluations" list.

    Args:
        path: Path to the export file

    Returns:
        List of raw evaluation rows (dicts)
    """
    filepath = Path(path)
    if not filepath.exists():
        raise FileNotFoundError(f"Evaluation export not found: {filepath}")

    suffix = filepath.suffix.lower()
    if suffix == ".json":
        rows = _load_json_rows(filepath)
    elif suffix == ".csv":
        rows = _load_csv_rows(filepath)
    else:
        raise ValueError(
            f"Unsupported export format '{suffix}' (expected one of {', '.join(SUPPORTED_EXTENSIONS)})"
        )

    logger.info(f"Loaded {len(rows)} evaluation rows from {filepath}")
    return rows


def group_rows_by_assessment(
    rows: List[Dict[str, Any]],
    default_assessment: str = DEFAULT_ASSESSMENT
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Group rows by assessment id, keeping first-seen order.

    Rows without an assessment id land in the default group.
    """
    groups: Dict[str, List[Dict[str, Any]]] = {}
    for row in rows:
        assessment_id = None
        if isinstance(row, dict):
            assessment_id = get_assessment_id(row)
        key = assessment_id or default_assessment
        if key not in groups:
            groups[key] = []
        groups[key].append(row)
    return groups
