"""
Markdown and JSON report generation for reliability evaluations.
"""

import math
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import CALIBRATION_THRESHOLD, GOOD_THRESHOLD
from .models import STATUS_OK, AssessmentReliability, EvaluatorReliability


def format_value(value) -> str:
    """Format a value for display."""
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float):
        if math.isinf(value):
            return "∞" if value > 0 else "-∞"
        if value == int(value):
            return str(int(value))
        return f"{value:.2f}"
    return str(value)


def format_icc(icc: Optional[float]) -> str:
    """Format an ICC coefficient with three decimals."""
    if icc is None:
        return "-"
    return f"{icc:.3f}"


def reliability_band(
    icc: float,
    good_threshold: float = GOOD_THRESHOLD,
    calibration_threshold: float = CALIBRATION_THRESHOLD
) -> str:
    """Dashboard band for an ICC value."""
    if icc >= good_threshold:
        return "Good"
    if icc >= calibration_threshold:
        return "Moderate"
    return "Poor"


def _json_number(value):
    if isinstance(value, float) and math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return value


def assessment_to_dict(assessment: AssessmentReliability) -> Dict[str, Any]:
    """JSON-ready representation of an assessment evaluation."""
    output = asdict(assessment)
    output["result"] = assessment.result.to_dict() if assessment.result else None
    if output["result"]:
        output["result"]["f"] = _json_number(output["result"]["f"])

    evaluators = {}
    for evaluator_id, evaluator in assessment.evaluators.items():
        entry = asdict(evaluator)
        entry["icc"] = evaluator.icc.to_dict() if evaluator.icc else None
        if entry["icc"]:
            entry["icc"]["f"] = _json_number(entry["icc"]["f"])
        evaluators[evaluator_id] = entry
    output["evaluators"] = evaluators
    return output


def generate_summary_section(assessment: AssessmentReliability) -> str:
    """Generate the summary section."""
    result = assessment.result
    lines = [
        "## Summary",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| Assessment | {assessment.assessment_id} |",
        f"| Status | {assessment.status} |",
        f"| Evaluations | {assessment.sample_size} |",
        f"| Mean Score | {format_value(assessment.mean_score)} |",
        f"| Std Dev | {format_value(assessment.std_dev)} |",
    ]
    if result is not None:
        lines.extend([
            f"| Interviews (n) | {result.n} |",
            f"| Evaluators (k) | {result.k} |",
            f"| **ICC(2,1)** | **{format_icc(result.icc)}** ({result.interpretation}) |",
        ])
    lines.append("")

    if assessment.message:
        lines.append(f"> {assessment.message}")
        lines.append("")

    return "\n".join(lines)


def generate_statistics_section(assessment: AssessmentReliability) -> str:
    """Generate the ICC statistics section."""
    result = assessment.result
    if result is None:
        return "## ICC Statistics\n\nNot enough data to assess reliability yet.\n"

    lines = [
        "## ICC Statistics",
        "",
        "| Statistic | Value |",
        "|-----------|-------|",
        f"| ICC | {format_icc(result.icc)} |",
        f"| 95% CI | [{format_icc(result.ci95_lower)}, {format_icc(result.ci95_upper)}] |",
        f"| F | {format_value(result.f)} |",
        f"| df1 (subjects) | {result.df1} |",
        f"| df2 (error) | {result.df2} |",
        "",
        "> The confidence interval is an approximation and should not be read as exact.",
        "",
    ]
    return "\n".join(lines)


def _evaluator_sort_key(evaluator: EvaluatorReliability):
    # Evaluators without an ICC go last
    if evaluator.icc is None:
        return (1, 0.0, evaluator.evaluator_id)
    return (0, evaluator.icc.icc, evaluator.evaluator_id)


def generate_evaluator_section(evaluators: Dict[str, EvaluatorReliability]) -> str:
    """Generate the per-evaluator agreement table, lowest ICC first."""
    if not evaluators:
        return "## Evaluators\n\nNo evaluators.\n"

    lines = [
        "## Evaluators",
        "",
        "| Evaluator | Evaluations | Mean Score | Deviation vs Panel | ICC vs Panel | Band | Calibration |",
        "|-----------|-------------|------------|--------------------|--------------|------|-------------|",
    ]

    for evaluator in sorted(evaluators.values(), key=_evaluator_sort_key):
        if evaluator.icc is not None:
            icc_text = format_icc(evaluator.icc.icc)
            band = reliability_band(evaluator.icc.icc)
        else:
            icc_text = "-"
            band = "-"
        flag = "⚠️ needed" if evaluator.needs_calibration else "ok"
        lines.append(
            f"| {evaluator.evaluator_id} | {evaluator.evaluations} | "
            f"{format_value(evaluator.mean_score)} | {format_value(evaluator.mean_deviation)} | "
            f"{icc_text} | {band} | {flag} |"
        )

    lines.append("")

    flagged = [e.evaluator_id for e in evaluators.values() if e.needs_calibration]
    if flagged:
        lines.append(f"**Needs Calibration**: {', '.join(sorted(flagged))}")
        lines.append("")

    return "\n".join(lines)


def generate_interpretation_section() -> str:
    """Generate the interpretation legend."""
    lines = [
        "## Interpretation",
        "",
        "| ICC | Band |",
        "|-----|------|",
        "| < 0.40 | poor |",
        "| 0.40 - 0.59 | fair |",
        "| 0.60 - 0.74 | moderate |",
        "| 0.75 - 0.89 | good |",
        "| >= 0.90 | excellent |",
        "",
    ]
    return "\n".join(lines)


def generate_report(assessment: AssessmentReliability, output_path: Optional[str] = None) -> str:
    """
    Generate a complete markdown reliability report.

    Args:
        assessment: AssessmentReliability result
        output_path: Optional path to save the report

    Returns:
        Markdown content as string
    """
    sections = [
        "# Inter-Rater Reliability Report",
        "",
        f"> Generated: {assessment.calculated_at}",
        "",
        generate_summary_section(assessment),
        generate_statistics_section(assessment),
        generate_evaluator_section(assessment.evaluators),
        generate_interpretation_section(),
    ]

    content = "\n".join(sections)

    if output_path:
        Path(output_path).write_text(content, encoding="utf-8")

    return content


def generate_summary_report(assessments: List[AssessmentReliability]) -> str:
    """Generate a one-row-per-assessment overview."""
    scored = [a for a in assessments if a.status == STATUS_OK]

    lines = [
        "# Inter-Rater Reliability Summary",
        "",
        "## Overview",
        "",
        f"- **Assessments Evaluated**: {len(assessments)}",
        f"- **With ICC**: {len(scored)}",
    ]
    if scored:
        avg_icc = sum(a.result.icc for a in scored) / len(scored)
        lines.append(f"- **Average ICC**: {avg_icc:.3f}")
    lines.extend([
        "",
        "## Per-Assessment Results",
        "",
        "| Assessment | Evaluations | ICC | Interpretation | 95% CI | Needs Calibration |",
        "|------------|-------------|-----|----------------|--------|-------------------|",
    ])

    for a in assessments:
        flagged = sum(1 for e in a.evaluators.values() if e.needs_calibration)
        if a.result is not None:
            lines.append(
                f"| {a.assessment_id} | {a.sample_size} | {format_icc(a.result.icc)} | "
                f"{a.result.interpretation} | "
                f"[{format_icc(a.result.ci95_lower)}, {format_icc(a.result.ci95_upper)}] | {flagged} |"
            )
        else:
            lines.append(f"| {a.assessment_id} | {a.sample_size} | - | {a.status} | - | {flagged} |")

    lines.append("")
    return "\n".join(lines)
