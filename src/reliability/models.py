"""
Data models for inter-rater reliability results.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# subject_id -> rater_id -> score
RatingMatrix = Dict[str, Dict[str, float]]

# Interpretation bands
POOR = "poor"
FAIR = "fair"
MODERATE = "moderate"
GOOD = "good"
EXCELLENT = "excellent"

# Assessment status values
STATUS_OK = "ok"
STATUS_INSUFFICIENT_EVALUATIONS = "insufficient_evaluations"
STATUS_INSUFFICIENT_STRUCTURE = "insufficient_structure"


@dataclass(frozen=True)
class EvaluationRecord:
    """A single score given by one evaluator to one interview."""
    subject_id: str
    rater_id: str
    score: float


@dataclass(frozen=True)
class IccResult:
    """ICC(2,1) coefficient with its F test and approximate 95% CI."""
    icc: float
    f: float
    df1: int
    df2: int
    ci95_lower: float
    ci95_upper: float
    n: int
    k: int
    interpretation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "icc": self.icc,
            "f": self.f,
            "df1": self.df1,
            "df2": self.df2,
            "ci95Lower": self.ci95_lower,
            "ci95Upper": self.ci95_upper,
            "n": self.n,
            "k": self.k,
            "interpretation": self.interpretation,
        }


@dataclass
class EvaluatorReliability:
    """Agreement of a single evaluator with the rest of the panel."""
    evaluator_id: str
    evaluations: int
    mean_score: Optional[float]
    mean_deviation: Optional[float]  # evaluator minus panel, averaged over shared subjects
    icc: Optional[IccResult] = None
    needs_calibration: bool = False


@dataclass
class AssessmentReliability:
    """Complete reliability evaluation for one assessment."""
    assessment_id: str
    status: str
    message: str
    result: Optional[IccResult]
    mean_score: Optional[float]
    std_dev: Optional[float]
    sample_size: int
    calculated_at: str
    evaluators: Dict[str, EvaluatorReliability] = field(default_factory=dict)
