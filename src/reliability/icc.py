"""
Inter-Rater Reliability (ICC) calculator.

Implements ICC(2,1): two-way model, single measures, absolute agreement.
Appropriate when each interview is scored by a subset of evaluators drawn
from a larger pool and absolute (not just rank) agreement matters.

    ICC = (MSr - MSe) / (MSr + (k-1)*MSe + k*(MSc - MSe)/n)

    MSr = mean squares for rows (subjects)
    MSc = mean squares for columns (raters)
    MSe = mean squares for error
    n   = number of subjects
    k   = number of raters (every rater seen anywhere in the matrix)

The confidence interval is a simplified Shrout & Fleiss approximation, not
the exact non-central F inversion. Downstream consumers rely on its exact
output.
"""

import math
from typing import Optional

import numpy as np

from .matrix import to_dense_grid
from .models import (
    EXCELLENT,
    FAIR,
    GOOD,
    MODERATE,
    POOR,
    IccResult,
    RatingMatrix,
)


def interpret_icc(icc: float) -> str:
    """Map an ICC value to its interpretation band."""
    if icc < 0.4:
        return POOR
    if icc < 0.6:
        return FAIR
    if icc < 0.75:
        return MODERATE
    if icc < 0.9:
        return GOOD
    return EXCELLENT


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def round_half_up(value: float, digits: int) -> float:
    """Round to `digits` decimals with exact halves going up; non-finite values pass through."""
    if not math.isfinite(value):
        return value
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def _ci_bound(f_value: float, k: int, fallback: float) -> float:
    """
    Convert an F bound into an ICC bound.

    An infinite F bound takes the limit of (F-1)/(F+k-1), which is 1. An
    undefined bound (0 * inf or inf / inf) collapses to the point estimate.
    """
    if math.isnan(f_value):
        return fallback
    if math.isinf(f_value):
        return 1.0
    denominator = f_value + k - 1
    if denominator == 0:
        return fallback
    return _clamp01((f_value - 1) / denominator)


def calculate_icc(matrix: RatingMatrix) -> Optional[IccResult]:
    """
    Compute ICC(2,1) for a sparse rating matrix.

    Args:
        matrix: Dict mapping subject_id -> rater_id -> score

    Returns:
        IccResult, or None when there is not enough data to assess reliability
    """
    _, raters, ratings = to_dense_grid(matrix)
    n, k = ratings.shape

    if n < 2 or k < 2:
        return None

    dfr = n - 1
    dfc = k - 1
    dfe = dfr * dfc
    if dfe == 0:
        return None

    valid = ~np.isnan(ratings)
    if not valid.any():
        return None

    # Every row and column holds at least one score, so no mean is NaN
    row_means = np.nanmean(ratings, axis=1)
    col_means = np.nanmean(ratings, axis=0)
    grand_mean = float(np.mean(ratings[valid]))

    ss_rows = k * float(np.sum((row_means - grand_mean) ** 2))
    ss_cols = n * float(np.sum((col_means - grand_mean) ** 2))
    ss_total = float(np.nansum((ratings - grand_mean) ** 2))
    # Residual by subtraction; may go negative on sparse matrices
    ss_error = ss_total - ss_rows - ss_cols

    ms_rows = ss_rows / dfr
    ms_cols = ss_cols / dfc
    ms_error = ss_error / dfe

    numerator = ms_rows - ms_error
    denominator = ms_rows + (k - 1) * ms_error + (k / n) * (ms_cols - ms_error)
    if denominator == 0:
        if numerator == 0:
            # No variance at all to partition
            return None
        icc = math.copysign(math.inf, numerator)
    else:
        icc = numerator / denominator
    clamped_icc = _clamp01(icc)

    if ms_error == 0:
        f = math.inf if ms_rows > 0 else 0.0
    else:
        f = ms_rows / ms_error

    # Simplified Shrout & Fleiss CI
    if clamped_icc < 1:
        spread = 1 + k * clamped_icc / (1 - clamped_icc)
    else:
        spread = math.inf
    f_lower = f / spread
    f_upper = f * spread

    ci95_lower = _ci_bound(f_lower, k, clamped_icc)
    ci95_upper = _ci_bound(f_upper, k, clamped_icc)

    return IccResult(
        icc=round_half_up(clamped_icc, 3),
        f=round_half_up(f, 2),
        df1=dfr,
        df2=dfe,
        ci95_lower=round_half_up(ci95_lower, 3),
        ci95_upper=round_half_up(ci95_upper, 3),
        n=n,
        k=len(raters),
        interpretation=interpret_icc(clamped_icc),
    )
