"""
Reliability analytics settings, read from environment variables.
"""

import os

# At least 2 evaluators x 2 interviews before an ICC is attempted
MIN_EVALUATIONS = int(os.environ.get("RELIABILITY_MIN_EVALUATIONS", "4"))

# Evaluators below this ICC against the panel are flagged for calibration
CALIBRATION_THRESHOLD = float(os.environ.get("RELIABILITY_CALIBRATION_THRESHOLD", "0.5"))

# Dashboard band boundary between "moderate" and "good" reliability
GOOD_THRESHOLD = float(os.environ.get("RELIABILITY_GOOD_THRESHOLD", "0.75"))

DEFAULT_ASSESSMENT = os.environ.get("RELIABILITY_DEFAULT_ASSESSMENT", "default")
