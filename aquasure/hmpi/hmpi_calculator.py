"""
hmpi_calculator.py
Heavy Metal Pollution Index (HMPI) computation and risk classification.

    HMPI = (Si / Ii) * Mi * 100

rounded to two decimals, half up.

Usage:
    from aquasure.hmpi.hmpi_calculator import compute_index, classify
"""

import math
from decimal import ROUND_HALF_UP, Decimal

from aquasure.hmpi.errors import InvalidInputError
from aquasure.hmpi.models import RiskCategory, RiskLevel
from aquasure.hmpi.validation import validate_measurements


# -----------------------------------------------------
# 1. RISK BANDS (lower bound inclusive, highest first)
# -----------------------------------------------------
RISK_BANDS = [
    (100, RiskCategory.VERY_HIGH, "#DC2626"),
    (50,  RiskCategory.HIGH,      "#EA580C"),
    (25,  RiskCategory.MODERATE,  "#D97706"),
    (10,  RiskCategory.LOW,       "#65A30D"),
]
SAFE = RiskLevel(RiskCategory.SAFE, "#059669")

# Binary noise below this is dropped before rounding, so 12.345 rounds as 12.345
_NOISE_DIGITS = 10
_EXACT_LIMIT = 1e15


# -----------------------------------------------------
# Helper Function: decimal half-up rounding
# -----------------------------------------------------
def round_half_up(value, places=2):
    if abs(value) >= _EXACT_LIMIT:
        return float(value)
    cleaned = Decimal(repr(round(value, _NOISE_DIGITS)))
    step = Decimal(1).scaleb(-places)
    return float(cleaned.quantize(step, rounding=ROUND_HALF_UP))


# -----------------------------------------------------
# 2. INDEX CALCULATOR
# -----------------------------------------------------
def compute_index(si, ii, mi):
    """
    Si = measured concentration (mg/L), must be >= 0
    Ii = permissible limit (mg/L), must be > 0
    Mi = relative weight, must be >= 0

    Raises InvalidInputError instead of returning inf/NaN.
    """
    si, ii, mi = validate_measurements(si, ii, mi)
    raw = (si / ii) * mi * 100
    if not math.isfinite(raw):
        raise InvalidInputError("hmpi", raw, "index overflowed")
    return round_half_up(raw)


def sample_index(sample):
    return compute_index(sample.si, sample.ii, sample.mi)


# -----------------------------------------------------
# 3. RISK CLASSIFIER
# -----------------------------------------------------
def classify(hmpi):
    """Map any real HMPI value to its risk level. Negative values are Safe."""
    hmpi = float(hmpi)
    for low, category, color in RISK_BANDS:
        if hmpi >= low:
            return RiskLevel(category, color)
    return SAFE


def classify_sample(sample):
    return classify(sample_index(sample))
