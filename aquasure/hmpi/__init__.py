"""
Heavy Metal Pollution Index computation, risk classification, compliance,
alerting and aggregation.
"""

from aquasure.hmpi.aggregation import (
    average_index,
    group_by_key,
    high_risk_count,
    time_series,
    trend_delta,
)
from aquasure.hmpi.alerts import evaluate, evaluate_batch
from aquasure.hmpi.compliance import compliance_rate, is_compliant
from aquasure.hmpi.errors import (
    HMPIError,
    InvalidInputError,
    MissingReferenceError,
    MissingStandardError,
)
from aquasure.hmpi.hmpi_calculator import classify, compute_index
from aquasure.hmpi.models import Alert, Policy, Project, RiskCategory, RiskLevel, Sample, Severity
from aquasure.hmpi.standards import STANDARDS

__all__ = [
    "Alert",
    "HMPIError",
    "InvalidInputError",
    "MissingReferenceError",
    "MissingStandardError",
    "Policy",
    "Project",
    "RiskCategory",
    "RiskLevel",
    "STANDARDS",
    "Sample",
    "Severity",
    "average_index",
    "classify",
    "compliance_rate",
    "compute_index",
    "evaluate",
    "evaluate_batch",
    "group_by_key",
    "high_risk_count",
    "is_compliant",
    "time_series",
    "trend_delta",
]
