"""
alerts.py
Threshold-based alert evaluation for individual samples.

Severity, first match wins:
    high    Si > WHO limit and the sample HMPI > project policy threshold
    medium  Si >= BBI limit
    low     Si within both standards but HMPI > caution threshold
            (only when a caution threshold is configured)
"""

import logging

from aquasure.hmpi.compliance import lookup_limit, resolve_project
from aquasure.hmpi.errors import HMPIError, MissingReferenceError
from aquasure.hmpi.hmpi_calculator import sample_index
from aquasure.hmpi.models import Alert, Rejection, Severity
from aquasure.hmpi.standards import BBI, WHO

logger = logging.getLogger(__name__)


def decide_severity(sample, project, standards, caution_threshold=None):
    """Return the Severity for a sample, or None when no alert condition holds."""
    if sample.project_id != project.project_id:
        raise MissingReferenceError(sample.sample_id, sample.project_id)

    who_limit = lookup_limit(standards[WHO], sample.metal, WHO)
    bbi_limit = lookup_limit(standards[BBI], sample.metal, BBI)
    hmpi = sample_index(sample)

    if sample.si > who_limit and hmpi > project.policy_threshold:
        return Severity.HIGH
    if sample.si >= bbi_limit:
        return Severity.MEDIUM
    if (
        caution_threshold is not None
        and sample.si <= who_limit
        and hmpi > caution_threshold
    ):
        return Severity.LOW
    return None


def build_message(severity, sample, project, standards, caution_threshold=None):
    metal, si, sid = sample.metal, sample.si, sample.sample_id
    who_limit = standards[WHO][metal]
    bbi_limit = standards[BBI][metal]
    hmpi = sample_index(sample)

    if severity is Severity.HIGH:
        return (
            f"{metal} levels ({si:g} mg/L) exceeded WHO safe limits ({who_limit:g} mg/L) "
            f"in sample {sid}; HMPI {hmpi:g} is above the project threshold "
            f"({project.policy_threshold:g})."
        )
    if severity is Severity.MEDIUM:
        verb = "equal to" if si == bbi_limit else "exceeded"
        return (
            f"{metal} levels ({si:g} mg/L) {verb} BBI threshold ({bbi_limit:g} mg/L) "
            f"in sample {sid}."
        )
    return (
        f"{metal} levels ({si:g} mg/L) are within WHO ({who_limit:g} mg/L) and BBI "
        f"({bbi_limit:g} mg/L) limits in sample {sid}, but HMPI {hmpi:g} is above "
        f"the caution value ({caution_threshold:g})."
    )


def evaluate(sample, project, standards, caution_threshold=None, now=None):
    """
    Decide whether `sample` raises an alert. Returns an unacknowledged Alert
    or None. The severity is a pure function of the inputs.
    """
    severity = decide_severity(sample, project, standards, caution_threshold)
    if severity is None:
        return None

    extra = {"created_at": now} if now is not None else {}
    return Alert(
        project_id=project.project_id,
        sample_id=sample.sample_id,
        message=build_message(severity, sample, project, standards, caution_threshold),
        severity=severity,
        acknowledged=False,
        **extra,
    )


def evaluate_batch(samples, projects, standards, caution_threshold=None, now=None):
    """
    Evaluate every sample; `projects` maps project id -> Project.

    A sample whose project or standard is missing is skipped and reported,
    it never aborts the batch. Returns (alerts, rejections).
    """
    alerts, rejections = [], []
    evaluated = 0
    for sample in samples:
        evaluated += 1
        try:
            project = resolve_project(sample, projects)
            alert = evaluate(sample, project, standards, caution_threshold, now)
        except HMPIError as e:
            logger.warning("Skipping sample %s: %s", sample.sample_id, e)
            rejections.append(Rejection(sample.sample_id, str(e)))
            continue
        if alert is not None:
            alerts.append(alert)

    logger.info(
        "Evaluated %d samples: %d alerts, %d skipped",
        evaluated, len(alerts), len(rejections),
    )
    return alerts, rejections
