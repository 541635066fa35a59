"""
compliance.py
Compliance of sample concentrations against reference standards, metal-specific
policies and project HMPI thresholds. Equality always counts as compliant.
"""

from aquasure.hmpi.errors import InvalidInputError, MissingReferenceError, MissingStandardError
from aquasure.hmpi.hmpi_calculator import sample_index
from aquasure.hmpi.standards import BBI, WHO


def is_compliant(concentration, limit):
    return concentration <= limit


def lookup_limit(standard, metal, authority=None):
    try:
        return standard[metal]
    except KeyError:
        raise MissingStandardError(metal, authority) from None


def exceeds_limit(sample, standard):
    """Tri-state: True/False when the metal is known, None when it is not."""
    limit = standard.get(sample.metal)
    if limit is None:
        return None
    return not is_compliant(sample.si, limit)


def percentage(part, whole):
    if whole == 0:
        return 0.0
    return part / whole * 100


def compliance_rate(samples, standard, authority=None):
    """
    Percentage (0-100) of samples whose concentration is within the limit for
    their metal. Unknown metals raise MissingStandardError; an empty sequence
    returns 0.
    """
    samples = list(samples)
    compliant = sum(
        1 for s in samples
        if is_compliant(s.si, lookup_limit(standard, s.metal, authority))
    )
    return percentage(compliant, len(samples))


def policy_compliant(hmpi, project):
    """Project policy compares the index, not the raw concentration."""
    return is_compliant(hmpi, project.policy_threshold)


def complies_with_policy(sample, policy):
    if sample.metal != policy.metal:
        raise InvalidInputError(
            "metal", sample.metal, f"policy {policy.name!r} applies to {policy.metal}"
        )
    return is_compliant(sample.si, policy.threshold)


def resolve_project(sample, projects):
    try:
        return projects[sample.project_id]
    except KeyError:
        raise MissingReferenceError(sample.sample_id, sample.project_id) from None


def compliance_stats(samples, projects, standards):
    """
    WHO, BBI and project-policy compliance percentages over a sample set.

    `projects` maps project id -> Project. Fails fast with MissingStandardError
    or MissingReferenceError, like `compliance_rate`.
    """
    samples = list(samples)
    policy_ok = sum(
        1 for s in samples
        if policy_compliant(sample_index(s), resolve_project(s, projects))
    )
    return {
        "total_samples": len(samples),
        "who_compliance": round(compliance_rate(samples, standards[WHO], WHO), 1),
        "bbi_compliance": round(compliance_rate(samples, standards[BBI], BBI), 1),
        "policy_compliance": round(percentage(policy_ok, len(samples)), 1),
    }


def threshold_impact(samples, threshold):
    """How many samples a candidate HMPI threshold would flag."""
    samples = list(samples)
    affected = [s for s in samples if sample_index(s) > threshold]
    return {
        "threshold": threshold,
        "affected_count": len(affected),
        "affected_percent": round(percentage(len(affected), len(samples)), 1),
    }
