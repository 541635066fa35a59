"""
aggregation.py
Statistics over collections of samples: averages, grouping, risk counts,
monthly time series, trend deltas and the comparison tables used by the
dashboard, trends and comparison views.

Every function is a fold over the sequence it is given. Empty input yields 0
(or an empty result), never NaN. Sums use math.fsum, so results do not depend
on the order of the input samples.
"""

import math
from typing import NamedTuple

from aquasure.hmpi.compliance import is_compliant, lookup_limit, percentage, resolve_project
from aquasure.hmpi.hmpi_calculator import classify, round_half_up, sample_index
from aquasure.hmpi.models import RiskCategory
from aquasure.hmpi.standards import BBI, WHO


class TimeBucket(NamedTuple):
    bucket: str
    average_index: float
    count: int


def mean(values):
    values = list(values)
    if not values:
        return 0.0
    return math.fsum(values) / len(values)


def average_index(samples):
    """Mean HMPI; 0.0 for an empty sequence."""
    return mean(sample_index(s) for s in samples)


def group_by_key(samples, key_fn):
    """
    Stable partition: groups appear in first-seen order and keep the input
    order of their members.
    """
    groups = {}
    for sample in samples:
        groups.setdefault(key_fn(sample), []).append(sample)
    return groups


def is_high_risk(sample):
    return classify(sample_index(sample)).category.is_high


def high_risk_count(samples):
    return sum(1 for s in samples if is_high_risk(s))


def risk_distribution(samples):
    """Sample count per risk level, every level present, Safe first."""
    counts = {category.value: 0 for category in RiskCategory}
    for sample in samples:
        counts[classify(sample_index(sample)).level] += 1
    return counts


# -----------------------------------------------------
# Time series
# -----------------------------------------------------
def month_bucket(sample):
    return sample.date.strftime("%Y-%m")


def time_series(samples, bucket_fn=month_bucket):
    """
    Average HMPI per bucket, ordered by bucket key. Each bucket is summed
    once and divided once.
    """
    groups = group_by_key(samples, bucket_fn)
    return [
        TimeBucket(bucket, average_index(members), len(members))
        for bucket, members in sorted(groups.items(), key=lambda item: item[0])
    ]


def trend_delta(series):
    """
    Last bucket average minus first. Negative means improving, positive
    worsening; 0.0 with fewer than two buckets.
    """
    if len(series) < 2:
        return 0.0
    return series[-1].average_index - series[0].average_index


# -----------------------------------------------------
# Group summaries
# -----------------------------------------------------
def district_summary(samples):
    """Per-district average HMPI and high-risk count, worst first."""
    rows = []
    for district, members in group_by_key(samples, lambda s: s.district).items():
        high = high_risk_count(members)
        rows.append({
            "district": district,
            "avg_hmpi": round_half_up(average_index(members)),
            "samples": len(members),
            "high_risk": high,
            "risk_percent": round(percentage(high, len(members)), 1),
        })
    rows.sort(key=lambda row: row["avg_hmpi"], reverse=True)
    return rows


def metal_summary(samples):
    rows = []
    for metal, members in group_by_key(samples, lambda s: s.metal).items():
        rows.append({
            "metal": metal,
            "avg_hmpi": round_half_up(average_index(members)),
            "avg_concentration": round(mean(s.si for s in members), 4),
            "samples": len(members),
        })
    return rows


def hotspot_districts(samples):
    """Districts with at least one High or Very High sample, first-seen order."""
    return list(group_by_key(
        (s for s in samples if is_high_risk(s)), lambda s: s.district
    ))


def trend_summary(samples):
    samples = list(samples)
    series = time_series(samples)
    districts = district_summary(samples)
    return {
        "total_samples": len(samples),
        "avg_hmpi": round_half_up(average_index(samples)),
        "trend": round_half_up(trend_delta(series)),
        "hotspots": hotspot_districts(samples),
        "low_pollution_districts": [d["district"] for d in districts if d["avg_hmpi"] < 25],
        "attention_districts": [d["district"] for d in districts if d["avg_hmpi"] > 50],
    }


# -----------------------------------------------------
# Comparisons
# -----------------------------------------------------
def _index_stats(members):
    indices = [sample_index(s) for s in members]
    high = high_risk_count(members)
    return {
        "samples": len(members),
        "avg_hmpi": round_half_up(mean(indices)),
        "max_hmpi": max(indices),
        "min_hmpi": min(indices),
        "high_risk": high,
        "risk_percent": round(percentage(high, len(members)), 1),
    }


def compare_projects(samples, projects, project_ids):
    """`projects` maps project id -> Project; projects without samples are omitted."""
    by_project = group_by_key(samples, lambda s: s.project_id)
    rows = []
    for project_id in project_ids:
        members = by_project.get(project_id)
        project = projects.get(project_id)
        if not members or project is None:
            continue
        rows.append({"project_id": project_id, "name": project.short_name, **_index_stats(members)})
    return rows


def compare_metals(samples, standards, metals):
    by_metal = group_by_key(samples, lambda s: s.metal)
    rows = []
    for metal in metals:
        members = by_metal.get(metal)
        if not members:
            continue
        who_limit = lookup_limit(standards[WHO], metal, WHO)
        bbi_limit = lookup_limit(standards[BBI], metal, BBI)
        who_violations = sum(1 for s in members if not is_compliant(s.si, who_limit))
        bbi_violations = sum(1 for s in members if not is_compliant(s.si, bbi_limit))
        rows.append({
            "metal": metal,
            "samples": len(members),
            "avg_hmpi": round_half_up(average_index(members)),
            "avg_concentration": round(mean(s.si for s in members), 4),
            "who_limit": who_limit,
            "bbi_limit": bbi_limit,
            "who_violations": who_violations,
            "bbi_violations": bbi_violations,
            "who_compliance_rate": round(percentage(len(members) - who_violations, len(members)), 1),
            "bbi_compliance_rate": round(percentage(len(members) - bbi_violations, len(members)), 1),
        })
    return rows


def compare_districts(samples, districts):
    by_district = group_by_key(samples, lambda s: s.district)
    rows = []
    for district in districts:
        members = by_district.get(district)
        if not members:
            continue
        stats = _index_stats(members)
        rows.append({
            "district": district,
            "samples": stats["samples"],
            "projects": len({s.project_id for s in members}),
            "metals": len({s.metal for s in members}),
            "avg_hmpi": stats["avg_hmpi"],
            "high_risk": stats["high_risk"],
            "risk_percent": stats["risk_percent"],
        })
    return rows


def compare_standards(samples, standards):
    """Average concentration per metal next to its WHO and BBI limits (None if unknown)."""
    rows = []
    for metal, members in group_by_key(samples, lambda s: s.metal).items():
        rows.append({
            "metal": metal,
            "avg_concentration": round(mean(s.si for s in members), 4),
            "who_standard": standards[WHO].get(metal),
            "bbi_standard": standards[BBI].get(metal),
            "samples": len(members),
        })
    return rows


def dashboard_summary(samples, projects, alerts):
    """
    Headline numbers for the dashboard. `projects` maps project id -> Project;
    every sample must belong to one of them.
    """
    samples = list(samples)
    for sample in samples:
        resolve_project(sample, projects)

    open_alerts = [a for a in alerts if not a.acknowledged]
    by_project = group_by_key(samples, lambda s: s.project_id)
    project_rows = []
    for project_id, project in projects.items():
        members = by_project.get(project_id, [])
        project_rows.append({
            "project_id": project_id,
            "name": project.name,
            "samples": len(members),
            "alerts": sum(1 for a in open_alerts if a.project_id == project_id),
            "avg_hmpi": round_half_up(average_index(members)),
        })

    return {
        "total_samples": len(samples),
        "total_projects": len(projects),
        "avg_hmpi": round_half_up(average_index(samples)),
        "high_risk": high_risk_count(samples),
        "unacknowledged_alerts": len(open_alerts),
        "risk_distribution": risk_distribution(samples),
        "projects": project_rows,
    }
