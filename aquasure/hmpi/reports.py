"""
reports.py
Tabular views over computed samples: the HMPI calculation table and its CSV
export, report summaries and map points.

Usage:
    from aquasure.hmpi.reports import calculation_table, export_csv
    df = calculation_table(samples, projects, STANDARDS)
    export_csv(df)
"""

import pandas as pd

from aquasure.hmpi.aggregation import average_index, high_risk_count, mean, risk_distribution
from aquasure.hmpi.compliance import exceeds_limit, policy_compliant, resolve_project
from aquasure.hmpi.hmpi_calculator import classify, round_half_up, sample_index
from aquasure.hmpi.standards import BBI, WHO


CALCULATION_COLUMNS = [
    "Sample ID", "Project", "Metal", "Si (mg/L)", "Ii", "Mi", "HMPI", "Risk Level",
    "WHO Standard", "BBI Standard", "Exceeds WHO", "Exceeds BBI", "Exceeds Policy",
]


def _yes_no(flag):
    if flag is None:
        return "N/A"
    return "Yes" if flag else "No"


# -----------------------------------------------------
# 1. Per-sample calculation rows
# -----------------------------------------------------
def calculation_rows(samples, projects, standards):
    """
    One dict per sample with HMPI, risk level and compliance flags.
    `projects` maps project id -> Project. Exceedance flags are None for
    metals the standard does not list.
    """
    rows = []
    for sample in samples:
        project = resolve_project(sample, projects)
        hmpi = sample_index(sample)
        risk = classify(hmpi)
        rows.append({
            "sample_id": sample.sample_id,
            "project_id": project.project_id,
            "project": project.short_name,
            "metal": sample.metal,
            "district": sample.district,
            "si": sample.si,
            "ii": sample.ii,
            "mi": sample.mi,
            "hmpi": hmpi,
            "risk_level": risk.level,
            "risk_color": risk.color,
            "who_standard": standards[WHO].get(sample.metal),
            "bbi_standard": standards[BBI].get(sample.metal),
            "policy_threshold": project.policy_threshold,
            "exceeds_who": exceeds_limit(sample, standards[WHO]),
            "exceeds_bbi": exceeds_limit(sample, standards[BBI]),
            "exceeds_policy": not policy_compliant(hmpi, project),
        })
    return rows


def calculation_stats(rows):
    return {
        "total_samples": len(rows),
        "average_hmpi": round_half_up(mean(r["hmpi"] for r in rows)),
        "exceeds_who": sum(1 for r in rows if r["exceeds_who"]),
        "exceeds_bbi": sum(1 for r in rows if r["exceeds_bbi"]),
        "exceeds_policy": sum(1 for r in rows if r["exceeds_policy"]),
        "high_risk": sum(1 for r in rows if r["risk_level"] in ("High Risk", "Very High Risk")),
    }


# -----------------------------------------------------
# 2. Calculation table / CSV export
# -----------------------------------------------------
def calculation_table(samples, projects, standards):
    rows = calculation_rows(samples, projects, standards)
    df = pd.DataFrame([
        {
            "Sample ID": r["sample_id"],
            "Project": r["project"],
            "Metal": r["metal"],
            "Si (mg/L)": r["si"],
            "Ii": r["ii"],
            "Mi": r["mi"],
            "HMPI": r["hmpi"],
            "Risk Level": r["risk_level"],
            "WHO Standard": r["who_standard"],
            "BBI Standard": r["bbi_standard"],
            "Exceeds WHO": _yes_no(r["exceeds_who"]),
            "Exceeds BBI": _yes_no(r["exceeds_bbi"]),
            "Exceeds Policy": _yes_no(r["exceeds_policy"]),
        }
        for r in rows
    ], columns=CALCULATION_COLUMNS)
    return df


def export_csv(df):
    """Render a report frame as CSV text (header row = column names)."""
    return df.to_csv(index=False, lineterminator="\n")


# -----------------------------------------------------
# 3. Report summary / map points
# -----------------------------------------------------
def report_summary(samples):
    samples = list(samples)
    return {
        "total_samples": len(samples),
        "average_hmpi": round_half_up(average_index(samples)),
        "high_risk": high_risk_count(samples),
        "risk_distribution": risk_distribution(samples),
    }


def map_points(samples):
    """Located samples with their HMPI and marker color; unlocated ones are left out."""
    points = []
    for sample in samples:
        if not sample.has_location:
            continue
        hmpi = sample_index(sample)
        risk = classify(hmpi)
        points.append({
            "sample_id": sample.sample_id,
            "project_id": sample.project_id,
            "metal": sample.metal,
            "latitude": sample.latitude,
            "longitude": sample.longitude,
            "district": sample.district,
            "city": sample.city,
            "hmpi": hmpi,
            "risk_level": risk.level,
            "color": risk.color,
        })
    return points
