from datetime import datetime, timezone

import pytest

from aquasure.hmpi.alerts import decide_severity, evaluate, evaluate_batch
from aquasure.hmpi.errors import MissingReferenceError, MissingStandardError
from aquasure.hmpi.models import Severity


NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_who_exceedance_below_policy_threshold_is_medium(sample_factory, projects, standards):
    # HMPI 21 against threshold 100: rule 1 does not fire, BBI 0.05 is exceeded
    sample = sample_factory(sample_id="GNG-001", si=0.09, ii=0.3, mi=0.7)
    alert = evaluate(sample, projects["p1"], standards, now=NOW)
    assert alert.severity is Severity.MEDIUM
    assert alert.acknowledged is False
    assert alert.created_at == NOW
    assert "Lead" in alert.message
    assert "0.09" in alert.message
    assert "0.05" in alert.message
    assert "GNG-001" in alert.message


def test_who_exceedance_above_policy_threshold_is_high(sample_factory, projects, standards):
    sample = sample_factory(sample_id="GNG-009", si=0.5, ii=0.3, mi=0.7)
    alert = evaluate(sample, projects["p1"], standards)
    assert alert.severity is Severity.HIGH
    assert alert.project_id == "p1"
    assert alert.sample_id == "GNG-009"
    assert "0.5" in alert.message
    assert "0.01" in alert.message
    assert "GNG-009" in alert.message


def test_equal_to_bbi_is_medium(samples, projects, standards):
    arsenic = next(s for s in samples if s.sample_id == "YMN-004")
    alert = evaluate(arsenic, projects["p2"], standards)
    assert alert.severity is Severity.MEDIUM
    assert "equal to" in alert.message


def test_within_standards_without_caution_threshold(samples, projects, standards):
    chromium = next(s for s in samples if s.sample_id == "CVR-007")
    assert evaluate(chromium, projects["p3"], standards) is None


def test_caution_threshold_enables_low(samples, projects, standards):
    chromium = next(s for s in samples if s.sample_id == "CVR-007")  # HMPI 12
    alert = evaluate(chromium, projects["p3"], standards, caution_threshold=5)
    assert alert.severity is Severity.LOW
    assert "5" in alert.message
    assert evaluate(chromium, projects["p3"], standards, caution_threshold=12) is None


def test_who_exceedance_alone_never_low(samples, projects, standards):
    arsenic = next(s for s in samples if s.sample_id == "GDV-003")  # 0.035: > WHO, < BBI
    assert evaluate(arsenic, projects["p5"], standards, caution_threshold=5) is None


def test_severity_is_idempotent(samples, projects, standards):
    for sample in samples:
        project = projects[sample.project_id]
        first = decide_severity(sample, project, standards, caution_threshold=5)
        assert decide_severity(sample, project, standards, caution_threshold=5) is first


def test_project_mismatch(sample_factory, projects, standards):
    with pytest.raises(MissingReferenceError):
        evaluate(sample_factory(project_id="p2"), projects["p1"], standards)


def test_unknown_metal(sample_factory, projects, standards):
    with pytest.raises(MissingStandardError):
        evaluate(sample_factory(metal="Zinc"), projects["p1"], standards)


def test_batch_skips_and_reports(samples, sample_factory, projects, standards):
    batch = samples + [
        sample_factory(sample_id="X-1", project_id="p9"),
        sample_factory(sample_id="X-2", metal="Zinc"),
    ]
    alerts, rejected = evaluate_batch(batch, projects, standards)

    assert sorted(a.sample_id for a in alerts) == [
        "GNG-001", "GNG-002", "NRM-001", "YMN-004", "YMN-005",
    ]
    assert all(a.severity is Severity.MEDIUM for a in alerts)
    assert [r.sample_id for r in rejected] == ["X-1", "X-2"]
    assert "p9" in rejected[0].reason


def test_alert_record_shape(sample_factory, projects, standards):
    alert = evaluate(sample_factory(si=0.5), projects["p1"], standards, now=NOW)
    record = alert.to_record()
    assert record["severity"] == "high"
    assert record["acknowledged"] is False
    assert record["created_at"] == "2025-03-01T12:00:00+00:00"
    assert set(record) == {
        "id", "project_id", "sample_id", "message", "severity", "acknowledged", "created_at",
    }
