import io
from datetime import date

import pytest

from aquasure.hmpi.clean_data import (
    TEMPLATE_HEADERS,
    fill_defaults,
    load_samples,
    parse_number,
    read_samples_csv,
    record_to_sample,
)
from aquasure.hmpi.errors import InvalidInputError


def _csv(*rows):
    return io.StringIO("\n".join([",".join(TEMPLATE_HEADERS), *rows]) + "\n")


def test_reads_upload_template():
    buf = _csv(
        "GNG-008,p1,Varanasi,Varanasi,25.3176,82.9739,Lead,0.09,0.3,0.7,2025-01-20",
        "YMN-006,p2,New Delhi,Delhi,28.7041,77.1025,Arsenic,0.05,0.2,0.5,2025-02-12",
    )
    samples, rejected = read_samples_csv(buf)
    assert rejected == []
    assert [s.sample_id for s in samples] == ["GNG-008", "YMN-006"]
    first = samples[0]
    assert (first.si, first.ii, first.mi) == (0.09, 0.3, 0.7)
    assert first.latitude == 25.3176
    assert first.date == date(2025, 1, 20)
    assert first.district == "Varanasi"


def test_malformed_rows_are_rejected_not_coerced():
    buf = _csv(
        "A-1,p1,Varanasi,Varanasi,,,Lead,abc,0.3,0.7,2025-01-20",
        "A-2,p1,Varanasi,Varanasi,,,Lead,0.09,0,0.7,2025-01-20",
        "A-3,p1,Varanasi,Varanasi,,,Lead,0.09,,0.7,2025-01-20",
        "A-4,p1,Varanasi,Varanasi,,,Lead,0.09,0.3,0.7,2025-01-20",
    )
    samples, rejected = read_samples_csv(buf)
    assert [s.sample_id for s in samples] == ["A-4"]
    assert [(r.row, r.sample_id) for r in rejected] == [(1, "A-1"), (2, "A-2"), (3, "A-3")]
    assert "si" in rejected[0].reason
    assert samples[0].latitude is None


def test_fill_missing_only_fills_absent_values():
    buf = _csv(
        "B-1,p1,Varanasi,Varanasi,,,Lead,,,,",
        "B-2,p1,Varanasi,Varanasi,,,Lead,abc,,,2025-01-20",
    )
    samples, rejected = read_samples_csv(buf, fill_missing=True)
    assert len(samples) == 1
    assert (samples[0].si, samples[0].ii, samples[0].mi) == (0.0, 1.0, 1.0)
    assert [r.sample_id for r in rejected] == ["B-2"]


def test_fill_defaults(today):
    filled = fill_defaults({"sample_id": "C-1", "si": "", "ii": None, "mi": 0.4}, today=today)
    assert filled == {"sample_id": "C-1", "si": 0.0, "ii": 1.0, "mi": 0.4, "date": "2025-03-01"}


def test_fill_defaults_does_not_mutate():
    record = {"si": None}
    fill_defaults(record)
    assert record == {"si": None}


def test_duplicate_ids_within_project_rejected():
    records = [
        {"sample_id": "D-1", "project_id": "p1", "metal": "Lead", "si": 0.1, "ii": 0.3, "mi": 0.7, "date": "2025-01-01"},
        {"sample_id": "D-1", "project_id": "p2", "metal": "Lead", "si": 0.1, "ii": 0.3, "mi": 0.7, "date": "2025-01-01"},
        {"sample_id": "D-1", "project_id": "p1", "metal": "Lead", "si": 0.2, "ii": 0.3, "mi": 0.7, "date": "2025-01-02"},
    ]
    samples, rejected = load_samples(records)
    assert [s.project_id for s in samples] == ["p1", "p2"]
    assert len(rejected) == 1
    assert rejected[0].row == 3
    assert "duplicate" in rejected[0].reason


def test_camel_case_records():
    sample = record_to_sample({
        "sampleId": "E-1", "projectId": "p1", "Metal": "Lead",
        "Si": "0.05", "Ii": "0.2", "Mi": "0.5", "Date": "2025-02-07",
    })
    assert sample.sample_id == "E-1"
    assert sample.si == 0.05


def test_parse_number():
    assert parse_number("si", " 0.25 ") == 0.25
    assert parse_number("si", "") is None
    assert parse_number("si", 3) == 3
    with pytest.raises(InvalidInputError):
        parse_number("si", "1,5")


def test_empty_file_is_invalid_input():
    with pytest.raises(InvalidInputError) as exc:
        read_samples_csv(io.StringIO(""))
    assert exc.value.field == "file"


def test_header_only_file_loads_nothing():
    assert read_samples_csv(_csv()) == ([], [])
