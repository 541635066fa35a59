"""
clean_data.py
Ingestion boundary for sample rows: normalise column names from the upload
template, optionally fill missing measurements with their defaults, reject
malformed rows and build validated Samples.

Usage:
    from aquasure.hmpi.clean_data import read_samples_csv
    samples, rejected = read_samples_csv("samples.csv", fill_missing=True)
"""

import logging
from datetime import date

import pandas as pd

from aquasure.hmpi.errors import InvalidInputError
from aquasure.hmpi.models import Rejection, Sample

logger = logging.getLogger(__name__)


# Upload template headers and camelCase variants -> record field names
RENAME_MAP = {
    "SampleID": "sample_id",
    "sampleId": "sample_id",
    "ProjectID": "project_id",
    "projectId": "project_id",
    "District": "district",
    "City": "city",
    "Latitude": "latitude",
    "Longitude": "longitude",
    "Metal": "metal",
    "Si": "si",
    "Ii": "ii",
    "Mi": "mi",
    "Date": "date",
}

TEMPLATE_HEADERS = [
    "SampleID", "ProjectID", "District", "City", "Latitude", "Longitude",
    "Metal", "Si", "Ii", "Mi", "Date",
]

# Applied only when a value is absent, never to malformed text
MEASUREMENT_DEFAULTS = {"si": 0.0, "ii": 1.0, "mi": 1.0}

NUMERIC_FIELDS = ("si", "ii", "mi")


def _is_missing(value):
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return isinstance(value, float) and pd.isna(value)


def normalize_columns(df):
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]
    return df.rename(columns={c: RENAME_MAP[c] for c in df.columns if c in RENAME_MAP})


def normalize_record(record):
    return {RENAME_MAP.get(str(k).strip(), str(k).strip()): v for k, v in record.items()}


def fill_defaults(record, today=None):
    """
    Return a copy of `record` with absent si/ii/mi set to 0/1/1 and an absent
    date set to `today`. Present-but-malformed values are left for rejection.
    """
    filled = dict(record)
    for name, default in MEASUREMENT_DEFAULTS.items():
        if _is_missing(filled.get(name)):
            filled[name] = default
    if _is_missing(filled.get("date")):
        filled["date"] = (today or date.today()).isoformat()
    return filled


def parse_number(field, value):
    """Strict text -> float. Missing stays None so the model rejects it."""
    if _is_missing(value):
        return None
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise InvalidInputError(field, value, "not a number") from None
    return value


def record_to_sample(record, fill_missing=False):
    record = normalize_record(record)
    if fill_missing:
        record = fill_defaults(record)
    for name in NUMERIC_FIELDS:
        record[name] = parse_number(name, record.get(name))
    return Sample.from_record(record)


# -----------------------------------------------------
# Batch loading (skip-and-report)
# -----------------------------------------------------
def load_samples(records, fill_missing=False):
    """
    Build Samples from raw records. Bad rows are skipped, logged and returned
    as Rejections (row numbers start at 1); so are sample ids repeated within
    the same project.
    """
    samples, rejections = [], []
    seen = set()

    for row, record in enumerate(records, start=1):
        sample_id = str(normalize_record(record).get("sample_id") or "")
        try:
            sample = record_to_sample(record, fill_missing=fill_missing)
        except InvalidInputError as e:
            logger.warning("Rejected row %d (%s): %s", row, sample_id or "?", e)
            rejections.append(Rejection(sample_id, str(e), row))
            continue

        key = (sample.project_id, sample.sample_id)
        if key in seen:
            reason = f"duplicate sample id {sample.sample_id!r} in project {sample.project_id!r}"
            logger.warning("Rejected row %d: %s", row, reason)
            rejections.append(Rejection(sample.sample_id, reason, row))
            continue

        seen.add(key)
        samples.append(sample)

    logger.info("Loaded %d samples, rejected %d rows", len(samples), len(rejections))
    return samples, rejections


def read_samples_csv(path_or_buffer, fill_missing=False):
    """A header-only file loads nothing; a file with no header at all is an InvalidInputError."""
    try:
        df = pd.read_csv(path_or_buffer, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        raise InvalidInputError("file", None, "CSV file is empty") from None
    df = normalize_columns(df)
    return load_samples(df.to_dict(orient="records"), fill_missing=fill_missing)
