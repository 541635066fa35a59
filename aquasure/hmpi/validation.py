"""
validation.py
Strict numeric and date checks shared by the data model and the index calculator.
Nothing here fills defaults: missing or malformed input is rejected.
"""

import math
import numbers
from datetime import date, datetime

import pandas as pd

from aquasure.hmpi.errors import InvalidInputError


def as_real(field, value):
    """
    Return `value` as a finite float.
    Booleans, strings and None are rejected rather than coerced.
    """
    if value is None:
        raise InvalidInputError(field, value, "value is required")
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidInputError(field, value, "expected a real number")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidInputError(field, value, "value must be finite")
    return value


def validate_measurements(si, ii, mi):
    """
    Check one (Si, Ii, Mi) triple and return it as floats.

    Si >= 0   measured concentration (negative values are data-entry errors)
    Ii >  0   permissible limit, used as a divisor
    Mi >= 0   relative weight
    """
    si = as_real("si", si)
    ii = as_real("ii", ii)
    mi = as_real("mi", mi)

    if si < 0:
        raise InvalidInputError("si", si, "concentration cannot be negative")
    if ii <= 0:
        raise InvalidInputError("ii", ii, "permissible limit must be greater than zero")
    if mi < 0:
        raise InvalidInputError("mi", mi, "weight cannot be negative")

    return si, ii, mi


def parse_date(field, value):
    """Accept a date, a datetime or an ISO-8601 string; return a `date`."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            stamp = pd.Timestamp(value.strip())
        except ValueError:
            raise InvalidInputError(field, value, "expected an ISO-8601 date") from None
        if pd.isna(stamp):
            raise InvalidInputError(field, value, "expected an ISO-8601 date")
        # calendar date as written, before any offset is applied
        return stamp.date()
    raise InvalidInputError(field, value, "date is required")


def parse_timestamp(field, value):
    """
    Accept a datetime or an ISO-8601 string (any fractional-second precision
    PostgREST emits) and return an aware UTC datetime. Naive values are UTC.
    """
    if isinstance(value, str):
        value = value.strip()
    if not isinstance(value, (str, datetime)) or not value:
        raise InvalidInputError(field, value, "timestamp is required")
    try:
        stamp = pd.to_datetime(value, utc=True)
    except (ValueError, TypeError):
        raise InvalidInputError(field, value, "expected an ISO-8601 timestamp") from None
    if pd.isna(stamp):
        raise InvalidInputError(field, value, "expected an ISO-8601 timestamp")
    return stamp.to_pydatetime()
