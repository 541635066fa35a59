"""
config.py
Settings read from the environment (and a local .env file).
"""

import os

from dotenv import load_dotenv

from aquasure.hmpi import models

load_dotenv()


def _optional_float(name):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from None


def _policy_threshold():
    value = _optional_float("DEFAULT_POLICY_THRESHOLD")
    if value is None:
        return models.DEFAULT_POLICY_THRESHOLD
    if value <= 0:
        raise RuntimeError(f"DEFAULT_POLICY_THRESHOLD must be greater than zero, got {value:g}")
    return value


SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# HMPI above which an otherwise compliant sample raises a low-severity alert.
# Unset disables the low branch.
HMPI_CAUTION_THRESHOLD = _optional_float("HMPI_CAUTION_THRESHOLD")

# Used for project records that carry no policy threshold of their own
DEFAULT_POLICY_THRESHOLD = _policy_threshold()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
