"""
models.py
Domain records for water-quality monitoring: samples, projects, policies,
alerts and the derived risk level.

Records coming from storage are plain dicts (see `from_record`). Samples and
projects are validated when built, so everything downstream can assume
well-formed numbers.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from functools import total_ordering
from typing import Optional

from aquasure.hmpi.errors import InvalidInputError
from aquasure.hmpi.validation import as_real, parse_date, parse_timestamp, validate_measurements


DEFAULT_POLICY_THRESHOLD = 100.0


# -----------------------------------------------------
# Risk categories
# -----------------------------------------------------
@total_ordering
class RiskCategory(Enum):
    """Ordered HMPI risk bands. The value is the display label."""

    SAFE = "Safe"
    LOW = "Low Risk"
    MODERATE = "Moderate Risk"
    HIGH = "High Risk"
    VERY_HIGH = "Very High Risk"

    @property
    def rank(self) -> int:
        return list(RiskCategory).index(self)

    def __lt__(self, other):
        if not isinstance(other, RiskCategory):
            return NotImplemented
        return self.rank < other.rank

    @property
    def is_high(self) -> bool:
        return self in (RiskCategory.HIGH, RiskCategory.VERY_HIGH)


@dataclass(frozen=True)
class RiskLevel:
    category: RiskCategory
    color: str

    @property
    def level(self) -> str:
        return self.category.value

    def to_dict(self) -> dict:
        return {"level": self.level, "color": self.color}


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# -----------------------------------------------------
# Sample
# -----------------------------------------------------
def _optional_real(name, value):
    # coordinates are display-only and often stored as text
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            raise InvalidInputError(name, value, "expected a number") from None
    return as_real(name, value)


def _text(record, name, default=""):
    value = record.get(name)
    if value is None:
        return default
    return str(value).strip()


@dataclass(frozen=True)
class Sample:
    """
    One heavy-metal measurement.

    Attributes:
        sample_id: identifier, unique within its project (e.g. 'GNG-001').
        project_id: owning project.
        metal: metal name, e.g. 'Lead'.
        si: measured concentration (mg/L).
        ii: permissible limit (mg/L), strictly positive.
        mi: relative weight.
        date: collection date.
    """

    sample_id: str
    project_id: str
    metal: str
    si: float
    ii: float
    mi: float
    date: date
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    district: str = ""
    city: str = ""

    def __post_init__(self):
        if not self.sample_id:
            raise InvalidInputError("sample_id", self.sample_id, "sample id is required")
        if not self.project_id:
            raise InvalidInputError("project_id", self.project_id, "project id is required")
        if not self.metal:
            raise InvalidInputError("metal", self.metal, "metal is required")
        si, ii, mi = validate_measurements(self.si, self.ii, self.mi)
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "si", si)
        object.__setattr__(self, "ii", ii)
        object.__setattr__(self, "mi", mi)
        object.__setattr__(self, "date", parse_date("date", self.date))
        object.__setattr__(self, "latitude", _optional_real("latitude", self.latitude))
        object.__setattr__(self, "longitude", _optional_real("longitude", self.longitude))

    @classmethod
    def from_record(cls, record: dict) -> "Sample":
        """Build a sample from a storage record (`sample_id`, `si`, `ii`, ...)."""
        return cls(
            sample_id=_text(record, "sample_id"),
            project_id=_text(record, "project_id"),
            metal=_text(record, "metal"),
            si=record.get("si"),
            ii=record.get("ii"),
            mi=record.get("mi"),
            date=record.get("date"),
            latitude=record.get("latitude"),
            longitude=record.get("longitude"),
            district=_text(record, "district"),
            city=_text(record, "city"),
        )

    def to_record(self) -> dict:
        return {
            "sample_id": self.sample_id,
            "project_id": self.project_id,
            "metal": self.metal,
            "si": self.si,
            "ii": self.ii,
            "mi": self.mi,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "district": self.district,
            "city": self.city,
            "date": self.date.isoformat(),
        }

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None


# -----------------------------------------------------
# Project
# -----------------------------------------------------
@dataclass(frozen=True)
class Project:
    project_id: str
    name: str
    policy_threshold: float = DEFAULT_POLICY_THRESHOLD
    district: str = ""
    city: str = ""
    description: str = ""

    def __post_init__(self):
        if not self.project_id:
            raise InvalidInputError("project_id", self.project_id, "project id is required")
        threshold = as_real("policy_threshold_hmpi", self.policy_threshold)
        if threshold <= 0:
            raise InvalidInputError(
                "policy_threshold_hmpi", threshold, "threshold must be greater than zero"
            )
        object.__setattr__(self, "policy_threshold", threshold)

    @classmethod
    def from_record(cls, record: dict, default_threshold=DEFAULT_POLICY_THRESHOLD) -> "Project":
        threshold = record.get("policy_threshold_hmpi")
        if threshold is None:
            threshold = default_threshold
        return cls(
            project_id=_text(record, "project_id"),
            name=_text(record, "name"),
            policy_threshold=threshold,
            district=_text(record, "district"),
            city=_text(record, "city"),
            description=_text(record, "description"),
        )

    @property
    def short_name(self) -> str:
        """'Ganga Water Quality Study - Varanasi' -> 'Varanasi'."""
        parts = self.name.split(" - ")
        return parts[1] if len(parts) > 1 and parts[1] else self.name


# -----------------------------------------------------
# Policy
# -----------------------------------------------------
@dataclass(frozen=True)
class Policy:
    """A metal-specific concentration limit set by a policy maker."""

    id: str
    name: str
    metal: str
    threshold: float
    created_by: str = ""
    created_at: Optional[datetime] = None

    def __post_init__(self):
        threshold = as_real("threshold", self.threshold)
        if threshold <= 0:
            raise InvalidInputError("threshold", threshold, "threshold must be greater than zero")
        object.__setattr__(self, "threshold", threshold)

    @classmethod
    def from_record(cls, record: dict) -> "Policy":
        created_at = record.get("created_at")
        created_at = parse_timestamp("created_at", created_at) if created_at else None
        return cls(
            id=_text(record, "id"),
            name=_text(record, "name"),
            metal=_text(record, "metal"),
            threshold=record.get("threshold"),
            created_by=_text(record, "created_by"),
            created_at=created_at,
        )


# -----------------------------------------------------
# Alert
# -----------------------------------------------------
def _utcnow():
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Alert:
    project_id: str
    sample_id: str
    message: str
    severity: Severity
    acknowledged: bool = False
    created_at: datetime = field(default_factory=_utcnow)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def from_record(cls, record: dict) -> "Alert":
        created_at = record.get("created_at")
        created_at = parse_timestamp("created_at", created_at) if created_at else _utcnow()
        return cls(
            id=_text(record, "id"),
            project_id=_text(record, "project_id"),
            sample_id=_text(record, "sample_id"),
            message=_text(record, "message"),
            severity=Severity(record.get("severity")),
            acknowledged=bool(record.get("acknowledged", False)),
            created_at=created_at,
        )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "sample_id": self.sample_id,
            "message": self.message,
            "severity": self.severity.value,
            "acknowledged": self.acknowledged,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class Rejection:
    """A record skipped by a batch operation, and why."""

    sample_id: str
    reason: str
    row: Optional[int] = None

    def to_dict(self) -> dict:
        return {"row": self.row, "sample_id": self.sample_id, "reason": self.reason}
