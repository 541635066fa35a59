"""
errors.py
Error taxonomy for the HMPI computation layer.
"""


class HMPIError(Exception):
    """Base class for every error raised by the HMPI core."""


class InvalidInputError(HMPIError, ValueError):
    """A numeric field is missing, non-numeric, non-finite or out of range."""

    def __init__(self, field, value, reason):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value!r}: {reason}")


class MissingStandardError(HMPIError, LookupError):
    """A metal has no entry in the reference standard being consulted."""

    def __init__(self, metal, authority=None):
        self.metal = metal
        self.authority = authority
        where = f"{authority} standard" if authority else "standard"
        super().__init__(f"No {where} limit defined for metal {metal!r}")


class MissingReferenceError(HMPIError, LookupError):
    """A sample points at a project the caller did not supply."""

    def __init__(self, sample_id, project_id):
        self.sample_id = sample_id
        self.project_id = project_id
        super().__init__(
            f"Sample {sample_id!r} references unknown project {project_id!r}"
        )
