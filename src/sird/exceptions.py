"""Exceptions raised by the SIRD simulator.

Validation errors describe the first violated constraint of a raw
configuration; store errors describe history records that cannot be
written or decoded.
"""


class SIRDError(Exception):
    """Base class for simulator errors."""


class ValidationError(SIRDError, ValueError):
    """A raw configuration was rejected before any computation."""

    def __init__(self, field, message):
        super().__init__(message)
        self.field = field
        self.message = message


class MissingField(ValidationError):
    """A required field is absent, empty or not parseable."""

    def __init__(self, field, reason="is required"):
        super().__init__(field, f"{field} {reason}")


class OutOfRange(ValidationError):
    """A numeric field violates its stated bound."""

    def __init__(self, field, bound, value):
        super().__init__(field, f"{field} must be {bound} (got {value!r})")
        self.bound = bound
        self.value = value


class InvalidRelation(ValidationError):
    """A cross-field constraint is violated."""

    def __init__(self, field, other, message):
        super().__init__(field, message)
        self.other = other


class DuplicateRecordError(SIRDError):
    """A history record with the same id already exists."""


class RecordFormatError(SIRDError):
    """A stored record does not have the expected shape."""
