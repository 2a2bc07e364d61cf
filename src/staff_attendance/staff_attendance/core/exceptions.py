class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidTimeFormat(ValidationError):
    """Raised when a clock time is not a valid HH:MM value."""


class InvalidDateFormat(ValidationError):
    """Raised when a date cannot be reduced to a YYYY-MM-DD day key."""


class RecordNotFoundError(DomainError):
    """Raised when an attendance record id does not exist in the store."""


class StoreUnavailableError(DomainError):
    """Raised when the attendance store cannot be reached or fails a call."""
