class DomainError(Exception):
    """Base exception for feeltime errors."""


class ValidationError(DomainError):
    """Raised when input data is malformed (caught at the API boundary)."""


class ConstraintViolation(DomainError):
    """Raised when a uniqueness, foreign-key or check constraint is violated."""


class NotFound(DomainError):
    """Raised when an object is missing from the storage medium."""


class StorageUnavailable(DomainError):
    """Raised when the storage medium cannot be reached."""


class ConfigurationError(DomainError):
    """Raised at startup when the storage settings are inconsistent."""
