class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is missing or malformed."""


class InvalidSelectorError(ValidationError):
    """Raised when class/section text does not normalize to a roster."""


class NotFoundError(DomainError):
    """Raised when a referenced student does not exist or is inactive."""


class StoreError(DomainError):
    """Raised when the backing store fails (constraint, connectivity, ...)."""
