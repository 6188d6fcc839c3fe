"""
Error taxonomy for the objection service.

The core raises these; the HTTP layer maps them to status codes.
"""


class ObjectionDeskError(Exception):
    """Base class for all domain errors."""
    pass


class ValidationError(ObjectionDeskError):
    """Raised when caller input is malformed."""
    pass


class AuthenticationFailed(ObjectionDeskError):
    """Raised when credentials or a bearer token cannot be verified."""
    pass


class Forbidden(ObjectionDeskError):
    """Raised when the caller's role may not perform the operation."""
    pass


class NotFound(ObjectionDeskError):
    """Raised when a referenced farmer or objection does not exist."""
    pass


class Conflict(ObjectionDeskError):
    """Raised when a write would break a uniqueness invariant."""
    pass


class InvalidTransition(ObjectionDeskError):
    """Raised when an objection status edge is not allowed."""

    def __init__(self, current_status: str, target_status: str):
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Cannot move objection from '{current_status}' to '{target_status}'"
        )


class StorageUnavailable(ObjectionDeskError):
    """Raised when the database cannot be reached. Callers may retry."""
    pass
