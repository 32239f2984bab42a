"""
This file contains custom, application-specific exceptions.

Every exception carries the HTTP status it maps to. The handlers registered
in main.py turn them into the `{"success": false, "message": ...}` envelope.
"""
from fastapi import status


class TuitionTrackError(Exception):
    """Base class for all domain errors raised by the services."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TuitionTrackError):
    """Raised for missing or malformed input."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class InvalidStateError(TuitionTrackError):
    """Raised when an operation is not allowed in the entity's current state."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Operation not allowed in the current state"


class ConflictError(TuitionTrackError):
    """Raised when creating something that already exists (e.g. a registered email)."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class AuthenticationError(TuitionTrackError):
    """Raised when the caller is not signed in or their role cannot use the endpoint."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class AuthorizationError(TuitionTrackError):
    """Raised when the caller does not own / is not linked to the resource."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFoundError(TuitionTrackError):
    """Raised when a referenced entity does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class PersistenceError(TuitionTrackError):
    """Raised when the underlying store fails."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
