"""
Domain errors for the e-filing workflow engine

Every error is an HTTPException so services can raise it directly and the
application handlers can render it as ``{"error": <message>}``.
"""

from typing import Optional

from fastapi import HTTPException, status


class EfilingError(HTTPException):
    """Base class for errors surfaced to API clients"""

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(
            status_code=status_code or self.default_status,
            detail=message or self.default_message,
        )

    @property
    def message(self) -> str:
        return self.detail


class Unauthorized(EfilingError):
    default_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message)
        self.headers = {"WWW-Authenticate": "Bearer"}


class Forbidden(EfilingError):
    default_status = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(EfilingError):
    default_status = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidState(EfilingError):
    """Operation not legal in the current state; 409 when caused by a concurrent change"""

    default_status = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid state"

    @classmethod
    def conflict(cls, message: str) -> "InvalidState":
        return cls(message, status_code=status.HTTP_409_CONFLICT)


class RateLimited(EfilingError):
    default_status = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests. Please try again later."


class AssignmentFailed(EfilingError):
    default_message = "Failed to assign file"
