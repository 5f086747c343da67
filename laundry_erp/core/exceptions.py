"""
Domain exceptions shared by the rule engine and the service layer.

Each exception carries the HTTP status the API layer should answer with;
see laundry_erp.core.errors.domain_exception_handler.
"""
from fastapi import status


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class InvalidFormat(DomainError):
    """Input does not match an expected syntactic pattern (date string, timestamp, shift name)."""


class InvalidDateValue(DomainError):
    """Input is well-formed but out of range (month 13, day 32, ...)."""


class PreconditionViolation(DomainError):
    """Operation attempted on an entity in the wrong state."""

    status_code = status.HTTP_409_CONFLICT


class AlreadyAnnulled(PreconditionViolation):
    """Attendance record has already been annulled."""


class NotFound(DomainError):
    """Referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class NotAuthorized(DomainError):
    """Caller's role is not on the allow-list for the operation."""

    status_code = status.HTTP_403_FORBIDDEN
