# /annotation_backend/core/errors.py

"""
The domain error taxonomy shared by every service.

Services raise these; a single exception handler registered in `main.py`
turns them into JSON responses using `status_code`. Routers never need to
know which service raised what.
"""

from fastapi import status


class DomainError(Exception):
    """Base class for every expected failure of a workflow operation."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Malformed or semantically invalid input."""
    status_code = status.HTTP_400_BAD_REQUEST


class ForbiddenError(DomainError):
    """The actor lacks the role or ownership the operation requires."""
    status_code = status.HTTP_403_FORBIDDEN


class IneligibleError(ForbiddenError):
    """The proficiency gate rejected the user for a language pair."""


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(DomainError):
    """An entity-level invariant would be violated."""
    status_code = status.HTTP_409_CONFLICT


class DuplicateAnnotationError(ConflictError):
    pass


class DuplicateEvaluationError(ConflictError):
    pass


class InvalidStateError(ConflictError):
    """The requested transition is not allowed from the entity's current state."""


class ScoringError(DomainError):
    """The external MT scoring collaborator failed or returned garbage."""
    status_code = status.HTTP_502_BAD_GATEWAY


class AuthenticationError(DomainError):
    """Missing, invalid or expired credentials."""
    status_code = status.HTTP_401_UNAUTHORIZED
