"""
Custom exception classes and error handling.

The workout core raises these directly; because they are HTTPExceptions the
transport returns them without translation:

    NotFoundError        -> 404 (row absent or not owned by the caller)
    ValidationError      -> 400 (input out of range, bad direction, missing field)
    ConflictError        -> 409 (unique constraint collision)
    PreconditionError    -> 409 (state does not allow the operation)
    InfrastructureError  -> 500 (database / network)
"""
from fastapi import HTTPException, status
from typing import Optional, Dict, Any


class APIException(HTTPException):
    """Base API exception with consistent structure."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class NotFoundError(APIException):
    """Resource not found (or not owned by the caller)."""

    def __init__(self, resource: str, identifier: Any = None):
        detail = f"{resource} not found" if identifier is None else f"{resource} not found: {identifier}"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )
        self.resource = resource


class IndividualExerciseNotFoundError(NotFoundError):
    """The user has no individual exercise matching the lookup."""

    def __init__(self, identifier: Any = None):
        super().__init__("Individual exercise", identifier)
        self.error_code = "INDIVIDUAL_EXERCISE_NOT_FOUND"


class ValidationError(APIException):
    """Validation error."""

    def __init__(self, detail: str, field: Optional[str] = None):
        error_code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )
        self.field = field


class ConflictError(APIException):
    """Resource conflict (e.g., duplicate entry)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="CONFLICT"
        )


class PreconditionError(APIException):
    """The current state does not allow the requested operation."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="PRECONDITION_FAILED"
        )


class NestedTransactionError(PreconditionError):
    """A unit of work was opened while another one is active."""

    def __init__(self):
        super().__init__("a transaction is already active in this context")
        self.error_code = "NESTED_TRANSACTION"


class InfrastructureError(APIException):
    """Database or network failure."""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="INFRASTRUCTURE_ERROR"
        )
