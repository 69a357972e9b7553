"""
Custom exception classes for the LightBnB data-access layer.
"Not found" is not an error here: lookups return None and listings return [].
"""

from typing import Any, Dict, Optional, List
from pydantic import ValidationError as PydanticValidationError


class DataAccessError(Exception):
    """Base data-access exception class."""

    error_code = "DATA_ACCESS_ERROR"

    def __init__(self, detail: str, error_code: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        """Structured form for callers that serialise errors."""
        return {"code": self.error_code, "message": self.detail}


class ValidationError(DataAccessError):
    """Invalid input: missing or malformed fields, bad filters or limits."""

    error_code = "VALIDATION_ERROR"

    def __init__(
        self,
        detail: str,
        field_errors: Optional[List[Dict[str, Any]]] = None
    ):
        super().__init__(detail)
        self.field_errors = field_errors or []

    @classmethod
    def from_pydantic(cls, exception: PydanticValidationError, detail: str) -> "ValidationError":
        """Convert a pydantic validation error, keeping per-field details."""
        field_errors = []
        for error in exception.errors():
            field_errors.append({
                "field": " -> ".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            })
        return cls(detail, field_errors=field_errors)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.field_errors:
            result["details"] = self.field_errors
        return result


class InfrastructureError(DataAccessError):
    """Database or storage failure: connection errors, driver errors, unreadable fixtures."""

    error_code = "INFRASTRUCTURE_ERROR"


class ConstraintViolationError(InfrastructureError):
    """A write was rejected by a schema constraint (foreign key, unique, check)."""

    error_code = "CONSTRAINT_VIOLATION"


class DuplicateResourceError(ConstraintViolationError):
    """Duplicate resource exception."""

    error_code = "DUPLICATE_RESOURCE"

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} with identifier '{identifier}' already exists")
        self.resource = resource
        self.identifier = identifier
