from typing import Optional, Dict, Any, List


class MySphereException(Exception):
    """Base exception for the MySphere backend."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class RecordValidationError(MySphereException):
    """Raised when a record violates one of its field constraints."""

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[List[Dict[str, str]]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "RecordValidationError":
        return cls(errors=[{"field": field, "message": message}])


class ResourceNotFoundError(MySphereException):
    """Raised when a requested resource is not found."""

    pass


class MalformedIdError(MySphereException):
    """Raised when a record id does not have a valid identifier shape."""

    pass
