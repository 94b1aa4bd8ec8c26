"""
Custom exception classes for the FieldOps import engine.
"""
from typing import Any, Dict, List, Optional


class FieldOpsException(Exception):
    """Base exception class for FieldOps application."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class TenantRequiredError(FieldOpsException):
    """Raised when a request carries no tenant context."""

    def __init__(
        self,
        message: str = "No tenant context",
        code: str = "TENANT_REQUIRED",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, status_code=401, details=details)


class ValidationError(FieldOpsException):
    """Raised for validation errors."""

    def __init__(
        self,
        message: str = "Validation error",
        code: str = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, status_code=422, details=details)


class MappingIncompleteError(ValidationError):
    """Raised when required fields have no mapped column."""

    def __init__(self, missing_fields: List[str]):
        super().__init__(
            message=f"Missing required mappings: {', '.join(missing_fields)}",
            code="MAPPING_INCOMPLETE",
            details={"missing_fields": list(missing_fields)},
        )
        self.missing_fields = list(missing_fields)


class ImportFileError(FieldOpsException):
    """Raised when an uploaded file cannot be used for import."""

    def __init__(
        self,
        message: str = "Invalid import file",
        code: str = "IMPORT_FILE_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, status_code=400, details=details)


class PersistenceError(FieldOpsException):
    """Raised when a record could not be written to the database."""

    def __init__(
        self,
        message: str = "Database error",
        code: str = "PERSISTENCE_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, status_code=500, details=details)
