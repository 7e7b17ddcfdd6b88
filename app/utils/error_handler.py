"""
Custom error handling system.

Defines the application's exception hierarchy and helpers for
consistent error rendering and logging.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """
    Standardized error codes for the application.
    """

    # General
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Orders
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    DUPLICATE_ORDER_NUMBER = "DUPLICATE_ORDER_NUMBER"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"

    # Import
    INVALID_IMPORT_FILE = "INVALID_IMPORT_FILE"

    # Persistence
    PERSISTENCE_UNAVAILABLE = "PERSISTENCE_UNAVAILABLE"


class ErrorSeverity(Enum):
    """
    Severity levels for errors.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Base exception for every custom application exception.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        is_critical: bool = False,
    ):
        """
        Initialize the exception.

        Args:
            message: Error message
            error_code: Standardized error code
            details: Additional error information
            status_code: Associated HTTP status code
            severity: Error severity
            is_critical: Whether it needs immediate attention
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.severity = severity
        self.is_critical = is_critical

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class ValidationException(AppException):
    """
    Raised when caller-supplied data is malformed or incomplete.
    """

    def __init__(
        self,
        message: str,
        field: str,
        invalid_value: Any = None,
        violations: Optional[List[Dict[str, Any]]] = None,
        **kwargs,
    ):
        """
        Initialize the validation exception.

        Args:
            message: Error message
            field: Field that failed validation (the first one, if several did)
            invalid_value: Offending value
            violations: Every violation found, as dictionaries
            **kwargs: Extra arguments for AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            status_code=422,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.field = field
        self.invalid_value = invalid_value
        self.violations = violations or []

        self.details.update(
            {
                "field": field,
                "invalid_value": str(invalid_value) if invalid_value is not None else None,
                "violations": self.violations,
            }
        )


class OrderNotFoundException(AppException):
    """
    Raised when the referenced order id does not exist.
    """

    def __init__(self, order_id: str, **kwargs):
        super().__init__(
            message=f"Order with id {order_id} not found",
            error_code=ErrorCode.ORDER_NOT_FOUND,
            status_code=404,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.order_id = order_id
        self.details.update({"order_id": order_id})


class ConstraintViolationException(AppException):
    """
    Raised when a constraint enforced by the store is violated.
    """

    def __init__(
        self,
        message: str,
        constraint: str,
        value: Any = None,
        **kwargs,
    ):
        """
        Initialize the constraint violation.

        Args:
            message: Error message
            constraint: Name of the violated rule (e.g. "order_number")
            value: Value that collided
            **kwargs: Extra arguments for AppException
        """
        super().__init__(
            message=message,
            error_code=(
                ErrorCode.DUPLICATE_ORDER_NUMBER if constraint == "order_number" else ErrorCode.CONSTRAINT_VIOLATION
            ),
            status_code=409,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.constraint = constraint
        self.value = value

        self.details.update({"constraint": constraint, "value": str(value) if value is not None else None})


class PersistenceUnavailableException(AppException):
    """
    Raised when the order store cannot be reached.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(
            message=message,
            error_code=ErrorCode.PERSISTENCE_UNAVAILABLE,
            status_code=503,
            severity=ErrorSeverity.HIGH,
            is_critical=True,
            **kwargs,
        )
        self.operation = operation
        self.details.update({"operation": operation})


class InvalidImportFileException(AppException):
    """
    Raised when an uploaded spreadsheet cannot be read.
    """

    def __init__(self, message: str, filename: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_IMPORT_FILE,
            status_code=400,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.filename = filename
        self.details.update({"filename": filename})


# === UTILITY FUNCTIONS ===


def log_error(
    exception: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Log an error consistently.

    Args:
        exception: Exception to log
        context: Additional context
        level: Logging level
    """
    context = context or {}

    log_data = {
        "exception_type": type(exception).__name__,
        "exception_message": str(exception),
        **context,
    }

    if isinstance(exception, AppException):
        message = f"{exception.error_code.value}: {exception.message}"
        log_data.update(
            {
                "error_code": exception.error_code.value,
                "severity": exception.severity.value,
                "is_critical": exception.is_critical,
            }
        )
    else:
        message = f"Unhandled exception: {type(exception).__name__}: {str(exception)}"

    logger.log(level, message, extra=log_data)
