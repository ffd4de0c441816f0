"""
Custom exception classes for the application.

Every error carries a stable code, an HTTP status and a details dict so
routes can render the standard error envelope.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "EMPTY_FILE")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# UPLOAD / PARSER ERRORS
# ===================

class MissingUploadInputError(ValidationError):
    """Customer selection or file missing from a process request."""

    def __init__(self, missing: list[str]):
        super().__init__(
            code="MISSING_UPLOAD_INPUT",
            message="Customer selection and CSV/Excel file are required to import orders.",
            details={"missing": missing}
        )


class FileReadError(ValidationError):
    """Uploaded bytes could not be decoded as CSV or Excel."""

    def __init__(self, filename: Optional[str] = None, reason: Optional[str] = None):
        super().__init__(
            code="FILE_READ_ERROR",
            message="Unable to read the file. Please check that it's a valid CSV or Excel file.",
            details={"filename": filename, "original_error": reason}
        )


class EmptyFileError(ValidationError):
    """Decoded grid has no rows."""

    def __init__(self):
        super().__init__(
            code="EMPTY_FILE",
            message="The file is empty."
        )


class MissingColumnsError(ValidationError):
    """Header row lacks the sku or quantity column."""

    def __init__(self, missing: list[str], header: Optional[list[str]] = None):
        super().__init__(
            code="MISSING_COLUMNS",
            message="Header row must contain 'sku' and 'quantity' (or 'qty') columns.",
            details={"missing": missing, "header": header or []}
        )


class NoValidRowsError(ValidationError):
    """Every data row was skipped."""

    def __init__(self, rows_read: int = 0):
        super().__init__(
            code="NO_VALID_ROWS",
            message="No valid rows found. Please check that SKU and Quantity columns are filled.",
            details={"rows_read": rows_read}
        )


# ===================
# ORDER ERRORS
# ===================

class NothingToOrderError(ValidationError):
    """Confirmed snapshot has no includable rows."""

    def __init__(self, row_count: int = 0):
        super().__init__(
            code="NOTHING_TO_ORDER",
            message=(
                "No rows with available inventory to create a draft order. "
                "Please check the preview."
            ),
            details={"row_count": row_count}
        )


class CatalogLookupError(ExternalServiceError):
    """Catalog query failed (transport or GraphQL errors)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="catalog",
            message=message,
            details=details
        )


class OrderCreationError(ExternalServiceError):
    """Draft order service did not return a created order."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="draft_order",
            message=f"Failed to create draft order via external service. {message}",
            details=details
        )
