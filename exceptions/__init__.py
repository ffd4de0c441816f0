"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Upload / parser
    MissingUploadInputError,
    FileReadError,
    EmptyFileError,
    MissingColumnsError,
    NoValidRowsError,

    # Orders
    NothingToOrderError,
    CatalogLookupError,
    OrderCreationError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Upload / parser
    "MissingUploadInputError",
    "FileReadError",
    "EmptyFileError",
    "MissingColumnsError",
    "NoValidRowsError",

    # Orders
    "NothingToOrderError",
    "CatalogLookupError",
    "OrderCreationError",
]
