"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.bulk_order import (
    UNRESOLVED_PRODUCT_NAME,
    FulfillmentStatus,
    CandidateRow,
    ReconciledRow,
    PreviewSummary,
    PreviewResult,
    OrderLineItem,
    OrderRequest,
    CreatedOrder,
    ConfirmResult,
    HistoryRecordCreate,
    HistoryRecordResponse,
    HistoryListResponse,
)

__all__ = [
    # Base
    "BaseSchema",

    # Bulk order import
    "UNRESOLVED_PRODUCT_NAME",
    "FulfillmentStatus",
    "CandidateRow",
    "ReconciledRow",
    "PreviewSummary",
    "PreviewResult",
    "OrderLineItem",
    "OrderRequest",
    "CreatedOrder",
    "ConfirmResult",
    "HistoryRecordCreate",
    "HistoryRecordResponse",
    "HistoryListResponse",
]
