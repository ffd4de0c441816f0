"""
Bulk order import schemas.

Covers the whole upload lifecycle: parsed candidate rows, rows reconciled
against the catalog, the preview handed back to the operator, the request
sent to the draft order service and the history record written afterwards.
"""

from pydantic import ConfigDict, Field, model_validator
from typing import Optional
from enum import Enum
from datetime import datetime

from models.base import BaseSchema


UNRESOLVED_PRODUCT_NAME = "* * * * * * *"


class FulfillmentStatus(str, Enum):
    """Outcome of reconciling one requested line against inventory."""
    OK = "ok"
    PARTIAL = "partial"
    NO_STOCK = "no stock"
    SKU_NOT_FOUND = "sku not found"
    LOOKUP_ERROR = "error"


FULFILLABLE_STATUSES = (FulfillmentStatus.OK, FulfillmentStatus.PARTIAL)


class CandidateRow(BaseSchema):
    """One parsed data row of the uploaded file."""

    model_config = ConfigDict(frozen=True)

    sku: str = Field(..., min_length=1, description="Trimmed SKU from the file")
    quantity_requested: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Requested quantity (positive, finite)"
    )


class ReconciledRow(BaseSchema):
    """
    A candidate row enriched with catalog data.

    This is the point-in-time snapshot shown to the operator and sent back
    verbatim on confirm.
    """

    model_config = ConfigDict(frozen=True)

    sku: str = Field(..., min_length=1)
    quantity_requested: float = Field(..., gt=0, allow_inf_nan=False)
    product_name: str = Field(default=UNRESOLVED_PRODUCT_NAME)
    available_quantity: int = Field(
        default=0,
        ge=0,
        description="Available units summed across inventory locations"
    )
    fulfilled_quantity: float = Field(default=0, ge=0, allow_inf_nan=False)
    status: FulfillmentStatus
    exists: bool = Field(default=False, description="Catalog entry found for the SKU")
    variant_id: Optional[str] = Field(None, description="Catalog variant GID")

    @model_validator(mode="after")
    def fulfilled_rows_are_resolved(self) -> "ReconciledRow":
        """A row with a fulfilled quantity must point at a stocked variant."""
        if self.fulfilled_quantity > 0:
            if not self.exists or self.status not in FULFILLABLE_STATUSES:
                raise ValueError(
                    "fulfilled_quantity > 0 requires exists=true and status ok/partial"
                )
            if self.fulfilled_quantity > self.quantity_requested:
                raise ValueError("fulfilled_quantity cannot exceed quantity_requested")
        return self

    @property
    def includable(self) -> bool:
        """Goes on the order iff it exists, has a variant and a positive fulfilled quantity."""
        return bool(self.exists and self.variant_id and self.fulfilled_quantity > 0)


class PreviewSummary(BaseSchema):
    """Status counts for the preview banner."""

    total_rows: int = 0
    ok: int = 0
    partial: int = 0
    no_stock: int = 0
    sku_not_found: int = 0
    lookup_error: int = 0
    includable_rows: int = 0
    total_fulfillable: float = 0

    @classmethod
    def from_rows(cls, rows: list[ReconciledRow]) -> "PreviewSummary":
        """Count rows per status."""
        counts = {status: 0 for status in FulfillmentStatus}
        for row in rows:
            counts[row.status] += 1

        includable = [r for r in rows if r.includable]
        return cls(
            total_rows=len(rows),
            ok=counts[FulfillmentStatus.OK],
            partial=counts[FulfillmentStatus.PARTIAL],
            no_stock=counts[FulfillmentStatus.NO_STOCK],
            sku_not_found=counts[FulfillmentStatus.SKU_NOT_FOUND],
            lookup_error=counts[FulfillmentStatus.LOOKUP_ERROR],
            includable_rows=len(includable),
            total_fulfillable=sum(r.fulfilled_quantity for r in includable),
        )


class PreviewResult(BaseSchema):
    """Output of the preview phase for one upload."""

    mode: str = "preview"
    customer_name: str
    customer_id: str
    rows: list[ReconciledRow] = Field(default_factory=list)
    summary: PreviewSummary = Field(default_factory=PreviewSummary)


# ===================
# ORDER SUBMISSION
# ===================

class OrderLineItem(BaseSchema):
    """One draft order line."""

    variant_id: str
    quantity: float = Field(..., gt=0)


class OrderRequest(BaseSchema):
    """Payload for the draft order service."""

    customer_id: str = Field(..., description="Customer GID")
    customer_name: str
    line_items: list[OrderLineItem] = Field(..., min_length=1)
    note: str
    total_quantity: float = Field(..., gt=0)
    shop_id: Optional[str] = Field(None, description="Numeric shop id (account context)")


class CreatedOrder(BaseSchema):
    """Draft order descriptor returned by the order service."""

    id: str
    legacy_resource_id: str = ""
    name: str = ""

    @property
    def label(self) -> str:
        """Human-facing label: name, then legacy id, then GID."""
        return self.name or self.legacy_resource_id or self.id


class ConfirmResult(BaseSchema):
    """Outcome of a successful confirm."""

    mode: str = "created"
    order_label: str
    order_id: str
    total_quantity: float
    line_count: int
    history_recorded: bool = True


# ===================
# HISTORY
# ===================

class HistoryRecordCreate(BaseSchema):
    """Row appended to the history store after an order is created."""

    shop_id: Optional[str] = None
    customer_id: str
    customer_name: str
    order_id: str
    order_legacy_id: Optional[str] = None
    order_name: Optional[str] = None
    total_quantity: float


class HistoryRecordResponse(HistoryRecordCreate):
    """History row as stored."""

    id: int
    created_at: datetime


class HistoryListResponse(BaseSchema):
    """Recent history for a shop."""

    data: list[HistoryRecordResponse]
    total: int
