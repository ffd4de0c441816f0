"""
Bulk order import workflow.

Two phases per upload:

    preview  file + customer -> parse -> reconcile -> PreviewResult
             (read-only: no order is created, nothing is written)

    confirm  round-tripped rows -> includable rows -> draft order
             -> history record -> ConfirmResult

No state is held between the phases. The rows returned by the caller on
confirm are trusted as-is; inventory is not re-checked.
"""

from typing import Optional, Protocol
import hashlib
import json
import structlog

from pydantic import ValidationError as PydanticValidationError

from config import settings
from exceptions import MissingUploadInputError, NothingToOrderError
from integrations.draft_order_client import get_draft_order_client
from integrations.shopify_catalog import get_catalog_client, numeric_id
from models.bulk_order import (
    ConfirmResult,
    CreatedOrder,
    HistoryRecordCreate,
    OrderLineItem,
    OrderRequest,
    PreviewResult,
    PreviewSummary,
    ReconciledRow,
)
from parsers.order_sheet_parser import parse_order_file
from services.order_history_service import get_order_history_service
from services.reconciliation_service import CatalogLookup, reconcile_rows

logger = structlog.get_logger(__name__)


class OrderCreator(Protocol):
    """Anything that can create a draft order."""

    def create_draft_order(self, request: OrderRequest) -> CreatedOrder:
        ...


class HistoryStore(Protocol):
    """Append-only order history."""

    def record_order(self, record: HistoryRecordCreate):
        ...

    def get_recent(self, shop_id: Optional[str], limit: Optional[int] = None) -> list:
        ...


class ShopCatalog(CatalogLookup, Protocol):
    def get_shop_id(self) -> Optional[str]:
        ...


# ===================
# PURE HELPERS
# ===================

def select_includable_rows(rows: list[ReconciledRow]) -> list[ReconciledRow]:
    """Includable rows in their original order."""
    return [row for row in rows if row.includable]


def build_order_note(customer_name: str, customer_id: str) -> str:
    return f"Bulk upload for customer: {customer_name} (Shopify customer ID: {numeric_id(customer_id)})"


def build_order_request(
    rows: list[ReconciledRow],
    customer_name: str,
    customer_id: str,
    shop_id: Optional[str] = None,
) -> OrderRequest:
    """
    Build the draft order request from includable rows.

    Rows that are not includable are ignored.

    Raises:
        NothingToOrderError: No includable rows
    """
    included = select_includable_rows(rows)
    if not included:
        raise NothingToOrderError(row_count=len(rows))

    return OrderRequest(
        customer_id=customer_id,
        customer_name=customer_name,
        line_items=[
            OrderLineItem(variant_id=row.variant_id, quantity=row.fulfilled_quantity)
            for row in included
        ],
        note=build_order_note(customer_name, customer_id),
        total_quantity=sum(row.fulfilled_quantity for row in included),
        shop_id=shop_id,
    )


def decode_preview_payload(preview_json: Optional[str]) -> list:
    """
    Raw rows sent back by the caller on confirm, exactly as submitted.

    Malformed JSON, or JSON that is not a row list (or a preview object
    carrying "rows"), gives an empty list.
    """
    if not preview_json:
        return []

    try:
        raw_rows = json.loads(preview_json)
    except json.JSONDecodeError as e:
        logger.error("preview_snapshot_invalid_json", error=str(e))
        return []

    if isinstance(raw_rows, dict):
        raw_rows = raw_rows.get("rows", [])
    if not isinstance(raw_rows, list):
        logger.error("preview_snapshot_not_a_list", type=type(raw_rows).__name__)
        return []
    return raw_rows


def parse_preview_snapshot(preview_json: Optional[str]) -> list[ReconciledRow]:
    """Decode and validate the rows sent back on confirm."""
    return validate_snapshot_rows(decode_preview_payload(preview_json))


def validate_snapshot_rows(raw_rows: list) -> list[ReconciledRow]:
    """
    Validate raw snapshot rows.

    Rows that fail validation are dropped; they could never be included
    anyway.
    """
    rows: list[ReconciledRow] = []
    for index, raw in enumerate(raw_rows):
        try:
            rows.append(ReconciledRow.model_validate(raw))
        except PydanticValidationError as e:
            logger.warning(
                "preview_snapshot_row_invalid",
                index=index,
                errors=e.error_count(),
            )
    return rows


def snapshot_hash(customer_id: str, rows: list[ReconciledRow]) -> str:
    """Stable fingerprint of a confirmed snapshot, for tracing repeat submissions."""
    payload = json.dumps(
        {
            "customer_id": customer_id,
            "rows": [row.model_dump(mode="json") for row in rows],
        },
        sort_keys=True,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


# ===================
# SERVICE
# ===================

class BulkOrderService:
    """
    Preview/confirm workflow for bulk order uploads.

    Collaborators are injectable so the workflow can run against fakes.
    """

    def __init__(
        self,
        catalog: Optional[ShopCatalog] = None,
        order_creator: Optional[OrderCreator] = None,
        history: Optional[HistoryStore] = None,
        lookup_concurrency: Optional[int] = None,
    ):
        self.catalog = catalog or get_catalog_client()
        self.order_creator = order_creator or get_draft_order_client()
        self._history = history
        self.lookup_concurrency = lookup_concurrency or settings.catalog_lookup_concurrency

    @property
    def history(self) -> HistoryStore:
        # Supabase client is only needed once an order has been created
        if self._history is None:
            self._history = get_order_history_service()
        return self._history

    def preview(
        self,
        customer_name: Optional[str],
        customer_id: Optional[str],
        content: Optional[bytes],
        filename: Optional[str] = None,
    ) -> PreviewResult:
        """
        Parse and reconcile an upload.

        Raises:
            MissingUploadInputError: Customer or file missing
            FileReadError, EmptyFileError, MissingColumnsError,
            NoValidRowsError: File problems
        """
        customer_name = (customer_name or "").strip()
        customer_id = (customer_id or "").strip()

        missing = []
        if not customer_name or not customer_id:
            missing.append("customer")
        if content is None:
            missing.append("file")
        if missing:
            raise MissingUploadInputError(missing)

        logger.info(
            "bulk_order_preview_started",
            customer_id=customer_id,
            filename=filename,
            size=len(content),
        )

        candidates = parse_order_file(content, filename)
        rows = reconcile_rows(candidates, self.catalog, max_workers=self.lookup_concurrency)
        summary = PreviewSummary.from_rows(rows)

        logger.info(
            "bulk_order_preview_created",
            customer_id=customer_id,
            row_count=len(rows),
            includable=summary.includable_rows,
        )

        return PreviewResult(
            customer_name=customer_name,
            customer_id=customer_id,
            rows=rows,
            summary=summary,
        )

    def confirm(
        self,
        customer_name: Optional[str],
        customer_id: Optional[str],
        rows: list[ReconciledRow],
    ) -> ConfirmResult:
        """
        Create a draft order from a previewed snapshot.

        Raises:
            NothingToOrderError: No includable rows (no external call made)
            OrderCreationError: Draft order service failed
        """
        customer_name = (customer_name or "").strip() or "Unknown Customer"
        customer_id = (customer_id or "").strip()

        included = select_includable_rows(rows)
        fingerprint = snapshot_hash(customer_id, rows)

        logger.info(
            "bulk_order_confirm_started",
            customer_id=customer_id,
            row_count=len(rows),
            includable=len(included),
            snapshot_hash=fingerprint,
        )

        if not included:
            raise NothingToOrderError(row_count=len(rows))

        shop_id = self.catalog.get_shop_id()
        request = build_order_request(included, customer_name, customer_id, shop_id)

        order = self.order_creator.create_draft_order(request)

        history_recorded = self._record_history(order, request)

        return ConfirmResult(
            order_label=order.label,
            order_id=order.id,
            total_quantity=request.total_quantity,
            line_count=len(request.line_items),
            history_recorded=history_recorded,
        )

    def recent_history(self, limit: Optional[int] = None):
        """History for the current shop, newest first."""
        return self.history.get_recent(self.catalog.get_shop_id(), limit)

    def _record_history(self, order: CreatedOrder, request: OrderRequest) -> bool:
        record = HistoryRecordCreate(
            shop_id=request.shop_id,
            customer_id=numeric_id(request.customer_id),
            customer_name=request.customer_name,
            order_id=order.id,
            order_legacy_id=order.legacy_resource_id or None,
            order_name=order.name or None,
            total_quantity=request.total_quantity,
        )
        try:
            self.history.record_order(record)
            return True
        except Exception as e:
            # The draft order exists; history is best-effort
            logger.error(
                "order_history_write_failed",
                order_id=order.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False


_service: Optional[BulkOrderService] = None


def get_bulk_order_service() -> BulkOrderService:
    global _service
    if _service is None:
        _service = BulkOrderService()
    return _service
