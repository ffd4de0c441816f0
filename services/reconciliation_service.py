"""
Inventory reconciliation for bulk order uploads.

Enriches each candidate row with catalog data and classifies how much of
the requested quantity can be fulfilled from available stock.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Protocol
import structlog

from config import settings
from integrations.shopify_catalog import CatalogVariant
from models.bulk_order import (
    UNRESOLVED_PRODUCT_NAME,
    CandidateRow,
    FulfillmentStatus,
    ReconciledRow,
)

logger = structlog.get_logger(__name__)

DEFAULT_TITLE_SUFFIX = " - Default Title"


class CatalogLookup(Protocol):
    """Anything that can find a variant by exact SKU."""

    def find_variant_by_sku(self, sku: str) -> Optional[CatalogVariant]:
        ...


def classify_fulfillment(
    quantity_requested: float,
    available_quantity: float,
) -> tuple[float, FulfillmentStatus]:
    """
    Decide the fulfilled quantity and status for one row.

    Precedence:
        available <= 0          -> (0, NO_STOCK)
        requested > available   -> (available, PARTIAL)
        otherwise               -> (requested, OK)
    """
    if available_quantity <= 0:
        return 0, FulfillmentStatus.NO_STOCK
    if quantity_requested > available_quantity:
        return available_quantity, FulfillmentStatus.PARTIAL
    return quantity_requested, FulfillmentStatus.OK


def resolve_product_name(variant: CatalogVariant, sku: str) -> str:
    """Display name, then product title, then "SKU <sku>"."""
    name = variant.display_name or variant.product_title or f"SKU {sku}"
    return name.replace(DEFAULT_TITLE_SUFFIX, "")


def _unresolved(row: CandidateRow, status: FulfillmentStatus) -> ReconciledRow:
    return ReconciledRow(
        sku=row.sku,
        quantity_requested=row.quantity_requested,
        product_name=UNRESOLVED_PRODUCT_NAME,
        available_quantity=0,
        fulfilled_quantity=0,
        status=status,
        exists=False,
        variant_id=None,
    )


def reconcile_row(row: CandidateRow, catalog: CatalogLookup) -> ReconciledRow:
    """
    Reconcile one candidate row against the catalog.

    Never raises for catalog failures: a failed lookup becomes a
    LOOKUP_ERROR row so the rest of the upload can proceed.
    """
    try:
        variant = catalog.find_variant_by_sku(row.sku)
    except Exception as e:
        logger.error(
            "sku_lookup_failed",
            sku=row.sku,
            error=str(e),
            error_type=type(e).__name__,
        )
        return _unresolved(row, FulfillmentStatus.LOOKUP_ERROR)

    if variant is None:
        logger.info("sku_not_found", sku=row.sku)
        return _unresolved(row, FulfillmentStatus.SKU_NOT_FOUND)

    total_available = variant.total_available
    fulfilled, status = classify_fulfillment(row.quantity_requested, total_available)

    return ReconciledRow(
        sku=row.sku,
        quantity_requested=row.quantity_requested,
        product_name=resolve_product_name(variant, row.sku),
        # Shopify reports oversold stock as negative
        available_quantity=max(total_available, 0),
        fulfilled_quantity=fulfilled,
        status=status,
        exists=True,
        variant_id=variant.id,
    )


def reconcile_rows(
    rows: list[CandidateRow],
    catalog: CatalogLookup,
    max_workers: Optional[int] = None,
) -> list[ReconciledRow]:
    """
    Reconcile every row, keeping input order.

    Lookups run on a bounded thread pool; max_workers=1 runs them one at
    a time.
    """
    if not rows:
        return []

    workers = max_workers or settings.catalog_lookup_concurrency
    workers = max(1, min(workers, len(rows)))

    if workers == 1:
        reconciled = [reconcile_row(row, catalog) for row in rows]
    else:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sku-lookup") as pool:
            # map() yields results in submission order
            reconciled = list(pool.map(lambda r: reconcile_row(r, catalog), rows))

    logger.info(
        "rows_reconciled",
        row_count=len(reconciled),
        workers=workers,
        ok=sum(1 for r in reconciled if r.status == FulfillmentStatus.OK),
        partial=sum(1 for r in reconciled if r.status == FulfillmentStatus.PARTIAL),
        no_stock=sum(1 for r in reconciled if r.status == FulfillmentStatus.NO_STOCK),
        not_found=sum(1 for r in reconciled if r.status == FulfillmentStatus.SKU_NOT_FOUND),
        errors=sum(1 for r in reconciled if r.status == FulfillmentStatus.LOOKUP_ERROR),
    )
    return reconciled
