"""
Business logic services.

Each service handles one domain area.
"""

from services.reconciliation_service import reconcile_row, reconcile_rows
from services.order_history_service import OrderHistoryService, get_order_history_service
from services.bulk_order_service import BulkOrderService, get_bulk_order_service

__all__ = [
    "reconcile_row",
    "reconcile_rows",
    "OrderHistoryService",
    "get_order_history_service",
    "BulkOrderService",
    "get_bulk_order_service",
]
