"""
Append-only history of draft orders created from bulk uploads.
"""
import structlog
from typing import Optional

from config import get_supabase_client, settings
from exceptions import DatabaseError
from models.bulk_order import HistoryRecordCreate, HistoryRecordResponse

logger = structlog.get_logger(__name__)


class OrderHistoryService:
    def __init__(self):
        self.db = get_supabase_client()
        self.table = settings.history_table

    def record_order(self, record: HistoryRecordCreate) -> HistoryRecordResponse:
        """Append one created order. Raises DatabaseError on failure."""
        data = record.model_dump(mode="json")
        try:
            result = self.db.table(self.table).insert(data).execute()
        except Exception as e:
            logger.error(
                "order_history_insert_failed",
                order_id=record.order_id,
                error=str(e),
            )
            raise DatabaseError("insert", str(e), {"table": self.table}) from e

        if not result.data:
            raise DatabaseError("insert", "no row returned", {"table": self.table})

        logger.info(
            "order_history_recorded",
            order_id=record.order_id,
            customer_id=record.customer_id,
            total_quantity=record.total_quantity,
        )
        return HistoryRecordResponse(**result.data[0])

    def get_recent(
        self,
        shop_id: Optional[str],
        limit: Optional[int] = None,
    ) -> list[HistoryRecordResponse]:
        """Newest records for a shop. Without a shop id nothing is returned."""
        if not shop_id:
            logger.warning("order_history_no_shop_id")
            return []

        limit = limit or settings.history_limit
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("shop_id", shop_id)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            logger.error("order_history_query_failed", shop_id=shop_id, error=str(e))
            raise DatabaseError("select", str(e), {"table": self.table}) from e

        return [HistoryRecordResponse(**row) for row in result.data or []]


_service: Optional[OrderHistoryService] = None


def get_order_history_service() -> OrderHistoryService:
    global _service
    if _service is None:
        _service = OrderHistoryService()
    return _service
