"""
Client for the external draft order service.

Posts the consolidated bulk order and returns the created draft order.
"""

from typing import Optional
import requests
import structlog

from config import settings
from exceptions import OrderCreationError
from models.bulk_order import CreatedOrder, OrderRequest

logger = structlog.get_logger(__name__)

# Keep diagnostics bounded when the service returns an HTML error page
MAX_ERROR_BODY_CHARS = 2000


def _as_number(value: float):
    """Send whole quantities as integers."""
    return int(value) if float(value).is_integer() else value


def build_payload(request: OrderRequest) -> dict:
    """Wire format expected by the draft order service."""
    return {
        "shop_id": request.shop_id,
        "customerId": request.customer_id,
        "customerName": request.customer_name,
        "lineItems": [
            {
                "quantity": _as_number(item.quantity),
                "variantId": item.variant_id,
            }
            for item in request.line_items
        ],
        "note": request.note,
        "totalQuantity": _as_number(request.total_quantity),
    }


class DraftOrderClient:
    """HTTP client for draft order creation."""

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url or settings.draft_order_service_url
        self.timeout = timeout or settings.external_request_timeout_seconds

    def create_draft_order(self, request: OrderRequest) -> CreatedOrder:
        """
        Create a draft order.

        Returns:
            CreatedOrder descriptor

        Raises:
            OrderCreationError: Non-2xx response, unsuccessful payload, or
                transport failure
        """
        payload = build_payload(request)

        logger.info(
            "draft_order_request",
            shop_id=request.shop_id,
            line_items=len(request.line_items),
            total_quantity=request.total_quantity,
        )

        try:
            response = requests.post(self.url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("draft_order_request_failed", error=str(e))
            raise OrderCreationError(str(e)) from e

        if not response.ok:
            body = (response.text or "")[:MAX_ERROR_BODY_CHARS]
            logger.error(
                "draft_order_http_error",
                status=response.status_code,
                body=body,
            )
            raise OrderCreationError(
                f"HTTP error {response.status_code} {response.reason or ''}".strip(),
                details={"status": response.status_code, "body": body},
            )

        try:
            result = response.json()
        except ValueError as e:
            logger.error("draft_order_invalid_json", error=str(e))
            raise OrderCreationError("Invalid response from draft order service") from e

        logger.debug("draft_order_response", response=result)

        draft = result.get("draftOrder") if isinstance(result, dict) else None
        if not isinstance(result, dict) or not result.get("success") or not draft or not draft.get("id"):
            message = (result.get("error") if isinstance(result, dict) else None) \
                or "Invalid response from draft order service"
            logger.error("draft_order_rejected", error=message)
            raise OrderCreationError(message, details={"response": result})

        order = CreatedOrder(
            id=draft["id"],
            legacy_resource_id=str(draft.get("legacyResourceId") or ""),
            name=draft.get("name") or "",
        )

        logger.info(
            "draft_order_created",
            order_id=order.id,
            legacy_id=order.legacy_resource_id,
            name=order.name,
        )
        return order


_client: Optional[DraftOrderClient] = None


def get_draft_order_client() -> DraftOrderClient:
    global _client
    if _client is None:
        _client = DraftOrderClient()
    return _client
