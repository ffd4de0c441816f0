"""
Unit tests for the draft order client.

Run: pytest tests/unit/test_draft_order_client.py -v
"""

import pytest
import requests
from unittest.mock import MagicMock, patch

from integrations.draft_order_client import DraftOrderClient, build_payload
from models.bulk_order import OrderLineItem, OrderRequest
from exceptions import OrderCreationError


SERVICE_URL = "https://orders.example.test/draft-order-create"


def http_response(status: int = 200, body=None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    response.reason = "Internal Server Error" if status >= 500 else "OK"
    response.text = text
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def order_request():
    return OrderRequest(
        customer_id="gid://shopify/Customer/42",
        customer_name="Bloom Florist",
        line_items=[
            OrderLineItem(variant_id="v1", quantity=3),
            OrderLineItem(variant_id="v2", quantity=1.5),
        ],
        note="Bulk upload for customer: Bloom Florist (Shopify customer ID: 42)",
        total_quantity=4.5,
        shop_id="5550001",
    )


@pytest.fixture
def client():
    return DraftOrderClient(url=SERVICE_URL, timeout=5)


class TestBuildPayload:
    """Tests for build_payload()"""

    def test_wire_format(self, order_request):
        payload = build_payload(order_request)

        assert payload == {
            "shop_id": "5550001",
            "customerId": "gid://shopify/Customer/42",
            "customerName": "Bloom Florist",
            "lineItems": [
                {"quantity": 3, "variantId": "v1"},
                {"quantity": 1.5, "variantId": "v2"},
            ],
            "note": "Bulk upload for customer: Bloom Florist (Shopify customer ID: 42)",
            "totalQuantity": 4.5,
        }
        assert isinstance(payload["lineItems"][0]["quantity"], int)


class TestCreateDraftOrder:
    """Tests for DraftOrderClient.create_draft_order()"""

    def test_success(self, client, order_request):
        body = {
            "success": True,
            "draftOrder": {
                "id": "gid://shopify/DraftOrder/9001",
                "legacyResourceId": 9001,
                "name": "#D24",
            },
        }

        with patch("integrations.draft_order_client.requests.post", return_value=http_response(body=body)) as post:
            order = client.create_draft_order(order_request)

        assert order.id == "gid://shopify/DraftOrder/9001"
        assert order.legacy_resource_id == "9001"
        assert order.label == "#D24"
        assert post.call_args.args[0] == SERVICE_URL
        assert post.call_args.kwargs["timeout"] == 5

    def test_label_falls_back_to_legacy_id(self, client, order_request):
        body = {"success": True, "draftOrder": {"id": "gid://shopify/DraftOrder/9001", "legacyResourceId": "9001"}}

        with patch("integrations.draft_order_client.requests.post", return_value=http_response(body=body)):
            order = client.create_draft_order(order_request)

        assert order.label == "9001"

    def test_non_2xx_carries_body(self, client, order_request):
        response = http_response(status=500, text="<html>Fatal error</html>")

        with patch("integrations.draft_order_client.requests.post", return_value=response):
            with pytest.raises(OrderCreationError) as exc_info:
                client.create_draft_order(order_request)

        assert exc_info.value.details["status"] == 500
        assert exc_info.value.details["body"] == "<html>Fatal error</html>"
        assert exc_info.value.status_code == 503

    def test_unsuccessful_payload_uses_service_message(self, client, order_request):
        body = {"success": False, "error": "Variant is not purchasable"}

        with patch("integrations.draft_order_client.requests.post", return_value=http_response(body=body)):
            with pytest.raises(OrderCreationError) as exc_info:
                client.create_draft_order(order_request)

        assert "Variant is not purchasable" in exc_info.value.message

    def test_missing_draft_order_raises(self, client, order_request):
        with patch("integrations.draft_order_client.requests.post", return_value=http_response(body={"success": True})):
            with pytest.raises(OrderCreationError):
                client.create_draft_order(order_request)

    def test_invalid_json_raises(self, client, order_request):
        response = http_response(body=ValueError("Expecting value"))

        with patch("integrations.draft_order_client.requests.post", return_value=response):
            with pytest.raises(OrderCreationError):
                client.create_draft_order(order_request)

    def test_transport_error_raises(self, client, order_request):
        with patch(
            "integrations.draft_order_client.requests.post",
            side_effect=requests.exceptions.ReadTimeout("read timed out"),
        ):
            with pytest.raises(OrderCreationError):
                client.create_draft_order(order_request)
