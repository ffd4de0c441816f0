"""
Unit tests for the Shopify catalog client.

Run: pytest tests/unit/test_shopify_catalog.py -v
"""

import pytest
import requests
from unittest.mock import MagicMock, patch

from integrations.shopify_catalog import ShopifyCatalogClient, numeric_id, sku_search_query
from exceptions import CatalogLookupError


GRAPHQL_URL = "https://test-shop.myshopify.com/admin/api/2024-10/graphql.json"


def graphql_response(body: dict, status: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.json.return_value = body
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status} Error")
    return response


def variant_body(levels: list) -> dict:
    return {
        "data": {
            "productVariants": {
                "edges": [{
                    "node": {
                        "id": "gid://shopify/ProductVariant/111",
                        "sku": "ABC123",
                        "displayName": "Red Rose - Default Title",
                        "product": {"title": "Red Rose"},
                        "inventoryItem": {
                            "inventoryLevels": {
                                "edges": [{"node": {"quantities": q}} for q in levels]
                            }
                        },
                    }
                }]
            }
        }
    }


@pytest.fixture
def client():
    return ShopifyCatalogClient(graphql_url=GRAPHQL_URL, access_token="shpat_test", timeout=5)


class TestNumericId:
    """Tests for numeric_id()"""

    @pytest.mark.parametrize("value,expected", [
        ("gid://shopify/Customer/42", "42"),
        ("gid://shopify/Shop/5550001", "5550001"),
        ("42", "42"),
        ("", ""),
        (None, ""),
    ])
    def test_numeric_id(self, value, expected):
        assert numeric_id(value) == expected


class TestSkuSearchQuery:
    """Tests for sku_search_query()"""

    @pytest.mark.parametrize("sku,expected", [
        ("ABC123", 'sku:"ABC123"'),
        ("RED ROSE-12", 'sku:"RED ROSE-12"'),
        ('12"', 'sku:"12\\""'),
        ("A\\B", 'sku:"A\\\\B"'),
    ])
    def test_quoting(self, sku, expected):
        assert sku_search_query(sku) == expected


class TestFindVariantBySku:
    """Tests for ShopifyCatalogClient.find_variant_by_sku()"""

    def test_parses_variant_and_inventory(self, client):
        body = variant_body([
            [{"name": "available", "quantity": 4}],
            [{"name": "available", "quantity": 3}],
            [],
        ])

        with patch("integrations.shopify_catalog.requests.post", return_value=graphql_response(body)) as post:
            variant = client.find_variant_by_sku("ABC123")

        assert variant.id == "gid://shopify/ProductVariant/111"
        assert variant.display_name == "Red Rose - Default Title"
        assert variant.product_title == "Red Rose"
        assert variant.available_by_location == [4, 3, None]
        assert variant.total_available == 7

        kwargs = post.call_args.kwargs
        assert kwargs["json"]["variables"] == {"query": 'sku:"ABC123"'}
        assert kwargs["headers"]["X-Shopify-Access-Token"] == "shpat_test"
        assert kwargs["timeout"] == 5

    def test_no_match_returns_none(self, client):
        body = {"data": {"productVariants": {"edges": []}}}

        with patch("integrations.shopify_catalog.requests.post", return_value=graphql_response(body)):
            assert client.find_variant_by_sku("NOPE") is None

    def test_quotes_in_sku_are_escaped(self, client):
        body = {"data": {"productVariants": {"edges": []}}}

        with patch("integrations.shopify_catalog.requests.post", return_value=graphql_response(body)) as post:
            client.find_variant_by_sku('12" TILE')

        assert post.call_args.kwargs["json"]["variables"] == {"query": 'sku:"12\\" TILE"'}

    def test_non_exact_match_returns_none(self, client):
        """A search hit whose SKU differs (case or prefix) is not a match."""
        body = variant_body([[{"name": "available", "quantity": 4}]])

        with patch("integrations.shopify_catalog.requests.post", return_value=graphql_response(body)):
            assert client.find_variant_by_sku("abc123") is None

    def test_picks_exact_sku_among_results(self, client):
        body = variant_body([[{"name": "available", "quantity": 4}]])
        exact = body["data"]["productVariants"]["edges"][0]
        near = {"node": dict(exact["node"], id="gid://shopify/ProductVariant/999", sku="ABC123-XL")}
        body["data"]["productVariants"]["edges"] = [near, exact]

        with patch("integrations.shopify_catalog.requests.post", return_value=graphql_response(body)):
            variant = client.find_variant_by_sku("ABC123")

        assert variant.id == "gid://shopify/ProductVariant/111"

    def test_graphql_errors_raise(self, client):
        body = {"errors": [{"message": "Throttled"}]}

        with patch("integrations.shopify_catalog.requests.post", return_value=graphql_response(body)):
            with pytest.raises(CatalogLookupError) as exc_info:
                client.find_variant_by_sku("ABC123")

        assert exc_info.value.status_code == 503
        assert exc_info.value.details["errors"] == [{"message": "Throttled"}]

    def test_http_error_raises(self, client):
        with patch("integrations.shopify_catalog.requests.post", return_value=graphql_response({}, status=502)):
            with pytest.raises(CatalogLookupError):
                client.find_variant_by_sku("ABC123")

    def test_transport_error_raises(self, client):
        with patch(
            "integrations.shopify_catalog.requests.post",
            side_effect=requests.exceptions.ConnectTimeout("timed out"),
        ):
            with pytest.raises(CatalogLookupError):
                client.find_variant_by_sku("ABC123")


class TestGetShopId:
    """Tests for ShopifyCatalogClient.get_shop_id()"""

    def test_returns_numeric_id(self, client):
        body = {"data": {"shop": {"id": "gid://shopify/Shop/5550001"}}}

        with patch("integrations.shopify_catalog.requests.post", return_value=graphql_response(body)):
            assert client.get_shop_id() == "5550001"

    def test_failure_returns_none(self, client):
        with patch(
            "integrations.shopify_catalog.requests.post",
            side_effect=requests.exceptions.ConnectionError("refused"),
        ):
            assert client.get_shop_id() is None
