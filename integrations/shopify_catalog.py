"""
Shopify Admin GraphQL client for catalog lookups.

Finds a product variant by exact SKU together with its per-location
"available" inventory, and resolves the shop's numeric id.
"""

from dataclasses import dataclass, field
from typing import Optional
import requests
import structlog

from config import settings
from exceptions import CatalogLookupError

logger = structlog.get_logger(__name__)


VARIANT_BY_SKU_QUERY = """
query variantBySku($query: String!) {
  productVariants(first: 5, query: $query) {
    edges {
      node {
        id
        sku
        displayName
        product { title }
        inventoryItem {
          inventoryLevels(first: 10) {
            edges {
              node {
                quantities(names: ["available"]) {
                  name
                  quantity
                }
              }
            }
          }
        }
      }
    }
  }
}
"""

SHOP_ID_QUERY = """
query {
  shop {
    id
  }
}
"""


@dataclass
class CatalogVariant:
    """Variant matched by SKU."""
    id: str
    sku: str
    display_name: Optional[str] = None
    product_title: Optional[str] = None
    # One entry per inventory location; None when the location has no "available" quantity
    available_by_location: list[Optional[int]] = field(default_factory=list)

    @property
    def total_available(self) -> int:
        """Sum of available quantity across locations."""
        return sum(q for q in self.available_by_location if q is not None)


def numeric_id(gid: Optional[str]) -> str:
    """
    Numeric part of a Shopify GID.

    "gid://shopify/Customer/123" -> "123"; other values are returned as-is.
    """
    if not gid:
        return ""
    if gid.startswith("gid://"):
        return gid.rstrip("/").split("/")[-1]
    return gid


def sku_search_query(sku: str) -> str:
    """
    Search-syntax filter for one SKU.

    The SKU is quoted so spaces and dashes are matched literally; embedded
    backslashes and quotes are escaped.
    """
    escaped = sku.replace("\\", "\\\\").replace('"', '\\"')
    return f'sku:"{escaped}"'


class ShopifyCatalogClient:
    """
    Thin wrapper over the Admin GraphQL endpoint.

    Raises CatalogLookupError for transport failures and GraphQL errors;
    "no match" is not an error and returns None.
    """

    def __init__(
        self,
        graphql_url: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.graphql_url = graphql_url or settings.shopify_graphql_url
        self.access_token = access_token or settings.shopify_access_token or ""
        self.timeout = timeout or settings.external_request_timeout_seconds

    def _execute(self, query: str, variables: Optional[dict] = None) -> dict:
        headers = {
            "X-Shopify-Access-Token": self.access_token,
            "Content-Type": "application/json",
        }
        payload = {"query": query, "variables": variables or {}}

        try:
            response = requests.post(
                self.graphql_url,
                headers=headers,
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.RequestException as e:
            logger.error("shopify_request_failed", error=str(e))
            raise CatalogLookupError(
                f"Shopify request failed: {e}",
                details={"url": self.graphql_url}
            ) from e
        except ValueError as e:
            logger.error("shopify_invalid_json", error=str(e))
            raise CatalogLookupError("Shopify returned invalid JSON") from e

        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            logger.error("shopify_graphql_errors", errors=errors)
            raise CatalogLookupError(
                "Shopify GraphQL returned errors",
                details={"errors": errors}
            )

        return body.get("data") or {}

    def find_variant_by_sku(self, sku: str) -> Optional[CatalogVariant]:
        """
        Look up a variant by exact SKU.

        Returns:
            CatalogVariant, or None if no variant has this SKU
        """
        data = self._execute(VARIANT_BY_SKU_QUERY, {"query": sku_search_query(sku)})

        edges = (data.get("productVariants") or {}).get("edges") or []
        # Search is tokenised and case-insensitive; keep only the exact SKU
        node = next(
            (
                edge["node"] for edge in edges
                if (edge or {}).get("node") and edge["node"].get("sku") == sku
            ),
            None,
        )
        if not node:
            logger.debug("variant_not_found", sku=sku, candidates=len(edges))
            return None

        levels = ((node.get("inventoryItem") or {}).get("inventoryLevels") or {}).get("edges") or []
        available_by_location: list[Optional[int]] = []
        for edge in levels:
            level = (edge or {}).get("node")
            if not level:
                continue
            entry = next(
                (q for q in level.get("quantities") or [] if q.get("name") == "available"),
                None,
            )
            quantity = entry.get("quantity") if entry else None
            available_by_location.append(
                quantity if isinstance(quantity, int) and not isinstance(quantity, bool) else None
            )

        return CatalogVariant(
            id=node["id"],
            sku=node.get("sku") or sku,
            display_name=node.get("displayName"),
            product_title=(node.get("product") or {}).get("title"),
            available_by_location=available_by_location,
        )

    def get_shop_id(self) -> Optional[str]:
        """Numeric id of the shop, or None if it cannot be resolved."""
        try:
            data = self._execute(SHOP_ID_QUERY)
        except CatalogLookupError as e:
            logger.error("shop_id_lookup_failed", error=e.message)
            return None

        shop_id = numeric_id((data.get("shop") or {}).get("id"))
        logger.info("shop_id_resolved", shop_id=shop_id)
        return shop_id or None


_client: Optional[ShopifyCatalogClient] = None


def get_catalog_client() -> ShopifyCatalogClient:
    global _client
    if _client is None:
        _client = ShopifyCatalogClient()
    return _client
