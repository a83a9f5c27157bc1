# shopify_service.py
from typing import Any, Dict, Iterable, List, Optional

import requests
from pydantic import ValidationError

import schemas
from errors import RemoteFetchError
from utils import get_logger, gid_tail

logger = get_logger("shopify")

# Largest page the Admin API returns for a single connection.
MAX_PAGE_SIZE = 250

MONEY_FRAGMENT = "fragment MoneyFragment on MoneyV2 { amount currencyCode }"

GET_PRODUCTS_BY_IDS_QUERY = f"""
{MONEY_FRAGMENT}
query GetProducts($first: Int!, $productQuery: String!) {{
  products(first: $first, query: $productQuery) {{
    edges {{
      node {{
        id
        title
        media(first: 3) {{
          edges {{
            node {{
              preview {{ image {{ url(transform: {{ maxWidth: 100 }}) }} }}
            }}
          }}
        }}
        priceRangeV2 {{
          maxVariantPrice {{ ...MoneyFragment }}
          minVariantPrice {{ ...MoneyFragment }}
        }}
        variantsCount {{ count }}
      }}
    }}
  }}
}}
"""

MUTATIONS = {
    "productCreate": """
      mutation populateProduct($product: ProductCreateInput!) {
        productCreate(product: $product) {
          product {
            id title handle status
            variants(first: 10) { edges { node { id price barcode createdAt } } }
          }
          userErrors { field message }
        }
      }
    """,
    "updateVariantPrices": """
      mutation UpdateVariantPrices($productId: ID!, $variants: [ProductVariantsBulkInput!]!) {
        productVariantsBulkUpdate(productId: $productId, variants: $variants) {
          productVariants { id price barcode createdAt }
          userErrors { field message }
        }
      }
    """,
}


class ShopifyService:
    """
    Thin client for the Shopify Admin GraphQL API: one HTTP call per method,
    no retries. Every failure surfaces as RemoteFetchError.
    """
    def __init__(self, store_url: str, token: str, api_version: str = "2025-10", timeout: float = 30.0):
        if not all([store_url, token]):
            raise ValueError("Store URL and Access Token are required.")
        self.api_endpoint = f"https://{store_url}/admin/api/{api_version}/graphql.json"
        self.headers = {"Content-Type": "application/json", "X-Shopify-Access-Token": token}
        self.timeout = timeout

    def _execute_query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = {"query": query, "variables": variables or {}}
        try:
            response = requests.post(self.api_endpoint, headers=self.headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            json_response = response.json()
        except requests.exceptions.RequestException as e:
            logger.warning("Shopify request failed: %s", e)
            raise RemoteFetchError(f"Shopify request failed: {e}") from e
        except ValueError as e:
            raise RemoteFetchError("Shopify returned a non-JSON response") from e

        if not isinstance(json_response, dict):
            raise RemoteFetchError("Shopify returned an unexpected payload")
        if json_response.get("errors"):
            logger.warning("GraphQL API Error: %s", json_response["errors"])
            raise RemoteFetchError(f"GraphQL API Error: {json_response['errors']}")
        data = json_response.get("data")
        if not isinstance(data, dict):
            raise RemoteFetchError("Shopify response is missing data")
        return data

    def _flatten_edges(self, data: Optional[Dict]) -> List:
        if not data or "edges" not in data:
            return []
        return [edge["node"] for edge in data.get("edges") or []]

    def _raise_if_user_errors(self, envelope: Dict[str, Any], key: str) -> Dict[str, Any]:
        node = envelope.get(key)
        if not isinstance(node, dict):
            raise RemoteFetchError(f"Shopify response is missing {key}")
        errs = node.get("userErrors") or []
        if errs:
            msg = ", ".join(f"{(e.get('field') or '')}: {e.get('message')}" for e in errs)
            raise RemoteFetchError(f"Shopify User Error: {msg}")
        return node

    def execute_mutation(self, mutation_name: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        mutation = MUTATIONS.get(mutation_name)
        if not mutation:
            raise ValueError(f"Mutation '{mutation_name}' not found.")
        return self._execute_query(mutation, variables)

    # -------------------- catalog reads --------------------
    def fetch_products_by_ids(self, ids: Iterable[str]) -> Dict[str, schemas.RemoteProductView]:
        """
        Looks up many products with a single search query ("id:1 OR id:2 ...").

        Keys of the result are the ids exactly as passed in; products the shop
        no longer has are simply missing from the mapping.
        """
        requested: Dict[str, str] = {}
        for pid in ids:
            tail = gid_tail(pid)
            if tail and tail not in requested:
                requested[tail] = pid
        if not requested:
            return {}

        product_query = " OR ".join(f"id:{tail}" for tail in requested)
        variables = {"first": min(len(requested), MAX_PAGE_SIZE), "productQuery": product_query}
        logger.debug("Fetching %d products from Shopify", len(requested))
        data = self._execute_query(GET_PRODUCTS_BY_IDS_QUERY, variables)

        connection = data.get("products")
        if not isinstance(connection, dict):
            raise RemoteFetchError("Shopify response is missing products")

        result: Dict[str, schemas.RemoteProductView] = {}
        try:
            for node in self._flatten_edges(connection):
                node["images"] = [
                    url for url in (
                        ((m.get("preview") or {}).get("image") or {}).get("url")
                        for m in self._flatten_edges(node.get("media"))
                    ) if url
                ]
                product = schemas.ProductNodeModel.model_validate(node)
                original_id = requested.get(gid_tail(product.id))
                if original_id is not None:
                    result[original_id] = product.to_view()
        except (ValidationError, KeyError, TypeError, AttributeError) as e:
            raise RemoteFetchError(f"Malformed product payload from Shopify: {e}") from e
        return result

    # -------------------- demo / seed mutations --------------------
    def create_product(self, title: str) -> schemas.RemoteProductRef:
        data = self.execute_mutation("productCreate", {"product": {"title": title}})
        node = self._raise_if_user_errors(data, "productCreate")
        product = node.get("product")
        if not isinstance(product, dict):
            raise RemoteFetchError("Shopify did not return the created product")
        product["variants"] = self._flatten_edges(product.get("variants"))
        try:
            return schemas.RemoteProductRef.model_validate(product)
        except ValidationError as e:
            raise RemoteFetchError(f"Malformed product payload from Shopify: {e}") from e

    def set_variant_price(self, product_id: str, variant_id: str, price: str) -> List[schemas.RemoteVariantRef]:
        variables = {"productId": product_id, "variants": [{"id": variant_id, "price": price}]}
        data = self.execute_mutation("updateVariantPrices", variables)
        node = self._raise_if_user_errors(data, "productVariantsBulkUpdate")
        try:
            return [schemas.RemoteVariantRef.model_validate(v) for v in node.get("productVariants") or []]
        except ValidationError as e:
            raise RemoteFetchError(f"Malformed variant payload from Shopify: {e}") from e
