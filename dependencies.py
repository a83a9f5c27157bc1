# dependencies.py
from fastapi import HTTPException

from config import settings
from shopify_service import ShopifyService


def get_catalog() -> ShopifyService:
    """
    FastAPI dependency that provides the Shopify catalog client for the configured shop.
    """
    try:
        return ShopifyService(
            store_url=settings.shop_url,
            token=settings.shop_token,
            api_version=settings.shopify_api_version,
            timeout=settings.shopify_timeout,
        )
    except ValueError as e:
        raise HTTPException(status_code=503, detail=f"Shopify store is not configured: {e}")
