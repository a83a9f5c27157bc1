# routes/catalog.py

import random
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from dependencies import get_catalog
from errors import RemoteFetchError
from shopify_service import ShopifyService
from utils import get_logger

logger = get_logger("routes.catalog")

router = APIRouter(prefix="/api/catalog", tags=["Catalog"])

SNOWBOARD_COLORS = ["Red", "Orange", "Yellow", "Green"]
DEMO_PRICE = "100.00"


@router.post("/populate-product")
def populate_product(catalog: ShopifyService = Depends(get_catalog)) -> Dict[str, Any]:
    """
    Creates a sample snowboard in the shop and prices its first variant.
    """
    title = f"{random.choice(SNOWBOARD_COLORS)} Snowboard"
    try:
        product = catalog.create_product(title)
        if not product.variants:
            raise RemoteFetchError("Created product has no variants")
        variants = catalog.set_variant_price(product.id, product.variants[0].id, DEMO_PRICE)
    except RemoteFetchError as e:
        logger.exception("populate_product failed: %s", e)
        raise HTTPException(status_code=502, detail=e.message)

    logger.info("Seeded product id=%s title=%r", product.id, product.title)
    return {
        "product": product.model_dump(by_alias=True),
        "variant": [v.model_dump(by_alias=True) for v in variants],
    }
