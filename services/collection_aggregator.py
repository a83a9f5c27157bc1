# services/collection_aggregator.py

from typing import Dict, List, Protocol, Iterable

import models
import schemas
from utils import get_logger

logger = get_logger("aggregator")


class ProductCatalog(Protocol):
    def fetch_products_by_ids(self, ids: Iterable[str]) -> Dict[str, schemas.RemoteProductView]: ...


def distinct_product_ids(collection: models.Collection) -> List[str]:
    """Product ids of the collection in association order, first occurrence wins."""
    ids: List[str] = []
    for assoc in collection.products:
        if assoc.product_id not in ids:
            ids.append(assoc.product_id)
    return ids

def build_view(collection: models.Collection, catalog: ProductCatalog) -> schemas.CollectionView:
    """
    Merges a stored collection with live catalog data.

    One catalog lookup per call. Output follows association order; products the
    catalog did not return are left out rather than padded with placeholders.
    """
    ids = distinct_product_ids(collection)
    remote = catalog.fetch_products_by_ids(ids) if ids else {}

    products = [remote[pid] for pid in ids if pid in remote]
    if len(products) < len(ids):
        logger.info("Collection id=%s: %d of %d products not found in catalog",
                    collection.id, len(ids) - len(products), len(ids))

    return schemas.CollectionView(
        collection=schemas.CollectionSummary(id=collection.id, title=collection.name, priority=collection.priority),
        products=products,
    )
