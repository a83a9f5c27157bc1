import pytest

import models
from conftest import FakeCatalog, remote_product
from crud import collection as crud_collection
from errors import RemoteFetchError
from schemas import ProductRef
from services import collection_aggregator


def _collection(db, *ids):
    return crud_collection.create_collection(
        db, "Winter", models.Priority.HIGH, [ProductRef(product_id=pid, name=pid) for pid in ids]
    )


def test_build_view_keeps_association_order_and_drops_missing(db):
    collection = _collection(db, "A", "B", "C")
    catalog = FakeCatalog({
        "C": remote_product("C", "Gloves"),
        "A": remote_product("A", "Jacket"),
    })

    view = collection_aggregator.build_view(collection, catalog)

    assert [p.id for p in view.products] == ["A", "C"]
    assert catalog.calls == [["A", "B", "C"]]
    assert view.collection.id == collection.id
    assert view.collection.title == "Winter"
    assert view.collection.priority == models.Priority.HIGH


def test_build_view_formats_price_and_variant_labels(db):
    collection = _collection(db, "p1")
    catalog = FakeCatalog({"p1": remote_product("p1", "Jacket", "10", "20", "USD", variants=3)})

    product = collection_aggregator.build_view(collection, catalog).products[0]

    assert product.title == "Jacket"
    assert product.price_label == "USD10 - USD20"
    assert product.variants_label == "Total Variants: 3"


def test_build_view_makes_one_lookup_for_large_collections(db):
    ids = [f"gid://shopify/Product/{n}" for n in range(50)]
    collection = _collection(db, *ids)
    catalog = FakeCatalog({pid: remote_product(pid, pid) for pid in ids})

    view = collection_aggregator.build_view(collection, catalog)

    assert len(catalog.calls) == 1
    assert [p.id for p in view.products] == ids


def test_build_view_propagates_catalog_failure(db):
    collection = _collection(db, "p1")
    with pytest.raises(RemoteFetchError):
        collection_aggregator.build_view(collection, FakeCatalog(error="Shopify is down"))
