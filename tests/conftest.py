import os
from typing import Any, Dict, Iterable, List, Optional

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["SHOP_URL"] = "test-shop.myshopify.com"
os.environ["SHOP_TOKEN"] = "shpat_test"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import schemas
from database import Base, get_db
from dependencies import get_catalog
from errors import RemoteFetchError
from main import TOKEN_COOKIE, app, create_access_token


def remote_product(pid: str, title: str, low: str = "10", high: str = "20",
                   currency: str = "USD", variants: int = 1) -> schemas.RemoteProductView:
    return schemas.RemoteProductView.model_validate({
        "id": pid,
        "title": title,
        "images": [],
        "priceRange": {
            "min": {"amount": low, "currencyCode": currency},
            "max": {"amount": high, "currencyCode": currency},
        },
        "totalVariants": variants,
    })


class FakeCatalog:
    """Stands in for ShopifyService; records every lookup."""

    def __init__(self, products: Optional[Dict[str, schemas.RemoteProductView]] = None, error: Optional[str] = None):
        self.products = products or {}
        self.error = error
        self.calls: List[List[str]] = []
        self.created: List[str] = []
        self.prices: List[Dict[str, Any]] = []

    def fetch_products_by_ids(self, ids: Iterable[str]) -> Dict[str, schemas.RemoteProductView]:
        ids = list(ids)
        self.calls.append(ids)
        if self.error:
            raise RemoteFetchError(self.error)
        return {pid: self.products[pid] for pid in ids if pid in self.products}

    def create_product(self, title: str) -> schemas.RemoteProductRef:
        if self.error:
            raise RemoteFetchError(self.error)
        self.created.append(title)
        return schemas.RemoteProductRef(
            id="gid://shopify/Product/900",
            title=title,
            handle=title.lower().replace(" ", "-"),
            status="ACTIVE",
            variants=[schemas.RemoteVariantRef(id="gid://shopify/ProductVariant/901", price="0.00")],
        )

    def set_variant_price(self, product_id: str, variant_id: str, price: str) -> List[schemas.RemoteVariantRef]:
        self.prices.append({"product_id": product_id, "variant_id": variant_id, "price": price})
        return [schemas.RemoteVariantRef(id=variant_id, price=price)]


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def client(session_factory, catalog):
    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_catalog] = lambda: catalog
    with TestClient(app) as test_client:
        test_client.cookies.set(TOKEN_COOKIE, create_access_token("admin"))
        yield test_client
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_catalog, None)
