# schemas.py
from __future__ import annotations

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from models import Priority

# =========================
# Base model configurations
# =========================

class ORMBase(BaseModel):
    """Base for models mapped to SQLAlchemy objects."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

class APIBase(BaseModel):
    """Base for models mapped to external API payloads."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

# ======================================================
# Collection form payloads (create / edit)
# ======================================================

class ProductRef(ORMBase):
    product_id: str = Field(..., alias="productId", min_length=1)
    name: str = ""
    image: Optional[str] = None

class CollectionForm(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    priority: Priority
    products: List[ProductRef]
    version: Optional[int] = None

    @model_validator(mode="after")
    def _strip_title(self):
        self.title = self.title.strip()
        return self

class CollectionEditForm(ORMBase):
    id: str
    title: str
    priority: Priority
    version: int
    products: List[ProductRef] = Field(default_factory=list)

# ======================================================
# List rows
# ======================================================

class CollectionRow(ORMBase):
    id: str
    name: str
    priority: Priority
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    product_count: int = Field(0, alias="productCount")
    products: List[ProductRef] = Field(default_factory=list)

# ======================================================
# View models (local collection + remote catalog data)
# ======================================================

class Money(APIBase):
    amount: str
    currency_code: str = Field(..., alias="currencyCode")

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_as_text(cls, v):
        return v if isinstance(v, str) else str(v)

    def label(self) -> str:
        return f"{self.currency_code}{self.amount}"

class PriceRange(APIBase):
    min: Money
    max: Money

class RemoteProductView(APIBase):
    id: str
    title: str
    images: List[str] = Field(default_factory=list)
    price_range: PriceRange = Field(..., alias="priceRange")
    total_variants: int = Field(0, alias="totalVariants")
    price_label: Optional[str] = Field(None, alias="priceLabel")
    variants_label: Optional[str] = Field(None, alias="variantsLabel")

    @model_validator(mode="after")
    def _derive_labels(self):
        if not self.price_label:
            self.price_label = f"{self.price_range.min.label()} - {self.price_range.max.label()}"
        if not self.variants_label:
            self.variants_label = f"Total Variants: {self.total_variants}"
        return self

class CollectionSummary(ORMBase):
    id: str
    title: str
    priority: Priority

class CollectionView(BaseModel):
    collection: CollectionSummary
    products: List[RemoteProductView] = Field(default_factory=list)

# ======================================================
# Shopify GraphQL Ingest Models
# ======================================================

class PriceRangeV2Model(APIBase):
    min_variant_price: Money = Field(..., alias="minVariantPrice")
    max_variant_price: Money = Field(..., alias="maxVariantPrice")

class CountModel(APIBase):
    count: int = 0

class ProductNodeModel(APIBase):
    id: str
    title: str
    images: List[str] = Field(default_factory=list)
    price_range_v2: PriceRangeV2Model = Field(..., alias="priceRangeV2")
    variants_count: Optional[CountModel] = Field(None, alias="variantsCount")

    def to_view(self) -> RemoteProductView:
        return RemoteProductView(
            id=self.id,
            title=self.title,
            images=self.images,
            price_range=PriceRange(min=self.price_range_v2.min_variant_price, max=self.price_range_v2.max_variant_price),
            total_variants=self.variants_count.count if self.variants_count else 0,
        )

class RemoteVariantRef(APIBase):
    id: str
    price: Optional[str] = None

class RemoteProductRef(APIBase):
    id: str
    title: Optional[str] = None
    handle: Optional[str] = None
    status: Optional[str] = None
    variants: List[RemoteVariantRef] = Field(default_factory=list)
