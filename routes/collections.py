# routes/collections.py

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

import models
import schemas
from crud import collection as crud_collection
from database import get_db
from dependencies import get_catalog
from errors import (
    CollectionNotFoundError,
    DuplicateNameError,
    FormValidationError,
    PersistenceError,
    RemoteFetchError,
    StaleVersionError,
)
from services import collection_aggregator
from shopify_service import ShopifyService
from utils import get_logger

logger = get_logger("routes.collections")

router = APIRouter(
    prefix="/api/collections",
    tags=["Collections"],
    responses={404: {"description": "Not found"}},
)

PRIORITY_ERROR = "Priority must be one of " + ", ".join(p.value for p in models.Priority)

# ---------- helpers ----------

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})

def _parse_priority(value: Optional[str]) -> Optional[models.Priority]:
    if not value:
        return None
    try:
        return models.Priority(value)
    except ValueError:
        raise FormValidationError(PRIORITY_ERROR)

def _parse_form(payload: Dict[str, Any]) -> schemas.CollectionForm:
    """
    Validates a submitted collection form. Runs before any store access.
    """
    title = payload.get("title")
    priority = payload.get("priority")
    products = payload.get("products")

    if not isinstance(title, str) or not title.strip() or not priority or products is None:
        raise FormValidationError()
    _parse_priority(priority)
    if not isinstance(products, list):
        raise FormValidationError()
    if not products:
        raise FormValidationError("At least 1 Product needs to be added")
    seen = set()
    for p in products:
        if not isinstance(p, dict) or not isinstance(p.get("productId"), str) or not p["productId"]:
            raise FormValidationError("Each product needs a productId")
        if p["productId"] in seen:
            raise FormValidationError("Each product can only be added once")
        seen.add(p["productId"])

    try:
        return schemas.CollectionForm.model_validate(payload)
    except ValidationError as e:
        logger.debug("Collection form rejected: %s", e)
        raise FormValidationError("Invalid collection data")

def _product_refs(collection: models.Collection) -> List[schemas.ProductRef]:
    return [
        schemas.ProductRef(product_id=a.product_id, name=a.name, image=a.image)
        for a in collection.products
    ]

def _load(db: Session, collection_id: str) -> models.Collection:
    try:
        return crud_collection.get_collection(db, collection_id)
    except CollectionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

def _existing_collection(collection_id: str, db: Session = Depends(get_db)) -> models.Collection:
    return _load(db, collection_id)

# ---------- endpoints ----------

@router.get("", response_model=List[schemas.CollectionRow])
def list_collections(
    db: Session = Depends(get_db),
    search: Optional[str] = Query(None, description="Case-insensitive name filter"),
    priority: Optional[str] = Query(None, description="HIGH, MEDIUM or LOW"),
):
    """
    All collections ordered by creation time, oldest first.
    """
    try:
        tier = _parse_priority(priority)
    except FormValidationError as e:
        return _error(400, e.message)

    rows = []
    for c in crud_collection.list_collections(db, name_contains=search, priority=tier):
        products = _product_refs(c)
        rows.append(schemas.CollectionRow(
            id=c.id,
            name=c.name,
            priority=c.priority,
            created_at=c.created_at,
            product_count=len(products),
            products=products,
        ))
    return rows

@router.post("")
def create_collection(payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    try:
        form = _parse_form(payload)
    except FormValidationError as e:
        return _error(400, e.message)

    try:
        collection = crud_collection.create_collection(db, form.title, form.priority, form.products)
    except DuplicateNameError as e:
        return _error(409, e.message)
    except PersistenceError as e:
        return _error(500, e.message)

    logger.info("Collection created id=%s name=%r", collection.id, collection.name)
    return {"success": True, "id": collection.id}

@router.get("/{collection_id}/edit", response_model=schemas.CollectionEditForm)
def get_collection_form(collection_id: str, db: Session = Depends(get_db)):
    """
    Current values of a collection, shaped like the form that updates it.
    """
    collection = _load(db, collection_id)
    return schemas.CollectionEditForm(
        id=collection.id,
        title=collection.name,
        priority=collection.priority,
        version=collection.version,
        products=_product_refs(collection),
    )

@router.post("/{collection_id}")
def update_collection(collection_id: str, payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    try:
        form = _parse_form(payload)
    except FormValidationError as e:
        return _error(400, e.message)

    try:
        collection = crud_collection.replace_collection(
            db, collection_id, form.title, form.priority, form.products, expected_version=form.version
        )
    except CollectionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except (DuplicateNameError, StaleVersionError) as e:
        return _error(409, e.message)
    except PersistenceError as e:
        return _error(500, e.message)

    logger.info("Collection updated id=%s version=%s", collection.id, collection.version)
    return {"success": True, "id": collection.id}

@router.get("/{collection_id}", response_model=schemas.CollectionView)
def view_collection(
    collection_id: str,
    collection: models.Collection = Depends(_existing_collection),
    catalog: ShopifyService = Depends(get_catalog),
):
    """
    A collection merged with live product data from Shopify.

    The collection is resolved before the catalog client, so an unknown id is
    a 404 even when the shop is not configured.
    """
    try:
        return collection_aggregator.build_view(collection, catalog)
    except RemoteFetchError as e:
        logger.error("View of collection id=%s failed: %s", collection_id, e.message)
        raise HTTPException(status_code=502, detail=e.message)

@router.delete("/{collection_id}")
def delete_collection(collection_id: str, db: Session = Depends(get_db)):
    try:
        crud_collection.delete_collection(db, collection_id)
    except CollectionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except StaleVersionError as e:
        return _error(409, e.message)
    except PersistenceError as e:
        return _error(500, e.message)
    logger.info("Collection deleted id=%s", collection_id)
    return {"success": True}
