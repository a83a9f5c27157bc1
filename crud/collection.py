# crud/collection.py

from typing import Iterable, List, Optional
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.orm.attributes import flag_modified
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

import models
import schemas
from errors import CollectionNotFoundError, DuplicateNameError, PersistenceError, StaleVersionError
from utils import get_logger

logger = get_logger("crud.collection")


# --- Queries ---
def list_collections(
    db: Session, name_contains: Optional[str] = None, priority: Optional[models.Priority] = None
) -> List[models.Collection]:
    """
    All collections in creation order, optionally filtered by a name substring
    (case-insensitive) and/or a priority tier.
    """
    query = db.query(models.Collection).options(joinedload(models.Collection.products))

    if name_contains:
        query = query.filter(models.Collection.name.icontains(name_contains.strip(), autoescape=True))

    if priority:
        query = query.filter(models.Collection.priority == priority)

    return query.order_by(models.Collection.created_at.asc()).all()

def get_collection(db: Session, collection_id: str) -> models.Collection:
    collection = (
        db.query(models.Collection)
        .options(joinedload(models.Collection.products))
        .filter(models.Collection.id == collection_id)
        .first()
    )
    if not collection:
        raise CollectionNotFoundError()
    return collection


# --- Helpers ---
def _name_taken(db: Session, name: str, exclude_id: Optional[str] = None) -> bool:
    query = db.query(models.Collection.id).filter(models.Collection.name == name)
    if exclude_id:
        query = query.filter(models.Collection.id != exclude_id)
    return query.first() is not None

def _build_associations(product_refs: Iterable[schemas.ProductRef]) -> List[models.ProductAssociation]:
    """Fresh association rows in submitted order."""
    return [
        models.ProductAssociation(
            product_id=ref.product_id,
            name=ref.name,
            image=ref.image or None,
            position=position,
        )
        for position, ref in enumerate(product_refs)
    ]

def _clear_associations(db: Session, db_collection: models.Collection) -> None:
    """Deletes every stored association row, including rows this session never loaded."""
    (db.query(models.ProductAssociation)
       .filter(models.ProductAssociation.collection_id == db_collection.id)
       .delete(synchronize_session=False))
    db.expire(db_collection, ["products"])

def _commit(db: Session, name: str, exclude_id: Optional[str] = None) -> None:
    try:
        db.commit()
    except StaleDataError as e:
        db.rollback()
        logger.info("Rejected stale write for collection id=%s", exclude_id)
        raise StaleVersionError() from e
    except IntegrityError as e:
        db.rollback()
        if _name_taken(db, name, exclude_id):
            logger.info("Rejected duplicate collection name=%r", name)
            raise DuplicateNameError() from e
        logger.exception("Commit failed for collection name=%r: %s", name, e)
        raise PersistenceError() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Commit failed for collection name=%r: %s", name, e)
        raise PersistenceError() from e


# --- Mutations ---
def create_collection(
    db: Session, name: str, priority: models.Priority, product_refs: Iterable[schemas.ProductRef]
) -> models.Collection:
    db_collection = models.Collection(name=name, priority=priority)
    db_collection.products = _build_associations(product_refs)
    db.add(db_collection)
    _commit(db, name)
    db.refresh(db_collection)
    logger.debug("Created collection id=%s products=%d", db_collection.id, len(db_collection.products))
    return db_collection

def replace_collection(
    db: Session,
    collection_id: str,
    name: str,
    priority: models.Priority,
    product_refs: Iterable[schemas.ProductRef],
    expected_version: Optional[int] = None,
) -> models.Collection:
    """
    Overwrites name and priority and regenerates the whole association set.

    Prior association rows are deleted, never merged, so their ids do not
    survive the call. The collection row is only updated if its version is
    still the one this session loaded, so a write that overlaps another edit
    fails with StaleVersionError and changes nothing. When expected_version is
    given it must also match the loaded version.
    """
    db_collection = get_collection(db, collection_id)
    if expected_version is not None and db_collection.version != expected_version:
        raise StaleVersionError()

    _clear_associations(db, db_collection)
    db_collection.name = name
    db_collection.priority = priority
    # Always emit the versioned UPDATE, even when only products changed.
    flag_modified(db_collection, "name")
    db_collection.products = _build_associations(product_refs)
    _commit(db, name, exclude_id=collection_id)
    db.refresh(db_collection)
    logger.debug("Replaced collection id=%s version=%s products=%d",
                 db_collection.id, db_collection.version, len(db_collection.products))
    return db_collection

def delete_collection(db: Session, collection_id: str) -> None:
    db_collection = get_collection(db, collection_id)
    _clear_associations(db, db_collection)
    db.delete(db_collection)
    try:
        db.commit()
    except StaleDataError as e:
        db.rollback()
        raise StaleVersionError() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Delete failed for collection id=%s: %s", collection_id, e)
        raise PersistenceError("Failed to delete collection") from e
