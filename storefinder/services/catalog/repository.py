"""
Catalog repository: create, update and fetch stores.

Every function takes the request's Session first and plain mappings/scalars after it;
the acting user's id is passed in explicitly and never read from the payload.
"""

import logging
from typing import Any, Mapping, Optional, Type, TypeVar

import pydantic
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from storefinder.core.config import settings
from storefinder.db.models.stores import Stores
from storefinder.schemas.stores import StoreCreate, StoreUpdate

from .errors import ValidationError, NotFound, PersistenceError
from .geo import haversine_m, bounding_box
from .guard import assert_owner
from .images import ContentArea, ingest_photo
from .slugs import slugify, next_available_slug
from .types import NearbyStore, PhotoUpload


logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=pydantic.BaseModel)


def _validate(schema: Type[SchemaT], payload: Mapping[str, Any]) -> SchemaT:
    try:
        return schema.model_validate(payload)
    except pydantic.ValidationError as e:
        messages = []
        for err in e.errors():
            field = ".".join(str(part) for part in err["loc"])
            messages.append(f"{field}: {err['msg']}" if field else err["msg"])
        raise ValidationError(messages) from e


def _ingest(photo: Optional[PhotoUpload], content: Optional[ContentArea]) -> tuple[Optional[str], ContentArea]:
    content = content or ContentArea.from_settings()
    if photo is None:
        return None, content
    return ingest_photo(photo, content), content


# ==================== Writes ====================

def create_store(
    db: Session,
    payload: Mapping[str, Any],
    author_id: int,
    photo: Optional[PhotoUpload] = None,
    content: Optional[ContentArea] = None,
) -> Stores:
    """
    Create a store owned by author_id.

    Flow:
    1. Validate the payload (name and location are required)
    2. Ingest the photo, if any
    3. Derive a unique slug and insert, re-deriving on a slug collision
    4. Discard the photo again if the store could not be saved
    """
    data = _validate(StoreCreate, payload)
    filename, content = _ingest(photo, content)

    try:
        return _insert_with_unique_slug(db, data, author_id, filename)
    except PersistenceError:
        if filename:
            content.discard(filename)
        raise


def _is_slug_conflict(e: IntegrityError) -> bool:
    # sqlite: "UNIQUE constraint failed: stores.slug", postgres names the slug index or key
    return "slug" in str(e.orig).lower()


def _insert_with_unique_slug(db: Session, data: StoreCreate, author_id: int, photo: Optional[str]) -> Stores:
    candidate = slugify(data.name)
    lng, lat = data.location.coordinates

    for attempt in range(1, settings.SLUG_MAX_ATTEMPTS + 1):
        store = Stores(
            name=data.name,
            slug=next_available_slug(db, candidate),
            description=data.description,
            longitude=lng,
            latitude=lat,
            address=data.location.address,
            photo=photo or settings.DEFAULT_PHOTO,
            author_id=author_id,
        )
        store.set_tags(data.tags)
        db.add(store)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if not _is_slug_conflict(e):
                logger.error(f"Failed to save store '{data.name}': {e}")
                raise PersistenceError(f"Could not save store {data.name}") from e
            # another request took this slug between our read and insert
            continue
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to save store '{data.name}': {e}")
            raise PersistenceError(f"Could not save store {data.name}") from e

        db.refresh(store)
        return store

    logger.error(f"Gave up saving store '{data.name}' after {settings.SLUG_MAX_ATTEMPTS} slug collisions")
    raise PersistenceError(f"Could not save store {data.name}")


def update_store(
    db: Session,
    store_id: int,
    author_id: int,
    patch: Mapping[str, Any],
    photo: Optional[PhotoUpload] = None,
    content: Optional[ContentArea] = None,
) -> Stores:
    """Apply the mutable fields of patch to a store owned by author_id. Slug and author never change."""
    store = get_store(db, store_id)
    assert_owner(store, author_id)

    changes = _validate(StoreUpdate, patch)
    fields = changes.model_dump(exclude_unset=True)
    filename, content = _ingest(photo, content)

    if changes.name is not None:
        store.name = changes.name
    if "description" in fields:
        store.description = changes.description
    if changes.location is not None:
        if changes.location.coordinates is not None:
            store.longitude, store.latitude = changes.location.coordinates
        if "address" in fields["location"]:
            store.address = changes.location.address
    if changes.tags is not None:
        store.set_tags(changes.tags)
    if filename:
        store.photo = filename

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        if filename:
            content.discard(filename)
        logger.error(f"Failed to update store {store_id}: {e}")
        raise PersistenceError(f"Could not update store {store_id}") from e

    db.refresh(store)
    return store


# ==================== Reads ====================

def get_store(db: Session, store_id: int) -> Stores:
    store = db.get(Stores, store_id)
    if store is None:
        raise NotFound(f"Store {store_id} not found")
    return store


def load_store_for_edit(db: Session, store_id: int, author_id: int) -> Stores:
    """Store for the edit form; only its author may open it."""
    store = get_store(db, store_id)
    assert_owner(store, author_id)
    return store


def find_by_slug(db: Session, slug: str) -> Stores:
    stmt = select(Stores).options(joinedload(Stores.author)).where(Stores.slug == slug)
    store = db.execute(stmt).scalars().first()
    if store is None:
        raise NotFound(f"No store at {slug}")
    return store


def list_stores(db: Session, skip: int = 0, limit: int = 100) -> list[Stores]:
    stmt = select(Stores).order_by(Stores.id).offset(skip).limit(limit)
    return list(db.execute(stmt).scalars().all())


def find_near(
    db: Session,
    longitude: float,
    latitude: float,
    max_distance_m: float = 10000,
    limit: int = 10,
) -> list[NearbyStore]:
    """Stores within max_distance_m of [longitude, latitude], nearest first."""
    if limit <= 0:
        return []

    min_lat, max_lat, lng_range = bounding_box(longitude, latitude, max_distance_m)
    stmt = select(Stores).where(Stores.latitude.between(min_lat, max_lat)).order_by(Stores.id)
    if lng_range is not None:
        stmt = stmt.where(Stores.longitude.between(*lng_range))

    nearby = []
    for store in db.execute(stmt).scalars():
        distance = haversine_m(longitude, latitude, store.longitude, store.latitude)
        if distance <= max_distance_m:
            nearby.append(NearbyStore(
                slug=store.slug,
                name=store.name,
                description=store.description,
                location=store.location,
                photo=store.photo,
                distance_m=distance,
            ))

    nearby.sort(key=lambda s: s.distance_m)
    return nearby[:limit]
