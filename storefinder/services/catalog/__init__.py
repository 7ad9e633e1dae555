"""
Store catalog service package.

Usage:
    from storefinder.services.catalog import create_store, find_near

    store = create_store(db, {"name": "Blue Moon Cafe", "location": {"coordinates": [-0.1, 51.5]}}, author_id=1)
    nearby = find_near(db, longitude=-0.1, latitude=51.5)

    # Attach a photo; it is resized and written to the content area before the insert
    store = create_store(db, payload, author_id=1, photo=PhotoUpload(data=raw, content_type="image/jpeg"))
"""

from .types import (
    PhotoUpload,
    TagCount,
    TagListing,
    SearchHit,
    NearbyStore,
)
from .errors import (
    CatalogError,
    ValidationError,
    PhotoError,
    InvalidMediaType,
    DecodeError,
    StorageWriteError,
    NotFound,
    Forbidden,
    PersistenceError,
)
from .slugs import slugify, next_available_slug
from .images import ContentArea, ingest_photo
from .guard import assert_owner
from .repository import (
    create_store,
    update_store,
    get_store,
    load_store_for_edit,
    find_by_slug,
    list_stores,
    find_near,
)
from .search import search_stores
from .tags import list_tags, list_stores_by_tag

__all__ = [
    # Types
    "PhotoUpload",
    "TagCount",
    "TagListing",
    "SearchHit",
    "NearbyStore",
    # Errors
    "CatalogError",
    "ValidationError",
    "PhotoError",
    "InvalidMediaType",
    "DecodeError",
    "StorageWriteError",
    "NotFound",
    "Forbidden",
    "PersistenceError",
    # Main entry points
    "create_store",
    "update_store",
    "find_by_slug",
    "list_stores_by_tag",
    "search_stores",
    "find_near",
    "list_tags",
    "get_store",
    "load_store_for_edit",
    "list_stores",
    # Lower-level functions
    "slugify",
    "next_available_slug",
    "ContentArea",
    "ingest_photo",
    "assert_owner",
]
