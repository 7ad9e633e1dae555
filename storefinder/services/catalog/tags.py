from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from storefinder.db.models.stores import Stores, StoreTags

from .types import TagCount, TagListing


def list_tags(db: Session) -> list[TagCount]:
    """Every tag in use with the number of stores carrying it, most used first."""
    count = func.count(StoreTags.store_id)
    stmt = (
        select(StoreTags.tag, count)
        .group_by(StoreTags.tag)
        .order_by(count.desc(), StoreTags.tag.asc())
    )
    return [TagCount(tag=tag, count=n) for tag, n in db.execute(stmt)]


def list_stores_by_tag(db: Session, tag: Optional[str] = None) -> TagListing:
    """
    Stores carrying `tag` (all stores when tag is empty) together with the
    catalog-wide tag counts. The counts are never scoped to the filtered stores.
    """
    stmt = select(Stores).order_by(Stores.id)
    if tag:
        stmt = stmt.join(StoreTags, StoreTags.store_id == Stores.id).where(StoreTags.tag == tag)
    stores = db.execute(stmt).scalars().all()

    return TagListing(tag=tag or None, tags=list_tags(db), stores=list(stores))
