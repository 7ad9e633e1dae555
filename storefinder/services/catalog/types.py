"""
Internal value types returned by the catalog service.
Plain dataclasses, decoupled from the SQLAlchemy models.
"""

from dataclasses import dataclass, field
from typing import Optional

from storefinder.db.models.stores import Stores


@dataclass
class PhotoUpload:
    """Raw upload as received by the controller."""
    data: bytes
    content_type: str
    filename: Optional[str] = None


@dataclass
class TagCount:
    tag: str
    count: int


@dataclass
class TagListing:
    tag: Optional[str]
    tags: list[TagCount] = field(default_factory=list)
    stores: list[Stores] = field(default_factory=list)


@dataclass
class SearchHit:
    store: Stores
    score: float

    @property
    def slug(self) -> str:
        return self.store.slug

    @property
    def name(self) -> str:
        return self.store.name

    @property
    def description(self) -> Optional[str]:
        return self.store.description

    @property
    def photo(self) -> str:
        return self.store.photo


@dataclass
class NearbyStore:
    """Projection of a store for map results."""
    slug: str
    name: str
    description: Optional[str]
    location: dict
    photo: str
    distance_m: float
