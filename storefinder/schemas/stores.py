from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Literal, Optional


def normalize_tags(tags: List[str]) -> List[str]:
    """Strip whitespace, drop empty tags and duplicates, keep first-seen order."""
    seen = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def _check_coordinates(coordinates: List[float]) -> List[float]:
    lng, lat = coordinates
    if not -180 <= lng <= 180:
        raise ValueError("longitude must be between -180 and 180")
    if not -90 <= lat <= 90:
        raise ValueError("latitude must be between -90 and 90")
    return coordinates


class GeoPoint(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(..., min_length=2, max_length=2)  # [lng, lat]
    address: Optional[str] = None

    @field_validator("coordinates")
    @classmethod
    def coordinates_in_range(cls, v: List[float]) -> List[float]:
        return _check_coordinates(v)


class LocationPatch(BaseModel):
    # type is fixed to Point and never patched
    coordinates: Optional[List[float]] = Field(None, min_length=2, max_length=2)
    address: Optional[str] = None

    @field_validator("coordinates")
    @classmethod
    def coordinates_in_range(cls, v: Optional[List[float]]) -> Optional[List[float]]:
        return _check_coordinates(v) if v is not None else v


class StoreBase(BaseModel):
    name: str
    description: Optional[str] = None
    tags: List[str] = []


class StoreCreate(StoreBase):
    location: GeoPoint

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("You must supply a name!")
        return v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: List[str]) -> List[str]:
        return normalize_tags(v)


class StoreUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[LocationPatch] = None
    tags: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("You must supply a name!")
        return v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return normalize_tags(v) if v is not None else v


class AuthorSummary(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class StoreResponse(StoreBase):
    id: int
    slug: str
    location: GeoPoint
    photo: str
    author_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StoreDetailResponse(StoreResponse):
    author: AuthorSummary


class NearbyStoreResponse(BaseModel):
    slug: str
    name: str
    description: Optional[str]
    location: GeoPoint
    photo: str

    class Config:
        from_attributes = True


class SearchHitResponse(BaseModel):
    slug: str
    name: str
    description: Optional[str]
    photo: str
    score: float


class TagCountResponse(BaseModel):
    tag: str
    count: int

    class Config:
        from_attributes = True


class TagListingResponse(BaseModel):
    tag: Optional[str]
    tags: List[TagCountResponse]
    stores: List[StoreResponse]

    class Config:
        from_attributes = True
