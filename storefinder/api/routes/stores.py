from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from storefinder.api.deps import get_db, get_current_user, get_content_area
from storefinder.db.models.users import Users
from storefinder.schemas.stores import (
    StoreResponse,
    StoreDetailResponse,
    NearbyStoreResponse,
    SearchHitResponse,
    TagCountResponse,
    TagListingResponse,
)
from storefinder.services import catalog
from storefinder.services.catalog import CatalogError, ContentArea, PhotoUpload

router = APIRouter(prefix="/stores", tags=["stores"])

ERROR_STATUS = {
    catalog.ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    catalog.InvalidMediaType: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    catalog.DecodeError: status.HTTP_400_BAD_REQUEST,
    catalog.StorageWriteError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    catalog.NotFound: status.HTTP_404_NOT_FOUND,
    catalog.Forbidden: status.HTTP_403_FORBIDDEN,
    catalog.PersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _http_error(e: CatalogError) -> HTTPException:
    code = next(
        (c for cls, c in ERROR_STATUS.items() if isinstance(e, cls)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if isinstance(e, catalog.PersistenceError):
        return HTTPException(status_code=code, detail="Something went wrong saving the store")
    if isinstance(e, catalog.StorageWriteError):
        return HTTPException(status_code=code, detail="Something went wrong saving the photo")
    detail = e.messages if isinstance(e, catalog.ValidationError) else str(e)
    return HTTPException(status_code=code, detail=detail)


def _photo_upload(photo: Optional[UploadFile]) -> Optional[PhotoUpload]:
    # browsers send an empty part when no file was picked
    if photo is None or not photo.filename:
        return None
    return PhotoUpload(
        data=photo.file.read(),
        content_type=photo.content_type or "",
        filename=photo.filename,
    )


def _location(lng: Optional[float], lat: Optional[float], address: Optional[str]) -> Optional[dict]:
    if lng is None or lat is None:
        return None
    return {"type": "Point", "coordinates": [lng, lat], "address": address}


@router.post("", response_model=StoreResponse, status_code=status.HTTP_201_CREATED)
def create_store(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    tags: List[str] = Form([]),
    lng: Optional[float] = Form(None),
    lat: Optional[float] = Form(None),
    address: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    content: ContentArea = Depends(get_content_area),
    current_user: Users = Depends(get_current_user),
):
    payload = {"name": name, "description": description, "tags": tags}
    location = _location(lng, lat, address)
    if location is not None:
        payload["location"] = location

    try:
        return catalog.create_store(db, payload, current_user.id, photo=_photo_upload(photo), content=content)
    except CatalogError as e:
        raise _http_error(e) from e


@router.get("", response_model=List[StoreResponse])
def list_stores(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    return catalog.list_stores(db, skip=skip, limit=limit)


@router.get("/search", response_model=List[SearchHitResponse])
def search_stores(
    q: str = Query(..., min_length=1),
    limit: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
):
    hits = catalog.search_stores(db, q, limit=limit)
    return [
        SearchHitResponse(slug=h.slug, name=h.name, description=h.description, photo=h.photo, score=h.score)
        for h in hits
    ]


@router.get("/near", response_model=List[NearbyStoreResponse])
def stores_near(
    lng: float = Query(..., ge=-180, le=180),
    lat: float = Query(..., ge=-90, le=90),
    max_distance: float = Query(10000, gt=0),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return catalog.find_near(db, lng, lat, max_distance_m=max_distance, limit=limit)


@router.get("/tags", response_model=TagListingResponse)
def list_all_tags(db: Session = Depends(get_db)):
    return TagListingResponse.model_validate(catalog.list_stores_by_tag(db))


@router.get("/tag-counts", response_model=List[TagCountResponse])
def tag_counts(db: Session = Depends(get_db)):
    return catalog.list_tags(db)


@router.get("/tags/{tag}", response_model=TagListingResponse)
def stores_by_tag(tag: str, db: Session = Depends(get_db)):
    """Stores with this tag, alongside counts for every tag in the catalog"""
    return TagListingResponse.model_validate(catalog.list_stores_by_tag(db, tag))


@router.get("/slug/{slug}", response_model=StoreDetailResponse)
def get_store_by_slug(slug: str, db: Session = Depends(get_db)):
    try:
        return catalog.find_by_slug(db, slug)
    except CatalogError as e:
        raise _http_error(e) from e


@router.get("/{store_id}/edit", response_model=StoreResponse)
def edit_store(
    store_id: int,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    """Store for the edit form - author only"""
    try:
        return catalog.load_store_for_edit(db, store_id, current_user.id)
    except CatalogError as e:
        raise _http_error(e) from e


@router.put("/{store_id}", response_model=StoreResponse)
def update_store(
    store_id: int,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    tags: Optional[List[str]] = Form(None),
    lng: Optional[float] = Form(None),
    lat: Optional[float] = Form(None),
    address: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    content: ContentArea = Depends(get_content_area),
    current_user: Users = Depends(get_current_user),
):
    """Update a store - author only. Slug and author are never changed."""
    patch = {}
    if name is not None:
        patch["name"] = name
    if description is not None:
        patch["description"] = description
    if tags is not None:
        patch["tags"] = tags
    location = {}
    # a lone lng or lat is kept so validation rejects the half pair
    coordinates = [c for c in (lng, lat) if c is not None]
    if coordinates:
        location["coordinates"] = coordinates
    if address is not None:
        location["address"] = address
    if location:
        patch["location"] = location

    try:
        return catalog.update_store(
            db, store_id, current_user.id, patch, photo=_photo_upload(photo), content=content
        )
    except CatalogError as e:
        raise _http_error(e) from e
