import io
import os

# Settings() requires these at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-chars")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefinder.db.models import Base, Users
from storefinder.services.catalog import ContentArea, create_store


LONDON = (-0.1, 51.5)


def make_image(width: int, height: int, fmt: str = "JPEG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color=(200, 120, 40)).save(buf, format=fmt)
    return buf.getvalue()


def store_payload(name: str, lng: float = LONDON[0], lat: float = LONDON[1], **extra) -> dict:
    payload = {"name": name, "location": {"type": "Point", "coordinates": [lng, lat]}}
    payload.update(extra)
    return payload


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def owner(db) -> Users:
    user = Users(email="wes@example.com", name="Wes")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def other_user(db) -> Users:
    user = Users(email="snickers@example.com", name="Snickers")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def content(tmp_path) -> ContentArea:
    return ContentArea(tmp_path / "uploads")


@pytest.fixture()
def add_store(db, owner, content):
    """Factory creating stores owned by `owner` through the real create path."""
    def _add(name: str, lng: float = LONDON[0], lat: float = LONDON[1], **extra):
        return create_store(db, store_payload(name, lng, lat, **extra), owner.id, content=content)
    return _add
