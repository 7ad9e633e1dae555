from sqlalchemy import Integer, String, Text, Float, DateTime, ForeignKey, Index, PrimaryKeyConstraint, func
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from storefinder.core.config import settings
from storefinder.db.database import Base
from storefinder.db.models.users import Users


class StoreTags(Base):
    __tablename__ = "store_tags"

    store_id: Mapped[int] = mapped_column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    tag: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        PrimaryKeyConstraint("store_id", "tag"),
    )


class Stores(Base):
    __tablename__ = "stores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    photo: Mapped[str] = mapped_column(String(255), nullable=False, default=settings.DEFAULT_PHOTO)
    author_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    author: Mapped[Users] = relationship(Users)
    tag_rows: Mapped[list[StoreTags]] = relationship(
        StoreTags,
        order_by=StoreTags.position,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_stores_lat_lng", "latitude", "longitude"),
    )

    @property
    def tags(self) -> list[str]:
        return [row.tag for row in self.tag_rows]

    def set_tags(self, tags: list[str]) -> None:
        """Replace the tag list, reusing existing rows so unchanged tags keep their primary key."""
        existing = {row.tag: row for row in self.tag_rows}
        rows = []
        for position, tag in enumerate(tags):
            row = existing.get(tag) or StoreTags(tag=tag)
            row.position = position
            rows.append(row)
        self.tag_rows = rows

    @property
    def location(self) -> dict:
        # GeoJSON order: [lng, lat]
        return {
            "type": "Point",
            "coordinates": [self.longitude, self.latitude],
            "address": self.address,
        }
