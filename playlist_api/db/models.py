"""
SQLAlchemy ORM models for the database storage backend.

This module defines:
- users
- playlists
- playlist_items (videos and uploaded audio, told apart by "kind")

Timestamps are epoch milliseconds, matching the JSON documents.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Declarative base for ORM models."""

    pass


# USERS
class UserRow(Base):
    """Registered account."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    # trimmed, lowercased username used for uniqueness
    username_key: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


# PLAYLISTS
class PlaylistRow(Base):
    """Named playlist owned by one username."""

    __tablename__ = "playlists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    public_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    owner: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_key: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    items: Mapped[List["PlaylistItemRow"]] = relationship(
        back_populates="playlist",
        cascade="all, delete-orphan",
        order_by="PlaylistItemRow.id",
    )

    __table_args__ = (
        UniqueConstraint("owner", "name_key", name="uq_playlists_owner_name"),
    )


class PlaylistItemRow(Base):
    """A video reference or uploaded audio file inside a playlist."""

    __tablename__ = "playlist_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    playlist_id: Mapped[int] = mapped_column(
        ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False, index=True
    )
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    # videoId for videos, mp3Id for audio
    ref_id: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    thumbnail_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    file_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    added_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    playlist: Mapped[PlaylistRow] = relationship(back_populates="items")

    __table_args__ = (
        UniqueConstraint("playlist_id", "kind", "ref_id", name="uq_playlist_items_ref"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_playlist_items_rating_range"),
        CheckConstraint("kind IN ('video', 'mp3')", name="ck_playlist_items_kind"),
    )
