"""
Store interfaces shared by the JSON-file and database backends.

Exposes:
- UserStore: register and authenticate users
- PlaylistStore: per-owner playlist CRUD and item operations
- helpers used by both backends to validate input and build records

Owners are identified by the username held in the session.
"""

from __future__ import annotations

import secrets
import time
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from playlist_api.core.errors import InvalidRating, MissingFields, MissingName
from playlist_api.core.security import hash_password, verify_legacy_password, verify_password
from playlist_api.schemas.playlists import (
    AudioItem,
    Playlist,
    VideoItem,
    VideoItemCreate,
    parse_rating,
)
from playlist_api.schemas.users import UserCreate, UserRecord


def now_ms() -> int:
    return int(time.time() * 1000)


# PUBLIC_INTERFACE
def make_id(prefix: str) -> str:
    """Timestamp plus random suffix, e.g. pl_1718000000000_9f2c4e1a0b3d."""
    return f"{prefix}_{now_ms()}_{secrets.token_hex(6)}"


# PUBLIC_INTERFACE
def normalize_username(username: Any) -> str:
    return str(username or "").strip().lower()


def normalize_name(name: Any) -> str:
    return str(name or "").strip().lower()


def _blank(value: Any) -> bool:
    return not str(value or "").strip()


# PUBLIC_INTERFACE
def build_user_record(data: UserCreate) -> UserRecord:
    """Validate a registration payload and return the record to persist."""
    if any(_blank(v) for v in (data.username, data.password, data.first_name, data.image_url)):
        raise MissingFields()
    return UserRecord(
        username=str(data.username).strip(),
        password_hash=hash_password(str(data.password)),
        first_name=str(data.first_name).strip(),
        image_url=str(data.image_url).strip(),
        created_at=now_ms(),
    )


# PUBLIC_INTERFACE
def check_password(user: UserRecord, password: str) -> Tuple[bool, bool]:
    """Return (matches, needs_upgrade) for a stored user and a login attempt."""
    if user.password_hash:
        return verify_password(password, user.password_hash), False
    matches = verify_legacy_password(password, user.password or "")
    return matches, matches


def require_login_fields(username: Optional[str], password: Optional[str]) -> None:
    if _blank(username) or not password:
        raise MissingFields()


def clean_playlist_name(name: Optional[str]) -> str:
    cleaned = str(name or "").strip()
    if not cleaned:
        raise MissingName()
    return cleaned


def build_video_item(data: VideoItemCreate) -> VideoItem:
    if _blank(data.video_id) or _blank(data.title) or _blank(data.thumbnail_url):
        raise MissingFields()
    return VideoItem(
        video_id=str(data.video_id),
        title=str(data.title),
        thumbnail_url=str(data.thumbnail_url),
        rating=0,
        added_at=now_ms(),
    )


def build_audio_item(title: str, file_url: str) -> AudioItem:
    return AudioItem(
        mp3_id=make_id("mp3"),
        title=title,
        file_url=file_url,
        rating=0,
        added_at=now_ms(),
    )


def require_rating(value: Any) -> int:
    rating = parse_rating(value)
    if rating is None:
        raise InvalidRating()
    return rating


class UserStore(ABC):
    """Credential store keyed by normalized username."""

    @abstractmethod
    def register(self, data: UserCreate) -> UserRecord:
        """Persist a new user.

        Raises:
        - MissingFields if any field is blank
        - DuplicateUsername if the normalized username is taken
        """

    @abstractmethod
    def authenticate(self, username: Optional[str], password: Optional[str]) -> UserRecord:
        """Return the matching user.

        Raises:
        - MissingFields if username or password is blank
        - InvalidCredentials if no user matches
        """


class PlaylistStore(ABC):
    """Per-owner playlists with ordered, rated items."""

    @abstractmethod
    def list_playlists(self, owner: str) -> List[Playlist]:
        ...

    @abstractmethod
    def get_playlist(self, owner: str, playlist_id: str) -> Playlist:
        ...

    @abstractmethod
    def create_playlist(self, owner: str, name: Optional[str]) -> Playlist:
        ...

    @abstractmethod
    def delete_playlist(self, owner: str, playlist_id: str) -> None:
        ...

    @abstractmethod
    def add_video_item(self, owner: str, playlist_id: str, data: VideoItemCreate) -> VideoItem:
        ...

    @abstractmethod
    def add_audio_item(self, owner: str, playlist_id: str, title: str, file_url: str) -> AudioItem:
        ...

    @abstractmethod
    def set_rating(self, owner: str, playlist_id: str, kind: str, item_id: str, rating: Any) -> None:
        ...

    @abstractmethod
    def remove_item(self, owner: str, playlist_id: str, kind: str, item_id: str) -> None:
        ...

    # PUBLIC_INTERFACE
    def playlists_containing(self, owner: str, video_id: str) -> List[str]:
        """Ids of the owner's playlists that already hold the given video."""
        return [p.id for p in self.list_playlists(owner) if p.has_video(video_id)]

    # PUBLIC_INTERFACE
    def saved_video_ids(self, owner: str) -> set[str]:
        """Every videoId present in any of the owner's playlists."""
        return {
            item.video_id
            for playlist in self.list_playlists(owner)
            for item in playlist.items
            if isinstance(item, VideoItem)
        }
