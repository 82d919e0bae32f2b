"""
JSON-file backed stores.

Documents:
- users file: a list of user records
- playlists file: an object mapping username -> list of playlists

Every operation reads the whole document, mutates it in memory and writes it
back while holding the document's lock, so concurrent requests in one process
cannot lose each other's updates.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from playlist_api.core.errors import (
    DuplicateItem,
    DuplicateName,
    DuplicateUsername,
    InvalidCredentials,
    ItemNotFound,
    PlaylistNotFound,
)
from playlist_api.core.logging import get_logger
from playlist_api.core.security import hash_password
from playlist_api.schemas.playlists import AudioItem, Playlist, VideoItem, VideoItemCreate
from playlist_api.schemas.users import UserCreate, UserRecord
from playlist_api.store.base import (
    PlaylistStore,
    UserStore,
    build_audio_item,
    build_user_record,
    build_video_item,
    check_password,
    clean_playlist_name,
    make_id,
    normalize_name,
    normalize_username,
    now_ms,
    require_login_fields,
    require_rating,
)
from playlist_api.store.json_files import file_lock, read_json_safe, write_json_atomic

logger = get_logger("store.json")


class JsonUserStore(UserStore):
    """Users kept in a single JSON array document."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> List[dict]:
        return read_json_safe(self.path, list, list)

    def _save(self, users: List[dict]) -> None:
        write_json_atomic(self.path, users)

    # PUBLIC_INTERFACE
    def register(self, data: UserCreate) -> UserRecord:
        record = build_user_record(data)
        key = normalize_username(record.username)
        with file_lock(self.path):
            users = self._load()
            if any(normalize_username(u.get("username")) == key for u in users if isinstance(u, dict)):
                raise DuplicateUsername()
            users.append(record.to_json())
            self._save(users)
        logger.info("User registered", extra={"username": record.username})
        return record

    # PUBLIC_INTERFACE
    def authenticate(self, username: Optional[str], password: Optional[str]) -> UserRecord:
        require_login_fields(username, password)
        key = normalize_username(username)
        with file_lock(self.path):
            users = self._load()
            for index, raw in enumerate(users):
                if not isinstance(raw, dict) or normalize_username(raw.get("username")) != key:
                    continue
                user = UserRecord.model_validate(raw)
                matches, needs_upgrade = check_password(user, str(password))
                if not matches:
                    break
                if needs_upgrade:
                    user = user.model_copy(update={"password_hash": hash_password(str(password)), "password": None})
                    users[index] = user.to_json()
                    self._save(users)
                    logger.info("Upgraded legacy plaintext password", extra={"username": user.username})
                return user
        raise InvalidCredentials()


class JsonPlaylistStore(PlaylistStore):
    """Playlists kept in one JSON object keyed by owner username."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict:
        return read_json_safe(self.path, dict, dict)

    @staticmethod
    def _owner_entries(store: dict, owner: str) -> Tuple[List[Playlist], List[Any]]:
        """Split the owner's stored entries into playlists and entries that cannot be read.

        Unreadable entries (no id, not an object, or failing validation) are kept
        as-is so that writes put them back untouched.
        """
        raw = store.get(owner)
        if not isinstance(raw, list):
            return [], []
        playlists: List[Playlist] = []
        unreadable: List[Any] = []
        for entry in raw:
            if not isinstance(entry, dict) or entry.get("id") in (None, ""):
                unreadable.append(entry)
                continue
            try:
                playlists.append(Playlist.model_validate(entry))
            except ValidationError as exc:
                logger.warning(
                    "Skipping unreadable playlist record",
                    extra={"owner": owner, "playlist_id": str(entry.get("id")), "errors": exc.error_count()},
                )
                unreadable.append(entry)
        return playlists, unreadable

    @contextmanager
    def _edit(self, owner: str) -> Iterator[List[Playlist]]:
        """Yield the owner's playlists; persist them if the block exits cleanly."""
        with file_lock(self.path):
            store = self._load()
            playlists, unreadable = self._owner_entries(store, owner)
            yield playlists
            store[owner] = [p.to_json() for p in playlists] + unreadable
            write_json_atomic(self.path, store)

    @staticmethod
    def _find(playlists: List[Playlist], playlist_id: str) -> Playlist:
        for playlist in playlists:
            if playlist.id == str(playlist_id):
                return playlist
        raise PlaylistNotFound()

    # PUBLIC_INTERFACE
    def list_playlists(self, owner: str) -> List[Playlist]:
        with file_lock(self.path):
            return self._owner_entries(self._load(), owner)[0]

    # PUBLIC_INTERFACE
    def get_playlist(self, owner: str, playlist_id: str) -> Playlist:
        return self._find(self.list_playlists(owner), playlist_id)

    # PUBLIC_INTERFACE
    def create_playlist(self, owner: str, name: Optional[str]) -> Playlist:
        cleaned = clean_playlist_name(name)
        with self._edit(owner) as playlists:
            if any(normalize_name(p.name) == cleaned.lower() for p in playlists):
                raise DuplicateName()
            playlist = Playlist(id=make_id("pl"), name=cleaned, created_at=now_ms(), items=[])
            playlists.append(playlist)
        logger.info("Playlist created", extra={"owner": owner, "playlist_id": playlist.id})
        return playlist

    # PUBLIC_INTERFACE
    def delete_playlist(self, owner: str, playlist_id: str) -> None:
        with self._edit(owner) as playlists:
            playlist = self._find(playlists, playlist_id)
            playlists.remove(playlist)
        logger.info("Playlist deleted", extra={"owner": owner, "playlist_id": playlist.id})

    # PUBLIC_INTERFACE
    def add_video_item(self, owner: str, playlist_id: str, data: VideoItemCreate) -> VideoItem:
        item = build_video_item(data)
        with self._edit(owner) as playlists:
            playlist = self._find(playlists, playlist_id)
            if playlist.has_video(item.video_id):
                raise DuplicateItem()
            playlist.items.append(item)
        logger.info("Video added", extra={"owner": owner, "playlist_id": playlist.id, "video_id": item.video_id})
        return item

    # PUBLIC_INTERFACE
    def add_audio_item(self, owner: str, playlist_id: str, title: str, file_url: str) -> AudioItem:
        item = build_audio_item(title, file_url)
        with self._edit(owner) as playlists:
            playlist = self._find(playlists, playlist_id)
            playlist.items.append(item)
        logger.info("Audio added", extra={"owner": owner, "playlist_id": playlist.id, "mp3_id": item.mp3_id})
        return item

    # PUBLIC_INTERFACE
    def set_rating(self, owner: str, playlist_id: str, kind: str, item_id: str, rating: Any) -> None:
        value = require_rating(rating)
        with self._edit(owner) as playlists:
            item = self._find(playlists, playlist_id).find_item(kind, item_id)
            if item is None:
                raise ItemNotFound()
            item.rating = value

    # PUBLIC_INTERFACE
    def remove_item(self, owner: str, playlist_id: str, kind: str, item_id: str) -> None:
        with self._edit(owner) as playlists:
            playlist = self._find(playlists, playlist_id)
            item = playlist.find_item(kind, item_id)
            if item is None:
                raise ItemNotFound()
            playlist.items = [i for i in playlist.items if i is not item]
        logger.info("Item removed", extra={"owner": owner, "playlist_id": playlist.id, "item_id": item_id})
