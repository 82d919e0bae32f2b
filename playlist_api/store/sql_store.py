"""
Database backed stores (SQLAlchemy 2.0 sessions).

Each public method runs in its own transaction; uniqueness rules are backed
by table constraints so concurrent writers fail cleanly instead of
overwriting each other.
"""

from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from playlist_api.core.errors import (
    DuplicateItem,
    DuplicateName,
    DuplicateUsername,
    InvalidCredentials,
    ItemNotFound,
    PlaylistNotFound,
)
from playlist_api.core.logging import get_logger
from playlist_api.db.models import PlaylistItemRow, PlaylistRow, UserRow
from playlist_api.schemas.playlists import AUDIO, VIDEO, AudioItem, Playlist, VideoItem, VideoItemCreate
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

logger = get_logger("store.sql")


def _user_from_row(row: UserRow) -> UserRecord:
    return UserRecord(
        username=row.username,
        password_hash=row.password_hash,
        first_name=row.first_name,
        image_url=row.image_url,
        created_at=row.created_at,
    )


def _item_payload(row: PlaylistItemRow) -> dict:
    if row.kind == AUDIO:
        return {
            "type": AUDIO,
            "mp3Id": row.ref_id,
            "title": row.title,
            "fileUrl": row.file_url or "",
            "rating": row.rating,
            "addedAt": row.added_at,
        }
    return {
        "type": VIDEO,
        "videoId": row.ref_id,
        "title": row.title,
        "thumbnailUrl": row.thumbnail_url or "",
        "rating": row.rating,
        "addedAt": row.added_at,
    }


def _playlist_from_row(row: PlaylistRow) -> Playlist:
    return Playlist.model_validate(
        {
            "id": row.public_id,
            "name": row.name,
            "createdAt": row.created_at,
            "items": [_item_payload(i) for i in row.items],
        }
    )


class SqlUserStore(UserStore):
    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory

    # PUBLIC_INTERFACE
    def register(self, data: UserCreate) -> UserRecord:
        record = build_user_record(data)
        key = normalize_username(record.username)
        try:
            with self.session_factory.begin() as db:
                existing = db.execute(select(UserRow.id).where(UserRow.username_key == key)).first()
                if existing:
                    raise DuplicateUsername()
                db.add(
                    UserRow(
                        username=record.username,
                        username_key=key,
                        password_hash=record.password_hash,
                        first_name=record.first_name,
                        image_url=record.image_url,
                        created_at=record.created_at,
                    )
                )
        except IntegrityError:
            # lost a race with a concurrent registration
            raise DuplicateUsername()
        logger.info("User registered", extra={"username": record.username})
        return record

    # PUBLIC_INTERFACE
    def authenticate(self, username: Optional[str], password: Optional[str]) -> UserRecord:
        require_login_fields(username, password)
        with self.session_factory() as db:
            row = db.execute(
                select(UserRow).where(UserRow.username_key == normalize_username(username))
            ).scalars().first()
        if row is None:
            raise InvalidCredentials()
        user = _user_from_row(row)
        matches, _ = check_password(user, str(password))
        if not matches:
            raise InvalidCredentials()
        return user


class SqlPlaylistStore(PlaylistStore):
    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory

    @staticmethod
    def _owned(db: Session, owner: str, playlist_id: str) -> PlaylistRow:
        stmt = (
            select(PlaylistRow)
            .options(selectinload(PlaylistRow.items))
            .where(PlaylistRow.owner == owner, PlaylistRow.public_id == str(playlist_id))
        )
        row = db.execute(stmt).scalars().first()
        if row is None:
            raise PlaylistNotFound()
        return row

    @staticmethod
    def _item(playlist: PlaylistRow, kind: str, item_id: str) -> PlaylistItemRow:
        for item in playlist.items:
            if item.kind == kind and item.ref_id == str(item_id):
                return item
        raise ItemNotFound()

    # PUBLIC_INTERFACE
    def list_playlists(self, owner: str) -> List[Playlist]:
        stmt = (
            select(PlaylistRow)
            .options(selectinload(PlaylistRow.items))
            .where(PlaylistRow.owner == owner)
            .order_by(PlaylistRow.id.asc())
        )
        with self.session_factory() as db:
            return [_playlist_from_row(row) for row in db.execute(stmt).scalars().all()]

    # PUBLIC_INTERFACE
    def get_playlist(self, owner: str, playlist_id: str) -> Playlist:
        with self.session_factory() as db:
            return _playlist_from_row(self._owned(db, owner, playlist_id))

    # PUBLIC_INTERFACE
    def create_playlist(self, owner: str, name: Optional[str]) -> Playlist:
        cleaned = clean_playlist_name(name)
        key = normalize_name(cleaned)
        try:
            with self.session_factory.begin() as db:
                dup = db.execute(
                    select(PlaylistRow.id).where(PlaylistRow.owner == owner, PlaylistRow.name_key == key)
                ).first()
                if dup:
                    raise DuplicateName()
                row = PlaylistRow(
                    public_id=make_id("pl"),
                    owner=owner,
                    name=cleaned,
                    name_key=key,
                    created_at=now_ms(),
                )
                db.add(row)
                db.flush()
                playlist = _playlist_from_row(row)
        except IntegrityError:
            raise DuplicateName()
        logger.info("Playlist created", extra={"owner": owner, "playlist_id": playlist.id})
        return playlist

    # PUBLIC_INTERFACE
    def delete_playlist(self, owner: str, playlist_id: str) -> None:
        with self.session_factory.begin() as db:
            db.delete(self._owned(db, owner, playlist_id))
        logger.info("Playlist deleted", extra={"owner": owner, "playlist_id": str(playlist_id)})

    # PUBLIC_INTERFACE
    def add_video_item(self, owner: str, playlist_id: str, data: VideoItemCreate) -> VideoItem:
        item = build_video_item(data)
        try:
            with self.session_factory.begin() as db:
                playlist = self._owned(db, owner, playlist_id)
                if any(i.kind == VIDEO and i.ref_id == item.video_id for i in playlist.items):
                    raise DuplicateItem()
                playlist.items.append(
                    PlaylistItemRow(
                        kind=VIDEO,
                        ref_id=item.video_id,
                        title=item.title,
                        thumbnail_url=item.thumbnail_url,
                        rating=item.rating,
                        added_at=item.added_at,
                    )
                )
        except IntegrityError:
            raise DuplicateItem()
        logger.info("Video added", extra={"owner": owner, "playlist_id": str(playlist_id), "video_id": item.video_id})
        return item

    # PUBLIC_INTERFACE
    def add_audio_item(self, owner: str, playlist_id: str, title: str, file_url: str) -> AudioItem:
        item = build_audio_item(title, file_url)
        with self.session_factory.begin() as db:
            playlist = self._owned(db, owner, playlist_id)
            playlist.items.append(
                PlaylistItemRow(
                    kind=AUDIO,
                    ref_id=item.mp3_id,
                    title=item.title,
                    file_url=item.file_url,
                    rating=item.rating,
                    added_at=item.added_at,
                )
            )
        logger.info("Audio added", extra={"owner": owner, "playlist_id": str(playlist_id), "mp3_id": item.mp3_id})
        return item

    # PUBLIC_INTERFACE
    def set_rating(self, owner: str, playlist_id: str, kind: str, item_id: str, rating: Any) -> None:
        value = require_rating(rating)
        with self.session_factory.begin() as db:
            self._item(self._owned(db, owner, playlist_id), kind, item_id).rating = value

    # PUBLIC_INTERFACE
    def remove_item(self, owner: str, playlist_id: str, kind: str, item_id: str) -> None:
        with self.session_factory.begin() as db:
            playlist = self._owned(db, owner, playlist_id)
            playlist.items.remove(self._item(playlist, kind, item_id))
        logger.info("Item removed", extra={"owner": owner, "playlist_id": str(playlist_id), "item_id": item_id})
