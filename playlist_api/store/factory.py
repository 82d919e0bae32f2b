"""
Select and build the storage backend configured by STORAGE_BACKEND.
"""

from __future__ import annotations

from typing import Tuple

from playlist_api.core.config import Settings
from playlist_api.core.logging import get_logger
from playlist_api.store.base import PlaylistStore, UserStore

logger = get_logger("store")


# PUBLIC_INTERFACE
def build_stores(settings: Settings) -> Tuple[UserStore, PlaylistStore]:
    """Return (user_store, playlist_store) for the configured backend."""
    if settings.STORAGE_BACKEND == "database":
        from playlist_api.db.session import build_engine, build_session_factory, create_all_tables
        from playlist_api.store.sql_store import SqlPlaylistStore, SqlUserStore

        engine = build_engine(settings.DATABASE_URL)
        create_all_tables(engine)
        factory = build_session_factory(engine)
        logger.info("Using database storage", extra={"dialect": engine.dialect.name})
        return SqlUserStore(factory), SqlPlaylistStore(factory)

    from playlist_api.store.json_store import JsonPlaylistStore, JsonUserStore

    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    logger.info("Using JSON file storage", extra={"data_dir": str(settings.DATA_DIR)})
    return JsonUserStore(settings.users_path), JsonPlaylistStore(settings.playlists_path)
