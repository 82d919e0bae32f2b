"""
Audio routes: upload MP3 files into a playlist, rate and remove them.

Exposes:
- POST /playlists/{playlist_id}/audio: multipart upload (field "file", optional "title")
- PATCH /playlists/{playlist_id}/audio/{mp3_id}: Rate an uploaded file
- DELETE /playlists/{playlist_id}/audio/{mp3_id}: Remove an uploaded file from the playlist

The same routes are also served under /mp3 for older clients.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile, status

from playlist_api.api.deps import get_app_settings, get_current_user, get_playlist_store
from playlist_api.core.config import Settings
from playlist_api.schemas.playlists import AUDIO, RatingUpdate
from playlist_api.schemas.users import SessionUser
from playlist_api.services.uploads import discard_upload, save_upload
from playlist_api.store.base import PlaylistStore

router = APIRouter(prefix="/playlists", tags=["Audio"])


@router.post(
    "/{playlist_id}/mp3",
    include_in_schema=False,
    status_code=status.HTTP_201_CREATED,
)
@router.post(
    "/{playlist_id}/audio",
    summary="Upload audio to playlist",
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Audio stored and added"},
        400: {"description": "missing_file or invalid_file_type"},
        401: {"description": "unauthorized"},
        404: {"description": "playlist_not_found"},
        413: {"description": "file_too_large"},
    },
)
def upload_audio(
    playlist_id: str = Path(..., description="Playlist id"),
    file: Optional[UploadFile] = File(None, description="MP3 file"),
    title: Optional[str] = Form(None, description="Display title; defaults to the file name"),
    store: PlaylistStore = Depends(get_playlist_store),
    settings: Settings = Depends(get_app_settings),
    current_user: SessionUser = Depends(get_current_user),
) -> dict:
    """
    Store an uploaded MP3 and append it to a playlist owned by the current user.

    Returns:
    - { "ok": true, "item": { type: "mp3", mp3Id, title, fileUrl, rating, addedAt } }
    """
    # fail before touching the disk when the playlist is unknown
    store.get_playlist(current_user.username, playlist_id)

    stored = save_upload(file, settings)
    display_title = (title or "").strip() or stored.original_name
    try:
        item = store.add_audio_item(current_user.username, playlist_id, display_title, stored.url)
    except Exception:
        discard_upload(stored)
        raise
    return {"ok": True, "item": item.to_json()}


@router.patch("/{playlist_id}/mp3/{mp3_id}", include_in_schema=False)
@router.patch(
    "/{playlist_id}/audio/{mp3_id}",
    summary="Rate uploaded audio",
    responses={
        200: {"description": "Rating updated"},
        400: {"description": "invalid_rating"},
        401: {"description": "unauthorized"},
        404: {"description": "playlist_not_found or item_not_found"},
    },
)
def rate_audio(
    payload: RatingUpdate,
    playlist_id: str = Path(..., description="Playlist id"),
    mp3_id: str = Path(..., description="Uploaded audio id"),
    store: PlaylistStore = Depends(get_playlist_store),
    current_user: SessionUser = Depends(get_current_user),
) -> dict:
    store.set_rating(current_user.username, playlist_id, AUDIO, mp3_id, payload.rating)
    return {"ok": True}


@router.delete("/{playlist_id}/mp3/{mp3_id}", include_in_schema=False)
@router.delete(
    "/{playlist_id}/audio/{mp3_id}",
    summary="Remove uploaded audio from playlist",
    responses={
        200: {"description": "Audio removed"},
        401: {"description": "unauthorized"},
        404: {"description": "playlist_not_found or item_not_found"},
    },
)
def remove_audio(
    playlist_id: str = Path(..., description="Playlist id"),
    mp3_id: str = Path(..., description="Uploaded audio id"),
    store: PlaylistStore = Depends(get_playlist_store),
    current_user: SessionUser = Depends(get_current_user),
) -> dict:
    """Remove the item; the stored file stays on disk."""
    store.remove_item(current_user.username, playlist_id, AUDIO, mp3_id)
    return {"ok": True}
