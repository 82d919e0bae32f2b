"""
Playlists routes: manage the current user's playlists and the videos within them.

Exposes:
- GET /playlists: List playlists for current user
- POST /playlists: Create a new playlist
- GET /playlists/contains/{video_id}: Which playlists already hold a video
- GET /playlists/{playlist_id}: Get one playlist
- DELETE /playlists/{playlist_id}: Delete playlist (and its items)
- GET /playlists/{playlist_id}/items: Items filtered by title and sorted
- POST /playlists/{playlist_id}/items: Add a video to a playlist
- PATCH /playlists/{playlist_id}/items/{video_id}: Rate a video
- DELETE /playlists/{playlist_id}/items/{video_id}: Remove a video

All routes require a session; errors are returned as { "error": <code> }.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, status

from playlist_api.api.deps import get_current_user, get_playlist_store
from playlist_api.schemas.playlists import VIDEO, PlaylistCreate, RatingUpdate, VideoItemCreate
from playlist_api.schemas.users import SessionUser
from playlist_api.services.library import SORT_TITLE, filter_and_sort
from playlist_api.store.base import PlaylistStore

router = APIRouter(prefix="/playlists", tags=["Playlists"])


@router.get(
    "",
    summary="List user playlists",
    responses={
        200: {"description": "List of playlists"},
        401: {"description": "unauthorized"},
    },
)
def list_playlists(
    store: PlaylistStore = Depends(get_playlist_store),
    current_user: SessionUser = Depends(get_current_user),
) -> dict:
    """
    Return all playlists belonging to the current user, oldest first, with their items.
    """
    playlists = store.list_playlists(current_user.username)
    return {"playlists": [p.to_json() for p in playlists]}


@router.post(
    "",
    summary="Create a new playlist",
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Playlist created"},
        400: {"description": "missing_name"},
        401: {"description": "unauthorized"},
        409: {"description": "playlist_name_exists"},
    },
)
def create_playlist(
    payload: PlaylistCreate,
    store: PlaylistStore = Depends(get_playlist_store),
    current_user: SessionUser = Depends(get_current_user),
) -> dict:
    """
    Create a playlist owned by the current user.

    Parameters:
    - name: playlist name (required, unique per user ignoring case)
    """
    playlist = store.create_playlist(current_user.username, payload.name)
    return {"playlist": playlist.to_json()}


@router.get(
    "/contains/{video_id}",
    summary="Find a video across playlists",
    responses={200: {"description": "Playlists holding the video"}, 401: {"description": "unauthorized"}},
)
def playlists_containing(
    video_id: str = Path(..., description="External catalog video id"),
    store: PlaylistStore = Depends(get_playlist_store),
    current_user: SessionUser = Depends(get_current_user),
) -> dict:
    """
    Report whether a video is already saved in any of the user's playlists.
    """
    ids = store.playlists_containing(current_user.username, video_id)
    return {"saved": bool(ids), "playlistIds": ids}


@router.get(
    "/{playlist_id}",
    summary="Get playlist details",
    responses={
        200: {"description": "Playlist details"},
        401: {"description": "unauthorized"},
        404: {"description": "playlist_not_found"},
    },
)
def get_playlist(
    playlist_id: str = Path(..., description="Playlist id"),
    store: PlaylistStore = Depends(get_playlist_store),
    current_user: SessionUser = Depends(get_current_user),
) -> dict:
    playlist = store.get_playlist(current_user.username, playlist_id)
    return {"playlist": playlist.to_json()}


@router.delete(
    "/{playlist_id}",
    summary="Delete playlist",
    responses={
        200: {"description": "Deleted"},
        401: {"description": "unauthorized"},
        404: {"description": "playlist_not_found"},
    },
)
def delete_playlist(
    playlist_id: str = Path(..., description="Playlist id"),
    store: PlaylistStore = Depends(get_playlist_store),
    current_user: SessionUser = Depends(get_current_user),
) -> dict:
    """
    Delete a playlist owned by the current user together with its items.
    Uploaded files referenced by its items are left on disk.
    """
    store.delete_playlist(current_user.username, playlist_id)
    return {"ok": True}


@router.get(
    "/{playlist_id}/items",
    summary="List playlist items",
    responses={
        200: {"description": "Filtered and sorted items"},
        401: {"description": "unauthorized"},
        404: {"description": "playlist_not_found"},
    },
)
def list_items(
    playlist_id: str = Path(..., description="Playlist id"),
    filter_text: str = Query("", alias="filter", description="Case-insensitive substring of the title"),
    sort: str = Query(SORT_TITLE, description="rating (highest first); anything else sorts by title (A-Z)"),
    store: PlaylistStore = Depends(get_playlist_store),
    current_user: SessionUser = Depends(get_current_user),
) -> dict:
    playlist = store.get_playlist(current_user.username, playlist_id)
    return {"items": [i.to_json() for i in filter_and_sort(playlist.items, filter_text, sort)]}


@router.post(
    "/{playlist_id}/items",
    summary="Add video to playlist",
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Video added"},
        400: {"description": "missing_fields"},
        401: {"description": "unauthorized"},
        404: {"description": "playlist_not_found"},
        409: {"description": "already_exists"},
    },
)
def add_video(
    payload: VideoItemCreate,
    playlist_id: str = Path(..., description="Playlist id"),
    store: PlaylistStore = Depends(get_playlist_store),
    current_user: SessionUser = Depends(get_current_user),
) -> dict:
    """
    Append a video to a playlist owned by the current user. A video may appear
    only once per playlist; other playlists are not checked.
    """
    item = store.add_video_item(current_user.username, playlist_id, payload)
    return {"ok": True, "item": item.to_json()}


@router.patch(
    "/{playlist_id}/items/{video_id}",
    summary="Rate a video",
    responses={
        200: {"description": "Rating updated"},
        400: {"description": "invalid_rating"},
        401: {"description": "unauthorized"},
        404: {"description": "playlist_not_found or item_not_found"},
    },
)
def rate_video(
    payload: RatingUpdate,
    playlist_id: str = Path(..., description="Playlist id"),
    video_id: str = Path(..., description="Video id"),
    store: PlaylistStore = Depends(get_playlist_store),
    current_user: SessionUser = Depends(get_current_user),
) -> dict:
    store.set_rating(current_user.username, playlist_id, VIDEO, video_id, payload.rating)
    return {"ok": True}


@router.delete(
    "/{playlist_id}/items/{video_id}",
    summary="Remove video from playlist",
    responses={
        200: {"description": "Video removed"},
        401: {"description": "unauthorized"},
        404: {"description": "playlist_not_found or item_not_found"},
    },
)
def remove_video(
    playlist_id: str = Path(..., description="Playlist id"),
    video_id: str = Path(..., description="Video id"),
    store: PlaylistStore = Depends(get_playlist_store),
    current_user: SessionUser = Depends(get_current_user),
) -> dict:
    store.remove_item(current_user.username, playlist_id, VIDEO, video_id)
    return {"ok": True}
