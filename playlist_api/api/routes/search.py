"""
Search routes: video catalog passthrough.

Exposes:
- GET /search?q=...: Search the external video catalog, flagging videos already saved by the user
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from playlist_api.api.deps import get_current_user, get_playlist_store, get_search_client
from playlist_api.schemas.users import SessionUser
from playlist_api.services.search import YouTubeClient
from playlist_api.store.base import PlaylistStore

router = APIRouter(tags=["Search"])


@router.get(
    "/search",
    summary="Search video catalog",
    responses={
        200: {"description": "Search results"},
        401: {"description": "unauthorized"},
        502: {"description": "search_unavailable"},
    },
)
def search_videos(
    q: str = Query("", description="Search query term"),
    client: YouTubeClient = Depends(get_search_client),
    store: PlaylistStore = Depends(get_playlist_store),
    current_user: SessionUser = Depends(get_current_user),
) -> dict:
    """
    Search the catalog. Each result carries "saved": true when the video is
    already in one of the current user's playlists.

    Returns:
    - { "query": q, "results": [ { videoId, title, thumbnailUrl, duration, views, saved } ] }
    """
    results = client.search(q)
    if results:
        saved = store.saved_video_ids(current_user.username)
        for result in results:
            result.saved = result.video_id in saved
    return {"query": q.strip(), "results": [r.to_json() for r in results]}
