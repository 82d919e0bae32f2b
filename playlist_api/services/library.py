"""
Playlist view helpers: title filter and ordering.
"""

from __future__ import annotations

from typing import List, Sequence, Union

from playlist_api.schemas.playlists import AudioItem, VideoItem

SORT_TITLE = "title"
SORT_RATING = "rating"

PlaylistEntry = Union[VideoItem, AudioItem]


# PUBLIC_INTERFACE
def filter_and_sort(items: Sequence[PlaylistEntry], text: str = "", sort: str = SORT_TITLE) -> List[PlaylistEntry]:
    """Keep items whose title contains text (case-insensitive), then order them.

    sort="rating" orders by rating, highest first; ties keep playlist order.
    Anything else orders by title, ignoring case.
    """
    needle = (text or "").strip().casefold()
    result = [i for i in items if needle in (i.title or "").casefold()] if needle else list(items)
    if sort == SORT_RATING:
        result.sort(key=lambda i: i.rating or 0, reverse=True)
    else:
        result.sort(key=lambda i: (i.title or "").casefold())
    return result
