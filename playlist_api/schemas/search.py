"""
Pydantic schemas for video catalog search results.
"""

from __future__ import annotations

from pydantic import Field

from playlist_api.schemas.base import ApiModel


class VideoResult(ApiModel):
    video_id: str = Field(..., description="External catalog video id")
    title: str = Field("", description="Video title")
    thumbnail_url: str = Field("", description="Medium thumbnail URL")
    duration: str = Field("N/A", description="Clock formatted duration, e.g. 03:32 or 1:02:03")
    views: str = Field("N/A", description="View count with thousands separators")
    saved: bool = Field(False, description="Whether the video is already in one of the user's playlists")
