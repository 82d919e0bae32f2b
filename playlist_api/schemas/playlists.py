"""
Pydantic schemas for playlists and their items.

Items are a tagged union on "type":
- "video": a reference to an external catalog video
- "mp3": an uploaded audio file served from the uploads directory

Validation also normalizes legacy records: untyped items become videos,
ratings are coerced into [0, 5], and the old "videos" key is read as "items".
"""

from __future__ import annotations

import math
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import AliasChoices, Field, field_validator, model_validator

from playlist_api.schemas.base import ApiModel, scalar_to_text, stored_timestamp

VIDEO = "video"
AUDIO = "mp3"

MIN_RATING = 0
MAX_RATING = 5

_TEXT_KEYS = frozenset(
    {"title", "videoId", "video_id", "thumbnailUrl", "thumbnail_url", "mp3Id", "mp3_id", "fileUrl", "file_url"}
)


def _normalize_stored_rating(value: Any) -> Union[int, float]:
    if isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    number = min(max(number, float(MIN_RATING)), float(MAX_RATING))
    return int(number) if number.is_integer() else number


class _ItemBase(ApiModel):
    title: str = ""
    rating: Union[int, float] = 0
    added_at: int = 0

    @field_validator("rating", mode="before")
    @classmethod
    def _coerce_rating(cls, value: Any) -> Union[int, float]:
        return _normalize_stored_rating(value)

    @field_validator("added_at", mode="before")
    @classmethod
    def _coerce_added_at(cls, value: Any) -> int:
        return stored_timestamp(value)

    @model_validator(mode="before")
    @classmethod
    def _coerce_text(cls, data: Any) -> Any:
        # Older records may hold numbers or null where text is expected
        if not isinstance(data, dict):
            return data
        return {
            key: ("" if value is None else scalar_to_text(value)) if key in _TEXT_KEYS else value
            for key, value in data.items()
        }


class VideoItem(_ItemBase):
    type: Literal["video"] = VIDEO
    video_id: str = ""
    thumbnail_url: str = ""

    @property
    def item_id(self) -> str:
        return self.video_id


class AudioItem(_ItemBase):
    type: Literal["mp3"] = AUDIO
    mp3_id: str = ""
    file_url: str = ""

    @property
    def item_id(self) -> str:
        return self.mp3_id


Item = Annotated[Union[VideoItem, AudioItem], Field(discriminator="type")]


class Playlist(ApiModel):
    id: str
    name: str = ""
    created_at: int = 0
    items: List[Item] = Field(default_factory=list, validation_alias=AliasChoices("items", "videos"))

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> Any:
        return "" if value is None else scalar_to_text(value)

    @field_validator("created_at", mode="before")
    @classmethod
    def _coerce_created_at(cls, value: Any) -> int:
        return stored_timestamp(value)

    @field_validator("items", mode="before")
    @classmethod
    def _normalize_items(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        normalized = []
        for raw in value:
            if isinstance(raw, (VideoItem, AudioItem)):
                normalized.append(raw)
                continue
            if not isinstance(raw, dict):
                continue
            entry = dict(raw)
            entry["type"] = AUDIO if entry.get("type") == AUDIO else VIDEO
            normalized.append(entry)
        return normalized

    def find_item(self, kind: str, item_id: str) -> Optional[Union[VideoItem, AudioItem]]:
        """Locate an item of the given type by its videoId/mp3Id."""
        for item in self.items:
            if item.type == kind and item.item_id == str(item_id):
                return item
        return None

    def has_video(self, video_id: str) -> bool:
        return self.find_item(VIDEO, video_id) is not None


class PlaylistCreate(ApiModel):
    name: Optional[str] = Field(None, description="Playlist name")

    @field_validator("name", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Any:
        return scalar_to_text(value)


class VideoItemCreate(ApiModel):
    video_id: Optional[str] = Field(None, description="External catalog video id")
    title: Optional[str] = Field(None, description="Video title")
    thumbnail_url: Optional[str] = Field(None, description="Thumbnail image URL")

    @field_validator("video_id", "title", "thumbnail_url", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Any:
        return scalar_to_text(value)


class RatingUpdate(ApiModel):
    # Validated by parse_rating so that bad values map to invalid_rating
    rating: Any = Field(None, description="Integer rating from 0 to 5")


# PUBLIC_INTERFACE
def parse_rating(value: Any) -> Optional[int]:
    """Return the rating as an int if it is an integral number in [0, 5], else None.

    Numeric strings ("4") are accepted; booleans, fractions and non-finite
    values are not.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    if number < MIN_RATING or number > MAX_RATING:
        return None
    return int(number)
