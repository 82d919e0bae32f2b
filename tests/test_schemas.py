import math

import pytest

from playlist_api.schemas.playlists import (
    AudioItem,
    Playlist,
    PlaylistCreate,
    VideoItem,
    VideoItemCreate,
    parse_rating,
)
from playlist_api.schemas.users import UserCreate, UserLogin


@pytest.mark.parametrize("value,expected", [(0, 0), (5, 5), ("3", 3), (" 2 ", 2), (4.0, 4)])
def test_parse_rating_accepts_integral_values_in_range(value, expected):
    assert parse_rating(value) == expected


@pytest.mark.parametrize("value", [6, -1, "abc", 2.5, True, False, None, "", math.nan, math.inf, [3], {"r": 1}])
def test_parse_rating_rejects_everything_else(value):
    assert parse_rating(value) is None


def test_playlist_items_default_to_empty_list():
    assert Playlist.model_validate({"id": "pl_1"}).items == []
    assert Playlist.model_validate({"id": "pl_1", "items": None}).items == []


def test_untyped_and_unknown_typed_items_are_videos():
    playlist = Playlist.model_validate(
        {"id": 7, "videos": [{"videoId": "v1"}, {"type": "clip", "videoId": "v2"}, "junk", {"type": "mp3", "mp3Id": "m"}]}
    )
    assert playlist.id == "7"
    assert [type(i) for i in playlist.items] == [VideoItem, VideoItem, AudioItem]


@pytest.mark.parametrize("stored,expected", [("4", 4), (9, 5), (-2, 0), ("nan", 0), (None, 0), (2.5, 2.5)])
def test_stored_ratings_are_clamped_into_range(stored, expected):
    item = Playlist.model_validate({"id": "p", "items": [{"videoId": "v", "rating": stored}]}).items[0]
    assert item.rating == expected


def test_items_serialize_with_camel_case_keys():
    item = AudioItem(mp3_id="mp3_1", title="t", file_url="/uploads/a.mp3", added_at=5)
    assert item.to_json() == {
        "type": "mp3",
        "mp3Id": "mp3_1",
        "title": "t",
        "fileUrl": "/uploads/a.mp3",
        "rating": 0,
        "addedAt": 5,
    }


def test_find_item_matches_type_and_id():
    playlist = Playlist(id="p", items=[VideoItem(video_id="x"), AudioItem(mp3_id="x")])
    assert isinstance(playlist.find_item("mp3", "x"), AudioItem)
    assert isinstance(playlist.find_item("video", "x"), VideoItem)
    assert playlist.find_item("video", "y") is None


@pytest.mark.parametrize("stored,expected", [(9, 5), (-2, 0), (7.5, 5), ("-0.5", 0)])
def test_out_of_range_ratings_become_integer_bounds(stored, expected):
    item = Playlist.model_validate({"id": "p", "items": [{"videoId": "v", "rating": stored}]}).items[0]
    assert item.rating == expected
    assert isinstance(item.rating, int)


def test_stored_items_with_non_text_fields_are_readable():
    playlist = Playlist.model_validate(
        {
            "id": 1,
            "name": None,
            "createdAt": "soon",
            "videos": [
                {"videoId": 42, "title": None, "thumbnailUrl": None, "addedAt": None},
                {"type": "mp3", "mp3Id": 7, "title": 3.0, "fileUrl": "/uploads/a.mp3", "addedAt": "12"},
            ],
        }
    )
    video, audio = playlist.items
    assert (playlist.name, playlist.created_at) == ("", 0)
    assert (video.video_id, video.title, video.thumbnail_url, video.added_at) == ("42", "", "", 0)
    assert (audio.mp3_id, audio.title, audio.added_at) == ("7", "3", 12)
    assert playlist.has_video("42")


def test_request_models_accept_numbers_as_text():
    video = VideoItemCreate.model_validate({"videoId": 42, "title": 1984, "thumbnailUrl": "t"})
    assert (video.video_id, video.title) == ("42", "1984")

    user = UserCreate.model_validate({"username": 1234, "password": 5678, "firstName": "N", "imageUrl": "u"})
    assert (user.username, user.password) == ("1234", "5678")
    assert UserLogin.model_validate({"username": 1234, "password": None}).password is None
    assert PlaylistCreate.model_validate({"name": 2024}).name == "2024"
