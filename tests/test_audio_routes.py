import re

import pytest

MP3_BYTES = b"ID3\x03\x00\x00\x00" + b"\x00" * 64


def _upload(client, playlist_id, name="My Song (live).mp3", data=MP3_BYTES, mime="audio/mpeg", title=None, path="audio"):
    form = {"title": title} if title is not None else {}
    return client.post(f"/api/playlists/{playlist_id}/{path}", files={"file": (name, data, mime)}, data=form)


def test_upload_stores_file_and_appends_item(user_client, playlist, settings):
    r = _upload(user_client, playlist["id"])
    assert r.status_code == 201
    item = r.json()["item"]
    assert item["type"] == "mp3"
    assert item["rating"] == 0
    assert item["title"] == "My Song (live).mp3"
    assert item["mp3Id"].startswith("mp3_")
    assert re.fullmatch(r"/uploads/My_Song_live_\d+_[0-9a-f]+\.mp3", item["fileUrl"])

    stored = settings.UPLOADS_DIR / item["fileUrl"].rsplit("/", 1)[1]
    assert stored.read_bytes() == MP3_BYTES

    served = user_client.get(item["fileUrl"])
    assert served.status_code == 200
    assert served.content == MP3_BYTES

    items = user_client.get(f"/api/playlists/{playlist['id']}").json()["playlist"]["items"]
    assert items == [item]


def test_upload_uses_given_title(user_client, playlist):
    r = _upload(user_client, playlist["id"], title="  Live at home ")
    assert r.json()["item"]["title"] == "Live at home"


def test_upload_accepts_mp3_extension_with_generic_mime(user_client, playlist):
    r = _upload(user_client, playlist["id"], name="track.MP3", mime="application/octet-stream")
    assert r.status_code == 201


def test_upload_accepts_mp3_mime_without_extension(user_client, playlist):
    r = _upload(user_client, playlist["id"], name="recording", mime="audio/mpeg")
    assert r.status_code == 201
    assert r.json()["item"]["fileUrl"].endswith(".mp3")


def test_upload_rejects_other_file_types(user_client, playlist, settings):
    r = _upload(user_client, playlist["id"], name="notes.txt", data=b"hello", mime="text/plain")
    assert r.status_code == 400
    assert r.json() == {"error": "invalid_file_type"}
    assert not any(settings.UPLOADS_DIR.iterdir())


def test_upload_without_file(user_client, playlist):
    r = user_client.post(f"/api/playlists/{playlist['id']}/audio", data={"title": "x"})
    assert r.status_code == 400
    assert r.json() == {"error": "missing_file"}


def test_upload_to_unknown_playlist_writes_nothing(user_client, settings):
    r = _upload(user_client, "pl_missing")
    assert r.status_code == 404
    assert r.json() == {"error": "playlist_not_found"}
    assert not any(settings.UPLOADS_DIR.iterdir())


def test_upload_over_size_cap_is_rejected(tmp_path):
    from fastapi.testclient import TestClient

    from conftest import login, make_settings, register
    from playlist_api.api.main import create_app

    settings = make_settings(tmp_path, MAX_UPLOAD_BYTES=32)
    with TestClient(create_app(settings)) as client:
        register(client)
        login(client)
        pid = client.post("/api/playlists", json={"name": "Big"}).json()["playlist"]["id"]

        r = _upload(client, pid, data=b"x" * 33)
        assert r.status_code == 413
        assert r.json() == {"error": "file_too_large"}
        assert not any(settings.UPLOADS_DIR.iterdir())
        assert client.get(f"/api/playlists/{pid}").json()["playlist"]["items"] == []


@pytest.mark.parametrize("path", ["audio", "mp3"])
def test_rate_and_remove_audio(user_client, playlist, settings, path):
    pid = playlist["id"]
    item = _upload(user_client, pid, path=path).json()["item"]
    url = f"/api/playlists/{pid}/{path}/{item['mp3Id']}"

    assert user_client.patch(url, json={"rating": 4}).json() == {"ok": True}
    assert user_client.get(f"/api/playlists/{pid}").json()["playlist"]["items"][0]["rating"] == 4

    r = user_client.patch(url, json={"rating": 9})
    assert r.json() == {"error": "invalid_rating"}

    assert user_client.delete(url).json() == {"ok": True}
    assert user_client.get(f"/api/playlists/{pid}").json()["playlist"]["items"] == []
    # the stored file is left in place
    assert (settings.UPLOADS_DIR / item["fileUrl"].rsplit("/", 1)[1]).exists()

    r = user_client.delete(url)
    assert r.status_code == 404
    assert r.json() == {"error": "item_not_found"}


def test_video_and_audio_ids_do_not_cross(user_client, playlist):
    pid = playlist["id"]
    item = _upload(user_client, pid).json()["item"]
    r = user_client.delete(f"/api/playlists/{pid}/items/{item['mp3Id']}")
    assert r.status_code == 404
    assert r.json() == {"error": "item_not_found"}
