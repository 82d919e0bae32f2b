import pytest

from conftest import login, register

VIDEO = {"videoId": "abc123", "title": "Lofi beats", "thumbnailUrl": "https://i.ytimg.com/vi/abc123/mqdefault.jpg"}


def _add_video(client, playlist_id, **overrides):
    return client.post(f"/api/playlists/{playlist_id}/items", json={**VIDEO, **overrides})


@pytest.mark.parametrize(
    "method,path",
    [
        ("get", "/api/playlists"),
        ("post", "/api/playlists"),
        ("get", "/api/playlists/pl_1"),
        ("delete", "/api/playlists/pl_1"),
        ("get", "/api/playlists/pl_1/items"),
        ("post", "/api/playlists/pl_1/items"),
        ("patch", "/api/playlists/pl_1/items/abc"),
        ("delete", "/api/playlists/pl_1/items/abc"),
        ("post", "/api/playlists/pl_1/audio"),
        ("patch", "/api/playlists/pl_1/audio/mp3_1"),
        ("delete", "/api/playlists/pl_1/audio/mp3_1"),
        ("get", "/api/playlists/contains/abc"),
        ("get", "/api/search?q=x"),
    ],
)
def test_requires_session(client, method, path):
    r = client.request(method.upper(), path, json={} if method in ("post", "patch") else None)
    assert r.status_code == 401
    assert r.json() == {"error": "unauthorized"}


def test_create_list_and_get_playlist(user_client, playlist):
    assert playlist["id"].startswith("pl_")
    assert playlist["name"] == "Road trip"
    assert playlist["items"] == []
    assert isinstance(playlist["createdAt"], int)

    listed = user_client.get("/api/playlists").json()["playlists"]
    assert [p["id"] for p in listed] == [playlist["id"]]

    one = user_client.get(f"/api/playlists/{playlist['id']}").json()["playlist"]
    assert one == playlist


def test_create_playlist_trims_name_and_rejects_blank(user_client):
    r = user_client.post("/api/playlists", json={"name": "  Chill  "})
    assert r.json()["playlist"]["name"] == "Chill"

    r = user_client.post("/api/playlists", json={"name": "   "})
    assert r.status_code == 400
    assert r.json() == {"error": "missing_name"}

    r = user_client.post("/api/playlists", json={})
    assert r.json() == {"error": "missing_name"}


def test_duplicate_playlist_name_ignores_case(user_client, playlist):
    r = user_client.post("/api/playlists", json={"name": "ROAD TRIP "})
    assert r.status_code == 409
    assert r.json() == {"error": "playlist_name_exists"}


def test_playlists_are_private_to_their_owner(user_client, playlist):
    user_client.post("/api/logout")
    register(user_client, username="bob")
    login(user_client, username="bob")

    assert user_client.get("/api/playlists").json() == {"playlists": []}
    r = user_client.get(f"/api/playlists/{playlist['id']}")
    assert r.status_code == 404
    assert r.json() == {"error": "playlist_not_found"}
    # Bob may reuse the name
    assert user_client.post("/api/playlists", json={"name": "Road trip"}).status_code == 201


def test_add_video_round_trip(user_client, playlist):
    r = _add_video(user_client, playlist["id"])
    assert r.status_code == 201
    item = r.json()["item"]
    assert item["type"] == "video"
    assert item["rating"] == 0
    assert item["videoId"] == "abc123"

    listed = user_client.get("/api/playlists").json()["playlists"][0]
    assert listed["items"] == [item]


def test_add_video_requires_all_fields(user_client, playlist):
    r = _add_video(user_client, playlist["id"], thumbnailUrl="")
    assert r.status_code == 400
    assert r.json() == {"error": "missing_fields"}


def test_add_video_to_unknown_playlist(user_client):
    r = _add_video(user_client, "pl_missing")
    assert r.status_code == 404
    assert r.json() == {"error": "playlist_not_found"}


def test_duplicate_video_in_same_playlist_conflicts(user_client, playlist):
    assert _add_video(user_client, playlist["id"]).status_code == 201
    r = _add_video(user_client, playlist["id"], title="Other title")
    assert r.status_code == 409
    assert r.json() == {"error": "already_exists"}


def test_same_video_allowed_in_another_playlist(user_client, playlist):
    other = user_client.post("/api/playlists", json={"name": "Gym"}).json()["playlist"]
    assert _add_video(user_client, playlist["id"]).status_code == 201
    assert _add_video(user_client, other["id"]).status_code == 201

    r = user_client.get("/api/playlists/contains/abc123").json()
    assert r["saved"] is True
    assert sorted(r["playlistIds"]) == sorted([playlist["id"], other["id"]])
    assert user_client.get("/api/playlists/contains/zzz").json() == {"saved": False, "playlistIds": []}


@pytest.mark.parametrize("rating", [0, 3, 5, "4", 2.0])
def test_rate_video_accepts_integers_in_range(user_client, playlist, rating):
    _add_video(user_client, playlist["id"])
    r = user_client.patch(f"/api/playlists/{playlist['id']}/items/abc123", json={"rating": rating})
    assert r.status_code == 200
    item = user_client.get(f"/api/playlists/{playlist['id']}").json()["playlist"]["items"][0]
    assert item["rating"] == int(float(rating))


@pytest.mark.parametrize("rating", [6, -1, "abc", 2.5, True, None, ""])
def test_rate_video_rejects_invalid_values(user_client, playlist, rating):
    _add_video(user_client, playlist["id"])
    r = user_client.patch(f"/api/playlists/{playlist['id']}/items/abc123", json={"rating": rating})
    assert r.status_code == 400
    assert r.json() == {"error": "invalid_rating"}


def test_rate_unknown_item_and_playlist(user_client, playlist):
    r = user_client.patch(f"/api/playlists/{playlist['id']}/items/nope", json={"rating": 3})
    assert r.status_code == 404
    assert r.json() == {"error": "item_not_found"}

    r = user_client.patch("/api/playlists/pl_missing/items/abc123", json={"rating": 3})
    assert r.json() == {"error": "playlist_not_found"}


def test_remove_video(user_client, playlist):
    _add_video(user_client, playlist["id"])
    _add_video(user_client, playlist["id"], videoId="def456")

    r = user_client.delete(f"/api/playlists/{playlist['id']}/items/abc123")
    assert r.json() == {"ok": True}
    items = user_client.get(f"/api/playlists/{playlist['id']}").json()["playlist"]["items"]
    assert [i["videoId"] for i in items] == ["def456"]

    r = user_client.delete(f"/api/playlists/{playlist['id']}/items/abc123")
    assert r.status_code == 404
    assert r.json() == {"error": "item_not_found"}


def test_delete_playlist_cascades_items(user_client, playlist):
    pid = playlist["id"]
    _add_video(user_client, pid)

    assert user_client.delete(f"/api/playlists/{pid}").json() == {"ok": True}
    assert user_client.get("/api/playlists").json() == {"playlists": []}

    for r in (
        user_client.delete(f"/api/playlists/{pid}"),
        user_client.patch(f"/api/playlists/{pid}/items/abc123", json={"rating": 1}),
        user_client.delete(f"/api/playlists/{pid}/items/abc123"),
        _add_video(user_client, pid),
    ):
        assert r.status_code == 404
        assert r.json() == {"error": "playlist_not_found"}


def test_list_items_filter_and_sort(user_client, playlist):
    pid = playlist["id"]
    _add_video(user_client, pid, videoId="v1", title="beta song")
    _add_video(user_client, pid, videoId="v2", title="Alpha Song")
    _add_video(user_client, pid, videoId="v3", title="gamma tune")
    user_client.patch(f"/api/playlists/{pid}/items/v3", json={"rating": 5})
    user_client.patch(f"/api/playlists/{pid}/items/v1", json={"rating": 2})

    by_title = user_client.get(f"/api/playlists/{pid}/items").json()["items"]
    assert [i["videoId"] for i in by_title] == ["v2", "v1", "v3"]

    by_rating = user_client.get(f"/api/playlists/{pid}/items", params={"sort": "rating"}).json()["items"]
    assert [i["videoId"] for i in by_rating] == ["v3", "v1", "v2"]

    filtered = user_client.get(f"/api/playlists/{pid}/items", params={"filter": "SONG"}).json()["items"]
    assert [i["videoId"] for i in filtered] == ["v2", "v1"]


def test_list_items_unknown_sort_orders_by_title(user_client, playlist):
    pid = playlist["id"]
    _add_video(user_client, pid, videoId="v1", title="beta")
    _add_video(user_client, pid, videoId="v2", title="Alpha")

    r = user_client.get(f"/api/playlists/{pid}/items", params={"sort": "newest"})
    assert r.status_code == 200
    assert [i["videoId"] for i in r.json()["items"]] == ["v2", "v1"]


def test_responses_carry_correlation_id(user_client):
    r = user_client.get("/api/playlists", headers={"X-Request-ID": "req-42"})
    assert r.headers["X-Correlation-ID"] == "req-42"


def test_health_check(client):
    assert client.get("/").json() == {"message": "Healthy"}
