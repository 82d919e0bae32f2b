from pathlib import Path

from playlist_api.core.config import Settings, get_settings
from playlist_api.services.uploads import build_stored_name, is_allowed_audio


def test_defaults():
    s = Settings()
    assert s.STORAGE_BACKEND == "json"
    assert s.MAX_UPLOAD_BYTES == 20 * 1024 * 1024
    assert s.users_path == Path("data") / "users.json"
    assert s.SEARCH_MAX_RESULTS == 9


def test_env_overrides_and_cors_parsing(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "database")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.example, http://b.example")
    monkeypatch.setenv("MAX_UPLOAD_BYTES", "1024")
    get_settings.cache_clear()

    s = get_settings()
    assert s.STORAGE_BACKEND == "database"
    assert s.CORS_ORIGINS == ["http://a.example", "http://b.example"]
    assert s.MAX_UPLOAD_BYTES == 1024


def test_is_allowed_audio():
    s = Settings()
    assert is_allowed_audio("a.mp3", None, s)
    assert is_allowed_audio("A.MP3", "text/plain", s)
    assert is_allowed_audio("blob", "audio/mpeg; charset=binary", s)
    assert is_allowed_audio("blob", "audio/mp3", s)
    assert not is_allowed_audio("a.wav", "audio/wav", s)
    assert not is_allowed_audio(None, None, s)


def test_build_stored_name_sanitizes():
    name = build_stored_name("../../etc/My Song?.mp3")
    assert "/" not in name
    assert name.startswith("etcMy_Song_")
    assert name.endswith(".mp3")
    assert build_stored_name("").startswith("audio_")
    odd = build_stored_name("$$$.MP3")
    assert "$" not in odd
    assert odd.endswith(".mp3")
