import logging

import pytest

from core.config import DEFAULT_TRACK_COUNT, SyncConfig, resolve_track_count


@pytest.mark.parametrize("raw", [None, "", "0", "-5", "abc", "12.5"])
def test_invalid_track_count_uses_default(raw):
    assert resolve_track_count(raw) == DEFAULT_TRACK_COUNT == 50


@pytest.mark.parametrize("raw,expected", [("1", 1), ("30", 30), ("50", 50), (" 7 ", 7)])
def test_valid_track_count_passes_through(raw, expected):
    assert resolve_track_count(raw) == expected


def test_track_count_above_limit_is_clamped(caplog):
    with caplog.at_level(logging.INFO):
        assert resolve_track_count("120") == 50

    assert "exceeds API limit" in caplog.text


def test_from_env_reads_all_settings(monkeypatch):
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "secret")
    monkeypatch.setenv("SPOTIFY_REFRESH_TOKEN", "refresh")
    monkeypatch.setenv("PLAYLIST_ID", "  abc123  ")
    monkeypatch.setenv("TRACK_COUNT", "25")

    config = SyncConfig.from_env()

    assert config.has_credentials
    assert config.playlist_id == "abc123"
    assert config.track_count == 25
    assert config.missing() == []


def test_missing_values_are_reported():
    config = SyncConfig.from_env({"SPOTIFY_CLIENT_ID": "id"})

    assert not config.has_credentials
    assert config.missing() == ["SPOTIFY_CLIENT_SECRET", "SPOTIFY_REFRESH_TOKEN", "PLAYLIST_ID"]


def test_repr_hides_secrets(config):
    text = repr(config)

    assert "client-secret" not in text
    assert "refresh-token" not in text
    assert "playlist123" in text
