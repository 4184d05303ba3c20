import json

import pytest

from core.config import SyncConfig

ENV_KEYS = [
    "SPOTIFY_CLIENT_ID",
    "SPOTIFY_CLIENT_SECRET",
    "SPOTIFY_REFRESH_TOKEN",
    "PLAYLIST_ID",
    "TRACK_COUNT",
    "LOG_LEVEL",
]


class FakeResponse:
    def __init__(self, status_code=200, body=None, raw=None):
        self.status_code = status_code
        if raw is not None:
            self.content = raw.encode("utf-8")
        elif body is not None:
            self.content = json.dumps(body).encode("utf-8")
        else:
            self.content = b""
        self.closed = False

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i:i + chunk_size]

    def close(self):
        self.closed = True


class FakeSession:
    """Stands in for requests.Session; replays queued responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def queue(self, *responses):
        self.responses.extend(responses)

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"unexpected request: {method} {url}")
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """
    Ensure tests never see real credentials from the host environment.
    """
    for k in ENV_KEYS:
        monkeypatch.delenv(k, raising=False)


@pytest.fixture
def config():
    return SyncConfig(
        client_id="client-id",
        client_secret="client-secret",
        refresh_token="refresh-token",
        playlist_id="playlist123",
        track_count=50,
    )


@pytest.fixture
def session():
    return FakeSession()
