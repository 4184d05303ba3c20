"""Runtime configuration, read once from the environment."""

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping

logger = logging.getLogger(__name__)

DEFAULT_TRACK_COUNT = 50
MAX_TRACK_COUNT = 50  # hard limit of /v1/me/tracks

REQUIRED_VARS = {
    "SPOTIFY_CLIENT_ID": "client_id",
    "SPOTIFY_CLIENT_SECRET": "client_secret",
    "SPOTIFY_REFRESH_TOKEN": "refresh_token",
    "PLAYLIST_ID": "playlist_id",
}


def resolve_track_count(raw: str | None) -> int:
    """Turn the TRACK_COUNT setting into a usable request limit.

    Anything missing, non-numeric, fractional or below 1 falls back to the
    default; anything above the API limit is clamped to it.
    """
    if raw is None or not raw.strip():
        return DEFAULT_TRACK_COUNT

    try:
        count = int(raw.strip())
    except ValueError:
        logger.debug(f"TRACK_COUNT {raw!r} is not an integer, using {DEFAULT_TRACK_COUNT}")
        return DEFAULT_TRACK_COUNT

    if count < 1:
        return DEFAULT_TRACK_COUNT
    if count > MAX_TRACK_COUNT:
        logger.info(f"TRACK_COUNT {raw} exceeds API limit, using {MAX_TRACK_COUNT}")
        return MAX_TRACK_COUNT
    return count


@dataclass(frozen=True)
class SyncConfig:
    """Everything a sync run needs. Secrets are kept out of repr()."""
    client_id: str = field(default="", repr=False)
    client_secret: str = field(default="", repr=False)
    refresh_token: str = field(default="", repr=False)
    playlist_id: str = ""
    track_count: int = DEFAULT_TRACK_COUNT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SyncConfig":
        env = os.environ if environ is None else environ
        values = {attr: env.get(var, "") for var, attr in REQUIRED_VARS.items()}
        return cls(
            playlist_id=values.pop("playlist_id").strip(),
            track_count=resolve_track_count(env.get("TRACK_COUNT")),
            **values
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret and self.refresh_token)

    def missing(self) -> list[str]:
        """Names of required environment variables that are empty."""
        return [var for var, attr in REQUIRED_VARS.items() if not getattr(self, attr)]
