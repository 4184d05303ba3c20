"""
Sync Engine

Mirrors a user's most recently liked Spotify tracks into a target playlist.

Run order:
1. Acquire a fresh access token
2. Fetch the N most recent likes (a failed fetch is never "no likes")
3. Reject the run if any URI looks truncated
4. Stop without writing anything if the likes list is empty
5. Compare with the current playlist, in order; a failed read counts
   as "changed"
6. Replace the playlist only when it differs
7. Stamp name/description (LAST<N>LIKED, "Last sync: ...") - best effort

Every remote call is attempted once; the next scheduled run is the retry.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Protocol

from clients.spotify import SpotifyAuthError
from core.config import SyncConfig
from core.models import InvalidTrackDataError, SyncOutcome, SyncResult, find_invalid_uris

logger = logging.getLogger(__name__)


class SpotifyClientProtocol(Protocol):
    def acquire_token(self) -> str: ...
    def fetch_recent_likes(self, token: str) -> list[str] | None: ...
    def fetch_playlist_tracks(self, token: str) -> list[str] | None: ...
    def replace_playlist_tracks(self, token: str, track_uris: list[str]) -> bool: ...
    def update_playlist_metadata(self, token: str, name: str | None = None,
                                 description: str | None = None) -> bool: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def playlist_title(track_count: int) -> str:
    return f"LAST{track_count}LIKED"


def sync_description(when: datetime) -> str:
    """Format: 'Last sync: YYYY-MM-DD HH:MM:SS UTC'."""
    return f"Last sync: {when.astimezone(timezone.utc):%Y-%m-%d %H:%M:%S} UTC"


class SyncEngine:
    """Decides whether the target playlist needs replacing and does it."""

    def __init__(self, spotify: SpotifyClientProtocol, config: SyncConfig,
                 clock: Callable[[], datetime] = _utcnow):
        self._spotify = spotify
        self._config = config
        self._clock = clock

    def _finish(self, result: SyncResult, start: float) -> SyncResult:
        result.duration = time.time() - start
        return result

    def sync(self) -> SyncResult:
        """Perform one sync run. Never raises for expected failures."""
        start = time.time()
        logger.info("Spotify sync initialized")

        try:
            token = self._spotify.acquire_token()
        except SpotifyAuthError as e:
            logger.error(str(e))
            logger.error("Sync failed: could not obtain access token")
            return self._finish(SyncResult.failure(f"Auth failed: {e}"), start)
        logger.info("Access token obtained")

        track_uris = self._spotify.fetch_recent_likes(token)
        if track_uris is None:
            logger.error("Sync failed: could not fetch likes")
            return self._finish(SyncResult.failure("Could not fetch likes"), start)

        invalid = find_invalid_uris(track_uris)
        if invalid:
            e = InvalidTrackDataError(len(invalid))
            logger.error(f"Sync failed: {e}")
            return self._finish(SyncResult.failure(str(e)), start)

        if not track_uris:
            logger.info("No liked tracks found - playlist unchanged (safety: never clear)")
            logger.info("Sync completed - no changes made")
            return self._finish(SyncResult(outcome=SyncOutcome.EMPTY_LIKES), start)

        count = len(track_uris)
        expected = self._config.track_count
        if count < expected:
            logger.info(f"Fetched {count} tracks (user has fewer than {expected} likes)")
        else:
            logger.info(f"Fetched {count} tracks")

        current = self._spotify.fetch_playlist_tracks(token)
        result = SyncResult(outcome=SyncOutcome.UNCHANGED, track_count=count)

        if current is not None and current == track_uris:
            logger.info("Playlist already up-to-date, skipping update")
        else:
            logger.info(f"Action: replacing playlist contents with {count} tracks")
            if not self._spotify.replace_playlist_tracks(token, track_uris):
                logger.error("Sync failed: could not update playlist")
                return self._finish(SyncResult.failure("Could not update playlist"), start)
            result.outcome = SyncOutcome.UPDATED
            result.playlist_written = True

        result.metadata_updated = self._spotify.update_playlist_metadata(
            token,
            name=playlist_title(count),
            description=sync_description(self._clock())
        )
        if not result.metadata_updated:
            result.errors.append("Playlist details not updated")

        logger.info(f"Synced {count} tracks to playlist")
        return self._finish(result, start)
