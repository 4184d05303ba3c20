#!/usr/bin/env python3
"""Check that the playlist title still matches the LAST<N>LIKED format."""

import logging
import re
import sys

from clients.spotify import SpotifyAuthError, SpotifyClient
from core.config import SyncConfig
from sync import setup_logging

logger = logging.getLogger(__name__)

TITLE_PATTERN = re.compile(r"^LAST(\d+)LIKED$")
DESCRIPTION_PREFIX = "Last sync:"


def verify(spotify: SpotifyClient) -> int:
    logger.info("Verifying playlist title...")

    try:
        token = spotify.acquire_token()
    except SpotifyAuthError as e:
        logger.error(str(e))
        return 1

    playlist = spotify.get_playlist_details(token)
    if playlist is None:
        return 1

    logger.info(f"Playlist name: {playlist.name}")
    logger.info(f"Track count: {playlist.total_tracks}")

    if playlist.description and playlist.description.startswith(DESCRIPTION_PREFIX):
        logger.info(f"Description verified: {playlist.description}")
    else:
        logger.warning(f'Description missing or does not start with "{DESCRIPTION_PREFIX}"')

    match = TITLE_PATTERN.match(playlist.name)
    if not match:
        logger.error(f'FAIL: Title "{playlist.name}" does not match LAST{{N}}LIKED format')
        return 1

    title_count = int(match.group(1))
    if title_count == playlist.total_tracks:
        logger.info(f"PASS: Title matches track count ({title_count} = {playlist.total_tracks})")
    else:
        # tracks may have been added/removed by hand since the last sync
        logger.warning(
            f"WARN: Title count ({title_count}) differs from actual tracks ({playlist.total_tracks})"
        )
    return 0


def main() -> int:
    setup_logging()
    spotify = SpotifyClient(SyncConfig.from_env())
    try:
        return verify(spotify)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1
    finally:
        spotify.close()


if __name__ == "__main__":
    sys.exit(main())
