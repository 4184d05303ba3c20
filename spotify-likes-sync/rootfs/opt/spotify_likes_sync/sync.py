#!/usr/bin/env python3
"""Spotify Likes Sync - Add-on Entry Point"""

import logging
import os
import sys

from clients.spotify import SpotifyClient
from core.config import SyncConfig
from core.sync_engine import SyncEngine

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler()]
    )


def load_config() -> SyncConfig | None:
    config = SyncConfig.from_env()
    missing = config.missing()
    if missing:
        logger.error(f"Missing config: {', '.join(missing)}")
        return None
    return config


def main() -> int:
    setup_logging()

    try:
        config = load_config()
        if config is None:
            return 1

        spotify = SpotifyClient(config)
        try:
            result = SyncEngine(spotify, config).sync()
        finally:
            spotify.close()

        if result.success:
            logger.info(f"Sync completed: {result.outcome.value} in {result.duration:.1f}s")
        else:
            logger.warning(f"Sync errors: {result.errors}")
        return result.exit_code

    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
