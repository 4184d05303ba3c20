"""Spotify Web API Client - liked tracks and playlist operations"""

import logging
from typing import Any

import requests

from clients.http import (
    APIError,
    HttpError,
    MalformedResponseError,
    NetworkError,
    RequestTimeoutError,
    send_request,
)
from core.config import SyncConfig
from core.models import PlaylistDetails, is_track_uri

logger = logging.getLogger(__name__)

TOKEN_URL = "https://accounts.spotify.com/api/token"
API_URL = "https://api.spotify.com/v1"
PLAYLIST_PAGE_LIMIT = 50


class SpotifyAuthError(Exception):
    pass


class MissingCredentialsError(SpotifyAuthError):
    pass


class PlaylistNotConfiguredError(Exception):
    pass


class SpotifySchemaError(Exception):
    pass


def extract_track_uris(data: Any) -> list[str]:
    """Pull track URIs out of a paging object, preserving order.

    Items without a track, without a URI or outside the track namespace
    (podcast episodes, local files) are skipped.
    """
    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        raise SpotifySchemaError("Response missing 'items' list")

    uris = []
    for item in data["items"]:
        track = item.get("track") if isinstance(item, dict) else None
        uri = track.get("uri") if isinstance(track, dict) else None
        if is_track_uri(uri):
            uris.append(uri)
    return uris


def _describe(e: Exception) -> str:
    if isinstance(e, RequestTimeoutError):
        return "request timeout"
    if isinstance(e, NetworkError):
        return "network error"
    if isinstance(e, MalformedResponseError):
        return "invalid response format"
    if isinstance(e, SpotifySchemaError):
        return "unexpected response structure"
    return str(e)


class SpotifyClient:
    def __init__(self, config: SyncConfig, session: requests.Session | None = None):
        self._config = config
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def _api_request(self, method: str, path: str, token: str, body: dict | None = None) -> Any:
        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        return send_request(self._session, method, f"{API_URL}{path}",
                            headers=headers, json=body).payload

    def _playlist_id(self) -> str:
        playlist_id = self._config.playlist_id.strip()
        if not playlist_id:
            raise PlaylistNotConfiguredError(
                "PLAYLIST_ID not configured. Create a playlist in Spotify "
                "and add its ID to your environment."
            )
        return playlist_id

    def acquire_token(self) -> str:
        """Exchange the refresh token for a fresh access token.

        Raises SpotifyAuthError on any failure; never returns a blank token.
        """
        if not self._config.has_credentials:
            raise MissingCredentialsError("Missing Spotify credentials in environment")

        logger.info("Refreshing access token...")
        try:
            response = send_request(
                self._session, "POST", TOKEN_URL,
                data={"grant_type": "refresh_token",
                      "refresh_token": self._config.refresh_token},
                auth=(self._config.client_id, self._config.client_secret)
            )
        except APIError as e:
            raise SpotifyAuthError(f"Token refresh failed: {e}") from e
        except HttpError as e:
            raise SpotifyAuthError(f"Token refresh failed: {_describe(e)}") from e

        data = response.payload
        token = data.get("access_token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token.strip():
            raise SpotifyAuthError(
                "Token refresh failed: missing or empty access_token in response"
            )
        return token

    def fetch_recent_likes(self, token: str) -> list[str] | None:
        """Most recently liked track URIs, newest first. None on any failure."""
        limit = self._config.track_count
        logger.info(f"Fetching {limit} most recent likes...")
        try:
            data = self._api_request("GET", f"/me/tracks?limit={limit}", token)
            return extract_track_uris(data)
        except (HttpError, SpotifySchemaError) as e:
            logger.error(f"Fetch likes failed: {_describe(e)}")
            return None

    def fetch_playlist_tracks(self, token: str) -> list[str] | None:
        """Current playlist contents. None on any failure; never raises."""
        try:
            playlist_id = self._playlist_id()
            logger.info("Fetching current playlist tracks...")
            data = self._api_request(
                "GET",
                f"/playlists/{playlist_id}/tracks"
                f"?fields=items(track(uri))&limit={PLAYLIST_PAGE_LIMIT}",
                token
            )
            uris = extract_track_uris(data)
        except PlaylistNotConfiguredError as e:
            logger.error(str(e))
            return None
        except (HttpError, SpotifySchemaError) as e:
            logger.warning(f"Fetch playlist tracks failed: {_describe(e)} - proceeding with update")
            return None

        logger.info(f"Fetched {len(uris)} current playlist tracks")
        return uris

    def replace_playlist_tracks(self, token: str, track_uris: list[str]) -> bool:
        """Replace the whole playlist with track_uris. Returns True on success.

        An empty list clears the playlist.
        """
        try:
            playlist_id = self._playlist_id()
            logger.info(f"Updating playlist with {len(track_uris)} tracks...")
            self._api_request("PUT", f"/playlists/{playlist_id}/tracks", token,
                              {"uris": list(track_uris)})
            return True
        except PlaylistNotConfiguredError as e:
            logger.error(str(e))
        except APIError as e:
            if e.status == 404:
                logger.error("Update playlist failed: Playlist not found - did you create it in Spotify?")
            elif e.status == 403:
                logger.error("Update playlist failed: Permission denied - ensure you own this playlist")
            elif e.status == 401:
                logger.error("Update playlist failed: Authentication failed - token may be expired")
            else:
                logger.error(f"Update playlist failed: {e}")
        except HttpError as e:
            logger.error(f"Update playlist failed: {_describe(e)}")
        return False

    def update_playlist_metadata(self, token: str, name: str | None = None,
                                 description: str | None = None) -> bool:
        """Set name and/or description in a single request. Non-fatal on failure."""
        body = {}
        if name is not None:
            body["name"] = name
        if description is not None:
            body["description"] = description

        try:
            playlist_id = self._playlist_id()
        except PlaylistNotConfiguredError as e:
            logger.error(str(e))
            return False
        if not body:
            logger.warning("No playlist name or description given, skipping details update")
            return False

        if name is not None:
            logger.info(f"Updating playlist title to {name}...")
        try:
            self._api_request("PUT", f"/playlists/{playlist_id}", token, body)
        except HttpError as e:
            logger.warning(f"Could not update playlist details: {_describe(e)}")
            return False

        logger.info("Playlist details updated")
        return True

    def get_playlist_details(self, token: str) -> PlaylistDetails | None:
        """Name, description and track total of the target playlist."""
        try:
            playlist_id = self._playlist_id()
            data = self._api_request(
                "GET", f"/playlists/{playlist_id}?fields=name,description,tracks.total", token
            )
            return self._parse_details(data)
        except PlaylistNotConfiguredError as e:
            logger.error(str(e))
        except (HttpError, SpotifySchemaError) as e:
            logger.error(f"Fetch playlist details failed: {_describe(e)}")
        return None

    def _parse_details(self, data: Any) -> PlaylistDetails:
        if not isinstance(data, dict):
            raise SpotifySchemaError("Playlist response is not an object")

        name = data.get("name")
        description = data.get("description")
        tracks = data.get("tracks")
        total = tracks.get("total") if isinstance(tracks, dict) else None

        if not isinstance(name, str):
            raise SpotifySchemaError("Playlist response missing 'name'")
        if description is not None and not isinstance(description, str):
            raise SpotifySchemaError("Playlist 'description' is not a string")
        if isinstance(total, bool) or not isinstance(total, (int, float)):
            raise SpotifySchemaError("Playlist response missing 'tracks.total'")

        return PlaylistDetails(name=name, description=description, total_tracks=int(total))
