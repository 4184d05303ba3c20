"""Data models for sync operations."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

TRACK_URI_PREFIX = "spotify:track:"
MIN_TRACK_URI_LENGTH = 15  # anything shorter is a truncated URI


class InvalidTrackDataError(Exception):
    """Raised when fetched likes contain corrupt track URIs."""

    def __init__(self, invalid_count: int):
        self.invalid_count = invalid_count
        super().__init__(f"{invalid_count} invalid track URIs detected")


class SyncOutcome(Enum):
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    EMPTY_LIKES = "empty_likes"
    FAILED = "failed"


@dataclass
class PlaylistDetails:
    """Name, description and size of the target playlist."""
    name: str
    description: str | None
    total_tracks: int


@dataclass
class SyncResult:
    """Result of a sync operation."""
    outcome: SyncOutcome
    track_count: int = 0
    playlist_written: bool = False
    metadata_updated: bool = False
    errors: List[str] = field(default_factory=list)
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return self.outcome is not SyncOutcome.FAILED

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    @classmethod
    def failure(cls, error: str, duration: float = 0.0) -> "SyncResult":
        """Create a failure result with single error."""
        return cls(outcome=SyncOutcome.FAILED, errors=[error], duration=duration)


def is_track_uri(value: object) -> bool:
    return isinstance(value, str) and value.startswith(TRACK_URI_PREFIX)


def find_invalid_uris(uris: List[str]) -> List[str]:
    """URIs too short to be real track references."""
    return [uri for uri in uris if len(uri) < MIN_TRACK_URI_LENGTH]
