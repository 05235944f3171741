from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MediaKind(str, Enum):
    ANIME = "ANIME"
    MANGA = "MANGA"


class ActivityStatus(str, Enum):
    CURRENT = "CURRENT"
    REPEATING = "REPEATING"
    COMPLETED = "COMPLETED"
    PAUSED = "PAUSED"
    DROPPED = "DROPPED"
    PLANNING = "PLANNING"


@dataclass(frozen=True, slots=True)
class RemoteUser:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class AccountLink:
    local_id: str
    remote_id: int
    remote_name: str

    def to_document(self) -> dict[str, object]:
        return {"id": self.remote_id, "name": self.remote_name}


@dataclass(frozen=True, slots=True)
class ActivityRecord:
    id: int
    # Raw AniList status text when it is not one of the known values.
    status: ActivityStatus | str
    progress: str | None
    media_title: str
    media_kind: MediaKind
    media_url: str | None
    cover_image_url: str | None
    activity_url: str | None
    created_at: int
    user_name: str


@dataclass(frozen=True, slots=True)
class MediaCounts:
    count: int
    progress: int


@dataclass(frozen=True, slots=True)
class UserStatistics:
    id: int
    name: str
    site_url: str | None
    avatar_url: str | None
    anime: MediaCounts
    manga: MediaCounts

    def counts_for(self, kind: MediaKind) -> MediaCounts:
        return self.anime if kind is MediaKind.ANIME else self.manga


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    name: str
    count: int
    progress: int
    avatar_url: str | None
