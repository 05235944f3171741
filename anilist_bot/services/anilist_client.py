from __future__ import annotations

import asyncio
import json
from typing import Any, Dict

import aiohttp

from ..errors import RemoteServiceError
from ..models import (
    ActivityRecord,
    ActivityStatus,
    MediaCounts,
    MediaKind,
    RemoteUser,
    UserStatistics,
)


USER_ID_QUERY = """
query ($username: String) {
    User(name: $username) {
        id
        name
    }
}
"""

ACTIVITY_QUERY = """
query UserActivity($userId: Int) {
    Page(perPage: 1) {
        activities(userId: $userId, sort: [ID_DESC], type: MEDIA_LIST) {
            ... on ListActivity {
                id
                status
                progress
                siteUrl
                createdAt
                media {
                    title {
                        romaji
                    }
                    type
                    siteUrl
                    coverImage {
                        large
                    }
                }
                user {
                    name
                }
            }
        }
    }
}
"""

STATS_QUERY = """
query UserStats($username: String) {
    User(name: $username) {
        id
        name
        siteUrl
        avatar {
            large
        }
        statistics {
            anime {
                count
                episodesWatched
            }
            manga {
                count
                chaptersRead
            }
        }
    }
}
"""


def _dig(data: Any, *path: str | int) -> Any:
    node = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(node, list) or len(node) <= key:
                return None
        elif not isinstance(node, dict):
            return None
        node = node[key] if isinstance(key, int) else node.get(key)
        if node is None:
            return None
    return node


def _as_int(value: object, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _as_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class AniListClient:
    """Read-only AniList GraphQL client.

    Each call is a single request. "Not found" comes back as ``None``;
    transport, HTTP and decoding failures raise :class:`RemoteServiceError`.
    """

    def __init__(self, api_url: str = "https://graphql.anilist.co", timeout_seconds: int = 20) -> None:
        self.api_url = api_url.rstrip("/") + "/"
        self.timeout = aiohttp.ClientTimeout(total=max(5, int(timeout_seconds)))
        self._session: aiohttp.ClientSession | None = None

    async def start(self) -> None:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"Content-Type": "application/json", "Accept": "application/json"},
            )

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def _request(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any] | None:
        if self._session is None or self._session.closed:
            await self.start()
        assert self._session is not None

        payload = {"query": query, "variables": variables}
        try:
            async with self._session.post(self.api_url, json=payload) as response:
                text = await response.text()
                status = response.status
        except asyncio.CancelledError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise RemoteServiceError(f"AniList request failed: {exc!r}") from exc
        return self._decode_response(status, text)

    @staticmethod
    def _decode_response(status: int, text: str) -> Dict[str, Any] | None:
        """Return the GraphQL ``data`` object, or ``None`` when AniList says 404."""
        try:
            body: Any = json.loads(text) if text else None
        except json.JSONDecodeError:
            body = None
            if status == 200:
                raise RemoteServiceError("AniList returned a non-JSON body", status=status, body=text)

        if status == 404:
            # Unknown users come back as a GraphQL errors list. Anything else
            # on a 404 is a wrong endpoint or a proxy page.
            if isinstance(body, dict) and isinstance(body.get("errors"), list):
                return None
            raise RemoteServiceError("AniList endpoint returned 404", status=status, body=text)
        if status != 200:
            raise RemoteServiceError(
                f"AniList error {status}",
                status=status,
                body=body if body is not None else text,
            )
        if not isinstance(body, dict):
            raise RemoteServiceError("AniList response is not a JSON object", status=status, body=body)

        data = body.get("data")
        if not isinstance(data, dict):
            if body.get("errors"):
                raise RemoteServiceError("AniList returned errors", status=status, body=body)
            return None
        return data

    async def resolve_user(self, name: str) -> RemoteUser | None:
        data = await self._request(USER_ID_QUERY, {"username": name})
        return self._parse_user(data)

    async def latest_activity(self, user_id: int) -> ActivityRecord | None:
        data = await self._request(ACTIVITY_QUERY, {"userId": int(user_id)})
        return self._parse_activity(_dig(data, "Page", "activities", 0))

    async def user_statistics(self, name: str) -> UserStatistics | None:
        data = await self._request(STATS_QUERY, {"username": name})
        return self._parse_statistics(data)

    @staticmethod
    def _parse_user(data: Dict[str, Any] | None) -> RemoteUser | None:
        user = _dig(data, "User")
        if not isinstance(user, dict):
            return None
        user_id = _as_int(user.get("id"), 0)
        name = _as_str(user.get("name"))
        if user_id <= 0 or not name:
            return None
        return RemoteUser(id=user_id, name=name)

    @staticmethod
    def _parse_activity(node: Any) -> ActivityRecord | None:
        # Non-list activities come back as empty objects from the inline fragment.
        if not isinstance(node, dict):
            return None
        activity_id = _as_int(node.get("id"), 0)
        title = _as_str(_dig(node, "media", "title", "romaji"))
        if activity_id <= 0 or not title:
            return None

        raw_status = str(node.get("status") or "").strip()
        try:
            status: ActivityStatus | str = ActivityStatus(raw_status.upper())
        except ValueError:
            status = raw_status

        kind = MediaKind.ANIME if _dig(node, "media", "type") == MediaKind.ANIME.value else MediaKind.MANGA
        return ActivityRecord(
            id=activity_id,
            status=status,
            progress=_as_str(node.get("progress")),
            media_title=title,
            media_kind=kind,
            media_url=_as_str(_dig(node, "media", "siteUrl")),
            cover_image_url=_as_str(_dig(node, "media", "coverImage", "large")),
            activity_url=_as_str(node.get("siteUrl")),
            created_at=_as_int(node.get("createdAt"), 0),
            user_name=_as_str(_dig(node, "user", "name")) or "",
        )

    @staticmethod
    def _parse_statistics(data: Dict[str, Any] | None) -> UserStatistics | None:
        user = _dig(data, "User")
        if not isinstance(user, dict):
            return None
        statistics = user.get("statistics")
        if not isinstance(statistics, dict):
            return None
        name = _as_str(user.get("name"))
        if not name:
            return None

        anime = statistics.get("anime") or {}
        manga = statistics.get("manga") or {}
        return UserStatistics(
            id=_as_int(user.get("id"), 0),
            name=name,
            site_url=_as_str(user.get("siteUrl")),
            avatar_url=_as_str(_dig(user, "avatar", "large")),
            anime=MediaCounts(
                count=_as_int(anime.get("count"), 0),
                progress=_as_int(anime.get("episodesWatched"), 0),
            ),
            manga=MediaCounts(
                count=_as_int(manga.get("count"), 0),
                progress=_as_int(manga.get("chaptersRead"), 0),
            ),
        )
