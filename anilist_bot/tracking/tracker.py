from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from ..config import Settings
from ..errors import RemoteServiceError
from ..models import AccountLink, LeaderboardEntry, MediaKind, UserStatistics
from ..services.anilist_client import AniListClient
from ..storage.accounts import AccountStore
from .leaderboard import build_leaderboard
from .ledger import DedupLedger
from .poller import ActivityPoller, NotifyCallback

logger = logging.getLogger("anilist_bot")


class ActivityTracker:
    """Owns the account store, dedup ledger, AniList client and poller."""

    def __init__(
        self,
        *,
        users_path: Path,
        client: AniListClient,
        poll_interval_seconds: float = 60.0,
        poll_concurrency: int = 4,
        leaderboard_size: int = 10,
    ) -> None:
        self.client = client
        self.ledger = DedupLedger()
        self.store = AccountStore(users_path, client, self.ledger)
        self.poll_interval_seconds = poll_interval_seconds
        self.poll_concurrency = poll_concurrency
        self.leaderboard_size = leaderboard_size
        self.poller: ActivityPoller | None = None
        self._initialized = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "ActivityTracker":
        client = AniListClient(
            api_url=settings.anilist_api_url,
            timeout_seconds=settings.anilist_timeout_seconds,
        )
        return cls(
            users_path=settings.users_file_path,
            client=client,
            poll_interval_seconds=settings.poll_interval_seconds,
            poll_concurrency=settings.poll_concurrency,
            leaderboard_size=settings.leaderboard_size,
        )

    async def initialize(self) -> None:
        if self._initialized:
            return
        await self.client.start()
        await self.store.load()
        self._initialized = True

    def start_polling(self, notify: NotifyCallback) -> ActivityPoller:
        if self.poller is None:
            self.poller = ActivityPoller(
                self.store,
                self.client,
                self.ledger,
                notify,
                interval_seconds=self.poll_interval_seconds,
                concurrency=self.poll_concurrency,
            )
        if not self.poller.is_running:
            self.poller.start()
            logger.info("Activity polling started (every %ss)", self.poll_interval_seconds)
        return self.poller

    async def shutdown(self) -> None:
        if self.poller is not None:
            await self.poller.stop()
        await self.client.close()
        self._initialized = False

    def get_link(self, local_id: str) -> AccountLink | None:
        return self.store.get(local_id)

    def links(self) -> list[AccountLink]:
        return self.store.all()

    async def link(self, local_id: str, remote_name: str) -> AccountLink:
        return await self.store.link(local_id, remote_name)

    def unlink(self, local_id: str) -> AccountLink | None:
        return self.store.unlink(local_id)

    async def user_statistics(self, name: str) -> UserStatistics | None:
        return await self.client.user_statistics(name)

    async def _statistics_or_none(self, link: AccountLink) -> UserStatistics | None:
        try:
            return await self.client.user_statistics(link.remote_name)
        except RemoteServiceError as exc:
            logger.error("Error fetching top stats for %s: %s", link.remote_name, exc.details())
            return None

    async def leaderboard(self, kind: MediaKind) -> list[LeaderboardEntry]:
        links = self.store.all()
        results = await asyncio.gather(
            *(self._statistics_or_none(link) for link in links),
            return_exceptions=True,
        )
        stats: list[UserStatistics | None] = []
        for link, result in zip(links, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.error("Error fetching top stats for %s: %r", link.remote_name, result)
                stats.append(None)
                continue
            stats.append(result)
        return build_leaderboard(stats, kind, limit=self.leaderboard_size)
