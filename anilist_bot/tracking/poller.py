from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from ..errors import RemoteServiceError
from ..models import AccountLink, ActivityRecord
from .ledger import DedupLedger

if TYPE_CHECKING:
    from ..services.anilist_client import AniListClient
    from ..storage.accounts import AccountStore

logger = logging.getLogger("anilist_bot.poller")

NotifyCallback = Callable[[ActivityRecord], Awaitable[None]]


class ActivityPoller:
    """Fixed-rate poll of the newest list activity of every linked account.

    Each tick starts a cycle; a tick that arrives while the previous cycle is
    still running is skipped. Failures stay inside the account they hit.
    """

    def __init__(
        self,
        store: AccountStore,
        client: AniListClient,
        ledger: DedupLedger,
        notify: NotifyCallback,
        *,
        interval_seconds: float = 60.0,
        concurrency: int = 4,
    ) -> None:
        self.store = store
        self.client = client
        self.ledger = ledger
        self.notify = notify
        self.interval_seconds = float(interval_seconds)
        self._semaphore = asyncio.Semaphore(max(1, int(concurrency)))
        self._scheduler_task: asyncio.Task[None] | None = None
        self._cycle_task: asyncio.Task[list[ActivityRecord]] | None = None
        self._cycle_running = False

    @property
    def is_running(self) -> bool:
        return self._scheduler_task is not None and not self._scheduler_task.done()

    @property
    def cycle_in_progress(self) -> bool:
        return self._cycle_running

    def start(self) -> None:
        if self.is_running:
            return
        self._scheduler_task = asyncio.create_task(self._schedule(), name="activity-poller")

    async def stop(self) -> None:
        for task in (self._scheduler_task, self._cycle_task):
            if task is None or task.done():
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._scheduler_task = None
        self._cycle_task = None

    async def _schedule(self) -> None:
        while True:
            if self._cycle_running:
                logger.warning("Previous activity check still running; skipping this tick")
            else:
                self._cycle_task = asyncio.create_task(self.run_cycle(), name="activity-poll-cycle")
            await asyncio.sleep(self.interval_seconds)

    async def run_cycle(self) -> list[ActivityRecord]:
        if self._cycle_running:
            return []
        self._cycle_running = True
        try:
            return await self._run_cycle()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Activity check cycle failed")
            return []
        finally:
            self._cycle_running = False

    async def _run_cycle(self) -> list[ActivityRecord]:
        links = self.store.all()
        if not links:
            logger.info("No configured users to check.")
            return []

        results = await asyncio.gather(*(self._fetch(link) for link in links))

        posted: list[ActivityRecord] = []
        for link, activity in zip(links, results):
            if activity is None:
                continue
            # Unlinked or relinked while the fetches were in flight.
            if self.store.get(link.local_id) != link:
                continue
            if not self.ledger.advance(link.remote_name, activity.id):
                logger.debug("Activity for %s is already known (ID: %s)", link.remote_name, activity.id)
                continue
            try:
                await self.notify(activity)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Posting activity %s for %s failed", activity.id, link.remote_name)
                continue
            posted.append(activity)
            logger.info("Posted new activity for %s (ID: %s)", link.remote_name, activity.id)
        return posted

    async def _fetch(self, link: AccountLink) -> ActivityRecord | None:
        async with self._semaphore:
            try:
                activity = await self.client.latest_activity(link.remote_id)
            except asyncio.CancelledError:
                raise
            except RemoteServiceError as exc:
                logger.error("Error fetching data for %s: %s", link.remote_name, exc.details())
                return None
            except Exception:
                logger.exception("Unexpected error fetching data for %s", link.remote_name)
                return None
        if activity is None:
            logger.debug("No activity found for %s", link.remote_name)
        return activity
