from __future__ import annotations

import asyncio
import logging

import discord

from ..config import Settings
from ..tracking.tracker import ActivityTracker
from .mixins import CommandsMixin, NotificationsMixin, StatsMixin

logger = logging.getLogger("anilist_bot")


class AniListDiscordBot(
    CommandsMixin,
    StatsMixin,
    NotificationsMixin,
    discord.Client,
):
    def __init__(self, settings: Settings, tracker: ActivityTracker) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = settings.discord_members_intent

        super().__init__(intents=intents)

        self.settings = settings
        self.tracker = tracker

    async def setup_hook(self) -> None:
        await self.tracker.initialize()

    async def on_ready(self) -> None:
        if self.user:
            logger.info("Logged in as %s (%s)", self.user, self.user.id)
        # on_ready fires again after reconnects; start_polling is idempotent.
        self.tracker.start_polling(self._post_activity)

    async def close(self) -> None:
        await self._run_shutdown_step("tracker.shutdown", self.tracker.shutdown(), timeout=6.0)
        await self._run_shutdown_step("discord.Client.close", super().close(), timeout=6.0)

    async def _run_shutdown_step(self, label: str, coro: object, *, timeout: float) -> None:
        try:
            await asyncio.wait_for(coro, timeout=timeout)  # type: ignore[arg-type]
        except asyncio.TimeoutError:
            logger.warning("Shutdown step timed out: %s", label)
        except Exception as exc:
            logger.warning("Shutdown step failed: %s (%s)", label, exc)
