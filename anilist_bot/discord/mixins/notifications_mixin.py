from __future__ import annotations

import logging

import discord

from ...models import ActivityRecord
from ..embeds import activity_embed

logger = logging.getLogger("anilist_bot")


class NotificationsMixin:
    async def _notification_channel(self) -> discord.abc.Messageable | None:
        channel_id = self.settings.notification_channel_id
        channel = self.get_channel(channel_id)
        if channel is not None:
            return channel
        try:
            return await self.fetch_channel(channel_id)
        except (discord.NotFound, discord.Forbidden):
            logger.error("Channel ID not found: %s", channel_id)
            return None

    async def _post_activity(self, activity: ActivityRecord) -> None:
        channel = await self._notification_channel()
        if channel is None:
            raise RuntimeError(f"Notification channel {self.settings.notification_channel_id} is unavailable")
        await channel.send(embed=activity_embed(activity))
