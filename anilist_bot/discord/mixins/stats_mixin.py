from __future__ import annotations

import contextlib
import logging

import discord

from ...errors import RemoteServiceError
from ..commands import LEADERBOARD_COMMANDS, STATS_COMMANDS, CommandReplyError, resolve_stats_target
from ..embeds import accounts_embed, leaderboard_embed, stats_embed

logger = logging.getLogger("anilist_bot")


class StatsMixin:
    stats_commands = STATS_COMMANDS
    leaderboard_commands = LEADERBOARD_COMMANDS

    def _mention_label(self, message: discord.Message, user_id: str) -> str:
        for user in getattr(message, "mentions", None) or []:
            if str(user.id) == user_id:
                return getattr(user, "display_name", None) or user.name
        return f"user:{user_id}"

    async def _handle_stats(self, message: discord.Message, command: str, args: list[str]) -> None:
        kind = self.stats_commands[command]
        try:
            target = resolve_stats_target(
                args,
                caller_link=self.tracker.get_link(str(message.author.id)),
                find_link=self.tracker.get_link,
                mention_label=lambda user_id: self._mention_label(message, user_id),
                prefix=self.settings.command_prefix,
                command=command,
            )
        except CommandReplyError as exc:
            await message.reply(str(exc))
            return

        try:
            stats = await self.tracker.user_statistics(target.name)
        except RemoteServiceError as exc:
            logger.error("Error fetching stats for %s: %s", target.name, exc.details())
            await message.reply("An error occurred while fetching stats from AniList.")
            return
        if stats is None:
            await message.reply(f"❌ AniList user **{target.name}** not found.")
            return
        await message.reply(embed=stats_embed(stats, kind))

    async def _handle_leaderboard(self, message: discord.Message, command: str) -> None:
        if not self.tracker.links():
            await message.reply("No configured users to create a ranking.")
            return
        kind = self.leaderboard_commands[command]
        entries = await self.tracker.leaderboard(kind)
        await message.reply(embed=leaderboard_embed(entries, kind))

    def _member_tag(self, message: discord.Message, local_id: str) -> str:
        guild = message.guild
        if guild is not None:
            with contextlib.suppress(ValueError):
                member = guild.get_member(int(local_id))
                if member is not None:
                    return str(member)
        return "Unknown User"

    async def _handle_accounts(self, message: discord.Message) -> None:
        links = self.tracker.links()
        if not links:
            await message.reply("No users currently have linked AniList accounts.")
            return
        labels = {link.local_id: self._member_tag(message, link.local_id) for link in links}
        await message.reply(embed=accounts_embed(links, labels, self.settings.command_prefix))
