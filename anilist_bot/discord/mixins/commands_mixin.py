from __future__ import annotations

import logging

import discord

from ...errors import AlreadyLinked, RemoteAccountNotFound, RemoteServiceError
from ..common import ParsedCommand, parse_command
from ..embeds import help_embed

logger = logging.getLogger("anilist_bot")


class CommandsMixin:
    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot:
            return
        command = parse_command(message.content, self.settings.command_prefix)
        if command is None:
            return
        try:
            await self._dispatch_command(message, command)
        except Exception:
            logger.exception("Command %r failed for user=%s", command.name, message.author.id)
            await message.reply("Something went wrong while running that command.")

    async def _dispatch_command(self, message: discord.Message, command: ParsedCommand) -> None:
        name = command.name
        if name == "link":
            await self._handle_link(message, command.args)
        elif name == "unlink":
            await self._handle_unlink(message)
        elif name in self.stats_commands:
            await self._handle_stats(message, name, command.args)
        elif name in self.leaderboard_commands:
            await self._handle_leaderboard(message, name)
        elif name == "stats":
            await self._handle_accounts(message)
        elif name == "help":
            await message.reply(
                embed=help_embed(self.settings.command_prefix, self.settings.notification_channel_id)
            )

    async def _handle_link(self, message: discord.Message, args: list[str]) -> None:
        prefix = self.settings.command_prefix
        if len(args) != 1:
            await message.reply(f"Usage: `{prefix}anilist link <AniList_Username>`")
            return

        username = args[0]
        try:
            link = await self.tracker.link(str(message.author.id), username)
        except AlreadyLinked as exc:
            await message.reply(
                f"🛑 The AniList account **{exc.name}** is already linked to another Discord account."
            )
            return
        except RemoteAccountNotFound:
            await message.reply(f"❌ AniList user **{username}** not found. Please try again.")
            return
        except RemoteServiceError as exc:
            logger.error("Error linking %s for user=%s: %s", username, message.author.id, exc.details())
            await message.reply("An error occurred while communicating with the AniList API.")
            return

        minutes = max(1, round(self.settings.poll_interval_seconds / 60))
        cadence = "every minute" if minutes == 1 else f"every {minutes} minutes"
        await message.reply(
            f"✅ Successfully linked your Discord account with AniList account: **{link.remote_name}** "
            f"(ID: {link.remote_id})! Activity will be checked {cadence}."
        )

    async def _handle_unlink(self, message: discord.Message) -> None:
        removed = self.tracker.unlink(str(message.author.id))
        if removed is None:
            await message.reply("You do not have a linked AniList account.")
            return
        await message.reply(f"🗑️ Successfully unlinked your AniList account ({removed.remote_name}).")
