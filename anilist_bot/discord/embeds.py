from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

import discord

from ..models import AccountLink, ActivityRecord, ActivityStatus, LeaderboardEntry, MediaKind, UserStatistics
from .common import truncate

ANIME_COLOR = 0x0099FF
MANGA_COLOR = 0xFFA500
PROFILE_COLOR = 0x4B0082
STATS_COLOR = 0x008080
HELP_COLOR = 0x00CED1

EMBED_DESCRIPTION_LIMIT = 4096

STATUS_PHRASES: dict[ActivityStatus, str] = {
    ActivityStatus.CURRENT: "is currently watching 📺",
    ActivityStatus.REPEATING: "is rewatching 🔄",
    ActivityStatus.COMPLETED: "completed 🎉",
    ActivityStatus.PAUSED: "paused ⏸️",
    ActivityStatus.DROPPED: "dropped 🗑️",
    ActivityStatus.PLANNING: "is planning to watch/read 💡",
}


def kind_color(kind: MediaKind) -> int:
    return ANIME_COLOR if kind is MediaKind.ANIME else MANGA_COLOR


def kind_label(kind: MediaKind) -> str:
    return "Anime 🎬" if kind is MediaKind.ANIME else "Manga 📖"


def status_phrase(status: ActivityStatus | str) -> str:
    if isinstance(status, ActivityStatus):
        return STATUS_PHRASES[status]
    return str(status).lower()


def format_posted(created_at: int) -> str:
    moment = datetime.fromtimestamp(created_at, tz=timezone.utc)
    return moment.strftime("%B %d, %Y %I:%M %p UTC")


def activity_embed(activity: ActivityRecord) -> discord.Embed:
    name = activity.user_name or "Someone"
    description = f"**{name}** {status_phrase(activity.status)} **{activity.media_title}**!"
    if activity.progress:
        description += f"\n**Progress**: {activity.progress}"

    embed = discord.Embed(
        color=kind_color(activity.media_kind),
        title=f"{name} updated their progress in {kind_label(activity.media_kind)}",
        url=activity.activity_url or activity.media_url,
        description=description,
        timestamp=datetime.fromtimestamp(activity.created_at, tz=timezone.utc),
    )
    if activity.cover_image_url:
        embed.set_thumbnail(url=activity.cover_image_url)
    embed.set_footer(text=f"Posted: {format_posted(activity.created_at)}")
    return embed


def stats_embed(stats: UserStatistics, kind: MediaKind | None) -> discord.Embed:
    """`kind=None` renders the full profile (anime and manga)."""
    lines: list[str] = []
    if stats.site_url:
        lines.append(f"[AniList Profile]({stats.site_url})\n")
    if kind in (MediaKind.ANIME, None):
        lines.append("**Anime 🎬**")
        lines.append(f"• Titles Watched: **{stats.anime.count}**")
        lines.append(f"• Episodes Watched: **{stats.anime.progress}**\n")
    if kind in (MediaKind.MANGA, None):
        lines.append("**Manga 📖**")
        lines.append(f"• Titles Read: **{stats.manga.count}**")
        lines.append(f"• Chapters Read: **{stats.manga.progress}**\n")

    embed = discord.Embed(
        color=PROFILE_COLOR if kind is None else kind_color(kind),
        title=f"📊 AniList Stats for {stats.name}",
        description="\n".join(lines).strip(),
        timestamp=datetime.now(timezone.utc),
    )
    if stats.avatar_url:
        embed.set_thumbnail(url=stats.avatar_url)
    return embed


def leaderboard_embed(entries: list[LeaderboardEntry], kind: MediaKind) -> discord.Embed:
    progress_label = "episodes" if kind is MediaKind.ANIME else "chapters"
    lines: list[str] = []
    for rank, entry in enumerate(entries, start=1):
        lines.append(f"**#{rank}** **{entry.name}**")
        lines.append(f"> {entry.count} titles completed ({entry.progress} {progress_label})")
    description = "\n".join(lines) or "No available statistics for ranking."

    title = "🏆 TOP ANIME WATCHERS" if kind is MediaKind.ANIME else "🏆 TOP MANGA READERS"
    embed = discord.Embed(
        color=kind_color(kind),
        title=title,
        description=truncate(description, EMBED_DESCRIPTION_LIMIT),
        timestamp=datetime.now(timezone.utc),
    )
    if entries and entries[0].avatar_url:
        embed.set_thumbnail(url=entries[0].avatar_url)
    return embed


def accounts_embed(links: Iterable[AccountLink], labels: dict[str, str], prefix: str) -> discord.Embed:
    links = list(links)
    rows = [
        f"**{labels.get(link.local_id, 'Unknown User')}** → `{link.remote_name}` (ID: {link.remote_id})"
        for link in links
    ]
    embed = discord.Embed(
        color=PROFILE_COLOR,
        title=f"📊 Connected AniList Accounts ({len(links)})",
        description=truncate("\n".join(rows), EMBED_DESCRIPTION_LIMIT),
        timestamp=datetime.now(timezone.utc),
    )
    embed.set_footer(text=f"Use {prefix}anilist link <name> to join.")
    return embed


def help_embed(prefix: str, notification_channel_id: int) -> discord.Embed:
    p = prefix
    embed = discord.Embed(
        color=HELP_COLOR,
        title="📜 AniList Bot Commands",
        description="Use the commands below to manage your AniList account and check stats.",
        timestamp=datetime.now(timezone.utc),
    )
    embed.add_field(
        name="🔗 Account Management",
        value=(
            f"`{p}anilist link <AniList_Username>`: Links your Discord account to AniList.\n"
            f"`{p}anilist unlink` or `{p}unlink`: Unlinks your connected account."
        ),
        inline=False,
    )
    embed.add_field(
        name="👤 Personal Stats (You, Mention or Name)",
        value=(
            f"`{p}profile [@mention|name]`: Displays full profile (Anime + Manga).\n"
            f"`{p}myanime [@mention|name]`: Displays Anime stats.\n"
            f"`{p}mymanga [@mention|name]`: Displays Manga stats."
        ),
        inline=False,
    )
    embed.add_field(
        name="📊 Leaderboards and List",
        value=(
            f"`{p}topanime`: Top users by completed Anime.\n"
            f"`{p}topmanga`: Top users by completed Manga.\n"
            f"`{p}stats`: Lists all connected Discord accounts with their AniList names."
        ),
        inline=False,
    )
    embed.add_field(
        name="❓ Help",
        value=f"`{p}anihelp` or `{p}anilist help`: Displays this command list.",
        inline=False,
    )
    embed.set_footer(text=f"Activity is being tracked on channel ID: {notification_channel_id}")
    return embed
