from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, *aliases: str) -> str | None:
    """First non-blank value among ``name`` and its aliases, stripped."""
    for key in (name, *aliases):
        # A UTF-8 BOM in .env ends up glued to the first key.
        raw = os.getenv(key)
        if raw is None:
            raw = os.getenv("\ufeff" + key)
        if raw is not None and raw.strip():
            return raw.strip()
    return None


def _env_flag(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    value = _env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _clean_token(value: str) -> str:
    """Accept tokens pasted as ``Bot <token>`` or wrapped in quotes."""
    token = value.strip()
    if token[:4].lower() == "bot ":
        token = token[4:].strip()
    if len(token) >= 2 and token[0] == token[-1] and token[0] in "\"'":
        token = token[1:-1].strip()
    return token


@dataclass(slots=True)
class Settings:
    discord_token: str
    command_prefix: str
    discord_members_intent: bool
    notification_channel_id: int

    anilist_api_url: str
    anilist_timeout_seconds: int

    users_file_path: Path

    poll_interval_seconds: int
    poll_concurrency: int
    leaderboard_size: int

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            discord_token=_clean_token(_env("DISCORD_TOKEN", "DISCORD_BOT_TOKEN") or ""),
            command_prefix=_env("DISCORD_COMMAND_PREFIX") or "!",
            discord_members_intent=_env_flag("DISCORD_MEMBERS_INTENT", True),
            notification_channel_id=_env_int("NOTIFICATION_CHANNEL_ID", 0),
            anilist_api_url=_env("ANILIST_API_URL") or "https://graphql.anilist.co",
            anilist_timeout_seconds=_env_int("ANILIST_TIMEOUT_SECONDS", 20),
            users_file_path=Path(_env("USERS_FILE_PATH", "USERS_FILE") or "./users.json").expanduser(),
            poll_interval_seconds=_env_int("POLL_INTERVAL_SECONDS", 60),
            poll_concurrency=_env_int("POLL_CONCURRENCY", 4),
            leaderboard_size=_env_int("LEADERBOARD_SIZE", 10),
        )

    def validate(self) -> None:
        if not self.discord_token:
            raise ValueError("DISCORD_TOKEN is required")
        if self.discord_token == "YOUR_DISCORD_BOT_TOKEN_HERE":
            raise ValueError("DISCORD_TOKEN is still placeholder")
        if not self.command_prefix.strip():
            raise ValueError("DISCORD_COMMAND_PREFIX cannot be empty")
        if self.notification_channel_id <= 0:
            raise ValueError("NOTIFICATION_CHANNEL_ID must be a Discord channel id")

        if not self.anilist_api_url.startswith(("http://", "https://")):
            raise ValueError("ANILIST_API_URL must be an http(s) URL")
        if self.anilist_timeout_seconds < 5:
            raise ValueError("ANILIST_TIMEOUT_SECONDS must be >= 5")

        if self.poll_interval_seconds < 10:
            raise ValueError("POLL_INTERVAL_SECONDS must be >= 10")
        if self.poll_concurrency < 1:
            raise ValueError("POLL_CONCURRENCY must be >= 1")
        if self.leaderboard_size < 1 or self.leaderboard_size > 25:
            raise ValueError("LEADERBOARD_SIZE must be in [1, 25]")
