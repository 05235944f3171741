from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from pathlib import Path

import discord

from .config import Settings
from .discord.client import AniListDiscordBot
from .tracking.tracker import ActivityTracker

logger = logging.getLogger("anilist_bot")


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logging.getLogger("discord.gateway").setLevel(logging.WARNING)
    logging.getLogger("discord.client").setLevel(logging.WARNING)


def _is_process_alive(pid: int) -> bool:
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    except OSError:
        return False
    return True


def acquire_instance_lock(lock_path: Path) -> None:
    """Refuse to start a second bot on the same users file."""
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    if lock_path.exists():
        stale_pid = 0
        with contextlib.suppress(ValueError, OSError):
            stale_pid = int(lock_path.read_text(encoding="utf-8").strip() or "0")
        if stale_pid > 0 and stale_pid != os.getpid() and _is_process_alive(stale_pid):
            raise RuntimeError(f"Bot is already running (pid={stale_pid}). Stop it before starting a new one.")
        with contextlib.suppress(OSError):
            lock_path.unlink()

    lock_path.write_text(str(os.getpid()), encoding="utf-8")


def release_instance_lock(lock_path: Path) -> None:
    with contextlib.suppress(OSError):
        if lock_path.exists():
            lock_path.unlink()


def build_bot(settings: Settings) -> AniListDiscordBot:
    tracker = ActivityTracker.from_settings(settings)
    return AniListDiscordBot(settings=settings, tracker=tracker)


async def _run_bot(settings: Settings) -> None:
    bot = build_bot(settings)
    async with bot:
        await bot.start(settings.discord_token)


def main() -> None:
    configure_logging()
    settings = Settings.from_env()
    settings.validate()
    lock_path = settings.users_file_path.with_name(settings.users_file_path.name + ".pid")
    acquire_instance_lock(lock_path)
    try:
        asyncio.run(_run_bot(settings))
    except KeyboardInterrupt:
        logger.info("Shutdown requested, exiting.")
    except discord.LoginFailure:
        logger.error("Login failed. Check if DISCORD_TOKEN is correct.")
        raise
    finally:
        release_instance_lock(lock_path)
