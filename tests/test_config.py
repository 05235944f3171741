from __future__ import annotations

import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from anilist_bot.config import Settings  # noqa: E402


_ENV_KEYS = (
    "DISCORD_TOKEN",
    "DISCORD_BOT_TOKEN",
    "DISCORD_COMMAND_PREFIX",
    "DISCORD_MEMBERS_INTENT",
    "NOTIFICATION_CHANNEL_ID",
    "ANILIST_API_URL",
    "ANILIST_TIMEOUT_SECONDS",
    "USERS_FILE_PATH",
    "USERS_FILE",
    "POLL_INTERVAL_SECONDS",
    "POLL_CONCURRENCY",
    "LEADERBOARD_SIZE",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_from_env_defaults(clean_env: pytest.MonkeyPatch) -> None:
    settings = Settings.from_env()

    assert settings.command_prefix == "!"
    assert settings.anilist_api_url == "https://graphql.anilist.co"
    assert settings.poll_interval_seconds == 60
    assert settings.leaderboard_size == 10
    assert settings.users_file_path == Path("./users.json")
    assert settings.notification_channel_id == 0


def test_from_env_reads_values_and_cleans_token(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("DISCORD_TOKEN", '  Bot "abc.def"  ')
    clean_env.setenv("NOTIFICATION_CHANNEL_ID", "123456789")
    clean_env.setenv("POLL_INTERVAL_SECONDS", "not-a-number")
    clean_env.setenv("DISCORD_MEMBERS_INTENT", "off")
    clean_env.setenv("USERS_FILE", "/tmp/anilist/users.json")

    settings = Settings.from_env()

    assert settings.discord_token == "abc.def"
    assert settings.notification_channel_id == 123456789
    assert settings.poll_interval_seconds == 60
    assert settings.discord_members_intent is False
    assert settings.users_file_path == Path("/tmp/anilist/users.json")
    settings.validate()


@pytest.mark.parametrize(
    ("key", "value", "message"),
    [
        ("DISCORD_TOKEN", "", "DISCORD_TOKEN is required"),
        ("NOTIFICATION_CHANNEL_ID", "0", "NOTIFICATION_CHANNEL_ID"),
        ("POLL_INTERVAL_SECONDS", "5", "POLL_INTERVAL_SECONDS"),
        ("LEADERBOARD_SIZE", "40", "LEADERBOARD_SIZE"),
        ("ANILIST_API_URL", "graphql.anilist.co", "ANILIST_API_URL"),
    ],
)
def test_validate_rejects_bad_values(clean_env: pytest.MonkeyPatch, key: str, value: str, message: str) -> None:
    clean_env.setenv("DISCORD_TOKEN", "token")
    clean_env.setenv("NOTIFICATION_CHANNEL_ID", "42")
    clean_env.setenv(key, value)

    settings = Settings.from_env()

    with pytest.raises(ValueError, match=message):
        settings.validate()


def test_from_env_tolerates_bom_key_and_blank_primary(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("\ufeffDISCORD_TOKEN", "bom-token")
    clean_env.setenv("USERS_FILE_PATH", "   ")
    clean_env.setenv("USERS_FILE", "/data/users.json")

    settings = Settings.from_env()

    assert settings.discord_token == "bom-token"
    assert settings.users_file_path == Path("/data/users.json")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("'abc'", "abc"), ("bot xyz", "xyz"), ('"', '"'), ("plain", "plain")],
)
def test_token_cleaning(clean_env: pytest.MonkeyPatch, raw: str, expected: str) -> None:
    clean_env.setenv("DISCORD_TOKEN", raw)
    assert Settings.from_env().discord_token == expected
