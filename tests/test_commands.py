from __future__ import annotations

import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from anilist_bot.discord.commands import CommandReplyError, resolve_stats_target  # noqa: E402
from anilist_bot.discord.common import ParsedCommand, mention_id, parse_command  # noqa: E402
from anilist_bot.models import AccountLink  # noqa: E402


@pytest.mark.parametrize(
    ("content", "expected"),
    [
        ("!anilist link Alice", ParsedCommand("link", ["Alice"])),
        ("!LINK   Alice", ParsedCommand("link", ["Alice"])),
        ("!unlink", ParsedCommand("unlink", [])),
        ("!anilist unlink", ParsedCommand("unlink", [])),
        ("!anihelp", ParsedCommand("help", [])),
        ("!anilist help", ParsedCommand("help", [])),
        ("!MyAnime <@123>", ParsedCommand("myanime", ["<@123>"])),
        ("!anilist", ParsedCommand("anilist", [])),
    ],
)
def test_parse_command(content: str, expected: ParsedCommand) -> None:
    assert parse_command(content, "!") == expected


@pytest.mark.parametrize("content", ["", "hello !link", "!", "   "])
def test_parse_command_ignores_non_commands(content: str) -> None:
    assert parse_command(content, "!") is None


def test_mention_id_accepts_both_mention_forms() -> None:
    assert mention_id("<@123>") == "123"
    assert mention_id("<@!456>") == "456"
    assert mention_id("Alice") is None
    assert mention_id("<#789>") is None


ALICE = AccountLink(local_id="1", remote_id=42, remote_name="Alice")
BOB = AccountLink(local_id="2", remote_id=7, remote_name="Bob")
LINKS = {"1": ALICE, "2": BOB}


def _resolve(args: list[str], caller: AccountLink | None):  # type: ignore[no-untyped-def]
    return resolve_stats_target(
        args,
        caller_link=caller,
        find_link=LINKS.get,
        mention_label=lambda user_id: f"member{user_id}",
    )


def test_stats_target_defaults_to_caller_link() -> None:
    target = _resolve([], ALICE)
    assert (target.name, target.source) == ("Alice", "self")


def test_stats_target_without_link_or_argument_fails() -> None:
    with pytest.raises(CommandReplyError, match="link your account"):
        _resolve([], None)


def test_stats_target_uses_mentioned_users_link() -> None:
    target = _resolve(["<@!2>"], ALICE)
    assert (target.name, target.source) == ("Bob", "mention")


def test_stats_target_mentioned_user_without_link_fails() -> None:
    with pytest.raises(CommandReplyError, match="member99"):
        _resolve(["<@99>"], ALICE)


def test_stats_target_literal_name_does_not_need_caller_link() -> None:
    target = _resolve(["SomeoneElse"], None)
    assert (target.name, target.source) == ("SomeoneElse", "literal")


def test_stats_target_too_many_arguments_is_usage_error() -> None:
    with pytest.raises(CommandReplyError, match="Usage"):
        _resolve(["a", "b"], ALICE)
