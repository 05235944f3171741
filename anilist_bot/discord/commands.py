from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from ..models import AccountLink, MediaKind
from .common import mention_id


STATS_COMMANDS: dict[str, MediaKind | None] = {
    "myanime": MediaKind.ANIME,
    "mymanga": MediaKind.MANGA,
    # None = both sections
    "profile": None,
}
LEADERBOARD_COMMANDS: dict[str, MediaKind] = {
    "topanime": MediaKind.ANIME,
    "topmanga": MediaKind.MANGA,
}


class CommandReplyError(Exception):
    """A command cannot run; the message is the reply shown to the user."""


@dataclass(frozen=True, slots=True)
class StatsTarget:
    name: str
    source: str  # "self", "mention" or "literal"


def resolve_stats_target(
    args: Sequence[str],
    *,
    caller_link: AccountLink | None,
    find_link: Callable[[str], AccountLink | None],
    mention_label: Callable[[str], str],
    prefix: str = "!",
    command: str = "profile",
) -> StatsTarget:
    if not args:
        if caller_link is None:
            raise CommandReplyError(
                f"To see your stats, please link your account using `{prefix}anilist link <AniList_Username>` first."
            )
        return StatsTarget(name=caller_link.remote_name, source="self")

    if len(args) == 1:
        mentioned = mention_id(args[0])
        if mentioned is not None:
            link = find_link(mentioned)
            if link is None:
                raise CommandReplyError(
                    f"User **{mention_label(mentioned)}** does not have a linked AniList account."
                )
            return StatsTarget(name=link.remote_name, source="mention")
        return StatsTarget(name=args[0], source="literal")

    raise CommandReplyError(
        f"Usage: `{prefix}{command}` or `{prefix}{command} <@mention>` or `{prefix}{command} <AniList_Username>`"
    )
