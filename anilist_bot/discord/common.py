from __future__ import annotations

import re
from dataclasses import dataclass, field


MENTION_RE = re.compile(r"^<@!?(\d+)>$")

COMMAND_ALIASES = {
    "anihelp": "help",
}
NAMESPACE = "anilist"


def collapse_spaces(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    if limit <= 3:
        return text[:limit]
    return text[: limit - 3].rstrip() + "..."


@dataclass(slots=True)
class ParsedCommand:
    name: str
    args: list[str] = field(default_factory=list)


def parse_command(content: str, prefix: str) -> ParsedCommand | None:
    """Split ``<prefix>[anilist ]<name> [args...]`` into name and arguments.

    The command name is matched case-insensitively; arguments keep their case.
    """
    raw = collapse_spaces(content or "")
    prefix = prefix.strip()
    if not prefix or not raw.lower().startswith(prefix.lower()):
        return None

    parts = raw[len(prefix) :].split(" ")
    parts = [part for part in parts if part]
    if not parts:
        return None

    name = parts[0].lower()
    args = parts[1:]
    if name == NAMESPACE and args:
        name = args[0].lower()
        args = args[1:]
    name = COMMAND_ALIASES.get(name, name)
    return ParsedCommand(name=name, args=args)


def mention_id(token: str) -> str | None:
    match = MENTION_RE.match(token.strip())
    if match is None:
        return None
    return match.group(1)
