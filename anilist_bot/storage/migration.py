from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..models import AccountLink, RemoteUser

logger = logging.getLogger("anilist_bot.storage")


@dataclass(slots=True)
class MigrationResult:
    accounts: dict[str, AccountLink] = field(default_factory=dict)
    upgraded: list[str] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)

    @property
    def requires_save(self) -> bool:
        return bool(self.upgraded)


def legacy_names(document: Mapping[str, Any]) -> dict[str, str]:
    """Entries still stored as a bare AniList name, keyed by Discord id."""
    names: dict[str, str] = {}
    for local_id, value in document.items():
        if isinstance(value, str) and value.strip():
            names[str(local_id)] = value.strip()
    return names


def parse_structured(local_id: str, value: Any) -> AccountLink | None:
    if not isinstance(value, dict):
        return None
    remote_id = value.get("id")
    name = value.get("name")
    if isinstance(remote_id, bool) or not isinstance(remote_id, int) or remote_id <= 0:
        return None
    if not isinstance(name, str) or not name.strip():
        return None
    return AccountLink(local_id=str(local_id), remote_id=remote_id, remote_name=name.strip())


def upgrade_document(
    document: Mapping[str, Any],
    resolutions: Mapping[str, RemoteUser | None],
) -> MigrationResult:
    """Turn a raw users document into account links.

    `resolutions` maps each legacy bare name (see :func:`legacy_names`) to the
    AniList user it resolved to, or ``None`` when resolution failed. Legacy
    entries without a successful resolution are dropped.
    """
    result = MigrationResult()
    for raw_id, value in document.items():
        local_id = str(raw_id)
        if isinstance(value, str):
            name = value.strip()
            remote = resolutions.get(name) if name else None
            if remote is None:
                logger.warning("AniList user %r for %s could not be resolved; removed from list", value, local_id)
                result.dropped.append(local_id)
                continue
            result.accounts[local_id] = AccountLink(local_id=local_id, remote_id=remote.id, remote_name=remote.name)
            result.upgraded.append(local_id)
            continue

        link = parse_structured(local_id, value)
        if link is None:
            logger.warning("Malformed account entry for %s dropped: %r", local_id, value)
            result.dropped.append(local_id)
            continue
        result.accounts[local_id] = link
    return result
