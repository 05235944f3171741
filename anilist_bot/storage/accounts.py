from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any

from ..errors import AlreadyLinked, PersistenceError, RemoteAccountNotFound, RemoteServiceError
from ..models import AccountLink, RemoteUser
from ..services.anilist_client import AniListClient
from ..tracking.ledger import DedupLedger
from .migration import legacy_names, upgrade_document

logger = logging.getLogger("anilist_bot.storage")


def _read_text(path: Path) -> str:
    last_exc: Exception | None = None
    for encoding in ("utf-8-sig", "utf-8"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError as exc:
            last_exc = exc
    if last_exc is not None:
        raise last_exc
    raise RuntimeError(f"Failed to read file: {path}")


def write_document(path: Path, document: dict[str, Any]) -> None:
    content = json.dumps(document, indent=2, ensure_ascii=False)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(content, encoding="utf-8")
        os.replace(tmp, path)
    except OSError as exc:
        with contextlib.suppress(OSError):
            tmp.unlink(missing_ok=True)
        raise PersistenceError(path, str(exc)) from exc


class AccountStore:
    """Discord id -> AniList account links, mirrored to a JSON file.

    Every mutation rewrites the whole file. A failed write is logged and the
    in-memory change is kept, so a link the user saw succeed stays active
    for the lifetime of the process.
    """

    def __init__(self, path: Path, client: AniListClient, ledger: DedupLedger) -> None:
        self.path = Path(path)
        self.client = client
        self.ledger = ledger
        self._accounts: dict[str, AccountLink] = {}

    def __len__(self) -> int:
        return len(self._accounts)

    def get(self, local_id: str) -> AccountLink | None:
        return self._accounts.get(str(local_id))

    def all(self) -> list[AccountLink]:
        return list(self._accounts.values())

    def _read_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(_read_text(self.path))
        except Exception:
            logger.exception("Error loading %s; starting with no linked users", self.path)
            return {}
        if not isinstance(payload, dict):
            logger.error("%s must contain a JSON object; starting with no linked users", self.path)
            return {}
        return payload

    async def _resolve_legacy(self, name: str) -> RemoteUser | None:
        logger.info("Converting old user data for: %s", name)
        try:
            return await self.client.resolve_user(name)
        except RemoteServiceError as exc:
            logger.error("API error during user conversion %s: %s", name, exc.details())
            return None

    async def load(self) -> dict[str, AccountLink]:
        document = self._read_document()
        resolutions: dict[str, RemoteUser | None] = {}
        for name in legacy_names(document).values():
            if name not in resolutions:
                resolutions[name] = await self._resolve_legacy(name)

        result = upgrade_document(document, resolutions)
        self._accounts = result.accounts
        if result.requires_save:
            logger.info("Saving upgraded %s (%s entries converted)", self.path, len(result.upgraded))
            self._persist()
        logger.info("Loaded %s linked users", len(self._accounts))
        return dict(self._accounts)

    def _find_other(self, local_id: str, *, name: str, remote_id: int | None = None) -> AccountLink | None:
        wanted = name.casefold()
        for link in self._accounts.values():
            if link.local_id == local_id:
                continue
            if link.remote_name.casefold() == wanted:
                return link
            if remote_id is not None and link.remote_id == remote_id:
                return link
        return None

    async def link(self, local_id: str, remote_name: str) -> AccountLink:
        local_id = str(local_id)
        remote_name = remote_name.strip()
        if self._find_other(local_id, name=remote_name) is not None:
            raise AlreadyLinked(remote_name)

        remote = await self.client.resolve_user(remote_name)
        if remote is None:
            raise RemoteAccountNotFound(remote_name)
        # The canonical name or the id may match someone the typed name did not.
        if self._find_other(local_id, name=remote.name, remote_id=remote.id) is not None:
            raise AlreadyLinked(remote.name)

        previous = self._accounts.get(local_id)
        link = AccountLink(local_id=local_id, remote_id=remote.id, remote_name=remote.name)
        self._accounts[local_id] = link
        if previous is not None and previous.remote_name != link.remote_name:
            self.ledger.drop(previous.remote_name)
        self._persist()
        logger.info("Linked %s -> %s (id=%s)", local_id, link.remote_name, link.remote_id)
        return link

    def unlink(self, local_id: str) -> AccountLink | None:
        removed = self._accounts.pop(str(local_id), None)
        if removed is None:
            return None
        self.ledger.drop(removed.remote_name)
        self._persist()
        logger.info("Unlinked %s (was %s)", removed.local_id, removed.remote_name)
        return removed

    def to_document(self) -> dict[str, Any]:
        return {local_id: link.to_document() for local_id, link in self._accounts.items()}

    def _persist(self) -> bool:
        try:
            write_document(self.path, self.to_document())
        except PersistenceError:
            logger.exception("Linked users were NOT saved; in-memory state kept until restart")
            return False
        return True
