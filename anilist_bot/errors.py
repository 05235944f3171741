from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class AniListBotError(Exception):
    """Base class for failures the bot reports back to users or logs."""


class RemoteAccountNotFound(AniListBotError):
    def __init__(self, name: str) -> None:
        super().__init__(f"AniList user not found: {name}")
        self.name = name


class AlreadyLinked(AniListBotError):
    def __init__(self, name: str) -> None:
        super().__init__(f"AniList account {name} is already linked to another Discord account")
        self.name = name


class RemoteServiceError(AniListBotError):
    """Transport or decoding failure talking to AniList.

    `status` and `body` are kept so callers can log the full response the
    service sent back (AniList puts its error list in the body).
    """

    def __init__(self, message: str, *, status: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    def details(self) -> str:
        if self.body is None:
            return str(self)
        if isinstance(self.body, (dict, list)):
            rendered = json.dumps(self.body, indent=2, ensure_ascii=False)
        else:
            rendered = str(self.body)
        return f"{self} (status={self.status})\n{rendered}"


class PersistenceError(AniListBotError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to write {path}: {reason}")
        self.path = path
