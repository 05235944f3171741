from __future__ import annotations


class DedupLedger:
    """Last notified activity id per AniList user name.

    Lives for the process only. AniList activity ids grow per user, so an id
    that is not strictly greater than the stored one has been seen already.
    """

    def __init__(self) -> None:
        self._last_seen: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._last_seen)

    def __contains__(self, name: object) -> bool:
        return name in self._last_seen

    def last_seen(self, name: str) -> int | None:
        return self._last_seen.get(name)

    def is_new(self, name: str, activity_id: int) -> bool:
        previous = self._last_seen.get(name)
        return previous is None or activity_id > previous

    def advance(self, name: str, activity_id: int) -> bool:
        if not self.is_new(name, activity_id):
            return False
        self._last_seen[name] = activity_id
        return True

    def drop(self, name: str) -> None:
        self._last_seen.pop(name, None)
