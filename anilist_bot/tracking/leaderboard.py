from __future__ import annotations

from typing import Iterable

from ..models import LeaderboardEntry, MediaKind, UserStatistics


def build_leaderboard(
    stats: Iterable[UserStatistics | None],
    kind: MediaKind,
    limit: int = 10,
) -> list[LeaderboardEntry]:
    entries: list[LeaderboardEntry] = []
    for item in stats:
        if item is None:
            continue
        counts = item.counts_for(kind)
        entries.append(
            LeaderboardEntry(
                name=item.name,
                count=counts.count,
                progress=counts.progress,
                avatar_url=item.avatar_url,
            )
        )
    # sorted() is stable: equal counts keep fetch order.
    entries = sorted(entries, key=lambda entry: entry.count, reverse=True)
    return entries[: max(0, limit)]
