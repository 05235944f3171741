from .leaderboard import build_leaderboard
from .ledger import DedupLedger
from .poller import ActivityPoller

__all__ = ["ActivityPoller", "DedupLedger", "build_leaderboard"]
