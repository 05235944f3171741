from .commands_mixin import CommandsMixin
from .notifications_mixin import NotificationsMixin
from .stats_mixin import StatsMixin

__all__ = [
    "CommandsMixin",
    "NotificationsMixin",
    "StatsMixin",
]
