from .accounts import AccountStore
from .migration import MigrationResult, upgrade_document

__all__ = ["AccountStore", "MigrationResult", "upgrade_document"]
