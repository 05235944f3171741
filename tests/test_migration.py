from __future__ import annotations

import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from anilist_bot.models import AccountLink, RemoteUser  # noqa: E402
from anilist_bot.storage.migration import legacy_names, upgrade_document  # noqa: E402


def test_legacy_names_only_lists_bare_strings() -> None:
    document = {
        "u1": "Alice",
        "u2": {"id": 7, "name": "Bob"},
        "u3": "  Carol ",
        "u4": "",
    }
    assert legacy_names(document) == {"u1": "Alice", "u3": "Carol"}


def test_upgrade_document_converts_resolved_names() -> None:
    result = upgrade_document({"u1": "Alice"}, {"Alice": RemoteUser(id=42, name="Alice")})

    assert result.accounts == {"u1": AccountLink(local_id="u1", remote_id=42, remote_name="Alice")}
    assert result.upgraded == ["u1"]
    assert result.dropped == []
    assert result.requires_save is True


def test_upgrade_document_drops_unresolved_and_malformed_entries() -> None:
    document = {
        "u1": "Ghost",
        "u2": {"id": "7", "name": "Bob"},
        "u3": {"id": 9},
        "u4": None,
        "u5": {"id": 11, "name": "Dora"},
    }

    result = upgrade_document(document, {"Ghost": None})

    assert list(result.accounts) == ["u5"]
    assert sorted(result.dropped) == ["u1", "u2", "u3", "u4"]
    assert result.requires_save is False


def test_upgrade_document_uses_canonical_remote_name() -> None:
    result = upgrade_document({"u1": "alice"}, {"alice": RemoteUser(id=42, name="Alice")})

    assert result.accounts["u1"].remote_name == "Alice"
