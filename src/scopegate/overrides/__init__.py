"""
ScopeGate Overrides

Manual session overrides and their persistence.

Usage:
    from scopegate.overrides import OverrideStore, select_strategy

    store = OverrideStore(catalog, persistence=select_strategy(settings))
"""
from __future__ import annotations

from .persistence import (
    SNAPSHOT_MESSAGE,
    FileWriteStrategy,
    PersistenceStrategy,
    PersistResult,
    PromptSaveStrategy,
    SnapshotStrategy,
    dump_document,
    is_writable,
    select_strategy,
    write_atomic,
)
from .store import OverrideResult, OverrideStore

__all__ = [
    # Store
    "OverrideStore",
    "OverrideResult",
    # Persistence
    "PersistResult",
    "PersistenceStrategy",
    "FileWriteStrategy",
    "PromptSaveStrategy",
    "SnapshotStrategy",
    "SNAPSHOT_MESSAGE",
    "select_strategy",
    "is_writable",
    "dump_document",
    "write_atomic",
]
