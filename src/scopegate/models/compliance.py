"""
ScopeGate Compliance Tables

Two independently indexed lookup tables, both keyed by session id and then
by the stable work item key:

- clauses: reference column -> clause identifiers
- documents: suggested document/artifact types
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import ReferenceColumn


ClauseRow = dict[ReferenceColumn, tuple[str, ...]]


@dataclass
class ComplianceTables:
    """Clause and document tables keyed by (session id, item key)."""
    clauses: dict[str, dict[str, ClauseRow]] = field(default_factory=dict)
    documents: dict[str, dict[str, tuple[str, ...]]] = field(default_factory=dict)
    schema_version: str = "1.0.0"

    def clause_row(self, session_id: str, item_key: str) -> Optional[ClauseRow]:
        return self.clauses.get(session_id, {}).get(item_key)

    def document_row(self, session_id: str, item_key: str) -> Optional[tuple[str, ...]]:
        return self.documents.get(session_id, {}).get(item_key)

    @property
    def entry_count(self) -> int:
        """Total number of clause and document rows."""
        return (
            sum(len(rows) for rows in self.clauses.values())
            + sum(len(rows) for rows in self.documents.values())
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the compliance pack shape (keyed entries)."""
        return {
            "schema_version": self.schema_version,
            "work_item_compliance": {
                session_id: [
                    {"item": key, **{col.value: list(refs) for col, refs in row.items()}}
                    for key, row in rows.items()
                ]
                for session_id, rows in self.clauses.items()
            },
            "work_item_documentation": {
                session_id: [
                    {"item": key, "document_types": list(docs)}
                    for key, docs in rows.items()
                ]
                for session_id, rows in self.documents.items()
            },
        }
