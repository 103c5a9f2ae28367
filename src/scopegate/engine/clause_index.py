"""
ScopeGate Clause Index

Inverted view of resolved sessions: for each reference column, the clause
codes that appear in any work item, with the items that cite them split
into required and optional.

Sessions marked not-applicable are left out. Columns of standards that are
toggled off produce no groups. Codes are ordered naturally, so "8.3.10"
sorts after "8.3.4" and "A.5.10" after "A.5.9".
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from ..models import ReferenceColumn, ScopeAnswers, SessionDefinition, SessionStatus, WorkItem


_COLUMN_ATTRIBUTES = {
    ReferenceColumn.ISO_9001: "iso9001",
    ReferenceColumn.ISO_27001_CLAUSES: "iso27001_clauses",
    ReferenceColumn.ISO_27001_ANNEX_A: "iso27001_annex_a",
    ReferenceColumn.ISO_27701: "iso27701",
}

_DIGITS = re.compile(r"(\d+)")


def natural_key(code: str) -> tuple:
    """Sort key comparing digit runs numerically."""
    parts = _DIGITS.split(code)
    return tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part.lower())
        for part in parts
        if part
    )


@dataclass(frozen=True)
class ClauseCitation:
    """One work item citing a clause."""
    session_id: str
    session_title: str
    item_key: str
    item_text: str
    document_types: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "session_title": self.session_title,
            "item_key": self.item_key,
            "item_text": self.item_text,
            "document_types": list(self.document_types),
        }


@dataclass
class ClauseGroup:
    """Every citation of one clause code."""
    code: str
    required_items: list[ClauseCitation] = field(default_factory=list)
    optional_items: list[ClauseCitation] = field(default_factory=list)

    @property
    def is_required(self) -> bool:
        return bool(self.required_items)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "required_items": [c.to_dict() for c in self.required_items],
            "optional_items": [c.to_dict() for c in self.optional_items],
        }


ClauseIndex = dict[ReferenceColumn, list[ClauseGroup]]


def build_clause_groups(
    sessions: Iterable[SessionDefinition],
    column: ReferenceColumn,
) -> list[ClauseGroup]:
    """Group work items of applicable sessions by clause code for a column."""
    attribute = _COLUMN_ATTRIBUTES[column]
    groups: dict[str, ClauseGroup] = {}

    for session in sessions:
        if session.status == SessionStatus.NOT_APPLICABLE:
            continue
        for item in session.work_items:
            for code in getattr(item, attribute):
                if not code:
                    continue
                group = groups.setdefault(code, ClauseGroup(code=code))
                citation = _cite(session, item)
                if session.status == SessionStatus.REQUIRED:
                    group.required_items.append(citation)
                else:
                    group.optional_items.append(citation)

    return sorted(groups.values(), key=lambda g: natural_key(g.code))


def build_clause_index(
    sessions: Iterable[SessionDefinition],
    scope: ScopeAnswers,
    only_required: bool = False,
) -> ClauseIndex:
    """
    Build the clause index for the standards enabled in the scope.

    Args:
        sessions: Resolved sessions
        scope: Scope answers (for the compliance toggles)
        only_required: Drop groups with no required citation

    Returns:
        Mapping of reference column to clause groups; columns of disabled
        standards are absent
    """
    sessions = list(sessions)
    enabled = set(scope.enabled_standards)
    index: ClauseIndex = {}

    for column in ReferenceColumn:
        if column.standard not in enabled:
            continue
        groups = build_clause_groups(sessions, column)
        if only_required:
            groups = [g for g in groups if g.is_required]
        index[column] = groups

    return index


def _cite(session: SessionDefinition, item: WorkItem) -> ClauseCitation:
    return ClauseCitation(
        session_id=session.id,
        session_title=session.title,
        item_key=item.key,
        item_text=item.text,
        document_types=item.document_types,
    )
