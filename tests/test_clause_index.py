"""
Tests for the clause index.

Validates:
- Codes grouped across sessions with required/optional split
- Not-applicable sessions excluded
- Natural ordering of clause codes
- Disabled standards produce no columns
"""

from scopegate.engine import build_clause_groups, build_clause_index, natural_key
from scopegate.models import (
    ReferenceColumn,
    RuleSource,
    ScopeAnswers,
    SessionDefinition,
    SessionStatus,
    WorkItem,
)

from tests.conftest import make_engine, make_risk, make_scope


def resolved(session_id, status, *items):
    return SessionDefinition(
        id=session_id,
        title=f"Session {session_id}",
        focus="",
        work_items=tuple(items),
        status=status,
        reason="",
        source=RuleSource.RULE,
    )


SESSIONS = [
    resolved(
        "01", SessionStatus.REQUIRED,
        WorkItem("a", "A", document_types=("PRD",), iso9001=("8.3.10", "4.1")),
    ),
    resolved(
        "02", SessionStatus.OPTIONAL,
        WorkItem("b", "B", iso9001=("4.1", "8.3.4"), iso27701=("7",)),
    ),
    resolved(
        "03", SessionStatus.NOT_APPLICABLE,
        WorkItem("c", "C", iso9001=("9.9",)),
    ),
]


class TestNaturalKey:
    def test_numeric_parts(self):
        codes = ["8.3.10", "8.3.4", "10.1", "4.1"]
        assert sorted(codes, key=natural_key) == ["4.1", "8.3.4", "8.3.10", "10.1"]

    def test_annex_codes(self):
        codes = ["A.5.10", "A.5.9", "A.8.1"]
        assert sorted(codes, key=natural_key) == ["A.5.9", "A.5.10", "A.8.1"]


class TestClauseGroups:
    def test_groups(self):
        groups = build_clause_groups(SESSIONS, ReferenceColumn.ISO_9001)
        assert [g.code for g in groups] == ["4.1", "8.3.4", "8.3.10"]

        shared = groups[0]
        assert [c.item_key for c in shared.required_items] == ["a"]
        assert [c.item_key for c in shared.optional_items] == ["b"]
        assert shared.required_items[0].document_types == ("PRD",)
        assert shared.is_required

    def test_not_applicable_excluded(self):
        groups = build_clause_groups(SESSIONS, ReferenceColumn.ISO_9001)
        assert "9.9" not in [g.code for g in groups]

    def test_optional_only_group(self):
        groups = build_clause_groups(SESSIONS, ReferenceColumn.ISO_27701)
        assert len(groups) == 1
        assert not groups[0].is_required


class TestClauseIndex:
    def test_all_columns(self):
        index = build_clause_index(SESSIONS, ScopeAnswers())
        assert list(index) == list(ReferenceColumn)
        assert index[ReferenceColumn.ISO_27001_CLAUSES] == []

    def test_disabled_standard(self):
        index = build_clause_index(SESSIONS, make_scope(complianceISO27001=False))
        assert ReferenceColumn.ISO_27001_CLAUSES not in index
        assert ReferenceColumn.ISO_27001_ANNEX_A not in index
        assert ReferenceColumn.ISO_9001 in index

    def test_only_required(self):
        index = build_clause_index(SESSIONS, ScopeAnswers(), only_required=True)
        assert [g.code for g in index[ReferenceColumn.ISO_9001]] == ["4.1", "8.3.10"]
        assert index[ReferenceColumn.ISO_27701] == []

    def test_to_dict(self):
        group = build_clause_groups(SESSIONS, ReferenceColumn.ISO_9001)[0]
        data = group.to_dict()
        assert data["code"] == "4.1"
        assert data["required_items"][0]["session_id"] == "01"


class TestBundledIndex:
    def test_empty_scope(self, catalog, tables):
        engine = make_engine(catalog, tables=tables)
        sessions = engine.calculate_sessions(ScopeAnswers(), make_risk())
        index = build_clause_index(sessions, ScopeAnswers(), only_required=True)

        codes = [g.code for g in index[ReferenceColumn.ISO_9001]]
        assert "8.5.1" in codes
        assert "7.1.3" not in codes
        assert codes == sorted(codes, key=natural_key)
        cited = {c.session_id for g in index[ReferenceColumn.ISO_9001] for c in g.required_items}
        assert cited == {"01", "03", "04", "09"}
