"""
ScopeGate Compliance Enrichment

Attaches clause references and suggested document types to a session's
work items.

Lookups go through the work item's stable key. Positional lookups are
supported for callers that only know the declaration index; the index is
resolved to a key against the session catalog first.

A missing table, session, item or column is an empty result, never an
error.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from ..models import (
    ComplianceStandard,
    ComplianceTables,
    ReferenceColumn,
    SessionCatalog,
    SessionRuleDefinition,
    WorkItem,
)

logger = logging.getLogger(__name__)

Column = Union[ReferenceColumn, ComplianceStandard, str]


def resolve_columns(column: Column) -> tuple[ReferenceColumn, ...]:
    """Reference columns named by a column or standard id; empty if unknown."""
    if isinstance(column, ComplianceStandard):
        return column.columns
    try:
        return (ReferenceColumn(column),)
    except ValueError:
        pass
    try:
        return ComplianceStandard(column).columns
    except ValueError:
        return ()


@dataclass
class ComplianceEnrichment:
    """
    Joins work item templates with the compliance tables.

    Usage:
        enrichment = ComplianceEnrichment(tables, catalog)
        items = enrichment.enrich(definition)
        refs = enrichment.lookup("02", 0, ReferenceColumn.ISO_27701)
    """

    tables: ComplianceTables = field(default_factory=ComplianceTables)
    catalog: Optional[SessionCatalog] = None

    def lookup(
        self,
        session_id: str,
        item_index: int,
        column: Column,
    ) -> Optional[tuple[str, ...]]:
        """
        Clause ids for the work item at a declaration position.

        Args:
            session_id: Session id
            item_index: 0-based position in the session's work items
            column: A reference column or a standard

        Returns:
            Tuple of clause ids, or None when there is no entry
        """
        key = self._key_for(session_id, item_index)
        if key is None:
            return None
        return self.lookup_item(session_id, key, column)

    def lookup_item(
        self,
        session_id: str,
        item_key: str,
        column: Column,
    ) -> Optional[tuple[str, ...]]:
        """
        Clause ids for a work item by key, or None when absent.

        A standard selects all of its columns, concatenated in table order
        (ISO/IEC 27001: clauses, then Annex A). An unknown column is None.
        """
        columns = resolve_columns(column)
        if not columns:
            logger.debug("Unknown reference column: %r", column)
            return None
        row = self.tables.clause_row(session_id, item_key)
        if row is None:
            return None
        if len(columns) == 1:
            return row.get(columns[0])
        return tuple(ref for col in columns for ref in row.get(col, ()))

    def document_types(
        self,
        session_id: str,
        item_index: int,
    ) -> Optional[tuple[str, ...]]:
        """Suggested document types for the work item at a position."""
        key = self._key_for(session_id, item_index)
        if key is None:
            return None
        return self.document_types_for_item(session_id, key)

    def document_types_for_item(
        self,
        session_id: str,
        item_key: str,
    ) -> Optional[tuple[str, ...]]:
        return self.tables.document_row(session_id, item_key)

    def enrich(self, definition: SessionRuleDefinition) -> tuple[WorkItem, ...]:
        """
        Build enriched work items in template order.

        Args:
            definition: Configured session

        Returns:
            One WorkItem per template; absent references are empty tuples
        """
        items = []
        for template in definition.work_items:
            row = self.tables.clause_row(definition.id, template.key) or {}
            docs = self.tables.document_row(definition.id, template.key) or ()
            items.append(
                WorkItem(
                    key=template.key,
                    text=template.text,
                    document_types=tuple(docs),
                    iso9001=tuple(row.get(ReferenceColumn.ISO_9001, ())),
                    iso27001_clauses=tuple(row.get(ReferenceColumn.ISO_27001_CLAUSES, ())),
                    iso27001_annex_a=tuple(row.get(ReferenceColumn.ISO_27001_ANNEX_A, ())),
                    iso27701=tuple(row.get(ReferenceColumn.ISO_27701, ())),
                )
            )
        return tuple(items)

    def _key_for(self, session_id: str, item_index: int) -> Optional[str]:
        if self.catalog is None:
            logger.debug("Positional lookup without a catalog: %s[%d]", session_id, item_index)
            return None
        definition = self.catalog.get(session_id)
        if definition is None:
            return None
        return definition.item_key(item_index)
