"""
ScopeGate Session Models

Configuration side (read-only at runtime):
- WorkItemTemplate: one task/deliverable template with a stable key
- RequiredWhen: a (condition, reason) pair in a session's rule list
- ApplicabilityRules: always_required flag + ordered rule list + reasons
- ManualOverride: administrator-forced status for a session
- SessionRuleDefinition: one configured governance session

Output side (rebuilt on every recomputation):
- WorkItem: a template enriched with clause references and document hints
- SessionDefinition: a resolved session with status, reason and source
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from .enums import RuleSource, SessionStatus


# =============================================================================
# Configuration Models
# =============================================================================

@dataclass(frozen=True)
class WorkItemTemplate:
    """
    A recommended task within a session.

    The key is assigned when the configuration is authored and is what
    compliance tables join on, so work items can be reordered freely.
    """
    key: str
    text: str


@dataclass(frozen=True)
class RequiredWhen:
    """A rule that makes its session required when the condition holds."""
    condition: str
    reason: str


@dataclass(frozen=True)
class ApplicabilityRules:
    """
    Declarative applicability of a session.

    required_when is evaluated in order and the first matching rule wins.
    """
    always_required: bool = False
    required_when: tuple[RequiredWhen, ...] = field(default_factory=tuple)
    reason_when_required: str = ""
    reason_when_optional: str = ""

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.always_required:
            result["always_required"] = True
        if self.required_when:
            result["required_when"] = [
                {"condition": rule.condition, "reason": rule.reason}
                for rule in self.required_when
            ]
        if self.reason_when_required:
            result["reason_when_required"] = self.reason_when_required
        if self.reason_when_optional:
            result["reason_when_optional"] = self.reason_when_optional
        return result


@dataclass(frozen=True)
class ManualOverride:
    """
    Administrator-supplied status for a session.

    While present it fully supersedes rule evaluation for that session.
    """
    session_id: str
    status: SessionStatus
    reason: str
    updated_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        session_id: str,
        status: SessionStatus,
        reason: str,
        now: Optional[datetime] = None,
    ) -> ManualOverride:
        """Create an override stamped with the current UTC time."""
        return cls(
            session_id=session_id,
            status=SessionStatus(status),
            reason=reason,
            updated_at=now or datetime.now(timezone.utc),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the configuration file's shape."""
        result: dict[str, Any] = {
            "status": self.status.value,
            "reason": self.reason,
        }
        if self.updated_at is not None:
            result["updatedAt"] = self.updated_at.isoformat()
        return result


@dataclass(frozen=True)
class SessionRuleDefinition:
    """One configured governance session."""
    id: str
    title: str
    focus: str
    work_items: tuple[WorkItemTemplate, ...] = field(default_factory=tuple)
    rules: ApplicabilityRules = field(default_factory=ApplicabilityRules)
    manual_override: Optional[ManualOverride] = None

    def item_key(self, index: int) -> Optional[str]:
        """Stable key of the work item at a declaration position."""
        if 0 <= index < len(self.work_items):
            return self.work_items[index].key
        return None

    def to_dict(self, manual_override: Optional[ManualOverride] = None) -> dict[str, Any]:
        """
        Serialize in the sessions pack shape.

        Args:
            manual_override: Override to write instead of the one loaded
                with the definition (None writes no override)
        """
        result: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "focus": self.focus,
            "work_items": [{"key": w.key, "text": w.text} for w in self.work_items],
            "applicability_rules": self.rules.to_dict(),
        }
        if manual_override is not None:
            result["manual_override"] = manual_override.to_dict()
        return result


# =============================================================================
# Output Models
# =============================================================================

@dataclass(frozen=True)
class WorkItem:
    """A work item enriched with compliance references."""
    key: str
    text: str
    document_types: tuple[str, ...] = ()
    iso9001: tuple[str, ...] = ()
    iso27001_clauses: tuple[str, ...] = ()
    iso27001_annex_a: tuple[str, ...] = ()
    iso27701: tuple[str, ...] = ()

    @property
    def has_references(self) -> bool:
        return bool(
            self.iso9001 or self.iso27001_clauses
            or self.iso27001_annex_a or self.iso27701
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "text": self.text,
            "document_types": list(self.document_types),
            "iso9001": list(self.iso9001),
            "iso27001_clauses": list(self.iso27001_clauses),
            "iso27001_annex_a": list(self.iso27001_annex_a),
            "iso27701": list(self.iso27701),
        }


@dataclass(frozen=True)
class SessionDefinition:
    """A session resolved against one scope/risk pair."""
    id: str
    title: str
    focus: str
    work_items: tuple[WorkItem, ...]
    status: SessionStatus
    reason: str
    source: RuleSource

    @property
    def is_required(self) -> bool:
        return self.status == SessionStatus.REQUIRED

    @property
    def is_optional(self) -> bool:
        return self.status == SessionStatus.OPTIONAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "focus": self.focus,
            "work_items": [item.to_dict() for item in self.work_items],
            "status": self.status.value,
            "reason": self.reason,
            "source": self.source.value,
            "is_required": self.is_required,
            "is_optional": self.is_optional,
        }
