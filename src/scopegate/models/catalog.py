"""
ScopeGate Session Catalog

The ordered, read-only list of configured sessions. Order is the display
order and is never changed by resolution.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from .session import ManualOverride, SessionRuleDefinition


@dataclass(frozen=True)
class SessionCatalog:
    """Configured sessions in declaration order."""
    sessions: tuple[SessionRuleDefinition, ...] = field(default_factory=tuple)
    schema_version: str = "1.0.0"
    source: Optional[str] = None

    def __iter__(self) -> Iterator[SessionRuleDefinition]:
        return iter(self.sessions)

    def __len__(self) -> int:
        return len(self.sessions)

    def __contains__(self, session_id: object) -> bool:
        return any(s.id == session_id for s in self.sessions)

    def get(self, session_id: str) -> Optional[SessionRuleDefinition]:
        for session in self.sessions:
            if session.id == session_id:
                return session
        return None

    @property
    def session_ids(self) -> list[str]:
        return [s.id for s in self.sessions]

    def initial_overrides(self) -> dict[str, ManualOverride]:
        """Overrides that shipped inside the configuration file."""
        return {
            s.id: s.manual_override
            for s in self.sessions
            if s.manual_override is not None
        }

    def to_dict(self, overrides: Optional[dict[str, ManualOverride]] = None) -> dict[str, Any]:
        """
        Serialize in the sessions pack shape.

        Args:
            overrides: Current overrides by session id. Each session record
                is written with its entry here (or none), replacing the
                override it was loaded with.
        """
        if overrides is None:
            overrides = self.initial_overrides()
        return {
            "schema_version": self.schema_version,
            "sessions": [s.to_dict(overrides.get(s.id)) for s in self.sessions],
        }
