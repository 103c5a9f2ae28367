"""
ScopeGate Override Store

Holds the manual overrides for one loaded session catalog and applies
changes to them.

An override change is:
1. validated (the session must exist),
2. applied to the in-memory store,
3. followed by a full recomputation of the sessions,
4. persisted through the configured strategy.

Persistence runs after recomputation. When it fails, the in-memory
override stays in effect and the caller gets both the recomputed sessions
and the failed PersistResult.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional, Union

from ..exceptions import UnknownSessionError
from ..models import (
    ManualOverride,
    RiskAssessment,
    ScopeAnswers,
    SessionCatalog,
    SessionDefinition,
    SessionStatus,
)
from .persistence import PersistenceStrategy, PersistResult

if TYPE_CHECKING:
    from ..engine import SessionRulesEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverrideResult:
    """Outcome of apply_override / clear_override."""
    ok: bool
    message: str
    sessions: list[SessionDefinition] = field(default_factory=list)
    persisted: Optional[PersistResult] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "message": self.message,
            "sessions": [s.to_dict() for s in self.sessions],
            "persisted": self.persisted.to_dict() if self.persisted is not None else None,
        }


class OverrideStore:
    """
    Manual overrides keyed by session id.

    Seeded from the overrides stored in the loaded configuration. This is
    the only mutable state in ScopeGate; pass it explicitly to the engine.

    Usage:
        store = OverrideStore(catalog, persistence=FileWriteStrategy(path))
        engine = SessionRulesEngine(catalog, overrides=store)

        result = store.apply_override(
            engine, "02", "not-applicable", "No data in scope", scope, risk,
        )
        if not result.persisted.ok:
            print(result.persisted.message)
    """

    def __init__(
        self,
        catalog: SessionCatalog,
        persistence: Optional[PersistenceStrategy] = None,
    ):
        self.catalog = catalog
        self.persistence = persistence
        self._overrides: dict[str, ManualOverride] = catalog.initial_overrides()

    def __len__(self) -> int:
        return len(self._overrides)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._overrides

    def get(self, session_id: str) -> Optional[ManualOverride]:
        return self._overrides.get(session_id)

    def snapshot(self) -> dict[str, ManualOverride]:
        """Copy of the current overrides."""
        return dict(self._overrides)

    def set(self, override: ManualOverride) -> None:
        """
        Replace the whole override record for a session.

        Raises:
            UnknownSessionError: If the session is not in the catalog
        """
        self._require_session(override.session_id)
        self._overrides[override.session_id] = override

    def remove(self, session_id: str) -> Optional[ManualOverride]:
        """
        Drop a session's override.

        Returns:
            The removed override, or None if there was none

        Raises:
            UnknownSessionError: If the session is not in the catalog
        """
        self._require_session(session_id)
        return self._overrides.pop(session_id, None)

    def document(self) -> dict[str, Any]:
        """The sessions configuration with the current overrides merged in."""
        return self.catalog.to_dict(self._overrides)

    def persist(self) -> PersistResult:
        """Write the merged configuration through the persistence strategy."""
        if self.persistence is None:
            return PersistResult(ok=False, message="No persistence configured; override kept in memory only")
        try:
            return self.persistence.persist(self.document())
        except Exception as e:
            logger.exception("Persistence strategy %s failed", type(self.persistence).__name__)
            return PersistResult(ok=False, message=f"Persistence failed: {e}")

    # -------------------------------------------------------------------------
    # Override operations
    # -------------------------------------------------------------------------

    def apply_override(
        self,
        engine: SessionRulesEngine,
        session_id: str,
        status: Union[SessionStatus, str],
        reason: str,
        scope: ScopeAnswers,
        risk: RiskAssessment,
        now: Optional[datetime] = None,
    ) -> OverrideResult:
        """
        Set a manual override, recompute and persist.

        Args:
            engine: Engine used to recompute the sessions
            session_id: Session to override
            status: Forced status
            reason: Reason shown for the session
            scope: Current scope answers
            risk: Current risk assessment
            now: Timestamp for updated_at (UTC now by default)

        Returns:
            OverrideResult. ok=False (nothing changed or persisted) for an
            unknown session id or an invalid status.
        """
        engine = self._bind(engine)

        try:
            override = ManualOverride.create(session_id, SessionStatus(status), reason, now)
            self.set(override)
        except UnknownSessionError as e:
            logger.warning("Override rejected: %s", e.message, extra={"session_id": session_id})
            return OverrideResult(ok=False, message=e.message, sessions=engine.calculate_sessions(scope, risk))
        except ValueError:
            message = f"Invalid status {status!r}"
            logger.warning("Override rejected: %s", message, extra={"session_id": session_id})
            return OverrideResult(ok=False, message=message, sessions=engine.calculate_sessions(scope, risk))

        sessions = engine.calculate_sessions(scope, risk)
        persisted = self.persist()
        logger.info(
            "Override applied to session %s: %s",
            session_id, override.status.value,
            extra={"session_id": session_id, "persisted": persisted.ok},
        )
        return OverrideResult(
            ok=True,
            message=f"Session {session_id} set to {override.status.value}",
            sessions=sessions,
            persisted=persisted,
        )

    def clear_override(
        self,
        engine: SessionRulesEngine,
        session_id: str,
        scope: ScopeAnswers,
        risk: RiskAssessment,
    ) -> OverrideResult:
        """
        Remove a manual override, recompute and persist.

        Clearing a session without an override succeeds and still persists.
        """
        engine = self._bind(engine)

        try:
            removed = self.remove(session_id)
        except UnknownSessionError as e:
            logger.warning("Clear rejected: %s", e.message, extra={"session_id": session_id})
            return OverrideResult(ok=False, message=e.message, sessions=engine.calculate_sessions(scope, risk))

        sessions = engine.calculate_sessions(scope, risk)
        persisted = self.persist()
        message = (
            f"Override cleared for session {session_id}"
            if removed is not None
            else f"Session {session_id} had no override"
        )
        logger.info("%s", message, extra={"session_id": session_id, "persisted": persisted.ok})
        return OverrideResult(ok=True, message=message, sessions=sessions, persisted=persisted)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _require_session(self, session_id: str) -> None:
        if session_id not in self.catalog:
            raise UnknownSessionError(
                message=f"Unknown session '{session_id}'",
                details={"available": self.catalog.session_ids},
                session_id=session_id,
            )

    def _bind(self, engine: SessionRulesEngine) -> SessionRulesEngine:
        """Engine that reads overrides from this store."""
        if engine.overrides is self:
            return engine
        return dataclasses.replace(engine, overrides=self)
