"""
ScopeGate Session Rules Engine

Resolves which governance sessions a change requires.

For each configured session, in configuration order:
1. Manual override present -> its status and reason, rules not evaluated
2. always_required -> required, reason_when_required
3. First required_when rule whose condition holds -> required, its reason
4. Otherwise -> optional, reason_when_optional

Rule evaluation alone never yields "not-applicable"; only an override can.

Core Principle: calculate_sessions() is a pure function of
(scope, risk, overrides). It never raises; a session that fails to
resolve is logged and degraded to optional.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from ..models import (
    ManualOverride,
    RiskAssessment,
    RuleSource,
    ScopeAnswers,
    SessionCatalog,
    SessionDefinition,
    SessionRuleDefinition,
    SessionStatus,
    WorkItem,
)
from .compliance import ComplianceEnrichment
from .condition_evaluator import ConditionEvaluator

logger = logging.getLogger(__name__)


class OverrideSource(Protocol):
    """Anything that can answer "is there an override for this session"."""

    def get(self, session_id: str) -> Optional[ManualOverride]:
        ...


@dataclass
class SessionRulesEngine:
    """
    Computes session applicability.

    Usage:
        engine = SessionRulesEngine(catalog, overrides=store, enrichment=enrichment)
        sessions = engine.calculate_sessions(scope, risk)

        for session in sessions:
            print(session.id, session.status.value, session.reason)
    """

    catalog: SessionCatalog
    overrides: Optional[OverrideSource] = None
    enrichment: ComplianceEnrichment = field(default_factory=ComplianceEnrichment)
    evaluator: ConditionEvaluator = field(default_factory=ConditionEvaluator)

    def calculate_sessions(
        self,
        scope: ScopeAnswers,
        risk: RiskAssessment,
    ) -> list[SessionDefinition]:
        """
        Resolve every configured session.

        Args:
            scope: The scope answers
            risk: Risk assessment for those answers

        Returns:
            One SessionDefinition per configured session, in order
        """
        results = []
        for definition in self.catalog:
            try:
                results.append(self.resolve_session(definition, scope, risk))
            except Exception:
                logger.exception(
                    "Failed to resolve session %s; degrading to optional",
                    definition.id,
                )
                results.append(self._degraded(definition))
        return results

    def resolve_session(
        self,
        definition: SessionRuleDefinition,
        scope: ScopeAnswers,
        risk: RiskAssessment,
    ) -> SessionDefinition:
        """Resolve a single session."""
        override = self.overrides.get(definition.id) if self.overrides is not None else None
        if override is not None:
            status, reason, source = override.status, override.reason, RuleSource.OVERRIDE
        else:
            status, reason = self._evaluate_rules(definition, scope, risk)
            source = RuleSource.RULE

        return SessionDefinition(
            id=definition.id,
            title=definition.title,
            focus=definition.focus,
            work_items=self.enrichment.enrich(definition),
            status=status,
            reason=reason,
            source=source,
        )

    def _evaluate_rules(
        self,
        definition: SessionRuleDefinition,
        scope: ScopeAnswers,
        risk: RiskAssessment,
    ) -> tuple[SessionStatus, str]:
        rules = definition.rules

        if rules.always_required:
            return SessionStatus.REQUIRED, rules.reason_when_required

        for rule in rules.required_when:
            if self.evaluator.evaluate(rule.condition, scope, risk):
                return SessionStatus.REQUIRED, rule.reason

        return SessionStatus.OPTIONAL, rules.reason_when_optional

    def _degraded(self, definition: SessionRuleDefinition) -> SessionDefinition:
        work_items = tuple(
            WorkItem(key=template.key, text=template.text)
            for template in definition.work_items
        )
        return SessionDefinition(
            id=definition.id,
            title=definition.title,
            focus=definition.focus,
            work_items=work_items,
            status=SessionStatus.OPTIONAL,
            reason="",
            source=RuleSource.RULE,
        )
