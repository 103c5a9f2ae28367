"""
ScopeGate Condition Evaluator

Evaluates named session-rule conditions against (scope, risk).

Key features:
- Closed vocabulary: every ConditionKind has exactly one predicate, checked
  when this module is imported
- "field:value" exact matches on categorical scope fields
- Total: unrecognized names evaluate to False, never raise
- Invocation counter for verifying which rules were evaluated
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Union

from ..models import (
    Condition,
    ConditionKind,
    DataCategory,
    FieldMatch,
    RiskAssessment,
    ScopeAnswers,
    parse_condition,
)

logger = logging.getLogger(__name__)

Predicate = Callable[[ScopeAnswers, RiskAssessment], bool]


# =============================================================================
# Predicates
# =============================================================================

def _has_personal_data(scope: ScopeAnswers, risk: RiskAssessment) -> bool:
    return scope.data_involved is not None and scope.data_involved not in {
        DataCategory.NONE,
        DataCategory.NON_PERSONAL,
    }


def _has_sensitive_data(scope: ScopeAnswers, risk: RiskAssessment) -> bool:
    return scope.data_involved is not None and scope.data_involved.is_sensitive


def _has_critical_actions(scope: ScopeAnswers, risk: RiskAssessment) -> bool:
    return (
        scope.has_delete_action
        or scope.has_irreversible_action
        or scope.has_approval_action
    )


def _has_sharing(scope: ScopeAnswers, risk: RiskAssessment) -> bool:
    return (
        scope.has_share_action
        or scope.has_export_action
        or scope.has_external_integrations
        or scope.has_internal_integrations
    )


def _flag(attribute: str) -> Predicate:
    def predicate(scope: ScopeAnswers, risk: RiskAssessment) -> bool:
        return bool(getattr(scope, attribute))
    predicate.__name__ = f"_flag_{attribute}"
    return predicate


PREDICATES: dict[ConditionKind, Predicate] = {
    ConditionKind.HAS_PERSONAL_DATA: _has_personal_data,
    ConditionKind.HAS_SENSITIVE_DATA: _has_sensitive_data,
    ConditionKind.HAS_PERSISTENT_DATA: _flag("has_persistent_data"),
    ConditionKind.HAS_CRITICAL_ACTIONS: _has_critical_actions,
    ConditionKind.HAS_SHARING: _has_sharing,
    ConditionKind.HAS_AUTHORIZATION_REQ: _flag("has_authorization_req"),
    ConditionKind.HAS_AUTHENTICATION_REQ: _flag("has_authentication_req"),
    ConditionKind.HAS_AFFECTED_EXISTING_USERS: _flag("has_affected_existing_users"),
    ConditionKind.HAS_CHANGED_BEHAVIOR: _flag("has_changed_behavior"),
    ConditionKind.HAS_NEW_DATA_PURPOSE: _flag("has_new_data_purpose"),
    ConditionKind.IS_HIGH_RISK: lambda scope, risk: risk.is_high,
}

_missing = set(ConditionKind) - set(PREDICATES)
if _missing:
    raise RuntimeError(
        "Condition kinds without a predicate: "
        + ", ".join(sorted(kind.value for kind in _missing))
    )


def evaluate_field_match(match: FieldMatch, scope: ScopeAnswers) -> bool:
    """Exact comparison of a categorical field's value."""
    actual = getattr(scope, match.field, None)
    if actual is None:
        return False
    return actual.value == match.value


# =============================================================================
# Condition Evaluator
# =============================================================================

@dataclass
class ConditionEvaluator:
    """
    Evaluates session-rule conditions.

    Usage:
        evaluator = ConditionEvaluator()
        if evaluator.evaluate("hasSharing", scope, risk):
            ...

        # How many conditions were evaluated so far
        evaluator.evaluations
    """

    evaluations: int = 0
    _unknown_seen: set[str] = field(default_factory=set, repr=False)

    def evaluate(
        self,
        condition: Union[str, Condition, None],
        scope: ScopeAnswers,
        risk: RiskAssessment,
    ) -> bool:
        """
        Evaluate a condition.

        Args:
            condition: Condition name or an already-parsed condition
            scope: The scope answers
            risk: The risk assessment for those answers

        Returns:
            True if the condition holds. Unrecognized names return False.
        """
        self.evaluations += 1

        parsed = parse_condition(condition) if isinstance(condition, str) else condition
        if parsed is None:
            self._note_unknown(condition)
            return False

        if isinstance(parsed, FieldMatch):
            return evaluate_field_match(parsed, scope)
        return PREDICATES[parsed](scope, risk)

    def reset(self) -> None:
        """Reset the invocation counter."""
        self.evaluations = 0

    def _note_unknown(self, condition: object) -> None:
        name = str(condition)
        if name not in self._unknown_seen:
            self._unknown_seen.add(name)
            logger.debug("Unrecognized condition %r evaluates to False", name)


# =============================================================================
# Convenience Functions
# =============================================================================

def evaluate_condition(
    condition: Union[str, Condition, None],
    scope: ScopeAnswers,
    risk: RiskAssessment,
) -> bool:
    """
    Evaluate a condition with a temporary evaluator.

    Args:
        condition: Condition name or parsed condition
        scope: The scope answers
        risk: The risk assessment

    Returns:
        True if the condition holds
    """
    return ConditionEvaluator().evaluate(condition, scope, risk)
