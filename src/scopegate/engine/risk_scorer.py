"""
ScopeGate Risk Scorer

Deterministic, additive risk scoring for a proposed change.

The scoring formula is:
    score = base_score(delivery_type) + sum(weight of each firing factor)

Every firing factor appends one driver string, in table order. The label
comes from override rules that force HIGH regardless of score, else from
threshold gates on the score.

Core Principle: scoring is a pure function. Same answers always produce
the same score, label and driver order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..exceptions import RiskModelError
from ..models import (
    AccessModel,
    DataCategory,
    DeliveryType,
    RiskAssessment,
    RiskLabel,
    ScopeAnswers,
)

logger = logging.getLogger(__name__)

ScopeTest = Callable[[ScopeAnswers], bool]


# =============================================================================
# Rule Definitions
# =============================================================================

@dataclass(frozen=True)
class RiskFactor:
    """One additive contribution to the score."""
    code: str
    weight: int
    driver: str
    applies: ScopeTest


@dataclass(frozen=True)
class ThresholdGate:
    """Scores at or above min_score get this label."""
    label: RiskLabel
    min_score: int


@dataclass(frozen=True)
class LabelOverride:
    """Rule that forces a HIGH label irrespective of the numeric score."""
    code: str
    description: str
    applies: ScopeTest


def _data_is(category: DataCategory) -> ScopeTest:
    return lambda scope: scope.data_involved == category


def _access_is(model: AccessModel) -> ScopeTest:
    return lambda scope: scope.access_model == model


def _flag(attribute: str) -> ScopeTest:
    return lambda scope: bool(getattr(scope, attribute))


BASE_SCORES: dict[Optional[DeliveryType], int] = {
    DeliveryType.NEW_PRODUCT: 10,
    DeliveryType.FUNCTIONAL_EVOLUTION: 5,
    DeliveryType.VISUAL_UX_ADJUSTMENT: 0,
    DeliveryType.TECHNICAL_BUGFIX: 0,
    DeliveryType.TECHNICAL_REFACTORING: 0,
    DeliveryType.THIRD_PARTY_INTEGRATION: 5,
    DeliveryType.DISCONTINUATION: 5,
    None: 0,
}

DEFAULT_RISK_FACTORS: tuple[RiskFactor, ...] = (
    # Data
    RiskFactor("data_personal_common", 15,
               "Handles common personal data",
               _data_is(DataCategory.PERSONAL_COMMON)),
    RiskFactor("data_personal_sensitive", 40,
               "Handles sensitive personal data (high impact)",
               _data_is(DataCategory.PERSONAL_SENSITIVE)),
    RiskFactor("data_financial", 35,
               "Handles financial data (high impact)",
               _data_is(DataCategory.FINANCIAL)),
    RiskFactor("data_children", 45,
               "Handles children's or adolescents' data (high impact and legal compliance)",
               _data_is(DataCategory.CHILDREN)),
    # Access model
    RiskFactor("access_public", 20,
               "Public access increases the exposure surface",
               _access_is(AccessModel.PUBLIC)),
    RiskFactor("access_third_party", 15,
               "Third-party access requires authentication and audit controls",
               _access_is(AccessModel.THIRD_PARTY)),
    RiskFactor("access_api_automation", 18,
               "Unsupervised API access requires validation and rate limiting",
               _access_is(AccessModel.API_AUTOMATION)),
    # Sensitive actions
    RiskFactor("action_create", 5,
               "Data creation requires input validation and auditing",
               _flag("has_create_action")),
    RiskFactor("action_edit", 8,
               "Data changes require version control and auditing",
               _flag("has_edit_action")),
    RiskFactor("action_delete", 12,
               "Deletion requires confirmation, soft delete and auditing",
               _flag("has_delete_action")),
    RiskFactor("action_approval", 15,
               "Approval flows require careful design and traceability",
               _flag("has_approval_action")),
    RiskFactor("action_export", 10,
               "Export can expose data outside the system",
               _flag("has_export_action")),
    RiskFactor("action_share", 15,
               "Sharing increases the risk of leaks and unauthorized access",
               _flag("has_share_action")),
    RiskFactor("action_irreversible", 20,
               "Irreversible actions require double confirmation and complete logging",
               _flag("has_irreversible_action")),
    # Financial transactions
    RiskFactor("financial_transactions", 20,
               "Financial transactions require maximum security",
               _flag("has_financial")),
    # Persistence & lifecycle
    RiskFactor("retention_policy", 5,
               "Retention policy requires automation and clear communication",
               _flag("has_retention_policy")),
    RiskFactor("on_demand_deletion", 8,
               "On-demand deletion must comply with LGPD/GDPR (right to erasure)",
               _flag("has_on_demand_deletion")),
    RiskFactor("versioning", 5,
               "Versioning adds complexity and requires history/audit design",
               _flag("has_versioning")),
    # Sharing & integrations
    RiskFactor("internal_integrations", 3,
               "Internal integrations require authentication and secure service-to-service communication",
               _flag("has_internal_integrations")),
    RiskFactor("external_integrations", 10,
               "External integrations require OAuth, rate limiting and failure handling",
               _flag("has_external_integrations")),
    RiskFactor("international_transfer", 15,
               "International transfer requires LGPD/GDPR compliance and adequate safeguards",
               _flag("has_international_transfer")),
    RiskFactor("webhooks", 8,
               "Webhooks require signature validation, retries and idempotency",
               _flag("has_webhooks")),
    # Security & reliability
    RiskFactor("authorization", 5,
               "Authorization adds complexity and requires permission management",
               _flag("has_authorization_req")),
    RiskFactor("encryption_at_rest", 3,
               "Encryption at rest requires infrastructure and key management",
               _flag("has_encryption_at_rest")),
    RiskFactor("audit_logs", 8,
               "Audit logs require end-to-end traceability design (LGPD/GDPR)",
               _flag("has_audit_logs")),
    RiskFactor("usage_monitoring", 5,
               "Usage monitoring requires dashboards and anomaly detection",
               _flag("has_usage_monitoring")),
    # Change impact
    RiskFactor("changed_behavior", 8,
               "Changed behavior requires reviewing user flows and feedback design",
               _flag("has_changed_behavior")),
    RiskFactor("new_data_purpose", 15,
               "A new data purpose requires reviewing privacy policies and consent design",
               _flag("has_new_data_purpose")),
    RiskFactor("changed_data_collection", 12,
               "Changed data collection requires reviewing privacy policies and consent design",
               _flag("has_changed_data_collection")),
    RiskFactor("changed_integrations", 10,
               "Changed integrations require reviewing security policies and authentication design",
               _flag("has_changed_integrations")),
    RiskFactor("affected_existing_users", 10,
               "Impact on existing users requires reviewing user flows and feedback design",
               _flag("has_affected_existing_users")),
)

DEFAULT_LABEL_OVERRIDES: tuple[LabelOverride, ...] = (
    LabelOverride(
        "sensitive_data",
        "Sensitive personal, financial or children's data",
        lambda scope: scope.data_involved is not None and scope.data_involved.is_sensitive,
    ),
    LabelOverride(
        "irreversible_action",
        "Irreversible action",
        _flag("has_irreversible_action"),
    ),
    LabelOverride(
        "public_access_with_data",
        "Public access to a change that involves data",
        lambda scope: scope.access_model == AccessModel.PUBLIC and scope.has_data,
    ),
    LabelOverride(
        "sharing_personal_data",
        "Sharing of personal, financial or children's data",
        lambda scope: (
            scope.has_share_action
            and scope.data_involved is not None
            and scope.data_involved.is_personal
        ),
    ),
)

# Ordered by min_score ascending
DEFAULT_THRESHOLDS: tuple[ThresholdGate, ...] = (
    ThresholdGate(RiskLabel.MEDIUM, 20),
    ThresholdGate(RiskLabel.HIGH, 40),
)


# =============================================================================
# Risk Scorer
# =============================================================================

@dataclass
class RiskScorer:
    """
    Scores ScopeAnswers into a RiskAssessment.

    Usage:
        scorer = RiskScorer()
        assessment = scorer.score(scope)
        print(assessment.score, assessment.label.value, assessment.drivers)
    """

    factors: tuple[RiskFactor, ...] = DEFAULT_RISK_FACTORS
    label_overrides: tuple[LabelOverride, ...] = DEFAULT_LABEL_OVERRIDES
    thresholds: tuple[ThresholdGate, ...] = DEFAULT_THRESHOLDS
    base_scores: dict[Optional[DeliveryType], int] = field(
        default_factory=lambda: dict(BASE_SCORES)
    )

    def __post_init__(self) -> None:
        errors: list[str] = []

        for factor in self.factors:
            if factor.weight < 0:
                errors.append(f"Factor '{factor.code}' has negative weight {factor.weight}")
        for delivery_type, base in self.base_scores.items():
            if base < 0:
                errors.append(f"Base score for {delivery_type} is negative")

        codes = [f.code for f in self.factors]
        duplicates = sorted({c for c in codes if codes.count(c) > 1})
        if duplicates:
            errors.append(f"Duplicate factor codes: {', '.join(duplicates)}")

        for lower, upper in zip(self.thresholds, self.thresholds[1:]):
            if lower.min_score >= upper.min_score:
                errors.append("Threshold gates must be ordered by min_score ascending")
                break

        if errors:
            raise RiskModelError(
                message="Invalid risk model",
                details={"errors": errors},
            )

    def base_score(self, scope: ScopeAnswers) -> int:
        """Score contributed by the delivery type alone."""
        return self.base_scores.get(scope.delivery_type, 0)

    def score(self, scope: ScopeAnswers) -> RiskAssessment:
        """
        Score a change.

        Args:
            scope: The scope answers

        Returns:
            RiskAssessment with score, label, drivers and factor codes
        """
        total = self.base_score(scope)
        drivers: list[str] = []
        codes: list[str] = []

        for factor in self.factors:
            if factor.applies(scope):
                total += factor.weight
                drivers.append(factor.driver)
                codes.append(factor.code)

        label, forced_by = self._label(scope, total)

        return RiskAssessment(
            score=total,
            label=label,
            drivers=tuple(drivers),
            factor_codes=tuple(codes),
            forced_by=forced_by,
        )

    def _label(self, scope: ScopeAnswers, total: int) -> tuple[RiskLabel, Optional[str]]:
        for rule in self.label_overrides:
            if rule.applies(scope):
                return RiskLabel.HIGH, rule.code

        label = RiskLabel.LOW
        for gate in self.thresholds:
            if total >= gate.min_score:
                label = gate.label
        return label, None


# =============================================================================
# Convenience Functions
# =============================================================================

_default_scorer: Optional[RiskScorer] = None


def score_scope(scope: ScopeAnswers) -> RiskAssessment:
    """Score with the default risk model."""
    global _default_scorer
    if _default_scorer is None:
        _default_scorer = RiskScorer()
    return _default_scorer.score(scope)
