"""
ScopeGate Models

Domain models for scope classification and session applicability.

Usage:
    from scopegate.models import (
        ScopeAnswers, RiskAssessment, SessionDefinition,
        DataCategory, SessionStatus,
    )
"""
from __future__ import annotations

from .enums import (
    PERSONAL_DATA_CATEGORIES,
    SENSITIVE_DATA_CATEGORIES,
    AccessModel,
    ComplianceStandard,
    DataCategory,
    DeliveryType,
    ReferenceColumn,
    RiskLabel,
    RuleSource,
    SessionStatus,
    UserCapability,
)
from .scope import CATEGORICAL_FIELDS, ScopeAnswers, to_attribute_name
from .risk import RiskAssessment
from .conditions import Condition, ConditionKind, FieldMatch, parse_condition
from .session import (
    ApplicabilityRules,
    ManualOverride,
    RequiredWhen,
    SessionDefinition,
    SessionRuleDefinition,
    WorkItem,
    WorkItemTemplate,
)
from .catalog import SessionCatalog
from .compliance import ClauseRow, ComplianceTables

__all__ = [
    # Enums
    "AccessModel",
    "ComplianceStandard",
    "DataCategory",
    "DeliveryType",
    "ReferenceColumn",
    "RiskLabel",
    "RuleSource",
    "SessionStatus",
    "UserCapability",
    "PERSONAL_DATA_CATEGORIES",
    "SENSITIVE_DATA_CATEGORIES",
    # Scope
    "CATEGORICAL_FIELDS",
    "ScopeAnswers",
    "to_attribute_name",
    # Risk
    "RiskAssessment",
    # Conditions
    "Condition",
    "ConditionKind",
    "FieldMatch",
    "parse_condition",
    # Sessions
    "ApplicabilityRules",
    "ManualOverride",
    "RequiredWhen",
    "SessionDefinition",
    "SessionRuleDefinition",
    "WorkItem",
    "WorkItemTemplate",
    "SessionCatalog",
    # Compliance
    "ClauseRow",
    "ComplianceTables",
]
