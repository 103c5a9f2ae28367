"""
ScopeGate Engine

Core services for risk classification and session resolution.

Services:
- ConditionEvaluator: Evaluate named session-rule conditions
- RiskScorer: Score a scope into a risk label with drivers
- SessionRulesEngine: Resolve session applicability
- ComplianceEnrichment: Attach clause references to work items
- compliance_considerations / build_clause_index: Derived views

Usage:
    from scopegate.engine import (
        RiskScorer,
        SessionRulesEngine,
        ComplianceEnrichment,
    )
"""
from __future__ import annotations

from .condition_evaluator import (
    PREDICATES,
    ConditionEvaluator,
    evaluate_condition,
    evaluate_field_match,
)
from .risk_scorer import (
    BASE_SCORES,
    DEFAULT_LABEL_OVERRIDES,
    DEFAULT_RISK_FACTORS,
    DEFAULT_THRESHOLDS,
    LabelOverride,
    RiskFactor,
    RiskScorer,
    ThresholdGate,
    score_scope,
)
from .compliance import ComplianceEnrichment
from .session_engine import OverrideSource, SessionRulesEngine
from .considerations import (
    CONSIDERATION_BUILDERS,
    compliance_considerations,
    iso9001_considerations,
    iso27001_considerations,
    iso27701_considerations,
)
from .clause_index import (
    ClauseCitation,
    ClauseGroup,
    ClauseIndex,
    build_clause_groups,
    build_clause_index,
    natural_key,
)

__all__ = [
    # Condition Evaluator
    "ConditionEvaluator",
    "PREDICATES",
    "evaluate_condition",
    "evaluate_field_match",
    # Risk Scorer
    "RiskScorer",
    "RiskFactor",
    "LabelOverride",
    "ThresholdGate",
    "BASE_SCORES",
    "DEFAULT_RISK_FACTORS",
    "DEFAULT_LABEL_OVERRIDES",
    "DEFAULT_THRESHOLDS",
    "score_scope",
    # Sessions
    "SessionRulesEngine",
    "OverrideSource",
    "ComplianceEnrichment",
    # Derived views
    "CONSIDERATION_BUILDERS",
    "compliance_considerations",
    "iso9001_considerations",
    "iso27001_considerations",
    "iso27701_considerations",
    "ClauseCitation",
    "ClauseGroup",
    "ClauseIndex",
    "build_clause_groups",
    "build_clause_index",
    "natural_key",
]
