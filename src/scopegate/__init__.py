"""
ScopeGate - Risk Classification and Governance Session Rules

ScopeGate takes the answers to a scope form describing a proposed change
and works out how much governance the change needs.

Key Features:
- Additive risk score with human-readable drivers and forced-HIGH rules
- Declarative session applicability (always required, first matching rule)
- Manual overrides that supersede rules, persisted back to configuration
- ISO 9001 / 27001 / 27701 / 27002 clause references per work item
- Clause index and per-standard considerations derived from the scope

Quick Start:
    from scopegate import (
        ScopeAnswers, RiskScorer, SessionRulesEngine,
        ComplianceEnrichment, OverrideStore, load_default_packs,
    )

    catalog, tables = load_default_packs()
    store = OverrideStore(catalog)
    engine = SessionRulesEngine(
        catalog,
        overrides=store,
        enrichment=ComplianceEnrichment(tables, catalog),
    )

    scope = ScopeAnswers.from_dict({"dataInvolved": "personal-common"})
    risk = RiskScorer().score(scope)
    sessions = engine.calculate_sessions(scope, risk)

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"
__author__ = "ScopeGate Team"

# =============================================================================
# Core Models (Re-exported for convenience)
# =============================================================================
from .models import (
    # Enums
    AccessModel,
    ComplianceStandard,
    DataCategory,
    DeliveryType,
    ReferenceColumn,
    RiskLabel,
    RuleSource,
    SessionStatus,
    UserCapability,
    # Scope and risk
    ScopeAnswers,
    RiskAssessment,
    # Sessions
    ManualOverride,
    SessionCatalog,
    SessionDefinition,
    SessionRuleDefinition,
    WorkItem,
    # Compliance
    ComplianceTables,
)

# =============================================================================
# Engine
# =============================================================================
from .engine import (
    ComplianceEnrichment,
    ConditionEvaluator,
    RiskScorer,
    SessionRulesEngine,
    build_clause_index,
    compliance_considerations,
    score_scope,
)

# =============================================================================
# Packs and Overrides
# =============================================================================
from .packs import PackLoader, load_default_packs
from .overrides import OverrideResult, OverrideStore, PersistResult, select_strategy

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    InvalidScopeError,
    PackLoadError,
    PackValidationError,
    PackVersionMismatch,
    RiskModelError,
    ScopeGateError,
    UnknownSessionError,
)

from .canon import compute_config_hash
from .config import Settings

__all__ = [
    "__version__",
    # Models
    "AccessModel",
    "ComplianceStandard",
    "DataCategory",
    "DeliveryType",
    "ReferenceColumn",
    "RiskLabel",
    "RuleSource",
    "SessionStatus",
    "UserCapability",
    "ScopeAnswers",
    "RiskAssessment",
    "ManualOverride",
    "SessionCatalog",
    "SessionDefinition",
    "SessionRuleDefinition",
    "WorkItem",
    "ComplianceTables",
    # Engine
    "ComplianceEnrichment",
    "ConditionEvaluator",
    "RiskScorer",
    "SessionRulesEngine",
    "build_clause_index",
    "compliance_considerations",
    "score_scope",
    # Packs and overrides
    "PackLoader",
    "load_default_packs",
    "OverrideStore",
    "OverrideResult",
    "PersistResult",
    "select_strategy",
    # Exceptions
    "ScopeGateError",
    "PackLoadError",
    "PackValidationError",
    "PackVersionMismatch",
    "InvalidScopeError",
    "RiskModelError",
    "UnknownSessionError",
    # Misc
    "compute_config_hash",
    "Settings",
]
