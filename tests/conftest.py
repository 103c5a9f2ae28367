"""
Pytest configuration and fixtures for ScopeGate tests.

Provides factory helpers for scope answers, session definitions and
catalogs, plus fixtures over the bundled configuration packs.
"""
import pytest

from scopegate.engine import (
    ComplianceEnrichment,
    ConditionEvaluator,
    RiskScorer,
    SessionRulesEngine,
)
from scopegate.models import (
    ApplicabilityRules,
    ManualOverride,
    RequiredWhen,
    RiskAssessment,
    RiskLabel,
    ScopeAnswers,
    SessionCatalog,
    SessionRuleDefinition,
    WorkItemTemplate,
)
from scopegate.packs import load_default_packs


# =============================================================================
# Factory Helpers
# =============================================================================

def make_scope(**answers) -> ScopeAnswers:
    """Create ScopeAnswers from camelCase or snake_case form keys."""
    return ScopeAnswers.from_dict(answers)


def make_risk(label: RiskLabel = RiskLabel.LOW, score: int = 0) -> RiskAssessment:
    return RiskAssessment(score=score, label=label)


def make_session(
    session_id: str = "01",
    always_required: bool = False,
    required_when=(),
    items=("first", "second"),
    title: str = "",
    manual_override=None,
) -> SessionRuleDefinition:
    """
    Create a session definition.

    required_when is a sequence of condition names; each rule's reason is
    "<session_id>:<condition>".
    """
    return SessionRuleDefinition(
        id=session_id,
        title=title or f"Session {session_id}",
        focus=f"Focus {session_id}",
        work_items=tuple(WorkItemTemplate(key=k, text=k.title()) for k in items),
        rules=ApplicabilityRules(
            always_required=always_required,
            required_when=tuple(
                RequiredWhen(condition=c, reason=f"{session_id}:{c}")
                for c in required_when
            ),
            reason_when_required="always" if always_required else "",
            reason_when_optional=f"{session_id}:optional",
        ),
        manual_override=manual_override,
    )


def make_catalog(*sessions: SessionRuleDefinition) -> SessionCatalog:
    return SessionCatalog(sessions=tuple(sessions))


def make_engine(catalog: SessionCatalog, overrides=None, tables=None) -> SessionRulesEngine:
    enrichment = (
        ComplianceEnrichment(tables, catalog) if tables is not None else ComplianceEnrichment()
    )
    return SessionRulesEngine(
        catalog,
        overrides=overrides,
        enrichment=enrichment,
        evaluator=ConditionEvaluator(),
    )


class DictOverrides:
    """Minimal override source backed by a dict."""

    def __init__(self, overrides: dict[str, ManualOverride]):
        self.overrides = overrides

    def get(self, session_id):
        return self.overrides.get(session_id)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def default_packs():
    """Bundled (catalog, tables)."""
    return load_default_packs()


@pytest.fixture
def catalog(default_packs):
    return default_packs[0]


@pytest.fixture
def tables(default_packs):
    return default_packs[1]


@pytest.fixture
def scorer():
    return RiskScorer()


@pytest.fixture
def empty_scope():
    return ScopeAnswers()
