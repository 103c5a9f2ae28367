"""
ScopeGate Enumerations

All enumeration types used throughout the ScopeGate system.
Organized by domain area for clarity.

All enums inherit from (str, Enum) for JSON serialization compatibility.
"""
from __future__ import annotations

from enum import Enum


# =============================================================================
# Scope Categories
# =============================================================================

class DeliveryType(str, Enum):
    """Kind of change being delivered."""
    NEW_PRODUCT = "new-product"
    FUNCTIONAL_EVOLUTION = "functional-evolution"
    VISUAL_UX_ADJUSTMENT = "visual-ux-adjustment"
    TECHNICAL_BUGFIX = "technical-bugfix"
    TECHNICAL_REFACTORING = "technical-refactoring"
    THIRD_PARTY_INTEGRATION = "third-party-integration"
    DISCONTINUATION = "discontinuation"


class DataCategory(str, Enum):
    """Most sensitive category of data the change touches."""
    NONE = "none"
    NON_PERSONAL = "non-personal"
    PERSONAL_COMMON = "personal-common"
    PERSONAL_SENSITIVE = "personal-sensitive"
    FINANCIAL = "financial"
    CHILDREN = "children"

    @property
    def is_personal(self) -> bool:
        """Personal, financial or children's data."""
        return self in PERSONAL_DATA_CATEGORIES

    @property
    def is_sensitive(self) -> bool:
        """Categories that always force a high risk label."""
        return self in SENSITIVE_DATA_CATEGORIES


PERSONAL_DATA_CATEGORIES = frozenset({
    DataCategory.PERSONAL_COMMON,
    DataCategory.PERSONAL_SENSITIVE,
    DataCategory.FINANCIAL,
    DataCategory.CHILDREN,
})

SENSITIVE_DATA_CATEGORIES = frozenset({
    DataCategory.PERSONAL_SENSITIVE,
    DataCategory.FINANCIAL,
    DataCategory.CHILDREN,
})


class AccessModel(str, Enum):
    """Who can reach the changed functionality."""
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    AUTHENTICATED_PERMISSIONS = "authenticated-permissions"
    ADMINISTRATIVE = "administrative"
    THIRD_PARTY = "third-party"
    API_AUTOMATION = "api-automation"


class UserCapability(str, Enum):
    """Most capable actor using the change."""
    END_USER = "end-user"
    ADVANCED_USER = "advanced-user"
    INTERNAL_OPERATOR = "internal-operator"
    ADMINISTRATOR = "administrator"
    AUTOMATED_SYSTEM = "automated-system"


# =============================================================================
# Risk
# =============================================================================

class RiskLabel(str, Enum):
    """Risk classification derived from the score and override rules."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# =============================================================================
# Sessions
# =============================================================================

class SessionStatus(str, Enum):
    """
    Applicability of a governance session to a change.

    NOT_APPLICABLE is never produced by rule evaluation; it only comes
    from a manual override.
    """
    REQUIRED = "required"
    OPTIONAL = "optional"
    NOT_APPLICABLE = "not-applicable"


class RuleSource(str, Enum):
    """Where a session's status came from."""
    RULE = "rule"
    OVERRIDE = "override"


# =============================================================================
# Compliance
# =============================================================================

class ComplianceStandard(str, Enum):
    """Management-system standards that work items are mapped to."""
    ISO_9001 = "iso_9001_2015"
    ISO_27001 = "iso_iec_27001_2022"
    ISO_27701 = "iso_iec_27701_2019"

    @property
    def display_name(self) -> str:
        return _STANDARD_DISPLAY_NAMES[self]

    @property
    def columns(self) -> tuple["ReferenceColumn", ...]:
        """Reference columns of this standard, in table order."""
        return tuple(c for c in ReferenceColumn if c.standard == self)


_STANDARD_DISPLAY_NAMES = {
    ComplianceStandard.ISO_9001: "ISO 9001:2015",
    ComplianceStandard.ISO_27001: "ISO/IEC 27001:2022",
    ComplianceStandard.ISO_27701: "ISO/IEC 27701:2019",
}


class ReferenceColumn(str, Enum):
    """
    Clause reference columns in the compliance tables.

    ISO/IEC 27001 has two columns: management-system clauses and
    Annex A controls.
    """
    ISO_9001 = "iso_9001_2015"
    ISO_27001_CLAUSES = "iso_iec_27001_2022_clauses"
    ISO_27001_ANNEX_A = "iso_iec_27001_2022_annexA"
    ISO_27701 = "iso_iec_27701_2019_clauses"

    @property
    def standard(self) -> ComplianceStandard:
        """Standard this column belongs to."""
        if self == ReferenceColumn.ISO_9001:
            return ComplianceStandard.ISO_9001
        if self == ReferenceColumn.ISO_27701:
            return ComplianceStandard.ISO_27701
        return ComplianceStandard.ISO_27001
