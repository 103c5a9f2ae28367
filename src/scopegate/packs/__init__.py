"""
ScopeGate Configuration Packs

Schema validation and loading for the sessions pack and the compliance
pack.

The sessions pack defines the governance sessions, their work items and
applicability rules. The compliance pack maps each work item to ISO
clause references and suggested document types.

Usage:
    from scopegate.packs import PackLoader, load_default_packs

    # Bundled configuration
    catalog, tables = load_default_packs()

    # Custom files
    loader = PackLoader(strict_conditions=True)
    catalog = loader.load_sessions("config/sessions.yaml")
    tables = loader.load_compliance("config/compliance.yaml", catalog)
"""
from __future__ import annotations

from .loader import (
    DEFAULT_COMPLIANCE_FILE,
    DEFAULT_SESSIONS_FILE,
    PackLoader,
    default_pack_path,
    load_compliance_pack,
    load_compliance_pack_from_string,
    load_default_packs,
    load_sessions_pack,
    load_sessions_pack_from_string,
    read_pack_file,
    validate_reference_integrity,
)
from .schema import (
    SCHEMA_VERSION,
    ApplicabilityRulesSchema,
    ClauseEntrySchema,
    CompliancePackSchema,
    DocumentEntrySchema,
    ManualOverrideSchema,
    RequiredWhenSchema,
    SessionSchema,
    SessionsPackSchema,
    WorkItemSchema,
    check_schema_version,
    validate_compliance_pack,
    validate_sessions_pack,
)

__all__ = [
    # Version
    "SCHEMA_VERSION",
    # Loader
    "PackLoader",
    "DEFAULT_SESSIONS_FILE",
    "DEFAULT_COMPLIANCE_FILE",
    "default_pack_path",
    "load_default_packs",
    "load_sessions_pack",
    "load_sessions_pack_from_string",
    "load_compliance_pack",
    "load_compliance_pack_from_string",
    "read_pack_file",
    # Validation
    "validate_sessions_pack",
    "validate_compliance_pack",
    "validate_reference_integrity",
    "check_schema_version",
    # Schemas (for advanced usage)
    "SessionsPackSchema",
    "SessionSchema",
    "WorkItemSchema",
    "ApplicabilityRulesSchema",
    "RequiredWhenSchema",
    "ManualOverrideSchema",
    "CompliancePackSchema",
    "ClauseEntrySchema",
    "DocumentEntrySchema",
]
