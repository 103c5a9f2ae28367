"""
ScopeGate Pack Schemas

Pydantic models for validating configuration pack YAML/JSON files.

Two packs are loaded at startup:
- Sessions pack: ordered session definitions with applicability rules
  and optional manual overrides
- Compliance pack: clause references and document types per work item

The sessions pack is validated strictly (unknown fields rejected). The
compliance pack is validated leniently: malformed clause lists degrade to
empty, because a bad table row must never stop session resolution.

Schema versioning:
- schema_version field tracks breaking changes
- Loaders check the major version
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

logger = logging.getLogger(__name__)


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0.0"


# =============================================================================
# Enums as Literals (for YAML validation)
# =============================================================================

SessionStatusValue = Literal["required", "optional", "not-applicable"]


def _session_key(value: Any) -> Any:
    # Unquoted YAML ids ("02" written as 2) arrive as ints
    if isinstance(value, int) and not isinstance(value, bool):
        return f"{value:02d}"
    return value


# =============================================================================
# Sessions Pack
# =============================================================================

class WorkItemSchema(BaseModel):
    """A work item with a stable key."""
    key: str = Field(..., min_length=1, description="Stable identifier, unique within the session")
    text: str = Field(..., description="Task or deliverable description")

    model_config = {"extra": "forbid"}


class RequiredWhenSchema(BaseModel):
    """A (condition, reason) rule."""
    condition: str = Field(..., description="Condition name, e.g. 'hasSharing' or 'accessModel:public'")
    reason: str = Field("", description="Reason reported when the rule matches")

    model_config = {"extra": "forbid"}


class ApplicabilityRulesSchema(BaseModel):
    """Declarative applicability of a session."""
    always_required: bool = False
    required_when: list[RequiredWhenSchema] = Field(default_factory=list)
    reason_when_required: str = ""
    reason_when_optional: str = ""

    @field_validator("required_when", mode="before")
    @classmethod
    def coerce_rule_list(cls, v: Any) -> Any:
        """A non-list rule section means "no rules"."""
        if v is None:
            return []
        if not isinstance(v, list):
            logger.warning("required_when is not a list (%s); treating as empty", type(v).__name__)
            return []
        return v

    model_config = {"extra": "forbid"}


class ManualOverrideSchema(BaseModel):
    """Administrator-forced status stored alongside a session."""
    status: SessionStatusValue
    reason: str = ""
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    model_config = {"extra": "forbid", "populate_by_name": True}


class SessionSchema(BaseModel):
    """Schema for one configured session."""
    id: str = Field(..., min_length=1, description="Session identifier, e.g. '02'")
    title: str
    focus: str = ""
    work_items: list[Union[WorkItemSchema, str]] = Field(default_factory=list)
    applicability_rules: ApplicabilityRulesSchema = Field(default_factory=ApplicabilityRulesSchema)
    manual_override: Optional[ManualOverrideSchema] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return _session_key(v)

    model_config = {"extra": "forbid"}


class SessionsPackSchema(BaseModel):
    """Top-level schema for a sessions pack."""
    schema_version: str = Field(SCHEMA_VERSION, description="Schema version for compatibility")
    name: Optional[str] = None
    description: Optional[str] = None
    sessions: list[SessionSchema] = Field(..., description="Sessions in display order")

    model_config = {"extra": "forbid"}


# =============================================================================
# Compliance Pack
# =============================================================================

def _string_list(value: Any, column: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return value
    logger.warning("Column %s is not a list of strings; treating as empty", column)
    return []


class _EntryBase(BaseModel):
    """An entry addressed by item key or, for legacy tables, by position."""
    item: Optional[str] = None
    index: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def require_address(self) -> "_EntryBase":
        if self.item is None and self.index is None:
            raise ValueError("Entry needs 'item' or 'index'")
        return self

    model_config = {"extra": "ignore"}


class ClauseEntrySchema(_EntryBase):
    """Clause references for one work item."""
    iso_9001_2015: list[str] = Field(default_factory=list)
    iso_iec_27001_2022_clauses: list[str] = Field(default_factory=list)
    iso_iec_27001_2022_annexA: list[str] = Field(default_factory=list)
    iso_iec_27701_2019_clauses: list[str] = Field(default_factory=list)

    @field_validator(
        "iso_9001_2015",
        "iso_iec_27001_2022_clauses",
        "iso_iec_27001_2022_annexA",
        "iso_iec_27701_2019_clauses",
        mode="before",
    )
    @classmethod
    def lenient_clause_list(cls, v: Any, info: ValidationInfo) -> list[str]:
        return _string_list(v, info.field_name)


class DocumentEntrySchema(_EntryBase):
    """Suggested document types for one work item."""
    document_types: list[str] = Field(default_factory=list)

    @field_validator("document_types", mode="before")
    @classmethod
    def lenient_document_list(cls, v: Any) -> list[str]:
        return _string_list(v, "document_types")


class CompliancePackSchema(BaseModel):
    """
    Top-level schema for a compliance pack.

    Session sections are kept raw here; the loader parses each entry on
    its own so one malformed section or entry only drops itself.
    """
    schema_version: str = Field(SCHEMA_VERSION, description="Schema version for compatibility")
    work_item_compliance: dict[str, Any] = Field(default_factory=dict)
    work_item_documentation: dict[str, Any] = Field(default_factory=dict)

    @field_validator("work_item_compliance", "work_item_documentation", mode="before")
    @classmethod
    def lenient_table(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return {}
        if not isinstance(v, dict):
            logger.warning("%s is not a mapping; treating as empty", info.field_name)
            return {}
        return {str(_session_key(k)): section for k, section in v.items()}

    model_config = {"extra": "ignore"}


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_sessions_pack(data: dict[str, Any]) -> SessionsPackSchema:
    """
    Validate a sessions pack dictionary against the schema.

    Args:
        data: Dictionary loaded from YAML/JSON

    Returns:
        Validated SessionsPackSchema

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return SessionsPackSchema.model_validate(data)


def validate_compliance_pack(data: dict[str, Any]) -> CompliancePackSchema:
    """Validate the top level of a compliance pack."""
    return CompliancePackSchema.model_validate(data)


def check_schema_version(data: dict[str, Any]) -> bool:
    """
    Check if a pack's schema version is compatible.

    Args:
        data: Dictionary with schema_version field

    Returns:
        True if the major version matches
    """
    pack_version = str(data.get("schema_version", SCHEMA_VERSION))
    pack_major = pack_version.split(".")[0]
    current_major = SCHEMA_VERSION.split(".")[0]
    return pack_major == current_major
