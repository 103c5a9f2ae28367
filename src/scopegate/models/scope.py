"""
ScopeGate Scope Model

ScopeAnswers is the structured description of a proposed change: four
mutually exclusive categorical fields plus independent boolean flags
grouped by theme.

Categorical fields hold exactly one enum member or None (unset).
Booleans default to False, except the three compliance-standard toggles
which default to True.

The form that collects the answers uses camelCase keys
(e.g. "hasDeleteAction", "complianceISO9001"); from_dict() accepts those
or the snake_case attribute names.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Optional

from ..exceptions import InvalidScopeError
from .enums import (
    AccessModel,
    ComplianceStandard,
    DataCategory,
    DeliveryType,
    UserCapability,
)


CATEGORICAL_FIELDS: dict[str, type[Enum]] = {
    "delivery_type": DeliveryType,
    "data_involved": DataCategory,
    "access_model": AccessModel,
    "user_capability": UserCapability,
}

# camelCase keys that do not follow the mechanical snake_case conversion
_KEY_ALIASES = {
    "complianceISO9001": "compliance_iso9001",
    "complianceISO27001": "compliance_iso27001",
    "complianceISO27701": "compliance_iso27701",
}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_attribute_name(key: str) -> str:
    """Map a form key (camelCase or snake_case) to a ScopeAnswers attribute."""
    if key in _KEY_ALIASES:
        return _KEY_ALIASES[key]
    return _CAMEL_BOUNDARY.sub("_", key).lower()


@dataclass(frozen=True)
class ScopeAnswers:
    """
    Description of a proposed change, as answered in the scope form.

    Frozen: the engine never mutates it, and equal answers hash equally.
    """

    # Categorical (None = unset)
    delivery_type: Optional[DeliveryType] = None
    data_involved: Optional[DataCategory] = None
    access_model: Optional[AccessModel] = None
    user_capability: Optional[UserCapability] = None

    # Sensitive actions
    has_create_action: bool = False
    has_edit_action: bool = False
    has_delete_action: bool = False
    has_approval_action: bool = False
    has_export_action: bool = False
    has_share_action: bool = False
    has_irreversible_action: bool = False

    # Persistence & lifecycle
    has_temporary_data: bool = False
    has_persistent_data: bool = False
    has_retention_policy: bool = False
    has_on_demand_deletion: bool = False
    has_versioning: bool = False

    # Sharing & integrations
    has_no_sharing: bool = False
    has_internal_integrations: bool = False
    has_external_integrations: bool = False
    has_international_transfer: bool = False
    has_webhooks: bool = False

    # Security & reliability
    has_authentication_req: bool = False
    has_authorization_req: bool = False
    has_encryption_in_transit: bool = False
    has_encryption_at_rest: bool = False
    has_audit_logs: bool = False
    has_usage_monitoring: bool = False

    # Change impact
    has_no_impact: bool = False
    has_changed_behavior: bool = False
    has_new_data_purpose: bool = False
    has_changed_data_collection: bool = False
    has_changed_integrations: bool = False
    has_affected_existing_users: bool = False

    # Other
    has_financial: bool = False

    # Compliance standards
    compliance_iso9001: bool = True
    compliance_iso27001: bool = True
    compliance_iso27701: bool = True

    @property
    def has_data(self) -> bool:
        """Some data category other than "none" has been declared."""
        return self.data_involved is not None and self.data_involved != DataCategory.NONE

    @property
    def enabled_standards(self) -> list[ComplianceStandard]:
        """Compliance standards toggled on, in canonical order."""
        toggles = {
            ComplianceStandard.ISO_9001: self.compliance_iso9001,
            ComplianceStandard.ISO_27001: self.compliance_iso27001,
            ComplianceStandard.ISO_27701: self.compliance_iso27701,
        }
        return [standard for standard in ComplianceStandard if toggles[standard]]

    def is_complete(self) -> bool:
        """All four categorical fields have been answered."""
        return all(getattr(self, name) is not None for name in CATEGORICAL_FIELDS)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScopeAnswers:
        """
        Build ScopeAnswers from form data.

        Args:
            data: Mapping with camelCase or snake_case keys. Empty string or
                None for a categorical field means unset.

        Returns:
            ScopeAnswers

        Raises:
            InvalidScopeError: On unknown keys, unknown enum values or
                non-boolean flag values
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        unknown_keys: list[str] = []

        for key, value in data.items():
            name = to_attribute_name(key)
            if name not in known:
                unknown_keys.append(key)
                continue

            if name in CATEGORICAL_FIELDS:
                kwargs[name] = _coerce_category(name, value)
            else:
                if not isinstance(value, bool):
                    raise InvalidScopeError(
                        message=f"Flag '{key}' must be a boolean",
                        details={"field": key, "value": repr(value)},
                    )
                kwargs[name] = value

        if unknown_keys:
            raise InvalidScopeError(
                message=f"Unknown scope fields: {', '.join(sorted(unknown_keys))}",
                details={"fields": sorted(unknown_keys)},
            )

        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with snake_case keys; unset categories become None."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name] = value.value if isinstance(value, Enum) else value
        return result


def _coerce_category(name: str, value: Any) -> Optional[Enum]:
    """Convert a raw categorical value to its enum member (or None)."""
    enum_cls = CATEGORICAL_FIELDS[name]
    if value is None or value == "":
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidScopeError(
            message=f"Invalid value for '{name}': {value!r}",
            details={
                "field": name,
                "value": repr(value),
                "allowed": [member.value for member in enum_cls],
            },
        )
