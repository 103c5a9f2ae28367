"""
ScopeGate Conditions

Session rules reference conditions by name. Names are parsed into one of
two shapes:

- ConditionKind: a closed set of named predicates ("hasPersonalData", ...)
- FieldMatch: "field:value" exact match on a categorical scope field
  (e.g. "accessModel:authenticated-permissions")

An unrecognized name parses to None, which evaluates to False.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .scope import CATEGORICAL_FIELDS, to_attribute_name


class ConditionKind(str, Enum):
    """Named predicates over (scope, risk)."""
    HAS_PERSONAL_DATA = "hasPersonalData"
    HAS_SENSITIVE_DATA = "hasSensitiveData"
    HAS_PERSISTENT_DATA = "hasPersistentData"
    HAS_CRITICAL_ACTIONS = "hasCriticalActions"
    HAS_SHARING = "hasSharing"
    HAS_AUTHORIZATION_REQ = "hasAuthorizationReq"
    HAS_AUTHENTICATION_REQ = "hasAuthenticationReq"
    HAS_AFFECTED_EXISTING_USERS = "hasAffectedExistingUsers"
    HAS_CHANGED_BEHAVIOR = "hasChangedBehavior"
    HAS_NEW_DATA_PURPOSE = "hasNewDataPurpose"
    IS_HIGH_RISK = "isHighRisk"


@dataclass(frozen=True)
class FieldMatch:
    """Exact match of a categorical scope field against an enum value."""
    field: str
    value: str

    def __str__(self) -> str:
        return f"{self.field}:{self.value}"


Condition = Union[ConditionKind, FieldMatch]


def parse_condition(name: str) -> Optional[Condition]:
    """
    Parse a condition name from configuration.

    Args:
        name: "hasSharing", "accessModel:public", "access_model:public", ...

    Returns:
        ConditionKind or FieldMatch, or None if the name is not recognized
        (unknown predicate, unknown field, or value outside the field's
        enumeration)
    """
    if not isinstance(name, str):
        return None

    name = name.strip()
    if ":" in name:
        raw_field, _, value = name.partition(":")
        attribute = to_attribute_name(raw_field.strip())
        enum_cls = CATEGORICAL_FIELDS.get(attribute)
        if enum_cls is None:
            return None
        value = value.strip()
        if value not in {member.value for member in enum_cls}:
            return None
        return FieldMatch(field=attribute, value=value)

    try:
        return ConditionKind(name)
    except ValueError:
        return None
