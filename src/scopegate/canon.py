"""
Canonical JSON Serialization

Deterministic JSON serialization for hashing and comparison:
- Sorted keys (lexicographic)
- No whitespace
- Enums as values, datetimes as ISO 8601

Used to fingerprint the loaded configuration so two runs can be shown to
have used the same sessions and compliance tables.
"""
from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from .models import ComplianceTables, SessionCatalog


def _default_serializer(obj: Any) -> Any:
    """
    Custom JSON serializer for non-standard types.

    Handles:
    - datetime/date: ISO 8601 format
    - Enum: value
    - dataclass: dict
    - set/frozenset: sorted list
    - tuple: list
    """
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=str)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonical_json(obj: Any) -> str:
    """
    Serialize object to canonical JSON string.

    Args:
        obj: Any JSON-serializable object (including dataclasses)

    Returns:
        Canonical JSON string (sorted keys, no whitespace)

    Example:
        >>> canonical_json({"b": 1, "a": 2})
        '{"a":2,"b":1}'
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        default=_default_serializer,
        ensure_ascii=False,
    )


def content_hash(obj: Any) -> str:
    """
    Compute SHA-256 hash of the canonical JSON representation.

    Returns:
        Hex-encoded SHA-256 hash string (64 characters)
    """
    return hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()


def compute_config_hash(
    catalog: SessionCatalog,
    tables: Optional[ComplianceTables] = None,
) -> str:
    """
    Fingerprint of the rule configuration.

    Manual overrides are excluded: they change at runtime and do not alter
    the rules themselves.
    """
    payload: dict[str, Any] = {"sessions": catalog.to_dict(overrides={})}
    if tables is not None:
        payload["compliance"] = tables.to_dict()
    return content_hash(payload)
