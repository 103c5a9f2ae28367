"""
ScopeGate Exception Hierarchy

Domain-specific exceptions for scope classification and session rules.
All exceptions include error codes for tracking and logging.

Exception codes follow the pattern: SG_<CATEGORY>_<SPECIFIC>

Only configuration loading and input parsing raise. The computation path
(condition evaluation, scoring, session resolution, enrichment) degrades
to empty/false defaults instead, and override persistence reports
failures through PersistResult.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ScopeGateError(Exception):
    """
    Base exception for all ScopeGate errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (SG_*)
        details: Additional context about the error
        session_id: Associated session ID if applicable
    """
    message: str
    code: str = "SG_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    session_id: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.session_id:
            parts.append(f"(session: {self.session_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/CLI output."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.session_id:
            result["session_id"] = self.session_id
        return result


# =============================================================================
# Pack Errors
# =============================================================================

@dataclass
class PackLoadError(ScopeGateError):
    """Failed to read a configuration pack from file."""
    code: str = "SG_PACK_LOAD_ERROR"


@dataclass
class PackValidationError(ScopeGateError):
    """Configuration pack schema or reference validation failed."""
    code: str = "SG_PACK_VALIDATION_ERROR"


@dataclass
class PackVersionMismatch(ScopeGateError):
    """Pack schema version is not compatible with this release."""
    code: str = "SG_PACK_VERSION_MISMATCH"


# =============================================================================
# Input Errors
# =============================================================================

@dataclass
class InvalidScopeError(ScopeGateError):
    """Scope answers contain an unknown field or enum value."""
    code: str = "SG_INVALID_SCOPE"


# =============================================================================
# Rule Definition Errors
# =============================================================================

@dataclass
class RiskModelError(ScopeGateError):
    """Risk factor table or thresholds are malformed."""
    code: str = "SG_RISK_MODEL_ERROR"


@dataclass
class UnknownSessionError(ScopeGateError):
    """Referenced session id is not in the loaded configuration."""
    code: str = "SG_UNKNOWN_SESSION"
