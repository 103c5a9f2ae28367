"""
ScopeGate Risk Models

RiskAssessment is derived from ScopeAnswers and never persisted. It is
rebuilt wholesale on every scope change.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import RiskLabel


@dataclass(frozen=True)
class RiskAssessment:
    """
    Result of scoring a change.

    Attributes:
        score: Non-negative additive score
        label: low / medium / high
        drivers: Human-readable explanation per firing factor, in
            evaluation order (not sorted, not deduplicated)
        factor_codes: Codes of the firing factors, parallel to drivers
        forced_by: Code of the override rule that forced HIGH, if any
    """
    score: int
    label: RiskLabel
    drivers: tuple[str, ...] = field(default_factory=tuple)
    factor_codes: tuple[str, ...] = field(default_factory=tuple)
    forced_by: Optional[str] = None

    @property
    def is_high(self) -> bool:
        return self.label == RiskLabel.HIGH

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "label": self.label.value,
            "drivers": list(self.drivers),
            "factor_codes": list(self.factor_codes),
            "forced_by": self.forced_by,
        }
