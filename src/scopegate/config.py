"""
ScopeGate Settings

Runtime settings read from SCOPEGATE_* environment variables.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .exceptions import ScopeGateError

PERSIST_MODES = ("auto", "file", "prompt", "snapshot")
LOG_FORMATS = ("text", "json")


def _env_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """
    Process configuration.

    sessions_file / compliance_file of None mean the packs bundled with
    the package.
    """
    sessions_file: Optional[Path] = None
    compliance_file: Optional[Path] = None
    log_level: str = "INFO"
    log_format: str = "text"
    persist_mode: str = "auto"
    snapshot_dir: Path = Path(".")
    strict_conditions: bool = False

    def __post_init__(self) -> None:
        if self.persist_mode not in PERSIST_MODES:
            raise ScopeGateError(
                message=f"Invalid persist mode: {self.persist_mode}",
                code="SG_CONFIG_ERROR",
                details={"allowed": list(PERSIST_MODES)},
            )
        if self.log_format not in LOG_FORMATS:
            raise ScopeGateError(
                message=f"Invalid log format: {self.log_format}",
                code="SG_CONFIG_ERROR",
                details={"allowed": list(LOG_FORMATS)},
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        """Build settings from the environment (os.environ by default)."""
        env = os.environ if environ is None else environ

        sessions_file = env.get("SCOPEGATE_SESSIONS_FILE")
        compliance_file = env.get("SCOPEGATE_COMPLIANCE_FILE")

        return cls(
            sessions_file=Path(sessions_file) if sessions_file else None,
            compliance_file=Path(compliance_file) if compliance_file else None,
            log_level=env.get("SCOPEGATE_LOG_LEVEL", "INFO").upper(),
            log_format=env.get("SCOPEGATE_LOG_FORMAT", "text").lower(),
            persist_mode=env.get("SCOPEGATE_PERSIST_MODE", "auto").lower(),
            snapshot_dir=Path(env.get("SCOPEGATE_SNAPSHOT_DIR", ".")),
            strict_conditions=_env_bool(env.get("SCOPEGATE_STRICT_CONDITIONS", "false")),
        )
