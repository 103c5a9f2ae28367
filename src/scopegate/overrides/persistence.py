"""
ScopeGate Override Persistence

Strategies for writing the sessions configuration (with its current
manual overrides) back to storage after an override changes.

Every strategy returns a PersistResult. I/O errors and an abandoned save
prompt become ok=False results; nothing here raises to the caller.

Strategies:
- FileWriteStrategy: atomic in-place write of the configuration file
- PromptSaveStrategy: asks where to save, then writes there
- SnapshotStrategy: writes a timestamped copy for manual replacement
"""
from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from ..config import Settings

logger = logging.getLogger(__name__)

SNAPSHOT_MESSAGE = "replace the sessions configuration file manually"

Prompt = Callable[[str], Optional[str]]
Clock = Callable[[], datetime]


@dataclass(frozen=True)
class PersistResult:
    """Outcome of one persistence attempt."""
    ok: bool
    message: str
    path: Optional[Path] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "message": self.message,
            "path": str(self.path) if self.path is not None else None,
        }


def dump_document(document: dict[str, Any], path: Optional[Path] = None) -> str:
    """Render a sessions pack document as JSON for .json targets, YAML otherwise."""
    if path is not None and path.suffix.lower() == ".json":
        return json.dumps(document, indent=2, ensure_ascii=False) + "\n"
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)


def write_atomic(path: Path, content: str) -> None:
    """Write via a temporary file in the target directory, then rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


# =============================================================================
# Strategies
# =============================================================================

class PersistenceStrategy:
    """Base class for persistence strategies."""

    name = "base"

    def persist(self, document: dict[str, Any]) -> PersistResult:
        raise NotImplementedError


@dataclass
class FileWriteStrategy(PersistenceStrategy):
    """Overwrite the configuration file in place, keeping its format (JSON or YAML)."""
    path: Path

    name = "file"

    def persist(self, document: dict[str, Any]) -> PersistResult:
        path = Path(self.path)
        try:
            write_atomic(path, dump_document(document, path))
        except (OSError, TypeError, ValueError, yaml.YAMLError) as e:
            logger.warning("Failed to write %s: %s", path, e)
            return PersistResult(ok=False, message=f"Could not write {path}: {e}", path=path)
        logger.info("Sessions configuration written to %s", path)
        return PersistResult(ok=True, message=f"Saved to {path}", path=path)


@dataclass
class PromptSaveStrategy(PersistenceStrategy):
    """
    Ask for a destination, then write there.

    The prompt returns the chosen path, or None/empty when the user
    abandons the save. An abandoned save is a failure, not an error.
    """
    prompt: Prompt = input
    default_name: str = "sessions.yaml"

    name = "prompt"

    def persist(self, document: dict[str, Any]) -> PersistResult:
        try:
            answer = self.prompt(f"Save sessions configuration to [{self.default_name}]: ")
        except (EOFError, KeyboardInterrupt):
            answer = None

        if answer is None or not answer.strip():
            logger.info("Save prompt abandoned; overrides not persisted")
            return PersistResult(ok=False, message="Save cancelled")

        return FileWriteStrategy(Path(answer.strip()).expanduser()).persist(document)


@dataclass
class SnapshotStrategy(PersistenceStrategy):
    """
    Write a timestamped snapshot for an operator to install.

    Reported as success: the data is saved, only the final replacement of
    the configuration file is left to a person.
    """
    directory: Path = Path(".")
    clock: Clock = field(default=lambda: datetime.now(timezone.utc))

    name = "snapshot"

    def persist(self, document: dict[str, Any]) -> PersistResult:
        stamp = self.clock().strftime("%Y%m%dT%H%M%SZ")
        path = Path(self.directory) / f"sessions-{stamp}.yaml"
        try:
            write_atomic(path, dump_document(document))
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to write snapshot %s: %s", path, e)
            return PersistResult(ok=False, message=f"Could not write snapshot {path}: {e}", path=path)
        logger.info("Sessions snapshot written to %s", path)
        return PersistResult(
            ok=True,
            message=f"Snapshot written to {path}; {SNAPSHOT_MESSAGE}",
            path=path,
        )


# =============================================================================
# Selection
# =============================================================================

def is_writable(path: Path) -> bool:
    """True if path can be overwritten, or created in an existing directory."""
    if path.exists():
        return os.access(path, os.W_OK)
    return path.parent.is_dir() and os.access(path.parent, os.W_OK)


def select_strategy(
    settings: Settings,
    interactive: Optional[bool] = None,
    prompt: Optional[Prompt] = None,
) -> PersistenceStrategy:
    """
    Pick a persistence strategy from settings.

    auto: direct write when the configured sessions file is writable,
    otherwise a save prompt when interactive, otherwise a snapshot.
    The bundled configuration is never written in place.

    Args:
        settings: Runtime settings
        interactive: Whether a person can answer a prompt (defaults to
            whether stdin is a terminal)
        prompt: Prompt callable for PromptSaveStrategy

    Returns:
        A persistence strategy
    """
    if interactive is None:
        interactive = sys.stdin is not None and sys.stdin.isatty()
    target = settings.sessions_file
    mode = settings.persist_mode

    def prompt_strategy() -> PromptSaveStrategy:
        default_name = target.name if target is not None else "sessions.yaml"
        return PromptSaveStrategy(prompt=prompt or input, default_name=default_name)

    if mode == "file":
        if target is None:
            logger.warning("No sessions file configured; writing a snapshot instead")
            return SnapshotStrategy(settings.snapshot_dir)
        return FileWriteStrategy(target)
    if mode == "prompt":
        return prompt_strategy()
    if mode == "snapshot":
        return SnapshotStrategy(settings.snapshot_dir)

    if target is not None and is_writable(target):
        return FileWriteStrategy(target)
    if interactive:
        return prompt_strategy()
    return SnapshotStrategy(settings.snapshot_dir)
