"""
ScopeGate Pack Loader

Loads and validates the sessions pack and the compliance pack from YAML
or JSON, and converts the Pydantic schema models to ScopeGate domain
models.

Sessions packs are fail-fast: structural problems raise. Compliance packs
degrade: malformed sections and entries are dropped with a warning unless
strict loading is requested.
"""
from __future__ import annotations

import json
import logging
from datetime import timezone
from importlib import resources
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from ..exceptions import PackLoadError, PackValidationError, PackVersionMismatch
from ..models import (
    ApplicabilityRules,
    ComplianceTables,
    ManualOverride,
    ReferenceColumn,
    RequiredWhen,
    SessionCatalog,
    SessionRuleDefinition,
    SessionStatus,
    WorkItemTemplate,
    parse_condition,
)
from .schema import (
    SCHEMA_VERSION,
    ClauseEntrySchema,
    CompliancePackSchema,
    DocumentEntrySchema,
    ManualOverrideSchema,
    SessionSchema,
    SessionsPackSchema,
    WorkItemSchema,
    check_schema_version,
    validate_compliance_pack,
    validate_sessions_pack,
)

logger = logging.getLogger(__name__)

DATA_PACKAGE = "scopegate.data"
DEFAULT_SESSIONS_FILE = "sessions.yaml"
DEFAULT_COMPLIANCE_FILE = "compliance.yaml"

Source = Union[str, Path]


# =============================================================================
# Reference Integrity Validation
# =============================================================================

def validate_reference_integrity(
    catalog: SessionCatalog,
    path: str = "",
    strict_conditions: bool = False,
) -> None:
    """
    Validate internal references are consistent.

    Catches:
    - Duplicate session IDs
    - Duplicate work item keys within a session
    - Unknown condition names (only with strict_conditions)

    Args:
        catalog: The loaded catalog
        path: File path for error messages
        strict_conditions: Reject conditions that would evaluate to False
            because their name is not recognized

    Raises:
        ValueError: If reference integrity errors are found
    """
    errors = []

    seen_session_ids: set[str] = set()
    for session in catalog:
        if session.id in seen_session_ids:
            errors.append(f"Duplicate session ID: '{session.id}'")
        seen_session_ids.add(session.id)

        seen_keys: set[str] = set()
        for item in session.work_items:
            if item.key in seen_keys:
                errors.append(f"Session '{session.id}' has duplicate work item key '{item.key}'")
            seen_keys.add(item.key)

        if strict_conditions:
            for rule in session.rules.required_when:
                if parse_condition(rule.condition) is None:
                    errors.append(
                        f"Session '{session.id}' references unknown condition '{rule.condition}'"
                    )

    if errors:
        path_str = f" in {path}" if path else ""
        raise ValueError(
            f"Reference integrity errors{path_str}:\n" +
            "\n".join(f"  - {e}" for e in errors)
        )


# =============================================================================
# Schema to Model Converters
# =============================================================================

def _convert_work_items(session_id: str, items: list[Union[WorkItemSchema, str]]) -> tuple[WorkItemTemplate, ...]:
    """Convert work items; plain strings get a positional key."""
    templates = []
    positional = 0
    for position, item in enumerate(items, start=1):
        if isinstance(item, str):
            positional += 1
            templates.append(WorkItemTemplate(key=f"{session_id}-{position}", text=item))
        else:
            templates.append(WorkItemTemplate(key=item.key, text=item.text))
    if positional:
        logger.info(
            "Session %s has %d work items without a key; using positional keys",
            session_id, positional,
        )
    return tuple(templates)


def _convert_manual_override(session_id: str, schema: ManualOverrideSchema) -> ManualOverride:
    """Convert ManualOverrideSchema to ManualOverride model."""
    updated_at = schema.updated_at
    if updated_at is not None and updated_at.tzinfo is None:
        updated_at = updated_at.replace(tzinfo=timezone.utc)
    return ManualOverride(
        session_id=session_id,
        status=SessionStatus(schema.status),
        reason=schema.reason,
        updated_at=updated_at,
    )


def _convert_session(schema: SessionSchema) -> SessionRuleDefinition:
    """Convert SessionSchema to SessionRuleDefinition model."""
    rules_schema = schema.applicability_rules
    rules = ApplicabilityRules(
        always_required=rules_schema.always_required,
        required_when=tuple(
            RequiredWhen(condition=r.condition, reason=r.reason)
            for r in rules_schema.required_when
        ),
        reason_when_required=rules_schema.reason_when_required,
        reason_when_optional=rules_schema.reason_when_optional,
    )
    override = None
    if schema.manual_override is not None:
        override = _convert_manual_override(schema.id, schema.manual_override)

    return SessionRuleDefinition(
        id=schema.id,
        title=schema.title,
        focus=schema.focus,
        work_items=_convert_work_items(schema.id, schema.work_items),
        rules=rules,
        manual_override=override,
    )


def _convert_sessions_pack(schema: SessionsPackSchema, source: Optional[str] = None) -> SessionCatalog:
    """Convert SessionsPackSchema to SessionCatalog."""
    return SessionCatalog(
        sessions=tuple(_convert_session(s) for s in schema.sessions),
        schema_version=schema.schema_version,
        source=source,
    )


# =============================================================================
# Pack Loader
# =============================================================================

class PackLoader:
    """
    Loads configuration packs from YAML or JSON files.

    Usage:
        loader = PackLoader()
        catalog = loader.load_sessions("config/sessions.yaml")
        tables = loader.load_compliance("config/compliance.yaml", catalog)
    """

    def __init__(
        self,
        strict_version: bool = True,
        strict_conditions: bool = False,
        strict_compliance: bool = False,
    ):
        """
        Initialize the loader.

        Args:
            strict_version: Reject packs with an incompatible schema version
            strict_conditions: Reject sessions packs with unknown condition names
            strict_compliance: Reject compliance entries that do not match a
                declared work item instead of dropping them
        """
        self.strict_version = strict_version
        self.strict_conditions = strict_conditions
        self.strict_compliance = strict_compliance

    # -------------------------------------------------------------------------
    # Sessions pack
    # -------------------------------------------------------------------------

    def load_sessions(self, path: Source) -> SessionCatalog:
        """
        Load a sessions pack from a file.

        Args:
            path: Path to YAML or JSON file

        Returns:
            SessionCatalog in declaration order

        Raises:
            PackLoadError: If the file cannot be read or parsed
            PackValidationError: If validation fails
            PackVersionMismatch: If the schema version is incompatible
        """
        path = Path(path)
        data = self._read(path)
        return self.load_sessions_data(data, source=str(path))

    def load_sessions_data(self, data: Any, source: Optional[str] = None) -> SessionCatalog:
        """Validate and convert an already parsed sessions pack."""
        if not isinstance(data, dict):
            raise PackLoadError(
                message="Sessions pack must be a mapping",
                details={"path": source, "type": type(data).__name__},
            )
        self._check_version(data, source)

        try:
            schema = validate_sessions_pack(data)
        except ValidationError as e:
            raise PackValidationError(
                message=f"Sessions pack validation failed: {e.error_count()} errors",
                details={"errors": e.errors(include_url=False), "path": source},
            )

        catalog = _convert_sessions_pack(schema, source)

        try:
            validate_reference_integrity(catalog, source or "", self.strict_conditions)
        except ValueError as e:
            raise PackValidationError(
                message="Reference integrity validation failed",
                details={"errors": str(e), "path": source},
            )

        for session in catalog:
            for rule in session.rules.required_when:
                if parse_condition(rule.condition) is None:
                    logger.warning(
                        "Session %s references unknown condition %r; it will never match",
                        session.id, rule.condition,
                    )

        logger.debug("Loaded %d sessions from %s", len(catalog), source or "<data>")
        return catalog

    # -------------------------------------------------------------------------
    # Compliance pack
    # -------------------------------------------------------------------------

    def load_compliance(
        self,
        path: Source,
        catalog: Optional[SessionCatalog] = None,
    ) -> ComplianceTables:
        """
        Load a compliance pack from a file.

        Args:
            path: Path to YAML or JSON file
            catalog: Sessions the entries refer to; needed to translate
                positional entries and to check item keys

        Returns:
            ComplianceTables keyed by (session id, item key)

        Raises:
            PackLoadError: If the file cannot be read or parsed
            PackVersionMismatch: If the schema version is incompatible
            PackValidationError: Only with strict_compliance, on entries
                that cannot be attributed to a work item
        """
        path = Path(path)
        data = self._read(path)
        return self.load_compliance_data(data, catalog, source=str(path))

    def load_compliance_data(
        self,
        data: Any,
        catalog: Optional[SessionCatalog] = None,
        source: Optional[str] = None,
    ) -> ComplianceTables:
        """Validate and convert an already parsed compliance pack."""
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise PackLoadError(
                message="Compliance pack must be a mapping",
                details={"path": source, "type": type(data).__name__},
            )
        self._check_version(data, source)

        try:
            schema = validate_compliance_pack(data)
        except ValidationError as e:
            raise PackValidationError(
                message=f"Compliance pack validation failed: {e.error_count()} errors",
                details={"errors": e.errors(include_url=False), "path": source},
            )

        tables = ComplianceTables(schema_version=schema.schema_version)
        self._fill_clauses(schema, catalog, tables)
        self._fill_documents(schema, catalog, tables)

        logger.debug("Loaded %d compliance rows from %s", tables.entry_count, source or "<data>")
        return tables

    def _fill_clauses(
        self,
        schema: CompliancePackSchema,
        catalog: Optional[SessionCatalog],
        tables: ComplianceTables,
    ) -> None:
        for session_id, section in schema.work_item_compliance.items():
            for entry in self._entries(session_id, section, ClauseEntrySchema, "work_item_compliance"):
                key = self._resolve_key(session_id, entry, catalog)
                if key is None:
                    continue
                tables.clauses.setdefault(session_id, {})[key] = {
                    ReferenceColumn.ISO_9001: tuple(entry.iso_9001_2015),
                    ReferenceColumn.ISO_27001_CLAUSES: tuple(entry.iso_iec_27001_2022_clauses),
                    ReferenceColumn.ISO_27001_ANNEX_A: tuple(entry.iso_iec_27001_2022_annexA),
                    ReferenceColumn.ISO_27701: tuple(entry.iso_iec_27701_2019_clauses),
                }

    def _fill_documents(
        self,
        schema: CompliancePackSchema,
        catalog: Optional[SessionCatalog],
        tables: ComplianceTables,
    ) -> None:
        for session_id, section in schema.work_item_documentation.items():
            for entry in self._entries(session_id, section, DocumentEntrySchema, "work_item_documentation"):
                key = self._resolve_key(session_id, entry, catalog)
                if key is None:
                    continue
                tables.documents.setdefault(session_id, {})[key] = tuple(entry.document_types)

    def _entries(self, session_id: str, section: Any, entry_cls: type, table: str) -> list:
        """Parse one session section; a list of entries or a mapping of item key to entry."""
        if isinstance(section, dict):
            raw = [
                {**(value if isinstance(value, dict) else {}), "item": str(key)}
                for key, value in section.items()
            ]
        elif isinstance(section, list):
            raw = section
        else:
            logger.warning(
                "%s[%s] is neither a list nor a mapping; ignoring it",
                table, session_id,
            )
            return []

        entries = []
        for position, item in enumerate(raw):
            try:
                entries.append(entry_cls.model_validate(item))
            except ValidationError as e:
                self._reject(
                    f"{table}[{session_id}] entry {position} is malformed",
                    {"session_id": session_id, "errors": e.errors(include_url=False)},
                )
        return entries

    def _resolve_key(
        self,
        session_id: str,
        entry: Any,
        catalog: Optional[SessionCatalog],
    ) -> Optional[str]:
        """Translate an entry's address to a declared work item key."""
        if catalog is None:
            if entry.item is not None:
                return entry.item
            self._reject(
                f"Positional entry {session_id}[{entry.index}] needs a session catalog",
                {"session_id": session_id, "index": entry.index},
            )
            return None

        definition = catalog.get(session_id)
        if definition is None:
            self._reject(
                f"Compliance entry for unknown session '{session_id}'",
                {"session_id": session_id},
            )
            return None

        if entry.item is not None:
            if any(w.key == entry.item for w in definition.work_items):
                return entry.item
            self._reject(
                f"Session '{session_id}' has no work item '{entry.item}'",
                {"session_id": session_id, "item": entry.item},
            )
            return None

        key = definition.item_key(entry.index)
        if key is None:
            self._reject(
                f"Session '{session_id}' has no work item at index {entry.index}",
                {"session_id": session_id, "index": entry.index},
            )
        return key

    def _reject(self, message: str, details: dict[str, Any]) -> None:
        if self.strict_compliance:
            raise PackValidationError(message=message, details=details)
        logger.warning("%s; entry dropped", message)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _check_version(self, data: dict[str, Any], source: Optional[str]) -> None:
        if self.strict_version and not check_schema_version(data):
            pack_version = data.get("schema_version", "unknown")
            raise PackVersionMismatch(
                message=f"Schema version mismatch: pack has {pack_version}, expected {SCHEMA_VERSION}",
                details={
                    "pack_version": pack_version,
                    "expected_version": SCHEMA_VERSION,
                    "path": source,
                },
            )

    def _read(self, path: Path) -> Any:
        try:
            return read_pack_file(path)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise PackLoadError(
                message=f"Failed to load pack: {e}",
                details={"path": str(path), "error": str(e)},
            )


# =============================================================================
# Convenience Functions
# =============================================================================

def read_pack_file(path: Path) -> Any:
    """Load data from a YAML or JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() in {".yaml", ".yml"}:
            return yaml.safe_load(f)
        elif path.suffix.lower() == ".json":
            return json.load(f)
        else:
            content = f.read()
            try:
                return yaml.safe_load(content)
            except yaml.YAMLError:
                return json.loads(content)


def _parse_string(content: str, format: str) -> Any:
    try:
        if format.lower() == "json":
            return json.loads(content)
        return yaml.safe_load(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise PackLoadError(
            message=f"Failed to parse pack: {e}",
            details={"format": format, "error": str(e)},
        )


def load_sessions_pack(path: Source, strict_conditions: bool = False) -> SessionCatalog:
    """
    Load a sessions pack from a file.

    Convenience function that creates a temporary loader.
    """
    return PackLoader(strict_conditions=strict_conditions).load_sessions(path)


def load_sessions_pack_from_string(
    content: str,
    format: str = "yaml",
    strict_conditions: bool = False,
) -> SessionCatalog:
    """
    Load a sessions pack from a string.

    Args:
        content: YAML or JSON string
        format: "yaml" or "json"
        strict_conditions: Reject unknown condition names

    Returns:
        SessionCatalog
    """
    loader = PackLoader(strict_conditions=strict_conditions)
    return loader.load_sessions_data(_parse_string(content, format))


def load_compliance_pack(
    path: Source,
    catalog: Optional[SessionCatalog] = None,
    strict: bool = False,
) -> ComplianceTables:
    """Load a compliance pack from a file."""
    return PackLoader(strict_compliance=strict).load_compliance(path, catalog)


def load_compliance_pack_from_string(
    content: str,
    catalog: Optional[SessionCatalog] = None,
    format: str = "yaml",
    strict: bool = False,
) -> ComplianceTables:
    """Load a compliance pack from a string."""
    loader = PackLoader(strict_compliance=strict)
    return loader.load_compliance_data(_parse_string(content, format), catalog)


def default_pack_path(name: str) -> Path:
    """Filesystem path of a pack bundled with the package."""
    return Path(str(resources.files(DATA_PACKAGE).joinpath(name)))


def load_default_packs(strict_conditions: bool = False) -> tuple[SessionCatalog, ComplianceTables]:
    """
    Load the bundled sessions and compliance packs.

    Returns:
        (catalog, tables)
    """
    loader = PackLoader(strict_conditions=strict_conditions)
    catalog = loader.load_sessions(default_pack_path(DEFAULT_SESSIONS_FILE))
    tables = loader.load_compliance(default_pack_path(DEFAULT_COMPLIANCE_FILE), catalog)
    return catalog, tables
