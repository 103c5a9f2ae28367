"""
ScopeGate CLI

Command-line interface for classifying a change and resolving the
governance sessions it requires.

Usage:
    scopegate assess --scope scope.yaml
    scopegate assess --scope scope.json --json
    scopegate override --scope scope.yaml --session 02 --status not-applicable --reason "No data"
    scopegate clear-override --scope scope.yaml --session 02
    scopegate validate --sessions sessions.yaml --compliance compliance.yaml
    scopegate clauses --scope scope.yaml --only-required
    scopegate info

Exit Codes:
    0   OK              - Command succeeded
    1   FAILED          - Validation or persistence failure
    2   USAGE_ERROR     - Bad arguments or unreadable input
"""
from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence

import yaml

from . import __version__
from .canon import compute_config_hash
from .config import Settings
from .engine import (
    ComplianceEnrichment,
    RiskScorer,
    SessionRulesEngine,
    build_clause_index,
    compliance_considerations,
)
from .exceptions import InvalidScopeError, ScopeGateError
from .logging_utils import configure_logging
from .models import ComplianceTables, RiskAssessment, ScopeAnswers, SessionCatalog
from .overrides import OverrideResult, OverrideStore, select_strategy
from .packs import (
    DEFAULT_COMPLIANCE_FILE,
    DEFAULT_SESSIONS_FILE,
    PackLoader,
    default_pack_path,
    read_pack_file,
)

logger = logging.getLogger(__name__)


class ExitCode:
    """Exit codes for scripting."""
    OK = 0
    FAILED = 1
    USAGE_ERROR = 2


# ============================================================================
# OUTPUT FORMATTING
# ============================================================================

class Colors:
    """ANSI color codes for terminal output."""
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD = '\033[1m'
    END = '\033[0m'

    @classmethod
    def disable(cls):
        cls.BLUE = ''
        cls.CYAN = ''
        cls.GREEN = ''
        cls.YELLOW = ''
        cls.RED = ''
        cls.BOLD = ''
        cls.END = ''


def print_header(text: str):
    print(f"\n{Colors.BOLD}{Colors.CYAN}{'='*60}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}{text}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}{'='*60}{Colors.END}")


def print_success(text: str):
    print(f"{Colors.GREEN}[OK] {text}{Colors.END}")


def print_error(text: str):
    print(f"{Colors.RED}[ERROR] {text}{Colors.END}", file=sys.stderr)


def print_warning(text: str):
    print(f"{Colors.YELLOW}[WARN] {text}{Colors.END}")


def print_kv(key: str, value: str, indent: int = 0):
    spaces = "  " * indent
    print(f"{spaces}{Colors.BOLD}{key}:{Colors.END} {value}")


def json_dumps(obj: Any, indent: int = 2) -> str:
    """Serialize object to JSON string."""
    return json.dumps(obj, indent=indent, ensure_ascii=False, default=str)


STATUS_COLORS = {
    "required": "RED",
    "optional": "BLUE",
    "not-applicable": "YELLOW",
}


def print_sessions(sessions) -> None:
    for session in sessions:
        color = getattr(Colors, STATUS_COLORS[session.status.value])
        marker = " (override)" if session.source.value == "override" else ""
        print(
            f"  {Colors.BOLD}{session.id}{Colors.END} {session.title}: "
            f"{color}{session.status.value}{Colors.END}{marker}"
        )
        if session.reason:
            print(f"      {session.reason}")


def print_risk(risk: RiskAssessment) -> None:
    print_kv("Risk", f"{risk.label.value} (score {risk.score})")
    if risk.forced_by:
        print_kv("Forced by", risk.forced_by, indent=1)
    for driver in risk.drivers:
        print(f"    - {driver}")


# ============================================================================
# RUNTIME
# ============================================================================

@dataclass
class Runtime:
    """Loaded configuration and the services built on it."""
    settings: Settings
    catalog: SessionCatalog
    tables: ComplianceTables
    store: OverrideStore
    engine: SessionRulesEngine
    scorer: RiskScorer


def resolve_settings(args) -> Settings:
    settings = Settings.from_env()
    overrides: dict[str, Any] = {}
    if getattr(args, "sessions", None):
        overrides["sessions_file"] = Path(args.sessions)
    if getattr(args, "compliance", None):
        overrides["compliance_file"] = Path(args.compliance)
    if getattr(args, "persist_mode", None):
        overrides["persist_mode"] = args.persist_mode
    if getattr(args, "strict", False):
        overrides["strict_conditions"] = True
    if not overrides:
        return settings
    return dataclasses.replace(settings, **overrides)


def build_runtime(settings: Settings, strict_compliance: bool = False) -> Runtime:
    """Load the packs and wire the engine, store and scorer."""
    loader = PackLoader(
        strict_conditions=settings.strict_conditions,
        strict_compliance=strict_compliance,
    )
    sessions_path = settings.sessions_file or default_pack_path(DEFAULT_SESSIONS_FILE)
    compliance_path = settings.compliance_file or default_pack_path(DEFAULT_COMPLIANCE_FILE)

    catalog = loader.load_sessions(sessions_path)
    tables = loader.load_compliance(compliance_path, catalog)

    store = OverrideStore(catalog, persistence=select_strategy(settings))
    engine = SessionRulesEngine(
        catalog,
        overrides=store,
        enrichment=ComplianceEnrichment(tables, catalog),
    )
    return Runtime(settings, catalog, tables, store, engine, RiskScorer())


def load_scope(path: str) -> ScopeAnswers:
    """Read scope answers from a YAML or JSON file."""
    data = read_pack_file(Path(path))
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidScopeError(message=f"Scope file must contain a mapping: {path}")
    return ScopeAnswers.from_dict(data)


# ============================================================================
# COMMANDS
# ============================================================================

def cmd_assess(args, runtime: Runtime) -> int:
    """Score a scope and resolve its sessions."""
    scope = load_scope(args.scope)
    risk = runtime.scorer.score(scope)
    sessions = runtime.engine.calculate_sessions(scope, risk)
    logger.info(
        "Assessed scope %s", args.scope,
        extra={"risk_label": risk.label.value, "risk_score": risk.score},
    )

    if args.json:
        print(json_dumps({
            "risk": risk.to_dict(),
            "sessions": [s.to_dict() for s in sessions],
            "considerations": {
                standard.value: items
                for standard, items in compliance_considerations(scope).items()
            },
        }))
        return ExitCode.OK

    print_header("ScopeGate - Assessment")
    if not scope.is_complete():
        print_warning("Scope has unanswered categorical fields")
    print_risk(risk)
    print()
    required = sum(1 for s in sessions if s.is_required)
    print(f"{Colors.BOLD}Sessions ({required} of {len(sessions)} required):{Colors.END}")
    print_sessions(sessions)

    print()
    for standard, items in compliance_considerations(scope).items():
        print(f"{Colors.BOLD}{standard.display_name}:{Colors.END}")
        for item in items:
            print(f"    - {item}")
    return ExitCode.OK


def _report_override(args, result: OverrideResult) -> int:
    if args.json:
        print(json_dumps(result.to_dict()))
    elif not result.ok:
        print_error(result.message)
    else:
        print_success(result.message)
        if result.persisted is not None:
            if result.persisted.ok:
                print_success(result.persisted.message)
            else:
                print_warning(f"Not persisted: {result.persisted.message}")
        print()
        print_sessions(result.sessions)

    if not result.ok or (result.persisted is not None and not result.persisted.ok):
        return ExitCode.FAILED
    return ExitCode.OK


def cmd_override(args, runtime: Runtime) -> int:
    """Force a session status."""
    scope = load_scope(args.scope)
    risk = runtime.scorer.score(scope)
    result = runtime.store.apply_override(
        runtime.engine, args.session, args.status, args.reason, scope, risk,
    )
    return _report_override(args, result)


def cmd_clear_override(args, runtime: Runtime) -> int:
    """Remove a forced session status."""
    scope = load_scope(args.scope)
    risk = runtime.scorer.score(scope)
    result = runtime.store.clear_override(runtime.engine, args.session, scope, risk)
    return _report_override(args, result)


def cmd_validate(args, runtime: Runtime) -> int:
    """Report on configuration that loaded successfully."""
    config_hash = compute_config_hash(runtime.catalog, runtime.tables)
    if args.json:
        print(json_dumps({
            "valid": True,
            "sessions": len(runtime.catalog),
            "compliance_rows": runtime.tables.entry_count,
            "overrides": len(runtime.store),
            "config_hash": config_hash,
        }))
        return ExitCode.OK

    print_header("ScopeGate - Validate Configuration")
    print_success("Configuration is valid")
    print_kv("Sessions", str(len(runtime.catalog)))
    print_kv("Compliance rows", str(runtime.tables.entry_count))
    print_kv("Stored overrides", str(len(runtime.store)))
    print_kv("Config hash", config_hash[:32] + "...")
    return ExitCode.OK


def cmd_clauses(args, runtime: Runtime) -> int:
    """Print the clause index for a scope."""
    scope = load_scope(args.scope)
    risk = runtime.scorer.score(scope)
    sessions = runtime.engine.calculate_sessions(scope, risk)
    index = build_clause_index(sessions, scope, only_required=args.only_required)

    if args.json:
        print(json_dumps({
            column.value: [g.to_dict() for g in groups]
            for column, groups in index.items()
        }))
        return ExitCode.OK

    print_header("ScopeGate - Clause Index")
    for column, groups in index.items():
        print(f"\n{Colors.BOLD}{column.value} ({len(groups)} clauses){Colors.END}")
        for group in groups:
            print(
                f"  {group.code}: {len(group.required_items)} required, "
                f"{len(group.optional_items)} optional"
            )
    return ExitCode.OK


def cmd_info(args, runtime: Runtime) -> int:
    """Show version and configuration sources."""
    settings = runtime.settings
    info = {
        "version": __version__,
        "sessions_file": str(settings.sessions_file or default_pack_path(DEFAULT_SESSIONS_FILE)),
        "compliance_file": str(settings.compliance_file or default_pack_path(DEFAULT_COMPLIANCE_FILE)),
        "persistence": runtime.store.persistence.name if runtime.store.persistence else None,
        "session_ids": runtime.catalog.session_ids,
        "config_hash": compute_config_hash(runtime.catalog, runtime.tables),
    }
    if args.json:
        print(json_dumps(info))
        return ExitCode.OK

    print_header("ScopeGate - Info")
    print_kv("Version", info["version"])
    print_kv("Sessions file", info["sessions_file"])
    print_kv("Compliance file", info["compliance_file"])
    print_kv("Persistence", str(info["persistence"]))
    print_kv("Sessions", ", ".join(info["session_ids"]))
    print_kv("Config hash", info["config_hash"][:32] + "...")
    return ExitCode.OK


# ============================================================================
# MAIN
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scopegate",
        description="ScopeGate - risk classification and governance session rules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit Codes:
  0   OK           Command succeeded
  1   FAILED       Validation or persistence failure
  2   USAGE_ERROR  Bad arguments or unreadable input

Examples:
  scopegate assess --scope scope.yaml
  scopegate override --scope scope.yaml --session 02 --status not-applicable --reason "No data"
  scopegate validate --sessions sessions.yaml --compliance compliance.yaml
        """
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", help="Override SCOPEGATE_LOG_LEVEL")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--sessions", help="Sessions pack (YAML/JSON)")
    common.add_argument("--compliance", help="Compliance pack (YAML/JSON)")
    common.add_argument("--json", action="store_true", help="Machine-readable output")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    assess_parser = subparsers.add_parser("assess", parents=[common], help="Score a scope and resolve sessions")
    assess_parser.add_argument("--scope", "-s", required=True, help="Scope answers file")
    assess_parser.set_defaults(func=cmd_assess)

    override_parser = subparsers.add_parser("override", parents=[common], help="Force a session status")
    override_parser.add_argument("--scope", "-s", required=True, help="Scope answers file")
    override_parser.add_argument("--session", required=True, help="Session id")
    override_parser.add_argument(
        "--status", required=True,
        choices=["required", "optional", "not-applicable"],
    )
    override_parser.add_argument("--reason", default="", help="Reason shown for the session")
    override_parser.add_argument(
        "--persist-mode", choices=["auto", "file", "prompt", "snapshot"],
        help="Override SCOPEGATE_PERSIST_MODE",
    )
    override_parser.set_defaults(func=cmd_override)

    clear_parser = subparsers.add_parser("clear-override", parents=[common], help="Remove a forced status")
    clear_parser.add_argument("--scope", "-s", required=True, help="Scope answers file")
    clear_parser.add_argument("--session", required=True, help="Session id")
    clear_parser.add_argument(
        "--persist-mode", choices=["auto", "file", "prompt", "snapshot"],
        help="Override SCOPEGATE_PERSIST_MODE",
    )
    clear_parser.set_defaults(func=cmd_clear_override)

    validate_parser = subparsers.add_parser("validate", parents=[common], help="Validate configuration packs")
    validate_parser.add_argument(
        "--strict", action="store_true",
        help="Reject unknown conditions and unattributable compliance entries",
    )
    validate_parser.set_defaults(func=cmd_validate)

    clauses_parser = subparsers.add_parser("clauses", parents=[common], help="Show the clause index")
    clauses_parser.add_argument("--scope", "-s", required=True, help="Scope answers file")
    clauses_parser.add_argument("--only-required", action="store_true", help="Only clauses with required items")
    clauses_parser.set_defaults(func=cmd_clauses)

    info_parser = subparsers.add_parser("info", parents=[common], help="Show configuration information")
    info_parser.set_defaults(func=cmd_info)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    if not sys.stdout.isatty():
        Colors.disable()

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return ExitCode.USAGE_ERROR

    try:
        settings = resolve_settings(args)
    except ScopeGateError as e:
        print_error(str(e))
        return ExitCode.USAGE_ERROR
    configure_logging(settings, level=args.log_level)

    try:
        runtime = build_runtime(settings, strict_compliance=getattr(args, "strict", False))
    except ScopeGateError as e:
        if getattr(args, "json", False):
            print(json_dumps({"valid": False, "error": e.to_dict()}))
        else:
            print_error(str(e))
            for key, value in e.details.items():
                print_kv(key, str(value), indent=1)
        return ExitCode.FAILED

    try:
        return args.func(args, runtime)
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        print_error(f"Cannot read input: {e}")
        return ExitCode.USAGE_ERROR
    except InvalidScopeError as e:
        print_error(str(e))
        return ExitCode.USAGE_ERROR
    except ScopeGateError as e:
        print_error(str(e))
        return ExitCode.FAILED


if __name__ == "__main__":
    sys.exit(main())
