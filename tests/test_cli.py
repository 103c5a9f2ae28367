"""
Tests for the scopegate command-line interface.

Validates:
- Each subcommand's exit code and JSON output
- Overrides are written back to a writable sessions file
- Snapshot persistence when no sessions file is configured
- Usage errors for missing or invalid scope input
"""
import json
import logging

import pytest
import yaml

from scopegate.cli import ExitCode, main
from scopegate.packs import DEFAULT_SESSIONS_FILE, default_pack_path, load_sessions_pack


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "SCOPEGATE_SESSIONS_FILE",
        "SCOPEGATE_COMPLIANCE_FILE",
        "SCOPEGATE_PERSIST_MODE",
        "SCOPEGATE_SNAPSHOT_DIR",
        "SCOPEGATE_STRICT_CONDITIONS",
        "SCOPEGATE_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SCOPEGATE_LOG_LEVEL", "WARNING")
    yield
    logger = logging.getLogger("scopegate")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def scope_file(tmp_path):
    path = tmp_path / "scope.yaml"
    path.write_text(
        yaml.safe_dump({
            "deliveryType": "new-product",
            "dataInvolved": "personal-common",
            "hasDeleteAction": True,
        }),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def sessions_copy(tmp_path):
    path = tmp_path / "sessions.yaml"
    path.write_text(default_pack_path(DEFAULT_SESSIONS_FILE).read_text(encoding="utf-8"), encoding="utf-8")
    return path


def run_json(capsys, *argv):
    code = main(list(argv))
    return code, json.loads(capsys.readouterr().out)


class TestAssess:
    def test_json(self, capsys, scope_file):
        code, output = run_json(capsys, "assess", "--scope", str(scope_file), "--json")

        assert code == ExitCode.OK
        assert output["risk"]["score"] == 10 + 15 + 12
        assert output["risk"]["label"] == "medium"
        assert len(output["sessions"]) == 12
        statuses = {s["id"]: s["status"] for s in output["sessions"]}
        assert statuses["02"] == "required"
        assert statuses["05"] == "required"
        assert statuses["12"] == "optional"
        assert set(output["considerations"]) == {
            "iso_9001_2015", "iso_iec_27001_2022", "iso_iec_27701_2019",
        }

    def test_text(self, capsys, scope_file):
        assert main(["assess", "--scope", str(scope_file)]) == ExitCode.OK
        out = capsys.readouterr().out
        assert "Risk: medium (score 37)" in out
        assert "Sessions (" in out
        assert "ISO 9001:2015" in out

    def test_json_scope_file(self, capsys, tmp_path):
        path = tmp_path / "scope.json"
        path.write_text(json.dumps({"dataInvolved": "children"}), encoding="utf-8")
        code, output = run_json(capsys, "assess", "--scope", str(path), "--json")
        assert code == ExitCode.OK
        assert output["risk"]["label"] == "high"
        assert output["risk"]["forced_by"] == "sensitive_data"

    def test_missing_scope_file(self, tmp_path):
        assert main(["assess", "--scope", str(tmp_path / "nope.yaml")]) == ExitCode.USAGE_ERROR

    def test_invalid_scope(self, tmp_path):
        path = tmp_path / "scope.yaml"
        path.write_text("dataInvolved: everything\n", encoding="utf-8")
        assert main(["assess", "--scope", str(path)]) == ExitCode.USAGE_ERROR

    def test_scope_not_a_mapping(self, tmp_path):
        path = tmp_path / "scope.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        assert main(["assess", "--scope", str(path)]) == ExitCode.USAGE_ERROR


class TestOverride:
    def test_override_written_to_sessions_file(self, capsys, scope_file, sessions_copy):
        code, output = run_json(
            capsys,
            "override", "--sessions", str(sessions_copy), "--scope", str(scope_file),
            "--session", "02", "--status", "not-applicable", "--reason", "N/A for this org",
            "--json",
        )

        assert code == ExitCode.OK
        assert output["ok"]
        assert output["persisted"]["ok"]
        session = next(s for s in output["sessions"] if s["id"] == "02")
        assert session["status"] == "not-applicable"
        assert session["source"] == "override"

        override = load_sessions_pack(sessions_copy).initial_overrides()["02"]
        assert override.reason == "N/A for this org"

    def test_clear_override(self, capsys, scope_file, sessions_copy):
        main([
            "override", "--sessions", str(sessions_copy), "--scope", str(scope_file),
            "--session", "02", "--status", "optional",
        ])
        capsys.readouterr()

        code, output = run_json(
            capsys,
            "clear-override", "--sessions", str(sessions_copy), "--scope", str(scope_file),
            "--session", "02", "--json",
        )

        assert code == ExitCode.OK
        assert load_sessions_pack(sessions_copy).initial_overrides() == {}

    def test_unknown_session(self, capsys, scope_file, sessions_copy):
        code, output = run_json(
            capsys,
            "override", "--sessions", str(sessions_copy), "--scope", str(scope_file),
            "--session", "99", "--status", "optional", "--json",
        )
        assert code == ExitCode.FAILED
        assert not output["ok"]

    def test_snapshot_when_no_sessions_file(self, capsys, monkeypatch, scope_file, tmp_path):
        snapshots = tmp_path / "snapshots"
        monkeypatch.setenv("SCOPEGATE_SNAPSHOT_DIR", str(snapshots))

        code, output = run_json(
            capsys,
            "override", "--scope", str(scope_file), "--session", "12",
            "--status", "required", "--persist-mode", "snapshot", "--json",
        )

        assert code == ExitCode.OK
        assert "replace the sessions configuration file manually" in output["persisted"]["message"]
        [snapshot] = list(snapshots.glob("sessions-*.yaml"))
        assert load_sessions_pack(snapshot).initial_overrides()["12"].status.value == "required"

    def test_invalid_status_is_usage_error(self, scope_file):
        with pytest.raises(SystemExit) as exc_info:
            main(["override", "--scope", str(scope_file), "--session", "02", "--status", "maybe"])
        assert exc_info.value.code == 2


class TestValidate:
    def test_bundled(self, capsys):
        code, output = run_json(capsys, "validate", "--json")
        assert code == ExitCode.OK
        assert output["valid"]
        assert output["sessions"] == 12
        assert output["compliance_rows"] == 120

    def test_strict_bundled(self):
        assert main(["validate", "--strict"]) == ExitCode.OK

    def test_invalid_sessions_file(self, capsys, tmp_path):
        path = tmp_path / "sessions.yaml"
        path.write_text("sessions:\n  - id: '01'\n", encoding="utf-8")
        code, output = run_json(capsys, "validate", "--sessions", str(path), "--json")
        assert code == ExitCode.FAILED
        assert not output["valid"]
        assert output["error"]["code"] == "SG_PACK_VALIDATION_ERROR"


class TestClausesAndInfo:
    def test_clauses(self, capsys, scope_file):
        code, output = run_json(capsys, "clauses", "--scope", str(scope_file), "--only-required", "--json")
        assert code == ExitCode.OK
        assert "iso_9001_2015" in output
        assert all(group["required_items"] for group in output["iso_9001_2015"])

    def test_info(self, capsys):
        code, output = run_json(capsys, "info", "--json")
        assert code == ExitCode.OK
        assert output["version"] == "0.1.0"
        assert len(output["config_hash"]) == 64
        assert output["session_ids"][0] == "01"


class TestUsage:
    def test_no_command(self, capsys):
        assert main([]) == ExitCode.USAGE_ERROR

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("SCOPEGATE_PERSIST_MODE", "cloud")
        assert main(["info"]) == ExitCode.USAGE_ERROR
