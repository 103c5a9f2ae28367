"""
Tests for settings, logging setup and configuration fingerprints.
"""
import io
import json
import logging
from pathlib import Path

import pytest

from scopegate.canon import canonical_json, compute_config_hash, content_hash
from scopegate.config import Settings
from scopegate.exceptions import ScopeGateError
from scopegate.logging_utils import configure_logging
from scopegate.models import ManualOverride, SessionStatus
from scopegate.packs import PackLoader


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.sessions_file is None
        assert settings.compliance_file is None
        assert settings.log_level == "INFO"
        assert settings.log_format == "text"
        assert settings.persist_mode == "auto"
        assert settings.snapshot_dir == Path(".")
        assert settings.strict_conditions is False

    def test_from_env(self):
        settings = Settings.from_env({
            "SCOPEGATE_SESSIONS_FILE": "/etc/scopegate/sessions.yaml",
            "SCOPEGATE_COMPLIANCE_FILE": "/etc/scopegate/compliance.yaml",
            "SCOPEGATE_LOG_LEVEL": "debug",
            "SCOPEGATE_LOG_FORMAT": "JSON",
            "SCOPEGATE_PERSIST_MODE": "Snapshot",
            "SCOPEGATE_SNAPSHOT_DIR": "/var/lib/scopegate",
            "SCOPEGATE_STRICT_CONDITIONS": "yes",
        })
        assert settings.sessions_file == Path("/etc/scopegate/sessions.yaml")
        assert settings.compliance_file == Path("/etc/scopegate/compliance.yaml")
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "json"
        assert settings.persist_mode == "snapshot"
        assert settings.snapshot_dir == Path("/var/lib/scopegate")
        assert settings.strict_conditions is True

    def test_invalid_persist_mode(self):
        with pytest.raises(ScopeGateError) as exc_info:
            Settings.from_env({"SCOPEGATE_PERSIST_MODE": "cloud"})
        assert exc_info.value.code == "SG_CONFIG_ERROR"

    def test_invalid_log_format(self):
        with pytest.raises(ScopeGateError):
            Settings(log_format="xml")


class TestLogging:
    def teardown_method(self):
        logger = logging.getLogger("scopegate")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)

    def test_json_format(self):
        stream = io.StringIO()
        configure_logging(Settings(log_format="json"), stream=stream)

        logging.getLogger("scopegate.engine").info(
            "Resolved", extra={"session_id": "02", "risk_label": "high"},
        )

        entry = json.loads(stream.getvalue().strip())
        assert entry["message"] == "Resolved"
        assert entry["logger"] == "scopegate.engine"
        assert entry["level"] == "INFO"
        assert entry["session_id"] == "02"
        assert entry["risk_label"] == "high"

    def test_text_format(self):
        stream = io.StringIO()
        configure_logging(Settings(), stream=stream)
        logging.getLogger("scopegate").warning("Careful")
        assert "WARNING scopegate: Careful" in stream.getvalue()

    def test_level_override(self):
        stream = io.StringIO()
        configure_logging(Settings(log_level="INFO"), stream=stream, level="error")
        logging.getLogger("scopegate").warning("Hidden")
        assert stream.getvalue() == ""

    def test_reconfigure_replaces_handler(self):
        configure_logging(Settings(), stream=io.StringIO())
        logger = configure_logging(Settings(), stream=io.StringIO())
        assert len(logger.handlers) == 1


class TestCanon:
    def test_canonical_json_sorted(self):
        assert canonical_json({"b": 1, "a": SessionStatus.OPTIONAL}) == '{"a":"optional","b":1}'

    def test_content_hash_length(self):
        assert len(content_hash({"a": 1})) == 64

    def test_config_hash_stable(self, catalog, tables):
        assert compute_config_hash(catalog, tables) == compute_config_hash(catalog, tables)

    def test_config_hash_covers_tables(self, catalog, tables):
        assert compute_config_hash(catalog, tables) != compute_config_hash(catalog)

    def test_config_hash_ignores_overrides(self, catalog):
        stored = catalog.to_dict(
            overrides={"02": ManualOverride("02", SessionStatus.NOT_APPLICABLE, "N/A")}
        )
        with_override = PackLoader().load_sessions_data(stored)
        assert with_override.initial_overrides()
        assert compute_config_hash(with_override) == compute_config_hash(catalog)
