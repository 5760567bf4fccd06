"""Tests for logging setup and redaction."""
import json
import logging

import pytest
import structlog

from faceauth.core.logging import REDACTED, get_logger, redact_sensitive_fields, setup_logging


@pytest.fixture
def restore_logging():
    root_logger = logging.getLogger()
    handlers, level = list(root_logger.handlers), root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    structlog.reset_defaults()


class TestRedaction:
    """Test suite for redact_sensitive_fields."""

    def test_masks_key_material_and_vectors(self):
        event = {
            "event": "Envelope decrypted",
            "base_key": "pwd-manager-temp-a@b.com-secret",
            "derived_key": b"\x00" * 32,
            "descriptor": [0.1, 0.2],
            "attempt": 1,
        }

        result = redact_sensitive_fields(None, "info", event)

        assert result["base_key"] == REDACTED
        assert result["derived_key"] == REDACTED
        assert result["descriptor"] == REDACTED
        assert result["attempt"] == 1
        assert result["event"] == "Envelope decrypted"

    def test_field_names_are_case_insensitive(self):
        result = redact_sensitive_fields(None, "info", {"event": "x", "Plaintext": "aGVsbG8="})

        assert result["Plaintext"] == REDACTED

    def test_nested_dicts_are_masked(self):
        result = redact_sensitive_fields(None, "info", {"event": "x", "details": {"key": "k", "attempts": 2}})

        assert result["details"] == {"key": REDACTED, "attempts": 2}

    def test_similar_names_are_kept(self):
        result = redact_sensitive_fields(None, "info", {"event": "x", "descriptor_length": 128})

        assert result["descriptor_length"] == 128


class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_json_output_is_redacted(self, restore_logging, capsys):
        setup_logging(environment="production", level="debug")
        capsys.readouterr()

        get_logger("faceauth.tests").info("Key derived", base_key="secret-base-key", iterations=1000)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "Key derived"
        assert record["base_key"] == REDACTED
        assert record["iterations"] == 1000
        assert "secret-base-key" not in line

    def test_quiets_model_runtime_loggers(self, restore_logging):
        setup_logging(environment="production", level="debug")

        assert logging.getLogger("onnxruntime").level == logging.WARNING
        assert logging.getLogger().level == logging.DEBUG
