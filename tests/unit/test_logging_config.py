"""
Unit tests for structlog configuration.
"""

import json
import logging

import pytest
import structlog

from hybrid_inference.logging_config import configure_logging


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop the handler bound to the captured stdout after each test."""
    yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


def _lines(capsys) -> list[str]:
    return [line for line in capsys.readouterr().out.splitlines() if line.strip()]


class TestConfigureLogging:

    @pytest.mark.parametrize("environment", ["development", "production", "staging"])
    def test_every_environment_configures(self, capsys, environment):
        configure_logging("INFO", environment)

        assert "Logging configured" in capsys.readouterr().out
        assert len(logging.getLogger().handlers) == 1

    def test_production_emits_json_with_secrets_masked(self, capsys):
        configure_logging("INFO", "production")
        capsys.readouterr()

        structlog.get_logger("test").info("provider_call", provider="gemini", api_key="sk-secret")

        event = json.loads(_lines(capsys)[-1])
        assert event["event"] == "provider_call"
        assert event["api_key"] == "***"
        assert event["app"] == "hybrid-inference-layer"
        assert "sk-secret" not in json.dumps(event)

    def test_production_renders_exceptions(self, capsys):
        configure_logging("INFO", "production")
        capsys.readouterr()

        try:
            raise RuntimeError("engine exploded")
        except RuntimeError:
            structlog.get_logger("test").exception("local_generation_failed")

        event = json.loads(_lines(capsys)[-1])
        assert "engine exploded" in event["exception"]

    def test_development_renders_exceptions(self, capsys):
        configure_logging("DEBUG", "development")
        capsys.readouterr()

        try:
            raise RuntimeError("engine exploded")
        except RuntimeError:
            structlog.get_logger("test").exception("local_generation_failed")

        out = capsys.readouterr().out
        assert "local_generation_failed" in out
        assert "engine exploded" in out

    def test_reconfiguring_replaces_handler(self, capsys):
        configure_logging("INFO", "development")
        configure_logging("WARNING", "development")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, capsys):
        configure_logging("CHATTY", "production")

        assert logging.getLogger().level == logging.INFO

    def test_third_party_loggers_quieted(self, capsys):
        configure_logging("DEBUG", "production")

        assert logging.getLogger("httpx").level == logging.WARNING
