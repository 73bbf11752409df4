# tests/test_logging.py
import pytest
import structlog
import json
import logging
from interview_assistant.core.config import EnvironmentType
from interview_assistant.core.logging import log_level, setup_logging

def test_logging_setup(settings, capsys):
    """Test logging configuration."""
    setup_logging(settings)
    logger = structlog.get_logger()
    assert logger is not None

    # Log a test message
    logger.info("test message", candidate_id="abc")

    # Capture the output
    captured = capsys.readouterr()
    output = captured.out.strip()

    # Testing environment renders JSON
    try:
        log_dict = json.loads(output)
    except json.JSONDecodeError:
        pytest.fail(f"Log output is not valid JSON: {output}")
    assert log_dict["event"] == "test message"
    assert log_dict["level"] == "info"
    assert log_dict["candidate_id"] == "abc"
    assert "timestamp" in log_dict

def test_debug_filtered_in_production(settings, capsys):
    production = settings.model_copy(update={"ENVIRONMENT": EnvironmentType.PRODUCTION})
    setup_logging(production)
    structlog.get_logger().debug("hidden")
    structlog.get_logger().info("shown")

    output = capsys.readouterr().out
    assert "hidden" not in output
    assert "shown" in output

def test_log_level_setting_filters(settings, capsys):
    quiet = settings.model_copy(update={"LOG_LEVEL": "WARNING"})
    setup_logging(quiet)
    structlog.get_logger().info("routine")
    structlog.get_logger().warning("unusual")

    output = capsys.readouterr().out
    assert "routine" not in output
    assert "unusual" in output

@pytest.mark.parametrize("environment, configured, expected", [
    (EnvironmentType.DEVELOPMENT, "DEBUG", logging.DEBUG),
    (EnvironmentType.TESTING, "ERROR", logging.ERROR),
    (EnvironmentType.PRODUCTION, "DEBUG", logging.INFO),
    (EnvironmentType.PRODUCTION, "WARNING", logging.WARNING),
])
def test_log_level(settings, environment, configured, expected):
    configured_settings = settings.model_copy(update={"ENVIRONMENT": environment, "LOG_LEVEL": configured})
    assert log_level(configured_settings) == expected
