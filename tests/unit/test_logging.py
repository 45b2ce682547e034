"""Unit tests for logging configuration."""

import logging

import pytest
import structlog

from src.shared.config.logging import (
    add_service_name,
    build_processors,
    configure_logging,
    get_logger,
)
from src.shared.config.settings import Settings


@pytest.fixture
def restore_root_level():
    root = logging.getLogger()
    level = root.level
    yield root
    root.setLevel(level)


class TestLogging:
    """Test suite for logging configuration."""

    def test_configure_logging_sets_up_structlog(self) -> None:
        """Test that configure_logging sets up structlog correctly."""
        configure_logging()

        # Can be BoundLogger or lazy proxy
        logger = structlog.get_logger("test")
        assert hasattr(logger, "bind")
        assert hasattr(logger, "info")
        assert hasattr(logger, "warning")

    def test_logger_can_log_events(self) -> None:
        """Test that logger emits events with keyword context without errors."""
        configure_logging()
        logger = get_logger("test_module")

        logger.debug("factor_input_missing", factor="transport_wind")
        logger.info("prediction_scored", probability=92)
        logger.warning("final_lock_synthesized", target_date="2026-10-20")

    def test_level_applied_on_reconfigure(self, restore_root_level) -> None:
        """Test a second configuration changes the root level."""
        configure_logging(Settings(_env_file=None, log_level="ERROR"))
        configure_logging(Settings(_env_file=None, log_level="DEBUG"))

        assert restore_root_level.level == logging.DEBUG

    def test_json_format_renders_json(self) -> None:
        """Test the json format ends the chain with the JSON renderer."""
        processors = build_processors(Settings(_env_file=None, log_format="json"))

        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert add_service_name in processors

    def test_console_format_renders_console(self) -> None:
        """Test the console format ends the chain with the console renderer."""
        processors = build_processors(Settings(_env_file=None, log_format="console"))

        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_add_service_name_tags_events(self) -> None:
        """Test that the service processor adds the service tag."""
        event = add_service_name(None, "info", {"event": "prediction_scored"})

        assert event["service"] == "katabatic"

    def test_add_service_name_keeps_existing_tag(self) -> None:
        """Test that an explicit service tag is not overwritten."""
        event = add_service_name(None, "info", {"event": "x", "service": "scheduler"})

        assert event["service"] == "scheduler"

    def test_events_captured_with_context(self) -> None:
        """Test that events carry their keyword context."""
        with structlog.testing.capture_logs() as logs:
            get_logger("test_module").info("lifecycle_transition", state="locked-evening")

        assert logs[0]["event"] == "lifecycle_transition"
        assert logs[0]["state"] == "locked-evening"
