"""Tests for logging setup and environment settings."""

import io
import logging

import pytest
from rich.console import Console

from mocksmith.logging_config import (
    PHASE_LEVEL,
    STEP_LEVEL,
    UPDATE_LEVEL,
    Logger,
    SeparatorRichHandler,
    get_logger,
    setup_logging,
)
from mocksmith.settings import Settings


@pytest.fixture
def restore_logging():
    """Put the mocksmith logger back the way it was after each test."""
    logger = logging.getLogger("mocksmith")
    handlers = logger.handlers[:]
    level = logger.level
    yield
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)


def captured_console():
    return Console(file=io.StringIO(), width=120, color_system=None)


class TestLogging:
    """Tests for setup_logging and the custom levels."""

    def test_level_names(self):
        assert logging.getLevelName(PHASE_LEVEL) == "PHASE"
        assert logging.getLevelName(STEP_LEVEL) == "STEP"
        assert logging.getLevelName(UPDATE_LEVEL) == "UPDATE"

    def test_get_logger_has_helpers(self):
        logger = get_logger("mocksmith.tests")

        assert isinstance(logger, Logger)
        assert callable(logger.phase)

    def test_phase_and_step_separators(self, restore_logging):
        console = captured_console()
        logger = setup_logging(console=console)

        get_logger("mocksmith.tests").phase("Generating seed data")
        get_logger("mocksmith.tests").step("owners")
        output = console.file.getvalue()

        assert isinstance(logger.handlers[0], SeparatorRichHandler)
        assert "═" in output
        assert "─" in output
        assert "Generating seed data" in output

    def test_level_filters_records(self, restore_logging):
        console = captured_console()
        setup_logging(level=logging.WARNING, console=console)

        logger = get_logger("mocksmith.tests")
        logger.update("hidden update")
        logger.warning("visible warning")
        output = console.file.getvalue()

        assert "hidden update" not in output
        assert "visible warning" in output

    def test_setup_replaces_handlers(self, restore_logging):
        setup_logging(console=captured_console())
        logger = setup_logging(console=captured_console())

        assert len(logger.handlers) == 1

    def test_log_file(self, restore_logging, tmp_path):
        log_file = tmp_path / "mocksmith.log"
        logger = setup_logging(log_file=str(log_file), console=captured_console())

        get_logger("mocksmith.tests").update("owners: 5 items")
        for handler in logger.handlers:
            handler.flush()

        content = log_file.read_text()
        assert "UPDATE" in content
        assert "owners: 5 items" in content

    def test_debugf(self, restore_logging):
        console = captured_console()
        setup_logging(level=logging.DEBUG, console=console)

        get_logger("mocksmith.tests").debugf({"resource": "pets"})

        assert "pets" in console.file.getvalue()


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.items_per_resource == 5
        assert settings.include_resources == []
        assert settings.seed is None
        assert settings.faker_locale == "en_US"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("MOCKSMITH_ITEMS_PER_RESOURCE", "3")
        monkeypatch.setenv("MOCKSMITH_INCLUDE_RESOURCES", '["pets", "owners"]')
        monkeypatch.setenv("MOCKSMITH_SEED", "1234")

        settings = Settings(_env_file=None)

        assert settings.items_per_resource == 3
        assert settings.include_resources == ["pets", "owners"]
        assert settings.seed == 1234

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("MOCKSMITH_FAKER_LOCALE=de_DE\nMOCKSMITH_MAX_DEPTH=2\n")

        settings = Settings(_env_file=env_file)

        assert settings.faker_locale == "de_DE"
        assert settings.max_depth == 2
