"""Tests for logger utility."""

import logging

from collabbot.config import Settings
from collabbot.utils import logger as logger_module
from collabbot.utils.logger import setup_logger, get_app_logger, init_app_logger


class TestSetupLogger:
    """SUT: setup_logger"""

    def test_returns_logger(self):
        """Should return a Logger instance."""
        logger = setup_logger("collab_test_returns")
        assert isinstance(logger, logging.Logger)

    def test_with_level(self):
        """Setting DEBUG level should take effect."""
        logger = setup_logger("collab_test_level", log_level="DEBUG")
        assert logger.level == logging.DEBUG

    def test_no_duplicate_handlers(self):
        """Calling multiple times should not add duplicate handlers."""
        name = "collab_test_dup"
        logger1 = setup_logger(name)
        handler_count = len(logger1.handlers)
        logger2 = setup_logger(name)
        assert len(logger2.handlers) == handler_count
        assert logger1 is logger2

    def test_file_handler(self, tmp_path):
        """A log file path adds a file handler and creates its directory."""
        log_file = tmp_path / "logs" / "bot.log"
        logger = setup_logger("collab_test_file", log_file=str(log_file))
        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
        assert log_file.parent.exists()


class TestGetAppLogger:
    """SUT: get_app_logger"""

    def test_default(self):
        """Should return a logger even when not explicitly initialized."""
        logger = get_app_logger()
        assert isinstance(logger, logging.Logger)
        assert logger.name == "collabbot"

    def test_after_init(self, monkeypatch):
        """After init_app_logger the configured logger is returned."""
        monkeypatch.setattr(logger_module, "app_logger", None)
        configured = init_app_logger(Settings(_env_file=None, log_level="WARNING"))
        assert get_app_logger() is configured
        assert configured.level == logging.WARNING

    def test_component_child(self):
        """A component name gives a child of the app logger."""
        logger = get_app_logger("search")
        assert logger.name == "collabbot.search"
        assert logger.parent is get_app_logger()

    def test_quiets_http_libraries(self, monkeypatch):
        """HTTP client logging is raised to WARNING unless debugging."""
        monkeypatch.setattr(logger_module, "app_logger", None)
        init_app_logger(Settings(_env_file=None, log_level="INFO"))
        assert logging.getLogger("httpx").level == logging.WARNING

        init_app_logger(Settings(_env_file=None, log_level="DEBUG"))
        assert logging.getLogger("httpx").level == logging.DEBUG
        init_app_logger(Settings(_env_file=None, log_level="INFO"))
