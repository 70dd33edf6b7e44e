"""
Tests for logging helpers.
"""
import logging

import pytest

from pyv2b.logging_config import PACKAGE_LOGGER, get_logger, setup_logging


@pytest.fixture
def restore_package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


def test_get_logger_namespaces_foreign_names():
    assert get_logger("scripts.report").name == "pyv2b.scripts.report"
    assert get_logger("pyv2b.resolver").name == "pyv2b.resolver"


def test_setup_logging_replaces_own_handlers(restore_package_logger):
    setup_logging("DEBUG")
    setup_logging(logging.INFO)
    own = [h for h in restore_package_logger.handlers if getattr(h, "_pyv2b_handler", False)]
    assert len(own) == 1
    assert restore_package_logger.level == logging.INFO


def test_setup_logging_file(tmp_path, restore_package_logger):
    log_file = tmp_path / "logs" / "v2b.log"
    setup_logging(logging.INFO, log_file=log_file)
    get_logger("pyv2b.test").info("written to file")
    for handler in restore_package_logger.handlers:
        handler.flush()
    assert "written to file" in log_file.read_text(encoding="utf-8")
