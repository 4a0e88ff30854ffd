from __future__ import annotations

import logging

from transition_roster.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    get_logger,
    log_summary,
    reset_logging,
    set_debug,
    setup_logging,
)


def test_setup_logging_creates_logger_with_labeled_formatter():
    reset_logging()
    logger = setup_logging()
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert logger.propagate is False
    # idempotent
    assert setup_logging() is logger
    assert get_logger() is logger
    reset_logging()


def test_labeled_prefixes(labeled_logs):
    logger = get_logger()
    logger.info("loaded")
    logger.warning("odd value")
    logger.error("broken")
    log_summary("students=1")
    lines = labeled_logs.getvalue().splitlines()
    assert lines == ["INFO loaded", "WARN odd value", "ERROR broken", "SUMMARY students=1"]


def test_module_loggers_share_handler(labeled_logs):
    logging.getLogger("transition_roster.services.merger").warning("from module")
    assert "WARN from module" in labeled_logs.getvalue()


def test_debug_hidden_until_enabled(labeled_logs):
    logger = get_logger()
    logger.debug("hidden")
    set_debug(logger)
    logger.debug("shown")
    out = labeled_logs.getvalue()
    assert "hidden" not in out
    assert "DEBUG shown" in out
    assert SUMMARY_LEVEL == 25
