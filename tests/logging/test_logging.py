"""Tests for centralized logging behavior and configuration."""

import logging
from io import StringIO

import pytest

from dagscope.algorithms.scc import tarjan_scc
from dagscope.graph.digraph import Graph
from dagscope.logging import (
    ROOT_LOGGER_NAME,
    disable_debug_logging,
    enable_debug_logging,
    get_logger,
    reset_logging,
    set_global_log_level,
    setup_root_logger,
)


@pytest.fixture(autouse=True)
def _reset_logging_each_test():
    """Reset logging state before and after each test to avoid cross-test bleed."""
    reset_logging()
    yield
    reset_logging()


def test_effective_levels_enable_disable():
    """INFO by default, DEBUG after enable, back to INFO after disable."""
    logger = get_logger("dagscope.test")

    capture = StringIO()
    handler = logging.StreamHandler(capture)
    handler.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.addHandler(handler)

    logger.info("info-1")
    assert "info-1" in capture.getvalue()

    capture.seek(0)
    capture.truncate(0)
    logger.debug("debug-1")
    assert "debug-1" not in capture.getvalue()

    enable_debug_logging()
    logger.debug("debug-2")
    assert "debug-2" in capture.getvalue()

    capture.seek(0)
    capture.truncate(0)
    disable_debug_logging()
    logger.debug("debug-3")
    assert "debug-3" not in capture.getvalue()

    logger.removeHandler(handler)


def test_global_level_propagates_to_children_and_new_loggers():
    """Changing the global level updates existing and new child loggers."""
    logger1 = get_logger("dagscope.module1")
    logger2 = get_logger("dagscope.module2")

    assert logger1.getEffectiveLevel() == logging.INFO
    assert logger2.getEffectiveLevel() == logging.INFO

    set_global_log_level(logging.WARNING)
    assert logger1.getEffectiveLevel() == logging.WARNING
    assert logger2.getEffectiveLevel() == logging.WARNING

    logger3 = get_logger("dagscope.module3")
    assert logger3.getEffectiveLevel() == logging.WARNING


def test_setup_root_logger_idempotent_no_duplicate_handlers():
    """Repeated setup should not accumulate handlers."""
    capture = StringIO()
    handler = logging.StreamHandler(capture)
    setup_root_logger(level=logging.INFO, handler=handler)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    assert len(root_logger.handlers) == 1

    setup_root_logger(level=logging.DEBUG)
    assert len(root_logger.handlers) == 1

    set_global_log_level(logging.ERROR)
    assert root_logger.level == logging.ERROR


def test_custom_format_string_applied():
    """Custom format string is respected by the root handler."""
    capture = StringIO()
    handler = logging.StreamHandler(capture)
    fmt = "LEVEL:%(levelname)s|NAME:%(name)s|MSG:%(message)s"
    setup_root_logger(level=logging.INFO, format_string=fmt, handler=handler)

    logger = get_logger("dagscope.test.format")
    logger.info("hello")
    out = capture.getvalue()
    assert "LEVEL:INFO" in out
    assert "NAME:dagscope.test.format" in out
    assert "MSG:hello" in out


def test_algorithm_debug_messages_reach_root_handler():
    """Module loggers of the algorithms emit through the package handler."""
    capture = StringIO()
    setup_root_logger(
        level=logging.DEBUG,
        format_string="%(name)s|%(message)s",
        handler=logging.StreamHandler(capture),
    )

    tarjan_scc(Graph.from_edges(2, [(0, 1, 1), (1, 0, 1)]))

    out = capture.getvalue()
    assert "dagscope.algorithms.scc|Tarjan SCC: 2 vertices, 1 components" in out
