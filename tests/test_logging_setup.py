from __future__ import annotations

import logging

import pytest

from sequence_runner.logging_setup import configure_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger("sequence_runner")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    logger.handlers = []
    yield logger
    logger.handlers, logger.level, logger.propagate = saved


def test_configure_logging_is_idempotent(package_logger: logging.Logger) -> None:
    configure_logging()
    configure_logging(verbose=True)

    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.DEBUG
    assert package_logger.handlers[0].level == logging.DEBUG
    assert package_logger.propagate is False


def test_default_level_is_info(package_logger: logging.Logger) -> None:
    configure_logging()
    assert package_logger.level == logging.INFO
