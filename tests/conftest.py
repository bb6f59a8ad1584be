import logging

import pytest

from semicon_line_model.io_utils import LOGGER_NAME
from semicon_line_model.sampler import RandomSource


@pytest.fixture
def source() -> RandomSource:
    """Deterministic random source."""
    return RandomSource(seed=1234)


@pytest.fixture
def fresh_logger():
    """Drop handlers bound to streams of a previous test."""
    logger = logging.getLogger(LOGGER_NAME)

    def _reset():
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()
        if hasattr(logger, "_configured"):
            del logger._configured

    _reset()
    yield logger
    _reset()
