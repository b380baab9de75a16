import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_journal_ai_logger():
    logger = logging.getLogger("journal_ai")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers = handlers
    logger.setLevel(level)
