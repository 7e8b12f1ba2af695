import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_dirmirror_logging():
    yield
    logger = logging.getLogger("dirmirror")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
