import matplotlib
import pytest
from loguru import logger

matplotlib.use("Agg")


@pytest.fixture(autouse=True)
def _reset_logger():
    # setup_logger() sinks must not outlive the streams captured for one test.
    yield
    logger.remove()
