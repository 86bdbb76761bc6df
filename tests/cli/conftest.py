import sys

import pytest
from loguru import logger
from typer.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    """The CLI callback points loguru at the runner's stderr; restore it afterwards."""
    yield
    logger.remove()
    logger.add(sys.stderr)
