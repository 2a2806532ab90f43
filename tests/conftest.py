from __future__ import annotations

import logging
from pathlib import Path

import pytest

from docbench.config import FanoutConfig
from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture
def project_builder(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture
def fast_fanout() -> FanoutConfig:
    """Fan-out settings that never sleep between retries."""
    return FanoutConfig(call_timeout=2.0, max_attempts=2, retry_delay=0.0, deadline=None)


@pytest.fixture(autouse=True)
def _reset_docbench_logger():
    # CLI tests call configure_logging, which detaches the logger from caplog.
    yield
    logger = logging.getLogger("docbench")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
