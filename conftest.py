"""Pytest configuration — ensures the project root is importable."""

import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))


@pytest.fixture(autouse=True)
def _debug_logging(caplog):
    """Capture the pipeline's DEBUG trail so failing tests show every stage."""
    caplog.set_level(logging.DEBUG, logger="strict_numeric")
    yield
