"""
Test configuration shared by unit and integration tests.
"""

import pytest
import structlog

from shared.logging import clear_context


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Undo logging configuration and correlation context a test left behind."""
    yield
    structlog.reset_defaults()
    clear_context()
