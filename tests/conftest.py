"""
Pytest configuration shared by all tests.
"""

import pytest

from chipjack.events import EventBus


@pytest.fixture(scope="function", autouse=True)
def reset_event_bus():
    """Reset the event bus singleton before each test."""
    EventBus._instance = None
    yield
    EventBus._instance = None
