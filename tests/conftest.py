"""
Shared pytest fixtures for PathStoreX tests.
"""

import pytest

from pathstorex import ActionsRegistry


class RecordingObserver:
    """Observer that records every value and completion it receives."""

    def __init__(self):
        self.values = []
        self.completed = 0

    def on_next(self, value):
        self.values.append(value)

    def on_completed(self):
        self.completed += 1


def counter_handler(step):
    def handler(state):
        if state is None:
            return 0
        return state + step
    return handler


@pytest.fixture
def registry():
    """Provide a fresh registry for each test."""
    return ActionsRegistry()


@pytest.fixture
def counter_registry(registry):
    registry.register("increment", {"selector": "counter", "handler": counter_handler(1)})
    registry.register("decrement", {"selector": "counter", "handler": counter_handler(-1)})
    return registry


@pytest.fixture
def recorder():
    return RecordingObserver()
