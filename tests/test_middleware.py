"""Tests for store middleware hooks and dispatch logging."""

import logging

import pytest

from pathstorex import BaseMiddleware, LoggerMiddleware, StoreConfig


class RecordingMiddleware(BaseMiddleware):
    def __init__(self):
        self.calls = []

    def on_next(self, action, prev_state):
        self.calls.append(("next", action.type, dict(prev_state)))

    def on_complete(self, next_state, action):
        self.calls.append(("complete", action.type, dict(next_state)))

    def on_error(self, error, action):
        self.calls.append(("error", action.type, str(error)))

    def teardown(self):
        self.calls.append(("teardown",))


@pytest.mark.asyncio
async def test_hooks_wrap_each_dispatch(counter_registry):
    store = counter_registry.create_store()
    middleware = RecordingMiddleware()
    store.apply_middleware(middleware)
    increment = counter_registry.action_names["increment"][0]

    await store.do("increment")
    store.teardown()

    assert middleware.calls == [
        ("next", increment, {"counter": 0}),
        ("complete", increment, {"counter": 1}),
        ("teardown",),
    ]


@pytest.mark.asyncio
async def test_error_hook_sees_the_failure(registry):
    def explode(state):
        if state is None:
            return 0
        raise ValueError("boom")

    registry.register("explode", "EXPLODE", {"selector": "bomb", "handler": explode})
    store = registry.create_store()
    store.apply_middleware(RecordingMiddleware)
    middleware = store._middleware[0]

    with pytest.raises(ValueError):
        await store.do("explode")

    assert middleware.calls[-1] == ("error", "EXPLODE", "boom")


@pytest.mark.asyncio
async def test_log_dispatches_installs_logger_middleware(counter_registry, caplog):
    store = counter_registry.create_store(config=StoreConfig(log_dispatches=True))
    increment = counter_registry.action_names["increment"][0]

    with caplog.at_level(logging.DEBUG, logger="pathstorex"):
        await store.do("increment")

    messages = [record.getMessage() for record in caplog.records]
    assert f"dispatching {increment}" in messages
    assert f"state before {increment}: {{'counter': 0}}" in messages
    assert any(message.startswith(f"state after {increment}") for message in messages)


@pytest.mark.asyncio
async def test_logger_middleware_reports_errors(registry, caplog):
    def explode(state):
        if state is None:
            return 0
        raise ValueError("boom")

    registry.register("explode", "EXPLODE", {"selector": "bomb", "handler": explode})
    store = registry.create_store()
    store.apply_middleware(LoggerMiddleware(level=logging.INFO))

    with pytest.raises(ValueError):
        await store.do("explode")

    errors = [record for record in caplog.records if record.levelno == logging.ERROR]
    assert [record.getMessage() for record in errors] == ["error in EXPLODE: boom"]
