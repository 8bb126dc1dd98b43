"""Tests for ActionsRegistry registration and store creation."""

import pytest

from pathstorex import ActionsRegistry, RegistrationError, StoreConfig


def increment(state):
    return 0 if state is None else state + 1


def test_register_with_and_without_types(registry):
    registry.register("increment", "INCREMENT", {"selector": "counter", "handler": increment})
    registry.register("decrement", {"selector": "counter", "handler": lambda state: 0 if state is None else state - 1})

    names = registry.action_names
    assert names["increment"] == ("INCREMENT",)
    assert len(names["decrement"]) == 1


def test_generated_types_are_deterministic():
    first, second = ActionsRegistry(), ActionsRegistry()
    for registry in (first, second):
        registry.register("a", {"selector": "a", "handler": increment})
        registry.register("b", {"selector": "b", "handler": increment})
    assert first.action_names == second.action_names
    assert first.action_names == {"a": ("[a] #1",), "b": ("[b] #2",)}


def test_generated_types_skip_explicit_types(registry):
    registry.register("explicit", "[auto] #1", {"selector": "x", "handler": increment})
    entry = registry.register("auto", {"selector": "y", "handler": increment})
    assert entry.types == ("[auto] #2",)


def test_duplicate_name_fails_immediately(registry):
    pair = {"selector": "counter", "handler": increment}
    registry.register("increment", "SOMETHING ELSE", pair)
    with pytest.raises(RegistrationError) as excinfo:
        registry.register("increment", "INCREMENT", pair)
    assert excinfo.value.name == "increment"


def test_shared_types_and_selectors_are_allowed(registry):
    pair = {"selector": "counter", "handler": increment}
    registry.register("addOne", "increment", pair)
    registry.register("plusOne", "increment", pair)
    assert len(registry.entries) == 2


@pytest.mark.parametrize("pair", [
    {"selector": "", "handler": increment},
    {"selector": "a..b", "handler": increment},
    {"selector": 5, "handler": increment},
    {"selector": "counter", "handler": "not callable"},
    {"selector": "counter"},
])
def test_malformed_pairs_fail_at_registration(registry, pair):
    with pytest.raises(RegistrationError):
        registry.register("bad", "BAD", pair)


def test_empty_type_list_fails(registry):
    with pytest.raises(RegistrationError):
        registry.register("bad", [], {"selector": "counter", "handler": increment})


def test_pair_objects_with_attributes_are_accepted(registry):
    class Pair:
        selector = "counter"
        handler = staticmethod(increment)

    entry = registry.register("increment", Pair())
    assert entry.selector == "counter"


def test_handler_decorator(registry):
    @registry.handler("increment", "INCREMENT", selector="counter")
    def handle(state):
        return 0 if state is None else state + 1

    assert registry.entries[0].handler is handle
    assert registry.create_store().get_state() == {"counter": 0}


def test_side_effect_forms(registry):
    registry.side_effect("A", lambda state: None)
    registry.side_effect({"action_type": ["A", "B"], "handler": lambda state: None})

    @registry.side_effect(["B"])
    def effect(state):
        pass

    entries = registry._side_effects
    assert len(entries["A"]) == 2
    assert len(entries["B"]) == 2
    assert entries["B"][1].handler is effect


def test_side_effect_requires_types_and_callable(registry):
    with pytest.raises(RegistrationError):
        registry.side_effect(None, lambda state: None)
    with pytest.raises(RegistrationError):
        registry.side_effect("A", 42)


def test_create_store_runs_initialization(counter_registry):
    store = counter_registry.create_store()
    assert store.get_state() == {"counter": 0}
    assert set(store.actions) == {"increment", "decrement"}


def test_create_store_with_initial_state(counter_registry):
    store = counter_registry.create_store({"counter": 10, "extra": "kept"})
    assert store.get_state() == {"counter": 10, "extra": "kept"}


def test_registry_config_is_passed_to_stores():
    registry = ActionsRegistry(config=StoreConfig(strict_paths=True))
    registry.register("increment", {"selector": "counter", "handler": increment})
    assert registry.create_store().config.strict_paths
    assert not registry.create_store(config=StoreConfig()).config.strict_paths
