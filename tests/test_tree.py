"""Tests for the lazily materialized reactive node tree."""

from pathstorex import ReactiveNode, StoreQuery


def make_root(value):
    root = ReactiveNode()
    root.observable.on_next(value)
    return root


def test_get_never_creates_children():
    root = make_root({"a": 1})
    assert root.get("a") is None
    assert dict(root.children) == {}


def test_upgrade_seeds_child_from_parent_value():
    root = make_root({"a": {"b": 2}})
    child = root.upgrade("a")
    assert child.value == {"b": 2}
    assert child.upgrade("b").value == 2
    assert child.upgrade("missing").value is None


def test_upgrade_is_idempotent():
    root = make_root({"a": 1})
    assert root.upgrade("a") is root.upgrade("a")


def test_child_rederives_value_on_parent_emission():
    root = make_root({"a": 1})
    child = root.upgrade("a")
    values = []
    child.observable.subscribe(values.append)

    root.observable.on_next({"a": 2})
    root.observable.on_next({})

    assert values == [1, 2, None]


def test_child_link_counts_as_parent_subscriber():
    root = make_root({"a": {"b": 1}})
    a = root.upgrade("a")
    a.upgrade("b")
    assert len(root.observable) == 1
    assert len(a.observable) == 1


def test_last_unsubscribe_releases_node_immediately():
    root = make_root({"a": {"b": 1}})
    unsubscribe = StoreQuery(root, ("a", "b")).subscribe(lambda value: None)
    a = root.get("a")
    b = a.get("b")
    assert b is not None

    unsubscribe()

    assert root.get("a") is None
    assert a.get("b") is None
    assert not a.is_attached
    assert not b.is_attached
    assert len(root.observable) == 0


def test_intermediate_node_survives_while_descendant_observed():
    root = make_root({"a": {"b": 1}})
    unsubscribe_a = StoreQuery(root, ("a",)).subscribe(lambda value: None)
    unsubscribe_b = StoreQuery(root, ("a", "b")).subscribe(lambda value: None)

    unsubscribe_a()
    assert root.get("a") is not None
    assert root.get("a").get("b") is not None

    unsubscribe_b()
    assert root.get("a") is None


def test_sibling_release_keeps_shared_parent():
    root = make_root({"a": {"b": 1, "c": 2}})
    unsubscribe_b = StoreQuery(root, ("a", "b")).subscribe(lambda value: None)
    StoreQuery(root, ("a", "c")).subscribe(lambda value: None)

    unsubscribe_b()

    assert root.get("a").get("b") is None
    assert root.get("a").get("c") is not None


def test_resubscribe_reflects_latest_parent_value():
    root = make_root({"a": {"b": 1}})
    first = []
    unsubscribe = StoreQuery(root, ("a", "b")).subscribe(first.append)
    unsubscribe()

    root.observable.on_next({"a": {"b": 5}})
    second = []
    StoreQuery(root, ("a", "b")).subscribe(second.append)

    assert first == [1]
    assert second == [5]


def test_released_node_stops_following_parent():
    root = make_root({"a": 1})
    values = []
    unsubscribe = StoreQuery(root, ("a",)).subscribe(values.append)
    unsubscribe()

    root.observable.on_next({"a": 2})

    assert values == [1]


def test_path_and_complete():
    root = make_root({"a": {"b": 1}})
    b = root.upgrade("a").upgrade("b")
    completions = []
    b.observable.add_complete_hook(lambda: completions.append("b"))
    root.observable.add_complete_hook(lambda: completions.append("root"))

    assert b.path == ("a", "b")
    assert root.path == ()

    root.complete()

    assert completions == ["b", "root"]
    assert root.observable.is_completed
