"""Tests for StoreQuery path resolution and subscription."""

import pytest

from pathstorex import ReactiveNode, SelectorError, StoreQuery, always_update


@pytest.fixture
def root():
    node = ReactiveNode()
    node.observable.on_next({"foo": {"bar": {"baz": "foobarbaz"}}, "count": 0})
    return node


def test_get_concatenates_without_touching_the_tree(root):
    query = StoreQuery(root).get("foo").get("bar", "baz")
    assert query.path == ("foo", "bar", "baz")
    assert StoreQuery(root).get(["foo", "bar"]).get(["baz"]).path == ("foo", "bar", "baz")
    assert dict(root.children) == {}


def test_get_returns_new_queries(root):
    base = StoreQuery(root).get("foo")
    child = base.get("bar")
    assert base.path == ("foo",)
    assert child.path == ("foo", "bar")


def test_value_reads_current_state(root):
    assert StoreQuery(root).get("foo.bar.baz").value == "foobarbaz"
    assert StoreQuery(root).get("does").get("not").get("exist").value is None


def test_first_value_is_always_delivered(root):
    values = []
    StoreQuery(root).get("count").subscribe(values.append, lambda old, new: False)
    assert values == [0]


def test_default_detector_skips_equal_values(root):
    values = []
    StoreQuery(root).get("count").subscribe(values.append)

    root.observable.on_next({"count": 0})
    root.observable.on_next({"count": 1})
    root.observable.on_next({"count": 1})

    assert values == [0, 1]


def test_custom_detector_compares_against_last_delivered(root):
    values = []
    StoreQuery(root).get("count").subscribe(values.append, lambda old, new: new - old >= 2)

    for count in (1, 2, 3, 4):
        root.observable.on_next({"count": count})

    assert values == [0, 2, 4]


def test_always_update_delivers_every_emission(root):
    values = []
    StoreQuery(root).get("count").subscribe(values.append, always_update)
    root.observable.on_next({"count": 0})
    assert values == [0, 0]


def test_empty_path_subscribes_at_root(root, recorder):
    StoreQuery(root).subscribe(recorder)
    assert recorder.values == [root.value]
    assert dict(root.children) == {}


def test_observer_objects_receive_completion(root, recorder):
    StoreQuery(root).get("foo.bar").subscribe(recorder)
    root.complete()
    assert recorder.completed == 1


def test_subscribe_reuses_live_nodes(root):
    StoreQuery(root).get("foo.bar").subscribe(lambda value: None)
    bar = root.get("foo").get("bar")

    StoreQuery(root).get("foo.bar.baz").subscribe(lambda value: None)

    assert root.get("foo").get("bar") is bar
    assert bar.get("baz") is not None


def test_missing_path_is_tolerated_and_fills_in_later(root):
    values = []
    StoreQuery(root).get("later.value").subscribe(values.append)
    assert root.get("later").get("value") is not None

    root.observable.on_next({"later": {"value": 7}})

    assert values == [None, 7]


def test_strict_mode_rejects_missing_paths_without_creating_nodes(root):
    query = StoreQuery(root, strict=True).get("this.does.not.exist")
    with pytest.raises(SelectorError) as excinfo:
        query.subscribe(lambda value: None)
    assert excinfo.value.path == ("this", "does", "not", "exist")
    assert dict(root.children) == {}


def test_strict_mode_allows_existing_paths(root):
    values = []
    StoreQuery(root, strict=True).get("foo.bar.baz").subscribe(values.append)
    assert values == ["foobarbaz"]


def test_to_observable_subscription_and_disposal(root):
    values = []
    disposable = StoreQuery(root).get("count").to_observable().subscribe(on_next=values.append)
    root.observable.on_next({"count": 3})
    assert values == [0, 3]
    assert root.get("count") is not None

    disposable.dispose()

    assert root.get("count") is None


def test_failed_subscribe_releases_upgraded_nodes(root):
    def explode(value):
        raise RuntimeError("bad observer")

    with pytest.raises(RuntimeError):
        StoreQuery(root).get("foo.bar").subscribe(explode)

    assert dict(root.children) == {}
    assert len(root.observable) == 0

    values = []
    StoreQuery(root).get("foo.bar.baz").subscribe(values.append)
    assert values == ["foobarbaz"]
