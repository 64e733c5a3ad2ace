"""Tests for Reaction, autorun, and reaction."""

from depot import Observable, ObservableDict, autorun, reaction, transaction


class TestAutorun:
    def test_runs_immediately(self):
        o = Observable(10)
        log = []
        autorun(lambda: log.append(o.get()))
        assert log == [10]

    def test_reruns_on_change(self):
        o = Observable(10)
        log = []
        autorun(lambda: log.append(o.get()))
        o.set(20)
        assert log == [10, 20]

    def test_dispose_stops(self):
        o = Observable(10)
        log = []
        r = autorun(lambda: log.append(o.get()))
        r.dispose()
        o.set(20)
        assert log == [10]


class TestReaction:
    def test_no_initial_effect(self):
        o = Observable("a")
        effects = []
        reaction(lambda: o.get(), lambda v: effects.append(v))
        assert effects == []

    def test_fires_on_change(self):
        o = Observable("a")
        effects = []
        reaction(lambda: o.get(), lambda v: effects.append(v))
        o.set("b")
        assert effects == ["b"]

    def test_fire_immediately(self):
        o = Observable("a")
        effects = []
        reaction(lambda: o.get(), lambda v: effects.append(v), fire_immediately=True)
        assert effects == ["a"]

    def test_dedup_effect(self):
        """Effect only fires when data_fn result actually changes."""
        o = Observable(1)
        effects = []
        reaction(
            lambda: "even" if o.get() % 2 == 0 else "odd",
            lambda v: effects.append(v),
        )
        o.set(3)
        assert effects == []
        o.set(4)
        assert effects == ["even"]

    def test_fires_in_creation_order(self):
        o = Observable(0)
        order = []
        reaction(lambda: o.get(), lambda v: order.append("first"))
        reaction(lambda: o.get(), lambda v: order.append("second"))
        reaction(lambda: o.get(), lambda v: order.append("third"))
        o.set(1)
        assert order == ["first", "second", "third"]


class TestDeepReaction:
    def test_fires_on_nested_change(self):
        state = ObservableDict({"user": {"name": "Ann"}})
        seen = []
        reaction(lambda: state, lambda s: seen.append(s["user"]["name"]), deep=True)
        state["user"]["name"] = "Bob"
        assert seen == ["Bob"]

    def test_shallow_misses_nested_change(self):
        state = ObservableDict({"user": {"name": "Ann"}})
        seen = []
        reaction(lambda: state, lambda s: seen.append(s), deep=False)
        state["user"]["name"] = "Bob"
        assert seen == []

    def test_one_effect_per_batch(self):
        state = ObservableDict({"a": 0, "b": {"c": 0}})
        seen = []
        reaction(lambda: state, lambda s: seen.append(1), deep=True)
        with transaction():
            state["a"] = 1
            state["b"]["c"] = 1
        assert seen == [1]

    def test_revert_within_batch_is_not_a_change(self):
        state = ObservableDict({"a": 0})
        seen = []
        reaction(lambda: state, lambda s: seen.append(1), deep=True)
        with transaction():
            state["a"] = 1
            state["a"] = 0
        assert seen == []

    def test_dispose(self):
        state = ObservableDict({"a": 0})
        seen = []
        r = reaction(lambda: state, lambda s: seen.append(s["a"]), deep=True)
        r.dispose()
        state["a"] = 1
        assert seen == []
