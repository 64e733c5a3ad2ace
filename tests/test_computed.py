"""Tests for Computed values."""

from depot import Observable, ObservableDict, Computed, Scope, computed, autorun


class TestComputed:
    def test_lazy_eval(self):
        call_count = 0
        o = Observable(5)

        def fn():
            nonlocal call_count
            call_count += 1
            return o.get() * 2

        c = Computed(fn)
        assert call_count == 0  # not yet evaluated
        assert c.get() == 10
        c.get()
        assert call_count == 1  # cached

    def test_invalidation(self):
        o = Observable(5)
        c = Computed(lambda: o.get() * 2)
        assert c.get() == 10
        o.set(10)
        assert c.get() == 20

    def test_dependency_tracking(self):
        flag = Observable(True)
        a = Observable(1)
        b = Observable(2)
        c = Computed(lambda: a.get() if flag.get() else b.get())
        assert c.get() == 1
        flag.set(False)
        assert c.get() == 2

    def test_reads_dict_keys(self):
        state = ObservableDict({"count": 1})
        double = Computed(lambda: state["count"] * 2)
        assert double.get() == 2
        state["count"] = 4
        assert double.get() == 8

    def test_chained_computed(self):
        o = Observable(3)
        doubled = Computed(lambda: o.get() * 2)
        quadrupled = Computed(lambda: doubled.get() * 2)
        assert quadrupled.get() == 12
        o.set(5)
        assert quadrupled.get() == 20

    def test_dispose(self):
        o = Observable(5)
        c = Computed(lambda: o.get() * 2)
        c.get()
        c.dispose()
        assert c.disposed
        o.set(10)
        assert c.get() == 20  # still evaluates, without caching

    def test_propagates_to_reactions(self):
        o = Observable(5)
        c = Computed(lambda: o.get() * 2)
        log = []
        autorun(lambda: log.append(c.get()))
        o.set(10)
        assert log == [10, 20]

    def test_belongs_to_running_scope(self):
        s = Scope()
        c = s.run(Computed, lambda: 1)
        s.stop()
        assert c.disposed


class TestComputedDecorator:
    def test_decorator_factory(self):
        o = Observable(7)

        @computed
        def doubled():
            return o.get() * 2

        assert doubled.get() == 14
        o.set(3)
        assert doubled.get() == 6


class TestComputedLifecycle:
    def test_dispose_twice(self):
        c = Computed(lambda: 1)
        c.dispose()
        c.dispose()
        assert c.get() == 1

    def test_name_and_repr(self):
        o = Observable(2)
        c = Computed(lambda: o.get() + 1, name="next")
        assert c.name == "next"
        assert repr(c) == "Computed(next, dirty)"
        c.get()
        assert repr(c) == "Computed(next, cached=3)"
        c.dispose()
        assert repr(c) == "Computed(next, disposed)"
