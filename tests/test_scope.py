"""Tests for Scope."""

import pytest

from depot import Observable, Scope, autorun, reaction, scope


class TestScope:
    def test_collects_reactions(self):
        o = Observable(0)
        log = []
        s = Scope()
        s.run(lambda: autorun(lambda: log.append(o.get())))
        s.stop()
        o.set(1)
        assert log == [0]

    def test_run_returns_value(self):
        s = Scope()
        assert s.run(lambda x: x * 2, 21) == 42

    def test_effects_outside_run_are_not_collected(self):
        o = Observable(0)
        log = []
        s = Scope()
        autorun(lambda: log.append(o.get()))
        s.stop()
        o.set(1)
        assert log == [0, 1]

    def test_child_scopes_stop_with_parent(self):
        o = Observable(0)
        log = []
        parent = Scope(detached=True)
        child = parent.run(Scope)
        child.run(lambda: reaction(lambda: o.get(), log.append))
        parent.stop()
        assert not child.active
        o.set(1)
        assert log == []

    def test_detached_scope_has_no_parent(self):
        parent = Scope()
        child = parent.run(lambda: Scope(detached=True))
        assert child.parent is None
        parent.stop()
        assert child.active

    def test_stopped_child_leaves_parent(self):
        parent = Scope()
        child = parent.run(Scope)
        child.stop()
        parent.stop()
        assert not parent.active

    def test_stop_twice_is_noop(self):
        s = Scope()
        s.stop()
        s.stop()
        assert not s.active

    def test_run_after_stop_raises(self):
        s = Scope()
        s.stop()
        with pytest.raises(RuntimeError):
            s.run(lambda: None)

    def test_scope_helper_runs_fn(self):
        o = Observable(0)
        log = []
        s = scope(lambda: autorun(lambda: log.append(o.get())))
        o.set(1)
        s.stop()
        o.set(2)
        assert log == [0, 1]
