"""Tests for the transaction context manager."""

import pytest

from depot import Observable, autorun, get_pending_count, transaction


class TestTransaction:
    def test_batches_updates(self):
        a = Observable(0)
        b = Observable(0)
        log = []
        autorun(lambda: log.append((a.get(), b.get())))

        with transaction():
            a.set(10)
            b.set(20)

        assert log == [(0, 0), (10, 20)]

    def test_nested(self):
        o = Observable(0)
        log = []
        autorun(lambda: log.append(o.get()))

        with transaction():
            o.set(1)
            with transaction():
                o.set(2)
            assert log == [0]
            o.set(3)

        assert log == [0, 3]

    def test_flushes_when_raising(self):
        o = Observable(0)
        log = []
        autorun(lambda: log.append(o.get()))

        with pytest.raises(ValueError):
            with transaction():
                o.set(1)
                raise ValueError("boom")

        assert log == [0, 1]
        assert get_pending_count() == 0

    def test_pending_until_exit(self):
        o = Observable(0)
        autorun(lambda: o.get())
        with transaction():
            o.set(1)
            assert get_pending_count() == 1
        assert get_pending_count() == 0
