"""Tests for add_subscription / trigger_subscriptions."""

from depot.subscriptions import add_subscription, trigger_subscriptions


class TestSubscriptions:
    def test_triggers_in_order_with_args(self):
        subs = []
        log = []
        add_subscription(subs, lambda x: log.append(("a", x)))
        add_subscription(subs, lambda x: log.append(("b", x)))
        trigger_subscriptions(subs, 1)
        assert log == [("a", 1), ("b", 1)]

    def test_remove_exact_callback(self):
        subs = []
        log = []

        def cb(x):
            log.append(x)

        remove_first = add_subscription(subs, cb)
        add_subscription(subs, cb)
        remove_first()
        trigger_subscriptions(subs, 1)
        assert log == [1]  # the second registration is still there

    def test_remove_twice_is_noop(self):
        subs = []
        remove = add_subscription(subs, lambda: None)
        remove()
        remove()
        assert subs == []

    def test_interleaved_add_remove(self):
        subs = []
        log = []
        remove_a = add_subscription(subs, lambda: log.append("a"))
        add_subscription(subs, lambda: log.append("b"))
        remove_a()
        add_subscription(subs, lambda: log.append("c"))
        trigger_subscriptions(subs)
        assert log == ["b", "c"]

    def test_removal_during_trigger_applies_next_time(self):
        subs = []
        log = []
        removers = {}

        def first():
            log.append("first")
            removers["second"]()

        add_subscription(subs, first)
        removers["second"] = add_subscription(subs, lambda: log.append("second"))

        trigger_subscriptions(subs)
        assert log == ["first", "second"]
        trigger_subscriptions(subs)
        assert log == ["first", "second", "first"]
