"""Tests for Signal and create_signal."""

import threading

import pytest

from reactivity import Signal, SignalError, create_effect, create_signal, set_dispatcher


class TestSignal:
    def test_get_set(self):
        count, set_count = create_signal(42)
        assert count() == 42
        set_count(100)
        assert count() == 100

    def test_updater_function(self):
        count, set_count = create_signal(0)
        set_count(lambda prev: prev + 1)
        set_count(lambda prev: prev + 1)
        assert count() == 2

    def test_store_callable_via_updater(self):
        def handler():
            return "handled"

        fn, set_fn = create_signal(None)
        set_fn(lambda _: handler)
        assert fn() is handler

    def test_dedup(self):
        """Setting the same value should not trigger subscribers."""
        count, set_count = create_signal(0)
        log = []
        create_effect(lambda: log.append(count()))
        assert log == [0]
        set_count(0)
        assert log == [0]  # no re-run

    def test_equal_but_not_identical(self):
        items, set_items = create_signal([1, 2])
        log = []
        create_effect(lambda: log.append(items()))
        set_items([1, 2])
        assert len(log) == 1

    def test_equals_false_always_notifies(self):
        count, set_count = create_signal(0, equals=False)
        log = []
        create_effect(lambda: log.append(count()))
        set_count(0)
        set_count(0)
        assert log == [0, 0, 0]

    def test_custom_equals(self):
        calls = []

        def same_parity(a, b):
            calls.append((a, b))
            return a % 2 == b % 2

        count, set_count = create_signal(0, equals=same_parity)
        log = []
        create_effect(lambda: log.append(count()))

        set_count(2)
        assert calls == [(0, 2)]
        assert log == [0]
        set_count(3)
        assert log == [0, 3]

    def test_invalid_equals(self):
        with pytest.raises(TypeError):
            create_signal(0, equals="yes")

    def test_notifies_in_subscription_order(self):
        value, set_value = create_signal("a")
        order = []
        create_effect(lambda: order.append(("first", value())))
        create_effect(lambda: order.append(("second", value())))
        order.clear()
        set_value("b")
        assert order == [("first", "b"), ("second", "b")]

    def test_failing_subscriber_does_not_block_others(self):
        value, set_value = create_signal(1)
        log = []

        def broken():
            if value() > 1:
                raise RuntimeError("boom")

        create_effect(broken)
        create_effect(lambda: log.append(value()))
        set_value(2)  # does not raise
        assert log == [1, 2]

    def test_nested_writes_run_depth_first(self):
        a, set_a = create_signal(0)
        b, set_b = create_signal(0)
        order = []

        def forward():
            order.append(("forward", a()))
            set_b(a() * 10)

        create_effect(forward)
        create_effect(lambda: order.append(("b", b())))
        create_effect(lambda: order.append(("a", a())))
        order.clear()

        set_a(1)
        assert order == [("forward", 1), ("b", 10), ("a", 1)]

    def test_repr(self):
        assert repr(Signal(5)) == "Signal(5)"
        assert repr(Signal(5, name="count")) == "Signal(count=5)"


class TestSignalError:
    def test_updater_error_is_wrapped(self):
        count, set_count = create_signal(1, name="count")

        def bad(prev):
            raise ValueError("nope")

        with pytest.raises(SignalError) as info:
            set_count(bad)
        assert isinstance(info.value.__cause__, ValueError)
        assert info.value.name == "count"
        assert count() == 1

    def test_equals_error_is_wrapped(self):
        def bad_equals(a, b):
            raise KeyError(a)

        _, set_value = create_signal(1, equals=bad_equals)
        with pytest.raises(SignalError):
            set_value(2)

    def test_updater_error_does_not_notify(self):
        count, set_count = create_signal(1)
        log = []
        create_effect(lambda: log.append(count()))
        with pytest.raises(SignalError):
            set_count(lambda prev: prev / 0)
        assert log == [1]


class TestDispatcher:
    def test_owning_thread_is_synchronous(self):
        calls = []
        set_dispatcher(lambda f: (calls.append(f), f()))
        count, set_count = create_signal(0)
        set_count(42)
        assert count() == 42
        assert calls == []

    def test_background_thread_dispatches(self):
        calls = []
        set_dispatcher(lambda f: calls.append(f))
        count, set_count = create_signal(0)

        t = threading.Thread(target=lambda: set_count(7))
        t.start()
        t.join()

        assert count() == 0  # not applied until dispatched
        assert len(calls) == 1
        calls[0]()
        assert count() == 7
