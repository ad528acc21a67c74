"""
Tests for subscribe/unsubscribe and the notification pass.

Policy under test: each pass iterates a snapshot taken when notification
starts, and a registration removed earlier in the same pass is skipped.
"""

import pytest

from unistore import ListenerError, ListenerFailure, StoreError, SubscriberRegistry
from tests.conftest import incremented


class TestSubscribe:
    def test_listener_called_once_per_dispatch(self, store, calls):
        store.subscribe(lambda: calls.append(store.get_state()["value"]))

        store.dispatch(incremented())

        assert calls == [1]

    def test_listener_receives_no_arguments(self, store, calls):
        def listener(*args, **kwargs):
            calls.append((args, kwargs))

        store.subscribe(listener)
        store.dispatch(incremented())

        assert calls == [((), {})]

    def test_unsubscribe_stops_notifications(self, store, calls):
        unsubscribe = store.subscribe(lambda: calls.append("called"))
        store.dispatch(incremented())

        unsubscribe()
        store.dispatch(incremented())
        store.dispatch(incremented())

        assert calls == ["called"]

    def test_double_unsubscribe_is_noop(self, store, calls):
        unsubscribe = store.subscribe(lambda: calls.append("called"))

        unsubscribe()
        unsubscribe()
        store.dispatch(incremented())

        assert calls == []

    def test_same_listener_twice_gives_independent_registrations(self, store, calls):
        def listener():
            calls.append("called")

        first = store.subscribe(listener)
        store.subscribe(listener)

        store.dispatch(incremented())
        assert calls == ["called", "called"]

        first()
        store.dispatch(incremented())
        assert calls == ["called", "called", "called"]

    def test_listeners_run_in_registration_order(self, store, calls):
        for name in ("a", "b", "c"):
            store.subscribe(lambda name=name: calls.append(name))

        store.dispatch(incremented())

        assert calls == ["a", "b", "c"]

    def test_notified_even_when_state_unchanged(self, store, calls):
        store.subscribe(lambda: calls.append("called"))

        store.dispatch({"type": "counter/unknown"})

        assert calls == ["called"]

    def test_rejects_non_callable_listener(self, store):
        with pytest.raises(StoreError) as excinfo:
            store.subscribe("not callable")
        assert excinfo.value.details["operation"] == "subscribe"


class TestNotificationPass:
    def test_listener_unsubscribing_itself_is_never_called_again(self, store, calls):
        def listener():
            calls.append("called")
            unsubscribe()

        unsubscribe = store.subscribe(listener)

        store.dispatch(incremented())
        store.dispatch(incremented())
        store.dispatch(incremented())

        assert calls == ["called"]

    def test_listener_added_during_pass_waits_for_next_dispatch(self, store, calls):
        def late():
            calls.append("late")

        def adder():
            calls.append("adder")
            if len(calls) == 1:
                store.subscribe(late)

        store.subscribe(adder)

        store.dispatch(incremented())
        assert calls == ["adder"]

        store.dispatch(incremented())
        assert calls == ["adder", "adder", "late"]

    def test_listener_removed_earlier_in_pass_is_skipped(self, store, calls):
        handles = {}

        def first():
            calls.append("first")
            handles["second"]()

        def second():
            calls.append("second")

        store.subscribe(first)
        handles["second"] = store.subscribe(second)

        store.dispatch(incremented())
        store.dispatch(incremented())

        assert calls == ["first", "first"]

    def test_removing_an_already_called_listener_takes_effect_next_pass(self, store, calls):
        handles = {}

        def first():
            calls.append("first")

        def second():
            calls.append("second")
            handles["first"]()

        handles["first"] = store.subscribe(first)
        store.subscribe(second)

        store.dispatch(incremented())
        store.dispatch(incremented())

        assert calls == ["first", "second", "second"]


class TestListenerFailure:
    def test_failure_propagates_and_aborts_pass_but_keeps_state(self, store, calls):
        def broken():
            raise ValueError("listener blew up")

        store.subscribe(lambda: calls.append("before"))
        store.subscribe(broken)
        store.subscribe(lambda: calls.append("after"))

        with pytest.raises(ListenerError) as excinfo:
            store.dispatch(incremented())

        assert calls == ["before"]
        assert store.get_state() == {"value": 1}
        assert not store.is_dispatching
        assert isinstance(excinfo.value.__cause__, ValueError)
        assert excinfo.value.details["action_type"] == "counter/incremented"

    def test_store_keeps_working_after_listener_failure(self, store, calls):
        unsubscribe = store.subscribe(lambda: 1 / 0)
        with pytest.raises(ListenerFailure):
            store.dispatch(incremented())

        unsubscribe()
        store.subscribe(lambda: calls.append("ok"))
        store.dispatch(incremented())

        assert calls == ["ok"]
        assert store.get_state() == {"value": 2}


class TestSubscriberRegistry:
    def test_notify_reports_called_count(self, calls):
        registry = SubscriberRegistry()
        registry.add(lambda: calls.append("a"))
        remove_b = registry.add(lambda: calls.append("b"))
        remove_b()

        called = registry.notify(lambda listener: listener())

        assert called == 1
        assert calls == ["a"]
        assert len(registry) == 1

    def test_snapshot_is_a_copy(self):
        registry = SubscriberRegistry()
        registry.add(lambda: None)

        snapshot = registry.snapshot()
        registry.add(lambda: None)

        assert len(snapshot) == 1
        assert len(registry) == 2

    def test_clear_removes_everything(self):
        registry = SubscriberRegistry()
        unsubscribe = registry.add(lambda: None)

        registry.clear()
        unsubscribe()

        assert len(registry) == 0
        assert list(registry) == []
