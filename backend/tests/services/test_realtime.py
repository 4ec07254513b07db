"""Subscription handles, the hub and scoped subscriptions.

Tests cover:
    - No callbacks after close()
    - Callback failures routed to the error callback
    - Scope switch: release, clear, resubscribe
    - Stale generations discarded
"""

from pastoral.services.realtime import ScopedSubscription, SubscriptionHub


def test_closed_subscription_is_never_called_again():
    hub = SubscriptionHub()
    received = []
    subscription = hub.register("careNotes", received.append)
    hub.notify("careNotes", 1)
    subscription.close()
    subscription.close()
    hub.notify("careNotes", 2)
    assert received == [1]
    assert hub.listener_count("careNotes") == 0


def test_callback_errors_go_to_error_callback():
    hub = SubscriptionHub()
    errors = []

    def explode(_payload):
        raise RuntimeError("boom")

    hub.register("members", explode, errors.append)
    hub.notify("members")
    assert [str(e) for e in errors] == ["boom"]


def test_notify_only_reaches_topic_listeners():
    hub = SubscriptionHub()
    notes, reminders = [], []
    hub.register("careNotes", notes.append)
    hub.register("careReminders", reminders.append)
    assert hub.notify("careNotes", "x") == 1
    assert notes == ["x"] and reminders == []


def test_close_all_detaches_everything():
    hub = SubscriptionHub()
    received = []
    hub.register("members", received.append)
    hub.register("careNotes", received.append)
    hub.close_all()
    hub.notify("members")
    hub.notify("careNotes")
    assert received == []


class FakeSource:
    """Opener that remembers callbacks so tests can fire them late."""

    def __init__(self):
        self.hub = SubscriptionHub()
        self.callbacks = {}
        self.opened = []

    def __call__(self, scope, on_items, on_error):
        self.opened.append(scope)
        self.callbacks[scope] = (on_items, on_error)
        return self.hub.register(scope, on_items, on_error)


def test_scope_switch_clears_items_and_resubscribes():
    source = FakeSource()
    scoped = ScopedSubscription(source)
    scoped.set_scope("m1")
    source.hub.notify("m1", ["note for m1"])
    assert scoped.items == ["note for m1"]

    scoped.set_scope("m2")
    assert scoped.items == []
    assert source.opened == ["m1", "m2"]
    assert source.hub.listener_count("m1") == 0


def test_same_scope_is_a_no_op():
    source = FakeSource()
    scoped = ScopedSubscription(source)
    scoped.set_scope("m1")
    scoped.set_scope("m1")
    assert source.opened == ["m1"]
    assert scoped.generation == 1


def test_stale_generation_callbacks_are_dropped():
    source = FakeSource()
    received = []
    scoped = ScopedSubscription(source, on_items=received.append)
    scoped.set_scope("m1")
    stale_items, stale_error = source.callbacks["m1"]
    scoped.set_scope("m2")

    stale_items(["late note for m1"])
    stale_error(RuntimeError("late failure"))
    assert scoped.items == []
    assert scoped.error is None
    assert received == []


def test_errors_for_current_scope_are_surfaced():
    source = FakeSource()
    errors = []
    scoped = ScopedSubscription(source, on_error=errors.append)
    scoped.set_scope("m1")
    source.hub.fail("m1", RuntimeError("permission denied"))
    assert isinstance(scoped.error, RuntimeError)
    assert scoped.loading is False
    assert len(errors) == 1


def test_close_releases_handle():
    source = FakeSource()
    scoped = ScopedSubscription(source)
    scoped.set_scope("m1")
    scoped.close()
    assert scoped.scope is None
    assert source.hub.listener_count("m1") == 0
