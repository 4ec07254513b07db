"""Document store over SQLModel tables."""

import threading

import pytest

from pastoral.core.errors import NotFoundError, NotInitializedError
from pastoral.services.store import DocumentStore, StoreQuery


def add_reminder(store, member_id, text):
    return store.add(
        "careReminders",
        {"member_id": member_id, "text": text, "author_id": "u1", "author_name": "Jo"},
    )


def test_add_get_and_delete(store):
    record = add_reminder(store, "m1", "Call")
    assert store.get("careReminders", record.id).text == "Call"
    assert store.delete("careReminders", record.id) is True
    assert store.get("careReminders", record.id) is None
    assert store.delete("careReminders", record.id) is False


def test_query_filters_orders_and_limits(store):
    for text in ("b", "a", "c"):
        add_reminder(store, "m1", text)
    add_reminder(store, "m2", "other")
    query = StoreQuery(
        "careReminders", where=("member_id", "==", "m1"), order_by=("text", "asc"), limit=2
    )
    assert [r.text for r in store.query(query)] == ["a", "b"]


def test_update_missing_document_raises_not_found(store):
    with pytest.raises(NotFoundError):
        store.update("careReminders", "missing", {"text": "x"})


def test_uninitialized_store_fails_fast():
    with pytest.raises(NotInitializedError):
        DocumentStore(None).query(StoreQuery("members"))


def test_invalid_queries_are_rejected():
    with pytest.raises(ValueError):
        StoreQuery("prayers")
    with pytest.raises(ValueError):
        StoreQuery("members", where=("city", "like", "x"))
    with pytest.raises(ValueError):
        StoreQuery("members", limit=0)


def test_subscribe_delivers_now_and_after_writes(store):
    snapshots = []
    query = StoreQuery("careReminders", where=("member_id", "==", "m1"))
    handle = store.subscribe(query, lambda records: snapshots.append([r.text for r in records]))
    add_reminder(store, "m1", "Visit")
    handle.close()
    add_reminder(store, "m1", "Pray")
    assert snapshots == [[], ["Visit"]]


def test_change_listeners_hear_local_writes(store):
    changed = []
    store.add_change_listener(changed.append)
    add_reminder(store, "m1", "Visit")
    assert changed == ["careReminders"]


def test_concurrent_writes_never_leave_an_older_snapshot_last(store):
    first_queried = threading.Event()
    second_delivered = threading.Event()
    query = StoreQuery("careReminders", where=("member_id", "==", "m1"))
    run_query = store.query

    def slow_first_writer(q):
        records = run_query(q)
        if threading.current_thread().name == "writer-1":
            first_queried.set()
            # Give the second writer a chance to overtake
            second_delivered.wait(0.5)
        return records

    store.query = slow_first_writer
    snapshots = []

    def on_snapshot(records):
        snapshots.append(len(records))
        if len(records) == 2:
            second_delivered.set()

    handle = store.subscribe(query, on_snapshot)

    def second_write():
        first_queried.wait(2)
        add_reminder(store, "m1", "Pray")

    writers = [
        threading.Thread(target=add_reminder, args=(store, "m1", "Visit"), name="writer-1"),
        threading.Thread(target=second_write, name="writer-2"),
    ]
    for writer in writers:
        writer.start()
    for writer in writers:
        writer.join(5)
    handle.close()

    assert snapshots[0] == 0
    assert snapshots[-1] == 2
