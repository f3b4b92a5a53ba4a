"""Tests for the document store and its live listeners."""

import threading
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from holiday_planner.dispatcher import SnapshotDispatcher
from holiday_planner.exceptions import StoreError
from holiday_planner.store import DocumentStore


class Recorder:
    """Collects snapshots delivered to a listener."""

    def __init__(self):
        self.snapshots = []
        self.errors = []
        self.threads = set()

    def on_snapshot(self, snapshot):
        self.threads.add(threading.current_thread().name)
        self.snapshots.append(snapshot)

    def on_error(self, exc):
        self.errors.append(exc)

    def ids(self, index=-1):
        return [doc_id for doc_id, _ in self.snapshots[index]]


class TestDocuments:
    def test_new_ids_are_unique_and_twenty_chars(self, store):
        ids = {store.new_id() for _ in range(200)}
        assert len(ids) == 200
        assert all(len(i) == 20 and i.isalnum() for i in ids)

    def test_set_then_get_returns_copy(self, store):
        store.set("holidays", "a", {"title": "Rome"})
        doc = store.get("holidays", "a")
        doc["title"] = "changed"
        assert store.get("holidays", "a") == {"title": "Rome"}

    def test_set_overwrites_whole_document(self, store):
        store.set("holidays", "a", {"title": "Rome", "notes": "pizza"})
        store.set("holidays", "a", {"title": "Rome"})
        assert store.get("holidays", "a") == {"title": "Rome"}

    def test_delete_missing_document_is_not_an_error(self, store):
        store.delete("holidays", "ghost")
        assert store.get("holidays", "ghost") is None

    def test_empty_id_rejected(self, store):
        with pytest.raises(StoreError):
            store.set("holidays", "", {"title": "x"})

    def test_closed_store_rejects_writes(self):
        s = DocumentStore()
        s.close()
        with pytest.raises(StoreError, match="closed"):
            s.set("holidays", "a", {})


class TestListeners:
    def test_initial_snapshot_and_ordering(self, store):
        store.set("holidays", "old", {"createdAt": 1})
        store.set("holidays", "new", {"createdAt": 5})
        store.set("holidays", "unstamped", {})
        rec = Recorder()
        store.listen("holidays", rec.on_snapshot, order_by="createdAt", descending=True)
        assert store.flush(timeout=2)

        assert rec.ids() == ["new", "old", "unstamped"]

    def test_snapshot_after_each_write_in_order(self, store):
        rec = Recorder()
        store.listen("holidays", rec.on_snapshot)
        store.set("holidays", "a", {"title": "A"})
        store.set("holidays", "b", {"title": "B"})
        store.delete("holidays", "a")
        store.flush(timeout=2)

        assert [sorted(d for d, _ in snap) for snap in rec.snapshots] == [[], ["a"], ["a", "b"], ["b"]]

    def test_delivery_happens_off_the_caller_thread(self, store):
        rec = Recorder()
        store.listen("holidays", rec.on_snapshot)
        store.flush(timeout=2)
        assert threading.current_thread().name not in rec.threads

    def test_other_collections_do_not_notify(self, store):
        rec = Recorder()
        store.listen("holidays", rec.on_snapshot)
        store.set("other", "x", {})
        store.flush(timeout=2)
        assert len(rec.snapshots) == 1

    def test_removed_listener_gets_nothing_more(self, store):
        rec = Recorder()
        reg = store.listen("holidays", rec.on_snapshot)
        store.flush(timeout=2)
        reg.remove()
        store.set("holidays", "a", {})
        store.flush(timeout=2)
        assert len(rec.snapshots) == 1
        assert reg.active is False

    def test_failing_listener_is_removed_and_told_once(self, store):
        rec = Recorder()

        def explode(_snapshot):
            raise RuntimeError("bad document")

        reg = store.listen("holidays", explode, on_error=rec.on_error)
        store.set("holidays", "a", {})
        store.flush(timeout=2)

        assert len(rec.errors) == 1
        assert str(rec.errors[0]) == "bad document"
        assert reg.active is False


class TestPersistence:
    def test_documents_survive_reopen(self, file_store):
        s, path = file_store
        s.set("holidays", "a", {"title": "Rome"})
        s.close()

        reopened = DocumentStore(path)
        try:
            assert reopened.get("holidays", "a") == {"title": "Rome"}
        finally:
            reopened.close()

    def test_failed_save_leaves_state_unchanged(self, file_store):
        s, _ = file_store
        s.set("holidays", "a", {"title": "Rome"})
        with patch("holiday_planner.store.save_documents", side_effect=StoreError("disk full")):
            with pytest.raises(StoreError, match="disk full"):
                s.set("holidays", "a", {"title": "Paris"})
            with pytest.raises(StoreError):
                s.delete("holidays", "a")
        assert s.get("holidays", "a") == {"title": "Rome"}


class TestDispatcher:
    def test_task_errors_do_not_stop_the_loop(self):
        d = SnapshotDispatcher()
        d.start()
        ran = []
        d.submit(lambda: 1 / 0)
        d.submit(lambda: ran.append(True))
        assert d.join_pending(timeout=2)
        assert ran == [True]
        d.stop(timeout=2)
        assert not d.running

    def test_submit_after_stop_is_dropped(self):
        d = SnapshotDispatcher()
        d.start()
        d.stop(timeout=2)
        ran = []
        d.submit(lambda: ran.append(True))
        assert ran == []


class TestUnorderableSnapshots:
    """Order keys that cannot be compared end the affected listener, never the write."""

    def test_write_succeeds_and_listener_gets_error(self, store):
        rec = Recorder()
        store.set("holidays", "aware", {"createdAt": datetime(2024, 6, 1, tzinfo=timezone.utc)})
        reg = store.listen("holidays", rec.on_snapshot, rec.on_error, order_by="createdAt", descending=True)
        store.flush(timeout=2)

        store.set("holidays", "naive", {"createdAt": datetime(2024, 1, 1)})
        store.set("holidays", "later", {"createdAt": datetime(2024, 7, 1, tzinfo=timezone.utc)})
        store.flush(timeout=2)

        assert store.get("holidays", "naive") is not None
        assert store.get("holidays", "later") is not None
        assert len(rec.snapshots) == 1
        assert len(rec.errors) == 1
        assert isinstance(rec.errors[0], StoreError)
        assert reg.active is False

    def test_other_listeners_still_notified(self, store):
        ordered, plain = Recorder(), Recorder()
        store.set("holidays", "aware", {"createdAt": datetime(2024, 6, 1, tzinfo=timezone.utc)})
        store.listen("holidays", ordered.on_snapshot, ordered.on_error, order_by="createdAt")
        store.listen("holidays", plain.on_snapshot, plain.on_error)
        store.flush(timeout=2)

        store.set("holidays", "naive", {"createdAt": datetime(2024, 1, 1)})
        store.flush(timeout=2)

        assert len(ordered.errors) == 1
        assert plain.errors == []
        assert sorted(d for d, _ in plain.snapshots[-1]) == ["aware", "naive"]

    def test_listen_on_unorderable_collection_is_not_kept(self, store):
        store.set("holidays", "aware", {"createdAt": datetime(2024, 6, 1, tzinfo=timezone.utc)})
        store.set("holidays", "naive", {"createdAt": datetime(2024, 1, 1)})
        rec = Recorder()
        reg = store.listen("holidays", rec.on_snapshot, rec.on_error, order_by="createdAt")
        store.flush(timeout=2)
        store.set("holidays", "more", {})
        store.flush(timeout=2)

        assert reg.active is False
        assert rec.snapshots == []
        assert len(rec.errors) == 1
