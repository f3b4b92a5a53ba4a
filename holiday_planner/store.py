"""
Design (store.py)
- Purpose: Schemaless document store (collection + id -> dict) with live snapshot
           listeners, standing in for a managed document database client.
- Inputs: Collection names, document ids, plain dict bodies.
- Outputs: Document copies; ordered snapshots pushed to listeners.
- Side effects: Optional JSON persistence after every write; snapshot delivery on the
                dispatcher thread.
- Thread-safety: All document and listener state is guarded by one lock; snapshots are
                 copies taken under the lock and delivered outside it.
"""

import copy
import logging
import secrets
import string
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import DISPATCH_SHUTDOWN_TIMEOUT_SEC, DOCUMENT_ID_LENGTH
from .dispatcher import SnapshotDispatcher
from .exceptions import StoreError
from .storage import Collections, load_documents, save_documents

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
Snapshot = List[Tuple[str, Document]]
SnapshotCallback = Callable[[Snapshot], None]
ErrorCallback = Callable[[Exception], None]

_ID_ALPHABET = string.ascii_letters + string.digits


class ListenerRegistration:
    """
    Design (ListenerRegistration)
    - Purpose: Handle returned by DocumentStore.listen(); remove() detaches the listener.
    - State:
        collection, order_by, descending: query shape
        active: False once removed (queued deliveries for it are dropped)
    """

    def __init__(self, store: "DocumentStore", collection: str, on_snapshot: SnapshotCallback,
                 on_error: Optional[ErrorCallback], order_by: Optional[str], descending: bool) -> None:
        self._store = store
        self.collection = collection
        self.order_by = order_by
        self.descending = descending
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self.active = True

    def remove(self) -> None:
        self._store._detach(self)

    def _deliver(self, snapshot: Snapshot) -> None:
        # runs on the dispatcher thread
        if not self.active:
            return
        try:
            self._on_snapshot(snapshot)
        except Exception as e:
            logger.warning("Listener on %r failed, removing it: %s", self.collection, e)
            self.remove()
            self._report(e)

    def _report(self, exc: Exception) -> None:
        # runs on the dispatcher thread; the listener is already detached
        if self._on_error is not None:
            self._on_error(exc)


class DocumentStore:
    """
    Design (DocumentStore)
    - State:
        _collections: {collection -> {doc_id -> data}}
        _listeners: registered ListenerRegistration objects
        _path: JSON file persisted after every write (None = memory only)
        _lock: threading.Lock for all reads/writes of the above
        _dispatcher: SnapshotDispatcher delivering snapshots off the writer's thread
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._lock = threading.Lock()
        self._path = path
        self._collections: Collections = load_documents(path) if path is not None else {}
        self._listeners: List[ListenerRegistration] = []
        self._closed = False
        self._dispatcher = SnapshotDispatcher()
        self._dispatcher.start()
        if path is not None:
            count = sum(len(docs) for docs in self._collections.values())
            logger.info("Opened store %s (%d documents)", path, count)

    # -------- Documents --------

    def new_id(self) -> str:
        """Random 20-char alphanumeric id, the same shape hosted document stores hand out."""
        return "".join(secrets.choice(_ID_ALPHABET) for _ in range(DOCUMENT_ID_LENGTH))

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def set(self, collection: str, doc_id: str, data: Document) -> None:
        """
        Purpose: Insert or overwrite the whole document at doc_id.
        Side effects: Persists (if configured) and notifies listeners of the collection.
        Raises: StoreError if the store is closed or persistence fails (state unchanged).
        """
        if not doc_id:
            raise StoreError("Document id must not be empty")
        with self._lock:
            self._check_open()
            updated = dict(self._collections)
            docs = dict(updated.get(collection, {}))
            docs[doc_id] = copy.deepcopy(data)
            updated[collection] = docs
            self._commit(updated)
            self._notify(collection)
        logger.debug("set %s/%s", collection, doc_id)

    def delete(self, collection: str, doc_id: str) -> None:
        """Remove doc_id; missing documents are not an error."""
        with self._lock:
            self._check_open()
            docs = self._collections.get(collection, {})
            if doc_id not in docs:
                logger.debug("delete %s/%s: not found", collection, doc_id)
                return
            updated = dict(self._collections)
            docs = dict(docs)
            docs.pop(doc_id)
            updated[collection] = docs
            self._commit(updated)
            self._notify(collection)
        logger.debug("deleted %s/%s", collection, doc_id)

    # -------- Live queries --------

    def listen(self, collection: str, on_snapshot: SnapshotCallback,
               on_error: Optional[ErrorCallback] = None, order_by: Optional[str] = None,
               descending: bool = False) -> ListenerRegistration:
        """
        Purpose: Register a live query; an initial snapshot is queued immediately and a
                 fresh one after every write to the collection.
        Outputs: ListenerRegistration (call remove() to stop).
        Thread-safety: Callbacks run on the dispatcher thread, never the caller's.
        """
        reg = ListenerRegistration(self, collection, on_snapshot, on_error, order_by, descending)
        with self._lock:
            self._check_open()
            self._listeners.append(reg)
            self._queue_snapshot(reg)
        logger.debug("listener added on %r (order_by=%s desc=%s)", collection, order_by, descending)
        return reg

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait until every queued snapshot has been delivered."""
        return self._dispatcher.join_pending(timeout)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for reg in self._listeners:
                reg.active = False
            self._listeners.clear()
        self._dispatcher.stop(DISPATCH_SHUTDOWN_TIMEOUT_SEC)
        logger.info("Store closed")

    # -------- internals (call with _lock held unless noted) --------

    def _check_open(self) -> None:
        if self._closed:
            raise StoreError("Store is closed")

    def _commit(self, updated: Collections) -> None:
        if self._path is not None:
            save_documents(updated, self._path)
        self._collections = updated

    def _notify(self, collection: str) -> None:
        for reg in list(self._listeners):
            if reg.collection == collection:
                self._queue_snapshot(reg)

    def _queue_snapshot(self, reg: ListenerRegistration) -> None:
        """Queue a snapshot for reg; a snapshot that cannot be built ends that listener only."""
        try:
            snapshot = self._snapshot(reg.collection, reg.order_by, reg.descending)
        except StoreError as e:
            logger.warning("Listener on %r failed, removing it: %s", reg.collection, e)
            reg.active = False
            if reg in self._listeners:
                self._listeners.remove(reg)
            self._dispatcher.submit(lambda err=e: reg._report(err))
            return
        self._dispatcher.submit(lambda: reg._deliver(snapshot))

    def _snapshot(self, collection: str, order_by: Optional[str], descending: bool) -> Snapshot:
        items = [(doc_id, copy.deepcopy(data)) for doc_id, data in self._collections.get(collection, {}).items()]
        if order_by is None:
            return items
        present = [item for item in items if item[1].get(order_by) is not None]
        missing = [item for item in items if item[1].get(order_by) is None]
        try:
            present.sort(key=lambda item: item[1][order_by], reverse=descending)
        except TypeError as e:
            raise StoreError(f"Cannot order {collection!r} by {order_by!r}: {e}") from e
        return present + missing

    def _detach(self, reg: ListenerRegistration) -> None:
        # safe from any thread, including the dispatcher
        with self._lock:
            reg.active = False
            if reg in self._listeners:
                self._listeners.remove(reg)
