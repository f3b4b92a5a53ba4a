"""
Design (repository.py)
- Purpose: Translate holiday intents (create/update/delete/watch) into document store calls.
- Inputs: Holiday objects, ids, search text.
- Outputs: Result values for writes/reads; a Subscription for live queries.
- Side effects: Store writes; store listeners while a Subscription is active.
- Errors: Nothing raised past this layer. Write failures come back as Result.failure;
          live query failures end the subscription and go to on_error.
- Thread-safety: Stateless apart from the store (which locks); watch callbacks run on
                 the store's dispatcher thread.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, List, Optional

from .config import HOLIDAYS_COLLECTION, ORDER_FIELD
from .exceptions import InvalidArgumentError, SubscriptionError
from .models import Holiday
from .result import Result
from .store import DocumentStore, ListenerRegistration, Snapshot

logger = logging.getLogger(__name__)


def filter_holidays(holidays: List[Holiday], query: str) -> List[Holiday]:
    """Keep holidays whose title or location contains query (case-insensitive)."""
    if not query or not query.strip():
        return list(holidays)
    return [h for h in holidays if h.matches(query)]


class Subscription:
    """
    Design (Subscription)
    - Purpose: Handle for one live query; stop() detaches it from the store.
    - State:
        query: search text this subscription filters by
        active: True until stop() or a terminating error
    """

    def __init__(self, query: str) -> None:
        self.query = query
        self._lock = threading.Lock()
        self._registration: Optional[ListenerRegistration] = None
        self._stopped = False

    @property
    def active(self) -> bool:
        with self._lock:
            return not self._stopped

    def stop(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            registration = self._registration
        if registration is not None:
            registration.remove()

    def _attach(self, registration: ListenerRegistration) -> None:
        with self._lock:
            self._registration = registration
            stopped = self._stopped
        if stopped:
            registration.remove()


class HolidayRepository:
    def __init__(self, store: DocumentStore, collection: str = HOLIDAYS_COLLECTION) -> None:
        self.store = store
        self.collection = collection

    def create(self, holiday: Holiday) -> Result[str]:
        """
        Purpose: Persist a new holiday under a freshly allocated id.
        Inputs: holiday (its id/created_at are ignored and replaced)
        Outputs: Result with the new id
        Side effects: One store write; created_at stamped with the current UTC time.
        """
        try:
            doc_id = self.store.new_id()
            to_save = holiday.with_id(doc_id, created_at=datetime.now(timezone.utc))
            self.store.set(self.collection, doc_id, to_save.to_document())
            logger.info("Created holiday %s (%r)", doc_id, holiday.title)
            return Result.success(doc_id)
        except Exception as e:
            logger.warning("Create failed: %s", e)
            return Result.failure(e)

    def update(self, holiday: Holiday) -> Result[None]:
        """
        Purpose: Overwrite the whole document at holiday.id.
        Outputs: Result; InvalidArgumentError (no store call) when id is empty.
        """
        if not holiday.id:
            return Result.failure(InvalidArgumentError("Missing id"))
        try:
            self.store.set(self.collection, holiday.id, holiday.to_document())
            logger.info("Updated holiday %s", holiday.id)
            return Result.success()
        except Exception as e:
            logger.warning("Update of %s failed: %s", holiday.id, e)
            return Result.failure(e)

    def delete(self, holiday_id: str) -> Result[None]:
        """Remove a holiday; an id that does not exist still succeeds."""
        try:
            self.store.delete(self.collection, holiday_id)
            logger.info("Deleted holiday %s", holiday_id)
            return Result.success()
        except Exception as e:
            logger.warning("Delete of %s failed: %s", holiday_id, e)
            return Result.failure(e)

    def get(self, holiday_id: str) -> Result[Optional[Holiday]]:
        try:
            data = self.store.get(self.collection, holiday_id)
            if data is None:
                return Result.success(None)
            return Result.success(Holiday.from_document(holiday_id, data))
        except Exception as e:
            return Result.failure(e)

    def watch(self, query: str, on_change: Callable[[List[Holiday]], None],
              on_error: Optional[Callable[[Exception], None]] = None) -> Subscription:
        """
        Purpose: Open a live query over all holidays, newest first, filtered by query.
        Inputs:
            query: search text (blank = everything)
            on_change: called with the filtered list after every change
            on_error: called once if the subscription terminates with an error
        Outputs: Subscription (stop() to cancel)
        Thread-safety: on_change/on_error run on the store's dispatcher thread.
        """
        subscription = Subscription(query)

        def handle_snapshot(snapshot: Snapshot) -> None:
            if not subscription.active:
                return
            holidays = [Holiday.from_document(doc_id, data) for doc_id, data in snapshot]
            on_change(filter_holidays(holidays, query))

        def handle_error(exc: Exception) -> None:
            # the store has already detached the listener
            subscription.stop()
            logger.error("Live query on %r (query=%r) ended: %s", self.collection, query, exc)
            if on_error is not None:
                on_error(SubscriptionError(str(exc) or type(exc).__name__, self.collection))

        try:
            registration = self.store.listen(
                self.collection,
                handle_snapshot,
                on_error=handle_error,
                order_by=ORDER_FIELD,
                descending=True,
            )
        except Exception as e:
            handle_error(e)
            return subscription
        subscription._attach(registration)
        logger.debug("Watching %r with query %r", self.collection, query)
        return subscription
