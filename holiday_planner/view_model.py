"""
Design (view_model.py)
- Purpose: Single source of truth for what the UI renders, and the mediator between UI
           intents and the repository.
- Inputs: UI calls (set_query, add/update/delete, clear_error).
- Outputs: Four observables: query, holidays, loading, error.
- Side effects: Repository writes; keeps exactly one live query open.
- Thread-safety: Write methods block the calling thread (the UI runs them on worker
                 threads). Overlapping writes race on loading/error; last write wins.
                 Subscription replacement is atomic under _watch_lock.
"""

import logging
import threading
from typing import List, Optional

from .models import Holiday
from .observable import Observable
from .repository import HolidayRepository, Subscription
from .result import Result

logger = logging.getLogger(__name__)


class HolidayViewModel:
    """
    Design (HolidayViewModel)
    - Public attributes:
        query (Observable[str]): current search text
        holidays (Observable[list[Holiday]]): latest filtered list from the live query
        loading (Observable[bool]): True while a write is in flight
        error (Observable[str | None]): last failure message, until cleared/overwritten
    - Public methods:
        set_query(), add_holiday(), update_holiday(), delete_holiday(), clear_error(), close()
    """

    def __init__(self, repo: HolidayRepository) -> None:
        self.repo = repo
        self.query: Observable[str] = Observable("")
        self.holidays: Observable[List[Holiday]] = Observable([])
        self.loading: Observable[bool] = Observable(False)
        self.error: Observable[Optional[str]] = Observable(None)

        self._watch_lock = threading.RLock()
        self._subscription: Optional[Subscription] = None
        self._closed = False
        self._observe(self.query.value)

    # ---------- live query ----------

    def _observe(self, text: str) -> None:
        """Stop the current subscription (if any) and start one for text."""
        with self._watch_lock:
            if self._closed:
                return
            if self._subscription is not None:
                self._subscription.stop()
            holder: List[Subscription] = []

            def is_current() -> bool:
                # holder is empty only while repo.watch() runs on this thread (re-entrant lock)
                with self._watch_lock:
                    return not holder or self._subscription is holder[0]

            def publish(items: List[Holiday]) -> None:
                # drop emissions from a subscription that has since been replaced
                if not is_current():
                    return
                self.holidays.set(items)

            def fail(exc: Exception) -> None:
                if not is_current():
                    logger.debug("Ignoring error from replaced subscription: %s", exc)
                    return
                logger.error("Holiday list subscription failed: %s", exc)
                self.error.set(str(exc) or type(exc).__name__)

            subscription = self.repo.watch(text, publish, fail)
            holder.append(subscription)
            self._subscription = subscription

    def set_query(self, text: str) -> None:
        """Update the search text and re-subscribe scoped to it."""
        self.query.set(text)
        self._observe(text)

    # ---------- writes ----------

    def _run_write(self, action: str, result_fn) -> Result:
        self.loading.set(True)
        try:
            res = result_fn()
            if res.is_failure:
                logger.warning("%s failed: %s", action, res.error_message)
                self.error.set(res.error_message)
            return res
        finally:
            self.loading.set(False)

    def add_holiday(self, holiday: Holiday) -> Result:
        return self._run_write("Add", lambda: self.repo.create(holiday))

    def update_holiday(self, holiday: Holiday) -> Result:
        return self._run_write("Update", lambda: self.repo.update(holiday))

    def delete_holiday(self, holiday: Holiday) -> Result:
        return self._run_write("Delete", lambda: self.repo.delete(holiday.id))

    def clear_error(self) -> None:
        self.error.set(None)

    def close(self) -> None:
        """Stop the live query; no further list updates are published."""
        with self._watch_lock:
            self._closed = True
            if self._subscription is not None:
                self._subscription.stop()
                self._subscription = None
