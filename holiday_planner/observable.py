"""
Design (observable.py)
- Purpose: A single observable value the UI can read and subscribe to.
- Inputs: New values via set().
- Outputs: Current value; change callbacks (new value) to subscribers.
- Side effects: Calls subscriber callbacks on the thread that called set().
- Thread-safety: Value and subscriber list are guarded by a lock; callbacks run outside it.
"""

import logging
import threading
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Observable(Generic[T]):
    def __init__(self, initial: T) -> None:
        self._lock = threading.Lock()
        self._value = initial
        self._subscribers: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        """Replace the value; subscribers hear about it only if it changed."""
        with self._lock:
            if value == self._value:
                return
            self._value = value
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(value)
            except Exception:
                logger.exception("Observable subscriber failed")

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register callback; returns a function that unregisters it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe
