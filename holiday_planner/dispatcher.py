"""
Background snapshot dispatcher.

Design:
- Runs in its own daemon thread so writers never wait on listeners.
- The store submits one callable per (listener, snapshot); the thread runs them in
  submission order, so each listener sees snapshots in the order writes happened.
- A task that raises is logged and skipped; the loop keeps going.
- Methods:
    start(): begin the daemon thread
    submit(task): enqueue a callable
    join_pending(timeout): wait until the queue is drained
    stop(): signal the thread to stop after the tasks already queued
- Thread-safety: queue.Queue does the locking; submit() is safe from any thread.
"""

import logging
import queue
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

_STOP = object()


class SnapshotDispatcher:
    def __init__(self, name: str = "snapshot-dispatcher"):
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._loop, name=name, daemon=True)

    @property
    def running(self) -> bool:
        return self._thread.is_alive() and not self._stop.is_set()

    def start(self) -> None:
        self._thread.start()

    def submit(self, task: Callable[[], None]) -> None:
        if self._stop.is_set():
            logger.debug("Dispatcher stopped; dropping task %r", task)
            return
        self._queue.put(task)

    def join_pending(self, timeout: Optional[float] = None) -> bool:
        """
        Purpose: Block until every submitted task has run.
        Inputs: timeout in seconds (None waits forever).
        Outputs: True if the queue drained, False on timeout.
        """
        if timeout is None:
            self._queue.join()
            return True
        # Queue.join() has no timeout; poll unfinished_tasks instead
        deadline = time.monotonic() + timeout
        while self._queue.unfinished_tasks:
            if time.monotonic() >= deadline:
                return False
            time.sleep(0.005)
        return True

    def stop(self, timeout: Optional[float] = None) -> None:
        if self._stop.is_set():
            return
        self._stop.set()
        self._queue.put(_STOP)
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout)

    def _loop(self) -> None:
        while True:
            task = self._queue.get()
            try:
                if task is _STOP:
                    return
                task()  # type: ignore[operator]
            except Exception:
                logger.exception("Snapshot delivery failed")
            finally:
                self._queue.task_done()
