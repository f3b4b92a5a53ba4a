"""
Design (utils.py)
- Purpose: Reusable helpers: created-at display formatting, title check, desktop
           notifications, and a logging handler that forwards records to a callback.
- Inputs: Various helper parameters (timestamps, text, messages).
- Outputs: Helper results (strings, bools).
- Side effects: notify() shows a desktop notification through plyer.
- Thread-safety: Stateless; safe to call from any thread.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from plyer import notification

from .config import CREATED_AT_FORMAT, LOG_DATE_FORMAT, LOG_FORMAT, NOTIFICATION_TIMEOUT_SEC
from .models import Holiday

logger = logging.getLogger(__name__)


def format_created_at(created_at: Optional[datetime]) -> str:
    """
    Purpose: Render a creation stamp in local time, e.g. "01 Jun 2024, 09:05 AM".
    Inputs: created_at (aware or naive datetime, or None).
    Outputs: Display string ('' when None).
    """
    if created_at is None:
        return ""
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at.astimezone().strftime(CREATED_AT_FORMAT)


def holiday_row(holiday: Holiday) -> Tuple[str, ...]:
    """Column values for one list row: title, location, notes, start, end, created."""
    return (
        holiday.title,
        holiday.location,
        holiday.notes,
        holiday.start_date,
        holiday.end_date,
        format_created_at(holiday.created_at),
    )


def is_blank(text: Optional[str]) -> bool:
    return not text or not text.strip()


def notify(title: str, message: str) -> None:
    """
    Purpose: Show a desktop notification.
    Side Effects: Calls the platform notifier; failures are logged, not raised
                  (no notifier backend on some systems).
    """
    try:
        notification.notify(title=title, message=message, timeout=NOTIFICATION_TIMEOUT_SEC)
    except Exception as e:
        logger.warning("Desktop notification unavailable: %s", e)


class CallbackLogHandler(logging.Handler):
    """Formats each record and hands the line to sink (used by the Logs panel)."""

    def __init__(self, sink: Callable[[str], None], level: int = logging.INFO) -> None:
        super().__init__(level)
        self.sink = sink
        self.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.sink(self.format(record) + "\n")
        except Exception:
            self.handleError(record)
