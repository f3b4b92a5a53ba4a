"""Tests for helper functions."""

import logging
from datetime import datetime, timezone
from unittest.mock import patch

from holiday_planner.models import Holiday
from holiday_planner.utils import CallbackLogHandler, format_created_at, holiday_row, is_blank, notify


def test_format_created_at_none_is_empty():
    assert format_created_at(None) == ""


def test_format_created_at_pattern():
    stamp = datetime(2024, 6, 1, 9, 5, tzinfo=timezone.utc)
    expected = stamp.astimezone().strftime("%d %b %Y, %I:%M %p")
    assert format_created_at(stamp) == expected


def test_format_created_at_treats_naive_as_utc():
    naive = datetime(2024, 6, 1, 9, 5)
    assert format_created_at(naive) == format_created_at(naive.replace(tzinfo=timezone.utc))


def test_is_blank():
    assert is_blank("")
    assert is_blank("   ")
    assert is_blank(None)
    assert not is_blank(" Paris ")


@patch("holiday_planner.utils.notification")
def test_notify_passes_title_and_message(mock_notification):
    notify("Holiday Planner error", "network down")
    mock_notification.notify.assert_called_once_with(
        title="Holiday Planner error", message="network down", timeout=5
    )


@patch("holiday_planner.utils.notification")
def test_notify_swallows_missing_backend(mock_notification):
    mock_notification.notify.side_effect = NotImplementedError("no backend")
    notify("t", "m")


def test_callback_log_handler_formats_lines():
    lines = []
    handler = CallbackLogHandler(lines.append)
    log = logging.getLogger("holiday_planner.test_handler")
    log.addHandler(handler)
    log.setLevel(logging.INFO)
    try:
        log.info("Created holiday %s", "abc")
        log.debug("hidden")
    finally:
        log.removeHandler(handler)

    assert len(lines) == 1
    assert lines[0].endswith("Created holiday abc\n")
    assert "INFO holiday_planner.test_handler" in lines[0]


def test_holiday_row_includes_notes():
    h = Holiday(title="Paris Trip", location="Paris", notes="book the louvre",
                start_date="2024-06-01", end_date="2024-06-10")
    assert holiday_row(h) == ("Paris Trip", "Paris", "book the louvre", "2024-06-01", "2024-06-10", "")
