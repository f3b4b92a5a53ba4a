"""
Design (config.py)
- Purpose: Centralize constants and configuration.
- Inputs: None.
- Outputs: Constants (collection names, file names, UI sizes, display formats).
- Side effects: None.
- Thread-safety: N/A (read-only constants).
"""

APP_TITLE = "Holiday Planner"

# Document store layout
HOLIDAYS_COLLECTION = "holidays"
ORDER_FIELD = "createdAt"     # live list is ordered by this field, newest first
DOCUMENT_ID_LENGTH = 20

# Persistence: filename for the local store (path resolved in storage module)
STORE_FILENAME = "holidays.json"
APP_DATA_DIRNAME = "Holiday Planner"

# "dd MMM yyyy, hh:mm a" as shown on each holiday row
CREATED_AT_FORMAT = "%d %b %Y, %I:%M %p"

# maximum number of log lines kept in the Logs panel (oldest trimmed)
LOG_MAX_LINES = 1000
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NOTIFICATION_TIMEOUT_SEC = 5

# Seconds to wait for pending snapshot deliveries on shutdown
DISPATCH_SHUTDOWN_TIMEOUT_SEC = 2.0

EMPTY_LIST_TEXT = "No holidays planned yet"
EMPTY_SEARCH_TEXT = "No holidays match your search"
BLANK_TITLE_TEXT = "Enter title"
