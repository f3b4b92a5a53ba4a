"""
Design (exceptions.py)
- Purpose: Exception types for failures that cross module boundaries.
- Hierarchy:
    HolidayPlannerError (base)
    ├── InvalidArgumentError - caller passed an unusable value (e.g. update without id)
    ├── StoreError - document store failure (persistence I/O, closed store)
    └── SubscriptionError - a live snapshot could not be delivered
- Thread-safety: N/A.
"""


class HolidayPlannerError(Exception):
    """Base class for all application errors."""


class InvalidArgumentError(HolidayPlannerError, ValueError):
    pass


class StoreError(HolidayPlannerError):
    pass


class SubscriptionError(HolidayPlannerError):
    """Wraps the failure that terminated a live subscription."""

    def __init__(self, message: str, collection: str = "") -> None:
        super().__init__(message)
        self.collection = collection
