"""
Design (result.py)
- Purpose: Tagged success/failure value returned by repository operations, so store
           failures never escape as raised exceptions past the repository.
- Inputs: A value (success) or an exception (failure).
- Outputs: Result instances.
- Side effects: None.
- Thread-safety: Immutable (frozen dataclass).
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "Result[T]":
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    @property
    def error_message(self) -> Optional[str]:
        """Human-readable failure message (exception text, or its class name when empty)."""
        if self.error is None:
            return None
        return str(self.error) or type(self.error).__name__
