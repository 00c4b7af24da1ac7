"""
Process-wide lazy cells.

Values built here survive across warm Lambda invocations.
"""

from threading import Lock
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

_UNSET = object()


class LazyCell(Generic[T]):
    """Thread-safe build-once holder for an expensive collaborator."""

    def __init__(self, factory: Callable[[], T]):
        self._factory = factory
        self._value = _UNSET
        self._lock = Lock()

    def get(self) -> T:
        """Return the value, building it on first use."""
        if self._value is _UNSET:
            with self._lock:
                # A concurrent caller may have finished while we waited.
                if self._value is _UNSET:
                    self._value = self._factory()
        return self._value

