"""Lazily evaluated result values."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")

_PENDING = object()


class Deferred(Generic[T]):
    """A computation that runs on the caller's thread the first time it is awaited.

    Construction performs no work. ``result()`` evaluates the thunk once and
    memoises either the value or the raised exception, so a submitted
    transaction is never sent twice. Composition with ``map`` and ``then``
    stays lazy.
    """

    def __init__(self, thunk: Callable[[], T], *, description: str = "") -> None:
        self._thunk = thunk
        self._description = description
        self._lock = threading.Lock()
        self._value: object = _PENDING
        self._error: Exception | None = None

    @classmethod
    def of(cls, value: T) -> Deferred[T]:
        deferred: Deferred[T] = cls(lambda: value, description="constant")
        return deferred

    @property
    def description(self) -> str:
        return self._description

    def done(self) -> bool:
        return self._value is not _PENDING or self._error is not None

    def result(self) -> T:
        with self._lock:
            if not self.done():
                try:
                    self._value = self._thunk()
                except Exception as exc:
                    self._error = exc
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]

    def map(self, fn: Callable[[T], U]) -> Deferred[U]:
        return Deferred(lambda: fn(self.result()), description=self._description)

    def then(self, fn: Callable[[T], Deferred[U]]) -> Deferred[U]:
        return Deferred(lambda: fn(self.result()).result(), description=self._description)

    def __repr__(self) -> str:
        state = "done" if self.done() else "pending"
        return f"Deferred({self._description or 'anonymous'}, {state})"
