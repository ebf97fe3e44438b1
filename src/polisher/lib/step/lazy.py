"""Lock-guarded, compute-once values with memoized failures."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from types import TracebackType


@dataclass(frozen=True, slots=True)
class Success[T]:
    value: T


@dataclass(frozen=True, slots=True)
class Failure:
    cause: Exception
    # Snapshot taken when the failure was memoized; each re-raise starts from it.
    traceback: TracebackType | None = field(default=None, compare=False, repr=False)


type Outcome[T] = Success[T] | Failure


class Lazy[T]:
    """Value computed at most once, even when first use races across threads.

    A failing supplier is not retried: the failure is memoized and re-raised
    to every later caller.
    """

    __slots__ = ("_lock", "_outcome", "_supplier")

    def __init__(self, supplier: Callable[[], T]) -> None:
        self._supplier: Callable[[], T] | None = supplier
        self._lock = threading.Lock()
        self._outcome: Outcome[T] | None = None

    @property
    def initialized(self) -> bool:
        return self._outcome is not None

    def outcome(self) -> Outcome[T]:
        outcome = self._outcome
        if outcome is not None:
            return outcome
        with self._lock:
            outcome = self._outcome
            if outcome is None:
                supplier = self._supplier
                assert supplier is not None
                try:
                    outcome = Success(supplier())
                except Exception as error:
                    outcome = Failure(error, error.__traceback__)
                self._outcome = outcome
                # Release whatever the supplier closed over.
                self._supplier = None
        return outcome

    def get(self) -> T:
        outcome = self.outcome()
        if isinstance(outcome, Failure):
            raise outcome.cause.with_traceback(outcome.traceback)
        return outcome.value
