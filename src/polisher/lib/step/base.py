"""Formatter step abstraction shared by every wrapped formatter."""

from __future__ import annotations

import threading
from collections.abc import Callable, Hashable
from pathlib import Path
from typing import Protocol

import structlog

from polisher.lib.step.lazy import Lazy
from polisher.lib.types import StepName

logger = structlog.get_logger(__name__)


class FormatterFunc(Protocol):
    """Callable that turns source text into formatted text."""

    def __call__(self, text: str, path: Path | None = None) -> str: ...


type StateSupplier[S] = Callable[[], S]
type FormatFactory[S] = Callable[[S], FormatterFunc]


class FormatterStep[S: Hashable]:
    """Named formatting step built lazily from a hashable state.

    Two steps are equal when their names and states are equal, which makes a
    step usable as a cache key. Comparing steps evaluates their state.
    """

    __slots__ = ("_format_factory", "_func", "_name", "_state", "_state_supplier")

    def __init__(
        self,
        name: StepName | str,
        state_supplier: StateSupplier[S],
        format_factory: FormatFactory[S],
    ) -> None:
        self._name = StepName(name)
        self._state_supplier = state_supplier
        self._format_factory = format_factory
        self._state: Lazy[S] = Lazy(state_supplier)
        self._func: Lazy[FormatterFunc] = Lazy(self._create_func)

    @classmethod
    def create_lazy(
        cls,
        name: StepName | str,
        state_supplier: StateSupplier[S],
        format_factory: FormatFactory[S],
    ) -> FormatterStep[S]:
        return cls(name, state_supplier, format_factory)

    @classmethod
    def create(
        cls,
        name: StepName | str,
        state: S,
        format_factory: FormatFactory[S],
    ) -> FormatterStep[S]:
        return cls(name, _Constant(state), format_factory)

    @property
    def name(self) -> StepName:
        return self._name

    @property
    def state(self) -> S:
        return self._state.get()

    def _create_func(self) -> FormatterFunc:
        with structlog.contextvars.bound_contextvars(step=self._name):
            state = self._state.get()
            logger.debug("Creating formatter function.")
            return self._format_factory(state)

    def format(self, text: str, path: Path | None = None) -> str:
        """Format `text`; `path` is a hint for formatters that pick a parser by name."""

        return self._func.get()(text, path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FormatterStep):
            return NotImplemented
        return self._name == other._name and self.state == other.state

    def __hash__(self) -> int:
        return hash((self._name, self.state))

    def __repr__(self) -> str:
        return f"FormatterStep(name={self._name!r})"

    def __reduce__(self) -> tuple[object, ...]:
        return (type(self), (self._name, self._state_supplier, self._format_factory))


class _Constant[S]:
    __slots__ = ("value",)

    def __init__(self, value: S) -> None:
        self.value = value

    def __call__(self) -> S:
        return self.value

    def __reduce__(self) -> tuple[object, ...]:
        return (_Constant, (self.value,))


class StepCache:
    """Thread-safe registry that builds each configured step once."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._steps: dict[Hashable, FormatterStep[Hashable]] = {}

    def get_or_create(
        self,
        key: Hashable,
        factory: Callable[[], FormatterStep[Hashable]],
    ) -> FormatterStep[Hashable]:
        with self._lock:
            step = self._steps.get(key)
            if step is None:
                step = factory()
                self._steps[key] = step
            return step

    def __len__(self) -> int:
        with self._lock:
            return len(self._steps)

    def clear(self) -> None:
        with self._lock:
            self._steps.clear()
