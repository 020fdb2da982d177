"""Memos — derived values that recompute eagerly.

A Memo is an Effect that writes the result of fn into an internal Signal.
Calling the memo reads that Signal, so memos compose with signals and other
memos: an effect or memo that calls a memo subscribes to it.

The internal Signal never suppresses writes (equals=False), so every
dependency change notifies the memo's readers even when the recomputed
value is unchanged.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from reactivity.effect import Effect, create_effect
from reactivity.signal import Signal

T = TypeVar("T")


class Memo(Generic[T]):
    """A derived value. Call it to read the current value."""

    __slots__ = ("_signal", "_effect")

    def __init__(self, fn: Callable[[], T], initial_value: T | None = None, *, name: str | None = None) -> None:
        self._signal: Signal[T | None] = Signal(initial_value, equals=False, name=name)
        # Runs fn immediately, so initial_value is replaced before anyone reads it.
        self._effect = create_effect(
            lambda: self._signal.set(_constant(fn())),
            name=name or getattr(fn, "__name__", None),
        )

    def __call__(self) -> T:
        return self._signal.get()

    @property
    def effect(self) -> Effect:
        """The effect that recomputes this memo."""
        return self._effect

    def dispose(self) -> None:
        """Stop recomputing. The last value stays readable."""
        self._effect.dispose()

    def __repr__(self) -> str:
        return f"Memo({self._effect.name}, {self._signal._value!r})"


def _constant(value):
    """Wrap value so Signal.set() stores it even when it is callable."""
    return lambda _prev: value


def create_memo(fn: Callable[[], T], initial_value: T | None = None, *, name: str | None = None) -> Memo[T]:
    """Create a derived value that tracks the signals fn reads.

    Usage:
        count, set_count = create_signal(1)
        doubled = create_memo(lambda: count() * 2)
        set_count(5)
        doubled()  # 10
    """
    return Memo(fn, initial_value, name=name)
