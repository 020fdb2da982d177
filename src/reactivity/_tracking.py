"""Dependency tracking engine — the observer context.

Uses contextvars to track which effect is currently executing, so that any
Signal.get() call made during the run registers that effect as a subscriber.
A ContextVar keeps the pointer local to the thread or asyncio task running the
computation. Each reset token remembers the previous observer, so nested runs
unwind like a stack.
"""

from __future__ import annotations

import contextvars
from typing import TYPE_CHECKING, Callable, TypeVar

if TYPE_CHECKING:
    from reactivity.effect import Effect

T = TypeVar("T")

# The currently-executing effect (plain effects and the effects behind memos).
current_observer: contextvars.ContextVar[Effect | None] = contextvars.ContextVar(
    "current_observer", default=None
)


def get_observer() -> Effect | None:
    """The effect that reads should register with, if any."""
    return current_observer.get()


def run_with_observer(observer: Effect | None, fn: Callable[[], T]) -> T:
    """Run fn with observer as the current observer.

    The previous observer is restored when fn returns or raises. The result
    or exception of fn passes through unchanged.
    """
    token = current_observer.set(observer)
    try:
        return fn()
    finally:
        current_observer.reset(token)


def untrack(fn: Callable[[], T]) -> T:
    """Run fn without registering any dependency for the enclosing effect.

    Usage:
        create_effect(lambda: log.append((count(), untrack(label))))
        # re-runs when count changes, but not when label changes
    """
    return run_with_observer(None, fn)
