"""Signals — mutable cells that track their readers.

When a Signal is read while an Effect is running, the Effect is registered as
a subscriber. When the Signal is written with a value that counts as
changed, every subscriber re-runs synchronously, in subscription order.

Thread safety: call set_dispatcher() once from the owning thread. After that,
any set() from another thread is handed to the dispatcher. Writes on the
owning thread remain synchronous.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Callable, Generic, TypeVar, Union

from reactivity._tracking import get_observer
from reactivity.debug import emit_read, emit_write, is_debug_mode
from reactivity.errors import SignalError

if TYPE_CHECKING:
    from reactivity.effect import Effect

T = TypeVar("T")

Equals = Union[bool, Callable[[T, T], bool]]
Getter = Callable[[], T]
Setter = Callable[[Union[T, Callable[[T], T]]], None]

# ─── Cross-thread dispatch ───────────────────────────────────────────────────
_dispatch = None
_dispatch_thread = None


def set_dispatcher(dispatch) -> None:
    """Route signal writes from other threads through dispatch.

    Call once from the thread that owns the reactive graph:
        reactivity.set_dispatcher(app.call_from_thread)

    dispatch receives a zero-argument callable and must run it on the owning
    thread. Pass None to go back to running every write inline.
    """
    global _dispatch, _dispatch_thread
    _dispatch = dispatch
    _dispatch_thread = threading.current_thread() if dispatch is not None else None


def get_dispatcher():
    """The installed dispatcher and the thread that owns it."""
    return _dispatch, _dispatch_thread


class Signal(Generic[T]):
    """A single reactive value with automatic dependency tracking.

    ``equals`` decides whether a write counts as a change:
    True (default) compares with identity then ``==``, False treats every
    write as a change, and a callable ``equals(old, new)`` returns True when
    the values are the same.
    """

    __slots__ = ("_value", "_equals", "_subscribers", "_name")

    def __init__(self, value: T, *, equals: Equals = True, name: str | None = None) -> None:
        if not isinstance(equals, bool) and not callable(equals):
            raise TypeError(f"equals must be a bool or a callable, got {equals!r}")
        self._value = value
        self._equals = equals
        # dict as an insertion-ordered set
        self._subscribers: dict[Effect, None] = {}
        self._name = name

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def _label(self) -> str:
        return repr(self._name) if self._name else "<anonymous>"

    def get(self) -> T:
        """Read the value. If an effect is running, subscribes it."""
        try:
            observer = get_observer()
            if observer is not None and not observer.is_disposed:
                self._subscribers[observer] = None
                observer._dependencies.add(self)
            if is_debug_mode():
                emit_read(self._name, self._value, len(self._subscribers))
        except Exception as exc:
            raise SignalError(f"reading signal {self._label} failed", self._name) from exc
        return self._value

    def set(self, value: T | Callable[[T], T]) -> None:
        """Write a new value, or apply an updater ``fn(prev) -> next``.

        To store a callable, wrap it in an updater: ``set(lambda _: fn)``.
        """
        if _dispatch is not None and threading.current_thread() is not _dispatch_thread:
            _dispatch(lambda v=value: self._set_direct(v))
        else:
            self._set_direct(value)

    def _set_direct(self, value) -> None:
        """Set value and notify. Always runs on the owning thread."""
        old = self._value
        try:
            new = value(old) if callable(value) else value
            changed = self._changed(old, new)
            if is_debug_mode():
                emit_write(self._name, old, new, len(self._subscribers), changed)
        except Exception as exc:
            raise SignalError(f"writing signal {self._label} failed", self._name) from exc
        if not changed:
            return
        self._value = new
        self._notify()

    def _changed(self, old: T, new: T) -> bool:
        equals = self._equals
        if equals is True:
            return old is not new and bool(old != new)
        if equals is False:
            return True
        return not equals(old, new)

    def _notify(self) -> None:
        """Re-run a snapshot of the subscribers, first subscribed first."""
        for observer in list(self._subscribers):
            observer._run()

    def _remove_observer(self, observer: Effect) -> None:
        """Remove an observer. Called during dependency cleanup."""
        self._subscribers.pop(observer, None)

    def __repr__(self) -> str:
        if self._name:
            return f"Signal({self._name}={self._value!r})"
        return f"Signal({self._value!r})"


def create_signal(
    initial: T, *, equals: Equals = True, name: str | None = None
) -> tuple[Getter[T], Setter[T]]:
    """Create a signal and return its ``(get, set)`` pair.

    Usage:
        count, set_count = create_signal(0)
        count()                          # 0
        set_count(5)
        set_count(lambda prev: prev + 1)
        count()                          # 6
    """
    signal = Signal(initial, equals=equals, name=name)
    return signal.get, signal.set
