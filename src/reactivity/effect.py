"""Effects — computations that re-run when the signals they read change.

An Effect runs its function immediately, recording every signal read during
the run. When any of those signals changes, the effect drops its old
subscriptions, calls the cleanup returned by the previous run, and runs
again, so the dependency set always matches the last run.

A run that raises does not propagate to whoever triggered it. The exception
is kept as ``last_error`` and the run is retried with exponential backoff
(0.2s, 0.4s, 0.8s). After MAX_RETRIES failed retries the effect stays
active but dormant until one of its signals changes again.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

from reactivity._tracking import run_with_observer
from reactivity.scheduler import get_scheduler

if TYPE_CHECKING:
    from reactivity.signal import Signal

logger = logging.getLogger("reactivity.effect")

MAX_RETRIES = 3
BASE_DELAY = 0.1  # seconds; retry n waits 2**n * BASE_DELAY

Cleanup = Callable[[], None]
EffectFn = Callable[[], Optional[Cleanup]]


class Effect:
    """A reactive side effect. Create with create_effect()."""

    __slots__ = (
        "_fn",
        "_name",
        "_disposed",
        "_cleanup",
        "_last_error",
        "_retry_count",
        "_dependencies",
        "_cancel_retry",
    )

    def __init__(self, fn: EffectFn, *, name: str | None = None) -> None:
        self._fn = fn
        self._name = name
        self._disposed = False
        self._cleanup: Cleanup | None = None
        self._last_error: Exception | None = None
        self._retry_count = 0
        self._dependencies: set[Signal] = set()
        self._cancel_retry: Callable[[], None] | None = None

    @property
    def name(self) -> str:
        return self._name or getattr(self._fn, "__name__", repr(self._fn))

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def last_error(self) -> Exception | None:
        """The exception raised by the most recent run, None after a success."""
        return self._last_error

    @property
    def retry_count(self) -> int:
        return self._retry_count

    def _run(self) -> None:
        """Re-run the effect function, re-tracking dependencies."""
        if self._disposed:
            return

        self._cancel_pending_retry()
        self._run_cleanup()
        self._unsubscribe()

        try:
            result = run_with_observer(self, self._fn)
        except Exception as exc:
            self._fail(exc)
            return

        if callable(result):
            self._cleanup = result
            if self._disposed:
                # disposed from inside its own run
                self._run_cleanup()
        self._last_error = None
        self._retry_count = 0

    def _fail(self, exc: Exception) -> None:
        self._last_error = exc
        if self._disposed:
            return
        if self._retry_count < MAX_RETRIES:
            self._retry_count += 1
            delay = 2 ** self._retry_count * BASE_DELAY
            logger.warning(
                "Effect %s raised %r, retry %d/%d in %.1fs",
                self.name, exc, self._retry_count, MAX_RETRIES, delay,
            )
            self._cancel_retry = get_scheduler().schedule(self._retry, delay)
        else:
            logger.error(
                "Effect %s failed after %d retries, waiting for its next trigger",
                self.name, MAX_RETRIES, exc_info=exc,
            )

    def _retry(self) -> None:
        self._cancel_retry = None
        self._run()

    def _cancel_pending_retry(self) -> None:
        cancel, self._cancel_retry = self._cancel_retry, None
        if cancel is not None:
            cancel()

    def _run_cleanup(self) -> None:
        cleanup, self._cleanup = self._cleanup, None
        if cleanup is None:
            return
        try:
            run_with_observer(None, cleanup)
        except Exception:
            logger.exception("Cleanup for effect %s failed", self.name)

    def _unsubscribe(self) -> None:
        for dep in self._dependencies:
            dep._remove_observer(self)
        self._dependencies.clear()

    def dispose(self) -> None:
        """Stop this effect. Runs the last cleanup and disconnects from all signals.

        Safe to call more than once. A pending retry is cancelled.
        """
        if self._disposed:
            return
        self._disposed = True
        self._cancel_pending_retry()
        self._run_cleanup()
        self._unsubscribe()

    def __repr__(self) -> str:
        if self._disposed:
            state = "disposed"
        elif self._last_error is not None:
            state = f"failed={self._last_error!r}"
        else:
            state = "active"
        return f"Effect({self.name}, {state})"


def create_effect(fn: EffectFn, *, name: str | None = None) -> Effect:
    """Run fn immediately, then re-run it whenever a signal it read changes.

    fn may return a cleanup function; it is called before the next run and
    on dispose().

    Usage:
        count, set_count = create_signal(0)
        log = []

        effect = create_effect(lambda: log.append(count()))
        # log == [0], ran immediately

        set_count(1)
        # log == [0, 1], re-ran because count changed

        effect.dispose()
        set_count(2)
        # log == [0, 1], stopped
    """
    effect = Effect(fn, name=name)
    effect._run()  # Initial run to establish dependencies
    return effect
