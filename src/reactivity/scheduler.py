"""Retry scheduling — the only wall-clock dependency of the engine.

Effects that fail are retried after a backoff delay. The delay is handed to
the process-wide Scheduler, so tests can install a virtual clock instead of
waiting on real timers.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable, Protocol

from reactivity.signal import get_dispatcher

logger = logging.getLogger("reactivity.scheduler")

Cancel = Callable[[], None]


class Scheduler(Protocol):
    def schedule(self, fn: Callable[[], None], delay: float) -> Cancel:
        """Run fn once after delay seconds. Returns a function that cancels it."""
        ...


class TimerScheduler:
    """Runs retries on the thread that owns the graph.

    - With an asyncio loop running in the scheduling thread, the retry is a
      loop.call_later() callback on that loop.
    - Otherwise, with a signal dispatcher installed (see set_dispatcher), a
      daemon threading.Timer hands the retry to the dispatcher.
    - Otherwise the retry runs on the Timer thread itself, and a warning is
      logged once, since nothing can bring it back to the owning thread.
    """

    def __init__(self) -> None:
        self._warned = False

    def schedule(self, fn: Callable[[], None], delay: float) -> Cancel:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            return loop.call_later(delay, fn).cancel

        if get_dispatcher()[0] is None and not self._warned:
            self._warned = True
            logger.warning(
                "No running event loop or dispatcher; effect retries will run on "
                "timer threads. Call set_dispatcher() or run inside asyncio."
            )

        def _fire() -> None:
            dispatch, _ = get_dispatcher()
            if dispatch is not None:
                dispatch(fn)
            else:
                fn()

        t = threading.Timer(delay, _fire)
        t.daemon = True
        t.start()
        return t.cancel


_scheduler: Scheduler = TimerScheduler()


def set_scheduler(scheduler: Scheduler | None) -> None:
    """Install the scheduler used for effect retries. None restores the timer default."""
    global _scheduler
    _scheduler = scheduler if scheduler is not None else TimerScheduler()


def get_scheduler() -> Scheduler:
    return _scheduler
