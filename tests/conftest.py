"""Shared fixtures: a virtual clock for effect retries and clean global state."""

import heapq
import itertools

import pytest

import reactivity
from reactivity import signal as _signal


class ManualScheduler:
    """Scheduler driven by advance() instead of wall-clock time."""

    def __init__(self):
        self.now = 0.0
        self._queue = []
        self._seq = itertools.count()
        self.delays = []

    def schedule(self, fn, delay):
        entry = [self.now + delay, next(self._seq), fn, True]
        heapq.heappush(self._queue, entry)
        self.delays.append(delay)

        def _cancel():
            entry[3] = False

        return _cancel

    @property
    def pending(self):
        return sum(1 for entry in self._queue if entry[3])

    def advance(self, seconds):
        """Move the clock forward, running every callback that comes due."""
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, fn, live = heapq.heappop(self._queue)
            self.now = when
            if live:
                fn()
        self.now = target

    def run_all(self):
        while self.pending:
            self.advance(max(entry[0] for entry in self._queue) - self.now)


@pytest.fixture(autouse=True)
def clock():
    """Install a ManualScheduler and reset debug/dispatch state around each test."""
    scheduler = ManualScheduler()
    reactivity.set_scheduler(scheduler)
    yield scheduler
    reactivity.set_scheduler(None)
    reactivity.set_debug_mode(False)
    reactivity.set_debug_sink(None)
    _signal.set_dispatcher(None)
