"""Resources — async fetches exposed as loading/error/data signals.

A Resource starts a fetch as soon as it is created, on the running asyncio
loop. While the fetch is in flight ``loading`` is True; when it settles,
either ``data`` or ``error`` is set and ``loading`` goes back to False. Fetch
failures never propagate: they become the ``error`` value.

Overlapping refetch() calls are not coalesced or cancelled. Whichever fetch
settles last decides the final state.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

from reactivity.signal import Signal

logger = logging.getLogger("reactivity.resource")

T = TypeVar("T")

Fetcher = Callable[[], Union[Awaitable[T], T]]


@dataclass(frozen=True)
class ResourceState(Generic[T]):
    """A snapshot of a resource, as returned by calling it."""

    loading: bool
    error: Exception | None
    data: T | None
    refetch: Callable[[], Awaitable[None]]


class Resource(Generic[T]):
    """Async fetch wrapper. Create with create_resource()."""

    __slots__ = ("_fetcher", "_name", "_loading", "_error", "_data", "_tasks")

    def __init__(self, fetcher: Fetcher[T], initial_value: T | None = None, *, name: str | None = None) -> None:
        self._fetcher = fetcher
        self._name = name or getattr(fetcher, "__name__", None)
        self._loading: Signal[bool] = Signal(True, name=_sub_name(name, "loading"))
        self._error: Signal[Exception | None] = Signal(None, name=_sub_name(name, "error"))
        self._data: Signal[T | None] = Signal(initial_value, name=_sub_name(name, "data"))
        # Strong references to in-flight fetches so they are not collected mid-await.
        self._tasks: set[asyncio.Future] = set()

    def __call__(self) -> ResourceState[T]:
        """Read all three signals. Inside an effect, subscribes to each."""
        return ResourceState(
            loading=self._loading.get(),
            error=self._error.get(),
            data=self._data.get(),
            refetch=self.refetch,
        )

    def refetch(self) -> asyncio.Future[None]:
        """Start a new fetch. Returns a future that resolves when it settles.

        ``loading`` is True and the fetcher has been called by the time this
        returns. The future never raises the fetch error.
        """
        loop = asyncio.get_running_loop()
        self._loading.set(True)
        self._error.set(None)
        try:
            pending = self._fetcher()
        except Exception as exc:
            self._fail(exc)
            self._loading.set(False)
            done = loop.create_future()
            done.set_result(None)
            return done

        task = loop.create_task(self._settle(pending))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _settle(self, pending: Any) -> None:
        try:
            result = await pending if inspect.isawaitable(pending) else pending
        except Exception as exc:
            self._fail(exc)
        else:
            self._data.set(lambda _prev: result)
        finally:
            self._loading.set(False)

    def _fail(self, exc: Exception) -> None:
        logger.warning("Fetch for resource %s failed: %r", self._name, exc)
        self._error.set(exc)

    def __repr__(self) -> str:
        if self._loading._value:
            state = "loading"
        elif self._error._value is not None:
            state = f"error={self._error._value!r}"
        else:
            state = f"data={self._data._value!r}"
        return f"Resource({self._name}, {state})"


def _sub_name(name: str | None, part: str) -> str | None:
    return f"{name}.{part}" if name else None


def create_resource(
    fetcher: Fetcher[T], initial_value: T | None = None, *, name: str | None = None
) -> Resource[T]:
    """Wrap an async fetcher in loading/error/data signals and start fetching.

    Must be called while an asyncio event loop is running.

    Usage:
        async def load_user():
            return await api.get_user(42)

        user = create_resource(load_user)
        user().loading   # True
        await asyncio.sleep(0)
        user().data      # the fetched user
        await user().refetch()
    """
    asyncio.get_running_loop()  # fail fast, before any signal exists
    resource = Resource(fetcher, initial_value, name=name)
    resource.refetch()
    return resource
