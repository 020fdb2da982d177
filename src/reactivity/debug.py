"""Debug diagnostics for signal reads and writes.

While debug mode is on, every Signal.get() and every changing Signal.set()
produces a SignalEvent and hands it to the diagnostic sink. The default sink
logs each event at DEBUG level on the "reactivity.debug" logger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger("reactivity.debug")


@dataclass(frozen=True)
class SignalEvent:
    """One diagnostic record. ``op`` is "read" or "write".

    Writes are recorded whether or not they changed the value; ``changed``
    tells which, and only changed writes notify subscribers.
    """

    name: str | None
    op: str
    subscribers: int
    value: Any = None
    from_value: Any = None
    to_value: Any = None
    changed: bool = True


Sink = Callable[[SignalEvent], None]


def _log_sink(event: SignalEvent) -> None:
    label = event.name or "<anonymous>"
    if event.op == "write":
        logger.debug(
            "signal %s write %r -> %r (%d subscribers%s)",
            label, event.from_value, event.to_value, event.subscribers,
            "" if event.changed else ", unchanged",
        )
    else:
        logger.debug(
            "signal %s read %r (%d subscribers)",
            label, event.value, event.subscribers,
        )


_enabled: bool = False
_sink: Sink = _log_sink


def set_debug_mode(enabled: bool) -> None:
    """Turn signal diagnostics on or off for the whole process."""
    global _enabled
    _enabled = bool(enabled)


def is_debug_mode() -> bool:
    return _enabled


def set_debug_sink(sink: Sink | None) -> None:
    """Replace the diagnostic sink. None restores the logging sink."""
    global _sink
    _sink = sink if sink is not None else _log_sink


def emit_read(name: str | None, value: Any, subscribers: int) -> None:
    _sink(SignalEvent(name=name, op="read", subscribers=subscribers, value=value))


def emit_write(name: str | None, old: Any, new: Any, subscribers: int, changed: bool) -> None:
    _sink(
        SignalEvent(
            name=name,
            op="write",
            subscribers=subscribers,
            from_value=old,
            to_value=new,
            changed=changed,
        )
    )
