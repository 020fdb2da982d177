"""reactivity: fine-grained signals, effects, memos and resources for Python."""

from importlib.metadata import version as _version

__version__ = _version("reactivity")

from reactivity.errors import ReactivityError, SignalError
from reactivity._tracking import untrack
from reactivity.debug import SignalEvent, is_debug_mode, set_debug_mode, set_debug_sink
from reactivity.signal import Signal, create_signal, set_dispatcher
from reactivity.scheduler import Scheduler, TimerScheduler, get_scheduler, set_scheduler
from reactivity.effect import MAX_RETRIES, Effect, create_effect
from reactivity.memo import Memo, create_memo
from reactivity.resource import Resource, ResourceState, create_resource
# textual NOT auto-imported: opt-in only

__all__ = [
    "Signal",
    "create_signal",
    "set_dispatcher",
    "Effect",
    "create_effect",
    "MAX_RETRIES",
    "Memo",
    "create_memo",
    "Resource",
    "ResourceState",
    "create_resource",
    "untrack",
    "SignalEvent",
    "set_debug_mode",
    "is_debug_mode",
    "set_debug_sink",
    "Scheduler",
    "TimerScheduler",
    "set_scheduler",
    "get_scheduler",
    "SignalError",
    "ReactivityError",
]
