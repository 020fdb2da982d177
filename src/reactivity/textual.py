"""Textual integration for reactivity. Opt-in — requires textual.

create_effect(app, fn) is an effect that is safe to update widgets from:
it is skipped while the widget tree is not queryable, NoMatches raised by
widget queries is swallowed, and runs triggered from another thread are
marshaled through app.call_from_thread. The cleanup returned by fn gets the
same treatment, whether it is called before a re-run or by dispose().

Runs skipped while the app is paused or not yet running are deferred and
replayed by resume(app), which the outermost pause() calls on exit.
"""

from __future__ import annotations

import threading
import weakref
from contextlib import contextmanager

from textual.css.query import NoMatches

from reactivity._tracking import get_observer, run_with_observer
from reactivity.effect import Effect

# Pause depth keyed by id(app); an entry exists only inside a pause() block.
_pause_depth: dict[int, int] = {}
# Effects skipped while their app was not safe. Weak on the app: guarded
# effects only hold a weak reference to it, so a dropped app takes its
# deferred effects with it.
_deferred: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()


@contextmanager
def pause(app):
    """Suspend guarded effects during widget replacement. Nests."""
    key = id(app)
    _pause_depth[key] = _pause_depth.get(key, 0) + 1
    try:
        yield
    finally:
        depth = _pause_depth.pop(key) - 1
        if depth:
            _pause_depth[key] = depth
        else:
            resume(app)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _pause_depth


def resume(app) -> None:
    """Re-run the effects that were skipped while app was not safe."""
    if not is_safe(app):
        return
    for effect in _deferred.pop(app, {}):
        effect._run()


class _AppEffect(Effect):
    """Effect bound to an app. Disposing it drops any deferred replay."""

    __slots__ = ("_app_ref",)

    def dispose(self) -> None:
        app = self._app_ref()
        if app is not None:
            _deferred.get(app, {}).pop(self, None)
        super().dispose()


def _ignore_nomatch(fn):
    try:
        return fn()
    except NoMatches:
        return None


def create_effect(app, fn, *, name=None) -> Effect:
    """create_effect() that safely bridges to Textual widgets.

    Usage:
        count, set_count = create_signal(0)
        create_effect(app, lambda: app.query_one("#count", Label).update(str(count())))
    """
    _main = threading.get_ident()
    app_ref = weakref.ref(app)

    def _on_app_thread(observer, call):
        target = app_ref()
        if target is not None and threading.get_ident() != _main:
            # keep tracking reads made on the app thread
            return target.call_from_thread(run_with_observer, observer, call)
        return run_with_observer(observer, call)

    def _guard_cleanup(cleanup):
        def _cleanup():
            _on_app_thread(None, lambda: _ignore_nomatch(cleanup))

        return _cleanup

    def _guarded():
        target = app_ref()
        if target is None:
            return None
        observer = get_observer()
        if not is_safe(target):
            if observer is not None:
                _deferred.setdefault(target, {})[observer] = None
            return None
        result = _on_app_thread(observer, lambda: _ignore_nomatch(fn))
        return _guard_cleanup(result) if callable(result) else result

    effect = _AppEffect(_guarded, name=name or getattr(fn, "__name__", None))
    effect._app_ref = app_ref
    effect._run()  # Initial run to establish dependencies
    return effect
