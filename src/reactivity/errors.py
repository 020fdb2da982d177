"""Exceptions raised by the reactive engine.

Only cell-level failures are raised to callers. Failures inside an effect or
memo body become observable state (``Effect.last_error``) instead.
"""


class ReactivityError(Exception):
    """Base class for errors raised by reactivity."""


class SignalError(ReactivityError):
    """A signal's own get/set logic failed.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, message: str, name: str | None = None) -> None:
        super().__init__(message)
        self.name = name
