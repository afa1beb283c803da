"""Exceptions raised synchronously at the caller's call site."""


class StateReactorError(RuntimeError):
    """Base class for errors raised by statereactor."""


class StateUpdateError(StateReactorError):
    """A setter was called while an effect of the same reactor was executing."""
