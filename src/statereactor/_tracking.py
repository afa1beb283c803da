"""Dependency tracking slot: which effect is executing right now.

Uses a contextvar holding the (reactor, effect) pair of the effect currently
being executed. Getters read it to record dependencies; setters read it to
refuse mutations from inside an effect.

The slot is shared by every reactor, but each reactor only ever sees its own
effects through executing_effect(), so several reactors can coexist.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator, NamedTuple

if TYPE_CHECKING:
    from statereactor.reactor import StateReactor


class _Frame(NamedTuple):
    reactor: StateReactor
    effect: Callable


# The currently-executing effect. When set, any tracked Getter call of the
# same reactor associates itself with this effect.
current_frame: contextvars.ContextVar[_Frame | None] = contextvars.ContextVar(
    "statereactor_current_frame", default=None
)


def executing_effect(reactor: StateReactor) -> Callable | None:
    """The effect of ``reactor`` currently executing, or None."""
    frame = current_frame.get()
    if frame is None or frame.reactor is not reactor:
        return None
    return frame.effect


@contextmanager
def executing(reactor: StateReactor, effect: Callable) -> Iterator[None]:
    """Mark ``effect`` as executing for the duration of the block.

    The marker is cleared on exit even when the block raises.
    """
    token = current_frame.set(_Frame(reactor, effect))
    try:
        yield
    finally:
        current_frame.reset(token)


@contextmanager
def suspended(reactor: StateReactor) -> Iterator[None]:
    """Clear the marker of ``reactor``'s executing effect for the block.

    Other reactors' markers are left alone.
    """
    if executing_effect(reactor) is None:
        yield
        return
    token = current_frame.set(None)
    try:
        yield
    finally:
        current_frame.reset(token)
