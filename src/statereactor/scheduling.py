"""Schedulers: how a reactor arranges for its pending effects to drain.

A scheduler is any callable taking a zero-argument callback and arranging
for it to run later, after the current synchronous call stack. The reactor
asks for at most one drain at a time and always drains its own ordered,
de-duplicated queue, so the scheduler only decides *when*.

Usage:
    reactor = StateReactor(on_error)                         # asyncio if running
    reactor = StateReactor(on_error, scheduler=manual_scheduler)
    reactor = StateReactor(on_error, scheduler=loop_scheduler(loop))

Reactors are single-threaded: setters, start(), stop() and use_effect() must
all be called from the thread that drains them.
"""

from __future__ import annotations

import asyncio
from typing import Callable

Scheduler = Callable[[Callable[[], None]], object]


def default_scheduler(callback: Callable[[], None]) -> bool:
    """Schedule callback on the running asyncio loop, if any.

    Without a running loop nothing is scheduled and the host drains with
    StateReactor.flush(). Returns whether a drain was scheduled.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return False
    loop.call_soon(callback)
    return True


def manual_scheduler(callback: Callable[[], None]) -> bool:
    """Never schedule; the host always drains with StateReactor.flush()."""
    return False


def loop_scheduler(loop: asyncio.AbstractEventLoop) -> Scheduler:
    """Scheduler bound to a specific loop.

    Like every reactor call, the reactor must be used from the loop's own
    thread; this only fixes which loop drains it.

    Usage:
        loop = asyncio.get_running_loop()
        reactor = StateReactor(on_error, scheduler=loop_scheduler(loop))
    """

    def schedule(callback: Callable[[], None]) -> bool:
        loop.call_soon(callback)
        return True

    return schedule
