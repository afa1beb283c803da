"""StateReactor: state cells plus effects that re-run when what they read changes.

API inspired by React Hooks:

    reactor = StateReactor(on_error)
    get_count, set_count = reactor.use_state(0)

    def log_count():
        print("count is", get_count())
        return lambda: print("cleanup")

    reactor.use_effect(log_count)
    reactor.start()
    reactor.flush()      # count is 0
    set_count(1)
    reactor.flush()      # cleanup / count is 1
    reactor.stop()       # cleanup

Effects never run synchronously inside use_effect(), start() or a setter.
They are queued, and the queue drains later (see statereactor.scheduling).
Writes made in one synchronous window therefore re-run a dependent effect
once, and the effect sees the final values.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from statereactor._tracking import executing, suspended
from statereactor.associations import AssociationIndex
from statereactor.scheduling import Scheduler, default_scheduler
from statereactor.state import Getter, Setter, create_state

logger = logging.getLogger("statereactor.reactor")

T = TypeVar("T")

Cleanup = Callable[[], None]
Effect = Callable[[], "Cleanup | None"]
ErrorCallback = Callable[[BaseException], None]
Observer = Callable[[Callable[[], None]], object]


def _log_error(error: BaseException) -> None:
    logger.error("Unhandled error in effect, cleanup or listener", exc_info=error)


class StateReactor:
    """Owns state cells, effects, their cleanups and the dependency index.

    error_callback receives every exception raised by an effect, a cleanup
    or a state listener. Exceptions raised by error_callback itself are
    discarded. Defaults to logging the error.

    scheduler decides when queued effects drain; see statereactor.scheduling.
    """

    def __init__(
        self,
        error_callback: ErrorCallback | None = None,
        *,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._error_callback = error_callback or _log_error
        self._scheduler = scheduler or default_scheduler
        self._started = False
        # effect -> registration serial; insertion order is registration order.
        self._effects: dict[Effect, int] = {}
        self._cleanups: dict[Effect, Cleanup] = {}
        self._pending: dict[Effect, None] = {}
        self._associations: AssociationIndex[Setter, Effect] = AssociationIndex()
        self._drain_requested = False
        self._flushing = False

    @property
    def started(self) -> bool:
        return self._started

    @property
    def pending_count(self) -> int:
        """Number of effects waiting to run. Useful for testing."""
        return len(self._pending)

    # --- Lifecycle ---

    def start(self) -> None:
        """Start the reactor and queue every registered effect. Idempotent."""
        if self._started:
            return
        self._started = True
        logger.debug("Starting reactor with %d effects", len(self._effects))
        for effect in self._effects:
            self._queue(effect)

    def stop(self) -> None:
        """Stop the reactor and run every stored cleanup. Idempotent.

        Queued effects are discarded. A cleanup may call stop() again; the
        nested call sees the reactor already stopped and does nothing.
        """
        if not self._started:
            return
        self._started = False
        logger.debug("Stopping reactor with %d cleanups", len(self._cleanups))

        self._pending.clear()
        cleanups = list(self._cleanups.values())
        self._cleanups.clear()
        self._associations.remove_all_associations()

        # Cleanups never run under the marker of an effect that called stop().
        with suspended(self):
            for cleanup in cleanups:
                self._call(cleanup)

    # --- Hooks ---

    def use_state(self, initial: T) -> tuple[Getter[T], Setter[T]]:
        """Create a state cell and return its (getter, setter) pair.

        Reading the getter inside an effect makes the effect depend on the
        cell. The setter raises StateUpdateError while an effect of this
        reactor is executing; call it from outside effects (or from a cleanup).
        """
        return create_state(self, initial)

    def use_effect(self, effect: Effect) -> None:
        """Register effect and queue its first run.

        The effect may return a cleanup function, which is called right
        before the effect's next run and when the reactor stops. Registering
        the same effect again does nothing.
        """
        if effect in self._effects:
            return
        self._effects[effect] = len(self._effects)
        self._queue(effect)

    def use_external_state(self, getter: Callable[[], T], observer: Observer) -> Getter[T]:
        """Mirror an external value into a local state cell.

        observer(listener) must call listener whenever the external value
        changes; the listener re-reads getter() and writes the local cell.
        Returns the local getter, which effects can depend on like any other.

        Usage:
            get_theme = reactor.use_external_state(settings.theme, settings.subscribe)
        """
        get_state, set_state = self.use_state(getter())
        observer(lambda: set_state(getter()))
        return get_state

    # --- Draining ---

    def flush(self) -> None:
        """Run queued effects now, in queuing order.

        Effects queued while draining run in the same flush. Calling flush()
        from inside an effect or cleanup does nothing.
        """
        if self._flushing:
            return
        self._drain_requested = False
        self._flushing = True
        try:
            while self._started and self._pending:
                effect = next(iter(self._pending))
                del self._pending[effect]
                self._execute(effect)
        finally:
            self._flushing = False

    def _queue(self, effect: Effect) -> None:
        if not self._started or effect in self._pending:
            return
        self._pending[effect] = None
        if not self._drain_requested and not self._flushing:
            self._drain_requested = self._scheduler(self.flush) is not False

    def _invalidate(self, setter: Setter) -> None:
        """Queue every effect that read setter's cell, in registration order."""
        effects = self._associations.remove_associations(setter)
        if effects:
            for effect in sorted(effects, key=self._effects.__getitem__):
                self._queue(effect)

    def _execute(self, effect: Effect) -> None:
        cleanup = self._cleanups.pop(effect, None)
        if cleanup is not None:
            self._call(cleanup)
            # The cleanup may have stopped the reactor.
            if not self._started:
                return

        self._associations.remove_consumer(effect)

        result = None
        with executing(self, effect):
            try:
                result = effect()
            except Exception as error:
                self._handle_error(error)

        if not self._started:
            # Stopped from inside the effect: nothing it read should outlive the stop.
            self._associations.remove_consumer(effect)

        if result is None:
            return
        if not callable(result):
            self._handle_error(
                TypeError(f"Effect {effect!r} returned {result!r}, expected a cleanup function or None")
            )
            return

        if self._started:
            self._cleanups[effect] = result
        else:
            self._call(result)

    # --- Errors ---

    def _call(self, fn: Callable[[], object]) -> None:
        try:
            fn()
        except Exception as error:
            self._handle_error(error)

    def _handle_error(self, error: BaseException) -> None:
        try:
            self._error_callback(error)
        except Exception:
            pass  # error_callback owns its own failures

    def __repr__(self) -> str:
        state = "started" if self._started else "stopped"
        return f"StateReactor({state}, {len(self._effects)} effects, {len(self._pending)} pending)"
