"""State cells: a value reachable only through its Getter/Setter pair.

When a Getter is called while an effect of the owning reactor is executing,
the effect becomes associated with the paired Setter. When the Setter later
changes the value, every associated effect is queued to run again.

The Setter is the cell's identity: the reactor's association index is keyed
by Setter objects.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from statereactor._tracking import executing_effect
from statereactor.errors import StateUpdateError

if TYPE_CHECKING:
    from statereactor.reactor import StateReactor

T = TypeVar("T")

Listener = Callable[[], None]

# Compared by value; anything else only counts as unchanged when it is the same object.
_SCALARS = (int, float, complex, str, bytes, bool, type(None))


def _unchanged(old: object, new: object) -> bool:
    if old is new:
        return True
    return isinstance(old, _SCALARS) and isinstance(new, _SCALARS) and old == new


class _Cell(Generic[T]):
    __slots__ = ("value",)

    def __init__(self, value: T) -> None:
        self.value = value


class Setter(Generic[T]):
    """Writes a state cell and re-queues the effects that read it."""

    __slots__ = ("_reactor", "_cell", "_listeners")

    def __init__(self, reactor: StateReactor, cell: _Cell[T]) -> None:
        self._reactor = reactor
        self._cell = cell
        # Ordered set: registration order is notification order.
        self._listeners: dict[Listener, None] = {}

    def __call__(self, value: T) -> None:
        """Store value if it differs from the current one.

        Raises StateUpdateError if an effect of the owning reactor is
        executing; the cell is left untouched in that case.
        """
        if executing_effect(self._reactor) is not None:
            raise StateUpdateError("Cannot update state while an effect is being executed.")

        if _unchanged(self._cell.value, value):
            return

        self._cell.value = value
        self._reactor._invalidate(self)
        self._notify()

    def observe(self, listener: Listener) -> Callable[[], None]:
        """Call listener synchronously after every change of this cell.

        Returns an idempotent unsubscribe function.
        """
        self._listeners[listener] = None

        def unsubscribe() -> None:
            self._listeners.pop(listener, None)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as error:
                self._reactor._handle_error(error)

    def __repr__(self) -> str:
        return f"Setter({self._cell.value!r})"


class Getter(Generic[T]):
    """Reads a state cell, recording the read as a dependency of the running effect."""

    __slots__ = ("_reactor", "_cell", "_setter")

    def __init__(self, reactor: StateReactor, cell: _Cell[T], setter: Setter[T]) -> None:
        self._reactor = reactor
        self._cell = cell
        self._setter = setter

    def __call__(self, *, untracked: bool = False) -> T:
        if not untracked:
            effect = executing_effect(self._reactor)
            if effect is not None:
                self._reactor._associations.associate(self._setter, effect)
        return self._cell.value

    def __repr__(self) -> str:
        return f"Getter({self._cell.value!r})"


def create_state(reactor: StateReactor, initial: T) -> tuple[Getter[T], Setter[T]]:
    """Create a cell owned by reactor and return its accessor pair."""
    cell = _Cell(initial)
    setter = Setter(reactor, cell)
    return Getter(reactor, cell, setter), setter
