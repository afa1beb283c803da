"""statereactor: state cells and self-tracking effects with a React Hooks-style API."""

from importlib.metadata import version as _version

__version__ = _version("statereactor")

from statereactor.associations import AssociationIndex
from statereactor.errors import StateReactorError, StateUpdateError
from statereactor.reactor import StateReactor
from statereactor.scheduling import default_scheduler, loop_scheduler, manual_scheduler
from statereactor.state import Getter, Setter

__all__ = [
    "StateReactor",
    "Getter",
    "Setter",
    "AssociationIndex",
    "StateReactorError",
    "StateUpdateError",
    "default_scheduler",
    "manual_scheduler",
    "loop_scheduler",
]
