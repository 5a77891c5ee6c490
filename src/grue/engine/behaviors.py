"""Per-object behavior hooks.

An object names its hook in world.yaml (`behavior: leaves`). The hook runs
after every generic check has passed and before the verb handler. It may
return a Result to take over the command, or None after leaving notes or
side effects for the handler's message to follow.
"""

from collections.abc import Callable

from .model import WorldModel
from .parser import Command
from .puzzles import GRATING_REVEALED, reveal_grating
from .results import Result
from .state import CANDLES
from .world import Flag

Behavior = Callable[[WorldModel, Command], Result | None]


def _leaves(model: WorldModel, command: Command) -> Result | None:
    if command.verb == "take" and reveal_grating(model):
        model.note(GRATING_REVEALED)
    return None


def _candles(model: WorldModel, command: Command) -> Result | None:
    # Burning candles start counting down once someone picks them up.
    if command.verb == "take" and model.has_flag(CANDLES, Flag.LIT):
        if not model.event(CANDLES).enabled:
            model.schedule(CANDLES)
    return None


BEHAVIORS: dict[str, Behavior] = {
    "leaves": _leaves,
    "candles": _candles,
}


def run_behavior(model: WorldModel, command: Command) -> Result | None:
    if command.direct is None:
        return None
    name = model.obj(command.direct).behavior
    if name is None:
        return None
    return BEHAVIORS[name](model, command)
