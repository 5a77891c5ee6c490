"""What happens when the player dies.

handle_fatal() runs the whole transition in one go: penalty, death count,
then spirit form, resurrection, or the end of the game. The only random
choice is where carried treasures end up, and it uses the game's own
random source.
"""

from dataclasses import dataclass
from enum import StrEnum

from ..logging import get_logger
from .daemons import FUEL_TABLES
from .model import WorldModel
from .scheduler import reset_events
from .state import (
    COFFIN,
    EGYPT_ROOM,
    FOREST_START,
    HADES,
    LAMP,
    LIVING_ROOM,
    MAX_DEATHS,
    SWORD,
    TRAP_DOOR,
    Life,
)
from .world import Flag

logger = get_logger(__name__)

DEATH_PENALTY = 10

ALREADY_DEAD = (
    "It takes a talented person to be killed while already dead. YOU are such a "
    "talent. Unfortunately, it takes a talented person to deal with it. I am not "
    "such a talent. Sorry."
)
BAD_LUCK = "Bad luck, huh?"
BANNER = "    ****  You have died  ****"
RECKLESS = (
    "You clearly are a suicidal maniac. We don't allow psychotics in the cave, "
    "since they may harm other adventurers. Your remains will be installed in the "
    "Land of the Living Dead, where your fellow adventurers may gloat over them."
)
SPIRIT = (
    "As you take your last breath, you feel relieved of your burdens. The feeling "
    "passes as you find yourself before the gates of Hell, where the spirits jeer "
    "at you and deny you entry. Your senses are disturbed. The objects in the "
    "dungeon appear indistinct, bleached of color, even unreal."
)
RESURRECTED = (
    "Now, let's take a look here... Well, you probably deserve another chance. I "
    "can't quite fix you up completely, but you can't have everything."
)

# Carried objects that always return to the same place
_PINNED = {LAMP: LIVING_ROOM, COFFIN: EGYPT_ROOM}


class Outcome(StrEnum):
    RESURRECTED = "resurrected"
    SPIRIT = "spirit"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class Death:
    outcome: Outcome
    message: str


def _treasure_room(model: WorldModel, rooms: list[str]) -> str:
    for room_id in rooms:
        if model.rng.random() < 0.5:
            return room_id
    return model.rng.choice(rooms)


def _scatter_inventory(model: WorldModel) -> None:
    dark_rooms = [
        room.id
        for room in model.world.rooms.values()
        if Flag.LIT not in room.flags and Flag.SACRED not in room.flags
    ]
    outside_rooms = [
        room.id for room in model.world.rooms.values() if Flag.OUTSIDE in room.flags
    ]
    for obj_id in model.inventory():
        if obj_id in _PINNED:
            destination = _PINNED[obj_id]
        elif model.is_treasure(obj_id):
            destination = _treasure_room(model, dark_rooms)
        else:
            destination = model.rng.choice(outside_rooms)
        model.move_object(obj_id, destination)


def _resurrect(model: WorldModel) -> str:
    state = model.state
    state.values[SWORD] = 0
    state.case_values[SWORD] = 0
    _scatter_inventory(model)

    model.clear_flag(TRAP_DOOR, Flag.TOUCHED)
    for source in FUEL_TABLES:
        model.clear_flag(source, Flag.LIT)
    state.player_flags.discard("wounded")
    reset_events(state)
    state.life = Life.ALIVE
    model.move_player(FOREST_START)
    return f"{RESURRECTED}\n\n{model.describe_room()}"


def _become_spirit(model: WorldModel) -> str:
    model.set_global("player.always_lit", True)
    model.state.life = Life.SPIRIT
    model.move_player(HADES)
    return f"{SPIRIT}\n\n{model.describe_room()}"


def handle_fatal(model: WorldModel, cause: str) -> Death:
    """Apply a fatal event to the game and return the outcome."""
    state = model.state
    if state.life in (Life.SPIRIT, Life.TERMINATED):
        state.life = Life.TERMINATED
        logger.info("player_died", cause=cause, outcome=Outcome.TERMINATED, deaths=state.deaths)
        return Death(Outcome.TERMINATED, f"{cause}\n\n{ALREADY_DEAD}")

    model.adjust_score(-DEATH_PENALTY)
    lines = [cause]
    if not model.get_global("luck.lucky"):
        lines.append(BAD_LUCK)
    lines.extend(["", BANNER, ""])

    state.deaths += 1
    model.set_global("player.vehicle", "")
    if state.deaths >= MAX_DEATHS:
        outcome = Outcome.TERMINATED
        state.life = Life.TERMINATED
        lines.append(RECKLESS)
    elif model.get_global("story.shrine_visited"):
        outcome = Outcome.SPIRIT
        lines.append(_become_spirit(model))
    else:
        outcome = Outcome.RESURRECTED
        lines.append(_resurrect(model))

    logger.info("player_died", cause=cause, outcome=outcome, deaths=state.deaths)
    return Death(outcome, "\n".join(lines))
