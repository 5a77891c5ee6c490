"""Actions bound to scheduled events.

Each action takes the WorldModel and returns the messages it produced.
Actions may raise Fatal; the scheduler reports it back to the game.
"""

from collections.abc import Callable
from dataclasses import dataclass

from .model import WorldModel
from .results import Fatal
from .state import (
    CANDLES,
    CYCLOPS,
    CYCLOPS_ROOM,
    LAMP,
    MAINTENANCE_ROOM,
    RESERVOIR,
    RESERVOIR_NORTH,
    RESERVOIR_SOUTH,
    THIEF,
)
from .world import Flag

Action = Callable[[WorldModel], list[str]]


@dataclass(frozen=True)
class FuelTable:
    """Warnings for a light source, keyed by absolute remaining fuel."""

    source: str
    capacity: int
    stages: tuple[tuple[int, str], ...]
    burned_out: str


FUEL_TABLES: dict[str, FuelTable] = {
    LAMP: FuelTable(
        source=LAMP,
        capacity=200,
        stages=(
            (100, "The lamp appears a bit dimmer."),
            (70, "The lamp is definitely dimmer now."),
            (15, "The lamp is nearly out."),
            (0, "You'd better have more light than from the brass lantern."),
        ),
        burned_out="A burned-out lamp won't light.",
    ),
    CANDLES: FuelTable(
        source=CANDLES,
        capacity=40,
        stages=(
            (20, "The candles grow shorter."),
            (10, "The candles are becoming quite short."),
            (5, "The candles won't last long now."),
            (0, "You'd better have more light than from the pair of candles."),
        ),
        burned_out="Alas, there's not much left of the candles. Certainly not enough to burn.",
    ),
}


def set_fuel(model: WorldModel, source: str, level: int) -> list[str]:
    """Set a light source's remaining fuel, emitting any warnings crossed.

    A warning fires when fuel goes from above its threshold to at or below
    it, and never twice for the same source. Adding fuel never fires one.
    Running dry puts the source out and stops its countdown.
    """
    table = FUEL_TABLES[source]
    level = max(0, min(level, table.capacity))
    old = model.state.fuel[source]
    model.state.fuel[source] = level

    warned = model.state.warned[source]
    audible = model.is_reachable(source)
    messages = []
    for threshold, text in table.stages:
        if old > threshold >= level and threshold not in warned:
            warned.add(threshold)
            if audible:
                messages.append(text)

    if level == 0:
        model.clear_flag(source, Flag.LIT)
        model.cancel(source)
    return messages


def _burn(source: str) -> Action:
    def action(model: WorldModel) -> list[str]:
        if not model.has_flag(source, Flag.LIT):
            model.cancel(source)
            return []
        return set_fuel(model, source, model.state.fuel[source] - 1)

    return action


# -- thief -------------------------------------------------------------

THIEF_ARRIVES = (
    "Someone carrying a large bag is casually leaning against one of the walls "
    "here. He does not speak, but it is clear from his aspect that the bag will "
    "be taken only over his dead body."
)


def _thief_destinations(model: WorldModel, room_id: str) -> list[str]:
    destinations = []
    for direction in model.room(room_id).exits:
        destination = model.resolve_exit(direction, room_id).destination
        if (
            destination is None
            or destination == room_id
            or destination in destinations
            or model.has_flag(destination, Flag.SACRED)
            or model.has_flag(destination, Flag.OUTSIDE)
        ):
            continue
        destinations.append(destination)
    return destinations


def thief_daemon(model: WorldModel) -> list[str]:
    here = model.state.current_room
    lair = model.location(THIEF)
    if lair not in model.world.rooms:
        return []
    if lair == here:
        model.set_global("thief.engaged", True)
        return []

    model.set_global("thief.engaged", False)
    destinations = _thief_destinations(model, lair)
    if not destinations:
        return []
    destination = model.rng.choice(destinations)
    model.move_object(THIEF, destination)
    if destination != here:
        return []
    model.set_global("thief.engaged", True)
    return [THIEF_ARRIVES] if model.is_lit() else []


# -- cyclops -----------------------------------------------------------

CYCLOPS_WARNINGS = (
    "The cyclops seems somewhat agitated.",
    "The cyclops appears to be getting more agitated.",
    "The cyclops is moving about the room, looking for something.",
    "The cyclops was looking for salt and pepper. No doubt they are condiments "
    "for his upcoming snack.",
    "The cyclops is moving toward you in an unfriendly manner.",
    "You have two choices: 1. Leave  2. Become dinner.",
)

CYCLOPS_MEAL = (
    "The cyclops, tired of all of your games and trickery, grabs you firmly. As "
    'he licks his chops, he says "Mmm. Just like Mom used to make \'em." '
    "It's nice to be appreciated."
)


def cyclops_daemon(model: WorldModel) -> list[str]:
    if (
        model.state.current_room != CYCLOPS_ROOM
        or model.location(CYCLOPS) != CYCLOPS_ROOM
        or model.get_global("cyclops.pacified")
    ):
        return []
    wrath = int(model.get_global("cyclops.wrath")) + 1
    model.set_global("cyclops.wrath", wrath)
    if wrath > len(CYCLOPS_WARNINGS):
        raise Fatal(CYCLOPS_MEAL)
    return [CYCLOPS_WARNINGS[wrath - 1]]


# -- dam ---------------------------------------------------------------

FLOOD_LEVEL = 14
WATER_MARKS = ("ankles", "shins", "knees", "hips", "waist", "chest", "neck")
DROWNED = "I'm afraid you have done drowned yourself."


def leak_daemon(model: WorldModel) -> list[str]:
    level = int(model.get_global("dam.water_level"))
    if level <= 0:
        model.cancel("leak")
        return []
    level += 1
    model.set_global("dam.water_level", level)
    inside = model.state.current_room == MAINTENANCE_ROOM

    if level >= FLOOD_LEVEL:
        model.set_global("dam.flooded", True)
        model.cancel("leak")
        if inside:
            raise Fatal(DROWNED)
        return []
    if inside:
        return [f"The water level here is now up to your {WATER_MARKS[(level - 1) // 2]}."]
    return []


def reservoir_drain(model: WorldModel) -> list[str]:
    model.set_global("dam.low_tide", True)
    if model.state.current_room in (RESERVOIR_SOUTH, RESERVOIR_NORTH):
        return [
            "The water level is now quite low here and you could easily cross over "
            "to the other side."
        ]
    return []


SWEPT_AWAY = (
    "You are lifted up by the rising river! You try to swim, but the currents are "
    "too strong. You come closer, closer to the awesome structure of Flood Control "
    "Dam #3. The dam beckons to you. The roar of the water nearly deafens you, but "
    "you remain conscious as you tumble over the dam toward your certain doom "
    "among the rocks at its base."
)


def reservoir_fill(model: WorldModel) -> list[str]:
    model.set_global("dam.low_tide", False)
    here = model.state.current_room
    if here == RESERVOIR:
        vehicle = model.vehicle()
        if vehicle is None or not model.has_flag(vehicle, Flag.WATER):
            raise Fatal(SWEPT_AWAY)
        return [f"The {model.obj(vehicle).name} is lifted up by the rising water."]
    if here in (RESERVOIR_SOUTH, RESERVOIR_NORTH):
        return [
            "You notice that the water level has risen to the point that it is "
            "impossible to cross."
        ]
    return []


EVENT_ACTIONS: dict[str, Action] = {
    LAMP: _burn(LAMP),
    CANDLES: _burn(CANDLES),
    "thief": thief_daemon,
    "cyclops": cyclops_daemon,
    "leak": leak_daemon,
    "reservoir-drain": reservoir_drain,
    "reservoir-fill": reservoir_fill,
}
