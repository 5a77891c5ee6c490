"""Immutable definitions for the underground world.

These are loaded once from world.yaml at startup and shared across all
players. Anything that changes during play lives in GameState.
"""

from dataclasses import dataclass, field
from enum import StrEnum

from .vocabulary import Vocabulary


class Flag(StrEnum):
    """Capability flags. Rooms and objects draw from the same set."""

    TAKEABLE = "takeable"
    CONTAINER = "container"
    OPENABLE = "openable"
    OPEN = "open"
    LOCKED = "locked"
    LIGHT_SOURCE = "light_source"
    LIT = "lit"
    WEAPON = "weapon"
    ACTOR = "actor"
    READABLE = "readable"
    EDIBLE = "edible"
    DRINKABLE = "drinkable"
    VEHICLE = "vehicle"
    SCENERY = "scenery"
    INVISIBLE = "invisible"
    TOUCHED = "touched"
    # rooms only
    OUTSIDE = "outside"
    SACRED = "sacred"
    # rooms: deep water unless the dam has drained it; vehicles: floats
    WATER = "water"


@dataclass(frozen=True)
class Exit:
    """One way out of a room.

    `guard` is a condition tuple (see WorldModel.check); an exit without a
    destination is permanently blocked and exists only for its message.
    """

    direction: str
    destination: str | None = None
    guard: tuple = ()
    message: str | None = None


@dataclass(frozen=True)
class Variant:
    """Alternative room text, used when every condition holds."""

    conditions: tuple[tuple, ...]
    text: str


@dataclass
class Room:
    id: str
    name: str
    description: str = ""
    flags: frozenset[Flag] = frozenset()
    exits: dict[str, Exit] = field(default_factory=dict)
    backdrop: tuple[str, ...] = ()
    variants: tuple[Variant, ...] = ()


@dataclass
class Obj:
    """An object definition. Its starting state is copied into GameState."""

    id: str
    name: str
    synonyms: tuple[str, ...] = ()
    adjectives: tuple[str, ...] = ()
    location: str = ""
    flags: frozenset[Flag] = frozenset()
    description: str = ""
    ground: str = ""
    text: str = ""
    size: int = 5
    capacity: int = 0
    value: int = 0
    case_value: int = 0
    scenery: str | None = None
    refusals: dict[str, str] = field(default_factory=dict)
    messages: dict[str, str] = field(default_factory=dict)
    behavior: str | None = None


@dataclass
class World:
    """The complete immutable game world, loaded from package data."""

    start_room: str
    rooms: dict[str, Room] = field(default_factory=dict)
    objects: dict[str, Obj] = field(default_factory=dict)
    vocabulary: Vocabulary = field(default_factory=Vocabulary)
