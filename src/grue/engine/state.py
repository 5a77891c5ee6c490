"""Mutable per-player game state.

All values are strings, ints, bools, sets, lists and dicts of those, with no
World references, so a state can be pickled for persistence and deep
copied for snapshots.
"""

from dataclasses import dataclass, field
from enum import StrEnum

from .world import World

# Special containers
PLAYER = "player"
NOWHERE = "nowhere"
GLOBALS = "globals"

# Rooms with a fixed role
FOREST_START = "forest-1"
LIVING_ROOM = "living-room"
CELLAR = "cellar"
KITCHEN = "kitchen"
SHRINE = "south-temple"
HADES = "entrance-to-hades"
EGYPT_ROOM = "egypt-room"
CYCLOPS_ROOM = "cyclops-room"
MAINTENANCE_ROOM = "maintenance-room"
DAM_ROOM = "dam-room"
RESERVOIR = "reservoir"
RESERVOIR_NORTH = "reservoir-north"
RESERVOIR_SOUTH = "reservoir-south"
SHAFT_ROOM = "shaft-room"
LOWER_SHAFT = "lower-shaft"
DOME_ROOM = "dome-room"
ARAGAIN_FALLS = "aragain-falls"
ON_RAINBOW = "on-rainbow"
END_OF_RAINBOW = "end-of-rainbow"

# Objects the engine refers to by name
LAMP = "lamp"
CANDLES = "candles"
SWORD = "sword"
COFFIN = "coffin"
SCEPTRE = "sceptre"
TROPHY_CASE = "trophy-case"
RUG = "rug"
TRAP_DOOR = "trap-door"
LEAVES = "leaves"
GRATE = "grate"
KEYS = "keys"
WRENCH = "wrench"
PUTTY = "putty"
LEAK = "leak"
BOLT = "bolt"
BUBBLE = "bubble"
YELLOW_BUTTON = "yellow-button"
BROWN_BUTTON = "brown-button"
BLUE_BUTTON = "blue-button"
MIRROR = "mirror"
POT_OF_GOLD = "pot-of-gold"
RAINBOW = "rainbow"
BASKET = "basket"
BASKET_IMAGE = "basket-image"
ROPE = "rope"
RAILING = "railing"
PUMP = "pump"
INFLATABLE_BOAT = "inflatable-boat"
INFLATED_BOAT = "inflated-boat"
CYCLOPS = "cyclops"
LUNCH = "lunch"
THIEF = "thief"

MAX_DEATHS = 3
MAX_SCORE = 350
CARRY_LIMIT = 100

DAEMON = "daemon"
FUSE = "fuse"

# Registration order of scheduled events for a fresh game: (name, kind, enabled)
DEFAULT_EVENTS: tuple[tuple[str, str, bool], ...] = (
    ("lamp", DAEMON, False),
    ("candles", DAEMON, False),
    ("thief", DAEMON, True),
    ("cyclops", DAEMON, True),
    ("leak", DAEMON, False),
    ("reservoir-drain", FUSE, False),
    ("reservoir-fill", FUSE, False),
)

# Global store, namespaced by the puzzle or subsystem that owns each key
DEFAULT_GLOBALS: dict[str, bool | int | str] = {
    "dam.gate_flag": False,
    "dam.gates_open": False,
    "dam.low_tide": False,
    "dam.water_level": 0,
    "dam.flooded": False,
    "mirror.broken": False,
    "luck.lucky": True,
    "rainbow.solid": False,
    "shaft.cage_top": True,
    "dome.rope_tied": False,
    "rug.moved": False,
    "coffin.moved": False,
    "cyclops.flag": False,
    "cyclops.magic": False,
    "cyclops.pacified": False,
    "cyclops.wrath": 0,
    "thief.engaged": False,
    "story.shrine_visited": False,
    "player.always_lit": False,
    "player.vehicle": "",
}

FUEL_CAPACITY = {LAMP: 200, CANDLES: 40}


class Life(StrEnum):
    ALIVE = "alive"
    SPIRIT = "spirit"
    TERMINATED = "terminated"


@dataclass
class ScheduledEvent:
    """A timer record. Daemons recur while enabled; fuses fire once."""

    name: str
    kind: str
    order: int
    enabled: bool = False
    ticks: int = 0


@dataclass
class GameState:
    """All mutable per-player state. Holds only primitive types."""

    current_room: str
    # Object id -> container id (room, object, PLAYER, NOWHERE or GLOBALS)
    locations: dict[str, str] = field(default_factory=dict)
    # Object id -> current capability flags
    flags: dict[str, set[str]] = field(default_factory=dict)
    values: dict[str, int] = field(default_factory=dict)
    case_values: dict[str, int] = field(default_factory=dict)
    globals: dict[str, bool | int | str] = field(default_factory=dict)

    score: int = 0
    moves: int = 0
    deaths: int = 0
    life: Life = Life.ALIVE
    player_flags: set[str] = field(default_factory=set)
    visited: set[str] = field(default_factory=set)
    scored: set[str] = field(default_factory=set)

    fuel: dict[str, int] = field(default_factory=dict)
    warned: dict[str, set[int]] = field(default_factory=dict)
    events: list[ScheduledEvent] = field(default_factory=list)

    last_command: str | None = None


SNAPSHOT_VERSION = 1


@dataclass(frozen=True)
class Snapshot:
    """A complete, self-contained copy of one game, for the persistence layer."""

    state: GameState
    version: int = SNAPSHOT_VERSION


def default_events() -> list[ScheduledEvent]:
    return [
        ScheduledEvent(name=name, kind=kind, order=order, enabled=enabled)
        for order, (name, kind, enabled) in enumerate(DEFAULT_EVENTS)
    ]


def new_game_state(world: World) -> GameState:
    """Create a fresh GameState with every object at its starting position."""
    state = GameState(current_room=world.start_room)
    for obj_id, obj in world.objects.items():
        state.locations[obj_id] = obj.location
        state.flags[obj_id] = {str(flag) for flag in obj.flags}
        state.values[obj_id] = obj.value
        state.case_values[obj_id] = obj.case_value
    state.globals = dict(DEFAULT_GLOBALS)
    state.fuel = dict(FUEL_CAPACITY)
    state.warned = {source: set() for source in FUEL_CAPACITY}
    state.events = default_events()
    state.visited.add(world.start_room)
    return state
