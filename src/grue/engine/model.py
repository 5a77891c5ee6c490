"""The world model: containment, flags and the global store of one game.

WorldModel pairs the shared, immutable World with one player's GameState and
is the only thing that mutates that state. Every mutation is appended to a
change log that the executor hands back with each Result.
"""

import random
from dataclasses import dataclass

from .results import Fatal, StateChange
from .state import (
    GLOBALS,
    NOWHERE,
    PLAYER,
    SHRINE,
    GameState,
    ScheduledEvent,
)
from .world import Flag, Obj, Room, World

GRUE_DEATH = "Oh, no! You have walked into the slavering fangs of a lurking grue!"
DARKNESS = "It is pitch black. You are likely to be eaten by a grue."
NO_EXIT = "You can't go that way."

_SPECIAL_CONTAINERS = (PLAYER, NOWHERE, GLOBALS)


def with_article(name: str) -> str:
    return f"an {name}" if name[:1] in "aeiou" else f"a {name}"


def sentence_case(text: str) -> str:
    return text[:1].upper() + text[1:]


@dataclass(frozen=True)
class ExitResolution:
    """Where an exit leads, or why it doesn't."""

    destination: str | None
    message: str = ""


class WorldModel:
    def __init__(
        self,
        world: World,
        state: GameState,
        rng: random.Random | None = None,
    ):
        self.world = world
        self.state = state
        self.rng = rng or random.Random()
        self.changes: list[StateChange] = []
        self.notes: list[str] = []

    # -- lookups ---------------------------------------------------------

    def obj(self, obj_id: str) -> Obj:
        return self.world.objects[obj_id]

    def room(self, room_id: str | None = None) -> Room:
        return self.world.rooms[room_id or self.state.current_room]

    def location(self, obj_id: str) -> str:
        return self.state.locations[obj_id]

    def has_flag(self, entity_id: str, flag: Flag | str) -> bool:
        if entity_id in self.state.flags:
            return flag in self.state.flags[entity_id]
        room = self.world.rooms.get(entity_id)
        return room is not None and flag in room.flags

    def get_global(self, key: str) -> bool | int | str:
        return self.state.globals.get(key, False)

    def contents(self, container: str) -> list[str]:
        """Objects directly inside `container`, in definition order."""
        return [
            obj_id
            for obj_id in self.world.objects
            if self.state.locations[obj_id] == container
        ]

    def inventory(self) -> list[str]:
        return self.contents(PLAYER)

    def container_chain(self, obj_id: str) -> list[str]:
        """Containers enclosing `obj_id`, innermost first, ending at its root."""
        chain = []
        container = self.location(obj_id)
        while container in self.world.objects:
            chain.append(container)
            container = self.location(container)
        chain.append(container)
        return chain

    def root(self, obj_id: str) -> str:
        return self.container_chain(obj_id)[-1]

    def is_carried(self, obj_id: str) -> bool:
        return self.root(obj_id) == PLAYER

    def _tree(self, container: str) -> list[str]:
        """Visible objects under `container`, depth-first through open containers."""
        found = []
        for obj_id in self.contents(container):
            if self.has_flag(obj_id, Flag.INVISIBLE):
                continue
            found.append(obj_id)
            if self.has_flag(obj_id, Flag.OPEN):
                found.extend(self._tree(obj_id))
        return found

    def visible_in_room(self) -> list[str]:
        if not self.is_lit():
            return []
        return self._tree(self.state.current_room)

    def candidates(self) -> list[str]:
        """Objects a noun phrase may refer to right now.

        Ordered inventory first, then the room, then the room's backdrop;
        within each group by definition order, with the contents of open
        containers following their container.
        """
        found = self._tree(PLAYER)
        if self.is_lit():
            found.extend(self._tree(self.state.current_room))
            for obj_id in self.room().backdrop:
                if self.location(obj_id) == GLOBALS and not self.has_flag(
                    obj_id, Flag.INVISIBLE
                ):
                    found.append(obj_id)
        return found

    def candidate_objects(self) -> list[Obj]:
        return [self.obj(obj_id) for obj_id in self.candidates()]

    def is_reachable(self, obj_id: str) -> bool:
        return obj_id in self.candidates()

    def is_lit(self) -> bool:
        room = self.room()
        if Flag.LIT in room.flags or self.get_global("player.always_lit"):
            return True
        return any(
            self.has_flag(obj_id, Flag.LIGHT_SOURCE) and self.has_flag(obj_id, Flag.LIT)
            for obj_id in self._tree(PLAYER) + self._tree(room.id)
        )

    def vehicle(self) -> str | None:
        """The vehicle the player is sitting in, if any."""
        return self.get_global("player.vehicle") or None

    def is_water(self, room_id: str | None = None) -> bool:
        room = self.room(room_id)
        return Flag.WATER in room.flags and not self.get_global("dam.low_tide")

    def player_status(self) -> set[str]:
        status = set(self.state.player_flags)
        if self.is_lit():
            status.add("lit")
        return status

    def weight(self, obj_id: str) -> int:
        return self.obj(obj_id).size + sum(
            self.weight(child) for child in self.contents(obj_id)
        )

    def carried_weight(self) -> int:
        return sum(self.weight(obj_id) for obj_id in self.inventory())

    def is_treasure(self, obj_id: str) -> bool:
        return self.state.values[obj_id] > 0 or self.state.case_values[obj_id] > 0

    # -- conditions and exits -------------------------------------------

    def check(self, condition: tuple) -> bool:
        """Evaluate an exit guard or room-variant condition."""
        match condition:
            case ():
                return True
            case ("global", key):
                return bool(self.get_global(key))
            case ("open", obj_id):
                return self.has_flag(obj_id, Flag.OPEN)
            case ("flag", entity_id, flag):
                return self.has_flag(entity_id, flag)
            case ("carrying", obj_id):
                return self.is_carried(obj_id)
            case ("not", inner):
                return not self.check(inner)
            case ("any", *conditions):
                return any(self.check(inner) for inner in conditions)
            case ("afloat",):
                return self.vehicle() is not None
            case _:
                raise ValueError(f"Unknown condition: {condition!r}")

    def resolve_exit(self, direction: str, room_id: str | None = None) -> ExitResolution:
        exit_ = self.room(room_id).exits.get(direction)
        if exit_ is None:
            return ExitResolution(None, NO_EXIT)
        if exit_.destination is None or not self.check(exit_.guard):
            return ExitResolution(None, exit_.message or NO_EXIT)
        return ExitResolution(exit_.destination)

    def open_exits(self) -> list[str]:
        return [
            direction
            for direction in self.room().exits
            if self.resolve_exit(direction).destination is not None
        ]

    def travel(self, direction: str) -> ExitResolution:
        """Follow an exit. Arriving somewhere dark without light is fatal.

        A vehicle the player sits in goes along, and only vehicles that
        float may enter deep water.
        """
        resolution = self.resolve_exit(direction)
        destination = resolution.destination
        if destination is not None and (vehicle := self.vehicle()):
            if self.is_water(destination) and not self.has_flag(vehicle, Flag.WATER):
                return ExitResolution(
                    None, f"You can't go there in {with_article(self.obj(vehicle).name)}."
                )
            self.move_object(vehicle, destination)
        if destination is not None:
            self.move_player(destination)
            if not self.is_lit():
                raise Fatal(GRUE_DEATH)
        return resolution

    # -- descriptions ----------------------------------------------------

    def room_text(self, room: Room) -> str:
        for variant in room.variants:
            if all(self.check(condition) for condition in variant.conditions):
                return variant.text
        return room.description

    def contents_lines(self, obj_id: str, indent: str = "") -> list[str]:
        if not self.has_flag(obj_id, Flag.OPEN) or self.has_flag(obj_id, Flag.ACTOR):
            return []
        children = [
            child
            for child in self.contents(obj_id)
            if not self.has_flag(child, Flag.INVISIBLE)
        ]
        if not children:
            return []
        lines = [f"{indent}The {self.obj(obj_id).name} contains:"]
        for child in children:
            lines.append(f"{indent}  {sentence_case(with_article(self.obj(child).name))}")
            lines.extend(self.contents_lines(child, indent + "  "))
        return lines

    def describe_room(self) -> str:
        if not self.is_lit():
            return DARKNESS
        room = self.room()
        vehicle = self.vehicle()
        title = f"{room.name}, in the {self.obj(vehicle).name}" if vehicle else room.name
        lines = [title, self.room_text(room)]
        for obj_id in self.contents(room.id):
            if obj_id == vehicle or self.has_flag(obj_id, Flag.INVISIBLE):
                continue
            obj = self.obj(obj_id)
            if not self.has_flag(obj_id, Flag.SCENERY):
                lines.append(obj.ground or f"There is {with_article(obj.name)} here.")
            lines.extend(self.contents_lines(obj_id))
        return "\n".join(lines)

    # -- mutations -------------------------------------------------------

    def _record(self, kind: str, subject: str, old: object, new: object) -> None:
        self.changes.append(StateChange(kind, subject, old, new))

    def move_object(self, obj_id: str, container: str) -> None:
        """Detach `obj_id` from its container and attach it to `container`."""
        if obj_id not in self.world.objects:
            raise ValueError(f"Unknown object: {obj_id}")
        if (
            container not in _SPECIAL_CONTAINERS
            and container not in self.world.rooms
            and container not in self.world.objects
        ):
            raise ValueError(f"Unknown container: {container}")
        if container == PLAYER and not self.has_flag(obj_id, Flag.TAKEABLE):
            raise ValueError(f"{obj_id} cannot be carried")
        if container == obj_id or (
            container in self.world.objects
            and obj_id in self.container_chain(container)
        ):
            raise ValueError(f"Moving {obj_id} into {container} would create a cycle")

        old = self.state.locations[obj_id]
        if old != container:
            self.state.locations[obj_id] = container
            self._record("location", obj_id, old, container)

    def set_flag(self, obj_id: str, flag: Flag) -> None:
        flags = self.state.flags[obj_id]
        if flag not in flags:
            flags.add(str(flag))
            self._record("flag", obj_id, None, str(flag))

    def clear_flag(self, obj_id: str, flag: Flag) -> None:
        flags = self.state.flags[obj_id]
        if flag in flags:
            flags.discard(str(flag))
            self._record("flag", obj_id, str(flag), None)

    def set_global(self, key: str, value: bool | int | str) -> None:
        old = self.state.globals.get(key)
        if old != value:
            self.state.globals[key] = value
            self._record("global", key, old, value)

    def move_player(self, room_id: str) -> None:
        if room_id not in self.world.rooms:
            raise ValueError(f"Unknown room: {room_id}")
        old = self.state.current_room
        self.state.current_room = room_id
        self.state.visited.add(room_id)
        self._record("player", "room", old, room_id)
        if room_id == SHRINE:
            self.set_global("story.shrine_visited", True)

    def adjust_score(self, delta: int) -> None:
        old = self.state.score
        self.state.score = max(0, old + delta)
        if self.state.score != old:
            self._record("score", "score", old, self.state.score)

    def credit(self, kind: str, obj_id: str, points: int) -> None:
        """Award `points` for `obj_id` unless this kind of credit was given before."""
        key = f"{kind}:{obj_id}"
        if points > 0 and key not in self.state.scored:
            self.state.scored.add(key)
            self.adjust_score(points)

    # -- scheduled events ------------------------------------------------

    def event(self, name: str) -> ScheduledEvent:
        for event in self.state.events:
            if event.name == name:
                return event
        raise KeyError(name)

    def schedule(self, name: str, ticks: int = 0) -> None:
        """Enable an event; fuses fire after `ticks` turns."""
        event = self.event(name)
        event.enabled = True
        event.ticks = ticks
        self._record("event", name, None, ticks)

    def cancel(self, name: str) -> None:
        event = self.event(name)
        if event.enabled:
            event.enabled = False
            self._record("event", name, event.ticks, None)

    # -- per-command buffers ---------------------------------------------

    def note(self, text: str) -> None:
        self.notes.append(text)

    def drain_notes(self) -> list[str]:
        notes, self.notes = self.notes, []
        return notes

    def drain_changes(self) -> list[StateChange]:
        changes, self.changes = self.changes, []
        return changes
