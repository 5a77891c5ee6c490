"""Load world.yaml and vocabulary.yaml into a World object.

world.yaml holds rooms and objects; vocabulary.yaml holds verbs,
prepositions, directions and the rest of the static word corpus. Object
synonyms and adjectives are merged into the vocabulary here, so the two
files together define every word the parser knows.
"""

from pathlib import Path

import yaml

from .scenery import SCENERY_CLASSES
from .state import GLOBALS, NOWHERE, PLAYER
from .vocabulary import Arity, Role, VerbSyntax, Vocabulary
from .world import Exit, Flag, Obj, Room, Variant, World

_OBJECT_FIELDS = (
    "description",
    "ground",
    "text",
    "size",
    "capacity",
    "value",
    "case_value",
    "scenery",
    "behavior",
)


def _freeze(value):
    """Turn nested YAML lists into tuples so conditions can be matched and hashed."""
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


def _read_yaml(path: Path) -> dict:
    with open(path) as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must contain a mapping at the top level")
    return data


def _flags(raw: list | None, owner: str) -> frozenset[Flag]:
    try:
        return frozenset(Flag(name) for name in raw or ())
    except ValueError as exc:
        raise ValueError(f"{owner}: {exc}") from None


def _parse_exit(direction: str, raw) -> Exit:
    """An exit is a bare destination id or a mapping with to/guard/message."""
    if isinstance(raw, str):
        return Exit(direction=direction, destination=raw)
    return Exit(
        direction=direction,
        destination=raw.get("to"),
        guard=_freeze(raw.get("guard", [])),
        message=raw.get("message"),
    )


def _parse_room(room_id: str, raw: dict) -> Room:
    return Room(
        id=room_id,
        name=raw["name"],
        description=raw.get("description", ""),
        flags=_flags(raw.get("flags"), room_id),
        exits={
            str(direction): _parse_exit(str(direction), raw_exit)
            for direction, raw_exit in (raw.get("exits") or {}).items()
        },
        backdrop=tuple(raw.get("backdrop", ())),
        variants=tuple(
            Variant(conditions=_freeze(variant["when"]), text=variant["text"])
            for variant in raw.get("variants", ())
        ),
    )


def _parse_object(obj_id: str, raw: dict) -> Obj:
    obj = Obj(
        id=obj_id,
        name=raw["name"],
        synonyms=tuple(str(word).lower() for word in raw.get("synonyms", ())),
        adjectives=tuple(str(word).lower() for word in raw.get("adjectives", ())),
        location=raw["location"],
        flags=_flags(raw.get("flags"), obj_id),
        refusals=dict(raw.get("refusals") or {}),
        messages=dict(raw.get("messages") or {}),
    )
    for name in _OBJECT_FIELDS:
        if name in raw:
            setattr(obj, name, raw[name])
    return obj


def load_vocabulary(data: dict) -> Vocabulary:
    """Build the static vocabulary from the parsed vocabulary.yaml."""
    vocabulary = Vocabulary()

    for verb, entry in data.get("verbs", {}).items():
        entry = entry or {}
        verb = str(verb)
        vocabulary.syntax[verb] = VerbSyntax(
            arity=Arity(entry.get("arity", Arity.OPTIONAL)),
            literal=entry.get("literal", False),
            motion=entry.get("motion", False),
        )
        for word in (verb, *entry.get("synonyms", ())):
            vocabulary.add(str(word), Role.VERB, verb)

    for verb, particle, target in data.get("phrasal", ()):
        vocabulary.phrasal[(str(verb), str(particle))] = str(target)

    for canonical, synonyms in data.get("prepositions", {}).items():
        for word in (canonical, *(synonyms or ())):
            vocabulary.add(str(word), Role.PREPOSITION, str(canonical))

    for canonical, synonyms in data.get("directions", {}).items():
        for word in (canonical, *(synonyms or ())):
            vocabulary.add(str(word), Role.DIRECTION, str(canonical))

    for word in data.get("ignorable", ()):
        vocabulary.add(str(word), Role.IGNORABLE)

    vocabulary.abbreviations = {
        str(short): str(full) for short, full in data.get("abbreviations", {}).items()
    }
    return vocabulary


def _validate(world: World) -> list[str]:
    errors = []
    if world.start_room not in world.rooms:
        errors.append(f"start room '{world.start_room}' does not exist")

    containers = set(world.rooms) | set(world.objects) | {PLAYER, NOWHERE, GLOBALS}
    for room in world.rooms.values():
        for exit_ in room.exits.values():
            if exit_.destination is not None and exit_.destination not in world.rooms:
                errors.append(
                    f"room '{room.id}' exit {exit_.direction} leads to "
                    f"unknown room '{exit_.destination}'"
                )
        for obj_id in room.backdrop:
            obj = world.objects.get(obj_id)
            if obj is None:
                errors.append(f"room '{room.id}' backdrop names unknown object '{obj_id}'")
            elif obj.location != GLOBALS:
                errors.append(f"backdrop object '{obj_id}' must start in {GLOBALS}")

    for obj in world.objects.values():
        if obj.location not in containers:
            errors.append(f"object '{obj.id}' starts in unknown location '{obj.location}'")
        if obj.location == obj.id:
            errors.append(f"object '{obj.id}' is inside itself")
        if obj.scenery is not None and obj.scenery not in SCENERY_CLASSES:
            errors.append(f"object '{obj.id}' has unknown scenery class '{obj.scenery}'")
        if not obj.synonyms:
            errors.append(f"object '{obj.id}' has no nouns")
    return errors


def load_world(world_path: Path, vocabulary_path: Path) -> World:
    """Parse both data files and return a validated World.

    Raises ValueError describing every problem found.
    """
    raw_world = _read_yaml(world_path)
    vocabulary = load_vocabulary(_read_yaml(vocabulary_path))

    world = World(start_room=raw_world["start"], vocabulary=vocabulary)
    for room_id, raw in (raw_world.get("rooms") or {}).items():
        world.rooms[room_id] = _parse_room(room_id, raw)
    for obj_id, raw in (raw_world.get("objects") or {}).items():
        obj = _parse_object(obj_id, raw)
        world.objects[obj_id] = obj
        for word in obj.synonyms:
            vocabulary.add(word, Role.NOUN)
        for word in obj.adjectives:
            vocabulary.add(word, Role.ADJECTIVE)

    errors = _validate(world)
    if errors:
        raise ValueError(
            f"{world_path.name} failed validation with {len(errors)} error(s):\n  - "
            + "\n  - ".join(errors)
        )
    return world
