"""Curated refusals for scenery.

Scenery objects carry a class in world.yaml (vast, structure, fixture,
decor). A (pattern, verb) entry matches either an exact object id or one
of those classes; exact ids win. Adding a refusal is a table entry.
"""

from .model import WorldModel

VAST = "vast"
STRUCTURE = "structure"
FIXTURE = "fixture"
DECOR = "decor"

SCENERY_CLASSES = (VAST, STRUCTURE, FIXTURE, DECOR)

BARE_HANDS = "Your bare hands don't appear to be enough."

# (object id or scenery class, verb) -> message; {name} is the object's name
SCENERY_OVERRIDES: dict[tuple[str, str], str] = {
    (VAST, "take"): "What a concept!",
    ("white-house", "take"): "What a concept!",
    (STRUCTURE, "take"): "An interesting idea...",
    ("white-house", "open"): "I can't see how to get in from here.",
    ("white-house", "push"): "Pushing the {name} isn't notably helpful.",
    (VAST, "push"): "Pushing the {name} isn't notably helpful.",
    (STRUCTURE, "push"): "Pushing the {name} isn't notably helpful.",
    ("bolt", "turn"): BARE_HANDS,
    (FIXTURE, "turn"): BARE_HANDS,
    ("board", "pull"): "You can't move the board.",
    (DECOR, "pull"): "You can't move the {name}.",
    (FIXTURE, "pull"): "You can't move the {name}.",
    (VAST, "climb"): "There is no tree here suitable for climbing.",
}


def scenery_override(model: WorldModel, obj_id: str, verb: str, tool: str | None) -> str | None:
    """Return the curated refusal for `verb` on a scenery object, if any."""
    obj = model.obj(obj_id)
    if obj.scenery is None:
        return None
    # Turning with a tool is left to the puzzle controllers.
    if verb == "turn" and tool is not None:
        return None
    for pattern in (obj_id, obj.scenery):
        message = SCENERY_OVERRIDES.get((pattern, verb))
        if message is not None:
            return message.format(name=obj.name)
    return None
