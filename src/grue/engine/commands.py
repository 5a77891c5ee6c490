"""Command execution.

execute(model, command) -> Result is the entry point. Every object-taking
verb has a VerbRule describing the checks it needs; the checks run in a
fixed order before any puzzle controller, behavior hook or verb handler
sees the command, so a refused command never changes the world.

Reachability and the "unknown word" check happen earlier, in the parser,
against the same candidate set.
"""

from collections.abc import Callable
from dataclasses import dataclass

from .behaviors import run_behavior
from .daemons import FUEL_TABLES
from .model import WorldModel, sentence_case, with_article
from .parser import GO, Command, FailureKind, ParseFailure
from .puzzles import ALREADY_CLOSED, ALREADY_OPEN, after_arrival, claim, incant
from .results import (
    ExecutionFailure,
    FailureReason,
    Result,
    refuse,
    succeed,
)
from .scenery import scenery_override
from .state import CARRY_LIMIT, MAX_SCORE, NOWHERE, PLAYER, TROPHY_CASE, Life
from .world import Flag

SPIRIT_REFUSAL = "You can't even do that."
IN = "in"


@dataclass(frozen=True)
class VerbRule:
    """The checks a verb needs before its handler runs.

    `possession`: the direct object must be carried.
    `tool_possession`: an indirect object (the tool) must be carried.
    `container_target`: with "in", the indirect object must be an open container.
    `capability`: the direct object must carry at least one of these flags;
    otherwise `refusal` (formatted with the object's name) is the answer.
    """

    possession: bool = False
    tool_possession: bool = False
    container_target: bool = False
    capability: tuple[Flag, ...] = ()
    refusal: str = ""


_NO_RULE = VerbRule()

_VERB_RULES: dict[str, VerbRule] = {
    "take": VerbRule(capability=(Flag.TAKEABLE,), refusal="You can't be serious."),
    **dict.fromkeys(("drop", "wave", "throw"), VerbRule(possession=True)),
    "put": VerbRule(possession=True, container_target=True),
    "give": VerbRule(possession=True),
    "tie": VerbRule(possession=True),
    **dict.fromkeys(
        ("open", "close"),
        VerbRule(
            capability=(Flag.CONTAINER, Flag.OPENABLE),
            refusal="You must tell me how to do that to a {name}.",
        ),
    ),
    "read": VerbRule(capability=(Flag.READABLE,), refusal="How does one read a {name}?"),
    "board": VerbRule(
        capability=(Flag.VEHICLE,),
        refusal="You have a theory on how to board a {name}, perhaps?",
    ),
    "light": VerbRule(capability=(Flag.LIGHT_SOURCE,), refusal="You can't turn that on."),
    "extinguish": VerbRule(capability=(Flag.LIGHT_SOURCE,), refusal="You can't turn that off."),
    "eat": VerbRule(
        capability=(Flag.EDIBLE,),
        refusal="I don't think that the {name} would agree with you.",
    ),
    "drink": VerbRule(
        capability=(Flag.DRINKABLE,),
        refusal="I don't think that the {name} would agree with you.",
    ),
    "attack": VerbRule(
        tool_possession=True,
        capability=(Flag.ACTOR,),
        refusal="I've known strange people, but fighting a {name}?",
    ),
    **dict.fromkeys(
        ("turn", "unlock", "lock", "inflate", "break", "rub", "plug"),
        VerbRule(tool_possession=True),
    ),
}

SPIRIT_VERBS = frozenset(
    {GO, "look", "examine", "inventory", "wait", "score", "diagnose", "say", "quit", "again"}
)

# No game time passes for these.
META_VERBS = frozenset({"score", "diagnose", "quit", "yes"})

RANKS: tuple[tuple[int, str], ...] = (
    (MAX_SCORE, "Master Adventurer"),
    (331, "Wizard"),
    (301, "Master"),
    (201, "Adventurer"),
    (101, "Junior Adventurer"),
    (51, "Novice Adventurer"),
    (26, "Amateur Adventurer"),
    (0, "Beginner"),
)


def rank(score: int) -> str:
    for threshold, title in RANKS:
        if score >= threshold:
            return title
    return RANKS[-1][1]


def _name(model: WorldModel, obj_id: str) -> str:
    return model.obj(obj_id).name


def _listing(names: list[str]) -> str:
    items = [with_article(name) for name in names]
    if len(items) <= 2:
        return " and ".join(items)
    return ", ".join(items[:-1]) + f", and {items[-1]}"


# -- precondition pipeline -------------------------------------------


def _check_preconditions(
    model: WorldModel, command: Command, rule: VerbRule
) -> ParseFailure | ExecutionFailure | None:
    """Possession, then container target. Returns the first failure."""
    if rule.possession and command.direct is not None:
        if not model.is_carried(command.direct):
            return ParseFailure(FailureKind.NOT_POSSESSED, word=command.direct_text)
    if rule.tool_possession and command.indirect is not None:
        if not model.is_carried(command.indirect):
            return ParseFailure(FailureKind.NOT_POSSESSED, word=command.indirect_text)

    if rule.container_target and command.preposition == IN and command.indirect:
        target = command.indirect
        if not model.has_flag(target, Flag.CONTAINER):
            return ExecutionFailure(
                FailureReason.CAPABILITY_MISSING,
                subject=_name(model, target),
                detail=f"You can't put anything in the {_name(model, target)}.",
            )
        if not model.has_flag(target, Flag.OPEN):
            return ExecutionFailure(FailureReason.CONTAINER_CLOSED, subject=_name(model, target))
    return None


def _check_capability(model: WorldModel, command: Command, rule: VerbRule) -> str | None:
    """Scenery table, fixed per-object refusals, then capability flags."""
    obj_id = command.direct
    if obj_id is None:
        return None
    obj = model.obj(obj_id)
    message = scenery_override(model, obj_id, command.verb, command.indirect)
    if message is not None:
        return message
    if command.verb in obj.refusals:
        return obj.refusals[command.verb]
    if rule.capability and not any(model.has_flag(obj_id, flag) for flag in rule.capability):
        return rule.refusal.format(name=obj.name)
    return None


# -- movement and looking --------------------------------------------


def _cmd_go(model: WorldModel, command: Command) -> Result:
    if command.direction is None:
        return refuse("You should supply a direction!")
    previous = model.state.current_room
    was_afloat = model.is_water()
    resolution = model.travel(command.direction)
    if resolution.destination is None:
        return refuse(resolution.message)
    message = model.describe_room()
    vehicle = model.vehicle()
    if vehicle and was_afloat and not model.is_water():
        message = f"The {_name(model, vehicle)} comes to a rest on the shore.\n\n{message}"
    arrival = after_arrival(model, previous)
    if arrival:
        message = f"{message}\n{arrival}"
    return succeed(message)


def _cmd_board(model: WorldModel, command: Command) -> Result:
    obj_id = command.direct
    name = _name(model, obj_id)
    if model.location(obj_id) != model.state.current_room:
        return refuse(f"The {name} must be on the ground to be boarded.")
    if vehicle := model.vehicle():
        return refuse(f"You are already in the {_name(model, vehicle)}!")
    model.set_global("player.vehicle", obj_id)
    return succeed(f"You are now in the {name}.")


def _cmd_disembark(model: WorldModel, command: Command) -> Result:
    vehicle = model.vehicle()
    if vehicle is None:
        return refuse("You're not in anything!")
    if command.direct is not None and command.direct != vehicle:
        return refuse("You're not in that!")
    if model.is_water():
        return refuse("You realize that getting out here would be fatal.")
    model.set_global("player.vehicle", "")
    return succeed("You are on your own feet again.")


def _cmd_climb(model: WorldModel, command: Command) -> Result:
    if command.direction is not None or command.direct is None:
        return _cmd_go(model, Command(verb=GO, direction=command.direction or "up"))
    return refuse(f"You can't climb the {_name(model, command.direct)}.")


def _cmd_look(model: WorldModel, command: Command) -> Result:
    if command.direct is not None:
        return _cmd_examine(model, command)
    return succeed(model.describe_room())


def _cmd_examine(model: WorldModel, command: Command) -> Result:
    obj_id = command.direct
    obj = model.obj(obj_id)
    if obj.description:
        lines = [obj.description]
    elif model.has_flag(obj_id, Flag.LIGHT_SOURCE):
        state = "on" if model.has_flag(obj_id, Flag.LIT) else "off"
        lines = [f"The {obj.name} is {state}."]
    elif model.has_flag(obj_id, Flag.CONTAINER) and not model.has_flag(obj_id, Flag.ACTOR):
        if not model.has_flag(obj_id, Flag.OPEN):
            lines = [f"The {obj.name} is closed."]
        else:
            lines = model.contents_lines(obj_id) or [f"The {obj.name} is empty."]
    elif model.has_flag(obj_id, Flag.READABLE) and obj.text:
        lines = [obj.text]
    else:
        lines = [f"There's nothing special about the {obj.name}."]
    return succeed("\n".join(lines))


def _cmd_read(model: WorldModel, command: Command) -> Result:
    obj = model.obj(command.direct)
    return succeed(obj.text or f"There's nothing written on the {obj.name}.")


def _cmd_inventory(model: WorldModel, command: Command) -> Result:
    carried = model.inventory()
    if not carried:
        return succeed("You are empty-handed.")
    lines = ["You are carrying:"]
    for obj_id in carried:
        lines.append(f"  {sentence_case(with_article(_name(model, obj_id)))}")
        lines.extend(model.contents_lines(obj_id, "  "))
    return succeed("\n".join(lines))


# -- taking and placing ----------------------------------------------


def _cmd_take(model: WorldModel, command: Command) -> Result:
    obj_id = command.direct
    if model.location(obj_id) == PLAYER:
        return refuse("You already have that!")
    if obj_id == model.vehicle():
        return refuse(f"You can't take the {_name(model, obj_id)} while you're in it.")
    if not model.is_carried(obj_id):
        if model.carried_weight() + model.weight(obj_id) > CARRY_LIMIT:
            return refuse("Your load is too heavy.")
    model.move_object(obj_id, PLAYER)
    model.credit("find", obj_id, model.state.values[obj_id])
    return succeed("Taken.")


def _cmd_drop(model: WorldModel, command: Command) -> Result:
    model.move_object(command.direct, model.state.current_room)
    return succeed("Dropped.")


def _cmd_put(model: WorldModel, command: Command) -> Result:
    obj_id, target = command.direct, command.indirect
    if target is None:
        return refuse(f"Where do you want to put the {_name(model, obj_id)}?")
    if command.preposition != IN:
        if command.preposition == "on":
            return refuse(f"There's no good surface on the {_name(model, target)}.")
        return refuse("You can't do that.")
    if target == obj_id or obj_id in model.container_chain(target):
        return refuse("How can you do that?")
    if model.location(obj_id) == target:
        return refuse(f"The {_name(model, obj_id)} is already in the {_name(model, target)}.")

    held = sum(model.weight(child) for child in model.contents(target))
    if held + model.weight(obj_id) > model.obj(target).capacity:
        return refuse("There's no room.")
    model.move_object(obj_id, target)
    if target == TROPHY_CASE:
        model.credit("case", obj_id, model.state.case_values[obj_id])
    return succeed("Done.")


def _cmd_throw(model: WorldModel, command: Command) -> Result:
    model.move_object(command.direct, model.state.current_room)
    if command.indirect is None:
        return succeed("Thrown.")
    return succeed(
        f"The {_name(model, command.direct)} bounces harmlessly off the "
        f"{_name(model, command.indirect)}."
    )


def _cmd_give(model: WorldModel, command: Command) -> Result:
    if command.indirect is None:
        return refuse(f"Who do you want to give the {_name(model, command.direct)} to?")
    recipient = _name(model, command.indirect)
    if model.has_flag(command.indirect, Flag.ACTOR):
        return refuse(f"The {recipient} refuses it politely.")
    gift = with_article(_name(model, command.direct))
    return refuse(f"You can't give {gift} to {with_article(recipient)}!")


# -- opening, locking and light --------------------------------------


def _cmd_open(model: WorldModel, command: Command) -> Result:
    obj_id = command.direct
    obj = model.obj(obj_id)
    if model.has_flag(obj_id, Flag.OPEN):
        return refuse(ALREADY_OPEN)
    if not model.has_flag(obj_id, Flag.OPENABLE):
        return refuse(f"The {obj.name} cannot be opened.")
    if model.has_flag(obj_id, Flag.LOCKED):
        return refuse(f"The {obj.name} is locked.")
    model.set_flag(obj_id, Flag.OPEN)

    revealed = [
        _name(model, child)
        for child in model.contents(obj_id)
        if not model.has_flag(child, Flag.INVISIBLE)
    ]
    if revealed and model.has_flag(obj_id, Flag.CONTAINER):
        return succeed(f"Opening the {obj.name} reveals {_listing(revealed)}.")
    return succeed(obj.messages.get("open", "Opened."))


def _cmd_close(model: WorldModel, command: Command) -> Result:
    obj_id = command.direct
    obj = model.obj(obj_id)
    if not model.has_flag(obj_id, Flag.OPENABLE):
        return refuse(f"You can't close the {obj.name}.")
    if not model.has_flag(obj_id, Flag.OPEN):
        return refuse(ALREADY_CLOSED)
    model.clear_flag(obj_id, Flag.OPEN)
    return succeed(obj.messages.get("close", "Closed."))


def _cmd_unlock(model: WorldModel, command: Command) -> Result:
    if not model.has_flag(command.direct, Flag.LOCKED):
        return refuse("It's not locked.")
    return refuse("It doesn't seem to work.")


def _cmd_lock(model: WorldModel, command: Command) -> Result:
    return refuse(f"You can't lock the {_name(model, command.direct)}.")


def _cmd_light(model: WorldModel, command: Command) -> Result:
    obj_id = command.direct
    obj = model.obj(obj_id)
    if model.has_flag(obj_id, Flag.LIT):
        return refuse("It is already on.")
    table = FUEL_TABLES.get(obj_id)
    if table is not None and model.state.fuel[obj_id] <= 0:
        return refuse(table.burned_out)

    was_dark = not model.is_lit()
    model.set_flag(obj_id, Flag.LIT)
    if table is not None:
        model.schedule(obj_id)
    message = f"The {obj.name} is now on."
    if was_dark and model.is_lit():
        message = f"{message}\n\n{model.describe_room()}"
    return succeed(message)


def _cmd_extinguish(model: WorldModel, command: Command) -> Result:
    obj_id = command.direct
    if not model.has_flag(obj_id, Flag.LIT):
        return refuse("It is already off.")
    model.clear_flag(obj_id, Flag.LIT)
    if obj_id in FUEL_TABLES:
        model.cancel(obj_id)
    message = f"The {_name(model, obj_id)} is now off."
    if not model.is_lit():
        message = f"{message}\nIt is now pitch black."
    return succeed(message)


# -- manipulation ----------------------------------------------------


def _cmd_move(model: WorldModel, command: Command) -> Result:
    return refuse(f"Moving the {_name(model, command.direct)} reveals nothing.")


def _cmd_push(model: WorldModel, command: Command) -> Result:
    return refuse(f"Pushing the {_name(model, command.direct)} has no effect.")


def _cmd_pull(model: WorldModel, command: Command) -> Result:
    return refuse(f"Pulling the {_name(model, command.direct)} has no effect.")


def _cmd_turn(model: WorldModel, command: Command) -> Result:
    return refuse(f"You can't turn the {_name(model, command.direct)}.")


def _cmd_wave(model: WorldModel, command: Command) -> Result:
    return refuse(f"Waving the {_name(model, command.direct)} has no effect.")


def _cmd_rub(model: WorldModel, command: Command) -> Result:
    return refuse(f"Fiddling with the {_name(model, command.direct)} has no effect.")


def _cmd_break(model: WorldModel, command: Command) -> Result:
    name = _name(model, command.direct)
    if command.indirect is None:
        return refuse(f"Trying to destroy the {name} with your bare hands is futile.")
    return refuse(f"Nice try, but the {name} survives the {_name(model, command.indirect)}.")


def _cmd_tie(model: WorldModel, command: Command) -> Result:
    return refuse(f"You can't tie the {_name(model, command.direct)}.")


def _cmd_untie(model: WorldModel, command: Command) -> Result:
    return refuse(f"The {_name(model, command.direct)} isn't tied to anything.")


def _cmd_raise(model: WorldModel, command: Command) -> Result:
    return refuse(f"Playing in this way with the {_name(model, command.direct)} has no effect.")


def _cmd_inflate(model: WorldModel, command: Command) -> Result:
    return refuse("How can you inflate that?")


def _cmd_deflate(model: WorldModel, command: Command) -> Result:
    return refuse("Come on, now!")


def _cmd_plug(model: WorldModel, command: Command) -> Result:
    return refuse("This has no effect.")


# -- people and food -------------------------------------------------

_ATTACK_RESPONSES: dict[str, str] = {
    "cyclops": "The cyclops shrugs but otherwise ignores your pitiful attempt.",
    "thief": "The thief deftly parries your blow.",
}


def _cmd_attack(model: WorldModel, command: Command) -> Result:
    name = _name(model, command.direct)
    if command.indirect is None:
        return refuse(f"Trying to attack {with_article(name)} with your bare hands is suicidal.")
    if not model.has_flag(command.indirect, Flag.WEAPON):
        tool = _name(model, command.indirect)
        return refuse(f"Trying to attack the {name} with {with_article(tool)} is suicidal.")
    return refuse(_ATTACK_RESPONSES.get(command.direct, f"The {name} dodges your blow."))


def _cmd_eat(model: WorldModel, command: Command) -> Result:
    model.move_object(command.direct, NOWHERE)
    return succeed("Thank you very much. It really hit the spot.")


def _cmd_drink(model: WorldModel, command: Command) -> Result:
    model.move_object(command.direct, NOWHERE)
    return succeed(
        "Thank you very much. I was rather thirsty (from all this talking, probably)."
    )


_SECRET_WORDS = frozenset({"odysseus", "ulysses"})


def _cmd_say(model: WorldModel, command: Command) -> Result:
    words = command.literal.split()
    if words and words[0] in _SECRET_WORDS:
        return incant(model)
    return refuse("Talking to yourself is a sign of impending mental collapse.")


def _cmd_odysseus(model: WorldModel, command: Command) -> Result:
    return incant(model)


# -- bookkeeping -----------------------------------------------------


def _cmd_score(model: WorldModel, command: Command) -> Result:
    score, moves = model.state.score, model.state.moves
    noun = "move" if moves == 1 else "moves"
    return succeed(
        f"Your score is {score} (total of {MAX_SCORE} points), in {moves} {noun}.\n"
        f"This gives you the rank of {rank(score)}."
    )


_DEATH_COUNTS = {1: "once", 2: "twice"}


def _cmd_diagnose(model: WorldModel, command: Command) -> Result:
    if "wounded" in model.state.player_flags:
        lines = ["You have a light wound."]
    else:
        lines = ["You are in perfect health."]
    deaths = model.state.deaths
    if deaths:
        lines.append(f"You have been killed {_DEATH_COUNTS.get(deaths, f'{deaths} times')}.")
    return succeed("\n".join(lines))


def _cmd_quit(model: WorldModel, command: Command) -> Result:
    score = _cmd_score(model, command).message
    model.state.life = Life.TERMINATED
    return succeed(f"{score}\nThe game is over.")


def _static_response(msg: str, success: bool = True) -> Callable[[WorldModel, Command], Result]:
    """Return a handler that ignores its arguments and returns a fixed message."""

    def handler(model: WorldModel, command: Command) -> Result:
        return Result(success=success, message=msg)

    return handler


_VERB_HANDLERS: dict[str, Callable[[WorldModel, Command], Result]] = {
    GO: _cmd_go,
    "climb": _cmd_climb,
    "board": _cmd_board,
    "disembark": _cmd_disembark,
    "look": _cmd_look,
    "examine": _cmd_examine,
    "read": _cmd_read,
    "inventory": _cmd_inventory,
    "take": _cmd_take,
    "drop": _cmd_drop,
    "put": _cmd_put,
    "throw": _cmd_throw,
    "give": _cmd_give,
    "open": _cmd_open,
    "close": _cmd_close,
    "unlock": _cmd_unlock,
    "lock": _cmd_lock,
    "light": _cmd_light,
    "extinguish": _cmd_extinguish,
    "move": _cmd_move,
    "push": _cmd_push,
    "pull": _cmd_pull,
    "turn": _cmd_turn,
    "wave": _cmd_wave,
    "rub": _cmd_rub,
    "break": _cmd_break,
    "tie": _cmd_tie,
    "untie": _cmd_untie,
    **dict.fromkeys(("raise", "lower"), _cmd_raise),
    "inflate": _cmd_inflate,
    "deflate": _cmd_deflate,
    "plug": _cmd_plug,
    "attack": _cmd_attack,
    "eat": _cmd_eat,
    "drink": _cmd_drink,
    "say": _cmd_say,
    "odysseus": _cmd_odysseus,
    "score": _cmd_score,
    "diagnose": _cmd_diagnose,
    "quit": _cmd_quit,
    "wait": _static_response("Time passes..."),
    "yes": _static_response("That was just a rhetorical question.", success=False),
}


def _dispatch(model: WorldModel, command: Command) -> Result:
    if model.state.life is Life.SPIRIT and command.verb not in SPIRIT_VERBS:
        return refuse(SPIRIT_REFUSAL)

    rule = _VERB_RULES.get(command.verb, _NO_RULE)
    failure = _check_preconditions(model, command, rule)
    if isinstance(failure, ParseFailure):
        return Result(success=False, message=failure.message(), accepted=False)
    if failure is not None:
        return Result(success=False, message=failure.message())

    claimed = claim(model, command)
    if claimed is not None:
        return claimed

    refusal = _check_capability(model, command, rule)
    if refusal is not None:
        failure = ExecutionFailure(FailureReason.CAPABILITY_MISSING, detail=refusal)
        return Result(success=False, message=failure.message())

    hooked = run_behavior(model, command)
    if hooked is not None:
        return hooked

    handler = _VERB_HANDLERS.get(command.verb)
    if handler is None:
        return refuse("I don't know how to do that.")
    return handler(model, command)


def execute(model: WorldModel, command: Command) -> Result:
    """Apply a parsed command to the world and return what happened.

    May raise Fatal; the caller routes it to the death controller.
    """
    # Changes made outside a command belong to no Result
    model.drain_notes()
    model.drain_changes()
    result = _dispatch(model, command)
    notes = model.drain_notes()
    if notes:
        result.message = "\n".join([*notes, result.message])
    result.changes = model.drain_changes()
    if command.verb in META_VERBS:
        result.accepted = False
    return result
