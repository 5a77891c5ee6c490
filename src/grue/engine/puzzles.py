"""Puzzle controllers.

Each controller owns a few keys of the global store and is looked up by
(verb, object). A controller returns a Result when it claims the command,
or None to let the generic verb handling carry on. Nothing here is random:
the outcome depends only on the state before the command and the command
itself.
"""

from collections.abc import Callable

from .model import WorldModel
from .parser import Command
from .results import Result, refuse, succeed
from .state import (
    ARAGAIN_FALLS,
    BASKET,
    BASKET_IMAGE,
    BLUE_BUTTON,
    BOLT,
    BROWN_BUTTON,
    BUBBLE,
    CELLAR,
    COFFIN,
    CYCLOPS,
    CYCLOPS_ROOM,
    DOME_ROOM,
    EGYPT_ROOM,
    END_OF_RAINBOW,
    GRATE,
    INFLATABLE_BOAT,
    INFLATED_BOAT,
    KEYS,
    LEAK,
    LEAVES,
    LIVING_ROOM,
    LOWER_SHAFT,
    LUNCH,
    MIRROR,
    NOWHERE,
    ON_RAINBOW,
    PLAYER,
    POT_OF_GOLD,
    PUMP,
    PUTTY,
    RAILING,
    RAINBOW,
    ROPE,
    RUG,
    SCEPTRE,
    SHAFT_ROOM,
    TRAP_DOOR,
    WRENCH,
    YELLOW_BUTTON,
)
from .world import Flag

ALREADY_OPEN = "It is already open."
ALREADY_CLOSED = "It is already closed."

DRAIN_TICKS = 8
FILL_TICKS = 8

Controller = Callable[[WorldModel, Command], Result | None]


def _then_describe(model: WorldModel, message: str) -> str:
    return f"{message}\n\n{model.describe_room()}"


# -- Flood Control Dam #3 ----------------------------------------------


def _push_yellow_button(model: WorldModel, command: Command) -> Result:
    model.set_global("dam.gate_flag", True)
    return succeed("Click.")


def _push_brown_button(model: WorldModel, command: Command) -> Result:
    model.set_global("dam.gate_flag", False)
    return succeed("Click.")


def _push_blue_button(model: WorldModel, command: Command) -> Result:
    if model.get_global("dam.water_level") != 0:
        return refuse("The blue button appears to be jammed.")
    model.set_global("dam.water_level", 1)
    model.clear_flag(LEAK, Flag.INVISIBLE)
    model.schedule("leak")
    return succeed(
        "There is a rumbling sound and a stream of water appears to burst from "
        "the east wall of the room (apparently, a leak has occurred in a pipe)."
    )


def _seal_leak(model: WorldModel) -> Result:
    model.set_global("dam.water_level", -1)
    model.cancel("leak")
    model.move_object(PUTTY, NOWHERE)
    model.set_flag(LEAK, Flag.INVISIBLE)
    return succeed("The putty seems to have stopped the leak.")


def _plug_leak(model: WorldModel, command: Command) -> Result:
    if command.indirect is None:
        return refuse("Plug it with what?")
    if command.indirect != PUTTY:
        return refuse("That won't fix the leak.")
    return _seal_leak(model)


def _put_on_leak(model: WorldModel, command: Command) -> Result:
    if command.direct != PUTTY:
        return refuse("That won't fix the leak.")
    return _seal_leak(model)


def _turn_bolt(model: WorldModel, command: Command) -> Result | None:
    """Open or close the sluice gates.

    Only possible with the wrench, and only after the yellow button has
    been pressed (the green bubble glows while that is the case).
    """
    if command.indirect is None:
        return None
    if command.indirect != WRENCH:
        return refuse(f"The bolt won't turn using the {model.obj(command.indirect).name}.")
    if not model.get_global("dam.gate_flag"):
        return refuse("The bolt won't turn with your best effort.")

    if model.get_global("dam.gates_open"):
        model.set_global("dam.gates_open", False)
        model.cancel("reservoir-drain")
        model.schedule("reservoir-fill", FILL_TICKS)
        return succeed("The sluice gates close and water starts to collect behind the dam.")
    model.set_global("dam.gates_open", True)
    model.cancel("reservoir-fill")
    model.schedule("reservoir-drain", DRAIN_TICKS)
    return succeed("The sluice gates open and water pours through the dam.")


def _examine_bubble(model: WorldModel, command: Command) -> Result:
    if model.get_global("dam.gate_flag"):
        return succeed("The green bubble is glowing.")
    return succeed("The green bubble is dark.")


# -- Mirror ------------------------------------------------------------

ENOUGH_DAMAGE = "Haven't you done enough damage already?"
MIRROR_BROKEN = "The mirror is broken into many pieces."


def _rub_mirror(model: WorldModel, command: Command) -> Result:
    if model.get_global("mirror.broken"):
        return refuse(MIRROR_BROKEN)
    if command.indirect is not None:
        return refuse("Fiddling with the mirror has no effect.")
    return succeed("There is a rumble from deep within the earth and the room shakes.")


def _break_mirror(model: WorldModel, command: Command) -> Result:
    if model.get_global("mirror.broken"):
        return refuse(ENOUGH_DAMAGE)
    if command.verb == "throw" and command.direct != MIRROR:
        model.move_object(command.direct, model.state.current_room)
    model.set_global("mirror.broken", True)
    model.set_global("luck.lucky", False)
    return succeed(
        "You have broken the mirror. I hope you have a seven years' supply of "
        "good luck handy."
    )


def _take_mirror(model: WorldModel, command: Command) -> Result:
    if model.get_global("mirror.broken"):
        return refuse(ENOUGH_DAMAGE)
    return refuse("The mirror is many times your size. Give up.")


def _examine_mirror(model: WorldModel, command: Command) -> Result | None:
    if model.get_global("mirror.broken"):
        return None
    return succeed("There is an ugly person staring back at you.")


def _broken_mirror(model: WorldModel, command: Command) -> Result | None:
    if model.get_global("mirror.broken"):
        return refuse(MIRROR_BROKEN)
    return None


# -- Rainbow -----------------------------------------------------------

_RAINBOW_ROOMS = (ARAGAIN_FALLS, END_OF_RAINBOW, ON_RAINBOW)


def _wave_sceptre(model: WorldModel, command: Command) -> Result | None:
    here = model.state.current_room
    if here not in _RAINBOW_ROOMS:
        return refuse("A faint rainbow appears in the mist, but it quickly fades.")

    if not model.get_global("rainbow.solid"):
        model.set_global("rainbow.solid", True)
        message = (
            "Suddenly, the rainbow appears to become solid and, I venture, "
            "walkable (I think the giveaway was the stairs and bannister)."
        )
        if (
            here == END_OF_RAINBOW
            and model.location(POT_OF_GOLD) == END_OF_RAINBOW
            and model.has_flag(POT_OF_GOLD, Flag.INVISIBLE)
        ):
            model.clear_flag(POT_OF_GOLD, Flag.INVISIBLE)
            message += "\nA shimmering pot of gold appears at the end of the rainbow."
        return succeed(message)

    model.set_global("rainbow.solid", False)
    message = "The rainbow seems to have become somewhat run-of-the-mill."
    if here == ON_RAINBOW:
        model.move_player(ARAGAIN_FALLS)
        return succeed(_then_describe(model, f"{message}\nYou fall to the ground."))
    return succeed(message)


def _climb_rainbow(model: WorldModel, command: Command) -> Result:
    if not model.get_global("rainbow.solid"):
        return refuse("Can you walk on water vapor?")
    if model.state.current_room == ON_RAINBOW:
        return refuse("You are already on the rainbow.")
    model.move_player(ON_RAINBOW)
    return succeed(_then_describe(model, "You climb up onto the rainbow."))


# -- Shaft basket ------------------------------------------------------


def _raise_basket(model: WorldModel, command: Command) -> Result:
    if model.get_global("shaft.cage_top"):
        return refuse("The basket is already at the top.")
    model.move_object(BASKET, SHAFT_ROOM)
    model.move_object(BASKET_IMAGE, LOWER_SHAFT)
    model.set_global("shaft.cage_top", True)
    return succeed("The basket is raised to the top of the shaft.")


def _lower_basket(model: WorldModel, command: Command) -> Result:
    if not model.get_global("shaft.cage_top"):
        return refuse("The basket is already at the bottom.")
    model.move_object(BASKET, LOWER_SHAFT)
    model.move_object(BASKET_IMAGE, SHAFT_ROOM)
    model.set_global("shaft.cage_top", False)
    return succeed("The basket is lowered to the bottom of the shaft.")


# -- Dome rope ---------------------------------------------------------


def _tie_rope(model: WorldModel, command: Command) -> Result:
    if command.indirect is None:
        return refuse("What do you want to tie the rope to?")
    if command.indirect != RAILING:
        return refuse("You can't tie the rope to that.")
    if model.get_global("dome.rope_tied"):
        return refuse("The rope is already tied to it.")
    model.set_global("dome.rope_tied", True)
    model.move_object(ROPE, DOME_ROOM)
    return succeed("The rope drops over the side and comes within ten feet of the floor.")


def _untie_rope(model: WorldModel, command: Command) -> Result:
    if model.get_global("dome.rope_tied"):
        return refuse("The knot is far too tight to undo.")
    return refuse("The rope isn't tied to anything.")


def _take_rope(model: WorldModel, command: Command) -> Result | None:
    if model.get_global("dome.rope_tied"):
        return refuse("The rope is tied to the railing.")
    return None


def _climb_rope(model: WorldModel, command: Command) -> Result | None:
    if not model.get_global("dome.rope_tied") or model.state.current_room != DOME_ROOM:
        return None
    model.travel("down")
    return succeed(_then_describe(model, "You climb down the rope."))


# -- Rug and trap door -------------------------------------------------


def _move_rug(model: WorldModel, command: Command) -> Result:
    if model.get_global("rug.moved"):
        return refuse(
            "Having moved the carpet previously, you find it impossible to move it again."
        )
    model.set_global("rug.moved", True)
    model.clear_flag(TRAP_DOOR, Flag.INVISIBLE)
    return succeed(
        "With a great effort, the rug is moved to one side of the room, revealing "
        "the dusty cover of a closed trap door."
    )


def _open_trap_door(model: WorldModel, command: Command) -> Result:
    if model.has_flag(TRAP_DOOR, Flag.OPEN):
        return refuse(ALREADY_OPEN)
    model.set_flag(TRAP_DOOR, Flag.OPEN)
    return succeed(
        "The door reluctantly opens to reveal a rickety staircase descending into darkness."
    )


def _close_trap_door(model: WorldModel, command: Command) -> Result:
    if not model.has_flag(TRAP_DOOR, Flag.OPEN):
        return refuse(ALREADY_CLOSED)
    model.clear_flag(TRAP_DOOR, Flag.OPEN)
    return succeed("The door swings shut and closes.")


def after_arrival(model: WorldModel, previous: str) -> str:
    """Room entry side effects. Returns extra text for the arrival message."""
    if (
        model.state.current_room == CELLAR
        and previous == LIVING_ROOM
        and model.has_flag(TRAP_DOOR, Flag.OPEN)
        and not model.has_flag(TRAP_DOOR, Flag.TOUCHED)
    ):
        model.clear_flag(TRAP_DOOR, Flag.OPEN)
        model.set_flag(TRAP_DOOR, Flag.TOUCHED)
        return "The trap door crashes shut, and you hear someone barring it."
    return ""


# -- Leaves and grating ------------------------------------------------

GRATING_REVEALED = "In disturbing the pile of leaves, a grating is revealed."


def reveal_grating(model: WorldModel) -> bool:
    """Uncover the grating if the leaves still hide it."""
    if not model.has_flag(GRATE, Flag.INVISIBLE):
        return False
    model.clear_flag(GRATE, Flag.INVISIBLE)
    return True


def _move_leaves(model: WorldModel, command: Command) -> Result | None:
    if reveal_grating(model):
        return succeed(GRATING_REVEALED)
    return None


def _unlock_grate(model: WorldModel, command: Command) -> Result:
    if command.indirect is None:
        return refuse("Unlock it with what?")
    if command.indirect != KEYS:
        return refuse(f"Can you unlock a grating with a {model.obj(command.indirect).name}?")
    if not model.has_flag(GRATE, Flag.LOCKED):
        return refuse("It's already unlocked.")
    model.clear_flag(GRATE, Flag.LOCKED)
    return succeed("The grate is unlocked.")


def _lock_grate(model: WorldModel, command: Command) -> Result:
    if command.indirect is None:
        return refuse("Lock it with what?")
    if command.indirect != KEYS:
        return refuse(f"Can you lock a grating with a {model.obj(command.indirect).name}?")
    if model.has_flag(GRATE, Flag.LOCKED):
        return refuse("It's already locked.")
    if model.has_flag(GRATE, Flag.OPEN):
        return refuse("You'll have to close it first.")
    model.set_flag(GRATE, Flag.LOCKED)
    return succeed("The grate is locked.")


# -- Boat --------------------------------------------------------------


def _swap(model: WorldModel, old: str, new: str) -> None:
    model.move_object(new, model.location(old))
    model.move_object(old, NOWHERE)


def _inflate_boat(model: WorldModel, command: Command) -> Result:
    if command.indirect is None:
        return refuse("You don't have enough lung power to inflate it.")
    if command.indirect != PUMP:
        return refuse(f"With a {model.obj(command.indirect).name}? Surely you jest!")
    if model.location(INFLATABLE_BOAT) == PLAYER:
        return refuse("The boat must be on the ground to be inflated.")
    _swap(model, INFLATABLE_BOAT, INFLATED_BOAT)
    return succeed("The boat inflates and appears seaworthy.")


def _deflate_boat(model: WorldModel, command: Command) -> Result:
    if model.vehicle() == INFLATED_BOAT:
        return refuse("You can't deflate the boat while you're in it.")
    if model.location(INFLATED_BOAT) == PLAYER:
        return refuse("The boat must be on the ground to be deflated.")
    if model.contents(INFLATED_BOAT):
        return refuse("The boat must be empty to be deflated.")
    _swap(model, INFLATED_BOAT, INFLATABLE_BOAT)
    return succeed("The boat deflates.")


def _already_inflated(model: WorldModel, command: Command) -> Result:
    return refuse("The boat is already inflated.")


def _already_deflated(model: WorldModel, command: Command) -> Result:
    return refuse("The boat is already deflated.")


# -- Coffin ------------------------------------------------------------


def _push_coffin(model: WorldModel, command: Command) -> Result | None:
    if model.location(COFFIN) != EGYPT_ROOM or model.state.current_room != EGYPT_ROOM:
        return None
    if model.get_global("coffin.moved"):
        return succeed("The coffin moves, but nothing else happens.")
    model.set_global("coffin.moved", True)
    return succeed("The coffin moves, revealing a passage to the northwest.")


# -- Cyclops -----------------------------------------------------------


def incant(model: WorldModel) -> Result:
    """Speak the name of the cyclops' father's nemesis."""
    if model.state.current_room != CYCLOPS_ROOM or model.location(CYCLOPS) != CYCLOPS_ROOM:
        return refuse("Wasn't he a sailor?")
    model.move_object(CYCLOPS, NOWHERE)
    model.set_global("cyclops.flag", True)
    model.set_global("cyclops.magic", True)
    model.cancel("cyclops")
    return succeed(
        "The cyclops, hearing the name of his father's deadly nemesis, flees the "
        "room by knocking down the wall on the east of the room."
    )


def _give_cyclops(model: WorldModel, command: Command) -> Result:
    if command.direct != LUNCH:
        return refuse("The cyclops is not so stupid as to eat THAT!")
    if model.get_global("cyclops.pacified"):
        return refuse("The cyclops is fast asleep.")
    model.move_object(LUNCH, NOWHERE)
    model.set_global("cyclops.pacified", True)
    model.set_global("cyclops.flag", True)
    return succeed(
        "The cyclops gobbles down the hot pepper sandwich, yawns enormously, and "
        "falls fast asleep."
    )


_CONTROLLERS: dict[tuple[str, str], Controller] = {
    ("push", YELLOW_BUTTON): _push_yellow_button,
    ("push", BROWN_BUTTON): _push_brown_button,
    ("push", BLUE_BUTTON): _push_blue_button,
    ("plug", LEAK): _plug_leak,
    ("put", LEAK): _put_on_leak,
    ("turn", BOLT): _turn_bolt,
    ("examine", BUBBLE): _examine_bubble,
    ("rub", MIRROR): _rub_mirror,
    **dict.fromkeys((("break", MIRROR), ("throw", MIRROR)), _break_mirror),
    ("take", MIRROR): _take_mirror,
    ("examine", MIRROR): _examine_mirror,
    ("*", MIRROR): _broken_mirror,
    ("wave", SCEPTRE): _wave_sceptre,
    ("climb", RAINBOW): _climb_rainbow,
    **dict.fromkeys((("raise", BASKET), ("raise", BASKET_IMAGE)), _raise_basket),
    **dict.fromkeys((("lower", BASKET), ("lower", BASKET_IMAGE)), _lower_basket),
    ("tie", ROPE): _tie_rope,
    ("untie", ROPE): _untie_rope,
    ("take", ROPE): _take_rope,
    ("climb", ROPE): _climb_rope,
    **dict.fromkeys((("move", RUG), ("push", RUG), ("pull", RUG), ("raise", RUG)), _move_rug),
    ("open", TRAP_DOOR): _open_trap_door,
    ("close", TRAP_DOOR): _close_trap_door,
    **dict.fromkeys((("move", LEAVES), ("push", LEAVES)), _move_leaves),
    ("unlock", GRATE): _unlock_grate,
    ("lock", GRATE): _lock_grate,
    ("inflate", INFLATABLE_BOAT): _inflate_boat,
    ("deflate", INFLATED_BOAT): _deflate_boat,
    ("inflate", INFLATED_BOAT): _already_inflated,
    ("deflate", INFLATABLE_BOAT): _already_deflated,
    **dict.fromkeys((("push", COFFIN), ("move", COFFIN)), _push_coffin),
    ("give", CYCLOPS): _give_cyclops,
}


def claim(model: WorldModel, command: Command) -> Result | None:
    """Offer the command to the controllers for its objects, in order.

    Tried: (verb, direct object), (verb, indirect object), then the
    catch-all entry for the direct object. The first Result wins.
    """
    keys = []
    if command.direct is not None:
        keys.append((command.verb, command.direct))
    if command.indirect is not None:
        keys.append((command.verb, command.indirect))
    if command.direct is not None:
        keys.append(("*", command.direct))
    for key in keys:
        controller = _CONTROLLERS.get(key)
        if controller is None:
            continue
        result = controller(model, command)
        if result is not None:
            return result
    return None
