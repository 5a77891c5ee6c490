"""Tests for the world model."""

import pytest

from grue.engine.game import Game
from grue.engine.model import DARKNESS, NO_EXIT, with_article
from grue.engine.results import StateChange
from grue.engine.state import GLOBALS, NOWHERE, PLAYER
from grue.engine.world import Flag


def test_describe_starting_room(game: Game):
    """The opening room describes itself and the mailbox."""
    assert game.model.describe_room() == (
        "West of House\n"
        "You are standing in an open field west of a white house, with a boarded "
        "front door.\n"
        "There is a small mailbox here."
    )


def test_open_container_contents_are_listed(game: Game):
    """An open container lists what it holds."""
    model = game.model
    model.set_flag("mailbox", Flag.OPEN)
    assert model.describe_room().endswith("The small mailbox contains:\n  A leaflet")


def test_ground_text_replaces_generic_line(game: Game):
    """Objects with ground text use it instead of the generic line."""
    model = game.model
    model.move_player("attic")
    model.move_object("lamp", PLAYER)
    model.set_flag("lamp", Flag.LIT)
    description = model.describe_room()
    assert "A large coil of rope is lying in the corner." in description
    assert "There is a skeleton key here." in description


def test_dark_room(game: Game):
    """A dark room hides everything."""
    model = game.model
    model.move_player("cellar")
    assert not model.is_lit()
    assert model.describe_room() == DARKNESS
    assert model.visible_in_room() == []


def test_carried_light_lights_the_room(game: Game):
    """A lamp counts only once it is lit."""
    model = game.model
    model.move_player("cellar")
    model.move_object("lamp", PLAYER)
    assert not model.is_lit()
    model.set_flag("lamp", Flag.LIT)
    assert model.is_lit()


def test_light_source_in_room_lights_it(game: Game):
    """The torch burns on its pedestal."""
    game.model.move_player("torch-room")
    assert game.model.is_lit()


def test_candidates_order(game: Game):
    """Inventory first, then the room, then the backdrop."""
    model = game.model
    model.move_object("leaflet", PLAYER)
    assert model.candidates() == ["leaflet", "mailbox", "white-house", "board"]


def test_closed_container_hides_contents(game: Game):
    """Contents become candidates when the container opens."""
    model = game.model
    assert "leaflet" not in model.candidates()
    model.set_flag("mailbox", Flag.OPEN)
    assert "leaflet" in model.candidates()


def test_invisible_objects_are_not_candidates(game: Game):
    """The trap door stays hidden until the rug is moved."""
    game.model.move_player("living-room")
    assert "trap-door" not in game.model.candidates()


def test_darkness_leaves_only_inventory(game: Game):
    """In the dark only carried things can be named."""
    model = game.model
    model.move_object("garlic", PLAYER)
    model.move_player("cellar")
    assert model.candidates() == ["garlic"]


def test_container_chain_and_root(game: Game):
    """Nested objects report every enclosing container."""
    model = game.model
    assert model.container_chain("lunch") == ["sack", "kitchen"]
    model.move_object("sack", PLAYER)
    assert model.root("lunch") == PLAYER
    assert model.is_carried("lunch")


def test_weight_includes_contents(game: Game):
    """A container weighs as much as itself and its contents."""
    assert game.model.weight("sack") == 9 + 5 + 4


def test_move_into_itself_is_rejected(game: Game):
    """An object cannot contain itself."""
    with pytest.raises(ValueError):
        game.model.move_object("sack", "sack")


def test_containment_cycle_is_rejected(game: Game):
    """Moves that would create a loop are refused."""
    model = game.model
    model.move_object("bottle", "sack")
    with pytest.raises(ValueError):
        model.move_object("sack", "bottle")
    assert model.location("sack") == "kitchen"


def test_untakeable_object_cannot_be_carried(game: Game):
    """Fixed objects never reach the inventory."""
    with pytest.raises(ValueError):
        game.model.move_object("mailbox", PLAYER)


def test_unknown_container(game: Game):
    """Moving into an unknown container is an error."""
    with pytest.raises(ValueError):
        game.model.move_object("leaflet", "narnia")


def test_special_containers_accepted(game: Game):
    """Nowhere and globals are valid containers."""
    model = game.model
    model.move_object("leaflet", NOWHERE)
    assert model.location("leaflet") == NOWHERE
    model.move_object("leaflet", GLOBALS)
    assert model.location("leaflet") == GLOBALS


def test_move_player_unknown_room(game: Game):
    """Moving the player to an unknown room is an error."""
    with pytest.raises(ValueError):
        game.model.move_player("narnia")


def test_mutations_are_logged(game: Game):
    """Each mutation is recorded once and drained."""
    model = game.model
    model.move_object("leaflet", PLAYER)
    model.set_flag("mailbox", Flag.OPEN)
    model.set_global("rug.moved", True)
    assert model.drain_changes() == [
        StateChange("location", "leaflet", "mailbox", PLAYER),
        StateChange("flag", "mailbox", None, "open"),
        StateChange("global", "rug.moved", False, True),
    ]
    assert model.drain_changes() == []


def test_no_op_mutations_are_not_logged(game: Game):
    """Mutations that change nothing leave no record."""
    model = game.model
    model.move_object("mailbox", "west-of-house")
    model.clear_flag("mailbox", Flag.OPEN)
    assert model.drain_changes() == []


def test_score_never_negative(game: Game):
    """The score floors at zero."""
    model = game.model
    model.adjust_score(-10)
    assert model.state.score == 0


def test_credit_is_given_once(game: Game):
    """Each kind of credit counts once per object."""
    model = game.model
    model.credit("find", "sword", 5)
    model.credit("find", "sword", 5)
    model.credit("case", "sword", 3)
    assert model.state.score == 8


def test_blocked_exit_message(game: Game):
    """A blocked exit explains itself."""
    resolution = game.model.resolve_exit("east")
    assert resolution.destination is None
    assert resolution.message == "The door is boarded and you can't remove the boards."


def test_missing_exit(game: Game):
    """A direction with no exit gets the stock refusal."""
    assert game.model.resolve_exit("up").message == NO_EXIT


def test_guarded_exit(game: Game):
    """The kitchen window must be open to climb through."""
    model = game.model
    model.move_player("behind-house")
    assert model.resolve_exit("west").message == "The window is closed."
    model.set_flag("kitchen-window", Flag.OPEN)
    assert model.resolve_exit("west").destination == "kitchen"


def test_open_exits(game: Game):
    """Only passable exits are listed."""
    assert game.model.open_exits() == ["north", "south", "west"]


def test_room_variant(game: Game):
    """Room text follows the state of the window."""
    model = game.model
    model.move_player("behind-house")
    assert "slightly ajar" in model.describe_room()
    model.set_flag("kitchen-window", Flag.OPEN)
    assert "which is open" in model.describe_room()


def test_unknown_condition(game: Game):
    """A malformed condition is an error."""
    with pytest.raises(ValueError):
        game.model.check(("weather", "sunny"))


def test_visiting_the_shrine_is_remembered(game: Game):
    """Entering the temple sets the shrine flag."""
    model = game.model
    model.move_player("south-temple")
    assert model.get_global("story.shrine_visited")


def test_unknown_event(game: Game):
    """Scheduling an unknown event is an error."""
    with pytest.raises(KeyError):
        game.model.schedule("earthquake")


def test_with_article():
    """Names starting with a vowel take 'an'."""
    assert with_article("lamp") == "a lamp"
    assert with_article("ivory torch") == "an ivory torch"
