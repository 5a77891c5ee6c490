"""Play through the opening of the game.

Route: into the house through the kitchen window, take the lamp, down the
trap door, past the cyclops to the treasure room, and back to the living
room through the wall the cyclops leaves behind.
"""

from grue.engine.game import Game
from grue.engine.state import PLAYER, TROPHY_CASE
from grue.engine.world import Flag

INTO_THE_HOUSE = ["north", "east", "open window", "in", "west"]
DOWN_THE_TRAP_DOOR = ["take lamp", "turn on lamp", "move rug", "open trap door"]
TO_THE_CYCLOPS = ["north", "east", "down"]


def _run(game: Game, play, commands: list[str]) -> list[str]:
    responses = []
    for command in commands:
        responses.append(play(command))
        assert not game.is_terminated(), f"Game ended after {command!r}"
        assert game.state.deaths == 0, f"Died after {command!r}: {responses[-1]}"
    return responses


def _assert_at(game: Game, room: str) -> None:
    assert game.state.current_room == room, (
        f"Expected {room}, at {game.state.current_room}"
    )


def test_into_the_house(game: Game, play):
    """Through the kitchen window into the living room."""
    responses = _run(game, play, INTO_THE_HOUSE)
    _assert_at(game, "living-room")
    assert responses[-1].startswith("Living Room\n")
    assert "Above the trophy case hangs an elvish sword" in responses[-1]


def test_down_the_trap_door(game: Game, play):
    """The trap door bars itself behind the player."""
    _run(game, play, INTO_THE_HOUSE + DOWN_THE_TRAP_DOOR)
    arrival = play("down")
    _assert_at(game, "cellar")
    assert arrival.startswith("Cellar\n")
    assert "The trap door crashes shut, and you hear someone barring it." in arrival
    assert play("up") == "The trap door is closed."


def test_the_cyclops_and_the_treasure_room(game: Game, play):
    """The cyclops blocks the stairs."""
    _run(game, play, INTO_THE_HOUSE + DOWN_THE_TRAP_DOOR + ["down"] + TO_THE_CYCLOPS)
    _assert_at(game, "cyclops-room")
    # The cyclops grows angrier every turn, so refusals come with a warning
    assert play("up").startswith("The cyclops doesn't look like he'll let you past.\n\n")
    assert play("east").startswith("The east wall is solid rock.\n\n")

    assert play("odysseus").startswith("The cyclops, hearing the name")
    assert game.model.location("cyclops") != "cyclops-room"
    assert "cyclops-sized opening" in play("look")

    _run(game, play, ["up", "take chalice"])
    assert game.model.location("chalice") == PLAYER
    assert game.state.score == 10

    responses = _run(game, play, ["down", "east", "east"])
    _assert_at(game, "living-room")
    assert responses[-1].startswith("Living Room\n")

    assert play("open case") == "Opened."
    assert play("put chalice in case") == "Done."
    assert game.model.location("chalice") == TROPHY_CASE
    assert game.state.score == 15
    assert play("score").startswith("Your score is 15 (total of 350 points)")


def test_feeding_the_cyclops(game: Game, play):
    """Lunch pacifies the cyclops and opens the stairs."""
    _run(game, play, INTO_THE_HOUSE[:-1] + ["open sack", "take lunch", "west"])
    _run(game, play, DOWN_THE_TRAP_DOOR + ["down"] + TO_THE_CYCLOPS)
    assert play("give lunch to cyclops").startswith("The cyclops gobbles down")
    assert game.model.location("cyclops") == "cyclops-room"
    assert play("up").startswith("Treasure Room\n")
    play("down")
    assert play("east") == "The east wall is solid rock."


def test_the_lamp_burns_throughout(game: Game, play):
    """The lamp burns fuel every move."""
    _run(game, play, INTO_THE_HOUSE + DOWN_THE_TRAP_DOOR + ["down"] + TO_THE_CYCLOPS)
    assert game.model.has_flag("lamp", Flag.LIT)
    assert game.state.fuel["lamp"] < 200
    assert game.state.moves == 13
