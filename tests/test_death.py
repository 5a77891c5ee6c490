"""Tests for death, resurrection and the end of the game."""

import random

from grue.engine.death import (
    ALREADY_DEAD,
    BAD_LUCK,
    BANNER,
    RECKLESS,
    RESURRECTED,
    SPIRIT,
    Outcome,
    handle_fatal,
)
from grue.engine.game import GAME_OVER, Game
from grue.engine.state import HADES, PLAYER, Life
from grue.engine.world import Flag, World

CAUSE = "You have been eaten."


def _carry(game: Game, *obj_ids: str) -> None:
    for obj_id in obj_ids:
        game.model.move_object(obj_id, PLAYER)


def test_first_death_resurrects_in_the_forest(game: Game):
    """The first death costs ten points and returns the player to the forest."""
    game.state.score = 50
    death = handle_fatal(game.model, CAUSE)
    assert death.outcome is Outcome.RESURRECTED
    assert death.message.startswith(f"{CAUSE}\n\n{BANNER}\n\n{RESURRECTED}\n\nForest\n")
    assert game.state.score == 40
    assert game.state.deaths == 1
    assert game.state.life is Life.ALIVE
    assert game.state.current_room == "forest-1"


def test_penalty_never_goes_below_zero(game: Game):
    """The death penalty can't make the score negative."""
    game.state.score = 4
    handle_fatal(game.model, CAUSE)
    assert game.state.score == 0


def test_unlucky_death(game: Game):
    """Breaking the mirror adds bad luck to the death notice."""
    game.model.set_global("luck.lucky", False)
    death = handle_fatal(game.model, CAUSE)
    assert death.message.startswith(f"{CAUSE}\n{BAD_LUCK}\n")


def test_belongings_are_scattered(game: Game):
    """Belongings are scattered when the player dies."""
    model = game.model
    model.move_player("living-room")
    _carry(game, "lamp", "leaflet", "coffin", "sceptre")
    handle_fatal(model, CAUSE)

    assert model.inventory() == []
    assert model.location("lamp") == "living-room"
    assert model.location("coffin") == "egypt-room"
    assert model.has_flag(model.location("leaflet"), Flag.OUTSIDE)
    sceptre_room = model.location("sceptre")
    assert not model.has_flag(sceptre_room, Flag.LIT)
    assert not model.has_flag(sceptre_room, Flag.SACRED)


def test_scatter_depends_only_on_the_seed(world: World):
    """The scatter depends only on the seed."""
    def scatter(seed: int) -> tuple[str, str]:
        game = Game(world, rng=random.Random(seed))
        _carry(game, "leaflet", "sceptre")
        handle_fatal(game.model, CAUSE)
        return game.model.location("leaflet"), game.model.location("sceptre")

    assert scatter(5) == scatter(5)


def test_resurrection_resets_the_world_around_you(game: Game):
    """Resurrection undoes what the last life set in motion."""
    model = game.model
    _carry(game, "sword", "lamp")
    model.set_flag("lamp", Flag.LIT)
    model.schedule("lamp")
    model.set_flag("trap-door", Flag.TOUCHED)
    game.state.player_flags.add("wounded")
    handle_fatal(model, CAUSE)

    assert game.state.values["sword"] == 0
    assert not model.is_treasure("sword")
    assert not model.has_flag("lamp", Flag.LIT)
    assert not model.event("lamp").enabled
    assert model.event("thief").enabled
    assert not model.has_flag("trap-door", Flag.TOUCHED)
    assert "wounded" not in game.state.player_flags


def test_second_death_after_the_shrine_makes_a_spirit(game: Game):
    """Dying after visiting the shrine makes a spirit."""
    game.state.deaths = 1
    game.model.set_global("story.shrine_visited", True)
    death = handle_fatal(game.model, CAUSE)
    assert death.outcome is Outcome.SPIRIT
    assert SPIRIT in death.message
    assert game.state.life is Life.SPIRIT
    assert game.state.current_room == HADES
    assert game.state.deaths == 2
    assert game.model.is_lit()


def test_spirits_can_look_but_not_touch(game: Game):
    """A spirit can look and move."""
    game.state.deaths = 1
    game.model.set_global("story.shrine_visited", True)
    handle_fatal(game.model, CAUSE)
    assert game.execute_command("look").message.startswith("Entrance to Hades\n")
    assert game.execute_command("up").message.startswith("Temple\n")
    assert game.execute_command("push altar").message == "You can't see any altar here!"
    game.model.move_player("south-temple")
    assert game.execute_command("push altar").message == "You can't even do that."


def test_dying_as_a_spirit_ends_the_game(game: Game):
    """A spirit that dies is finished."""
    game.state.life = Life.SPIRIT
    game.state.deaths = 2
    death = handle_fatal(game.model, CAUSE)
    assert death.outcome is Outcome.TERMINATED
    assert death.message == f"{CAUSE}\n\n{ALREADY_DEAD}"
    assert game.state.life is Life.TERMINATED
    assert game.state.deaths == 2


def test_third_death_ends_the_game(game: Game):
    """The third death ends the game."""
    game.state.deaths = 2
    game.state.score = 30
    death = handle_fatal(game.model, CAUSE)
    assert death.outcome is Outcome.TERMINATED
    assert death.message.endswith(RECKLESS)
    assert game.state.deaths == 3
    assert game.state.score == 20
    assert game.is_terminated()


def test_terminated_game_refuses_everything(game: Game):
    """A finished game answers only that it is over."""
    game.state.deaths = 2
    game.model.move_player("living-room")
    game.execute_command("move rug")
    game.execute_command("open trap door")
    result = game.execute_command("down")
    assert result.message.endswith(RECKLESS)
    assert game.execute_command("look").message == GAME_OVER
    assert game.advance_turn() == []


def test_three_deaths_in_a_row(game: Game):
    """Two resurrections, each emptying the inventory, then the end."""
    game.model.move_player("living-room")
    game.execute_command("move rug")
    game.execute_command("open trap door")

    for deaths in (1, 2):
        game.model.move_player("living-room")
        assert game.execute_command("take lamp").message == "Taken."
        message = game.execute_command("down").message
        assert RESURRECTED in message
        assert game.state.deaths == deaths
        assert game.state.life is Life.ALIVE
        assert game.state.current_room == "forest-1"
        assert game.model.inventory() == []
        assert game.model.location("lamp") == "living-room"

    game.model.move_player("living-room")
    game.execute_command("take lamp")
    message = game.execute_command("down").message
    assert message.endswith(RECKLESS)
    assert game.state.deaths == 3
    assert game.state.life is Life.TERMINATED


def test_dying_leaves_the_boat_behind(game: Game):
    """The player wakes up on their own feet."""
    model = game.model
    model.move_object("inflated-boat", "reservoir-south")
    model.move_player("reservoir-south")
    model.set_global("player.vehicle", "inflated-boat")
    handle_fatal(model, CAUSE)
    assert model.vehicle() is None
    assert model.location("inflated-boat") == "reservoir-south"
