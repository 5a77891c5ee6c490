"""Tests for the event scheduler and its bound actions."""

import random

import pytest

from grue.engine.daemons import (
    CYCLOPS_MEAL,
    CYCLOPS_WARNINGS,
    SWEPT_AWAY,
    THIEF_ARRIVES,
    set_fuel,
)
from grue.engine.game import Game
from grue.engine.model import WorldModel
from grue.engine.results import Fatal
from grue.engine.scheduler import Scheduler, reset_events
from grue.engine.state import DAEMON, FUSE, PLAYER, default_events
from grue.engine.world import Flag, World


def _recorder(name: str, log: list[str]):
    def action(model: WorldModel) -> list[str]:
        log.append(name)
        return [name]

    return action


@pytest.fixture
def bare_model(game: Game) -> WorldModel:
    game.state.events = []
    return game.model


def test_register_rejects_bad_kind(bare_model: WorldModel):
    """Events are daemons or fuses."""
    scheduler = Scheduler({"tick": lambda model: []})
    with pytest.raises(ValueError):
        scheduler.register(bare_model.state, "tick", "interrupt")


def test_register_rejects_unbound_name(bare_model: WorldModel):
    """Every event needs a bound action."""
    with pytest.raises(ValueError):
        Scheduler({}).register(bare_model.state, "tick", DAEMON)


def test_register_rejects_duplicates(bare_model: WorldModel):
    """An event name registers once."""
    scheduler = Scheduler({"tick": lambda model: []})
    scheduler.register(bare_model.state, "tick", DAEMON)
    with pytest.raises(ValueError):
        scheduler.register(bare_model.state, "tick", FUSE)


def test_daemons_run_before_fuses_in_registration_order(bare_model: WorldModel):
    """Daemons run first, each group in registration order."""
    log: list[str] = []
    scheduler = Scheduler({name: _recorder(name, log) for name in ("a", "b", "c", "off")})
    state = bare_model.state
    scheduler.register(state, "c", FUSE, enabled=True, ticks=1)
    scheduler.register(state, "a", DAEMON, enabled=True)
    scheduler.register(state, "off", DAEMON)
    scheduler.register(state, "b", DAEMON, enabled=True)

    report = scheduler.tick(bare_model)
    assert report.messages == ["a", "b", "c"]
    assert state.moves == 1


def test_fuse_fires_once(bare_model: WorldModel):
    """A fuse fires after its countdown and then disables itself."""
    log: list[str] = []
    scheduler = Scheduler({"boom": _recorder("boom", log)})
    event = scheduler.register(bare_model.state, "boom", FUSE, enabled=True, ticks=3)

    scheduler.tick(bare_model)
    scheduler.tick(bare_model)
    assert log == []
    assert event.ticks == 1
    scheduler.tick(bare_model)
    assert log == ["boom"]
    assert not event.enabled
    scheduler.tick(bare_model)
    assert log == ["boom"]


def test_fatal_stops_the_tick(bare_model: WorldModel):
    """A fatal action ends the tick at once."""
    log: list[str] = []

    def deadly(model: WorldModel) -> list[str]:
        raise Fatal("You are crushed.")

    scheduler = Scheduler({"deadly": deadly, "later": _recorder("later", log)})
    scheduler.register(bare_model.state, "deadly", DAEMON, enabled=True)
    scheduler.register(bare_model.state, "later", DAEMON, enabled=True)

    report = scheduler.tick(bare_model)
    assert report.fatal is not None
    assert report.fatal.cause == "You are crushed."
    assert log == []
    assert bare_model.state.moves == 1


def test_reset_events(game: Game):
    """Resetting restores the default timers."""
    game.model.schedule("lamp")
    game.model.cancel("cyclops")
    reset_events(game.state)
    assert game.state.events == default_events()


# -- fuel --------------------------------------------------------------


def test_lamp_dims(game: Game, play):
    """The lamp warns as its fuel drops."""
    game.model.move_player("living-room")
    play("take lamp", "turn on lamp")
    game.state.fuel["lamp"] = 101
    assert play("wait") == "Time passes...\n\nThe lamp appears a bit dimmer."
    assert game.state.fuel["lamp"] == 100


def test_lamp_burns_out(game: Game, play):
    """An empty lamp goes out."""
    game.model.move_player("living-room")
    play("take lamp", "turn on lamp")
    game.state.fuel["lamp"] = 1
    assert play("wait") == (
        "Time passes...\n\nYou'd better have more light than from the brass lantern."
    )
    assert not game.model.has_flag("lamp", Flag.LIT)
    assert not game.model.event("lamp").enabled
    assert play("turn on lamp") == "A burned-out lamp won't light."


def test_fuel_warning_is_given_once(game: Game):
    """Each fuel warning is given once."""
    model = game.model
    model.move_object("lamp", PLAYER)
    assert set_fuel(model, "lamp", 90) == ["The lamp appears a bit dimmer."]
    assert set_fuel(model, "lamp", 150) == []
    assert set_fuel(model, "lamp", 90) == []


def test_crossing_several_thresholds(game: Game):
    """A big drop gives every warning it crosses."""
    model = game.model
    model.move_object("lamp", PLAYER)
    assert set_fuel(model, "lamp", 10) == [
        "The lamp appears a bit dimmer.",
        "The lamp is definitely dimmer now.",
        "The lamp is nearly out.",
    ]


def test_distant_light_warns_silently(game: Game):
    """A lamp out of earshot still marks its warning."""
    model = game.model
    assert set_fuel(model, "lamp", 90) == []
    assert 100 in model.state.warned["lamp"]


def test_fuel_is_clamped(game: Game):
    """Fuel stays between empty and full."""
    model = game.model
    set_fuel(model, "lamp", 1000)
    assert model.state.fuel["lamp"] == 200
    set_fuel(model, "lamp", -5)
    assert model.state.fuel["lamp"] == 0


def test_unlit_source_stops_burning(game: Game, play):
    """An unlit lamp stops its own timer."""
    game.model.schedule("lamp")
    play("wait")
    assert game.state.fuel["lamp"] == 200
    assert not game.model.event("lamp").enabled


def test_taking_lit_candles_starts_them_burning(game: Game, play):
    """The lit candles start burning once taken."""
    game.model.move_player("south-temple")
    assert not game.model.event("candles").enabled
    play("take candles")
    assert game.model.event("candles").enabled
    assert game.state.fuel["candles"] == 39
    game.state.fuel["candles"] = 21
    assert play("wait") == "Time passes...\n\nThe candles grow shorter."


# -- creatures ---------------------------------------------------------


def test_cyclops_loses_patience(game: Game):
    """The cyclops grows angrier each turn and then eats the player."""
    model = game.model
    model.move_object("lamp", PLAYER)
    model.set_flag("lamp", Flag.LIT)
    model.move_player("cyclops-room")
    for warning in CYCLOPS_WARNINGS:
        assert game.advance_turn() == [warning]
    messages = game.advance_turn()
    assert messages[0].startswith(CYCLOPS_MEAL)
    assert game.state.deaths == 1
    assert game.state.current_room == "forest-1"


def test_cyclops_ignores_you_elsewhere(game: Game):
    """The cyclops only cares when the player is near."""
    assert game.advance_turn() == []
    assert game.model.get_global("cyclops.wrath") == 0


def test_thief_wanders_underground(world: World):
    """The thief keeps to the rooms of the world."""
    game = Game(world, rng=random.Random(7))
    for _ in range(50):
        game.advance_turn()
        lair = game.model.location("thief")
        assert lair in world.rooms
        assert not game.model.has_flag(lair, Flag.SACRED)
        assert not game.model.has_flag(lair, Flag.OUTSIDE)


def test_thief_wanders_the_same_way_for_the_same_seed(world: World):
    """The thief's route depends only on the seed."""
    def route(seed: int) -> list[str]:
        game = Game(world, rng=random.Random(seed))
        rooms = []
        for _ in range(20):
            game.advance_turn()
            rooms.append(game.model.location("thief"))
        return rooms

    assert route(99) == route(99)


def test_thief_announces_himself(world: World):
    """Meeting the thief engages him."""
    game = Game(world, rng=random.Random(3))
    model = game.model
    model.move_object("lamp", PLAYER)
    model.set_flag("lamp", Flag.LIT)
    model.move_player("ew-passage")
    model.move_object("thief", "round-room")
    model.rng = _AlwaysFirst()
    assert game.advance_turn() == [THIEF_ARRIVES]
    assert model.location("thief") == "ew-passage"
    assert model.get_global("thief.engaged")


class _AlwaysFirst(random.Random):
    def choice(self, seq):
        return seq[0]


# -- reservoir ---------------------------------------------------------


def test_rising_water_sweeps_you_away(game: Game):
    """The refill kills anyone on the reservoir bed."""
    model = game.model
    model.set_global("dam.low_tide", True)
    model.move_player("reservoir")
    model.schedule("reservoir-fill", 1)
    messages = game.advance_turn()
    assert messages[0].startswith(SWEPT_AWAY)
    assert not model.get_global("dam.low_tide")
    assert game.state.deaths == 1


def test_rising_water_seen_from_the_shore(game: Game):
    """From the shore the refill is only seen."""
    model = game.model
    model.set_global("dam.low_tide", True)
    model.move_player("reservoir-south")
    model.schedule("reservoir-fill", 1)
    assert game.advance_turn() == [
        "You notice that the water level has risen to the point that it is "
        "impossible to cross."
    ]


def test_boat_rides_out_the_rising_water(game: Game):
    """The refill only sweeps away a player who isn't afloat."""
    model = game.model
    model.set_global("dam.low_tide", True)
    model.move_object("inflated-boat", "reservoir")
    model.move_player("reservoir")
    model.set_global("player.vehicle", "inflated-boat")
    model.schedule("reservoir-fill", 1)
    assert game.advance_turn() == ["The magic boat is lifted up by the rising water."]
    assert game.state.deaths == 0
