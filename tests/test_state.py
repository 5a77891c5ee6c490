"""Tests for game state, snapshots and their serialized form."""

import dataclasses

import pytest

from grue.engine.game import Game
from grue.engine.state import (
    DEFAULT_EVENTS,
    FUEL_CAPACITY,
    SNAPSHOT_VERSION,
    Life,
    Snapshot,
    new_game_state,
)
from grue.engine.world import World
from grue.session import dump_snapshot, load_snapshot


def test_new_game_state(world: World):
    """A new game starts west of the house with nothing done."""
    state = new_game_state(world)
    assert state.current_room == "west-of-house"
    assert state.visited == {"west-of-house"}
    assert state.score == 0
    assert state.moves == 0
    assert state.deaths == 0
    assert state.life is Life.ALIVE
    assert state.locations["leaflet"] == "mailbox"
    assert "takeable" in state.flags["lamp"]
    assert state.fuel == FUEL_CAPACITY
    assert state.globals["luck.lucky"] is True
    assert [event.name for event in state.events] == [name for name, _, _ in DEFAULT_EVENTS]


def test_states_are_independent(world: World):
    """Two new games share no mutable state."""
    first = new_game_state(world)
    second = new_game_state(world)
    first.flags["mailbox"].add("open")
    first.globals["rug.moved"] = True
    assert "open" not in second.flags["mailbox"]
    assert second.globals["rug.moved"] is False


def test_snapshot_is_a_copy(game: Game, play):
    """Play after a snapshot leaves the snapshot alone."""
    snapshot = game.snapshot()
    play("open mailbox", "take leaflet")
    assert snapshot.state.locations["leaflet"] == "mailbox"
    assert snapshot.state.moves == 0
    assert snapshot.version == SNAPSHOT_VERSION


def test_restore_rewinds_the_game(game: Game, play):
    """Restoring puts everything back."""
    snapshot = game.snapshot()
    play("open mailbox", "take leaflet", "north")
    game.restore(snapshot)
    assert game.state.current_room == "west-of-house"
    assert game.state.locations["leaflet"] == "mailbox"
    assert play("open mailbox") == "Opening the small mailbox reveals a leaflet."


def test_restore_does_not_share_state(game: Game, play):
    """Play after a restore leaves the snapshot alone."""
    snapshot = game.snapshot()
    game.restore(snapshot)
    play("open mailbox")
    assert "open" not in snapshot.state.flags["mailbox"]


def test_restore_rejects_other_versions(game: Game):
    """Snapshots from another version are refused."""
    snapshot = dataclasses.replace(game.snapshot(), version=SNAPSHOT_VERSION + 1)
    with pytest.raises(ValueError, match="Unsupported snapshot version"):
        game.restore(snapshot)


def test_serialized_snapshot(world: World, game: Game, play):
    """A snapshot compresses to bytes."""
    play("open mailbox", "take leaflet", "north")
    blob = dump_snapshot(game.snapshot())
    assert isinstance(blob, bytes)

    restored = Game(world)
    restored.restore(load_snapshot(blob))
    assert restored.state == game.state
    assert restored.state.current_room == "north-of-house"
    assert restored.model.inventory() == ["leaflet"]


def test_snapshot_survives_scheduled_events(world: World, game: Game):
    """Timers survive a trip through the blob."""
    game.model.schedule("reservoir-drain", 8)
    restored = Game(world)
    restored.restore(load_snapshot(dump_snapshot(game.snapshot())))
    assert restored.model.event("reservoir-drain").ticks == 8
    assert restored.model.event("reservoir-drain").enabled
    assert isinstance(load_snapshot(dump_snapshot(Snapshot(game.state))), Snapshot)
