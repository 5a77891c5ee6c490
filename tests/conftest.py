"""Shared test fixtures for grue."""

import random
from collections.abc import Callable
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

from grue.app import _get_data_path, create_app
from grue.config import Config
from grue.engine.game import Game
from grue.engine.loader import load_world
from grue.engine.world import World
from grue.models import Player

SEED = 1234


@pytest.fixture(scope="session")
def world() -> World:
    return load_world(_get_data_path("world.yaml"), _get_data_path("vocabulary.yaml"))


@pytest.fixture
def game(world: World) -> Game:
    """A seeded game with the thief kept out of the way."""
    game = Game(world, rng=random.Random(SEED))
    game.model.cancel("thief")
    game.model.drain_changes()
    return game


@pytest.fixture
def play(game: Game) -> Callable[..., str]:
    """Run commands the way the session does and return the last response."""

    def _play(*commands: str) -> str:
        response = ""
        for raw in commands:
            result = game.execute_command(raw)
            parts = [result.message]
            if result.accepted:
                parts.extend(game.advance_turn())
            response = "\n\n".join(part for part in parts if part)
        return response

    return _play


@pytest.fixture
def db_engine(tmp_path: Path):
    db_url = f"sqlite:///{tmp_path}/test.db"
    engine = create_engine(db_url)
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine):
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def test_player(db_session: Session) -> Player:
    player = Player(fingerprint="test-fingerprint-abc123")
    db_session.add(player)
    db_session.commit()
    db_session.refresh(player)
    return player


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    return Config(database_url=f"sqlite:///{tmp_path}/test.db", seed=SEED)


@pytest.fixture
def app(test_config: Config):
    return create_app(test_config)


@pytest.fixture
def client(app):
    from xitzin.testing import test_app

    with test_app(app) as client:
        yield client


@pytest.fixture
def auth_client(client):
    return client.with_certificate("test-fingerprint-abc123")
