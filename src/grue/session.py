"""Bridge between a player's database row and their running Game."""

import datetime as dt
import pickle
import random
import zlib

from sqlmodel import Session, select

from .engine.game import Game
from .engine.state import Snapshot
from .engine.world import Flag, World
from .logging import get_logger
from .models import Player, SavedGame
from .users import record_finished_game

logger = get_logger(__name__)


def dump_snapshot(snapshot: Snapshot) -> bytes:
    return zlib.compress(pickle.dumps(snapshot))


def load_snapshot(blob: bytes) -> Snapshot:
    return pickle.loads(zlib.decompress(blob))


class GrueSession:
    """Wraps a Player, their SavedGame row and the in-memory Game."""

    def __init__(
        self,
        db_session: Session,
        player: Player,
        saved_game: SavedGame | None,
        game: Game,
        world: World,
    ):
        self.db_session = db_session
        self.player = player
        self.saved_game = saved_game
        self.game = game
        self.world = world

    @classmethod
    def load_or_create(
        cls,
        db_session: Session,
        player: Player,
        world: World,
        rng: random.Random | None = None,
    ) -> "GrueSession":
        """Resume the player's unfinished game, or start a new one."""
        statement = select(SavedGame).where(SavedGame.player_id == player.id)
        saved_game = db_session.exec(statement).first()
        game = Game(world, rng=rng)

        if saved_game and not saved_game.is_finished:
            game.restore(load_snapshot(saved_game.state_blob))
            logger.debug("game_loaded", turns=saved_game.turns)
        else:
            logger.info("new_game_started")

        return cls(db_session, player, saved_game, game, world)

    @property
    def state(self):
        return self.game.state

    @property
    def is_finished(self) -> bool:
        return self.game.is_terminated()

    def process_command(self, raw_input: str) -> str:
        """Run one command and, when it took game time, one scheduler turn."""
        result = self.game.execute_command(raw_input)
        parts = [result.message]
        if result.accepted:
            parts.extend(self.game.advance_turn())
        logger.debug(
            "command_processed",
            command=raw_input,
            success=result.success,
            accepted=result.accepted,
            changes=len(result.changes),
        )
        return "\n\n".join(part for part in parts if part)

    def save(self) -> None:
        """Write the game back to the database."""
        now = dt.datetime.now(dt.UTC)
        blob = dump_snapshot(self.game.snapshot())
        state = self.game.state

        if self.saved_game is None:
            self.saved_game = SavedGame(
                player_id=self.player.id,
                state_blob=blob,
                started_at=now,
            )
            self.db_session.add(self.saved_game)
        self.saved_game.state_blob = blob
        self.saved_game.turns = state.moves
        self.saved_game.score = state.score
        self.saved_game.deaths = state.deaths
        finished = self.game.is_terminated()
        if finished and not self.saved_game.is_finished:
            record_finished_game(self.player, state.score, state.deaths)
        self.saved_game.is_finished = finished
        self.saved_game.last_played = now

        self.db_session.commit()
        logger.debug("game_saved", turns=state.moves, score=state.score)

    def get_room_description(self) -> str:
        return self.game.current_room_description()

    def get_exits(self) -> list[str]:
        return self.game.model.open_exits()

    def get_visible_objects(self) -> list[str]:
        model = self.game.model
        return [
            model.obj(obj_id).name
            for obj_id in model.visible_in_room()
            if not model.has_flag(obj_id, Flag.SCENERY)
        ]

    def get_inventory(self) -> list[str]:
        model = self.game.model
        return [model.obj(obj_id).name for obj_id in model.inventory()]

    def reset(self) -> None:
        """Throw the current game away and start over."""
        self.game = Game(self.world, rng=self.game.model.rng)
        if self.saved_game:
            self.db_session.delete(self.saved_game)
            self.db_session.commit()
            self.saved_game = None
        logger.info("game_reset")
