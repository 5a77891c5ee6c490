"""The game facade used by the session layer and the tests."""

import copy
import random

from ..logging import get_logger
from .commands import execute
from .death import Death, Outcome, handle_fatal
from .lexer import tokenize
from .model import WorldModel
from .parser import Command, ParseFailure, parse
from .results import Fatal, Result
from .scheduler import Scheduler
from .state import SNAPSHOT_VERSION, GameState, Life, Snapshot, new_game_state
from .world import World

logger = get_logger(__name__)

GAME_OVER = "The game is over."
NOTHING_TO_REPEAT = "There is nothing to repeat."
AGAIN = "again"


class Game:
    """One player's game: a world model plus its scheduler.

    execute_command() handles one line of input; callers invoke
    advance_turn() once after every accepted command.
    """

    def __init__(
        self,
        world: World,
        state: GameState | None = None,
        rng: random.Random | None = None,
        scheduler: Scheduler | None = None,
    ):
        self.world = world
        self.model = WorldModel(world, state or new_game_state(world), rng)
        self.scheduler = scheduler or Scheduler()

    @property
    def state(self) -> GameState:
        return self.model.state

    def is_terminated(self) -> bool:
        return self.state.life is Life.TERMINATED

    def current_room_description(self) -> str:
        return self.model.describe_room()

    def execute_command(self, raw: str) -> Result:
        if self.is_terminated():
            return Result(success=False, message=GAME_OVER, accepted=False)

        command = parse(tokenize(raw), self.world.vocabulary, self.model.candidate_objects())
        if isinstance(command, ParseFailure):
            return Result(success=False, message=command.message(), accepted=False)

        if command.verb == AGAIN:
            if self.state.last_command is None:
                return Result(success=False, message=NOTHING_TO_REPEAT, accepted=False)
            return self._run(
                parse(
                    tokenize(self.state.last_command),
                    self.world.vocabulary,
                    self.model.candidate_objects(),
                )
            )

        self.state.last_command = raw
        return self._run(command)

    def _run(self, command: Command | ParseFailure) -> Result:
        if isinstance(command, ParseFailure):
            return Result(success=False, message=command.message(), accepted=False)
        try:
            return execute(self.model, command)
        except Fatal as fatal:
            death = self._die(fatal.cause)
            return Result(
                success=False,
                message=death.message,
                changes=self.model.drain_changes(),
                accepted=False,
            )

    def _die(self, cause: str) -> Death:
        notes = self.model.drain_notes()
        death = handle_fatal(self.model, cause)
        if death.outcome is Outcome.TERMINATED:
            logger.info("game_terminated", deaths=self.state.deaths, score=self.state.score)
        if notes:
            return Death(death.outcome, "\n".join([*notes, death.message]))
        return death

    def advance_turn(self) -> list[str]:
        """Run the scheduler once and return what it printed."""
        if self.is_terminated():
            return []
        report = self.scheduler.tick(self.model)
        messages = list(report.messages)
        if report.fatal is not None:
            messages.append(self._die(report.fatal.cause).message)
        self.model.drain_notes()
        self.model.drain_changes()
        return messages

    def snapshot(self) -> Snapshot:
        return Snapshot(state=copy.deepcopy(self.state))

    def restore(self, snapshot: Snapshot) -> None:
        if snapshot.version != SNAPSHOT_VERSION:
            raise ValueError(f"Unsupported snapshot version: {snapshot.version}")
        self.model.state = copy.deepcopy(snapshot.state)
        self.model.drain_notes()
        self.model.drain_changes()
