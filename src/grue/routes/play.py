"""Gameplay routes."""

import random
from contextlib import contextmanager

from sqlmodel import Session
from xitzin import Redirect, Request, Xitzin
from xitzin.auth import get_identity, require_certificate

from ..engine.game import GAME_OVER
from ..logging import player_context
from ..session import GrueSession
from ..users import get_or_create_player


def _rng(request: Request) -> random.Random | None:
    seed = request.app.state.config.seed
    return random.Random(seed) if seed is not None else None


@contextmanager
def _game_session(request: Request):
    """Load the player's game session with auto-close."""
    identity = get_identity(request)
    db_session = Session(request.app.state.engine)
    try:
        player = get_or_create_player(db_session, identity.fingerprint)
        with player_context(player):
            world = request.app.state.world
            yield GrueSession.load_or_create(
                db_session, player, world, rng=_rng(request),
            )
    finally:
        db_session.close()


def _render_play(app: Xitzin, game: GrueSession, message: str = ""):
    """Render the main play view."""
    state = game.state
    return app.template(
        "play.gmi",
        description=game.get_room_description(),
        objects=game.get_visible_objects(),
        exits=game.get_exits(),
        message=message,
        turns=state.moves,
        score=state.score,
        life=str(state.life),
        is_finished=game.is_finished,
        best_score=game.player.best_score,
        games_finished=game.player.games_finished,
    )


def _run(app: Xitzin, game: GrueSession, command: str):
    """Run one command, save, and render the result."""
    if game.is_finished:
        return _render_play(app, game, message=GAME_OVER)
    message = game.process_command(command)
    game.save()
    return _render_play(app, game, message=message)


def _register_action_routes(app: Xitzin) -> None:
    """Register command and movement routes."""

    @app.gemini("/play", name="play")
    @require_certificate
    def play(request: Request):
        """Main game view."""
        with _game_session(request) as game:
            game.save()
            return _render_play(app, game)

    @app.gemini("/go/{direction}", name="go")
    @require_certificate
    def go(request: Request, direction: str):
        """Movement via clickable link."""
        with _game_session(request) as game:
            return _run(app, game, f"go {direction}")

    @app.input("/cmd", prompt="What do you want to do?", name="cmd")
    @require_certificate
    def cmd(request: Request, query: str):
        """Freeform command entry."""
        with _game_session(request) as game:
            return _run(app, game, query)

    @app.gemini("/look", name="look")
    @require_certificate
    def look(request: Request):
        with _game_session(request) as game:
            return _run(app, game, "look")


def _register_info_routes(app: Xitzin) -> None:
    """Register inventory, score, and game management routes."""

    @app.gemini("/inventory", name="inventory")
    @require_certificate
    def inventory(request: Request):
        """Show carried items."""
        with _game_session(request) as game:
            return _run(app, game, "inventory")

    @app.gemini("/score", name="score")
    @require_certificate
    def score(request: Request):
        """Show score and rank. Takes no game time."""
        with _game_session(request) as game:
            return _run(app, game, "score")

    @app.input(
        "/new",
        prompt="Are you sure you want to start over? Type YES to confirm:",
        name="new_game",
    )
    @require_certificate
    def new_game(request: Request, query: str):
        """Reset game with confirmation."""
        with _game_session(request) as game:
            if query.strip().upper() == "YES":
                game.reset()
                game.save()
                return _render_play(
                    app, game, message="A new adventure begins!",
                )
            return Redirect("/play")


def register_routes(app: Xitzin) -> None:
    """Register gameplay routes."""
    _register_action_routes(app)
    _register_info_routes(app)
