"""Xitzin application factory for grue."""

from importlib import resources
from pathlib import Path

from sqlmodel import Session, SQLModel, create_engine
from xitzin import Xitzin

from .config import Config
from .engine.loader import load_world
from .logging import get_logger

logger = get_logger(__name__)


def _get_data_path(name: str) -> Path:
    """Locate a bundled data file via importlib.resources (works when installed in a venv)."""
    return resources.files("grue.data").joinpath(name)


def create_app(config: Config | None = None) -> Xitzin:
    """Create and configure the Xitzin application."""
    config = config or Config.from_env()

    templates_dir = Path(__file__).parent / "templates"

    app = Xitzin(
        title="Grue",
        version="0.1.0",
        templates_dir=templates_dir,
    )

    engine = create_engine(config.database_url)
    app.state.engine = engine
    app.state.config = config

    @app.on_startup
    async def startup():
        """Initialize database and load game world."""
        SQLModel.metadata.create_all(engine)
        logger.debug("database_setup_complete")

        world = load_world(
            _get_data_path("world.yaml"),
            _get_data_path("vocabulary.yaml"),
        )
        app.state.world = world
        logger.info(
            "world_loaded",
            rooms=len(world.rooms),
            objects=len(world.objects),
            words=len(world.vocabulary),
        )
        logger.info("startup_complete")

    from .routes import home, play

    home.register_routes(app)
    play.register_routes(app)

    return app


def get_session(app: Xitzin) -> Session:
    """Get a database session from the app."""
    return Session(app.state.engine)
