"""Zork-style text adventure over Gemini."""

from .app import create_app
from .config import Config
from .logging import configure_logging, get_logger

__all__ = ["main", "create_app", "Config"]


def main() -> None:
    """Serve the underground empire until interrupted."""
    config = Config.from_env()
    configure_logging(config)

    logger = get_logger(__name__)
    logger.info(
        "grue_starting",
        host=config.host,
        port=config.port,
        database=config.database_url.split("://", 1)[0],
        seeded=config.seed is not None,
        tls=config.certfile is not None,
    )

    app = create_app(config)
    app.run(
        host=config.host,
        port=config.port,
        certfile=str(config.certfile) if config.certfile else None,
        keyfile=str(config.keyfile) if config.keyfile else None,
    )
