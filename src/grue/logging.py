"""Logging configuration for grue.

Every request runs inside player_context(), so engine events such as
player_died or game_terminated carry the player without the engine
knowing about accounts. Commands typed at /cmd are free text and are
clipped before they reach a log line.
"""

import hashlib
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

from .config import Config
from .models import Player

# Longest player command kept in a log event
MAX_LOGGED_COMMAND = 80

_LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


def hash_fingerprint_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Replace certificate fingerprints with a short hash."""
    fp = event_dict.pop("fingerprint", None)
    if fp and fp != "unknown":
        event_dict["fingerprint_hash"] = hashlib.sha256(fp.encode()).hexdigest()[:12]
    return event_dict


def clip_command_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Flatten and shorten a logged player command."""
    command = event_dict.get("command")
    if isinstance(command, str):
        command = " ".join(command.split())
        if len(command) > MAX_LOGGED_COMMAND:
            command = command[: MAX_LOGGED_COMMAND - 3] + "..."
        event_dict["command"] = command
    return event_dict


def build_processors(config: Config, colors: bool = False) -> list[Any]:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(
            fmt="iso" if config.json_logs else "%Y-%m-%d %H:%M:%S"
        ),
        clip_command_processor,
    ]
    if config.hash_fingerprints:
        processors.append(hash_fingerprint_processor)
    if config.json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))
    return processors


def configure_logging(config: Config) -> None:
    """Configure structured logging from the application config."""
    output_stream = open(config.log_file, "a") if config.log_file else sys.stdout

    structlog.configure(
        processors=build_processors(config, colors=output_stream.isatty()),
        wrapper_class=structlog.make_filtering_bound_logger(
            _LEVELS.get(config.log_level.upper(), 20)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output_stream),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance for a module."""
    return structlog.get_logger(name)


@contextmanager
def player_context(player: Player) -> Iterator[None]:
    """Attach the player to every log event in the block."""
    with structlog.contextvars.bound_contextvars(
        fingerprint=player.fingerprint, player_id=player.id
    ):
        yield
