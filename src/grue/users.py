"""Player accounts, keyed by client certificate fingerprint.

An account outlives its games. When a game ends for good, its score is
folded into the account before the SavedGame row is reused for the next
game.
"""

import datetime as dt

from sqlmodel import Session, select

from .logging import get_logger
from .models import Player

logger = get_logger(__name__)


def get_or_create_player(session: Session, fingerprint: str) -> Player:
    """Return the player for `fingerprint`, creating one on first visit."""
    player = session.exec(select(Player).where(Player.fingerprint == fingerprint)).first()

    if player is None:
        player = Player(fingerprint=fingerprint)
        session.add(player)
        session.commit()
        session.refresh(player)
        logger.info("adventurer_arrived", fingerprint=fingerprint, player_id=player.id)
        return player

    player.last_seen = dt.datetime.now(dt.UTC)
    session.commit()
    session.refresh(player)
    return player


def record_finished_game(player: Player, score: int, deaths: int) -> None:
    """Count a terminated game against the account. The caller commits."""
    player.games_finished += 1
    personal_best = score > player.best_score
    if personal_best:
        player.best_score = score
    logger.info(
        "game_recorded",
        player_id=player.id,
        score=score,
        deaths=deaths,
        games_finished=player.games_finished,
        personal_best=personal_best,
    )
