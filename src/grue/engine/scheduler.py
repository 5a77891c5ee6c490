"""Turn-synchronous event scheduler.

Daemons run every turn while enabled; fuses count down and fire once.
Both live in one list on GameState, and registration order is the only
tie-break, so a given state always ticks the same way.
"""

from dataclasses import dataclass, field

from ..logging import get_logger
from .daemons import EVENT_ACTIONS, Action
from .model import WorldModel
from .results import Fatal
from .state import DAEMON, FUSE, GameState, ScheduledEvent, default_events

logger = get_logger(__name__)


@dataclass
class TickReport:
    messages: list[str] = field(default_factory=list)
    # Set when an action killed the player; the remaining events did not run.
    fatal: Fatal | None = None


class Scheduler:
    def __init__(self, actions: dict[str, Action] | None = None):
        self.actions = dict(EVENT_ACTIONS if actions is None else actions)

    def register(
        self,
        state: GameState,
        name: str,
        kind: str,
        enabled: bool = False,
        ticks: int = 0,
    ) -> ScheduledEvent:
        """Append an event after every event already registered."""
        if kind not in (DAEMON, FUSE):
            raise ValueError(f"Unknown event kind: {kind}")
        if name not in self.actions:
            raise ValueError(f"No action bound to event: {name}")
        if any(event.name == name for event in state.events):
            raise ValueError(f"Event already registered: {name}")
        order = max((event.order for event in state.events), default=-1) + 1
        event = ScheduledEvent(name=name, kind=kind, order=order, enabled=enabled, ticks=ticks)
        state.events.append(event)
        return event

    def tick(self, model: WorldModel) -> TickReport:
        """Run one turn: daemons, then fuses, then count the move."""
        report = TickReport()
        ordered = sorted(model.state.events, key=lambda event: event.order)
        try:
            for event in ordered:
                if event.kind == DAEMON and event.enabled:
                    report.messages.extend(self.actions[event.name](model))

            due = []
            for event in ordered:
                if event.kind == FUSE and event.enabled:
                    event.ticks -= 1
                    if event.ticks <= 0:
                        due.append(event)
            for event in due:
                event.enabled = False
                logger.debug("fuse_fired", name=event.name)
                report.messages.extend(self.actions[event.name](model))
        except Fatal as fatal:
            report.fatal = fatal
        finally:
            model.state.moves += 1
        return report


def reset_events(state: GameState) -> None:
    """Reinstall the default events, as at the start of a game."""
    state.events = default_events()
