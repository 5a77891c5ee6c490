"""What executing a command produces: results, refusals and fatal events."""

from dataclasses import dataclass, field
from enum import StrEnum


@dataclass(frozen=True)
class StateChange:
    """One entry of a command's change log."""

    kind: str  # "location", "flag", "global", "player", "score", "event"
    subject: str
    old: object
    new: object


@dataclass
class Result:
    success: bool
    message: str
    changes: list[StateChange] = field(default_factory=list)
    # False when no game time passed (parse failures, meta verbs)
    accepted: bool = True


class FailureReason(StrEnum):
    CONTAINER_CLOSED = "container_closed"
    CAPABILITY_MISSING = "capability_missing"
    PUZZLE_PRECONDITION = "puzzle_precondition"


@dataclass(frozen=True)
class ExecutionFailure:
    reason: FailureReason
    subject: str = ""
    detail: str = ""

    def message(self) -> str:
        if self.reason is FailureReason.CONTAINER_CLOSED:
            return f"The {self.subject} is closed."
        return self.detail


class Fatal(Exception):
    """An in-world death. Carries the text describing how it happened."""

    def __init__(self, cause: str):
        super().__init__(cause)
        self.cause = cause


def succeed(message: str) -> Result:
    return Result(success=True, message=message)


def refuse(message: str) -> Result:
    """A puzzle or handler declining the command without touching state."""
    failure = ExecutionFailure(FailureReason.PUZZLE_PRECONDITION, detail=message)
    return Result(success=False, message=failure.message())
