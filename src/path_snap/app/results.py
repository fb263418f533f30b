# app/results.py
from dataclasses import dataclass, field
from enum import Enum

from path_snap.domain.entities.commands import Command


class NoOpReason(Enum):
    UNKNOWN_PATH = "unknown_path"
    WRONG_SELECTION = "wrong_selection"
    PATH_TOO_SHORT = "path_too_short"
    NO_ELIGIBLE_VERTICES = "no_eligible_vertices"
    NO_CANDIDATES = "no_candidates"
    NO_INTERVALS = "no_intervals"
    NOTHING_TO_CHANGE = "nothing_to_change"
    DEGENERATE_RESULT = "degenerate_result"


@dataclass
class OperationResult:
    op: str
    commands: list[Command] = field(default_factory=list)
    reason: NoOpReason | None = None

    @property
    def ok(self) -> bool:
        return self.reason is None and bool(self.commands)

    @classmethod
    def noop(cls, op: str, reason: NoOpReason) -> "OperationResult":
        return cls(op=op, reason=reason)
