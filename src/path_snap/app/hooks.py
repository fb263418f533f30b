# app/hooks.py
from typing import Protocol

from path_snap.domain.entities.geography import ReplacementInterval


class EngineHooks(Protocol):
    def operation_start(self, op: str, **extra): ...
    def operation_end(self, op: str, *, commands: int, **extra): ...
    def noop(self, op: str, *, reason: str, **extra): ...
    def interval_closed(
        self, interval: ReplacementInterval, *, source_id: int, destination_id: int
    ): ...
    def direction_reversal(
        self, *, source_id: int, destination_id: int, index: int, previous: int, current: int
    ): ...
    def degenerate(self, *, path_id: int, reason: str): ...


class NoopHooks:
    def operation_start(self, *_, **__):
        pass

    def operation_end(self, *_, **__):
        pass

    def noop(self, *_, **__):
        pass

    def interval_closed(self, *_, **__):
        pass

    def direction_reversal(self, **_):
        pass

    def degenerate(self, **_):
        pass
