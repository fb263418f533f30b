from typing import Protocol, runtime_checkable

from path_snap.domain.entities.commands import Command
from path_snap.domain.mechanics.mechanics_decimators import Decimation
from path_snap.domain.state import DatasetSnapshot


@runtime_checkable
class Decimator(Protocol):
    """
    Responsibilities:
      • Reduce one path's own vertex count without touching other paths.
      • Report the surviving sequence (closure restored) and the dropped vertices.
    """

    def decimate(self, snapshot: DatasetSnapshot, path_id: int) -> Decimation: ...


@runtime_checkable
class CommandSink(Protocol):
    def write(self, cmd: Command) -> None: ...
