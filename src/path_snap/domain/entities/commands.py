# domain/entities/commands.py
from dataclasses import dataclass, field

from path_snap.domain.entities.geography import Coordinate


# Base type for mutations handed to the caller (never applied by the engine itself)
@dataclass(frozen=True)
class Command:
    pass


@dataclass(frozen=True)
class InsertVertex(Command):
    vertex_id: int  # freshly allocated, negative
    coord: Coordinate
    tags: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteVertex(Command):
    vertex_id: int


@dataclass(frozen=True)
class MoveVertex(Command):
    vertex_id: int
    coord: Coordinate


@dataclass(frozen=True)
class ReplacePathSequence(Command):
    path_id: int
    vertex_ids: tuple[int, ...]
