# path_snap/domain/state.py
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from path_snap.domain.entities.commands import (
    Command,
    DeleteVertex,
    InsertVertex,
    MoveVertex,
    ReplacePathSequence,
)
from path_snap.domain.entities.geography import Coordinate, Path, Vertex


@dataclass
class DatasetSnapshot:
    """
    In-memory copy of the vertices and paths an operation works on.

    The adjacency index (vertex id -> referring path ids) and the branch set are
    built once on construction and never mutated by the algorithms. New states
    are produced with `applied`, which rebuilds them.
    """

    vertices: dict[int, Vertex] = field(default_factory=dict)
    paths: dict[int, Path] = field(default_factory=dict)

    _referrers: dict[int, frozenset[int]] = field(init=False, repr=False)
    _branches: frozenset[int] = field(init=False, repr=False)
    _next_id: int = field(init=False, repr=False)

    def __post_init__(self):
        for p in self.paths.values():
            missing = [v for v in p.vertex_ids if v not in self.vertices]
            if missing:
                raise ValueError(f"path {p.id} references unknown vertices {missing}")
        refs: dict[int, set[int]] = {}
        for p in self.paths.values():
            for vid in p.vertex_ids:
                refs.setdefault(vid, set()).add(p.id)
        self._referrers = {vid: frozenset(s) for vid, s in refs.items()}
        self._branches = frozenset(vid for vid in refs if self._glues_paths(vid))
        self._next_id = min([0, *self.vertices]) - 1

    @classmethod
    def build(cls, vertices: Iterable[Vertex], paths: Iterable[Path]) -> "DatasetSnapshot":
        return cls({v.id: v for v in vertices}, {p.id: p for p in paths})

    # --------------- Queries -----------------------------

    def coord(self, vid: int) -> Coordinate:
        return self.vertices[vid].coord

    def coords(self, ids: Iterable[int]) -> list[Coordinate]:
        return [self.vertices[v].coord for v in ids]

    def referrers(self, vid: int) -> frozenset[int]:
        return self._referrers.get(vid, frozenset())

    def is_branch(self, vid: int) -> bool:
        return vid in self._branches

    def is_protected(self, vid: int) -> bool:
        """Branch or tagged vertices never move and are never removed."""
        return vid in self._branches or self.vertices[vid].tagged

    def neighbours(self, path: Path, vid: int) -> frozenset[int]:
        ids, out = path.vertex_ids, set()
        for k, v in enumerate(ids):
            if v != vid:
                continue
            if k > 0:
                out.add(ids[k - 1])
            if k < len(ids) - 1:
                out.add(ids[k + 1])
        return frozenset(out)

    def _glues_paths(self, vid: int) -> bool:
        sets = {self.neighbours(self.paths[pid], vid) for pid in self._referrers[vid]}
        return len(sets) > 1

    def path_length_m(self, pid: int) -> float:
        cs = self.coords(self.paths[pid].vertex_ids)
        return sum(a.distance(b) for a, b in zip(cs, cs[1:]))

    # --------------- Identity ----------------------------

    def new_vertex_id(self) -> int:
        vid = self._next_id
        self._next_id -= 1
        return vid

    # --------------- Transitions -------------------------

    def applied(self, commands: Iterable[Command]) -> "DatasetSnapshot":
        """Return a new snapshot with the commands committed, in order."""
        vertices = dict(self.vertices)
        paths = dict(self.paths)
        for cmd in commands:
            if isinstance(cmd, InsertVertex):
                vertices[cmd.vertex_id] = Vertex(cmd.vertex_id, cmd.coord, dict(cmd.tags))
            elif isinstance(cmd, MoveVertex):
                vertices[cmd.vertex_id] = replace(vertices[cmd.vertex_id], coord=cmd.coord)
            elif isinstance(cmd, ReplacePathSequence):
                paths[cmd.path_id] = replace(paths[cmd.path_id], vertex_ids=list(cmd.vertex_ids))
            elif isinstance(cmd, DeleteVertex):
                vertices.pop(cmd.vertex_id, None)
            else:
                raise TypeError(cmd)
        out = DatasetSnapshot(vertices, paths)
        out._next_id = min(out._next_id, self._next_id)
        return out
