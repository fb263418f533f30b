from dataclasses import dataclass, field

from path_snap.domain.entities.commands import Command, MoveVertex, ReplacePathSequence
from path_snap.domain.entities.geography import BoundingBox, Coordinate
from path_snap.domain.mechanics.mechanics_geodesy import project_onto_segment
from path_snap.domain.state import DatasetSnapshot


@dataclass
class VertexSnap:
    moved: dict[int, Coordinate] = field(default_factory=dict)  # insertion order kept
    sequences: dict[int, list[int]] = field(default_factory=dict)

    def commands(self) -> list[Command]:
        out: list[Command] = [MoveVertex(vid, c) for vid, c in self.moved.items()]
        out.extend(ReplacePathSequence(pid, tuple(seq)) for pid, seq in self.sequences.items())
        return out


def movable_vertices(snapshot: DatasetSnapshot, path_ids: list[int]) -> list[int]:
    out: dict[int, None] = {}
    for pid in path_ids:
        for vid in snapshot.paths[pid].open_ids():
            if not snapshot.is_protected(vid):
                out[vid] = None
    return list(out)


def snap_vertices(
    snapshot: DatasetSnapshot, movable: list[int], candidates: list[int], threshold_m: float
) -> VertexSnap:
    """
    Move each vertex onto the first candidate segment strictly closer than the threshold
    and insert it into that candidate right after the segment's first endpoint.
    """
    result = VertexSnap()
    coords = {vid: snapshot.coord(vid) for vid in snapshot.vertices}
    pending = list(movable)
    for cid in candidates:
        cand = snapshot.paths[cid]
        mutated = list(cand.vertex_ids)
        bbox = BoundingBox.of(coords[v] for v in mutated)
        snapped: set[int] = set()
        for vid in pending:
            if cid in snapshot.referrers(vid) or vid in mutated:
                continue
            p = coords[vid]
            if bbox.min_distance(p) > threshold_m:
                continue
            for k in range(len(mutated) - 1):
                proj, d = project_onto_segment(p, coords[mutated[k]], coords[mutated[k + 1]])
                if d < threshold_m:
                    coords[vid] = proj
                    result.moved[vid] = proj
                    mutated.insert(k + 1, vid)
                    snapped.add(vid)
                    break
        pending = [v for v in pending if v not in snapped]
        if mutated != cand.vertex_ids:
            result.sequences[cid] = mutated
    return result
