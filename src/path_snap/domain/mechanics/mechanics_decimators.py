import math
from dataclasses import dataclass, field

from path_snap.domain.entities.commands import (
    Command,
    DeleteVertex,
    MoveVertex,
    ReplacePathSequence,
)
from path_snap.domain.entities.geography import Coordinate, close_sequence
from path_snap.domain.mechanics.mechanics_geodesy import (
    cross_track_error,
    triangle_area,
    turn_angle,
)
from path_snap.domain.state import DatasetSnapshot


@dataclass
class Decimation:
    path_id: int
    vertex_ids: list[int]  # closure restored
    removed: list[int] = field(default_factory=list)
    moved: dict[int, Coordinate] = field(default_factory=dict)

    def commands(self, snapshot: DatasetSnapshot) -> list[Command]:
        out: list[Command] = []
        # a repeated vertex can lose one occurrence without being removed
        if self.vertex_ids != snapshot.paths[self.path_id].vertex_ids:
            out.append(ReplacePathSequence(self.path_id, tuple(self.vertex_ids)))
        out.extend(
            DeleteVertex(vid)
            for vid in self.removed
            if snapshot.referrers(vid) <= {self.path_id} and not snapshot.vertices[vid].tagged
        )
        out.extend(MoveVertex(vid, c) for vid, c in self.moved.items() if snapshot.coord(vid) != c)
        return out


class WeightedDecimator:
    """
    Remove the cheapest interior vertex until none has a finite cost.

    cost = angle_w * angle_factor + area_w * area_factor + distance_w * distance_factor,
    each weight being the measured value over its threshold. Any weight above 1.0
    makes the vertex irremovable, as do branch/tagged vertices and the last vertex of
    an open path (the first one is never a middle vertex).
    """

    def __init__(
        self,
        *,
        distance_threshold_m: float,
        angle_threshold_deg: float = 10.0,
        area_threshold_m2: float = 5.0,
        angle_factor: float = 1.0,
        area_factor: float = 1.0,
        distance_factor: float = 3.0,
    ):
        self.angle_t, self.area_t, self.dist_t = (
            angle_threshold_deg,
            area_threshold_m2,
            distance_threshold_m,
        )
        self.angle_f, self.area_f, self.dist_f = angle_factor, area_factor, distance_factor

    def cost(self, a: Coordinate, b: Coordinate, c: Coordinate) -> float:
        angle_w = turn_angle(a, b, c) / self.angle_t
        area_w = triangle_area(a, b, c) / self.area_t
        dist_w = abs(cross_track_error(a, b, c)) / self.dist_t
        if angle_w > 1.0 or area_w > 1.0 or dist_w > 1.0:
            return math.inf
        return angle_w * self.angle_f + area_w * self.area_f + dist_w * self.dist_f

    def decimate(self, snapshot: DatasetSnapshot, path_id: int) -> Decimation:
        path = snapshot.paths[path_id]
        closed = path.closed
        nodes = path.open_ids()
        floor = 3 if closed else 2
        cache: list[float | None] = [None] * len(nodes)

        while len(nodes) > floor:
            n = len(nodes)
            best, best_cost = -1, math.inf
            # sliding window: the middle of (k-1, k, k+1) with wraparound for closed paths
            for k in range(0 if closed else 1, n):
                if cache[k] is None:
                    vid = nodes[k]
                    if (not closed and k == n - 1) or snapshot.is_protected(vid):
                        cache[k] = math.inf
                    else:
                        a = snapshot.coord(nodes[(k - 1) % n])
                        c = snapshot.coord(nodes[(k + 1) % n])
                        cache[k] = self.cost(a, snapshot.coord(vid), c)
                if cache[k] < best_cost:
                    best, best_cost = k, cache[k]
            if best < 0:
                break
            cache[(best - 1) % n] = None
            cache[(best + 1) % n] = None
            del cache[best]
            del nodes[best]

        kept = set(nodes)
        removed = [vid for vid in dict.fromkeys(path.open_ids()) if vid not in kept]
        return Decimation(path_id, close_sequence(nodes, closed), removed)


@dataclass
class Merge:
    sequences: dict[int, list[int]]  # path id -> new sequence, closure restored
    moved: dict[int, Coordinate] = field(default_factory=dict)
    removed: list[int] = field(default_factory=list)

    def commands(self, snapshot: DatasetSnapshot) -> list[Command]:
        out: list[Command] = [
            ReplacePathSequence(pid, tuple(seq))
            for pid, seq in self.sequences.items()
            if seq != snapshot.paths[pid].vertex_ids
        ]
        out.extend(DeleteVertex(vid) for vid in self.removed)
        out.extend(
            MoveVertex(vid, c)
            for vid, c in self.moved.items()
            if vid in snapshot.vertices and snapshot.coord(vid) != c
        )
        return out


class AverageMerger:
    """Collapse adjacent vertex pairs closer than the merge threshold into their midpoint."""

    def __init__(self, *, merge_threshold_m: float = 0.2):
        self.threshold = merge_threshold_m

    def _mergeable(self, snapshot: DatasetSnapshot, batch: set[int], a: int, b: int) -> bool:
        if snapshot.is_protected(a) or snapshot.is_protected(b):
            return False
        ra, rb = snapshot.referrers(a), snapshot.referrers(b)
        return ra <= batch and rb <= batch and ra == rb

    def merge(self, snapshot: DatasetSnapshot, path_ids: list[int]) -> Merge:
        batch = set(path_ids)
        coord_map: dict[int, Coordinate] = {}
        for pid in path_ids:
            for vid in snapshot.paths[pid].vertex_ids:
                coord_map[vid] = snapshot.coord(vid)

        for pid in path_ids:
            path = snapshot.paths[pid]
            nodes = [v for v in path.open_ids() if v in coord_map]
            floor = 3 if path.closed else 2
            while len(nodes) > floor:
                n = len(nodes)
                pairs = range(n) if path.closed else range(n - 1)
                best, best_d = -1, math.inf
                for k in pairs:
                    a, b = nodes[k], nodes[(k + 1) % n]
                    if a == b or not self._mergeable(snapshot, batch, a, b):
                        continue
                    d = coord_map[a].distance(coord_map[b])
                    if d < best_d and d < self.threshold:
                        best, best_d = k, d
                if best < 0:
                    break
                a, b = nodes[best], nodes[(best + 1) % n]
                coord_map[a] = coord_map[a].center(coord_map[b])
                nodes = [v for v in nodes if v != b]
                del coord_map[b]

        sequences: dict[int, list[int]] = {}
        for pid in path_ids:
            path = snapshot.paths[pid]
            kept = [v for v in path.open_ids() if v in coord_map]
            sequences[pid] = close_sequence(kept, path.closed)
        seen = {v for pid in path_ids for v in snapshot.paths[pid].vertex_ids}
        removed = sorted(seen - set(coord_map))
        return Merge(sequences, dict(coord_map), removed)

    def decimate(self, snapshot: DatasetSnapshot, path_id: int) -> Decimation:
        m = self.merge(snapshot, [path_id])
        return Decimation(path_id, m.sequences[path_id], m.removed, m.moved)
