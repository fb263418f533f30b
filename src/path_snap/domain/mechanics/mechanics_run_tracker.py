import math
from dataclasses import replace

from path_snap.app.hooks import EngineHooks, NoopHooks
from path_snap.domain.entities.geography import BoundingBox, Projection, ReplacementInterval
from path_snap.domain.mechanics.mechanics_projection import nearest_point_on_path
from path_snap.domain.state import DatasetSnapshot


def _sign(x: int) -> int:
    return (x > 0) - (x < 0)


def _step(old: int, new: int, ring: int) -> int:
    """Sign of the move between segment indices; on a closed ring the shorter way round."""
    if not ring:
        return _sign(new - old)
    diff = (new - old) % ring
    return _sign(diff - ring if diff * 2 > ring else diff)


def scan_distances(
    snapshot: DatasetSnapshot, source_id: int, destination_id: int, threshold_m: float
) -> list[Projection | None]:
    """
    Projection of every source vertex (closing duplicate excluded) onto the destination.

    None marks an unsnappable vertex: branch, tagged, already on the destination,
    or provably farther than the threshold from the destination's bounding box.
    """
    src = snapshot.paths[source_id]
    dst = snapshot.paths[destination_id]
    dst_coords = snapshot.coords(dst.vertex_ids)
    if len(dst_coords) < 2:
        raise ValueError(f"destination path {destination_id} has fewer than 2 vertices")
    on_dst = set(dst.vertex_ids)
    bbox = BoundingBox.of(dst_coords)

    out: list[Projection | None] = []
    for vid in src.open_ids():
        c = snapshot.coord(vid)
        if snapshot.is_protected(vid) or vid in on_dst or bbox.min_distance(c) > threshold_m:
            out.append(None)
        else:
            out.append(nearest_point_on_path(c, dst_coords))
    return out


def track_runs(
    snapshot: DatasetSnapshot,
    source_id: int,
    destination_id: int,
    threshold_m: float,
    *,
    hooks: EngineHooks | None = None,
) -> list[ReplacementInterval]:
    """Turn the per-vertex proximity scan into maximal snappable runs."""
    hooks = hooks or NoopHooks()
    dst = snapshot.paths[destination_id]
    ring = len(dst.open_ids()) if dst.closed else 0
    scan = scan_distances(snapshot, source_id, destination_id, threshold_m)
    intervals: list[ReplacementInterval] = []
    cur: ReplacementInterval | None = None

    def close(iv: ReplacementInterval):
        intervals.append(iv)
        hooks.interval_closed(iv, source_id=source_id, destination_id=destination_id)

    for i, proj in enumerate(scan):
        d = proj.distance if proj is not None else math.inf
        if d <= threshold_m:
            if cur is None:
                cur = ReplacementInterval(
                    src_start=i,
                    src_end=i,
                    dst_start=proj.index,
                    dst_end=proj.index,
                    src_anchor=proj.coord,
                    dst_anchor=proj.coord,
                )
                continue
            step = _step(cur.dst_end, proj.index, ring)
            direction = cur.direction
            if step and not direction:
                direction = step
            elif step and step != direction:
                # projection jumped to another branch of the destination; keep tracking
                hooks.direction_reversal(
                    source_id=source_id,
                    destination_id=destination_id,
                    index=i,
                    previous=cur.dst_end,
                    current=proj.index,
                )
            cur = replace(
                cur, src_end=i, dst_end=proj.index, dst_anchor=proj.coord, direction=direction
            )
        elif cur is not None:
            close(cur)
            cur = None
    if cur is not None:
        close(cur)
    return intervals


def with_terminator(intervals: list[ReplacementInterval], n: int) -> list[ReplacementInterval]:
    """Append the sentinel interval that starts one past the last source index."""
    return [*intervals, ReplacementInterval(src_start=n, src_end=n, dst_start=-1, dst_end=-1)]
