from collections import defaultdict
from dataclasses import dataclass, field

from path_snap.app.hooks import EngineHooks, NoopHooks
from path_snap.domain.entities.commands import (
    Command,
    DeleteVertex,
    InsertVertex,
    ReplacePathSequence,
)
from path_snap.domain.entities.geography import (
    Coordinate,
    ReplacementInterval,
    Vertex,
    close_sequence,
)
from path_snap.domain.mechanics.mechanics_geodesy import segment_fraction
from path_snap.domain.mechanics.mechanics_run_tracker import with_terminator
from path_snap.domain.mechanics.mechanics_simplifier import (
    DEFAULT_ANGLE_EPSILON_DEG,
    fix_small_angles,
)
from path_snap.domain.state import DatasetSnapshot


@dataclass
class Reconciliation:
    source_id: int
    destination_id: int
    source_ids: list[int]
    destination_ids: list[int]
    created: list[Vertex] = field(default_factory=list)
    orphaned: list[int] = field(default_factory=list)
    changed: bool = False
    degenerate: bool = False

    def commands(self) -> list[Command]:
        if not self.changed:
            return []
        out: list[Command] = [InsertVertex(v.id, v.coord) for v in self.created]
        out.append(ReplacePathSequence(self.source_id, tuple(self.source_ids)))
        out.append(ReplacePathSequence(self.destination_id, tuple(self.destination_ids)))
        out.extend(DeleteVertex(vid) for vid in self.orphaned)
        return out


def _sign(x: int) -> int:
    return (x > 0) - (x < 0)


def _dst_between(
    dst_ids: list[int], iv: ReplacementInterval, closed: bool
) -> list[int]:
    """Destination vertices strictly between the two junctions of an interval."""
    # the start of dst_start's segment lies behind the first junction and is not copied
    s, e, m = iv.dst_start, iv.dst_end, len(dst_ids)
    step = iv.direction or _sign(e - s) or 1
    if not closed and e != s:
        # an open destination cannot wrap, so the index order decides
        step = _sign(e - s)
    if step > 0:
        k, count = s + 1, (e - s) % m
    else:
        k, count = s, (s - e) % m
    out = []
    for _ in range(count):
        out.append(dst_ids[k % m])
        k += step
    return out


def reconcile(
    snapshot: DatasetSnapshot,
    source_id: int,
    destination_id: int,
    intervals: list[ReplacementInterval],
    *,
    angle_epsilon_deg: float = DEFAULT_ANGLE_EPSILON_DEG,
    hooks: EngineHooks | None = None,
) -> Reconciliation:
    """
    Splice the destination into the source along the given intervals.

    Every run of source vertices is replaced by a junction at its first anchor,
    the destination vertices the run travelled past, and (for runs longer than one
    vertex) a junction at its last anchor. Junctions are inserted into the
    destination too, so both paths share them afterwards.
    """
    hooks = hooks or NoopHooks()
    src, dst = snapshot.paths[source_id], snapshot.paths[destination_id]
    src_ids, dst_ids = src.open_ids(), dst.open_ids()
    dst_full = snapshot.coords(dst.vertex_ids)
    unchanged = Reconciliation(source_id, destination_id, list(src.vertex_ids), list(dst.vertex_ids))
    if not intervals:
        return unchanged

    coords: dict[int, Coordinate] = {vid: snapshot.coord(vid) for vid in (*src_ids, *dst_ids)}
    created: list[Vertex] = []
    inserts: dict[int, list[tuple[float, int]]] = defaultdict(list)

    def junction(at: Coordinate, segment: int) -> int:
        v = Vertex(snapshot.new_vertex_id(), at)
        created.append(v)
        coords[v.id] = at
        t = segment_fraction(at, dst_full[segment], dst_full[segment + 1])
        inserts[segment % len(dst_ids)].append((t, v.id))
        return v.id

    n = len(src_ids)
    padded = with_terminator(intervals, n)
    out: list[int] = []
    cursor, i = 0, 0
    while i < n:
        iv = padded[cursor]
        if i < iv.src_start:
            out.append(src_ids[i])
            i += 1
            continue
        out.append(junction(iv.src_anchor, iv.dst_start))
        out.extend(_dst_between(dst_ids, iv, dst.closed))
        if iv.src_start != iv.src_end:
            out.append(junction(iv.dst_anchor, iv.dst_end))
        cursor += 1
        i = iv.src_end + 1

    new_dst: list[int] = []
    for k, vid in enumerate(dst_ids):
        new_dst.append(vid)
        new_dst.extend(j for _, j in sorted(inserts.get(k, ())))

    # only the spliced source is cleaned; junctions stay so both paths keep sharing them
    junctions = {v.id for v in created}
    out = fix_small_angles(
        out,
        coords,
        epsilon_deg=angle_epsilon_deg,
        keep=lambda vid: vid in junctions or snapshot.is_protected(vid),
    )

    for path, seq in ((src, out), (dst, new_dst)):
        if path.closed and len(set(seq)) < 3:
            hooks.degenerate(path_id=path.id, reason="closed path below 3 vertices")
            unchanged.degenerate = True
            return unchanged

    new_src = close_sequence(out, src.closed)
    new_dst = close_sequence(new_dst, dst.closed)
    live = set(new_src) | set(new_dst)
    rewritten = {source_id, destination_id}
    orphaned = sorted(
        vid
        for vid in set(src_ids) | set(dst_ids)
        if vid not in live
        and not snapshot.vertices[vid].tagged
        and not (snapshot.referrers(vid) - rewritten)
    )
    return Reconciliation(
        source_id,
        destination_id,
        new_src,
        new_dst,
        created=[v for v in created if v.id in live],
        orphaned=orphaned,
        changed=new_src != src.vertex_ids or new_dst != dst.vertex_ids,
    )
