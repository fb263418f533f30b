import pytest

from path_snap.app.hooks import NoopHooks
from path_snap.domain.entities.commands import DeleteVertex, InsertVertex, ReplacePathSequence
from path_snap.domain.mechanics.mechanics_reconciler import reconcile
from path_snap.domain.mechanics.mechanics_run_tracker import track_runs

EQUATOR = {10: (0.0, 0.0), 11: (0.0, 0.001), 12: (0.0, 0.002), 13: (0.0, 0.003)}
WEAVE = {
    1: (0.001, -0.001),
    2: (0.00005, 0.0005),
    3: (0.00005, 0.0015),
    4: (0.001, 0.002),
    5: (0.00005, 0.0025),
    6: (0.001, 0.004),
}


class DegenerateHooks(NoopHooks):
    def __init__(self):
        self.paths = []

    def degenerate(self, *, path_id, reason):
        self.paths.append(path_id)


def _run(snap, src=1, dst=2, threshold=10.0, hooks=None):
    runs = track_runs(snap, src, dst, threshold)
    return reconcile(snap, src, dst, runs, hooks=hooks)


def test_weaving_source_shares_junctions_with_destination(make_snapshot):
    snap = make_snapshot({**EQUATOR, **WEAVE}, {1: [1, 2, 3, 4, 5, 6], 2: [10, 11, 12, 13]})
    rec = _run(snap)
    j1, j2, j3 = (v.id for v in rec.created)
    # 11 sat collinear between the two junctions and was simplified out of the source
    assert rec.source_ids == [1, j1, j2, 4, j3, 6]
    assert rec.destination_ids == [10, j1, 11, j2, 12, j3, 13]
    assert rec.orphaned == [2, 3, 5]
    assert rec.changed and not rec.degenerate
    assert all(j < 0 for j in (j1, j2, j3))
    assert rec.created[0].coord.lon == pytest.approx(0.0005)
    assert rec.created[2].coord.lon == pytest.approx(0.0025)


def test_commands_insert_then_replace_then_delete(make_snapshot):
    snap = make_snapshot({**EQUATOR, **WEAVE}, {1: [1, 2, 3, 4, 5, 6], 2: [10, 11, 12, 13]})
    cmds = _run(snap).commands()
    kinds = [type(c) for c in cmds]
    assert kinds == [InsertVertex] * 3 + [ReplacePathSequence] * 2 + [DeleteVertex] * 3
    out = snap.applied(cmds)
    shared = set(out.paths[1].vertex_ids) & set(out.paths[2].vertex_ids)
    assert len(shared) == 3
    assert not ({2, 3, 5} & set(out.vertices))


def test_orphans_still_used_elsewhere_are_kept(make_snapshot):
    extra = {20: (0.01, 0.01)}
    snap = make_snapshot(
        {**EQUATOR, **WEAVE, **extra}, {1: [1, 2, 3, 4, 5, 6], 2: [10, 11, 12, 13], 3: [3, 20]}
    )
    rec = _run(snap)
    # 3 is a branch now, so it is not snappable and stays in the source
    assert 3 in rec.source_ids
    assert 3 not in rec.orphaned


def test_tagged_orphan_is_not_deleted(make_snapshot):
    snap = make_snapshot({**EQUATOR, **WEAVE}, {1: [1, 2, 3, 4, 5, 6], 2: [10, 11, 12, 13]})
    runs = track_runs(snap, 1, 2, 10.0)
    snap.vertices[2].tags["note"] = "survey point"
    rec = reconcile(snap, 1, 2, runs)
    assert 2 not in rec.source_ids
    assert rec.orphaned == [3, 5]


def test_closed_destination_copy_wraps_through_the_seam(make_snapshot):
    square = {10: (0.0, 0.0), 11: (0.0, 0.002), 12: (0.002, 0.002), 13: (0.002, 0.0)}
    src = {
        1: (0.0015, -0.001),
        2: (0.0015, -0.00005),
        3: (0.0005, -0.00005),
        4: (-0.00005, 0.0005),
        5: (-0.00005, 0.0015),
        6: (-0.001, 0.0015),
    }
    snap = make_snapshot({**square, **src}, {1: [1, 2, 3, 4, 5, 6], 2: [10, 11, 12, 13, 10]})
    rec = _run(snap)
    j1, j2 = (v.id for v in rec.created)
    assert rec.source_ids == [1, j1, 10, j2, 6]
    assert rec.destination_ids == [10, j2, 11, 12, 13, j1, 10]
    assert rec.orphaned == [2, 3, 4, 5]


def test_collapsed_closed_source_is_left_alone(make_snapshot):
    line = {10: (0.0, 0.0), 11: (0.0, 0.001)}
    tri = {1: (0.00003, 0.0001), 2: (0.00003, 0.0002), 3: (0.00006, 0.00015)}
    snap = make_snapshot({**line, **tri}, {1: [1, 2, 3, 1], 2: [10, 11]})
    hooks = DegenerateHooks()
    rec = _run(snap, hooks=hooks)
    assert rec.degenerate and not rec.changed
    assert rec.commands() == []
    assert rec.source_ids == [1, 2, 3, 1]
    assert hooks.paths == [1]


def test_no_intervals_changes_nothing(make_snapshot):
    snap = make_snapshot({**EQUATOR, **WEAVE}, {1: [1, 2, 3, 4, 5, 6], 2: [10, 11, 12, 13]})
    rec = reconcile(snap, 1, 2, [])
    assert not rec.changed
    assert rec.commands() == []
    assert rec.source_ids == [1, 2, 3, 4, 5, 6]


def test_closed_source_stays_closed(make_snapshot):
    ring = {1: (0.00005, 0.0005), 2: (0.00005, 0.0015), 3: (0.001, 0.0015), 4: (0.001, 0.0005)}
    snap = make_snapshot({**EQUATOR, **ring}, {1: [1, 2, 3, 4, 1], 2: [10, 11, 12, 13]})
    rec = _run(snap)
    j1, j2 = (v.id for v in rec.created)
    assert rec.source_ids == [j1, j2, 3, 4, j1]
    assert rec.source_ids[0] == rec.source_ids[-1]
    assert len(set(rec.source_ids)) >= 3
    assert rec.destination_ids == [10, j1, 11, j2, 12, 13]
    assert rec.orphaned == [1, 2]
