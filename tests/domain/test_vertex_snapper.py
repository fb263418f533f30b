import pytest

from path_snap.domain.entities.commands import MoveVertex, ReplacePathSequence
from path_snap.domain.mechanics.mechanics_vertex_snapper import movable_vertices, snap_vertices

LINE = {10: (0.0, 0.0), 11: (0.0, 0.001), 12: (0.0, 0.002)}


def test_vertex_is_moved_and_inserted_after_segment_start(make_snapshot):
    verts = {**LINE, 1: (0.00005, 0.0005), 2: (0.001, 0.0005)}
    snap = make_snapshot(verts, {1: [1, 2], 2: [10, 11, 12]})
    res = snap_vertices(snap, [1, 2], [2], 10.0)
    assert list(res.moved) == [1]
    assert res.moved[1].lat == pytest.approx(0.0, abs=1e-12)
    assert res.moved[1].lon == pytest.approx(0.0005)
    assert res.sequences == {2: [10, 1, 11, 12]}
    cmds = res.commands()
    assert cmds == [MoveVertex(1, res.moved[1]), ReplacePathSequence(2, (10, 1, 11, 12))]


def test_later_vertices_see_earlier_insertions(make_snapshot):
    verts = {**LINE, 1: (0.00005, 0.0003), 3: (0.00005, 0.0007)}
    snap = make_snapshot(verts, {1: [1, 3], 2: [10, 11, 12]})
    res = snap_vertices(snap, [1, 3], [2], 10.0)
    assert res.sequences[2] == [10, 1, 3, 11, 12]


def test_first_candidate_wins(make_snapshot):
    verts = {**LINE, 1: (0.00005, 0.0005), 20: (0.0001, 0.0), 21: (0.0001, 0.002)}
    snap = make_snapshot(verts, {1: [1, 11], 2: [10, 11, 12], 3: [20, 21]})
    res = snap_vertices(snap, [1], [3, 2], 10.0)
    assert set(res.sequences) == {3}
    assert res.moved[1].lat == pytest.approx(0.0001)


def test_vertices_already_on_candidate_are_skipped(make_snapshot):
    verts = {**LINE, 1: (0.00005, 0.0005)}
    snap = make_snapshot(verts, {1: [1, 11], 2: [10, 11, 12]})
    res = snap_vertices(snap, [11], [2], 10.0)
    assert res.commands() == []


def test_movable_excludes_protected(make_snapshot):
    verts = {**LINE, 1: (0.00005, 0.0005), 2: (0.001, 0.0005)}
    snap = make_snapshot(verts, {1: [1, 2, 11], 2: [10, 11, 12]}, tags={2: {"man_made": "mast"}})
    # 11 glues the two paths, 2 carries tags
    assert movable_vertices(snap, [1]) == [1]
