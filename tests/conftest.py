import pytest

from path_snap.domain.entities.geography import Coordinate, Path, Vertex
from path_snap.domain.state import DatasetSnapshot


@pytest.fixture
def make_snapshot():
    """
    make_snapshot({1: (lat, lon), ...}, {10: [1, 2], ...}, tags={1: {...}}, path_tags={10: {...}})
    """

    def _make(vertices, paths, *, tags=None, path_tags=None) -> DatasetSnapshot:
        tags, path_tags = tags or {}, path_tags or {}
        return DatasetSnapshot.build(
            (Vertex(vid, Coordinate(*ll), dict(tags.get(vid, {}))) for vid, ll in vertices.items()),
            (Path(pid, list(ids), dict(path_tags.get(pid, {}))) for pid, ids in paths.items()),
        )

    return _make
