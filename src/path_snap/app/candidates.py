from collections.abc import Iterable

from path_snap.config.models import CandidateModel
from path_snap.domain.entities.geography import Path
from path_snap.domain.state import DatasetSnapshot


def accepts_tags(path: Path, cfg: CandidateModel) -> bool:
    """Land cover, water areas and roads are things worth snapping to."""
    tags = path.tags
    natural = tags.get("natural") in cfg.natural
    landuse = "landuse" in tags and tags["landuse"] not in cfg.ignored_landuse
    waterway = tags.get("waterway") in cfg.waterway
    highway = cfg.highway and "highway" in tags
    return natural or landuse or waterway or highway


def select_candidates(
    snapshot: DatasetSnapshot, cfg: CandidateModel, exclude: Iterable[int] = ()
) -> list[int]:
    skip = set(exclude)
    out = []
    for pid in sorted(snapshot.paths):
        path = snapshot.paths[pid]
        if pid in skip or len(path.vertex_ids) < 2 or not accepts_tags(path, cfg):
            continue
        if snapshot.path_length_m(pid) < cfg.min_length_m:
            continue
        out.append(pid)
    return out
