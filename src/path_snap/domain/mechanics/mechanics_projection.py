from collections.abc import Sequence

import numpy as np

from path_snap.domain.entities.geography import R, Coordinate, Projection
from path_snap.domain.mechanics.mechanics_geodesy import DEGENERATE_SEGMENT_SQ


def _haversine_m(lat0: float, lon0: float, lat: np.ndarray, lon: np.ndarray) -> np.ndarray:
    phi0, phi = np.radians(lat0), np.radians(lat)
    s_lat = np.sin(np.radians(lat - lat0) / 2)
    s_lon = np.sin(np.radians(lon - lon0) / 2)
    h = s_lat * s_lat + np.cos(phi0) * np.cos(phi) * s_lon * s_lon
    return 2 * R * np.arcsin(np.sqrt(np.minimum(1.0, h)))


def nearest_point_on_path(p: Coordinate, coords: Sequence[Coordinate]) -> Projection:
    """
    Project p onto every segment of the polyline and keep the closest foot.

    Segments are handled in (lon, lat) space exactly as in
    `mechanics_geodesy.project_onto_segment`; ties resolve to the lowest
    segment index.
    """
    if len(coords) < 2:
        raise ValueError(f"need at least 2 vertices to project onto, got {len(coords)}")
    lat = np.fromiter((c.lat for c in coords), dtype=float, count=len(coords))
    lon = np.fromiter((c.lon for c in coords), dtype=float, count=len(coords))
    bx, by = lon[:-1], lat[:-1]
    px, py = lon[1:] - bx, lat[1:] - by
    sq = px * px + py * py
    degenerate = sq < DEGENERATE_SEGMENT_SQ
    with np.errstate(divide="ignore", invalid="ignore"):
        t = ((p.lon - bx) * px + (p.lat - by) * py) / sq
    t = np.clip(np.where(degenerate, 0.0, t), 0.0, 1.0)
    f_lat, f_lon = by + t * py, bx + t * px
    d = _haversine_m(p.lat, p.lon, f_lat, f_lon)
    k = int(np.argmin(d))
    return Projection(Coordinate(float(f_lat[k]), float(f_lon[k])), float(d[k]), k)
