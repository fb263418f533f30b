import math
from collections.abc import Iterable
from dataclasses import dataclass, field

# Mean earth radius used for every great-circle computation, meters
R = 6_378_135.0


# Core geometry types used by mechanics
@dataclass(frozen=True)
class Coordinate:
    lat: float  # degrees
    lon: float

    def distance(self, other: "Coordinate") -> float:
        """Great-circle (haversine) distance in meters."""
        s_lat = math.sin(math.radians(other.lat - self.lat) / 2)
        s_lon = math.sin(math.radians(other.lon - self.lon) / 2)
        h = s_lat * s_lat + (
            math.cos(math.radians(self.lat)) * math.cos(math.radians(other.lat)) * s_lon * s_lon
        )
        return 2 * R * math.asin(math.sqrt(min(1.0, h)))

    def center(self, other: "Coordinate") -> "Coordinate":
        """Spherical midpoint of the great-circle arc between self and other."""
        phi1, lam1 = math.radians(self.lat), math.radians(self.lon)
        phi2, dlam = math.radians(other.lat), math.radians(other.lon - self.lon)
        bx = math.cos(phi2) * math.cos(dlam)
        by = math.cos(phi2) * math.sin(dlam)
        phi = math.atan2(math.sin(phi1) + math.sin(phi2), math.hypot(math.cos(phi1) + bx, by))
        lam = lam1 + math.atan2(by, math.cos(phi1) + bx)
        return Coordinate(math.degrees(phi), (math.degrees(lam) + 540.0) % 360.0 - 180.0)


@dataclass
class Vertex:
    id: int
    coord: Coordinate
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def tagged(self) -> bool:
        return bool(self.tags)


@dataclass
class Path:
    id: int
    vertex_ids: list[int]
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def closed(self) -> bool:
        return len(self.vertex_ids) > 2 and self.vertex_ids[0] == self.vertex_ids[-1]

    def open_ids(self) -> list[int]:
        """Vertex ids with the closing duplicate stripped."""
        return self.vertex_ids[:-1] if self.closed else list(self.vertex_ids)


def close_sequence(ids: list[int], closed: bool) -> list[int]:
    return [*ids, ids[0]] if closed and ids else list(ids)


@dataclass(frozen=True)
class Projection:
    coord: Coordinate
    distance: float  # meters, great-circle from the query point
    index: int  # first endpoint of the segment


@dataclass
class ReplacementInterval:
    src_start: int
    src_end: int
    dst_start: int
    dst_end: int
    src_anchor: Coordinate | None = None
    dst_anchor: Coordinate | None = None
    direction: int = 0  # -1 | 0 | +1


@dataclass(frozen=True)
class BoundingBox:
    lat_min: float
    lon_min: float
    lat_max: float
    lon_max: float

    @classmethod
    def of(cls, coords: Iterable[Coordinate]) -> "BoundingBox":
        cs = list(coords)
        if not cs:
            raise ValueError("bounding box of an empty coordinate set")
        lats, lons = [c.lat for c in cs], [c.lon for c in cs]
        return cls(min(lats), min(lons), max(lats), max(lons))

    def contains(self, c: Coordinate) -> bool:
        return self.lat_min <= c.lat <= self.lat_max and self.lon_min <= c.lon <= self.lon_max

    def min_distance(self, c: Coordinate) -> float:
        """Lower bound (meters) of the great-circle distance from c to any point in the box."""
        dlat = max(0.0, self.lat_min - c.lat, c.lat - self.lat_max)
        dlon = max(0.0, self.lon_min - c.lon, c.lon - self.lon_max)
        if max(self.lon_max, c.lon) - min(self.lon_min, c.lon) > 180.0:
            dlon = 0.0  # antimeridian ambiguity, rely on latitude only
        if dlat == 0.0 and dlon == 0.0:
            return 0.0
        # cos(lat1)*cos(lat2) is bounded below by cos^2 of the largest |lat| involved
        phi_m = math.radians(max(abs(c.lat), abs(self.lat_min), abs(self.lat_max)))
        s_lat = math.sin(math.radians(dlat) / 2)
        s_lon = math.sin(math.radians(dlon) / 2)
        h = s_lat * s_lat + (math.cos(phi_m) ** 2) * s_lon * s_lon
        return 2 * R * math.asin(math.sqrt(min(1.0, h)))
