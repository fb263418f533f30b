import math

from path_snap.domain.entities.geography import R, Coordinate

# Squared (degree) length below which a segment is treated as a single point
DEGENERATE_SEGMENT_SQ = 1e-14


def distance(a: Coordinate, b: Coordinate) -> float:
    return a.distance(b)


def heading(a: Coordinate, b: Coordinate) -> float:
    """Initial bearing from a to b, radians in [0, 2*pi)."""
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    dlam = math.radians(b.lon - a.lon)
    hd = math.atan2(
        math.sin(dlam) * math.cos(phi2),
        math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlam),
    )
    return hd % (2 * math.pi)


def turn_angle(prev: Coordinate, mid: Coordinate, nxt: Coordinate) -> float:
    """Change of heading at mid, degrees in [0, 180]; 0 means straight on."""
    angle = abs(heading(mid, nxt) - heading(prev, mid))
    return math.degrees(angle if angle < math.pi else 2 * math.pi - angle)


def segment_fraction(p: Coordinate, b: Coordinate, c: Coordinate) -> float:
    """Clamped projection parameter of p on [b, c], computed in (lon, lat) space."""
    px, py = c.lon - b.lon, c.lat - b.lat
    sq = px * px + py * py
    if sq < DEGENERATE_SEGMENT_SQ:
        return 0.0
    t = ((p.lon - b.lon) * px + (p.lat - b.lat) * py) / sq
    return min(1.0, max(0.0, t))


def project_onto_segment(p: Coordinate, b: Coordinate, c: Coordinate) -> tuple[Coordinate, float]:
    """
    Foot of p on segment [b, c] and its great-circle distance to p.

    The segment is treated as a straight line in (lon, lat) space, so the foot
    only roughly follows the geodesic between b and c. Good enough for the
    short segments snapping deals with.
    """
    t = segment_fraction(p, b, c)
    proj = Coordinate(b.lat + t * (c.lat - b.lat), b.lon + t * (c.lon - b.lon))
    return proj, p.distance(proj)


def triangle_area(a: Coordinate, b: Coordinate, c: Coordinate) -> float:
    """Heron's formula on great-circle side lengths, square meters."""
    x, y, z = a.distance(b), b.distance(c), c.distance(a)
    s = (x + y + z) / 2.0
    q = s * (s - x) * (s - y) * (s - z)
    # near-collinear triples can go slightly negative
    return 0.0 if q < 0.0 else math.sqrt(q)


def cross_track_error(l1: Coordinate, l2: Coordinate, l3: Coordinate) -> float:
    """
    Signed lateral offset (meters) of l2 from the great circle l1 -> l3.

    With (prev, this, next) this is how far `this` sits off the chord that
    would replace it.
    """
    s = math.sin(l1.distance(l2) / R) * math.sin(heading(l1, l2) - heading(l1, l3))
    return R * math.asin(max(-1.0, min(1.0, s)))
