from collections.abc import Callable, Mapping

from path_snap.domain.entities.geography import Coordinate
from path_snap.domain.mechanics.mechanics_geodesy import turn_angle

DEFAULT_ANGLE_EPSILON_DEG = 0.5


def fix_small_angles(
    ids: list[int],
    coords: Mapping[int, Coordinate],
    *,
    epsilon_deg: float = DEFAULT_ANGLE_EPSILON_DEG,
    keep: Callable[[int], bool] | None = None,
) -> list[int]:
    """
    Drop interior vertices that duplicate their predecessor's coordinate or turn
    by less than epsilon_deg. First and last entries are never touched, and
    sequences of 3 or fewer vertices come back unchanged.
    """
    out = list(ids)
    removed = True
    while removed and len(out) > 3:
        removed = False
        for k in range(1, len(out) - 1):
            if keep is not None and keep(out[k]):
                continue
            a, b, c = coords[out[k - 1]], coords[out[k]], coords[out[k + 1]]
            if a == b or turn_angle(a, b, c) < epsilon_deg:
                del out[k]
                removed = True
                break
    return out
