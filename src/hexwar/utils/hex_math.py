"""
Axial hex-grid math used by the board, pathfinding and save files.

Tiles are addressed by axial coordinates ``(q, r)``. Distances are taken in
cube space, where ``x = q``, ``z = r`` and ``y = -q - r``, so that the
distance between two hexes is the largest of the three cube deltas.

A board is a *region*: every ``(q, r)`` with ``|q| <= q_radius``,
``|r| <= r_radius`` and ``|q + r| <= r_radius``. With equal radii that is a
regular hexagon of ``3n^2 + 3n + 1`` tiles. The enumeration order of
:func:`hex_region` defines tile indices.

References:
-----------
https://www.redblobgames.com/grids/hexagons/
"""

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class HexCoord:
    """
    Axial position of a hex tile.

    Example:
        >>> hex_distance(HexCoord(q=0, r=0), HexCoord(q=1, r=0))
        1
    """

    q: int
    r: int

    def __hash__(self) -> int:
        return hash((self.q, self.r))


def axial_to_cube(coord: HexCoord) -> tuple[int, int, int]:
    """
    Cube coordinates ``(x, y, z)`` of ``coord``; they always sum to zero.

    Example:
        >>> axial_to_cube(HexCoord(q=1, r=2))
        (1, -3, 2)
    """
    return coord.q, -coord.q - coord.r, coord.r


def hex_distance(a: HexCoord, b: HexCoord) -> int:
    """
    Number of single-hex steps between ``a`` and ``b``.

    Example:
        >>> hex_distance(HexCoord(q=0, r=0), HexCoord(q=2, r=1))
        3
    """
    ax, ay, az = axial_to_cube(a)
    bx, by, bz = axial_to_cube(b)
    return max(abs(ax - bx), abs(ay - by), abs(az - bz))


# Axial offsets of the six neighbors: E, NE, NW, W, SW, SE.
# Breadth-first searches expand in this order, which makes it the tie-break
# between equally short paths.
NEIGHBOR_DIRECTIONS: tuple[tuple[int, int], ...] = (
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, 0),
    (-1, 1),
    (0, 1),
)


def hex_neighbors(coord: HexCoord) -> list[HexCoord]:
    """The six hexes adjacent to ``coord``, in ``NEIGHBOR_DIRECTIONS`` order."""
    return [HexCoord(q=coord.q + dq, r=coord.r + dr) for dq, dr in NEIGHBOR_DIRECTIONS]


def hex_region(q_radius: int, r_radius: int) -> list[HexCoord]:
    """
    Enumerate a board region, q ascending in the outer loop and r in the inner.

    Raises:
        ValueError: If either radius is negative

    Example:
        >>> len(hex_region(1, 1))
        7
    """
    if q_radius < 0 or r_radius < 0:
        raise ValueError(f"Radii must be non-negative, got ({q_radius}, {r_radius})")

    coords: list[HexCoord] = []
    for q in range(-q_radius, q_radius + 1):
        r_low = max(-r_radius, -q - r_radius)
        r_high = min(r_radius, -q + r_radius)
        coords.extend(HexCoord(q=q, r=r) for r in range(r_low, r_high + 1))
    return coords


def region_radii(coords: Iterable[HexCoord]) -> tuple[int, int]:
    """
    Smallest ``(q_radius, r_radius)`` whose region contains every coordinate.

    The r radius also has to bound ``|q + r|``.

    Example:
        >>> region_radii([HexCoord(q=2, r=2)])
        (2, 4)
    """
    q_radius = 0
    r_radius = 0
    for coord in coords:
        q_radius = max(q_radius, abs(coord.q))
        r_radius = max(r_radius, abs(coord.r), abs(coord.q + coord.r))
    return q_radius, r_radius
