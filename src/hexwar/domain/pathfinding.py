"""Path and range queries over the board.

Both queries are breadth-first searches expanding neighbors in the fixed
order of :func:`hexwar.utils.hex_math.hex_neighbors`. Edges are unweighted,
so the first path found is a shortest one; among equally short paths the one
discovered first under that order wins.

Blocking rule for a mover: a tile may be entered only if it is Neutral or
owned by the mover. Blocked tiles and tiles owned by another player are
never entered nor crossed. ``find_path`` makes one exception: the target
itself may end a path whatever its owner, which is how attack targets are
reached. Unused tiles are off the map and behave as if absent.
"""

from __future__ import annotations

import logging
from collections import deque

from hexwar.domain.board import Board
from hexwar.domain.enums import OwnerKind
from hexwar.domain.models import OwnerTag, TileIndex
from hexwar.utils.hex_math import HexCoord, hex_neighbors

logger = logging.getLogger(__name__)


def is_passable(owner: OwnerTag, mover: int) -> bool:
    """Whether ``mover`` may enter and continue through a tile with ``owner``."""

    if owner.kind == OwnerKind.NEUTRAL:
        return True
    return owner.is_owned_by(mover)


def _on_map_index(board: Board, coord: HexCoord) -> TileIndex | None:
    index = board.index_of(coord)
    if index is None:
        return None
    tile = board.tile(index)
    if tile is None or tile.owner.kind == OwnerKind.UNUSED:
        return None
    return index


def find_path(
    board: Board,
    start: HexCoord,
    target: HexCoord,
    mover: int,
    max_dist: int,
) -> list[TileIndex]:
    """Shortest path of tile indices from ``start`` to ``target`` (both included).

    Args:
        board: Board to search
        start: Coordinate the mover stands on
        target: Coordinate to reach; may be hostile
        mover: Player ID used for the blocking rule
        max_dist: Maximum number of hops

    Returns:
        Tile indices from start to target, or an empty list when an endpoint
        is off the map, when start equals target, or when the target is out
        of reach within ``max_dist`` hops
    """

    start_index = _on_map_index(board, start)
    target_index = _on_map_index(board, target)
    if start_index is None or target_index is None:
        logger.debug("no path: endpoint missing (%s -> %s)", start, target)
        return []
    if start_index == target_index or max_dist <= 0:
        return []

    queue: deque[tuple[TileIndex, int]] = deque([(start_index, 0)])
    previous: dict[TileIndex, TileIndex] = {}
    visited: set[TileIndex] = {start_index}

    while queue:
        index, dist = queue.popleft()
        if dist >= max_dist:
            break

        tile = board.tile(index)
        for neighbor in hex_neighbors(tile.coord):
            n_index = _on_map_index(board, neighbor)
            if n_index is None or n_index in visited:
                continue

            if n_index == target_index:
                previous[n_index] = index
                return _reconstruct(previous, start_index, target_index)

            if not is_passable(board.tile(n_index).owner, mover):
                continue

            visited.add(n_index)
            previous[n_index] = index
            queue.append((n_index, dist + 1))

    return []


def reachable_set(
    board: Board,
    start_index: int,
    mover: int,
    max_dist: int,
) -> set[TileIndex]:
    """Indices reachable from ``start_index`` in 1..``max_dist`` hops.

    Uses the same blocking rule as :func:`find_path` without the target
    exception, so hostile tiles are never part of the result.

    Args:
        board: Board to search
        start_index: Index of the tile the mover stands on
        mover: Player ID used for the blocking rule
        max_dist: Maximum number of hops

    Returns:
        Set of reachable tile indices, excluding the start tile
    """

    start = board.tile(start_index)
    if start is None or max_dist <= 0:
        return set()

    reachable: set[TileIndex] = set()
    visited: set[TileIndex] = {start.index}
    queue: deque[tuple[TileIndex, int]] = deque([(start.index, 0)])

    while queue:
        index, dist = queue.popleft()
        if dist > 0:
            reachable.add(index)
        if dist >= max_dist:
            continue

        tile = board.tile(index)
        for neighbor in hex_neighbors(tile.coord):
            n_index = _on_map_index(board, neighbor)
            if n_index is None or n_index in visited:
                continue
            if not is_passable(board.tile(n_index).owner, mover):
                continue
            visited.add(n_index)
            queue.append((n_index, dist + 1))

    return reachable


def _reconstruct(
    previous: dict[TileIndex, TileIndex],
    start_index: TileIndex,
    target_index: TileIndex,
) -> list[TileIndex]:
    path = [target_index]
    current = target_index
    while current != start_index:
        current = previous[current]
        path.append(current)
    path.reverse()
    return path
