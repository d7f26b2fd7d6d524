"""Tile collection, coordinate lookup and ownership bookkeeping.

The tile's ``owner`` field is the single source of truth for ownership. The
per-player index sets exist only for fast "tiles of player N" queries and
are maintained exclusively by :meth:`Board.set_owner`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from hexwar.domain.models import (
    NEUTRAL,
    OwnerTag,
    PlayerID,
    Tile,
    TileChange,
    TileIndex,
)
from hexwar.utils.hex_math import HexCoord, hex_region

logger = logging.getLogger(__name__)

TileListener = Callable[[TileChange], None]


class Board:
    """Ordered tiles plus the ``(q, r) -> index`` map and per-player index sets."""

    def __init__(self, *, max_army_strength: int = 0) -> None:
        self.max_army_strength = max_army_strength
        self._tiles: list[Tile] = []
        self._index_by_coord: dict[tuple[int, int], TileIndex] = {}
        self._player_tiles: dict[PlayerID, set[TileIndex]] = {}
        self._listeners: list[TileListener] = []

    @classmethod
    def hexagon(cls, q_radius: int, r_radius: int, *, max_army_strength: int = 0) -> Board:
        """Build a board covering ``hex_region(q_radius, r_radius)``."""

        board = cls(max_army_strength=max_army_strength)
        board.reset_to(q_radius, r_radius)
        return board

    # -- read access -------------------------------------------------------------

    @property
    def tiles(self) -> Sequence[Tile]:
        return tuple(self._tiles)

    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self):
        return iter(self._tiles)

    def tile(self, index: int) -> Tile | None:
        if 0 <= index < len(self._tiles):
            return self._tiles[index]
        logger.warning("tile index %s out of range (board has %d tiles)", index, len(self._tiles))
        return None

    def index_at(self, q: int, r: int) -> TileIndex | None:
        return self._index_by_coord.get((q, r))

    def tile_at(self, q: int, r: int) -> Tile | None:
        index = self._index_by_coord.get((q, r))
        return self._tiles[index] if index is not None else None

    def index_of(self, coord: HexCoord) -> TileIndex | None:
        return self._index_by_coord.get((coord.q, coord.r))

    def player_tiles(self, player_id: int) -> frozenset[TileIndex]:
        """Indices currently owned by ``player_id``."""

        return frozenset(self._player_tiles.get(PlayerID(player_id), ()))

    def players(self) -> list[PlayerID]:
        """Player ids owning at least one tile, ascending."""

        return sorted(pid for pid, indices in self._player_tiles.items() if indices)

    # -- listeners ---------------------------------------------------------------

    def add_listener(self, listener: TileListener) -> None:
        """Register a callback invoked after every ownership or army change."""

        self._listeners.append(listener)

    def remove_listener(self, listener: TileListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, tile: Tile) -> None:
        change = TileChange(index=tile.index, owner=tile.owner, army=tile.army)
        for listener in list(self._listeners):
            listener(change)

    # -- mutation ----------------------------------------------------------------

    def set_owner(self, index: int | Iterable[int], owner: OwnerTag) -> bool:
        """Transfer one or many tiles to ``owner``.

        Returns False as soon as an index is out of range; indices processed
        before it keep their new owner.
        """

        indices = [index] if isinstance(index, int) else list(index)
        for idx in indices:
            tile = self.tile(idx)
            if tile is None:
                return False

            previous = tile.owner
            if previous.is_player:
                self._player_tiles[previous.player_id].discard(tile.index)
            if owner.is_player:
                self._player_tiles.setdefault(owner.player_id, set()).add(tile.index)
            tile.owner = owner

            if previous != owner:
                self._notify(tile)
        return True

    def clamp_army(self, value: int) -> int:
        """Clamp to ``[0, max_army_strength]``; a cap of 0 means no upper bound."""

        value = max(0, value)
        if self.max_army_strength:
            value = min(value, self.max_army_strength)
        return value

    def set_army(self, index: int, value: int) -> bool:
        """Set army strength, clamped to ``[0, max_army_strength]`` when capped."""

        tile = self.tile(index)
        if tile is None:
            return False

        value = self.clamp_army(value)
        if tile.army != value:
            tile.army = value
            self._notify(tile)
        return True

    def assign_all(self, owner: OwnerTag) -> None:
        """Give every tile to ``owner``."""

        self.set_owner(range(len(self._tiles)), owner)

    def reset_to(self, q_radius: int, r_radius: int) -> None:
        """Recreate the tiles as a hexagonal region of Neutral, empty tiles."""

        self._tiles = []
        self._index_by_coord = {}
        self._player_tiles = {}
        for position, coord in enumerate(hex_region(q_radius, r_radius)):
            index = TileIndex(position)
            self._tiles.append(Tile(q=coord.q, r=coord.r, index=index, owner=NEUTRAL, army=0))
            self._index_by_coord[(coord.q, coord.r)] = index
        logger.debug(
            "board reset to %d tiles (q radius %d, r radius %d)",
            len(self._tiles),
            q_radius,
            r_radius,
        )
