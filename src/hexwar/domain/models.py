"""Dataclasses describing the Hexwar game entities.

These are plain in-memory structures; the rules layer mutates them through
:class:`hexwar.domain.board.Board` and the engine functions, and the
persistence layer translates them to and from serialized documents.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NewType

from hexwar.utils.hex_math import HexCoord

from .enums import OwnerKind

# --- Strongly typed identifiers -------------------------------------------------

PlayerID = NewType("PlayerID", int)
TileIndex = NewType("TileIndex", int)


# --- Ownership ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class OwnerTag:
    """Who a tile belongs to.

    Exactly one of ``Unused``, ``Neutral``, ``Blocked`` or ``Owned(player_id)``.
    Only the ``PLAYER`` kind carries a player id. Build instances through the
    module constants and :func:`owned` rather than directly.
    """

    kind: OwnerKind
    player_id: PlayerID | None = None

    def __post_init__(self) -> None:
        if self.kind == OwnerKind.PLAYER:
            if self.player_id is None or self.player_id < 1:
                raise ValueError(f"player owner needs a positive player id, got {self.player_id}")
        elif self.player_id is not None:
            raise ValueError(f"{self.kind} owner cannot carry a player id")

    @property
    def is_player(self) -> bool:
        return self.kind == OwnerKind.PLAYER

    def is_owned_by(self, player_id: int) -> bool:
        return self.kind == OwnerKind.PLAYER and self.player_id == player_id

    def is_enemy_of(self, player_id: int) -> bool:
        """True when the tile is held by a player other than ``player_id``."""

        return self.kind == OwnerKind.PLAYER and self.player_id != player_id

    def __str__(self) -> str:
        if self.kind == OwnerKind.PLAYER:
            return f"player {self.player_id}"
        return str(self.kind)


UNUSED = OwnerTag(OwnerKind.UNUSED)
NEUTRAL = OwnerTag(OwnerKind.NEUTRAL)
BLOCKED = OwnerTag(OwnerKind.BLOCKED)


def owned(player_id: int) -> OwnerTag:
    """Owner tag for a player-held tile."""

    return OwnerTag(OwnerKind.PLAYER, PlayerID(player_id))


# --- Core dataclasses -----------------------------------------------------------


@dataclass(slots=True)
class Tile:
    """Map hex tile."""

    q: int
    r: int
    index: TileIndex
    owner: OwnerTag = NEUTRAL
    army: int = 0

    @property
    def coord(self) -> HexCoord:
        return HexCoord(q=self.q, r=self.r)


@dataclass(frozen=True, slots=True)
class TileChange:
    """Notification emitted by the board after a tile mutation."""

    index: TileIndex
    owner: OwnerTag
    army: int


@dataclass(slots=True)
class TurnState:
    """Position within the action/turn/round cycle.

    ``actions_taken`` and ``turns_taken`` count what has been used in the
    current turn and round; ``round_number`` starts at 1.
    """

    active_player: PlayerID = PlayerID(1)
    actions_taken: int = 0
    turns_taken: int = 0
    round_number: int = 1
