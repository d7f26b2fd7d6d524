"""Army relocation along a path.

A move leaves one army on the source tile, drops one army on every tile it
crosses (claiming it for the mover) and deposits whatever is left on the
destination. Armies are conserved: ``army(source) - 1`` equals the number of
interior tiles plus the remainder delivered to the destination.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from hexwar.domain.board import Board
from hexwar.domain.enums import OwnerKind, Rejection
from hexwar.domain.models import TileIndex, owned
from hexwar.domain.pathfinding import find_path, reachable_set
from hexwar.domain.session import GameSession
from hexwar.domain.turns import consume_action
from hexwar.utils.hex_math import hex_distance

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MovementOutcome:
    """Result of a movement request; ``path`` is empty unless the move happened."""

    valid: bool
    error: Rejection | None = None
    message: str | None = None
    path: tuple[TileIndex, ...] = ()

    @classmethod
    def rejected(cls, error: Rejection, message: str) -> MovementOutcome:
        return cls(valid=False, error=error, message=message)


@dataclass(frozen=True, slots=True)
class MovementPlan:
    """Projected army values along a movement path, computed without mutation.

    For a move onto an enemy tile ``path`` stops at the last tile the mover
    can reach and ``attack_target`` names the enemy tile.
    """

    source: TileIndex
    target: TileIndex
    path: tuple[TileIndex, ...]
    projected: tuple[int, ...]
    attack_target: TileIndex | None = None

    def projected_armies(self) -> dict[TileIndex, int]:
        return dict(zip(self.path, self.projected, strict=True))


def project_stack(board: Board, path: list[TileIndex], remainder: int) -> list[int]:
    """Army values after moving along ``path`` and dropping ``remainder`` at its end."""

    projected: list[int] = []
    last = len(path) - 1
    for position, index in enumerate(path):
        original = board.tile(index).army
        if position == 0:
            value = 1
        elif position == last:
            value = original + remainder
        else:
            value = original + 1
        projected.append(board.clamp_army(value))
    return projected


def plan_movement(
    board: Board,
    from_index: int,
    to_index: int,
    mover: int,
) -> MovementPlan | None:
    """Preview a move from ``from_index`` to ``to_index`` for ``mover``.

    Returns ``None`` when nothing would happen: a missing tile, the same tile,
    a Blocked or Unused target, an enemy that is not adjacent, no path within
    the source's army, or not enough army to reach the target.
    """

    source = board.tile(from_index)
    target = board.tile(to_index)
    if source is None or target is None or source.index == target.index:
        return None
    if target.owner.kind in (OwnerKind.BLOCKED, OwnerKind.UNUSED):
        return None

    path = find_path(board, source.coord, target.coord, mover, source.army)
    if len(path) <= 1:
        return None

    if target.owner.is_enemy_of(mover):
        if hex_distance(source.coord, target.coord) > 1:
            return None
        prefix = path[:-1]
        # The prefix never ends on the destination, so every step after the
        # source only receives one army.
        projected = [board.clamp_army(1)] + [
            board.clamp_army(board.tile(index).army + 1) for index in prefix[1:]
        ]
        return MovementPlan(
            source=source.index,
            target=target.index,
            path=tuple(prefix),
            projected=tuple(projected),
            attack_target=target.index,
        )

    remainder = source.army - (len(path) - 1)
    if remainder <= 0:
        return None
    return MovementPlan(
        source=source.index,
        target=target.index,
        path=tuple(path),
        projected=tuple(project_stack(board, path, remainder)),
    )


def execute_movement(
    session: GameSession,
    from_index: int,
    to_index: int,
    *,
    count_as_action: bool = True,
) -> MovementOutcome:
    """Move the army on ``from_index`` towards ``to_index`` for the active player.

    Args:
        session: Session whose active player moves
        from_index: Index of a tile held by the active player
        to_index: Index of a Neutral or friendly destination
        count_as_action: Whether the move spends one of the turn's actions

    Returns:
        MovementOutcome carrying the path taken, or the rejection reason
    """

    blocker = session.mutation_blocker()
    if blocker is not None:
        return MovementOutcome.rejected(*blocker)

    board = session.board
    source = board.tile(from_index)
    target = board.tile(to_index)
    if source is None or target is None:
        return MovementOutcome.rejected(Rejection.NOT_FOUND, "unknown tile index")

    mover = session.active_player
    if not source.owner.is_owned_by(mover):
        return MovementOutcome.rejected(
            Rejection.NOT_ACTIVE_PLAYER, f"tile {source.index} is not held by player {mover}"
        )
    if source.index == target.index:
        return MovementOutcome.rejected(Rejection.SAME_TILE, "source and destination are the same")
    if not (target.owner.kind == OwnerKind.NEUTRAL or target.owner.is_owned_by(mover)):
        return MovementOutcome.rejected(
            Rejection.INVALID_TARGET, f"cannot move onto a {target.owner} tile"
        )

    path_length = hex_distance(source.coord, target.coord)
    remainder = source.army - path_length
    if remainder <= 0:
        return MovementOutcome.rejected(
            Rejection.INSUFFICIENT_ARMY,
            f"need more than {path_length} army, have {source.army}",
        )

    path = find_path(board, source.coord, target.coord, mover, path_length + 1)
    if not path:
        return MovementOutcome.rejected(
            Rejection.UNREACHABLE, f"no path from tile {source.index} to tile {target.index}"
        )

    hops = len(path) - 1
    if hops != path_length:
        remainder = source.army - hops
        if remainder <= 0:
            return MovementOutcome.rejected(
                Rejection.INSUFFICIENT_ARMY,
                f"detour of {hops} tiles needs more than {source.army} army",
            )

    projected = project_stack(board, path, remainder)
    originals = [board.tile(index).army for index in path]
    owner = owned(mover)
    for position, index in enumerate(path):
        if position > 0:
            board.set_owner(index, owner)
        board.set_army(index, projected[position])

    logger.debug("player %d moved %s -> %s along %s", mover, originals, projected, path)

    session.clear_selection()
    session.movement_mode = False
    if count_as_action:
        consume_action(session)
    return MovementOutcome(valid=True, path=tuple(path))


def movement_preview(session: GameSession, to_index: int) -> MovementPlan | None:
    """Preview a move from the selected tile and remember it on the session."""

    session.clear_preview()
    if not session.movement_mode or session.selected is None:
        return None
    plan = plan_movement(session.board, session.selected, to_index, session.active_player)
    session.preview = plan
    return plan


def reachable_tiles(session: GameSession) -> set[TileIndex]:
    """Tiles the selected army can move onto and still leave a remainder."""

    if session.selected is None:
        return set()
    source = session.board.tile(session.selected)
    if source is None:
        return set()
    return reachable_set(session.board, source.index, session.active_player, source.army - 1)
