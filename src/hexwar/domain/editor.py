"""Map editor: a blank canvas of Unused tiles painted with an owner/army brush."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from hexwar.domain.board import Board
from hexwar.domain.enums import OwnerKind
from hexwar.domain.models import UNUSED, OwnerTag, TurnState
from hexwar.domain.rules_config import DEFAULT_RULES, Rules
from hexwar.domain.session import GameSession

logger = logging.getLogger(__name__)

EDITOR_RADIUS = 8


@dataclass(frozen=True, slots=True)
class Brush:
    """What a brush stroke writes onto a tile. Defaults erase the tile."""

    owner: OwnerTag = UNUSED
    army: int = 0


def enter_editor(rules: Rules = DEFAULT_RULES, *, radius: int = EDITOR_RADIUS) -> GameSession:
    """Open an editing session on a ``radius`` hexagon with every tile Unused."""

    board = Board.hexagon(radius, radius, max_army_strength=rules.max_army_strength)
    board.assign_all(UNUSED)
    logger.info("map editor opened with %d tiles", len(board))
    return GameSession(board=board, rules=rules, editing=True)


def apply_brush(session: GameSession, index: int, brush: Brush) -> bool:
    """Paint ``brush`` onto the tile at ``index``.

    The owner is replaced when it differs; the army is written unless the
    tile ends up Unused. Returns False outside the editor or for an unknown
    index.
    """

    if not session.editing:
        logger.warning("brush ignored: session %s is not in the editor", session.game_id)
        return False

    tile = session.board.tile(index)
    if tile is None:
        return False

    if tile.owner != brush.owner:
        session.board.set_owner(tile.index, brush.owner)
    if tile.owner.kind != OwnerKind.UNUSED and tile.army != brush.army:
        session.board.set_army(tile.index, brush.army)
    return True


def exit_editor(session: GameSession) -> None:
    """Turn the edited board into a playable game starting at round 1."""

    session.editing = False
    session.turn_state = TurnState()
    session.clear_selection()
    session.movement_mode = False
