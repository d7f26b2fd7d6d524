"""Commands issued by the user interface.

These functions are the only entry points the presentation layer needs:
they translate clicks and button presses into engine calls on an explicit
:class:`~hexwar.domain.session.GameSession` and report refusals as
:class:`CommandResult` values instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from hexwar.domain import turns
from hexwar.domain.combat import AttackOutcome, execute_attack
from hexwar.domain.enums import Rejection
from hexwar.domain.models import TileIndex
from hexwar.domain.movement import MovementOutcome, execute_movement, reachable_tiles
from hexwar.domain.session import GameSession
from hexwar.interfaces.dice import IDiceRoller

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CommandResult:
    """Outcome of a UI command plus the interaction state it left behind."""

    valid: bool
    error: Rejection | None = None
    message: str | None = None
    selected: TileIndex | None = None
    movement_mode: bool = False
    reachable: frozenset[TileIndex] = field(default_factory=frozenset)
    path: tuple[TileIndex, ...] = ()
    attack: AttackOutcome | None = None

    @classmethod
    def rejected(cls, session: GameSession, error: Rejection, message: str) -> CommandResult:
        logger.debug("command rejected (%s): %s", error, message)
        return cls(
            valid=False,
            error=error,
            message=message,
            selected=session.selected,
            movement_mode=session.movement_mode,
        )

    @classmethod
    def accepted(cls, session: GameSession, **extra) -> CommandResult:
        return cls(
            valid=True,
            selected=session.selected,
            movement_mode=session.movement_mode,
            **extra,
        )


def _from_movement(session: GameSession, outcome: MovementOutcome) -> CommandResult:
    if not outcome.valid:
        return CommandResult.rejected(session, outcome.error, outcome.message)
    return CommandResult.accepted(session, path=outcome.path)


def select_tile(session: GameSession, index: int) -> CommandResult:
    """Handle a click on ``index``.

    Outside movement mode a click on one of the active player's armed tiles
    selects it as a movement source. In movement mode a click on the source
    cancels the selection and a click anywhere else moves there.
    """

    blocker = session.mutation_blocker()
    if blocker is not None:
        return CommandResult.rejected(session, *blocker)

    tile = session.board.tile(index)
    if tile is None:
        return CommandResult.rejected(session, Rejection.NOT_FOUND, f"no tile at index {index}")

    if session.selected is not None and tile.index == session.selected:
        session.clear_selection()
        session.movement_mode = False
        return CommandResult.accepted(session)

    player = session.active_player
    if session.movement_mode and session.selected is not None:
        if tile.owner.is_enemy_of(player):
            return CommandResult.rejected(
                session, Rejection.INVALID_TARGET, f"tile {tile.index} belongs to an opponent"
            )
        return _from_movement(session, execute_movement(session, session.selected, tile.index))

    if not tile.owner.is_owned_by(player):
        return CommandResult.rejected(
            session,
            Rejection.NOT_ACTIVE_PLAYER,
            f"tile {tile.index} is not held by player {player}",
        )
    if tile.army <= 0:
        return CommandResult.rejected(
            session, Rejection.INSUFFICIENT_ARMY, f"tile {tile.index} has no army to move"
        )

    session.clear_preview()
    session.movement_mode = True
    session.selected = tile.index
    return CommandResult.accepted(session, reachable=frozenset(reachable_tiles(session)))


def request_move(session: GameSession, from_index: int, to_index: int) -> CommandResult:
    return _from_movement(session, execute_movement(session, from_index, to_index))


async def request_attack(
    session: GameSession,
    from_index: int,
    to_index: int,
    roller: IDiceRoller | None,
) -> CommandResult:
    """Attack ``to_index`` from ``from_index``.

    Raises:
        DiceRollerUnavailableError: If ``roller`` is ``None``
    """

    outcome = await execute_attack(session, from_index, to_index, roller)
    if not outcome.valid:
        return CommandResult.rejected(session, outcome.error, outcome.message)
    return CommandResult.accepted(session, attack=outcome)


def set_movement_mode(session: GameSession, enabled: bool) -> CommandResult:
    """Switch movement mode; turning it off drops any preview and selection."""

    if session.attack_in_flight:
        return CommandResult.rejected(
            session, Rejection.ATTACK_IN_PROGRESS, "an attack is being resolved"
        )

    if enabled:
        session.movement_mode = True
        reachable = frozenset(reachable_tiles(session))
        return CommandResult.accepted(session, reachable=reachable)

    session.clear_selection()
    session.movement_mode = False
    return CommandResult.accepted(session)


def end_turn_now(session: GameSession) -> CommandResult:
    """Give up the remaining actions of the active player."""

    blocker = session.mutation_blocker()
    if blocker is not None:
        return CommandResult.rejected(session, *blocker)

    session.clear_selection()
    session.movement_mode = False
    turns.end_turn(session)
    return CommandResult.accepted(session)
