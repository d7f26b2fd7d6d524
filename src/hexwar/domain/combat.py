"""Attack resolution between two adjacent tiles.

Each side rolls one six-sided die per army point. Equal sums leave both
tiles with a single army. Otherwise the winner keeps
``army - floor(army * losing_sum / winning_sum)`` on the conquered (or
defended) tile and the winner's own tile drops to one army. The loser's
tile always changes hands to the winning player.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from hexwar.domain.enums import AttackResult, Rejection
from hexwar.domain.models import TileIndex, owned
from hexwar.domain.session import GameSession
from hexwar.domain.turns import consume_action
from hexwar.interfaces.dice import IDiceRoller
from hexwar.utils.hex_math import hex_distance

logger = logging.getLogger(__name__)


class DiceRollerUnavailableError(RuntimeError):
    """Raised when an attack is requested but no dice roller is configured."""


@dataclass(slots=True)
class AttackOutcome:
    """Result of an attack request."""

    valid: bool
    error: Rejection | None = None
    message: str | None = None
    result: AttackResult | None = None
    attack_sum: int = 0
    defend_sum: int = 0
    winner: int | None = None
    result_army: int | None = None

    @classmethod
    def rejected(cls, error: Rejection, message: str) -> AttackOutcome:
        return cls(valid=False, error=error, message=message)


@dataclass(frozen=True, slots=True)
class AttackPreview:
    attacker: TileIndex
    defender: TileIndex
    attacker_army: int
    defender_army: int


def resolve_combat(
    attacker_army: int,
    defender_army: int,
    attack_sum: int,
    defend_sum: int,
) -> tuple[AttackResult, int]:
    """Classify a roll and compute the army left on the loser's tile.

    Returns ``(result, result_army)``; ``result_army`` is 1 for a tie.
    """

    if attack_sum == defend_sum:
        return AttackResult.TIE, 1

    if attack_sum > defend_sum:
        result = AttackResult.ATTACKER_WON
        winning_army, winning_sum, losing_sum = attacker_army, attack_sum, defend_sum
    else:
        result = AttackResult.DEFENDER_WON
        winning_army, winning_sum, losing_sum = defender_army, defend_sum, attack_sum

    losses = (winning_army * losing_sum) // winning_sum
    return result, max(0, winning_army - losses)


def _validate(session: GameSession, from_index: int, to_index: int) -> AttackOutcome | None:
    blocker = session.mutation_blocker()
    if blocker is not None:
        return AttackOutcome.rejected(*blocker)

    board = session.board
    attacker = board.tile(from_index)
    defender = board.tile(to_index)
    if attacker is None or defender is None:
        return AttackOutcome.rejected(Rejection.NOT_FOUND, "unknown tile index")

    player = session.active_player
    if not attacker.owner.is_owned_by(player):
        return AttackOutcome.rejected(
            Rejection.NOT_ACTIVE_PLAYER, f"tile {attacker.index} is not held by player {player}"
        )
    if attacker.army < 1:
        return AttackOutcome.rejected(Rejection.INSUFFICIENT_ARMY, "attacking tile has no army")
    if not defender.owner.is_enemy_of(player):
        return AttackOutcome.rejected(
            Rejection.INVALID_TARGET, f"tile {defender.index} is not held by an opponent"
        )
    if hex_distance(attacker.coord, defender.coord) != 1:
        return AttackOutcome.rejected(Rejection.NOT_ADJACENT, "attacks reach adjacent tiles only")
    return None


async def execute_attack(
    session: GameSession,
    from_index: int,
    to_index: int,
    roller: IDiceRoller | None,
) -> AttackOutcome:
    """Resolve an attack by the active player from ``from_index`` on ``to_index``.

    The session stays busy while the roller is awaited; any other mutating
    command issued in the meantime is rejected.

    Args:
        session: Session whose active player attacks
        from_index: Index of the attacking tile
        to_index: Index of the adjacent enemy tile
        roller: Dice roller awaited for the two sums

    Returns:
        AttackOutcome with the sums and result, or a rejection when the
        attack is not allowed

    Raises:
        DiceRollerUnavailableError: If ``roller`` is ``None``
    """

    if roller is None:
        raise DiceRollerUnavailableError("no dice roller is configured for this session")

    rejection = _validate(session, from_index, to_index)
    if rejection is not None:
        return rejection

    board = session.board
    async with session.attack_lock:
        # An attack queued on the lock may find the board changed.
        rejection = _validate(session, from_index, to_index)
        if rejection is not None:
            return rejection

        attacker = board.tile(from_index)
        defender = board.tile(to_index)
        attacker_army, defender_army = attacker.army, defender.army

        session.attack_in_flight = True
        try:
            attack_sum, defend_sum = await roller.roll_combat(attacker_army, defender_army)
        finally:
            session.attack_in_flight = False

        result, result_army = resolve_combat(attacker_army, defender_army, attack_sum, defend_sum)
        winner: int | None = None
        if result == AttackResult.TIE:
            board.set_army(attacker.index, 1)
            board.set_army(defender.index, 1)
        else:
            if result == AttackResult.ATTACKER_WON:
                winner = session.active_player
                winner_tile, loser_tile = attacker, defender
            else:
                winner = defender.owner.player_id
                winner_tile, loser_tile = defender, attacker
            board.set_owner(loser_tile.index, owned(winner))
            board.set_army(loser_tile.index, result_army)
            board.set_army(winner_tile.index, 1)

        logger.debug(
            "attack %d(%d) -> %d(%d): rolled %d vs %d, %s",
            attacker.index,
            attacker_army,
            defender.index,
            defender_army,
            attack_sum,
            defend_sum,
            result,
        )

        session.clear_selection()
        session.movement_mode = False
        consume_action(session)

    return AttackOutcome(
        valid=True,
        result=result,
        attack_sum=attack_sum,
        defend_sum=defend_sum,
        winner=winner,
        result_army=result_army,
    )


def attack_preview(session: GameSession, from_index: int, to_index: int) -> AttackPreview | None:
    """Describe the attack ``from_index -> to_index`` if it would be accepted."""

    if _validate(session, from_index, to_index) is not None:
        return None
    attacker = session.board.tile(from_index)
    defender = session.board.tile(to_index)
    return AttackPreview(
        attacker=attacker.index,
        defender=defender.index,
        attacker_army=attacker.army,
        defender_army=defender.army,
    )
