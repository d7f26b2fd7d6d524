"""Action, turn and round scheduling.

The cycle is ``PlayerActing(active) -> RoundEnd -> PlayerActing(1)``. Each
player gets ``actions_per_turn`` actions per turn and ``turns_per_round``
turns per round. Reinforcements are handed out once, at the round boundary,
and every transition ends with a session checkpoint so observers (autosave)
see each intermediate state.
"""

from __future__ import annotations

import logging

from hexwar.domain.models import PlayerID
from hexwar.domain.session import GameSession

logger = logging.getLogger(__name__)


def consume_action(session: GameSession) -> None:
    """Spend one action of the active player, ending the turn when none are left."""

    state = session.turn_state
    state.actions_taken += 1
    logger.debug(
        "player %d used an action (%d remaining)",
        state.active_player,
        session.actions_remaining,
    )
    if session.actions_remaining <= 0:
        state.actions_taken = 0
        end_turn(session)
    session.checkpoint()


def end_turn(session: GameSession) -> None:
    """Close the active player's turn and hand over to the next one."""

    state = session.turn_state
    state.actions_taken = 0
    state.turns_taken += 1

    if session.turns_remaining <= 0:
        end_round(session)
        state.turns_taken = 0
        session.checkpoint()
        return

    state.active_player = next_player(state.active_player, session.rules.player_count)
    logger.debug("turn passed to player %d", state.active_player)
    session.checkpoint()


def end_round(session: GameSession) -> None:
    """Grant reinforcements to every player's tiles and restart with player 1."""

    board = session.board
    bonus = session.rules.reinforcements_per_turn
    state = session.turn_state

    reinforced = 0
    for player_id in range(1, session.rules.player_count + 1):
        for index in sorted(board.player_tiles(player_id)):
            board.set_army(index, board.tile(index).army + bonus)
            reinforced += 1

    state.round_number += 1
    state.active_player = PlayerID(1)
    logger.info(
        "round ended: reinforced %d tiles by %d, now round %d",
        reinforced,
        bonus,
        state.round_number,
    )
    if session.is_over:
        logger.info("game %s reached its round limit", session.game_id)
    session.checkpoint()


def next_player(current: int, player_count: int) -> PlayerID:
    """Player following ``current`` in the cyclic order ``1..player_count``."""

    return PlayerID(current % player_count + 1)
