"""Tests for the UI command layer."""

from __future__ import annotations

import pytest

from hexwar.domain.combat import DiceRollerUnavailableError
from hexwar.domain.commands import (
    end_turn_now,
    request_attack,
    request_move,
    select_tile,
    set_movement_mode,
)
from hexwar.domain.enums import AttackResult, Rejection
from hexwar.domain.models import owned
from hexwar.domain.rules_config import Rules
from hexwar.domain.session import GameSession, new_session


class ScriptedRoller:
    def __init__(self, attack_sum: int, defend_sum: int) -> None:
        self.sums = (attack_sum, defend_sum)

    async def roll_combat(self, attacker_army: int, defender_army: int) -> tuple[int, int]:
        return self.sums


def _session(rules: Rules | None = None) -> GameSession:
    return new_session(
        rules or Rules(),
        radius=2,
        starting_tiles=[
            (0, 0, owned(1), 3),
            (0, -1, owned(1), 0),
            (1, 0, owned(2), 2),
        ],
    )


def _idx(session: GameSession, q: int, r: int) -> int:
    return session.board.index_at(q, r)


class TestSelectTile:
    """Click handling outside and inside movement mode."""

    def test_selecting_an_armed_tile_enters_movement_mode(self) -> None:
        session = _session()
        home = _idx(session, 0, 0)

        result = select_tile(session, home)

        assert result.valid
        assert result.selected == home
        assert result.movement_mode
        assert _idx(session, -1, 0) in result.reachable
        assert _idx(session, 1, 0) not in result.reachable
        assert session.selected == home

    def test_clicking_the_selection_again_cancels_it(self) -> None:
        session = _session()
        home = _idx(session, 0, 0)
        select_tile(session, home)

        result = select_tile(session, home)

        assert result.valid
        assert result.selected is None
        assert not result.movement_mode
        assert session.turn_state.actions_taken == 0

    def test_clicking_a_destination_moves_there(self) -> None:
        session = _session()
        home, dest = _idx(session, 0, 0), _idx(session, -1, 0)
        select_tile(session, home)

        result = select_tile(session, dest)

        assert result.valid
        assert result.path == (home, dest)
        assert result.selected is None
        assert not result.movement_mode
        assert session.board.tile(dest).owner == owned(1)
        assert session.board.tile(dest).army == 2
        assert session.turn_state.actions_taken == 1

    def test_clicking_an_enemy_in_movement_mode_is_refused(self) -> None:
        session = _session()
        home = _idx(session, 0, 0)
        select_tile(session, home)

        result = select_tile(session, _idx(session, 1, 0))

        assert result.error == Rejection.INVALID_TARGET
        assert result.selected == home
        assert result.movement_mode

    @pytest.mark.parametrize(
        ("coord", "expected"),
        [
            ((-1, 0), Rejection.NOT_ACTIVE_PLAYER),
            ((1, 0), Rejection.NOT_ACTIVE_PLAYER),
            ((0, -1), Rejection.INSUFFICIENT_ARMY),
        ],
    )
    def test_invalid_sources(self, coord, expected) -> None:
        session = _session()
        result = select_tile(session, _idx(session, *coord))
        assert result.error == expected
        assert session.selected is None

    def test_unknown_index(self) -> None:
        session = _session()
        assert select_tile(session, 500).error == Rejection.NOT_FOUND

    def test_refused_in_editor(self) -> None:
        session = _session()
        session.editing = True
        assert select_tile(session, _idx(session, 0, 0)).error == Rejection.EDITOR_ACTIVE


class TestOtherCommands:
    def test_request_move(self) -> None:
        session = _session()
        result = request_move(session, _idx(session, 0, 0), _idx(session, 0, 1))
        assert result.valid
        assert session.board.tile(_idx(session, 0, 1)).army == 2

    def test_request_move_reports_rejection(self) -> None:
        session = _session()
        result = request_move(session, _idx(session, 0, 0), _idx(session, 1, 0))
        assert result.error == Rejection.INVALID_TARGET

    def test_turning_movement_mode_off_drops_selection(self) -> None:
        session = _session()
        select_tile(session, _idx(session, 0, 0))

        result = set_movement_mode(session, False)

        assert result.valid
        assert result.selected is None
        assert session.preview is None
        assert not session.movement_mode

    def test_turning_movement_mode_on_keeps_selection(self) -> None:
        session = _session()
        session.selected = _idx(session, 0, 0)
        result = set_movement_mode(session, True)
        assert result.movement_mode
        assert result.reachable

    def test_end_turn_now(self) -> None:
        session = _session()
        select_tile(session, _idx(session, 0, 0))

        result = end_turn_now(session)

        assert result.valid
        assert session.active_player == 2
        assert session.selected is None

    def test_end_turn_refused_after_last_round(self) -> None:
        session = _session(Rules(rounds_per_game=1))
        end_turn_now(session)
        end_turn_now(session)
        assert session.is_over
        assert end_turn_now(session).error == Rejection.GAME_OVER

    @pytest.mark.asyncio
    async def test_request_attack(self) -> None:
        session = _session()
        result = await request_attack(
            session, _idx(session, 0, 0), _idx(session, 1, 0), ScriptedRoller(10, 2)
        )
        assert result.valid
        assert result.attack is not None
        assert result.attack.result == AttackResult.ATTACKER_WON
        assert session.board.tile(_idx(session, 1, 0)).owner == owned(1)

    @pytest.mark.asyncio
    async def test_request_attack_without_roller(self) -> None:
        session = _session()
        with pytest.raises(DiceRollerUnavailableError):
            await request_attack(session, _idx(session, 0, 0), _idx(session, 1, 0), None)
