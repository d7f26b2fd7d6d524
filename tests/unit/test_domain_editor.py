"""Tests for the map editor."""

from __future__ import annotations

from hexwar.domain.editor import Brush, apply_brush, enter_editor, exit_editor
from hexwar.domain.enums import OwnerKind, Rejection
from hexwar.domain.models import BLOCKED, NEUTRAL, UNUSED, owned
from hexwar.domain.movement import execute_movement
from hexwar.domain.rules_config import Rules
from hexwar.domain.session import new_session
from hexwar.utils.hex_math import hex_region


class TestEditor:
    """Painting a blank canvas and turning it into a game."""

    def test_canvas_starts_unused(self) -> None:
        session = enter_editor(Rules(), radius=3)
        assert session.editing
        assert len(session.board) == len(list(hex_region(3, 3)))
        assert all(tile.owner == UNUSED for tile in session.board)

    def test_brush_sets_owner_and_army(self) -> None:
        session = enter_editor(Rules(), radius=2)
        index = session.board.index_at(0, 0)

        assert apply_brush(session, index, Brush(owner=owned(2), army=4))

        tile = session.board.tile(index)
        assert tile.owner == owned(2)
        assert tile.army == 4
        assert session.board.player_tiles(2) == frozenset({index})

    def test_brush_army_is_capped(self) -> None:
        session = enter_editor(Rules(max_army_strength=5), radius=1)
        index = session.board.index_at(0, 0)
        apply_brush(session, index, Brush(owner=NEUTRAL, army=9))
        assert session.board.tile(index).army == 5

    def test_unused_brush_does_not_write_army(self) -> None:
        session = enter_editor(Rules(), radius=1)
        index = session.board.index_at(1, 0)
        apply_brush(session, index, Brush(owner=BLOCKED, army=2))

        apply_brush(session, index, Brush(owner=UNUSED, army=7))

        tile = session.board.tile(index)
        assert tile.owner.kind == OwnerKind.UNUSED
        assert tile.army == 2

    def test_brush_outside_editor_is_ignored(self) -> None:
        session = new_session(Rules(), radius=1)
        index = session.board.index_at(0, 0)
        assert not apply_brush(session, index, Brush(owner=owned(1), army=3))
        assert session.board.tile(index).owner == NEUTRAL

    def test_brush_unknown_index(self) -> None:
        session = enter_editor(Rules(), radius=1)
        assert not apply_brush(session, 99, Brush(owner=NEUTRAL))

    def test_gameplay_is_refused_while_editing(self) -> None:
        session = enter_editor(Rules(), radius=1)
        a, b = session.board.index_at(0, 0), session.board.index_at(1, 0)
        apply_brush(session, a, Brush(owner=owned(1), army=3))
        apply_brush(session, b, Brush(owner=NEUTRAL))
        assert execute_movement(session, a, b).error == Rejection.EDITOR_ACTIVE

    def test_exit_editor_starts_a_game(self) -> None:
        session = enter_editor(Rules(), radius=1)
        a, b = session.board.index_at(0, 0), session.board.index_at(1, 0)
        apply_brush(session, a, Brush(owner=owned(1), army=3))
        apply_brush(session, b, Brush(owner=NEUTRAL))
        session.turn_state.round_number = 4

        exit_editor(session)

        assert not session.editing
        assert session.turn_state.round_number == 1
        assert session.active_player == 1
        assert execute_movement(session, a, b).valid
