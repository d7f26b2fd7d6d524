"""Tests for autosave and named-map persistence."""

from __future__ import annotations

import json

import pytest

from hexwar.domain.editor import Brush, apply_brush, enter_editor
from hexwar.domain.enums import OwnerKind
from hexwar.domain.models import BLOCKED, NEUTRAL, UNUSED, owned
from hexwar.domain.movement import execute_movement
from hexwar.domain.rules_config import Rules
from hexwar.domain.session import GameSession, new_session
from hexwar.repository import MemoryStore, PersistenceUnavailableError
from hexwar.savegame import (
    AUTOSAVE_KEY,
    MAP_PREFIX,
    PersistenceGateway,
    TileEntry,
    build_board,
    decode_owner,
    encode_owner,
)


class BrokenStore:
    """Store whose every operation fails like an unreachable backend."""

    def get(self, key: str) -> str | None:
        raise PersistenceUnavailableError("backend offline")

    def set(self, key: str, value: str) -> None:
        raise PersistenceUnavailableError("backend offline")

    def remove(self, key: str) -> None:
        raise PersistenceUnavailableError("backend offline")

    def list_keys(self, prefix: str = "") -> list[str]:
        raise PersistenceUnavailableError("backend offline")


def _session() -> GameSession:
    session = new_session(
        Rules(),
        radius=2,
        starting_tiles=[
            (0, 0, owned(1), 4),
            (1, 0, BLOCKED, 0),
            (-1, 1, owned(2), 3),
        ],
    )
    session.board.set_owner(session.board.index_at(2, -2), UNUSED)
    return session


class TestOwnerEncoding:
    @pytest.mark.parametrize(
        ("owner", "encoded"),
        [(owned(3), 3), (BLOCKED, 0), (NEUTRAL, "undefined")],
    )
    def test_round_trip(self, owner, encoded) -> None:
        assert encode_owner(owner) == encoded
        assert decode_owner(encoded) == owner

    def test_unused_is_not_encodable(self) -> None:
        with pytest.raises(ValueError):
            encode_owner(UNUSED)

    def test_missing_and_negative_ids(self) -> None:
        assert decode_owner(None) == NEUTRAL
        assert decode_owner(-1) == UNUSED


class TestAutosave:
    """Autosave document layout and restore."""

    def test_document_layout(self) -> None:
        store = MemoryStore()
        gateway = PersistenceGateway(store)

        assert gateway.save_autosave(_session())

        document = json.loads(store.get(AUTOSAVE_KEY))
        assert document["turnState"] == {
            "activePlayer": 1,
            "actionNumber": 1,
            "turnNumber": 1,
            "roundNumber": 1,
        }
        by_coord = {(t["q"], t["r"]): t for t in document["tiles"]}
        assert by_coord[(0, 0)] == {"q": 0, "r": 0, "playerId": 1, "army": 4}
        assert by_coord[(1, 0)]["playerId"] == 0
        assert by_coord[(0, 1)]["playerId"] == "undefined"
        assert (2, -2) not in by_coord
        assert len(document["tiles"]) == 18

    def test_restore_after_an_action(self) -> None:
        store = MemoryStore()
        gateway = PersistenceGateway(store)
        session = _session()
        gateway.attach(session)
        source, dest = session.board.index_at(0, 0), session.board.index_at(0, -1)

        assert execute_movement(session, source, dest).valid

        restored = gateway.load_autosave(Rules())
        assert restored is not None
        assert restored.turn_state == session.turn_state
        assert restored.turn_state.actions_taken == 1
        assert restored.board.tile_at(0, -1).owner == owned(1)
        assert restored.board.tile_at(0, -1).army == 3
        assert restored.board.tile_at(2, -2).owner == UNUSED
        assert restored.board.player_tiles(2) == frozenset({restored.board.index_at(-1, 1)})

    def test_no_save(self) -> None:
        assert PersistenceGateway(MemoryStore()).load_autosave() is None

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            '{"tiles": []}',
            '{"turnState": {"activePlayer": 0}, "tiles": []}',
            '{"turnState": {"activePlayer": 5}, "tiles": []}',
            '{"turnState": {"activePlayer": 1}, "tiles": [{"q": 0, "r": 0, "army": -2}]}',
        ],
    )
    def test_corrupt_documents_count_as_no_save(self, raw) -> None:
        gateway = PersistenceGateway(MemoryStore({AUTOSAVE_KEY: raw}))
        assert gateway.load_autosave(Rules()) is None

    def test_editing_sessions_are_not_autosaved(self) -> None:
        store = MemoryStore()
        assert not PersistenceGateway(store).save_autosave(enter_editor(Rules(), radius=1))
        assert store.get(AUTOSAVE_KEY) is None

    def test_storage_failures_are_absorbed(self) -> None:
        gateway = PersistenceGateway(BrokenStore())
        session = _session()
        gateway.attach(session)

        assert not gateway.save_autosave(session)
        assert gateway.load_autosave() is None
        gateway.clear_autosave()
        assert execute_movement(
            session, session.board.index_at(0, 0), session.board.index_at(0, -1)
        ).valid

    def test_clear_autosave(self) -> None:
        store = MemoryStore()
        gateway = PersistenceGateway(store)
        gateway.save_autosave(_session())
        gateway.clear_autosave()
        assert store.get(AUTOSAVE_KEY) is None


class TestMaps:
    """Named maps: save, list, load and delete."""

    def test_save_and_list(self) -> None:
        store = MemoryStore()
        gateway = PersistenceGateway(store)

        assert gateway.save_map(_session().board, "valley")
        assert gateway.save_map(_session().board, "ridge")

        assert gateway.list_maps() == ["ridge", "valley"]
        document = json.loads(store.get(f"{MAP_PREFIX}valley"))
        assert document["name"] == "valley"
        assert isinstance(document["date"], int)

    def test_empty_name_is_refused(self) -> None:
        assert not PersistenceGateway(MemoryStore()).save_map(_session().board, "")

    def test_load_for_play(self) -> None:
        gateway = PersistenceGateway(MemoryStore())
        gateway.save_map(_session().board, "valley")

        session = gateway.load_map("valley", Rules())

        assert session is not None
        assert not session.editing
        assert session.turn_state.round_number == 1
        assert session.board.tile_at(0, 0).owner == owned(1)
        assert session.board.tile_at(1, 0).owner == BLOCKED
        assert session.board.tile_at(2, -2).owner.kind == OwnerKind.UNUSED

    def test_load_for_editing_uses_editor_canvas(self) -> None:
        gateway = PersistenceGateway(MemoryStore())
        gateway.save_map(_session().board, "valley")

        session = gateway.load_map("valley", Rules(), for_editing=True, editor_radius=4)

        assert session.editing
        assert session.board.tile_at(4, 0) is not None
        assert session.board.tile_at(4, 0).owner == UNUSED
        assert session.board.tile_at(-1, 1).owner == owned(2)
        assert apply_brush(session, session.board.index_at(4, 0), Brush(owner=NEUTRAL))

    def test_missing_or_corrupt_map(self) -> None:
        gateway = PersistenceGateway(MemoryStore({f"{MAP_PREFIX}bad": "{}"}))
        assert gateway.load_map("nowhere") is None
        assert gateway.load_map("bad") is None

    def test_delete(self) -> None:
        gateway = PersistenceGateway(MemoryStore())
        gateway.save_map(_session().board, "valley")

        assert gateway.delete_map("valley")
        assert not gateway.delete_map("valley")
        assert gateway.list_maps() == []

    def test_listing_failure_yields_empty(self) -> None:
        assert PersistenceGateway(BrokenStore()).list_maps() == []


class TestBuildBoard:
    def test_region_bounds_every_entry(self) -> None:
        entries = [TileEntry(q=2, r=2, player_id=1, army=2), TileEntry(q=-1, r=0)]
        board = build_board(entries, Rules())

        assert board.tile_at(2, 2).owner == owned(1)
        assert board.tile_at(-1, 0).owner == NEUTRAL
        assert board.tile_at(0, 0).owner == UNUSED

    def test_armies_are_capped_on_load(self) -> None:
        board = build_board([TileEntry(q=0, r=0, player_id=1, army=50)], Rules())
        assert board.tile_at(0, 0).army == 10
