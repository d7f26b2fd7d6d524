"""Autosave and named-map documents for Hexwar boards.

Two document shapes are stored as JSON strings in a key-value store:

* the autosave (``hexwar_autosave``), holding the turn position and every
  non-Unused tile;
* named maps (``hexwar_map_<name>``), holding a name, an epoch-millisecond
  date and the tiles.

Tile ownership is encoded in ``playerId``: the player number for owned
tiles, ``0`` for Blocked and the literal string ``"undefined"`` for
Neutral. Unused tiles are never written.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from hexwar.domain.board import Board
from hexwar.domain.editor import EDITOR_RADIUS, enter_editor
from hexwar.domain.enums import OwnerKind
from hexwar.domain.models import BLOCKED, NEUTRAL, UNUSED, OwnerTag, PlayerID, TurnState, owned
from hexwar.domain.rules_config import DEFAULT_RULES, Rules
from hexwar.domain.session import GameSession
from hexwar.interfaces.store import KeyValueStore
from hexwar.repository.errors import PersistenceUnavailableError
from hexwar.utils.hex_math import HexCoord, region_radii

logger = logging.getLogger(__name__)

AUTOSAVE_KEY = "hexwar_autosave"
MAP_PREFIX = "hexwar_map_"
NEUTRAL_PLAYER_ID = "undefined"


class _Document(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TileEntry(_Document):
    """One serialized tile."""

    q: int
    r: int
    player_id: int | Literal["undefined"] | None = NEUTRAL_PLAYER_ID
    army: int = Field(default=0, ge=0)

    @property
    def owner(self) -> OwnerTag:
        return decode_owner(self.player_id)


class TurnStateEntry(_Document):
    """Turn position with the 1-based action and turn counters of the save format."""

    active_player: int = Field(ge=1)
    action_number: int = Field(default=1, ge=1)
    turn_number: int = Field(default=1, ge=1)
    round_number: int = Field(default=1, ge=1)


class AutosaveDocument(_Document):
    turn_state: TurnStateEntry
    tiles: list[TileEntry]


class MapDocument(_Document):
    name: str
    date: int
    tiles: list[TileEntry]


def encode_owner(owner: OwnerTag) -> int | str:
    if owner.kind == OwnerKind.PLAYER:
        return int(owner.player_id)
    if owner.kind == OwnerKind.BLOCKED:
        return 0
    if owner.kind == OwnerKind.NEUTRAL:
        return NEUTRAL_PLAYER_ID
    raise ValueError("unused tiles are not serialized")


def decode_owner(value: int | str | None) -> OwnerTag:
    if value is None or value == NEUTRAL_PLAYER_ID:
        return NEUTRAL
    if value == 0:
        return BLOCKED
    if value < 0:
        return UNUSED
    return owned(value)


def tile_entries(board: Board) -> list[TileEntry]:
    """Serialize every tile of ``board`` except Unused ones, in index order."""

    return [
        TileEntry(q=tile.q, r=tile.r, player_id=encode_owner(tile.owner), army=tile.army)
        for tile in board
        if tile.owner.kind != OwnerKind.UNUSED
    ]


def build_board(entries: list[TileEntry], rules: Rules = DEFAULT_RULES) -> Board:
    """Rebuild a board that bounds every entry; tiles not listed stay Unused."""

    q_radius, r_radius = region_radii(HexCoord(q=entry.q, r=entry.r) for entry in entries)
    board = Board.hexagon(q_radius, r_radius, max_army_strength=rules.max_army_strength)
    board.assign_all(UNUSED)
    _apply_entries(board, entries)
    return board


def _apply_entries(board: Board, entries: list[TileEntry]) -> int:
    applied = 0
    for entry in entries:
        index = board.index_at(entry.q, entry.r)
        if index is None:
            logger.warning("tile (%d, %d) lies outside the board; skipped", entry.q, entry.r)
            continue
        board.set_owner(index, entry.owner)
        board.set_army(index, entry.army)
        applied += 1
    return applied


def autosave_document(session: GameSession) -> AutosaveDocument:
    state = session.turn_state
    return AutosaveDocument(
        turn_state=TurnStateEntry(
            active_player=state.active_player,
            action_number=state.actions_taken + 1,
            turn_number=state.turns_taken + 1,
            round_number=state.round_number,
        ),
        tiles=tile_entries(session.board),
    )


def session_from_autosave(document: AutosaveDocument, rules: Rules = DEFAULT_RULES) -> GameSession:
    """Restore a playable session from a parsed autosave.

    Raises:
        ValueError: If the saved active player does not exist under ``rules``
    """

    entry = document.turn_state
    if entry.active_player > rules.player_count:
        raise ValueError(
            f"active player {entry.active_player} exceeds player count {rules.player_count}"
        )
    turn_state = TurnState(
        active_player=PlayerID(entry.active_player),
        actions_taken=entry.action_number - 1,
        turns_taken=entry.turn_number - 1,
        round_number=entry.round_number,
    )
    board = build_board(document.tiles, rules)
    return GameSession(board=board, rules=rules, turn_state=turn_state)


def _now_millis() -> int:
    return int(datetime.now(UTC).timestamp() * 1000)


class PersistenceGateway:
    """Save and restore sessions through a :class:`KeyValueStore`.

    Storage failures and corrupt documents are logged and reported as
    ``False``/``None``; they never propagate into gameplay.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        autosave_key: str = AUTOSAVE_KEY,
        map_prefix: str = MAP_PREFIX,
    ) -> None:
        self.store = store
        self.autosave_key = autosave_key
        self.map_prefix = map_prefix

    # -- autosave ----------------------------------------------------------------

    def attach(self, session: GameSession) -> None:
        """Autosave ``session`` after every action, turn and round change."""

        session.add_checkpoint_hook(self.save_autosave)

    def save_autosave(self, session: GameSession) -> bool:
        if session.editing:
            return False

        payload = autosave_document(session).model_dump_json(by_alias=True)
        try:
            self.store.set(self.autosave_key, payload)
        except PersistenceUnavailableError as exc:
            logger.warning("autosave failed: %s", exc)
            return False
        logger.debug("autosaved game %s", session.game_id)
        return True

    def load_autosave(self, rules: Rules = DEFAULT_RULES) -> GameSession | None:
        raw = self._read(self.autosave_key)
        if raw is None:
            return None
        try:
            document = AutosaveDocument.model_validate_json(raw)
            session = session_from_autosave(document, rules)
        except (ValidationError, ValueError) as exc:
            logger.warning("ignoring corrupt autosave: %s", exc)
            return None
        logger.info("restored autosave with %d tiles", len(document.tiles))
        return session

    def clear_autosave(self) -> None:
        try:
            self.store.remove(self.autosave_key)
        except PersistenceUnavailableError as exc:
            logger.warning("could not clear autosave: %s", exc)

    # -- named maps --------------------------------------------------------------

    def save_map(self, board: Board, name: str) -> bool:
        if not name:
            return False

        document = MapDocument(name=name, date=_now_millis(), tiles=tile_entries(board))
        try:
            self.store.set(self._map_key(name), document.model_dump_json(by_alias=True))
        except PersistenceUnavailableError as exc:
            logger.warning("saving map %r failed: %s", name, exc)
            return False
        logger.info("map %r saved with %d tiles", name, len(document.tiles))
        return True

    def load_map(
        self,
        name: str,
        rules: Rules = DEFAULT_RULES,
        *,
        for_editing: bool = False,
        editor_radius: int = EDITOR_RADIUS,
    ) -> GameSession | None:
        """Open a named map, either as a new game or on the editor canvas."""

        raw = self._read(self._map_key(name))
        if raw is None:
            logger.warning("map %r not found", name)
            return None
        try:
            document = MapDocument.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("ignoring corrupt map %r: %s", name, exc)
            return None

        if for_editing:
            session = enter_editor(rules, radius=editor_radius)
            _apply_entries(session.board, document.tiles)
        else:
            session = GameSession(board=build_board(document.tiles, rules), rules=rules)
        logger.info("map %r loaded with %d tiles", name, len(document.tiles))
        return session

    def list_maps(self) -> list[str]:
        try:
            keys = self.store.list_keys(self.map_prefix)
        except PersistenceUnavailableError as exc:
            logger.warning("listing maps failed: %s", exc)
            return []
        return [key[len(self.map_prefix) :] for key in keys]

    def delete_map(self, name: str) -> bool:
        key = self._map_key(name)
        try:
            if self.store.get(key) is None:
                return False
            self.store.remove(key)
        except PersistenceUnavailableError as exc:
            logger.warning("deleting map %r failed: %s", name, exc)
            return False
        return True

    def _map_key(self, name: str) -> str:
        return f"{self.map_prefix}{name}"

    def _read(self, key: str) -> str | None:
        try:
            return self.store.get(key)
        except PersistenceUnavailableError as exc:
            logger.warning("reading %r failed: %s", key, exc)
            return None
