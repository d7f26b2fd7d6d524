"""Runtime primitives backing the Hexwar HTTP API."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from hexwar.config import Settings, get_settings
from hexwar.domain import commands
from hexwar.domain.combat import AttackPreview, attack_preview
from hexwar.domain.editor import Brush, apply_brush, enter_editor, exit_editor
from hexwar.domain.models import OwnerTag
from hexwar.domain.movement import MovementPlan, movement_preview
from hexwar.domain.rules_config import Rules
from hexwar.domain.session import GameSession, new_session
from hexwar.interfaces.dice import IDiceRoller
from hexwar.interfaces.store import KeyValueStore
from hexwar.repository import JsonFileStore, MemoryStore, SqlKeyValueStore
from hexwar.savegame import PersistenceGateway
from hexwar.utils.rng import RandomDiceRoller, SeededDiceRoller

logger = logging.getLogger(__name__)

RollerFactory = Callable[[GameSession], IDiceRoller | None]


class NoActiveGameError(LookupError):
    """Raised when a game command arrives before any game was started."""


class MapNotFoundError(LookupError):
    """Raised when a named map does not exist or cannot be read."""


class GameBusyError(RuntimeError):
    """Raised when the live session cannot be replaced while an attack is resolving."""


def build_store(settings: Settings) -> KeyValueStore:
    """Instantiate the key-value store selected by ``settings.storage_backend``."""

    if settings.storage_backend == "memory":
        return MemoryStore()
    if settings.storage_backend == "sql":
        return SqlKeyValueStore.from_url(settings.database_url)
    return JsonFileStore(settings.data_dir)


def default_roller_factory(settings: Settings) -> RollerFactory:
    def factory(session: GameSession) -> IDiceRoller:
        if settings.dice_seed is not None:
            return SeededDiceRoller(f"{settings.dice_seed}:{session.game_id}")
        return RandomDiceRoller()

    return factory


class GameService:
    """Own the single live session and route UI commands to the engine."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        rules: Rules,
        roller_factory: RollerFactory,
        default_radius: int = 5,
        editor_radius: int = 8,
    ) -> None:
        self.gateway = gateway
        self.rules = rules
        self.default_radius = default_radius
        self.editor_radius = editor_radius
        self._roller_factory = roller_factory
        self.session: GameSession | None = None
        self.roller: IDiceRoller | None = None

    # -- lifecycle ---------------------------------------------------------------

    def require_session(self) -> GameSession:
        if self.session is None:
            raise NoActiveGameError("no game has been started")
        return self.session

    def _ensure_replaceable(self) -> None:
        current = self.session
        if current is not None and current.busy:
            raise GameBusyError(f"game {current.game_id} has an attack in flight")

    def _install(self, session: GameSession) -> GameSession:
        previous = self.session
        if previous is not None and previous is not session:
            self._ensure_replaceable()
            previous.clear_checkpoint_hooks()
        self.session = session
        self.roller = self._roller_factory(session)
        if not session.editing:
            self.gateway.attach(session)
            self.gateway.save_autosave(session)
        logger.info("game %s installed (%d tiles)", session.game_id, len(session.board))
        return session

    def new_game(
        self,
        *,
        radius: int | None = None,
        starting_tiles: Iterable[tuple[int, int, OwnerTag, int]] = (),
    ) -> GameSession:
        session = new_session(
            self.rules,
            radius=self.default_radius if radius is None else radius,
            starting_tiles=starting_tiles,
        )
        return self._install(session)

    def restore(self) -> GameSession | None:
        session = self.gateway.load_autosave(self.rules)
        if session is None:
            return None
        return self._install(session)

    # -- commands ----------------------------------------------------------------

    def select(self, index: int) -> commands.CommandResult:
        return commands.select_tile(self.require_session(), index)

    def move(self, from_index: int, to_index: int) -> commands.CommandResult:
        return commands.request_move(self.require_session(), from_index, to_index)

    async def attack(self, from_index: int, to_index: int) -> commands.CommandResult:
        return await commands.request_attack(
            self.require_session(), from_index, to_index, self.roller
        )

    def set_movement_mode(self, enabled: bool) -> commands.CommandResult:
        return commands.set_movement_mode(self.require_session(), enabled)

    def end_turn(self) -> commands.CommandResult:
        return commands.end_turn_now(self.require_session())

    def preview_move(self, to_index: int) -> MovementPlan | None:
        return movement_preview(self.require_session(), to_index)

    def preview_attack(self, from_index: int, to_index: int) -> AttackPreview | None:
        return attack_preview(self.require_session(), from_index, to_index)

    # -- maps and editor ---------------------------------------------------------

    def list_maps(self) -> list[str]:
        return self.gateway.list_maps()

    def save_map(self, name: str) -> bool:
        return self.gateway.save_map(self.require_session().board, name)

    def play_map(self, name: str) -> GameSession:
        session = self.gateway.load_map(name, self.rules)
        if session is None:
            raise MapNotFoundError(name)
        return self._install(session)

    def delete_map(self, name: str) -> None:
        if not self.gateway.delete_map(name):
            raise MapNotFoundError(name)

    def open_editor(self, name: str | None = None) -> GameSession:
        if name is None:
            return self._install(enter_editor(self.rules, radius=self.editor_radius))
        session = self.gateway.load_map(
            name, self.rules, for_editing=True, editor_radius=self.editor_radius
        )
        if session is None:
            raise MapNotFoundError(name)
        return self._install(session)

    def brush(self, index: int, brush: Brush) -> bool:
        return apply_brush(self.require_session(), index, brush)

    def finish_editing(self) -> GameSession:
        """Start playing on the board currently open in the editor."""

        session = self.require_session()
        if not session.editing:
            return session
        exit_editor(session)
        return self._install(session)


class ApiState:
    """Aggregated services shared by the FastAPI layer."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        store: KeyValueStore | None = None,
        roller_factory: RollerFactory | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.rules = self.settings.rules()
        self.store = store if store is not None else build_store(self.settings)
        self.gateway = PersistenceGateway(
            self.store,
            autosave_key=self.settings.autosave_key,
            map_prefix=self.settings.map_prefix,
        )
        self.games = GameService(
            self.gateway,
            rules=self.rules,
            roller_factory=roller_factory or default_roller_factory(self.settings),
            default_radius=self.settings.default_map_radius,
            editor_radius=self.settings.editor_map_radius,
        )

    async def shutdown(self) -> None:
        if isinstance(self.store, SqlKeyValueStore):
            self.store.dispose()


def build_state() -> ApiState:
    """Factory used by the API to initialize state."""

    return ApiState()
