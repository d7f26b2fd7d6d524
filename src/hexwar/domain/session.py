"""The live game aggregate passed to every engine entry point."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from hexwar.domain.board import Board
from hexwar.domain.enums import Rejection
from hexwar.domain.models import OwnerTag, TileIndex, TurnState
from hexwar.domain.rules_config import DEFAULT_RULES, Rules

if TYPE_CHECKING:
    from hexwar.domain.movement import MovementPlan

logger = logging.getLogger(__name__)

CheckpointHook = Callable[["GameSession"], None]


@dataclass(slots=True, eq=False)
class GameSession:
    """Board, turn position, rules and UI interaction state for one game.

    ``selected`` and ``movement_mode`` mirror what the player has clicked;
    ``preview`` is the movement plan last shown for the selection. While an
    attack awaits its dice the session is ``attack_in_flight`` and refuses
    every other mutating command.
    """

    board: Board
    rules: Rules = DEFAULT_RULES
    turn_state: TurnState = field(default_factory=TurnState)
    game_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    editing: bool = False
    selected: TileIndex | None = None
    movement_mode: bool = False
    preview: MovementPlan | None = None
    attack_in_flight: bool = False
    attack_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    _checkpoint_hooks: list[CheckpointHook] = field(default_factory=list, repr=False)

    # -- turn bookkeeping --------------------------------------------------------

    @property
    def active_player(self) -> int:
        return self.turn_state.active_player

    @property
    def actions_remaining(self) -> int:
        return self.rules.actions_per_turn - self.turn_state.actions_taken

    @property
    def turns_remaining(self) -> int:
        return self.rules.turns_per_cycle - self.turn_state.turns_taken

    @property
    def rounds_remaining(self) -> int | None:
        """Rounds left including the current one; ``None`` when unbounded."""

        if not self.rules.rounds_per_game:
            return None
        return max(0, self.rules.rounds_per_game - self.turn_state.round_number + 1)

    @property
    def is_over(self) -> bool:
        cap = self.rules.rounds_per_game
        return cap > 0 and self.turn_state.round_number > cap

    # -- checkpoints -------------------------------------------------------------

    def add_checkpoint_hook(self, hook: CheckpointHook) -> None:
        """Register a callback run after every action, turn or round change."""

        self._checkpoint_hooks.append(hook)

    def clear_checkpoint_hooks(self) -> None:
        self._checkpoint_hooks.clear()

    @property
    def busy(self) -> bool:
        """True while an attack holds the session between validation and resolution."""

        return self.attack_in_flight or self.attack_lock.locked()

    def checkpoint(self) -> None:
        for hook in list(self._checkpoint_hooks):
            hook(self)

    # -- interaction state -------------------------------------------------------

    def clear_preview(self) -> None:
        self.preview = None

    def clear_selection(self) -> None:
        self.selected = None
        self.preview = None

    def mutation_blocker(self) -> tuple[Rejection, str] | None:
        """Reason a gameplay mutation must be refused right now, if any."""

        if self.attack_in_flight:
            return Rejection.ATTACK_IN_PROGRESS, "an attack is being resolved"
        if self.editing:
            return Rejection.EDITOR_ACTIVE, "the map editor is active"
        if self.is_over:
            return Rejection.GAME_OVER, "the game is over"
        return None


def new_session(
    rules: Rules = DEFAULT_RULES,
    *,
    radius: int = 5,
    starting_tiles: Iterable[tuple[int, int, OwnerTag, int]] = (),
    game_id: str | None = None,
) -> GameSession:
    """Start a fresh game on a hexagonal board.

    ``starting_tiles`` holds ``(q, r, owner, army)`` entries applied after
    the board is built; coordinates outside the board are skipped.
    """

    board = Board.hexagon(radius, radius, max_army_strength=rules.max_army_strength)
    for q, r, owner, army in starting_tiles:
        index = board.index_at(q, r)
        if index is None:
            logger.warning("starting tile (%d, %d) is outside the board; skipped", q, r)
            continue
        board.set_owner(index, owner)
        board.set_army(index, army)

    session = GameSession(board=board, rules=rules)
    if game_id is not None:
        session.game_id = game_id
    logger.debug("new session %s with %d tiles", session.game_id, len(board))
    return session
