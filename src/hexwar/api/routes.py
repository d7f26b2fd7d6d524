"""HTTP routes for the Hexwar API."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel, Field, model_validator

from hexwar.api.runtime import ApiState, MapNotFoundError, NoActiveGameError
from hexwar.domain.combat import AttackOutcome
from hexwar.domain.commands import CommandResult
from hexwar.domain.editor import Brush
from hexwar.domain.enums import OwnerKind, Rejection
from hexwar.domain.models import OwnerTag, PlayerID
from hexwar.domain.session import GameSession

router = APIRouter()


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


ApiStateDep = Annotated[ApiState, Depends(get_state)]


# -- payloads --------------------------------------------------------------------


class OwnerPayload(BaseModel):
    owner: OwnerKind = OwnerKind.NEUTRAL
    player_id: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _check_player(self) -> OwnerPayload:
        if (self.owner == OwnerKind.PLAYER) != (self.player_id is not None):
            raise ValueError("player_id is required for, and only for, player owners")
        return self

    def owner_tag(self) -> OwnerTag:
        player_id = PlayerID(self.player_id) if self.player_id is not None else None
        return OwnerTag(self.owner, player_id)


class StartingTile(OwnerPayload):
    q: int
    r: int
    army: int = Field(default=0, ge=0)


class NewGameRequest(BaseModel):
    radius: int | None = Field(default=None, ge=0, le=30)
    tiles: list[StartingTile] = Field(default_factory=list)


class SelectRequest(BaseModel):
    index: int


class TileActionRequest(BaseModel):
    from_index: int
    to_index: int


class MovementModeRequest(BaseModel):
    enabled: bool


class EditorRequest(BaseModel):
    map_name: str | None = None


class BrushRequest(OwnerPayload):
    index: int
    army: int = Field(default=0, ge=0)


class TileView(BaseModel):
    index: int
    q: int
    r: int
    owner: OwnerKind
    player_id: int | None
    army: int


class GameView(BaseModel):
    game_id: str
    editing: bool
    active_player: int
    round_number: int
    actions_remaining: int
    turns_remaining: int
    rounds_remaining: int | None
    is_over: bool
    selected: int | None
    movement_mode: bool
    tiles: list[TileView]


class AttackView(BaseModel):
    result: str
    attack_sum: int
    defend_sum: int
    winner: int | None
    result_army: int | None


class CommandResponse(BaseModel):
    selected: int | None
    movement_mode: bool
    reachable: list[int]
    path: list[int]
    attack: AttackView | None = None
    game: GameView


class MovePreviewResponse(BaseModel):
    source: int
    target: int
    path: list[int]
    projected: list[int]
    attack_target: int | None


class AttackPreviewResponse(BaseModel):
    attacker: int
    defender: int
    attacker_army: int
    defender_army: int


class MapSaveResponse(BaseModel):
    name: str
    saved: bool


# -- helpers ---------------------------------------------------------------------


def _game_view(session: GameSession) -> GameView:
    state = session.turn_state
    return GameView(
        game_id=session.game_id,
        editing=session.editing,
        active_player=state.active_player,
        round_number=state.round_number,
        actions_remaining=session.actions_remaining,
        turns_remaining=session.turns_remaining,
        rounds_remaining=session.rounds_remaining,
        is_over=session.is_over,
        selected=session.selected,
        movement_mode=session.movement_mode,
        tiles=[
            TileView(
                index=tile.index,
                q=tile.q,
                r=tile.r,
                owner=tile.owner.kind,
                player_id=tile.owner.player_id,
                army=tile.army,
            )
            for tile in session.board
        ],
    )


def _attack_view(outcome: AttackOutcome | None) -> AttackView | None:
    if outcome is None or outcome.result is None:
        return None
    return AttackView(
        result=str(outcome.result),
        attack_sum=outcome.attack_sum,
        defend_sum=outcome.defend_sum,
        winner=outcome.winner,
        result_army=outcome.result_army,
    )


def _session_or_404(state: ApiState) -> GameSession:
    try:
        return state.games.require_session()
    except NoActiveGameError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="no active game") from exc


def _command_response(state: ApiState, result: CommandResult) -> CommandResponse:
    if not result.valid:
        code = (
            status.HTTP_404_NOT_FOUND
            if result.error == Rejection.NOT_FOUND
            else status.HTTP_409_CONFLICT
        )
        raise HTTPException(
            status_code=code,
            detail={"error": str(result.error), "message": result.message},
        )
    return CommandResponse(
        selected=result.selected,
        movement_mode=result.movement_mode,
        reachable=sorted(result.reachable),
        path=list(result.path),
        attack=_attack_view(result.attack),
        game=_game_view(state.games.require_session()),
    )


# -- general ---------------------------------------------------------------------


@router.get("/health")
async def health(state: ApiStateDep) -> dict[str, object]:
    session = state.games.session
    return {
        "status": "ok",
        "storage_backend": state.settings.storage_backend,
        "game_active": session is not None,
    }


@router.get("/rules")
async def get_rules(state: ApiStateDep) -> dict[str, int]:
    rules = state.rules
    return {
        "actions_per_turn": rules.actions_per_turn,
        "turns_per_round": rules.turns_per_round,
        "rounds_per_game": rules.rounds_per_game,
        "reinforcements_per_turn": rules.reinforcements_per_turn,
        "player_count": rules.player_count,
        "max_player_count": rules.max_player_count,
        "max_army_strength": rules.max_army_strength,
    }


# -- game ------------------------------------------------------------------------


@router.post("/game", response_model=GameView, status_code=status.HTTP_201_CREATED)
async def new_game(request: NewGameRequest, state: ApiStateDep) -> GameView:
    starting = [(t.q, t.r, t.owner_tag(), t.army) for t in request.tiles]
    session = state.games.new_game(radius=request.radius, starting_tiles=starting)
    return _game_view(session)


@router.post("/game/restore", response_model=GameView)
async def restore_game(state: ApiStateDep) -> GameView:
    session = state.games.restore()
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="no saved game")
    return _game_view(session)


@router.get("/game", response_model=GameView)
async def get_game(state: ApiStateDep) -> GameView:
    return _game_view(_session_or_404(state))


@router.post("/game/select", response_model=CommandResponse)
async def select_tile(request: SelectRequest, state: ApiStateDep) -> CommandResponse:
    _session_or_404(state)
    return _command_response(state, state.games.select(request.index))


@router.post("/game/move", response_model=CommandResponse)
async def move(request: TileActionRequest, state: ApiStateDep) -> CommandResponse:
    _session_or_404(state)
    return _command_response(state, state.games.move(request.from_index, request.to_index))


@router.post("/game/attack", response_model=CommandResponse)
async def attack(request: TileActionRequest, state: ApiStateDep) -> CommandResponse:
    _session_or_404(state)
    # A disconnecting client must not cancel an attack halfway through its roll.
    task = asyncio.ensure_future(state.games.attack(request.from_index, request.to_index))
    return _command_response(state, await asyncio.shield(task))


@router.post("/game/movement-mode", response_model=CommandResponse)
async def movement_mode(request: MovementModeRequest, state: ApiStateDep) -> CommandResponse:
    _session_or_404(state)
    return _command_response(state, state.games.set_movement_mode(request.enabled))


@router.post("/game/end-turn", response_model=CommandResponse)
async def end_turn(state: ApiStateDep) -> CommandResponse:
    _session_or_404(state)
    return _command_response(state, state.games.end_turn())


@router.get("/game/preview/move", response_model=MovePreviewResponse | None)
async def preview_move(
    state: ApiStateDep,
    to_index: Annotated[int, Query(ge=0)],
) -> MovePreviewResponse | None:
    _session_or_404(state)
    plan = state.games.preview_move(to_index)
    if plan is None:
        return None
    return MovePreviewResponse(
        source=plan.source,
        target=plan.target,
        path=list(plan.path),
        projected=list(plan.projected),
        attack_target=plan.attack_target,
    )


@router.get("/game/preview/attack", response_model=AttackPreviewResponse | None)
async def preview_attack(
    state: ApiStateDep,
    from_index: Annotated[int, Query(ge=0)],
    to_index: Annotated[int, Query(ge=0)],
) -> AttackPreviewResponse | None:
    _session_or_404(state)
    preview = state.games.preview_attack(from_index, to_index)
    if preview is None:
        return None
    return AttackPreviewResponse(
        attacker=preview.attacker,
        defender=preview.defender,
        attacker_army=preview.attacker_army,
        defender_army=preview.defender_army,
    )


# -- maps ------------------------------------------------------------------------


@router.get("/maps")
async def list_maps(state: ApiStateDep) -> list[str]:
    return state.games.list_maps()


@router.put("/maps/{name}", response_model=MapSaveResponse)
async def save_map(name: str, state: ApiStateDep) -> MapSaveResponse:
    _session_or_404(state)
    saved = state.games.save_map(name)
    if not saved:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="map could not be stored"
        )
    return MapSaveResponse(name=name, saved=saved)


@router.post("/maps/{name}/play", response_model=GameView)
async def play_map(name: str, state: ApiStateDep) -> GameView:
    try:
        session = state.games.play_map(name)
    except MapNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="map not found") from exc
    return _game_view(session)


@router.delete("/maps/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_map(name: str, state: ApiStateDep) -> None:
    try:
        state.games.delete_map(name)
    except MapNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="map not found") from exc


# -- editor ----------------------------------------------------------------------


@router.post("/editor", response_model=GameView)
async def open_editor(state: ApiStateDep, request: EditorRequest | None = None) -> GameView:
    name = request.map_name if request is not None else None
    try:
        session = state.games.open_editor(name)
    except MapNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="map not found") from exc
    return _game_view(session)


@router.post("/editor/brush", response_model=GameView)
async def brush(request: BrushRequest, state: ApiStateDep) -> GameView:
    session = _session_or_404(state)
    if not session.editing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="the map editor is not open"
        )
    if not state.games.brush(request.index, Brush(owner=request.owner_tag(), army=request.army)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="unknown tile index")
    return _game_view(session)


@router.post("/editor/finish", response_model=GameView)
async def finish_editing(state: ApiStateDep) -> GameView:
    _session_or_404(state)
    return _game_view(state.games.finish_editing())
