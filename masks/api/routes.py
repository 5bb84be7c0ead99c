from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status
import redis

from masks.api.deps import get_redis
from masks.api.models import (
    AppliedEffectsModel,
    DayRecapResponse,
    EquipResponse,
    HandlerResponse,
    MinigameSubmitRequest,
    PlayerCreateRequest,
    PlayerListResponse,
    PlayerState,
    UnlockRequest,
)
from masks.content.models import ActionDefinition
from masks.errors import NotFoundError, PlayerBusyError
from masks.handlers import (
    HandlerResult,
    acknowledge_recap,
    available_actions,
    choose_starting_mask,
    day_recap,
    equip_mask,
    execute_action,
    make_event_choice,
    move_to_zone,
    submit_minigame_result,
    unequip_mask,
    unlock_mask,
    use_item,
)
from masks.player_store import create_player, delete_player, get_player, list_players

router = APIRouter()


def _http_error(e: ValueError) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, PlayerBusyError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


def _to_response(result: HandlerResult) -> HandlerResponse:
    outcome = None
    if result.outcome is not None:
        rewards = result.outcome.rewards
        outcome = {
            "final_score": result.outcome.final_score,
            "completed": result.outcome.completed,
            "rewards": rewards.model_dump() if rewards is not None else None,
        }
    return HandlerResponse(
        player=result.player,
        applied=AppliedEffectsModel(**asdict(result.applied)),
        mutations=[m.as_fields() for m in result.mutations],
        outcome=outcome,
    )


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/player", response_model=PlayerState, status_code=status.HTTP_201_CREATED)
async def create_player_route(payload: PlayerCreateRequest, r: redis.Redis = Depends(get_redis)) -> PlayerState:
    return create_player(r=r, username=payload.username, grade=payload.grade)


@router.get("/player", response_model=PlayerListResponse)
async def list_players_route(r: redis.Redis = Depends(get_redis)) -> PlayerListResponse:
    return PlayerListResponse(players=list_players(r=r))


@router.get("/player/{player_id}", response_model=PlayerState)
async def get_player_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> PlayerState:
    player = get_player(r=r, player_id=player_id)
    if player is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found")
    return player


@router.delete("/player/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_player_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> None:
    try:
        delete_player(r=r, player_id=player_id)
    except ValueError as e:
        raise _http_error(e) from e


@router.get("/player/{player_id}/actions", response_model=list[ActionDefinition])
async def available_actions_route(
    player_id: str,
    zone_id: str | None = None,
    r: redis.Redis = Depends(get_redis),
) -> list[ActionDefinition]:
    try:
        return available_actions(r=r, player_id=player_id, zone_id=zone_id)
    except ValueError as e:
        raise _http_error(e) from e


@router.post("/player/{player_id}/actions/{action_id}", response_model=HandlerResponse)
async def execute_action_route(player_id: str, action_id: str, r: redis.Redis = Depends(get_redis)) -> HandlerResponse:
    try:
        result = execute_action(r=r, player_id=player_id, action_id=action_id)
    except ValueError as e:
        raise _http_error(e) from e
    return _to_response(result)


@router.post("/player/{player_id}/events/{event_id}/choices/{choice_id}", response_model=HandlerResponse)
async def event_choice_route(
    player_id: str,
    event_id: str,
    choice_id: str,
    r: redis.Redis = Depends(get_redis),
) -> HandlerResponse:
    try:
        result = make_event_choice(r=r, player_id=player_id, event_id=event_id, choice_id=choice_id)
    except ValueError as e:
        raise _http_error(e) from e
    return _to_response(result)


@router.post("/player/{player_id}/items/{item_id}/use", response_model=HandlerResponse)
async def use_item_route(player_id: str, item_id: str, r: redis.Redis = Depends(get_redis)) -> HandlerResponse:
    try:
        result = use_item(r=r, player_id=player_id, item_id=item_id)
    except ValueError as e:
        raise _http_error(e) from e
    return _to_response(result)


@router.post("/player/{player_id}/minigames/{minigame_id}", response_model=HandlerResponse)
async def minigame_route(
    player_id: str,
    minigame_id: str,
    payload: MinigameSubmitRequest,
    r: redis.Redis = Depends(get_redis),
) -> HandlerResponse:
    try:
        result = submit_minigame_result(r=r, player_id=player_id, minigame_id=minigame_id, score=payload.score)
    except ValueError as e:
        raise _http_error(e) from e
    return _to_response(result)


@router.post("/player/{player_id}/masks/unequip", response_model=PlayerState)
async def unequip_mask_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> PlayerState:
    try:
        return unequip_mask(r=r, player_id=player_id)
    except ValueError as e:
        raise _http_error(e) from e


@router.post("/player/{player_id}/masks/{mask_id}/equip", response_model=EquipResponse)
async def equip_mask_route(player_id: str, mask_id: str, r: redis.Redis = Depends(get_redis)) -> EquipResponse:
    try:
        result = equip_mask(r=r, player_id=player_id, mask_id=mask_id)
    except ValueError as e:
        raise _http_error(e) from e
    return EquipResponse(player=result.player, equipped=result.equipped)


@router.post("/player/{player_id}/masks/{mask_id}/choose", response_model=PlayerState)
async def choose_mask_route(player_id: str, mask_id: str, r: redis.Redis = Depends(get_redis)) -> PlayerState:
    try:
        return choose_starting_mask(r=r, player_id=player_id, mask_id=mask_id)
    except ValueError as e:
        raise _http_error(e) from e


@router.post("/player/{player_id}/masks/{mask_id}/unlock")
async def unlock_mask_route(
    player_id: str,
    mask_id: str,
    payload: UnlockRequest,
    r: redis.Redis = Depends(get_redis),
) -> dict[str, object]:
    try:
        result = unlock_mask(r=r, player_id=player_id, mask_id=mask_id, flags=frozenset(payload.flags))
    except ValueError as e:
        raise _http_error(e) from e
    return {
        "player": result.player.model_dump(mode="json"),
        "unlocked": result.unlocked,
        "unmet_requirements": result.unmet_requirements,
    }


@router.get("/player/{player_id}/recap", response_model=DayRecapResponse)
async def recap_route(player_id: str, day: int | None = None, r: redis.Redis = Depends(get_redis)) -> DayRecapResponse:
    try:
        recap = day_recap(r=r, player_id=player_id, day=day)
    except ValueError as e:
        raise _http_error(e) from e
    return DayRecapResponse.model_validate(asdict(recap))


@router.post("/player/{player_id}/recap/ack", response_model=PlayerState)
async def acknowledge_recap_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> PlayerState:
    try:
        return acknowledge_recap(r=r, player_id=player_id)
    except ValueError as e:
        raise _http_error(e) from e


@router.post("/player/{player_id}/zones/{zone_id}/move", response_model=PlayerState)
async def move_to_zone_route(player_id: str, zone_id: str, r: redis.Redis = Depends(get_redis)) -> PlayerState:
    try:
        return move_to_zone(r=r, player_id=player_id, zone_id=zone_id)
    except ValueError as e:
        raise _http_error(e) from e
