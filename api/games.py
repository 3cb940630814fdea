"""
Game API Endpoints

Responsibilities:
1. List games with the board filters
2. Add / remove games
3. Draft a game (ClaimArbiter)
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional
import logging

from api.deps import get_claim_arbiter, get_store
from core.claim_arbiter import ClaimArbiter, ClaimOutcome
from core.exceptions import GameNotFound, RoomNotFound, StoreError, ValidationError
from core.room_store import RoomStore
from schemas import DraftRequest, DraftResponse, GameCreate, GameResponse, StatusResponse
from services.game_service import filter_games, validate_game_fields
from services.naming_service import normalize_room_code

router = APIRouter(prefix="/api/rooms", tags=["games"])
logger = logging.getLogger(__name__)

_CLAIM_STATUS = {
    ClaimOutcome.SUCCESS: 200,
    ClaimOutcome.ALREADY_TAKEN: 409,
    ClaimOutcome.NOT_YOUR_TURN: 403,
    ClaimOutcome.STORE_ERROR: 503,
    ClaimOutcome.ROOM_NOT_FOUND: 404,
    ClaimOutcome.GAME_NOT_FOUND: 404,
}


@router.get("/{code}/games", response_model=List[GameResponse])
def list_games(
    code: str,
    available: bool = Query(False, description="Only games nobody has drafted"),
    tier: Optional[str] = None,
    day: Optional[str] = None,
    q: Optional[str] = Query(None, description="Opponent substring, case-insensitive"),
    store: RoomStore = Depends(get_store)
):
    code = normalize_room_code(code)
    try:
        if not store.get_room(code):
            raise RoomNotFound(code)
        games = filter_games(store.list_items(code), available_only=available, tier=tier, day=day, q=q)
        return [GameResponse.from_record(g) for g in games]

    except RoomNotFound:
        raise HTTPException(status_code=404, detail="Room not found")
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to list games: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{code}/games", response_model=GameResponse, status_code=201)
def add_game(code: str, game_data: GameCreate, store: RoomStore = Depends(get_store)):
    """
    Add a game to the room

    All of date, time, day, opponent, tier and price are required; a
    missing field is rejected with 400 before the store is touched.
    """
    code = normalize_room_code(code)
    try:
        fields = validate_game_fields(game_data.model_dump())
        game = store.insert_item(code, fields)
        logger.info(f"Room {code}: added game {game.id} vs {game.opponent} on {game.date}")
        return GameResponse.from_record(game)

    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RoomNotFound:
        raise HTTPException(status_code=404, detail="Room not found")
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to add game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.delete("/{code}/games/{game_id}", response_model=StatusResponse)
def remove_game(code: str, game_id: int, store: RoomStore = Depends(get_store)):
    """
    Remove a game

    Intended for unclaimed games, but a drafted game can be removed too;
    removal is a delete, not an un-claim.
    """
    code = normalize_room_code(code)
    try:
        if not store.delete_item(code, game_id):
            raise GameNotFound(game_id)
        logger.info(f"Room {code}: removed game {game_id}")
        return StatusResponse(status="ok")

    except GameNotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to remove game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{code}/games/{game_id}/draft", response_model=DraftResponse)
def draft_game(
    code: str,
    game_id: int,
    draft_data: DraftRequest,
    arbiter: ClaimArbiter = Depends(get_claim_arbiter)
):
    """
    Draft a game (core endpoint)

    Outcomes:
    - 200 success: the game is yours and the turn advanced by one
    - 403 not_your_turn: nothing was written
    - 409 already_taken: someone else won the race; re-fetch and pick again
    - 503 store_error: re-fetch before retrying, the claim may or may not
      have landed
    - 404 room_not_found / game_not_found

    Non-success outcomes put the DraftResponse body under "detail".
    """
    code = normalize_room_code(code)
    result = arbiter.claim(code, game_id, draft_data.player_name.strip())

    body = DraftResponse(
        outcome=result.outcome.value,
        game_id=result.game_id,
        player_name=result.claimant,
        current_player=result.active_player,
        turn=result.turn,
        detail=result.detail
    )

    if not result.ok:
        raise HTTPException(status_code=_CLAIM_STATUS[result.outcome], detail=body.model_dump())
    return body
