"""
Room API Endpoints

Responsibilities:
1. Create a room / read the full board snapshot
2. Snake toggle
3. Draft order editing (move, first, A-Z, shuffle)
4. Exports
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from typing import Optional
import logging

from api.deps import get_app_settings, get_room_manager, get_roster, get_store
from core.exceptions import RoomNotFound, StoreError
from core.room_manager import RoomManager
from core.room_store import RoomStore
from core.roster import RosterManager
from database import Settings
from schemas import (
    GameResponse,
    OrderMove,
    OrderPromote,
    ParticipantResponse,
    RoomCreate,
    RoomResponse,
    RoomStateResponse,
    SnakeUpdate,
)
from services.export_service import XLSX_MEDIA_TYPE, bookkeeping_workbook, draft_csv, export_filename
from services.naming_service import normalize_room_code

router = APIRouter(prefix="/api/rooms", tags=["rooms"])
logger = logging.getLogger(__name__)


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("", response_model=RoomResponse)
def create_room(room_data: Optional[RoomCreate] = None, manager: RoomManager = Depends(get_room_manager)):
    """Create a room with a generated 6-letter code."""
    try:
        room = manager.create_room(snake=room_data.snake if room_data else True)
        return RoomResponse.from_record(room)

    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create room: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{code}", response_model=RoomStateResponse)
def get_room_state(code: str, manager: RoomManager = Depends(get_room_manager)):
    """
    Full board snapshot

    Clients call this on load and after every invalidation pushed over
    /ws/rooms/{code}.

    Returns:
        - draft_order / turn / snake
        - current_player: who is on the clock (None for an empty order)
        - players, games, picks grouped by player
    """
    try:
        snap = manager.snapshot(code)
        return RoomStateResponse(
            code=snap.room.code,
            draft_order=snap.room.draft_order,
            turn=snap.room.turn,
            snake=snap.room.snake,
            current_index=snap.current_index,
            current_player=snap.current_player,
            players=[ParticipantResponse(id=p.id, name=p.name) for p in snap.participants],
            games=[GameResponse.from_record(g) for g in snap.games],
            picks={
                name: [GameResponse.from_record(g) for g in games]
                for name, games in snap.picks.items()
            }
        )

    except RoomNotFound:
        raise HTTPException(status_code=404, detail="Room not found")
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to get room state: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.put("/{code}/snake", response_model=RoomResponse)
def set_snake(code: str, data: SnakeUpdate, store: RoomStore = Depends(get_store)):
    try:
        room = store.set_room(normalize_room_code(code), snake=data.snake)
        logger.info(f"Room {room.code}: snake set to {room.snake}")
        return RoomResponse.from_record(room)

    except RoomNotFound:
        raise HTTPException(status_code=404, detail="Room not found")
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to set snake: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


def _edit_order(code: str, edit):
    try:
        return RoomResponse.from_record(edit(normalize_room_code(code)))

    except RoomNotFound:
        raise HTTPException(status_code=404, detail="Room not found")
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to edit draft order: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{code}/order/move", response_model=RoomResponse)
def move_in_order(code: str, data: OrderMove, roster: RosterManager = Depends(get_roster)):
    """Swap a name with its neighbour; out-of-range moves are ignored."""
    return _edit_order(code, lambda c: roster.move_by(c, data.index, data.direction))


@router.post("/{code}/order/first", response_model=RoomResponse)
def promote_in_order(code: str, data: OrderPromote, roster: RosterManager = Depends(get_roster)):
    return _edit_order(code, lambda c: roster.promote_to_first(c, data.index))


@router.post("/{code}/order/alphabetical", response_model=RoomResponse)
def reset_order_alphabetical(code: str, roster: RosterManager = Depends(get_roster)):
    return _edit_order(code, roster.reset_alphabetical)


@router.post("/{code}/order/shuffle", response_model=RoomResponse)
def shuffle_order(code: str, roster: RosterManager = Depends(get_roster)):
    return _edit_order(code, roster.shuffle)


@router.get("/{code}/export.csv")
def export_draft_csv(code: str, store: RoomStore = Depends(get_store),
                     settings: Settings = Depends(get_app_settings)):
    """Picked games only: Player, Date, Time, Day, Opponent, Tier, Price"""
    code = normalize_room_code(code)
    try:
        if not store.get_room(code):
            raise RoomNotFound(code)
        content = draft_csv(store.list_items(code))
        return _csv_response(content, export_filename(settings.season, "csv"))

    except RoomNotFound:
        raise HTTPException(status_code=404, detail="Room not found")
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/{code}/export.xlsx")
def export_bookkeeping_xlsx(code: str, store: RoomStore = Depends(get_store),
                            settings: Settings = Depends(get_app_settings)):
    """Every game in a "Draft" sheet, blank resale columns, currency-formatted prices"""
    code = normalize_room_code(code)
    try:
        if not store.get_room(code):
            raise RoomNotFound(code)
        content = bookkeeping_workbook(store.list_items(code))
        return Response(
            content=content,
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{export_filename(settings.season, "xlsx")}"'}
        )

    except RoomNotFound:
        raise HTTPException(status_code=404, detail="Room not found")
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
