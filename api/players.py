"""
Player API Endpoints

Responsibilities:
1. Join a room (creates the room on first join)
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from api.deps import get_room_manager
from core.exceptions import StoreError, ValidationError
from core.room_manager import RoomManager
from schemas import PlayerJoin, PlayerResponse, RoomResponse

router = APIRouter(prefix="/api/rooms", tags=["players"])
logger = logging.getLogger(__name__)


@router.post("/{code}/join", response_model=PlayerResponse)
def join_room(code: str, player_data: PlayerJoin, manager: RoomManager = Depends(get_room_manager)):
    """
    Join a room (player endpoint)

    Identity is the email, compared case-insensitively. Joining again with
    the same email and a different name renames the participant and their
    slot in the draft order.
    """
    try:
        result = manager.join(code, player_data.name, player_data.email)

        return PlayerResponse(
            player_id=result.participant.id,
            room_code=result.room.code,
            name=result.participant.name,
            renamed=result.renamed,
            room=RoomResponse.from_record(result.room)
        )

    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to join room: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
