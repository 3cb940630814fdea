"""
Pydantic request / response models
"""
from decimal import Decimal
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


# ============ Rooms ============

class RoomCreate(BaseModel):
    snake: bool = True


class RoomResponse(BaseModel):
    code: str
    draft_order: List[str]
    turn: int
    snake: bool

    @classmethod
    def from_record(cls, room) -> "RoomResponse":
        return cls(code=room.code, draft_order=room.draft_order, turn=room.turn, snake=room.snake)


class SnakeUpdate(BaseModel):
    snake: bool


class OrderMove(BaseModel):
    index: int
    direction: Literal[-1, 1] = Field(..., description="-1 moves up, +1 moves down")


class OrderPromote(BaseModel):
    index: int


# ============ Players ============

class PlayerJoin(BaseModel):
    name: str
    email: str


class PlayerResponse(BaseModel):
    player_id: int
    room_code: str
    name: str
    renamed: bool = False
    room: RoomResponse


class ParticipantResponse(BaseModel):
    id: int
    name: str


# ============ Games ============

class GameCreate(BaseModel):
    date: str = ""
    time: str = ""
    day: str = ""
    opponent: str = ""
    tier: str = ""
    price: Union[Decimal, str, None] = None


class GameResponse(BaseModel):
    id: int
    date: str
    time: str
    day: str
    opponent: str
    tier: str
    price: float
    picked_by: Optional[str] = None

    @classmethod
    def from_record(cls, game) -> "GameResponse":
        return cls(
            id=game.id,
            date=game.date,
            time=game.time,
            day=game.day,
            opponent=game.opponent,
            tier=game.tier,
            price=float(game.price),
            picked_by=game.picked_by
        )


class DraftRequest(BaseModel):
    player_name: str


class DraftResponse(BaseModel):
    outcome: str
    game_id: int
    player_name: str
    current_player: Optional[str] = None
    turn: Optional[int] = None
    detail: Optional[str] = None


# ============ Snapshot ============

class RoomStateResponse(BaseModel):
    code: str
    draft_order: List[str]
    turn: int
    snake: bool
    current_index: Optional[int] = None
    current_player: Optional[str] = None
    players: List[ParticipantResponse]
    games: List[GameResponse]
    picks: Dict[str, List[GameResponse]]


class StatusResponse(BaseModel):
    status: str
