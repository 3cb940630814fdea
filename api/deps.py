"""
FastAPI dependencies

The RoomStore is created and opened by the application lifespan and kept on
app.state; routers receive it (and the managers built on it) by injection.
"""
from fastapi import Request

from core.claim_arbiter import ClaimArbiter
from core.room_manager import RoomManager
from core.room_store import RoomStore
from core.roster import RosterManager
from database import Settings, get_settings


def get_store(request: Request) -> RoomStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_roster(request: Request) -> RosterManager:
    return RosterManager(get_store(request))


def get_room_manager(request: Request) -> RoomManager:
    return RoomManager(get_store(request))


def get_claim_arbiter(request: Request) -> ClaimArbiter:
    return ClaimArbiter(get_store(request))
