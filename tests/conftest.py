from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from core.room_manager import RoomManager
from core.room_store import RoomStore
from database import Settings
from main import create_app


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'ticket_draft.db'}"


@pytest.fixture
def store(database_url):
    store = RoomStore(database_url)
    store.open()
    yield store
    store.close()


@pytest.fixture
def manager(store):
    return RoomManager(store)


@pytest.fixture
def room_abc(manager):
    """Room ABC with A, B, C joined in that order (draft order A, B, C, snake on)."""
    manager.join("abc", "A", "a@example.com")
    manager.join("abc", "B", "b@example.com")
    manager.join("abc", "C", "c@example.com")
    return "ABC"


@pytest.fixture
def add_game(store):
    def _add(code, opponent="Knicks", price="85.00", day="WED", tier="Gold"):
        return store.insert_item(code, {
            "date": "10/22/2025",
            "time": "7:30 PM",
            "day": day,
            "opponent": opponent,
            "tier": tier,
            "price": Decimal(price),
        })
    return _add


@pytest.fixture
def client(store, database_url):
    app = create_app(store=store, settings=Settings(database_url=database_url, season="2025-26"))
    with TestClient(app) as c:
        yield c
