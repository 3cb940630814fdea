"""
Room Manager: room lifecycle and the board snapshot

Responsibilities:
1. Create a room (generated code) or let the first join create it
2. Join: upsert the participant by email, keep the draft order in sync
3. Build the snapshot every client renders after an invalidation

Room codes are canonicalised to uppercase before any store call.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging

from core.exceptions import RoomNotFound
from core.room_store import ItemRecord, ParticipantRecord, RoomRecord, RoomStore
from core.roster import RosterManager
from core.turns import active_index, active_participant
from services.game_service import picks_by_player
from services.naming_service import generate_room_code, normalize_join, normalize_room_code

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JoinResult:
    room: RoomRecord
    participant: ParticipantRecord
    previous_name: Optional[str] = None

    @property
    def renamed(self) -> bool:
        return self.previous_name is not None and self.previous_name != self.participant.name


@dataclass(frozen=True)
class RoomSnapshot:
    room: RoomRecord
    participants: List[ParticipantRecord]
    games: List[ItemRecord]
    current_index: Optional[int]
    current_player: Optional[str]
    picks: Dict[str, List[ItemRecord]] = field(default_factory=dict)


class RoomManager:
    """Room lifecycle manager"""

    def __init__(self, store: RoomStore, roster: Optional[RosterManager] = None):
        self._store = store
        self._roster = roster or RosterManager(store)

    def create_room(self, snake: bool = True) -> RoomRecord:
        """
        Create a room with a fresh generated code.

        Collisions are unlikely (26^6) but still checked.
        """
        code = generate_room_code()
        while self._store.get_room(code):
            logger.warning(f"Room code collision detected, regenerating: {code}")
            code = generate_room_code()

        return self._store.create_room(code, snake=snake)

    def get_room_by_code(self, code: str) -> RoomRecord:
        """
        Raises:
            RoomNotFound: no room with this code
        """
        code = normalize_room_code(code)
        room = self._store.get_room(code)
        if not room:
            raise RoomNotFound(code)
        return room

    def join(self, code: str, name: str, email: str) -> JoinResult:
        """
        Join a room, creating it on first join.

        Flow:
        1. Validate and normalise (ValidationError before any store call)
        2. Ensure the room exists
        3. Upsert the participant on (room, lower(email))
        4. Rename in the draft order if a known email changed name,
           append if the email is new

        Raises:
            ValidationError: room, name or email blank
            StoreError: the store failed
        """
        # 1. Validate
        room_code, display_name, email_raw = normalize_join(code, name, email)

        # 2. Room
        self._store.create_room(room_code)

        # 3. Participant
        participant, previous_name = self._store.upsert_participant(room_code, email_raw, display_name)

        # 4. Draft order
        room = self._roster.sync_on_join(room_code, previous_name, display_name)

        if previous_name is None:
            logger.info(f"{display_name} joined room {room_code}")
        elif previous_name != display_name:
            logger.info(f"{previous_name} rejoined room {room_code} as {display_name}")

        return JoinResult(room=room, participant=participant, previous_name=previous_name)

    def snapshot(self, code: str) -> RoomSnapshot:
        """
        Full view of a room: state, participants, games, who is on the clock.

        Seeds an empty draft order from the participants first, the same
        way the board initialised it on load.
        """
        room = self.get_room_by_code(code)
        room = self._roster.ensure_seeded(room.code)

        participants = self._store.list_participants(room.code)
        games = self._store.list_items(room.code)

        return RoomSnapshot(
            room=room,
            participants=participants,
            games=games,
            current_index=active_index(room.turn, len(room.draft_order), room.snake),
            current_player=active_participant(room.draft_order, room.turn, room.snake),
            picks=picks_by_player([p.name for p in participants], games),
        )
