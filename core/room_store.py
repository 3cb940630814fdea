"""
Room Store: the persistence boundary of the draft board

Every read and write of rooms, players and games goes through a RoomStore
instance. The store is constructed explicitly, opened at application start
and closed at shutdown; there is no module-level connection.

Each method runs in its own short transaction (see database.transactional)
and returns plain records, never live ORM objects. Committed mutations
publish the room code on the ChangeNotifier.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
import logging

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import RoomNotFound
from core.notifier import ChangeNotifier
from database import Base, build_engine, build_session_factory, transactional
from models import Game, Player, Room

logger = logging.getLogger(__name__)

_UNSET = object()


@dataclass(frozen=True)
class RoomRecord:
    code: str
    draft_order: List[str] = field(default_factory=list)
    turn: int = 0
    snake: bool = True


@dataclass(frozen=True)
class ParticipantRecord:
    id: int
    name: str
    email: str


@dataclass(frozen=True)
class ItemRecord:
    id: int
    date: str
    time: str
    day: str
    opponent: str
    tier: str
    price: Decimal
    picked_by: Optional[str] = None

    @property
    def is_claimed(self) -> bool:
        return self.picked_by is not None


def _room_record(room: Room) -> RoomRecord:
    return RoomRecord(
        code=room.code,
        draft_order=list(room.draft_order or []),
        turn=int(room.turn or 0),
        snake=bool(room.snake),
    )


def _participant_record(player: Player) -> ParticipantRecord:
    return ParticipantRecord(id=player.id, name=player.name, email=player.email)


def _item_record(game: Game) -> ItemRecord:
    return ItemRecord(
        id=game.id,
        date=game.date,
        time=game.time,
        day=game.day,
        opponent=game.opponent,
        tier=game.tier,
        price=Decimal(str(game.price)),
        picked_by=game.picked_by,
    )


def _mark_changed(db: Session, code: str) -> None:
    db.info.setdefault("changed_rooms", set()).add(code)


class RoomStore:
    """SQLAlchemy-backed Room Store"""

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None,
                 notifier: Optional[ChangeNotifier] = None):
        if engine is None:
            if database_url is None:
                raise ValueError("RoomStore needs a database_url or an engine")
            engine = build_engine(database_url)
        self._engine = engine
        self._session_factory = build_session_factory(engine)
        self._notifier = notifier or ChangeNotifier()
        self._opened = False

    # ============ Lifecycle ============

    def open(self) -> "RoomStore":
        Base.metadata.create_all(bind=self._engine)
        self._opened = True
        logger.info(f"Room store opened on {self._engine.url.render_as_string(hide_password=True)}")
        return self

    def close(self) -> None:
        self._engine.dispose()
        self._opened = False
        logger.info("Room store closed")

    @property
    def is_open(self) -> bool:
        return self._opened

    def __enter__(self) -> "RoomStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ============ Notifications ============

    def subscribe(self, code: str, callback: Callable[[str], None]) -> Callable[[], None]:
        """Invalidation-only subscription; returns the unsubscribe handle."""
        return self._notifier.subscribe(code, callback)

    def _on_commit(self, codes: Iterable[str]) -> None:
        for code in codes:
            self._notifier.publish(code)

    # ============ Rooms ============

    @transactional
    def get_room(self, code: str, db: Session = None) -> Optional[RoomRecord]:
        room = db.get(Room, code)
        return _room_record(room) if room else None

    @transactional
    def create_room(self, code: str, snake: bool = True, db: Session = None) -> RoomRecord:
        """
        Create the room if missing; an existing room is returned as-is.

        Two first joins can both see no room. The loser's INSERT hits the
        primary key; it rolls back and returns the winner's room.
        """
        room = db.get(Room, code)
        if room:
            return _room_record(room)

        room = Room(code=code, draft_order=[], turn=0, snake=snake)
        db.add(room)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            room = db.get(Room, code)
            if room is None:
                raise
            logger.info(f"Room {code} was created concurrently, using it")
            return _room_record(room)
        _mark_changed(db, code)
        logger.info(f"Created room {code}")
        return _room_record(room)

    @transactional
    def set_room(self, code: str, draft_order: Any = _UNSET, snake: Any = _UNSET,
                 turn: Any = _UNSET, db: Session = None) -> RoomRecord:
        """
        Partial update of a room.

        Only the fields that are passed are written, and the whole draft
        order is replaced in one UPDATE, so readers never see half an order.

        Raises:
            RoomNotFound: no room with this code
        """
        values: Dict[Any, Any] = {}
        if draft_order is not _UNSET:
            values[Room.draft_order] = list(draft_order)
        if snake is not _UNSET:
            values[Room.snake] = bool(snake)
        if turn is not _UNSET:
            values[Room.turn] = int(turn)

        query = db.query(Room).filter(Room.code == code)
        if values:
            matched = query.update(values, synchronize_session=False)
            if not matched:
                raise RoomNotFound(code)
            _mark_changed(db, code)

        room = query.first()
        if not room:
            raise RoomNotFound(code)
        return _room_record(room)

    @transactional
    def advance_turn(self, code: str, db: Session = None) -> int:
        """
        Increment the turn counter by exactly one and return the new value.

        The increment happens in SQL (turn = turn + 1), not from a value the
        caller read earlier.
        """
        matched = db.query(Room).filter(Room.code == code).update(
            {Room.turn: Room.turn + 1}, synchronize_session=False
        )
        if not matched:
            raise RoomNotFound(code)
        _mark_changed(db, code)
        return db.query(Room.turn).filter(Room.code == code).scalar()

    # ============ Participants ============

    @transactional
    def list_participants(self, code: str, db: Session = None) -> List[ParticipantRecord]:
        players = (
            db.query(Player)
            .filter(Player.room_code == code)
            .order_by(Player.created_at, Player.id)
            .all()
        )
        return [_participant_record(p) for p in players]

    @transactional
    def find_participant(self, code: str, email: str, db: Session = None) -> Optional[ParticipantRecord]:
        player = db.query(Player).filter(
            Player.room_code == code,
            Player.email_ci == email.strip().lower()
        ).first()
        return _participant_record(player) if player else None

    @transactional
    def upsert_participant(self, code: str, email: str, name: str,
                           db: Session = None) -> Tuple[ParticipantRecord, Optional[str]]:
        """
        Insert a participant, or rename the one already holding this email.

        Email matching is case-insensitive; the email is stored as typed.

        Returns:
            (participant, previous_name) where previous_name is None for a
            brand new participant.
        """
        if db.get(Room, code) is None:
            raise RoomNotFound(code)

        email_ci = email.strip().lower()
        player = db.query(Player).filter(
            Player.room_code == code,
            Player.email_ci == email_ci
        ).first()

        previous_name = None
        if player:
            previous_name = player.name
            if player.name != name:
                player.name = name
                _mark_changed(db, code)
        else:
            player = Player(room_code=code, name=name, email=email.strip(), email_ci=email_ci)
            db.add(player)
            _mark_changed(db, code)

        db.flush()
        return _participant_record(player), previous_name

    # ============ Items ============

    @transactional
    def list_items(self, code: str, db: Session = None) -> List[ItemRecord]:
        games = db.query(Game).filter(Game.room_code == code).order_by(Game.id).all()
        return [_item_record(g) for g in games]

    @transactional
    def get_item(self, code: str, item_id: int, db: Session = None) -> Optional[ItemRecord]:
        game = db.query(Game).filter(Game.room_code == code, Game.id == item_id).first()
        return _item_record(game) if game else None

    @transactional
    def insert_item(self, code: str, fields: Dict[str, Any], db: Session = None) -> ItemRecord:
        if db.get(Room, code) is None:
            raise RoomNotFound(code)

        game = Game(
            room_code=code,
            date=fields["date"],
            time=fields["time"],
            day=fields["day"],
            opponent=fields["opponent"],
            tier=fields["tier"],
            price=fields["price"],
        )
        db.add(game)
        db.flush()
        _mark_changed(db, code)
        return _item_record(game)

    @transactional
    def delete_item(self, code: str, item_id: int, db: Session = None) -> bool:
        deleted = db.query(Game).filter(
            Game.room_code == code,
            Game.id == item_id
        ).delete(synchronize_session=False)
        if deleted:
            _mark_changed(db, code)
        return deleted > 0

    @transactional
    def conditional_claim(self, code: str, item_id: int, claimant: str, db: Session = None) -> int:
        """
        Compare-and-set: picked_by = claimant only where picked_by IS NULL.

        A single UPDATE statement, so two racing claimants cannot both match.

        Returns:
            matched row count, 1 on success and 0 if the game was already
            taken (or does not exist in this room)
        """
        matched = db.query(Game).filter(
            Game.room_code == code,
            Game.id == item_id,
            Game.picked_by.is_(None)
        ).update({Game.picked_by: claimant}, synchronize_session=False)
        if matched:
            _mark_changed(db, code)
        return matched
