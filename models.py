"""
ORM models for the ticket draft board

- Room: one draft session, keyed by its uppercase code
- Player: a participant, unique per (room, lower-cased email)
- Game: a ticket that can be drafted exactly once
"""
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    UniqueConstraint,
)

from database import Base


DAYS_OF_WEEK = ["MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN"]
TIERS = ["Platinum", "Gold", "Green", "White", "Gray"]
SEASONS = ["2025-26"]


class Room(Base):
    __tablename__ = "rooms"

    code = Column(String(32), primary_key=True)
    draft_order = Column(JSON, nullable=False, default=list)
    turn = Column(Integer, nullable=False, default=0)
    snake = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class Player(Base):
    __tablename__ = "players"
    __table_args__ = (
        UniqueConstraint("room_code", "email_ci", name="uq_players_room_email_ci"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    room_code = Column(String(32), ForeignKey("rooms.code"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    # lower(email), the identity key for re-joins
    email_ci = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class Game(Base):
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, autoincrement=True)
    room_code = Column(String(32), ForeignKey("rooms.code"), nullable=False, index=True)
    date = Column(String(32), nullable=False)
    time = Column(String(32), nullable=False)
    day = Column(String(8), nullable=False)
    opponent = Column(String(100), nullable=False)
    tier = Column(String(32), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    picked_by = Column(String(100), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
