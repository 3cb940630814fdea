"""
Claim Arbiter: drafting a game

Flow of one claim:
1. Check the claimant is on the clock (Turn Sequencer against the latest
   known room state)
2. Conditional write: picked_by = claimant WHERE picked_by IS NULL
3. Only if that matched one row, advance the turn counter once

The conditional write is the only mutual exclusion in the system. There is
no read-then-write on this side: two racing claimants both reach step 2 and
the store decides the single winner.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

from core.exceptions import RoomNotFound, StoreError
from core.room_store import RoomRecord, RoomStore
from core.turns import active_participant

logger = logging.getLogger(__name__)


class ClaimOutcome(str, Enum):
    SUCCESS = "success"
    ALREADY_TAKEN = "already_taken"
    NOT_YOUR_TURN = "not_your_turn"
    STORE_ERROR = "store_error"
    ROOM_NOT_FOUND = "room_not_found"
    GAME_NOT_FOUND = "game_not_found"


@dataclass(frozen=True)
class ClaimResult:
    outcome: ClaimOutcome
    game_id: int
    claimant: str
    active_player: Optional[str] = None
    turn: Optional[int] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is ClaimOutcome.SUCCESS


class ClaimArbiter:
    """Atomic claim + single turn advance"""

    def __init__(self, store: RoomStore):
        self._store = store

    def claim(self, code: str, game_id: int, claimant: str,
              room: Optional[RoomRecord] = None) -> ClaimResult:
        """
        Try to draft a game for claimant.

        Args:
            code: room code (canonical uppercase)
            game_id: the game to claim
            claimant: display name of the participant drafting
            room: the caller's latest known room state; fetched when omitted

        Returns:
            ClaimResult. Outcomes are values, not exceptions, and none of
            them is retried here. After ALREADY_TAKEN or STORE_ERROR the
            caller should re-read the room before trying again.
        """
        # 1. Whose turn is it
        if room is None:
            try:
                room = self._store.get_room(code)
            except StoreError as e:
                return ClaimResult(ClaimOutcome.STORE_ERROR, game_id, claimant, detail=str(e))
            if room is None:
                return ClaimResult(ClaimOutcome.ROOM_NOT_FOUND, game_id, claimant,
                                   detail=f"Room {code} not found")

        current = active_participant(room.draft_order, room.turn, room.snake)
        if current is None or claimant != current:
            logger.info(f"Room {code}: {claimant} tried to draft game {game_id} out of turn (current: {current})")
            return ClaimResult(ClaimOutcome.NOT_YOUR_TURN, game_id, claimant, active_player=current,
                               turn=room.turn, detail=f"Not your turn. Current: {current or '?'}")

        # 2. Conditional claim
        try:
            matched = self._store.conditional_claim(code, game_id, claimant)
        except StoreError as e:
            return ClaimResult(ClaimOutcome.STORE_ERROR, game_id, claimant, active_player=current,
                               detail=str(e))

        if matched == 0:
            # Read only after the write missed, to tell a bad id from a lost race
            try:
                missing = self._store.get_item(code, game_id) is None
            except StoreError as e:
                return ClaimResult(ClaimOutcome.STORE_ERROR, game_id, claimant, active_player=current,
                                   detail=str(e))
            if missing:
                logger.info(f"Room {code}: {claimant} tried to draft unknown game {game_id}")
                return ClaimResult(ClaimOutcome.GAME_NOT_FOUND, game_id, claimant, active_player=current,
                                   turn=room.turn, detail=f"Game {game_id} not found")

            logger.info(f"Room {code}: game {game_id} was already taken when {claimant} tried to draft it")
            return ClaimResult(ClaimOutcome.ALREADY_TAKEN, game_id, claimant, active_player=current,
                               turn=room.turn, detail="This game was just taken.")

        # 3. Advance the turn, once per successful claim
        try:
            new_turn = self._store.advance_turn(code)
        except (StoreError, RoomNotFound) as e:
            logger.error(f"Room {code}: game {game_id} claimed by {claimant} but turn advance failed: {e}")
            return ClaimResult(ClaimOutcome.STORE_ERROR, game_id, claimant, active_player=current,
                               detail=str(e))

        logger.info(f"Room {code}: {claimant} drafted game {game_id}, turn is now {new_turn}")
        return ClaimResult(ClaimOutcome.SUCCESS, game_id, claimant, active_player=current, turn=new_turn)
