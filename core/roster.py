"""
Roster Manager: the persisted draft order of a room

Two layers:
1. Pure list operations: take an order, return a new order, never mutate
   the input
2. RosterManager: read-modify-write against the RoomStore; each operation
   persists the whole new order in a single set_room() call

Roster edits are last-write-wins. Nothing here takes a lock; the only
mutually exclusive write in the system is the game claim.
"""
import random
from typing import List, Optional, Sequence
import logging

from core.exceptions import RoomNotFound
from core.room_store import RoomRecord, RoomStore

logger = logging.getLogger(__name__)


# ============ Pure operations ============

def append_if_absent(order: Sequence[str], name: str) -> List[str]:
    """Add a newly joined participant at the end; exact-match no-op otherwise."""
    new_order = list(order)
    if name not in new_order:
        new_order.append(name)
    return new_order


def rename_in_place(order: Sequence[str], old_name: str, new_name: str) -> List[str]:
    """Replace every occurrence of old_name, keeping positions."""
    return [new_name if n == old_name else n for n in order]


def move_by(order: Sequence[str], index: int, direction: int) -> List[str]:
    """
    Swap the entry at index with its neighbour at index + direction.

    Out-of-range source or target leaves the order unchanged.
    """
    new_order = list(order)
    target = index + direction
    if not (0 <= index < len(new_order)) or not (0 <= target < len(new_order)):
        return new_order
    new_order[index], new_order[target] = new_order[target], new_order[index]
    return new_order


def promote_to_first(order: Sequence[str], index: int) -> List[str]:
    new_order = list(order)
    if not (0 <= index < len(new_order)):
        return new_order
    new_order.insert(0, new_order.pop(index))
    return new_order


def reset_alphabetical(order: Sequence[str]) -> List[str]:
    return sorted(order)


def shuffle(order: Sequence[str], rng: Optional[random.Random] = None) -> List[str]:
    """
    Uniformly random permutation (Fisher-Yates).

    Args:
        order: current draft order
        rng: optional random.Random, injectable for reproducible tests
    """
    rng = rng or random.Random()
    new_order = list(order)
    for i in range(len(new_order) - 1, 0, -1):
        j = rng.randint(0, i)
        new_order[i], new_order[j] = new_order[j], new_order[i]
    return new_order


# ============ Store-backed manager ============

class RosterManager:
    """Draft order editing for one store"""

    def __init__(self, store: RoomStore, rng: Optional[random.Random] = None):
        self._store = store
        self._rng = rng or random.Random()

    def _load(self, code: str) -> RoomRecord:
        room = self._store.get_room(code)
        if not room:
            raise RoomNotFound(code)
        return room

    def _persist(self, room: RoomRecord, new_order: List[str]) -> RoomRecord:
        if new_order == room.draft_order:
            return room
        logger.info(f"Draft order for room {room.code}: {new_order}")
        return self._store.set_room(room.code, draft_order=new_order)

    def append_if_absent(self, code: str, name: str) -> RoomRecord:
        room = self._load(code)
        return self._persist(room, append_if_absent(room.draft_order, name))

    def rename_in_place(self, code: str, old_name: str, new_name: str) -> RoomRecord:
        room = self._load(code)
        return self._persist(room, rename_in_place(room.draft_order, old_name, new_name))

    def move_by(self, code: str, index: int, direction: int) -> RoomRecord:
        room = self._load(code)
        return self._persist(room, move_by(room.draft_order, index, direction))

    def promote_to_first(self, code: str, index: int) -> RoomRecord:
        room = self._load(code)
        return self._persist(room, promote_to_first(room.draft_order, index))

    def reset_alphabetical(self, code: str) -> RoomRecord:
        room = self._load(code)
        return self._persist(room, reset_alphabetical(room.draft_order))

    def shuffle(self, code: str) -> RoomRecord:
        room = self._load(code)
        return self._persist(room, shuffle(room.draft_order, self._rng))

    def sync_on_join(self, code: str, previous_name: Optional[str], name: str) -> RoomRecord:
        """
        Keep the draft order in step with a join.

        - Known email with a new name: rename in place
        - New email: append once
        """
        room = self._load(code)
        if previous_name is not None:
            new_order = rename_in_place(room.draft_order, previous_name, name)
        else:
            new_order = append_if_absent(room.draft_order, name)
        return self._persist(room, new_order)

    def ensure_seeded(self, code: str) -> RoomRecord:
        """
        Seed an empty draft order from the participants, in join order.

        Only kicks in once there are at least two participants, mirroring
        the board's first-load behaviour.
        """
        room = self._load(code)
        if room.draft_order:
            return room

        names = [p.name for p in self._store.list_participants(code)]
        if len(names) < 2:
            return room
        return self._persist(room, names)
