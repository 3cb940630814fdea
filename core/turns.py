"""
Turn Sequencer: who is on the clock

Pure functions, no store access. Re-evaluate whenever turn, the draft
order or the snake flag changes.
"""
from typing import Optional, Sequence


def active_index(turn: int, roster_size: int, snake: bool) -> Optional[int]:
    """
    Map a turn counter to the index of the active participant.

    Rules:
    - Empty roster: no one is active (None)
    - round = turn // roster_size, pos = turn % roster_size
    - Linear order, or an even round: pos
    - Snake order on an odd round: roster_size - 1 - pos

    Examples (roster of 3, snake):
        turn 0, 1, 2 -> 0, 1, 2
        turn 3, 4, 5 -> 2, 1, 0
        turn 6       -> 0

    The result is always in range, even when turn grew under a larger
    roster that has since shrunk.
    """
    if turn < 0 or roster_size < 0:
        raise ValueError(f"turn and roster_size must be non-negative, got {turn}, {roster_size}")
    if roster_size == 0:
        return None

    round_number, pos = divmod(turn, roster_size)
    if not snake or round_number % 2 == 0:
        return pos
    return roster_size - 1 - pos


def active_participant(order: Sequence[str], turn: int, snake: bool) -> Optional[str]:
    """Name of the participant whose turn it is, or None for an empty order."""
    idx = active_index(turn, len(order), snake)
    if idx is None:
        return None
    return order[idx]
