"""
Game service: validation, filtering and grouping of games

Pure computation over ItemRecords; the store does the persistence.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.exceptions import ValidationError
from core.room_store import ItemRecord
from models import DAYS_OF_WEEK, TIERS

REQUIRED_GAME_FIELDS = ("date", "time", "day", "opponent", "tier", "price")


def validate_game_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Check an add-game payload before anything touches the store.

    Rules:
    - Every field in REQUIRED_GAME_FIELDS is present and non-blank
    - day is one of DAYS_OF_WEEK, tier one of TIERS
    - price parses as a non-negative decimal

    Returns:
        cleaned fields, strings trimmed and price as Decimal

    Raises:
        ValidationError
    """
    cleaned: Dict[str, Any] = {}
    missing = []
    for field in REQUIRED_GAME_FIELDS:
        value = data.get(field)
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            missing.append(field)
        cleaned[field] = value

    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)

    if cleaned["day"] not in DAYS_OF_WEEK:
        raise ValidationError(f"Unknown day {cleaned['day']!r}", fields=["day"])
    if cleaned["tier"] not in TIERS:
        raise ValidationError(f"Unknown tier {cleaned['tier']!r}", fields=["tier"])

    try:
        price = Decimal(str(cleaned["price"]))
    except InvalidOperation:
        raise ValidationError(f"Price must be a number, got {cleaned['price']!r}", fields=["price"])
    if not price.is_finite() or price < 0:
        raise ValidationError("Price must be a non-negative number", fields=["price"])
    cleaned["price"] = price.quantize(Decimal("0.01"))

    return cleaned


def filter_games(games: Iterable[ItemRecord], available_only: bool = False, tier: Optional[str] = None,
                 day: Optional[str] = None, q: Optional[str] = None) -> List[ItemRecord]:
    """Board filters: unclaimed only, exact tier, exact day, opponent substring (case-insensitive)."""
    needle = q.lower() if q else None
    result = []
    for g in games:
        if available_only and g.is_claimed:
            continue
        if tier and g.tier != tier:
            continue
        if day and g.day != day:
            continue
        if needle and needle not in g.opponent.lower():
            continue
        result.append(g)
    return result


def picks_by_player(names: Iterable[str], games: Iterable[ItemRecord]) -> Dict[str, List[ItemRecord]]:
    """
    Group claimed games under each participant name.

    Games picked by a name that is no longer a participant (e.g. after a
    rename) are left out, like the board did.
    """
    picks: Dict[str, List[ItemRecord]] = {name: [] for name in names}
    for g in games:
        if g.picked_by and g.picked_by in picks:
            picks[g.picked_by].append(g)
    return picks
