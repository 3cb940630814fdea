"""
Naming service: room codes and join input normalisation

Pure logic, no store access.
"""
import random
import string

from core.exceptions import ValidationError


def generate_room_code() -> str:
    """
    Random 6-letter uppercase room code.

    Examples: ABCDEF, XYZABC

    Note:
    - Uniqueness is not checked here (caller's job)
    - 26^6 = 308,915,776 possibilities
    """
    return ''.join(random.choices(string.ascii_uppercase, k=6))


def normalize_room_code(code: str) -> str:
    """Room codes are case-insensitive; the canonical form is trimmed uppercase."""
    return (code or "").strip().upper()


def normalize_join(code: str, name: str, email: str):
    """
    Validate and normalise a join request.

    Returns:
        (room_code, display_name, email) with the email trimmed but keeping
        its original casing for storage

    Raises:
        ValidationError: any of the three is blank
    """
    room_code = normalize_room_code(code)
    display_name = (name or "").strip()
    email_raw = (email or "").strip()

    missing = [
        field for field, value in (("room", room_code), ("name", display_name), ("email", email_raw))
        if not value
    ]
    if missing:
        raise ValidationError("Room, name, and email are required.", fields=missing)

    return room_code, display_name, email_raw
