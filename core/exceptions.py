"""
Custom exceptions

All domain errors live here so the API layer can map them in one place.
Claim races and turn violations are not exceptions: the ClaimArbiter returns
them as outcomes.
"""


class TicketDraftException(Exception):
    """Base class for every ticket draft error"""
    pass


# ============ Room ============

class RoomNotFound(TicketDraftException):
    """Room does not exist"""
    def __init__(self, code):
        self.code = code
        super().__init__(f"Room {code} not found")


# ============ Game ============

class GameNotFound(TicketDraftException):
    """Game does not exist in this room"""
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} not found")


# ============ Input ============

class ValidationError(TicketDraftException):
    """Missing or malformed fields on join / add, rejected before any store call"""
    def __init__(self, message, fields=None):
        self.fields = list(fields or [])
        super().__init__(message)


# ============ Store ============

class StoreError(TicketDraftException):
    """The backing store failed; re-read state before retrying"""
    pass
