"""Recoverable room errors.

Every error here is reported back to the connection that caused it and
never affects the room or the other players in it.
"""


class BingoError(Exception):
    """Base class for all room errors."""
    pass


class RoomNotFound(BingoError):
    def __init__(self, room_id):
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found")


class RoomNotJoinable(BingoError):
    """The room is not waiting for players (a round is running or just ended)."""
    def __init__(self, room_id, status):
        self.room_id = room_id
        self.status = status
        super().__init__("Cannot join - game is already in progress or finished")


class AlreadyJoined(BingoError):
    """The connection already holds a seat; carries the existing player."""
    def __init__(self, player):
        self.player = player
        super().__init__(f"Player {player.id} already joined")


class RoundNotActive(BingoError):
    def __init__(self, room_id, status):
        self.room_id = room_id
        self.status = status
        super().__init__("Game not in progress")


class InvalidClaim(BingoError):
    pass
