from typing import Any, NamedTuple, Optional

UPDATE_PLAYERS = 'update_players'
UPDATE_ROOM_STATUS = 'update_room_status'
NUMBER_CALLED = 'number_called'
WAITING_STARTED = 'waiting_started'
WAITING_COUNTDOWN = 'waiting_countdown'
WAITING_ENDED = 'waiting_ended'
GAME_START = 'game_start'
GAME_END = 'game_end'
GAME_STOPPED = 'game_stopped'
ROOM_RESET = 'room_reset'
KICKED_FROM_ROOM = 'kicked_from_room'
BINGO_RESULT = 'bingo_result'
JOIN_ERROR = 'join_error'
PLAYER_JOINED = 'player_joined'
LEFT_GAME = 'left_game'
RESYNC_NUMBERS_RESULT = 'resync_numbers_result'
RESYNC_NUMBERS_ERROR = 'resync_numbers_error'
ROOM_STATUS_INFO = 'room_status_info'


class Event(NamedTuple):
    """An outbound message; ``to`` is a connection id, or None for the whole room."""
    name: str
    payload: Any
    to: Optional[str] = None
