import logging
import threading
from typing import Callable, Dict, List, Optional

from bingo.exceptions import RoomNotFound
from .room import Room

logger = logging.getLogger(__name__)

DEFAULT_ROOM = 'default'


class RoomRegistry:
    """Process-lifetime table of rooms keyed by room id.

    Rooms are created on first reference and never removed; the default
    room exists from construction.
    """

    def __init__(self, room_factory: Callable[[str], Room], default_room_id: str = DEFAULT_ROOM):
        self._room_factory = room_factory
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()
        self.default_room_id = default_room_id
        self.default_room = self.get_or_create(default_room_id)

    def get(self, room_id) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(str(room_id))

    def require(self, room_id) -> Room:
        room = self.get(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        return room

    def get_or_create(self, room_id) -> Room:
        key = str(room_id)
        with self._lock:
            room = self._rooms.get(key)
            if room is None:
                room = self._room_factory(key)
                self._rooms[key] = room
                logger.info(f"[room-created] room={key}")
            return room

    def rooms(self) -> List[Room]:
        with self._lock:
            return list(self._rooms.values())

    def rooms_for(self, player_id: str) -> List[Room]:
        return [room for room in self.rooms() if room.has_player(player_id)]

    def player_count(self) -> int:
        return sum(len(room.players) for room in self.rooms())

    def __len__(self):
        with self._lock:
            return len(self._rooms)
