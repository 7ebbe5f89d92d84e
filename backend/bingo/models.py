from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

FREE_SPACE = 0


class RoomStatus(str, Enum):
    WAITING = 'waiting'
    PLAYING = 'playing'
    FINISHED = 'finished'


@dataclass(frozen=True)
class Card:
    """A 5x5 bingo card stored column-major; ``columns[2][2]`` is the free space."""
    columns: Tuple[Tuple[int, ...], ...]

    def cell(self, col: int, row: int) -> int:
        return self.columns[col][row]

    def to_list(self):
        return [list(column) for column in self.columns]


@dataclass
class Player:
    id: str
    name: str
    card: Optional[Card] = None

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
        }


@dataclass(frozen=True)
class Winner:
    player_id: str
    name: str
    pattern: str

    def to_dict(self):
        return {
            'id': self.player_id,
            'name': self.name,
            'win_pattern': self.pattern,
        }
