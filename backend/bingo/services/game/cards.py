import random
from typing import Optional

from bingo.models import Card, FREE_SPACE

COLUMN_SPAN = 15
CARD_SIZE = 5
CENTER = CARD_SIZE // 2

_ADJECTIVES = ['Speedy', 'Lucky', 'Brave', 'Smart', 'Happy', 'Clever', 'Swift', 'Bold', 'Wise', 'Cool']
_NOUNS = ['Player', 'Gamer', 'Winner', 'Star', 'Hero', 'Champion', 'Master', 'Ace', 'Pro', 'Legend']


def column_range(col: int) -> range:
    """B=1..15, I=16..30, N=31..45, G=46..60, O=61..75."""
    start = COLUMN_SPAN * col + 1
    return range(start, start + COLUMN_SPAN)


def generate_card(rng: Optional[random.Random] = None) -> Card:
    """Build a card with five distinct values per column and a free center."""
    rng = rng or random.Random()
    columns = []
    for col in range(CARD_SIZE):
        values = rng.sample(column_range(col), CARD_SIZE)
        if col == CENTER:
            values[CENTER] = FREE_SPACE
        columns.append(tuple(values))
    return Card(columns=tuple(columns))


def generate_player_name(rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    return f"{rng.choice(_ADJECTIVES)}{rng.choice(_NOUNS)}{rng.randrange(1000)}"
