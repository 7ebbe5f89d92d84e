from typing import Iterable, Optional

from bingo.models import Card, FREE_SPACE
from .cards import CARD_SIZE

DIAGONAL_DOWN = 'Diagonal (top-left to bottom-right)'
DIAGONAL_UP = 'Diagonal (top-right to bottom-left)'


def _lines():
    """Yield (label, cells) in win priority order: rows, columns, diagonals."""
    for row in range(CARD_SIZE):
        yield f"Row {row + 1}", [(col, row) for col in range(CARD_SIZE)]
    for col in range(CARD_SIZE):
        yield f"Column {col + 1}", [(col, row) for row in range(CARD_SIZE)]
    yield DIAGONAL_DOWN, [(i, i) for i in range(CARD_SIZE)]
    yield DIAGONAL_UP, [(i, CARD_SIZE - 1 - i) for i in range(CARD_SIZE)]


def find_winning_pattern(card: Card, called_numbers: Iterable[int]) -> Optional[str]:
    """Return the label of the first fully marked line, or None.

    Only membership of ``called_numbers`` matters, never draw order.
    """
    marked = set(called_numbers)
    marked.add(FREE_SPACE)
    for label, cells in _lines():
        if all(card.cell(col, row) in marked for col, row in cells):
            return label
    return None
