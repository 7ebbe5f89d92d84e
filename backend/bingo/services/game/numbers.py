import random
from typing import List, Optional

LOWEST_NUMBER = 1
HIGHEST_NUMBER = 75
ALL_NUMBERS = tuple(range(LOWEST_NUMBER, HIGHEST_NUMBER + 1))


class NumberPool:
    """Undrawn and called numbers for one round.

    The two collections always partition 1..75: a number moves from
    ``undrawn`` to ``called`` on draw and only ``reset`` moves it back.
    """

    def __init__(self, rng: Optional[random.Random] = None, undrawn=None):
        self._rng = rng or random.Random()
        self._undrawn: List[int] = []
        self._called: List[int] = []
        self.reset()
        if undrawn is not None:
            keep = set(undrawn)
            self._called = [n for n in ALL_NUMBERS if n not in keep]
            self._undrawn = [n for n in ALL_NUMBERS if n in keep]

    def draw(self) -> Optional[int]:
        """Remove and return a random undrawn number, or None when exhausted."""
        if not self._undrawn:
            return None
        index = self._rng.randrange(len(self._undrawn))
        # swap-remove keeps the pick uniform and O(1)
        self._undrawn[index], self._undrawn[-1] = self._undrawn[-1], self._undrawn[index]
        number = self._undrawn.pop()
        self._called.append(number)
        return number

    def reset(self) -> None:
        self._undrawn = list(ALL_NUMBERS)
        self._called = []

    @property
    def called(self) -> List[int]:
        return list(self._called)

    @property
    def undrawn(self) -> frozenset:
        return frozenset(self._undrawn)

    @property
    def remaining(self) -> int:
        return len(self._undrawn)

    @property
    def exhausted(self) -> bool:
        return not self._undrawn

    def __len__(self):
        return len(self._called)
