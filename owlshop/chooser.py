"""
Weighted random selection of zero-argument actions.
"""

import bisect
import itertools
import random
import threading
from typing import Callable, NamedTuple, Optional, Sequence

from owlshop.errors import ChooserError

Action = Callable[[], None]


class Choice(NamedTuple):
    action: Action
    weight: int


class Chooser:
    """Immutable weighted table; pick() is safe for any number of threads.

    The cumulative weights are read-only after construction. The random source
    is a private ``random.Random`` whose draws are serialized by a lock.
    """

    def __init__(self, choices: Sequence[Choice], rng: Optional[random.Random] = None):
        if not choices:
            raise ChooserError("at least one choice is required")

        choices = [Choice(*c) for c in choices]
        for choice in choices:
            if not callable(choice.action):
                raise ChooserError(f"choice {choice.action!r} is not callable")
            if isinstance(choice.weight, bool) or not isinstance(choice.weight, int):
                raise ChooserError(f"weight for {choice.action!r} must be an int, got {choice.weight!r}")
            if choice.weight <= 0:
                raise ChooserError(f"weight for {choice.action!r} must be positive, got {choice.weight}")

        self._actions = tuple(c.action for c in choices)
        self._totals = tuple(itertools.accumulate(c.weight for c in choices))
        self._total = self._totals[-1]
        self._rng = rng or random.Random()
        self._rng_lock = threading.Lock()

    @property
    def total(self) -> int:
        return self._total

    def __len__(self) -> int:
        return len(self._actions)

    def pick(self) -> Action:
        with self._rng_lock:
            r = self._rng.randrange(self._total)
        # smallest i with totals[i] > r
        return self._actions[bisect.bisect_right(self._totals, r)]
