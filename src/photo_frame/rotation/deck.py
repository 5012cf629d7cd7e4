from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Generic, Iterable, Optional, TypeVar

from ..errors import ExhaustedError

logger = logging.getLogger("photo_frame.rotation")

T = TypeVar("T")

CandidateSource = Callable[[], Awaitable[Iterable[T]]]
ExcludePredicate = Callable[[T], bool]


class ShuffledDeck(Generic[T]):
    """Randomized draw order over a candidate set, without replacement.

    Every candidate of a snapshot is drawn once before the deck refills from
    a fresh snapshot. Pops, refills and resets are serialized by one lock, and
    the refill awaits the candidate source while holding it: a slow refill
    stalls every other drawer of this deck.
    """

    def __init__(
        self,
        source: CandidateSource[T],
        *,
        rng: Optional[random.Random] = None,
        name: str = "deck",
    ) -> None:
        if source is None:
            raise TypeError("source must be provided")
        self._source = source
        self._rng = rng or random.Random()
        self._name = name
        self._lock = asyncio.Lock()
        self._order: list[T] = []
        self._snapshot_size = 0

    @property
    def remaining(self) -> int:
        return len(self._order)

    @property
    def snapshot_size(self) -> int:
        return self._snapshot_size

    async def next(self, exclude: Optional[ExcludePredicate[T]] = None) -> T:
        """Pop the next non-excluded item, refilling when the order runs dry.

        Raises:
            ExhaustedError: the source returned no candidates, or every item of
                a fresh snapshot taken during this draw was excluded.
        """
        async with self._lock:
            refilled = False
            while True:
                if not self._order:
                    if refilled:
                        raise ExhaustedError(
                            f"Every candidate of {self._name} is excluded."
                        )
                    await self._refill_locked()
                    refilled = True
                    if not self._order:
                        raise ExhaustedError()

                item = self._order.pop()
                if exclude is None or not exclude(item):
                    return item

    async def reset(self) -> None:
        async with self._lock:
            self._order.clear()
        logger.debug({"event": "rotation.reset", "deck": self._name})

    async def _refill_locked(self) -> None:
        # Only assign once the source has answered, so a failed or cancelled
        # refill leaves the deck empty.
        candidates = list(await self._source())

        # Fisher-Yates
        for i in range(len(candidates) - 1, 0, -1):
            j = self._rng.randint(0, i)
            candidates[i], candidates[j] = candidates[j], candidates[i]

        self._order = candidates
        self._snapshot_size = len(candidates)
        logger.info({"event": "rotation.refill", "deck": self._name, "size": self._snapshot_size})
