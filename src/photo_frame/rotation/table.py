from __future__ import annotations

import random
from threading import Lock
from typing import Callable, Generic, Optional, TypeVar

from .deck import CandidateSource, ExcludePredicate, ShuffledDeck

T = TypeVar("T")


class RotationTable(Generic[T]):
    """Independent exhaustive-shuffle decks, one per rotation key.

    ``source_factory`` builds the candidate source for a key the first time
    that key is drawn from.
    """

    def __init__(
        self,
        source_factory: Callable[[str], CandidateSource[T]],
        *,
        rng_factory: Callable[[], random.Random] = random.Random,
    ) -> None:
        self._source_factory = source_factory
        self._rng_factory = rng_factory
        self._lock = Lock()
        self._decks: dict[str, ShuffledDeck[T]] = {}

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._decks

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._decks)

    def get_deck(self, key: str) -> ShuffledDeck[T]:
        with self._lock:
            deck = self._decks.get(key)
            if deck is None:
                deck = ShuffledDeck(self._source_factory(key), rng=self._rng_factory(), name=key)
                self._decks[key] = deck
            return deck

    async def next(self, key: str, exclude: Optional[ExcludePredicate[T]] = None) -> T:
        return await self.get_deck(key).next(exclude)

    async def reset(self, key: str) -> None:
        with self._lock:
            deck = self._decks.get(key)
        if deck is not None:
            await deck.reset()
