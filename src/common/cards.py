# src/common/cards.py

import functools
import random
from typing import List, Sequence, Tuple

from .constants import (
    HAND_SIZE,
    NUM_CARDS_IN_SUIT,
    NUM_CARDS_TOTAL,
    RANK_NAMES,
    SUIT_NAMES,
)
from .errors import CardValueTooBig


@functools.total_ordering
class Card:
    """
    One of the 52 cards, stored as its wire value.

    value = suit * 13 + rank, so rank 0..12 is Two..Ace and suit 0..3 is
    Clubs, Diamonds, Hearts, Spades.

    Cards compare by rank only: Two of Clubs == Two of Diamonds.
    Use `.value` when the exact card matters.
    """

    __slots__ = ("_value",)

    def __init__(self, value: int) -> None:
        if not 0 <= value < NUM_CARDS_TOTAL:
            raise CardValueTooBig(value, NUM_CARDS_TOTAL - 1)
        self._value = value

    @classmethod
    def from_value(cls, value: int) -> "Card":
        return cls(value)

    @property
    def value(self) -> int:
        return self._value

    @property
    def rank(self) -> int:
        return self._value % NUM_CARDS_IN_SUIT

    @property
    def suit(self) -> int:
        return self._value // NUM_CARDS_IN_SUIT

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.rank == other.rank

    def __lt__(self, other: "Card") -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.rank < other.rank

    def __hash__(self) -> int:
        # must agree with rank-only equality
        return hash(self.rank)

    def __repr__(self) -> str:
        return f"Card({self._value})"

    def __str__(self) -> str:
        return f"{RANK_NAMES[self.rank]} of {SUIT_NAMES[self.suit]}"


Hand = Tuple[Card, ...]


class Deck:
    """A full deck in some order. Build one per game with `fresh_shuffled`."""

    def __init__(self, values: Sequence[int]) -> None:
        cards = [Card(v) for v in values]
        if sorted(c.value for c in cards) != list(range(NUM_CARDS_TOTAL)):
            raise ValueError("A deck must hold each of the 52 cards exactly once")
        self._cards: List[Card] = cards

    @classmethod
    def fresh_shuffled(cls, rng: random.Random) -> "Deck":
        values = list(range(NUM_CARDS_TOTAL))
        rng.shuffle(values)
        return cls(values)

    @property
    def cards(self) -> Tuple[Card, ...]:
        return tuple(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def deal_two(self) -> Tuple[Hand, Hand]:
        """First half to player one, second half to player two, order kept."""
        return tuple(self._cards[:HAND_SIZE]), tuple(self._cards[HAND_SIZE:])
