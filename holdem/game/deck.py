"""Card deck implementation."""
import random
from enum import Enum
from dataclasses import dataclass
from typing import Optional

from holdem.utils.logger import get_logger

logger = get_logger(__name__)


class Suit(str, Enum):
    """Card suits."""
    HEARTS = "h"
    DIAMONDS = "d"
    CLUBS = "c"
    SPADES = "s"

    @property
    def symbol(self) -> str:
        """Suit glyph for display."""
        return {"h": "♥", "d": "♦", "c": "♣", "s": "♠"}[self.value]

    def __str__(self) -> str:
        return self.value


class Rank(int, Enum):
    """Card ranks (2-14, where 14 is Ace)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self) -> str:
        if self.value <= 10:
            return str(self.value)
        return {11: "J", 12: "Q", 13: "K", 14: "A"}[self.value]


@dataclass(frozen=True)
class Card:
    """A playing card. Cards order by rank only."""
    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{str(self.rank)}{str(self.suit)}"

    def __repr__(self) -> str:
        return str(self)

    def __lt__(self, other: "Card") -> bool:
        return self.rank < other.rank

    def __gt__(self, other: "Card") -> bool:
        return self.rank > other.rank

    @property
    def pretty(self) -> str:
        """Card with a suit glyph, e.g. 'A♠'."""
        return f"{str(self.rank)}{self.suit.symbol}"

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Parse card from string like 'Ah', '10s', '2c'.

        Args:
            s: Card string (rank + suit).

        Returns:
            Card instance.

        Raises:
            ValueError: If the string is not a valid card.
        """
        if len(s) < 2:
            raise ValueError(f"Invalid card: {s!r}")

        suit = Suit(s[-1].lower())
        rank_str = s[:-1].upper()

        rank_map = {"A": 14, "K": 13, "Q": 12, "J": 11, "T": 10}
        if rank_str in rank_map:
            rank = Rank(rank_map[rank_str])
        else:
            rank = Rank(int(rank_str))

        return cls(rank=rank, suit=suit)


def parse_cards(cards: str) -> list[Card]:
    """Parse a space-separated card list like 'Ah Kd 10c'."""
    return [Card.from_string(c) for c in cards.split()]


class Deck:
    """A standard 52-card deck, dealt from the top (end of the list)."""

    def __init__(self, rng: Optional[random.Random] = None):
        """Initialize and shuffle a new deck.

        Args:
            rng: Random source used for shuffling. A fresh unseeded one
                is created when omitted.
        """
        self._rng = rng or random.Random()
        self._cards: list[Card] = []
        self.reset()

    def reset(self) -> None:
        """Rebuild all 52 cards and shuffle."""
        self._cards = [
            Card(rank=rank, suit=suit)
            for suit in Suit
            for rank in Rank
        ]
        self.shuffle()

    def shuffle(self) -> None:
        """Shuffle the remaining cards."""
        self._rng.shuffle(self._cards)

    def deal(self, count: int = 1) -> list[Card]:
        """Deal cards from the top of the deck.

        Args:
            count: Number of cards to deal.

        Returns:
            List of dealt cards, in the order they came off the deck.

        Raises:
            ValueError: If not enough cards remain.
        """
        if count > len(self._cards):
            raise ValueError(f"Cannot deal {count} cards, only {len(self._cards)} remain")

        dealt = [self._cards.pop() for _ in range(count)]
        return dealt

    def deal_one(self) -> Card:
        """Deal a single card.

        Returns:
            The dealt card.
        """
        return self.deal(1)[0]

    def burn(self) -> Card:
        """Burn (discard) a card from the top of the deck.

        Returns:
            The burned card.
        """
        card = self.deal_one()
        logger.debug(f"Burned {card}")
        return card

    @property
    def remaining(self) -> int:
        """Number of cards remaining in the deck."""
        return len(self._cards)

    def __len__(self) -> int:
        return len(self._cards)
