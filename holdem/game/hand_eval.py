"""Hand evaluation for Texas Hold'em."""
from enum import IntEnum
from typing import Iterable, Optional
from dataclasses import dataclass
from collections import Counter

from holdem.game.deck import Card, Rank
from holdem.utils.logger import get_logger

logger = get_logger(__name__)


class HandCategory(IntEnum):
    """Poker hand categories (higher is better)."""
    HIGH_CARD = 1
    PAIR = 2
    TWO_PAIR = 3
    THREE_OF_A_KIND = 4
    STRAIGHT = 5
    FLUSH = 6
    FULL_HOUSE = 7
    FOUR_OF_A_KIND = 8
    STRAIGHT_FLUSH = 9


class Ordering(IntEnum):
    """Result of comparing two evaluations."""
    LESS = -1
    EQUAL = 0
    GREATER = 1


@dataclass(frozen=True)
class HandEvaluation:
    """Result of hand evaluation."""
    category: HandCategory
    key: tuple[int, ...]  # Tiebreaker values (highest to lowest importance)
    description: str = ""

    def __lt__(self, other: "HandEvaluation") -> bool:
        if self.category != other.category:
            return self.category < other.category
        return self.key < other.key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HandEvaluation):
            return False
        return self.category == other.category and self.key == other.key

    def __hash__(self) -> int:
        return hash((self.category, self.key))

    def __gt__(self, other: "HandEvaluation") -> bool:
        return other < self

    def __le__(self, other: "HandEvaluation") -> bool:
        return self == other or self < other

    def __ge__(self, other: "HandEvaluation") -> bool:
        return self == other or self > other

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "category": self.category.name,
            "key": list(self.key),
            "description": self.description,
        }


def _rank_name(value: int) -> str:
    return str(Rank(value))


def _straight_high(ranks: Iterable[int]) -> Optional[int]:
    """Highest card of the best straight among distinct ranks, if any.

    The ace also plays low, so A-2-3-4-5 (the wheel) is a 5-high straight.
    """
    distinct = set(ranks)
    if Rank.ACE.value in distinct:
        distinct.add(1)

    for high in range(Rank.ACE.value, Rank.FIVE.value - 1, -1):
        if all(high - offset in distinct for offset in range(5)):
            return high
    return None


def _flush_ranks(cards: list[Card]) -> Optional[list[int]]:
    """Ranks (descending) of the suit holding five or more cards, if any."""
    suit_counts = Counter(c.suit for c in cards)
    suit, count = max(suit_counts.items(), key=lambda x: x[1])
    if count < 5:
        return None
    return sorted((c.rank.value for c in cards if c.suit == suit), reverse=True)


def _rank_profile(cards: list[Card]) -> list[tuple[int, int]]:
    """(rank, count) groups ordered by count, then rank, both descending."""
    counts = Counter(c.rank.value for c in cards)
    return sorted(counts.items(), key=lambda x: (x[1], x[0]), reverse=True)


def _kickers(profile: list[tuple[int, int]], exclude: set[int], count: int) -> tuple[int, ...]:
    """Highest `count` single ranks not already used by the made hand."""
    remaining = sorted((r for r, _ in profile if r not in exclude), reverse=True)
    return tuple(remaining[:count])


def evaluate(cards: Iterable[Card]) -> HandEvaluation:
    """Classify the best five-card hand available in `cards`.

    Any multiset of cards is accepted; duplicates are not rejected. With
    fewer than five cards the result is a high card with an empty key.

    Args:
        cards: Cards to evaluate (normally hole cards plus the board).

    Returns:
        HandEvaluation with category and tiebreaker key.

    Raises:
        ValueError: If no cards are given.
    """
    cards = list(cards)
    if not cards:
        raise ValueError("Cannot evaluate an empty set of cards")

    if len(cards) < 5:
        return HandEvaluation(
            category=HandCategory.HIGH_CARD,
            key=(),
            description="Incomplete hand",
        )

    ranks = [c.rank.value for c in cards]
    profile = _rank_profile(cards)
    flush_ranks = _flush_ranks(cards)
    straight_high = _straight_high(ranks)

    # Straight flush (the straight has to live inside the flush suit)
    if flush_ranks is not None and straight_high is not None:
        flush_straight_high = _straight_high(flush_ranks)
        if flush_straight_high is not None:
            if flush_straight_high == Rank.ACE:
                description = "Royal Flush"
            else:
                description = f"Straight Flush, {_rank_name(flush_straight_high)} high"
            return HandEvaluation(
                category=HandCategory.STRAIGHT_FLUSH,
                key=(flush_straight_high,),
                description=description,
            )

    top_rank, top_count = profile[0]

    # Four of a kind
    if top_count >= 4:
        kicker = _kickers(profile, {top_rank}, 1)
        return HandEvaluation(
            category=HandCategory.FOUR_OF_A_KIND,
            key=(top_rank,) + kicker,
            description=f"Four of a Kind, {_rank_name(top_rank)}s",
        )

    # Full house: a triple plus a pair from a different rank group. A second
    # triple can supply the pair.
    if top_count == 3:
        pair_ranks = [r for r, c in profile[1:] if c >= 2]
        if pair_ranks:
            pair_rank = pair_ranks[0]
            return HandEvaluation(
                category=HandCategory.FULL_HOUSE,
                key=(top_rank, pair_rank),
                description=(
                    f"Full House, {_rank_name(top_rank)}s full of {_rank_name(pair_rank)}s"
                ),
            )

    # Flush
    if flush_ranks is not None:
        key = tuple(flush_ranks[:5])
        return HandEvaluation(
            category=HandCategory.FLUSH,
            key=key,
            description=f"Flush, {_rank_name(key[0])} high",
        )

    # Straight
    if straight_high is not None:
        return HandEvaluation(
            category=HandCategory.STRAIGHT,
            key=(straight_high,),
            description=f"Straight, {_rank_name(straight_high)} high",
        )

    # Three of a kind
    if top_count == 3:
        return HandEvaluation(
            category=HandCategory.THREE_OF_A_KIND,
            key=(top_rank,) + _kickers(profile, {top_rank}, 2),
            description=f"Three of a Kind, {_rank_name(top_rank)}s",
        )

    # Two pair (a third pair only competes as the kicker)
    if top_count == 2 and profile[1][1] == 2:
        high_pair = top_rank
        low_pair = profile[1][0]
        return HandEvaluation(
            category=HandCategory.TWO_PAIR,
            key=(high_pair, low_pair) + _kickers(profile, {high_pair, low_pair}, 1),
            description=f"Two Pair, {_rank_name(high_pair)}s and {_rank_name(low_pair)}s",
        )

    # Pair
    if top_count == 2:
        return HandEvaluation(
            category=HandCategory.PAIR,
            key=(top_rank,) + _kickers(profile, {top_rank}, 3),
            description=f"Pair of {_rank_name(top_rank)}s",
        )

    # High card
    key = _kickers(profile, set(), 5)
    return HandEvaluation(
        category=HandCategory.HIGH_CARD,
        key=key,
        description=f"High Card, {_rank_name(key[0])}",
    )


def evaluate_hand(hole_cards: list[Card], community_cards: list[Card]) -> HandEvaluation:
    """Evaluate the best 5-card hand from hole cards and community cards.

    Args:
        hole_cards: Player's 2 hole cards.
        community_cards: 0-5 community cards.

    Returns:
        Best possible HandEvaluation.
    """
    result = evaluate(list(hole_cards) + list(community_cards))
    logger.debug(f"Evaluated {hole_cards} + {community_cards}: {result.description}")
    return result


def compare(a: HandEvaluation, b: HandEvaluation) -> Ordering:
    """Compare two evaluations.

    Category dominates; within a category the keys are walked position by
    position and the first difference decides.
    """
    if a.category != b.category:
        return Ordering.GREATER if a.category > b.category else Ordering.LESS

    for left, right in zip(a.key, b.key):
        if left != right:
            return Ordering.GREATER if left > right else Ordering.LESS

    if len(a.key) != len(b.key):
        return Ordering.GREATER if len(a.key) > len(b.key) else Ordering.LESS
    return Ordering.EQUAL


def find_winners(results: list[tuple[str, HandEvaluation]]) -> list[str]:
    """Return every player holding the best hand, in iteration order.

    Args:
        results: List of (player name, HandEvaluation) tuples.

    Returns:
        Names of the winning players (several on a tie).
    """
    if not results:
        return []

    best_hand = results[0][1]
    winners = [results[0][0]]

    for name, hand in results[1:]:
        ordering = compare(hand, best_hand)
        if ordering == Ordering.GREATER:
            best_hand = hand
            winners = [name]
        elif ordering == Ordering.EQUAL:
            winners.append(name)

    return winners
