"""Pot accounting and settlement."""
from dataclasses import dataclass, field

from holdem.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Pot:
    """Single pot for a hand. Side pots are not tracked."""

    total: int = 0
    _contributions: dict[str, int] = field(default_factory=dict)  # name -> total contributed

    def add_bet(self, name: str, amount: int) -> None:
        """Add a bet to the pot.

        Args:
            name: Player's name.
            amount: Bet amount.
        """
        if amount < 0:
            raise ValueError(f"Cannot add negative amount {amount} to the pot")
        self._contributions[name] = self._contributions.get(name, 0) + amount
        self.total += amount

    def get_total(self) -> int:
        """Get total pot amount."""
        return self.total

    def get_contribution(self, name: str) -> int:
        """Get a player's total contribution to the pot."""
        return self._contributions.get(name, 0)

    def reset(self) -> None:
        """Reset pot for new hand."""
        self.total = 0
        self._contributions = {}

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "contributions": dict(self._contributions),
        }


def split_pot(amount: int, winners: list[str]) -> dict[str, int]:
    """Divide a pot between tied winners.

    Each winner gets `amount // len(winners)`; the whole remainder goes to
    the first winner in the list.

    Args:
        amount: Pot size.
        winners: Winner names in showdown iteration order.

    Returns:
        Dict of name -> amount won.
    """
    if not winners:
        raise ValueError("Cannot split a pot with no winners")

    share, remainder = divmod(amount, len(winners))
    winnings = {name: share for name in winners}
    winnings[winners[0]] += remainder

    if remainder:
        logger.debug(f"Odd chips ({remainder}) awarded to {winners[0]}")
    return winnings
