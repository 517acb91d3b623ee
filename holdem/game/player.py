"""Player model."""
from dataclasses import dataclass, field
from holdem.game.deck import Card


@dataclass
class Player:
    """A player seated at the table."""

    name: str
    seat: int
    chips: int = 0
    hole_cards: list[Card] = field(default_factory=list)
    current_bet: int = 0  # Chips put in on the current street
    total_contributed: int = 0  # Chips put in over the whole hand
    in_round: bool = False
    is_folded: bool = False
    is_small_blind: bool = False
    is_big_blind: bool = False

    def reset_for_new_hand(self) -> None:
        """Reset per-hand state. Players with no chips sit the hand out."""
        self.hole_cards = []
        self.current_bet = 0
        self.total_contributed = 0
        self.in_round = self.chips > 0
        self.is_folded = False
        self.is_small_blind = False
        self.is_big_blind = False

    def reset_for_new_street(self) -> None:
        """Clear the street bet before the next betting round."""
        self.current_bet = 0

    def bet(self, amount: int) -> int:
        """Move chips from the stack into the current bet.

        Args:
            amount: Amount to bet.

        Returns:
            The amount bet.

        Raises:
            ValueError: If the amount is negative or exceeds the stack.
        """
        if amount < 0:
            raise ValueError(f"Bet amount cannot be negative, got {amount}")
        if amount > self.chips:
            raise ValueError(f"{self.name} cannot bet {amount} with {self.chips} chips")

        self.chips -= amount
        self.current_bet += amount
        self.total_contributed += amount
        return amount

    def fold(self) -> None:
        """Fold the hand."""
        self.is_folded = True

    def receive_card(self, card: Card) -> None:
        """Take one hole card."""
        self.hole_cards.append(card)

    def win_pot(self, amount: int) -> None:
        """Win chips from the pot.

        Args:
            amount: Amount won.
        """
        self.chips += amount

    def owes(self, current_bet: int) -> int:
        """Chips needed to match `current_bet` on this street."""
        return max(current_bet - self.current_bet, 0)

    @property
    def is_contesting(self) -> bool:
        """In the hand and not folded."""
        return self.in_round and not self.is_folded

    def to_dict(self, hide_cards: bool = True) -> dict:
        """Convert to dictionary for display.

        Args:
            hide_cards: If True, don't include hole cards.

        Returns:
            Player state dictionary.
        """
        data = {
            "name": self.name,
            "seat": self.seat,
            "chips": self.chips,
            "current_bet": self.current_bet,
            "total_contributed": self.total_contributed,
            "in_round": self.in_round,
            "is_folded": self.is_folded,
            "is_small_blind": self.is_small_blind,
            "is_big_blind": self.is_big_blind,
            "has_cards": len(self.hole_cards) > 0,
        }

        if not hide_cards:
            data["hole_cards"] = [str(c) for c in self.hole_cards]

        return data
