"""Table state machine for Texas Hold'em."""
import random
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Callable, Any, Awaitable

from holdem.game.deck import Deck, Card
from holdem.game.player import Player
from holdem.game.pot import Pot, split_pot
from holdem.game.betting import BettingRound, Action, ActionContext, ActionProvider, Street
from holdem.game.hand_eval import evaluate_hand, find_winners, HandEvaluation
from holdem.config import config
from holdem.utils.logger import get_logger

logger = get_logger(__name__)


class TableState(str, Enum):
    """Table states."""
    WAITING = "waiting"          # Between hands
    PREFLOP = "preflop"          # Pre-flop betting
    FLOP = "flop"                # Flop betting
    TURN = "turn"                # Turn betting
    RIVER = "river"              # River betting
    SHOWDOWN = "showdown"        # Settling the pot
    HAND_COMPLETE = "hand_complete"  # Hand finished


# Community cards revealed before each post-flop street
_BOARD_STREETS = (
    (Street.FLOP, TableState.FLOP, 3),
    (Street.TURN, TableState.TURN, 1),
    (Street.RIVER, TableState.RIVER, 1),
)


@dataclass
class HandSummary:
    """Settlement of a completed hand."""
    hand_number: int
    pot_total: int
    community_cards: list[Card]
    winnings: dict[str, int]  # name -> chips won
    evaluations: dict[str, HandEvaluation] = field(default_factory=dict)  # empty when uncontested
    chips: dict[str, int] = field(default_factory=dict)  # name -> stack after settlement

    @property
    def winners(self) -> list[str]:
        """Names of the players who won chips."""
        return list(self.winnings)

    @property
    def went_to_showdown(self) -> bool:
        return bool(self.evaluations)

    def to_dict(self) -> dict:
        """Convert to dictionary for display."""
        return {
            "hand_number": self.hand_number,
            "pot_total": self.pot_total,
            "community_cards": [str(c) for c in self.community_cards],
            "winners": [
                {
                    "name": name,
                    "amount": amount,
                    "hand": (
                        self.evaluations[name].description
                        if name in self.evaluations else "Others folded"
                    ),
                }
                for name, amount in self.winnings.items()
            ],
            "hands": {
                name: evaluation.to_dict()
                for name, evaluation in self.evaluations.items()
            },
            "chips": dict(self.chips),
        }


class Table:
    """A poker table running hands of Texas Hold'em."""

    def __init__(
        self,
        table_id: str = "main",
        small_blind: Optional[int] = None,
        big_blind: Optional[int] = None,
        min_players: Optional[int] = None,
        max_players: Optional[int] = None,
        action_provider: Optional[ActionProvider] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize a poker table.

        Args:
            table_id: Table identifier used in logs.
            small_blind: Small blind amount.
            big_blind: Big blind amount.
            min_players: Minimum funded players to start a hand.
            max_players: Number of seats.
            action_provider: Async callable asked for every player decision.
            rng: Random source for shuffling; seeded from config when omitted.
        """
        self.table_id = table_id
        self.small_blind = small_blind if small_blind is not None else config.small_blind
        self.big_blind = big_blind if big_blind is not None else config.big_blind
        self.min_players = min_players if min_players is not None else config.min_players
        self.max_players = max_players if max_players is not None else config.max_players

        self.state = TableState.WAITING
        self.players: dict[int, Player] = {}  # seat -> player
        self.deck = Deck(rng or random.Random(config.deck_seed))
        self.pot = Pot()
        self.community_cards: list[Card] = []

        self.dealer_seat: Optional[int] = None
        self.current_betting_round: Optional[BettingRound] = None
        self.hand_number: int = 0

        self._action_provider = action_provider

        # Callbacks for broadcasting events
        self._event_callback: Optional[Callable[[str, Any], Awaitable[None]]] = None

    def set_action_provider(self, provider: ActionProvider) -> None:
        """Set the callable that supplies player decisions."""
        self._action_provider = provider

    def set_event_callback(self, callback: Callable[[str, Any], Awaitable[None]]) -> None:
        """Set callback for broadcasting events.

        Args:
            callback: Async function(event_type, data) to call on events.
        """
        self._event_callback = callback

    async def _emit(self, event_type: str, data: Any) -> None:
        """Emit an event via callback."""
        if self._event_callback:
            await self._event_callback(event_type, data)

    # Player management

    def add_player(self, player: Player) -> bool:
        """Seat a player.

        Args:
            player: Player to add.

        Returns:
            True if player was added.
        """
        if player.seat in self.players:
            return False
        if player.seat < 0 or player.seat >= self.max_players:
            return False
        if self.get_player(player.name):
            return False

        self.players[player.seat] = player
        logger.info(f"{player.name} joined table {self.table_id} at seat {player.seat}")
        return True

    def remove_player(self, name: str) -> Optional[Player]:
        """Remove a player from the table between hands.

        Args:
            name: Name of the player to remove.

        Returns:
            Removed player or None.
        """
        for seat, player in list(self.players.items()):
            if player.name == name:
                del self.players[seat]
                logger.info(f"{player.name} left table {self.table_id}")
                return player
        return None

    def get_player(self, name: str) -> Optional[Player]:
        """Get player by name (case-insensitive).

        Args:
            name: Player's name.

        Returns:
            Player if found.
        """
        for player in self.players.values():
            if player.name.lower() == name.lower():
                return player
        return None

    def get_next_available_seat(self) -> Optional[int]:
        """Get the next available seat.

        Returns:
            Seat number or None if full.
        """
        for seat in range(self.max_players):
            if seat not in self.players:
                return seat
        return None

    def _seated(self) -> list[Player]:
        """All seated players in seat order."""
        return [self.players[seat] for seat in sorted(self.players)]

    def _players_after_dealer(self) -> list[Player]:
        """In-round players in seat order, starting left of the dealer."""
        seated = [p for p in self._seated() if p.in_round]
        after = [p for p in seated if p.seat > self.dealer_seat]
        before = [p for p in seated if p.seat <= self.dealer_seat]
        return after + before

    def get_contesting_players(self) -> list[Player]:
        """Players in the hand who have not folded, in seat order."""
        return [p for p in self._seated() if p.is_contesting]

    # Game flow

    def can_start_hand(self) -> bool:
        """Check if a hand can be started."""
        funded = [p for p in self.players.values() if p.chips > 0]
        return len(funded) >= max(self.min_players, 2)

    async def play_hand(self) -> HandSummary:
        """Play one complete hand, from blinds to settlement.

        Returns:
            Settlement summary.

        Raises:
            ValueError: If the hand cannot start.
        """
        if self._action_provider is None:
            raise ValueError("No action provider set")
        if not self.can_start_hand():
            raise ValueError(
                f"Need at least {max(self.min_players, 2)} players with chips to start a hand"
            )
        if self.state != TableState.WAITING:
            raise ValueError(f"Cannot start a hand while {self.state.value}")

        self.hand_number += 1

        # Reset for new hand
        self.deck.reset()
        self.pot.reset()
        self.community_cards = []

        for player in self.players.values():
            player.reset_for_new_hand()

        try:
            summary = await self._play_streets()
        except BaseException:
            self._abandon_hand()
            raise

        self._end_hand()
        await self._emit("hand_result", summary.to_dict())
        return summary

    async def _play_streets(self) -> HandSummary:
        """Post blinds, deal, run every betting round and settle the pot."""
        self._place_dealer()
        sb_player, bb_player = self._assign_blinds()
        self._post_blinds(sb_player, bb_player)
        self._deal_hole_cards()

        logger.info(
            f"Started hand #{self.hand_number} on table {self.table_id}, "
            f"dealer seat {self.dealer_seat}"
        )

        await self._emit("hand_started", {
            "hand_number": self.hand_number,
            "dealer_seat": self.dealer_seat,
            "small_blind": sb_player.name,
            "big_blind": bb_player.name,
        })

        seated = self._seated()
        bb_index = seated.index(bb_player)

        self.state = TableState.PREFLOP
        await self._run_betting_round(Street.PREFLOP, bb_index + 1)

        for street, state, count in _BOARD_STREETS:
            if len(self.get_contesting_players()) <= 1:
                break

            self.state = state
            self._deal_community_cards(count)
            for player in seated:
                player.reset_for_new_street()

            await self._emit("state_changed", {
                "state": self.state.value,
                "community_cards": [str(c) for c in self.community_cards],
                "pot": self.pot.get_total(),
            })

            await self._run_betting_round(street, bb_index)

        return self._showdown()

    def _place_dealer(self) -> None:
        """Put the button on an occupied seat for the first hand."""
        seats = sorted(self.players)
        if self.dealer_seat is None:
            self.dealer_seat = seats[0]

    def _advance_dealer(self) -> None:
        """Move dealer button to the next occupied seat."""
        seats = sorted(self.players)
        if not seats:
            return

        for seat in seats:
            if seat > self.dealer_seat:
                self.dealer_seat = seat
                break
        else:
            self.dealer_seat = seats[0]

    def _assign_blinds(self) -> tuple[Player, Player]:
        """Small blind is dealer+1, big blind dealer+2, among players in the hand."""
        ordered = self._players_after_dealer()
        sb_player = ordered[0]
        bb_player = ordered[1 % len(ordered)]
        sb_player.is_small_blind = True
        bb_player.is_big_blind = True
        return sb_player, bb_player

    def _post_blinds(self, sb_player: Player, bb_player: Player) -> None:
        """Post small and big blinds."""
        sb_amount = self._post_blind(sb_player, self.small_blind)
        bb_amount = self._post_blind(bb_player, self.big_blind)
        logger.info(f"Blinds posted: {sb_player.name}={sb_amount}, {bb_player.name}={bb_amount}")

    def _post_blind(self, player: Player, amount: int) -> int:
        """Force a blind bet. A player who cannot cover it posts nothing."""
        if player.chips < amount:
            logger.warning(f"{player.name} cannot cover blind of {amount}, not collected")
            return 0

        player.bet(amount)
        self.pot.add_bet(player.name, amount)
        return amount

    def _deal_hole_cards(self) -> None:
        """Deal 2 hole cards to each player in the hand, one at a time."""
        ordered = self._players_after_dealer()
        for _ in range(2):
            for player in ordered:
                player.receive_card(self.deck.deal_one())

    def _deal_community_cards(self, count: int) -> None:
        """Burn one card, then reveal `count` community cards.

        Args:
            count: Number of cards to deal.
        """
        self.deck.burn()
        cards = self.deck.deal(count)
        self.community_cards.extend(cards)
        logger.info(f"Dealt {count} community cards: {cards}")

    async def _run_betting_round(self, street: Street, first_to_act: int) -> None:
        """Hand the pot and bets to a betting round for one street."""
        self.current_betting_round = BettingRound(
            players=self._seated(),
            pot=self.pot,
            big_blind=self.big_blind,
            first_to_act=first_to_act,
            street=street,
            community_cards=self.community_cards,
        )
        try:
            await self.current_betting_round.play(self._request_action, self._on_action)
        finally:
            self.current_betting_round = None

    async def _request_action(self, context: ActionContext) -> Action:
        return await self._action_provider(context)

    async def _on_action(self, player: Player, action: Action) -> None:
        await self._emit("player_action", {
            "name": player.name,
            "seat": player.seat,
            "action": action.to_dict(),
            "pot": self.pot.get_total(),
        })

    def _showdown(self) -> HandSummary:
        """Determine winners and pay out the pot."""
        self.state = TableState.SHOWDOWN

        contesting = self.get_contesting_players()
        pot_total = self.pot.get_total()
        evaluations: dict[str, HandEvaluation] = {}

        if len(contesting) == 1:
            winnings = {contesting[0].name: pot_total}
        else:
            hand_results = [
                (p.name, evaluate_hand(p.hole_cards, self.community_cards))
                for p in contesting
            ]
            evaluations = dict(hand_results)
            winnings = split_pot(pot_total, find_winners(hand_results))

        for name, amount in winnings.items():
            self.get_player(name).win_pot(amount)

        summary = HandSummary(
            hand_number=self.hand_number,
            pot_total=pot_total,
            community_cards=list(self.community_cards),
            winnings=winnings,
            evaluations=evaluations,
            chips={p.name: p.chips for p in self._seated()},
        )

        logger.info(f"Hand #{self.hand_number} winners: {winnings}")
        return summary

    def _abandon_hand(self) -> None:
        """Give back every contribution after a hand fails partway through."""
        for player in self.players.values():
            if player.total_contributed:
                player.chips += player.total_contributed
            player.reset_for_new_hand()

        self.pot.reset()
        self.community_cards = []
        self.current_betting_round = None
        self.state = TableState.WAITING

        logger.warning(f"Hand #{self.hand_number} abandoned on table {self.table_id}, bets returned")

    def _end_hand(self) -> None:
        """Finish the hand and pass the button."""
        self.state = TableState.HAND_COMPLETE
        self._advance_dealer()

        # Reset to waiting
        self.state = TableState.WAITING

        logger.info(f"Hand #{self.hand_number} complete on table {self.table_id}")

    # State serialization

    def get_state(self, viewer: Optional[str] = None) -> dict:
        """Get table state, showing hole cards only to `viewer`.

        Args:
            viewer: Name of the player looking at the table, if any.

        Returns:
            State dictionary.
        """
        players_data = []
        for player in self._seated():
            is_viewer = viewer is not None and player.name == viewer
            player_data = player.to_dict(hide_cards=not is_viewer)
            player_data["is_you"] = is_viewer
            players_data.append(player_data)

        return {
            "table_id": self.table_id,
            "state": self.state.value,
            "hand_number": self.hand_number,
            "dealer_seat": self.dealer_seat,
            "small_blind": self.small_blind,
            "big_blind": self.big_blind,
            "pot": self.pot.get_total(),
            "max_players": self.max_players,
            "community_cards": [str(c) for c in self.community_cards],
            "players": players_data,
        }
