"""Betting round logic."""
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Callable, Awaitable, TYPE_CHECKING

from holdem.game.deck import Card
from holdem.utils.logger import get_logger

if TYPE_CHECKING:
    from holdem.game.player import Player
    from holdem.game.pot import Pot

logger = get_logger(__name__)


class Street(str, Enum):
    """Betting streets."""
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"


class ActionType(str, Enum):
    """Player action types."""
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    RAISE = "raise"


@dataclass
class Action:
    """A player's action.

    For a raise, `amount` is the number of chips the player puts in with
    this action (the call portion included).
    """
    type: ActionType
    amount: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "type": self.type.value,
            "amount": self.amount,
        }


@dataclass
class ActionContext:
    """What an action provider needs to know to choose an action."""
    seat: int
    name: str
    street: Street
    legal_actions: list[ActionType]
    to_call: int
    min_raise: int
    max_raise: int
    chips: int
    current_bet: int
    pot: int
    hole_cards: list[Card] = field(default_factory=list)
    community_cards: list[Card] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "seat": self.seat,
            "name": self.name,
            "street": self.street.value,
            "legal_actions": [a.value for a in self.legal_actions],
            "to_call": self.to_call,
            "min_raise": self.min_raise,
            "max_raise": self.max_raise,
            "chips": self.chips,
            "current_bet": self.current_bet,
            "pot": self.pot,
            "hole_cards": [str(c) for c in self.hole_cards],
            "community_cards": [str(c) for c in self.community_cards],
        }


ActionProvider = Callable[[ActionContext], Awaitable[Action]]
ActionListener = Callable[["Player", Action], Awaitable[None]]


class BettingRound:
    """Manages a single betting round."""

    def __init__(
        self,
        players: list["Player"],
        pot: "Pot",
        big_blind: int,
        first_to_act: int = 0,
        street: Street = Street.PREFLOP,
        community_cards: Optional[list[Card]] = None,
    ):
        """Initialize betting round.

        Args:
            players: Every seated player, in seat order.
            pot: The hand's pot; bets are added as they are made.
            big_blind: Minimum raise increment.
            first_to_act: Index into `players` where the action starts.
            street: Street being played.
            community_cards: Board visible during this street.
        """
        self.players = players
        self.pot = pot
        self.big_blind = big_blind
        self.street = street
        self.community_cards = list(community_cards or [])

        # Blinds already posted count as the opening bet
        self.current_bet = max(
            (p.current_bet for p in players if p.is_contesting), default=0
        )
        self.last_raiser: Optional[str] = None
        self._action_on = first_to_act % len(players) if players else 0
        self._pending: set[str] = {p.name for p in players if self._can_act(p)}
        self._round_complete = False
        self._check_round_complete()

    def _can_act(self, player: "Player") -> bool:
        """A contesting player with chips behind or a bet to answer."""
        if not player.is_contesting:
            return False
        return player.chips > 0 or player.owes(self.current_bet) > 0

    def contesting_players(self) -> list["Player"]:
        """Players still in the hand."""
        return [p for p in self.players if p.is_contesting]

    def get_current_player(self) -> Optional["Player"]:
        """Get the player whose turn it is.

        Returns:
            Current player or None if round is complete.
        """
        if self._round_complete:
            return None

        for _ in range(len(self.players)):
            player = self.players[self._action_on]
            if player.name in self._pending and self._can_act(player):
                return player
            self._action_on = (self._action_on + 1) % len(self.players)

        self._round_complete = True
        return None

    def get_valid_actions(self, player: "Player") -> list[ActionType]:
        """Get valid actions for a player.

        Args:
            player: The player to check.

        Returns:
            List of valid action types.
        """
        actions = [ActionType.FOLD]

        to_call = player.owes(self.current_bet)
        if to_call == 0:
            actions.append(ActionType.CHECK)
        else:
            actions.append(ActionType.CALL)

        if player.chips >= self.get_min_raise(player) and self._raise_can_be_answered(player):
            actions.append(ActionType.RAISE)

        return actions

    def _raise_can_be_answered(self, player: "Player") -> bool:
        """Someone else still in the hand has chips to respond with."""
        return any(
            p is not player and p.is_contesting and p.chips > 0 for p in self.players
        )

    def get_call_amount(self, player: "Player") -> int:
        """Chips the player must put in to call."""
        return player.owes(self.current_bet)

    def get_min_raise(self, player: "Player") -> int:
        """Smallest raise contribution: the call plus one big blind."""
        return player.owes(self.current_bet) + self.big_blind

    def get_context(self, player: "Player") -> ActionContext:
        """Build the decision context handed to the action provider."""
        return ActionContext(
            seat=player.seat,
            name=player.name,
            street=self.street,
            legal_actions=self.get_valid_actions(player),
            to_call=self.get_call_amount(player),
            min_raise=self.get_min_raise(player),
            max_raise=player.chips,
            chips=player.chips,
            current_bet=self.current_bet,
            pot=self.pot.get_total(),
            hole_cards=list(player.hole_cards),
            community_cards=list(self.community_cards),
        )

    def process_action(self, player: "Player", action: Action) -> Action:
        """Apply a player's action.

        Actions that break the betting rules are not rejected; the player
        folds instead.

        Args:
            player: The acting player.
            action: The requested action.

        Returns:
            The action actually applied.
        """
        to_call = player.owes(self.current_bet)
        applied = action

        if action.type == ActionType.CHECK and to_call > 0:
            logger.warning(f"{player.name} tried to check facing {to_call}, folding")
            applied = Action(type=ActionType.FOLD)

        elif action.type == ActionType.CALL:
            if to_call == 0:
                applied = Action(type=ActionType.CHECK)
            elif player.chips < to_call:
                logger.warning(
                    f"{player.name} cannot call {to_call} with {player.chips} chips, folding"
                )
                applied = Action(type=ActionType.FOLD)
            else:
                applied = Action(type=ActionType.CALL, amount=to_call)

        elif action.type == ActionType.RAISE:
            min_raise = self.get_min_raise(player)
            if not self._raise_can_be_answered(player):
                logger.warning(f"{player.name} raised with nobody left to answer, folding")
                applied = Action(type=ActionType.FOLD)
            elif not min_raise <= action.amount <= player.chips:
                logger.warning(
                    f"{player.name} raise of {action.amount} outside "
                    f"[{min_raise}, {player.chips}], folding"
                )
                applied = Action(type=ActionType.FOLD)

        if applied.type == ActionType.FOLD:
            player.fold()
            logger.info(f"{player.name} folds")

        elif applied.type == ActionType.CHECK:
            logger.info(f"{player.name} checks")

        elif applied.type == ActionType.CALL:
            player.bet(applied.amount)
            self.pot.add_bet(player.name, applied.amount)
            logger.info(f"{player.name} calls {applied.amount}")

        elif applied.type == ActionType.RAISE:
            player.bet(applied.amount)
            self.pot.add_bet(player.name, applied.amount)
            self.current_bet = player.current_bet
            self.last_raiser = player.name
            # Everyone else still in has to respond to the raise
            self._pending = {
                p.name for p in self.players
                if p is not player and self._can_act(p)
            }
            logger.info(f"{player.name} raises to {player.current_bet}")

        self._pending.discard(player.name)

        # Move to next seat
        self._action_on = (self.players.index(player) + 1) % len(self.players)

        self._check_round_complete()

        return applied

    def _check_round_complete(self) -> None:
        """Check if the betting round is complete."""
        contesting = self.contesting_players()
        if len(contesting) <= 1:
            self._round_complete = True
            return

        # All bets matched and at most one stack left to bet with
        funded = [p for p in contesting if p.chips > 0]
        if len(funded) <= 1 and not any(p.owes(self.current_bet) for p in contesting):
            self._round_complete = True
            return

        self._pending = {
            name for name in self._pending
            if any(p.name == name and self._can_act(p) for p in self.players)
        }
        if not self._pending:
            self._round_complete = True

    async def play(
        self,
        request_action: ActionProvider,
        on_action: Optional[ActionListener] = None,
    ) -> list[tuple[str, Action]]:
        """Offer actions until the street is over.

        Args:
            request_action: Async callable asked for each player's decision.
            on_action: Optional async callback run after each applied action.

        Returns:
            (player name, applied action) pairs in the order they happened.
        """
        history: list[tuple[str, Action]] = []

        while True:
            player = self.get_current_player()
            if player is None:
                break

            action = await request_action(self.get_context(player))
            applied = self.process_action(player, action)
            history.append((player.name, applied))

            if on_action:
                await on_action(player, applied)

        logger.debug(f"{self.street.value} betting complete, pot {self.pot.get_total()}")
        return history

    @property
    def is_complete(self) -> bool:
        """Check if the betting round is complete."""
        return self._round_complete
