"""Game engine module."""
from .deck import Deck, Card, Suit, Rank, parse_cards
from .player import Player
from .hand_eval import (
    evaluate,
    evaluate_hand,
    compare,
    find_winners,
    HandCategory,
    HandEvaluation,
    Ordering,
)
from .betting import BettingRound, Action, ActionType, ActionContext, ActionProvider, Street
from .pot import Pot, split_pot
from .table import Table, TableState, HandSummary

__all__ = [
    "Deck",
    "Card",
    "Suit",
    "Rank",
    "parse_cards",
    "Player",
    "evaluate",
    "evaluate_hand",
    "compare",
    "find_winners",
    "HandCategory",
    "HandEvaluation",
    "Ordering",
    "BettingRound",
    "Action",
    "ActionType",
    "ActionContext",
    "ActionProvider",
    "Street",
    "Pot",
    "split_pot",
    "Table",
    "TableState",
    "HandSummary",
]
