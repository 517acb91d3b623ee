"""Computer-controlled action providers for auto play and tests."""
import random
from typing import Optional

from holdem.game.betting import Action, ActionContext, ActionType
from holdem.game.deck import Card


async def calling_station(context: ActionContext) -> Action:
    """Never raises, never folds: checks when it can and calls otherwise."""
    if ActionType.CHECK in context.legal_actions:
        return Action(type=ActionType.CHECK)
    return Action(type=ActionType.CALL)


def _rough_hand_strength(hole: list[Card]) -> int:
    """Very rough proxy for hole card quality."""
    if len(hole) < 2:
        return 0

    first, second = hole[0], hole[1]
    score = first.rank.value + second.rank.value
    if first.rank == second.rank:
        score += 14  # pairs are strong pre-flop
    elif abs(first.rank.value - second.rank.value) == 1:
        score += 4
    if first.suit == second.suit:
        score += 3
    return score


class RandomBot:
    """Loose bot mixing in random raises, biased toward stronger holdings."""

    def __init__(self, rng: Optional[random.Random] = None, fold_chance: float = 0.15):
        self._rng = rng or random.Random()
        self.fold_chance = fold_chance

    def _raise_amount(self, context: ActionContext) -> int:
        if context.max_raise <= context.min_raise:
            return context.min_raise
        roll = self._rng.random()
        if roll < 0.6:
            return context.min_raise
        if roll > 0.95:
            return context.max_raise
        span = context.max_raise - context.min_raise
        return context.min_raise + int(span * self._rng.random() * 0.25)

    async def __call__(self, context: ActionContext) -> Action:
        legal = context.legal_actions
        strength = _rough_hand_strength(context.hole_cards)
        raise_probability = min(0.1 + strength / 100.0, 0.5)

        if ActionType.RAISE in legal and self._rng.random() < raise_probability:
            return Action(type=ActionType.RAISE, amount=self._raise_amount(context))

        if ActionType.CHECK in legal:
            return Action(type=ActionType.CHECK)

        if self._rng.random() < self.fold_chance or context.chips < context.to_call:
            return Action(type=ActionType.FOLD)

        return Action(type=ActionType.CALL)
