#!/usr/bin/env python3
"""Console front-end for playing hands at a single table."""
import asyncio
import random
import sys
from typing import Optional

from holdem.bots import RandomBot
from holdem.config import config
from holdem.game.betting import Action, ActionContext, ActionProvider, ActionType
from holdem.game.deck import Card
from holdem.game.player import Player
from holdem.game.table import HandSummary, Table


def format_cards(cards: list[Card]) -> str:
    """Render cards with suit glyphs."""
    return " ".join(c.pretty for c in cards) if cards else "-"


def parse_action(text: str, context: ActionContext) -> Optional[Action]:
    """Turn console input into a legal action.

    Accepts 'f'/'fold', 'k'/'check', 'c'/'call' and 'r <amount>'/'raise <amount>'.

    Returns:
        The action, or None if the input is malformed or not allowed.
    """
    parts = text.strip().lower().split()
    if not parts:
        return None

    word = parts[0]
    if word in ("f", "fold"):
        return Action(type=ActionType.FOLD)
    if word in ("k", "check") and ActionType.CHECK in context.legal_actions:
        return Action(type=ActionType.CHECK)
    if word in ("c", "call"):
        if ActionType.CHECK in context.legal_actions:
            return Action(type=ActionType.CHECK)
        if context.chips < context.to_call:
            return None
        return Action(type=ActionType.CALL)
    if word in ("r", "raise") and ActionType.RAISE in context.legal_actions:
        if len(parts) != 2 or not parts[1].isdigit():
            return None
        amount = int(parts[1])
        if not context.min_raise <= amount <= context.max_raise:
            return None
        return Action(type=ActionType.RAISE, amount=amount)
    return None


class ConsoleActionProvider:
    """Asks a human at the terminal for each decision."""

    async def _read(self, prompt: str) -> str:
        return await asyncio.to_thread(input, prompt)

    async def __call__(self, context: ActionContext) -> Action:
        print(f"\n--- {context.name} ({context.street.value}) ---")
        print(f"  Your cards: {format_cards(context.hole_cards)}")
        print(f"  Board:      {format_cards(context.community_cards)}")
        print(f"  Pot: {context.pot}  Stack: {context.chips}  To call: {context.to_call}")

        options = ["fold"]
        if ActionType.CHECK in context.legal_actions:
            options.append("check")
        if ActionType.CALL in context.legal_actions:
            options.append(f"call {context.to_call}")
        if ActionType.RAISE in context.legal_actions:
            options.append(f"raise <{context.min_raise}-{context.max_raise}>")

        while True:
            text = await self._read(f"  Action [{', '.join(options)}]: ")
            action = parse_action(text, context)
            if action is not None:
                return action
            print("  Invalid action, try again.")


class SeatRouter:
    """Dispatches each decision to the provider registered for that player."""

    def __init__(self, providers: dict[str, ActionProvider]):
        self.providers = providers

    async def __call__(self, context: ActionContext) -> Action:
        return await self.providers[context.name](context)


def print_summary(summary: HandSummary) -> None:
    """Print the settlement of a hand."""
    print(f"\n=== Hand #{summary.hand_number} ===")
    print(f"Board: {format_cards(summary.community_cards)}")
    for name, evaluation in summary.evaluations.items():
        print(f"  {name}: {evaluation.description}")
    for name, amount in summary.winnings.items():
        print(f"  {name} wins {amount}")
    print("Stacks: " + ", ".join(f"{name}={chips}" for name, chips in summary.chips.items()))


def build_table(names: list[str], providers: dict[str, ActionProvider], seed: Optional[int]) -> Table:
    """Seat players in the given order with the configured starting stack."""
    table = Table(
        action_provider=SeatRouter(providers),
        rng=random.Random(seed if seed is not None else config.deck_seed),
    )
    for seat, name in enumerate(names):
        table.add_player(Player(name=name, seat=seat, chips=config.starting_chips))
    return table


async def play(human: str, opponents: int):
    """Play hands against bots until the human quits or a player is broke."""
    bot_names = [f"bot{i + 1}" for i in range(opponents)]
    providers: dict[str, ActionProvider] = {human: ConsoleActionProvider()}
    for name in bot_names:
        providers[name] = RandomBot()

    table = build_table([human] + bot_names, providers, seed=None)
    print("Welcome to Texas Hold'em!")

    while table.can_start_hand():
        summary = await table.play_hand()
        print_summary(summary)

        if table.get_player(human).chips == 0:
            print("You are out of chips.")
            break

        answer = await asyncio.to_thread(input, "Play another hand? [Y/n] ")
        if answer.strip().lower() in ("n", "no", "q", "quit"):
            break


async def auto(hands: int, seed: Optional[int]):
    """Play a number of hands between bots and print each settlement."""
    rng = random.Random(seed)
    names = ["alice", "bob", "carol"]
    providers: dict[str, ActionProvider] = {
        name: RandomBot(random.Random(rng.random())) for name in names
    }
    table = build_table(names, providers, seed=seed)

    for _ in range(hands):
        if not table.can_start_hand():
            break
        print_summary(await table.play_hand())


def print_usage():
    """Print usage information."""
    print("""
Texas Hold'em CLI

Usage:
  python -m holdem.cli <command> [args]

Commands:
  play <name> [opponents]   Play against 1-9 bots (default 1)
  auto [hands] [seed]       Watch bots play (default 10 hands)

Examples:
  python -m holdem.cli play alice 2
  python -m holdem.cli auto 50 7
""")


def _int_arg(index: int, default: Optional[int], usage: str) -> Optional[int]:
    """Read an optional integer argument, exiting with usage on bad input."""
    if len(sys.argv) <= index:
        return default
    try:
        return int(sys.argv[index])
    except ValueError:
        print(f"Error: Expected a number, got {sys.argv[index]!r}.")
        print(f"Usage: {usage}")
        sys.exit(1)


def main():
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print_usage()
        sys.exit(1)

    command = sys.argv[1].lower()

    if command == "play":
        if len(sys.argv) < 3:
            print("Error: Name required.")
            print("Usage: python -m holdem.cli play <name> [opponents]")
            sys.exit(1)
        opponents = _int_arg(3, 1, "python -m holdem.cli play <name> [opponents]")
        if not 1 <= opponents <= config.max_players - 1:
            print(f"Error: Opponents must be between 1 and {config.max_players - 1}.")
            sys.exit(1)
        asyncio.run(play(sys.argv[2], opponents))

    elif command == "auto":
        usage = "python -m holdem.cli auto [hands] [seed]"
        hands = _int_arg(2, 10, usage)
        seed = _int_arg(3, config.deck_seed, usage)
        asyncio.run(auto(hands, seed))

    elif command in ("help", "-h", "--help"):
        print_usage()

    else:
        print(f"Unknown command: {command}")
        print_usage()
        sys.exit(1)


if __name__ == "__main__":
    main()
