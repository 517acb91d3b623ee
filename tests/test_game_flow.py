"""Tests for game flow and table state machine."""
import random

import pytest
from holdem.bots import RandomBot, calling_station
from holdem.game.betting import Action, ActionType, ActionContext, Street
from holdem.game.deck import Deck, parse_cards
from holdem.game.hand_eval import HandCategory
from holdem.game.player import Player
from holdem.game.table import Table, TableState


def make_player(name: str, seat: int, chips: int = 1000) -> Player:
    """Create a test player."""
    return Player(name=name, seat=seat, chips=chips)


def make_table(count: int, chips: int = 1000, provider=None, **kwargs) -> Table:
    """Create a table with `count` players in seats 0..count-1."""
    kwargs.setdefault("small_blind", 10)
    kwargs.setdefault("big_blind", 20)
    table = Table(
        table_id="test",
        action_provider=provider or calling_station,
        rng=random.Random(7),
        **kwargs,
    )
    for i in range(count):
        table.add_player(make_player(f"p{i}", seat=i, chips=chips))
    return table


class StackedDeck(Deck):
    """Deck that deals the given cards first, in order."""

    def __init__(self, cards: str):
        self._order = parse_cards(cards)
        super().__init__()

    def reset(self) -> None:
        self._cards = list(reversed(self._order))


class PolicyProvider:
    """Plays scripted actions per player, otherwise checks or calls."""

    def __init__(self, scripts: dict[str, list[Action]] = None):
        self.scripts = {name: list(actions) for name, actions in (scripts or {}).items()}
        self.contexts: list[ActionContext] = []

    async def __call__(self, context: ActionContext) -> Action:
        self.contexts.append(context)
        script = self.scripts.get(context.name)
        if script:
            return script.pop(0)
        return await calling_station(context)


class TestTableSetup:
    """Test table setup and player management."""

    def test_create_table(self):
        """Test creating a table."""
        table = Table(table_id="test", small_blind=1, big_blind=2)

        assert table.table_id == "test"
        assert table.state == TableState.WAITING
        assert len(table.players) == 0

    def test_add_player(self):
        """Test adding a player."""
        table = Table(table_id="test")
        player = make_player("alice", seat=0)

        assert table.add_player(player)
        assert table.players[0] == player

    def test_add_player_duplicate_seat(self):
        """Test cannot add player to occupied seat."""
        table = Table(table_id="test")

        assert table.add_player(make_player("alice", seat=0))
        assert not table.add_player(make_player("bob", seat=0))

    def test_add_player_duplicate_name(self):
        """Test names must be unique at the table."""
        table = Table(table_id="test")

        assert table.add_player(make_player("alice", seat=0))
        assert not table.add_player(make_player("Alice", seat=1))

    def test_add_player_invalid_seat(self):
        """Test seats outside the table are refused."""
        table = Table(table_id="test", max_players=2)

        assert not table.add_player(make_player("alice", seat=2))
        assert not table.add_player(make_player("bob", seat=-1))

    def test_remove_player(self):
        """Test removing a player."""
        table = Table(table_id="test")
        player = make_player("alice", seat=0)
        table.add_player(player)

        assert table.remove_player("alice") == player
        assert len(table.players) == 0
        assert table.remove_player("alice") is None

    def test_next_available_seat(self):
        """Test getting next available seat."""
        table = Table(table_id="test", max_players=3)
        table.add_player(make_player("alice", seat=0))
        table.add_player(make_player("bob", seat=2))

        assert table.get_next_available_seat() == 1


class TestHandStart:
    """Test hand preconditions and setup."""

    def test_cannot_start_with_one_funded_player(self):
        """Test cannot start with only one player holding chips."""
        table = make_table(2)
        table.players[1].chips = 0

        assert not table.can_start_hand()

    @pytest.mark.asyncio
    async def test_play_hand_rejects_short_table(self):
        """Starting a hand without enough players is an error."""
        table = make_table(1)

        with pytest.raises(ValueError):
            await table.play_hand()

    @pytest.mark.asyncio
    async def test_play_hand_requires_provider(self):
        """A table with nobody to ask for actions cannot play."""
        table = Table(table_id="test")
        table.add_player(make_player("alice", seat=0))
        table.add_player(make_player("bob", seat=1))

        with pytest.raises(ValueError):
            await table.play_hand()

    @pytest.mark.asyncio
    async def test_blind_seats(self):
        """Small blind sits left of the dealer, big blind next."""
        provider = PolicyProvider()
        table = make_table(3, provider=provider)

        await table.play_hand()

        players = table.players
        assert players[1].is_small_blind
        assert players[2].is_big_blind
        assert not players[0].is_small_blind and not players[0].is_big_blind

    @pytest.mark.asyncio
    async def test_heads_up_blinds(self):
        """With two players the dealer posts the big blind."""
        table = make_table(2)

        await table.play_hand()

        assert table.players[1].is_small_blind
        assert table.players[0].is_big_blind

    @pytest.mark.asyncio
    async def test_preflop_action_starts_after_big_blind(self):
        """First decision pre-flop belongs to the seat after the big blind."""
        provider = PolicyProvider()
        table = make_table(4, provider=provider)

        await table.play_hand()

        first = provider.contexts[0]
        assert first.street == Street.PREFLOP
        assert first.name == "p3"
        assert first.to_call == 20

    @pytest.mark.asyncio
    async def test_postflop_action_starts_at_big_blind(self):
        """After the flop the big blind seat acts first."""
        provider = PolicyProvider()
        table = make_table(3, provider=provider)

        await table.play_hand()

        flop = [c for c in provider.contexts if c.street == Street.FLOP]
        assert flop[0].name == "p2"

    @pytest.mark.asyncio
    async def test_short_blind_not_collected(self):
        """A player who cannot cover the blind posts nothing."""
        table = make_table(3)
        table.players[1].chips = 5

        summary = await table.play_hand()

        assert table.players[1].chips == 5
        assert table.players[1].is_folded
        assert summary.pot_total == 40
        assert sum(summary.chips.values()) == 2005

    @pytest.mark.asyncio
    async def test_broke_player_sits_out(self):
        """Players without chips are not dealt in."""
        provider = PolicyProvider()
        table = make_table(3, provider=provider)
        table.players[2].chips = 0

        await table.play_hand()

        assert not table.players[2].in_round
        assert table.players[2].hole_cards == []
        assert "p2" not in {c.name for c in provider.contexts}


class TestGameFlow:
    """Test complete hands."""

    @pytest.mark.asyncio
    async def test_full_hand_to_showdown(self):
        """Checked-down hand deals the whole board and evaluates everyone."""
        table = make_table(3)

        summary = await table.play_hand()

        assert len(summary.community_cards) == 5
        assert table.deck.remaining == 52 - 6 - 8
        assert summary.pot_total == 60
        assert set(summary.evaluations) == {"p0", "p1", "p2"}
        assert sum(summary.winnings.values()) == 60
        assert sum(p.chips for p in table.players.values()) == 3000
        assert table.state == TableState.WAITING

    @pytest.mark.asyncio
    async def test_fold_ends_hand(self):
        """When everyone folds to the big blind it wins without a showdown."""
        provider = PolicyProvider({"p0": [Action(type=ActionType.FOLD)],
                                   "p1": [Action(type=ActionType.FOLD)]})
        table = make_table(3, provider=provider)

        summary = await table.play_hand()

        assert summary.winnings == {"p2": 30}
        assert summary.evaluations == {}
        assert not summary.went_to_showdown
        assert summary.community_cards == []
        # No burns or board cards after the last fold
        assert table.deck.remaining == 52 - 6
        assert [c.name for c in provider.contexts] == ["p0", "p1"]
        assert table.players[1].chips == 990
        assert table.players[2].chips == 1010

    @pytest.mark.asyncio
    async def test_fold_on_flop_skips_later_streets(self):
        """A fold on the flop stops the turn and river."""
        provider = PolicyProvider({
            "p1": [Action(type=ActionType.CALL), Action(type=ActionType.FOLD)],
        })
        table = make_table(2, provider=provider)

        summary = await table.play_hand()

        assert len(summary.community_cards) == 3
        assert summary.winnings == {"p0": 40}
        assert [c.street for c in provider.contexts] == [
            Street.PREFLOP, Street.PREFLOP, Street.FLOP, Street.FLOP,
        ]
        assert table.deck.remaining == 52 - 4 - 4

    @pytest.mark.asyncio
    async def test_three_way_split_remainder_to_first(self):
        """A tied pot that does not divide evenly pays the odd chip to the first winner."""
        provider = PolicyProvider({"p1": [Action(type=ActionType.FOLD)]})
        table = make_table(4, chips=100, provider=provider, small_blind=1, big_blind=2)
        table.deck = StackedDeck(
            "2c 2d 2h 2s 3c 3d 3h 3s "  # hole cards, two passes from seat 1
            "4c Ah Kd Qc "              # burn + flop
            "4d Js "                    # burn + turn
            "4h Th"                     # burn + river
        )

        summary = await table.play_hand()

        assert summary.pot_total == 7
        assert all(e.category == HandCategory.STRAIGHT for e in summary.evaluations.values())
        assert summary.winners == ["p0", "p2", "p3"]
        assert summary.winnings == {"p0": 3, "p2": 2, "p3": 2}
        assert summary.chips == {"p0": 101, "p1": 99, "p2": 100, "p3": 100}

    @pytest.mark.asyncio
    async def test_best_hand_takes_pot(self):
        """The strongest showdown hand wins everything."""
        table = make_table(2)
        table.deck = StackedDeck(
            "Ah 2c Ad 7d "      # p1: Ah Ad, p0: 2c 7d
            "9s As Kh 4d "      # burn + flop
            "9c Js "            # burn + turn
            "9d 8h"             # burn + river
        )

        summary = await table.play_hand()

        assert summary.evaluations["p1"].category == HandCategory.THREE_OF_A_KIND
        assert summary.winnings == {"p1": 40}

    @pytest.mark.asyncio
    async def test_called_all_in_goes_to_showdown(self):
        """After an all-in is called, the board runs out with no more betting."""
        provider = PolicyProvider({
            "p1": [Action(type=ActionType.RAISE, amount=90)],
            "p0": [Action(type=ActionType.CALL), Action(type=ActionType.RAISE, amount=20)],
        })
        table = make_table(2, provider=provider)
        table.players[1].chips = 100

        summary = await table.play_hand()

        assert [c.street for c in provider.contexts] == [Street.PREFLOP, Street.PREFLOP]
        assert summary.went_to_showdown
        assert len(summary.community_cards) == 5
        assert summary.pot_total == 200
        assert sum(summary.chips.values()) == 1100

    @pytest.mark.asyncio
    async def test_failed_hand_returns_bets(self):
        """A provider error mid-hand refunds the bets and leaves the table playable."""
        async def broken(context):
            raise RuntimeError("provider went away")

        table = make_table(2, provider=broken)

        with pytest.raises(RuntimeError):
            await table.play_hand()

        assert table.state == TableState.WAITING
        assert table.pot.get_total() == 0
        assert [p.chips for p in table.players.values()] == [1000, 1000]
        assert all(p.total_contributed == 0 for p in table.players.values())

        table.set_action_provider(calling_station)
        summary = await table.play_hand()

        assert summary.hand_number == 2
        assert sum(summary.chips.values()) == 2000

    @pytest.mark.asyncio
    async def test_dealer_rotates_every_hand(self):
        """Over N hands the button visits every seat once."""
        table = make_table(3)
        dealers = []

        async def on_event(event_type, data):
            if event_type == "hand_started":
                dealers.append(data["dealer_seat"])

        table.set_event_callback(on_event)
        for _ in range(6):
            await table.play_hand()

        assert dealers == [0, 1, 2, 0, 1, 2]

    @pytest.mark.asyncio
    async def test_events_emitted(self):
        """A checked-down hand emits one event per phase."""
        table = make_table(2)
        events = []

        async def on_event(event_type, data):
            events.append(event_type)

        table.set_event_callback(on_event)
        await table.play_hand()

        assert events[0] == "hand_started"
        assert events.count("state_changed") == 3
        assert events[-1] == "hand_result"
        assert "player_action" in events

    @pytest.mark.asyncio
    async def test_chips_conserved_with_random_bots(self):
        """Random play never creates or destroys chips."""
        rng = random.Random(11)
        bots = {f"p{i}": RandomBot(random.Random(rng.random())) for i in range(4)}

        async def provider(context):
            return await bots[context.name](context)

        table = make_table(4, chips=500, provider=provider)
        for _ in range(40):
            if not table.can_start_hand():
                break
            summary = await table.play_hand()
            assert sum(summary.chips.values()) == 2000
            assert all(chips >= 0 for chips in summary.chips.values())


class TestTableState:
    """Test the table snapshot."""

    @pytest.mark.asyncio
    async def test_hides_other_players_cards(self):
        """Only the viewer sees their own hole cards."""
        table = make_table(2)
        await table.play_hand()

        state = table.get_state("p0")

        p0 = next(p for p in state["players"] if p["name"] == "p0")
        p1 = next(p for p in state["players"] if p["name"] == "p1")
        assert "hole_cards" in p0 and p0["is_you"]
        assert "hole_cards" not in p1
        assert p1["has_cards"] is True
        assert state["hand_number"] == 1
