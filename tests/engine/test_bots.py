"""Tests for the bot policy and the turn scheduler."""

from collections import Counter

import pytest

from grim.engine.auction import AuctionState, Bid, legal_bids
from grim.engine.bots import bot_action, bot_bid, bot_card, bot_rank_order, bot_trump, run_bots, simulate_match
from grim.engine.cards import Seat, make_deck, parse_card, shuffle
from grim.engine.game import (
    MatchConfig,
    Step,
    apply_action,
    current_step,
    is_bot_turn,
    legal_actions_for,
    new_match,
    perform_coin_toss,
    start_deal,
)
from grim.engine.rules import legal_cards

N, E = Seat.NORTH, Seat.EAST


class TestBotBid:
    def test_opening_distribution(self):
        counts = Counter(bot_bid(f"seed{i}", N, AuctionState()) for i in range(2000))
        assert counts[Bid.DOUBLE_GRIM] == 0
        # Draws above the Grim band fall back to Pass when nothing can be doubled.
        assert 0.80 < counts[Bid.PASS] / 2000 < 0.90
        assert 0.10 < counts[Bid.GRIM] / 2000 < 0.20

    def test_over_grim(self):
        auction = AuctionState().place(N, Bid.GRIM)
        counts = Counter(bot_bid(f"seed{i}", E, auction) for i in range(2000))
        assert counts[Bid.GRIM] == 0
        assert 0.15 < counts[Bid.DOUBLE_GRIM] / 2000 < 0.25

    def test_never_doubles_in_long_round(self):
        auction = AuctionState().place(N, Bid.GRIM, 8)
        bids = {bot_bid(f"s{i}", E, auction, round_no=3, size=8) for i in range(500)}
        assert bids == {Bid.PASS}

    def test_bids_always_legal(self):
        auction = AuctionState()
        for i in range(300):
            assert bot_bid(f"l{i}", N, auction) in legal_bids(auction)

    def test_deterministic(self):
        a = [bot_bid("fixed", N, AuctionState(), 2, 1) for _ in range(5)]
        assert len(set(a)) == 1


class TestBotChoices:
    def test_rank_order_and_trump_deterministic(self):
        assert bot_rank_order("x", N, 0, 1) == bot_rank_order("x", N, 0, 1)
        assert bot_trump("x", N, 0, 1) == bot_trump("x", N, 0, 1)

    def test_trump_covers_all_options(self):
        picks = {bot_trump(f"t{i}", N) for i in range(300)}
        assert len(picks) == 5

    @pytest.mark.parametrize("seed", ["a", "b", "c", "d"])
    def test_card_is_legal(self, seed):
        hand = shuffle(make_deck(), seed)[:8]
        for led in (None, *{c.suit for c in hand}):
            card = bot_card(seed, N, hand, led)
            assert card in legal_cards(hand, led)

    def test_card_follows_suit(self):
        hand = [parse_card(t) for t in ("S7", "HA", "HK", "DQ")]
        for i in range(50):
            assert bot_card(f"f{i}", N, hand, parse_card("S9").suit) == parse_card("S7")


class TestScheduler:
    def _setup(self, config):
        s = new_match(config, seed="sched")
        s, _ = perform_coin_toss(s)
        return start_deal(s)

    def test_bot_action_is_legal(self):
        s = self._setup(MatchConfig.all_bots(1))
        while current_step(s) is not Step.DONE:
            action = bot_action(s)
            assert action in legal_actions_for(s)
            s = apply_action(s, action)

    def test_no_decision_in_setup(self):
        with pytest.raises(ValueError):
            bot_action(new_match(seed="x"))

    def test_run_bots_stops_for_human(self):
        s = run_bots(self._setup(MatchConfig(number_of_deals=1)))
        assert current_step(s) is Step.DONE or (
            not is_bot_turn(s) and s.current_player == Seat.SOUTH
        )

    def test_run_bots_all_bots_finishes_deal(self):
        s = run_bots(self._setup(MatchConfig.all_bots(1)))
        assert current_step(s) is Step.DONE
        assert s.last_score is not None


class TestSimulateMatch:
    def test_requires_all_bots(self):
        with pytest.raises(ValueError):
            simulate_match(MatchConfig(number_of_deals=1), "x")

    def test_plays_every_deal(self):
        s = simulate_match(MatchConfig.all_bots(4), "sim")
        assert s.is_game_over
        assert s.deal_index == 3
        assert s.log[-1].startswith("Game over!")
        assert sum(1 for line in s.log if line.startswith("Deal ")) == 4

    def test_generated_seed(self):
        s = simulate_match(MatchConfig.all_bots(1))
        assert s.seed
