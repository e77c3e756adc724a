"""Tests for rank orders, trick resolution and suit-following."""

import pytest

from grim.engine.cards import Card, Rank, Seat, Suit
from grim.engine.errors import InvariantViolation
from grim.engine.rules import (
    RankOrder,
    Trick,
    Trump,
    can_play_card,
    compare_cards,
    compare_ranks,
    complete_trick,
    determine_winner,
    legal_cards,
    rank_value,
    trick_text,
)

S = Suit.SPADES
H = Suit.HEARTS
D = Suit.DIAMONDS
C_ = Suit.CLUBS

N, E, SO, W = Seat.NORTH, Seat.EAST, Seat.SOUTH, Seat.WEST


def C(suit, rank):
    return Card(suit, rank)


# === Rank orders ===


class TestRankOrder:
    def test_high_order(self):
        order = [Rank.ACE, Rank.KING, Rank.QUEEN, Rank.JACK, Rank.TEN, Rank.NINE, Rank.EIGHT, Rank.SEVEN]
        assert [rank_value(r, RankOrder.HIGH) for r in order] == list(range(8))

    def test_low_order(self):
        order = [Rank.SEVEN, Rank.EIGHT, Rank.NINE, Rank.TEN, Rank.JACK, Rank.QUEEN, Rank.KING, Rank.ACE]
        assert [rank_value(r, RankOrder.LOW) for r in order] == list(range(8))

    def test_compare_negative_means_first_wins(self):
        assert compare_ranks(Rank.ACE, Rank.KING, RankOrder.HIGH) < 0
        assert compare_ranks(Rank.ACE, Rank.KING, RankOrder.LOW) > 0
        assert compare_ranks(Rank.SEVEN, Rank.EIGHT, RankOrder.LOW) < 0
        assert compare_ranks(Rank.TEN, Rank.TEN, RankOrder.HIGH) == 0


class TestCompareCards:
    def test_trump_beats_non_trump(self):
        assert compare_cards(C(H, Rank.SEVEN), C(S, Rank.ACE), RankOrder.HIGH, Trump.HEARTS) < 0
        assert compare_cards(C(S, Rank.ACE), C(H, Rank.SEVEN), RankOrder.HIGH, Trump.HEARTS) > 0

    def test_same_suit_uses_rank(self):
        assert compare_cards(C(S, Rank.ACE), C(S, Rank.KING), RankOrder.HIGH) < 0
        assert compare_cards(C(S, Rank.ACE), C(S, Rank.KING), RankOrder.LOW) > 0

    def test_different_non_trump_suits_incomparable(self):
        assert compare_cards(C(S, Rank.ACE), C(D, Rank.SEVEN), RankOrder.HIGH, Trump.HEARTS) == 0
        assert compare_cards(C(S, Rank.ACE), C(D, Rank.SEVEN), RankOrder.HIGH, Trump.NO_TRUMP) == 0

    def test_no_trump_never_trumps(self):
        assert compare_cards(C(H, Rank.SEVEN), C(S, Rank.ACE), RankOrder.HIGH, Trump.NO_TRUMP) == 0


# === Trick winner ===


WORKED_PLAYS = [
    (N, C(S, Rank.SEVEN)),
    (E, C(S, Rank.ACE)),
    (SO, C(S, Rank.KING)),
    (W, C(H, Rank.QUEEN)),
]


class TestDetermineWinner:
    def test_only_trump_wins(self):
        seat, card = determine_winner(WORKED_PLAYS, S, RankOrder.HIGH, Trump.HEARTS)
        assert seat == W
        assert card == C(H, Rank.QUEEN)

    def test_highest_led_suit_without_trump(self):
        seat, _ = determine_winner(WORKED_PLAYS, S, RankOrder.HIGH, Trump.NO_TRUMP)
        assert seat == E

    def test_none_trump_same_as_no_trump(self):
        seat, _ = determine_winner(WORKED_PLAYS, S, RankOrder.HIGH, None)
        assert seat == E

    def test_low_order_lowest_led_card_wins(self):
        seat, _ = determine_winner(WORKED_PLAYS, S, RankOrder.LOW, Trump.NO_TRUMP)
        assert seat == N

    def test_higher_trump_beats_lower_trump(self):
        plays = [(N, C(S, Rank.ACE)), (E, C(H, Rank.SEVEN)), (SO, C(H, Rank.JACK)), (W, C(S, Rank.KING))]
        seat, _ = determine_winner(plays, S, RankOrder.HIGH, Trump.HEARTS)
        assert seat == SO

    def test_off_suit_discard_never_wins(self):
        plays = [(N, C(S, Rank.SEVEN)), (E, C(D, Rank.ACE)), (SO, C(C_, Rank.ACE)), (W, C(S, Rank.EIGHT))]
        seat, _ = determine_winner(plays, S, RankOrder.HIGH, Trump.HEARTS)
        assert seat == W

    def test_empty_plays_is_invariant_violation(self):
        with pytest.raises(InvariantViolation):
            determine_winner([], S, RankOrder.HIGH, Trump.HEARTS)


# === Legal cards ===


class TestLegalCards:
    def test_leader_may_play_anything(self):
        hand = [C(S, Rank.SEVEN), C(H, Rank.ACE), C(D, Rank.KING)]
        assert legal_cards(hand, None) == hand

    def test_must_follow_when_holding_suit(self):
        hand = [C(S, Rank.SEVEN), C(H, Rank.ACE), C(S, Rank.KING), C(D, Rank.NINE)]
        assert legal_cards(hand, S) == [C(S, Rank.SEVEN), C(S, Rank.KING)]

    def test_anything_when_void(self):
        hand = [C(H, Rank.ACE), C(D, Rank.KING)]
        assert legal_cards(hand, S) == hand

    def test_no_obligation_to_trump(self):
        # Void in the led suit: trump and non-trump are both allowed.
        hand = [C(H, Rank.SEVEN), C(D, Rank.KING)]
        assert set(legal_cards(hand, C_)) == set(hand)

    def test_can_play_card(self):
        hand = [C(S, Rank.SEVEN), C(H, Rank.ACE)]
        assert can_play_card(C(S, Rank.SEVEN), hand, S)
        assert not can_play_card(C(H, Rank.ACE), hand, S)
        assert not can_play_card(C(D, Rank.ACE), hand, None)


# === Trick ===


class TestTrick:
    def test_first_card_sets_led_suit(self):
        t = Trick().add(N, C(D, Rank.NINE))
        assert t.led_suit == D
        t = t.add(E, C(S, Rank.ACE))
        assert t.led_suit == D

    def test_add_returns_new_trick(self):
        t0 = Trick()
        t1 = t0.add(N, C(D, Rank.NINE))
        assert t0.plays == ()
        assert len(t1.plays) == 1

    def test_complete_trick_sets_winner(self):
        t = Trick()
        for seat, card in WORKED_PLAYS:
            t = t.add(seat, card)
        assert t.is_full
        assert t.winner is None
        done = complete_trick(t, RankOrder.HIGH, Trump.HEARTS)
        assert done.winner == W

    def test_complete_incomplete_trick_fails(self):
        t = Trick().add(N, C(S, Rank.SEVEN))
        with pytest.raises(InvariantViolation):
            complete_trick(t, RankOrder.HIGH, Trump.HEARTS)

    def test_closed_trick_rejects_cards(self):
        t = Trick()
        for seat, card in WORKED_PLAYS:
            t = t.add(seat, card)
        with pytest.raises(InvariantViolation):
            t.add(N, C(D, Rank.SEVEN))

    def test_trick_text(self):
        t = Trick()
        for seat, card in WORKED_PLAYS:
            t = t.add(seat, card)
        t = complete_trick(t, RankOrder.HIGH, Trump.HEARTS)
        assert trick_text(t) == "N: 7♠, E: A♠, S: K♠, W: Q♥ (W wins)"
        assert trick_text(Trick()) == "No cards played"


def test_trump_suit_property():
    assert Trump.HEARTS.suit == H
    assert Trump.NO_TRUMP.suit is None
    assert Trump.of(D) is Trump.DIAMONDS
    assert Trump.NO_TRUMP.label() == "No Trump"
