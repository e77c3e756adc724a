"""Trick-taking rules for Grim.

**Rank orders** (chosen by the declarer once per deal):
  - High: A > K > Q > J > 10 > 9 > 8 > 7
  - Low:  7 > 8 > 9 > 10 > J > Q > K > A

**Legal plays:** follow the led suit if you can, otherwise play anything.
There is no obligation to trump or to beat.

**Trick winner:** the highest trump if any trump was played, otherwise the
highest card of the led suit.  Off-suit, non-trump cards never win.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from grim.engine.cards import NUM_PLAYERS, Card, Rank, Seat, Suit
from grim.engine.errors import InvariantViolation


# ---------------------------------------------------------------------------
#  Rank order and trump
# ---------------------------------------------------------------------------


class RankOrder(str, Enum):
    HIGH = "High"
    LOW = "Low"


class Trump(str, Enum):
    SPADES = "S"
    HEARTS = "H"
    DIAMONDS = "D"
    CLUBS = "C"
    NO_TRUMP = "NT"

    @property
    def suit(self) -> Optional[Suit]:
        """The trump suit, or ``None`` for No Trump."""
        return None if self is Trump.NO_TRUMP else Suit(self.value)

    @classmethod
    def of(cls, suit: Suit) -> Trump:
        return cls(suit.value)

    def label(self) -> str:
        return "No Trump" if self is Trump.NO_TRUMP else self.value


ALL_TRUMPS: tuple[Trump, ...] = tuple(Trump)

# Strongest first.
_STRENGTH_ORDER: dict[RankOrder, tuple[Rank, ...]] = {
    RankOrder.HIGH: tuple(sorted(Rank, reverse=True)),
    RankOrder.LOW: tuple(sorted(Rank)),
}


def rank_value(rank: Rank, order: RankOrder) -> int:
    """Position of *rank* in *order*, 0 = strongest."""
    return _STRENGTH_ORDER[order].index(rank)


def compare_ranks(rank1: Rank, rank2: Rank, order: RankOrder) -> int:
    """Signed comparison; negative means *rank1* wins."""
    return rank_value(rank1, order) - rank_value(rank2, order)


def is_trump(card: Card, trump: Optional[Trump]) -> bool:
    return trump is not None and trump.suit is not None and card.suit == trump.suit


def compare_cards(
    card1: Card,
    card2: Card,
    order: RankOrder,
    trump: Optional[Trump] = None,
) -> int:
    """Signed comparison of two cards; negative means *card1* wins.

    Cards of two different non-trump suits are incomparable and return 0;
    only :func:`determine_winner` (which knows the led suit) can rank them.
    """
    t1 = is_trump(card1, trump)
    t2 = is_trump(card2, trump)
    if t1 and not t2:
        return -1
    if t2 and not t1:
        return 1
    if card1.suit == card2.suit or (t1 and t2):
        return compare_ranks(card1.rank, card2.rank, order)
    return 0


def determine_winner(
    plays: Sequence[tuple[Seat, Card]],
    led_suit: Suit,
    order: RankOrder,
    trump: Optional[Trump] = None,
) -> tuple[Seat, Card]:
    """Winning ``(seat, card)`` among *plays*."""
    if not plays:
        raise InvariantViolation("cannot determine a winner from an empty trick")

    best_seat, best_card = plays[0]
    for seat, card in plays[1:]:
        card_trump = is_trump(card, trump)
        best_trump = is_trump(best_card, trump)
        outranks = compare_ranks(card.rank, best_card.rank, order) < 0

        if card_trump and not best_trump:
            best_seat, best_card = seat, card
        elif card_trump and best_trump:
            if outranks:
                best_seat, best_card = seat, card
        elif not card_trump and not best_trump:
            follows = card.suit == led_suit
            best_follows = best_card.suit == led_suit
            if follows and not best_follows:
                best_seat, best_card = seat, card
            elif follows and best_follows and outranks:
                best_seat, best_card = seat, card
        # else: non-trump never beats trump
    return best_seat, best_card


# ---------------------------------------------------------------------------
#  Legal plays
# ---------------------------------------------------------------------------


def legal_cards(hand: Sequence[Card], led_suit: Optional[Suit]) -> List[Card]:
    """Cards that may be played from *hand*.

    The leader may play anything.  Followers must play the led suit when
    they hold it and may play anything otherwise.
    """
    if led_suit is None:
        return list(hand)
    following = [c for c in hand if c.suit == led_suit]
    return following if following else list(hand)


def can_play_card(card: Card, hand: Sequence[Card], led_suit: Optional[Suit]) -> bool:
    return card in hand and card in legal_cards(hand, led_suit)


# ---------------------------------------------------------------------------
#  Trick
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Trick:
    """One trick.  ``winner`` is set only once all four cards are down."""

    plays: tuple[tuple[Seat, Card], ...] = ()
    led_suit: Optional[Suit] = None
    winner: Optional[Seat] = None

    @property
    def is_full(self) -> bool:
        return len(self.plays) == NUM_PLAYERS

    @property
    def cards(self) -> tuple[Card, ...]:
        return tuple(c for _, c in self.plays)

    def add(self, seat: Seat, card: Card) -> Trick:
        """New trick with ``(seat, card)`` appended (the first card sets the led suit)."""
        if self.winner is not None or self.is_full:
            raise InvariantViolation("cannot add a card to a closed trick")
        return Trick(
            plays=self.plays + ((seat, card),),
            led_suit=self.led_suit if self.plays else card.suit,
        )


def complete_trick(trick: Trick, order: RankOrder, trump: Optional[Trump]) -> Trick:
    """Resolve the winner of a four-card trick."""
    if not trick.is_full or trick.led_suit is None:
        raise InvariantViolation(
            f"cannot complete a trick with {len(trick.plays)} cards"
        )
    winner, _ = determine_winner(trick.plays, trick.led_suit, order, trump)
    return Trick(plays=trick.plays, led_suit=trick.led_suit, winner=winner)


def trick_text(trick: Trick) -> str:
    """One-line description, e.g. ``'N: 7♠, E: A♠, S: K♠, W: Q♥ (W wins)'``."""
    if not trick.plays:
        return "No cards played"
    text = ", ".join(f"{seat.value}: {card.display()}" for seat, card in trick.plays)
    if trick.winner is not None:
        text += f" ({trick.winner.value} wins)"
    return text
