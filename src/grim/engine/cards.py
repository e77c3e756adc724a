"""Cards, seats and teams for Grim (4-player partnership trick-taking).

32-card deck: four suits × 7, 8, 9, 10, J, Q, K, A.

Seats sit clockwise N → E → S → W.  Partners sit opposite each other:
N+S form team NS, E+W form team EW.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import List, Sequence

from grim.engine.prng import SeededRandom


# ---------------------------------------------------------------------------
#  Suits and ranks
# ---------------------------------------------------------------------------


class Suit(str, Enum):
    SPADES = "S"
    HEARTS = "H"
    DIAMONDS = "D"
    CLUBS = "C"


ALL_SUITS: tuple[Suit, ...] = tuple(Suit)


class Rank(IntEnum):
    """Values follow the natural low-to-high order (7 lowest, A highest)."""

    SEVEN = 0
    EIGHT = 1
    NINE = 2
    TEN = 3
    JACK = 4
    QUEEN = 5
    KING = 6
    ACE = 7


ALL_RANKS: tuple[Rank, ...] = tuple(Rank)


# ---------------------------------------------------------------------------
#  Constants
# ---------------------------------------------------------------------------

NUM_PLAYERS: int = 4
DECK_SIZE: int = 32
CARDS_PER_DEAL: int = 4      # cards each seat receives per round deal
SHORT_ROUND: int = 4         # tricks in rounds 1 and 2
LONG_ROUND: int = 8          # tricks in round 3 and Make-5


# ---------------------------------------------------------------------------
#  Card
# ---------------------------------------------------------------------------

_RANK_SHORT: dict[Rank, str] = {
    Rank.SEVEN: "7", Rank.EIGHT: "8", Rank.NINE: "9", Rank.TEN: "10",
    Rank.JACK: "J", Rank.QUEEN: "Q", Rank.KING: "K", Rank.ACE: "A",
}

_SUIT_SYMBOL: dict[Suit, str] = {
    Suit.SPADES: "♠", Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦", Suit.CLUBS: "♣",
}


@dataclass(frozen=True, slots=True)
class Card:
    suit: Suit
    rank: Rank

    @property
    def id(self) -> str:
        """Unique identifier, suit letter + rank label (``"S7"``, ``"H10"``)."""
        return self.short()

    def short(self) -> str:
        return f"{self.suit.value}{_RANK_SHORT[self.rank]}"

    def display(self) -> str:
        """Rank followed by suit symbol, e.g. ``'10♠'``."""
        return f"{_RANK_SHORT[self.rank]}{_SUIT_SYMBOL[self.suit]}"

    def __repr__(self) -> str:
        return f"Card({self.short()})"


def parse_card(text: str) -> Card:
    """Inverse of :meth:`Card.short` (``"HQ"`` → queen of hearts)."""
    text = text.strip().upper()
    suit = Suit(text[0])
    label = text[1:]
    for rank, short in _RANK_SHORT.items():
        if short == label:
            return Card(suit, rank)
    raise ValueError(f"unknown card {text!r}")


def suit_color(suit: Suit) -> str:
    return "red" if suit in (Suit.HEARTS, Suit.DIAMONDS) else "black"


# ---------------------------------------------------------------------------
#  Seats and teams
# ---------------------------------------------------------------------------


class Seat(str, Enum):
    NORTH = "N"
    EAST = "E"
    SOUTH = "S"
    WEST = "W"


SEATS: tuple[Seat, ...] = tuple(Seat)


class Team(str, Enum):
    NS = "NS"
    EW = "EW"


TEAMS: tuple[Team, ...] = tuple(Team)

# The first seat listed is the team's designated seat (used for dealer rotation).
TEAM_SEATS: dict[Team, tuple[Seat, Seat]] = {
    Team.NS: (Seat.NORTH, Seat.SOUTH),
    Team.EW: (Seat.EAST, Seat.WEST),
}

SEAT_TEAM: dict[Seat, Team] = {
    seat: team for team, seats in TEAM_SEATS.items() for seat in seats
}


def next_seat(seat: Seat) -> Seat:
    """Next seat clockwise (N → E → S → W → N)."""
    return SEATS[(SEATS.index(seat) + 1) % NUM_PLAYERS]


def seats_from(first: Seat) -> list[Seat]:
    """All four seats in clockwise order starting at *first*."""
    start = SEATS.index(first)
    return [SEATS[(start + i) % NUM_PLAYERS] for i in range(NUM_PLAYERS)]


def partner(seat: Seat) -> Seat:
    return SEATS[(SEATS.index(seat) + 2) % NUM_PLAYERS]


def seat_team(seat: Seat) -> Team:
    return SEAT_TEAM[seat]


def opposing_team(team: Team) -> Team:
    return Team.EW if team == Team.NS else Team.NS


# ---------------------------------------------------------------------------
#  Deck
# ---------------------------------------------------------------------------


def make_deck() -> List[Card]:
    """Create the 32-card deck, suit-major (S, H, D, C) and rank-minor (7 … A)."""
    return [Card(s, r) for s in ALL_SUITS for r in ALL_RANKS]


def shuffle(deck: Sequence[Card], seed: str) -> List[Card]:
    """Seeded permutation of *deck*; the same seed always yields the same order."""
    return SeededRandom(seed).shuffle(deck)


def deal_hands(
    deck: Sequence[Card],
    cards_per_player: int,
    num_players: int = NUM_PLAYERS,
) -> List[List[Card]]:
    """Distribute cards round-robin from the top of *deck*.

    Hand ``i`` receives deck indices ``i, i + n, i + 2n, …`` where
    ``n = num_players``.  Deck order is preserved within each hand.
    """
    needed = cards_per_player * num_players
    if needed > len(deck):
        raise ValueError(f"need {needed} cards, deck has {len(deck)}")
    hands: List[List[Card]] = [[] for _ in range(num_players)]
    for i in range(needed):
        hands[i % num_players].append(deck[i])
    return hands


def sort_hand(hand: Sequence[Card]) -> List[Card]:
    """Display order: suits S, H, D, C; within a suit 7 up to A."""
    return sorted(hand, key=lambda c: (ALL_SUITS.index(c.suit), int(c.rank)))
