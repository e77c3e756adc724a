"""Grim auction — one escalating bidding round per dealt round.

Bids
----
- **Pass** — always legal.
- **Grim** — the bidder's team undertakes to win every trick of the
  round.  Only legal while nobody has bid yet.
- **Double Grim** — doubles the stakes of a standing Grim and takes the
  declarer role over from the Grim bidder.  Only legal while Grim is the
  current bid, and only in the 4-card rounds (the scoring table has no
  8-card Double Grim).

Completion
----------
The auction ends when either

1. a declarer exists and the three bids that follow the most recent
   non-Pass bid are all Pass, or
2. the first four bids of the auction are all Pass (all passed).

Rule 1 scans back from the last non-Pass bid: Passes made *before* a
later bid never count towards closing it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from grim.engine.cards import NUM_PLAYERS, SHORT_ROUND, Seat
from grim.engine.errors import IllegalAction, IllegalReason


class Bid(str, Enum):
    PASS = "Pass"
    GRIM = "Grim"
    DOUBLE_GRIM = "DoubleGrim"

    def label(self) -> str:
        return "Double Grim" if self is Bid.DOUBLE_GRIM else self.value


ALL_BIDS: tuple[Bid, ...] = tuple(Bid)


# ---------------------------------------------------------------------------
#  Auction state
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AuctionState:
    """Immutable auction history.

    ``declarer`` is the seat of the most recent non-Pass bid (Double Grim
    takes it over from the Grim bidder).
    """

    bids: tuple[tuple[Seat, Bid], ...] = ()
    current_bid: Optional[Bid] = None
    declarer: Optional[Seat] = None

    def place(self, seat: Seat, bid: Bid, round_size: int = SHORT_ROUND) -> AuctionState:
        """Return the auction with *bid* appended.

        Raises :class:`IllegalAction` if *bid* is not permitted; the
        auction itself is never modified.
        """
        if is_complete(self):
            raise IllegalAction(IllegalReason.WRONG_PHASE, "the auction is already over")
        if not can_place_bid(self, bid, round_size):
            raise IllegalAction(
                IllegalReason.BID_NOT_ALLOWED,
                f"{bid.label()} is not allowed "
                f"(current bid: {self.current_bid.label() if self.current_bid else 'none'})",
            )
        if bid is Bid.PASS:
            return AuctionState(self.bids + ((seat, bid),), self.current_bid, self.declarer)
        return AuctionState(self.bids + ((seat, bid),), bid, seat)


@dataclass(frozen=True, slots=True)
class AuctionResult:
    complete: bool
    declarer: Optional[Seat] = None
    winning_bid: Optional[Bid] = None
    all_passed: bool = False


# ---------------------------------------------------------------------------
#  Legality
# ---------------------------------------------------------------------------


def can_place_bid(auction: AuctionState, bid: Bid, round_size: int = SHORT_ROUND) -> bool:
    if bid is Bid.PASS:
        return True
    if bid is Bid.GRIM:
        return auction.current_bid is None
    if bid is Bid.DOUBLE_GRIM:
        return auction.current_bid is Bid.GRIM and round_size == SHORT_ROUND
    raise AssertionError(f"unhandled bid {bid!r}")


def legal_bids(auction: AuctionState, round_size: int = SHORT_ROUND) -> list[Bid]:
    if is_complete(auction):
        return []
    return [b for b in ALL_BIDS if can_place_bid(auction, b, round_size)]


# ---------------------------------------------------------------------------
#  Completion
# ---------------------------------------------------------------------------


def _last_contract_index(bids: Sequence[tuple[Seat, Bid]]) -> Optional[int]:
    for i in range(len(bids) - 1, -1, -1):
        if bids[i][1] is not Bid.PASS:
            return i
    return None


def is_complete(auction: AuctionState) -> bool:
    bids = auction.bids
    last = _last_contract_index(bids)
    if last is not None:
        trailing = bids[last + 1:]
        return len(trailing) >= NUM_PLAYERS - 1
    if len(bids) < NUM_PLAYERS:
        return False
    return all(b is Bid.PASS for _, b in bids[:NUM_PLAYERS])


def auction_result(auction: AuctionState) -> AuctionResult:
    if not is_complete(auction):
        return AuctionResult(complete=False)
    if auction.declarer is not None and auction.current_bid is not None:
        return AuctionResult(
            complete=True,
            declarer=auction.declarer,
            winning_bid=auction.current_bid,
        )
    return AuctionResult(complete=True, all_passed=True)


def validate_bid_sequence(bids: Sequence[tuple[Seat, Bid]]) -> bool:
    """Does *bids* respect the escalation rules (ignoring turn order)?"""
    current: Optional[Bid] = None
    for _, bid in bids:
        if bid is Bid.PASS:
            continue
        if bid is Bid.GRIM:
            if current is not None:
                return False
            current = Bid.GRIM
        elif bid is Bid.DOUBLE_GRIM:
            if current is not Bid.GRIM:
                return False
            current = Bid.DOUBLE_GRIM
    return True
