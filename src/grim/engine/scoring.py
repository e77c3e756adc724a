"""Deal scoring for Grim.

Grim contracts (the declaring team must win *every* trick of the round):

    contract      round   success   failure
    Grim            4       +16       −32
    Double Grim     4       +32       −64
    Grim            8       +64      −128

Make-5 (8 tricks, no declarer): the leading team scores +5 with five or
more tricks; otherwise the other team scores +10 with four or more.
Only one team ever scores in a deal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from grim.engine.auction import Bid
from grim.engine.cards import LONG_ROUND, TEAMS, Team, opposing_team, seat_team
from grim.engine.rules import Trick

# (bid, round size) -> (success, failure)
GRIM_PAYOUTS: dict[tuple[Bid, int], tuple[int, int]] = {
    (Bid.GRIM, 4): (16, -32),
    (Bid.DOUBLE_GRIM, 4): (32, -64),
    (Bid.GRIM, 8): (64, -128),
}

MAKE5_LEADING_TARGET = 5
MAKE5_LEADING_REWARD = 5
MAKE5_DEFENDING_TARGET = 4
MAKE5_DEFENDING_REWARD = 10


def zero_scores() -> dict[Team, int]:
    return {t: 0 for t in TEAMS}


@dataclass(frozen=True, slots=True)
class ScoreResult:
    """Per-team score deltas for one deal plus a log message."""

    deltas: Mapping[Team, int]
    message: str

    @property
    def scoring_team(self) -> Optional[Team]:
        for team, pts in self.deltas.items():
            if pts:
                return team
        return None


def tricks_won_by(team: Team, tricks: Iterable[Trick]) -> int:
    return sum(1 for t in tricks if t.winner is not None and seat_team(t.winner) == team)


def grim_score(
    declaring_team: Team,
    bid: Bid,
    tricks_won: int,
    round_size: int,
) -> ScoreResult:
    """Score a Grim / Double Grim contract.

    Combinations missing from :data:`GRIM_PAYOUTS` score nothing.
    """
    deltas = zero_scores()
    payout = GRIM_PAYOUTS.get((bid, round_size))
    if payout is None:
        return ScoreResult(
            deltas,
            f"{bid.label()} has no payout in a {round_size}-card round: no score",
        )

    success, failure = payout
    name = bid.label()
    if tricks_won == round_size:
        deltas[declaring_team] = success
        message = f"{declaring_team.value} makes {name}, wins all {round_size} tricks: +{success} points"
    else:
        deltas[declaring_team] = failure
        message = (
            f"{declaring_team.value} fails {name} "
            f"({tricks_won}/{round_size} tricks): {failure} points"
        )
    return ScoreResult(deltas, message)


def make5_score(leading_team: Team, leading_tricks: int) -> ScoreResult:
    """Score the Make-5 fallback from the leading team's trick count."""
    other = opposing_team(leading_team)
    other_tricks = LONG_ROUND - leading_tricks
    deltas = zero_scores()

    if leading_tricks >= MAKE5_LEADING_TARGET:
        deltas[leading_team] = MAKE5_LEADING_REWARD
        message = (
            f"{leading_team.value} takes {leading_tricks}/{LONG_ROUND} tricks: "
            f"+{MAKE5_LEADING_REWARD} points"
        )
    elif other_tricks >= MAKE5_DEFENDING_TARGET:
        deltas[other] = MAKE5_DEFENDING_REWARD
        message = (
            f"{other.value} takes {other_tricks}/{LONG_ROUND} tricks: "
            f"+{MAKE5_DEFENDING_REWARD} points"
        )
    else:
        message = (
            f"No team scores ({leading_team.value}: {leading_tricks}, "
            f"{other.value}: {other_tricks})"
        )
    return ScoreResult(deltas, message)


# ---------------------------------------------------------------------------
#  Match totals
# ---------------------------------------------------------------------------


def add_scores(current: Mapping[Team, int], delta: Mapping[Team, int]) -> dict[Team, int]:
    return {t: current.get(t, 0) + delta.get(t, 0) for t in TEAMS}


def score_difference(scores: Mapping[Team, int]) -> int:
    """NS minus EW."""
    return scores[Team.NS] - scores[Team.EW]


def score_leader(scores: Mapping[Team, int]) -> Optional[Team]:
    """Team ahead on points, ``None`` when level."""
    diff = score_difference(scores)
    if diff > 0:
        return Team.NS
    if diff < 0:
        return Team.EW
    return None


def format_scores(scores: Mapping[Team, int]) -> str:
    diff = score_difference(scores)
    return f"NS: {scores[Team.NS]}, EW: {scores[Team.EW]} ({diff:+d})"
