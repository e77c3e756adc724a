"""Deal and match orchestration for Grim.

A match is a fixed number of deals.  Each deal runs:

    Round 1 (4 cards each) → auction
        won      → declarer picks rank order, then trump → 4 tricks → score
        all pass → hands set aside, trump pre-declared, 4 new cards each
    Round 2 (4 cards each) → auction
        won      → 4 tricks → score
        all pass → set-aside + round-2 hands combined (8 cards each)
    Round 3 (8 cards each) → auction
        won      → 8 tricks → score
        all pass → Make-5: pre-declared trump, High order, 8 tricks → score

Every public transition takes a :class:`MatchState` and returns a new
one.  Validation happens before anything is copied, so a rejected action
(:class:`IllegalAction`) leaves the caller's state exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping, Optional, Union

from grim.engine.auction import AuctionState, Bid, auction_result, legal_bids
from grim.engine.cards import (
    ALL_SUITS,
    CARDS_PER_DEAL,
    LONG_ROUND,
    NUM_PLAYERS,
    SEATS,
    SHORT_ROUND,
    TEAM_SEATS,
    TEAMS,
    Card,
    Seat,
    Suit,
    Team,
    deal_hands,
    make_deck,
    next_seat,
    opposing_team,
    seat_team,
    seats_from,
    shuffle,
)
from grim.engine.errors import IllegalAction, IllegalReason, InvariantViolation
from grim.engine.prng import SeededRandom, derive, generate_seed
from grim.engine.rules import (
    RankOrder,
    Trick,
    Trump,
    complete_trick,
    legal_cards,
)
from grim.engine.scoring import (
    ScoreResult,
    add_scores,
    format_scores,
    grim_score,
    make5_score,
    score_leader,
    tricks_won_by,
    zero_scores,
)

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
#  Phases
# ---------------------------------------------------------------------------


class Phase(str, Enum):
    ROUND1 = "Round1"
    ROUND2 = "Round2"
    ROUND3 = "Round3"
    MAKE5 = "Make5"
    SCORE = "Score"


_ROUND_PHASES: dict[int, Phase] = {1: Phase.ROUND1, 2: Phase.ROUND2, 3: Phase.ROUND3}


class Step(str, Enum):
    """What the engine is waiting for (derived from the state, never stored)."""

    SETUP = "setup"            # coin toss or start_deal pending
    BIDDING = "bidding"
    RANK_ORDER = "rank_order"
    TRUMP = "trump"
    PLAYING = "playing"
    DONE = "done"              # deal scored (or match over)


# ---------------------------------------------------------------------------
#  Configuration
# ---------------------------------------------------------------------------


def _default_bots() -> dict[Seat, bool]:
    return {Seat.NORTH: True, Seat.EAST: True, Seat.SOUTH: False, Seat.WEST: True}


def _default_names() -> dict[Seat, str]:
    return {
        Seat.NORTH: "North (Bot)",
        Seat.EAST: "East (Bot)",
        Seat.SOUTH: "You",
        Seat.WEST: "West (Bot)",
    }


@dataclass(frozen=True, slots=True)
class MatchConfig:
    """Match settings supplied by the presentation layer."""

    number_of_deals: int = 12
    bots: Mapping[Seat, bool] = field(default_factory=_default_bots)
    names: Mapping[Seat, str] = field(default_factory=_default_names)

    def __post_init__(self) -> None:
        if not isinstance(self.number_of_deals, int) or self.number_of_deals < 1:
            raise ValueError(f"number_of_deals must be an integer >= 1, got {self.number_of_deals!r}")
        for key in (*self.bots, *self.names):
            if not isinstance(key, Seat):
                raise ValueError(f"unknown seat {key!r}")

    def is_bot(self, seat: Seat) -> bool:
        return bool(self.bots.get(seat, False))

    def name(self, seat: Seat) -> str:
        return self.names.get(seat, seat.value)

    @classmethod
    def all_bots(cls, number_of_deals: int = 12) -> MatchConfig:
        return cls(
            number_of_deals=number_of_deals,
            bots={s: True for s in SEATS},
            names={s: f"{s.name.title()} (Bot)" for s in SEATS},
        )


@dataclass(frozen=True, slots=True)
class CoinToss:
    team: Team          # team that deals first
    dealer_seat: Seat


# ---------------------------------------------------------------------------
#  Match state
# ---------------------------------------------------------------------------


def _empty_hands() -> dict[Seat, tuple[Card, ...]]:
    return {s: () for s in SEATS}


@dataclass(slots=True)
class MatchState:
    """The complete state of a match.

    Transition functions never mutate a state they receive; they work on
    a :meth:`clone`.  Collections inside are tuples, so a clone only needs
    to copy the dicts.
    """

    seed: str
    config: MatchConfig
    coin_toss: Optional[CoinToss] = None
    dealer: Seat = Seat.NORTH
    leading_team: Team = Team.EW
    phase: Phase = Phase.ROUND1
    round_no: int = 1
    deck: tuple[Card, ...] = ()                      # shuffled deck of the current deal
    hands: dict[Seat, tuple[Card, ...]] = field(default_factory=_empty_hands)
    set_aside: dict[Seat, tuple[Card, ...]] = field(default_factory=_empty_hands)
    predeclared_trump: Optional[Suit] = None
    current_trick: Trick = field(default_factory=Trick)
    completed_tricks: tuple[Trick, ...] = ()
    auction: AuctionState = field(default_factory=AuctionState)
    rank_order: Optional[RankOrder] = None
    trump: Optional[Trump] = None
    scores: dict[Team, int] = field(default_factory=zero_scores)
    last_score: Optional[ScoreResult] = None
    deal_index: int = 0
    log: tuple[str, ...] = ()
    current_player: Seat = Seat.NORTH
    deal_started: bool = False
    is_game_over: bool = False

    def clone(self) -> MatchState:
        return replace(
            self,
            hands=dict(self.hands),
            set_aside=dict(self.set_aside),
            scores=dict(self.scores),
        )


# ---------------------------------------------------------------------------
#  Queries
# ---------------------------------------------------------------------------


def round_size(state: MatchState) -> int:
    """Tricks in the current round: 8 in round 3 / Make-5, else 4."""
    return LONG_ROUND if state.round_no == 3 else SHORT_ROUND


def current_step(state: MatchState) -> Step:
    if state.is_game_over or state.phase is Phase.SCORE:
        return Step.DONE
    if state.coin_toss is None or not state.deal_started:
        return Step.SETUP
    if state.phase is Phase.MAKE5:
        return Step.PLAYING
    if not auction_result(state.auction).complete:
        return Step.BIDDING
    if state.rank_order is None:
        return Step.RANK_ORDER
    if state.trump is None:
        return Step.TRUMP
    return Step.PLAYING


def declaring_team(state: MatchState) -> Optional[Team]:
    if state.auction.declarer is None:
        return None
    return seat_team(state.auction.declarer)


def team_tricks(state: MatchState) -> dict[Team, int]:
    return {t: tricks_won_by(t, state.completed_tricks) for t in TEAMS}


def legal_bids_for(state: MatchState) -> list[Bid]:
    if current_step(state) is not Step.BIDDING:
        return []
    return legal_bids(state.auction, round_size(state))


def legal_cards_for(state: MatchState, seat: Optional[Seat] = None) -> list[Card]:
    """Cards *seat* (default: the current player) may play right now."""
    seat = state.current_player if seat is None else seat
    if current_step(state) is not Step.PLAYING or seat != state.current_player:
        return []
    return legal_cards(state.hands[seat], state.current_trick.led_suit)


def match_winner(state: MatchState) -> Optional[Team]:
    """Team with the higher cumulative score; ``None`` is a draw."""
    return score_leader(state.scores)


def is_bot_turn(state: MatchState) -> bool:
    return (
        current_step(state) in (Step.BIDDING, Step.RANK_ORDER, Step.TRUMP, Step.PLAYING)
        and state.config.is_bot(state.current_player)
    )


def player_name(state: MatchState, seat: Seat) -> str:
    return state.config.name(seat)


# ---------------------------------------------------------------------------
#  Internal helpers (operate on an already-cloned state)
# ---------------------------------------------------------------------------


def _log(state: MatchState, message: str) -> None:
    state.log = state.log + (message,)
    log.debug("[%s] %s", state.seed, message)


def _require(condition: bool, reason: IllegalReason, message: str) -> None:
    if not condition:
        raise IllegalAction(reason, message)


def _require_step(state: MatchState, *steps: Step) -> None:
    _require(not state.is_game_over, IllegalReason.MATCH_OVER, "the match is over")
    step = current_step(state)
    _require(
        step in steps,
        IllegalReason.WRONG_PHASE,
        f"not allowed while {step.value} (phase {state.phase.value})",
    )


def _require_turn(state: MatchState, seat: Seat) -> None:
    _require(
        seat == state.current_player,
        IllegalReason.NOT_YOUR_TURN,
        f"it is {state.current_player.value}'s turn, not {seat.value}'s",
    )


def _deal_order(state: MatchState) -> list[Seat]:
    """Seats in receiving order; the first card goes left of the dealer."""
    return seats_from(next_seat(state.dealer))


def _deal_packet(state: MatchState, offset: int) -> dict[Seat, tuple[Card, ...]]:
    packet = deal_hands(state.deck[offset:], CARDS_PER_DEAL, NUM_PLAYERS)
    return {seat: tuple(packet[i]) for i, seat in enumerate(_deal_order(state))}


def _open_round(state: MatchState, round_no: int) -> None:
    state.round_no = round_no
    state.phase = _ROUND_PHASES[round_no]
    state.auction = AuctionState()
    state.current_trick = Trick()
    state.completed_tricks = ()
    state.current_player = next_seat(state.dealer)


def _begin_deal(state: MatchState) -> None:
    state.deck = tuple(shuffle(make_deck(), derive(state.seed, f"deal{state.deal_index}")))
    state.hands = _deal_packet(state, 0)
    state.set_aside = _empty_hands()
    state.predeclared_trump = None
    state.rank_order = None
    state.trump = None
    state.last_score = None
    state.deal_started = True
    _open_round(state, 1)
    _log(state, f"Deal {state.deal_index + 1}: {state.dealer.value} deals. Auction begins.")
    log.info(
        "deal %d started (dealer=%s, leading=%s)",
        state.deal_index + 1, state.dealer.value, state.leading_team.value,
    )


def _handle_all_pass(state: MatchState) -> None:
    if state.round_no == 1:
        state.set_aside = dict(state.hands)
        rng = SeededRandom(derive(state.seed, f"predeclared{state.deal_index}"))
        state.predeclared_trump = rng.choice(ALL_SUITS)
        state.hands = _deal_packet(state, NUM_PLAYERS * CARDS_PER_DEAL)
        _open_round(state, 2)
        _log(
            state,
            f"All passed Round 1. Pre-declared trump: {state.predeclared_trump.value}. "
            "Moving to Round 2.",
        )
    elif state.round_no == 2:
        state.hands = {s: state.set_aside[s] + state.hands[s] for s in SEATS}
        state.set_aside = _empty_hands()
        _open_round(state, 3)
        _log(state, "All passed Round 2. Hands combined. Moving to Round 3.")
    else:
        assert state.predeclared_trump is not None
        state.phase = Phase.MAKE5
        state.rank_order = RankOrder.HIGH
        state.trump = Trump.of(state.predeclared_trump)
        state.current_player = next_seat(state.dealer)
        _log(
            state,
            f"All passed Round 3. Make-5 with trump {state.trump.label()}, "
            f"{state.current_player.value} leads.",
        )


def _score_deal(state: MatchState) -> None:
    size = round_size(state)
    if state.phase is Phase.MAKE5:
        result = make5_score(
            state.leading_team,
            tricks_won_by(state.leading_team, state.completed_tricks),
        )
    else:
        team = declaring_team(state)
        bid = state.auction.current_bid
        if team is None or bid is None:
            raise InvariantViolation("scoring a Grim round without a declarer")
        result = grim_score(team, bid, tricks_won_by(team, state.completed_tricks), size)

    state.scores = add_scores(state.scores, result.deltas)
    state.last_score = result
    state.phase = Phase.SCORE
    _log(state, result.message)
    _log(state, f"Scores: NS {state.scores[Team.NS]}, EW {state.scores[Team.EW]}")
    log.info("deal %d scored: %s", state.deal_index + 1, format_scores(state.scores))


# ---------------------------------------------------------------------------
#  Match setup
# ---------------------------------------------------------------------------


def new_match(config: Optional[MatchConfig] = None, seed: Optional[str] = None) -> MatchState:
    """Fresh match.  A seed is generated unless one is given (for replays)."""
    state = MatchState(seed=seed if seed is not None else generate_seed(), config=config or MatchConfig())
    _log(state, "New match started")
    log.info("new match: seed=%s deals=%d", state.seed, state.config.number_of_deals)
    return state


def reset_match(state: MatchState, seed: Optional[str] = None) -> MatchState:
    """Start over with the same configuration and a new seed."""
    return new_match(state.config, seed)


def rename_player(state: MatchState, seat: Seat, name: str) -> MatchState:
    names = dict(state.config.names)
    names[seat] = name
    s = state.clone()
    s.config = replace(state.config, names=names)
    return s


def _apply_coin_toss(state: MatchState, team: Team, dealer: Seat, how: str) -> tuple[MatchState, CoinToss]:
    result = CoinToss(team=team, dealer_seat=dealer)
    s = state.clone()
    s.coin_toss = result
    s.dealer = dealer
    s.leading_team = opposing_team(team)
    s.current_player = next_seat(dealer)
    _log(s, f"{how}: Team {team.value} deals first (Seat: {dealer.value})")
    return s, result


def perform_coin_toss(state: MatchState) -> tuple[MatchState, CoinToss]:
    """Seeded coin toss choosing the first dealing team and dealer seat."""
    _require(state.coin_toss is None, IllegalReason.COIN_TOSS_DONE, "the coin toss already happened")
    rng = SeededRandom(derive(state.seed, "cointoss"))
    team = Team.NS if rng.next_bool() else Team.EW
    dealer = rng.choice(TEAM_SEATS[team])
    return _apply_coin_toss(state, team, dealer, "Coin toss result")


def skip_coin_toss(state: MatchState, team: Team) -> tuple[MatchState, CoinToss]:
    """Let the players pick the dealing team; the seat is still seeded."""
    _require(state.coin_toss is None, IllegalReason.COIN_TOSS_DONE, "the coin toss already happened")
    dealer = SeededRandom(derive(state.seed, "manual")).choice(TEAM_SEATS[team])
    return _apply_coin_toss(state, team, dealer, "Manual selection")


def start_deal(state: MatchState) -> MatchState:
    """Shuffle, deal round 1 and open the auction."""
    _require(not state.is_game_over, IllegalReason.MATCH_OVER, "the match is over")
    _require(state.coin_toss is not None, IllegalReason.COIN_TOSS_REQUIRED, "toss the coin first")
    _require(not state.deal_started, IllegalReason.DEAL_IN_PROGRESS, "the deal has already started")
    s = state.clone()
    _begin_deal(s)
    return s


# ---------------------------------------------------------------------------
#  Player actions
# ---------------------------------------------------------------------------


def place_bid(state: MatchState, seat: Seat, bid: Bid) -> MatchState:
    _require_step(state, Step.BIDDING)
    _require_turn(state, seat)
    auction = state.auction.place(seat, bid, round_size(state))

    s = state.clone()
    s.auction = auction
    s.current_player = next_seat(seat)
    _log(s, f"{seat.value}: {bid.label()}")

    result = auction_result(auction)
    if result.complete and result.declarer is not None:
        assert result.winning_bid is not None
        s.current_player = result.declarer
        _log(s, f"{result.declarer.value} wins the auction with {result.winning_bid.label()}")
    elif result.all_passed:
        _handle_all_pass(s)
    return s


def select_rank_order(state: MatchState, order: RankOrder) -> MatchState:
    """Declarer's first choice after winning the auction."""
    if state.rank_order is not None and current_step(state) is not Step.DONE:
        raise IllegalAction(IllegalReason.ALREADY_CHOSEN, "the rank order is fixed for this deal")
    _require_step(state, Step.RANK_ORDER)
    s = state.clone()
    s.rank_order = order
    _log(s, f"Rank order: {order.value}")
    return s


def select_trump(state: MatchState, trump: Trump) -> MatchState:
    """Declarer's second choice; trick play starts with the declarer leading."""
    if state.trump is not None and current_step(state) is not Step.DONE:
        raise IllegalAction(IllegalReason.ALREADY_CHOSEN, "the trump is fixed for this deal")
    _require_step(state, Step.TRUMP)
    declarer = state.auction.declarer
    if declarer is None:
        raise InvariantViolation("trump selection without a declarer")
    s = state.clone()
    s.trump = trump
    s.current_player = declarer
    _log(s, f"Trump: {trump.label()}")
    _log(s, f"{declarer.value} leads")
    return s


def play_card(state: MatchState, seat: Seat, card: Card) -> MatchState:
    _require_step(state, Step.PLAYING)
    _require_turn(state, seat)
    hand = state.hands[seat]
    _require(card in hand, IllegalReason.CARD_NOT_IN_HAND, f"{card.short()} is not in {seat.value}'s hand")
    led = state.current_trick.led_suit
    _require(
        card in legal_cards(hand, led),
        IllegalReason.MUST_FOLLOW_SUIT,
        f"must follow {led.value if led else ''} when possible",
    )

    s = state.clone()
    s.hands[seat] = tuple(c for c in hand if c != card)
    trick = s.current_trick.add(seat, card)
    _log(s, f"{seat.value} plays {card.display()}")

    if not trick.is_full:
        s.current_trick = trick
        s.current_player = next_seat(seat)
        return s

    assert s.rank_order is not None
    trick = complete_trick(trick, s.rank_order, s.trump)
    assert trick.winner is not None
    s.completed_tricks = s.completed_tricks + (trick,)
    s.current_trick = Trick()
    s.current_player = trick.winner
    _log(s, f"{trick.winner.value} wins the trick")

    if len(s.completed_tricks) >= round_size(s):
        _score_deal(s)
    return s


# ---------------------------------------------------------------------------
#  Between deals
# ---------------------------------------------------------------------------


def advance_to_next_deal(state: MatchState) -> MatchState:
    """Rotate the dealer and deal again, or end the match.

    The next dealer is the designated seat (N or E) of the team with the
    lower cumulative score; NS deals on a tie.
    """
    _require(not state.is_game_over, IllegalReason.MATCH_OVER, "the match is over")
    if not state.deal_started or state.phase is not Phase.SCORE:
        raise InvariantViolation(
            f"cannot advance from phase {state.phase.value} before the deal is scored"
        )

    s = state.clone()
    if s.deal_index + 1 >= s.config.number_of_deals:
        s.is_game_over = True
        winner = match_winner(s)
        standing = f"{winner.value} wins" if winner is not None else "Draw"
        _log(s, f"Game over! {standing} ({format_scores(s.scores)})")
        log.info("match over after %d deals: %s", s.config.number_of_deals, standing)
        return s

    losing = Team.NS if s.scores[Team.NS] <= s.scores[Team.EW] else Team.EW
    s.deal_index += 1
    s.dealer = TEAM_SEATS[losing][0]
    s.leading_team = opposing_team(losing)
    s.hands = _empty_hands()
    s.deal_started = False
    _begin_deal(s)
    return s


# ---------------------------------------------------------------------------
#  Actions (uniform representation used by bots and adapters)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BidAction:
    seat: Seat
    bid: Bid


@dataclass(frozen=True, slots=True)
class RankOrderAction:
    order: RankOrder


@dataclass(frozen=True, slots=True)
class TrumpAction:
    trump: Trump


@dataclass(frozen=True, slots=True)
class PlayAction:
    seat: Seat
    card: Card


Action = Union[BidAction, RankOrderAction, TrumpAction, PlayAction]


def apply_action(state: MatchState, action: Action) -> MatchState:
    """Route *action* to its transition function."""
    if isinstance(action, BidAction):
        return place_bid(state, action.seat, action.bid)
    if isinstance(action, RankOrderAction):
        return select_rank_order(state, action.order)
    if isinstance(action, TrumpAction):
        return select_trump(state, action.trump)
    if isinstance(action, PlayAction):
        return play_card(state, action.seat, action.card)
    raise TypeError(f"unknown action {action!r}")


def legal_actions_for(state: MatchState) -> list[Action]:
    """Every legal action for the current player."""
    step = current_step(state)
    seat = state.current_player
    if step is Step.BIDDING:
        return [BidAction(seat, b) for b in legal_bids_for(state)]
    if step is Step.RANK_ORDER:
        return [RankOrderAction(o) for o in RankOrder]
    if step is Step.TRUMP:
        return [TrumpAction(t) for t in Trump]
    if step is Step.PLAYING:
        return [PlayAction(seat, c) for c in legal_cards_for(state, seat)]
    return []
