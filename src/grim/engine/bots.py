"""Bot decision policy and the cooperative turn scheduler.

Every decision is a pure function of the match seed and public state: a
fresh :class:`SeededRandom` is built for each decision from a string that
names it (deal, round, seat, and bid count or trick index).  Bots keep no
memory between calls, so replaying a seed with the same human inputs
replays the bots exactly.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from grim.engine.auction import AuctionState, Bid, can_place_bid
from grim.engine.cards import SHORT_ROUND, Card, Seat, Suit
from grim.engine.game import (
    Action,
    BidAction,
    MatchConfig,
    MatchState,
    PlayAction,
    RankOrderAction,
    Step,
    TrumpAction,
    advance_to_next_deal,
    apply_action,
    current_step,
    is_bot_turn,
    new_match,
    perform_coin_toss,
    round_size,
    start_deal,
)
from grim.engine.prng import SeededRandom, derive
from grim.engine.rules import ALL_TRUMPS, RankOrder, Trump, legal_cards

log = logging.getLogger(__name__)

# Bidding distribution: draw r in [0, 1)
PASS_THRESHOLD = 0.80   # r < 0.80           → Pass
GRIM_THRESHOLD = 0.95   # 0.80 <= r < 0.95   → Grim, if nobody has bid
                        # otherwise          → Double Grim over a standing Grim


# ---------------------------------------------------------------------------
#  Decisions
# ---------------------------------------------------------------------------


def bot_bid(
    seed: str,
    seat: Seat,
    auction: AuctionState,
    deal_index: int = 0,
    round_no: int = 1,
    size: int = SHORT_ROUND,
) -> Bid:
    rng = SeededRandom(derive(seed, "bot_bid", deal_index, round_no, seat.value, len(auction.bids)))
    r = rng.next()
    if r < PASS_THRESHOLD:
        return Bid.PASS
    if r < GRIM_THRESHOLD and auction.current_bid is None:
        return Bid.GRIM
    if can_place_bid(auction, Bid.DOUBLE_GRIM, size):
        return Bid.DOUBLE_GRIM
    return Bid.PASS


def bot_rank_order(seed: str, seat: Seat, deal_index: int = 0, round_no: int = 1) -> RankOrder:
    rng = SeededRandom(derive(seed, "rank_order", deal_index, round_no, seat.value))
    return RankOrder.HIGH if rng.next_bool() else RankOrder.LOW


def bot_trump(seed: str, seat: Seat, deal_index: int = 0, round_no: int = 1) -> Trump:
    rng = SeededRandom(derive(seed, "trump", deal_index, round_no, seat.value))
    return rng.choice(ALL_TRUMPS)


def bot_card(
    seed: str,
    seat: Seat,
    hand: Sequence[Card],
    led_suit: Optional[Suit],
    deal_index: int = 0,
    round_no: int = 1,
    trick_index: int = 0,
) -> Card:
    """Uniform pick among the legal cards of *hand*."""
    rng = SeededRandom(derive(seed, "bot_card", deal_index, round_no, seat.value, trick_index))
    return rng.choice(legal_cards(hand, led_suit))


def bot_action(state: MatchState) -> Action:
    """The action the bot in the current seat would take."""
    seat = state.current_player
    step = current_step(state)
    if step is Step.BIDDING:
        bid = bot_bid(state.seed, seat, state.auction, state.deal_index, state.round_no, round_size(state))
        return BidAction(seat, bid)
    if step is Step.RANK_ORDER:
        return RankOrderAction(bot_rank_order(state.seed, seat, state.deal_index, state.round_no))
    if step is Step.TRUMP:
        return TrumpAction(bot_trump(state.seed, seat, state.deal_index, state.round_no))
    if step is Step.PLAYING:
        card = bot_card(
            state.seed,
            seat,
            state.hands[seat],
            state.current_trick.led_suit,
            state.deal_index,
            state.round_no,
            len(state.completed_tricks),
        )
        return PlayAction(seat, card)
    raise ValueError(f"no bot decision in step {step.value}")


# ---------------------------------------------------------------------------
#  Scheduler
# ---------------------------------------------------------------------------


def run_bots(state: MatchState) -> MatchState:
    """Apply bot actions until a human must act or the deal is scored.

    Called by the driving loop after every human action.  Bot actions go
    through the same transition functions as human ones.
    """
    while is_bot_turn(state):
        action = bot_action(state)
        log.debug("bot %s: %r", state.current_player.value, action)
        state = apply_action(state, action)
    return state


def simulate_match(config: MatchConfig, seed: Optional[str] = None) -> MatchState:
    """Play a complete all-bot match and return the final state."""
    if not all(config.is_bot(s) for s in Seat):
        raise ValueError("simulate_match needs a bot in every seat")
    state = new_match(config, seed)
    state, _ = perform_coin_toss(state)
    state = start_deal(state)
    while True:
        state = run_bots(state)
        state = advance_to_next_deal(state)
        if state.is_game_over:
            return state
