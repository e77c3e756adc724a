"""GrimGame — implements GameInterface for one Grim deal.

Wraps the match engine behind the generic protocol so that simulation
and search code can drive Grim without knowing its rules.

  - 4 players in two fixed partnerships (N+S vs. E+W).
  - A terminal state is a scored deal (phase ``Score``).
  - Fixed action space of 42 indices:

      Section        Actions   Offset
      ─────────────────────────────────
      Bids               3        0
      Rank orders        2        3
      Trumps             5        5
      Cards             32       10
      ─────────────────────────────────
      Total             42

Cards are indexed as ``suit_idx * 8 + rank_idx`` (0 .. 31).
"""

from __future__ import annotations

from typing import Any

import numpy as np

from grim.engine.auction import ALL_BIDS, Bid
from grim.engine.cards import (
    ALL_RANKS,
    ALL_SUITS,
    DECK_SIZE,
    LONG_ROUND,
    NUM_PLAYERS,
    SEATS,
    Card,
    seat_team,
)
from grim.engine.game import (
    Action,
    BidAction,
    MatchConfig,
    MatchState,
    Phase,
    PlayAction,
    RankOrderAction,
    Step,
    TrumpAction,
    apply_action,
    current_step,
    legal_actions_for,
    new_match,
    perform_coin_toss,
    start_deal,
    team_tricks,
)
from grim.engine.rules import ALL_TRUMPS, RankOrder
from grim.engine.scoring import GRIM_PAYOUTS

# ---------------------------------------------------------------------------
#  Index look-ups
# ---------------------------------------------------------------------------

_CARD_IDX: dict[Card, int] = {
    Card(s, r): si * 8 + int(r)
    for si, s in enumerate(ALL_SUITS)
    for r in ALL_RANKS
}
_IDX_TO_CARD: dict[int, Card] = {idx: card for card, idx in _CARD_IDX.items()}

_ORDERS: tuple[RankOrder, ...] = tuple(RankOrder)
_PHASES: tuple[Phase, ...] = tuple(Phase)
_STEPS: tuple[Step, ...] = tuple(Step)

_BID_OFF = 0
_ORDER_OFF = _BID_OFF + len(ALL_BIDS)
_TRUMP_OFF = _ORDER_OFF + len(_ORDERS)
_CARD_OFF = _TRUMP_OFF + len(ALL_TRUMPS)
ACTION_SPACE = _CARD_OFF + DECK_SIZE                  # 42

# Observation layout
_HAND_OFF = 0                                         # 32  my hand
_TRICK_OFF = _HAND_OFF + DECK_SIZE                    # 32  current trick
_PLAYED_OFF = _TRICK_OFF + DECK_SIZE                  # 32  completed tricks
_PHASE_OFF = _PLAYED_OFF + DECK_SIZE                  # 5
_STEP_OFF = _PHASE_OFF + len(_PHASES)                 # 6
_BID_STATE_OFF = _STEP_OFF + len(_STEPS)              # 3   none / grim / double
_DECLARER_OFF = _BID_STATE_OFF + 3                    # 4   relative seat
_ORDER_STATE_OFF = _DECLARER_OFF + NUM_PLAYERS        # 2
_TRUMP_STATE_OFF = _ORDER_STATE_OFF + len(_ORDERS)    # 5
_SCALAR_OFF = _TRUMP_STATE_OFF + len(ALL_TRUMPS)      # 4
STATE_DIM = _SCALAR_OFF + 4                           # 125

# Largest absolute swing of a single deal, used to normalise outcomes.
_MAX_SWING = float(max(abs(v) for pair in GRIM_PAYOUTS.values() for v in pair))


class GrimGame:
    """GameInterface implementation for a single Grim deal."""

    # -- game rules --------------------------------------------------------

    @property
    def num_players(self) -> int:
        return NUM_PLAYERS

    def current_player(self, state: MatchState) -> int:
        return SEATS.index(state.current_player)

    def legal_actions(self, state: MatchState) -> list[Action]:
        return legal_actions_for(state)

    def apply(self, state: MatchState, action: Action) -> MatchState:
        return apply_action(state, action)

    def is_terminal(self, state: MatchState) -> bool:
        return current_step(state) is Step.DONE

    def outcome(self, state: MatchState, player: int) -> float:
        """Team score delta of the deal, scaled into [-1, +1]."""
        if state.last_score is None:
            return 0.0
        delta = state.last_score.deltas[seat_team(SEATS[player])]
        return max(-1.0, min(1.0, delta / _MAX_SWING))

    def same_team(self, state: MatchState, player_a: int, player_b: int) -> bool:
        return seat_team(SEATS[player_a]) == seat_team(SEATS[player_b])

    # -- actions -----------------------------------------------------------

    @property
    def action_space_size(self) -> int:
        return ACTION_SPACE

    def action_to_index(self, action: Action) -> int:
        if isinstance(action, BidAction):
            return _BID_OFF + ALL_BIDS.index(action.bid)
        if isinstance(action, RankOrderAction):
            return _ORDER_OFF + _ORDERS.index(action.order)
        if isinstance(action, TrumpAction):
            return _TRUMP_OFF + ALL_TRUMPS.index(action.trump)
        if isinstance(action, PlayAction):
            return _CARD_OFF + _CARD_IDX[action.card]
        raise TypeError(f"unknown action {action!r}")

    def index_to_action(self, state: MatchState, index: int) -> Action:
        """Inverse of :meth:`action_to_index` for the current player."""
        seat = state.current_player
        if index < _ORDER_OFF:
            return BidAction(seat, ALL_BIDS[index - _BID_OFF])
        if index < _TRUMP_OFF:
            return RankOrderAction(_ORDERS[index - _ORDER_OFF])
        if index < _CARD_OFF:
            return TrumpAction(ALL_TRUMPS[index - _TRUMP_OFF])
        if index < ACTION_SPACE:
            return PlayAction(seat, _IDX_TO_CARD[index - _CARD_OFF])
        raise IndexError(f"action index {index} out of range")

    def legal_action_mask(self, state: MatchState) -> np.ndarray:
        mask = np.zeros(ACTION_SPACE, dtype=bool)
        for action in legal_actions_for(state):
            mask[self.action_to_index(action)] = True
        return mask

    # -- encoding ----------------------------------------------------------

    @property
    def state_dim(self) -> int:
        return STATE_DIM

    def encode_state(self, state: MatchState, player: int) -> np.ndarray:
        """Observation for *player*: own hand plus public information."""
        x = np.zeros(STATE_DIM, dtype=np.float32)
        seat = SEATS[player]

        for c in state.hands[seat]:
            x[_HAND_OFF + _CARD_IDX[c]] = 1.0
        for c in state.current_trick.cards:
            x[_TRICK_OFF + _CARD_IDX[c]] = 1.0
        for trick in state.completed_tricks:
            for c in trick.cards:
                x[_PLAYED_OFF + _CARD_IDX[c]] = 1.0

        x[_PHASE_OFF + _PHASES.index(state.phase)] = 1.0
        x[_STEP_OFF + _STEPS.index(current_step(state))] = 1.0

        bid = state.auction.current_bid
        bid_slot = 0 if bid is None else (1 if bid is Bid.GRIM else 2)
        x[_BID_STATE_OFF + bid_slot] = 1.0

        if state.auction.declarer is not None:
            rel = (SEATS.index(state.auction.declarer) - player) % NUM_PLAYERS
            x[_DECLARER_OFF + rel] = 1.0
        if state.rank_order is not None:
            x[_ORDER_STATE_OFF + _ORDERS.index(state.rank_order)] = 1.0
        if state.trump is not None:
            x[_TRUMP_STATE_OFF + ALL_TRUMPS.index(state.trump)] = 1.0

        mine = seat_team(seat)
        tricks = team_tricks(state)
        x[_SCALAR_OFF + 0] = tricks[mine] / LONG_ROUND
        x[_SCALAR_OFF + 1] = sum(v for t, v in tricks.items() if t != mine) / LONG_ROUND
        x[_SCALAR_OFF + 2] = state.round_no / 3.0
        x[_SCALAR_OFF + 3] = 1.0 if state.leading_team == mine else 0.0
        return x

    # -- new game ----------------------------------------------------------

    def new_game(self, seed: Any, **kwargs: Any) -> MatchState:
        """All-bot match with the first deal dealt and bidding open."""
        config = MatchConfig.all_bots(int(kwargs.get("number_of_deals", 1)))
        state = new_match(config, seed=str(seed))
        state, _ = perform_coin_toss(state)
        return start_deal(state)
