"""Errors raised by the Grim engine.

``IllegalAction`` is a recoverable rejection of user (or bot) input: the
state passed in is left untouched and ``reason`` tells the caller why.
``InvariantViolation`` signals a sequencing bug in the caller and is not
meant to be recovered from.
"""

from __future__ import annotations

from enum import Enum


class IllegalReason(str, Enum):
    NOT_YOUR_TURN = "not_your_turn"
    WRONG_PHASE = "wrong_phase"
    BID_NOT_ALLOWED = "bid_not_allowed"
    CARD_NOT_IN_HAND = "card_not_in_hand"
    MUST_FOLLOW_SUIT = "must_follow_suit"
    ALREADY_CHOSEN = "already_chosen"
    COIN_TOSS_DONE = "coin_toss_done"
    COIN_TOSS_REQUIRED = "coin_toss_required"
    DEAL_IN_PROGRESS = "deal_in_progress"
    MATCH_OVER = "match_over"


class IllegalAction(ValueError):
    """An action the rules do not permit in the current state."""

    def __init__(self, reason: IllegalReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message

    def __repr__(self) -> str:
        return f"IllegalAction({self.reason.value}: {self.message})"


class InvariantViolation(RuntimeError):
    """Internal sequencing error (e.g. resolving an incomplete trick)."""
