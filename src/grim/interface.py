"""Generic game interface for simulation and search code.

A game implements this protocol so that drivers (self-play runners,
search, evaluation scripts) can work without knowing its rules.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable

import numpy as np


# Concrete games define their own State / Action types.
State = Any
Action = Any


@runtime_checkable
class GameInterface(Protocol):
    """Protocol that every game must implement."""

    # ------------------------------------------------------------------
    #  Game rules
    # ------------------------------------------------------------------

    @property
    def num_players(self) -> int:
        ...

    def current_player(self, state: State) -> int:
        """Index of the player who acts next."""
        ...

    def legal_actions(self, state: State) -> list[Action]:
        ...

    def apply(self, state: State, action: Action) -> State:
        """Apply *action* and return a **new** state (no mutation)."""
        ...

    def is_terminal(self, state: State) -> bool:
        ...

    def outcome(self, state: State, player: int) -> float:
        """Normalised outcome in ``[-1, +1]`` for *player*.

        Called only on terminal states.
        """
        ...

    def same_team(self, state: State, player_a: int, player_b: int) -> bool:
        ...

    # ------------------------------------------------------------------
    #  Encoding
    # ------------------------------------------------------------------

    @property
    def state_dim(self) -> int:
        """Length of the state feature vector."""
        ...

    def encode_state(self, state: State, player: int) -> np.ndarray:
        """Encode what *player* can observe into a 1-D float array."""
        ...

    @property
    def action_space_size(self) -> int:
        """Total number of distinct actions across all decision types."""
        ...

    def action_to_index(self, action: Action) -> int:
        """Map an action to its fixed index in [0, action_space_size)."""
        ...

    def index_to_action(self, state: State, index: int) -> Action:
        ...

    def legal_action_mask(self, state: State) -> np.ndarray:
        """Boolean mask of shape (action_space_size,) — True = legal."""
        ...

    # ------------------------------------------------------------------
    #  New game
    # ------------------------------------------------------------------

    def new_game(self, seed: Any, **kwargs: Any) -> State:
        ...


def legal_indices(game: GameInterface, state: State) -> Sequence[int]:
    """Indices of the legal actions, in mask order."""
    return np.flatnonzero(game.legal_action_mask(state)).tolist()
