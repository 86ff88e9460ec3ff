"""Immutable game state snapshots owned by the round engine."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..models.game import ImageResult, RoundResult


class GamePhase(str, Enum):
    IDLE = "idle"
    ROUND_LOADING = "round_loading"
    AWAITING_GUESS = "awaiting_guess"
    ROUND_RESOLVED = "round_resolved"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class GameState:
    """A point-in-time view of one game.

    ``total_score`` always equals the sum of ``history`` scores.
    ``error`` is set only while a round is stuck loading after a failed
    image lookup.
    """

    total_rounds: int
    phase: GamePhase = GamePhase.IDLE
    current_round_index: int = 0
    total_score: int = 0
    active_image: Optional[ImageResult] = None
    pending_guess: Optional[Tuple[float, float]] = None
    last_result: Optional[RoundResult] = None
    history: Tuple[RoundResult, ...] = ()
    error: Optional[str] = None
    generation: int = 0

    @property
    def guess_pending(self) -> bool:
        return self.pending_guess is not None

    @property
    def round_number(self) -> int:
        """1-based round number for display."""
        return min(self.current_round_index + 1, self.total_rounds)

    @property
    def is_game_over(self) -> bool:
        return self.phase is GamePhase.GAME_OVER
