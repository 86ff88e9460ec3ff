from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from ..models.game import ImageResult, Location, RoundResult

if TYPE_CHECKING:
    from .state import GameState

logger = logging.getLogger(__name__)


class GamePresenter(Protocol):
    """What the round engine needs from a front end.

    Player input flows the other way, through ``RoundEngine.place_guess``,
    ``submit_guess``, ``advance`` and ``reset``.
    """

    def show_loading(self, location: Location, round_number: int, total_rounds: int) -> None: ...

    def show_image(self, image: ImageResult, state: GameState) -> None: ...

    def set_submit_enabled(self, enabled: bool) -> None: ...

    def show_error(self, message: str, state: GameState) -> None: ...

    def show_round_result(self, result: RoundResult, state: GameState) -> None: ...

    def show_game_over(self, state: GameState) -> None: ...


class LoggingPresenter:
    """Presenter that only writes each rendering step to the log."""

    def show_loading(self, location: Location, round_number: int, total_rounds: int) -> None:
        logger.info("Loading round %d / %d: %s", round_number, total_rounds, location.name)

    def show_image(self, image: ImageResult, state: GameState) -> None:
        logger.info("Showing image %s (%s)", image.image_id, image.image_url)

    def set_submit_enabled(self, enabled: bool) -> None:
        logger.debug("Submit %s", "enabled" if enabled else "disabled")

    def show_error(self, message: str, state: GameState) -> None:
        logger.warning("Round %d: %s", state.round_number, message)

    def show_round_result(self, result: RoundResult, state: GameState) -> None:
        logger.info(
            "Round Score: %d, Total: %d. Distance: %.2f km.",
            result.score, state.total_score, result.distance_km,
        )

    def show_game_over(self, state: GameState) -> None:
        logger.info("Game Over! Final Score: %d", state.total_score)
