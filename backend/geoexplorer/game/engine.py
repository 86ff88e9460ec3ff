"""Round state machine for a single game session.

Phases run ``IDLE -> ROUND_LOADING -> AWAITING_GUESS -> ROUND_RESOLVED`` and
then either back to ``ROUND_LOADING`` for the next location or on to
``GAME_OVER``. The engine is the only writer of ``GameState``; everything it
hands out is an immutable snapshot.

Image lookups are the only await. Each ``start_round`` takes a new
generation number, and a lookup that finishes after the generation has moved
on (the player restarted meanwhile) is dropped instead of being applied to the
newer round.
"""
import logging
import math
from dataclasses import replace
from typing import Optional, Protocol, Sequence

from ..exceptions import GeoExplorerError, NoGuessError, RoundStateError, ValidationError
from ..models.game import ImageResult, Location, RoundResult
from ..services.scoring import calculate_score, haversine_distance
from .locations import DEFAULT_LOCATIONS
from .presentation import GamePresenter, LoggingPresenter
from .state import GamePhase, GameState

logger = logging.getLogger(__name__)


class ImageLocator(Protocol):
    async def locate(self, lat: float, lon: float) -> ImageResult: ...


class RoundEngine:
    """Drives one player through the fixed sequence of locations."""

    def __init__(
        self,
        locator: ImageLocator,
        locations: Sequence[Location] = DEFAULT_LOCATIONS,
        presenter: Optional[GamePresenter] = None,
        max_points: int = 5000,
    ):
        if not locations:
            raise ValueError("At least one location is required")
        self._locator = locator
        self._locations = tuple(locations)
        self._presenter = presenter or LoggingPresenter()
        self._max_points = max_points
        self._state = GameState(total_rounds=len(self._locations))

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def locations(self) -> Sequence[Location]:
        return self._locations

    @property
    def current_location(self) -> Optional[Location]:
        index = self._state.current_round_index
        return self._locations[index] if index < len(self._locations) else None

    # --- Round loading -----------------------------------------------------

    async def start(self) -> GameState:
        """Begin the first round of a fresh game."""
        if self._state.phase is not GamePhase.IDLE:
            raise RoundStateError("Game already started.")
        return await self.start_round(0)

    async def start_round(self, index: int) -> GameState:
        """
        Resolve the image for ``locations[index]`` and wait for a guess.

        A failed lookup leaves the round in ``ROUND_LOADING`` with ``error``
        set; the player can then ``retry_round`` or skip it with ``advance``.
        """
        if self._state.is_game_over:
            raise RoundStateError("Game is over. Start a new game to keep playing.")
        if not 0 <= index < len(self._locations):
            raise RoundStateError(f"Round index {index} is out of range.")

        location = self._locations[index]
        generation = self._state.generation + 1
        self._state = replace(
            self._state,
            phase=GamePhase.ROUND_LOADING,
            current_round_index=index,
            active_image=None,
            pending_guess=None,
            last_result=None,
            error=None,
            generation=generation,
        )
        logger.info("Loading round %d / %d: %s", index + 1, len(self._locations), location.name)
        self._presenter.show_loading(location, index + 1, len(self._locations))
        self._presenter.set_submit_enabled(False)

        try:
            image = await self._locator.locate(location.lat, location.lon)
        except GeoExplorerError as e:
            if self._is_stale(generation, location):
                return self._state
            logger.warning("Error fetching image for %s: %s", location.name, e.message)
            return self._fail_round(f"Could not load image for {location.name}. {e.message}")

        if self._is_stale(generation, location):
            return self._state
        if not image.is_playable:
            logger.error("Invalid image data received for %s: %r", location.name, image)
            return self._fail_round(f"Could not load image for {location.name}. Invalid data received.")

        self._state = replace(self._state, phase=GamePhase.AWAITING_GUESS, active_image=image)
        self._presenter.show_image(image, self._state)
        return self._state

    async def retry_round(self) -> GameState:
        """Try the image lookup for a failed round again."""
        if not self._round_failed():
            raise RoundStateError("Only a round that failed to load can be retried.")
        return await self.start_round(self._state.current_round_index)

    # --- Guessing ------------------------------------------------------------

    def place_guess(self, lat: float, lon: float) -> GameState:
        """Move the pending guess marker. Nothing is scored until submission."""
        self._require_phase(GamePhase.AWAITING_GUESS, "place a guess")
        try:
            guess = (float(lat), float(lon))
        except (TypeError, ValueError):
            raise ValidationError("Invalid latitude or longitude values.")
        if not all(math.isfinite(value) for value in guess):
            raise ValidationError("Invalid latitude or longitude values.")

        self._state = replace(self._state, pending_guess=guess)
        logger.debug("Guess placed at: %s, %s", *guess)
        self._presenter.set_submit_enabled(True)
        return self._state

    def submit_guess(self, lat: Optional[float] = None, lon: Optional[float] = None) -> RoundResult:
        """
        Score the pending guess (or the given coordinates) for this round.

        Raises:
            NoGuessError: no guess has been placed
            RoundStateError: no round is waiting for a guess
        """
        if (lat is None) != (lon is None):
            raise ValidationError("Latitude and longitude are required.")
        self._require_phase(GamePhase.AWAITING_GUESS, "submit a guess")
        if lat is not None:
            self.place_guess(lat, lon)

        state = self._state
        if state.pending_guess is None:
            raise NoGuessError("Please click on the map to make your guess.")

        location = self._locations[state.current_round_index]
        actual = state.active_image.true_lat_lon()
        distance = haversine_distance(state.pending_guess, actual)
        score = calculate_score(distance, self._max_points)

        result = RoundResult(
            round_number=state.current_round_index + 1,
            location_name=location.name,
            image_id=state.active_image.image_id,
            true_coordinates=actual,
            guessed_coordinates=state.pending_guess,
            distance_km=distance,
            score=score,
        )
        self._state = replace(
            state,
            phase=GamePhase.ROUND_RESOLVED,
            total_score=state.total_score + score,
            last_result=result,
            history=state.history + (result,),
        )
        logger.info(
            "%s: distance %.2f km, score %d, total %d",
            location.name, distance, score, self._state.total_score,
        )
        self._presenter.set_submit_enabled(False)
        self._presenter.show_round_result(result, self._state)
        return result

    # --- Progression -------------------------------------------------------

    async def advance(self) -> GameState:
        """Move on to the next round, or finish the game after the last one."""
        if self._state.is_game_over:
            raise RoundStateError("Game is over. Start a new game to keep playing.")
        if self._state.phase is not GamePhase.ROUND_RESOLVED and not self._round_failed():
            raise RoundStateError(f"Cannot advance while {self._state.phase.value}.")

        next_index = self._state.current_round_index + 1
        if next_index < len(self._locations):
            return await self.start_round(next_index)

        self._state = replace(
            self._state,
            phase=GamePhase.GAME_OVER,
            current_round_index=len(self._locations),
            active_image=None,
            pending_guess=None,
            last_result=None,
            error=None,
        )
        logger.info("Game Over - final score %d", self._state.total_score)
        self._presenter.set_submit_enabled(False)
        self._presenter.show_game_over(self._state)
        return self._state

    async def reset(self) -> GameState:
        """Throw away the current game and start again from the first location."""
        self._state = GameState(
            total_rounds=len(self._locations),
            generation=self._state.generation + 1,
        )
        logger.info("Starting a new game")
        return await self.start_round(0)

    # --- Helpers -------------------------------------------------------------

    def _require_phase(self, phase: GamePhase, action: str) -> None:
        if self._state.is_game_over:
            raise RoundStateError("Game is over. Start a new game to keep playing.")
        if self._state.phase is not phase:
            raise RoundStateError(f"Cannot {action} while {self._state.phase.value}.")

    def _round_failed(self) -> bool:
        return self._state.phase is GamePhase.ROUND_LOADING and self._state.error is not None

    def _is_stale(self, generation: int, location: Location) -> bool:
        if generation == self._state.generation:
            return False
        logger.info("Discarding image response for superseded round (%s)", location.name)
        return True

    def _fail_round(self, message: str) -> GameState:
        self._state = replace(self._state, error=message)
        self._presenter.show_error(message, self._state)
        return self._state
