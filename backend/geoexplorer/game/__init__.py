from .engine import ImageLocator, RoundEngine
from .locations import DEFAULT_LOCATIONS
from .presentation import GamePresenter, LoggingPresenter
from .state import GamePhase, GameState

__all__ = [
    "DEFAULT_LOCATIONS",
    "GamePhase",
    "GamePresenter",
    "GameState",
    "ImageLocator",
    "LoggingPresenter",
    "RoundEngine",
]
