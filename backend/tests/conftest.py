"""Shared fixtures: fake image locators, a recording presenter, provider payloads."""
import asyncio
from typing import Dict, List, Optional, Tuple

import pytest

from geoexplorer.exceptions import GeoExplorerError
from geoexplorer.game.locations import DEFAULT_LOCATIONS
from geoexplorer.models.game import ImageResult, Location


def make_image(location: Location, image_id: Optional[str] = None) -> ImageResult:
    """Image whose true position is exactly the location, in provider [lon, lat] order."""
    return ImageResult(
        image_id=image_id or f"img-{location.name}",
        image_url=f"https://images.example/{location.name}.jpg",
        coordinates=[location.lon, location.lat],
        compass_angle=90.0,
    )


class FakeLocator:
    """Answers from a prepared table; records every lookup."""

    def __init__(self, images: Optional[Dict[Tuple[float, float], ImageResult]] = None):
        self.images = images or {}
        self.errors: Dict[Tuple[float, float], GeoExplorerError] = {}
        self.calls: List[Tuple[float, float]] = []

    async def locate(self, lat: float, lon: float) -> ImageResult:
        self.calls.append((lat, lon))
        if (lat, lon) in self.errors:
            raise self.errors.pop((lat, lon))
        return self.images[(lat, lon)]


class GatedLocator:
    """Locator whose lookups block until the test releases them."""

    def __init__(self):
        self.pending: List[Tuple[asyncio.Future, Tuple[float, float]]] = []

    async def locate(self, lat: float, lon: float) -> ImageResult:
        future = asyncio.get_running_loop().create_future()
        self.pending.append((future, (lat, lon)))
        return await future


class RecordingPresenter:
    def __init__(self):
        self.events: List[tuple] = []
        self.submit_enabled = False

    def show_loading(self, location, round_number, total_rounds):
        self.events.append(("loading", location.name, round_number, total_rounds))

    def show_image(self, image, state):
        self.events.append(("image", image.image_id))

    def set_submit_enabled(self, enabled):
        self.submit_enabled = enabled

    def show_error(self, message, state):
        self.events.append(("error", message))

    def show_round_result(self, result, state):
        self.events.append(("result", result.score, state.total_score))

    def show_game_over(self, state):
        self.events.append(("game_over", state.total_score))

    def kinds(self) -> List[str]:
        return [event[0] for event in self.events]


@pytest.fixture
def locations() -> List[Location]:
    return list(DEFAULT_LOCATIONS)


@pytest.fixture
def fake_locator(locations) -> FakeLocator:
    return FakeLocator({(loc.lat, loc.lon): make_image(loc) for loc in locations})


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def mapillary_image() -> dict:
    """A single image document as the Mapillary Graph API returns it."""
    return {
        "id": "498763468214164",
        "thumb_1024_url": "https://scontent.example/thumb_1024.jpg",
        "thumb_original_url": "https://scontent.example/original.jpg",
        "computed_geometry": {"type": "Point", "coordinates": [-74.0061, 40.7127]},
        "is_pano": True,
        "compass_angle": 172.5,
    }
