import math

import pytest

from cafe_finder.utils.haversine import EARTH_RADIUS_METERS


def north_of(lat: float, meters: float) -> float:
    """Latitude `meters` due north of `lat` along a meridian."""
    return lat + math.degrees(meters / EARTH_RADIUS_METERS)


@pytest.fixture
def make_cafe():
    """Factory for raw store rows with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        row = {
            "id": f"cafe-{counter['n']}",
            "name": f"Cafe {counter['n']}",
            "latitude": 52.52,
            "longitude": 13.405,
            "is_active": True,
        }
        row.update(overrides)
        return row

    return _make


@pytest.fixture
def north_of_fn():
    return north_of
