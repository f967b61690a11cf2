import pytest
import swisseph as swe

from chart_tools.errors import ComputationError
from chart_tools.models import Location, RawHouses, RawPosition

J2000 = 2451545.0
SUN_SPEED = 360.0 / 365.2422
MOON_SPEED = 13.176396
NODE_SPEED = -0.0529


class FakeEphemeris:
    """Deterministic provider: linear mean motion and equal houses from a turning Ascendant."""

    def __init__(self, failing=(), ascendant=None):
        self.failing = set(failing)
        self.ascendant = ascendant
        self.position_calls = 0

    def position(self, jd_ut, body_id):
        self.position_calls += 1
        if body_id in self.failing:
            raise ComputationError(f"no data for body {body_id}")
        days = jd_ut - J2000
        if body_id == swe.SUN:
            lon, speed = 280.46 + SUN_SPEED * days, SUN_SPEED
        elif body_id == swe.MOON:
            lon, speed = 218.32 + MOON_SPEED * days, MOON_SPEED
        elif body_id == swe.MEAN_NODE:
            lon, speed = 125.04 + NODE_SPEED * days, NODE_SPEED
        else:
            speed = 0.5 / (body_id + 1)
            lon = body_id * 31.7 + speed * days
        return RawPosition(longitude=lon % 360.0, latitude=0.0, distance=1.0, speed=speed)

    def houses(self, jd_ut, latitude, longitude, system):
        if self.ascendant is not None:
            asc = self.ascendant
        else:
            asc = (100.0 + 360.9856 * (jd_ut - J2000) + longitude) % 360.0
        cusps = tuple((asc + 30.0 * i) % 360.0 for i in range(12))
        mc = (asc + 270.0) % 360.0
        return RawHouses(cusps=cusps, ascendant=asc, mc=mc, armc=mc, vertex=(asc + 200.0) % 360.0)


@pytest.fixture
def fake_provider():
    return FakeEphemeris()


@pytest.fixture
def make_provider():
    return FakeEphemeris


@pytest.fixture
def greenwich():
    return Location(latitude=51.48, longitude=0.0, timezone="Europe/London", name="Greenwich")
