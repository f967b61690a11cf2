import dataclasses
import logging
import random

import pytest
import swisseph as swe

from chart_tools.assembler import (
    PART_OF_FORTUNE,
    SOUTH_NODE,
    _query_body,
    assemble,
    house_for_longitude,
    intercepted_signs,
    part_of_fortune,
    south_node,
)
from chart_tools.analysis.signs import sign_index_from_longitude
from chart_tools.ephemeris import BODY_ROSTER
from chart_tools.errors import ComputationError, OptionalBodyUnavailable
from chart_tools.models import BodyPosition, InterceptedSign, Location, PointKind, normalize_angle

J2000 = 2451545.0


def make_body(name: str, longitude: float, speed: float = 1.0) -> BodyPosition:
    return BodyPosition(
        name=name,
        kind=PointKind.BODY,
        body_id=None,
        longitude=longitude,
        latitude=1.5,
        distance=1.0,
        speed=speed,
    )


def random_cusps(rng: random.Random) -> list[float]:
    widths = [rng.uniform(5.0, 60.0) for _ in range(12)]
    scale = 360.0 / sum(widths)
    start = rng.uniform(0.0, 360.0)
    cusps = []
    for width in widths:
        cusps.append(normalize_angle(start))
        start += width * scale
    return cusps


def test_part_of_fortune_night_chart():
    lon, is_daytime = part_of_fortune(100.0, make_body("Sun", 150.0), make_body("Moon", 200.0))
    assert is_daytime is False
    assert lon == pytest.approx(50.0)


def test_part_of_fortune_day_chart():
    # Sun 200° past the Ascendant sits above the horizon
    lon, is_daytime = part_of_fortune(100.0, make_body("Sun", 300.0), make_body("Moon", 10.0))
    assert is_daytime is True
    assert lon == pytest.approx(normalize_angle(100.0 + 10.0 - 300.0))


def test_part_of_fortune_needs_both_lights():
    assert part_of_fortune(100.0, None, make_body("Moon", 10.0)) is None


def test_interception_example():
    # House 1 from 355° to 40° fully contains Aries
    cusps = [355.0, 40.0, 70.0, 100.0, 130.0, 160.0, 190.0, 220.0, 250.0, 280.0, 310.0, 340.0]
    assert intercepted_signs(cusps) == [InterceptedSign(house=1, sign_index=0)]


def test_no_interceptions_with_equal_houses():
    assert intercepted_signs([15.0 + 30.0 * i for i in range(12)]) == []


def test_every_longitude_falls_in_exactly_one_house():
    rng = random.Random(7)
    for _ in range(20):
        cusps = random_cusps(rng)
        for _ in range(50):
            lon = rng.uniform(0.0, 360.0)
            owners = []
            for i in range(12):
                start, end = cusps[i], cusps[(i + 1) % 12]
                inside = start <= lon < end if end > start else (lon >= start or lon < end)
                if inside:
                    owners.append(i + 1)
            assert len(owners) == 1
            assert house_for_longitude(lon, cusps) == owners[0]


def test_cusp_belongs_to_its_own_house():
    cusps = [15.0 + 30.0 * i for i in range(12)]
    assert house_for_longitude(15.0, cusps) == 1
    assert house_for_longitude(14.999, cusps) == 12
    assert house_for_longitude(375.0, cusps) == 1


@pytest.mark.parametrize("angle", [-720.5, -360.0, -1e-17, 0.0, 359.999999, 360.0, 725.25])
def test_normalize_angle(angle):
    value = normalize_angle(angle)
    assert 0.0 <= value < 360.0
    remainder = (value - angle) % 360.0
    assert min(remainder, 360.0 - remainder) == pytest.approx(0.0, abs=1e-9)


def test_south_node_mirrors_north_node():
    north = make_body("North Node", 350.0, speed=-0.053)
    node = south_node(north)
    assert node.longitude == pytest.approx(170.0)
    assert node.latitude == pytest.approx(-1.5)
    assert node.speed == north.speed
    assert node.retrograde is True
    assert node.is_derived


def test_assemble_natal_chart(fake_provider, greenwich):
    chart = assemble(J2000, greenwich, "P", fake_provider)

    names = [b.name for b in chart.bodies]
    assert names[:2] == ["Sun", "Moon"]
    assert names[-1] == SOUTH_NODE
    assert chart.omitted == ()
    assert all(b.house is not None for b in chart.points)

    north = chart.body("North Node")
    south = chart.body(SOUTH_NODE)
    assert south.longitude == pytest.approx(normalize_angle(north.longitude + 180.0))
    assert south.kind is PointKind.DERIVED

    fortune = chart.part_of_fortune
    assert fortune is not None and fortune.name == PART_OF_FORTUNE
    assert chart.is_daytime is not None
    assert chart.utc.year == 2000 and chart.utc.hour == 12


def test_snapshot_is_frozen(fake_provider, greenwich):
    chart = assemble(J2000, greenwich, "P", fake_provider)
    with pytest.raises(dataclasses.FrozenInstanceError):
        chart.jd_ut = 0.0
    assert isinstance(chart.bodies, tuple)
    assert isinstance(chart.aspects, tuple)


def test_optional_body_failure_is_omitted(make_provider, greenwich, caplog):
    provider = make_provider(failing={swe.CHIRON})
    with caplog.at_level(logging.WARNING, logger="chart_tools.assembler"):
        chart = assemble(J2000, greenwich, "P", provider)

    assert chart.omitted == ("Chiron",)
    assert chart.body("Chiron") is None
    assert chart.body("Sun") is not None
    assert "Chiron" in caplog.text


def test_missing_sun_leaves_chart_without_fortune(make_provider, greenwich, caplog):
    provider = make_provider(failing={swe.SUN})
    with caplog.at_level(logging.WARNING, logger="chart_tools.assembler"):
        chart = assemble(J2000, greenwich, "P", provider)

    assert chart.omitted == ("Sun",)
    assert chart.body("Sun") is None
    assert chart.body("Moon") is not None
    assert chart.part_of_fortune is None
    assert chart.is_daytime is None
    assert all(PART_OF_FORTUNE not in (a.body_a, a.body_b) for a in chart.aspects)
    assert "Sun" in caplog.text


def test_failed_body_query_is_reported_as_optional(make_provider):
    with pytest.raises(OptionalBodyUnavailable) as excinfo:
        _query_body(make_provider(failing={swe.MOON}), J2000, BODY_ROSTER[1])
    assert isinstance(excinfo.value, ComputationError)
    assert excinfo.value.body == "Moon"


def test_sign_fields_on_body_position(fake_provider, greenwich):
    body = make_body("Mars", 285.5)
    assert body.sign_index == 9
    assert body.degree_in_sign == pytest.approx(15.5)
    assert make_body("Venus", 0.0).sign_index == 0
    assert make_body("Venus", 359.99).sign_index == 11

    chart = assemble(J2000, greenwich, "P", fake_provider)
    for point in chart.points:
        assert point.sign_index == sign_index_from_longitude(point.longitude)
        assert point.degree_in_sign == pytest.approx(point.longitude - 30.0 * point.sign_index)


def test_unknown_house_system(fake_provider, greenwich):
    with pytest.raises(ValueError):
        assemble(J2000, greenwich, "X", fake_provider)


def test_borrowed_houses_skip_fortune(fake_provider):
    natal = assemble(J2000, Location(41.0, 29.0, "Europe/Istanbul"), "P", fake_provider)
    later = assemble(
        J2000 + 30.0, Location(0.0, 0.0), "P", fake_provider, houses=natal.houses, include_fortune=False
    )
    assert later.houses == natal.houses
    assert later.part_of_fortune is None
    assert later.is_daytime is None
