import argparse

import pytest
from rich.console import Console

from chart_tools import cli, output
from chart_tools.analysis.signs import SIGNS
from chart_tools.charts import compute_house_decans, compute_life_cycle_years, compute_natal_chart, compute_solar_return
from chart_tools.models import Aspect, CivilMoment, Location
from chart_tools.transits import compute_transits

PLACE = Location(41.01, 28.97, "Europe/Istanbul", "Istanbul")


@pytest.fixture
def natal(fake_provider):
    return compute_natal_chart(CivilMoment(1990, 7, 12, 14, 30, 0, "Europe/Istanbul"), PLACE, provider=fake_provider)


def _console() -> Console:
    return Console(record=True, width=160, color_system=None)


def test_format_longitude():
    assert output.format_longitude(285.5) == "15°♑30'00\""
    assert output.format_longitude(0.25, include_seconds=False) == "00°♈15'"
    assert output.format_long_with_sign(285.5) == "15°30'0\" Capricorn"


def test_format_aspect():
    aspect = Aspect("Sun", "Moon", "trine", 120.0, 2.5, True)
    assert output.format_orb(2.5) == "2°30'"
    assert output.format_aspect(aspect) == "☉ Sun trine ☽ Moon (orb 2°30') A"


def test_natal_report(natal):
    console = _console()
    output.print_natal_report(natal, console)
    text = console.export_text()

    assert "Natal Chart" in text
    assert "UTC+03:00" in text
    assert "1990-07-12 11:30:00" in text
    assert "Istanbul" in text
    assert "Part of Fortune" in text
    assert "Houses" in text

    sun = natal.body("Sun")
    assert f"{sun.degree_in_sign:.2f}° {SIGNS[sun.sign_index]}" in text


def test_solar_return_and_transit_reports(natal, fake_provider):
    console = _console()
    output.print_solar_return_report(compute_solar_return(natal, 2025, PLACE, provider=fake_provider), console)
    moment = CivilMoment(2024, 5, 1, 12, 0, 0, "Europe/Istanbul")
    output.print_transit_report(compute_transits(natal, moment, PLACE, fake_provider), console)
    text = console.export_text()

    assert "Sun through the return houses" in text
    assert "Transit to natal" in text


def test_segment_report(natal):
    console = _console()
    output.print_segments(compute_house_decans(natal.houses, natal.points), "House decans", console)
    output.print_segments(compute_life_cycle_years(natal.houses, natal.points, 1990), "Life cycles", console)
    text = console.export_text()

    assert "House decans" in text
    assert "Marriage, spouse" in text
    assert "1997 (age 7)" in text


def test_cli_parses_dates_and_times():
    assert cli.parse_date("1990-7-2").isoformat() == "1990-07-02"
    assert cli.parse_time("14:30").isoformat() == "14:30:00"
    with pytest.raises(argparse.ArgumentTypeError):
        cli.parse_time("1430")


def test_cli_reports_unknown_zone(capsys):
    argv = ["--date", "1990-10-12", "--time", "14:30", "--tz", "Europe/Atlantis", "--lat", "41", "--lon", "29", "natal"]
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    assert excinfo.value.code == 1
    assert "Unknown timezone" in capsys.readouterr().err
