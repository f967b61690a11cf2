"""Command line entry point for computing charts."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, datetime, time

from . import charts, ephemeris, output
from .analysis.signs import DEFAULT_RULERSHIP, RULERSHIPS
from .errors import ChartToolsError
from .models import CivilMoment, Location
from .transits import compute_transits


def parse_date(value: str) -> date:
    """Parse a date string, accepting 1- or 2-digit months/days."""

    value = value.strip()
    try:
        y, m, d = value.split("-")
        return date(int(y), int(m), int(d))
    except ValueError:
        return datetime.fromisoformat(value).date()


def parse_time(value: str) -> time:
    """Parse HH:MM or HH:MM:SS (24h)."""

    value = value.strip()
    parts = value.split(":")
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(f"Expected HH:MM[:SS], got {value!r}")
    try:
        return time(*(int(p) for p in parts))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _moment(day: date, at: time, zone: str) -> CivilMoment:
    return CivilMoment(day.year, day.month, day.day, at.hour, at.minute, at.second, zone)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chart-tools",
        description="Compute natal, return and transit charts with Swiss Ephemeris.",
    )
    parser.add_argument("--date", required=True, type=parse_date, help="Birth date, YYYY-MM-DD (local).")
    parser.add_argument("--time", required=True, type=parse_time, help="Birth time, HH:MM[:SS] (local).")
    parser.add_argument("--tz", required=True, help="IANA timezone of the birth place, e.g. Europe/Istanbul.")
    parser.add_argument("--lat", required=True, type=float, help="Birth latitude in decimal degrees.")
    parser.add_argument("--lon", required=True, type=float, help="Birth longitude in decimal degrees.")
    parser.add_argument("--place", default="", help="Optional place name for the report header.")
    parser.add_argument(
        "--house-system",
        default=ephemeris.DEFAULT_HOUSE_SYSTEM,
        choices=sorted(ephemeris.HOUSE_SYSTEMS),
        help="Swiss Ephemeris house system code (default: P, Placidus).",
    )
    parser.add_argument(
        "--ephe",
        help="Swiss Ephemeris data directory. Defaults to the SWISSEPH_EPHE env var.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log solver and provider details.")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("natal", help="Natal chart.")

    solar = sub.add_parser("solar", help="Solar Return for a year.")
    solar.add_argument("--year", required=True, type=int, help="Solar year label.")
    _add_return_location(solar)

    lunar = sub.add_parser("lunar", help="Lunar Return for a month.")
    lunar.add_argument("--year", required=True, type=int)
    lunar.add_argument("--month", required=True, type=int, choices=range(1, 13), metavar="1-12")
    _add_return_location(lunar)

    transit = sub.add_parser("transit", help="Transits to the natal chart.")
    transit.add_argument("--on", dest="on_date", required=True, type=parse_date, help="Transit date.")
    transit.add_argument("--at", dest="on_time", default=time(12, 0), type=parse_time, help="Transit time.")
    _add_return_location(transit)

    for name, help_text in (("decans", "Three decans per natal house."), ("cycles", "Seven-year life cycles.")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--rulership", default=DEFAULT_RULERSHIP, choices=sorted(RULERSHIPS))
    return parser


def _add_return_location(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--at-lat", type=float, help="Latitude for the chart; defaults to the birth place.")
    cmd.add_argument("--at-lon", type=float, help="Longitude for the chart; defaults to the birth place.")
    cmd.add_argument("--at-tz", help="Timezone for the chart; defaults to the birth timezone.")


def _chart_location(args: argparse.Namespace, birth: Location) -> Location:
    if args.at_lat is None and args.at_lon is None and args.at_tz is None:
        return birth
    return Location(
        latitude=birth.latitude if args.at_lat is None else args.at_lat,
        longitude=birth.longitude if args.at_lon is None else args.at_lon,
        timezone=args.at_tz or birth.timezone,
    )


def run(args: argparse.Namespace) -> None:
    if args.ephe:
        ephemeris.set_ephe_path(args.ephe)

    birth_place = Location(args.lat, args.lon, args.tz, args.place)
    natal = charts.compute_natal_chart(_moment(args.date, args.time, args.tz), birth_place, args.house_system)

    if args.command == "natal":
        output.print_natal_report(natal)
    elif args.command == "solar":
        sr = charts.compute_solar_return(natal, args.year, _chart_location(args, birth_place), args.house_system)
        output.print_solar_return_report(sr)
    elif args.command == "lunar":
        lr = charts.compute_lunar_return(
            natal, args.year, args.month, _chart_location(args, birth_place), args.house_system
        )
        output.print_lunar_return_report(lr)
    elif args.command == "transit":
        where = _chart_location(args, birth_place)
        tr = compute_transits(natal, _moment(args.on_date, args.on_time, where.timezone), where)
        output.print_transit_report(tr)
    elif args.command == "decans":
        rows = charts.compute_house_decans(natal.houses, natal.points, args.rulership)
        output.print_segments(rows, "House decans")
    elif args.command == "cycles":
        rows = charts.compute_life_cycle_years(natal.houses, natal.points, args.date.year, args.rulership)
        output.print_segments(rows, "Seven-year life cycles")


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point.

    Usage:
        chart-tools --date 1990-10-12 --time 14:30 --tz Europe/Istanbul \\
            --lat 41.01 --lon 28.97 solar --year 2025
    """

    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        run(args)
    except ChartToolsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
