"""Output helpers for presenting computed chart data."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .analysis.aspects import MAX_ORBS
from .analysis.signs import SIGN_SYMBOLS, SIGNS, degree_in_sign, sign_index_from_longitude
from .models import Aspect, ChartSnapshot, HouseSegments, LunarReturnChart, SolarReturnChart, TransitChart, YearSegment
from .timeconv import format_utc_offset

PLANET_SYMBOLS = {
    "Sun": "☉",
    "Moon": "☽",
    "Mercury": "☿",
    "Venus": "♀",
    "Mars": "♂",
    "Jupiter": "♃",
    "Saturn": "♄",
    "Uranus": "♅",
    "Neptune": "♆",
    "Pluto": "♇",
    "North Node": "☊",
    "South Node": "☋",
    "Lilith": "⚸",
    "Chiron": "⚷",
    "Part of Fortune": "⊕",
}

ANGLE_LABELS = {1: "ASC", 4: "IC", 7: "DSC", 10: "MC"}


def _dms(longitude: float) -> tuple[int, int, int]:
    deg_in_sign = degree_in_sign(longitude)
    degree = int(deg_in_sign)
    minutes_full = (deg_in_sign - degree) * 60
    minute = int(minutes_full)
    second = int((minutes_full - minute) * 60)
    return degree, minute, second


def format_longitude(longitude: float, include_seconds: bool = True) -> str:
    """Compact zodiacal position, e.g. 15°♑23'45"."""

    sign = SIGNS[sign_index_from_longitude(longitude)]
    degree, minute, second = _dms(longitude)
    text = f"{degree:02d}°{SIGN_SYMBOLS[sign]}{minute:02d}'"
    if include_seconds:
        text += f'{second:02d}"'
    return text


def format_long_with_sign(longitude: float) -> str:
    """Readable position, e.g. 15°23'45" Capricorn."""

    sign = SIGNS[sign_index_from_longitude(longitude)]
    degree, minute, second = _dms(longitude)
    return f"{degree}°{minute}'{second}\" {sign}"


def format_orb(orb: float) -> str:
    degree = int(orb)
    minute = int((orb - degree) * 60)
    return f"{degree}°{minute:02d}'"


def format_aspect(aspect: Aspect) -> str:
    status = "A" if aspect.applying else "S"
    return f"{_planet_label(aspect.body_a)} {aspect.kind} {_planet_label(aspect.body_b)} (orb {format_orb(aspect.orb)}) {status}"


def _planet_label(name: str) -> str:
    symbol = PLANET_SYMBOLS.get(name)
    return f"{symbol} {name}" if symbol else name


def _format_coord(value: float, positive_label: str, negative_label: str, precision: int = 4) -> str:
    """Return a signed coordinate with cardinal direction."""

    hemi = positive_label if value >= 0 else negative_label
    return f"{abs(value):.{precision}f}° {hemi}"


def _chart_header_lines(chart: ChartSnapshot, title: str) -> list[str]:
    """Human-readable chart basics for the top of the report."""

    lines = [title]
    lines.append(f"UTC: {chart.utc.strftime('%Y-%m-%d %H:%M:%S')}  ({format_utc_offset(chart.offset_minutes)} local)")
    if chart.location is not None:
        loc = chart.location
        place = f"{loc.name}: " if loc.name else ""
        lines.append(
            f"Location: {place}{_format_coord(loc.latitude, 'N', 'S')}, {_format_coord(loc.longitude, 'E', 'W')}"
            f"  [{loc.timezone}]"
        )
    lines.append(f"Julian Day: {chart.jd_ut:.6f}  House system: {chart.houses.system}")
    if chart.omitted:
        lines.append(f"Omitted: {', '.join(chart.omitted)}")
    return lines


def _bodies_table(chart: ChartSnapshot) -> Table:
    table = Table(title="Positions", box=box.ROUNDED, expand=False, padding=(0, 1))
    table.add_column("Body", style="cyan", no_wrap=True)
    table.add_column("Position", style="magenta", no_wrap=True, justify="right")
    table.add_column("Sign", no_wrap=True)
    table.add_column("Longitude", justify="right", no_wrap=True)
    table.add_column("House", justify="center", no_wrap=True)
    table.add_column("Speed", justify="right", no_wrap=True)
    for p in chart.points:
        speed = Text(f"{p.speed:+.4f}")
        if p.retrograde:
            speed.append(" R", style="bold red")
        table.add_row(
            _planet_label(p.name),
            format_longitude(p.longitude),
            f"{p.degree_in_sign:.2f}° {SIGNS[p.sign_index]}",
            f"{p.longitude:.4f}°",
            str(p.house) if p.house is not None else "-",
            speed,
        )
    return table


def _houses_table(chart: ChartSnapshot) -> Table:
    frame = chart.houses
    table = Table(title="Houses", box=box.SIMPLE, expand=False, padding=(0, 1))
    table.add_column("House", justify="right", no_wrap=True)
    table.add_column("Cusp", style="magenta", no_wrap=True)
    table.add_column("", style="yellow", no_wrap=True)
    for house in range(1, 13):
        table.add_row(str(house), format_long_with_sign(frame.cusp(house)), ANGLE_LABELS.get(house, ""))
    table.add_row("", "", "")
    for label, longitude in (
        ("ASC", frame.ascendant),
        ("DSC", frame.descendant),
        ("MC", frame.mc),
        ("IC", frame.ic),
        ("Vertex", frame.vertex),
    ):
        table.add_row(label, format_long_with_sign(longitude), "")
    return table


def _aspects_table(aspects: tuple[Aspect, ...], title: str) -> Table:
    table = Table(title=title, box=box.SIMPLE, expand=False, padding=(0, 1))
    table.add_column("Pair", style="cyan", overflow="fold", max_width=40)
    table.add_column("Aspect", justify="center", no_wrap=True)
    table.add_column("Orb", justify="right", style="green", no_wrap=True)
    table.add_column("Status", style="yellow", no_wrap=True)
    for asp in sorted(aspects, key=lambda a: a.orb):
        orb_text = Text(format_orb(asp.orb))
        if asp.orb < 1.0 and MAX_ORBS.get(asp.kind, 0.0) > 1.0:
            orb_text.stylize("bold white on red")
        status = "[bold green]applying[/]" if asp.applying else "[dim]separating[/]"
        table.add_row(
            f"{_planet_label(asp.body_a)} - {_planet_label(asp.body_b)}",
            asp.kind.capitalize(),
            orb_text,
            Text.from_markup(status),
        )
    return table


def render_chart(console: Console, chart: ChartSnapshot, title: str) -> None:
    """Shared rich rendering for every chart type."""

    header = _chart_header_lines(chart, title)
    console.print(f"[bold cyan]{header[0]}[/]")
    for line in header[1:]:
        console.print(line, markup=False)
    console.print()
    console.print(_bodies_table(chart))
    if chart.part_of_fortune is not None:
        formula = "ASC + Moon - Sun" if chart.is_daytime else "ASC + Sun - Moon"
        console.print(f"Part of Fortune ({'day' if chart.is_daytime else 'night'} chart: {formula})")
    console.print()
    console.print(_houses_table(chart))
    if chart.intercepted:
        console.print("[bold]Intercepted signs[/]")
        for item in chart.intercepted:
            sign = SIGNS[item.sign_index]
            console.print(f"  House {item.house}: {SIGN_SYMBOLS[sign]} {sign}")
        console.print()
    if chart.aspects:
        console.print(_aspects_table(chart.aspects, "Aspects (by orb)"))


def print_natal_report(chart: ChartSnapshot, console: Console | None = None) -> None:
    render_chart(console or Console(), chart, "Natal Chart")


def print_solar_return_report(sr: SolarReturnChart, console: Console | None = None) -> None:
    console = console or Console()
    render_chart(console, sr.chart, f"Solar Return (event year {sr.solved_year})")
    console.print(f"Natal Sun: {format_long_with_sign(sr.natal_sun_longitude)}")
    console.print()

    table = Table(title="Sun through the return houses", box=box.ROUNDED, expand=False, padding=(0, 1))
    table.add_column("House", justify="right", no_wrap=True)
    table.add_column("Cusp", style="magenta", no_wrap=True)
    table.add_column("Enters", no_wrap=True)
    table.add_column("Leaves", no_wrap=True)
    table.add_column("Days", justify="right", no_wrap=True)
    table.add_column("Decan", style="yellow", no_wrap=True)
    table.add_column("Bodies", style="cyan", overflow="fold")
    for row in sr.house_timing:
        table.add_row(
            str(row.house),
            format_longitude(row.cusp_longitude, include_seconds=False),
            row.enter_local.strftime("%Y-%m-%d %H:%M"),
            row.leave_local.strftime("%Y-%m-%d %H:%M"),
            f"{row.duration_days:.1f}",
            f"{SIGNS[row.decan_sign]} ({row.ruler})",
            ", ".join(b.name for b in row.bodies),
        )
    console.print(table)


def print_lunar_return_report(lr: LunarReturnChart, console: Console | None = None) -> None:
    console = console or Console()
    render_chart(console, lr.chart, "Lunar Return")
    console.print(f"Natal Moon: {format_long_with_sign(lr.natal_moon_longitude)}")


def print_transit_report(tr: TransitChart, console: Console | None = None) -> None:
    console = console or Console()
    render_chart(console, tr.chart, "Transits (natal houses)")
    console.print()
    console.print(_aspects_table(tr.cross_aspects, "Transit to natal"))
    if tr.transit_aspects:
        console.print("[bold]Transit to transit[/]")
        for asp in sorted(tr.transit_aspects, key=lambda a: a.orb):
            console.print(f"  {format_aspect(asp)}")


def print_segments(houses: list[HouseSegments], title: str, console: Console | None = None) -> None:
    """One row per segment, grouped by house."""

    console = console or Console()
    table = Table(title=title, box=box.SIMPLE, expand=False, padding=(0, 1))
    table.add_column("House", justify="right", no_wrap=True)
    table.add_column("#", justify="right", no_wrap=True)
    table.add_column("From", style="magenta", no_wrap=True)
    table.add_column("Ruling sign", style="yellow", no_wrap=True)
    table.add_column("Ruler", no_wrap=True)
    table.add_column("Year / topic", no_wrap=True)
    table.add_column("Bodies", style="cyan", overflow="fold")
    for house in houses:
        for seg in house.segments:
            label = f"{seg.calendar_year} (age {seg.age})" if isinstance(seg, YearSegment) else seg.topic
            table.add_row(
                str(house.house) if seg.index == 0 else "",
                str(seg.index + 1),
                format_longitude(seg.start_longitude, include_seconds=False),
                SIGNS[seg.ruling_sign],
                seg.ruler,
                label,
                ", ".join(b.name for b in seg.bodies),
            )
    console.print(table)
