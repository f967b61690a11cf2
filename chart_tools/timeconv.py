"""Civil time, UTC and Julian day conversions.

Zone offsets come from the IANA database through `zoneinfo`, so historical DST
rules apply. Julian days switch from the Julian to the Gregorian calendar at
1582-10-15, the historical reform date.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import InvalidTimezone
from .models import CivilMoment, ResolvedTime, UtcTime

# JD of 1582-10-15 00:00 UT, first day of the Gregorian calendar.
GREGORIAN_START_JD = 2299160.5
SECOND_IN_DAYS = 1.0 / 86400.0


def zone(name: str) -> ZoneInfo:
    """Look up an IANA zone, raising InvalidTimezone for unknown identifiers."""

    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidTimezone(name) from exc


def resolve(moment: CivilMoment) -> ResolvedTime:
    """
    Convert wall-clock time in a zone into a UTC instant.

    The civil fields are first read as if they were UTC. Looking that guess up in
    the zone shows the wall clock it corresponds to; the difference is the zone
    offset, and subtracting it gives the corrected UTC instant. The offset is then
    read again at the corrected instant because it may differ across a DST change.
    Skipped or repeated local times resolve to whatever the zone database yields.
    """

    tz = zone(moment.timezone)
    guess = datetime(
        moment.year, moment.month, moment.day, moment.hour, moment.minute, moment.second,
        tzinfo=timezone.utc,
    )
    observed = guess.astimezone(tz).replace(tzinfo=None)
    offset = observed - guess.replace(tzinfo=None)
    utc = guess - offset

    second_pass = utc.astimezone(tz).utcoffset() or timedelta(0)
    offset_minutes = second_pass.total_seconds() / 60.0

    jd_ut = civil_to_jd(utc.year, utc.month, utc.day, utc.hour, utc.minute, utc.second)
    return ResolvedTime(utc=utc, jd_ut=jd_ut, offset_minutes=offset_minutes)


def civil_to_jd(
    year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: float = 0.0
) -> float:
    """Julian day of a UTC calendar time (Meeus, chapter 7)."""

    y, m = year, month
    if m <= 2:
        y -= 1
        m += 12
    if (year, month, day) >= (1582, 10, 15):
        a = math.floor(y / 100)
        b = 2 - a + math.floor(a / 4)
    else:
        b = 0
    day_fraction = (hour + minute / 60.0 + second / 3600.0) / 24.0
    return (
        math.floor(365.25 * (y + 4716))
        + math.floor(30.6001 * (m + 1))
        + day
        + day_fraction
        + b
        - 1524.5
    )


def jd_to_civil(jd: float) -> UtcTime:
    """Calendar fields of a Julian day; inverse of civil_to_jd."""

    z = math.floor(jd + 0.5)
    f = jd + 0.5 - z
    if z < GREGORIAN_START_JD + 0.5:
        a = z
    else:
        alpha = math.floor((z - 1867216.25) / 36524.25)
        a = z + 1 + alpha - math.floor(alpha / 4)

    b = a + 1524
    c = math.floor((b - 122.1) / 365.25)
    d = math.floor(365.25 * c)
    e = math.floor((b - d) / 30.6001)

    day = int(b - d - math.floor(30.6001 * e))
    month = int(e - 1 if e < 14 else e - 13)
    year = int(c - 4716 if month > 2 else c - 4715)

    total_hours = f * 24.0
    hour = min(int(total_hours), 23)
    total_minutes = (total_hours - hour) * 60.0
    minute = min(int(total_minutes), 59)
    second = max((total_minutes - minute) * 60.0, 0.0)
    return UtcTime(year=year, month=month, day=day, hour=hour, minute=minute, second=second)


def jd_to_datetime(jd: float) -> datetime:
    """Aware UTC datetime for a Julian day, rounded to the millisecond.

    A float JD near 2.45e6 only resolves to about 40 µs, so finer digits are noise.
    """

    civil = jd_to_civil(jd)
    base = datetime(civil.year, civil.month, civil.day, civil.hour, civil.minute, tzinfo=timezone.utc)
    return base + timedelta(milliseconds=round(civil.second * 1000))


def datetime_to_jd(dt: datetime) -> float:
    """Julian day of a datetime; naive values are taken as UTC."""

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return civil_to_jd(
        dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second + dt.microsecond / 1_000_000
    )


def jd_to_local(jd: float, zone_name: str) -> tuple[datetime, float]:
    """Local wall-clock time of an instant and the zone offset in minutes."""

    local = jd_to_datetime(jd).astimezone(zone(zone_name))
    offset = local.utcoffset() or timedelta(0)
    return local, offset.total_seconds() / 60.0


def format_utc_offset(offset_minutes: float) -> str:
    """Format an offset in minutes as UTC±HH:MM."""

    sign = "+" if offset_minutes >= 0 else "-"
    total = int(round(abs(offset_minutes)))
    hours, minutes = divmod(total, 60)
    return f"UTC{sign}{hours:02d}:{minutes:02d}"
