"""Calendar and time normalisation: local birth time to Julian Day (UT).

Time zones are estimated from longitude unless the caller supplies an
explicit ``tz`` (IANA name) or ``utc_offset``. The estimate is coarse: no
daylight-saving rules are applied outside the Pacific calibration band.
"""

from __future__ import annotations

import math
import re
from datetime import date as date_cls, datetime, time as time_cls, timedelta
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import swisseph as swe

from .constants import DAYS_PER_CENTURY, J2000
from .errors import InvalidDateError, InvalidTimeError, InvalidTimezoneError

DateLike = Union[str, date_cls]
TimeLike = Union[str, time_cls, None]

DEFAULT_LOCAL_TIME = time_cls(12, 0)

# Birth data for the calibration reference was recorded in PDT.
PACIFIC_BAND = (-130.0, -110.0)
PACIFIC_UTC_OFFSET = -7.0

_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$")

# First Gregorian day; the leap-century correction applies from here on.
_GREGORIAN_START = (1582, 10, 15)


def parse_date(value: DateLike) -> date_cls:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date_cls):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(f"Birth date must be YYYY-MM-DD, got {value!r}", value)
    try:
        return date_cls.fromisoformat(value.strip())
    except ValueError as exc:
        raise InvalidDateError(f"Invalid birth date {value!r}: {exc}", value) from exc


def parse_time(value: TimeLike) -> Optional[time_cls]:
    """Parse ``HH:MM`` or ``HH:MM:SS``; ``None`` means the time is unknown."""

    if value is None:
        return None
    if isinstance(value, time_cls):
        return value.replace(microsecond=0, tzinfo=None)
    if not isinstance(value, str):
        raise InvalidTimeError(f"Birth time must be HH:MM, got {value!r}", value)
    match = _TIME_RE.match(value.strip())
    if not match:
        raise InvalidTimeError(f"Invalid birth time {value!r} (use 24-hour HH:MM)", value)
    hour, minute, second = match.groups()
    return time_cls(int(hour), int(minute), int(second or 0))


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def estimate_utc_offset(
    longitude: float,
    *,
    pacific_band: Optional[Tuple[float, float]] = PACIFIC_BAND,
    pacific_offset: float = PACIFIC_UTC_OFFSET,
) -> float:
    """Offset from UTC in hours (east positive) guessed from longitude alone.

    Longitudes strictly inside ``pacific_band`` get ``pacific_offset``; pass
    ``pacific_band=None`` to use the plain 15 degree rule everywhere.
    """

    if pacific_band is not None:
        lo, hi = pacific_band
        if lo < longitude < hi:
            return pacific_offset
    # one hour per 15 degrees; west longitudes are behind UTC
    return float(-_round_half_up(-longitude / 15.0))


def _zone_offset(tz: str, local: datetime) -> float:
    # a directory name such as "America" raises IsADirectoryError, an OSError
    try:
        zone = ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise InvalidTimezoneError(f"Unknown time zone {tz!r}", tz) from exc
    offset = local.replace(tzinfo=zone).utcoffset()
    return offset.total_seconds() / 3600.0


def resolve_utc_offset(
    local: datetime,
    longitude: Optional[float] = None,
    *,
    utc_offset: Optional[float] = None,
    tz: Optional[str] = None,
) -> Tuple[float, str]:
    """Return ``(offset_hours, source)`` for a local birth instant.

    ``source`` is one of ``"tz"``, ``"explicit"``, ``"longitude"`` or ``"utc"``.
    """

    if tz:
        return _zone_offset(tz, local), "tz"
    if utc_offset is not None:
        try:
            hours = float(utc_offset)
        except (TypeError, ValueError) as exc:
            raise InvalidTimezoneError(f"UTC offset must be a number of hours, got {utc_offset!r}", utc_offset) from exc
        if isinstance(utc_offset, bool) or not -14.0 <= hours <= 14.0:
            raise InvalidTimezoneError(f"UTC offset {utc_offset!r} outside [-14, 14]", utc_offset)
        return hours, "explicit"
    if longitude is not None:
        return estimate_utc_offset(longitude), "longitude"
    return 0.0, "utc"


def local_to_utc(local: datetime, offset_hours: float) -> datetime:
    """Shift a naive local datetime to naive UTC, rolling day/month/year."""

    try:
        return local - timedelta(hours=offset_hours)
    except OverflowError as exc:
        raise InvalidDateError(f"Date {local.date()} out of supported range", local.date()) from exc


def julian_day(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: float = 0.0) -> float:
    """Julian Day for a UT calendar date.

    Dates before 1582-10-15 are read in the Julian calendar, later ones in
    the Gregorian calendar.
    """

    calendar = swe.GREG_CAL if (year, month, day) >= _GREGORIAN_START else swe.JUL_CAL
    return swe.julday(year, month, day, hour + minute / 60.0 + second / 3600.0, calendar)


def julian_centuries(jd: float) -> float:
    return (jd - J2000) / DAYS_PER_CENTURY


def birth_instant(
    date: DateLike,
    time: TimeLike = None,
    longitude: Optional[float] = None,
    *,
    utc_offset: Optional[float] = None,
    tz: Optional[str] = None,
) -> Tuple[float, float, str]:
    """Return ``(julian_day, utc_offset_hours, offset_source)`` for a birth."""

    d = parse_date(date)
    t = parse_time(time) or DEFAULT_LOCAL_TIME
    local = datetime.combine(d, t)
    offset, source = resolve_utc_offset(local, longitude, utc_offset=utc_offset, tz=tz)
    utc = local_to_utc(local, offset)
    return julian_day(utc.year, utc.month, utc.day, utc.hour, utc.minute, utc.second), offset, source


def to_julian_day(
    date: DateLike,
    time: TimeLike = None,
    longitude: Optional[float] = None,
    *,
    utc_offset: Optional[float] = None,
    tz: Optional[str] = None,
) -> float:
    """Convert a local birth date/time to a Julian Day referenced to UT.

    A missing time defaults to local noon.
    """

    jd, _offset, _source = birth_instant(date, time, longitude, utc_offset=utc_offset, tz=tz)
    return jd


__all__ = [
    "birth_instant",
    "estimate_utc_offset",
    "julian_centuries",
    "julian_day",
    "local_to_utc",
    "parse_date",
    "parse_time",
    "resolve_utc_offset",
    "to_julian_day",
]
