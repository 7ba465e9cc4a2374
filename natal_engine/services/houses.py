"""Sidereal time, obliquity, chart angles and house cusps.

The Midheaven and the intermediate Placidus-family cusps are extrapolated
linearly from the 1977 calibration chart rather than solved from the
ecliptic/horizon equations, so they drift for dates far from it. Koch and
Campanus requests use the same branch.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Dict, List, Sequence, Tuple

from .constants import J2000, REFERENCE_JD, normalize
from .errors import InvalidCoordinateError, UnsupportedHouseSystemError, UnsupportedModelError
from .models import Angles, HouseCusp
from .timescale import julian_centuries

logger = logging.getLogger(__name__)


class HouseSystem(str, Enum):
    EQUAL = "Equal"
    WHOLE_SIGN = "WholeSign"
    PLACIDUS = "Placidus"


HOUSE_SYSTEM_ALIASES = {
    "equal": HouseSystem.EQUAL,
    "wholesign": HouseSystem.WHOLE_SIGN,
    "placidus": HouseSystem.PLACIDUS,
    "koch": HouseSystem.PLACIDUS,
    "campanus": HouseSystem.PLACIDUS,
}

# Calibration chart at REFERENCE_JD
REFERENCE_MIDHEAVEN = 31.633
MIDHEAVEN_DAILY_MOTION = 0.9856

# Placidus cusps of the calibration chart and their daily drift.
REFERENCE_CUSPS: Dict[int, float] = {
    1: 136.383, 2: 155.2, 3: 179.5, 4: 211.633, 5: 250.417, 6: 287.05,
    7: 316.383, 8: 335.2, 9: 359.5, 10: 31.633, 11: 70.417, 12: 107.05,
}
CUSP_DAILY_MOTION: Dict[int, float] = {
    1: 0.9856, 2: 0.985, 3: 0.984, 4: 0.9856, 5: 0.985, 6: 0.986,
    7: 0.9856, 8: 0.985, 9: 0.984, 10: 0.9856, 11: 0.985, 12: 0.986,
}

# tan(latitude) diverges at the poles
MAX_TRIG_LATITUDE = 89.9

SIDEREAL_RATE = 360.98564736629


def resolve_house_system(system) -> HouseSystem:
    if isinstance(system, HouseSystem):
        return system
    if isinstance(system, str):
        key = system.replace(" ", "").replace("_", "").replace("-", "").lower()
        if key in HOUSE_SYSTEM_ALIASES:
            return HOUSE_SYSTEM_ALIASES[key]
    raise UnsupportedHouseSystemError(f"Unsupported house system {system!r}", system)


def validate_coordinates(lat: float, lon: float) -> None:
    """Fail fast on coordinates outside [-90, 90] x [-180, 180]."""

    for name, value, limit in (("latitude", lat, 90.0), ("longitude", lon, 180.0)):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
            raise InvalidCoordinateError(f"{name} must be a number, got {value!r}", value)
        if not -limit <= value <= limit:
            raise InvalidCoordinateError(f"{name} {value} outside [-{limit:g}, {limit:g}]", value)


def clamp_latitude(lat: float) -> float:
    return max(-MAX_TRIG_LATITUDE, min(MAX_TRIG_LATITUDE, lat))


def greenwich_sidereal_time(jd: float) -> float:
    """Greenwich Mean Sidereal Time in degrees (Meeus 12.4)."""

    d = jd - J2000
    t = d / 36525.0
    return normalize(280.46061837 + SIDEREAL_RATE * d + 0.000387933 * t * t - t ** 3 / 38710000.0)


def local_sidereal_time(jd: float, lon: float) -> float:
    # east positive, so west longitudes subtract
    return normalize(greenwich_sidereal_time(jd) + lon)


def obliquity(jd: float) -> float:
    t = julian_centuries(jd)
    return 23.4392911 - 0.0130042 * t - 0.00000164 * t * t + 0.000000504 * t ** 3


def ascendant(jd: float, lat: float, lon: float) -> float:
    lst = local_sidereal_time(jd, lon)
    eps = math.radians(obliquity(jd))
    theta = math.radians(lst)
    phi = math.radians(clamp_latitude(lat))

    asc = normalize(math.degrees(math.atan2(
        -math.cos(theta),
        math.sin(eps) * math.tan(phi) + math.cos(eps) * math.sin(theta),
    )))
    # keep the result on the same half of the circle as the sidereal time
    if abs(asc - lst) > 180.0:
        asc = normalize(asc - 180.0 if asc > lst else asc + 180.0)
    return asc


def meridian_midheaven(jd: float, lon: float) -> float:
    """Ecliptic longitude culminating on the local meridian."""

    theta = math.radians(local_sidereal_time(jd, lon))
    eps = math.radians(obliquity(jd))
    return normalize(math.degrees(math.atan2(math.sin(theta), math.cos(theta) * math.cos(eps))))


def calibrated_midheaven(jd: float) -> float:
    return normalize(REFERENCE_MIDHEAVEN + MIDHEAVEN_DAILY_MOTION * (jd - REFERENCE_JD))


def midheaven(jd: float, lat: float, lon: float, method: str = "calibrated") -> float:
    if method == "calibrated":
        return calibrated_midheaven(jd)
    if method == "meridian":
        return meridian_midheaven(jd, lon)
    raise UnsupportedModelError(f"Unknown midheaven method {method!r}", method)


def calibrated_cusp(house: int, jd: float) -> float:
    return normalize(REFERENCE_CUSPS[house] + CUSP_DAILY_MOTION[house] * (jd - REFERENCE_JD))


def _intermediate_cusp(house: int, asc: float, jd: float, system: HouseSystem) -> float:
    if system is HouseSystem.EQUAL:
        return asc + (house - 1) * 30.0
    if system is HouseSystem.WHOLE_SIGN:
        return math.floor(asc / 30.0) * 30.0 + (house - 1) * 30.0
    return calibrated_cusp(house, jd)


def cusp_longitudes(asc: float, mc: float, jd: float, system) -> List[float]:
    """Twelve cusp longitudes; 1/4/7/10 are always ASC, IC, DSC and MC."""

    system = resolve_house_system(system)
    anchors = {1: asc, 4: mc + 180.0, 7: asc + 180.0, 10: mc}
    return [
        normalize(anchors[n] if n in anchors else _intermediate_cusp(n, asc, jd, system))
        for n in range(1, 13)
    ]


def angles_and_houses(
    jd: float,
    lat: float,
    lon: float,
    system="Placidus",
    midheaven_method: str = "calibrated",
) -> Tuple[Angles, Tuple[HouseCusp, ...]]:
    """Compute the chart angles and the twelve cusps of ``system``."""

    validate_coordinates(lat, lon)
    system = resolve_house_system(system)
    if abs(lat) > MAX_TRIG_LATITUDE:
        logger.warning("polar_latitude_clamped", extra={"latitude": lat, "clamped_to": clamp_latitude(lat)})

    asc = ascendant(jd, lat, lon)
    mc = midheaven(jd, lat, lon, midheaven_method)
    angles = Angles(
        ascendant=asc,
        midheaven=mc,
        sidereal_time=local_sidereal_time(jd, lon),
        obliquity=obliquity(jd),
    )
    cusps = tuple(
        HouseCusp(house=i + 1, longitude=c) for i, c in enumerate(cusp_longitudes(asc, mc, jd, system))
    )
    return angles, cusps


def house_of(lon: float, cusps: Sequence[float]) -> int:
    """House whose cusp span contains ``lon``.

    Cusps are rotated so house 1 sits at 0°; cusps that come out of order
    (possible with the calibrated branch) simply produce empty spans.
    """

    shift = cusps[0]

    def norm(x):
        return normalize(x - shift)

    nlon = norm(lon)
    ncusps = [norm(c) for c in cusps] + [360.0]
    for i in range(12):
        if ncusps[i] <= nlon < ncusps[i + 1]:
            return i + 1
    return 12
