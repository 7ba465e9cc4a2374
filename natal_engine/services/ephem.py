"""Low-precision body positions for natal charts.

Three interchangeable models are available:

``calibrated``
    Reference longitude at a verified instant (1977-05-17 18:29 UT) plus the
    body's mean daily motion times the days elapsed. Exact at the reference
    and drifting away from it, faster for quick bodies such as the Moon.
``secular``
    Mean elements as ``L0 + rate * T`` in Julian centuries since J2000.0,
    with the equation of the centre for the Sun and the principal periodic
    terms for the Moon.
``swisseph``
    Geocentric longitudes and speeds from the Swiss Ephemeris Moshier
    backend. Only this model reports retrograde motion from a real
    velocity sign.

For ``calibrated`` and ``secular`` the retrograde flag comes from a periodic
window per body, which is an approximation and not a velocity computation.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Callable, Dict, Iterable, Optional, Sequence, Tuple

import swisseph as swe

from .constants import J2000, REFERENCE_JD, normalize
from .errors import UnsupportedBodyError, UnsupportedModelError
from .houses import ascendant as compute_ascendant, validate_coordinates
from .models import BodyPosition
from .timescale import julian_centuries

ENGINE_VERSION = "natal-engine-0.1.0"


class Body(str, Enum):
    SUN = "Sun"
    MOON = "Moon"
    MERCURY = "Mercury"
    VENUS = "Venus"
    MARS = "Mars"
    JUPITER = "Jupiter"
    SATURN = "Saturn"
    URANUS = "Uranus"
    NEPTUNE = "Neptune"
    PLUTO = "Pluto"
    NORTH_NODE = "North Node"
    SOUTH_NODE = "South Node"
    LILITH = "Lilith"
    ASCENDANT = "Ascendant"
    MIDHEAVEN = "Midheaven"


ANGLE_BODIES = (Body.ASCENDANT, Body.MIDHEAVEN)
PLANETARY_BODIES = tuple(b for b in Body if b not in ANGLE_BODIES)

_BODY_ALIASES = {
    "truenode": Body.NORTH_NODE,
    "meannode": Body.NORTH_NODE,
    "northnode": Body.NORTH_NODE,
    "southnode": Body.SOUTH_NODE,
    "blackmoon": Body.LILITH,
    "asc": Body.ASCENDANT,
    "mc": Body.MIDHEAVEN,
}

MODELS = ("calibrated", "secular", "swisseph")

REFERENCE_LONGITUDES: Dict[Body, float] = {
    Body.SUN: 56.717,
    Body.MOON: 52.917,
    Body.MERCURY: 35.3,
    Body.VENUS: 15.133,
    Body.MARS: 15.433,
    Body.JUPITER: 69.567,
    Body.SATURN: 131.117,
    Body.URANUS: 219.033,
    Body.NEPTUNE: 255.267,
    Body.PLUTO: 191.75,
    Body.NORTH_NODE: 204.017,
    Body.LILITH: 62.75,
}

# degrees per day
DAILY_MOTION: Dict[Body, float] = {
    Body.SUN: 0.9856,
    Body.MOON: 13.176,
    Body.MERCURY: 1.383,
    Body.VENUS: 1.602,
    Body.MARS: 0.524,
    Body.JUPITER: 0.083,
    Body.SATURN: 0.033,
    Body.URANUS: 0.012,
    Body.NEPTUNE: 0.006,
    Body.PLUTO: 0.004,
    Body.NORTH_NODE: -0.053,
    Body.LILITH: 0.111,
}

# (L0 at J2000.0, degrees per Julian century)
SECULAR_ELEMENTS: Dict[Body, Tuple[float, float]] = {
    Body.SUN: (280.46646, 36000.76983),
    Body.MOON: (218.3164477, 481267.88123421),
    Body.MERCURY: (252.250906, 149472.6746358),
    Body.VENUS: (181.979801, 58517.8156760),
    Body.MARS: (355.433000, 19140.299314),
    Body.JUPITER: (34.351519, 3034.9056606),
    Body.SATURN: (50.077444, 1222.1138488),
    Body.URANUS: (314.055005, 428.4669983),
    Body.NEPTUNE: (304.348665, 218.4862002),
    Body.PLUTO: (238.958116, 145.1780361),
    Body.NORTH_NODE: (125.044555, -1934.1361849),
    Body.LILITH: (83.353243, 4069.0137111),
}

SWISSEPH_CODES: Dict[Body, int] = {
    Body.SUN: swe.SUN,
    Body.MOON: swe.MOON,
    Body.MERCURY: swe.MERCURY,
    Body.VENUS: swe.VENUS,
    Body.MARS: swe.MARS,
    Body.JUPITER: swe.JUPITER,
    Body.SATURN: swe.SATURN,
    Body.URANUS: swe.URANUS,
    Body.NEPTUNE: swe.NEPTUNE,
    Body.PLUTO: swe.PLUTO,
    Body.NORTH_NODE: swe.MEAN_NODE,
    Body.LILITH: swe.MEAN_APOG,
}

# (period in days, [(start, end) fractions of the period])
RETROGRADE_WINDOWS: Dict[Body, Tuple[float, Tuple[Tuple[float, float], ...]]] = {
    Body.MERCURY: (365.25, ((0.1, 0.15), (0.4, 0.45), (0.7, 0.75))),
    Body.VENUS: (584.0, ((0.4, 0.5),)),
    Body.MARS: (687.0, ((0.3, 0.4),)),
    Body.JUPITER: (365.25, ((0.3, 0.7),)),
    Body.SATURN: (365.25, ((0.3, 0.7),)),
    Body.URANUS: (365.25, ((0.3, 0.8),)),
    Body.NEPTUNE: (365.25, ((0.3, 0.8),)),
    Body.PLUTO: (365.25, ((0.2, 0.8),)),
}


def resolve_body(name) -> Body:
    """Map a display name, enum member or loose alias onto :class:`Body`."""

    if isinstance(name, Body):
        return name
    if isinstance(name, str):
        try:
            return Body(name)
        except ValueError:
            pass
        key = name.replace(" ", "").replace("_", "").lower()
        for body in Body:
            if body.value.replace(" ", "").lower() == key:
                return body
        if key in _BODY_ALIASES:
            return _BODY_ALIASES[key]
    raise UnsupportedBodyError(f"Unsupported body {name!r}", name)


def resolve_bodies(names: Optional[Iterable] = None) -> Tuple[Body, ...]:
    """Validate requested planetary bodies, keeping canonical order."""

    if names is None:
        return PLANETARY_BODIES
    requested = set()
    for name in names:
        body = resolve_body(name)
        if body in ANGLE_BODIES:
            raise UnsupportedBodyError(
                f"{body.value} is an angle; it comes from the house calculation", name
            )
        requested.add(body)
    return tuple(b for b in PLANETARY_BODIES if b in requested)


def check_model(model: str) -> str:
    key = (model or "").strip().lower()
    if key not in MODELS:
        raise UnsupportedModelError(f"Unknown ephemeris model {model!r}", model)
    return key


# ---------------------------------------------------------------------------
# Longitude models
# ---------------------------------------------------------------------------

def calibrated_longitude(body: Body, jd: float) -> float:
    if body is Body.SOUTH_NODE:
        return normalize(calibrated_longitude(Body.NORTH_NODE, jd) + 180.0)
    days = jd - REFERENCE_JD
    return normalize(REFERENCE_LONGITUDES[body] + DAILY_MOTION[body] * days)


def _sun_true_longitude(t: float) -> float:
    l0 = 280.46646 + 36000.76983 * t + 0.0003032 * t * t
    m = math.radians(357.52911 + 35999.05029 * t - 0.0001537 * t * t)
    centre = (
        (1.914602 - 0.004817 * t - 0.000014 * t * t) * math.sin(m)
        + (0.019993 - 0.000101 * t) * math.sin(2 * m)
        + 0.000289 * math.sin(3 * m)
    )
    return l0 + centre


def _moon_longitude(t: float) -> float:
    lp = 218.3164477 + 481267.88123421 * t - 0.0015786 * t * t + t ** 3 / 538841.0 - t ** 4 / 65194000.0
    d = math.radians(297.8501921 + 445267.1114034 * t - 0.0018819 * t * t)
    m = math.radians(357.5291092 + 35999.0502909 * t - 0.0001536 * t * t)
    mp = math.radians(134.9633964 + 477198.8675055 * t + 0.0087414 * t * t)
    f = math.radians(93.2720950 + 483202.0175233 * t - 0.0036539 * t * t)
    return (
        lp
        + 6.289 * math.sin(mp)
        + 1.274 * math.sin(2 * d - mp)
        + 0.658 * math.sin(2 * d)
        + 0.214 * math.sin(2 * mp)
        - 0.186 * math.sin(m)
        - 0.114 * math.sin(2 * f)
    )


def secular_longitude(body: Body, jd: float) -> float:
    if body is Body.SOUTH_NODE:
        return normalize(secular_longitude(Body.NORTH_NODE, jd) + 180.0)
    t = julian_centuries(jd)
    if body is Body.SUN:
        return normalize(_sun_true_longitude(t))
    if body is Body.MOON:
        return normalize(_moon_longitude(t))
    l0, rate = SECULAR_ELEMENTS[body]
    return normalize(l0 + rate * t)


def secular_daily_motion(body: Body) -> float:
    key = Body.NORTH_NODE if body is Body.SOUTH_NODE else body
    return SECULAR_ELEMENTS[key][1] / 36525.0


def swisseph_position(body: Body, jd: float) -> Tuple[float, float]:
    """Return ``(longitude, speed)`` from the Moshier ephemeris."""

    if body is Body.SOUTH_NODE:
        lon, speed = swisseph_position(Body.NORTH_NODE, jd)
        return normalize(lon + 180.0), speed
    values, _ = swe.calc_ut(jd, SWISSEPH_CODES[body], swe.FLG_MOSEPH | swe.FLG_SPEED)
    return normalize(values[0]), values[3]


def is_retrograde(body: Body, jd: float) -> bool:
    """Periodic retrograde window for ``body`` at ``jd``.

    Bodies without a window (luminaries, nodes, Lilith) are never flagged.
    """

    window = RETROGRADE_WINDOWS.get(body)
    if window is None:
        return False
    period, spans = window
    progress = ((jd - J2000) % period) / period
    return any(lo < progress < hi for lo, hi in spans)


_LONGITUDE_MODELS: Dict[str, Callable[[Body, float], float]] = {
    "calibrated": calibrated_longitude,
    "secular": secular_longitude,
}


def body_state(body: Body, jd: float, model: str = "calibrated") -> Dict[str, float]:
    """Longitude, signed daily motion and retrograde flag of one body."""

    model = check_model(model)
    if model == "swisseph":
        lon, speed = swisseph_position(body, jd)
        retro = body in RETROGRADE_WINDOWS and speed < 0
        return {"lon": lon, "speed_lon": speed, "retro": retro}

    lon = _LONGITUDE_MODELS[model](body, jd)
    if model == "calibrated":
        key = Body.NORTH_NODE if body is Body.SOUTH_NODE else body
        motion = DAILY_MOTION[key]
    else:
        motion = secular_daily_motion(body)
    retro = is_retrograde(body, jd)
    return {"lon": lon, "speed_lon": -abs(motion) if retro else motion, "retro": retro}


def equal_house_number(lon: float, ascendant: float) -> int:
    """House 1..12 counted in 30 degree steps from the Ascendant."""

    relative = normalize(lon - ascendant)
    return int(relative // 30) + 1


def positions_for(
    jd: float,
    latitude: float,
    longitude: float,
    bodies: Optional[Sequence] = None,
    *,
    ascendant: Optional[float] = None,
    model: str = "calibrated",
) -> Tuple[BodyPosition, ...]:
    """Positions of the requested planetary bodies, Ascendant/Midheaven excluded.

    House numbers are equal 30 degree sectors from the Ascendant whatever
    house system the chart displays.
    """

    validate_coordinates(latitude, longitude)
    model = check_model(model)
    requested = resolve_bodies(bodies)
    if ascendant is None:
        ascendant = compute_ascendant(jd, latitude, longitude)

    out = []
    for body in requested:
        state = body_state(body, jd, model)
        out.append(BodyPosition(
            body=body.value,
            longitude=state["lon"],
            house=equal_house_number(state["lon"], ascendant),
            retrograde=state["retro"],
            speed=state["speed_lon"],
        ))
    return tuple(out)
