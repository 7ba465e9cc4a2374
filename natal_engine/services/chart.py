"""Natal chart assembly.

``calculate_chart`` is a pure function: it validates the birth data, runs
the calendar, position, house and aspect stages in that order and returns
an immutable :class:`~natal_engine.services.models.Chart`. It holds no state
between calls and never touches storage; callers that persist charts own
identifiers and schemas.
"""

from __future__ import annotations

import dataclasses
import logging
from hashlib import sha256
from typing import List, Optional, Sequence, Tuple

from . import aspects as aspects_svc
from . import ephem
from . import houses as houses_svc
from .errors import UnsupportedModelError
from .models import AspectDefinition, BirthInput, BodyPosition, Chart
from .timescale import birth_instant, parse_date, parse_time

logger = logging.getLogger(__name__)

UNKNOWN_TIME_WARNING = "Birth time unknown; using local noon. Angles, houses and the Moon are low confidence."
ESTIMATED_OFFSET_WARNING = "UTC offset estimated from longitude ({offset:+g} h); pass tz or utc_offset for exact local time."
POLAR_WARNING = "Latitude {lat:g} clamped to ±{limit:g} for the Ascendant calculation."


def angle_speeds(midheaven_method: str = "calibrated") -> Tuple[float, float]:
    """Daily motion of the Ascendant and Midheaven as each is computed.

    The Ascendant always follows local sidereal time. The calibrated
    Midheaven advances at its extrapolation rate, the meridian one at the
    sidereal rate.
    """

    if midheaven_method == "calibrated":
        return houses_svc.SIDEREAL_RATE, houses_svc.MIDHEAVEN_DAILY_MOTION
    return houses_svc.SIDEREAL_RATE, houses_svc.SIDEREAL_RATE


def _angle_positions(angles, midheaven_method: str) -> List[BodyPosition]:
    asc_speed, mc_speed = angle_speeds(midheaven_method)
    return [
        BodyPosition(body=ephem.Body.ASCENDANT.value, longitude=angles.ascendant, house=1, speed=asc_speed),
        BodyPosition(body=ephem.Body.MIDHEAVEN.value, longitude=angles.midheaven, house=10, speed=mc_speed),
    ]


def calculate_chart(
    birth: BirthInput,
    house_system: str = "Placidus",
    *,
    model: str = "calibrated",
    bodies: Optional[Sequence] = None,
    aspect_table: Optional[Sequence[AspectDefinition]] = None,
    midheaven_method: str = "calibrated",
) -> Chart:
    """Compute a complete natal chart for ``birth``.

    Every input error is raised before any astronomical computation starts:
    ``InvalidDateError``, ``InvalidTimeError``, ``InvalidCoordinateError``,
    ``InvalidTimezoneError``, ``UnsupportedBodyError``,
    ``UnsupportedHouseSystemError`` and ``UnsupportedModelError``.
    """

    birth_date = parse_date(birth.date)
    birth_time = parse_time(birth.time)
    houses_svc.validate_coordinates(birth.latitude, birth.longitude)
    system = houses_svc.resolve_house_system(house_system)
    model = ephem.check_model(model)
    if midheaven_method not in ("calibrated", "meridian"):
        raise UnsupportedModelError(f"Unknown midheaven method {midheaven_method!r}", midheaven_method)
    requested = ephem.resolve_bodies(bodies)

    jd, offset, source = birth_instant(
        birth_date, birth_time, birth.longitude, utc_offset=birth.utc_offset, tz=birth.tz
    )

    warnings: List[str] = []
    if birth_time is None:
        warnings.append(UNKNOWN_TIME_WARNING)
    if source == "longitude":
        warnings.append(ESTIMATED_OFFSET_WARNING.format(offset=offset))
    if abs(birth.latitude) > houses_svc.MAX_TRIG_LATITUDE:
        warnings.append(POLAR_WARNING.format(lat=birth.latitude, limit=houses_svc.MAX_TRIG_LATITUDE))

    angles, cusps = houses_svc.angles_and_houses(
        jd, birth.latitude, birth.longitude, system, midheaven_method=midheaven_method
    )
    planets = ephem.positions_for(
        jd, birth.latitude, birth.longitude, requested, ascendant=angles.ascendant, model=model
    )
    cusp_lons = [c.longitude for c in cusps]
    positions = tuple(
        dataclasses.replace(p, cusp_house=houses_svc.house_of(p.longitude, cusp_lons))
        for p in list(planets) + _angle_positions(angles, midheaven_method)
    )
    found = aspects_svc.match_aspects(positions, aspect_table)

    chart = Chart(
        input=birth,
        julian_day=jd,
        house_system=system.value,
        model=model,
        angles=angles,
        bodies=positions,
        houses=cusps,
        aspects=found,
        time_known=birth_time is not None,
        utc_offset=offset,
        offset_source=source,
        warnings=tuple(warnings),
    )
    logger.debug(
        "chart_calculated",
        extra={
            "julian_day": jd,
            "house_system": system.value,
            "model": model,
            "bodies": len(positions),
            "aspects": len(found),
        },
    )
    return chart


def chart_fingerprint(birth: BirthInput, house_system: str = "Placidus", model: str = "calibrated") -> str:
    """Deterministic identifier a caller may use when storing a chart."""

    system = houses_svc.resolve_house_system(house_system).value
    seed = "|".join(
        str(x) for x in (
            birth.date, birth.time or "", f"{birth.latitude:.6f}", f"{birth.longitude:.6f}",
            birth.tz or "", "" if birth.utc_offset is None else birth.utc_offset, system, model,
        )
    )
    return "cht_" + sha256(seed.encode()).hexdigest()[:24]
