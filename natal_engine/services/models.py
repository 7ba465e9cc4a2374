"""Immutable value types produced by the chart engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date as date_cls, time as time_cls
from typing import Any, Dict, Optional, Tuple, Union

from .constants import normalize, split_longitude


@dataclass(frozen=True)
class BirthInput:
    date: Union[str, date_cls]
    latitude: float
    longitude: float
    time: Union[str, time_cls, None] = None
    location_label: Optional[str] = None
    # Explicit zone data wins over the longitude estimate when given.
    utc_offset: Optional[float] = None
    tz: Optional[str] = None

    @property
    def time_known(self) -> bool:
        return self.time is not None


@dataclass(frozen=True)
class BodyPosition:
    body: str
    longitude: float
    house: int
    retrograde: bool = False
    speed: float = 0.0
    # House counted between the chosen system's cusps; set by calculate_chart.
    cusp_house: Optional[int] = None

    @property
    def sign(self) -> str:
        return split_longitude(self.longitude)[0]

    @property
    def degree_in_sign(self) -> float:
        return split_longitude(self.longitude)[1]

    def to_dict(self) -> Dict[str, Any]:
        sign, degree = split_longitude(self.longitude)
        return {
            "body": self.body,
            "longitude": self.longitude,
            "sign": sign,
            "degree_in_sign": degree,
            "house": self.house,
            "cusp_house": self.cusp_house,
            "retrograde": self.retrograde,
            "speed": self.speed,
        }


@dataclass(frozen=True)
class HouseCusp:
    house: int
    longitude: float

    @property
    def sign(self) -> str:
        return split_longitude(self.longitude)[0]

    @property
    def degree_in_sign(self) -> float:
        return split_longitude(self.longitude)[1]

    def to_dict(self) -> Dict[str, Any]:
        sign, degree = split_longitude(self.longitude)
        return {"house": self.house, "longitude": self.longitude, "sign": sign, "degree_in_sign": degree}


@dataclass(frozen=True)
class Angles:
    ascendant: float
    midheaven: float
    sidereal_time: float
    obliquity: float

    @property
    def descendant(self) -> float:
        return normalize(self.ascendant + 180.0)

    @property
    def imum_coeli(self) -> float:
        return normalize(self.midheaven + 180.0)


@dataclass(frozen=True)
class AspectDefinition:
    name: str
    angle: float
    orb: float


@dataclass(frozen=True)
class Aspect:
    body_a: str
    body_b: str
    aspect_type: str
    orb: float
    exact_angle: float
    # Heuristic from mean model speeds, not a rigorous velocity result.
    applying: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Chart:
    input: BirthInput
    julian_day: float
    house_system: str
    model: str
    angles: Angles
    bodies: Tuple[BodyPosition, ...]
    houses: Tuple[HouseCusp, ...]
    aspects: Tuple[Aspect, ...]
    time_known: bool = True
    utc_offset: float = 0.0
    offset_source: str = "utc"
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def body(self, name: str) -> Optional[BodyPosition]:
        return next((b for b in self.bodies if b.body == name), None)

    def house(self, number: int) -> HouseCusp:
        return self.houses[number - 1]

    def to_dict(self) -> Dict[str, Any]:
        """Plain structure for persistence or JSON; the engine assigns no ids."""

        inp = self.input
        return {
            "input": {
                "date": str(inp.date),
                "time": None if inp.time is None else str(inp.time),
                "latitude": inp.latitude,
                "longitude": inp.longitude,
                "location_label": inp.location_label,
                "utc_offset": inp.utc_offset,
                "tz": inp.tz,
            },
            "julian_day": self.julian_day,
            "house_system": self.house_system,
            "model": self.model,
            "angles": asdict(self.angles),
            "bodies": [b.to_dict() for b in self.bodies],
            "houses": [h.to_dict() for h in self.houses],
            "aspects": [a.to_dict() for a in self.aspects],
            "time_known": self.time_known,
            "utc_offset": self.utc_offset,
            "offset_source": self.offset_source,
            "warnings": list(self.warnings),
        }
