from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from .models import Aspect, AspectDefinition, BodyPosition
from .transit_math import is_applying

# Checked in this order; the first definition within orb wins a pair.
ASPECTS: Tuple[AspectDefinition, ...] = (
    AspectDefinition("conjunction", 0.0, 8.0),
    AspectDefinition("opposition", 180.0, 8.0),
    AspectDefinition("square", 90.0, 8.0),
    AspectDefinition("trine", 120.0, 8.0),
    AspectDefinition("sextile", 60.0, 6.0),
    AspectDefinition("quincunx", 150.0, 3.0),
    AspectDefinition("semisquare", 45.0, 3.0),
    AspectDefinition("sesquiquadrate", 135.0, 3.0),
)

ASPECT_ALIASES = {"inconjunct": "quincunx", "semi-square": "semisquare", "sesquisquare": "sesquiquadrate"}


def canonical_aspect(name: str) -> str:
    key = name.strip().lower()
    return ASPECT_ALIASES.get(key, key)


def aspect_definition(name: str, table: Sequence[AspectDefinition] = ASPECTS) -> Optional[AspectDefinition]:
    canonical = canonical_aspect(name)
    return next((d for d in table if d.name == canonical), None)


def aspect_angle(name: str) -> float | None:
    definition = aspect_definition(name)
    return definition.angle if definition else None


def build_table(orbs: dict | None = None, types: Iterable[str] | None = None) -> Tuple[AspectDefinition, ...]:
    """Derive an ordered table from ``ASPECTS`` with optional orb overrides.

    ``types`` filters and keeps the priority order of ``ASPECTS``.
    """

    orbs = {canonical_aspect(k): float(v) for k, v in (orbs or {}).items()}
    wanted = None if types is None else {canonical_aspect(t) for t in types}
    unknown = (set(orbs) | (wanted or set())) - {d.name for d in ASPECTS}
    if unknown:
        raise ValueError(f"Unknown aspect types: {sorted(unknown)}")
    return tuple(
        AspectDefinition(d.name, d.angle, orbs.get(d.name, d.orb))
        for d in ASPECTS
        if wanted is None or d.name in wanted
    )


def angle_between(a: float, b: float) -> float:
    """Return the minimal angular distance between two longitudes, 0..180."""

    diff = abs(a - b) % 360.0
    return min(diff, 360.0 - diff)


def orb_for(angle: float, definition: AspectDefinition) -> float:
    return min(abs(angle - definition.angle), abs(angle - (360.0 - definition.angle)))


def match_pair(a: BodyPosition, b: BodyPosition, table: Sequence[AspectDefinition] = ASPECTS) -> Optional[Aspect]:
    angle = angle_between(a.longitude, b.longitude)
    for definition in table:
        orb = orb_for(angle, definition)
        if orb <= definition.orb:
            return Aspect(
                body_a=a.body,
                body_b=b.body,
                aspect_type=definition.name,
                orb=orb,
                exact_angle=angle,
                applying=is_applying(a.longitude, a.speed, b.longitude, b.speed, definition.angle),
            )
    return None


def match_aspects(positions: Sequence[BodyPosition], table: Sequence[AspectDefinition] | None = None) -> Tuple[Aspect, ...]:
    """At most one aspect per unordered pair, in input order."""

    table = ASPECTS if table is None else tuple(table)
    res: List[Aspect] = []
    for i in range(len(positions)):
        for j in range(i + 1, len(positions)):
            found = match_pair(positions[i], positions[j], table)
            if found is not None:
                res.append(found)
    return tuple(res)
