import os

from fastapi import APIRouter, Query

from ..schemas import (
    AnglesOut,
    AspectOut,
    BodyOut,
    ChartRequest,
    ChartResponse,
    ErrorOut,
    HouseOut,
    MetaOut,
    ZodiacOut,
)
from ..services import ephem
from ..services.chart import calculate_chart, chart_fingerprint
from ..services.constants import fmt_deg, normalize, split_longitude
from ..services.models import BirthInput

router = APIRouter(prefix="/v1/charts", tags=["charts"])


def _default_model() -> str:
    return os.getenv("EPHEMERIS_MODEL", "calibrated").strip().lower()


@router.post("/compute", response_model=ChartResponse, responses={422: {"model": ErrorOut}})
def compute_chart(req: ChartRequest):
    model = req.model or _default_model()
    birth = BirthInput(
        date=req.date,
        time=req.time,
        latitude=req.place.lat,
        longitude=req.place.lon,
        location_label=req.place.query,
        utc_offset=req.place.utc_offset,
        tz=req.place.tz,
    )
    # ChartError subclasses propagate to the app-level handler (422)
    chart = calculate_chart(
        birth,
        req.house_system,
        model=model,
        bodies=req.bodies,
        midheaven_method=req.midheaven,
    )

    bodies = [
        BodyOut(
            name=b.body,
            lon=round(b.longitude, 4),
            sign=b.sign,
            degree=round(b.degree_in_sign, 4),
            house=b.house,
            cusp_house=b.cusp_house,
            retro=b.retrograde,
            speed=round(b.speed, 6),
        )
        for b in chart.bodies
    ]
    houses = [
        HouseOut(num=h.house, cusp_lon=round(h.longitude, 4), sign=h.sign, degree=round(h.degree_in_sign, 4))
        for h in chart.houses
    ]
    aspects = [
        AspectOut(
            p1=a.body_a,
            p2=a.body_b,
            type=a.aspect_type,
            orb=round(a.orb, 2),
            angle=round(a.exact_angle, 4),
            applying=a.applying,
        )
        for a in chart.aspects
    ]
    ang = chart.angles
    angles = AnglesOut(
        ascendant=round(ang.ascendant, 4),
        mc=round(ang.midheaven, 4),
        descendant=round(ang.descendant, 4),
        ic=round(ang.imum_coeli, 4),
        lst=round(ang.sidereal_time, 4),
        obliquity=round(ang.obliquity, 6),
    )
    meta = MetaOut(
        engine_version=ephem.ENGINE_VERSION,
        house_system=chart.house_system,
        model=chart.model,
        julian_day=round(chart.julian_day, 6),
        time_known=chart.time_known,
        utc_offset=chart.utc_offset,
        offset_source=chart.offset_source,
        warnings=(list(chart.warnings) or None),
    )
    return ChartResponse(
        chart_id=chart_fingerprint(birth, chart.house_system, chart.model),
        meta=meta,
        angles=angles,
        houses=houses,
        bodies=bodies,
        aspects=aspects,
    )


@router.get("/zodiac", response_model=ZodiacOut)
def zodiac(lon: float = Query(..., description="Ecliptic longitude in degrees")):
    sign, degree = split_longitude(lon)
    return ZodiacOut(lon=normalize(lon), sign=sign, degree=degree, formatted=fmt_deg(lon))
