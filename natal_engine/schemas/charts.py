from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Literal, Any

HouseSystemName = Literal["Equal", "WholeSign", "Whole Sign", "Placidus", "Koch", "Campanus"]
ModelName = Literal["calibrated", "secular", "swisseph"]

class Place(BaseModel):
    # Range checks happen in the engine so they surface as InvalidCoordinateError.
    lat: float
    lon: float
    tz: Optional[str] = None
    utc_offset: Optional[float] = None
    query: Optional[str] = None

class ChartRequest(BaseModel):
    date: str  # YYYY-MM-DD
    time: Optional[str] = None  # HH:MM[:SS], local clock
    place: Place
    house_system: HouseSystemName = "Placidus"
    model: Optional[ModelName] = None
    midheaven: Literal["calibrated", "meridian"] = "calibrated"
    bodies: Optional[List[str]] = None

    model_config = ConfigDict(
        protected_namespaces=(),
        json_schema_extra={
            "example": {
                "date": "1977-05-17",
                "time": "11:29",
                "place": {"lat": 49.2827, "lon": -123.113952, "query": "Vancouver, BC"},
                "house_system": "Placidus",
            }
        },
    )

class BodyOut(BaseModel):
    name: str
    lon: float
    sign: str
    degree: float
    house: int
    cusp_house: Optional[int] = None
    retro: bool = False
    speed: float

class HouseOut(BaseModel):
    num: int
    cusp_lon: float
    sign: str
    degree: float

class AspectOut(BaseModel):
    p1: str
    p2: str
    type: str
    orb: float
    angle: float
    applying: bool

class AnglesOut(BaseModel):
    ascendant: float
    mc: float
    descendant: float
    ic: float
    lst: float
    obliquity: float

class MetaOut(BaseModel):
    engine: str = "natal-engine"
    engine_version: str
    zodiac: str = "tropical"
    house_system: str
    model: str
    julian_day: float
    time_known: bool
    utc_offset: float
    offset_source: str
    warnings: Optional[List[str]] = None

    model_config = ConfigDict(protected_namespaces=())

class ChartResponse(BaseModel):
    chart_id: str
    meta: MetaOut
    angles: AnglesOut
    houses: List[HouseOut]
    bodies: List[BodyOut]
    aspects: List[AspectOut]

class ZodiacOut(BaseModel):
    lon: float
    sign: str
    degree: float
    formatted: str

class ErrorOut(BaseModel):
    error: str
    detail: str
    value: Optional[Any] = None
