from .charts import (
    Place,
    ChartRequest,
    ChartResponse,
    BodyOut,
    HouseOut,
    AspectOut,
    AnglesOut,
    MetaOut,
    ZodiacOut,
    ErrorOut,
)
