import logging
import math
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from .routers import charts as charts_router
from .middleware.logging import LoggingMiddleware
from .services.errors import ChartError

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

app = FastAPI(title="natal-engine", version="0.1.0")

# Configure CORS - localhost for development, explicit origins otherwise
app_env = os.getenv("APP_ENV")
is_dev = app_env is None or app_env.lower() in {"dev", "development"}

if is_dev:
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=86400,
    )
else:
    allowed = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=86400,
    )

app.add_middleware(LoggingMiddleware)

app.include_router(charts_router.router)


@app.exception_handler(ChartError)
async def chart_error_handler(request: Request, exc: ChartError):
    logger.info("chart_input_rejected", extra={"error": type(exc).__name__, "path": request.url.path})
    value = exc.value
    if not isinstance(value, (str, int, bool, type(None))) and not (isinstance(value, float) and math.isfinite(value)):
        value = str(value)
    return JSONResponse(
        {"error": type(exc).__name__, "detail": str(exc), "value": value},
        status_code=422,
    )


@app.get("/__health")
def health():
    return {"ok": True}


@app.get("/")
def root():
    return {"message": "natal-engine API is running. See /__health and /docs."}
