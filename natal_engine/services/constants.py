from __future__ import annotations

from typing import Tuple

SIGN_NAMES = ["Aries","Taurus","Gemini","Cancer","Leo","Virgo","Libra","Scorpio","Sagittarius","Capricorn","Aquarius","Pisces"]

J2000 = 2451545.0
DAYS_PER_CENTURY = 36525.0

# 1977-05-17 11:29 PDT (18:29 UT), Vancouver BC; anchor of the calibrated models
REFERENCE_JD = 2443281.270139


def normalize(lon: float) -> float:
    """Wrap any longitude into [0, 360)."""

    x = float(lon) % 360.0
    # -1e-15 % 360 rounds up to 360.0
    if x >= 360.0:
        return 0.0
    return x


def sign_index_from_lon(lon: float) -> int:
    return int(normalize(lon) // 30) % 12


def sign_name_from_lon(lon: float) -> str:
    return SIGN_NAMES[sign_index_from_lon(lon)]


def split_longitude(lon: float) -> Tuple[str, float]:
    """Return ``(sign, degree_in_sign)`` for a longitude.

    The pair is always recomputed from the longitude so ``index * 30 + degree``
    gives the normalized longitude back.
    """

    nlon = normalize(lon)
    return SIGN_NAMES[int(nlon // 30) % 12], nlon % 30.0


def fmt_deg(lon: float) -> str:
    # 0..360 to "sign 12°34′56″"
    sign, within = split_longitude(lon)
    deg = int(within)
    minutes_float = (within - deg) * 60
    mins = int(minutes_float)
    secs = int((minutes_float - mins) * 60)
    return f"{sign} {deg:02d}°{mins:02d}′{secs:02d}″"
