import logging
import math

import pytest
import swisseph as swe

from natal_engine.services.aspects import angle_between
from natal_engine.services.constants import J2000, REFERENCE_JD, normalize
from natal_engine.services.errors import InvalidCoordinateError, UnsupportedHouseSystemError
from natal_engine.services.houses import (
    HouseSystem,
    angles_and_houses,
    ascendant,
    calibrated_midheaven,
    greenwich_sidereal_time,
    house_of,
    local_sidereal_time,
    meridian_midheaven,
    midheaven,
    obliquity,
    resolve_house_system,
)

VANCOUVER = (49.2827, -123.113952)


def test_reference_ascendant_and_midheaven():
    lat, lon = VANCOUVER
    assert ascendant(REFERENCE_JD, lat, lon) == pytest.approx(136.383, abs=0.05)
    assert calibrated_midheaven(REFERENCE_JD) == pytest.approx(31.633)


def test_gmst_at_j2000_and_against_swiss_ephemeris():
    assert greenwich_sidereal_time(J2000) == pytest.approx(280.46061837)
    for jd in (REFERENCE_JD, 2440000.5, 2460000.25):
        # swe.sidtime is apparent sidereal time in hours; nutation is well under 0.01°
        assert angle_between(greenwich_sidereal_time(jd), swe.sidtime(jd) * 15.0) < 0.05


def test_local_sidereal_time_is_east_positive():
    assert local_sidereal_time(J2000, -90.0) == pytest.approx(normalize(280.46061837 - 90.0))


def test_obliquity_at_j2000():
    assert obliquity(J2000) == pytest.approx(23.4392911)


def test_meridian_midheaven_tracks_sidereal_time():
    for lon in (-120.0, 0.0, 45.0, 170.0):
        mc = meridian_midheaven(J2000, lon)
        assert angle_between(mc, local_sidereal_time(J2000, lon)) < 3.0
    assert midheaven(J2000, 0.0, 0.0, "meridian") == meridian_midheaven(J2000, 0.0)


@pytest.mark.parametrize("system", ["Equal", "WholeSign", "Placidus"])
def test_cusps_anchor_the_angles(system):
    lat, lon = VANCOUVER
    angles, cusps = angles_and_houses(REFERENCE_JD, lat, lon, system)
    assert len(cusps) == 12
    assert [c.house for c in cusps] == list(range(1, 13))
    assert cusps[0].longitude == pytest.approx(angles.ascendant)
    assert cusps[3].longitude == pytest.approx(angles.imum_coeli)
    assert cusps[6].longitude == pytest.approx(angles.descendant)
    assert cusps[9].longitude == pytest.approx(angles.midheaven)
    for c in cusps:
        assert 0.0 <= c.longitude < 360.0


def test_equal_and_whole_sign_intermediate_cusps():
    lat, lon = VANCOUVER
    angles, equal = angles_and_houses(REFERENCE_JD, lat, lon, "Equal")
    assert equal[1].longitude == pytest.approx(normalize(angles.ascendant + 30.0))
    assert equal[4].longitude == pytest.approx(normalize(angles.ascendant + 120.0))

    _, whole = angles_and_houses(REFERENCE_JD, lat, lon, "Whole Sign")
    start = math.floor(angles.ascendant / 30.0) * 30.0
    assert whole[1].longitude == pytest.approx(normalize(start + 30.0))
    assert whole[11].longitude == pytest.approx(normalize(start + 330.0))


def test_placidus_reference_cusps():
    lat, lon = VANCOUVER
    _, cusps = angles_and_houses(REFERENCE_JD, lat, lon, "Placidus")
    assert cusps[1].longitude == pytest.approx(155.2, abs=1e-3)
    assert cusps[10].longitude == pytest.approx(70.417, abs=1e-3)


def test_house_system_aliases():
    assert resolve_house_system("whole_sign") is HouseSystem.WHOLE_SIGN
    assert resolve_house_system("Koch") is HouseSystem.PLACIDUS
    assert resolve_house_system(HouseSystem.EQUAL) is HouseSystem.EQUAL
    with pytest.raises(UnsupportedHouseSystemError):
        resolve_house_system("Topocentric")


@pytest.mark.parametrize("lat,lon", [(95.0, 0.0), (-90.5, 10.0), (10.0, 181.0), (float("nan"), 0.0), (True, 0.0)])
def test_invalid_coordinates_rejected(lat, lon):
    with pytest.raises(InvalidCoordinateError):
        angles_and_houses(J2000, lat, lon)


def test_polar_latitude_is_clamped(caplog):
    with caplog.at_level(logging.WARNING, logger="natal_engine.services.houses"):
        angles, _ = angles_and_houses(J2000, 90.0, 0.0)
    assert math.isfinite(angles.ascendant)
    assert angles.ascendant == ascendant(J2000, 89.9, 0.0)
    assert any(r.getMessage() == "polar_latitude_clamped" for r in caplog.records)


def test_house_of_equal_cusps():
    cusps = [i * 30.0 for i in range(12)]
    assert house_of(0.0, cusps) == 1
    assert house_of(45.0, cusps) == 2
    assert house_of(359.0, cusps) == 12
    shifted = [normalize(100.0 + i * 30.0) for i in range(12)]
    assert house_of(95.0, shifted) == 12
    assert house_of(100.0, shifted) == 1
