from natal_engine.services.transit_math import is_applying, nearest_delta, signed_delta


def test_signed_delta_normalises_within_range():
    # 190° ahead of a 180° aspect should be reported as +10° (already past exact).
    delta = signed_delta(200.0, 10.0, 180.0)
    assert -180.0 <= delta <= 180.0
    assert round(delta, 6) == 10.0


def test_nearest_delta_picks_closer_side():
    # 80° ahead of B is 10° short of +90 and 170° from -90
    assert round(nearest_delta(90.0, 10.0, 90.0), 6) == -10.0
    # 280° ahead is the same as 80° behind, i.e. 10° short of -90 from the other side
    assert round(nearest_delta(290.0, 10.0, 90.0), 6) == 10.0


def test_direct_motion_applying_and_separating():
    # 2° behind exact conjunction and moving forward -> applying.
    assert is_applying(28.0, 1.0, 30.0, 0.0, 0.0)
    # 2° ahead of exact conjunction and still moving forward -> separating.
    assert not is_applying(32.0, 1.0, 30.0, 0.0, 0.0)


def test_retrograde_motion_reverses_application():
    assert is_applying(182.5, -0.8, 0.0, 0.0, 180.0)
    assert not is_applying(177.5, -0.8, 0.0, 0.0, 180.0)


def test_exact_aspect_is_applying():
    assert is_applying(120.0, 1.0, 0.0, 0.5, 120.0)


def test_equal_speeds_considered_separating():
    assert not is_applying(62.0, 1.0, 0.0, 1.0, 60.0)


def test_applying_is_symmetric_in_pair_order():
    for lon_a, speed_a, lon_b, speed_b, angle in [
        (10.0, 1.0, 14.0, 0.1, 0.0),
        (100.0, 13.0, 5.0, 0.98, 90.0),
        (300.0, -0.05, 62.0, 1.2, 120.0),
    ]:
        assert is_applying(lon_a, speed_a, lon_b, speed_b, angle) == is_applying(
            lon_b, speed_b, lon_a, speed_a, angle
        )
