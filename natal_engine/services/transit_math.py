"""Angular helpers for aspect timing.

Kept free of the Swiss Ephemeris bindings so they can be unit-tested on
plain numbers.
"""

from __future__ import annotations


def signed_delta(lon_a: float, lon_b: float, aspect_angle: float) -> float:
    """Return the signed difference from the exact aspect in degrees.

    The result is in the range [-180, 180). Positive values mean body A sits
    past the exact aspect relative to body B, negative values that it has not
    reached it yet.
    """

    return ((lon_a - lon_b) - aspect_angle + 540.0) % 360.0 - 180.0


def nearest_delta(lon_a: float, lon_b: float, aspect_angle: float) -> float:
    """Signed delta to whichever side of the aspect (+angle or -angle) is closer."""

    ahead = signed_delta(lon_a, lon_b, aspect_angle)
    behind = signed_delta(lon_a, lon_b, -aspect_angle)
    return ahead if abs(ahead) <= abs(behind) else behind


def is_applying(
    lon_a: float,
    speed_a: float,
    lon_b: float,
    speed_b: float,
    aspect_angle: float,
) -> bool:
    """Determine whether an aspect between two bodies is applying.

    An aspect is *applying* when the separation between the bodies is
    moving toward the exact angle and *separating* when it moves away.

    Parameters
    ----------
    lon_a, lon_b
        Ecliptic longitudes of the two bodies.
    speed_a, speed_b
        Longitudinal speeds in degrees per day. The engine's models supply
        mean motions, so the answer is only as good as those.
    aspect_angle
        The exact angle of the aspect (0° for conjunction, 90° for a square).
        Both sides of the circle are considered.
    """

    delta = nearest_delta(lon_a, lon_b, aspect_angle)
    # exact counts as applying
    if abs(delta) < 1e-6:
        return True

    rate = speed_a - speed_b
    if abs(rate) < 1e-6:
        return False

    return (delta > 0 and rate < 0) or (delta < 0 and rate > 0)


__all__ = ["is_applying", "nearest_delta", "signed_delta"]
