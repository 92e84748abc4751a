"""Geodesic distance between two points on the WGS-84 ellipsoid.

The primary solver is Vincenty's inverse formula. It is accurate to well
under a millimetre for any pair of points that converges, which is every
pair except nearly antipodal ones. Those fall back to the spherical
haversine formula.
"""

import logging
import math

from finditfast.core.models import Coordinates

logger = logging.getLogger(__name__)

# WGS-84 ellipsoid
WGS84_A = 6378137.0  # semi-major axis, metres
WGS84_B = 6356752.314245  # semi-minor axis, metres
WGS84_F = 1 / 298.257223563  # flattening

EARTH_RADIUS_KM = 6371.0

CONVERGENCE_THRESHOLD = 1e-12
MAX_ITERATIONS = 100


class VincentyDidNotConverge(Exception):
    """Raised when the Vincenty iteration hits its cap without converging."""

    pass


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance on a sphere of radius 6371 km, rounded to metres."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return round(EARTH_RADIUS_KM * c, 3)


def vincenty_km(a: Coordinates, b: Coordinates) -> float:
    """Ellipsoidal distance in kilometres, rounded to millimetres.

    Raises:
        VincentyDidNotConverge: if lambda is still moving after MAX_ITERATIONS.
    """
    L = math.radians(b.longitude - a.longitude)
    U1 = math.atan((1 - WGS84_F) * math.tan(math.radians(a.latitude)))
    U2 = math.atan((1 - WGS84_F) * math.tan(math.radians(b.latitude)))
    sin_u1, cos_u1 = math.sin(U1), math.cos(U1)
    sin_u2, cos_u2 = math.sin(U2), math.cos(U2)

    lam = L
    for _ in range(MAX_ITERATIONS):
        sin_lam = math.sin(lam)
        cos_lam = math.cos(lam)

        sin_sigma = math.sqrt(
            (cos_u2 * sin_lam) ** 2
            + (cos_u1 * sin_u2 - sin_u1 * cos_u2 * cos_lam) ** 2
        )
        if sin_sigma == 0:
            # Coincident points
            return 0.0

        cos_sigma = sin_u1 * sin_u2 + cos_u1 * cos_u2 * cos_lam
        sigma = math.atan2(sin_sigma, cos_sigma)

        sin_alpha = cos_u1 * cos_u2 * sin_lam / sin_sigma
        cos_sq_alpha = 1 - sin_alpha ** 2

        if cos_sq_alpha != 0:
            cos_2sigma_m = cos_sigma - 2 * sin_u1 * sin_u2 / cos_sq_alpha
        else:
            # Both points on the equator
            cos_2sigma_m = 0.0

        C = WGS84_F / 16 * cos_sq_alpha * (4 + WGS84_F * (4 - 3 * cos_sq_alpha))

        lam_prev = lam
        lam = L + (1 - C) * WGS84_F * sin_alpha * (
            sigma + C * sin_sigma * (
                cos_2sigma_m + C * cos_sigma * (-1 + 2 * cos_2sigma_m ** 2)
            )
        )
        if abs(lam - lam_prev) <= CONVERGENCE_THRESHOLD:
            break
    else:
        raise VincentyDidNotConverge(
            f"no convergence after {MAX_ITERATIONS} iterations for {a} -> {b}"
        )

    u_sq = cos_sq_alpha * (WGS84_A ** 2 - WGS84_B ** 2) / WGS84_B ** 2
    A = 1 + u_sq / 16384 * (4096 + u_sq * (-768 + u_sq * (320 - 175 * u_sq)))
    B = u_sq / 1024 * (256 + u_sq * (-128 + u_sq * (74 - 47 * u_sq)))
    delta_sigma = B * sin_sigma * (
        cos_2sigma_m + B / 4 * (
            cos_sigma * (-1 + 2 * cos_2sigma_m ** 2)
            - B / 6 * cos_2sigma_m * (-3 + 4 * sin_sigma ** 2) * (-3 + 4 * cos_2sigma_m ** 2)
        )
    )

    metres = WGS84_B * A * (sigma - delta_sigma)
    return round(metres, 3) / 1000


def distance_km(a: Coordinates, b: Coordinates) -> float:
    """Shortest surface distance between two points in kilometres.

    Uses Vincenty on the WGS-84 ellipsoid and falls back to haversine when
    the iteration does not converge. The endpoints are put in a fixed order
    first so the result does not depend on argument order.
    """
    if a == b:
        return 0.0

    first, second = sorted((a, b), key=lambda c: (c.latitude, c.longitude))
    try:
        return vincenty_km(first, second)
    except VincentyDidNotConverge:
        logger.debug("Vincenty did not converge for %s -> %s, using haversine", first, second)
        return haversine_km(first, second)


def format_distance(km: float) -> str:
    """Format a distance for display.

    Examples:
        0.35 -> "350m"
        2.345 -> "2.3km"
        15.6 -> "16km"
    """
    if km < 1:
        return f"{round(km * 1000)}m"
    if km < 10:
        return f"{km:.1f}km"
    return f"{round(km)}km"
