"""
Geodesic utilities on the WGS-84 ellipsoid.

Distances use the iterative inverse method of Vincenty's formulae. Pairwise
averages interpolate point attributes onto the edge between two points.
"""

import logging
import math
from datetime import datetime, timezone, tzinfo
from typing import Optional, TypeVar

from fit2walking.data_ingestion.record_adapter import Point
from fit2walking.errors import GeodesicConvergenceError

logger = logging.getLogger(__name__)

WGS84_A = 6378137.0  # semi-major axis in meters
WGS84_F = 1.0 / 298.257223563  # flattening
WGS84_B = (1.0 - WGS84_F) * WGS84_A  # semi-minor axis in meters

CONVERGENCE_TOLERANCE_RAD = 0.1
MAX_ITERATIONS = 16

Number = TypeVar("Number", int, float)


def distance(
    point1: Point,
    point2: Point,
    strict: bool = False,
    tolerance: float = CONVERGENCE_TOLERANCE_RAD,
    max_iterations: int = MAX_ITERATIONS,
) -> float:
    """
    Ellipsoidal surface distance between two points.

    Parameters
    ----------
    point1, point2 : Point
        End points of the geodesic.
    strict : bool
        If True, raise when lambda has not converged after `max_iterations`.
        Otherwise continue with the last iterate and log a warning.
    tolerance : float
        Convergence threshold for successive lambda iterates, in radians.
    max_iterations : int
        Iteration cap, at least 1.

    Returns
    -------
    float
        Distance in meters.

    Raises
    ------
    GeodesicConvergenceError
        Only with strict=True, when the iteration does not converge.
    """
    if max_iterations < 1:
        raise ValueError("max_iterations must be at least 1")

    if (
        point1.latitude_deg == point2.latitude_deg
        and point1.longitude_deg == point2.longitude_deg
    ):
        return 0.0

    f = WGS84_F
    u1 = math.atan((1.0 - f) * math.tan(math.radians(point1.latitude_deg)))
    u2 = math.atan((1.0 - f) * math.tan(math.radians(point2.latitude_deg)))
    big_l = math.radians(point2.longitude_deg) - math.radians(point1.longitude_deg)

    sin_u1, cos_u1 = math.sin(u1), math.cos(u1)
    sin_u2, cos_u2 = math.sin(u2), math.cos(u2)

    lam = big_l
    converged = False
    for _ in range(max_iterations):
        sin_lam, cos_lam = math.sin(lam), math.cos(lam)
        sin_sigma = math.sqrt(
            (cos_u2 * sin_lam) ** 2 + (cos_u1 * sin_u2 - sin_u1 * cos_u2 * cos_lam) ** 2
        )
        if sin_sigma == 0.0:
            # coincident on the auxiliary sphere
            return 0.0
        cos_sigma = sin_u1 * sin_u2 + cos_u1 * cos_u2 * cos_lam
        sigma = math.atan2(sin_sigma, cos_sigma)
        sin_alpha = cos_u1 * cos_u2 * sin_lam / sin_sigma
        cos2_alpha = 1.0 - sin_alpha**2
        if cos2_alpha != 0.0:
            cos_2sigma_m = cos_sigma - 2.0 * sin_u1 * sin_u2 / cos2_alpha
        else:
            # equatorial line
            cos_2sigma_m = 0.0
        c = f / 16.0 * cos2_alpha * (4.0 + f * (4.0 - 3.0 * cos2_alpha))

        prev_lam = lam
        lam = big_l + (1.0 - c) * f * sin_alpha * (
            sigma
            + c * sin_sigma * (cos_2sigma_m + c * cos_sigma * (-1.0 + 2.0 * cos_2sigma_m**2))
        )
        if abs(lam - prev_lam) < tolerance:
            converged = True
            break

    if not converged:
        message = (
            f"Vincenty iteration did not converge within {max_iterations} iterations between "
            f"({point1.latitude_deg}, {point1.longitude_deg}) and "
            f"({point2.latitude_deg}, {point2.longitude_deg})"
        )
        if strict:
            raise GeodesicConvergenceError(message)
        logger.warning(f"{message}; using last iterate")

    u_sq = cos2_alpha * (WGS84_A**2 - WGS84_B**2) / WGS84_B**2
    big_a = 1.0 + u_sq / 16384.0 * (4096.0 + u_sq * (-768.0 + u_sq * (320.0 - 175.0 * u_sq)))
    big_b = u_sq / 1024.0 * (256.0 + u_sq * (-128.0 + u_sq * (74.0 - 47.0 * u_sq)))
    delta_sigma = big_b * sin_sigma * (
        cos_2sigma_m
        + big_b
        / 4.0
        * (
            cos_sigma * (-1.0 + 2.0 * cos_2sigma_m**2)
            - big_b
            / 6.0
            * cos_2sigma_m
            * (-3.0 + 4.0 * sin_sigma**2)
            * (-3.0 + 4.0 * cos_2sigma_m**2)
        )
    )
    return WGS84_B * big_a * (sigma - delta_sigma)


def _truncating_half(total: int) -> int:
    # integer mean rounds toward zero, also for negative temperatures
    half = abs(total) // 2
    return -half if total < 0 else half


def average(value1: Optional[Number], value2: Optional[Number]) -> Optional[Number]:
    """
    Interpolate an attribute onto the edge between two points.

    Both absent gives None, exactly one present is returned unchanged, and two
    values give their arithmetic mean (truncated toward zero for integers).
    """
    if value1 is None:
        return value2
    if value2 is None:
        return value1
    if isinstance(value1, int) and isinstance(value2, int):
        return _truncating_half(value1 + value2)
    return (value1 + value2) / 2.0


def average_timestamp(
    time1: Optional[datetime],
    time2: Optional[datetime],
    tz: Optional[tzinfo] = None,
) -> Optional[datetime]:
    """Average two timestamps at whole-second resolution, as a local datetime."""
    if time1 is None:
        return time2
    if time2 is None:
        return time1
    seconds = _truncating_half(int(time1.timestamp()) + int(time2.timestamp()))
    return datetime.fromtimestamp(seconds, tz=timezone.utc).astimezone(tz)
