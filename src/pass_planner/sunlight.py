"""
Sun position and satellite illumination calculations.

This module provides a self-contained low-precision solar ephemeris, the
cylindrical Earth-shadow test used to decide whether a satellite is sunlit,
and the observer-local Sun elevation used for the dark-sky test.

The inertial Sun vector (shadow test) and the local Sun elevation (twilight
test) are kept as separate functions: they work in different frames and
need different precision.
"""

import math
from datetime import datetime
from typing import Sequence, Tuple

import numpy as np

from .config import CIVIL_TWILIGHT_DEG, EARTH_RADIUS_KM

# Constants
AU_KM = 149597870.7  # Astronomical Unit in kilometers
J2000_JD = 2451545.0
J2000 = datetime(2000, 1, 1, 12, 0, 0)
DAYS_PER_CENTURY = 36525.0


def julian_date(timestamp: datetime) -> float:
    """
    Julian date of a UTC timestamp.

    Args:
        timestamp: UTC datetime (naive or aware)

    Returns:
        Julian date (UTC used as TT, fine at this precision)
    """
    if timestamp.tzinfo is not None:
        timestamp = timestamp.replace(tzinfo=None)

    return J2000_JD + (timestamp - J2000).total_seconds() / 86400.0


def calculate_sun_position(timestamp: datetime) -> Tuple[float, float, float]:
    """
    Calculate the sun's position in Earth-Centered Inertial (ECI) coordinates.

    Low-precision analytic solar model (mean elements plus a three-term
    equation of center), good to about 0.01° in ecliptic longitude. That is
    plenty for a sunlit/shadow decision.

    Args:
        timestamp: UTC datetime

    Returns:
        Tuple of (x, y, z) coordinates in kilometers
    """
    # Julian centuries from J2000.0
    T = (julian_date(timestamp) - J2000_JD) / DAYS_PER_CENTURY

    # Mean longitude and mean anomaly [deg]
    L0 = (280.46646 + 36000.76983 * T + 0.0003032 * T * T) % 360.0
    M = (357.52911 + 35999.05029 * T - 0.0001537 * T * T) % 360.0
    M_rad = math.radians(M)

    # Equation of center [deg]
    C = (
        (1.914602 - 0.004817 * T - 0.000014 * T * T) * math.sin(M_rad)
        + (0.019993 - 0.000101 * T) * math.sin(2 * M_rad)
        + 0.000289 * math.sin(3 * M_rad)
    )

    true_longitude = math.radians((L0 + C) % 360.0)
    true_anomaly = math.radians((M + C) % 360.0)

    # Sun-Earth distance
    e = 0.016708634 - 0.000042037 * T - 0.0000001267 * T * T
    distance_au = 1.000001018 * (1 - e * e) / (1 + e * math.cos(true_anomaly))
    distance_km = distance_au * AU_KM

    # Mean obliquity of the ecliptic [deg]
    epsilon = math.radians(
        (23.439291 - 0.0130042 * T - 1.64e-7 * T * T + 5.04e-7 * T * T * T) % 360.0
    )

    # Ecliptic -> equatorial (rotation about x)
    x = distance_km * math.cos(true_longitude)
    y = distance_km * math.sin(true_longitude) * math.cos(epsilon)
    z = distance_km * math.sin(true_longitude) * math.sin(epsilon)

    return x, y, z


def is_satellite_sunlit(
    position_eci: Sequence[float],
    sun_position_eci: Sequence[float],
    shadow_radius_km: float = EARTH_RADIUS_KM,
) -> bool:
    """
    Check whether a satellite is outside Earth's cylindrical shadow.

    Args:
        position_eci: Satellite position (km), same frame as the sun vector
        sun_position_eci: Sun position (km)
        shadow_radius_km: Radius of the shadow cylinder

    Returns:
        True if the satellite is sunlit
    """
    sat = np.asarray(position_eci, dtype=float)
    sun = np.asarray(sun_position_eci, dtype=float)

    along = float(np.dot(sat, sun))
    if along > 0:
        # Sun-facing hemisphere: nothing can shade it
        return True

    sun_unit = sun / np.linalg.norm(sun)
    parallel = np.dot(sat, sun_unit) * sun_unit
    perpendicular_km = float(np.linalg.norm(sat - parallel))

    return perpendicular_km > shadow_radius_km


def calculate_gmst(timestamp: datetime) -> float:
    """
    Calculate Greenwich Mean Sidereal Time (GMST) in degrees.

    Args:
        timestamp: UTC datetime

    Returns:
        GMST in degrees, [0, 360)
    """
    days = julian_date(timestamp) - J2000_JD
    T = days / DAYS_PER_CENTURY
    gmst = 280.46061837 + 360.98564736629 * days + 0.000387933 * T * T

    return gmst % 360.0


def get_sun_elevation(
    target_lat: float, target_lon: float, timestamp: datetime
) -> float:
    """
    Get the sun elevation angle at a ground location.

    Args:
        target_lat: Latitude in degrees
        target_lon: Longitude in degrees
        timestamp: UTC datetime

    Returns:
        Sun elevation angle in degrees (positive = above horizon, negative = below)
    """
    sun = np.array(calculate_sun_position(timestamp))

    # Ground point in ECI: rotate the geographic longitude by GMST
    gmst = calculate_gmst(timestamp)
    lon_rad = math.radians(target_lon + gmst)
    lat_rad = math.radians(target_lat)

    up_vec = np.array([
        math.cos(lat_rad) * math.cos(lon_rad),
        math.cos(lat_rad) * math.sin(lon_rad),
        math.sin(lat_rad),
    ])
    ground = EARTH_RADIUS_KM * up_vec

    # Vector from ground to sun
    sun_vec = sun - ground
    sun_unit = sun_vec / np.linalg.norm(sun_vec)

    sin_elevation = float(np.dot(sun_unit, up_vec))
    return math.degrees(math.asin(max(-1.0, min(1.0, sin_elevation))))


def is_observer_dark(
    target_lat: float,
    target_lon: float,
    timestamp: datetime,
    threshold_deg: float = CIVIL_TWILIGHT_DEG,
) -> bool:
    """True if the sun is below the twilight threshold at the location."""
    return get_sun_elevation(target_lat, target_lon, timestamp) < threshold_deg


def get_sun_subpoint(timestamp: datetime) -> Tuple[float, float]:
    """
    Geographic point with the sun at the zenith.

    Returns:
        Tuple of (latitude, longitude) in degrees, longitude in [-180, 180)
    """
    x, y, z = calculate_sun_position(timestamp)
    latitude = math.degrees(math.atan2(z, math.hypot(x, y)))
    right_ascension = math.degrees(math.atan2(y, x))
    longitude = (right_ascension - calculate_gmst(timestamp) + 180.0) % 360.0 - 180.0
    return latitude, longitude
