"""
Frame rotations and topocentric look angles.

Default implementation of the look-angle transform consumed by the pass
scanner: ECI -> ECEF rotation by sidereal time, WGS-84 observer position,
and East-North-Up azimuth/elevation.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

import numpy as np

# WGS-84 ellipsoid
WGS84_A_KM = 6378.137
WGS84_F = 1.0 / 298.257223563
WGS84_E2 = WGS84_F * (2.0 - WGS84_F)


@dataclass(frozen=True)
class LookAngle:
    """Topocentric direction to a satellite."""

    azimuth_deg: float  # 0 = North, 90 = East
    elevation_deg: float
    range_km: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "azimuth_deg": round(self.azimuth_deg, 2),
            "elevation_deg": round(self.elevation_deg, 2),
        }
        if self.range_km is not None:
            result["range_km"] = round(self.range_km, 2)
        return result


def normalize_azimuth(azimuth_deg: float) -> float:
    """Wrap an azimuth into [0, 360)."""
    azimuth = azimuth_deg % 360.0
    # -1e-15 % 360 rounds to 360.0
    if azimuth >= 360.0:
        azimuth = 0.0
    return azimuth


def _rotation_z(angle_deg: float) -> np.ndarray:
    c = math.cos(math.radians(angle_deg))
    s = math.sin(math.radians(angle_deg))
    return np.array([
        [c, -s, 0.0],
        [s, c, 0.0],
        [0.0, 0.0, 1.0],
    ])


def eci_to_ecef(position_eci: Sequence[float], gmst_deg: float) -> np.ndarray:
    """Rotate an inertial vector into the Earth-fixed frame."""
    return _rotation_z(-gmst_deg) @ np.asarray(position_eci, dtype=float)


def ecef_to_eci(position_ecef: Sequence[float], gmst_deg: float) -> np.ndarray:
    """Rotate an Earth-fixed vector into the inertial frame."""
    return _rotation_z(gmst_deg) @ np.asarray(position_ecef, dtype=float)


def geodetic_to_ecef(
    latitude_deg: float, longitude_deg: float, height_km: float = 0.0
) -> np.ndarray:
    """
    Convert geodetic coordinates to ECEF on the WGS-84 ellipsoid.

    Args:
        latitude_deg: Geodetic latitude
        longitude_deg: Longitude
        height_km: Height above the ellipsoid

    Returns:
        (3,) ECEF position in km
    """
    lat = math.radians(latitude_deg)
    lon = math.radians(longitude_deg)
    sin_lat = math.sin(lat)

    # Prime vertical radius of curvature
    n = WGS84_A_KM / math.sqrt(1.0 - WGS84_E2 * sin_lat * sin_lat)

    x = (n + height_km) * math.cos(lat) * math.cos(lon)
    y = (n + height_km) * math.cos(lat) * math.sin(lon)
    z = (n * (1.0 - WGS84_E2) + height_km) * sin_lat
    return np.array([x, y, z])


def compute_look_angles(
    observer: Any, position_eci: Sequence[float], gmst_deg: float
) -> LookAngle:
    """
    Azimuth, elevation and range from an observer to a satellite.

    Args:
        observer: Object with ``latitude``, ``longitude`` (deg) and
            ``height_km``
        position_eci: Satellite ECI position in km
        gmst_deg: Greenwich Mean Sidereal Time in degrees

    Returns:
        LookAngle with azimuth normalized to [0, 360)
    """
    sat_ecef = eci_to_ecef(position_eci, gmst_deg)
    ground_ecef = geodetic_to_ecef(
        observer.latitude, observer.longitude, getattr(observer, "height_km", 0.0)
    )
    dx, dy, dz = sat_ecef - ground_ecef

    lat = math.radians(observer.latitude)
    lon = math.radians(observer.longitude)
    sin_lat, cos_lat = math.sin(lat), math.cos(lat)
    sin_lon, cos_lon = math.sin(lon), math.cos(lon)

    # East-North-Up components
    east = -sin_lon * dx + cos_lon * dy
    north = -sin_lat * cos_lon * dx - sin_lat * sin_lon * dy + cos_lat * dz
    up = cos_lat * cos_lon * dx + cos_lat * sin_lon * dy + sin_lat * dz

    range_km = math.sqrt(dx * dx + dy * dy + dz * dz)
    if range_km == 0:
        return LookAngle(azimuth_deg=0.0, elevation_deg=90.0, range_km=0.0)

    elevation = math.degrees(math.asin(max(-1.0, min(1.0, up / range_km))))
    azimuth = normalize_azimuth(math.degrees(math.atan2(east, north)))

    return LookAngle(azimuth_deg=azimuth, elevation_deg=elevation, range_km=range_km)
