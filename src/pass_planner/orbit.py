"""
Satellite orbit propagation and TLE handling module.

This module loads TLE data and propagates satellite orbits using the
orbit-predictor library (SGP4). It is the default propagator plugged into
the pass scanner.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union
import logging
import math

from orbit_predictor.sources import get_predictor_from_tle_lines

from .geometry import ecef_to_eci
from .ground_track import GroundTrackPoint
from .sunlight import calculate_gmst
from .visibility import SatelliteState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SatellitePosition:
    """Sub-satellite point and speed at an instant."""

    timestamp: datetime
    latitude: float
    longitude: float
    altitude_km: float
    speed_km_s: float
    position_eci: Tuple[float, float, float]
    gmst_deg: float


class SatelliteOrbit:
    """
    Represents a satellite orbit with TLE-based propagation capabilities.

    Wraps an orbit-predictor TLE predictor and exposes the inertial state the
    pass scanner consumes.
    """

    def __init__(self, tle_lines: Sequence[str], satellite_name: Optional[str] = None) -> None:
        """
        Initialize satellite orbit from TLE data.

        Args:
            tle_lines: TLE lines, either [name, line1, line2] or [line1, line2]
            satellite_name: Name of the satellite (defaults to the TLE name line)

        Raises:
            ValueError: If TLE data is invalid
        """
        lines = [line.strip() for line in tle_lines if line and line.strip()]
        if len(lines) == 3:
            name_line, predictor_lines = lines[0], lines[1:3]
        elif len(lines) == 2:
            name_line, predictor_lines = None, lines
        else:
            raise ValueError(f"Expected 2 or 3 TLE lines, got {len(lines)}")

        self.satellite_name = satellite_name or name_line or "UNKNOWN"
        self.tle_lines = lines

        try:
            _check_tle_lines(predictor_lines)
            self.predictor = get_predictor_from_tle_lines(predictor_lines)
            # Element sets are parsed lazily; force it so bad lines fail here
            self.predictor.mean_motion
            logger.info(f"Successfully loaded orbit for satellite: {self.satellite_name}")
        except Exception as e:
            logger.error(f"Failed to initialize satellite orbit: {e}")
            raise ValueError(f"Invalid TLE data for satellite {self.satellite_name}: {e}")

    @classmethod
    def from_tle_file(cls, tle_file_path: Union[str, Path], satellite_name: str) -> "SatelliteOrbit":
        """
        Create SatelliteOrbit instance from a three-line TLE file.

        Args:
            tle_file_path: Path to TLE file
            satellite_name: Name of the satellite to extract from TLE file

        Raises:
            FileNotFoundError: If TLE file doesn't exist
            ValueError: If satellite not found in TLE file
        """
        tle_path = Path(tle_file_path)
        if not tle_path.exists():
            raise FileNotFoundError(f"TLE file not found: {tle_file_path}")

        with open(tle_path, 'r') as f:
            lines = [line.strip() for line in f.readlines() if line.strip()]

        for i in range(0, len(lines) - 2, 3):
            name_line = lines[i]
            if satellite_name.upper() in name_line.upper():
                return cls(lines[i:i + 3], satellite_name)

        logger.error(f"Satellite '{satellite_name}' not found in {tle_file_path}")
        raise ValueError(f"Satellite '{satellite_name}' not found in TLE file")

    def propagate(self, timestamp: datetime) -> Optional[SatelliteState]:
        """
        Inertial state at a timestamp, or None if SGP4 cannot propagate.

        orbit-predictor works in ECEF; the state is rotated into the inertial
        frame by GMST, adding the Earth-rotation term to the velocity.
        """
        try:
            position = self.predictor.get_position(timestamp)
        except Exception as e:
            logger.debug(f"No satellite state at {timestamp}: {e}")
            return None

        return _to_inertial(timestamp, position)

    def get_position(self, timestamp: datetime) -> Tuple[float, float, float]:
        """
        Get satellite position at specific timestamp.

        Returns:
            Tuple of (latitude, longitude, altitude_km)
        """
        try:
            position = self.predictor.get_position(timestamp)
            lat, lon, alt = position.position_llh
            return (lat, lon, alt)
        except Exception as e:
            logger.error(f"Error calculating position for {timestamp}: {e}")
            raise

    def get_state(self, timestamp: datetime) -> Optional[SatellitePosition]:
        """
        Sub-satellite point, altitude and inertial speed.

        Returns:
            SatellitePosition, or None if the orbit cannot be propagated
        """
        try:
            position = self.predictor.get_position(timestamp)
        except Exception as e:
            logger.warning(f"Could not propagate {self.satellite_name} at {timestamp}: {e}")
            return None

        state = _to_inertial(timestamp, position)
        lat, lon, alt = position.position_llh
        return SatellitePosition(
            timestamp=timestamp,
            latitude=lat,
            longitude=lon,
            altitude_km=alt,
            speed_km_s=math.sqrt(sum(v * v for v in state.velocity_eci)),
            position_eci=state.position_eci,
            gmst_deg=calculate_gmst(timestamp),
        )

    def get_ground_track(
        self,
        start_time: datetime,
        minutes: float = 90.0,
        step_seconds: float = 60.0,
    ) -> List[GroundTrackPoint]:
        """
        Generate ground track points over time period.

        Samples the propagator fails on are left out.

        Args:
            start_time: Start time for ground track (UTC)
            minutes: Track length in minutes
            step_seconds: Time between points

        Returns:
            List of GroundTrackPoint in time order
        """
        if step_seconds <= 0:
            raise ValueError(f"step_seconds must be > 0, got {step_seconds}")

        ground_track = []
        total_steps = int((minutes * 60) // step_seconds)

        for i in range(total_steps + 1):
            timestamp = start_time + timedelta(seconds=i * step_seconds)
            try:
                position = self.predictor.get_position(timestamp)
            except Exception as e:
                logger.warning(f"Skipping position calculation at {timestamp}: {e}")
                continue
            lat, lon, alt = position.position_llh
            ground_track.append(GroundTrackPoint(lat, lon, timestamp, alt))

        logger.info(f"Generated ground track with {len(ground_track)} points")
        return ground_track

    def get_orbital_period(self) -> timedelta:
        """
        Orbital period of the satellite.

        Returns:
            Orbital period as timedelta
        """
        # period is a property in minutes
        return timedelta(minutes=self.predictor.period)

    def __repr__(self) -> str:
        """String representation of the satellite orbit."""
        return f"SatelliteOrbit(name='{self.satellite_name}')"


def _check_tle_lines(lines: Sequence[str]) -> None:
    """Reject element lines that are not a line-1/line-2 pair of one satellite."""
    line1, line2 = lines
    if not line1.startswith("1 ") or not line2.startswith("2 "):
        raise ValueError("TLE lines must start with '1 ' and '2 '")
    if line1[2:7] != line2[2:7]:
        raise ValueError(f"Catalog numbers differ: {line1[2:7]!r} != {line2[2:7]!r}")


def _to_inertial(timestamp: datetime, position) -> SatelliteState:
    """Rotate an orbit-predictor ECEF position into a SatelliteState."""
    gmst = calculate_gmst(timestamp)
    r_eci = ecef_to_eci(position.position_ecef, gmst)
    # velocity_ecef is the inertial velocity rotated, with no Earth-spin term
    v_eci = ecef_to_eci(position.velocity_ecef, gmst)

    return SatelliteState(
        timestamp=timestamp,
        position_eci=tuple(float(c) for c in r_eci),
        velocity_eci=tuple(float(c) for c in v_eci),
    )
