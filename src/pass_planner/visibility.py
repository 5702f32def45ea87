"""
Satellite pass prediction and naked-eye visibility.

This module steps through a time window, samples the satellite's look angle
from an observer, and emits one Pass per rise-to-set interval. Within each
pass it tracks the peak and the sub-intervals during which the satellite is
sunlit while the observer's sky is dark.

All collaborators (propagator, sidereal time, look-angle transform, local
sun altitude) are passed in, so a scan is a pure function of its inputs.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .config import DEFAULT_SCAN_CONFIG, ScanConfig
from .geometry import LookAngle, compute_look_angles, normalize_azimuth
from .quality_scoring import estimate_brightness, score_pass
from .sunlight import (
    calculate_gmst,
    calculate_sun_position,
    get_sun_elevation,
    is_satellite_sunlit,
)

logger = logging.getLogger(__name__)

# Human-readable visibility descriptions
NOT_VISIBLE = "Not visible (daylight or shadowed)"
VISIBLE_BRIEFLY = "Visible briefly"
VISIBLE_MOST = "Visible for most of pass"
VISIBLE_PART = "Visible in part of pass"

MOST_OF_PASS_SECONDS = 240.0

# Current-status descriptions
STATUS_NO_PASSES = "No passes available"
STATUS_BELOW_HORIZON = "Below your horizon"
STATUS_VISIBLE = "Visible in dark skies"
STATUS_NOT_VISIBLE = "Overhead but not visible"


@dataclass(frozen=True)
class SatelliteState:
    """Inertial state of a satellite at an instant."""

    timestamp: datetime
    position_eci: Tuple[float, float, float]  # km
    velocity_eci: Tuple[float, float, float]  # km/s


# Collaborator signatures
PropagateFn = Callable[[datetime], Optional[SatelliteState]]
SiderealTimeFn = Callable[[datetime], float]
LookAnglesFn = Callable[[Any, Sequence[float], float], LookAngle]
SolarAltitudeFn = Callable[[float, float, datetime], float]
SunPositionFn = Callable[[datetime], Tuple[float, float, float]]


@dataclass(frozen=True)
class VisibilitySegment:
    """Interval [start, end) of a pass during which the satellite is visible."""

    start: datetime
    end: Optional[datetime] = None  # None while still open

    @property
    def is_open(self) -> bool:
        return self.end is None

    @property
    def duration_s(self) -> Optional[float]:
        if self.end is None:
            return None
        return (self.end - self.start).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat() if self.end else None,
        }


@dataclass(frozen=True)
class Pass:
    """A single rise-to-set pass of a satellite over an observer."""

    start_time: datetime
    end_time: datetime
    start_azimuth: float  # degrees
    end_azimuth: float  # degrees
    peak_time: datetime
    peak_azimuth: float  # degrees
    max_elevation: float  # degrees
    visible: bool
    visible_segments: Tuple[VisibilitySegment, ...]
    duration_s: float
    score: int
    brightness: str
    sun_altitude_at_peak: float  # degrees

    def contains(self, timestamp: datetime) -> bool:
        """True if timestamp lies within [start_time, end_time]."""
        return self.start_time <= timestamp <= self.end_time

    def to_dict(self) -> Dict[str, Any]:
        """Convert pass to dictionary."""
        return {
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "peak_time": self.peak_time.isoformat(),
            "duration_s": round(self.duration_s, 1),
            "max_elevation": round(self.max_elevation, 2),
            "start_azimuth": round(self.start_azimuth, 2),
            "peak_azimuth": round(self.peak_azimuth, 2),
            "end_azimuth": round(self.end_azimuth, 2),
            "visible": self.visible,
            "visible_segments": [s.to_dict() for s in self.visible_segments],
            "visibility": describe_visibility(self),
            "score": self.score,
            "brightness": self.brightness,
            "sun_altitude_at_peak": round(self.sun_altitude_at_peak, 2),
        }

    def __str__(self) -> str:
        return (
            f"Pass {self.start_time.strftime('%Y-%m-%d %H:%M')} - "
            f"{self.end_time.strftime('%H:%M')} UTC, "
            f"Max Elev: {self.max_elevation:.1f}°, Score: {self.score}"
        )


class ScanState(Enum):
    """Pass scanner states."""

    OUTSIDE_PASS = "outside_pass"
    IN_PASS = "in_pass"


@dataclass(frozen=True)
class _OpenPass:
    """Accumulated values of the pass currently above the horizon."""

    start_time: datetime
    start_azimuth: float
    max_elevation: float
    peak_time: datetime
    peak_azimuth: float
    last_azimuth: float
    visible: bool = False
    segments: Tuple[VisibilitySegment, ...] = field(default_factory=tuple)

    @property
    def segment_open(self) -> bool:
        return bool(self.segments) and self.segments[-1].is_open

    def open_segment(self, timestamp: datetime) -> "_OpenPass":
        return replace(self, segments=self.segments + (VisibilitySegment(timestamp),))

    def close_segment(self, timestamp: datetime) -> "_OpenPass":
        if not self.segment_open:
            return self
        closed = VisibilitySegment(self.segments[-1].start, timestamp)
        return replace(self, segments=self.segments[:-1] + (closed,))


class PassScanner:
    """
    Rise/set state machine over sampled look angles.

    The scanner holds only its collaborators and configuration; every call to
    ``scan`` starts from OUTSIDE_PASS and shares nothing with other calls.
    """

    def __init__(
        self,
        propagate: PropagateFn,
        sidereal_time: SiderealTimeFn = calculate_gmst,
        look_angles: LookAnglesFn = compute_look_angles,
        solar_altitude: SolarAltitudeFn = get_sun_elevation,
        sun_position: SunPositionFn = calculate_sun_position,
        config: ScanConfig = DEFAULT_SCAN_CONFIG,
    ) -> None:
        """
        Initialize the scanner.

        Args:
            propagate: time -> SatelliteState, or None when unavailable
            sidereal_time: time -> GMST in degrees
            look_angles: (observer, position_eci, gmst) -> LookAngle
            solar_altitude: (lat, lon, time) -> local sun altitude in degrees
            sun_position: time -> inertial sun vector in km
            config: Window, step and threshold settings
        """
        self.propagate = propagate
        self.sidereal_time = sidereal_time
        self.look_angles = look_angles
        self.solar_altitude = solar_altitude
        self.sun_position = sun_position
        self.config = config

    def scan(self, observer: Any, start_time: datetime) -> List[Pass]:
        """
        Find all passes in the configured window.

        Args:
            observer: Object with ``latitude``, ``longitude``, ``height_km``
            start_time: Window start (UTC)

        Returns:
            Passes ordered by start time
        """
        step = timedelta(seconds=self.config.step_seconds)
        window = timedelta(seconds=self.config.window_seconds)
        end_time = start_time + window
        n_steps = int(self.config.window_seconds // self.config.step_seconds)

        passes: List[Pass] = []
        current: Optional[_OpenPass] = None
        gaps = 0

        for i in range(n_steps + 1):
            timestamp = start_time + i * step

            state = self.propagate(timestamp)
            if state is None:
                gaps += 1
                continue

            look = self.look_angles(
                observer, state.position_eci, self.sidereal_time(timestamp)
            )
            current, finished = self._advance(
                current, observer, timestamp, look, state.position_eci
            )
            if finished is not None:
                passes.append(finished)

        if current is not None:
            # A segment opened on a final sample at end_time closes with zero length
            current = current.close_segment(end_time)
            passes.append(
                self._finalize(current, observer, end_time, current.last_azimuth)
            )

        if gaps:
            logger.debug(f"Skipped {gaps} samples with no satellite state")

        return passes

    def _advance(
        self,
        current: Optional[_OpenPass],
        observer: Any,
        timestamp: datetime,
        look: LookAngle,
        position_eci: Sequence[float],
    ) -> Tuple[Optional[_OpenPass], Optional[Pass]]:
        """One state-machine transition. Returns (new state, finished pass)."""
        elevation = look.elevation_deg
        azimuth = normalize_azimuth(look.azimuth_deg)

        if current is None:
            if elevation <= 0:
                return None, None
            current = _OpenPass(
                start_time=timestamp,
                start_azimuth=azimuth,
                max_elevation=elevation,
                peak_time=timestamp,
                peak_azimuth=azimuth,
                last_azimuth=azimuth,
            )

        if elevation <= 0:
            current = current.close_segment(timestamp)
            return None, self._finalize(current, observer, timestamp, azimuth)

        if elevation > current.max_elevation:
            current = replace(
                current,
                max_elevation=elevation,
                peak_time=timestamp,
                peak_azimuth=azimuth,
            )
        current = replace(current, last_azimuth=azimuth)

        if self._is_visible(observer, timestamp, position_eci):
            if not current.segment_open:
                current = current.open_segment(timestamp)
            if not current.visible:
                current = replace(current, visible=True)
        else:
            current = current.close_segment(timestamp)

        return current, None

    def _is_visible(
        self, observer: Any, timestamp: datetime, position_eci: Sequence[float]
    ) -> bool:
        """Sunlit satellite over a dark sky."""
        sunlit = is_satellite_sunlit(
            position_eci,
            self.sun_position(timestamp),
            self.config.earth_shadow_radius_km,
        )
        if not sunlit:
            return False
        sun_altitude = self.solar_altitude(observer.latitude, observer.longitude, timestamp)
        return sun_altitude < self.config.twilight_sun_altitude_deg

    def _finalize(
        self,
        current: _OpenPass,
        observer: Any,
        end_time: datetime,
        end_azimuth: float,
    ) -> Pass:
        duration = (end_time - current.start_time).total_seconds()
        sun_altitude = self.solar_altitude(
            observer.latitude, observer.longitude, current.peak_time
        )

        return Pass(
            start_time=current.start_time,
            end_time=end_time,
            start_azimuth=current.start_azimuth,
            end_azimuth=end_azimuth,
            peak_time=current.peak_time,
            peak_azimuth=current.peak_azimuth,
            max_elevation=current.max_elevation,
            visible=current.visible,
            visible_segments=current.segments,
            duration_s=duration,
            score=score_pass(current.max_elevation, duration, sun_altitude),
            brightness=estimate_brightness(current.max_elevation, sun_altitude),
            sun_altitude_at_peak=sun_altitude,
        )


def compute_passes(
    propagate: PropagateFn,
    observer: Any,
    start_time: datetime,
    window_hours: Optional[float] = None,
    step_seconds: Optional[float] = None,
    sidereal_time: SiderealTimeFn = calculate_gmst,
    look_angles: LookAnglesFn = compute_look_angles,
    solar_altitude: SolarAltitudeFn = get_sun_elevation,
    config: ScanConfig = DEFAULT_SCAN_CONFIG,
) -> List[Pass]:
    """
    Predict passes of a satellite over an observer.

    Args:
        propagate: time -> SatelliteState or None (propagation failure)
        observer: Observer location
        start_time: Window start (UTC)
        window_hours: Window length, overrides ``config`` (default 72)
        step_seconds: Sampling step, overrides ``config`` (default 20)
        sidereal_time: GMST function in degrees
        look_angles: Topocentric transform
        solar_altitude: Local sun altitude function
        config: Base scan configuration

    Returns:
        Passes ordered by start time
    """
    if window_hours is not None:
        config = replace(config, window_hours=window_hours)
    if step_seconds is not None:
        config = replace(config, step_seconds=step_seconds)

    scanner = PassScanner(
        propagate,
        sidereal_time=sidereal_time,
        look_angles=look_angles,
        solar_altitude=solar_altitude,
        config=config,
    )
    return scanner.scan(observer, start_time)


def describe_visibility(pass_: Pass) -> str:
    """Human-readable naked-eye visibility of a pass."""
    if not pass_.visible:
        return NOT_VISIBLE
    if not pass_.visible_segments:
        return VISIBLE_BRIEFLY

    first = pass_.visible_segments[0]
    if first.duration_s is not None and first.duration_s >= MOST_OF_PASS_SECONDS:
        return VISIBLE_MOST
    return VISIBLE_PART


def find_active_pass(passes: Sequence[Pass], timestamp: datetime) -> Optional[Pass]:
    """Pass in progress at timestamp, if any."""
    for pass_ in passes:
        if pass_.contains(timestamp):
            return pass_
    return None


def find_next_pass(passes: Sequence[Pass], timestamp: datetime) -> Optional[Pass]:
    """First pass that has not ended by timestamp."""
    for pass_ in passes:
        if pass_.end_time >= timestamp:
            return pass_
    return None


def visibility_status(passes: Sequence[Pass], timestamp: datetime) -> str:
    """Describe what an observer can see right now."""
    if not passes:
        return STATUS_NO_PASSES

    active = find_active_pass(passes, timestamp)
    if active is None:
        return STATUS_BELOW_HORIZON
    return STATUS_VISIBLE if active.visible else STATUS_NOT_VISIBLE
