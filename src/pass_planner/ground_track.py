"""
Ground track points and antimeridian segmentation.

A ground track crossing the ±180° meridian jumps from one edge of an
equirectangular map to the other. Drawing it as a single polyline produces
a line across the whole map, so the track is split into segments at each
crossing.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

LatLon = Tuple[float, float]

ANTIMERIDIAN_JUMP_DEG = 180.0


@dataclass(frozen=True)
class GroundTrackPoint:
    """A single point on a satellite's ground track."""

    latitude: float
    longitude: float
    timestamp: Optional[datetime] = None
    altitude_km: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "latitude": round(self.latitude, 4),
            "longitude": round(self.longitude, 4),
        }
        if self.timestamp is not None:
            result["timestamp"] = self.timestamp.isoformat()
        if self.altitude_km is not None:
            result["altitude_km"] = round(self.altitude_km, 2)
        return result


def _lat_lon(point: Union[GroundTrackPoint, Sequence[float]]) -> LatLon:
    if isinstance(point, GroundTrackPoint):
        return (point.latitude, point.longitude)
    return (point[0], point[1])


def segment_ground_track(
    points: Sequence[Union[GroundTrackPoint, Sequence[float]]]
) -> List[List[LatLon]]:
    """
    Split a chronological ground track at antimeridian crossings.

    A crossing is any pair of consecutive points whose longitudes differ by
    more than 180°. The point after the jump starts the next segment.

    Args:
        points: (lat, lon) pairs or GroundTrackPoint objects, in time order

    Returns:
        List of segments, each a list of (lat, lon) tuples. Empty input
        yields a single empty segment.
    """
    segments: List[List[LatLon]] = [[]]
    previous_lon: Optional[float] = None

    for point in points:
        lat, lon = _lat_lon(point)
        if previous_lon is not None and abs(lon - previous_lon) > ANTIMERIDIAN_JUMP_DEG:
            segments.append([])
        segments[-1].append((lat, lon))
        previous_lon = lon

    return segments
