"""
Main pass planning logic and coordination.

This module provides the PassPlanner class that wires the orbit propagator,
solar ephemeris and look-angle transform into the pass scanner, and turns
the resulting passes into summaries, exports, calendar entries and share
links.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from pathlib import Path
from urllib.parse import parse_qs, urlencode, urlparse
import json
import logging

import pandas as pd

from .config import DEFAULT_SCAN_CONFIG, ScanConfig
from .geometry import compute_look_angles
from .observer import Observer
from .orbit import SatelliteOrbit
from .quality_scoring import select_top_picks
from .sunlight import calculate_gmst, calculate_sun_position, get_sun_elevation
from .utils import get_current_utc, parse_datetime
from .visibility import (
    Pass,
    PassScanner,
    describe_visibility,
    find_next_pass,
    visibility_status,
)

logger = logging.getLogger(__name__)

ICS_PRODID = "-//pass-planner//Satellite Pass Planner//EN"
ICS_TIME_FORMAT = "%Y%m%dT%H%M%SZ"

CSV_COLUMNS = [
    "start_time", "peak_time", "end_time", "duration_s", "max_elevation",
    "start_azimuth", "peak_azimuth", "end_azimuth", "visible", "visibility",
    "score", "brightness", "sun_altitude_at_peak",
]


class PassPlanner:
    """
    Main pass planning coordinator.

    Brings together a satellite orbit and an observer location and runs the
    pass scanner with the default propagator and ephemeris.
    """

    def __init__(
        self,
        satellite: SatelliteOrbit,
        observer: Observer,
        config: ScanConfig = DEFAULT_SCAN_CONFIG,
    ) -> None:
        """
        Initialize pass planner.

        Args:
            satellite: SatelliteOrbit instance
            observer: Observer location
            config: Scan window, step and thresholds
        """
        self.satellite = satellite
        self.observer = observer
        self.config = config
        self.scanner = PassScanner(
            satellite.propagate,
            sidereal_time=calculate_gmst,
            look_angles=compute_look_angles,
            solar_altitude=get_sun_elevation,
            sun_position=calculate_sun_position,
            config=config,
        )

        logger.info(f"Initialized PassPlanner for {satellite.satellite_name} "
                    f"over {observer.display_name}")

    def compute_passes(self, start_time: Optional[datetime] = None) -> List[Pass]:
        """
        Compute passes over the observer.

        Args:
            start_time: Window start (UTC); defaults to now

        Returns:
            Passes ordered by start time
        """
        if start_time is None:
            start_time = get_current_utc()

        logger.info(f"Computing passes from {start_time} for {self.config.window_hours}h "
                    f"at {self.config.step_seconds}s steps")

        passes = self.scanner.scan(self.observer, start_time)

        visible = sum(1 for p in passes if p.visible)
        logger.info(f"Found {len(passes)} passes ({visible} visible)")
        return passes

    def get_summary(
        self,
        passes: Sequence[Pass],
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Generate pass summary statistics.

        Args:
            passes: Passes from compute_passes
            now: Reference time for the current status (defaults to now)

        Returns:
            Dictionary with pass summary
        """
        if now is None:
            now = get_current_utc()

        summary: Dict[str, Any] = {
            "satellite_name": self.satellite.satellite_name,
            "observer": self.observer.to_dict(),
            "status": visibility_status(passes, now),
            "total_passes": len(passes),
            "visible_passes": sum(1 for p in passes if p.visible),
        }

        if not passes:
            summary.update({
                "highest_elevation": 0,
                "total_pass_time_minutes": 0,
                "next_pass": None,
                "best_pass": None,
            })
            return summary

        highest = max(passes, key=lambda p: p.max_elevation)
        total_minutes = sum(p.duration_s for p in passes) / 60
        next_pass = find_next_pass(passes, now)
        picks = select_top_picks(passes, limit=1)

        summary.update({
            "highest_elevation": round(highest.max_elevation, 1),
            "total_pass_time_minutes": round(total_minutes, 1),
            "next_pass": next_pass.start_time.isoformat() if next_pass else None,
            "best_pass": {
                "time": picks[0].peak_time.isoformat(),
                "elevation": round(picks[0].max_elevation, 1),
                "score": picks[0].score,
                "brightness": picks[0].brightness,
            } if picks else None,
        })

        logger.info(f"Generated pass summary: {len(passes)} passes, "
                    f"{highest.max_elevation:.1f}° max elevation")
        return summary

    def export_passes(
        self,
        passes: Sequence[Pass],
        output_file: Union[str, Path],
        format: str = "auto",
    ) -> None:
        """
        Export passes to file.

        Args:
            passes: Passes from compute_passes
            output_file: Output file path
            format: Output format ("json", "csv", or "auto")
        """
        output_path = Path(output_file)

        if format == "auto":
            format = output_path.suffix.lower().lstrip('.')
            if format not in ["json", "csv"]:
                format = "json"

        rows = [p.to_dict() for p in passes]

        try:
            if format == "json":
                self._export_json(rows, output_path)
            elif format == "csv":
                self._export_csv(rows, output_path)
            else:
                raise ValueError(f"Unsupported format: {format}")

            logger.info(f"Exported {len(rows)} passes to {output_path}")

        except Exception as e:
            logger.error(f"Error exporting passes: {e}")
            raise

    def _export_json(self, passes: List[Dict], output_path: Path) -> None:
        """Export passes to JSON format."""
        export_data = {
            "metadata": {
                "satellite": self.satellite.satellite_name,
                "observer": self.observer.to_dict(),
                "export_time": get_current_utc().isoformat(),
                "scan": self.config.to_dict(),
                "total_passes": len(passes),
            },
            "passes": passes,
        }

        with open(output_path, 'w') as f:
            json.dump(export_data, f, indent=2)

    def _export_csv(self, passes: List[Dict], output_path: Path) -> None:
        """Export passes to CSV format."""
        passes_to_dataframe(passes).to_csv(output_path, index=False)


def passes_to_dataframe(passes: Sequence[Union[Pass, Dict[str, Any]]]) -> pd.DataFrame:
    """
    Flat table of passes, one row per pass.

    Visibility segments are nested, so only their count is kept.
    """
    rows = [p.to_dict() if isinstance(p, Pass) else p for p in passes]
    if not rows:
        return pd.DataFrame(columns=CSV_COLUMNS + ["visible_segments"])

    df = pd.DataFrame(rows)
    df["visible_segments"] = df["visible_segments"].apply(len)
    return df[CSV_COLUMNS + ["visible_segments"]]


def create_ics(pass_: Pass, location_name: str, satellite_name: str = "ISS") -> str:
    """
    Build an iCalendar event for a pass.

    Args:
        pass_: The pass to schedule
        location_name: Place name used in the event summary
        satellite_name: Satellite name used in the event summary

    Returns:
        VCALENDAR text with one VEVENT
    """
    return "\n".join([
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{ICS_PRODID}",
        "BEGIN:VEVENT",
        f"DTSTART:{pass_.start_time.strftime(ICS_TIME_FORMAT)}",
        f"DTEND:{pass_.end_time.strftime(ICS_TIME_FORMAT)}",
        f"SUMMARY:{satellite_name} pass over {location_name}",
        f"DESCRIPTION:Peak elevation {pass_.max_elevation:.0f}° - {pass_.brightness}. "
        f"{describe_visibility(pass_)}.",
        "END:VEVENT",
        "END:VCALENDAR",
    ])


def build_share_url(base_url: str, observer: Observer, pass_: Pass) -> str:
    """
    Link that reopens the planner at an observer location and pass.

    Example:
        build_share_url("https://example.org/", observer, pass_)
        -> "https://example.org/?lat=51.5074&lon=-0.1278&pass=2024-01-01T20:15:00Z"
    """
    params = urlencode({
        "lat": f"{observer.latitude:.4f}",
        "lon": f"{observer.longitude:.4f}",
        "pass": pass_.start_time.strftime("%Y-%m-%dT%H:%M:%SZ"),
    }, safe=":")
    return f"{base_url}?{params}"


def parse_share_url(url: str) -> Tuple[Observer, Optional[datetime]]:
    """
    Read the observer location and pass start back out of a share link.

    Raises:
        ValueError: If the link has no lat/lon or they are out of range
    """
    query = parse_qs(urlparse(url).query)
    if "lat" not in query or "lon" not in query:
        raise ValueError(f"Share URL has no location: {url}")

    observer = Observer(float(query["lat"][0]), float(query["lon"][0]))
    pass_start = parse_datetime(query["pass"][0]) if "pass" in query else None
    return observer, pass_start
