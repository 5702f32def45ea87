"""
Utility functions for the pass planner.

This module provides logging setup, date parsing, TLE download and caching,
and the display formatting helpers used by the CLI and exports.
"""

from datetime import datetime, timezone
from typing import List, Optional, Union
import logging
import os
import time
import requests
from pathlib import Path

logger = logging.getLogger(__name__)

COMPASS_POINTS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]

ISS_TLE_URL = "https://celestrak.org/NORAD/elements/gp.php?CATNR=25544&FORMAT=TLE"
TLE_CACHE_HOURS = 12.0


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Set up logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path

    Environment Variables:
        PASS_PLANNER_LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_level = os.environ.get("PASS_PLANNER_LOG_LEVEL")
    if env_level:
        level = env_level
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logger.info(f"Logging configured at {level} level")


def parse_datetime(date_string: str) -> datetime:
    """
    Parse datetime string in various formats.

    Args:
        date_string: Date string to parse

    Returns:
        Parsed datetime object (UTC, timezone-naive)

    Raises:
        ValueError: If date string cannot be parsed
    """
    formats = [
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%d %H:%M",
        "%Y-%m-%dT%H:%M:%S",
        "%Y-%m-%dT%H:%M:%SZ",
        "%Y-%m-%dT%H:%M:%S.%fZ",
        "%Y-%m-%d",
    ]

    for fmt in formats:
        try:
            dt = datetime.strptime(date_string, fmt)
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt.astimezone(timezone.utc).replace(tzinfo=None)
        except ValueError:
            continue

    raise ValueError(f"Could not parse datetime string: {date_string}")


def download_tle_file(url: str, output_file: Union[str, Path]) -> bool:
    """
    Download TLE file from URL.

    Args:
        url: URL to download TLE data from
        output_file: Local file path to save TLE data

    Returns:
        True if successful, False otherwise
    """
    try:
        logger.info(f"Downloading TLE data from {url}")

        response = requests.get(url, timeout=30)
        response.raise_for_status()

        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w') as f:
            f.write(response.text)

        logger.info(f"TLE data saved to {output_path}")
        return True

    except Exception as e:
        logger.error(f"Error downloading TLE file: {e}")
        return False


def fetch_tle(
    url: str = ISS_TLE_URL,
    cache_file: Optional[Union[str, Path]] = None,
    max_age_hours: float = TLE_CACHE_HOURS,
) -> List[str]:
    """
    Fetch a single three-line element set, using a file cache.

    Args:
        url: URL returning a three-line TLE
        cache_file: Optional cache location; reused while younger than
            ``max_age_hours``
        max_age_hours: Cache lifetime

    Returns:
        [name, line1, line2]

    Raises:
        ValueError: If the response holds fewer than three lines
        requests.HTTPError: If the download fails
    """
    cache_path = Path(cache_file) if cache_file else None

    if cache_path is not None and cache_path.exists():
        age_hours = (time.time() - cache_path.stat().st_mtime) / 3600.0
        if age_hours < max_age_hours:
            lines = _tle_lines(cache_path.read_text())
            if len(lines) >= 3:
                logger.info(f"Using cached TLE from {cache_path} ({age_hours:.1f}h old)")
                return lines[:3]
            logger.warning(f"Ignoring malformed TLE cache {cache_path}")

    logger.info(f"Fetching TLE from {url}")
    response = requests.get(url, timeout=30)
    response.raise_for_status()

    lines = _tle_lines(response.text)
    if len(lines) < 3:
        raise ValueError("Invalid TLE response: expected at least 3 lines")

    tle = lines[:3]
    if cache_path is not None:
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        cache_path.write_text("\n".join(tle) + "\n")

    return tle


def _tle_lines(text: str) -> List[str]:
    return [line.strip() for line in text.strip().splitlines() if line.strip()]


def get_common_tle_sources() -> dict:
    """
    Get dictionary of common TLE data sources.

    Returns:
        Dictionary mapping source names to URLs
    """
    return {
        "iss": ISS_TLE_URL,
        "celestrak_stations": "https://celestrak.org/NORAD/elements/gp.php?GROUP=stations&FORMAT=tle",
        "celestrak_visual": "https://celestrak.org/NORAD/elements/gp.php?GROUP=visual&FORMAT=tle",
        "celestrak_active": "https://celestrak.org/NORAD/elements/gp.php?GROUP=active&FORMAT=tle",
        "celestrak_starlink": "https://celestrak.org/NORAD/elements/gp.php?GROUP=starlink&FORMAT=tle",
        "celestrak_weather": "https://celestrak.org/NORAD/elements/gp.php?GROUP=weather&FORMAT=tle",
    }


def validate_coordinates(latitude: float, longitude: float) -> bool:
    """
    Validate latitude and longitude coordinates.

    Returns:
        True if coordinates are valid
    """
    return (-90 <= latitude <= 90) and (-180 <= longitude <= 180)


def azimuth_to_compass(azimuth_deg: float) -> str:
    """16-point compass label for an azimuth in degrees."""
    index = int(round(azimuth_deg / 22.5)) % 16
    return COMPASS_POINTS[index]


def format_azimuth(azimuth_deg: float) -> str:
    """Format an azimuth as e.g. ``"E 90°"``."""
    return f"{azimuth_to_compass(azimuth_deg)} {azimuth_deg:.0f}°"


def format_coordinate(value: float, positive: str, negative: str) -> str:
    """
    Format a single coordinate with a hemisphere letter.

    Example:
        format_coordinate(-33.87, "N", "S") -> "33.87° S"
    """
    direction = positive if value >= 0 else negative
    return f"{abs(value):.2f}° {direction}"


def format_coordinates(latitude: float, longitude: float) -> str:
    """Format a latitude/longitude pair for display."""
    return f"{format_coordinate(latitude, 'N', 'S')}, {format_coordinate(longitude, 'E', 'W')}"


def format_altitude(km: float, units: str = "metric") -> str:
    """Altitude in km, or miles for imperial units."""
    if units == "imperial":
        return f"{km * 0.621371:.1f} mi"
    return f"{km:.1f} km"


def format_speed(km_per_s: float, units: str = "metric") -> str:
    """Speed in km/s, or mph for imperial units."""
    if units == "imperial":
        return f"{km_per_s * 2236.94:.0f} mph"
    return f"{km_per_s:.2f} km/s"


def format_duration(seconds: float) -> str:
    """
    Format duration in seconds as minutes and seconds.

    Example:
        format_duration(330) -> "5m 30s"
    """
    minutes = int(seconds // 60)
    remaining = int(round(seconds % 60))
    if remaining == 60:
        minutes, remaining = minutes + 1, 0
    return f"{minutes}m {remaining}s"


def create_sample_tle_file(output_file: Union[str, Path]) -> None:
    """
    Create a sample TLE file with bright, easily spotted satellites.

    Args:
        output_file: Path to create sample TLE file
    """
    sample_tle_data = """ISS (ZARYA)
1 25544U 98067A   24001.00000000  .00002182  00000-0  40864-4 0  9990
2 25544  51.6461 339.7939 0001220  92.8340 267.3124 15.49309239426382
NOAA 18
1 28654U 05018A   24001.00000000  .00000012  00000-0  28110-4 0  9997
2 28654  99.0581 161.3857 0013414  73.9446 286.3932 14.12501637967188
TERRA
1 25994U 99068A   24001.00000000  .00000023  00000-0  42979-4 0  9991
2 25994  98.2022  10.3559 0001378  83.7123 276.4313 14.57107527260649"""

    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        f.write(sample_tle_data)

    logger.info(f"Created sample TLE file: {output_path}")


def get_current_utc() -> datetime:
    """
    Get current UTC datetime.

    Returns:
        Current UTC datetime (timezone-naive)
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def ensure_directory_exists(directory: Union[str, Path]) -> Path:
    """
    Ensure directory exists, create if it doesn't.

    Returns:
        Path object for the directory
    """
    dir_path = Path(directory)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path
