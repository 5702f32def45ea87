"""
Satellite Pass Planner

Predicts when a satellite rises over an observer, whether it can be seen
with the naked eye, and how good each pass is, from TLE orbital elements.
"""

from .config import ScanConfig, create_scan_config, load_scan_config
from .observer import Observer
from .orbit import SatelliteOrbit
from .planner import PassPlanner
from .quality_scoring import estimate_brightness, score_pass, select_top_picks
from .ground_track import segment_ground_track
from .utils import format_azimuth
from .visibility import Pass, PassScanner, compute_passes, describe_visibility

__version__ = "0.1.0"
__author__ = "Pass Planner Team"

__all__ = [
    "ScanConfig",
    "create_scan_config",
    "load_scan_config",
    "Observer",
    "SatelliteOrbit",
    "PassPlanner",
    "Pass",
    "PassScanner",
    "compute_passes",
    "describe_visibility",
    "score_pass",
    "estimate_brightness",
    "select_top_picks",
    "segment_ground_track",
    "format_azimuth",
]
