"""
Pass scoring and brightness estimation.

Converts a pass's geometry and sky conditions into a 0-100 score and a
qualitative brightness label used for ranking passes. Scores combine:
- Elevation: higher peaks are easier to see (50 points)
- Duration: longer passes, saturating at 10 minutes (30 points)
- Darkness: civil twilight (-6°) to full dark (-18°) (20 points)
"""

import logging
import math
from typing import List, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .visibility import Pass

logger = logging.getLogger(__name__)

# Score weights
ELEVATION_POINTS = 50.0
DURATION_POINTS = 30.0
DARKNESS_POINTS = 20.0
DURATION_SATURATION_S = 600.0

# Brightness labels, brightest first
VERY_BRIGHT = "Very bright"
BRIGHT = "Bright"
MODERATE = "Moderate"
DIM = "Dim"
BRIGHTNESS_LABELS = (VERY_BRIGHT, BRIGHT, MODERATE, DIM)


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def darkness_factor(sun_altitude_deg: float) -> float:
    """
    Sky darkness in [0, 1].

    0 at or above civil twilight (-6°), 1 at astronomical darkness (-18°)
    and below, linear in between.
    """
    return _clamp((-sun_altitude_deg - 6.0) / 12.0, 0.0, 1.0)


def score_pass(
    max_elevation: float, duration_seconds: float, sun_altitude_deg: float
) -> int:
    """
    Score a pass for ranking.

    Args:
        max_elevation: Peak elevation in degrees
        duration_seconds: Rise-to-set duration
        sun_altitude_deg: Sun altitude at the observer at peak time

    Returns:
        Integer score in [0, 100]
    """
    elevation_score = _clamp(max_elevation / 90.0, 0.0, 1.0) * ELEVATION_POINTS
    duration_score = _clamp(duration_seconds / DURATION_SATURATION_S, 0.0, 1.0) * DURATION_POINTS
    darkness_score = darkness_factor(sun_altitude_deg) * DARKNESS_POINTS

    # Half-up rounding: 62.5 scores 63
    return int(math.floor(elevation_score + duration_score + darkness_score + 0.5))


def estimate_brightness(max_elevation: float, sun_altitude_deg: float) -> str:
    """
    Qualitative brightness label for a pass.

    Uses the composite ``elevation * 0.7 + darkness * 30``.

    Returns:
        One of "Very bright", "Bright", "Moderate", "Dim"
    """
    composite = max_elevation * 0.7 + darkness_factor(sun_altitude_deg) * 30.0

    if composite > 70:
        return VERY_BRIGHT
    if composite > 50:
        return BRIGHT
    if composite > 30:
        return MODERATE
    return DIM


def select_top_picks(passes: Sequence["Pass"], limit: int = 3) -> List["Pass"]:
    """
    Best visible passes, highest score first.

    Ties keep chronological order.
    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")

    visible = [p for p in passes if p.visible]
    picks = sorted(visible, key=lambda p: -p.score)[:limit]

    logger.debug(f"Selected {len(picks)} top picks from {len(visible)} visible passes")
    return picks
