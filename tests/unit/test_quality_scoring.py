"""
Tests for pass scoring, brightness and ranking.
"""

from datetime import datetime, timedelta

import pytest

from pass_planner.quality_scoring import (
    BRIGHT,
    BRIGHTNESS_LABELS,
    DIM,
    MODERATE,
    VERY_BRIGHT,
    darkness_factor,
    estimate_brightness,
    score_pass,
    select_top_picks,
)
from pass_planner.utils import format_azimuth
from pass_planner.visibility import Pass

BASE = datetime(2024, 1, 1, 18, 0, 0)


def make_pass(index: int, score: int, visible: bool = True) -> Pass:
    start = BASE + timedelta(hours=index)
    return Pass(
        start_time=start,
        end_time=start + timedelta(minutes=5),
        start_azimuth=250.0,
        end_azimuth=80.0,
        peak_time=start + timedelta(minutes=2),
        peak_azimuth=170.0,
        max_elevation=40.0,
        visible=visible,
        visible_segments=(),
        duration_s=300.0,
        score=score,
        brightness=BRIGHT,
        sun_altitude_at_peak=-10.0,
    )


class TestDarknessFactor:
    def test_daylight(self) -> None:
        assert darkness_factor(10.0) == 0.0

    def test_civil_twilight(self) -> None:
        assert darkness_factor(-6.0) == 0.0

    def test_astronomical_dark(self) -> None:
        assert darkness_factor(-18.0) == 1.0
        assert darkness_factor(-40.0) == 1.0

    def test_linear_between(self) -> None:
        assert darkness_factor(-12.0) == pytest.approx(0.5)


class TestScorePass:
    """Tests for the 0-100 pass score."""

    def test_better_pass_scores_higher(self) -> None:
        assert score_pass(20, 200, -2) < score_pass(80, 400, -18)

    def test_perfect_pass(self) -> None:
        assert score_pass(90, 600, -18) == 100

    def test_worst_pass(self) -> None:
        assert score_pass(0, 0, 0) == 0

    def test_duration_saturates(self) -> None:
        assert score_pass(45, 600, -18) == score_pass(45, 3600, -18)

    def test_out_of_range_inputs_clamped(self) -> None:
        assert score_pass(120, 10000, -90) == 100
        assert score_pass(-10, -50, 30) == 0

    def test_rounds_half_up(self) -> None:
        # Darkness alone: (7.5 - 6) / 12 * 20 = 2.5
        assert score_pass(0, 0, -7.5) == 3

    def test_components(self) -> None:
        # 25 (elevation) + 15 (duration) + 10 (darkness)
        assert score_pass(45, 300, -12) == 50

    def test_returns_int(self) -> None:
        assert isinstance(score_pass(33.3, 123.4, -9.9), int)


class TestEstimateBrightness:
    def test_very_bright(self) -> None:
        assert estimate_brightness(80, -18) == VERY_BRIGHT == "Very bright"

    def test_dim(self) -> None:
        assert estimate_brightness(40, -2) == DIM == "Dim"

    def test_bright(self) -> None:
        # 60 * 0.7 + 10 = 52
        assert estimate_brightness(60, -10) == BRIGHT

    def test_moderate(self) -> None:
        # 50 * 0.7 = 35
        assert estimate_brightness(50, -6) == MODERATE

    def test_thresholds_exclusive(self) -> None:
        # 100 * 0.7 = 70 is not above 70
        assert estimate_brightness(100, 0) == BRIGHT


ELEVATIONS = [-10.0, 0.0, 5.0, 20.0, 44.9, 45.0, 60.0, 89.9, 90.0, 120.0]
DURATIONS = [-30.0, 0.0, 60.0, 299.0, 300.0, 599.0, 600.0, 1200.0]
# Ordered from daylight to full darkness
SUN_ALTITUDES = [30.0, 0.0, -5.9, -6.0, -7.5, -12.0, -17.9, -18.0, -40.0]


def brightness_rank(label: str) -> int:
    """0 for Dim up to 3 for Very bright."""
    return len(BRIGHTNESS_LABELS) - 1 - BRIGHTNESS_LABELS.index(label)


class TestMonotonicity:
    """Better viewing conditions never lower the score or brightness."""

    @pytest.mark.parametrize("duration", [0.0, 300.0, 900.0])
    @pytest.mark.parametrize("sun_altitude", [0.0, -12.0, -30.0])
    def test_score_non_decreasing_in_elevation(self, duration, sun_altitude) -> None:
        scores = [score_pass(e, duration, sun_altitude) for e in ELEVATIONS]
        assert scores == sorted(scores)

    @pytest.mark.parametrize("elevation", [0.0, 45.0, 90.0])
    @pytest.mark.parametrize("sun_altitude", [0.0, -12.0, -30.0])
    def test_score_non_decreasing_in_duration(self, elevation, sun_altitude) -> None:
        scores = [score_pass(elevation, d, sun_altitude) for d in DURATIONS]
        assert scores == sorted(scores)

    @pytest.mark.parametrize("elevation", [0.0, 45.0, 90.0])
    @pytest.mark.parametrize("duration", [0.0, 300.0, 900.0])
    def test_score_non_decreasing_in_darkness(self, elevation, duration) -> None:
        scores = [score_pass(elevation, duration, s) for s in SUN_ALTITUDES]
        assert scores == sorted(scores)

    @pytest.mark.parametrize("sun_altitude", SUN_ALTITUDES)
    def test_brightness_non_decreasing_in_elevation(self, sun_altitude) -> None:
        ranks = [brightness_rank(estimate_brightness(e, sun_altitude)) for e in ELEVATIONS]
        assert ranks == sorted(ranks)

    @pytest.mark.parametrize("elevation", ELEVATIONS)
    def test_brightness_non_decreasing_in_darkness(self, elevation) -> None:
        ranks = [brightness_rank(estimate_brightness(elevation, s)) for s in SUN_ALTITUDES]
        assert ranks == sorted(ranks)


class TestSelectTopPicks:
    def test_orders_by_score(self) -> None:
        passes = [make_pass(0, 40), make_pass(1, 90), make_pass(2, 60), make_pass(3, 75)]
        picks = select_top_picks(passes)

        assert [p.score for p in picks] == [90, 75, 60]

    def test_only_visible(self) -> None:
        passes = [make_pass(0, 99, visible=False), make_pass(1, 10)]
        assert select_top_picks(passes) == [passes[1]]

    def test_ties_keep_time_order(self) -> None:
        passes = [make_pass(0, 50), make_pass(1, 50), make_pass(2, 50)]
        assert select_top_picks(passes, limit=2) == passes[:2]

    def test_empty(self) -> None:
        assert select_top_picks([]) == []

    def test_negative_limit(self) -> None:
        with pytest.raises(ValueError):
            select_top_picks([make_pass(0, 50)], limit=-1)


class TestFormatAzimuth:
    def test_east(self) -> None:
        assert "E" in format_azimuth(90)
