"""
Tests for the PassPlanner and pass export helpers.
"""

import json
from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest

from pass_planner.config import ScanConfig
from pass_planner.observer import Observer
from pass_planner.planner import (
    CSV_COLUMNS,
    PassPlanner,
    build_share_url,
    create_ics,
    parse_share_url,
    passes_to_dataframe,
)
from pass_planner.visibility import (
    STATUS_NO_PASSES,
    STATUS_VISIBLE,
    Pass,
    VisibilitySegment,
)

START = datetime(2024, 3, 1, 19, 30, 0)


def make_pass(offset_hours: float, score: int, visible: bool = True, elevation: float = 45.0) -> Pass:
    start = START + timedelta(hours=offset_hours)
    end = start + timedelta(minutes=6)
    segments = (VisibilitySegment(start, end),) if visible else ()
    return Pass(
        start_time=start,
        end_time=end,
        start_azimuth=240.0,
        end_azimuth=60.0,
        peak_time=start + timedelta(minutes=3),
        peak_azimuth=150.0,
        max_elevation=elevation,
        visible=visible,
        visible_segments=segments,
        duration_s=360.0,
        score=score,
        brightness="Bright",
        sun_altitude_at_peak=-12.0,
    )


@pytest.fixture
def mock_satellite():
    """Create a mock SatelliteOrbit object."""
    sat = MagicMock()
    sat.satellite_name = "ISS (ZARYA)"
    sat.propagate.return_value = None
    return sat


@pytest.fixture
def planner(mock_satellite, sample_observer) -> PassPlanner:
    return PassPlanner(mock_satellite, sample_observer, ScanConfig(window_hours=1.0, step_seconds=60.0))


@pytest.fixture
def sample_passes():
    return [make_pass(0, 40, elevation=30.0), make_pass(2, 80, elevation=70.0), make_pass(4, 95, visible=False)]


class TestPassPlanner:
    """Tests for PassPlanner."""

    def test_uses_satellite_propagator(self, planner, mock_satellite) -> None:
        assert planner.scanner.propagate == mock_satellite.propagate
        assert planner.scanner.config.window_hours == 1.0

    def test_compute_passes_scans_window(self, planner, mock_satellite) -> None:
        passes = planner.compute_passes(START)

        assert passes == []
        assert mock_satellite.propagate.call_count == 61
        mock_satellite.propagate.assert_any_call(START)

    @patch("pass_planner.planner.get_current_utc")
    def test_compute_passes_defaults_to_now(self, mock_now, planner, mock_satellite) -> None:
        mock_now.return_value = START
        planner.compute_passes()
        mock_satellite.propagate.assert_any_call(START)


class TestGetSummary:
    def test_empty(self, planner) -> None:
        summary = planner.get_summary([], now=START)

        assert summary["total_passes"] == 0
        assert summary["status"] == STATUS_NO_PASSES
        assert summary["best_pass"] is None

    def test_summary(self, planner, sample_passes) -> None:
        summary = planner.get_summary(sample_passes, now=START + timedelta(minutes=1))

        assert summary["satellite_name"] == "ISS (ZARYA)"
        assert summary["total_passes"] == 3
        assert summary["visible_passes"] == 2
        assert summary["highest_elevation"] == 70.0
        assert summary["total_pass_time_minutes"] == 18.0
        assert summary["status"] == STATUS_VISIBLE
        assert summary["next_pass"] == sample_passes[0].start_time.isoformat()
        # Highest-scoring visible pass, not the invisible 95
        assert summary["best_pass"]["score"] == 80


class TestExportPasses:
    def test_json(self, planner, sample_passes, tmp_path) -> None:
        output = tmp_path / "passes.json"
        planner.export_passes(sample_passes, output)

        data = json.loads(output.read_text())
        assert data["metadata"]["satellite"] == "ISS (ZARYA)"
        assert data["metadata"]["total_passes"] == 3
        assert data["metadata"]["scan"]["step_seconds"] == 60.0
        assert data["passes"][1]["score"] == 80

    def test_csv(self, planner, sample_passes, tmp_path) -> None:
        output = tmp_path / "passes.csv"
        planner.export_passes(sample_passes, output)

        df = pd.read_csv(output)
        assert len(df) == 3
        assert list(df.columns) == CSV_COLUMNS + ["visible_segments"]
        assert df["visible_segments"].tolist() == [1, 1, 0]

    def test_empty_csv_has_header(self, planner, tmp_path) -> None:
        output = tmp_path / "passes.csv"
        planner.export_passes([], output, format="csv")

        assert output.read_text().strip().split(",")[0] == "start_time"

    def test_unknown_extension_defaults_to_json(self, planner, sample_passes, tmp_path) -> None:
        output = tmp_path / "passes.txt"
        planner.export_passes(sample_passes, output)
        assert "metadata" in json.loads(output.read_text())

    def test_unsupported_format(self, planner, sample_passes, tmp_path) -> None:
        with pytest.raises(ValueError, match="Unsupported format"):
            planner.export_passes(sample_passes, tmp_path / "x.xml", format="xml")

    def test_dataframe_from_passes(self, sample_passes) -> None:
        df = passes_to_dataframe(sample_passes)
        assert df["score"].tolist() == [40, 80, 95]


class TestCalendarAndShare:
    def test_create_ics(self) -> None:
        ics = create_ics(make_pass(0, 80, elevation=67.4), "London")
        lines = ics.split("\n")

        assert lines[0] == "BEGIN:VCALENDAR"
        assert lines[-1] == "END:VCALENDAR"
        assert "DTSTART:20240301T193000Z" in lines
        assert "DTEND:20240301T193600Z" in lines
        assert "SUMMARY:ISS pass over London" in lines
        assert any(line.startswith("DESCRIPTION:Peak elevation 67°") for line in lines)

    def test_create_ics_satellite_name(self) -> None:
        ics = create_ics(make_pass(0, 80), "Paris", satellite_name="TIANGONG")
        assert "SUMMARY:TIANGONG pass over Paris" in ics

    def test_share_url(self) -> None:
        observer = Observer(51.50741, -0.12781)
        url = build_share_url("https://example.org/", observer, make_pass(0, 80))

        assert url == "https://example.org/?lat=51.5074&lon=-0.1278&pass=2024-03-01T19:30:00Z"

    def test_share_url_round_trip(self) -> None:
        observer = Observer(-33.8688, 151.2093)
        p = make_pass(0, 80)

        parsed_observer, pass_start = parse_share_url(build_share_url("https://x.test/", observer, p))

        assert parsed_observer == Observer(-33.8688, 151.2093)
        assert pass_start == p.start_time

    def test_share_url_without_location(self) -> None:
        with pytest.raises(ValueError):
            parse_share_url("https://example.org/?pass=2024-03-01T19:30:00Z")
