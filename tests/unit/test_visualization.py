"""
Tests for the visualization module.

Tests Visualizer class with mocked matplotlib/cartopy axes.
"""

from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest

pytest.importorskip("cartopy")

from pass_planner.ground_track import GroundTrackPoint  # noqa: E402
from pass_planner.observer import Observer  # noqa: E402
from pass_planner.visibility import Pass  # noqa: E402
from pass_planner.visualization import Visualizer  # noqa: E402

T0 = datetime(2021, 10, 2, 12, 0, 0)


def track(longitudes):
    return [
        GroundTrackPoint(10.0 + i, lon, T0 + timedelta(minutes=i))
        for i, lon in enumerate(longitudes)
    ]


@pytest.fixture
def viz() -> Visualizer:
    visualizer = Visualizer()
    visualizer.fig = MagicMock()
    visualizer.ax = MagicMock()
    return visualizer


class TestVisualizerInit:
    """Tests for Visualizer initialization."""

    def test_default_figsize(self) -> None:
        assert Visualizer().figsize == (15, 10)

    def test_initial_state(self) -> None:
        viz = Visualizer(figsize=(8, 6))
        assert viz.figsize == (8, 6)
        assert viz.fig is None
        assert viz.ax is None


class TestPlotGroundTrack:
    def test_single_segment(self, viz) -> None:
        assert viz.plot_ground_track(track([10.0, 14.0, 18.0])) == 1

    def test_split_at_antimeridian(self, viz) -> None:
        count = viz.plot_ground_track(track([170.0, 176.0, -178.0, -172.0]), label="ISS")

        assert count == 2
        # Two segment lines plus the current-position marker
        assert viz.ax.plot.call_count == 3
        first_line = viz.ax.plot.call_args_list[0]
        assert first_line[0][0] == [170.0, 176.0]
        assert first_line[1]["label"] == "ISS"
        assert viz.ax.plot.call_args_list[1][1]["label"] is None

    def test_empty_track(self, viz) -> None:
        assert viz.plot_ground_track([]) == 0
        viz.ax.plot.assert_not_called()


class TestMarkers:
    def test_plot_observer(self, viz) -> None:
        viz.plot_observer(Observer(51.5, -0.1, name="London"))

        args, kwargs = viz.ax.plot.call_args
        assert args == (-0.1, 51.5)
        assert kwargs["label"] == "London"

    def test_plot_sun_subpoint(self, viz) -> None:
        viz.plot_sun_subpoint(T0)

        args, kwargs = viz.ax.plot.call_args
        lon, lat = args
        assert -180 <= lon <= 180
        assert -23.5 <= lat <= 23.5
        assert kwargs["label"] == "Sub-solar point"


class TestPassTimeline:
    @patch("pass_planner.visualization.plt.setp")
    @patch("pass_planner.visualization.plt.subplots")
    def test_bar_colours(self, mock_subplots, mock_setp) -> None:
        fig, ax = MagicMock(), MagicMock()
        mock_subplots.return_value = (fig, ax)
        passes = [
            Pass(T0, T0 + timedelta(minutes=5), 200.0, 80.0, T0 + timedelta(minutes=2), 140.0,
                 60.0, True, (), 300.0, 70, "Bright", -10.0),
            Pass(T0 + timedelta(hours=2), T0 + timedelta(hours=2, minutes=4), 220.0, 60.0,
                 T0 + timedelta(hours=2, minutes=2), 150.0, 20.0, False, (), 240.0, 0,
                 "Not visible", 5.0),
        ]

        Visualizer().create_pass_timeline(passes)

        colors = [c[1]["color"] for c in ax.bar.call_args_list]
        assert colors == ["gold", "steelblue"]
        ax.set_ylim.assert_called_once_with(0, 90)


class TestSaveAndClear:
    def test_save_without_figure(self, tmp_path) -> None:
        viz = Visualizer()
        viz.save(tmp_path / "map.png")
        assert not (tmp_path / "map.png").exists()

    def test_save(self, viz, tmp_path) -> None:
        viz.save(tmp_path / "map.png", dpi=72)
        viz.fig.savefig.assert_called_once()
        assert viz.fig.savefig.call_args[1]["dpi"] == 72

    @patch("pass_planner.visualization.plt.close")
    def test_clear(self, mock_close, viz) -> None:
        fig = viz.fig
        viz.clear()

        mock_close.assert_called_once_with(fig)
        assert viz.fig is None
        assert viz.ax is None

    def test_title_without_plot(self) -> None:
        Visualizer().add_title_and_legend("Nothing")
