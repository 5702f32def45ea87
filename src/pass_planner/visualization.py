"""
Cartopy-based visualization module for satellite passes.

This module draws 2D world maps with the satellite ground track, the
observer location and the sub-solar point, and a timeline chart of the
predicted passes.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import cartopy.crs as ccrs
import cartopy.feature as cfeature
import matplotlib.dates as mdates
import matplotlib.pyplot as plt
from cartopy.mpl.ticker import LatitudeFormatter, LongitudeFormatter

from .ground_track import GroundTrackPoint, segment_ground_track
from .observer import Observer
from .sunlight import get_sun_subpoint
from .visibility import Pass

logger = logging.getLogger(__name__)

VISIBLE_COLOR = "gold"
NOT_VISIBLE_COLOR = "steelblue"


class Visualizer:
    """
    Creates satellite pass visualizations using Cartopy.

    One figure is held at a time; ``clear`` releases it.
    """

    def __init__(self, figsize: Tuple[float, float] = (15, 10)) -> None:
        """
        Initialize the visualizer.

        Args:
            figsize: Figure size as (width, height) in inches
        """
        self.figsize = figsize
        self.fig = None
        self.ax = None
        self._setup_plot_style()
        logger.info("Initialized Visualizer")

    def _setup_plot_style(self) -> None:
        """Set up matplotlib style for clean plots."""
        plt.style.use("default")
        plt.rcParams.update(
            {
                "font.size": 10,
                "axes.titlesize": 14,
                "axes.labelsize": 12,
                "legend.fontsize": 10,
            }
        )

    def create_world_map(
        self, projection: ccrs.Projection = None, extent: Optional[List[float]] = None
    ) -> Tuple[plt.Figure, plt.Axes]:
        """
        Create a world map with Cartopy.

        Args:
            projection: Cartopy projection (default: PlateCarree)
            extent: Map extent as [lon_min, lon_max, lat_min, lat_max]

        Returns:
            Tuple of (figure, axes)
        """
        if projection is None:
            projection = ccrs.PlateCarree()

        self.fig, self.ax = plt.subplots(
            figsize=self.figsize, subplot_kw={"projection": projection}
        )

        if extent:
            self.ax.set_extent(extent, crs=ccrs.PlateCarree())
        else:
            self.ax.set_global()

        self.ax.add_feature(cfeature.COASTLINE, linewidth=0.8, color="black")
        self.ax.add_feature(cfeature.BORDERS, linewidth=0.5, color="gray")
        self.ax.add_feature(cfeature.OCEAN, color="lightblue", alpha=0.5)
        self.ax.add_feature(cfeature.LAND, color="lightgray", alpha=0.5)

        gl = self.ax.gridlines(
            crs=ccrs.PlateCarree(),
            draw_labels=True,
            linewidth=0.5,
            color="gray",
            alpha=0.7,
            linestyle="--",
        )
        gl.top_labels = False
        gl.right_labels = False
        gl.xformatter = LongitudeFormatter()
        gl.yformatter = LatitudeFormatter()

        return self.fig, self.ax

    def plot_ground_track(
        self,
        ground_track: Sequence[GroundTrackPoint],
        color: str = "red",
        linewidth: float = 2.0,
        alpha: float = 0.8,
        label: Optional[str] = None,
    ) -> int:
        """
        Plot a ground track, one line per antimeridian segment.

        Args:
            ground_track: Points in time order
            color: Line color
            linewidth: Line width
            alpha: Line transparency
            label: Legend label

        Returns:
            Number of segments drawn
        """
        if self.ax is None:
            self.create_world_map()

        if not ground_track:
            logger.warning("No ground track data available")
            return 0

        segments = [s for s in segment_ground_track(ground_track) if s]
        for i, segment in enumerate(segments):
            lats = [lat for lat, _ in segment]
            lons = [lon for _, lon in segment]
            self.ax.plot(
                lons,
                lats,
                color=color,
                linewidth=linewidth,
                alpha=alpha,
                label=(label or "Ground Track") if i == 0 else None,
                transform=ccrs.PlateCarree(),
            )

        current = ground_track[0]
        self.ax.plot(
            current.longitude,
            current.latitude,
            "r^",
            markersize=10,
            label="Satellite",
            transform=ccrs.PlateCarree(),
        )

        logger.info(f"Plotted ground track with {len(ground_track)} points "
                    f"in {len(segments)} segments")
        return len(segments)

    def plot_observer(
        self,
        observer: Observer,
        marker: str = "o",
        color: str = "blue",
        markersize: float = 8,
    ) -> None:
        """Mark the observer location on the map."""
        if self.ax is None:
            self.create_world_map()

        self.ax.plot(
            observer.longitude,
            observer.latitude,
            marker=marker,
            color=color,
            markersize=markersize,
            transform=ccrs.PlateCarree(),
            label=observer.display_name,
        )

    def plot_sun_subpoint(self, timestamp: datetime) -> None:
        """Mark the point on Earth with the Sun overhead."""
        if self.ax is None:
            self.create_world_map()

        lat, lon = get_sun_subpoint(timestamp)
        self.ax.plot(
            lon,
            lat,
            marker="*",
            color="orange",
            markersize=14,
            transform=ccrs.PlateCarree(),
            label="Sub-solar point",
        )
        logger.debug(f"Sub-solar point at {timestamp}: {lat:.2f}, {lon:.2f}")

    def create_pass_timeline(
        self, passes: Sequence[Pass], title: str = "Satellite Passes"
    ) -> Tuple[plt.Figure, plt.Axes]:
        """
        Bar chart of passes over time, labelled with peak elevation.

        Visible passes are drawn in gold, the rest in blue.
        """
        self.fig, self.ax = plt.subplots(figsize=(self.figsize[0], 4))

        for pass_ in passes:
            start_num = mdates.date2num(pass_.start_time)
            width = mdates.date2num(pass_.end_time) - start_num
            color = VISIBLE_COLOR if pass_.visible else NOT_VISIBLE_COLOR

            self.ax.bar(
                start_num,
                pass_.max_elevation,
                width=width,
                align="edge",
                color=color,
                alpha=0.8,
                edgecolor="black",
                linewidth=0.5,
            )
            self.ax.text(
                start_num + width / 2,
                pass_.max_elevation + 1,
                f"{pass_.max_elevation:.0f}°",
                ha="center",
                va="bottom",
                fontsize=8,
            )

        self.ax.set_ylim(0, 90)
        self.ax.set_ylabel("Max elevation (°)")
        self.ax.set_xlabel("Time (UTC)")
        self.ax.set_title(title)
        self.ax.xaxis_date()
        self.ax.xaxis.set_major_formatter(mdates.DateFormatter("%m/%d %H:%M"))
        plt.setp(self.ax.xaxis.get_majorticklabels(), rotation=45)
        self.ax.grid(True, alpha=0.3)

        logger.info(f"Created pass timeline with {len(passes)} passes")
        return self.fig, self.ax

    def add_title_and_legend(
        self, title: str, show_legend: bool = True, legend_location: str = "upper right"
    ) -> None:
        """
        Add title and legend to the plot.

        Args:
            title: Plot title
            show_legend: Whether to show legend
            legend_location: Legend location
        """
        if self.ax is None:
            logger.warning("No plot created yet")
            return

        self.ax.set_title(title, fontsize=16, fontweight="bold", pad=20)

        if show_legend:
            self.ax.legend(loc=legend_location, frameon=True)

    def save(
        self,
        filename: Union[str, Path],
        dpi: int = 150,
        bbox_inches: str = "tight",
    ) -> None:
        """
        Save the current figure to file.

        Args:
            filename: Output filename
            dpi: Resolution in dots per inch
            bbox_inches: Bounding box setting
        """
        if self.fig is None:
            logger.error("No figure to save")
            return

        try:
            self.fig.savefig(filename, dpi=dpi, bbox_inches=bbox_inches, facecolor="white")
            logger.info(f"Saved figure to {filename}")
        except Exception as e:
            logger.error(f"Error saving figure: {e}")
            raise

    def clear(self) -> None:
        """Clear the current plot."""
        if self.fig is not None:
            plt.close(self.fig)
            self.fig = None
            self.ax = None
