"""
Command-line interface for the satellite pass planner.

This module provides a CLI for predicting and ranking visible satellite
passes from the command line.
"""

from functools import wraps
from pathlib import Path
from typing import Callable, Optional
import json
import logging
import sys

import click

from .config import DEFAULT_SCAN_CONFIG, ScanConfig, create_scan_config, load_scan_config
from .ground_track import segment_ground_track
from .observer import Observer
from .orbit import SatelliteOrbit
from .planner import PassPlanner, build_share_url, create_ics, passes_to_dataframe
from .quality_scoring import select_top_picks
from .visibility import Pass, describe_visibility, find_next_pass
from .utils import (
    setup_logging, parse_datetime, download_tle_file,
    get_common_tle_sources, create_sample_tle_file,
    get_current_utc, format_azimuth, format_coordinates, format_duration,
    format_altitude, format_speed,
)

logger = logging.getLogger(__name__)

DEFAULT_SATELLITE = "ISS"


def pass_options(func: Callable) -> Callable:
    """Options shared by every command that scans for passes."""
    options = [
        click.option('--tle', required=True, type=click.Path(exists=True),
                     help='Path to TLE file'),
        click.option('--satellite', default=DEFAULT_SATELLITE, show_default=True,
                     help='Satellite name (must match name in TLE file)'),
        click.option('--lat', required=True, type=float, help='Observer latitude in degrees'),
        click.option('--lon', required=True, type=float, help='Observer longitude in degrees'),
        click.option('--name', 'location_name', default='', help='Observer location name'),
        click.option('--start-time', type=str,
                     help='Start time (YYYY-MM-DD HH:MM:SS UTC, default: now)'),
        click.option('--hours', type=float, help='Scan window in hours (default: 72)'),
        click.option('--step', type=float, help='Sampling step in seconds (default: 20)'),
        click.option('--preset', type=click.Choice(['standard', 'quick', 'fine']),
                     help='Named scan resolution'),
        click.option('--config', 'config_file', type=click.Path(exists=True),
                     help='YAML scan configuration file'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_config(
    hours: Optional[float],
    step: Optional[float],
    preset: Optional[str],
    config_file: Optional[str],
) -> ScanConfig:
    """Config file, then preset, then explicit flags."""
    if config_file:
        config = load_scan_config(config_file)
    elif preset:
        config = create_scan_config(preset)
    else:
        config = DEFAULT_SCAN_CONFIG

    overrides = config.to_dict()
    if hours is not None:
        overrides["window_hours"] = hours
    if step is not None:
        overrides["step_seconds"] = step
    return ScanConfig.from_dict(overrides)


def _planner_from_options(
    tle: str,
    satellite: str,
    lat: float,
    lon: float,
    location_name: str,
    hours: Optional[float],
    step: Optional[float],
    preset: Optional[str],
    config_file: Optional[str],
) -> PassPlanner:
    sat = SatelliteOrbit.from_tle_file(tle, satellite)
    observer = Observer(lat, lon, name=location_name)
    config = _build_config(hours, step, preset, config_file)
    return PassPlanner(sat, observer, config)


def command_errors(description: str) -> Callable:
    """Report any failure of a command on stderr and exit with status 1."""
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.error(f"{description} failed: {e}")
                click.echo(f"Error: {e}", err=True)
                sys.exit(1)
        return wrapper
    return decorator


def _echo_pass_table(passes) -> None:
    click.echo(f"{'Start (UTC)':<17} {'Dur':>7} {'Peak':>5} {'Rise':>10} {'Set':>10} "
               f"{'Score':>5}  {'Brightness':<11} Visibility")
    for p in passes:
        click.echo(
            f"{p.start_time.strftime('%Y-%m-%d %H:%M'):<17} "
            f"{format_duration(p.duration_s):>7} "
            f"{p.max_elevation:>4.0f}° "
            f"{format_azimuth(p.start_azimuth):>10} "
            f"{format_azimuth(p.end_azimuth):>10} "
            f"{p.score:>5}  {p.brightness:<11} {describe_visibility(p)}"
        )


def _echo_pass_details(pass_: Pass) -> None:
    click.echo(f"Start:    {pass_.start_time.strftime('%Y-%m-%d %H:%M:%S')} UTC "
               f"({format_azimuth(pass_.start_azimuth)})")
    click.echo(f"Peak:     {pass_.peak_time.strftime('%Y-%m-%d %H:%M:%S')} UTC "
               f"({pass_.max_elevation:.1f}°, {format_azimuth(pass_.peak_azimuth)})")
    click.echo(f"End:      {pass_.end_time.strftime('%Y-%m-%d %H:%M:%S')} UTC "
               f"({format_azimuth(pass_.end_azimuth)})")
    click.echo(f"Duration: {format_duration(pass_.duration_s)}")
    click.echo(f"Score:    {pass_.score} ({pass_.brightness})")
    click.echo(f"Visibility: {describe_visibility(pass_)}")


@click.group()
@click.option('--log-level', default='INFO',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Set logging level')
@click.option('--log-file', type=click.Path(), help='Log file path')
def main(log_level: str, log_file: Optional[str]) -> None:
    """Satellite Pass Planner - Predict and rank visible satellite passes."""
    setup_logging(log_level, log_file)
    logger.info("Starting Satellite Pass Planner CLI")


@main.command()
@pass_options
@click.option('--visible-only', is_flag=True, help='Only list naked-eye visible passes')
@click.option('--format', 'output_format', default='table',
              type=click.Choice(['table', 'json', 'csv']),
              help='Output format')
@click.option('--output', type=click.Path(), help='Write passes to this file')
@command_errors("Pass prediction")
def passes(
    tle: str,
    satellite: str,
    lat: float,
    lon: float,
    location_name: str,
    start_time: Optional[str],
    hours: Optional[float],
    step: Optional[float],
    preset: Optional[str],
    config_file: Optional[str],
    visible_only: bool,
    output_format: str,
    output: Optional[str],
) -> None:
    """List passes over an observer with score and visibility.

    Example:
    passes --tle stations.tle --lat 51.5074 --lon -0.1278 --visible-only
    """
    planner = _planner_from_options(
        tle, satellite, lat, lon, location_name, hours, step, preset, config_file
    )
    start_dt = parse_datetime(start_time) if start_time else get_current_utc()

    results = planner.compute_passes(start_dt)
    if visible_only:
        results = [p for p in results if p.visible]

    if output:
        export_format = output_format if output_format != 'table' else 'auto'
        planner.export_passes(results, output, export_format)
        click.echo(f"Exported {len(results)} passes to: {output}")
        return

    if output_format == 'json':
        click.echo(json.dumps([p.to_dict() for p in results], indent=2))
        return
    if output_format == 'csv':
        click.echo(passes_to_dataframe(results).to_csv(index=False), nl=False)
        return

    click.echo(f"\n{planner.satellite.satellite_name} passes over "
               f"{planner.observer.display_name} "
               f"({format_coordinates(lat, lon)})")
    if not results:
        click.echo("No passes found")
        return
    _echo_pass_table(results)


@main.command()
@pass_options
@command_errors("Next pass calculation")
def next_pass(
    tle: str,
    satellite: str,
    lat: float,
    lon: float,
    location_name: str,
    start_time: Optional[str],
    hours: Optional[float],
    step: Optional[float],
    preset: Optional[str],
    config_file: Optional[str],
) -> None:
    """Find the next satellite pass over an observer."""
    planner = _planner_from_options(
        tle, satellite, lat, lon, location_name, hours, step, preset, config_file
    )
    start_dt = parse_datetime(start_time) if start_time else get_current_utc()

    results = planner.compute_passes(start_dt)
    upcoming = find_next_pass(results, start_dt)
    summary = planner.get_summary(results, now=start_dt)

    click.echo(f"Status: {summary['status']}")
    if upcoming is None:
        click.echo(f"No passes found for {planner.satellite.satellite_name} over "
                   f"{planner.observer.display_name} in the next "
                   f"{planner.config.window_hours:g} hours")
        return

    click.echo(f"\nNext pass of {planner.satellite.satellite_name} over "
               f"{planner.observer.display_name}:")
    _echo_pass_details(upcoming)


@main.command()
@pass_options
@click.option('--limit', default=3, type=int, show_default=True,
              help='Number of passes to show')
@command_errors("Top picks")
def top_picks(
    tle: str,
    satellite: str,
    lat: float,
    lon: float,
    location_name: str,
    start_time: Optional[str],
    hours: Optional[float],
    step: Optional[float],
    preset: Optional[str],
    config_file: Optional[str],
    limit: int,
) -> None:
    """Show the best visible passes, highest score first."""
    planner = _planner_from_options(
        tle, satellite, lat, lon, location_name, hours, step, preset, config_file
    )
    start_dt = parse_datetime(start_time) if start_time else get_current_utc()

    picks = select_top_picks(planner.compute_passes(start_dt), limit)
    if not picks:
        click.echo("No visible passes in the scan window")
        return

    for rank, p in enumerate(picks, 1):
        click.echo(f"{rank}. Score {p.score}  {p.start_time.strftime('%Y-%m-%d %H:%M')} UTC  "
                   f"Peak {p.max_elevation:.0f}°  {format_duration(p.duration_s)}  "
                   f"{p.brightness}")


@main.command()
@click.option('--tle', required=True, type=click.Path(exists=True),
              help='Path to TLE file')
@click.option('--satellite', default=DEFAULT_SATELLITE, show_default=True,
              help='Satellite name (must match name in TLE file)')
@click.option('--start-time', type=str,
              help='Start time (YYYY-MM-DD HH:MM:SS UTC, default: now)')
@click.option('--minutes', default=90.0, type=float, show_default=True,
              help='Track length in minutes')
@click.option('--step', default=60.0, type=float, show_default=True,
              help='Seconds between track points')
@click.option('--units', default='metric', type=click.Choice(['metric', 'imperial']),
              help='Units for altitude and speed')
@click.option('--output', type=click.Path(),
              help='Save a world map image instead of printing segments')
@click.option('--lat', type=float, help='Observer latitude to mark on the map')
@click.option('--lon', type=float, help='Observer longitude to mark on the map')
@command_errors("Ground track")
def ground_track(
    tle: str,
    satellite: str,
    start_time: Optional[str],
    minutes: float,
    step: float,
    units: str,
    output: Optional[str],
    lat: Optional[float],
    lon: Optional[float],
) -> None:
    """Print or plot the ground track split at the antimeridian."""
    start_dt = parse_datetime(start_time) if start_time else get_current_utc()
    sat = SatelliteOrbit.from_tle_file(tle, satellite)
    track = sat.get_ground_track(start_dt, minutes, step)

    state = sat.get_state(start_dt)
    if state is not None:
        click.echo(f"{sat.satellite_name} at {format_coordinates(state.latitude, state.longitude)}, "
                   f"altitude {format_altitude(state.altitude_km, units)}, "
                   f"speed {format_speed(state.speed_km_s, units)}")

    if output:
        from .visualization import Visualizer

        visualizer = Visualizer()
        visualizer.create_world_map()
        visualizer.plot_ground_track(track, label=f"{sat.satellite_name} Ground Track")
        visualizer.plot_sun_subpoint(start_dt)
        if lat is not None and lon is not None:
            visualizer.plot_observer(Observer(lat, lon))
        visualizer.add_title_and_legend(
            f"{sat.satellite_name} {start_dt.strftime('%Y-%m-%d %H:%M')} UTC"
        )
        visualizer.save(output)
        visualizer.clear()
        click.echo(f"Ground track map saved to: {output}")
        return

    segments = segment_ground_track(track)
    click.echo(json.dumps(
        [[[round(p_lat, 4), round(p_lon, 4)] for p_lat, p_lon in segment] for segment in segments]
    ))


@main.command()
@pass_options
@click.option('--index', default=1, type=int, show_default=True,
              help='Which upcoming visible pass (1 = next)')
@click.option('--output', type=click.Path(), help='ICS output file (default: stdout)')
@click.option('--share-base-url', type=str,
              help='Also print a share link rooted at this URL')
@command_errors("Calendar export")
def calendar(
    tle: str,
    satellite: str,
    lat: float,
    lon: float,
    location_name: str,
    start_time: Optional[str],
    hours: Optional[float],
    step: Optional[float],
    preset: Optional[str],
    config_file: Optional[str],
    index: int,
    output: Optional[str],
    share_base_url: Optional[str],
) -> None:
    """Write a calendar event for an upcoming visible pass."""
    planner = _planner_from_options(
        tle, satellite, lat, lon, location_name, hours, step, preset, config_file
    )
    start_dt = parse_datetime(start_time) if start_time else get_current_utc()

    visible = [p for p in planner.compute_passes(start_dt) if p.visible]
    if index < 1 or index > len(visible):
        raise ValueError(f"No visible pass #{index} ({len(visible)} found)")

    chosen = visible[index - 1]
    ics = create_ics(chosen, planner.observer.display_name, planner.satellite.satellite_name)

    if output:
        Path(output).write_text(ics + "\n")
        click.echo(f"Calendar event saved to: {output}")
    else:
        click.echo(ics)

    if share_base_url:
        click.echo(build_share_url(share_base_url, planner.observer, chosen))


@main.command()
@click.option('--source', default='iss',
              help='TLE source (use "list-sources" to see available)')
@click.option('--output', required=True, type=click.Path(),
              help='Output TLE file path')
@click.option('--url', type=str,
              help='Custom URL for TLE data')
@command_errors("TLE download")
def download_tle(source: str, output: str, url: Optional[str]) -> None:
    """Download TLE data from online sources."""
    if url:
        download_url = url
    else:
        sources = get_common_tle_sources()
        if source not in sources:
            click.echo(f"Unknown source: {source}")
            click.echo("Available sources:")
            for name in sources.keys():
                click.echo(f"  {name}")
            sys.exit(1)
        download_url = sources[source]

    click.echo(f"Downloading TLE data from {download_url}")

    if download_tle_file(download_url, output):
        click.echo(f"TLE data saved to: {output}")
    else:
        click.echo("Download failed", err=True)
        sys.exit(1)


@main.command()
def list_sources() -> None:
    """List available TLE data sources."""
    sources = get_common_tle_sources()

    click.echo("Available TLE sources:")
    for name, url in sources.items():
        click.echo(f"  {name:<20} {url}")


@main.command()
@click.option('--output', required=True, type=click.Path(),
              help='Output TLE file path')
@command_errors("Sample TLE creation")
def create_sample_tle(output: str) -> None:
    """Create a sample TLE file with bright satellites."""
    create_sample_tle_file(output)
    click.echo(f"Sample TLE file created: {output}")
    click.echo("Contains: ISS, NOAA 18, TERRA")


if __name__ == '__main__':
    main()
