#!/usr/bin/env python3
"""
Basic Pass Planning Example

This example walks through the core workflow of the pass planner:
TLE → propagation → pass scan → scoring → export and visualization.
"""

import sys
from pathlib import Path
from datetime import datetime

# Add the src directory to the path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pass_planner import (
    Observer, PassPlanner, SatelliteOrbit, create_scan_config,
    describe_visibility, format_azimuth, select_top_picks,
)
from pass_planner.planner import build_share_url, create_ics
from pass_planner.utils import setup_logging, create_sample_tle_file, format_duration


def main():
    """Run basic pass planning example."""

    setup_logging("INFO")

    print("=== Satellite Pass Planner - Basic Example ===\n")

    # Step 1: Create sample TLE file
    print("Step 1: Creating sample TLE data...")
    tle_file = Path(__file__).parent.parent / "data" / "sample_satellites.tle"
    tle_file.parent.mkdir(exist_ok=True)
    create_sample_tle_file(tle_file)
    print(f"✓ Sample TLE file created: {tle_file}\n")

    # Step 2: Load satellite orbit
    print("Step 2: Loading satellite orbit...")
    satellite = SatelliteOrbit.from_tle_file(tle_file, "ISS (ZARYA)")
    print(f"✓ Loaded satellite: {satellite}\n")

    # Step 3: Define the observer
    observer = Observer(latitude=48.8566, longitude=2.3522, name="Paris")
    print(f"Step 3: Observer at {observer}\n")

    # Step 4: Scan for passes, starting close to the element set epoch
    print("Step 4: Computing passes over the next 3 days...")
    planner = PassPlanner(satellite, observer, create_scan_config("standard"))
    start_time = datetime(2024, 1, 1, 0, 0, 0)
    passes = planner.compute_passes(start_time)
    print(f"✓ Found {len(passes)} passes, {sum(1 for p in passes if p.visible)} visible\n")

    print("Pass Details:")
    print("-" * 80)
    for i, p in enumerate(passes, 1):
        print(f"  Pass {i}: {p.start_time.strftime('%m/%d %H:%M')} UTC "
              f"from {format_azimuth(p.start_azimuth)} to {format_azimuth(p.end_azimuth)}, "
              f"peak {p.max_elevation:.0f}°, {format_duration(p.duration_s)}, "
              f"score {p.score} - {describe_visibility(p)}")

    # Step 5: Summary and top picks
    print("\n" + "=" * 80)
    summary = planner.get_summary(passes, now=start_time)
    print("Summary:")
    print(f"  • Satellite: {summary['satellite_name']}")
    print(f"  • Status at start: {summary['status']}")
    print(f"  • Highest elevation: {summary['highest_elevation']}°")
    print(f"  • Total pass time: {summary['total_pass_time_minutes']} minutes")

    picks = select_top_picks(passes)
    for rank, p in enumerate(picks, 1):
        print(f"  {rank}. {p.peak_time.strftime('%m/%d %H:%M')} UTC "
              f"score {p.score} ({p.brightness})")

    # Step 6: Export
    print("\nStep 6: Exporting results...")
    output_dir = Path(__file__).parent.parent / "output"
    output_dir.mkdir(exist_ok=True)

    planner.export_passes(passes, output_dir / "passes.json")
    planner.export_passes(passes, output_dir / "passes.csv")
    if picks:
        (output_dir / "best_pass.ics").write_text(
            create_ics(picks[0], observer.display_name, satellite.satellite_name) + "\n"
        )
        print(f"  • Share link: {build_share_url('https://example.org/passes', observer, picks[0])}")

    # Step 7: Visualization
    print("\nStep 7: Creating visualizations...")
    from pass_planner.visualization import Visualizer

    visualizer = Visualizer()
    visualizer.create_world_map()
    visualizer.plot_ground_track(satellite.get_ground_track(start_time, minutes=95, step_seconds=30),
                                 label="ISS Ground Track")
    visualizer.plot_observer(observer)
    visualizer.plot_sun_subpoint(start_time)
    visualizer.add_title_and_legend("ISS ground track")
    visualizer.save(output_dir / "ground_track.png")
    visualizer.clear()

    visualizer.create_pass_timeline(passes, title="ISS passes over Paris")
    visualizer.save(output_dir / "pass_timeline.png")
    visualizer.clear()

    print(f"✓ Results saved to: {output_dir}")
    print("\n=== Example Complete ===")


if __name__ == "__main__":
    main()
